from __future__ import annotations
import datetime

from .crypto import B64, ed25519_sign, jcs_dumps
from .merkle import MerkleTree
from .models import TreeHead


def _now_iso() -> str:
    return datetime.datetime.now(datetime.timezone.utc).isoformat()


def head_signing_bytes(head: TreeHead) -> bytes:
    """Canonical bytes covered by a head's signature (everything but the signature)."""
    return jcs_dumps(head.model_dump(exclude={"signature_b64"}))


def make_tree_head(tree: MerkleTree, signer_sk_bytes: bytes, signer_pk_bytes: bytes) -> TreeHead:
    head = TreeHead(
        tree_size=tree.size,
        merkle_root_b64=B64(tree.merkle_root),
        hash_alg=tree.algorithm,
        ts=_now_iso(),
        signer_pubkey_b64=B64(signer_pk_bytes),
    )
    sig = ed25519_sign(signer_sk_bytes, head_signing_bytes(head))
    return head.model_copy(update={"signature_b64": B64(sig)})
