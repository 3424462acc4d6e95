from typing import Any, Dict

from pydantic import ValidationError

from canopy_core.crypto import B64D, ed25519_verify, jcs_dumps
from canopy_core.errors import ProofError
from canopy_core.merkle import verify_proof
from canopy_core.models import InclusionProof


def verify_tree_head(head_json: Dict[str, Any]) -> bool:
    """Return True if the tree head's Ed25519 signature is valid.

    The signature covers the RFC 8785 canonical JSON of every field except
    signature_b64.
    """
    try:
        sig_b64 = head_json["signature_b64"]
        pub_b64 = head_json["signer_pubkey_b64"]
    except KeyError:
        return False
    if not isinstance(sig_b64, str) or not isinstance(pub_b64, str):
        return False
    body = {k: v for k, v in head_json.items() if k != "signature_b64"}
    try:
        return ed25519_verify(B64D(pub_b64), jcs_dumps(body), B64D(sig_b64))
    except ValueError:
        return False


def verify_inclusion(proof_json: Dict[str, Any], head_json: Dict[str, Any]) -> bool:
    """Verify an exported inclusion proof against a signed tree head.

    The head must be validly signed, commit to the same root, size and hash
    algorithm as the proof, and the proof's path must fold to that root.
    """
    if not verify_tree_head(head_json):
        return False
    try:
        proof = InclusionProof.model_validate(proof_json)
    except ValidationError:
        return False
    if proof.merkle_root_b64 != head_json.get("merkle_root_b64"):
        return False
    if proof.tree_size != head_json.get("tree_size"):
        return False
    if proof.hash_alg != head_json.get("hash_alg"):
        return False
    try:
        return verify_proof(proof)
    except ProofError:
        return False
