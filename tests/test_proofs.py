import json

import pytest

from canopy_core.content import TextContent
from canopy_core.crypto import B64, B64D
from canopy_core.errors import ProofError
from canopy_core.heads import make_tree_head
from canopy_core.merkle import build, verify_inclusion, verify_proof
from canopy_core.models import InclusionProof
from canopy_sdk.verify import verify_inclusion as sdk_verify_inclusion
from canopy_sdk.verify import verify_tree_head
from conftest import h, texts


def test_inclusion_proof_every_leaf():
    items = texts("a", "b", "c", "d", "e")
    tree = build(items)
    for i, item in enumerate(items):
        proof = tree.inclusion_proof(TextContent(item.text))
        assert proof.leaf_index == i
        assert proof.tree_size == 5
        assert B64D(proof.leaf_digest_b64) == h(item.text.encode())
        assert B64D(proof.merkle_root_b64) == tree.merkle_root
        assert len(proof.path) == 3
        assert verify_proof(proof)


def test_self_paired_step_uses_own_digest():
    tree = build(texts("a", "b", "c", "d", "e"))
    proof = tree.inclusion_proof(TextContent("e"))
    # e pairs with its duplicate leaf, then the level-1 node pairs with itself
    assert proof.path[0].sibling_b64 == B64(h(b"e"))
    assert proof.path[1].sibling_b64 == B64(h(h(b"e") + h(b"e")))
    assert [s.side for s in proof.path] == ["R", "R", "L"]


def test_absent_target_has_no_proof():
    assert build(texts("a", "b")).inclusion_proof(TextContent("z")) is None


def test_tampered_path_fails():
    tree = build(texts("a", "b", "c"))
    proof = tree.inclusion_proof(TextContent("b"))
    path = [(B64D(s.sibling_b64), s.side) for s in proof.path]
    leaf = B64D(proof.leaf_digest_b64)
    assert verify_inclusion(leaf, path, tree.merkle_root)
    sib, side = path[0]
    path[0] = (bytes([sib[0] ^ 0x01]) + sib[1:], side)
    assert not verify_inclusion(leaf, path, tree.merkle_root)
    assert not verify_inclusion(h(b"x"), [(B64D(s.sibling_b64), s.side) for s in proof.path], tree.merkle_root)


def test_malformed_proofs():
    with pytest.raises(ProofError):
        verify_inclusion(h(b"a"), [(h(b"b"), "up")], h(b"root"))
    proof = build(texts("a", "b")).inclusion_proof(TextContent("a"))
    bad = proof.model_copy(update={"leaf_digest_b64": "not base64!"})
    with pytest.raises(ProofError):
        verify_proof(bad)


def test_proof_json_round_trip():
    tree = build(texts("a", "b", "c"), algorithm="sha512")
    proof = tree.inclusion_proof(TextContent("c"))
    again = InclusionProof.model_validate_json(proof.model_dump_json())
    assert again == proof
    assert again.hash_alg == "sha512"
    assert verify_proof(again)


def _head_json(tree, keypair):
    sk, pk = keypair
    return json.loads(make_tree_head(tree, sk, pk).model_dump_json())


def test_tree_head_signature(keypair):
    tree = build(texts("a", "b", "c"))
    head = _head_json(tree, keypair)
    assert head["tree_size"] == 3
    assert head["hash_alg"] == "sha256"
    assert B64D(head["merkle_root_b64"]) == tree.merkle_root
    assert verify_tree_head(head)

    forged = dict(head, merkle_root_b64=B64(h(b"forged")))
    assert not verify_tree_head(forged)
    assert not verify_tree_head({k: v for k, v in head.items() if k != "signature_b64"})
    assert not verify_tree_head(dict(head, signature_b64="%%%"))


def test_sdk_inclusion_against_head(keypair):
    tree = build(texts("a", "b", "c", "d"))
    head = _head_json(tree, keypair)
    proof = json.loads(tree.inclusion_proof(TextContent("c")).model_dump_json())
    assert sdk_verify_inclusion(proof, head)

    other = build(texts("a", "b", "c", "e"))
    foreign = json.loads(other.inclusion_proof(TextContent("c")).model_dump_json())
    assert not sdk_verify_inclusion(foreign, head)

    broken = dict(proof, leaf_digest_b64=B64(h(b"zzz")))
    assert not sdk_verify_inclusion(broken, head)
    assert not sdk_verify_inclusion({"leaf_index": "x"}, head)
    assert not sdk_verify_inclusion(proof, dict(head, tree_size=99))
