"""Fuzz harness for signed tree head and exported proof verification.

Arbitrary JSON goes straight into the SDK verifiers, which must answer
True/False and never raise. Non-JSON input is turned into a real tree,
head and proof, optionally with one bit of the head signature flipped.
"""
from __future__ import annotations
import atheris
import sys
import json

with atheris.instrument_imports():
    from canopy_core.content import BytesContent
    from canopy_core.crypto import B64, B64D, ed25519_generate
    from canopy_core.heads import make_tree_head
    from canopy_core.merkle import build
    from canopy_sdk.verify import verify_inclusion, verify_tree_head


SK, PK = ed25519_generate()


def _synthesize(data: bytes):
    items = [BytesContent(data[i : i + 8]) for i in range(0, min(len(data), 8 * 16), 8)]
    tree = build(items)
    head = json.loads(make_tree_head(tree, SK, PK).model_dump_json())
    proof = json.loads(tree.inclusion_proof(items[data[-1] % len(items)]).model_dump_json())
    tampered = data[0] % 5 == 0
    if tampered:
        sig = bytearray(B64D(head["signature_b64"]))
        sig[0] ^= 0x01
        head["signature_b64"] = B64(bytes(sig))
    return head, proof, tampered


def TestOneInput(data: bytes):  # noqa: N802
    if not data:
        return
    try:
        obj = json.loads(data.decode("utf-8", errors="ignore"))
    except ValueError:
        obj = None

    if isinstance(obj, dict):
        verify_tree_head(obj)
        verify_inclusion(obj, obj)
        return

    head, proof, tampered = _synthesize(data)
    if verify_tree_head(head) == tampered:
        raise RuntimeError("head signature check disagrees with tampering")
    if verify_inclusion(proof, head) == tampered:
        raise RuntimeError("proof check disagrees with tampering")


def main():
    atheris.Setup(sys.argv, TestOneInput, enable_python_coverage=True)
    atheris.Fuzz()


if __name__ == "__main__":
    main()
