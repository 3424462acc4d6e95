"""Inclusion proof fuzzing with mutated authentication paths."""
from __future__ import annotations
import atheris
import sys
import random

with atheris.instrument_imports():
    from canopy_core.content import BytesContent
    from canopy_core.crypto import B64D
    from canopy_core.merkle import build, verify_inclusion


def TestOneInput(data: bytes):  # noqa: N802
    if len(data) < 8:
        return
    seed = int.from_bytes(data[:4], "little")
    rng = random.Random(seed)
    chunk_len = 1 + (data[4] % 32)
    body = data[5:]
    raw = [body[i : i + chunk_len] for i in range(0, min(len(body), chunk_len * 16), chunk_len)]
    items = [BytesContent(x) for x in raw if x]
    if len(items) < 3:
        return
    tree = build(items)
    target = items[seed % len(items)]
    proof = tree.inclusion_proof(BytesContent(target.data))
    if proof is None:
        raise RuntimeError("stored item has no proof")
    leaf = B64D(proof.leaf_digest_b64)
    path = [(B64D(s.sibling_b64), s.side) for s in proof.path]
    # With some probability, flip a bit in one sibling to exercise the negative path
    if rng.random() < 0.2:
        k = rng.randrange(len(path))
        sib, side = path[k]
        path[k] = (bytes([sib[0] ^ 0x01]) + sib[1:], side)
        if verify_inclusion(leaf, path, tree.merkle_root):
            raise RuntimeError("tampered proof unexpectedly verified")
    elif not verify_inclusion(leaf, path, tree.merkle_root):
        raise RuntimeError("valid proof failed")


def main():
    atheris.Setup(sys.argv, TestOneInput, enable_python_coverage=True)
    atheris.Fuzz()


if __name__ == "__main__":
    main()
