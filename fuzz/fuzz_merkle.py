"""Fuzz harness for tree construction, full verification and content lookup."""
from __future__ import annotations
import atheris
import sys

with atheris.instrument_imports():
    from canopy_core.content import BytesContent
    from canopy_core.merkle import build


def TestOneInput(data: bytes):  # noqa: N802
    if not data:
        return
    # Split data deterministically into items (bounded count)
    size = max(1, min(32, data[0]))
    chunks = [data[i : i + size] for i in range(1, min(len(data), 1 + size * 32), size)]
    items = [BytesContent(c) for c in chunks if c]
    if not items:
        return
    tree = build(items)
    if len(tree.leaves) % 2:
        raise RuntimeError("odd leaf level")
    if not tree.verify_tree():
        raise RuntimeError("fresh tree failed verification")
    target = items[data[-1] % len(items)]
    if not tree.verify_content(BytesContent(target.data)):
        raise RuntimeError("stored item not found")
    bigger = tree.insert(BytesContent(data))
    if bigger.merkle_root != build(items + [BytesContent(data)]).merkle_root:
        raise RuntimeError("insert differs from rebuild")


def main():
    atheris.Setup(sys.argv, TestOneInput, enable_python_coverage=True)
    atheris.Fuzz()


if __name__ == "__main__":
    main()
