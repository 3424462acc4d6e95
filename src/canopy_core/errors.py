from __future__ import annotations


class TreeError(Exception):
    """Base class for failures raised by the tree core."""


class EmptyInput(TreeError, ValueError):
    """A tree was requested over zero items."""


class DigestError(TreeError):
    """An item could not produce a usable digest."""


class EqualityError(TreeError, TypeError):
    """Two items could not be compared (incompatible kinds)."""


class ProofError(TreeError, ValueError):
    """An exported inclusion proof is malformed."""
