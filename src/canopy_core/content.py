from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from .crypto import hash_bytes, jcs_dumps
from .errors import EqualityError


@runtime_checkable
class Content(Protocol):
    """Anything that can be stored as a leaf.

    ``digest()`` returns the SHA-256 digest of the item. Trees built with
    another algorithm call ``digest(algorithm)``, so only items that accept
    that argument can be stored in them. Implementations must be
    deterministic: the same item state always yields the same digest.
    ``equals`` is only used to locate proof targets and should raise
    EqualityError for an incompatible kind.
    """

    def digest(self) -> bytes:
        ...

    def equals(self, other: "Content") -> bool:
        ...


def _same_kind(this: Content, other: Any) -> None:
    if not isinstance(other, type(this)):
        raise EqualityError(
            f"cannot compare {type(this).__name__} with {type(other).__name__}"
        )


@dataclass
class TextContent:
    """UTF-8 text item."""

    text: str

    def digest(self, algorithm: str = "sha256") -> bytes:
        return hash_bytes(self.text.encode("utf-8"), algorithm)

    def equals(self, other: Content) -> bool:
        _same_kind(self, other)
        return self.text == other.text  # type: ignore[attr-defined]


@dataclass
class BytesContent:
    data: bytes

    def digest(self, algorithm: str = "sha256") -> bytes:
        return hash_bytes(bytes(self.data), algorithm)

    def equals(self, other: Content) -> bool:
        _same_kind(self, other)
        return bytes(self.data) == bytes(other.data)  # type: ignore[attr-defined]


@dataclass
class FileContent:
    """File body plus the name it was read from.

    Only the body takes part in digest and equality; two files with the same
    bytes are the same item.
    """

    name: str
    data: bytes

    @classmethod
    def from_path(cls, path) -> "FileContent":
        p = Path(path)
        return cls(name=p.name, data=p.read_bytes())

    def digest(self, algorithm: str = "sha256") -> bytes:
        return hash_bytes(self.data, algorithm)

    def equals(self, other: Content) -> bool:
        _same_kind(self, other)
        return self.data == other.data  # type: ignore[attr-defined]


@dataclass
class JsonContent:
    """JSON value hashed over its RFC 8785 canonical form."""

    value: Any

    def canonical(self) -> bytes:
        return jcs_dumps(self.value)

    def digest(self, algorithm: str = "sha256") -> bytes:
        return hash_bytes(self.canonical(), algorithm)

    def equals(self, other: Content) -> bool:
        _same_kind(self, other)
        return self.canonical() == other.canonical()  # type: ignore[attr-defined]
