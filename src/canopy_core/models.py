from __future__ import annotations
from typing import List, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator


class PathStep(BaseModel):
    """One level of an authentication path.

    ``side`` says where the sibling sits relative to the running digest:
    ``"L"`` means hash(sibling + current), ``"R"`` means hash(current + sibling).
    """

    model_config = ConfigDict(extra="forbid")

    sibling_b64: str
    side: Literal["L", "R"]


class InclusionProof(BaseModel):
    model_config = ConfigDict(extra="forbid")

    leaf_index: int = Field(ge=0)
    leaf_digest_b64: str
    path: List[PathStep] = Field(default_factory=list)
    merkle_root_b64: str
    hash_alg: str = "sha256"
    tree_size: int = Field(ge=1)

    @field_validator("path")
    @classmethod
    def _path_not_too_long(cls, v):
        # a tree over 2**64 items is not something we can have built
        if len(v) > 64:
            raise ValueError("authentication path longer than 64 levels")
        return v


class TreeHead(BaseModel):
    """Signed commitment to a tree's root digest."""

    tree_size: int
    merkle_root_b64: str
    hash_alg: str
    ts: str
    signer_pubkey_b64: str
    signature_b64: Optional[str] = None
