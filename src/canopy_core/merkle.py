from __future__ import annotations
import hmac
import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from .content import Content
from .crypto import B64, B64D, check_algorithm, digest_size, hash_pair
from .errors import DigestError, EmptyInput, EqualityError, ProofError, TreeError
from .models import InclusionProof, PathStep

log = logging.getLogger("canopy.merkle")

DEFAULT_ALGORITHM = "sha256"


@dataclass
class Node:
    """A slot in the tree's node arena.

    Links are arena indices. ``parent`` is only ever followed upwards; it
    is None for the root.
    """

    digest: bytes
    item: Optional[Content] = None
    left: Optional[int] = None
    right: Optional[int] = None
    parent: Optional[int] = None
    is_leaf: bool = False
    duplicate: bool = False


def _item_digest(item: Content, algorithm: str, size: int) -> bytes:
    try:
        # sha256 items only need the bare digest() capability
        d = item.digest() if algorithm == DEFAULT_ALGORITHM else item.digest(algorithm)
    except TreeError:
        raise
    except Exception as e:
        raise DigestError(f"digest of {type(item).__name__} failed: {e}") from e
    if not isinstance(d, (bytes, bytearray)):
        raise DigestError(f"{type(item).__name__}.digest returned {type(d).__name__}")
    if len(d) != size:
        raise DigestError(
            f"{type(item).__name__}.digest returned {len(d)} bytes, expected {size} for {algorithm}"
        )
    return bytes(d)


def _items_equal(item: Content, target: Content) -> bool:
    try:
        return bool(item.equals(target))
    except TreeError:
        raise
    except Exception as e:
        raise EqualityError(f"cannot compare {type(item).__name__}: {e}") from e


@dataclass
class MerkleTree:
    nodes: List[Node]
    root: int
    leaves: List[int]  # leaf level, duplicate leaf included
    merkle_root: bytes  # committed at construction
    algorithm: str = DEFAULT_ALGORITHM

    @classmethod
    def from_items(cls, items: Iterable[Content], algorithm: str = DEFAULT_ALGORITHM) -> "MerkleTree":
        algorithm = check_algorithm(algorithm)
        items = list(items)
        if not items:
            raise EmptyInput("cannot construct tree with no content")
        size = digest_size(algorithm)

        nodes: List[Node] = [
            Node(digest=_item_digest(item, algorithm, size), item=item, is_leaf=True)
            for item in items
        ]
        if len(nodes) % 2 == 1:
            last = nodes[-1]
            nodes.append(
                Node(digest=last.digest, item=last.item, is_leaf=True, duplicate=True)
            )
        leaves = list(range(len(nodes)))

        # Above the leaves an odd level is not padded: its last node is paired
        # with itself. This gives a different root than padding with a copy.
        level = leaves
        while len(level) > 1:
            parents = []
            for i in range(0, len(level), 2):
                left = level[i]
                right = level[i + 1] if i + 1 < len(level) else left
                nodes.append(
                    Node(
                        digest=hash_pair(nodes[left].digest, nodes[right].digest, algorithm),
                        left=left,
                        right=right,
                    )
                )
                parent = len(nodes) - 1
                nodes[left].parent = parent
                nodes[right].parent = parent
                parents.append(parent)
            level = parents

        root = level[0]
        log.debug(
            "built tree: %d items, %d leaves, %d nodes, root=%s",
            len(items),
            len(leaves),
            len(nodes),
            nodes[root].digest.hex(),
        )
        return cls(nodes, root, leaves, nodes[root].digest, algorithm)

    @property
    def root_node(self) -> Node:
        return self.nodes[self.root]

    @property
    def items(self) -> List[Content]:
        """The caller's items in build order, without the padding leaf."""
        return [self.nodes[i].item for i in self.leaves if not self.nodes[i].duplicate]

    @property
    def size(self) -> int:
        return len(self.items)

    def leaf_nodes(self) -> List[Node]:
        return [self.nodes[i] for i in self.leaves]

    def _recompute(self, index: int, memo: Dict[int, bytes]) -> bytes:
        """Digest of the subtree at ``index``, derived from items only.

        Cached node digests are never read. Children are evaluated right
        before left, hashed left ++ right.
        """
        size = digest_size(self.algorithm)
        stack = [index]
        while stack:
            i = stack[-1]
            if i in memo:
                stack.pop()
                continue
            node = self.nodes[i]
            if node.is_leaf:
                memo[i] = _item_digest(node.item, self.algorithm, size)
                stack.pop()
                continue
            if node.right not in memo:
                stack.append(node.right)
                continue
            if node.left not in memo:
                stack.append(node.left)
                continue
            memo[i] = hash_pair(memo[node.left], memo[node.right], self.algorithm)
            stack.pop()
        return memo[index]

    def verify_tree(self) -> bool:
        """Recompute the whole tree from its items and compare to the committed root."""
        calculated = self._recompute(self.root, {})
        if hmac.compare_digest(calculated, self.merkle_root):
            return True
        log.warning(
            "tree root mismatch: committed=%s calculated=%s",
            self.merkle_root.hex(),
            calculated.hex(),
        )
        return False

    def _find_leaf(self, target: Content) -> Optional[int]:
        for position, i in enumerate(self.leaves):
            if _items_equal(self.nodes[i].item, target):
                return position
        return None

    def verify_content(self, target: Content) -> bool:
        """Check that ``target`` is stored and every digest up its path holds.

        Returns False when the item is absent or any ancestor's stored digest
        disagrees with one recomputed from the items below it.
        """
        position = self._find_leaf(target)
        if position is None:
            return False
        memo: Dict[int, bytes] = {}
        current = self.nodes[self.leaves[position]].parent
        while current is not None:
            node = self.nodes[current]
            right = self._recompute(node.right, memo)
            left = self._recompute(node.left, memo)
            calculated = hash_pair(left, right, self.algorithm)
            if not hmac.compare_digest(calculated, node.digest):
                log.warning(
                    "digest mismatch at node %d on the path of leaf %d", current, position
                )
                return False
            memo[current] = calculated
            current = node.parent
        return True

    def insert(self, item: Content) -> "MerkleTree":
        """Return a new tree over this tree's items plus ``item``.

        The whole tree is rebuilt; this tree is left as it is.
        """
        return MerkleTree.from_items(self.items + [item], self.algorithm)

    def inclusion_proof(self, target: Content) -> Optional[InclusionProof]:
        """Authentication path for the first leaf equal to ``target``, or None."""
        position = self._find_leaf(target)
        if position is None:
            return None
        path = []
        current = self.leaves[position]
        while self.nodes[current].parent is not None:
            parent = self.nodes[self.nodes[current].parent]
            if parent.left == current:
                path.append(PathStep(sibling_b64=B64(self.nodes[parent.right].digest), side="R"))
            else:
                path.append(PathStep(sibling_b64=B64(self.nodes[parent.left].digest), side="L"))
            current = self.nodes[current].parent
        return InclusionProof(
            leaf_index=position,
            leaf_digest_b64=B64(self.nodes[self.leaves[position]].digest),
            path=path,
            merkle_root_b64=B64(self.merkle_root),
            hash_alg=self.algorithm,
            tree_size=self.size,
        )


def build(items: Iterable[Content], algorithm: str = DEFAULT_ALGORITHM) -> MerkleTree:
    return MerkleTree.from_items(items, algorithm)


def verify_tree(tree: MerkleTree) -> bool:
    return tree.verify_tree()


def verify_content(tree: MerkleTree, target: Content) -> bool:
    return tree.verify_content(target)


def insert(tree: MerkleTree, item: Content) -> MerkleTree:
    return tree.insert(item)


def verify_inclusion(
    leaf: bytes, path: Sequence[Tuple[bytes, str]], root: bytes, algorithm: str = "sha256"
) -> bool:
    """Fold an authentication path from ``leaf`` and compare with ``root``."""
    h = leaf
    for sibling, side in path:
        if side == "L":
            h = hash_pair(sibling, h, algorithm)
        elif side == "R":
            h = hash_pair(h, sibling, algorithm)
        else:
            raise ProofError(f"invalid path side: {side!r}")
    return hmac.compare_digest(h, root)


def verify_proof(proof: InclusionProof) -> bool:
    """Check an exported proof against the root it carries."""
    try:
        algorithm = check_algorithm(proof.hash_alg)
        leaf = B64D(proof.leaf_digest_b64)
        root = B64D(proof.merkle_root_b64)
        path = [(B64D(step.sibling_b64), step.side) for step in proof.path]
    except ValueError as e:
        raise ProofError(str(e)) from e
    return verify_inclusion(leaf, path, root, algorithm)
