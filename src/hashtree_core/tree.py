from __future__ import annotations
import enum
import logging
import weakref
from dataclasses import dataclass, field
from typing import Any, Callable, Iterator, Optional, Sequence

from .hashing import HashPrimitive, canonical_bytes, encode_digest, get_primitive

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class TreeConfig:
    """Per-tree hashing configuration; must travel with exported proofs."""

    hash: HashPrimitive
    use_hex: bool = False
    separator: int = 0x00

    def __post_init__(self):
        if not 0 <= self.separator <= 0xFF:
            raise ValueError(f"separator must be a single byte, got {self.separator}")

    @classmethod
    def named(cls, hash_name: str, use_hex: bool = False, separator: int = 0x00,
              key: Optional[bytes] = None) -> "TreeConfig":
        return cls(get_primitive(hash_name, key), use_hex, separator)

    def leaf_digest(self, leaf: Any) -> bytes:
        return self.hash.digest(canonical_bytes(leaf))

    def empty_digest(self) -> bytes:
        return self.hash.digest(b"")

    def combine(self, left: bytes, right: bytes) -> bytes:
        """Interior digest: hash(encode(left) || separator || encode(right))."""
        return self.hash.digest(
            encode_digest(left, self.use_hex),
            bytes([self.separator]),
            encode_digest(right, self.use_hex),
        )


_NO_LEAF = object()


@dataclass(eq=False)
class Node:
    digest: bytes
    leaf: Any = _NO_LEAF
    left: Optional["Node"] = None
    right: Optional["Node"] = None
    _parent: Optional[weakref.ref] = field(default=None, repr=False)

    @property
    def parent(self) -> Optional["Node"]:
        return self._parent() if self._parent is not None else None

    @property
    def is_leaf(self) -> bool:
        return self.leaf is not _NO_LEAF

    @property
    def is_interior(self) -> bool:
        return self.left is not None

    @property
    def is_empty(self) -> bool:
        return not self.is_leaf and not self.is_interior

    def sibling(self) -> Optional["Node"]:
        p = self.parent
        if p is None:
            return None
        return p.right if p.left is self else p.left


class Visit(enum.Enum):
    """Visitor result for the enumeration helpers."""

    CONTINUE = "continue"
    STOP = "stop"


class Tree:
    """An immutable Merkle tree. Build with build()."""

    def __init__(self, root: Node, config: TreeConfig, size: int):
        self._root = root
        self._config = config
        self._size = size

    @property
    def root(self) -> Node:
        return self._root

    @property
    def digest(self) -> bytes:
        return self._root.digest

    @property
    def config(self) -> TreeConfig:
        return self._config

    @property
    def size(self) -> int:
        return self._size

    def __len__(self) -> int:
        return self._size

    def __iter__(self) -> Iterator[Node]:
        return iter_leaves(self)

    def __repr__(self) -> str:
        return f"Tree(size={self._size}, hash={self._config.hash.name}, root={self.digest.hex()})"


def split_point(n: int) -> int:
    """Number of leaves in the left subtree; the left half takes the extra leaf."""
    return n // 2 + n % 2


def _build(config: TreeConfig, leaves: Sequence[Any]) -> Node:
    if len(leaves) == 0:
        return Node(config.empty_digest())
    if len(leaves) == 1:
        return Node(config.leaf_digest(leaves[0]), leaf=leaves[0])
    mid = split_point(len(leaves))
    left = _build(config, leaves[:mid])
    right = _build(config, leaves[mid:])
    node = Node(config.combine(left.digest, right.digest), left=left, right=right)
    left._parent = weakref.ref(node)
    right._parent = weakref.ref(node)
    return node


def build(
    leaves: Sequence[Any],
    config: Optional[TreeConfig] = None,
    *,
    hash_name: Optional[str] = None,
    use_hex: bool = False,
    separator: int = 0x00,
) -> Tree:
    """Build a tree over `leaves` in order.

    Either pass a TreeConfig or the individual settings; with neither, the
    process-wide defaults from hashtree_core.settings apply.
    Raises HashWriteFailure if the primitive fails; no partial tree is returned.
    """
    if config is None:
        if hash_name is None:
            from .settings import settings

            config = settings.tree_config()
        else:
            config = TreeConfig.named(hash_name, use_hex, separator)
    leaves = list(leaves)
    root = _build(config, leaves)
    log.debug("built tree: %d leaves, %s root %s", len(leaves), config.hash.name, root.digest.hex())
    return Tree(root, config, len(leaves))


def iter_leaves(tree: Tree) -> Iterator[Node]:
    """Leaf nodes depth-first, left before right, i.e. in input order."""
    stack = [tree.root]
    while stack:
        node = stack.pop()
        if node.is_leaf:
            yield node
        elif node.is_interior:
            stack.append(node.right)
            stack.append(node.left)


def enumerate_leaves(tree: Tree, visit: Callable[[Node], Visit]) -> bool:
    """Call `visit` on each leaf; returns False if it asked to stop."""
    for node in iter_leaves(tree):
        if visit(node) is Visit.STOP:
            return False
    return True
