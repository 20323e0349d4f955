"""Inclusion proofs: generation from a built tree and replay verification.

A proof is read leaf first, root last:

    Leaf(hash(leaf)), Left|Right(sibling), ..., Root(root digest)

A `Left` step means the sibling sits on the left when recombined with the
running digest; `Right` means it sits on the right.
"""
from __future__ import annotations
import enum
import logging
from dataclasses import dataclass
from typing import Any, Callable, Iterator, List, Optional, Sequence, Tuple, Union

from .errors import LeafNotFound, MalformedProof, ProofMismatch, RootMismatch
from .hashing import canonical_bytes
from .tree import Node, Tree, TreeConfig, Visit, iter_leaves

log = logging.getLogger(__name__)


class StepKind(str, enum.Enum):
    LEAF = "Leaf"
    LEFT = "Left"
    RIGHT = "Right"
    ROOT = "Root"


@dataclass(frozen=True)
class ProofStep:
    kind: StepKind
    digest: bytes

    def to_wire(self) -> dict:
        return {"kind": self.kind.value, "digest": self.digest.hex()}


class Proof(Sequence[ProofStep]):
    """Immutable sequence of proof steps, independent of the tree it came from."""

    __slots__ = ("_steps",)

    def __init__(self, steps):
        self._steps: Tuple[ProofStep, ...] = tuple(steps)

    def __getitem__(self, idx):
        if isinstance(idx, slice):
            return Proof(self._steps[idx])
        return self._steps[idx]

    def __len__(self) -> int:
        return len(self._steps)

    def __eq__(self, other) -> bool:
        if isinstance(other, Proof):
            return self._steps == other._steps
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._steps)

    def __repr__(self) -> str:
        inner = ", ".join(f"{s.kind.value}:{s.digest.hex()[:12]}" for s in self._steps)
        return f"Proof([{inner}])"

    @property
    def leaf_digest(self) -> bytes:
        return self._steps[0].digest

    @property
    def root_digest(self) -> bytes:
        return self._steps[-1].digest

    def replace(self, index: int, step: ProofStep) -> "Proof":
        steps = list(self._steps)
        steps[index] = step
        return Proof(steps)

    def to_wire(self) -> List[dict]:
        return [s.to_wire() for s in self._steps]

    @classmethod
    def from_wire(cls, records: Sequence[dict]) -> "Proof":
        return cls(ProofStep(StepKind(r["kind"]), bytes.fromhex(r["digest"])) for r in records)


def _path_steps(node: Node) -> List[ProofStep]:
    steps = []
    current = node
    parent = current.parent
    while parent is not None:
        if parent.left is current:
            steps.append(ProofStep(StepKind.RIGHT, parent.right.digest))
        else:
            steps.append(ProofStep(StepKind.LEFT, parent.left.digest))
        current = parent
        parent = current.parent
    return steps


def find_leaf(tree: Tree, leaf: Any) -> Optional[Node]:
    """First leaf node whose canonical form equals `leaf`'s, or None."""
    key = canonical_bytes(leaf)
    for node in iter_leaves(tree):
        if canonical_bytes(node.leaf) == key:
            return node
    return None


def find_proof_for(tree: Tree, leaf: Any) -> Proof:
    """Build the inclusion proof for `leaf`. Duplicates resolve to the first match."""
    node = find_leaf(tree, leaf)
    if node is None:
        log.debug("leaf %r not in tree %s", str(leaf), tree.digest.hex())
        raise LeafNotFound(str(leaf))
    steps = [ProofStep(StepKind.LEAF, tree.config.leaf_digest(leaf))]
    steps.extend(_path_steps(node))
    steps.append(ProofStep(StepKind.ROOT, tree.digest))
    return Proof(steps)


# Ancestor steps are kept as a persistent cons list (step, rest) so that the
# suffix above a subtree is built once and shared by every leaf beneath it.
_Chain = Optional[Tuple[ProofStep, Any]]


def _materialize(leaf_step: ProofStep, chain: _Chain) -> Proof:
    steps = [leaf_step]
    while chain is not None:
        step, chain = chain
        steps.append(step)
    return Proof(steps)


def iter_with_proofs(tree: Tree) -> Iterator[Tuple[Node, Proof]]:
    """Every leaf with its proof, in leaf order, from a single traversal."""
    stack: List[Tuple[Node, _Chain]] = [(tree.root, (ProofStep(StepKind.ROOT, tree.digest), None))]
    while stack:
        node, chain = stack.pop()
        if node.is_leaf:
            yield node, _materialize(ProofStep(StepKind.LEAF, node.digest), chain)
        elif node.is_interior:
            stack.append((node.right, (ProofStep(StepKind.LEFT, node.left.digest), chain)))
            stack.append((node.left, (ProofStep(StepKind.RIGHT, node.right.digest), chain)))


def enumerate_with_proofs(tree: Tree, visit: Callable[[Node, Proof], Visit]) -> bool:
    for node, proof in iter_with_proofs(tree):
        if visit(node, proof) is Visit.STOP:
            return False
    return True


def _validate_shape(proof: Sequence[ProofStep]) -> None:
    if len(proof) < 2:
        raise MalformedProof(f"proof needs at least 2 steps, got {len(proof)}")
    if proof[0].kind is not StepKind.LEAF:
        raise MalformedProof("first entry must be the hash of the leaf node")
    if proof[-1].kind is not StepKind.ROOT:
        raise MalformedProof("last entry must be the root hash")
    for i in range(1, len(proof) - 1):
        if proof[i].kind not in (StepKind.LEFT, StepKind.RIGHT):
            raise MalformedProof(f"step {i} must be Left or Right, got {proof[i].kind.value}")


def check_proof(
    target: Union[Tree, bytes],
    proof: Sequence[ProofStep],
    config: Optional[TreeConfig] = None,
) -> None:
    """Replay `proof` and raise unless it leads to the target's root.

    `target` is either a built Tree (its config is used) or a bare root
    digest, in which case `config` is required.
    """
    if isinstance(target, Tree):
        root = target.digest
        config = config or target.config
    else:
        if config is None:
            raise TypeError("a TreeConfig is required when checking against a bare root digest")
        root = bytes(target)

    _validate_shape(proof)

    acc = proof[0].digest
    for step in proof[1:-1]:
        if step.kind is StepKind.LEFT:
            acc = config.combine(step.digest, acc)
        else:
            acc = config.combine(acc, step.digest)

    if acc != proof[-1].digest:
        log.warning("proof steps do not produce the proof's root %s", proof[-1].digest.hex())
        raise ProofMismatch("proof steps don't produce the same root hash as in the proof")
    if acc != root:
        log.warning("proof root %s does not match tree root %s", acc.hex(), root.hex())
        raise RootMismatch("proof root hash doesn't match the tree root hash")


def verify_proof(
    target: Union[Tree, bytes],
    proof: Sequence[ProofStep],
    config: Optional[TreeConfig] = None,
) -> bool:
    """Boolean form of check_proof. A failing hash primitive still raises."""
    try:
        check_proof(target, proof, config)
    except (MalformedProof, ProofMismatch, RootMismatch):
        return False
    return True
