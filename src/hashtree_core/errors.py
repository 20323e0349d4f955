from __future__ import annotations


class MerkleError(Exception):
    """Base class for tree construction, proof and verification failures."""


class HashWriteFailure(MerkleError):
    """The hash primitive refused input; the surrounding operation is aborted."""


class UnknownHashPrimitive(MerkleError, KeyError):
    def __init__(self, name: str):
        super().__init__(name)
        self.name = name

    def __str__(self) -> str:
        return f"unknown hash primitive: {self.name!r}"


class LeafNotFound(MerkleError):
    def __init__(self, leaf: str):
        super().__init__(f"unable to find leaf {leaf!r}")
        self.leaf = leaf


class MalformedProof(MerkleError):
    """Bad bookend tags, bad interior tags or a proof shorter than two steps."""


class ProofMismatch(MerkleError):
    """Replaying the steps does not reproduce the proof's own root digest."""


class RootMismatch(MerkleError):
    """The proof is internally consistent but for a different root."""


class ProofDecodeError(MerkleError, ValueError):
    """A serialized proof document could not be decoded."""
