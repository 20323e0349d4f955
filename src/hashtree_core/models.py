from __future__ import annotations
import hashlib
import json
import re
from typing import List, Literal, Optional

import rfc8785
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    StrictInt,
    StrictStr,
    ValidationError,
    field_validator,
)

from .errors import ProofDecodeError, UnknownHashPrimitive
from .hashing import get_primitive
from .proof import Proof, ProofStep, StepKind
from .tree import TreeConfig

_HEX = re.compile(r"^(?:[0-9a-f]{2})*$")


def _lower_hex(v: str) -> str:
    if not isinstance(v, str) or not _HEX.match(v):
        raise ValueError("digest must be lowercase, even-length hex")
    return v


class ProofStepModel(BaseModel):
    """One record of the proof wire shape: {"kind": ..., "digest": <hex>}."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: Literal["Leaf", "Left", "Right", "Root"]
    digest: StrictStr

    @field_validator("digest")
    @classmethod
    def _digest_is_hex(cls, v: str) -> str:
        return _lower_hex(v)

    def to_step(self) -> ProofStep:
        return ProofStep(StepKind(self.kind), bytes.fromhex(self.digest))


class ProofDocument(BaseModel):
    """A proof together with the configuration needed to re-verify it.

    The bookend rules are not enforced here; a structurally odd document
    still decodes so the verifier can report MalformedProof for it.
    """

    model_config = ConfigDict(extra="forbid")

    hash: StrictStr
    use_hex: StrictBool = False
    separator: StrictInt = Field(default=0, ge=0, le=255)
    root: StrictStr
    leaf: Optional[StrictStr] = None
    steps: List[ProofStepModel] = Field(default_factory=list)

    @field_validator("root")
    @classmethod
    def _root_is_hex(cls, v: str) -> str:
        return _lower_hex(v)

    @field_validator("hash")
    @classmethod
    def _hash_is_known(cls, v: str) -> str:
        try:
            get_primitive(v)
        except UnknownHashPrimitive as e:
            raise ValueError(str(e)) from e
        return v

    @classmethod
    def from_proof(cls, proof: Proof, config: TreeConfig, leaf=None) -> "ProofDocument":
        return cls(
            hash=config.hash.name,
            use_hex=config.use_hex,
            separator=config.separator,
            root=proof.root_digest.hex(),
            leaf=None if leaf is None else str(leaf),
            steps=[ProofStepModel(**s.to_wire()) for s in proof],
        )

    @classmethod
    def from_json(cls, data) -> "ProofDocument":
        try:
            if isinstance(data, (str, bytes)):
                data = json.loads(data)
            return cls.model_validate(data)
        except (ValidationError, ValueError, TypeError, RecursionError) as e:
            raise ProofDecodeError(f"invalid proof document: {e}") from e

    def to_proof(self) -> Proof:
        return Proof(s.to_step() for s in self.steps)

    def tree_config(self, key: Optional[bytes] = None) -> TreeConfig:
        return TreeConfig(get_primitive(self.hash, key), self.use_hex, self.separator)

    def canonical_bytes(self) -> bytes:
        """Deterministic canonical JSON bytes per RFC8785."""
        return rfc8785.dumps(self.model_dump())

    def document_digest(self) -> str:
        return hashlib.sha256(self.canonical_bytes()).hexdigest()
