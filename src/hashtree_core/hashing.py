from __future__ import annotations
import hashlib
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

import nacl.hashlib

from .errors import HashWriteFailure, UnknownHashPrimitive

# Any zero-argument callable returning an object with update()/digest(),
# i.e. the hashlib protocol.
HasherFactory = Callable[[], Any]


@dataclass(frozen=True)
class HashPrimitive:
    """A named, stateless hash function.

    Every call to digest() builds a fresh hasher, so one primitive can be
    shared freely between trees and threads.
    """

    name: str
    factory: HasherFactory

    def digest(self, *chunks: bytes) -> bytes:
        h = self.factory()
        try:
            for chunk in chunks:
                h.update(chunk)
        except Exception as e:
            raise HashWriteFailure(f"failed to compute {self.name} hash") from e
        return h.digest()

    @property
    def digest_size(self) -> int:
        return len(self.digest(b""))


def _blake2b(size: int, key: bytes = b"") -> HasherFactory:
    def factory():
        return nacl.hashlib.blake2b(digest_size=size, key=key)

    return factory


_REGISTRY: Dict[str, HasherFactory] = {
    "sha256": hashlib.sha256,
    "sha512": hashlib.sha512,
    "sha3-256": hashlib.sha3_256,
    "blake2b-256": _blake2b(32),
    "blake2b-512": _blake2b(64),
}

_KEYED = {"blake2b-256": 32, "blake2b-512": 64}


def register_primitive(name: str, factory: HasherFactory) -> HashPrimitive:
    name = name.lower()
    _REGISTRY[name] = factory
    return HashPrimitive(name, factory)


def available_primitives() -> list:
    return sorted(_REGISTRY)


def get_primitive(name: str, key: Optional[bytes] = None) -> HashPrimitive:
    """Look up a registered primitive; `key` is only accepted for BLAKE2b."""
    name = name.lower()
    if name not in _REGISTRY:
        raise UnknownHashPrimitive(name)
    if key:
        if name not in _KEYED:
            raise ValueError(f"{name} does not take a key")
        return HashPrimitive(name, _blake2b(_KEYED[name], key))
    return HashPrimitive(name, _REGISTRY[name])


def canonical_bytes(leaf: Any) -> bytes:
    """Hashing input and lookup key for a leaf value."""
    return str(leaf).encode("utf-8")


def encode_digest(digest: bytes, use_hex: bool) -> bytes:
    if use_hex:
        return digest.hex().encode("ascii")
    return digest
