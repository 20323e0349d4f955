"""Proof verification fuzzing with mutated proofs and raw proof documents."""
from __future__ import annotations
import atheris
import sys
import random

with atheris.instrument_imports():
    from hashtree_core.errors import MerkleError
    from hashtree_core.proof import ProofStep, check_proof, iter_with_proofs
    from hashtree_core.tree import build
    from hashtree_sdk.verify import verify_document


def _mutated_proofs(data: bytes):
    seed = int.from_bytes(data[:4], "little")
    random.seed(seed)
    chunk_len = 1 + (data[4] % 16)
    body = data[5:]
    leaves = [body[i:i + chunk_len].hex() for i in range(0, min(len(body), chunk_len * 16), chunk_len)]
    if len(leaves) < 3:
        return
    tree = build(leaves, hash_name="sha256", separator=seed & 0xFF)
    for _, proof in iter_with_proofs(tree):
        check_proof(tree, proof)
        if random.random() < 0.3:
            idx = random.randrange(1, len(proof) - 1)
            step = proof[idx]
            flipped = bytes([step.digest[0] ^ 0x01]) + step.digest[1:]
            try:
                check_proof(tree, proof.replace(idx, ProofStep(step.kind, flipped)))
            except MerkleError:
                continue
            raise RuntimeError("tampered proof unexpectedly verified")


def TestOneInput(data: bytes):  # noqa: N802
    if len(data) < 8:
        return
    _mutated_proofs(data)
    # Arbitrary bytes as a proof document must never raise out of the SDK
    verify_document(data)


def main():
    atheris.Setup(sys.argv, TestOneInput, enable_python_coverage=True)
    atheris.Fuzz()


if __name__ == "__main__":
    main()
