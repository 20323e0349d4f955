"""Fuzz harness for tree construction & single-leaf proof round trips."""
from __future__ import annotations
import atheris
import sys

with atheris.instrument_imports():
    from hashtree_core.proof import check_proof, find_proof_for
    from hashtree_core.tree import TreeConfig, build

_HASHES = ("sha256", "blake2b-256")


def TestOneInput(data: bytes):  # noqa: N802
    if len(data) < 3:
        return
    fdp = atheris.FuzzedDataProvider(data)
    config = TreeConfig.named(
        _HASHES[fdp.ConsumeIntInRange(0, 1)],
        fdp.ConsumeBool(),
        fdp.ConsumeIntInRange(0, 255),
    )
    # Bounded leaf count keeps each run linear and quick
    count = fdp.ConsumeIntInRange(0, 64)
    leaves = [fdp.ConsumeUnicodeNoSurrogates(8) for _ in range(count)]
    tree = build(leaves, config)
    if not leaves:
        return
    target = leaves[fdp.ConsumeIntInRange(0, len(leaves) - 1)]
    proof = find_proof_for(tree, target)
    check_proof(tree, proof)


def main():
    atheris.Setup(sys.argv, TestOneInput, enable_python_coverage=True)
    atheris.Fuzz()


if __name__ == "__main__":
    main()
