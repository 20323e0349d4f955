from __future__ import annotations
import json
import pathlib
from typing import List, Optional

import typer
from rich import print

from hashtree_core.errors import LeafNotFound, MerkleError
from hashtree_core.logutil import setup_logging
from hashtree_core.models import ProofDocument
from hashtree_core.proof import find_proof_for, iter_with_proofs
from hashtree_core.render import print_tree
from hashtree_core.settings import parse_separator, settings
from hashtree_core.tree import Tree, TreeConfig, build
from hashtree_sdk.verify import verify_document

app = typer.Typer(add_completion=False, no_args_is_help=True)


@app.callback()
def main(
    log_level: str = typer.Option(settings.log_level, help="Logging level"),
):
    try:
        setup_logging(log_level)
    except ValueError as e:
        raise typer.BadParameter(str(e), param_hint="--log-level")


def _config(hash_name: str, use_hex: bool, separator: str, key_hex: Optional[str]) -> TreeConfig:
    try:
        return TreeConfig.named(
            hash_name,
            use_hex,
            parse_separator(separator),
            key=bytes.fromhex(key_hex or ""),
        )
    except (MerkleError, ValueError) as e:
        raise typer.BadParameter(str(e))


def _tree(leaves: Optional[List[str]], from_file: Optional[pathlib.Path], config: TreeConfig) -> Tree:
    values = list(leaves or [])
    if from_file is not None:
        values.extend(line for line in from_file.read_text().splitlines() if line)
    return build(values, config)


HashOpt = typer.Option(settings.hash, "--hash", help="Hash primitive")
HexOpt = typer.Option(settings.use_hex, "--hex/--raw", help="Hex-encode child digests before combining")
SepOpt = typer.Option(settings.separator, "--separator", help="Separator byte: ':', 0x31 or 49")
KeyOpt = typer.Option(settings.hash_key_hex, "--key-hex", help="BLAKE2b key, hex encoded")
FileOpt = typer.Option(None, "--from-file", help="Read leaves from a file, one per line")


@app.command()
def root(
    leaves: Optional[List[str]] = typer.Argument(None),
    from_file: Optional[pathlib.Path] = FileOpt,
    hash_name: str = HashOpt,
    use_hex: bool = HexOpt,
    separator: str = SepOpt,
    key_hex: Optional[str] = KeyOpt,
):
    """Print the root digest of the tree over LEAVES."""
    tree = _tree(leaves, from_file, _config(hash_name, use_hex, separator, key_hex))
    typer.echo(tree.digest.hex())


@app.command()
def show(
    leaves: Optional[List[str]] = typer.Argument(None),
    from_file: Optional[pathlib.Path] = FileOpt,
    hash_name: str = HashOpt,
    use_hex: bool = HexOpt,
    separator: str = SepOpt,
    key_hex: Optional[str] = KeyOpt,
):
    """Pretty-print the tree."""
    tree = _tree(leaves, from_file, _config(hash_name, use_hex, separator, key_hex))
    print_tree(tree)


@app.command()
def prove(
    leaf: str = typer.Argument(..., help="Leaf to prove"),
    leaves: Optional[List[str]] = typer.Argument(None),
    from_file: Optional[pathlib.Path] = FileOpt,
    out: Optional[pathlib.Path] = typer.Option(None, help="Write the proof document here"),
    hash_name: str = HashOpt,
    use_hex: bool = HexOpt,
    separator: str = SepOpt,
    key_hex: Optional[str] = KeyOpt,
):
    """Emit a proof document showing LEAF is part of the tree."""
    config = _config(hash_name, use_hex, separator, key_hex)
    tree = _tree(leaves, from_file, config)
    try:
        proof = find_proof_for(tree, leaf)
    except LeafNotFound as e:
        print(f"[red]{e}[/red]")
        raise typer.Exit(code=1)
    doc = ProofDocument.from_proof(proof, config, leaf=leaf)
    body = json.dumps(doc.model_dump(), indent=2)
    if out is None:
        typer.echo(body)
    else:
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_text(body)
        print(f"[green]Wrote proof for {leaf!r} to {out}[/green]")


@app.command()
def proofs(
    leaves: Optional[List[str]] = typer.Argument(None),
    from_file: Optional[pathlib.Path] = FileOpt,
    out_dir: pathlib.Path = typer.Option(..., help="Directory for the proof documents"),
    hash_name: str = HashOpt,
    use_hex: bool = HexOpt,
    separator: str = SepOpt,
    key_hex: Optional[str] = KeyOpt,
):
    """Write one proof document per leaf, named by leaf position."""
    config = _config(hash_name, use_hex, separator, key_hex)
    tree = _tree(leaves, from_file, config)
    if tree.size == 0:
        print("[yellow]No leaves given[/yellow]")
        raise typer.Exit(code=0)
    out_dir.mkdir(parents=True, exist_ok=True)
    width = len(str(tree.size - 1))
    for i, (node, proof) in enumerate(iter_with_proofs(tree)):
        doc = ProofDocument.from_proof(proof, config, leaf=node.leaf)
        (out_dir / f"{i:0{width}d}.json").write_text(json.dumps(doc.model_dump(), indent=2))
    typer.echo(tree.digest.hex())
    print(f"[green]Wrote {tree.size} proofs to {out_dir}[/green]")


@app.command()
def verify(
    path: pathlib.Path,
    root_hex: Optional[str] = typer.Option(None, "--root", help="Externally known root digest"),
    key_hex: Optional[str] = KeyOpt,
):
    """Verify a proof document; exits 1 if it does not check out."""
    try:
        key = bytes.fromhex(key_hex) if key_hex else None
    except ValueError as e:
        raise typer.BadParameter(f"invalid key hex: {e}", param_hint="--key-hex")
    ok = verify_document(path.read_text(), root_hex=root_hex, key=key)
    print({"proof_valid": ok})
    if not ok:
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
