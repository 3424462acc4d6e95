from __future__ import annotations
import json
import logging
import os
import pathlib
from typing import List, Optional

import typer
from rich import print

from canopy_core.content import FileContent
from canopy_core.crypto import ed25519_generate
from canopy_core.heads import make_tree_head
from canopy_core.logutil import setup_logging, timed
from canopy_core.merkle import MerkleTree, build
from canopy_core.settings import settings
from canopy_cli.corpus import generate_files, load_directory

app = typer.Typer(add_completion=False, no_args_is_help=True)


@app.callback()
def main(
    log_level: Optional[str] = typer.Option(
        None, help="Log level (defaults to CANOPY_LOG_LEVEL)"
    ),
):
    level = (log_level or settings.log_level).upper()
    setup_logging(getattr(logging, level, logging.INFO))


def _load(dir: Optional[str]) -> List[FileContent]:
    dir = dir or settings.files_dir
    try:
        items = load_directory(dir)
    except FileNotFoundError:
        print(f"[red]No such directory: {dir}[/red]")
        raise typer.Exit(code=1)
    if not items:
        print(f"[yellow]No files found in {dir}[/yellow]")
        raise typer.Exit(code=1)
    return items


def _read_item(file: str) -> FileContent:
    try:
        return FileContent.from_path(file)
    except FileNotFoundError:
        print(f"[red]No such file: {file}[/red]")
        raise typer.Exit(code=1)


def _setup(items: List[FileContent]) -> MerkleTree:
    with timed("Setup", enabled=settings.log_timings):
        return build(items, settings.hash_alg)


@app.command()
def gen_files(
    dir: Optional[str] = typer.Option(None, help="Output directory"),
    count: int = typer.Option(16, min=1, help="Number of files"),
    size: int = typer.Option(1024, min=0, help="Characters per file"),
    seed: Optional[int] = typer.Option(None, help="Seed for reproducible content"),
):
    """Write random test content to a directory."""
    dir = dir or settings.files_dir
    written = generate_files(dir, count, size, seed)
    print(f"[green]Wrote {len(written)} files to {dir}[/green]")


@app.command()
def gen_keys(out_dir: str = typer.Option("./keys", help="Directory to write keypair")):
    os.makedirs(out_dir, exist_ok=True)
    sk, pk = ed25519_generate()
    (pathlib.Path(out_dir) / "ed25519_private.key").write_bytes(sk)
    (pathlib.Path(out_dir) / "ed25519_public.key").write_bytes(pk)
    print(f"[green]Wrote keys to {out_dir}[/green]")


@app.command()
def setup(dir: Optional[str] = typer.Option(None, help="Directory of items")):
    """Build a tree over every file in a directory and print its root."""
    items = _load(dir)
    tree = _setup(items)
    print(f"Num Entries: {tree.size}")
    print(f"root: {tree.merkle_root.hex()}")


@app.command()
def verify(dir: Optional[str] = typer.Option(None, help="Directory of items")):
    """Build a tree and recompute it from its items."""
    tree = _setup(_load(dir))
    with timed("VerifyTree", enabled=settings.log_timings):
        ok = tree.verify_tree()
    print({"tree_valid": ok})
    if not ok:
        raise typer.Exit(code=1)


@app.command()
def prove(
    file: str = typer.Argument(..., help="File whose content to look up"),
    dir: Optional[str] = typer.Option(None, help="Directory of items"),
    out: Optional[str] = typer.Option(None, help="Write the inclusion proof JSON here"),
):
    """Check that a file's content is in the tree (ACCEPT / REJECT)."""
    tree = _setup(_load(dir))
    target = _read_item(file)
    with timed("VerifyContent", enabled=settings.log_timings):
        ok = tree.verify_content(target)
    if not ok:
        print("[red]REJECT[/red]")
        raise typer.Exit(code=1)
    print("[green]ACCEPT[/green]")
    if out:
        proof = tree.inclusion_proof(target)
        pathlib.Path(out).write_text(proof.model_dump_json(indent=2))
        print(f"[green]Wrote proof to {out}[/green]")


@app.command()
def insert(
    file: str = typer.Argument(..., help="File to add"),
    dir: Optional[str] = typer.Option(None, help="Directory of items"),
):
    """Add a file's content and rebuild the tree."""
    item = _read_item(file)
    tree = _setup(_load(dir))
    with timed("Insert", enabled=settings.log_timings):
        updated = tree.insert(item)
    print(f"Num Entries: {tree.size} -> {updated.size}")
    print(f"old root: {tree.merkle_root.hex()}")
    print(f"new root: {updated.merkle_root.hex()}")


@app.command()
def sign_head(
    dir: Optional[str] = typer.Option(None, help="Directory of items"),
    out: str = typer.Option("./head.json", help="Output path for the signed head"),
    key_path: Optional[str] = typer.Option(None, help="Ed25519 private key"),
    pubkey_path: Optional[str] = typer.Option(None, help="Ed25519 public key"),
):
    """Sign the tree's committed root and write it as a tree head."""
    tree = _setup(_load(dir))
    sk = pathlib.Path(key_path or settings.signing_key_path).read_bytes()
    pk = pathlib.Path(pubkey_path or settings.signing_pubkey_path).read_bytes()
    head = make_tree_head(tree, sk, pk)
    pathlib.Path(out).write_text(head.model_dump_json(indent=2))
    print(f"[green]Wrote tree head to {out}[/green]")


@app.command()
def verify_proof(proof: str, head: str):
    """Verify an exported inclusion proof against a signed tree head."""
    from canopy_sdk.verify import verify_inclusion

    ok = verify_inclusion(
        json.loads(pathlib.Path(proof).read_text()),
        json.loads(pathlib.Path(head).read_text()),
    )
    print({"proof_valid": ok})
    if not ok:
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
