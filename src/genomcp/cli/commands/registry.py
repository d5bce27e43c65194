# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Variant registry CLI commands."""

from __future__ import annotations

import asyncio
from typing import Annotated

import typer

app = typer.Typer()


@app.command()
def stats(
    shard: Annotated[str | None, typer.Argument(help="Shard name (default shard if omitted)")] = None,
) -> None:
    """Show variants and access counts for a shard."""
    asyncio.run(_async_stats(shard))


async def _async_stats(shard: str | None) -> None:
    from rich.console import Console
    from rich.table import Table

    from genomcp.registry.namespace import close_registry_namespace, get_registry_namespace

    namespace = get_registry_namespace()
    try:
        registry = namespace.get(shard)
        result = await registry.get_stats()
    finally:
        await close_registry_namespace()

    console = Console()
    table = Table(title=f"Registry shard {registry.name} ({result.total_variants} variants)")
    table.add_column("HGVS", style="bold")
    table.add_column("Gene")
    table.add_column("Accesses", justify="right")
    table.add_column("Created")
    table.add_column("Updated")

    for v in result.variants:
        table.add_row(
            v.hgvs,
            v.gene,
            str(v.access_count),
            v.created_at.isoformat(timespec="seconds"),
            v.updated_at.isoformat(timespec="seconds"),
        )

    console.print(table)


@app.command()
def delete(
    hgvs: Annotated[str, typer.Argument(help="Variant identifier to remove")],
    shard: Annotated[str | None, typer.Option("--shard", "-s", help="Shard name")] = None,
) -> None:
    """Remove a variant from a shard (no error if absent)."""
    asyncio.run(_async_delete(hgvs, shard))


async def _async_delete(hgvs: str, shard: str | None) -> None:
    from genomcp.registry.namespace import close_registry_namespace, get_registry_namespace

    namespace = get_registry_namespace()
    try:
        await namespace.get(shard).delete_variant(hgvs)
    finally:
        await close_registry_namespace()
    typer.echo(f"Deleted {hgvs} (if present).")
