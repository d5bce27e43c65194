# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Cache management CLI commands.

Only meaningful against a shared backend (``GENOMCP_CACHE_BACKEND=redis``);
an in-memory cache lives and dies with the command's own process.
"""

from __future__ import annotations

import asyncio

import typer

app = typer.Typer()


@app.command()
def clear() -> None:
    """Flush the ephemeral cache."""
    asyncio.run(_async_clear())


async def _async_clear() -> None:
    from genomcp.cache.manager import get_cache_manager

    mgr = get_cache_manager()
    try:
        count = await mgr.clear()
    finally:
        await mgr.close()
    typer.echo(f"Cache cleared: {count} entries removed.")


@app.command()
def size() -> None:
    """Show the number of live cache entries."""
    asyncio.run(_async_size())


async def _async_size() -> None:
    from genomcp.cache.manager import get_cache_manager

    mgr = get_cache_manager()
    try:
        count = await mgr.size()
    finally:
        await mgr.close()
    typer.echo(f"Entries: {count}")
