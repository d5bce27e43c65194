# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Typer CLI application root."""

from __future__ import annotations

import typer

from genomcp.cli.commands import cache as cache_cmd
from genomcp.cli.commands import registry as registry_cmd

app = typer.Typer(
    name="genomcp",
    help="Caching gateway for public genomic and pharmacogenomic APIs",
    no_args_is_help=True,
)

app.add_typer(cache_cmd.app, name="cache", help="Manage the ephemeral cache")
app.add_typer(registry_cmd.app, name="registry", help="Inspect the durable variant registry")


@app.command()
def serve(
    host: str = typer.Option("127.0.0.1", "--host", help="Bind address"),
    port: int = typer.Option(8000, "--port", "-p", help="Bind port"),
    workers: int = typer.Option(1, "--workers", "-w", help="Worker count"),
) -> None:
    """Start the genomcp API server."""
    import uvicorn

    uvicorn.run(
        "genomcp.api.app:create_app",
        host=host,
        port=port,
        workers=workers,
        factory=True,
    )


if __name__ == "__main__":
    app()
