from __future__ import annotations

import json
from contextlib import contextmanager
from typing import Iterator, List, Optional

import typer

from ..core.config_loader import ConfigLoader
from ..core.environment import Environment
from ..core.errors import TetherError
from ..core.provider import ConfigurationProvider
from ..observability import setup_logging

app = typer.Typer(help="Tether CLI")

_TYPES = {
    "str": str,
    "int": int,
    "float": float,
    "bool": bool,
    "list": List[str],
}


@contextmanager
def _provider(config: Optional[str], env: Optional[str]) -> Iterator[ConfigurationProvider]:
    loader = ConfigLoader(config)
    environment = Environment(env) if env is not None else None
    try:
        provider = ConfigurationProvider(
            loader.build_source(),
            environment=environment or loader.get_environment(),
            close_source=True,
        )
    except (TetherError, ValueError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)
    try:
        yield provider
    except TetherError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)
    finally:
        provider.close()


@app.callback()
def main(
    log_level: str = typer.Option("WARNING", "--log-level"),
    log_format: str = typer.Option("console", "--log-format"),
):
    setup_logging(level=log_level, format=log_format)


@app.command()
def get(
    key: str,
    env: Optional[str] = typer.Option(None, "--env"),
    type_name: str = typer.Option("str", "--type", help="str, int, float, bool or list"),
    config: Optional[str] = typer.Option(None, "--config", help="Path to tether.yaml"),
):
    if type_name not in _TYPES:
        typer.echo(f"Error: unsupported type {type_name!r}", err=True)
        raise typer.Exit(code=2)
    with _provider(config, env) as provider:
        value = provider.get(key, _TYPES[type_name])
        typer.echo(json.dumps({"key": key, "value": value, "environment": provider.environment.name}, indent=2))


@app.command()
def dump(
    env: Optional[str] = typer.Option(None, "--env"),
    as_json: bool = typer.Option(False, "--json"),
    config: Optional[str] = typer.Option(None, "--config", help="Path to tether.yaml"),
):
    with _provider(config, env) as provider:
        snapshot = dict(provider.snapshot())
        if as_json:
            typer.echo(json.dumps(snapshot, indent=2, sort_keys=True))
            return
        for key in sorted(snapshot):
            typer.echo(f"{key}={snapshot[key]}")


if __name__ == "__main__":
    app()
