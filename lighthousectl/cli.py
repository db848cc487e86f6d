"""Typer CLI entrypoint."""

from __future__ import annotations

import logging
from pathlib import Path

import typer

from lighthousectl.core.errors import LighthouseError
from lighthousectl.core.model import LogicalState
from lighthousectl.core.service import PowerService

app = typer.Typer(help="Switch nearby lighthouse base stations off, on, or to standby")


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _build_service(config: Path | None) -> PowerService:
    service = PowerService(config_path=config)
    for warning in getattr(service, "load_warnings", ()):
        typer.echo(f"Warning: {warning}", err=True)
    return service


@app.command("set")
def set_state(
    state: str = typer.Option(..., "--state", "-s", help="OFF, ON or STANDBY (Gen1 supports OFF and ON)"),
    bsid: str | None = typer.Option(None, "--bsid", "-b", help="Gen1 base station ID (currently unused)"),
    config: Path | None = typer.Option(None, "--config", help="Path to a YAML config file"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log discovery and dispatch details"),
) -> None:
    """Scan for base stations and send STATE to every one found."""
    _setup_logging(verbose)
    try:
        logical_state = LogicalState.parse(state)
        if bsid is not None:
            typer.echo(
                "Warning: --bsid is ignored; Gen1 IDs are read from the advertised name",
                err=True,
            )
        service = _build_service(config)
        summary = service.set_state(logical_state)
        for result in summary.commanded:
            typer.echo(
                f"Sent {logical_state.name} to {result.identity.address} ({result.name}) "
                f"via {result.generation.value} payload={result.payload_hex}"
            )
        typer.echo(f"Done: {len(summary.commanded)} base station(s) switched, {summary.skipped} skipped")
    except LighthouseError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


@app.command("devices")
def list_devices(
    duration: float | None = typer.Option(None, "--duration", help="Seconds to listen for advertisements"),
    config: Path | None = typer.Option(None, "--config", help="Path to a YAML config file"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log discovery details"),
) -> None:
    """List advertising Bluetooth devices and their base station generation."""
    _setup_logging(verbose)
    try:
        service = _build_service(config)
        devices = service.list_devices(duration)
        if not devices:
            typer.echo("No Bluetooth devices found")
            return

        for device in devices:
            typer.echo(f"{device.identity.address} {device.name or '<unnamed>'} -> {device.generation.value}")
    except LighthouseError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


def run() -> None:
    app()


if __name__ == "__main__":
    run()
