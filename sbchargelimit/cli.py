"""Typer CLI entrypoint."""

from __future__ import annotations

from enum import Enum
from pathlib import Path

import typer

from sbchargelimit.core.config_loader import config_path, write_default_config
from sbchargelimit.core.errors import SbChargeLimitError
from sbchargelimit.core.logging_setup import setup_logging
from sbchargelimit.core.service import ChargeLimitService

app = typer.Typer(help="Keep a battery within a charge band by switching a BLE smart plug")

_CONFIG_OPTION = typer.Option(None, "--config", help="Path to config.yaml")


class SwitchState(str, Enum):
    on = "on"
    off = "off"


def _build_service(config_file: Path | None) -> ChargeLimitService:
    return ChargeLimitService(config_file=config_file)


@app.command("run")
def run(config: Path | None = _CONFIG_OPTION) -> None:
    """Run the charge control loop until interrupted."""
    log_path = setup_logging()
    if log_path is not None:
        typer.echo(f"Logging to {log_path}")
    try:
        service = _build_service(config)
        service.run()
    except SbChargeLimitError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None
    except KeyboardInterrupt:
        typer.echo("Stopped")


@app.command("devices")
def list_devices(
    timeout: float = typer.Option(5.0, "--timeout", help="Scan duration in seconds"),
    config: Path | None = _CONFIG_OPTION,
) -> None:
    """List nearby BLE advertisers and whether they are configured."""
    try:
        service = _build_service(config)
        devices = service.list_devices(timeout)
        if not devices:
            typer.echo("No Bluetooth devices found")
            return

        for device, configured in devices:
            matched = configured.kind.value if configured else "<not-configured>"
            typer.echo(f"{device.address} {device.name} -> {matched}")
    except SbChargeLimitError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


@app.command("set")
def set_state(
    state: SwitchState,
    config: Path | None = _CONFIG_OPTION,
) -> None:
    """Switch the first configured device that is found on or off."""
    try:
        service = _build_service(config)
        device = service.switch(state is SwitchState.on)
        typer.echo(f"Turned {state.value} {device.kind.value} {device.address}")
    except SbChargeLimitError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


@app.command("status")
def status(config: Path | None = _CONFIG_OPTION) -> None:
    """Show the battery reading and what the control loop would do."""
    try:
        service = _build_service(config)
        sample, decision = service.status()
        thresholds = service.config.thresholds
        typer.echo(f"Battery: {sample.state.value} {sample.fraction * 100:.0f}%")
        typer.echo(f"Band: {thresholds.start_thresh:.2f}-{thresholds.stop_thresh:.2f}")
        typer.echo(f"Decision: {decision.value}")
    except SbChargeLimitError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


@app.command("config")
def show_config(
    init: bool = typer.Option(False, "--init", help="Write a default configuration"),
    force: bool = typer.Option(False, "--force", help="Overwrite an existing file with --init"),
    config: Path | None = _CONFIG_OPTION,
) -> None:
    """Print the configuration path, or create a default configuration."""
    try:
        if init:
            written = write_default_config(config, overwrite=force)
            typer.echo(f"Wrote default configuration to {written}")
            return
        typer.echo(str(config or config_path()))
    except SbChargeLimitError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


def run_cli() -> None:
    app()


if __name__ == "__main__":
    run_cli()
