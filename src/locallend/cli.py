"""CLI interface for LocalLend."""

import logging
from pathlib import Path

import typer

from .domain.booking_status import BookingStatus
from .domain.errors import InvalidBookingStatusError
from .utils.config import AppConfig, load_app_config, load_env_config

app = typer.Typer(help="LocalLend booking lifecycle command line interface")


@app.callback()
def configure(
    config: Path | None = typer.Option(
        None,
        "--config",
        "-c",
        help="Optional JSON/YAML configuration file; defaults to LOCALLEND_* environment variables.",
    ),
) -> None:
    """Configure logging before running a command."""

    settings: AppConfig = load_app_config(config) if config is not None else load_env_config()
    logging.basicConfig(level=settings.log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")


def _parse_status(raw_value: str) -> BookingStatus:
    try:
        return BookingStatus.from_string(raw_value)
    except InvalidBookingStatusError as error:
        typer.echo(error.message, err=True)
        raise typer.Exit(code=2) from error


@app.command("statuses")
def statuses_command() -> None:
    """List every booking status with its description."""

    for status in BookingStatus:
        flags = [
            name
            for name, enabled in (
                ("final", status.is_final_status),
                ("active", status.is_active),
            )
            if enabled
        ]
        suffix = f" [{', '.join(flags)}]" if flags else ""
        typer.echo(f"{status.name:<10} {status.description}{suffix}")


@app.command("transitions")
def transitions_command(
    status: str | None = typer.Option(None, "--status", "-s", help="Only show transitions out of this status."),
) -> None:
    """Print the booking transition table."""

    sources = [_parse_status(status)] if status is not None else list(BookingStatus)
    for source in sources:
        targets = [target.name for target in BookingStatus if source.can_transition_to(target)]
        typer.echo(f"{source.name:<10} -> {', '.join(targets) if targets else '(none)'}")


@app.command("check")
def check_command(
    current: str = typer.Argument(..., help="Current booking status"),
    target: str = typer.Argument(..., help="Requested booking status"),
) -> None:
    """Exit 0 when CURRENT may move to TARGET, 1 otherwise."""

    current_status = _parse_status(current)
    target_status = _parse_status(target)
    if current_status.can_transition_to(target_status):
        typer.echo(f"{current_status.name} -> {target_status.name}: allowed")
        return

    typer.echo(f"{current_status.name} -> {target_status.name}: not allowed")
    raise typer.Exit(code=1)


@app.command("describe")
def describe_command(status: str = typer.Argument(..., help="Booking status name")) -> None:
    """Show the description and predicates of one booking status."""

    parsed = _parse_status(status)
    typer.echo(f"{parsed.name}: {parsed.description}")
    typer.echo(f"  can be cancelled: {parsed.can_be_cancelled}")
    typer.echo(f"  can be confirmed: {parsed.can_be_confirmed}")
    typer.echo(f"  can be activated: {parsed.can_be_activated}")
    typer.echo(f"  can be completed: {parsed.can_be_completed}")
    typer.echo(f"  final: {parsed.is_final_status}")
    typer.echo(f"  active: {parsed.is_active}")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
