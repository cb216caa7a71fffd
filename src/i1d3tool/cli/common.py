"""Shared CLI helpers: probe session setup and result printing."""

from __future__ import annotations

import json
from collections.abc import Iterator
from contextlib import contextmanager

import click

from i1d3tool.core.manager import ProbeManager
from i1d3tool.core.session import ProbeSession
from i1d3tool.transport.hid import HidTransport

REPLUG_NOTICE = "Now unplug and plug in the USB connection"
WRITE_DISABLED_NOTICE = "EEPROM write not enabled, use -w"


@contextmanager
def open_probe(ctx: click.Context) -> Iterator[ProbeManager]:
    """Open the configured probe, running the product-id recovery if needed."""
    config = ctx.obj["config"]
    with HidTransport(config) as transport:
        manager = ProbeManager(ProbeSession(transport))
        if manager.needs_recovery:
            click.echo(
                f"Warning: the product ID is 0x{transport.product_id:04X}. "
                "The internal EEPROM may be corrupt, attempting to reset it.",
                err=True,
            )
            manager.recover()
            raise click.ClickException(
                "Please disconnect then reconnect the USB before re-running this program"
            )
        yield manager


def emit(ctx: click.Context, payload: dict, text: str) -> None:
    """Print a result as JSON or as human-readable text."""
    if ctx.obj.get("json_output"):
        click.echo(json.dumps(payload, indent=2))
    else:
        click.echo(text)


def report_write(ctx: click.Context, written: bool, message: str) -> None:
    """Report a write outcome, including the replug notice after a real write."""
    if ctx.obj.get("json_output"):
        click.echo(json.dumps({"written": written, "message": message}, indent=2))
        return
    if not written:
        click.echo(WRITE_DISABLED_NOTICE)
        return
    click.echo(message)
    click.echo(REPLUG_NOTICE)
