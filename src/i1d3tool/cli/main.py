"""i1d3 CLI - backup, restore and re-sign i1Display Pro probes."""

from __future__ import annotations

import json

import click

from i1d3tool.config import load_config
from i1d3tool.exceptions import I1d3Error
from i1d3tool.utils.logging import setup_logging


class StageError(click.ClickException):
    """A library error shown as ``Error [<stage>]: <message>``."""

    def __init__(self, stage: str, message: str) -> None:
        super().__init__(message)
        self.stage = stage

    def show(self, file=None) -> None:
        click.echo(f"Error [{self.stage}]: {self.format_message()}", file=file, err=True)


class I1d3Group(click.Group):
    """Root group that reports library errors with their failure stage."""

    def invoke(self, ctx: click.Context):
        try:
            return super().invoke(ctx)
        except I1d3Error as exc:
            raise StageError(str(exc.stage), str(exc)) from exc


@click.group(cls=I1d3Group)
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.option("--json-output", is_flag=True, help="Output in JSON format")
@click.option("--timeout", type=float, default=None, help="Per-frame timeout in seconds")
@click.option("--device-path", default=None, help="HID device path (default: first probe found)")
@click.pass_context
def cli(
    ctx: click.Context, debug: bool, json_output: bool,
    timeout: float | None, device_path: str | None,
) -> None:
    """i1d3 - i1Display Pro EEPROM utility."""
    ctx.ensure_object(dict)
    ctx.obj["debug"] = debug
    ctx.obj["json_output"] = json_output
    setup_logging(level="DEBUG" if debug else "WARNING", json_output=json_output)
    ctx.obj["config"] = load_config(timeout=timeout, path=device_path)


@cli.command()
@click.pass_context
def scan(ctx: click.Context) -> None:
    """List connected i1Display Pro probes."""
    from i1d3tool.transport.hid import find_probes

    probes = find_probes(ctx.obj["config"])

    if ctx.obj.get("json_output"):
        click.echo(json.dumps([p.model_dump() for p in probes], indent=2))
        return
    if not probes:
        click.echo("No probes found.")
        return
    click.echo(f"Found {len(probes)} probe(s):")
    for i, probe in enumerate(probes):
        click.echo(
            f"  [{i}] {probe.vendor_id:04X}:{probe.product_id:04X} "
            f"{probe.product or '-'} serial={probe.serial_number or '-'} ({probe.path})"
        )


@cli.command()
@click.pass_context
def version(ctx: click.Context) -> None:
    """Read the firmware version and identify the probe variant."""
    from i1d3tool.cli.common import open_probe

    with open_probe(ctx) as probe:
        info = probe.get_info()

    if ctx.obj.get("json_output"):
        click.echo(json.dumps(info.model_dump(), indent=2))
    else:
        click.echo(info.firmware)
        click.echo(f"I1D3 {info.variant}" if info.variant else info.variant_label)


@cli.command()
@click.argument("filename", type=click.Path(dir_okay=False))
@click.pass_context
def checksum(ctx: click.Context, filename: str) -> None:
    """Check the checksum of an external EEPROM backup file."""
    from i1d3tool.core import checksum as cs
    from i1d3tool.core.eeprom import EXTERNAL
    from i1d3tool.models.eeprom import ChecksumReport
    from i1d3tool.storage.backup import load_image

    image = load_image(filename, EXTERNAL.size)
    matched = cs.match_revision(image)
    report = ChecksumReport(
        stored=cs.stored_checksum(image),
        rev1=cs.checksum(image, cs.HardwareRevision.REV1),
        rev2=cs.checksum(image, cs.HardwareRevision.REV2),
        matched=str(matched) if matched else None,
    )

    if ctx.obj.get("json_output"):
        click.echo(json.dumps(report.model_dump(), indent=2))
    else:
        click.echo(f"Stored:   0x{report.stored:04X}")
        click.echo(f"Rev2:     0x{report.rev2:04X}")
        click.echo(f"Rev1:     0x{report.rev1:04X}")
        click.echo(f"Matches:  {report.matched or 'none'}")
    if not report.valid:
        ctx.exit(1)


# Register subcommand groups
from i1d3tool.cli.eeprom import external, internal, serial, signature  # noqa: E402

cli.add_command(serial)
cli.add_command(internal)
cli.add_command(external)
cli.add_command(signature)


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
