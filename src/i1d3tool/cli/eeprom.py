"""EEPROM backup/restore CLI commands for serial number, regions and signature."""

from __future__ import annotations

import click

from i1d3tool.cli.common import emit, open_probe, report_write
from i1d3tool.core.checksum import HardwareRevision
from i1d3tool.core.eeprom import EXTERNAL, INTERNAL
from i1d3tool.core.fields import SIGNATURE_LENGTH
from i1d3tool.storage.backup import ensure_writable, load_image, save_image

_force_option = click.option("-f", "--force", is_flag=True, help="Overwrite an existing file")
_enable_write_option = click.option(
    "-w", "--enable-write", is_flag=True, help="Actually write to the probe EEPROM"
)
_filename_argument = click.argument("filename", type=click.Path(dir_okay=False))


@click.group()
def serial():
    """Serial number read/write."""
    pass


@serial.command("read")
@click.pass_context
def serial_read(ctx: click.Context) -> None:
    """Print the probe serial number."""
    with open_probe(ctx) as probe:
        number = probe.read_serial_number()
    emit(ctx, number.model_dump(), number.text)


@serial.command("write")
@click.argument("serial_number")
@_enable_write_option
@click.pass_context
def serial_write(ctx: click.Context, serial_number: str, enable_write: bool) -> None:
    """Write SERIAL_NUMBER into the internal EEPROM."""
    with open_probe(ctx) as probe:
        probe.write_serial_number(serial_number, commit=enable_write)
    report_write(
        ctx, enable_write,
        f"Serial number {serial_number} successfully written to the internal eeprom",
    )


@click.group()
def internal():
    """Internal EEPROM backup/restore."""
    pass


@internal.command("read")
@_filename_argument
@_force_option
@click.pass_context
def internal_read(ctx: click.Context, filename: str, force: bool) -> None:
    """Save the internal EEPROM to FILENAME."""
    ensure_writable(filename, overwrite=force)
    with open_probe(ctx) as probe:
        image = probe.read_internal()
    save_image(filename, image, overwrite=force)
    emit(
        ctx, {"file": filename, "size": len(image)},
        f"Internal eeprom memory written to file {filename}",
    )


@internal.command("write")
@_filename_argument
@_enable_write_option
@click.pass_context
def internal_write(ctx: click.Context, filename: str, enable_write: bool) -> None:
    """Load FILENAME into the internal EEPROM."""
    image = load_image(filename, INTERNAL.size)
    with open_probe(ctx) as probe:
        written = probe.write_internal(image, commit=enable_write)
    report_write(
        ctx, written, f"File {filename} successfully written to the internal eeprom"
    )


@click.group()
def external():
    """External EEPROM backup/restore."""
    pass


@external.command("read")
@_filename_argument
@_force_option
@click.pass_context
def external_read(ctx: click.Context, filename: str, force: bool) -> None:
    """Save the external EEPROM to FILENAME."""
    ensure_writable(filename, overwrite=force)
    with open_probe(ctx) as probe:
        image = probe.read_external()
    save_image(filename, image, overwrite=force)
    emit(
        ctx, {"file": filename, "size": len(image)},
        f"External eeprom memory written to file {filename}",
    )


@external.command("write")
@_filename_argument
@_enable_write_option
@click.pass_context
def external_write(ctx: click.Context, filename: str, enable_write: bool) -> None:
    """Load FILENAME into the external EEPROM."""
    image = load_image(filename, EXTERNAL.size)
    with open_probe(ctx) as probe:
        written = probe.write_external(image, commit=enable_write)
    report_write(
        ctx, written, f"File {filename} successfully written to the external eeprom"
    )


@click.group()
def signature():
    """Signature block read/write."""
    pass


@signature.command("read")
@_filename_argument
@_force_option
@click.pass_context
def signature_read(ctx: click.Context, filename: str, force: bool) -> None:
    """Save the signature block to FILENAME."""
    ensure_writable(filename, overwrite=force)
    with open_probe(ctx) as probe:
        block = probe.read_signature()
    save_image(filename, block, overwrite=force)
    emit(
        ctx, {"file": filename, "size": len(block)},
        f"Signature written to file {filename}",
    )


@signature.command("write")
@_filename_argument
@_enable_write_option
@click.option(
    "--revision",
    type=click.Choice([r.value for r in HardwareRevision]),
    default=HardwareRevision.REV2.value,
    show_default=True,
    help="Hardware revision used to validate and recompute the checksum",
)
@click.pass_context
def signature_write(
    ctx: click.Context, filename: str, enable_write: bool, revision: str
) -> None:
    """Patch the external EEPROM signature with FILENAME."""
    block = load_image(filename, SIGNATURE_LENGTH)
    with open_probe(ctx) as probe:
        probe.write_signature(block, HardwareRevision(revision), commit=enable_write)
    report_write(
        ctx, enable_write,
        f"File {filename} signature successfully written to the external eeprom",
    )
