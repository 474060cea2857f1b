#!/usr/bin/env python3
"""
PhotoSweep Command Line Interface

Main CLI entry point for PhotoSweep photo library cleanup.
Categorizes exported photo metadata into duplicate, similar, burst,
screenshot, low quality and old photos.
"""

import logging
from typing import Optional

import click

from photosweep import __version__
from photosweep.config import get_config_value, load_config
from photosweep.cli.scan_commands import config_show, groups, scan
from photosweep.utils.logging import setup_console_logging

logger = logging.getLogger(__name__)


@click.group()
@click.option('--config', '-c', type=click.Path(exists=True, dir_okay=False),
              help='Configuration file path')
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose logging')
@click.option('--quiet', '-q', is_flag=True, help='Suppress non-error output')
@click.pass_context
def main(ctx, config: Optional[str] = None, verbose: bool = False, quiet: bool = False):
    """
    PhotoSweep - metadata-only photo library cleanup

    Finds duplicates, bursts, screenshots, low quality and old photos from
    metadata alone (dimensions, file size, capture time, filename), so a
    cleanup can be reviewed without loading a single image.
    """

    # Ensure context object exists
    if ctx.obj is None:
        ctx.obj = {}

    ctx.obj['config'] = load_config(config)

    level = get_config_value(ctx.obj['config'], 'logging.level', 'INFO')
    if verbose:
        level = 'DEBUG'
    elif quiet:
        level = 'ERROR'

    setup_console_logging(
        level=level,
        color=get_config_value(ctx.obj['config'], 'logging.color', True),
        fmt=get_config_value(ctx.obj['config'], 'logging.format'),
    )

    ctx.obj['verbose'] = verbose
    ctx.obj['quiet'] = quiet


main.add_command(scan)
main.add_command(groups)
main.add_command(config_show)


@main.command()
def version():
    """Show PhotoSweep version information."""
    click.echo(f"PhotoSweep v{__version__}")
    click.echo("Metadata-only photo library cleanup")


if __name__ == '__main__':
    main()
