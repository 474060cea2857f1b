"""
PhotoSweep scan CLI commands.
Runs the detection pipeline over exported photo metadata.
"""

import asyncio
import json
import sys
from typing import List, Optional

import click
import yaml
from tabulate import tabulate
from tqdm import tqdm

from photosweep.config import DetectionSettings, get_config_value
from photosweep.detection import (
    CleanupMode,
    PhotoDetectionPipeline,
    get_duplicate_groups,
    select_for_cleanup,
    summarize,
)
from photosweep.detection.models import CategorizedPhoto, PhotoMetadata
from photosweep.exceptions import ConfigError, MetadataError
from photosweep.io.metadata import build_results_document, load_photo_records, write_results
from photosweep.utils.logging import ScanStats


def _format_size(size: float) -> str:
    if abs(size) < 1024:
        return f"{size:.0f} B"
    for unit in ('KB', 'MB'):
        size /= 1024
        if abs(size) < 1024:
            return f"{size:.1f} {unit}"
    return f"{size / 1024:.1f} GB"


def _load_settings(ctx) -> DetectionSettings:
    config = ctx.obj.get('config', {}) if ctx.obj else {}
    try:
        return DetectionSettings.from_config(config)
    except ConfigError as e:
        click.echo(f"❌ Invalid configuration: {e}", err=True)
        ctx.exit(1)


def _load_photos(ctx, path: str) -> List[PhotoMetadata]:
    try:
        return load_photo_records(path)
    except MetadataError as e:
        click.echo(f"❌ {e}", err=True)
        ctx.exit(1)


def _run_pipeline(photos: List[PhotoMetadata], settings: DetectionSettings,
                  show_progress: bool, stats: ScanStats,
                  reference_time_ms: Optional[int] = None) -> List[CategorizedPhoto]:
    pipeline = PhotoDetectionPipeline(settings)

    if not show_progress:
        return asyncio.run(pipeline.run(photos, reference_time_ms=reference_time_ms, stats=stats))

    with tqdm(total=100, desc="Analyzing photos", unit="%", file=sys.stderr) as bar:
        def on_progress(percent: int):
            bar.update(percent - bar.n)

        return asyncio.run(pipeline.run(photos, on_progress, reference_time_ms, stats))


@click.command('scan')
@click.argument('input_file', type=click.Path(exists=True, dir_okay=False))
@click.option('--output', '-o', type=click.Path(dir_okay=False),
              help='Write categorized photos to this JSON file')
@click.option('--mode', '-m', type=click.Choice([m.value for m in CleanupMode]), default='all',
              help='Cleanup queue to list')
@click.option('--format', 'output_format', type=click.Choice(['summary', 'table', 'json']),
              default='summary', help='Output format')
@click.option('--limit', '-n', type=int, default=20, help='Rows to show in table format')
@click.option('--now', 'reference_time', type=int,
              help='Reference time in epoch milliseconds for age checks')
@click.option('--progress/--no-progress', default=True, help='Show a progress bar')
@click.pass_context
def scan(ctx, input_file: str, output: Optional[str], mode: str, output_format: str,
         limit: int, reference_time: Optional[int], progress: bool):
    """
    Categorize photos for cleanup.

    Reads photo metadata records (id, uri, width, height, size,
    creationTime) and tags each photo as duplicate, similar, burst,
    screenshot, low quality or old.

    INPUT_FILE: JSON list of photo records, or an object with a "photos" list
    """
    quiet = ctx.obj.get('quiet', False) if ctx.obj else False
    settings = _load_settings(ctx)
    photos = _load_photos(ctx, input_file)
    stats = ScanStats()

    categorized = _run_pipeline(photos, settings, progress and not quiet, stats, reference_time)
    large_file_bytes = get_config_value(ctx.obj.get('config', {}) if ctx.obj else {},
                                        'cleanup.large_file_bytes', 5 * 1024 * 1024)
    queue = select_for_cleanup(categorized, mode,
                               reference_time_ms=reference_time,
                               large_file_bytes=large_file_bytes)
    summary = summarize(categorized)

    if output:
        write_results(output, categorized, get_duplicate_groups(categorized), summary)
        if not quiet:
            click.echo(f"💾 Results written to {output}")

    if output_format == 'json':
        click.echo(json.dumps(build_results_document(queue, summary=summary), indent=2, default=str))
        return

    if output_format == 'table':
        rows = [
            [p.id, str(p.uri).split('/')[-1], f"{p.width}x{p.height}", _format_size(p.size),
             ', '.join(c.value for c in p.categories), p.duplicate_count, p.similar_count]
            for p in queue[:limit]
        ]
        click.echo(tabulate(rows, headers=['ID', 'File', 'Size', 'Bytes', 'Categories', 'Dups', 'Similar']))
        if len(queue) > limit:
            click.echo(f"... and {len(queue) - limit} more")
        return

    if not quiet:
        click.echo(f"\n🧹 Cleanup Summary ({mode})")
        click.echo("=" * 30)
        click.echo(f"Total Photos: {summary['total_photos']}")
        click.echo(f"Total Size: {_format_size(summary['total_size'])}")
        for category, count in summary['category_counts'].items():
            click.echo(f"  {category}: {count}")
        click.echo(f"Duplicate Groups: {summary['duplicate_groups']}")
        click.echo(f"Reclaimable: {_format_size(summary['reclaimable_size'])}")
        click.echo(f"Queued for review: {len(queue)}")
        if ctx.obj and ctx.obj.get('verbose'):
            click.echo(stats.format_summary())


@click.command('groups')
@click.argument('input_file', type=click.Path(exists=True, dir_okay=False))
@click.option('--format', 'output_format', type=click.Choice(['summary', 'json']), default='summary',
              help='Output format')
@click.pass_context
def groups(ctx, input_file: str, output_format: str):
    """
    List groups of duplicate photos.

    INPUT_FILE: JSON list of photo records, or an object with a "photos" list
    """
    settings = _load_settings(ctx)
    photos = _load_photos(ctx, input_file)
    categorized = _run_pipeline(photos, settings, False, ScanStats())
    duplicate_groups = get_duplicate_groups(categorized)

    if output_format == 'json':
        click.echo(json.dumps([g.to_dict() for g in duplicate_groups], indent=2, default=str))
        return

    if not duplicate_groups:
        click.echo("No duplicate groups found")
        return

    for group in duplicate_groups:
        keeper = group.keeper
        click.echo(f"Group {group.group_id + 1}: {group.count} photos, "
                   f"{_format_size(group.reclaimable_size)} reclaimable")
        for photo in group.photos:
            marker = '*' if photo is keeper else ' '
            click.echo(f"  {marker} {photo.id}  {photo.uri}")


@click.command('config-show')
@click.pass_context
def config_show(ctx):
    """Show the effective detection settings."""
    settings = _load_settings(ctx)
    values = {name: getattr(settings, name) for name in settings.__dataclass_fields__}
    values['screenshot_resolutions'] = [list(r) for r in settings.screenshot_resolutions]
    click.echo(yaml.safe_dump({'detection': values}, default_flow_style=False, sort_keys=False))
