#!/usr/bin/env python
"""
reportstudio CLI Tool
Command-line interface for exporting reports
"""

import click
import json
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import yaml

from reportstudio import __version__
from reportstudio.config import Config, config as global_config
from reportstudio.export import ExportEngine
from reportstudio.utils.logger import get_logger, setup_logging

logger = get_logger(__name__)

FORMATS = ExportEngine.supported_formats()


def load_document(path: str) -> Dict[str, Any]:
    """Read a ``{report, content}`` document from JSON or YAML"""
    source = Path(path)
    with open(source, 'r', encoding='utf-8') as f:
        if source.suffix.lower() in ('.yaml', '.yml'):
            data = yaml.safe_load(f) or {}
        else:
            data = json.load(f)

    if 'report' not in data or 'content' not in data:
        raise click.BadParameter("document must contain 'report' and 'content'", param_hint='INPUT')
    return data


@click.group()
@click.version_option(version=__version__)
def cli():
    """
    📄 reportstudio - Multi-format report export

    报告多格式导出引擎
    """
    pass


@cli.command()
@click.argument('input', type=click.Path(exists=True, dir_okay=False))
@click.option('--format', '-f', 'formats', multiple=True, type=click.Choice(FORMATS + ['all']),
              default=('pdf',), show_default=True, help='Export format (repeatable)')
@click.option('--output-dir', '-o', type=click.Path(file_okay=False), help='Output directory')
@click.option('--page-size', type=click.Choice(['A4', 'A3', 'Letter']), help='Paper size')
@click.option('--margins', type=click.Choice(['normal', 'narrow', 'wide']), help='Margin profile')
@click.option('--orientation', type=click.Choice(['portrait', 'landscape']), help='Page orientation')
@click.option('--cover/--no-cover', default=None, help='Include a cover page')
@click.option('--toc/--no-toc', default=None, help='Include a table of contents')
@click.option('--config', '-c', 'config_file', type=click.Path(exists=True, dir_okay=False),
              help='YAML configuration file')
@click.option('--strict', is_flag=True, help='Abort on document validation errors')
def export(input: str, formats: Tuple[str, ...], output_dir: Optional[str], page_size: Optional[str],
           margins: Optional[str], orientation: Optional[str], cover: Optional[bool], toc: Optional[bool],
           config_file: Optional[str], strict: bool):
    """Export a report document to one or more formats"""

    settings = Config.from_file(config_file) if config_file else global_config
    setup_logging(settings)
    engine = ExportEngine(config=settings, strict_mode=strict)
    document = load_document(input)

    options = engine.default_options().model_dump()
    overrides = {
        'page_size': page_size,
        'margins': margins,
        'orientation': orientation,
        'include_cover_page': cover,
        'include_table_of_contents': toc,
    }
    options.update({key: value for key, value in overrides.items() if value is not None})

    target_dir = Path(output_dir) if output_dir else settings.defaults.output_dir
    target_dir.mkdir(parents=True, exist_ok=True)

    selected = FORMATS if 'all' in formats else list(dict.fromkeys(formats))
    failures = 0

    for export_format in selected:
        click.echo(f"📄 Exporting {export_format.upper()}...")
        result = engine.export(document['report'], document['content'], export_format, options)

        if not result.success:
            failures += 1
            logger.error(f"{export_format} export failed: {result.error}")
            click.echo(f"❌ Error: {result.error}", err=True)
            continue

        output_path = target_dir / result.filename
        output_path.write_bytes(result.content)
        click.echo(f"✅ Saved to {output_path}")

    if failures:
        raise click.Abort()


@cli.command()
def formats():
    """List supported export formats"""

    click.echo("\n📦 Supported Formats:\n")
    for export_format in FORMATS:
        click.echo(f"    ✓ {export_format}")
    click.echo(f"\nTotal: {len(FORMATS)} formats\n")


if __name__ == '__main__':
    cli()
