"""CLI interface for the exercise catalog duplicate finder."""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path

import click

from .config import MODE_PRESETS, ConfigurationError, DetectionConfig
from .engine import detect_duplicates, parse_records
from .logging import LOG_FORMAT_ENV, LOG_FORMATS, setup_logging
from .output import (
    CatalogLoadError,
    load_catalog,
    render_collisions,
    render_text,
    to_json_report,
    write_json,
)
from .report import find_key_collisions

logger = logging.getLogger(__name__)


def _load_or_exit(catalog: Path) -> list:
    try:
        return load_catalog(catalog)
    except CatalogLoadError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)


@click.group()
@click.option(
    "--log-format",
    type=click.Choice(list(LOG_FORMATS)),
    envvar=LOG_FORMAT_ENV,
    default="text",
    show_default=True,
    help="Log output format.",
)
@click.option("--verbose", "-v", is_flag=True, help="Log per-block detail.")
def main(log_format: str, verbose: bool):
    """Find likely duplicate exercises in a catalog."""
    setup_logging(log_format, logging.DEBUG if verbose else logging.WARNING)


@main.command()
@click.argument("catalog", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--mode",
    type=click.Choice(list(MODE_PRESETS.keys())),
    help="Heuristic preset (default: all, or the config file's setting).",
)
@click.option(
    "--config", "config_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="JSON file with detection settings.",
)
@click.option("--jaccard-threshold", type=float, help="Word-set similarity needed for WordSaladMatch.")
@click.option("--substring-ratio", type=float, help="Shorter/longer length ratio for SubstringContainment.")
@click.option("--substring-min-length", type=int, help="Minimum shorter-name length for SubstringContainment.")
@click.option("--workers", type=int, help="Threads used to classify blocks.")
@click.option(
    "--format", "output_format",
    type=click.Choice(["text", "json"]),
    default="text",
    show_default=True,
)
@click.option("--output", "-o", type=click.Path(dir_okay=False, path_type=Path), help="Write the report to a file.")
def scan(
    catalog: Path,
    mode: str | None,
    config_file: Path | None,
    jaccard_threshold: float | None,
    substring_ratio: float | None,
    substring_min_length: int | None,
    workers: int | None,
    output_format: str,
    output: Path | None,
):
    """Run duplicate detection over a JSON catalog."""
    try:
        config = DetectionConfig.from_file(config_file) if config_file else DetectionConfig()
        if mode:
            config = config.with_overrides(enabled_reasons=MODE_PRESETS[mode])
        config = config.with_overrides(
            jaccard_threshold=jaccard_threshold,
            substring_length_ratio=substring_ratio,
            substring_min_length=substring_min_length,
            workers=workers,
        )
    except ConfigurationError as exc:
        click.echo(f"Error: invalid configuration ({exc})", err=True)
        sys.exit(1)

    entries = _load_or_exit(catalog)
    logger.info("Loaded %d catalog entries from %s", len(entries), catalog)
    result = detect_duplicates(entries, config)

    if output_format == "json":
        report = to_json_report(result)
        if output:
            n = write_json(report, output)
            click.echo(f"Wrote {n} findings to {output}")
        else:
            click.echo(json.dumps(report, indent=2, ensure_ascii=False))
        return

    text = render_text(result)
    if output:
        output.write_text(text + "\n", encoding="utf-8")
        click.echo(f"Wrote {len(result.findings)} findings to {output}")
    else:
        click.echo(text)


@main.command()
@click.argument("catalog", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def audit(catalog: Path):
    """Report exact duplicate names and slugs."""
    records, invalid = parse_records(_load_or_exit(catalog))
    click.echo(f"Total exercises: {len(records)}")
    if invalid:
        click.echo(f"Skipped {len(invalid)} invalid records.")
    click.echo()
    click.echo(render_collisions(find_key_collisions(records)))


@main.command("list-modes")
def list_modes():
    """List available heuristic presets."""
    for name, reasons in MODE_PRESETS.items():
        click.echo(f"{name}:")
        for reason in reasons:
            click.echo(f"  {reason}")
        click.echo()


if __name__ == "__main__":
    main()
