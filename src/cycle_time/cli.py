"""Command-line interface for the cycle time tool."""

import math
import sys
from datetime import datetime, timezone
from typing import Optional

import click
import pandas as pd

from .calculators.cycle_time import CycleTimeCalculator
from .dates import require_timestamp
from .extractors.git_extractor import GitExtractor
from .logging import get_logger, setup_logging
from .models import CycleTimeConfig, CycleTimeResult, ReleaseCycleTime, ReleaseWindow

logger = get_logger(__name__)

LOG_LEVELS = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']


@click.group()
@click.option(
    '--log-level',
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default='WARNING',
    help='Logging level for diagnostics written to stderr',
    envvar='CYCLE_TIME_LOG_LEVEL'
)
@click.option('--log-file', help='Also write logs to this file', envvar='CYCLE_TIME_LOG_FILE')
def cli(log_level: str, log_file: Optional[str]):
    """Release cycle time for tagged Git repositories."""
    setup_logging(level=log_level, log_file=log_file)


@cli.command()
@click.argument('path')
@click.option('--start-date', '--start', 'start_date', required=True,
              help='Start date to calculate cycle time from')
@click.option('--end-date', '--end', 'end_date', help='End date to calculate cycle time to [default: now]')
@click.option('--regexp', '--reg', 'regexp', required=True, help='Regular expression to match release tags')
@click.option('--lightweight', is_flag=True,
              help='Calculate cycle time based on creatordate rather than taggerdate')
@click.option('--workers', type=int, default=4, show_default=True, envvar='CYCLE_TIME_WORKERS',
              help='Concurrent commit date lookups per release')
@click.option('--timeout', type=float, envvar='CYCLE_TIME_GIT_TIMEOUT',
              help='Seconds before a git command is killed')
@click.option('--output-format', type=click.Choice(['table', 'json']), default='table')
@click.option('--details', is_flag=True, help='Show per-release statistics after the summary')
def run(path: str, start_date: str, end_date: Optional[str], regexp: str, lightweight: bool,
        workers: int, timeout: Optional[float], output_format: str, details: bool):
    """Calculate cycle time in the Git repository at PATH."""
    try:
        start = require_timestamp(start_date, 'start-date')
        end = require_timestamp(end_date, 'end-date') if end_date is not None else datetime.now(timezone.utc)
        config = CycleTimeConfig.build(
            regexp,
            ReleaseWindow(start, end),
            lightweight=lightweight,
            max_workers=workers,
            timeout=timeout,
        )

        calculator = CycleTimeCalculator(GitExtractor(path, timeout=config.timeout))
        on_release = _echo_release if output_format == 'table' else None
        result = calculator.run(config, on_release=on_release)

        if output_format == 'json':
            click.echo(result.to_json())
            return

        click.echo(_summary_line(result))
        if details:
            _echo_details(result)

    except Exception as e:
        logger.debug("Cycle time run failed", exc_info=True)
        click.echo(f"✗ Error calculating cycle time: {e}", err=True)
        sys.exit(1)


def _format_number(value: float) -> str:
    """Whole-number rendering that keeps NaN visible."""
    if math.isnan(value):
        return "NaN"
    # round half up; values are never negative
    return str(math.floor(value + 0.5))


def _format_date(value: datetime) -> str:
    return value.strftime("%a %b %d %Y")


def _echo_release(release: ReleaseCycleTime) -> None:
    click.echo(f"[{release.pair.label}]: {_format_number(release.mean_hours)} hour(s)")


def _summary_line(result: CycleTimeResult) -> str:
    window = result.window
    period = f"[{_format_date(window.start)} –– {_format_date(window.end)}]"
    releases = f"{result.release_count} release{'' if result.release_count == 1 else 's'}"
    hours = _format_number(result.cycle_time_hours)
    days = _format_number(result.cycle_time_days)
    return f"Cycle Time for {period} period based on {releases}: {hours} hours ({days} days)"


def _echo_details(result: CycleTimeResult) -> None:
    if not result.releases:
        click.echo("\nNo releases to display for the specified period")
        return

    def hours(value: float) -> str:
        return "N/A" if math.isnan(value) else f"{value:.1f}h"

    data = []
    for release in result.releases:
        data.append({
            'Release': release.pair.later.name,
            'Previous': release.pair.earlier.name,
            'Date': release.pair.later.timestamp.strftime("%Y-%m-%d"),
            'Commits': release.commit_count,
            'Mean': hours(release.mean_hours),
            'p50': hours(release.p50_hours),
            'p90': hours(release.p90_hours),
            'Max': hours(release.max_hours),
        })

    df = pd.DataFrame(data)
    click.echo("\nRelease Cycle Time")
    click.echo("=" * 80)
    click.echo(df.to_string(index=False))


def main():
    """Main entry point for the CLI."""
    cli()


if __name__ == '__main__':
    main()
