"""Release cycle time calculator.

Cycle time is the time between a commit being committed and the first tagged
release that contains it. Release tags are selected by a pattern, paired with
the release before them, and every commit new in the later release of a pair
contributes one duration.
"""

import math
import re
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from typing import Callable, Dict, Iterable, Iterator, List, Optional, Protocol, Sequence

import numpy as np

from ..dates import parse_timestamp
from ..errors import ExternalCommandError
from ..logging import get_logger
from ..models import (
    SECONDS_PER_HOUR,
    CycleTimeConfig,
    CycleTimeResult,
    ReleaseCycleTime,
    ReleasePair,
    ReleaseWindow,
    TagRecord,
)

logger = get_logger(__name__)

ReleaseCallback = Callable[[ReleaseCycleTime], None]


class ReleaseSource(Protocol):
    """Where tag listings, cherry output and commit dates come from."""

    def list_tags(self, sort_field: str) -> str:
        ...

    def diff_commits(self, upstream: str, head: str) -> str:
        ...

    def commit_timestamp(self, sha: str) -> str:
        ...


def parse_tag_line(line: str) -> Optional[TagRecord]:
    """
    Parse one ``"<tag> <date>"`` line.

    Returns:
        None for a blank line. Otherwise a TagRecord whose timestamp is None
        when the date part does not parse.
    """
    line = line.strip()
    if not line:
        return None

    parts = line.split(None, 1)
    name = parts[0]
    date_text = parts[1] if len(parts) > 1 else ""
    timestamp = parse_timestamp(date_text)
    if timestamp is None:
        logger.debug(f"Tag {name} has no usable date: {date_text!r}")
    return TagRecord(name=name, timestamp=timestamp)


def select_releases(lines: Iterable[str], pattern: re.Pattern, end: datetime) -> List[TagRecord]:
    """
    Keep the release tags from a chronologically sorted tag listing.

    A tag is a release when its name matches ``pattern`` and it is not dated
    after ``end``. Input order is preserved.
    """
    releases = []
    for line in lines:
        record = parse_tag_line(line)
        if record is None:
            continue
        if record.is_after(end):
            continue
        if pattern.search(record.name):
            releases.append(record)
    return releases


def pair_releases(releases: Sequence[TagRecord]) -> List[ReleasePair]:
    """Pair each release with the next one; the last release pairs with None."""
    followers = list(releases[1:]) + [None]
    return [ReleasePair(earlier, later) for earlier, later in zip(releases, followers)]


def admitted_pairs(pairs: Iterable[ReleasePair], window: ReleaseWindow) -> Iterator[ReleasePair]:
    """Yield the pairs whose later release falls in the window, in order."""
    for pair in pairs:
        if window.admits(pair):
            yield pair
        else:
            logger.debug(f"Skipping release pair {pair.label}")


def parse_new_commits(cherry_output: str) -> List[str]:
    """Return the SHAs ``git cherry`` marks as new (``+``), in listing order."""
    shas = []
    for line in cherry_output.splitlines():
        if not line.startswith("+"):
            continue
        tokens = line.split()
        if len(tokens) < 2:
            raise ExternalCommandError(f"Malformed git cherry line: {line!r}")
        shas.append(tokens[1])
    return shas


def mean(values: Sequence[float]) -> float:
    """Arithmetic mean, NaN for an empty sequence."""
    if len(values) == 0:
        return math.nan
    return float(np.mean(values))


def to_hours(seconds: float) -> float:
    """Seconds to hours. NaN comes back as ``math.nan`` itself, which compares equal inside dataclasses."""
    if math.isnan(seconds):
        return math.nan
    return seconds / SECONDS_PER_HOUR


def summarize(values: Sequence[float]) -> Dict[str, float]:
    """Mean, median, 90th percentile and maximum; all NaN when empty."""
    if len(values) == 0:
        return {"mean": math.nan, "p50": math.nan, "p90": math.nan, "max": math.nan}
    array = np.array(values, dtype=float)
    return {
        "mean": mean(values),
        "p50": float(np.percentile(array, 50)),
        "p90": float(np.percentile(array, 90)),
        "max": float(np.max(array)),
    }


class CycleTimeCalculator:
    """Calculates release cycle time from a release source."""

    def __init__(self, source: ReleaseSource):
        """
        Initialize the calculator.

        Args:
            source: Provider of tag listings, cherry output and commit dates
        """
        self.source = source

    def run(self, config: CycleTimeConfig, on_release: Optional[ReleaseCallback] = None) -> CycleTimeResult:
        """Fetch the tag listing from the source and calculate cycle time."""
        tags = self.source.list_tags(config.sort_field)
        return self.calculate(tags.splitlines(), config, on_release)

    def calculate(
        self,
        tag_lines: Iterable[str],
        config: CycleTimeConfig,
        on_release: Optional[ReleaseCallback] = None,
    ) -> CycleTimeResult:
        """
        Calculate cycle time for the releases in the configured window.

        Release pairs are processed one after another. ``on_release`` is
        called with each pair's result as soon as it is known.

        Args:
            tag_lines: ``"<tag> <date>"`` lines sorted oldest first
            config: Pattern and window to use
            on_release: Optional callback receiving each ReleaseCycleTime

        Returns:
            CycleTimeResult with the mean over every new commit in the period
        """
        window = config.window
        logger.info(
            f"Calculating cycle time from {window.start.isoformat()} to {window.end.isoformat()} "
            f"for tags matching {config.pattern.pattern!r}"
        )

        releases = select_releases(tag_lines, config.pattern, window.end)
        logger.info(f"Found {len(releases)} release tags")

        all_durations: List[float] = []
        release_results = []
        for pair in admitted_pairs(pair_releases(releases), window):
            durations = self.extract_durations(pair, max_workers=config.max_workers)
            all_durations.extend(durations)

            stats = summarize(durations)
            release = ReleaseCycleTime(
                pair=pair,
                durations=tuple(durations),
                mean_hours=to_hours(stats["mean"]),
                p50_hours=to_hours(stats["p50"]),
                p90_hours=to_hours(stats["p90"]),
                max_hours=to_hours(stats["max"]),
            )
            release_results.append(release)
            logger.info(
                f"Release {pair.label}: {release.commit_count} new commits, "
                f"{release.mean_hours:.1f} hours"
            )
            if on_release:
                on_release(release)

        result = CycleTimeResult(
            cycle_time_hours=to_hours(mean(all_durations)),
            release_count=len(release_results),
            window=window,
            releases=tuple(release_results),
        )
        if not result.has_data:
            logger.warning("No commits found for releases in the period")
        return result

    def extract_durations(self, pair: ReleasePair, max_workers: int = 1) -> List[float]:
        """
        Seconds between each commit new in ``pair.later`` and that release.

        Commit dates are looked up on up to ``max_workers`` threads. Durations
        are returned in the order git cherry lists the commits.
        """
        later = pair.later
        if later is None or later.timestamp is None:
            raise ValueError(f"Release pair {pair.label} has no dated later release")

        shas = parse_new_commits(self.source.diff_commits(pair.earlier.name, later.name))
        logger.debug(f"{len(shas)} new commits in {later.name}")
        if not shas:
            return []

        if max_workers > 1 and len(shas) > 1:
            with ThreadPoolExecutor(max_workers=min(max_workers, len(shas))) as executor:
                timestamps = list(executor.map(self._commit_time, shas))
        else:
            timestamps = [self._commit_time(sha) for sha in shas]

        return [abs((later.timestamp - committed).total_seconds()) for committed in timestamps]

    def _commit_time(self, sha: str) -> datetime:
        text = self.source.commit_timestamp(sha)
        committed = parse_timestamp(text)
        if committed is None:
            raise ExternalCommandError(f"Couldn't parse commit date of {sha}: {text!r}")
        return committed
