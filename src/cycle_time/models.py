"""Data models for the cycle time tool."""

import json
import math
import re
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Tuple

from .errors import InputError

SECONDS_PER_HOUR = 3600.0
HOURS_PER_DAY = 24.0


def _nullable(value: float) -> Optional[float]:
    """Map NaN to None for JSON output."""
    return None if math.isnan(value) else value


@dataclass(frozen=True)
class TagRecord:
    """A tag name with the date git reported for it."""

    name: str
    timestamp: Optional[datetime]  # None when the date text did not parse

    def is_after(self, instant: datetime) -> bool:
        """True if the tag is dated strictly after ``instant``; False when undated."""
        return self.timestamp is not None and self.timestamp > instant

    def is_before(self, instant: datetime) -> bool:
        """True if the tag is dated strictly before ``instant``; False when undated."""
        return self.timestamp is not None and self.timestamp < instant

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "name": self.name,
            "timestamp": self.timestamp.isoformat() if self.timestamp else None,
        }


@dataclass(frozen=True)
class ReleasePair:
    """Two consecutive releases; ``later`` is None for the last release."""

    earlier: TagRecord
    later: Optional[TagRecord]

    @property
    def label(self) -> str:
        later = self.later.name if self.later else ""
        return f"{self.earlier.name}-{later}"


@dataclass(frozen=True)
class ReleaseWindow:
    """Closed ``[start, end]`` interval used to admit release pairs."""

    start: datetime
    end: datetime

    def __post_init__(self):
        if self.start > self.end:
            raise InputError(
                f"start-date {self.start.isoformat()} is after end-date {self.end.isoformat()}"
            )

    def admits(self, pair: ReleasePair) -> bool:
        """
        Decide whether a release pair counts towards the period.

        Only the later release is checked, and only against ``start``: tags
        after ``end`` never reach the pairer. Undated releases are never
        admitted.
        """
        later = pair.later
        if later is None or later.timestamp is None:
            return False
        return not later.is_before(self.start)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {"start": self.start.isoformat(), "end": self.end.isoformat()}


@dataclass(frozen=True)
class ReleaseCycleTime:
    """Cycle time of the commits that first shipped in ``pair.later``."""

    pair: ReleasePair
    durations: Tuple[float, ...]  # seconds
    mean_hours: float
    p50_hours: float = math.nan
    p90_hours: float = math.nan
    max_hours: float = math.nan

    @property
    def commit_count(self) -> int:
        return len(self.durations)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "previous_release": self.pair.earlier.to_dict(),
            "release": self.pair.later.to_dict() if self.pair.later else None,
            "commit_count": self.commit_count,
            "cycle_time_hours": _nullable(self.mean_hours),
            "statistics": {
                "p50": _nullable(self.p50_hours),
                "p90": _nullable(self.p90_hours),
                "max": _nullable(self.max_hours),
            },
        }


@dataclass(frozen=True)
class CycleTimeResult:
    """Outcome of one cycle time run."""

    cycle_time_hours: float  # NaN when no commit was found in the period
    release_count: int
    window: Optional[ReleaseWindow] = None
    releases: Tuple[ReleaseCycleTime, ...] = ()

    @property
    def cycle_time_days(self) -> float:
        return self.cycle_time_hours / HOURS_PER_DAY

    @property
    def has_data(self) -> bool:
        """False for the "no data" outcome, which is not an error."""
        return not math.isnan(self.cycle_time_hours)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "period": self.window.to_dict() if self.window else None,
            "release_count": self.release_count,
            "cycle_time_hours": _nullable(self.cycle_time_hours),
            "cycle_time_days": _nullable(self.cycle_time_days),
            "releases": [release.to_dict() for release in self.releases],
        }

    def to_json(self) -> str:
        """Convert to JSON string."""
        return json.dumps(self.to_dict(), indent=2)


@dataclass
class CycleTimeConfig:
    """Settings for a single cycle time run."""

    pattern: re.Pattern
    window: ReleaseWindow
    lightweight: bool = False  # sort and date tags by creatordate instead of taggerdate
    max_workers: int = 4
    timeout: Optional[float] = None  # seconds per git command

    @classmethod
    def build(
        cls,
        regexp: Optional[str],
        window: ReleaseWindow,
        lightweight: bool = False,
        max_workers: int = 4,
        timeout: Optional[float] = None,
    ) -> "CycleTimeConfig":
        """Compile the release pattern and validate the settings."""
        if not regexp:
            raise InputError("No regular expression to match release tags provided")
        try:
            pattern = re.compile(regexp)
        except re.error as e:
            raise InputError(f"Invalid release tag pattern {regexp!r}: {e}")
        if max_workers < 1:
            raise InputError(f"workers must be at least 1, got {max_workers}")
        if timeout is not None and timeout <= 0:
            raise InputError(f"timeout must be positive, got {timeout}")
        return cls(
            pattern=pattern,
            window=window,
            lightweight=lightweight,
            max_workers=max_workers,
            timeout=timeout,
        )

    @property
    def sort_field(self) -> str:
        return "creatordate" if self.lightweight else "taggerdate"
