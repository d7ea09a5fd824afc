"""Retention policy: the ordered chain of periods.

Each period has a fixed age threshold (``keep_count * unit_seconds``) after
which an artifact must leave the tier, and a calendar granularity used to
bucket artifacts promoted *into* it. Thresholds are plain seconds and are
not calendar aware (a "month" is 28 days, a "year" 365).
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Iterable, Optional, Sequence, Tuple

from backup_rotate.config.settings import PeriodSettings
from backup_rotate.exceptions import ConfigurationError

SECONDS_PER_DAY = 86400
SECONDS_PER_WEEK = 604800
SECONDS_PER_MONTH = 2419200
SECONDS_PER_YEAR = 31536000

GRANULARITIES = ("day", "week", "month", "year")

# Granularity assumed when a configured period does not name one
DEFAULT_GRANULARITY = {
    "daily": "day",
    "weekly": "week",
    "monthly": "month",
    "yearly": "year",
}

Window = Tuple[int, ...]


def window_of(granularity: str, timestamp: float) -> Window:
    """Calendar bucket of a POSIX timestamp, in local time.

    week is the ISO week, so (2024, 38) covers 2024-09-16 to 2024-09-22.
    """
    moment = datetime.fromtimestamp(timestamp)
    if granularity == "day":
        return (moment.year, moment.month, moment.day)
    if granularity == "week":
        iso = moment.isocalendar()
        return (iso[0], iso[1])
    if granularity == "month":
        return (moment.year, moment.month)
    if granularity == "year":
        return (moment.year,)
    raise ValueError(f"Unknown granularity: {granularity}")


@dataclass(frozen=True)
class Period:
    """One retention tier.

    Attributes:
        name: Directory name of the tier (daily, weekly, ...)
        unit_seconds: Length of one period
        keep_count: Periods an artifact may stay in the tier
        granularity: Calendar window for artifacts promoted into this tier
    """

    name: str
    unit_seconds: int
    keep_count: int
    granularity: str

    @property
    def max_age(self) -> int:
        """Seconds after which an artifact must leave this tier."""
        return self.keep_count * self.unit_seconds

    def window(self, timestamp: float) -> Window:
        return window_of(self.granularity, timestamp)


DEFAULT_PERIODS = (
    Period("daily", SECONDS_PER_DAY, 14, "day"),
    Period("weekly", SECONDS_PER_WEEK, 5, "week"),
    Period("monthly", SECONDS_PER_MONTH, 13, "month"),
    Period("yearly", SECONDS_PER_YEAR, 4, "year"),
)


class RetentionPolicy:
    """Immutable, ordered sequence of periods, finest first."""

    def __init__(self, periods: Iterable[Period]):
        self._periods: Tuple[Period, ...] = tuple(periods)
        self._validate()
        self._index: Dict[str, int] = {p.name: i for i, p in enumerate(self._periods)}

    def _validate(self) -> None:
        if not self._periods:
            raise ConfigurationError("Retention policy needs at least one period")

        names = [p.name for p in self._periods]
        if len(set(names)) != len(names):
            raise ConfigurationError(
                "Retention period names must be unique", details={"periods": names}
            )

        for period in self._periods:
            if period.granularity not in GRANULARITIES:
                raise ConfigurationError(
                    f"Unknown granularity '{period.granularity}' for period '{period.name}'",
                    details={"allowed": GRANULARITIES},
                )
            if period.unit_seconds < 1 or period.keep_count < 1:
                raise ConfigurationError(
                    f"Period '{period.name}' needs positive unit_seconds and keep_count"
                )

        for finer, coarser in zip(self._periods, self._periods[1:]):
            if coarser.unit_seconds <= finer.unit_seconds:
                raise ConfigurationError(
                    f"Period '{coarser.name}' must be coarser than '{finer.name}'",
                    details={finer.name: finer.unit_seconds, coarser.name: coarser.unit_seconds},
                )

    @classmethod
    def default(cls) -> "RetentionPolicy":
        """daily 14d, weekly 5w, monthly 13x28d, yearly 4x365d."""
        return cls(DEFAULT_PERIODS)

    @classmethod
    def from_settings(cls, periods: Optional[Sequence[PeriodSettings]]) -> "RetentionPolicy":
        """Build from the ``retention`` block of BackupSettings (None -> default)."""
        if periods is None:
            return cls.default()

        built = []
        for item in periods:
            name = item.name
            granularity = item.granularity or DEFAULT_GRANULARITY.get(name)
            if granularity is None:
                raise ConfigurationError(
                    f"Period '{name}' needs an explicit granularity",
                    details={"allowed": GRANULARITIES},
                )
            built.append(
                Period(
                    name=name,
                    unit_seconds=item.unit_seconds,
                    keep_count=item.keep,
                    granularity=granularity,
                )
            )
        return cls(built)

    def sequence(self) -> Tuple[Period, ...]:
        return self._periods

    def __iter__(self):
        return iter(self._periods)

    def __len__(self) -> int:
        return len(self._periods)

    @property
    def names(self) -> Tuple[str, ...]:
        return tuple(p.name for p in self._periods)

    @property
    def first(self) -> Period:
        """Finest period; new artifacts land here."""
        return self._periods[0]

    def get(self, name: str) -> Period:
        try:
            return self._periods[self._index[name]]
        except KeyError:
            raise KeyError(f"Unknown period: {name}") from None

    def next(self, period: Period) -> Optional[Period]:
        """Next coarser period, or None for the last one."""
        i = self._index[period.name] + 1
        return self._periods[i] if i < len(self._periods) else None
