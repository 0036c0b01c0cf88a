"""Per-period URL creation counters."""

from datetime import datetime, timezone
from typing import Tuple


DAY_FORMAT = "%Y-%m-%d"
MONTH_FORMAT = "%Y-%m"


class PeriodCounts(dict):
    """Mapping of period key (day or month string) to a count.

    Missing periods read as zero, so counters roll over simply by keying on
    the current day or month.
    """

    def __missing__(self, key: str) -> int:
        return 0

    def increment(self, key: str, amount: int = 1) -> int:
        """Add ``amount`` to the count for ``key`` and return the new count."""
        self[key] = self[key] + amount
        return self[key]

    def copy(self) -> "PeriodCounts":
        return PeriodCounts(self)

    @classmethod
    def from_mapping(cls, data) -> "PeriodCounts":
        """Build from a stored mapping, coercing values to int."""
        if not data:
            return cls()
        return cls({str(k): int(v) for k, v in data.items()})


def period_keys(moment: datetime) -> Tuple[str, str]:
    """Return the (day, month) keys for a moment, in UTC."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    moment = moment.astimezone(timezone.utc)
    return moment.strftime(DAY_FORMAT), moment.strftime(MONTH_FORMAT)
