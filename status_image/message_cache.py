"""Yesterday's message counts per bot, cached for the current day.

A finished day never changes, so the aggregation query runs at most once per
date number. Concurrent requests that race a day rollover may both rebuild;
the query is idempotent so that only costs a redundant round trip.
"""

from __future__ import annotations

import logging
from datetime import date, datetime

from .host import MessageAggregator
from .models import MessageStats

logger = logging.getLogger(__name__)

_EPOCH = date(1970, 1, 1)
TRACKED_TYPES = ("send", "receive")


def date_number(moment: datetime | None = None) -> int:
    """Whole local days since the Unix epoch; changes at local midnight."""
    moment = moment or datetime.now()
    return (moment.date() - _EPOCH).days


class MessageCountCache:
    def __init__(self, source: MessageAggregator) -> None:
        self._source = source
        self._date: int | None = None
        self._counts: dict[str, MessageStats] = {}

    @property
    def cached_date(self) -> int | None:
        return self._date

    async def ensure_fresh(self, today: int | None = None) -> dict[str, MessageStats]:
        """Return counts for the day before ``today``, querying on rollover.

        Source errors propagate and the previous mapping is kept.
        """
        if today is None:
            today = date_number()
        if today == self._date:
            return self._counts

        rows = await self._source.aggregate(start=today - 1, end=today)

        totals: dict[str, dict[str, int]] = {}
        for row in rows:
            if row.type not in TRACKED_TYPES:
                continue
            per_type = totals.setdefault(f"{row.platform}:{row.self_id}", {})
            per_type[row.type] = per_type.get(row.type, 0) + (row.count or 0)

        counts = {sid: MessageStats.from_counts(c) for sid, c in totals.items()}

        self._counts = counts
        self._date = today
        logger.info(
            "Message counts refreshed for day %d (%d bot(s))", today - 1, len(counts)
        )
        return counts
