"""Host clock provider.

The scheduling engine never reads the clock; callers resolve the evaluation date here
once per refresh and pass it down explicitly.
"""

from datetime import date

from src.core.config import Settings, settings
from src.core.dates import add_days


def today_with_offset(offset_days: int = 0, *, today: date | None = None) -> date:
    """Return today's local date shifted by ``offset_days`` (developer time travel)."""
    base = today or date.today()
    if not offset_days:
        return base
    return add_days(base, offset_days)


def evaluation_date(config: Settings | None = None, *, today: date | None = None) -> date:
    """Return the date tasks should be evaluated against, honouring ``dev_offset_days``."""
    config = config or settings
    return today_with_offset(config.dev_offset_days, today=today)
