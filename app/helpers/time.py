from datetime import date, datetime, timezone
from typing import Optional

import pytz


def utcnow() -> datetime:
    """Timezone-aware current UTC time."""
    return datetime.now(timezone.utc)


def clinic_today(tz_name: str, now: Optional[datetime] = None) -> date:
    """Calendar date at the clinic, which can differ from the UTC date near midnight."""
    now = now or utcnow()
    return now.astimezone(pytz.timezone(tz_name)).date()
