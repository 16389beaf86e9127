from datetime import UTC, datetime


def utcnow() -> datetime:
    """Current UTC time as a naive datetime, the form the log table stores."""
    return datetime.now(UTC).replace(tzinfo=None)


def _round(value: float) -> int:
    return int(value + 0.5)


def time_ago(moment: datetime, now: datetime | None = None) -> str:
    """Humanize the distance from `moment` to now, e.g. "3 hours ago".

    Uses the usual relative-time thresholds: seconds read as "a few seconds",
    45 minutes already round up to "an hour", 22 hours to "a day" and so on.

    Args:
        moment: Naive UTC timestamp in the past
        now: Reference time (naive UTC), defaults to the current time

    Returns:
        Relative time phrase; timestamps in the future read as "in ..."
    """
    if now is None:
        now = utcnow()
    if moment.tzinfo is not None:
        moment = moment.astimezone(UTC).replace(tzinfo=None)

    delta = (now - moment).total_seconds()
    future = delta < 0
    seconds = abs(delta)

    minutes = seconds / 60
    hours = minutes / 60
    days = hours / 24

    if seconds < 45:
        phrase = "a few seconds"
    elif seconds < 90:
        phrase = "a minute"
    elif minutes < 45:
        phrase = f"{_round(minutes)} minutes"
    elif minutes < 90:
        phrase = "an hour"
    elif hours < 22:
        phrase = f"{_round(hours)} hours"
    elif hours < 36:
        phrase = "a day"
    elif days < 26:
        phrase = f"{_round(days)} days"
    elif days < 45:
        phrase = "a month"
    elif days < 320:
        phrase = f"{_round(days / 30.4375)} months"
    elif days < 548:
        phrase = "a year"
    else:
        phrase = f"{_round(days / 365.25)} years"

    return f"in {phrase}" if future else f"{phrase} ago"
