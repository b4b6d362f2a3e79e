from datetime import timedelta

SEC_PER_MIN = 60
SEC_PER_HOUR = 3600


def _to_int(part: str) -> int:
    try:
        return int(part.strip())
    except ValueError:
        return 0


def parse_duration(text: str | None) -> timedelta:
    """Parses a clock-style duration string into a timedelta.

    Accepted shapes:
      - "m:ss"    -> minutes and seconds ("3:45")
      - "h:mm:ss" -> hours, minutes and seconds ("1:02:03")

    Non-numeric parts count as zero, any other shape yields a zero duration.
    """
    if not text:
        return timedelta()
    parts = text.split(":")
    if len(parts) == 2:
        minutes, seconds = (_to_int(p) for p in parts)
        return timedelta(minutes=minutes, seconds=seconds)
    if len(parts) == 3:
        hours, minutes, seconds = (_to_int(p) for p in parts)
        return timedelta(hours=hours, minutes=minutes, seconds=seconds)
    return timedelta()


def format_duration(value: timedelta | None) -> str:
    """Formats a timedelta as "m:ss", or "h:mm:ss" from one hour up.

    None and negative values are rendered as "0:00".
    """
    if value is None:
        return "0:00"
    total = max(0, int(value.total_seconds()))
    hours, rest = divmod(total, SEC_PER_HOUR)
    minutes, seconds = divmod(rest, SEC_PER_MIN)
    if hours:
        return f"{hours}:{minutes:02d}:{seconds:02d}"
    return f"{minutes}:{seconds:02d}"
