from datetime import date, timedelta


def seconds_to_hhmmss(total_seconds: int) -> str:
    """
    Convert total seconds (int) -> 'HH:MM:SS'.
    Example: 2732 -> '00:45:32'
    """
    hours = total_seconds // 3600
    minutes = (total_seconds % 3600) // 60
    seconds = total_seconds % 60
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}"


def format_pace_kmh(pace_kmh: float) -> str:
    """
    Format a speed for display as 'X.X km/h'.
    Example: 4.8 -> '4.8 km/h'
    """
    if pace_kmh <= 0:
        return "0.0 km/h"
    return f"{pace_kmh:.1f} km/h"


def monday_of(d: date) -> date:
    # Monday = 0, Sunday = 6
    return d - timedelta(days=d.weekday())


def to_local_datetime(dt, tz_name: str | None = None):
    """Convert a datetime from source tz (assume UTC if naive) to local or given tz.

    - If `tz_name` is 'local' or None: use system local timezone.
    - If `tz_name` is IANA tz name (e.g., 'America/New_York'): use that.
    - If `dt` has no tzinfo, assume UTC.
    """
    from datetime import timezone
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    if tz_name and tz_name != "local":
        try:
            from zoneinfo import ZoneInfo
            return dt.astimezone(ZoneInfo(tz_name))
        except Exception:
            return dt.astimezone()
    return dt.astimezone()
