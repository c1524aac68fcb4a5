from datetime import datetime, timezone


def local_now():
	"""Return the current local time as an aware datetime."""
	return datetime.now().astimezone()


def utc_now_iso(now=None):
	"""Return UTC time as ISO8601 string (milliseconds kept for block durations)."""
	now = now or local_now()
	return now.astimezone(timezone.utc).isoformat(timespec="milliseconds")


def parse_iso(value):
	"""Parse an ISO8601 string into an aware datetime, or None if unparseable."""
	if not value:
		return None
	try:
		# older documents carry a trailing 'Z'
		dt = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
	except ValueError:
		return None
	if dt.tzinfo is None:
		dt = dt.astimezone()
	return dt


def local_today_str(now=None):
	"""Return local date as YYYY-MM-DD string."""
	now = now or local_now()
	return now.astimezone().date().isoformat()


def minutes_between(start, end):
	"""Wall-clock minutes between two datetimes (float, never negative)."""
	return max(0.0, (end - start).total_seconds() / 60.0)


def fmt_mmss(seconds: int) -> str:
	"""Format seconds as MM:SS (minutes may exceed 59)."""
	seconds = max(0, int(seconds))
	return f"{seconds // 60:02}:{seconds % 60:02}"


def fmt_minutes(minutes) -> str:
	"""Format a minute count as '45m' or '1h 30m'."""
	minutes = int(round(minutes))
	if minutes < 60:
		return f"{minutes}m"
	h, m = divmod(minutes, 60)
	return f"{h}h {m}m" if m else f"{h}h"
