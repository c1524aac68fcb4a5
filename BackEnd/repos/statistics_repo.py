import calendar
import datetime
from collections import defaultdict

from BackEnd.core.clock import local_today_str, parse_iso
from BackEnd.core.models import Statistics, TimerMode
from BackEnd.repos.document_repo import STATISTICS


class StatisticsLedger:
	"""Session totals, per-day/per-month counters and the task-block timeline.

	Queries never raise on a missing day or month; they read as zero/empty.
	"""

	def __init__(self, store):
		self.store = store
		self.stats = Statistics.from_dict(store.load(STATISTICS, {}))

	def refresh(self):
		"""Re-read the persisted document (another view may have written it)."""
		self.stats = Statistics.from_dict(self.store.load(STATISTICS, {}))
		return self.stats

	def save(self):
		self.store.save(STATISTICS, self.stats.to_dict())

	def replace(self, stats: Statistics):
		self.stats = stats
		self.save()

	def reset(self):
		"""Clear every counter and the timeline."""
		self.replace(Statistics())

	def record(self, mode: TimerMode, duration_minutes, task_block=None, today=None, month=None):
		"""Account one completed interval. Does not persist; call save()."""
		today = today or local_today_str()
		month = month or today[:7]
		stats = self.stats
		if task_block is not None:
			stats.task_blocks.setdefault(today, []).append(task_block)
		if mode is TimerMode.FOCUS:
			stats.total_sessions += 1
			stats.total_focus_time += duration_minutes
			stats.daily_sessions[today] = stats.daily_sessions.get(today, 0) + 1
			stats.monthly_sessions[month] = stats.monthly_sessions.get(month, 0) + 1
			stats.daily_focus_time[today] = stats.daily_focus_time.get(today, 0) + duration_minutes
		else:
			stats.total_break_time += duration_minutes

	# --- queries ---
	def sessions_on(self, day):
		return self.stats.daily_sessions.get(day, 0)

	def focus_minutes_on(self, day):
		return self.stats.daily_focus_time.get(day, 0)

	def sessions_in_month(self, month):
		return self.stats.monthly_sessions.get(month, 0)

	def blocks_on(self, day):
		return list(self.stats.task_blocks.get(day, []))

	def month_focus_minutes(self, month):
		"""Sum focus minutes over every day of a YYYY-MM month."""
		return sum(v for d, v in self.stats.daily_focus_time.items() if d.startswith(month))

	def all_time_sessions(self):
		return sum(self.stats.daily_sessions.values())

	def today_summary(self, today=None):
		today = today or local_today_str()
		month = today[:7]
		return {
			"sessions": self.sessions_on(today),
			"focusTime": self.focus_minutes_on(today),
			"monthSessions": self.sessions_in_month(month),
			"monthFocusTime": self.month_focus_minutes(month),
		}

	def blocks_by_hour(self, day):
		"""Group a day's blocks by the local hour they started in (0-23)."""
		hours = defaultdict(list)
		for block in self.blocks_on(day):
			start = parse_iso(block.start_time)
			if start is None:
				continue
			hours[start.astimezone().hour].append(block)
		return {h: hours.get(h, []) for h in range(24)}

	def month_calendar(self, year, month, today=None):
		"""Calendar cells for a month, Sunday first; leading blanks are None."""
		today = today or local_today_str()
		first_weekday, days_in_month = calendar.monthrange(year, month)
		cells = [None] * ((first_weekday + 1) % 7)
		for day in range(1, days_in_month + 1):
			key = datetime.date(year, month, day).isoformat()
			cells.append({
				"day": day,
				"date": key,
				"sessions": self.sessions_on(key),
				"focusTime": self.focus_minutes_on(key),
				"isToday": key == today,
			})
		return cells

	def focus_minutes_series(self, days):
		"""Focus minutes for each date in ``days`` (date objects or strings)."""
		return [self.focus_minutes_on(d.isoformat() if hasattr(d, "isoformat") else d) for d in days]

	def daily_streak(self, today=None):
		"""
		Consecutive days with at least one focus session, counting back from today.
		Returns 0 if today has none yet.
		"""
		today = datetime.date.fromisoformat(today or local_today_str())
		dates = set()
		for key, count in self.stats.daily_sessions.items():
			if count <= 0:
				continue
			try:
				dates.add(datetime.date.fromisoformat(key))
			except ValueError:
				continue

		streak = 0
		current = today
		while current in dates:
			streak += 1
			current -= datetime.timedelta(days=1)
		return streak

	def total_days_studied(self):
		"""Number of distinct days with at least one focus session."""
		return sum(1 for count in self.stats.daily_sessions.values() if count > 0)

	def total_focus_hours(self):
		return self.stats.total_focus_time / 60.0
