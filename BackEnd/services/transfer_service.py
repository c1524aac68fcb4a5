import json

from BackEnd.core.clock import local_now, utc_now_iso
from BackEnd.core.models import GamificationCounters, Statistics, TimerSettings
from BackEnd.core.logging_handler import setup_logger
from BackEnd.repos.document_repo import (
	FOLDERS, GAMIFICATION, PROJECTS, STATISTICS, TASKS, TIMER_SETTINGS,
)

logger = setup_logger(__name__)

# bundle field -> store key
BUNDLE_KEYS = {
	"timerSettings": TIMER_SETTINGS,
	"tasks": TASKS,
	"projects": PROJECTS,
	"folders": FOLDERS,
	"statistics": STATISTICS,
	"gamification": GAMIFICATION,
}


class ImportFailed(ValueError):
	"""Raised when an import file cannot be parsed as a FocusFlow bundle."""
	pass


class TransferService:
	"""Export every document into one JSON bundle and import it back field by field."""

	def __init__(self, session, now=None):
		self.session = session
		self.store = session.store
		self._now = now or local_now

	def export_data(self):
		store = self.store
		return {
			"timerSettings": TimerSettings.from_dict(store.load(TIMER_SETTINGS, {})).to_dict(),
			"tasks": store.load(TASKS, []) or [],
			"projects": store.load(PROJECTS, []) or [],
			"folders": store.load(FOLDERS, []) or [],
			"statistics": Statistics.from_dict(store.load(STATISTICS, {})).to_dict(),
			"gamification": GamificationCounters.from_dict(store.load(GAMIFICATION, {})).to_dict(),
			"exportDate": utc_now_iso(self._now()),
		}

	def export_to(self, path):
		data = self.export_data()
		with open(path, "w", encoding="utf-8") as f:
			json.dump(data, f, indent=2)
		logger.info(f"Data exported to {path}")
		return data

	def import_data(self, data):
		"""Apply each present field independently; returns the keys written.

		Not atomic: a failure part-way leaves earlier fields applied.
		"""
		if not isinstance(data, dict):
			raise ImportFailed("Import file must contain a JSON object")
		applied = []
		for field, key in BUNDLE_KEYS.items():
			if field not in data or data[field] is None:
				continue
			value = data[field]
			if field == "timerSettings":
				value = TimerSettings.from_dict(value).to_dict()
			elif field == "statistics":
				value = Statistics.from_dict(value).to_dict()
			elif field == "gamification":
				value = GamificationCounters.from_dict(value).to_dict()
			elif not isinstance(value, list):
				logger.warning(f"Skipping import field '{field}': expected a list")
				continue
			self.store.save(key, value)
			applied.append(field)
		if "timerSettings" in applied:
			self.store.touch_settings()
		self.session.reload()
		logger.info(f"Imported fields: {', '.join(applied) or 'none'}")
		return applied

	def import_from(self, path):
		try:
			with open(path, "r", encoding="utf-8") as f:
				data = json.load(f)
		except (OSError, ValueError) as e:
			raise ImportFailed(f"Could not read import file {path}: {e}") from e
		return self.import_data(data)
