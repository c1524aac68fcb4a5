import json
import os
import time
from pathlib import Path

from PySide6.QtCore import QObject, Signal

from BackEnd.core.paths import document_path, user_data_dir
from BackEnd.core.logging_handler import setup_logger

logger = setup_logger(__name__)

TIMER_SETTINGS = "timer-settings"
TIMER_STATE = "timer-state"
STATISTICS = "statistics"
TASKS = "tasks"
PROJECTS = "projects"
FOLDERS = "folders"
GAMIFICATION = "gamification"
SETTINGS_UPDATED = "settings-updated"


class DocumentStore(QObject):
	"""Key/value store of JSON documents, one file per key in the data dir.

	Every write emits ``changed(key)`` so views in the same process can
	re-read; views in other processes poll ``settings_token()``.
	"""
	changed = Signal(str)

	def __init__(self, base_dir=None):
		super().__init__()
		self.base_dir = Path(base_dir) if base_dir is not None else user_data_dir()
		self.base_dir.mkdir(parents=True, exist_ok=True)

	def path_for(self, key):
		return document_path(key, self.base_dir)

	def load(self, key, default=None):
		"""Return the parsed document, or ``default`` if missing or malformed."""
		path = self.path_for(key)
		if not path.exists():
			return default
		try:
			with open(path, "r", encoding="utf-8") as f:
				return json.load(f)
		except (OSError, ValueError) as e:
			logger.warning(f"Unreadable document '{key}' at {path}: {e}; using defaults")
			return default

	def save(self, key, value):
		"""Write the document atomically and notify subscribers."""
		path = self.path_for(key)
		tmp = path.with_name(path.name + ".tmp")
		with open(tmp, "w", encoding="utf-8") as f:
			json.dump(value, f, indent=2)
		os.replace(tmp, path)
		self.changed.emit(key)

	def remove(self, key):
		path = self.path_for(key)
		if path.exists():
			path.unlink()
			self.changed.emit(key)
			return True
		return False

	def exists(self, key):
		return self.path_for(key).exists()

	# --- settings change token ---
	def touch_settings(self):
		"""Stamp the settings-updated token with the current epoch millis."""
		# never move backwards, even inside one millisecond
		token = max(int(time.time() * 1000), self.settings_token() + 1)
		self.save(SETTINGS_UPDATED, token)
		return token

	def settings_token(self):
		try:
			return int(self.load(SETTINGS_UPDATED, 0) or 0)
		except (TypeError, ValueError):
			return 0
