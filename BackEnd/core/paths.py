import os
from pathlib import Path

APP_NAME = "FocusFlow"


def user_data_dir(app_name=APP_NAME, create=True):
	"""Return per-user data dir (Windows/macOS/Linux), honouring FOCUSFLOW_DATA_DIR."""
	override = os.environ.get("FOCUSFLOW_DATA_DIR")
	if override:
		path = Path(override)
	else:
		if os.name == "nt":
			base = os.environ.get("LOCALAPPDATA", os.path.expanduser("~\\AppData\\Local"))
		elif os.name == "posix":
			base = os.environ.get("XDG_DATA_HOME", os.path.expanduser("~/.local/share"))
		else:
			base = os.path.expanduser("~")
		path = Path(base) / app_name
	if create:
		path.mkdir(parents=True, exist_ok=True)
	return path


def document_path(key, base_dir=None):
	"""Return Path to the JSON file backing a store key."""
	base = Path(base_dir) if base_dir is not None else user_data_dir()
	return base / f"{key}.json"


def log_dir(base_dir=None, create=True):
	base = Path(base_dir) if base_dir is not None else user_data_dir(create=create)
	path = base / "logs"
	if create:
		path.mkdir(parents=True, exist_ok=True)
	return path
