import logging
from pathlib import Path
from typing import Optional

from BackEnd.core.paths import log_dir

# base data dir for log files; None means the default user data dir
_log_base = None
# logger name -> its file handler, so the log dir can be moved later
_file_handlers = {}


class _DeferredFileHandler(logging.FileHandler):
	"""FileHandler that creates its directory on the first record, not at setup."""

	def _open(self):
		Path(self.baseFilename).parent.mkdir(parents=True, exist_ok=True)
		return super()._open()


def _make_file_handler(log_file, level, formatter):
	handler = _DeferredFileHandler(log_dir(_log_base, create=False) / log_file, encoding="utf-8", delay=True)
	handler.setLevel(level)
	handler.setFormatter(formatter)
	return handler


def setup_logger(
	name: str,
	log_file: str = "app.log",
	level: int = logging.INFO,
	console: bool = True,
	handler_level: Optional[int] = None,
) -> logging.Logger:
	"""Configure and return a module-level logger."""
	logger = logging.getLogger(name)
	logger.setLevel(level)

	if not logger.handlers:
		formatter = logging.Formatter(
			"%(asctime)s - %(name)s - %(levelname)s - %(message)s"
		)
		file_handler = _make_file_handler(log_file, handler_level or level, formatter)
		logger.addHandler(file_handler)
		_file_handlers[name] = file_handler

		if console:
			console_handler = logging.StreamHandler()
			console_handler.setLevel(handler_level or level)
			console_handler.setFormatter(formatter)
			logger.addHandler(console_handler)

	return logger


def use_log_dir(base_dir=None):
	"""Write every log file under ``<base_dir>/logs`` from now on (None restores the default)."""
	global _log_base
	_log_base = base_dir
	for name, old in list(_file_handlers.items()):
		logger = logging.getLogger(name)
		logger.removeHandler(old)
		old.close()
		new = _make_file_handler(Path(old.baseFilename).name, old.level, old.formatter)
		logger.addHandler(new)
		_file_handlers[name] = new
