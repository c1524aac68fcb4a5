from PySide6.QtCore import QObject, Signal

from BackEnd.core.clock import local_now
from BackEnd.repos.document_repo import DocumentStore
from BackEnd.repos.statistics_repo import StatisticsLedger
from BackEnd.services.gamification_service import GamificationService
from BackEnd.services.task_service import TaskService
from BackEnd.services.timer_service import TimerService
from BackEnd.services.transfer_service import TransferService


class SessionService(QObject):
	"""Builds and owns one timer session: store, ledger, tasks, pond and timer.

	Views receive this object instead of reaching into storage; every
	user-facing message from the parts is re-emitted on ``notification``.
	"""
	notification = Signal(str, str)

	def __init__(self, store=None, base_dir=None, now=None, sound_player=None):
		super().__init__()
		now = now or local_now
		self.store = store if store is not None else DocumentStore(base_dir)
		self.ledger = StatisticsLedger(self.store)
		self.gamification = GamificationService(self.store, now=now)
		self.tasks = TaskService(self.store, gamification=self.gamification, now=now)
		self.timer = TimerService(
			self.store, self.ledger,
			tasks=self.tasks,
			gamification=self.gamification,
			now=now,
			sound_player=sound_player,
		)
		self.transfer = TransferService(self, now=now)
		for part in (self.timer, self.tasks, self.gamification):
			part.notification.connect(self.notification)

	def timeline(self, day):
		"""A day's blocks by local start hour, each paired with its display colour."""
		return {
			hour: [(block, self.tasks.block_color(block)) for block in blocks]
			for hour, blocks in self.ledger.blocks_by_hour(day).items()
		}

	def start(self):
		self.timer.start_driver()

	def shutdown(self):
		self.timer.shutdown()

	def reload(self):
		"""Re-read every document after an external write (e.g. an import)."""
		self.ledger.refresh()
		self.gamification.refresh()
		self.tasks.reload()
		self.tasks.refresh_projects()
		self.timer.poll_settings()
