from PySide6.QtCore import QObject, Signal, QTimer

from BackEnd.core.clock import (
	fmt_mmss, local_now, local_today_str, minutes_between, parse_iso, utc_now_iso,
)
from BackEnd.core.models import (
	BlockKind, TaskBlock, TimerMode, TimerSettings, TimerState, new_id,
)
from BackEnd.core.logging_handler import setup_logger
from BackEnd.repos.document_repo import SETTINGS_UPDATED, TIMER_SETTINGS, TIMER_STATE

logger = setup_logger(__name__)

MODE_TITLES = {
	TimerMode.FOCUS: "Focus Session",
	TimerMode.SHORT_BREAK: "Short Break",
	TimerMode.LONG_BREAK: "Long Break",
}

CUE_FOCUS_COMPLETE = "focus-complete"
CUE_BREAK_COMPLETE = "break-complete"
CUE_LONG_BREAK_COMPLETE = "long-break-complete"


def next_transition(mode: TimerMode, cycle: int, long_break_interval: int):
	"""Return (next_mode, next_cycle) after ``mode`` runs out."""
	if mode is TimerMode.FOCUS:
		if cycle % long_break_interval == 0:
			return TimerMode.LONG_BREAK, cycle
		return TimerMode.SHORT_BREAK, cycle
	return TimerMode.FOCUS, cycle + 1


class TimerService(QObject):
	"""Owns the single TimerState and runs the focus/break cycle.

	A 1 s QTimer drives ``tick()`` while running. When the countdown hits zero
	the completion protocol updates statistics, the selected task and the
	pond, then parks the timer (stopped) at the start of the next mode.
	"""
	time_changed = Signal(int)  # emits seconds left
	state_changed = Signal(dict)
	completed = Signal(str, str)  # finished mode, next mode
	settings_changed = Signal(dict)
	notification = Signal(str, str)  # title, description
	cue = Signal(str)

	def __init__(self, store, ledger, tasks=None, gamification=None, now=None,
				sound_player=None, poll_interval_ms=500):
		super().__init__()
		self.store = store
		self.ledger = ledger
		self.tasks = tasks
		self.gamification = gamification
		self._now = now or local_now
		self._sound_player = sound_player
		self._completing = False

		self.settings = TimerSettings.from_dict(store.load(TIMER_SETTINGS, {}))
		self._settings_token = store.settings_token()
		self.state = self._restore_state()

		self._timer = QTimer(self)
		self._timer.setInterval(1000)
		self._timer.timeout.connect(self.tick)
		self._poll = QTimer(self)
		self._poll.setInterval(poll_interval_ms)
		self._poll.timeout.connect(self.poll_settings)
		store.changed.connect(self._on_store_changed)

	def _restore_state(self):
		"""Load the persisted state; an already-expired countdown is reset, never completed."""
		data = self.store.load(TIMER_STATE)
		if data is None:
			return TimerState.initial(self.settings)
		state = TimerState.from_dict(data)
		if state.time_left <= 0 or state.time_left > self.settings.duration_seconds(state.mode):
			logger.warning(f"Stored {state.mode.value} timer is expired or out of range; resetting it")
			state = state.copy(
				time_left=self.settings.duration_seconds(state.mode),
				is_running=False,
				session_start=None,
			)
			self.store.save(TIMER_STATE, state.to_dict())
		return state

	# --- driver ---
	def start_driver(self):
		"""Begin settings polling and resume ticking if the restored state is running."""
		self._poll.start()
		self._sync_driver()

	def shutdown(self):
		self._timer.stop()
		self._poll.stop()
		self._persist()

	def _sync_driver(self):
		if self.state.is_running and not self._timer.isActive():
			self._timer.start()
		elif not self.state.is_running and self._timer.isActive():
			self._timer.stop()

	def _persist(self):
		self.store.save(TIMER_STATE, self.state.to_dict())

	def _set_state(self, state):
		self.state = state
		self._persist()
		self._sync_driver()
		self.state_changed.emit(self.snapshot())

	def _busy(self, action):
		if self._completing:
			logger.warning(f"{action} ignored: a completion is in progress")
			return True
		return False

	# --- user operations ---
	def toggle(self):
		"""Start or pause. The first start of an interval stamps its wall-clock start."""
		if self._busy("toggle"):
			return self.state
		running = not self.state.is_running
		changes = {"is_running": running}
		if running and not self.state.session_start:
			changes["session_start"] = utc_now_iso(self._now())
		self._set_state(self.state.copy(**changes))
		logger.info(f"{MODE_TITLES[self.state.mode]} {'started' if running else 'paused'}")
		return self.state

	def reset(self):
		"""Refill the current mode's countdown and stop; mode and cycle are kept."""
		if self._busy("reset"):
			return self.state
		self._set_state(self.state.copy(
			time_left=self.total_seconds(),
			is_running=False,
			session_start=None,
		))
		return self.state

	def skip(self):
		"""Jump to the next mode without recording the interval."""
		if self._busy("skip"):
			return self.state
		mode, cycle = next_transition(self.state.mode, self.state.cycle, self.settings.long_break_interval)
		self._set_state(self.state.copy(
			mode=mode,
			cycle=cycle,
			time_left=self.settings.duration_seconds(mode),
			is_running=False,
			session_start=None,
		))
		logger.info(f"Skipped to {MODE_TITLES[mode]}")
		return self.state

	def tick(self):
		"""Advance one second. Returns True if this tick completed the interval."""
		if self._completing or not self.state.is_running or self.state.time_left <= 0:
			return False
		self.state = self.state.copy(time_left=self.state.time_left - 1)
		self._persist()
		self.time_changed.emit(self.state.time_left)
		if self.state.time_left == 0:
			self._complete()
			return True
		return False

	def select_task(self, task):
		self.state = self.state.copy(current_task_label=task.title, current_task_id=task.id)
		self._persist()
		self.state_changed.emit(self.snapshot())

	def clear_task(self):
		self.state = self.state.copy(current_task_label=None, current_task_id=None)
		self._persist()
		self.state_changed.emit(self.snapshot())
		self.notification.emit("Task cleared", "No task selected for focus session")

	def selected_task(self):
		if self.tasks is None or not self.state.current_task_id:
			return None
		return self.tasks.get_task(self.state.current_task_id)

	def complete_current_task(self):
		"""Mark the selected task done (awarding its leaf) and clear the selection."""
		task = self.selected_task()
		if task is None:
			return None
		if not task.completed:
			self.tasks.toggle_completed(task.id)
		self.clear_task()
		return task

	# --- settings ---
	def apply_settings_change(self, settings):
		"""Save new settings; a stopped timer picks up the new duration at once."""
		if not isinstance(settings, TimerSettings):
			settings = TimerSettings.from_dict(settings)
		self._adopt_settings(settings)
		self.store.save(TIMER_SETTINGS, settings.to_dict())
		self._settings_token = self.store.touch_settings()
		return settings

	def _adopt_settings(self, settings):
		self.settings = settings
		if not self.state.is_running:
			self._set_state(self.state.copy(time_left=self.total_seconds()))
		self.settings_changed.emit(settings.to_dict())

	def poll_settings(self):
		"""Adopt settings written elsewhere since the last seen settings-updated token."""
		token = self.store.settings_token()
		if token <= self._settings_token:
			return False
		self._settings_token = token
		settings = TimerSettings.from_dict(self.store.load(TIMER_SETTINGS, {}))
		if settings == self.settings:
			return False
		logger.info(f"Timer settings updated: {settings.to_dict()}")
		self._adopt_settings(settings)
		return True

	def _on_store_changed(self, key):
		if key == SETTINGS_UPDATED:
			self.poll_settings()

	# --- completion protocol ---
	def _complete(self):
		self._completing = True
		try:
			now = self._now()
			today = local_today_str(now)
			state = self.state
			mode = state.mode
			is_focus = not mode.is_break
			task = self.selected_task()
			if is_focus and task is None and state.current_task_id:
				logger.warning(f"Selected task {state.current_task_id} no longer exists; focus not attributed")

			block = None
			start = parse_iso(state.session_start)
			if start is not None:
				end_iso = utc_now_iso(now)
				block = TaskBlock(
					id=f"{end_iso}-{new_id()[:8]}",
					task_label=state.current_task_label or "Untitled Session",
					project_label=self.tasks.project_label_for(task) if task else None,
					folder_label=self.tasks.folder_label_for(task) if task else None,
					start_time=state.session_start,
					end_time=end_iso,
					duration_minutes=minutes_between(start, now),
					kind=BlockKind.FOCUS if is_focus else BlockKind.BREAK,
					completed=is_focus,
				)

			# counters use the nominal setting, the block keeps wall-clock time
			nominal = self.settings.duration_minutes(mode)
			self.ledger.record(mode, nominal, block, today=today, month=today[:7])
			if is_focus:
				if self.gamification is not None:
					self.gamification.add_fish()
				if task is not None:
					self.tasks.record_pomodoro(task.id, nominal)
			self.ledger.save()

			next_mode, next_cycle = next_transition(mode, state.cycle, self.settings.long_break_interval)
			self._set_state(state.copy(
				mode=next_mode,
				cycle=next_cycle,
				time_left=self.settings.duration_seconds(next_mode),
				is_running=False,
				session_start=None,
			))
			logger.info(f"{MODE_TITLES[mode]} completed (cycle {state.cycle}); next: {MODE_TITLES[next_mode]}")
		finally:
			self._completing = False

		self.completed.emit(mode.value, next_mode.value)
		self._announce(mode, next_mode, task)

	def _announce(self, mode, next_mode, task):
		if mode is TimerMode.FOCUS:
			self._play_cue(CUE_FOCUS_COMPLETE)
			if next_mode is TimerMode.LONG_BREAK:
				title = "Focus session completed! 🏆"
				description = (f'Amazing work on "{task.title}"! Time for a long break!'
							if task else "Incredible focus! Time for a long break!")
			else:
				title = "Focus session completed! 🐟"
				description = (f'Great work on "{task.title}"! A new fish joined your pond!'
							if task else "A new fish joined your pond!")
		else:
			self._play_cue(CUE_LONG_BREAK_COMPLETE if mode is TimerMode.LONG_BREAK else CUE_BREAK_COMPLETE)
			title = "Break completed! ✨"
			description = "Ready for another focus session?"
		self.notification.emit(title, description)

	def _play_cue(self, kind):
		self.cue.emit(kind)
		if self._sound_player is None:
			return
		try:
			self._sound_player(kind)
		except Exception as e:
			logger.warning(f"Sound cue '{kind}' failed: {e}")

	# --- read-only helpers ---
	def total_seconds(self):
		return self.settings.duration_seconds(self.state.mode)

	def progress(self):
		"""Percent of the current interval already elapsed."""
		total = self.total_seconds()
		if total <= 0:
			return 0.0
		return max(0.0, min(100.0, (total - self.state.time_left) / total * 100))

	def mode_title(self):
		return MODE_TITLES[self.state.mode]

	def time_text(self):
		return fmt_mmss(self.state.time_left)

	def snapshot(self):
		data = self.state.to_dict()
		data["title"] = self.mode_title()
		data["timeText"] = self.time_text()
		data["progress"] = self.progress()
		return data
