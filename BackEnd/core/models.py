"""
Data models for FocusFlow documents.

Every model round-trips through the camelCase JSON stored in the document
store; ``from_dict`` tolerates missing or malformed fields from older saves.
"""

import uuid
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Dict, List, Optional


class TimerMode(Enum):
	FOCUS = "focus"
	SHORT_BREAK = "shortBreak"
	LONG_BREAK = "longBreak"

	@property
	def is_break(self):
		return self is not TimerMode.FOCUS


class BlockKind(Enum):
	FOCUS = "focus"
	BREAK = "break"


def new_id():
	return uuid.uuid4().hex


def _as_int(value, default):
	try:
		return int(value)
	except (TypeError, ValueError, OverflowError):
		return default


def _as_float(value, default=0.0):
	try:
		return float(value)
	except (TypeError, ValueError, OverflowError):
		return default


def _as_dict(value):
	return dict(value) if isinstance(value, dict) else {}


# (default, minimum, maximum) per settings field, in minutes / cycles
SETTINGS_LIMITS = {
	"focusTime": (25, 1, 120),
	"shortBreak": (5, 1, 60),
	"longBreak": (15, 1, 120),
	"longBreakInterval": (4, 2, 10),
}


def validate_setting(key, value):
	"""Return value as an int within range, or the field default."""
	default, low, high = SETTINGS_LIMITS[key]
	if isinstance(value, bool):
		return default
	if isinstance(value, str):
		value = value.strip()
	number = _as_int(value, None)
	if number is None or number < low or number > high:
		return default
	return number


@dataclass
class TimerSettings:
	"""Durations in minutes plus the number of focus cycles per long break."""
	focus_time: int = 25
	short_break: int = 5
	long_break: int = 15
	long_break_interval: int = 4

	@classmethod
	def from_dict(cls, data):
		data = _as_dict(data)
		return cls(
			focus_time=validate_setting("focusTime", data.get("focusTime")),
			short_break=validate_setting("shortBreak", data.get("shortBreak")),
			long_break=validate_setting("longBreak", data.get("longBreak")),
			long_break_interval=validate_setting("longBreakInterval", data.get("longBreakInterval")),
		)

	def to_dict(self):
		return {
			"focusTime": self.focus_time,
			"shortBreak": self.short_break,
			"longBreak": self.long_break,
			"longBreakInterval": self.long_break_interval,
		}

	def duration_seconds(self, mode: TimerMode) -> int:
		if mode is TimerMode.FOCUS:
			return self.focus_time * 60
		if mode is TimerMode.SHORT_BREAK:
			return self.short_break * 60
		return self.long_break * 60

	def duration_minutes(self, mode: TimerMode) -> int:
		return self.duration_seconds(mode) // 60


@dataclass
class TimerState:
	mode: TimerMode = TimerMode.FOCUS
	time_left: int = 25 * 60
	is_running: bool = False
	cycle: int = 1
	current_task_label: Optional[str] = None
	current_task_id: Optional[str] = None
	session_start: Optional[str] = None

	@classmethod
	def initial(cls, settings: TimerSettings):
		return cls(time_left=settings.duration_seconds(TimerMode.FOCUS))

	@classmethod
	def from_dict(cls, data):
		data = _as_dict(data)
		try:
			mode = TimerMode(data.get("mode", TimerMode.FOCUS.value))
		except ValueError:
			mode = TimerMode.FOCUS
		return cls(
			mode=mode,
			time_left=_as_int(data.get("timeLeft"), 0),
			is_running=bool(data.get("isRunning", False)),
			cycle=max(1, _as_int(data.get("cycle"), 1)),
			current_task_label=data.get("currentTask") or None,
			current_task_id=data.get("currentTaskId") or None,
			session_start=data.get("sessionStartTime") or None,
		)

	def to_dict(self):
		data = {
			"mode": self.mode.value,
			"timeLeft": self.time_left,
			"isRunning": self.is_running,
			"cycle": self.cycle,
		}
		if self.current_task_label is not None:
			data["currentTask"] = self.current_task_label
		if self.current_task_id is not None:
			data["currentTaskId"] = self.current_task_id
		if self.session_start is not None:
			data["sessionStartTime"] = self.session_start
		return data

	def copy(self, **changes):
		return replace(self, **changes)


@dataclass(frozen=True)
class TaskBlock:
	"""One completed timed interval, logged for the daily timeline."""
	id: str
	task_label: str
	start_time: str
	end_time: str
	duration_minutes: float
	kind: BlockKind
	completed: bool
	project_label: Optional[str] = None
	folder_label: Optional[str] = None

	@classmethod
	def from_dict(cls, data):
		data = _as_dict(data)
		try:
			kind = BlockKind(data.get("type", BlockKind.FOCUS.value))
		except ValueError:
			kind = BlockKind.BREAK
		return cls(
			id=str(data.get("id") or new_id()),
			task_label=data.get("taskName") or "Untitled Session",
			start_time=data.get("startTime", ""),
			end_time=data.get("endTime", ""),
			duration_minutes=_as_float(data.get("duration")),
			kind=kind,
			completed=bool(data.get("completed", kind is BlockKind.FOCUS)),
			project_label=data.get("projectName") or None,
			folder_label=data.get("folderName") or None,
		)

	def to_dict(self):
		data = {
			"id": self.id,
			"taskName": self.task_label,
			"startTime": self.start_time,
			"endTime": self.end_time,
			"duration": self.duration_minutes,
			"type": self.kind.value,
			"completed": self.completed,
		}
		if self.project_label:
			data["projectName"] = self.project_label
		if self.folder_label:
			data["folderName"] = self.folder_label
		return data


@dataclass
class Statistics:
	total_sessions: int = 0
	total_focus_time: int = 0
	total_break_time: int = 0
	daily_sessions: Dict[str, int] = field(default_factory=dict)
	monthly_sessions: Dict[str, int] = field(default_factory=dict)
	daily_focus_time: Dict[str, int] = field(default_factory=dict)
	task_blocks: Dict[str, List[TaskBlock]] = field(default_factory=dict)

	@classmethod
	def from_dict(cls, data):
		data = _as_dict(data)
		blocks = {}
		for day, items in _as_dict(data.get("taskBlocks")).items():
			if isinstance(items, list):
				blocks[day] = [TaskBlock.from_dict(item) for item in items if isinstance(item, dict)]
		return cls(
			total_sessions=_as_int(data.get("totalSessions"), 0),
			total_focus_time=_as_int(data.get("totalFocusTime"), 0),
			total_break_time=_as_int(data.get("totalBreakTime"), 0),
			daily_sessions={k: _as_int(v, 0) for k, v in _as_dict(data.get("dailySessions")).items()},
			monthly_sessions={k: _as_int(v, 0) for k, v in _as_dict(data.get("monthlySessions")).items()},
			daily_focus_time={k: _as_int(v, 0) for k, v in _as_dict(data.get("dailyFocusTime")).items()},
			task_blocks=blocks,
		)

	def to_dict(self):
		return {
			"totalSessions": self.total_sessions,
			"totalFocusTime": self.total_focus_time,
			"totalBreakTime": self.total_break_time,
			"dailySessions": dict(self.daily_sessions),
			"monthlySessions": dict(self.monthly_sessions),
			"dailyFocusTime": dict(self.daily_focus_time),
			"taskBlocks": {day: [b.to_dict() for b in items] for day, items in self.task_blocks.items()},
		}


@dataclass
class Task:
	id: str
	title: str
	completed: bool = False
	pomodoro_count: int = 0
	time_spent_minutes: int = 0
	tags: List[str] = field(default_factory=list)
	project_id: Optional[str] = None
	folder_id: Optional[str] = None
	created_at: str = ""

	@classmethod
	def from_dict(cls, data):
		data = _as_dict(data)
		tags = data.get("tags")
		return cls(
			id=str(data.get("id") or new_id()),
			title=str(data.get("title", "")),
			completed=bool(data.get("completed", False)),
			pomodoro_count=_as_int(data.get("pomodoroCount"), 0),
			time_spent_minutes=_as_int(data.get("timeSpent"), 0),
			tags=[str(t) for t in tags] if isinstance(tags, list) else [],
			project_id=data.get("projectId") or None,
			folder_id=data.get("folderId") or None,
			created_at=data.get("createdAt", ""),
		)

	def to_dict(self):
		data = {
			"id": self.id,
			"title": self.title,
			"completed": self.completed,
			"pomodoroCount": self.pomodoro_count,
			"timeSpent": self.time_spent_minutes,
			"tags": list(self.tags),
			"createdAt": self.created_at,
		}
		if self.project_id:
			data["projectId"] = self.project_id
		if self.folder_id:
			data["folderId"] = self.folder_id
		return data


@dataclass
class Project:
	id: str
	name: str
	color: str = "hsl(210, 60%, 50%)"
	expanded: bool = True
	folder_id: Optional[str] = None
	# cached projection of member task state, see TaskService.refresh_projects
	completed: bool = False

	@classmethod
	def from_dict(cls, data):
		data = _as_dict(data)
		return cls(
			id=str(data.get("id") or new_id()),
			name=str(data.get("name", "")),
			color=data.get("color") or "hsl(210, 60%, 50%)",
			expanded=bool(data.get("expanded", True)),
			folder_id=data.get("folderId") or None,
			completed=bool(data.get("completed", False)),
		)

	def to_dict(self):
		data = {
			"id": self.id,
			"name": self.name,
			"color": self.color,
			"expanded": self.expanded,
			"completed": self.completed,
		}
		if self.folder_id:
			data["folderId"] = self.folder_id
		return data


@dataclass
class Folder:
	id: str
	name: str
	expanded: bool = True

	@classmethod
	def from_dict(cls, data):
		data = _as_dict(data)
		return cls(
			id=str(data.get("id") or new_id()),
			name=str(data.get("name", "")),
			expanded=bool(data.get("expanded", True)),
		)

	def to_dict(self):
		return {"id": self.id, "name": self.name, "expanded": self.expanded}


@dataclass
class GamificationCounters:
	fish: int = 0
	leaves: int = 0
	last_fed: Optional[str] = None

	@classmethod
	def from_dict(cls, data):
		data = _as_dict(data)
		return cls(
			fish=max(0, _as_int(data.get("fish"), 0)),
			leaves=max(0, _as_int(data.get("leaves"), 0)),
			last_fed=data.get("lastFed") or None,
		)

	def to_dict(self):
		data = {"fish": self.fish, "leaves": self.leaves}
		if self.last_fed:
			data["lastFed"] = self.last_fed
		return data
