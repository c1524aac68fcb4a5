import random

from PySide6.QtCore import QObject, Signal

from BackEnd.core.clock import local_now, utc_now_iso
from BackEnd.core.models import Folder, Project, Task, new_id
from BackEnd.core.logging_handler import setup_logger
from BackEnd.repos.document_repo import FOLDERS, PROJECTS, TASKS

logger = setup_logger(__name__)

# timeline colours for blocks whose project no longer exists (or has none)
BLOCK_PALETTE = ["#5EA1FF", "#4FA3C7", "#5DB075", "#F29A4A", "#B07CE8", "#8FAEC4"]


class TaskService(QObject):
	"""Tasks filed under projects or folders, persisted as three documents.

	``Project.completed`` is a projection of its member tasks and is only
	written by ``refresh_projects``.
	"""
	notification = Signal(str, str)
	task_completed = Signal(str)
	project_completed = Signal(str)
	changed = Signal()

	def __init__(self, store, gamification=None, now=None):
		super().__init__()
		self.store = store
		self.gamification = gamification
		self._now = now or local_now
		self.reload()
		self.refresh_projects()

	def reload(self):
		self.tasks = [Task.from_dict(t) for t in self._load_list(TASKS)]
		self.projects = [Project.from_dict(p) for p in self._load_list(PROJECTS)]
		self.folders = [Folder.from_dict(f) for f in self._load_list(FOLDERS)]

	def _load_list(self, key):
		data = self.store.load(key, [])
		if not isinstance(data, list):
			logger.warning(f"Document '{key}' is not a list; starting empty")
			return []
		return [item for item in data if isinstance(item, dict)]

	def _save_tasks(self):
		self.store.save(TASKS, [t.to_dict() for t in self.tasks])
		self.changed.emit()

	def _save_projects(self):
		self.store.save(PROJECTS, [p.to_dict() for p in self.projects])
		self.changed.emit()

	def _save_folders(self):
		self.store.save(FOLDERS, [f.to_dict() for f in self.folders])
		self.changed.emit()

	# --- lookups ---
	def get_task(self, task_id):
		return next((t for t in self.tasks if t.id == task_id), None)

	def get_project(self, project_id):
		return next((p for p in self.projects if p.id == project_id), None)

	def get_folder(self, folder_id):
		return next((f for f in self.folders if f.id == folder_id), None)

	def project_label_for(self, task):
		project = self.get_project(task.project_id) if task and task.project_id else None
		return project.name if project else None

	def folder_label_for(self, task):
		"""Folder name of the task, or of the folder its project is filed under."""
		if task is None:
			return None
		folder_id = task.folder_id
		if folder_id is None and task.project_id:
			project = self.get_project(task.project_id)
			folder_id = project.folder_id if project else None
		folder = self.get_folder(folder_id) if folder_id else None
		return folder.name if folder else None

	def block_color(self, block):
		"""Colour for a timeline block: its project's colour, else a stable palette pick by name."""
		if block.project_label:
			project = next((p for p in self.projects if p.name == block.project_label), None)
			if project is not None:
				return project.color
		name = block.project_label or block.folder_label or "default"
		h = 0
		for ch in name:
			h = ((h << 5) - h + ord(ch)) & 0xFFFFFFFF
		if h >= 0x80000000:
			h -= 0x100000000
		return BLOCK_PALETTE[abs(h) % len(BLOCK_PALETTE)]

	def tasks_in_project(self, project_id):
		return [t for t in self.tasks if t.project_id == project_id]

	def tasks_by_category(self):
		"""Active tasks split into unfiled / per project / per folder, plus completed ones."""
		active = [t for t in self.tasks if not t.completed]
		return {
			"orphanTasks": [t for t in active if not t.project_id and not t.folder_id],
			"projectTasks": [(p, [t for t in active if t.project_id == p.id]) for p in self.projects],
			"folderTasks": [(f, [t for t in active if t.folder_id == f.id]) for f in self.folders],
			"completedTasks": [t for t in self.tasks if t.completed],
		}

	# --- tasks ---
	def add_task(self, title, tags=None, project_id=None, folder_id=None):
		title = (title or "").strip()
		if not title:
			return None
		task = Task(
			id=new_id(),
			title=title,
			tags=list(tags or []),
			project_id=project_id if self.get_project(project_id) else None,
			folder_id=folder_id if self.get_folder(folder_id) else None,
			created_at=utc_now_iso(self._now()),
		)
		self.tasks.append(task)
		self._save_tasks()
		self.refresh_projects()
		return task

	def toggle_completed(self, task_id):
		"""Flip a task's completed flag; completing one awards a leaf."""
		task = self.get_task(task_id)
		if task is None:
			return None
		task.completed = not task.completed
		self._save_tasks()
		if task.completed:
			if self.gamification is not None:
				self.gamification.add_leaf()
			self.task_completed.emit(task.id)
			self.notification.emit("Task completed! 🌱", f'"{task.title}" is done. A new leaf has been added to your tree!')
		self.refresh_projects()
		return task

	def delete_task(self, task_id):
		before = len(self.tasks)
		self.tasks = [t for t in self.tasks if t.id != task_id]
		if len(self.tasks) == before:
			return False
		self._save_tasks()
		self.refresh_projects()
		return True

	def set_project(self, task_id, project_id):
		"""File a task under a project (leaving any folder), or unfile with None."""
		task = self.get_task(task_id)
		if task is None or (project_id is not None and self.get_project(project_id) is None):
			return None
		task.project_id = project_id
		task.folder_id = None
		self._save_tasks()
		self.refresh_projects()
		return task

	def set_folder(self, task_id, folder_id):
		"""File a task directly under a folder (leaving any project), or unfile with None."""
		task = self.get_task(task_id)
		if task is None or (folder_id is not None and self.get_folder(folder_id) is None):
			return None
		task.folder_id = folder_id
		task.project_id = None
		self._save_tasks()
		self.refresh_projects()
		return task

	def set_tags(self, task_id, tags):
		task = self.get_task(task_id)
		if task is None:
			return None
		seen = []
		for tag in tags:
			tag = str(tag).strip()
			if tag and tag not in seen:
				seen.append(tag)
		task.tags = seen
		self._save_tasks()
		return task

	def record_pomodoro(self, task_id, minutes):
		"""Credit one completed focus interval of ``minutes`` to a task."""
		task = self.get_task(task_id)
		if task is None:
			logger.warning(f"Selected task {task_id} no longer exists; focus not attributed")
			return None
		task.pomodoro_count += 1
		task.time_spent_minutes += int(minutes)
		self._save_tasks()
		return task

	# --- projects ---
	def add_project(self, name, color=None, folder_id=None):
		name = (name or "").strip()
		if not name:
			return None
		project = Project(
			id=new_id(),
			name=name,
			color=color or f"hsl({random.randint(0, 359)}, 60%, 50%)",
			folder_id=folder_id if self.get_folder(folder_id) else None,
		)
		self.projects.append(project)
		self._save_projects()
		return project

	def toggle_project_expanded(self, project_id):
		project = self.get_project(project_id)
		if project is None:
			return None
		project.expanded = not project.expanded
		self._save_projects()
		return project

	def move_project(self, project_id, folder_id):
		"""File a project under a folder, or at top level with None."""
		project = self.get_project(project_id)
		if project is None or (folder_id is not None and self.get_folder(folder_id) is None):
			return None
		project.folder_id = folder_id
		self._save_projects()
		return project

	def delete_project(self, project_id):
		if self.get_project(project_id) is None:
			return False
		self.projects = [p for p in self.projects if p.id != project_id]
		for task in self.tasks:
			if task.project_id == project_id:
				task.project_id = None
		self._save_projects()
		self._save_tasks()
		return True

	def refresh_projects(self):
		"""Recompute every project's completed flag; returns newly completed projects."""
		newly_completed = []
		dirty = False
		for project in self.projects:
			members = self.tasks_in_project(project.id)
			done = len(members) > 0 and all(t.completed for t in members)
			if done != project.completed:
				dirty = True
				if done:
					newly_completed.append(project)
			project.completed = done
		if dirty:
			self._save_projects()
		for project in newly_completed:
			self.project_completed.emit(project.id)
			self.notification.emit("Project completed! 🎉", f'Every task in "{project.name}" is done.')
		return newly_completed

	# --- folders ---
	def add_folder(self, name):
		name = (name or "").strip()
		if not name:
			return None
		folder = Folder(id=new_id(), name=name)
		self.folders.append(folder)
		self._save_folders()
		return folder

	def toggle_folder_expanded(self, folder_id):
		folder = self.get_folder(folder_id)
		if folder is None:
			return None
		folder.expanded = not folder.expanded
		self._save_folders()
		return folder

	def move_folder(self, folder_id, index):
		"""Move a folder to position ``index`` in the folder list."""
		folder = self.get_folder(folder_id)
		if folder is None:
			return None
		self.folders.remove(folder)
		index = max(0, min(int(index), len(self.folders)))
		self.folders.insert(index, folder)
		self._save_folders()
		return folder

	def delete_folder(self, folder_id):
		if self.get_folder(folder_id) is None:
			return False
		self.folders = [f for f in self.folders if f.id != folder_id]
		for task in self.tasks:
			if task.folder_id == folder_id:
				task.folder_id = None
		for project in self.projects:
			if project.folder_id == folder_id:
				project.folder_id = None
		self._save_folders()
		self._save_tasks()
		self._save_projects()
		return True
