"""Tests for tasks, projects and folders."""

from BackEnd.core.clock import local_today_str, parse_iso
from BackEnd.core.models import BlockKind, TaskBlock
from BackEnd.repos.document_repo import FOLDERS, PROJECTS, TASKS
from BackEnd.services.session_service import SessionService
from BackEnd.services.task_service import BLOCK_PALETTE


class TestTasks:

    def test_add_task(self, session, store, clock):
        task = session.tasks.add_task("  Outline essay  ", tags=["uni"])
        assert task.title == "Outline essay"
        assert task.completed is False
        assert task.pomodoro_count == 0
        assert parse_iso(task.created_at) == clock()
        assert store.load(TASKS)[0]["title"] == "Outline essay"

    def test_blank_title_is_ignored(self, session):
        assert session.tasks.add_task("   ") is None
        assert session.tasks.tasks == []

    def test_unknown_project_is_dropped(self, session):
        task = session.tasks.add_task("Stray", project_id="missing")
        assert task.project_id is None

    def test_completing_awards_one_leaf(self, session, notifications):
        task = session.tasks.add_task("Outline essay")
        session.tasks.toggle_completed(task.id)
        assert session.gamification.leaves == 1
        assert notifications[-1][0] == "Task completed! 🌱"

        # un-completing and completing again awards another leaf
        session.tasks.toggle_completed(task.id)
        assert session.gamification.leaves == 1
        session.tasks.toggle_completed(task.id)
        assert session.gamification.leaves == 2

    def test_toggle_unknown_task(self, session):
        assert session.tasks.toggle_completed("nope") is None

    def test_delete_task(self, session, store):
        task = session.tasks.add_task("Outline essay")
        assert session.tasks.delete_task(task.id) is True
        assert session.tasks.delete_task(task.id) is False
        assert store.load(TASKS) == []

    def test_set_tags_dedupes(self, session):
        task = session.tasks.add_task("Outline essay")
        session.tasks.set_tags(task.id, ["uni", " uni ", "", "draft"])
        assert session.tasks.get_task(task.id).tags == ["uni", "draft"]

    def test_record_pomodoro(self, session):
        task = session.tasks.add_task("Outline essay")
        session.tasks.record_pomodoro(task.id, 25)
        session.tasks.record_pomodoro(task.id, 30)
        updated = session.tasks.get_task(task.id)
        assert updated.pomodoro_count == 2
        assert updated.time_spent_minutes == 55
        assert session.tasks.record_pomodoro("missing", 25) is None


class TestFiling:

    def test_project_and_folder_are_exclusive(self, session):
        tasks = session.tasks
        project = tasks.add_project("Thesis")
        folder = tasks.add_folder("University")
        task = tasks.add_task("Read paper", project_id=project.id)

        tasks.set_folder(task.id, folder.id)
        assert task.folder_id == folder.id
        assert task.project_id is None

        tasks.set_project(task.id, project.id)
        assert task.project_id == project.id
        assert task.folder_id is None

    def test_folder_label_falls_back_to_project_folder(self, session):
        tasks = session.tasks
        folder = tasks.add_folder("University")
        project = tasks.add_project("Thesis", folder_id=folder.id)
        task = tasks.add_task("Read paper", project_id=project.id)
        assert tasks.project_label_for(task) == "Thesis"
        assert tasks.folder_label_for(task) == "University"

    def test_move_project(self, session):
        tasks = session.tasks
        folder = tasks.add_folder("University")
        project = tasks.add_project("Thesis")
        tasks.move_project(project.id, folder.id)
        assert project.folder_id == folder.id
        tasks.move_project(project.id, None)
        assert project.folder_id is None
        assert tasks.move_project(project.id, "missing") is None

    def test_move_folder(self, session, store):
        tasks = session.tasks
        a = tasks.add_folder("A")
        b = tasks.add_folder("B")
        c = tasks.add_folder("C")
        tasks.move_folder(c.id, 0)
        assert [f.name for f in tasks.folders] == ["C", "A", "B"]
        tasks.move_folder(c.id, 99)
        assert [f["name"] for f in store.load(FOLDERS)] == ["A", "B", "C"]
        assert a.expanded and b.expanded

    def test_delete_folder_unfiles_members(self, session):
        tasks = session.tasks
        folder = tasks.add_folder("University")
        project = tasks.add_project("Thesis", folder_id=folder.id)
        task = tasks.add_task("Read paper", folder_id=folder.id)
        assert tasks.delete_folder(folder.id) is True
        assert task.folder_id is None
        assert project.folder_id is None
        assert tasks.folders == []

    def test_delete_project_unfiles_tasks(self, session):
        tasks = session.tasks
        project = tasks.add_project("Thesis")
        task = tasks.add_task("Read paper", project_id=project.id)
        tasks.delete_project(project.id)
        assert task.project_id is None
        assert tasks.tasks_by_category()["orphanTasks"] == [task]

    def test_tasks_by_category(self, session):
        tasks = session.tasks
        project = tasks.add_project("Thesis")
        folder = tasks.add_folder("University")
        loose = tasks.add_task("Loose")
        in_project = tasks.add_task("In project", project_id=project.id)
        in_folder = tasks.add_task("In folder", folder_id=folder.id)
        done = tasks.add_task("Done")
        tasks.toggle_completed(done.id)

        groups = tasks.tasks_by_category()
        assert groups["orphanTasks"] == [loose]
        assert groups["projectTasks"] == [(project, [in_project])]
        assert groups["folderTasks"] == [(folder, [in_folder])]
        assert groups["completedTasks"] == [done]

    def test_expanded_flags(self, session):
        tasks = session.tasks
        project = tasks.add_project("Thesis")
        folder = tasks.add_folder("University")
        tasks.toggle_project_expanded(project.id)
        tasks.toggle_folder_expanded(folder.id)
        assert project.expanded is False
        assert folder.expanded is False


class TestProjectCompletion:

    def test_project_completes_with_its_last_task(self, session, notifications, store):
        tasks = session.tasks
        completed_ids = []
        tasks.project_completed.connect(completed_ids.append)
        project = tasks.add_project("Thesis")
        members = [tasks.add_task(f"Chapter {n}", project_id=project.id) for n in (1, 2, 3)]

        tasks.toggle_completed(members[0].id)
        tasks.toggle_completed(members[1].id)
        assert project.completed is False

        tasks.toggle_completed(members[2].id)
        assert project.completed is True
        assert completed_ids == [project.id]
        assert ("Project completed! 🎉", 'Every task in "Thesis" is done.') in notifications
        assert store.load(PROJECTS)[0]["completed"] is True

        tasks.toggle_completed(members[0].id)
        assert project.completed is False
        assert completed_ids == [project.id]

    def test_empty_project_is_never_complete(self, session):
        project = session.tasks.add_project("Empty")
        session.tasks.refresh_projects()
        assert project.completed is False

    def test_adding_a_task_reopens_project(self, session):
        tasks = session.tasks
        project = tasks.add_project("Thesis")
        first = tasks.add_task("Chapter 1", project_id=project.id)
        tasks.toggle_completed(first.id)
        assert project.completed is True
        tasks.add_task("Chapter 2", project_id=project.id)
        assert project.completed is False

    def test_deleting_the_open_task_completes_project(self, session):
        tasks = session.tasks
        project = tasks.add_project("Thesis")
        done = tasks.add_task("Chapter 1", project_id=project.id)
        still_open = tasks.add_task("Chapter 2", project_id=project.id)
        tasks.toggle_completed(done.id)
        tasks.delete_task(still_open.id)
        assert project.completed is True

    def test_stale_flag_is_corrected_on_load(self, store, clock):
        store.save(PROJECTS, [{"id": "p1", "name": "Old", "completed": True}])
        svc = SessionService(store=store, now=clock)
        assert svc.tasks.get_project("p1").completed is False
        assert store.load(PROJECTS)[0]["completed"] is False
        svc.shutdown()

    def test_non_list_document_starts_empty(self, store, clock):
        store.save(TASKS, {"oops": True})
        svc = SessionService(store=store, now=clock)
        assert svc.tasks.tasks == []
        svc.shutdown()


class TestBlockColors:

    def block(self, project=None, folder=None):
        return TaskBlock(
            id="b1",
            task_label="Read paper",
            start_time="2026-03-10T09:00:00.000+00:00",
            end_time="2026-03-10T09:25:00.000+00:00",
            duration_minutes=25.0,
            kind=BlockKind.FOCUS,
            completed=True,
            project_label=project,
            folder_label=folder,
        )

    def test_project_colour_wins(self, session):
        session.tasks.add_project("Thesis", color="#123456")
        assert session.tasks.block_color(self.block(project="Thesis")) == "#123456"

    def test_unknown_names_get_a_stable_palette_colour(self, session):
        tasks = session.tasks
        gone = tasks.block_color(self.block(project="Deleted project"))
        assert gone in BLOCK_PALETTE
        assert tasks.block_color(self.block(project="Deleted project")) == gone
        assert tasks.block_color(self.block(folder="University")) in BLOCK_PALETTE
        assert tasks.block_color(self.block()) in BLOCK_PALETTE

    def test_session_timeline_pairs_blocks_with_colours(self, session, finish, clock):
        project = session.tasks.add_project("Thesis", color="#123456")
        task = session.tasks.add_task("Write chapter 2", project_id=project.id)
        session.timer.select_task(task)
        session.timer.toggle()
        finish(session.timer, seconds=1)

        timeline = session.timeline(local_today_str(clock()))
        (block, color), = timeline[9]
        assert block.task_label == "Write chapter 2"
        assert color == "#123456"
