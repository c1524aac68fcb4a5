import argparse
import signal
import sys

from PySide6.QtCore import QCoreApplication

from BackEnd.core.clock import fmt_minutes, local_today_str
from BackEnd.core.logging_handler import setup_logger, use_log_dir
from BackEnd.services.chart_service import save_focus_chart
from BackEnd.services.session_service import SessionService
from BackEnd.services.transfer_service import ImportFailed

logger = setup_logger("focusflow")


def run_timer(app, session, args):
    timer = session.timer
    if args.task:
        task = session.tasks.get_task(args.task)
        if task is None:
            print(f"No task with id {args.task}")
            return 1
        timer.select_task(task)

    timer.time_changed.connect(lambda left: print(f"\r{timer.mode_title()}  {timer.time_text()}", end="", flush=True))
    # one interval per run; the timer parks itself after completing
    timer.completed.connect(lambda finished, nxt: app.quit())
    signal.signal(signal.SIGINT, lambda *_: app.quit())

    session.start()
    if not timer.state.is_running:
        timer.toggle()
    print(f"{timer.mode_title()} (cycle {timer.state.cycle}) - {timer.time_text()}")
    code = app.exec()
    print()
    if timer.state.is_running:
        # interrupted: keep the countdown where it is for next time
        timer.toggle()
        logger.info(f"Timer interrupted with {timer.time_text()} left")
    session.shutdown()
    return code


def print_status(session):
    timer = session.timer
    summary = session.ledger.today_summary()
    print(f"{timer.mode_title()} (cycle {timer.state.cycle}): {timer.time_text()} "
        f"{'running' if timer.state.is_running else 'stopped'}")
    if timer.state.current_task_label:
        print(f"Task: {timer.state.current_task_label}")
    print(f"Today ({local_today_str()}): {summary['sessions']} sessions, {fmt_minutes(summary['focusTime'])} focused")
    print(f"Streak: {session.ledger.daily_streak()} days")
    stage = session.gamification.tree_stage()
    _, description = session.gamification.pond_level()
    print(f"Tree: {stage} ({session.gamification.leaves} leaves)  Pond: {description} ({session.gamification.fish} fish)")
    return 0


def print_tasks(session):
    groups = session.tasks.tasks_by_category()
    for task in groups["orphanTasks"]:
        print(f"  [ ] {task.id}  {task.title}  🍅{task.pomodoro_count}  {fmt_minutes(task.time_spent_minutes)}")
    for project, tasks in groups["projectTasks"]:
        print(f"{project.name}{' ✓' if project.completed else ''}")
        for task in tasks:
            print(f"  [ ] {task.id}  {task.title}  🍅{task.pomodoro_count}")
    for folder, tasks in groups["folderTasks"]:
        print(f"{folder.name}/")
        for task in tasks:
            print(f"  [ ] {task.id}  {task.title}  🍅{task.pomodoro_count}")
    for task in groups["completedTasks"]:
        print(f"  [x] {task.id}  {task.title}")
    return 0


def build_parser():
    parser = argparse.ArgumentParser(prog="focusflow", description="Pomodoro timer with tasks, tree and pond")
    parser.add_argument("--data-dir", help="override the data directory")
    sub = parser.add_subparsers(dest="command", required=True)

    run = sub.add_parser("run", help="run the current interval")
    run.add_argument("--task", help="task id to attribute focus time to")
    sub.add_parser("status", help="show timer and today's statistics")
    sub.add_parser("reset", help="refill the current interval")
    sub.add_parser("skip", help="skip to the next interval")

    settings = sub.add_parser("settings", help="change timer durations (minutes)")
    settings.add_argument("--focus", type=int)
    settings.add_argument("--short", type=int)
    settings.add_argument("--long", type=int)
    settings.add_argument("--interval", type=int)

    sub.add_parser("tasks", help="list tasks")
    add = sub.add_parser("add-task", help="add a task")
    add.add_argument("title")
    add.add_argument("--project")
    add.add_argument("--folder")
    done = sub.add_parser("done", help="toggle a task's completed flag")
    done.add_argument("task_id")

    sub.add_parser("feed", help="feed the fish")
    export = sub.add_parser("export", help="export all data to a JSON file")
    export.add_argument("path")
    imp = sub.add_parser("import", help="import data from a JSON file")
    imp.add_argument("path")
    chart = sub.add_parser("chart", help="save a focus-time bar chart")
    chart.add_argument("path")
    chart.add_argument("--timeframe", choices=["week", "month"], default="week")
    chart.add_argument("--offset", type=int, default=0)
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    if args.data_dir:
        use_log_dir(args.data_dir)
    app = QCoreApplication.instance() or QCoreApplication(sys.argv)
    session = SessionService(base_dir=args.data_dir)
    session.notification.connect(lambda title, text: print(f"{title} {text}"))
    command = args.command

    if command == "run":
        return run_timer(app, session, args)
    if command == "status":
        return print_status(session)
    if command == "reset":
        session.timer.reset()
        return print_status(session)
    if command == "skip":
        session.timer.skip()
        return print_status(session)
    if command == "settings":
        current = session.timer.settings.to_dict()
        for field, value in (("focusTime", args.focus), ("shortBreak", args.short),
                            ("longBreak", args.long), ("longBreakInterval", args.interval)):
            if value is not None:
                current[field] = value
        applied = session.timer.apply_settings_change(current)
        print(applied.to_dict())
        return 0
    if command == "tasks":
        return print_tasks(session)
    if command == "add-task":
        task = session.tasks.add_task(args.title, project_id=args.project, folder_id=args.folder)
        if task is None:
            print("Task title cannot be empty")
            return 1
        print(task.id)
        return 0
    if command == "done":
        if session.tasks.toggle_completed(args.task_id) is None:
            print(f"No task with id {args.task_id}")
            return 1
        return 0
    if command == "feed":
        if not session.gamification.feed():
            next_time = session.gamification.next_feed_time()
            print("Nothing to feed yet" if session.gamification.fish == 0
                else f"Fish are full; next feed at {next_time.astimezone():%H:%M}")
        return 0
    if command == "export":
        session.transfer.export_to(args.path)
        print(f"Data exported to {args.path}")
        return 0
    if command == "import":
        try:
            applied = session.transfer.import_from(args.path)
        except ImportFailed as e:
            print(f"Import failed: {e}")
            return 1
        print(f"Data imported: {', '.join(applied) or 'nothing'}")
        return 0
    if command == "chart":
        save_focus_chart(session.ledger, args.path, args.timeframe, args.offset)
        print(f"Chart saved to {args.path}")
        return 0
    return 1


if __name__ == "__main__":
    sys.exit(main())
