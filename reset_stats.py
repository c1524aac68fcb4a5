"""
Wipe FocusFlow's statistics: counters, the daily timeline and the timer state.
Tasks, projects and folders are only removed on a second confirmation.
"""

from BackEnd.repos.document_repo import DocumentStore, STATISTICS, TASKS, PROJECTS, FOLDERS, TIMER_STATE


def _confirmed(reply):
    return reply.strip().lower() in ('yes', 'y')


def reset_all_stats(store=None, ask=input):
    """Delete the statistics documents (and optionally the task lists) after confirmation."""
    store = store or DocumentStore()

    if not store.exists(STATISTICS):
        print("Nothing to wipe: no sessions have been recorded yet.")
    elif _confirmed(ask(f"Wipe every recorded session in {store.base_dir}? (yes/no): ")):
        try:
            store.remove(STATISTICS)
            store.remove(TIMER_STATE)
            print("Session history wiped; the timer starts again from a fresh focus interval.")
        except OSError as e:
            print(f"Could not wipe session history: {e}")
    else:
        print("Session history kept.")

    if store.exists(TASKS):
        if _confirmed(ask("\nRemove tasks, projects and folders as well? (yes/no): ")):
            try:
                for key in (TASKS, PROJECTS, FOLDERS):
                    store.remove(key)
                print("Task lists removed.")
            except OSError as e:
                print(f"Could not remove task lists: {e}")


if __name__ == "__main__":
    print("FocusFlow statistics reset")
    reset_all_stats()
