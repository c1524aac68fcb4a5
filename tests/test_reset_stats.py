"""Tests for the reset script."""

from BackEnd.repos.document_repo import PROJECTS, STATISTICS, TASKS, TIMER_STATE
from reset_stats import reset_all_stats


def answers(*replies):
    it = iter(replies)
    return lambda prompt: next(it)


class TestResetStats:

    def test_confirmed_reset_keeps_tasks(self, store, capsys):
        store.save(STATISTICS, {"totalSessions": 4})
        store.save(TIMER_STATE, {"mode": "focus"})
        store.save(TASKS, [])
        reset_all_stats(store, ask=answers("yes", "no"))
        assert not store.exists(STATISTICS)
        assert not store.exists(TIMER_STATE)
        assert store.exists(TASKS)
        assert "Session history wiped" in capsys.readouterr().out

    def test_tasks_removed_when_asked(self, store):
        store.save(STATISTICS, {})
        store.save(TASKS, [])
        store.save(PROJECTS, [])
        reset_all_stats(store, ask=answers("y", "y"))
        assert not store.exists(TASKS)
        assert not store.exists(PROJECTS)

    def test_cancelled(self, store, capsys):
        store.save(STATISTICS, {"totalSessions": 4})
        reset_all_stats(store, ask=answers("no"))
        assert store.exists(STATISTICS)
        assert "Session history kept." in capsys.readouterr().out

    def test_nothing_to_reset(self, store, capsys):
        reset_all_stats(store, ask=answers())
        assert "no sessions have been recorded" in capsys.readouterr().out
