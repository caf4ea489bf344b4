"""
Meeting session — Unit Tests
=============================
Run:  pytest test_session.py -v

A file-backed MemberStore under tmp_path plus ManualScheduler; store.replace
is wrapped so tests can count the writes that actually reach the backend.
"""
from contextlib import contextmanager
from unittest.mock import patch

import pytest

from session_manager.core.errors import BackendRequestFailed, MemberConflict, MemberNotFound, ValidationFailed
from session_manager.repositories.member_store import MemberStore
from session_manager.services.meeting_session import MeetingSession
from session_manager.services.scheduler import ManualScheduler
from session_manager.services.seeder import RosterSeeder
from session_manager.services.speaker_timer import EXPIRED, IDLE, PAUSED, RUNNING
from session_manager.services.sync_engine import SyncEngine


@pytest.fixture
def store(tmp_path):
    return MemberStore(env=lambda: {}, file_path=str(tmp_path / "members.json"))


@pytest.fixture
def sched():
    return ManualScheduler()


@pytest.fixture
def session(store, sched):
    engine = SyncEngine(store, sched, delay=0.7)
    seeder = RosterSeeder(store, names=["Aisha", "Bilal", "Omar"], speak_limit=120)
    return MeetingSession(engine, sched, seeder=seeder, tick_interval=1.0)


@pytest.fixture
def spy(store):
    with patch.object(store, "replace", wraps=store.replace) as mock:
        yield mock


def _ids(session):
    return [m.id for m in session.members]


# ═══════════════════════════════════════════════════════════════════════════
# Roster actions
# ═══════════════════════════════════════════════════════════════════════════
class TestRoster:
    def test_add_member_on_empty_store(self, session, store):
        member = session.add_member("  Zoya ")
        assert member.name == "Zoya"
        assert member.queue_order == 1
        assert member.attendance == "unmarked"
        assert member.role == "participant"
        assert member.speak_limit == 120
        assert member.elapsed_time == 0
        assert [m.name for m in store.load()] == ["Zoya"]

    def test_add_appends_to_queue(self, session):
        session.seed()
        member = session.add_member("Zoya")
        assert member.queue_order == 4

    @pytest.mark.parametrize("name", [None, "", "   "])
    def test_add_rejects_blank(self, session, spy, name):
        with pytest.raises(ValidationFailed):
            session.add_member(name)
        spy.assert_not_called()

    def test_add_rejects_reserved_name(self, session):
        with pytest.raises(ValidationFailed):
            session.add_member("None")

    def test_add_rejects_duplicate_case_insensitive(self, session):
        session.add_member("Zoya")
        with pytest.raises(MemberConflict):
            session.add_member("zOYA")

    def test_remove_member_renumbers(self, session, store):
        session.seed()
        first, second, third = session.members
        assert session.remove_member(second.id) is True
        stored = store.load()
        assert [m.id for m in stored] == [first.id, third.id]
        assert [m.queue_order for m in stored] == [1, 2]

    def test_remove_unknown_is_noop_without_write(self, session, spy):
        assert session.remove_member("missing") is False
        spy.assert_not_called()

    def test_remove_active_speaker_clears_timer(self, session):
        session.seed()
        target = session.members[0]
        session.select_speaker(target.id)
        session.start_speaker()
        session.remove_member(target.id)
        assert session.speaker.state == IDLE
        assert session.speaker.remaining == 0

    def test_reorder_writes_new_order(self, session, store):
        session.seed()
        a, b, c = _ids(session)
        session.reorder(c, a)
        assert [m.id for m in store.load()] == [c, a, b]
        assert [m.queue_order for m in session.members] == [1, 2, 3]

    def test_reorder_noop_skips_write(self, session, spy):
        session.seed()
        spy.reset_mock()
        a = _ids(session)[0]
        session.reorder(a, a)
        spy.assert_not_called()

    def test_set_attendance(self, session, store):
        session.seed()
        member_id = _ids(session)[0]
        session.set_attendance(member_id, "present")
        assert store.load()[0].attendance == "present"
        assert session.stats() == {"total": 3, "present": 1, "absent": 0}

    def test_set_attendance_rejects_unknown_value(self, session):
        session.seed()
        with pytest.raises(ValidationFailed):
            session.set_attendance(_ids(session)[0], "late")

    def test_unknown_member_raises(self, session):
        with pytest.raises(MemberNotFound):
            session.set_attendance("missing", "present")

    def test_set_role_applies_role_default(self, session):
        session.seed()
        member = session.set_role(_ids(session)[0], "host")
        assert member.role == "host"
        assert member.speak_limit == 600

    def test_replace_members_drops_stale_queue(self, session):
        session.seed()
        keep = session.members[:1]
        session.speaker.enqueue(session.members[2].id)
        session.replace_members(keep)
        assert _ids(session) == [keep[0].id]
        assert session.speaker.queue == []

    def test_actions_bump_version(self, session):
        before = session.working_copy.version
        session.add_member("Zoya")
        assert session.working_copy.version > before


# ═══════════════════════════════════════════════════════════════════════════
# Seeding & loading
# ═══════════════════════════════════════════════════════════════════════════
class TestSeedAndLoad:
    def test_seed_populates_working_copy(self, session):
        result = session.seed()
        assert result.seeded is True
        assert [m.name for m in session.members] == ["Aisha", "Bilal", "Omar"]

    def test_seed_without_force_keeps_roster(self, session):
        session.add_member("Zoya")
        result = session.seed(force=False)
        assert result.seeded is False
        assert [m.name for m in session.members] == ["Zoya"]

    def test_forced_seed_overwrites_and_clears_speaker(self, session):
        zoya = session.add_member("Zoya")
        session.select_speaker(zoya.id)
        result = session.seed(force=True)
        assert result.seeded is True
        assert "Zoya" not in [m.name for m in session.members]
        assert session.speaker.state == IDLE

    def test_load_adopts_store_contents(self, session, store):
        other = MeetingSession(SyncEngine(store, ManualScheduler()), ManualScheduler())
        other.add_member("Zoya")
        session.load()
        assert [m.name for m in session.members] == ["Zoya"]


# ═══════════════════════════════════════════════════════════════════════════
# Speaker actions & ticking
# ═══════════════════════════════════════════════════════════════════════════
class TestSpeaker:
    def test_ticks_write_only_after_debounce(self, session, sched, spy):
        session.seed()
        member_id = _ids(session)[0]
        session.select_speaker(member_id)
        session.start_speaker()
        spy.reset_mock()
        session.tick()
        session.tick()
        spy.assert_not_called()
        assert session.snapshot()["pendingSync"] is True
        sched.advance(0.7)
        spy.assert_called_once()
        assert spy.call_args.kwargs["trigger"] == "debounced"
        assert spy.call_args.args[0][0].elapsed_time == 2

    def test_ticker_drives_both_timers(self, session, sched, store):
        session.seed()
        member_id = _ids(session)[0]
        session.select_speaker(member_id)
        session.start_speaker()
        session.start_session(1)
        session.start_ticking()
        sched.advance(10)
        session.stop_ticking()
        assert session.session_timer.remaining == 50
        assert session.speaker.remaining == 110
        sched.advance(1)
        assert store.load()[0].elapsed_time == 10

    def test_speaker_expires(self, session, sched):
        session.seed()
        member_id = _ids(session)[0]
        session.apply_speaker_config("participant", 1)
        session.select_speaker(member_id)
        session.start_speaker()
        for _ in range(60):
            session.tick()
        assert session.speaker.state == EXPIRED
        assert session.speaker.remaining == 0
        assert session.get_member(member_id).elapsed_time == 60

    def test_pause_stops_charging(self, session):
        session.seed()
        member_id = _ids(session)[0]
        session.select_speaker(member_id)
        session.start_speaker()
        session.tick()
        session.pause_speaker()
        session.tick()
        assert session.get_member(member_id).elapsed_time == 1
        assert session.speaker.state == PAUSED

    def test_reset_speaker_zeroes_elapsed(self, session, store):
        session.seed()
        member_id = _ids(session)[0]
        session.select_speaker(member_id)
        session.start_speaker()
        for _ in range(5):
            session.tick()
        snap = session.reset_speaker()
        assert snap["remaining"] == 120
        assert snap["state"] == PAUSED
        assert store.load()[0].elapsed_time == 0

    def test_reset_without_selection_fails(self, session):
        with pytest.raises(ValidationFailed):
            session.reset_speaker()

    def test_config_with_selection_updates_member(self, session):
        session.seed()
        member_id = _ids(session)[0]
        session.select_speaker(member_id)
        snap = session.apply_speaker_config("presenter", 3)
        member = session.get_member(member_id)
        assert member.role == "presenter"
        assert member.speak_limit == 180
        assert snap["remaining"] == 180
        assert snap["pendingMinutes"] == 3

    def test_config_without_selection_is_bulk(self, session):
        session.seed()
        session.set_role(_ids(session)[0], "host")
        session.apply_speaker_config("participant", 4)
        limits = {m.role: m.speak_limit for m in session.members}
        assert limits == {"host": 600, "participant": 240}
        assert session.role_limits["participant"] == 240

    def test_bulk_config_sets_default_for_later_role_changes(self, session):
        session.seed()
        session.apply_speaker_config("cohost", 7)
        member = session.set_role(_ids(session)[0], "cohost")
        assert member.speak_limit == 420

    def test_config_rejects_unknown_role(self, session):
        with pytest.raises(ValidationFailed):
            session.apply_speaker_config("moderator", 3)

    def test_queue_and_advance(self, session):
        session.seed()
        a, b, c = _ids(session)
        session.enqueue_speaker(c)
        session.enqueue_speaker(a)
        snap = session.advance_speaker()
        assert snap["memberId"] == c
        assert snap["queue"] == [a]

    def test_enqueue_unknown_member(self, session):
        with pytest.raises(MemberNotFound):
            session.enqueue_speaker("missing")

    def test_start_speaker_with_nothing_selected_stays_idle(self, session):
        assert session.start_speaker()["state"] == IDLE

    def test_close_flushes_pending_ticks(self, session, store):
        session.seed()
        member_id = _ids(session)[0]
        session.select_speaker(member_id)
        session.start_speaker()
        session.tick()
        assert session.speaker.state == RUNNING
        session.close()
        assert store.load()[0].elapsed_time == 1


# ═══════════════════════════════════════════════════════════════════════════
# Session timer
# ═══════════════════════════════════════════════════════════════════════════
class TestSessionTimerActions:
    def test_default_duration(self, session):
        snap = session.start_session()
        assert snap["initial"] == 45 * 60
        assert snap["state"] == "running"

    def test_pause_resume_reset(self, session):
        session.start_session(2)
        session.tick()
        assert session.pause_session()["remaining"] == 119
        session.tick()
        assert session.resume_session()["remaining"] == 119
        assert session.reset_session() == {"state": "stopped", "initial": 0, "remaining": 0, "progress": 0.0}

    def test_session_tick_does_not_write(self, session, spy):
        session.start_session(1)
        session.tick()
        spy.assert_not_called()

    def test_zero_minutes_is_rejected_not_defaulted(self, session):
        with pytest.raises(ValidationFailed):
            session.start_session(0)
        assert session.session_timer.running is False


# ═══════════════════════════════════════════════════════════════════════════
# Store / working copy reconcile
# ═══════════════════════════════════════════════════════════════════════════
class TestReconcile:
    def _fail_startup(self, session, store):
        with patch.object(store, "load", side_effect=BackendRequestFailed("kv", 503, "unavailable")):
            with pytest.raises(BackendRequestFailed):
                session.seed(force=False)
        assert session.members == []

    def test_add_after_failed_startup_keeps_stored_roster(self, session, store):
        RosterSeeder(store, names=["Aisha", "Bilal", "Omar"]).seed()
        self._fail_startup(session, store)
        session.add_member("Zoya")
        assert [m.name for m in store.load()] == ["Aisha", "Bilal", "Omar", "Zoya"]

    def test_remove_after_failed_startup_finds_stored_member(self, session, store):
        RosterSeeder(store, names=["Aisha", "Bilal"]).seed()
        self._fail_startup(session, store)
        stored_id = store.load()[0].id
        assert session.remove_member(stored_id) is True
        assert [m.name for m in store.load()] == ["Bilal"]

    def test_unloaded_copy_is_never_written(self, session, store):
        RosterSeeder(store, names=["Aisha"]).seed()
        with patch.object(store, "load", side_effect=BackendRequestFailed("kv", 503, "unavailable")), \
                patch.object(store, "replace") as replace:
            with pytest.raises(BackendRequestFailed):
                session.add_member("Zoya")
            replace.assert_not_called()
        assert [m.name for m in store.load()] == ["Aisha"]

    @contextmanager
    def _writes_failing(self, session, sched, store, ticks):
        session.seed()
        session.select_speaker(_ids(session)[0])
        session.start_speaker()
        denied = BackendRequestFailed("relational", 403, "permission denied")
        with patch.object(store, "replace", side_effect=denied):
            for _ in range(ticks):
                session.tick()
            sched.advance(1)
            yield
        session.pause_speaker()

    def test_reload_keeps_ticks_after_failed_flush(self, session, sched, store):
        with self._writes_failing(session, sched, store, 10):
            members = session.reload()
        assert members[0].elapsed_time == 10
        assert session.members[0].elapsed_time == 10
        assert store.load()[0].elapsed_time == 0

    def test_next_explicit_write_persists_unflushed_ticks(self, session, sched, store):
        with self._writes_failing(session, sched, store, 4):
            pass
        session.set_attendance(_ids(session)[0], "present")
        assert store.load()[0].elapsed_time == 4
        assert session.reload()[0].elapsed_time == 4

    def test_seed_without_force_keeps_unflushed_ticks(self, session, sched, store):
        with self._writes_failing(session, sched, store, 3):
            result = session.seed(force=False)
        assert result.seeded is False
        assert session.members[0].elapsed_time == 3
