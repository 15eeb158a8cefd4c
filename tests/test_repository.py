import pytest

from weekly_schedule.clock import MalformedTime
from weekly_schedule.db import DEFAULT_PROFILE_NAME
from weekly_schedule.models import DEFAULT_SETTINGS


def test_fresh_db_has_default_profile_and_settings(repo):
    assert repo.list_profiles() == [DEFAULT_PROFILE_NAME]
    assert repo.active_profile() == DEFAULT_PROFILE_NAME
    assert repo.get_settings() == DEFAULT_SETTINGS


def test_settings_round_trip(repo):
    s = DEFAULT_SETTINGS.with_changes(
        ringtone_duration=7,
        volume=0.25,
        pre_notification_enabled=True,
        pre_notification_minutes=15,
        user_name="Tâm",
        work_start_time="08:30",
        workday_notifications_enabled=False,
    )
    repo.save_settings(s)
    assert repo.get_settings() == s


def test_save_settings_rejects_malformed_milestone(repo):
    with pytest.raises(MalformedTime):
        repo.save_settings(DEFAULT_SETTINGS.with_changes(lunch_start_time="12h"))


def test_corrupt_setting_value_falls_back_to_default(repo):
    repo.conn.execute(
        "INSERT INTO settings(profile,key,value) VALUES(?,?,?)",
        (DEFAULT_PROFILE_NAME, "ringtone_duration", "abc"),
    )
    assert repo.get_settings().ringtone_duration == DEFAULT_SETTINGS.ringtone_duration


def test_create_tasks_one_per_day(repo):
    created = repo.create_tasks(days=[5, 1, 3, 1], time_hhmm="09:00", text="  Standup ")
    assert [t.day for t in created] == [1, 3, 5]
    assert len({t.id for t in created}) == 3
    assert all(t.text == "Standup" and not t.is_completed for t in created)
    assert repo.list_tasks() == created


def test_create_tasks_validation(repo):
    with pytest.raises(ValueError):
        repo.create_tasks(days=[], time_hhmm="09:00", text="x")
    with pytest.raises(ValueError):
        repo.create_tasks(days=[7], time_hhmm="09:00", text="x")
    with pytest.raises(MalformedTime):
        repo.create_tasks(days=[1], time_hhmm="25:00", text="x")
    with pytest.raises(ValueError):
        repo.create_tasks(days=[1], time_hhmm="09:00", text="   ")
    assert repo.list_tasks() == []


def test_update_task_reopens_it(repo):
    (t,) = repo.create_tasks(days=[2], time_hhmm="09:00", text="Email")
    repo.toggle_complete(t.id)
    updated = repo.update_task(t.id, time_hhmm="10:15", text="Email boss")

    assert updated.time == "10:15"
    assert updated.text == "Email boss"
    assert updated.day == 2
    assert updated.is_completed is False


def test_toggle_and_delete(repo):
    (t,) = repo.create_tasks(days=[2], time_hhmm="09:00", text="Email")
    assert repo.toggle_complete(t.id).is_completed is True
    assert repo.toggle_complete(t.id).is_completed is False

    repo.delete_task(t.id)
    with pytest.raises(KeyError):
        repo.get_task(t.id)


def test_tasks_for_day_open_only_sorted(repo):
    repo.create_tasks(days=[3], time_hhmm="14:00", text="B")
    (early,) = repo.create_tasks(days=[3], time_hhmm="08:00", text="A")
    (done,) = repo.create_tasks(days=[3], time_hhmm="09:00", text="Done")
    repo.create_tasks(days=[4], time_hhmm="07:00", text="Other day")
    repo.toggle_complete(done.id)

    assert [t.text for t in repo.tasks_for_day(3)] == ["A", "B"]
    assert repo.tasks_for_day(3)[0].id == early.id


def test_deleted_category_leaves_dangling_reference(repo):
    cat = repo.create_category("Work", "#ff0000")
    (t,) = repo.create_tasks(days=[1], time_hhmm="09:00", text="x", category_id=cat.id)
    assert repo.category_for(t) == cat

    repo.delete_category(cat.id)
    t = repo.get_task(t.id)
    assert t.category_id == cat.id
    assert repo.category_for(t) is None


def test_profiles_isolate_tasks_and_settings(repo):
    repo.create_tasks(days=[1], time_hhmm="09:00", text="Home task")
    repo.save_settings(DEFAULT_SETTINGS.with_changes(user_name="Home"))

    repo.add_profile("Work")
    assert repo.active_profile() == "Work"
    assert repo.list_tasks() == []
    assert repo.get_settings() == DEFAULT_SETTINGS

    repo.switch_profile(DEFAULT_PROFILE_NAME)
    assert [t.text for t in repo.list_tasks()] == ["Home task"]
    assert repo.get_settings().user_name == "Home"


def test_delete_profile_cascades_and_falls_back(repo):
    repo.add_profile("Work")
    repo.create_tasks(days=[1], time_hhmm="09:00", text="w")
    repo.create_category("c", "#000")

    repo.delete_profile("Work")
    assert repo.active_profile() == DEFAULT_PROFILE_NAME
    assert repo.list_profiles() == [DEFAULT_PROFILE_NAME]
    assert repo.conn.execute("SELECT COUNT(*) FROM tasks").fetchone()[0] == 0
    assert repo.conn.execute("SELECT COUNT(*) FROM categories").fetchone()[0] == 0


def test_default_profile_cannot_be_deleted(repo):
    with pytest.raises(ValueError):
        repo.delete_profile(DEFAULT_PROFILE_NAME)


def test_switch_to_unknown_profile(repo):
    with pytest.raises(KeyError):
        repo.switch_profile("nope")
