import json
import os
import sys

import pytest

sys.path.append(os.path.dirname(os.path.dirname(__file__)))
from db import PersonalRecordRepository, StoreDatabase, WorkoutRepository


@pytest.fixture
def repos(tmp_path):
    db = StoreDatabase(tmp_path / "workouts.json")
    return WorkoutRepository(db), PersonalRecordRepository(db)


def lift(name, weight, sets=3, reps=5):
    return {"name": name, "weight": weight, "sets": sets, "reps": reps}


class TestPersonalRecords:
    def test_first_lift_sets_record(self, repos):
        workouts, records = repos
        session = workouts.create("Push Day", "2024-01-01")
        result = workouts.add_exercise(session.id, lift("Bench", 60, 3, 8))
        assert result.is_new_record is True
        assert result.personal_record.weight == 60
        record = records.fetch_all()["Bench"]
        assert (record.sets, record.reps, record.date) == (3, 8, "2024-01-01")
        assert record.workout_id == session.id

    def test_heavier_lift_replaces_record(self, repos):
        workouts, records = repos
        session = workouts.create("Push Day", "2024-01-01")
        workouts.add_exercise(session.id, lift("Bench", 60))
        result = workouts.add_exercise(session.id, lift("Bench", 80))
        assert result.is_new_record is True
        assert records.fetch_all()["Bench"].weight == 80

    def test_lighter_lift_keeps_record(self, repos):
        workouts, records = repos
        session = workouts.create("Leg Day", "2024-01-01")
        workouts.add_exercise(session.id, lift("Squat", 80))
        result = workouts.add_exercise(session.id, lift("Squat", 70))
        assert result.is_new_record is False
        assert result.personal_record.weight == 80
        assert records.fetch_all()["Squat"].weight == 80

    def test_tie_does_not_overwrite(self, repos):
        workouts, records = repos
        first = workouts.create("A", "2024-01-01")
        second = workouts.create("B", "2024-01-08")
        workouts.add_exercise(first.id, lift("Bench", 80, 3, 5))
        result = workouts.add_exercise(second.id, lift("Bench", 80, 5, 5))
        assert result.is_new_record is False
        record = records.fetch("Bench")
        assert (record.sets, record.date, record.workout_id) == (3, "2024-01-01", first.id)

    def test_record_tracks_first_maximum(self, repos):
        workouts, records = repos
        sessions = [workouts.create(f"S{i}", f"2024-01-0{i + 1}") for i in range(4)]
        for session, weight, reps in zip(sessions, [60, 90, 75, 90], [8, 3, 5, 4]):
            workouts.add_exercise(session.id, lift("Deadlift", weight, reps=reps))
        record = records.fetch("Deadlift")
        assert record.weight == 90
        assert record.reps == 3
        assert record.workout_id == sessions[1].id

    def test_name_is_trimmed(self, repos):
        workouts, records = repos
        session = workouts.create("Push Day", "2024-01-01")
        workouts.add_exercise(session.id, lift("  Bench  ", 60))
        assert list(records.fetch_all()) == ["Bench"]
        assert records.fetch(" Bench ").weight == 60

    def test_delete_workout_keeps_record(self, repos):
        workouts, records = repos
        session = workouts.create("Push Day", "2024-01-01")
        workouts.add_exercise(session.id, lift("Bench", 100))
        assert workouts.delete(session.id) is True
        assert records.fetch("Bench").weight == 100
        assert records.fetch("Bench").workout_id == session.id

    def test_edit_does_not_touch_record(self, repos):
        workouts, records = repos
        session = workouts.create("Push Day", "2024-01-01")
        exercise = workouts.add_exercise(session.id, lift("Bench", 60)).exercise
        workouts.update_exercise(session.id, exercise.id, {"weight": 200})
        assert records.fetch("Bench").weight == 60

    def test_ledger_has_no_transient_flag(self, repos, tmp_path):
        workouts, records = repos
        session = workouts.create("Push Day", "2024-01-01")
        workouts.add_exercise(session.id, lift("Bench", 60))
        data = json.loads((tmp_path / "workouts.json").read_text(encoding="utf-8"))
        assert "isNew" not in data["personalRecords"]["Bench"]
        assert "is_new" not in records.fetch("Bench").model_dump()

    def test_ranked_orders_by_weight(self, repos):
        workouts, records = repos
        session = workouts.create("Full Body", "2024-01-01")
        for name, weight in [("Curl", 15), ("Squat", 100), ("Bench", 70)]:
            workouts.add_exercise(session.id, lift(name, weight))
        assert [name for name, _ in records.ranked()] == ["Squat", "Bench", "Curl"]

    def test_unknown_name(self, repos):
        _, records = repos
        assert records.fetch("Bench") is None
        assert records.fetch_all() == {}
