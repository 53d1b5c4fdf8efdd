from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Sequence

from db import WorkoutRepository
from models import WorkoutSession
from tools import DateTools, MathTools, field


def compute_volume(exercises: Iterable) -> float:
    """Return the summed ``weight * sets * reps`` of ``exercises``."""
    return MathTools.volume(exercises)


def summarize(session: WorkoutSession, date_format: str = "%Y-%m-%d") -> Dict[str, object]:
    heaviest = MathTools.heaviest(session.exercises)
    lift = None
    if heaviest is not None:
        lift = {"name": field(heaviest, "name"), "weight": field(heaviest, "weight")}
    return {
        "total_volume": compute_volume(session.exercises),
        "exercise_count": len(session.exercises),
        "heaviest_lift": lift,
        "formatted_date": DateTools.format_date(session.date, date_format),
    }


def exercise_history(sessions: Iterable[WorkoutSession], name: str) -> List[Dict[str, object]]:
    """Return every entry of exercise ``name`` ordered by workout date.

    Entries with the same date keep their stored order. ``change`` is the
    weight difference to the previous entry.
    """
    rows = []
    for session in sessions:
        for ex in session.exercises:
            if ex.name != name:
                continue
            rows.append(
                {
                    "date": session.date,
                    "weight": ex.weight,
                    "sets": ex.sets,
                    "reps": ex.reps,
                    "workout_name": session.name,
                    "workout_id": session.id,
                }
            )
    rows.sort(key=lambda r: r["date"])
    previous = None
    for row in rows:
        row["change"] = MathTools.weight_change(row["weight"], previous)
        previous = row["weight"]
    return rows


def weekly_volume(sessions: Iterable[WorkoutSession], window_size: int = 8) -> List[Dict[str, object]]:
    """Return volume per Monday-anchored week for the latest ``window_size`` weeks."""
    if window_size <= 0:
        return []
    by_week: Dict[str, float] = {}
    for session in sessions:
        week = DateTools.week_start(session.date)
        by_week[week] = by_week.get(week, 0) + compute_volume(session.exercises)
    weeks = sorted(by_week)[-window_size:]
    return [{"week": w, "volume": by_week[w]} for w in weeks]


def exercise_frequency(
    sessions: Iterable[WorkoutSession], limit: Optional[int] = None
) -> List[Dict[str, object]]:
    counts: Dict[str, int] = {}
    for session in sessions:
        for ex in session.exercises:
            counts[ex.name] = counts.get(ex.name, 0) + 1
    ranked = sorted(counts.items(), key=lambda item: item[1], reverse=True)
    if limit is not None:
        ranked = ranked[:limit]
    return [{"exercise": name, "count": count} for name, count in ranked]


def overview(sessions: Sequence[WorkoutSession]) -> Dict[str, object]:
    dates = sorted(s.date for s in sessions)
    return {
        "workouts": len(sessions),
        "exercises": sum(len(s.exercises) for s in sessions),
        "volume": sum(compute_volume(s.exercises) for s in sessions),
        "first_date": dates[0] if dates else None,
        "last_date": dates[-1] if dates else None,
    }


class StatisticsService:
    """Compute workout statistics from the stored sessions."""

    def __init__(
        self,
        workout_repo: WorkoutRepository,
        weekly_window: int = 8,
        top_exercises: int = 5,
        date_format: str = "%Y-%m-%d",
    ) -> None:
        self.workouts = workout_repo
        self.weekly_window = weekly_window
        self.top_exercises = top_exercises
        self.date_format = date_format

    def summary(self, workout_id: str) -> Dict[str, object] | None:
        session = self.workouts.fetch(workout_id)
        if session is None:
            return None
        return summarize(session, self.date_format)

    def exercise_history(self, name: str) -> List[Dict[str, object]]:
        return exercise_history(self.workouts.fetch_sessions(), name)

    def weekly_volume(self, window_size: Optional[int] = None) -> List[Dict[str, object]]:
        if window_size is None:
            window_size = self.weekly_window
        return weekly_volume(self.workouts.fetch_sessions(), window_size)

    def exercise_frequency(self, limit: Optional[int] = None) -> List[Dict[str, object]]:
        if limit is None:
            limit = self.top_exercises
        return exercise_frequency(self.workouts.fetch_sessions(), limit)

    def overview(self) -> Dict[str, object]:
        return overview(self.workouts.fetch_sessions())

    def report(self) -> Dict[str, object]:
        """Return overview, weekly trend and top exercises from one read."""
        sessions = self.workouts.fetch_sessions()
        return {
            "overview": overview(sessions),
            "weekly_volume": weekly_volume(sessions, self.weekly_window),
            "top_exercises": exercise_frequency(sessions, self.top_exercises),
        }
