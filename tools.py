import datetime
from typing import Any, Iterable, Mapping, Optional


def field(entry: Any, name: str) -> Any:
    """Read ``name`` from a model or a plain mapping."""
    if isinstance(entry, Mapping):
        return entry[name]
    return getattr(entry, name)


class MathTools:
    """Provides essential mathematical utilities for workout calculations."""

    @staticmethod
    def set_volume(weight: float, sets: int, reps: int) -> float:
        """Return ``weight * sets * reps`` for one exercise entry."""
        return weight * sets * reps

    @staticmethod
    def volume(exercises: Iterable) -> float:
        """Compute training volume summed over exercise entries."""
        vol = 0
        for ex in exercises:
            vol += MathTools.set_volume(field(ex, "weight"), field(ex, "sets"), field(ex, "reps"))
        return vol

    @staticmethod
    def heaviest(exercises: Iterable):
        """Return the entry with the highest weight, first one on ties."""
        best = None
        for ex in exercises:
            if best is None or field(ex, "weight") > field(best, "weight"):
                best = ex
        return best

    @staticmethod
    def weight_change(current: float, previous: Optional[float]) -> Optional[float]:
        if previous is None:
            return None
        return current - previous


class DateTools:
    """Calendar helpers for ISO ``YYYY-MM-DD`` strings."""

    @staticmethod
    def week_start(date: str) -> str:
        """Return the Monday starting the week of ``date``.

        Sunday is weekday 7 and maps back to the preceding Monday.
        """
        day = datetime.date.fromisoformat(date)
        return (day - datetime.timedelta(days=day.isoweekday() - 1)).isoformat()

    @staticmethod
    def format_date(date: str, fmt: str = "%Y-%m-%d") -> str:
        if not date:
            return ""
        return datetime.date.fromisoformat(date).strftime(fmt)
