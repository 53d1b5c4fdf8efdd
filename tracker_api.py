import datetime
import logging
import os
from typing import Dict, Iterable, List, Optional

from config import YamlConfig
from db import (
    PersonalRecordRepository,
    StoreDatabase,
    TemplateDatabase,
    TemplateRepository,
    WorkoutRepository,
)
from errors import NotFoundError, ValidationError
from models import (
    AddExerciseResult,
    PersonalRecord,
    Template,
    TemplateSummary,
    WorkoutSession,
    WorkoutSummary,
)
import stats_service
from stats_service import StatisticsService

logger = logging.getLogger(__name__)


class TrackerAPI:
    """Entry point for logging workouts and reading their statistics."""

    def __init__(self, data_dir: str | None = None, yaml_path: str = "settings.yaml") -> None:
        self.config = YamlConfig(yaml_path)
        self.settings = self.config.settings(data_dir)
        self.data_dir = self.settings.data_dir
        self.store_db = StoreDatabase(os.path.join(self.data_dir, self.settings.store_file))
        self.template_db = TemplateDatabase(
            os.path.join(self.data_dir, self.settings.template_file)
        )
        self.workouts = WorkoutRepository(self.store_db)
        self.personal_records = PersonalRecordRepository(self.store_db)
        self.templates = TemplateRepository(self.template_db)
        self.statistics = StatisticsService(
            self.workouts,
            weekly_window=self.settings.weekly_window,
            top_exercises=self.settings.top_exercises,
            date_format=self.settings.date_format,
        )
        logger.debug("tracker using data directory %s", self.data_dir)

    # workouts

    def create_workout(self, name: str, date: str) -> WorkoutSession:
        return self.workouts.create(name, date)

    def get_workout(self, workout_id: str) -> Optional[WorkoutSession]:
        return self.workouts.fetch(workout_id)

    def list_workouts(self) -> List[WorkoutSummary]:
        return self.workouts.fetch_all()

    def add_exercise(self, workout_id: str, draft) -> AddExerciseResult:
        return self.workouts.add_exercise(workout_id, draft)

    def update_exercise(self, workout_id: str, exercise_id: str, patch) -> WorkoutSession:
        return self.workouts.update_exercise(workout_id, exercise_id, patch)

    def delete_exercise(self, workout_id: str, exercise_id: str) -> WorkoutSession:
        return self.workouts.delete_exercise(workout_id, exercise_id)

    def delete_workout(self, workout_id: str) -> bool:
        return self.workouts.delete(workout_id)

    def export_workout(self, workout_id: str, fmt: str = "json") -> str:
        if fmt == "csv":
            return self.workouts.export_csv(workout_id)
        if fmt == "json":
            return self.workouts.export_json(workout_id)
        raise ValidationError(f"unsupported export format: {fmt}")

    # personal records and history

    def get_personal_records(self) -> Dict[str, PersonalRecord]:
        return self.personal_records.fetch_all()

    def get_exercise_history(self, name: str) -> List[Dict[str, object]]:
        return self.statistics.exercise_history(name)

    # templates

    def save_template(self, name: str, exercises) -> Template:
        return self.templates.create(name, exercises)

    def get_templates(self) -> List[TemplateSummary]:
        return self.templates.fetch_all()

    def get_template(self, template_id: str) -> Optional[Template]:
        return self.templates.fetch(template_id)

    def delete_template(self, template_id: str) -> bool:
        return self.templates.delete(template_id)

    def save_workout_as_template(self, workout_id: str, name: str) -> Template:
        session = self.workouts.fetch(workout_id)
        if session is None:
            raise NotFoundError(f"workout {workout_id!r} not found")
        return self.templates.create(name, session.exercises)

    def start_from_template(
        self, template_id: str, name: str | None = None, date: str | None = None
    ) -> WorkoutSession:
        """Create a workout holding a copy of every exercise in a template.

        ``date`` defaults to today. Each exercise goes through ``add_exercise``
        so personal records update.
        """
        template = self.templates.fetch(template_id)
        if template is None:
            raise NotFoundError(f"template {template_id!r} not found")
        date = date or datetime.date.today().isoformat()
        session = self.workouts.create(name or template.name, date)
        for exercise in template.exercises:
            session = self.workouts.add_exercise(session.id, exercise).session
        return session

    # analytics

    @staticmethod
    def compute_volume(exercises: Iterable) -> float:
        return stats_service.compute_volume(exercises)

    def summarize(self, session: WorkoutSession) -> Dict[str, object]:
        return stats_service.summarize(session, self.settings.date_format)

    def weekly_volume(
        self,
        sessions: Iterable[WorkoutSession] | None = None,
        window_size: int | None = None,
    ) -> List[Dict[str, object]]:
        if sessions is None:
            sessions = self.workouts.fetch_sessions()
        if window_size is None:
            window_size = self.settings.weekly_window
        return stats_service.weekly_volume(sessions, window_size)

    def exercise_frequency(
        self, sessions: Iterable[WorkoutSession] | None = None, limit: int | None = None
    ) -> List[Dict[str, object]]:
        if sessions is None:
            sessions = self.workouts.fetch_sessions()
        return stats_service.exercise_frequency(sessions, limit)

    def overview(self) -> Dict[str, object]:
        return self.statistics.overview()
