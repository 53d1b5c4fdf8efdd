import csv
import io
import json
import logging
import os
from contextlib import contextmanager
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Callable, Generic, Iterator, List, Optional, Tuple, Type, TypeVar

from pydantic import BaseModel, ValidationError as PydanticValidationError

from errors import NotFoundError, StorageError, ValidationError
from models import (
    AddExerciseResult,
    ExerciseDraft,
    ExercisePatch,
    ExerciseRecord,
    PersonalRecord,
    Store,
    Template,
    TemplateExercise,
    TemplateStore,
    TemplateSummary,
    WorkoutSession,
    WorkoutSummary,
    build,
)

logger = logging.getLogger(__name__)

S = TypeVar("S", bound=BaseModel)


class Database(Generic[S]):
    """Loads and saves one whole snapshot to a JSON file.

    Every call goes to disk; nothing is cached between calls.
    """

    def __init__(self, path: str | os.PathLike, model: Type[S], default: Callable[[], S]) -> None:
        self._path = Path(path)
        self._model = model
        self._default = default

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> S:
        if not self._path.exists():
            snapshot = self._default()
            self.save(snapshot)
            logger.info("initialised empty store at %s", self._path)
            return snapshot
        try:
            raw = self._path.read_text(encoding="utf-8")
        except OSError as exc:
            logger.error("could not read %s: %s", self._path, exc)
            raise StorageError(f"Could not read {self._path}: {exc}") from exc
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as exc:
            logger.error("could not parse %s: %s", self._path, exc)
            raise StorageError(f"Could not parse {self._path}: {exc}") from exc
        try:
            snapshot = self._model.model_validate(data)
        except PydanticValidationError as exc:
            logger.error("invalid snapshot in %s", self._path)
            raise StorageError(f"Invalid data in {self._path}: {exc}") from exc
        logger.debug("loaded %s", self._path)
        return snapshot

    def save(self, snapshot: S) -> None:
        payload = json.dumps(snapshot.model_dump(mode="json", by_alias=True), indent=2, ensure_ascii=False)
        temp_path = None
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with NamedTemporaryFile(
                "w", dir=self._path.parent, delete=False, encoding="utf-8", suffix=".tmp"
            ) as tmp:
                temp_path = Path(tmp.name)
                tmp.write(payload)
            temp_path.replace(self._path)
        except OSError as exc:
            if temp_path is not None:
                temp_path.unlink(missing_ok=True)
            logger.error("could not write %s: %s", self._path, exc)
            raise StorageError(f"Could not write {self._path}: {exc}") from exc
        logger.debug("saved %s", self._path)

    @contextmanager
    def snapshot(self) -> Iterator[S]:
        """Yield the loaded snapshot and save it if the block succeeds."""
        data = self.load()
        yield data
        self.save(data)


class StoreDatabase(Database[Store]):
    """Sessions and the personal record ledger, persisted together."""

    def __init__(self, path: str | os.PathLike) -> None:
        super().__init__(path, Store, Store)

    def load_store(self) -> Store:
        return self.load()

    def save_store(self, store: Store) -> None:
        self.save(store)


class TemplateDatabase(Database[TemplateStore]):
    """Templates, persisted apart from the workout store."""

    def __init__(self, path: str | os.PathLike) -> None:
        super().__init__(path, TemplateStore, TemplateStore)

    def load_templates(self) -> TemplateStore:
        return self.load()

    def save_templates(self, store: TemplateStore) -> None:
        self.save(store)


class BaseRepository:
    """Base repository holding the database it reads and writes."""

    def __init__(self, database: Database) -> None:
        self.db = database

    def _read(self):
        return self.db.load()

    def _write(self):
        return self.db.snapshot()


class PersonalRecordRepository(BaseRepository):
    """Best-ever lift per exercise name.

    Records are only written through ``record`` while an exercise is being
    added. They are never removed, not even when the workout that set them
    is deleted.
    """

    @staticmethod
    def record(
        ledger: dict, session: WorkoutSession, exercise: ExerciseRecord
    ) -> Tuple[PersonalRecord, bool]:
        name = exercise.name.strip()
        current = ledger.get(name)
        if current is not None and exercise.weight <= current.weight:
            return current, False
        new = PersonalRecord(
            weight=exercise.weight,
            sets=exercise.sets,
            reps=exercise.reps,
            date=session.date,
            workout_id=session.id,
        )
        ledger[name] = new
        logger.info("new personal record for %s: %s", name, exercise.weight)
        return new, True

    def fetch_all(self) -> dict[str, PersonalRecord]:
        return dict(self._read().personal_records)

    def fetch(self, name: str) -> Optional[PersonalRecord]:
        return self._read().personal_records.get(name.strip())

    def ranked(self) -> list[tuple[str, PersonalRecord]]:
        """Return records ordered by weight, heaviest first."""
        records = self.fetch_all()
        return sorted(records.items(), key=lambda item: item[1].weight, reverse=True)


class WorkoutRepository(BaseRepository):
    """Repository for workout sessions and their exercises."""

    def __init__(self, database: StoreDatabase) -> None:
        super().__init__(database)

    def create(self, name: str | None, date: str | None) -> WorkoutSession:
        if not isinstance(name, str) or not name.strip():
            raise ValidationError("workout name is required")
        if not date:
            raise ValidationError("workout date is required")
        session = build(WorkoutSession, {"name": name, "date": date})
        with self._write() as store:
            store.sessions.append(session)
        logger.info("created workout %s (%s)", session.id, session.date)
        return session

    def fetch(self, workout_id: str) -> Optional[WorkoutSession]:
        return self._read().find_session(workout_id)

    def fetch_sessions(self) -> List[WorkoutSession]:
        return list(self._read().sessions)

    def fetch_all(self) -> List[WorkoutSummary]:
        return [WorkoutSummary.of(s) for s in self._read().sessions]

    def add_exercise(self, workout_id: str, draft) -> AddExerciseResult:
        draft = build(ExerciseDraft, draft)
        with self._write() as store:
            session = store.find_session(workout_id)
            if session is None:
                raise NotFoundError(f"workout {workout_id!r} not found")
            exercise = ExerciseRecord(**draft.model_dump())
            session.exercises.append(exercise)
            record, is_new = PersonalRecordRepository.record(
                store.personal_records, session, exercise
            )
        return AddExerciseResult(
            session=session,
            exercise=exercise,
            personal_record=record,
            is_new_record=is_new,
        )

    def update_exercise(self, workout_id: str, exercise_id: str, patch) -> WorkoutSession:
        patch = build(ExercisePatch, patch)
        with self._write() as store:
            session, idx = self._locate(store, workout_id, exercise_id)
            session.exercises[idx] = patch.apply(session.exercises[idx])
        return session

    def delete_exercise(self, workout_id: str, exercise_id: str) -> WorkoutSession:
        with self._write() as store:
            session, idx = self._locate(store, workout_id, exercise_id)
            del session.exercises[idx]
        return session

    def remove(self, workout_id: str) -> None:
        with self._write() as store:
            session = store.find_session(workout_id)
            if session is None:
                raise NotFoundError(f"workout {workout_id!r} not found")
            store.sessions.remove(session)
        logger.info("deleted workout %s with %d exercises", workout_id, len(session.exercises))

    def delete(self, workout_id: str) -> bool:
        try:
            self.remove(workout_id)
        except NotFoundError:
            logger.warning("delete ignored, workout %s not found", workout_id)
            return False
        return True

    def export_csv(self, workout_id: str) -> str:
        session = self._require(workout_id)
        output = io.StringIO()
        writer = csv.writer(output)
        writer.writerow(["Exercise", "Weight", "Sets", "Reps", "Note"])
        for ex in session.exercises:
            writer.writerow([ex.name, ex.weight, ex.sets, ex.reps, ex.note])
        return output.getvalue()

    def export_json(self, workout_id: str) -> str:
        session = self._require(workout_id)
        return json.dumps(session.model_dump(mode="json", by_alias=True), indent=2, ensure_ascii=False)

    def _require(self, workout_id: str) -> WorkoutSession:
        session = self.fetch(workout_id)
        if session is None:
            raise NotFoundError(f"workout {workout_id!r} not found")
        return session

    @staticmethod
    def _locate(store: Store, workout_id: str, exercise_id: str) -> Tuple[WorkoutSession, int]:
        session = store.find_session(workout_id)
        if session is None:
            raise NotFoundError(f"workout {workout_id!r} not found")
        idx = session.find_exercise(exercise_id)
        if idx is None:
            raise NotFoundError(f"exercise {exercise_id!r} not found")
        return session, idx


class TemplateRepository(BaseRepository):
    """Repository for workout templates."""

    def __init__(self, database: TemplateDatabase) -> None:
        super().__init__(database)

    def create(self, name: str | None, exercises) -> Template:
        if not isinstance(name, str) or not name.strip():
            raise ValidationError("template name is required")
        if not exercises:
            raise ValidationError("a template needs at least one exercise")
        items = [build(TemplateExercise, ex) for ex in exercises]
        template = Template(name=name.strip(), exercises=items)
        with self._write() as store:
            store.templates.append(template)
        logger.info("saved template %s with %d exercises", template.id, len(items))
        return template

    def fetch_all(self) -> List[TemplateSummary]:
        return [TemplateSummary.of(t) for t in self._read().templates]

    def fetch(self, template_id: str) -> Optional[Template]:
        return self._read().find_template(template_id)

    def remove(self, template_id: str) -> None:
        with self._write() as store:
            template = store.find_template(template_id)
            if template is None:
                raise NotFoundError(f"template {template_id!r} not found")
            store.templates.remove(template)
        logger.info("deleted template %s", template_id)

    def delete(self, template_id: str) -> bool:
        try:
            self.remove(template_id)
        except NotFoundError:
            logger.warning("delete ignored, template %s not found", template_id)
            return False
        return True
