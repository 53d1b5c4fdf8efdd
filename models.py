from __future__ import annotations

import datetime
import uuid
from typing import Annotated, Any, Dict, List, Optional, Type, TypeVar

from pydantic import (
    AfterValidator,
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    PlainSerializer,
    ValidationError as PydanticValidationError,
    field_validator,
)

from errors import ValidationError

M = TypeVar("M", bound=BaseModel)


def new_id() -> str:
    return uuid.uuid4().hex


def utc_timestamp() -> str:
    """Return the current UTC time as ``YYYY-MM-DDTHH:MM:SS.mmmZ``."""
    now = datetime.datetime.now(datetime.timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_date(value: str) -> datetime.date:
    try:
        return datetime.datetime.strptime(value, "%Y-%m-%d").date()
    except (TypeError, ValueError):
        raise ValueError(f"invalid date {value!r}, expected YYYY-MM-DD")


def build(model: Type[M], data: Any) -> M:
    """Validate ``data`` into ``model`` and raise the tracker's own error."""
    if isinstance(data, model):
        return data
    if isinstance(data, BaseModel):
        data = data.model_dump(exclude_unset=True)
    try:
        return model.model_validate(data)
    except PydanticValidationError as e:
        raise ValidationError(str(e)) from e


class _Model(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


def _blank_to_error(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError("name must not be blank")
    return value


def _whole_as_int(value: float) -> float | int:
    return int(value) if value.is_integer() else value


def _none_to_empty(value: Any) -> Any:
    return "" if value is None else value


Name = Annotated[str, AfterValidator(_blank_to_error)]
Note = Annotated[str, BeforeValidator(_none_to_empty)]
Weight = Annotated[float, PlainSerializer(_whole_as_int, when_used="json")]


class ExerciseFields(_Model):
    """The user-editable fields shared by records, drafts and templates."""

    name: Name
    weight: Weight = Field(gt=0)
    sets: int = Field(gt=0)
    reps: int = Field(gt=0)
    note: Note = ""


class ExerciseDraft(ExerciseFields):
    """Input for adding an exercise; numeric strings are coerced."""


class _Identified(_Model):
    id: str = Field(default_factory=new_id)


class ExerciseRecord(ExerciseFields, _Identified):
    """A stored exercise; ``id`` is written first, ahead of the shared fields."""


class ExercisePatch(_Model):
    """Partial update of an exercise record.

    A field counts as present only when it was given and is not ``None``.
    Unknown keys are dropped.
    """

    name: Optional[Name] = None
    weight: Optional[float] = Field(default=None, gt=0)
    sets: Optional[int] = Field(default=None, gt=0)
    reps: Optional[int] = Field(default=None, gt=0)
    note: Optional[str] = None

    def changes(self) -> Dict[str, Any]:
        return self.model_dump(exclude_unset=True, exclude_none=True)

    def apply(self, record: ExerciseRecord) -> ExerciseRecord:
        return record.model_copy(update=self.changes())


class WorkoutSession(_Model):
    id: str = Field(default_factory=new_id)
    name: str
    date: str
    created_at: str = Field(default_factory=utc_timestamp, alias="createdAt")
    exercises: List[ExerciseRecord] = Field(default_factory=list)

    @field_validator("date")
    @classmethod
    def _iso_date(cls, value: str) -> str:
        return parse_date(value).isoformat()

    def find_exercise(self, exercise_id: str) -> Optional[int]:
        for idx, exercise in enumerate(self.exercises):
            if exercise.id == exercise_id:
                return idx
        return None


class WorkoutSummary(_Model):
    id: str
    name: str
    date: str
    created_at: str = Field(alias="createdAt")
    exercise_count: int = Field(alias="exerciseCount")

    @classmethod
    def of(cls, session: WorkoutSession) -> "WorkoutSummary":
        return cls(
            id=session.id,
            name=session.name,
            date=session.date,
            created_at=session.created_at,
            exercise_count=len(session.exercises),
        )


class PersonalRecord(_Model):
    weight: Weight
    sets: int
    reps: int
    date: str
    workout_id: str = Field(alias="workoutId")


class AddExerciseResult(_Model):
    """What a single ``add_exercise`` call produced.

    ``is_new_record`` belongs to this write only; the ledger never stores it.
    """

    session: WorkoutSession
    exercise: ExerciseRecord
    personal_record: PersonalRecord
    is_new_record: bool


class TemplateExercise(ExerciseFields):
    pass


class Template(_Model):
    id: str = Field(default_factory=new_id)
    name: str
    created_at: str = Field(default_factory=utc_timestamp, alias="createdAt")
    exercises: List[TemplateExercise]


class TemplateSummary(_Model):
    id: str
    name: str
    created_at: str = Field(alias="createdAt")
    exercise_count: int = Field(alias="exerciseCount")

    @classmethod
    def of(cls, template: Template) -> "TemplateSummary":
        return cls(
            id=template.id,
            name=template.name,
            created_at=template.created_at,
            exercise_count=len(template.exercises),
        )


class Store(_Model):
    sessions: List[WorkoutSession] = Field(default_factory=list)
    personal_records: Dict[str, PersonalRecord] = Field(
        default_factory=dict, alias="personalRecords"
    )

    def find_session(self, workout_id: str) -> Optional[WorkoutSession]:
        for session in self.sessions:
            if session.id == workout_id:
                return session
        return None


class TemplateStore(_Model):
    templates: List[Template] = Field(default_factory=list)

    def find_template(self, template_id: str) -> Optional[Template]:
        for template in self.templates:
            if template.id == template_id:
                return template
        return None
