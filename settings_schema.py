from pydantic import BaseModel, Field, ValidationError, field_validator

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class SettingsSchema(BaseModel):
    data_dir: str = "data"
    store_file: str = "workouts.json"
    template_file: str = "templates.json"
    weekly_window: int = Field(default=8, ge=1)
    top_exercises: int = Field(default=5, ge=1)
    date_format: str = "%Y-%m-%d"
    log_level: str = "WARNING"

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        level = value.upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"unknown log level: {value}")
        return level

    @field_validator("store_file", "template_file")
    @classmethod
    def _plain_filename(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("file name must not be empty")
        return value


def validate_settings(data: dict) -> SettingsSchema:
    try:
        return SettingsSchema(**data)
    except ValidationError as e:
        raise ValueError(str(e))
