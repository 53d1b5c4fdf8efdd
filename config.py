import os
import yaml

from settings_schema import SettingsSchema, validate_settings

APP_VERSION = "1.0.0"

DATA_DIR_ENV = "LIFTLOG_DATA_DIR"


class YamlConfig:
    """Load and save tracker settings to a YAML file."""

    def __init__(self, path: str = "settings.yaml") -> None:
        self.path = path

    def load(self) -> dict:
        if not os.path.exists(self.path):
            return {}
        with open(self.path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ValueError(f"{self.path} must contain a mapping")
        return data

    def save(self, data: dict) -> None:
        validate_settings(data)
        with open(self.path, "w", encoding="utf-8") as f:
            yaml.safe_dump(dict(data), f)

    def settings(self, data_dir: str | None = None) -> SettingsSchema:
        """Return validated settings.

        ``data_dir`` wins over the ``LIFTLOG_DATA_DIR`` environment
        variable, which wins over the YAML file.
        """
        data = self.load()
        override = data_dir or os.environ.get(DATA_DIR_ENV)
        if override:
            data["data_dir"] = override
        return validate_settings(data)
