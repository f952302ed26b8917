#!filepath: linreg/config/app_config.py
import os

import yaml
from pydantic import BaseModel, Field
from dotenv import load_dotenv

from .log_config import LogConfig
from .data_config import DatasetConfig
from .model_config import ModelConfig
from .training_config import TrainingConfig


def project_root() -> str:
    """
    Project root derived from this file:
    linreg/config/app_config.py -> linreg/config -> linreg -> project_root
    """
    return os.path.abspath(os.path.join(os.path.dirname(__file__), "../../"))


def default_config_path() -> str:
    return os.path.join(os.path.dirname(os.path.abspath(__file__)), "base.yml")


# env var -> (section, key)
_ENV_OVERRIDES = {
    "LINREG_LOG_LEVEL": ("log", "level"),
    "LINREG_LOG_DIR": ("log", "dir"),
    "LINREG_MODEL_PATH": ("model", "model_path"),
}


class AppConfig(BaseModel):
    log: LogConfig = Field(default_factory=LogConfig)
    dataset: DatasetConfig = Field(default_factory=DatasetConfig)
    training: TrainingConfig = Field(default_factory=TrainingConfig)
    model: ModelConfig = Field(default_factory=ModelConfig)

    @classmethod
    def load(cls, path: str | None = None) -> "AppConfig":
        """
        Load YAML config + .env
        - default: packaged linreg/config/base.yml
        - independent of the current working directory
        """
        # 1) .env at the project root (never overrides the real environment)
        load_dotenv(os.path.join(project_root(), ".env"))

        # 2) resolve config file
        if path is None:
            path = default_config_path()

        if not os.path.exists(path):
            raise FileNotFoundError(f"Config file not found: {path}")

        # 3) read YAML
        with open(path, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}

        # 4) env overrides
        for env_name, (section, key) in _ENV_OVERRIDES.items():
            value = os.getenv(env_name)
            if value is not None:
                raw.setdefault(section, {})
                if raw[section] is None:
                    raw[section] = {}
                raw[section][key] = value

        return cls(**raw)
