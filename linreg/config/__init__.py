from .app_config import AppConfig
from .data_config import DatasetConfig
from .log_config import LogConfig
from .model_config import ModelConfig, DEFAULT_MODEL_PATH
from .training_config import TrainingConfig

__all__ = [
    "AppConfig",
    "DatasetConfig",
    "LogConfig",
    "ModelConfig",
    "DEFAULT_MODEL_PATH",
    "TrainingConfig",
]
