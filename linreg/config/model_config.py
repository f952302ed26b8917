#!filepath: linreg/config/model_config.py
from pydantic import BaseModel

DEFAULT_MODEL_PATH = "linear-regression-model.json"


class ModelConfig(BaseModel):
    model_path: str = DEFAULT_MODEL_PATH
