#!filepath: linreg/config/data_config.py
from typing import Optional

from pydantic import BaseModel


class DatasetConfig(BaseModel):
    """
    Only required for CSV input; structured files carry N/T in their header.
    """
    num_input_dimensions: Optional[int] = None
    num_target_dimensions: Optional[int] = None
