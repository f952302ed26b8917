# linreg/config/training_config.py
from __future__ import annotations

import math
from typing import Optional

from pydantic import BaseModel

from linreg.utils.errors import InvalidConfigError


class TrainingConfig(BaseModel):
    """
    TrainingConfig (BATCH / FINAL)

    pydantic only checks types here. Range checks live in
    validate_semantics() so that a bad value surfaces as
    InvalidConfigError, same as every other training failure.
    """

    # optimization
    max_epochs: int = 500
    min_change: float = 1.0e-7
    patience: int = 5
    learning_rate: float = 0.1
    batch_size: Optional[int] = None

    # validation / ordering
    validation_fraction: float = 0.2
    randomize_order: bool = True

    # scaling
    enable_scaling: bool = True

    # reproducibility
    seed: int = 0

    # progress
    log_every_n_epochs: int = 50

    def validate_semantics(self) -> None:
        if self.max_epochs <= 0:
            raise InvalidConfigError(
                f"max_epochs must be positive, got {self.max_epochs}"
            )
        if not math.isfinite(self.min_change) or self.min_change < 0:
            raise InvalidConfigError(
                f"min_change must be a non-negative number, got {self.min_change}"
            )
        if self.patience <= 0:
            raise InvalidConfigError(
                f"patience must be positive, got {self.patience}"
            )
        if not math.isfinite(self.learning_rate) or self.learning_rate <= 0:
            raise InvalidConfigError(
                f"learning_rate must be positive, got {self.learning_rate}"
            )
        if self.batch_size is not None and self.batch_size <= 0:
            raise InvalidConfigError(
                f"batch_size must be positive or None, got {self.batch_size}"
            )
        if not 0.0 <= self.validation_fraction < 1.0:
            raise InvalidConfigError(
                f"validation_fraction must be in [0, 1), got {self.validation_fraction}"
            )
        if self.log_every_n_epochs <= 0:
            raise InvalidConfigError(
                f"log_every_n_epochs must be positive, got {self.log_every_n_epochs}"
            )
