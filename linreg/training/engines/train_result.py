# linreg/training/engines/train_result.py
from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from linreg.training.context import TrainingState
from linreg.training.model import LinearRegressionModel


@dataclass(frozen=True)
class EpochRecord:
    epoch: int
    train_loss: float
    validation_loss: Optional[float] = None


@dataclass(frozen=True)
class TrainResult:
    """
    TrainResult (FINAL / FROZEN)

    Semantics:
    - in-memory result of one complete training run
    - carries no I/O semantics
    - losses are mean squared errors in the space the model trained in
    """
    model: LinearRegressionModel
    epochs: int
    train_loss: float
    validation_loss: Optional[float]
    elapsed_seconds: float
    stop_reason: TrainingState
    num_training_samples: int
    num_validation_samples: int
    history: List[EpochRecord] = field(default_factory=list)

    @property
    def converged(self) -> bool:
        return self.stop_reason is TrainingState.CONVERGED

    @property
    def train_rmse(self) -> float:
        return math.sqrt(self.train_loss)

    @property
    def validation_rmse(self) -> Optional[float]:
        if self.validation_loss is None:
            return None
        return math.sqrt(self.validation_loss)

    def metrics(self) -> Dict[str, Any]:
        return {
            "epochs": self.epochs,
            "stop_reason": self.stop_reason.value,
            "train_loss": self.train_loss,
            "train_rmse": self.train_rmse,
            "validation_loss": self.validation_loss,
            "validation_rmse": self.validation_rmse,
            "elapsed_seconds": self.elapsed_seconds,
            "num_training_samples": self.num_training_samples,
            "num_validation_samples": self.num_validation_samples,
        }
