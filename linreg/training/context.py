# linreg/training/context.py
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, Optional

if TYPE_CHECKING:
    from linreg.config.app_config import AppConfig
    from linreg.data.dataset import RegressionDataset
    from linreg.observability.instrumentation import Instrumentation
    from linreg.training.engines.train_result import TrainResult


class TrainingState(str, Enum):
    """
    Training progress (not external I/O):

        INITIALIZED -> VALIDATING -> ITERATING -> CONVERGED | MAX_EPOCHS_REACHED -> FINALIZED
                                                 \\-> ABORTED (non-finite loss)
    """

    INITIALIZED = "initialized"
    VALIDATING = "validating"
    ITERATING = "iterating"
    CONVERGED = "converged"
    MAX_EPOCHS_REACHED = "max_epochs_reached"
    FINALIZED = "finalized"
    ABORTED = "aborted"


@dataclass
class TrainingContext:
    """
    TrainingContext (FINAL / FROZEN)

    Semantics:
    - One context == one load -> train -> save run
    - run_id is immutable and mandatory
    """

    # -------------------------
    # Identity (FROZEN)
    # -------------------------
    run_id: str

    # -------------------------
    # Static bindings
    # -------------------------
    cfg: "AppConfig"
    inst: "Instrumentation"
    data_path: Path
    model_path: Path

    # -------------------------
    # Rolling state
    # -------------------------
    dataset: Optional["RegressionDataset"] = None
    result: Optional["TrainResult"] = None
    saved_path: Optional[Path] = None
    metrics: Dict[str, Any] = field(default_factory=dict)
