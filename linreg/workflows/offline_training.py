# linreg/workflows/offline_training.py
from __future__ import annotations

import uuid
from datetime import datetime
from pathlib import Path

from linreg.utils.logger import logs
from linreg.utils.errors import LinRegError
from linreg.config.app_config import AppConfig
from linreg.observability.instrumentation import Instrumentation
from linreg.training.context import TrainingContext
from linreg.training.pipeline import TrainingPipeline
from linreg.training.steps.dataset_load_step import DatasetLoadStep
from linreg.training.steps.model_train_step import ModelTrainStep
from linreg.training.steps.artifact_persist_step import ArtifactPersistStep


def build_offline_training(cfg: AppConfig | None = None) -> TrainingPipeline:
    """
    Offline Training Workflow (FINAL / FROZEN)

        load data -> train -> save model
    """

    if cfg is None:
        cfg = AppConfig.load()
    inst = Instrumentation()

    return TrainingPipeline(
        steps=[
            DatasetLoadStep(inst),
            ModelTrainStep(cfg.training, inst),
            ArtifactPersistStep(inst),
        ],
        inst=inst,
        cfg=cfg,
    )


def new_run_id() -> str:
    return f"{datetime.now():%Y%m%d-%H%M%S}-{uuid.uuid4().hex[:8]}"


@logs.catch(msg="training run failed", expected=(LinRegError,))
def run_offline_training(
    data_path: str | Path,
    *,
    cfg: AppConfig | None = None,
    model_path: str | Path | None = None,
) -> TrainingContext:
    if cfg is None:
        cfg = AppConfig.load()
    pipeline = build_offline_training(cfg)
    return pipeline.run(
        new_run_id(),
        data_path=data_path,
        model_path=model_path if model_path is not None else cfg.model.model_path,
    )
