# linreg/training/pipeline.py
from __future__ import annotations

from pathlib import Path
from typing import List

from linreg.utils.logger import logs
from linreg.config.app_config import AppConfig
from linreg.observability.instrumentation import Instrumentation
from linreg.pipeline.step import PipelineStep
from linreg.training.context import TrainingContext


class TrainingPipeline:
    """
    TrainingPipeline (FINAL / FROZEN)

    Semantics:
    - one run == one context
    - steps execute semantics in order, pipeline only sequences them
    - any step failure aborts the run (no partial model is written)
    """

    def __init__(
            self,
            *,
            steps: List[PipelineStep],
            inst: Instrumentation,
            cfg: AppConfig,
    ):
        self.steps = steps
        self.inst = inst
        self.cfg = cfg

    def run(self, run_id: str, *, data_path: str | Path, model_path: str | Path) -> TrainingContext:
        logs.info(f"[TrainingPipeline] START run_id={run_id}")

        ctx = TrainingContext(
            run_id=run_id,
            cfg=self.cfg,
            inst=self.inst,
            data_path=Path(data_path),
            model_path=Path(model_path),
        )

        for step in self.steps:
            ctx = step.run(ctx)

        self.inst.report_timeline(run_id)
        logs.info("[TrainingPipeline] DONE")
        return ctx
