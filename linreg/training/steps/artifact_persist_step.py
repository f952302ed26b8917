# linreg/training/steps/artifact_persist_step.py
from __future__ import annotations

from datetime import datetime, timezone

from linreg.utils.logger import logs
from linreg.pipeline.step import PipelineStep
from linreg.training.context import TrainingContext
from linreg.training.model_store import ModelStore


class ArtifactPersistStep(PipelineStep):
    """
    ArtifactPersistStep (FINAL / FROZEN)

    Semantics:
    - persist the trained model with run metadata
    - a run without result never writes a file
    """

    stage = "artifact_persist"

    def run(self, ctx: TrainingContext) -> TrainingContext:
        result = ctx.result
        if result is None:
            raise RuntimeError("No TrainResult to persist")

        metadata = {
            "run_id": ctx.run_id,
            "created_at": datetime.now(timezone.utc).isoformat(),
            "data_path": str(ctx.data_path),
            "training": ctx.cfg.training.model_dump(),
            "metrics": dict(ctx.metrics),
        }

        logs.info(f"[{self.step_name}] saving model to: {ctx.model_path}")
        with self.timed():
            ctx.saved_path = ModelStore.save(result.model, ctx.model_path, metadata=metadata)

        return ctx
