# linreg/training/steps/model_train_step.py
from __future__ import annotations

from linreg.pipeline.step import PipelineStep
from linreg.training.context import TrainingContext
from linreg.training.engines.gradient_descent_train_engine import (
    GradientDescentTrainEngine,
)


class ModelTrainStep(PipelineStep):
    """
    ModelTrainStep (BATCH / FINAL)

    Contract:
    - consumes ctx.dataset
    - produces ctx.result and ctx.metrics
    """

    stage = "model_train"

    def __init__(self, cfg, inst=None):
        super().__init__(inst)
        self.engine = GradientDescentTrainEngine(cfg)

    def run(self, ctx: TrainingContext) -> TrainingContext:
        if ctx.dataset is None:
            raise RuntimeError("No dataset to train on")

        with self.timed():
            result = self.engine.train(ctx.dataset)

        ctx.result = result
        ctx.metrics.update(result.metrics())
        return ctx
