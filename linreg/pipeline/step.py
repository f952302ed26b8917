# linreg/pipeline/step.py
from __future__ import annotations

from linreg.training.context import TrainingContext
from linreg.observability.instrumentation import (
    Instrumentation,
    NoOpInstrumentation,
)


class PipelineStep:
    """
    Pipeline step base class

    Responsibilities:
      1. one unit of orchestration inside TrainingPipeline
      2. step-level timing boundary (leaf timer recorded in the timeline)

    Rules:
      - Instrumentation is an optional cross-cutting concern
      - step behaviour never depends on whether inst is present
    """

    stage: str = ""  # e.g. "dataset_load"

    def __init__(self, inst: Instrumentation | None = None):
        self.inst: Instrumentation | NoOpInstrumentation = (
            inst if inst is not None else NoOpInstrumentation()
        )

    @property
    def step_name(self) -> str:
        return self.__class__.__name__

    def timed(self):
        return self.inst.timer(self.stage or self.step_name)

    def run(self, ctx: TrainingContext) -> TrainingContext:
        raise NotImplementedError
