# linreg/training/steps/dataset_load_step.py
from __future__ import annotations

from linreg.utils.logger import logs
from linreg.data.dataset import RegressionDataset
from linreg.pipeline.step import PipelineStep
from linreg.training.context import TrainingContext


class DatasetLoadStep(PipelineStep):
    """
    DatasetLoadStep (FINAL)

    Contract:
    - consumes ctx.data_path / ctx.cfg.dataset
    - produces ctx.dataset
    - N / T from config are declared only when BOTH are given
    """

    stage = "dataset_load"

    def run(self, ctx: TrainingContext) -> TrainingContext:
        dims = ctx.cfg.dataset
        dataset = RegressionDataset()

        if dims.num_input_dimensions is not None and dims.num_target_dimensions is not None:
            logs.info(
                f"[{self.step_name}] num input dimensions: {dims.num_input_dimensions} "
                f"num target dimensions: {dims.num_target_dimensions}"
            )
            dataset.set_dimensions(dims.num_input_dimensions, dims.num_target_dimensions)
        elif dims.num_input_dimensions is not None or dims.num_target_dimensions is not None:
            logs.warning(
                f"[{self.step_name}] only one of N / T given, ignoring both"
            )

        with self.timed():
            dataset.load(ctx.data_path)

        logs.info(f"[{self.step_name}] num training samples: {dataset.num_samples}")
        logs.info(f"[{self.step_name}] num input dimensions: {dataset.num_input_dimensions}")
        logs.info(f"[{self.step_name}] num target dimensions: {dataset.num_target_dimensions}")

        ctx.dataset = dataset
        return ctx
