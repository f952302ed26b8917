# linreg/training/scaler.py
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

import numpy as np

from linreg.data.dataset import RegressionDataset
from linreg.utils.errors import (
    DimensionError,
    DimensionMismatchError,
    InsufficientDataError,
    NotFittedError,
)
from linreg.utils.logger import logs


class ScaleKind(str, Enum):
    INPUT = "input"
    TARGET = "target"


@dataclass(frozen=True, eq=False)
class ScalingParameters:
    """
    Per-dimension min / max for inputs (length N) and targets (length T).

    Invariant: min <= max everywhere.
    """

    input_min: np.ndarray
    input_max: np.ndarray
    target_min: np.ndarray
    target_max: np.ndarray

    def __post_init__(self):
        for field_name in ("input_min", "input_max", "target_min", "target_max"):
            arr = np.array(getattr(self, field_name), dtype=np.float64)
            if arr.ndim != 1:
                raise DimensionError(f"{field_name} must be 1-D, got shape {arr.shape}")
            arr.flags.writeable = False
            object.__setattr__(self, field_name, arr)

        if self.input_min.shape != self.input_max.shape:
            raise DimensionError("input_min / input_max length mismatch")
        if self.target_min.shape != self.target_max.shape:
            raise DimensionError("target_min / target_max length mismatch")
        if np.any(self.input_min > self.input_max) or np.any(self.target_min > self.target_max):
            raise DimensionError("scaling min must not exceed max")

    @property
    def num_input_dimensions(self) -> int:
        return len(self.input_min)

    @property
    def num_target_dimensions(self) -> int:
        return len(self.target_min)

    def bounds(self, kind: ScaleKind) -> tuple[np.ndarray, np.ndarray]:
        if ScaleKind(kind) is ScaleKind.INPUT:
            return self.input_min, self.input_max
        return self.target_min, self.target_max

    def degenerate_dimensions(self, kind: ScaleKind) -> np.ndarray:
        """Indices where min == max."""
        lo, hi = self.bounds(kind)
        return np.flatnonzero(hi == lo)

    def __eq__(self, other) -> bool:
        if not isinstance(other, ScalingParameters):
            return NotImplemented
        return all(
            np.array_equal(getattr(self, f), getattr(other, f))
            for f in ("input_min", "input_max", "target_min", "target_max")
        )

    __hash__ = None


class MinMaxScaler:
    """
    Min / max scaler into [0, 1].

    Degenerate dimension (min == max):
    - scale   -> 0
    - unscale -> min (exactly)
    """

    def __init__(self, params: Optional[ScalingParameters] = None):
        self.params = params

    @classmethod
    def from_parameters(cls, params: ScalingParameters) -> "MinMaxScaler":
        return cls(params)

    @property
    def is_fitted(self) -> bool:
        return self.params is not None

    def fit(self, dataset: RegressionDataset) -> ScalingParameters:
        if dataset.num_samples == 0:
            raise InsufficientDataError("cannot fit a scaler on an empty dataset")

        input_min, input_max = dataset.input_ranges()
        target_min, target_max = dataset.target_ranges()
        self.params = ScalingParameters(
            input_min=input_min,
            input_max=input_max,
            target_min=target_min,
            target_max=target_max,
        )

        degenerate = self.params.degenerate_dimensions(ScaleKind.INPUT)
        if len(degenerate):
            logs.info(f"[Scaler] constant input dimensions {degenerate.tolist()} scale to 0")
        return self.params

    def scale(self, values, kind: ScaleKind) -> np.ndarray:
        lo, hi = self._bounds(values, kind)
        v = np.asarray(values, dtype=np.float64)
        span = hi - lo
        return np.divide(
            v - lo,
            span,
            out=np.zeros(np.broadcast_shapes(v.shape, span.shape)),
            where=span != 0,
        )

    def unscale(self, values, kind: ScaleKind) -> np.ndarray:
        lo, hi = self._bounds(values, kind)
        v = np.asarray(values, dtype=np.float64)
        # span == 0 collapses to lo
        return v * (hi - lo) + lo

    def _bounds(self, values, kind: ScaleKind) -> tuple[np.ndarray, np.ndarray]:
        if self.params is None:
            raise NotFittedError("MinMaxScaler used before fit()")
        lo, hi = self.params.bounds(kind)
        width = np.shape(values)[-1] if np.ndim(values) else 1
        if np.ndim(values) not in (1, 2) or width != len(lo):
            raise DimensionMismatchError(
                f"{ScaleKind(kind).value} vector of shape {np.shape(values)} "
                f"does not match {len(lo)} scaling dimensions"
            )
        return lo, hi
