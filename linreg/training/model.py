# linreg/training/model.py
"""
LinearRegressionModel (FINAL)

Runtime-only model: y = W x + b, one row of W per target dimension.

Weights always operate in the space the model was trained in. When
scaling is enabled the model carries the ScalingParameters needed to map
raw inputs in and predictions back out, so weights and scaling can be
serialized independently.
"""
from __future__ import annotations

from typing import Optional

import numpy as np

from linreg.training.scaler import MinMaxScaler, ScaleKind, ScalingParameters
from linreg.utils.errors import DimensionError, DimensionMismatchError


class LinearRegressionModel:

    def __init__(
        self,
        *,
        weights,
        bias,
        scaling: Optional[ScalingParameters] = None,
    ):
        W = np.array(weights, dtype=np.float64)
        b = np.array(bias, dtype=np.float64)

        if W.ndim != 2:
            raise DimensionError(f"weights must be a T x N matrix, got shape {W.shape}")
        if b.shape != (W.shape[0],):
            raise DimensionError(
                f"bias must have length T={W.shape[0]}, got shape {b.shape}"
            )
        if scaling is not None and (
            scaling.num_input_dimensions != W.shape[1]
            or scaling.num_target_dimensions != W.shape[0]
        ):
            raise DimensionError(
                f"scaling parameters ({scaling.num_input_dimensions},"
                f"{scaling.num_target_dimensions}) do not match model "
                f"({W.shape[1]},{W.shape[0]})"
            )

        W.flags.writeable = False
        b.flags.writeable = False
        self._W = W
        self._b = b
        self._scaling = scaling
        self._scaler = MinMaxScaler.from_parameters(scaling) if scaling is not None else None

    # ------------------------------------------------------------------
    # Accessors (copies)
    # ------------------------------------------------------------------
    @property
    def weights(self) -> np.ndarray:
        return self._W.copy()

    @property
    def bias(self) -> np.ndarray:
        return self._b.copy()

    @property
    def scaling(self) -> Optional[ScalingParameters]:
        return self._scaling

    @property
    def scaling_enabled(self) -> bool:
        return self._scaling is not None

    @property
    def num_input_dimensions(self) -> int:
        return self._W.shape[1]

    @property
    def num_target_dimensions(self) -> int:
        return self._W.shape[0]

    # ------------------------------------------------------------------
    # Inference
    # ------------------------------------------------------------------
    def predict(self, input_vector) -> np.ndarray:
        x = np.asarray(input_vector, dtype=np.float64)
        if x.ndim != 1 or x.shape[0] != self.num_input_dimensions:
            raise DimensionMismatchError(
                f"expected input of length {self.num_input_dimensions}, got shape {x.shape}"
            )
        return self.predict_batch(x[np.newaxis, :])[0]

    def predict_batch(self, inputs) -> np.ndarray:
        """(m, N) -> (m, T)"""
        X = np.asarray(inputs, dtype=np.float64)
        if X.ndim != 2 or X.shape[1] != self.num_input_dimensions:
            raise DimensionMismatchError(
                f"expected inputs of shape (m, {self.num_input_dimensions}), got {X.shape}"
            )

        if self._scaler is None:
            return X @ self._W.T + self._b

        X_scaled = self._scaler.scale(X, ScaleKind.INPUT)
        return self._scaler.unscale(X_scaled @ self._W.T + self._b, ScaleKind.TARGET)

    def __repr__(self) -> str:
        return (
            f"LinearRegressionModel(N={self.num_input_dimensions}, "
            f"T={self.num_target_dimensions}, scaling={self.scaling_enabled})"
        )
