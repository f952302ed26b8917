# linreg/training/model_store.py
from __future__ import annotations

import io
import json
import pickle
from pathlib import Path
from typing import Any, Dict, Optional

import joblib
import numpy as np

from linreg.training.model import LinearRegressionModel
from linreg.training.scaler import ScalingParameters
from linreg.utils.errors import DimensionError, FormatError
from linreg.utils.filesystem import FileSystem
from linreg.utils.logger import logs

FORMAT_TAG = "linreg-linear-regression"
FORMAT_VERSION = 1

_BINARY_SUFFIXES = {".joblib", ".pkl"}


class ModelStore:
    """
    ModelStore (FINAL / FROZEN)

    Persisted payload (same fields for both encodings):

        format                  FORMAT_TAG
        version                 FORMAT_VERSION
        num_input_dimensions    N
        num_target_dimensions   T
        scaling_enabled         bool
        scaling                 {input_min, input_max, target_min, target_max} | null
        weights                 T*N floats, row-major
        bias                    T floats
        metadata                free-form dict (training metrics)

    Encoding by suffix:
    - .joblib / .pkl -> binary (joblib)
    - anything else  -> JSON text, floats written at repr precision
    """

    # ======================================================================
    # Save
    # ======================================================================
    @classmethod
    def save(
        cls,
        model: LinearRegressionModel,
        path: str | Path,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> Path:
        path = Path(path)
        payload = cls.to_payload(model, metadata)

        if cls._is_binary(path):
            buf = io.BytesIO()
            joblib.dump(payload, buf)
            data = buf.getvalue()
        else:
            try:
                data = json.dumps(payload, indent=2, allow_nan=False).encode("utf-8")
            except (TypeError, ValueError) as e:
                raise FormatError(f"cannot encode model for {path}: {e}") from e

        FileSystem.safe_write(path, data)
        logs.info(f"[ModelStore] saved {model!r} -> {path}")
        return path

    @staticmethod
    def to_payload(
        model: LinearRegressionModel,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        scaling = model.scaling
        return {
            "format": FORMAT_TAG,
            "version": FORMAT_VERSION,
            "num_input_dimensions": model.num_input_dimensions,
            "num_target_dimensions": model.num_target_dimensions,
            "scaling_enabled": model.scaling_enabled,
            "scaling": None if scaling is None else {
                "input_min": scaling.input_min.tolist(),
                "input_max": scaling.input_max.tolist(),
                "target_min": scaling.target_min.tolist(),
                "target_max": scaling.target_max.tolist(),
            },
            "weights": model.weights.ravel().tolist(),
            "bias": model.bias.tolist(),
            "metadata": dict(metadata or {}),
        }

    # ======================================================================
    # Load
    # ======================================================================
    @classmethod
    def load(cls, path: str | Path) -> LinearRegressionModel:
        path = Path(path)
        model = cls.from_payload(cls._read_payload(path), source=path)
        logs.info(f"[ModelStore] loaded {model!r} <- {path}")
        return model

    @classmethod
    def load_metadata(cls, path: str | Path) -> Dict[str, Any]:
        payload = cls._read_payload(Path(path))
        cls._check_header(payload, Path(path))
        metadata = payload.get("metadata") or {}
        if not isinstance(metadata, dict):
            raise FormatError(f"{path}: metadata must be a mapping")
        return metadata

    @classmethod
    def from_payload(cls, payload: Any, source: Path | str = "<payload>") -> LinearRegressionModel:
        cls._check_header(payload, source)

        try:
            n = cls._non_negative_int(payload["num_input_dimensions"], "num_input_dimensions", source)
            t = cls._non_negative_int(payload["num_target_dimensions"], "num_target_dimensions", source)
            scaling_enabled = payload["scaling_enabled"]
            weights = cls._floats(payload["weights"], t * n, "weights", source)
            bias = cls._floats(payload["bias"], t, "bias", source)
            raw_scaling = payload.get("scaling")
        except KeyError as e:
            raise FormatError(f"{source}: missing field {e.args[0]!r}") from e

        if not isinstance(scaling_enabled, bool):
            raise FormatError(f"{source}: scaling_enabled must be a boolean")

        scaling = None
        if scaling_enabled:
            if not isinstance(raw_scaling, dict):
                raise FormatError(f"{source}: scaling enabled but parameters missing")
            try:
                scaling = ScalingParameters(
                    input_min=cls._floats(raw_scaling["input_min"], n, "scaling.input_min", source),
                    input_max=cls._floats(raw_scaling["input_max"], n, "scaling.input_max", source),
                    target_min=cls._floats(raw_scaling["target_min"], t, "scaling.target_min", source),
                    target_max=cls._floats(raw_scaling["target_max"], t, "scaling.target_max", source),
                )
            except KeyError as e:
                raise FormatError(f"{source}: missing scaling field {e.args[0]!r}") from e
            except DimensionError as e:
                raise FormatError(f"{source}: invalid scaling parameters: {e}") from e

        return LinearRegressionModel(
            weights=weights.reshape(t, n),
            bias=bias,
            scaling=scaling,
        )

    # ======================================================================
    # Internal
    # ======================================================================
    @staticmethod
    def _is_binary(path: Path) -> bool:
        return path.suffix.lower() in _BINARY_SUFFIXES

    @classmethod
    def _read_payload(cls, path: Path) -> Any:
        data = FileSystem.read_bytes(path)

        if cls._is_binary(path):
            try:
                return joblib.load(io.BytesIO(data))
            except (
                pickle.UnpicklingError,
                EOFError,
                ValueError,
                KeyError,
                TypeError,
                IndexError,
                AttributeError,
                ImportError,
            ) as e:
                raise FormatError(f"{path}: not a joblib model file: {e}") from e

        try:
            return json.loads(data.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise FormatError(f"{path}: not a JSON model file: {e}") from e

    @staticmethod
    def _check_header(payload: Any, source) -> None:
        if not isinstance(payload, dict):
            raise FormatError(f"{source}: model payload must be a mapping")
        if payload.get("format") != FORMAT_TAG:
            raise FormatError(
                f"{source}: foreign format {payload.get('format')!r}, expected {FORMAT_TAG!r}"
            )
        if payload.get("version") != FORMAT_VERSION:
            raise FormatError(
                f"{source}: unsupported version {payload.get('version')!r}, "
                f"expected {FORMAT_VERSION}"
            )

    @staticmethod
    def _non_negative_int(value: Any, name: str, source) -> int:
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            raise FormatError(f"{source}: {name} must be a non-negative integer, got {value!r}")
        return value

    @staticmethod
    def _floats(values: Any, expected: int, name: str, source) -> np.ndarray:
        if not isinstance(values, (list, tuple)):
            raise FormatError(f"{source}: {name} must be a list")
        if len(values) != expected:
            raise FormatError(f"{source}: {name} has {len(values)} values, expected {expected}")
        if any(isinstance(v, bool) or not isinstance(v, (int, float)) for v in values):
            raise FormatError(f"{source}: {name} must contain numbers only")
        arr = np.array(values, dtype=np.float64)
        if not np.all(np.isfinite(arr)):
            raise FormatError(f"{source}: {name} contains non-finite values")
        return arr
