#!filepath: tests/training/test_model_store.py
from __future__ import annotations

import json

import joblib
import numpy as np
import pytest

from linreg.training.model import LinearRegressionModel
from linreg.training.model_store import FORMAT_TAG, FORMAT_VERSION, ModelStore
from linreg.training.scaler import ScalingParameters
from linreg.utils.errors import FileIOError, FormatError


@pytest.fixture
def scaled_model() -> LinearRegressionModel:
    rng = np.random.default_rng(9)
    scaling = ScalingParameters(
        input_min=[-1.0, 0.0, 3.0],
        input_max=[1.0, 0.0, 7.5],
        target_min=[10.0, -4.0],
        target_max=[20.0, 4.0],
    )
    return LinearRegressionModel(
        weights=rng.normal(size=(2, 3)),
        bias=rng.normal(size=2),
        scaling=scaling,
    )


@pytest.fixture
def plain_model() -> LinearRegressionModel:
    return LinearRegressionModel(weights=[[0.1, 0.2]], bias=[1.0 / 3.0])


def write_payload(path, **changes):
    payload = {
        "format": FORMAT_TAG,
        "version": FORMAT_VERSION,
        "num_input_dimensions": 2,
        "num_target_dimensions": 1,
        "scaling_enabled": False,
        "scaling": None,
        "weights": [0.5, 1.5],
        "bias": [2.0],
        "metadata": {},
    }
    payload.update(changes)
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


# -----------------------------------------------------------------------------
# 1. Save -> load preserves predictions
# -----------------------------------------------------------------------------
@pytest.mark.parametrize("name", ["model.json", "model.joblib"])
def test_loaded_model_predicts_identically(tmp_path, scaled_model, name):
    path = ModelStore.save(scaled_model, tmp_path / name)
    loaded = ModelStore.load(path)

    X = np.random.default_rng(0).uniform(-10.0, 10.0, size=(100, 3))
    np.testing.assert_array_equal(loaded.predict_batch(X), scaled_model.predict_batch(X))
    assert loaded.scaling == scaled_model.scaling


def test_json_keeps_full_precision(tmp_path, plain_model):
    path = ModelStore.save(plain_model, tmp_path / "model.json")
    loaded = ModelStore.load(path)

    assert loaded.bias[0] == 1.0 / 3.0
    assert loaded.scaling_enabled is False


def test_json_payload_layout(tmp_path, scaled_model):
    path = ModelStore.save(scaled_model, tmp_path / "model.json", metadata={"epochs": 12})
    payload = json.loads(path.read_text(encoding="utf-8"))

    assert payload["format"] == FORMAT_TAG
    assert payload["version"] == FORMAT_VERSION
    assert payload["num_input_dimensions"] == 3
    assert payload["num_target_dimensions"] == 2
    assert payload["weights"] == scaled_model.weights.ravel().tolist()
    assert payload["scaling"]["input_max"] == [1.0, 0.0, 7.5]
    assert payload["metadata"] == {"epochs": 12}


def test_load_metadata(tmp_path, plain_model):
    path = ModelStore.save(plain_model, tmp_path / "m.joblib", metadata={"run_id": "abc"})
    assert ModelStore.load_metadata(path) == {"run_id": "abc"}


def test_save_overwrites(tmp_path, plain_model, scaled_model):
    path = tmp_path / "model.json"
    ModelStore.save(scaled_model, path)
    ModelStore.save(plain_model, path)

    assert ModelStore.load(path).num_input_dimensions == 2


# -----------------------------------------------------------------------------
# 2. Rejections
# -----------------------------------------------------------------------------
def test_missing_file(tmp_path):
    with pytest.raises(FileIOError):
        ModelStore.load(tmp_path / "missing.json")


def test_unsupported_version(tmp_path):
    path = write_payload(tmp_path / "m.json", version=FORMAT_VERSION + 1)
    with pytest.raises(FormatError, match="version"):
        ModelStore.load(path)


def test_foreign_format(tmp_path):
    path = write_payload(tmp_path / "m.json", format="somebody-else")
    with pytest.raises(FormatError, match="format"):
        ModelStore.load(path)


@pytest.mark.parametrize(
    "changes",
    [
        {"weights": [0.5]},                          # T*N mismatch
        {"bias": [1.0, 2.0]},                        # T mismatch
        {"weights": [0.5, "x"]},                     # non-numeric
        {"weights": [float("nan"), 1.5]},            # written as NaN
        {"bias": [float("inf")]},                    # written as Infinity
        {"num_input_dimensions": -1},
        {"scaling_enabled": "yes"},
        {"scaling_enabled": True, "scaling": None},  # flag without parameters
        {
            "scaling_enabled": True,
            "scaling": {"input_min": [0, 0], "input_max": [1, 1], "target_min": [0]},
        },
    ],
)
def test_malformed_payload(tmp_path, changes):
    path = write_payload(tmp_path / "m.json", **changes)
    with pytest.raises(FormatError):
        ModelStore.load(path)


def test_missing_field(tmp_path):
    path = tmp_path / "m.json"
    path.write_text(json.dumps({"format": FORMAT_TAG, "version": FORMAT_VERSION}))
    with pytest.raises(FormatError, match="missing"):
        ModelStore.load(path)


def test_not_json(tmp_path):
    path = tmp_path / "m.json"
    path.write_text("this is not json")
    with pytest.raises(FormatError):
        ModelStore.load(path)


def test_garbage_joblib(tmp_path):
    path = tmp_path / "m.joblib"
    path.write_bytes(b"\x00\x01garbage")
    with pytest.raises(FormatError):
        ModelStore.load(path)


def test_joblib_holding_something_else(tmp_path):
    path = tmp_path / "m.joblib"
    joblib.dump([1, 2, 3], path)
    with pytest.raises(FormatError):
        ModelStore.load(path)


def test_unwritable_destination(tmp_path, plain_model):
    blocker = tmp_path / "blocker"
    blocker.write_text("x")
    with pytest.raises(FileIOError):
        ModelStore.save(plain_model, blocker / "model.json")


def test_unencodable_metadata(tmp_path, plain_model):
    path = tmp_path / "m.json"
    with pytest.raises(FormatError):
        ModelStore.save(plain_model, path, metadata={"obj": object()})
    assert not path.exists()
