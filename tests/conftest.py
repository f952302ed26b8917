# tests/conftest.py
from __future__ import annotations

from pathlib import Path

import numpy as np
import pytest
from loguru import logger

from linreg.config.training_config import TrainingConfig
from linreg.data.dataset import RegressionDataset


@pytest.fixture(autouse=True)
def disable_file_logger():
    logger.remove()
    logger.add(lambda msg: None)  # or sys.stderr
    yield
    logger.remove()


@pytest.fixture
def write_file(tmp_path: Path):
    """
    Factory fixture: write_file("name.csv", "1.0,2.0\\n") -> Path
    """

    def _write(name: str, content: str) -> Path:
        p = tmp_path / name
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_text(content, encoding="utf-8")
        return p

    return _write


@pytest.fixture
def doubling_csv(write_file) -> Path:
    """y = 2x, N = T = 1."""
    return write_file("doubling.csv", "1.0,2.0\n2.0,4.0\n3.0,6.0\n4.0,8.0\n")


@pytest.fixture
def affine_dataset() -> RegressionDataset:
    """y = 2x + 3 on 11 evenly spaced points in [0, 1]."""
    ds = RegressionDataset(1, 1)
    for x in np.linspace(0.0, 1.0, 11):
        ds.add_sample([x], [2.0 * x + 3.0])
    return ds


@pytest.fixture
def exact_cfg() -> TrainingConfig:
    """
    Deterministic full-batch config that runs every epoch
    (min_change = 0 never triggers early stopping).
    """
    return TrainingConfig(
        max_epochs=2000,
        min_change=0.0,
        learning_rate=0.5,
        validation_fraction=0.0,
        randomize_order=False,
        enable_scaling=False,
        seed=7,
    )
