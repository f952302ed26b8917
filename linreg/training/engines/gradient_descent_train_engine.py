# linreg/training/engines/gradient_descent_train_engine.py
from __future__ import annotations

import math
from typing import Iterator, List, Optional

import numpy as np

from linreg.config.training_config import TrainingConfig
from linreg.data.dataset import RegressionDataset
from linreg.observability.timer import Timer
from linreg.training.context import TrainingState
from linreg.training.engines.train_result import EpochRecord, TrainResult
from linreg.training.model import LinearRegressionModel
from linreg.training.scaler import MinMaxScaler, ScaleKind
from linreg.utils.errors import (
    InsufficientDataError,
    InvalidConfigError,
    LinRegError,
    NumericalDivergenceError,
)
from linreg.utils.logger import logs

_INIT_RANGE = 0.1


class GradientDescentTrainEngine:
    """
    Gradient Descent Batch Train Engine (FINAL)

    Training paradigm: batch, finite dataset, stateless across runs.

    Contract:
    - consumes a RegressionDataset, never mutates it
    - owns its random generator (seeded from cfg.seed), its scaled copies
      and its W / b buffers
    - produces a TrainResult or raises a LinRegError; a partially
      trained model is never returned

    Per epoch:
    1) optional reorder of training rows (seeded permutation)
    2) gradient step on per-target MSE, full batch or mini-batches
    3) training / validation loss (validation never feeds the gradient)
    4) non-finite loss -> ABORTED
    5) plateau: the monitored loss (validation loss when a validation subset
       exists, else training loss) and the training loss both improved by
       less than min_change, without rising, for `patience` epochs in a row
       -> CONVERGED

    Any failure leaves `state` at ABORTED.
    """

    def __init__(self, cfg: TrainingConfig):
        self.cfg = cfg
        self.state = TrainingState.INITIALIZED
        self._rng = np.random.default_rng(cfg.seed)

    # ======================================================================
    # Public API
    # ======================================================================
    def train(self, dataset: RegressionDataset) -> TrainResult:
        self.state = TrainingState.INITIALIZED
        self._rng = np.random.default_rng(self.cfg.seed)
        try:
            return self._train(dataset)
        except LinRegError:
            self.state = TrainingState.ABORTED
            raise

    # ======================================================================
    # Internal
    # ======================================================================
    def _train(self, dataset: RegressionDataset) -> TrainResult:
        cfg = self.cfg

        timer = Timer()
        timer.start("train")

        cfg.validate_semantics()
        self._validate_dataset(dataset)

        # ------------------------------------------------------------------
        # 1. Train / validation partition
        # ------------------------------------------------------------------
        self.state = TrainingState.VALIDATING
        if cfg.validation_fraction > 0:
            train_set, val_set = dataset.split(
                cfg.validation_fraction,
                randomize=cfg.randomize_order,
                rng=self._rng,
            )
        else:
            train_set, val_set = dataset, None

        if train_set.num_samples < 2:
            raise InsufficientDataError(
                f"need at least 2 training samples, got {train_set.num_samples} "
                f"(dataset={dataset.num_samples}, validation_fraction={cfg.validation_fraction})"
            )

        X, Y = train_set.to_arrays()
        X_val: Optional[np.ndarray] = None
        Y_val: Optional[np.ndarray] = None
        if val_set is not None:
            X_val, Y_val = val_set.to_arrays()

        # ------------------------------------------------------------------
        # 2. Scaling (fit on the training subset only)
        # ------------------------------------------------------------------
        scaling = None
        if cfg.enable_scaling:
            scaler = MinMaxScaler()
            scaling = scaler.fit(train_set)
            X = scaler.scale(X, ScaleKind.INPUT)
            Y = scaler.scale(Y, ScaleKind.TARGET)
            if X_val is not None:
                X_val = scaler.scale(X_val, ScaleKind.INPUT)
                Y_val = scaler.scale(Y_val, ScaleKind.TARGET)

        # ------------------------------------------------------------------
        # 3. Initialization (deterministic under cfg.seed)
        # ------------------------------------------------------------------
        n = dataset.num_input_dimensions
        t = dataset.num_target_dimensions
        W = self._rng.uniform(-_INIT_RANGE, _INIT_RANGE, size=(t, n))
        b = self._rng.uniform(-_INIT_RANGE, _INIT_RANGE, size=t)

        logs.info(
            f"[GradientDescent] START samples={dataset.num_samples} "
            f"train={len(X)} validation={0 if X_val is None else len(X_val)} "
            f"N={n} T={t} scaling={cfg.enable_scaling} lr={cfg.learning_rate} "
            f"batch={cfg.batch_size or 'full'}"
        )

        # ------------------------------------------------------------------
        # 4. Epoch loop
        # ------------------------------------------------------------------
        self.state = TrainingState.ITERATING
        history: List[EpochRecord] = []
        previous_monitored = math.inf
        previous_train = math.inf
        plateau_epochs = 0
        stop_reason = TrainingState.MAX_EPOCHS_REACHED

        with np.errstate(over="ignore", invalid="ignore"):
            for epoch in range(1, cfg.max_epochs + 1):
                for rows in self._batches(len(X)):
                    self._step(W, b, X[rows], Y[rows])

                train_loss = self._mse(X, Y, W, b)
                val_loss = None if X_val is None else self._mse(X_val, Y_val, W, b)
                history.append(EpochRecord(epoch, train_loss, val_loss))

                if not math.isfinite(train_loss) or (
                    val_loss is not None and not math.isfinite(val_loss)
                ):
                    self.state = TrainingState.ABORTED
                    logs.error(
                        f"[GradientDescent] ABORTED epoch={epoch} "
                        f"train_loss={train_loss} validation_loss={val_loss}"
                    )
                    raise NumericalDivergenceError(
                        f"loss became non-finite at epoch {epoch} "
                        f"(train={train_loss}, validation={val_loss}); "
                        f"try a smaller learning_rate or enable scaling"
                    )

                if epoch % cfg.log_every_n_epochs == 0:
                    logs.info(
                        f"[GradientDescent] epoch={epoch} train_loss={train_loss:.6g} "
                        f"validation_loss={val_loss if val_loss is None else f'{val_loss:.6g}'} "
                        f"elapsed={timer.elapsed('train'):.3f}s"
                    )

                monitored = train_loss if val_loss is None else val_loss
                if self._plateaued(previous_monitored, monitored) and self._plateaued(
                    previous_train, train_loss
                ):
                    plateau_epochs += 1
                else:
                    plateau_epochs = 0
                previous_monitored, previous_train = monitored, train_loss

                if plateau_epochs >= cfg.patience:
                    stop_reason = TrainingState.CONVERGED
                    break

        self.state = stop_reason

        # ------------------------------------------------------------------
        # 5. Finalize
        # ------------------------------------------------------------------
        model = LinearRegressionModel(weights=W, bias=b, scaling=scaling)
        last = history[-1]
        elapsed = timer.end("train")
        self.state = TrainingState.FINALIZED

        logs.info(
            f"[GradientDescent] DONE {stop_reason.value} epochs={last.epoch} "
            f"train_loss={last.train_loss:.6g} validation_loss={last.validation_loss} "
            f"time={elapsed:.3f}s"
        )

        return TrainResult(
            model=model,
            epochs=last.epoch,
            train_loss=last.train_loss,
            validation_loss=last.validation_loss,
            elapsed_seconds=elapsed,
            stop_reason=stop_reason,
            num_training_samples=len(X),
            num_validation_samples=0 if X_val is None else len(X_val),
            history=history,
        )

    @staticmethod
    def _validate_dataset(dataset: RegressionDataset) -> None:
        n = dataset.num_input_dimensions
        t = dataset.num_target_dimensions
        if dataset.has_dimensions and (n == 0 or t == 0):
            raise InvalidConfigError(
                f"input and target dimensions must be >= 1, got N={n} T={t}"
            )
        if dataset.num_samples == 0:
            raise InsufficientDataError("cannot train on an empty dataset")

    def _plateaued(self, previous: float, current: float) -> bool:
        """Improved by less than min_change; a rising loss never counts."""
        return 0.0 <= previous - current < self.cfg.min_change

    def _batches(self, m: int) -> Iterator[np.ndarray]:
        if self.cfg.randomize_order:
            order = self._rng.permutation(m)
        else:
            order = np.arange(m)

        size = self.cfg.batch_size or m
        for start in range(0, m, size):
            yield order[start:start + size]

    def _step(self, W: np.ndarray, b: np.ndarray, X: np.ndarray, Y: np.ndarray) -> None:
        """
        In-place update on per-target MSE over one batch:
            dW = 2/k * E^T X,  db = 2/k * sum(E)   with E = X W^T + b - Y
        """
        k = len(X)
        err = X @ W.T + b - Y
        W -= self.cfg.learning_rate * (2.0 / k) * (err.T @ X)
        b -= self.cfg.learning_rate * (2.0 / k) * err.sum(axis=0)

    @staticmethod
    def _mse(X: np.ndarray, Y: np.ndarray, W: np.ndarray, b: np.ndarray) -> float:
        """Mean over samples and target dimensions."""
        return float(np.mean((X @ W.T + b - Y) ** 2))
