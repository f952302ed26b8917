# linreg/data/dataset.py
from __future__ import annotations

import io
import math
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, List, Optional, Tuple

import numpy as np
import pandas as pd

from linreg.utils.errors import (
    DimensionError,
    FormatError,
    InsufficientDataError,
    InvalidConfigError,
    MissingDimensionsError,
)
from linreg.utils.filesystem import FileSystem
from linreg.utils.logger import logs

STRUCTURED_MAGIC = "LINREG_REGRESSION_DATA_FILE_V1.0"
GRT_MAGIC = "GRT_LABELLED_REGRESSION_DATA_FILE_V1.0"
_STRUCTURED_MAGICS = (STRUCTURED_MAGIC, GRT_MAGIC)
_STRUCTURED_PREFIXES = ("LINREG_REGRESSION_DATA_FILE_", "GRT_LABELLED_REGRESSION_DATA_FILE_")
_DATA_SECTION = "RegressionData:"
_DEFAULT_NAME = "NOT_SET"


@dataclass(frozen=True)
class Sample:
    """One (input, target) observation. Arrays are read-only."""

    input: np.ndarray
    target: np.ndarray


def _frozen_vector(values, what: str) -> np.ndarray:
    try:
        vec = np.array(values, dtype=np.float64)
    except (TypeError, ValueError) as e:
        raise FormatError(f"{what} is not numeric: {values!r}") from e
    if vec.ndim != 1:
        raise DimensionError(f"{what} must be a 1-D vector, got shape {vec.shape}")
    if not np.all(np.isfinite(vec)):
        raise FormatError(f"{what} contains non-finite values: {vec.tolist()}")
    vec.flags.writeable = False
    return vec


class RegressionDataset:
    """
    RegressionDataset (FINAL)

    Semantics:
    - Ordered list of Samples sharing N input / T target dimensions
    - N / T are None until declared (set_dimensions) or inferred
      from the first sample / structured file header
    - Stored vectors are read-only, subsets share them safely

    File formats:
    - CSV: N input columns then T target columns, no header.
      Requires set_dimensions() first.
    - Structured: first line is STRUCTURED_MAGIC (or GRT_MAGIC), `key: value` header,
      then `RegressionData:` and one whitespace separated row per sample.
      Header N / T override set_dimensions().
    """

    def __init__(
        self,
        num_input_dimensions: Optional[int] = None,
        num_target_dimensions: Optional[int] = None,
        *,
        name: str = _DEFAULT_NAME,
        info_text: str = "",
    ):
        self._n: Optional[int] = None
        self._t: Optional[int] = None
        self._inputs: List[np.ndarray] = []
        self._targets: List[np.ndarray] = []
        self.name = name
        self.info_text = info_text

        if num_input_dimensions is not None or num_target_dimensions is not None:
            if num_input_dimensions is None or num_target_dimensions is None:
                raise DimensionError("both N and T must be given together")
            self.set_dimensions(num_input_dimensions, num_target_dimensions)

    # ==================================================================
    # Shape
    # ==================================================================
    def set_dimensions(self, num_input: int, num_target: int) -> None:
        """
        Declare N / T. Existing samples are dropped when the shape changes.
        """
        if num_input < 0 or num_target < 0:
            raise DimensionError(
                f"dimensions must be non-negative, got N={num_input} T={num_target}"
            )
        if (num_input, num_target) != (self._n, self._t) and self._inputs:
            logs.warning(
                f"[Dataset] dimensions changed ({self._n},{self._t}) -> "
                f"({num_input},{num_target}), clearing {len(self._inputs)} samples"
            )
            self.clear()
        self._n = int(num_input)
        self._t = int(num_target)

    @property
    def num_samples(self) -> int:
        return len(self._inputs)

    @property
    def num_input_dimensions(self) -> Optional[int]:
        return self._n

    @property
    def num_target_dimensions(self) -> Optional[int]:
        return self._t

    @property
    def has_dimensions(self) -> bool:
        return self._n is not None and self._t is not None

    def __len__(self) -> int:
        return len(self._inputs)

    def __getitem__(self, index: int) -> Sample:
        return Sample(self._inputs[index], self._targets[index])

    def __iter__(self) -> Iterator[Sample]:
        for x, y in zip(self._inputs, self._targets):
            yield Sample(x, y)

    def __repr__(self) -> str:
        return (
            f"RegressionDataset(name={self.name!r}, samples={self.num_samples}, "
            f"N={self._n}, T={self._t})"
        )

    # ==================================================================
    # Mutation
    # ==================================================================
    def add_sample(self, input_vector, target_vector) -> None:
        x = _frozen_vector(input_vector, "input")
        y = _frozen_vector(target_vector, "target")

        if not self.has_dimensions:
            self._n, self._t = len(x), len(y)

        if len(x) != self._n or len(y) != self._t:
            raise DimensionError(
                f"sample shape ({len(x)},{len(y)}) does not match "
                f"dataset shape ({self._n},{self._t})"
            )

        self._inputs.append(x)
        self._targets.append(y)

    def clear(self) -> None:
        self._inputs = []
        self._targets = []

    # ==================================================================
    # Views
    # ==================================================================
    def to_arrays(self) -> Tuple[np.ndarray, np.ndarray]:
        """
        Returns fresh (inputs[m, N], targets[m, T]) float64 copies.
        """
        n = self._n or 0
        t = self._t or 0
        if not self._inputs:
            return np.empty((0, n)), np.empty((0, t))
        return np.vstack(self._inputs), np.vstack(self._targets)

    @property
    def inputs(self) -> np.ndarray:
        return self.to_arrays()[0]

    @property
    def targets(self) -> np.ndarray:
        return self.to_arrays()[1]

    def input_ranges(self) -> Tuple[np.ndarray, np.ndarray]:
        """Per-dimension (min, max) over all inputs."""
        return self._ranges(self.inputs)

    def target_ranges(self) -> Tuple[np.ndarray, np.ndarray]:
        """Per-dimension (min, max) over all targets."""
        return self._ranges(self.targets)

    def _ranges(self, values: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        if len(values) == 0:
            raise InsufficientDataError("cannot compute ranges of an empty dataset")
        return values.min(axis=0), values.max(axis=0)

    def to_frame(self) -> pd.DataFrame:
        X, Y = self.to_arrays()
        columns = [f"x{i}" for i in range(X.shape[1])] + [f"y{j}" for j in range(Y.shape[1])]
        return pd.DataFrame(np.hstack([X, Y]), columns=columns)

    # ==================================================================
    # Partitioning
    # ==================================================================
    def split(
        self,
        fraction: float,
        randomize: bool = True,
        rng: np.random.Generator | int = 0,
    ) -> Tuple["RegressionDataset", "RegressionDataset"]:
        """
        Partition into (train, validation) without replacement.

        - fraction is the validation share, in [0, 1)
        - fraction > 0 keeps at least one sample on each side
        - randomize draws the permutation from `rng` (Generator or seed),
          never from global random state
        - self is not modified
        """
        if not 0.0 <= fraction < 1.0:
            raise InvalidConfigError(f"validation fraction must be in [0, 1), got {fraction}")

        m = self.num_samples
        if fraction > 0 and m < 2:
            raise InsufficientDataError(
                f"need at least 2 samples for a validation split, got {m}"
            )

        if fraction == 0:
            n_val = 0
        else:
            n_val = int(math.floor(fraction * m + 0.5))
            n_val = min(max(n_val, 1), m - 1)

        if randomize:
            order = np.random.default_rng(rng).permutation(m)
        else:
            order = np.arange(m)

        n_train = m - n_val
        return self._subset(order[:n_train]), self._subset(order[n_train:])

    def _subset(self, indices) -> "RegressionDataset":
        out = RegressionDataset(name=self.name, info_text=self.info_text)
        out._n, out._t = self._n, self._t
        out._inputs = [self._inputs[i] for i in indices]
        out._targets = [self._targets[i] for i in indices]
        return out

    # ==================================================================
    # I/O
    # ==================================================================
    def load(self, path: str | Path) -> None:
        """
        Load CSV or structured data, replacing current samples.
        The dataset is left untouched when loading fails.
        """
        path = Path(path)
        text = FileSystem.read_text(path)
        first_line = text.lstrip("\ufeff").split("\n", 1)[0].strip()

        if first_line.startswith(_STRUCTURED_PREFIXES):
            self._load_structured(text, path)
        else:
            self._load_csv(text, path)

        logs.info(
            f"[Dataset] loaded {self.num_samples} samples from {path} "
            f"(N={self._n}, T={self._t})"
        )

    def save(self, path: str | Path) -> None:
        """`.csv` writes CSV, any other suffix writes the structured format."""
        path = Path(path)
        if path.suffix.lower() == ".csv":
            data = self._dump_csv()
        else:
            data = self._dump_structured()
        FileSystem.safe_write(path, data.encode("utf-8"))
        logs.info(f"[Dataset] saved {self.num_samples} samples to {path}")

    # ------------------------------------------------------------------
    # CSV
    # ------------------------------------------------------------------
    def _load_csv(self, text: str, path: Path) -> None:
        if not self.has_dimensions:
            raise MissingDimensionsError(
                f"CSV file {path} requires N and T to be set before loading"
            )
        n, t = self._n, self._t

        try:
            frame = pd.read_csv(
                io.StringIO(text),
                header=None,
                dtype=np.float64,
                skipinitialspace=True,
                skip_blank_lines=True,
                float_precision="round_trip",
            )
        except pd.errors.EmptyDataError:
            frame = pd.DataFrame(np.empty((0, n + t)))
        except (ValueError, pd.errors.ParserError) as e:
            raise FormatError(f"malformed CSV {path}: {e}") from e

        if frame.shape[1] != n + t:
            raise FormatError(
                f"CSV {path} has {frame.shape[1]} columns, expected N+T={n + t}"
            )

        values = frame.to_numpy(dtype=np.float64)
        if not np.all(np.isfinite(values)):
            bad_row = int(np.where(~np.isfinite(values).all(axis=1))[0][0]) + 1
            raise FormatError(f"CSV {path} row {bad_row}: missing or non-finite value")

        self._replace(values[:, :n], values[:, n:])

    def _dump_csv(self) -> str:
        return self.to_frame().to_csv(header=False, index=False, lineterminator="\n")

    # ------------------------------------------------------------------
    # Structured
    # ------------------------------------------------------------------
    def _load_structured(self, text: str, path: Path) -> None:
        lines = text.lstrip("\ufeff").splitlines()
        magic = lines[0].strip()
        if magic not in _STRUCTURED_MAGICS:
            raise FormatError(f"{path}: unsupported data file version {magic!r}")

        header = {}
        last_key = None
        idx = 1
        while idx < len(lines):
            line = lines[idx].strip()
            idx += 1
            if not line:
                continue
            if line == _DATA_SECTION:
                break
            key, sep, value = line.partition(":")
            if not sep:
                # `min max` rows listed under an ExternalInputRanges-style key
                if last_key is not None and last_key.endswith("Ranges"):
                    continue
                raise FormatError(f"{path} line {idx}: expected `key: value`, got {line!r}")
            last_key = key.strip()
            header[last_key] = value.strip()
        else:
            raise FormatError(f"{path}: missing {_DATA_SECTION} section")

        n = self._header_int(header, "NumInputDimensions", path)
        t = self._header_int(header, "NumTargetDimensions", path)
        expected = self._header_int(header, "TotalNumTrainingExamples", path)

        rows = []
        for lineno, line in enumerate(lines[idx:], start=idx + 1):
            tokens = line.split()
            if not tokens:
                continue
            if len(tokens) != n + t:
                raise FormatError(
                    f"{path} line {lineno}: {len(tokens)} values, expected N+T={n + t}"
                )
            try:
                row = [float(tok) for tok in tokens]
            except ValueError as e:
                raise FormatError(f"{path} line {lineno}: {e}") from e
            if not all(math.isfinite(v) for v in row):
                raise FormatError(f"{path} line {lineno}: non-finite value")
            rows.append(row)

        if len(rows) != expected:
            raise FormatError(
                f"{path}: header declares {expected} samples, found {len(rows)}"
            )

        values = np.array(rows, dtype=np.float64).reshape(len(rows), n + t)
        self._n, self._t = n, t
        self.name = header.get("DatasetName", _DEFAULT_NAME) or _DEFAULT_NAME
        self.info_text = header.get("InfoText", "")
        self._replace(values[:, :n], values[:, n:])

    @staticmethod
    def _header_int(header: dict, key: str, path: Path) -> int:
        if key not in header:
            raise FormatError(f"{path}: header is missing {key}")
        try:
            value = int(header[key])
        except ValueError as e:
            raise FormatError(f"{path}: {key} is not an integer: {header[key]!r}") from e
        if value < 0:
            raise FormatError(f"{path}: {key} must be non-negative, got {value}")
        return value

    def _dump_structured(self) -> str:
        out = io.StringIO()
        out.write(f"{STRUCTURED_MAGIC}\n")
        out.write(f"DatasetName: {self.name}\n")
        out.write(f"InfoText: {self.info_text}\n")
        out.write(f"NumInputDimensions: {self._n or 0}\n")
        out.write(f"NumTargetDimensions: {self._t or 0}\n")
        out.write(f"TotalNumTrainingExamples: {self.num_samples}\n")
        out.write(f"{_DATA_SECTION}\n")
        for x, y in zip(self._inputs, self._targets):
            out.write("\t".join(repr(float(v)) for v in np.concatenate([x, y])))
            out.write("\n")
        return out.getvalue()

    # ------------------------------------------------------------------
    def _replace(self, X: np.ndarray, Y: np.ndarray) -> None:
        inputs, targets = [], []
        for x, y in zip(X, Y):
            x = x.copy()
            y = y.copy()
            x.flags.writeable = False
            y.flags.writeable = False
            inputs.append(x)
            targets.append(y)
        self._inputs = inputs
        self._targets = targets
