#!filepath: tests/data_test/test_dataset.py
from __future__ import annotations

import numpy as np
import pytest

from linreg.data.dataset import GRT_MAGIC, STRUCTURED_MAGIC, RegressionDataset
from linreg.utils.errors import (
    DimensionError,
    FileIOError,
    FormatError,
    InsufficientDataError,
    InvalidConfigError,
    MissingDimensionsError,
)


def structured_text(n: int, t: int, rows: list[str], total: int | None = None, magic: str = STRUCTURED_MAGIC) -> str:
    header = [
        magic,
        "DatasetName: demo",
        "InfoText: generated for tests",
        f"NumInputDimensions: {n}",
        f"NumTargetDimensions: {t}",
        f"TotalNumTrainingExamples: {len(rows) if total is None else total}",
        "RegressionData:",
    ]
    return "\n".join(header + rows) + "\n"


def make_dataset(m: int, n: int = 2, t: int = 1) -> RegressionDataset:
    ds = RegressionDataset(n, t)
    for i in range(m):
        ds.add_sample([float(i)] * n, [float(10 * i)] * t)
    return ds


# -----------------------------------------------------------------------------
# 1. Shape contract
# -----------------------------------------------------------------------------
def test_first_sample_infers_dimensions():
    ds = RegressionDataset()
    assert ds.num_input_dimensions is None

    ds.add_sample([1.0, 2.0, 3.0], [4.0])

    assert ds.num_input_dimensions == 3
    assert ds.num_target_dimensions == 1
    assert ds.num_samples == 1
    assert len(ds) == 1


def test_add_sample_rejects_wrong_shape():
    ds = RegressionDataset(2, 1)

    with pytest.raises(DimensionError):
        ds.add_sample([1.0], [2.0])
    with pytest.raises(DimensionError):
        ds.add_sample([1.0, 2.0], [3.0, 4.0])

    assert ds.num_samples == 0


def test_add_sample_rejects_non_finite():
    ds = RegressionDataset(1, 1)
    with pytest.raises(FormatError):
        ds.add_sample([float("nan")], [1.0])


def test_set_dimensions_change_clears_samples():
    ds = make_dataset(3)
    ds.set_dimensions(2, 1)
    assert ds.num_samples == 3

    ds.set_dimensions(4, 2)
    assert ds.num_samples == 0
    assert (ds.num_input_dimensions, ds.num_target_dimensions) == (4, 2)


def test_stored_vectors_are_read_only():
    ds = make_dataset(1)
    with pytest.raises(ValueError):
        ds[0].input[0] = 99.0


# -----------------------------------------------------------------------------
# 2. CSV
# -----------------------------------------------------------------------------
def test_csv_load(doubling_csv):
    ds = RegressionDataset()
    ds.set_dimensions(1, 1)
    ds.load(doubling_csv)

    assert ds.num_samples == 4
    np.testing.assert_array_equal(ds.inputs[:, 0], [1.0, 2.0, 3.0, 4.0])
    np.testing.assert_array_equal(ds.targets[:, 0], [2.0, 4.0, 6.0, 8.0])


def test_csv_without_dimensions_fails(doubling_csv):
    with pytest.raises(MissingDimensionsError):
        RegressionDataset().load(doubling_csv)


def test_csv_multi_dimensional_split_of_columns(write_file):
    path = write_file("multi.csv", "1,2,3,10,20\n4,5,6,40,50\n")
    ds = RegressionDataset(3, 2)
    ds.load(path)

    np.testing.assert_array_equal(ds.inputs, [[1, 2, 3], [4, 5, 6]])
    np.testing.assert_array_equal(ds.targets, [[10, 20], [40, 50]])


def test_csv_skips_blank_lines(write_file):
    path = write_file("blank.csv", "1.0,2.0\n\n2.0,4.0\n")
    ds = RegressionDataset(1, 1)
    ds.load(path)
    assert ds.num_samples == 2


@pytest.mark.parametrize(
    "content",
    [
        "1.0,2.0\n2.0,4.0\n",          # 2 columns, N+T = 3
        "1.0,abc,3.0\n",               # non-numeric token
        "1.0,2.0,3.0\n4.0,5.0\n",      # short row
        "1.0,2.0,3.0\n4.0,5.0,6.0,7.0\n",  # long row
        "1.0,,3.0\n",                  # empty token
    ],
)
def test_csv_malformed_rows(write_file, content):
    path = write_file("bad.csv", content)
    ds = RegressionDataset(2, 1)
    with pytest.raises(FormatError):
        ds.load(path)


def test_failed_load_keeps_previous_samples(write_file, doubling_csv):
    ds = RegressionDataset(1, 1)
    ds.load(doubling_csv)

    with pytest.raises(FormatError):
        ds.load(write_file("bad.csv", "1.0,oops\n"))

    assert ds.num_samples == 4


def test_missing_file_is_io_error(tmp_path):
    ds = RegressionDataset(1, 1)
    with pytest.raises(FileIOError) as exc:
        ds.load(tmp_path / "missing.csv")
    assert isinstance(exc.value, OSError)


def test_empty_csv_loads_no_samples(write_file):
    ds = RegressionDataset(1, 1)
    ds.load(write_file("empty.csv", ""))
    assert ds.num_samples == 0


# -----------------------------------------------------------------------------
# 3. Structured format
# -----------------------------------------------------------------------------
def test_structured_header_overrides_dimensions(write_file):
    path = write_file("data.grt", structured_text(2, 1, ["1 2 3", "4\t5\t6"]))
    ds = RegressionDataset(5, 5)
    ds.load(path)

    assert (ds.num_input_dimensions, ds.num_target_dimensions) == (2, 1)
    assert ds.name == "demo"
    assert ds.info_text == "generated for tests"
    np.testing.assert_array_equal(ds.inputs, [[1, 2], [4, 5]])
    np.testing.assert_array_equal(ds.targets, [[3], [6]])


def test_structured_foreign_version(write_file):
    path = write_file(
        "data.txt",
        structured_text(1, 1, ["1 2"], magic="LINREG_REGRESSION_DATA_FILE_V9.9"),
    )
    with pytest.raises(FormatError):
        RegressionDataset().load(path)


def test_structured_grt_file_with_external_ranges(write_file):
    content = "\n".join([
        GRT_MAGIC,
        "DatasetName: NOT_SET",
        "InfoText:",
        "NumInputDimensions: 2",
        "NumTargetDimensions: 1",
        "TotalNumTrainingExamples: 2",
        "UseExternalRanges: 1",
        "ExternalInputRanges:",
        "0 10",
        "-1 1",
        "ExternalTargetRanges:",
        "0 100",
        "RegressionData:",
        "1 2 3",
        "4 5 6",
    ]) + "\n"
    ds = RegressionDataset()
    ds.load(write_file("data.grt", content))

    assert (ds.num_input_dimensions, ds.num_target_dimensions) == (2, 1)
    assert ds.info_text == ""
    np.testing.assert_array_equal(ds.inputs, [[1, 2], [4, 5]])
    np.testing.assert_array_equal(ds.targets, [[3], [6]])


def test_structured_grt_foreign_version(write_file):
    path = write_file(
        "data.grt",
        structured_text(1, 1, ["1 2"], magic="GRT_LABELLED_REGRESSION_DATA_FILE_V2.0"),
    )
    with pytest.raises(FormatError):
        RegressionDataset().load(path)


def test_structured_header_row_without_key_is_rejected(write_file):
    content = structured_text(1, 1, ["1 2"]).replace("InfoText:", "0 10\nInfoText:")
    with pytest.raises(FormatError):
        RegressionDataset().load(write_file("bad.txt", content))


@pytest.mark.parametrize(
    "content",
    [
        structured_text(1, 1, ["1 2", "3 4"], total=3),   # count mismatch
        structured_text(1, 1, ["1 2 3"]),                # wrong token count
        structured_text(1, 1, ["1 x"]),                  # non-numeric
        STRUCTURED_MAGIC + "\nNumInputDimensions: 1\nRegressionData:\n1 2\n",  # missing keys
        STRUCTURED_MAGIC + "\nNumInputDimensions: 1\nNumTargetDimensions: 1\n",  # no data section
    ],
)
def test_structured_malformed(write_file, content):
    path = write_file("bad.txt", content)
    with pytest.raises(FormatError):
        RegressionDataset().load(path)


@pytest.mark.parametrize("name", ["roundtrip.csv", "roundtrip.txt"])
def test_save_then_load(tmp_path, name):
    ds = RegressionDataset(2, 1, name="roundtrip")
    rng = np.random.default_rng(3)
    for _ in range(5):
        ds.add_sample(rng.normal(size=2), rng.normal(size=1))

    path = tmp_path / name
    ds.save(path)

    loaded = RegressionDataset(2, 1)
    loaded.load(path)

    np.testing.assert_array_equal(loaded.inputs, ds.inputs)
    np.testing.assert_array_equal(loaded.targets, ds.targets)


# -----------------------------------------------------------------------------
# 4. split
# -----------------------------------------------------------------------------
def test_split_partitions_without_replacement():
    ds = make_dataset(8)
    train, val = ds.split(0.25, randomize=True, rng=11)

    assert train.num_samples == 6
    assert val.num_samples == 2

    seen = sorted(train.inputs[:, 0].tolist() + val.inputs[:, 0].tolist())
    assert seen == [float(i) for i in range(8)]


def test_split_is_reproducible_and_leaves_source_untouched():
    ds = make_dataset(10)
    before = ds.inputs.copy()

    a_train, a_val = ds.split(0.3, randomize=True, rng=5)
    b_train, b_val = ds.split(0.3, randomize=True, rng=np.random.default_rng(5))

    np.testing.assert_array_equal(a_train.inputs, b_train.inputs)
    np.testing.assert_array_equal(a_val.inputs, b_val.inputs)
    np.testing.assert_array_equal(ds.inputs, before)
    assert ds.num_samples == 10


def test_split_without_randomize_keeps_order():
    ds = make_dataset(5)
    train, val = ds.split(0.4, randomize=False)

    assert train.inputs[:, 0].tolist() == [0.0, 1.0, 2.0]
    assert val.inputs[:, 0].tolist() == [3.0, 4.0]


def test_split_zero_fraction():
    ds = make_dataset(3)
    train, val = ds.split(0.0)
    assert train.num_samples == 3
    assert val.num_samples == 0
    assert val.num_input_dimensions == 2


def test_split_keeps_one_training_sample():
    train, val = make_dataset(3).split(0.99, randomize=False)
    assert train.num_samples == 1
    assert val.num_samples == 2


def test_split_single_sample_with_validation():
    with pytest.raises(InsufficientDataError):
        make_dataset(1).split(0.2)


@pytest.mark.parametrize("fraction", [-0.1, 1.0, 1.5])
def test_split_rejects_fraction_out_of_range(fraction):
    with pytest.raises(InvalidConfigError):
        make_dataset(4).split(fraction)


# -----------------------------------------------------------------------------
# 5. Views
# -----------------------------------------------------------------------------
def test_ranges_and_frame():
    ds = make_dataset(4, n=2, t=1)
    lo, hi = ds.input_ranges()
    np.testing.assert_array_equal(lo, [0.0, 0.0])
    np.testing.assert_array_equal(hi, [3.0, 3.0])

    frame = ds.to_frame()
    assert list(frame.columns) == ["x0", "x1", "y0"]
    assert frame["y0"].tolist() == [0.0, 10.0, 20.0, 30.0]


def test_ranges_of_empty_dataset():
    with pytest.raises(InsufficientDataError):
        RegressionDataset(1, 1).target_ranges()
