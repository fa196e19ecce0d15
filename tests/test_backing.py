# Copyright (C) 2025 Brantleigh Bunting
# SPDX-License-Identifier: BUSL-1.1
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file and at <https://mariadb.com/bsl11>

import json

import numpy as np
import pytest

from eigengene import SummaryConfig, compute_subset_eigen_summary
from eigengene import InputFormatError, StorageTypeError
from eigengene.backing import ArrayMatrix, MemmapMatrix, save_matrix
from eigengene.materialize import materialize_subset


def test_array_matrix_reads_are_copies():
    data = np.arange(12, dtype=np.int32).reshape(4, 3)
    m = ArrayMatrix(data)
    assert m.shape == (4, 3)

    col = m.read_column(1)
    assert col.dtype == np.float64
    np.testing.assert_array_equal(col, [1, 4, 7, 10])

    col[:] = -1
    np.testing.assert_array_equal(data[:, 1], [1, 4, 7, 10])


@pytest.mark.parametrize(
    "bad, exc",
    [
        (np.ones(5), ValueError),
        (np.ones((0, 3)), ValueError),
        (np.array([["a", "b"]]), TypeError),
        (np.ones((2, 2), dtype=complex), TypeError),
    ],
)
def test_array_matrix_rejects(bad, exc):
    with pytest.raises(exc):
        ArrayMatrix(bad)


def test_iter_columns_visits_each_column_once_in_order():
    m = ArrayMatrix(np.eye(5))
    seen = [j for j, _ in m.iter_columns([4, 0, 4, 2])]
    assert seen == [0, 2, 4]


@pytest.mark.parametrize("dtype", ["float32", "int16"])
def test_memmap_round_trip_widens_to_float64(tmp_path, dtype):
    rng = np.random.default_rng(0)
    data = rng.integers(-50, 50, size=(7, 5)).astype(dtype)
    desc = save_matrix(data, tmp_path / "data.bin", dtype=dtype)

    m = MemmapMatrix.from_descriptor(desc)
    assert m.shape == (7, 5)
    assert m.dtype == np.dtype(dtype)
    for j in range(5):
        col = m.read_column(j)
        assert col.dtype == np.float64
        np.testing.assert_array_equal(col, data[:, j].astype(np.float64))


def test_memmap_file_is_column_major(tmp_path):
    data = np.array([[1.0, 2.0], [3.0, 4.0], [5.0, 6.0]])
    save_matrix(data, tmp_path / "cm.bin")
    raw = np.fromfile(tmp_path / "cm.bin", dtype=np.float64)
    np.testing.assert_array_equal(raw, [1, 3, 5, 2, 4, 6])


def test_memmap_is_read_only(tmp_path):
    desc = save_matrix(np.ones((3, 2)), tmp_path / "ro.bin")
    m = MemmapMatrix.from_descriptor(desc)
    assert not m._map.flags.writeable
    with pytest.raises(ValueError):
        m._map[0, 0] = 2.0


def test_descriptor_filename_resolved_relative_to_descriptor(tmp_path, monkeypatch):
    desc = save_matrix(np.arange(6.0).reshape(3, 2), tmp_path / "rel.bin")
    with open(desc) as f:
        assert json.load(f)["filename"] == "rel.bin"
    elsewhere = tmp_path / "other"
    elsewhere.mkdir()
    monkeypatch.chdir(elsewhere)
    m = MemmapMatrix.from_descriptor(desc)
    np.testing.assert_array_equal(m.read_column(1), [1.0, 3.0, 5.0])


def test_descriptor_missing_keys(tmp_path):
    path = tmp_path / "bad.json"
    path.write_text(json.dumps({"filename": "x.bin", "n_rows": 3}))
    with pytest.raises(InputFormatError, match="n_cols"):
        MemmapMatrix.from_descriptor(path)


@pytest.mark.parametrize("text", ["{not json", "[1, 2, 3]"])
def test_descriptor_not_a_json_object(tmp_path, text):
    path = tmp_path / "bad.json"
    path.write_text(text)
    with pytest.raises(InputFormatError):
        MemmapMatrix.from_descriptor(path)


def test_descriptor_shape_larger_than_file(tmp_path):
    desc = save_matrix(np.ones((3, 2)), tmp_path / "short.bin")
    with open(desc) as f:
        meta = json.load(f)
    meta["n_rows"] = 300
    with open(desc, "w") as f:
        json.dump(meta, f)
    with pytest.raises(InputFormatError, match="Cannot map"):
        MemmapMatrix.from_descriptor(desc)


def test_unsupported_storage_dtype(tmp_path):
    with pytest.raises(StorageTypeError, match="complex128"):
        save_matrix(np.ones((2, 2)), tmp_path / "x.bin", dtype="complex128")
    with pytest.raises(TypeError):
        save_matrix(np.ones((2, 2)), tmp_path / "x.bin", dtype="no-such-type")


def test_materialize_preserves_requested_order():
    data = np.arange(20.0).reshape(4, 5)
    W = materialize_subset(ArrayMatrix(data), np.array([3, 0, 3, 1]))
    np.testing.assert_array_equal(W, data[:, [3, 0, 3, 1]])
    assert W.flags.f_contiguous


def test_materialize_many_repeats_reads_each_column_once(counting_matrix):
    rng = np.random.default_rng(6)
    data = rng.normal(size=(9, 40))
    positions = rng.integers(0, 40, size=2000)
    matrix = counting_matrix(data)

    W = materialize_subset(matrix, positions)

    np.testing.assert_array_equal(W, data[:, positions])
    assert matrix.reads == sorted(set(positions.tolist()))


def test_memmap_and_array_give_same_summary(tmp_path, module_data):
    data, modules = module_data(seed=4)
    m = MemmapMatrix.from_descriptor(save_matrix(data, tmp_path / "mod.bin"))
    cfg = SummaryConfig(method="svd")
    a = compute_subset_eigen_summary(m, modules["m0"], cfg)
    b = compute_subset_eigen_summary(data, modules["m0"], cfg)
    np.testing.assert_allclose(a.eigenvector, b.eigenvector)
    assert a.variance_explained == pytest.approx(b.variance_explained)
