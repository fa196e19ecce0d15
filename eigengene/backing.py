# Copyright (C) 2025 Brantleigh Bunting
# SPDX-License-Identifier: BSL-1.1
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file and at <https://mariadb.com/bsl11>

"""
Read-only access to the large data matrix subsets are drawn from.

The summary code only ever talks to `BackingMatrix`; the storage behind
it can be an in-process array or a column-major file opened with
numpy.memmap. Columns are addressed 0-based here; the 1-based indices
callers pass in are translated by the validator.
"""

import json
import logging
import os
from abc import ABC, abstractmethod
from typing import Iterable, Iterator, Tuple

import numpy as np

from .errors import InputFormatError, StorageTypeError

logger = logging.getLogger(__name__)

# element types a file-backed matrix may be stored as on disk
STORAGE_DTYPES = ("float64", "float32", "int32", "int16", "int8", "uint8")


def storage_dtype(dtype) -> np.dtype:
    """Resolve `dtype`, rejecting types a file-backed matrix may not use."""
    try:
        dtype = np.dtype(dtype)
    except TypeError as e:
        raise StorageTypeError(f"Unknown storage type {dtype!r}") from e
    if dtype.name not in STORAGE_DTYPES:
        raise StorageTypeError(f"Unsupported storage type {dtype.name!r}")
    return dtype


class BackingMatrix(ABC):
    """Abstract read-only column access to an R-by-C numeric matrix."""

    @property
    @abstractmethod
    def n_rows(self) -> int: ...

    @property
    @abstractmethod
    def n_cols(self) -> int: ...

    @abstractmethod
    def read_column(self, j: int) -> np.ndarray:
        """Return a fresh float64 copy of column j (0-based), length n_rows."""

    @property
    def shape(self) -> Tuple[int, int]:
        return self.n_rows, self.n_cols

    def iter_columns(self, positions: Iterable[int]) -> Iterator[Tuple[int, np.ndarray]]:
        """
        Yield (j, column) for each position, visiting the store in
        ascending column order so reads stay sequential.
        """
        for j in sorted(set(int(p) for p in positions)):
            yield j, self.read_column(j)

    def __repr__(self):
        return f"{type(self).__name__}(n_rows={self.n_rows}, n_cols={self.n_cols})"


class ArrayMatrix(BackingMatrix):
    """
    Adapter over an in-memory 2-D array.

    Holds a non-writeable view, so nothing read through this adapter can
    alias back into the caller's array.
    """

    def __init__(self, data):
        data = np.asarray(data)
        if data.ndim != 2:
            raise ValueError(f"Backing matrix must be 2-D, got shape {data.shape}")
        if data.shape[0] < 1 or data.shape[1] < 1:
            raise ValueError(f"Backing matrix must be non-empty, got shape {data.shape}")
        if not np.issubdtype(data.dtype, np.number) or np.iscomplexobj(data):
            raise TypeError(f"Backing matrix must be real numeric, got {data.dtype}")
        view = data.view()
        view.flags.writeable = False
        self._data = view

    @property
    def n_rows(self) -> int:
        return self._data.shape[0]

    @property
    def n_cols(self) -> int:
        return self._data.shape[1]

    def read_column(self, j: int) -> np.ndarray:
        return np.array(self._data[:, j], dtype=np.float64)


class MemmapMatrix(BackingMatrix):
    """
    Column-major matrix stored as a raw binary file, mapped read-only.

    Parameters
    ----------
    path : str or PathLike
        Raw file holding n_rows * n_cols elements in column-major order.
    n_rows, n_cols : int
    dtype : str
        On-disk element type; values are widened to float64 on read.
    offset : int
        Byte offset of the first element in the file.
    """

    def __init__(self, path, n_rows: int, n_cols: int, dtype="float64", offset: int = 0):
        dtype = storage_dtype(dtype)
        if n_rows < 1 or n_cols < 1:
            raise InputFormatError(f"Backing matrix must be non-empty, got {n_rows}x{n_cols}")
        self.path = os.fspath(path)
        self.dtype = dtype
        try:
            self._map = np.memmap(
                self.path,
                dtype=dtype,
                mode="r",
                offset=offset,
                shape=(int(n_rows), int(n_cols)),
                order="F",
            )
        except ValueError as e:
            # file shorter than the declared shape
            raise InputFormatError(f"Cannot map {self.path}: {e}") from e
        logger.debug(
            "Mapped %s as %dx%d %s", self.path, n_rows, n_cols, dtype.name
        )

    @classmethod
    def from_descriptor(cls, descriptor_path) -> "MemmapMatrix":
        """
        Attach to a file-backed matrix described by a JSON descriptor:

            {"filename": "data.bin", "n_rows": 100, "n_cols": 20000,
             "dtype": "float32", "offset": 0}

        A relative filename is resolved against the descriptor's directory.
        """
        descriptor_path = os.fspath(descriptor_path)
        with open(descriptor_path, "r") as f:
            try:
                desc = json.load(f)
            except json.JSONDecodeError as e:
                raise InputFormatError(f"Descriptor {descriptor_path} is not JSON: {e}") from e
        if not isinstance(desc, dict):
            raise InputFormatError(f"Descriptor {descriptor_path} must be a JSON object")
        missing = {"filename", "n_rows", "n_cols"} - desc.keys()
        if missing:
            raise InputFormatError(
                f"Descriptor {descriptor_path} is missing: {', '.join(sorted(missing))}"
            )
        path = desc["filename"]
        if not os.path.isabs(path):
            path = os.path.join(os.path.dirname(os.path.abspath(descriptor_path)), path)
        return cls(
            path,
            desc["n_rows"],
            desc["n_cols"],
            dtype=desc.get("dtype", "float64"),
            offset=desc.get("offset", 0),
        )

    @property
    def n_rows(self) -> int:
        return self._map.shape[0]

    @property
    def n_cols(self) -> int:
        return self._map.shape[1]

    def read_column(self, j: int) -> np.ndarray:
        # one contiguous slice of the file per column
        return np.array(self._map[:, j], dtype=np.float64)


def save_matrix(data, path, dtype="float64") -> str:
    """
    Write `data` as a column-major raw file at `path` and a JSON
    descriptor at `path + ".json"`. Returns the descriptor path.
    """
    data = np.asarray(data)
    if data.ndim != 2:
        raise ValueError(f"Expected a 2-D matrix, got shape {data.shape}")
    dtype = storage_dtype(dtype)
    path = os.fspath(path)
    np.asfortranarray(data, dtype=dtype).T.tofile(path)
    descriptor = path + ".json"
    with open(descriptor, "w") as f:
        json.dump(
            {
                "filename": os.path.basename(path),
                "n_rows": int(data.shape[0]),
                "n_cols": int(data.shape[1]),
                "dtype": dtype.name,
                "offset": 0,
            },
            f,
            indent=2,
        )
    logger.debug("Wrote %s (%dx%d %s)", path, data.shape[0], data.shape[1], dtype.name)
    return descriptor
