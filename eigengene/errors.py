# Copyright (C) 2025 Brantleigh Bunting
# SPDX-License-Identifier: BSL-1.1
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file and at <https://mariadb.com/bsl11>

"""
Exceptions raised while summarising a column subset.

Every error derives from `EigengeneError` and from the built-in type a
caller would catch anyway (IndexError, ValueError, MemoryError).
"""

from typing import Sequence, Tuple


class EigengeneError(Exception):
    """Base class for all errors raised by this package."""


class OutOfRangeError(EigengeneError, IndexError):
    """Requested column indices fall outside [1, n_cols]."""

    def __init__(self, bad: Sequence[int], n_cols: int):
        self.bad = tuple(int(i) for i in bad)
        self.n_cols = int(n_cols)
        shown = ", ".join(str(i) for i in self.bad[:10])
        if len(self.bad) > 10:
            shown += ", ..."
        super().__init__(
            "Some of the requested indices for the network subset are outside "
            f"of the given data matrix (valid range 1..{self.n_cols}): {shown}"
        )


class DuplicateIndexError(EigengeneError, ValueError):
    """The subset names the same column more than once."""

    def __init__(self, duplicated: Sequence[int]):
        self.duplicated = tuple(int(i) for i in duplicated)
        super().__init__(
            "Duplicate column indices in subset: "
            + ", ".join(str(i) for i in self.duplicated)
        )


class DegenerateInputError(EigengeneError, ValueError):
    """The selected subset has zero total variance."""

    def __init__(self, shape: Tuple[int, int]):
        self.shape = tuple(shape)
        super().__init__(
            f"Subset of shape {self.shape} has zero total variance; "
            "variance explained is undefined"
        )


class MissingValueError(EigengeneError, ValueError):
    """The working matrix holds NaN or infinite entries."""

    def __init__(self, columns: Sequence[int]):
        self.columns = tuple(int(i) for i in columns)
        super().__init__(
            "Non-finite values in requested columns: "
            + ", ".join(str(i) for i in self.columns)
        )


class AllocationError(EigengeneError, MemoryError):
    """Not enough memory for the working copy of the subset."""

    def __init__(self, shape: Tuple[int, int]):
        self.shape = tuple(shape)
        n_bytes = 8 * self.shape[0] * self.shape[1]
        super().__init__(
            f"Could not allocate working matrix of shape {self.shape} "
            f"({n_bytes / 2**20:.1f} MiB)"
        )


class InputFormatError(EigengeneError, ValueError):
    """A descriptor or CSV input is malformed."""


class StorageTypeError(EigengeneError, TypeError):
    """Element type not supported for a file-backed matrix."""
