# Copyright (C) 2025 Brantleigh Bunting
# SPDX-License-Identifier: BSL-1.1
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file and at <https://mariadb.com/bsl11>

import logging

import numpy as np

from .errors import DuplicateIndexError, OutOfRangeError

logger = logging.getLogger(__name__)


def check_subset_indices(
    subset_indices, n_cols: int, allow_duplicates: bool = False
) -> np.ndarray:
    """
    Check 1-based column indices against a matrix with `n_cols` columns.

    Parameters
    ----------
    subset_indices : sequence of int
        Ordered 1-based column indices.
    n_cols : int
        Column count of the backing matrix.
    allow_duplicates : bool
        If False, a repeated index raises DuplicateIndexError.

    Returns
    -------
    positions : (K,) ndarray of int64
        The same indices converted to 0-based positions, in input order.

    Raises
    ------
    TypeError   if the indices are not integers
    ValueError  if the subset is empty or not one-dimensional
    OutOfRangeError, DuplicateIndexError
    """
    idx = np.asarray(subset_indices)
    if idx.ndim != 1:
        raise ValueError(f"subset_indices must be one-dimensional, got shape {idx.shape}")
    if idx.size == 0:
        raise ValueError("subset_indices must name at least one column")
    if idx.dtype == bool or not np.issubdtype(idx.dtype, np.integer):
        # whole-valued floats (e.g. from R or pandas) are accepted
        if (
            np.issubdtype(idx.dtype, np.floating)
            and np.all(np.isfinite(idx))
            and np.all(idx == np.round(idx))
        ):
            idx = idx.astype(np.int64)
        else:
            raise TypeError(f"subset_indices must be integers, got {idx.dtype}")
    if n_cols < 1:
        raise ValueError("Backing matrix has no columns")

    # whole-array bounds check before anything is read
    bad = (idx <= 0) | (idx > n_cols)
    if bad.any():
        raise OutOfRangeError(idx[bad], n_cols)

    if not allow_duplicates:
        values, counts = np.unique(idx, return_counts=True)
        if (counts > 1).any():
            raise DuplicateIndexError(values[counts > 1])

    logger.debug("Validated %d subset indices against %d columns", idx.size, n_cols)
    return idx.astype(np.int64) - 1
