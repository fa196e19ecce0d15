# Copyright (C) 2025 Brantleigh Bunting
# SPDX-License-Identifier: BSL-1.1
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file and at <https://mariadb.com/bsl11>

import logging

import numpy as np

from .backing import BackingMatrix
from .errors import AllocationError, MissingValueError

logger = logging.getLogger(__name__)


def materialize_subset(matrix: BackingMatrix, positions: np.ndarray) -> np.ndarray:
    """
    Copy the requested columns of `matrix` into a dense in-memory array.

    Parameters
    ----------
    matrix : BackingMatrix
        Read-only source; never written to.
    positions : (K,) ndarray of int
        Validated 0-based column positions, in the order the output
        columns should appear. Repeats are allowed.

    Returns
    -------
    W : (R, K) float64 ndarray, Fortran order
        W[:, k] == column positions[k] of the backing matrix.

    The store is visited in ascending column order, each distinct column
    once, however the positions are ordered.
    """
    positions = np.asarray(positions, dtype=np.int64)
    shape = (matrix.n_rows, positions.size)
    try:
        W = np.empty(shape, dtype=np.float64, order="F")
    except MemoryError as e:
        raise AllocationError(shape) from e

    # output slots of each distinct column, found with one sort
    distinct, inverse, counts = np.unique(
        positions, return_inverse=True, return_counts=True
    )
    slots = np.split(np.argsort(inverse.ravel(), kind="stable"), np.cumsum(counts)[:-1])
    targets = dict(zip(distinct.tolist(), slots))

    for j, column in matrix.iter_columns(distinct):
        if column.shape != (shape[0],):
            raise ValueError(
                f"Column {j} has shape {column.shape}, expected ({shape[0]},)"
            )
        W[:, targets[j]] = column[:, None]

    finite = np.isfinite(W).all(axis=0)
    if not finite.all():
        raise MissingValueError(np.unique(positions[~finite]) + 1)

    logger.debug("Materialized working matrix of shape %s", shape)
    return W
