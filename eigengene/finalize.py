# Copyright (C) 2025 Brantleigh Bunting
# SPDX-License-Identifier: BSL-1.1
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file and at <https://mariadb.com/bsl11>

"""
Sign convention and proportion of variance explained.

The sign of a singular vector is arbitrary. It is fixed here by pointing
the eigenvector the same way as the average of the subset's columns, the
convention module-eigengene tools use, so results agree across runs and
across LAPACK builds.
"""

import logging
from typing import Tuple

import numpy as np

logger = logging.getLogger(__name__)


def align_with_average(u: np.ndarray, W: np.ndarray) -> Tuple[np.ndarray, bool]:
    """
    Negate `u` if it points away from the row-wise average of W.

    Returns the (possibly negated) vector and whether it was flipped.
    A zero dot product leaves the sign unchanged.
    """
    avg = np.asarray(W, float).mean(axis=1)
    if float(u @ avg) < 0.0:
        return -u, True
    return u, False


def total_variance(X: np.ndarray) -> float:
    """Sum of squared singular values of X, i.e. ‖X‖_F²."""
    return float(np.sum(np.square(X)))


def variance_explained(sigma: float, total: float, n_columns: int) -> float:
    """
    σ₁² / Σσᵢ², clipped into [0, 1]. Exactly 1.0 for a single column.
    `total` must be non-zero; degeneracy is checked by the caller.
    """
    if n_columns == 1:
        return 1.0
    return float(min(1.0, max(0.0, sigma * sigma / total)))


def finalize(u, sigma: float, W: np.ndarray, total: float, n_columns: int):
    """
    Apply the sign convention to `u` and compute variance explained.

    Parameters
    ----------
    u : (R,) ndarray      leading left singular vector
    sigma : float         leading singular value
    W : (R, K) ndarray    matrix whose row-wise average fixes the sign
    total : float         total variance of the decomposed matrix
    n_columns : int       K

    Returns
    -------
    eigenvector : (R,) ndarray
    variance_explained : float
    """
    u, flipped = align_with_average(np.asarray(u, float), W)
    if flipped:
        logger.debug("Flipped eigenvector sign to match subset average")
    return u, variance_explained(sigma, total, n_columns)
