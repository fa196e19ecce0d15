# Copyright (C) 2025 Brantleigh Bunting
# SPDX-License-Identifier: BSL-1.1
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file and at <https://mariadb.com/bsl11>

"""
Eigengene summaries of column subsets of a large backing matrix.

One call runs validate → materialize → decompose → finalize and either
returns a complete result or raises; nothing is cached between calls and
each call works on its own copy of the subset.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Hashable, List, Mapping, Optional, Sequence

import numpy as np

from .backing import ArrayMatrix, BackingMatrix
from .config import DEFAULT_CONFIG, SummaryConfig
from .eigen import dominant_singular_triplet, prepare_columns
from .errors import DegenerateInputError
from .finalize import finalize, total_variance
from .materialize import materialize_subset
from .validate import check_subset_indices

logger = logging.getLogger(__name__)


@dataclass
class EigenResult:
    """
    eigenvector : (R,) unit vector, sign aligned with the subset average
    variance_explained : proportion of the subset's variance captured
    singular_value : σ₁ of the decomposed matrix
    n_iter : power iterations used (0 for the direct methods)
    method : "power", "svd", "column", or "degenerate"

    Unpacks as ``eigenvector, variance_explained = result``.
    """

    eigenvector: np.ndarray
    variance_explained: float
    singular_value: float = 0.0
    n_iter: int = 0
    method: str = "power"

    def __iter__(self):
        yield self.eigenvector
        yield self.variance_explained


@dataclass
class ModuleSummary:
    """Eigengene of one module plus how strongly each node follows it."""

    module: Hashable
    indices: np.ndarray
    result: EigenResult
    contribution: np.ndarray = field(repr=False)
    coherence: float

    @property
    def eigenvector(self) -> np.ndarray:
        return self.result.eigenvector

    @property
    def variance_explained(self) -> float:
        return self.result.variance_explained


def _as_backing(matrix) -> BackingMatrix:
    if isinstance(matrix, BackingMatrix):
        return matrix
    return ArrayMatrix(matrix)


def _summarize_working(W: np.ndarray, config: SummaryConfig) -> EigenResult:
    R, K = W.shape
    X = prepare_columns(
        W, center=config.center, scale=config.scale, tol=config.degenerate_tol
    )

    # constant columns are exactly zero after centering
    total = total_variance(X)
    if total == 0.0:
        if config.on_degenerate == "zero":
            logger.debug("Degenerate %dx%d subset, returning zero eigenvector", R, K)
            return EigenResult(np.zeros(R), 0.0, 0.0, 0, "degenerate")
        raise DegenerateInputError((R, K))

    sigma, u, n_iter, method = dominant_singular_triplet(
        X,
        method=config.method,
        max_iter=config.max_iter,
        tol=config.tol,
        seed=config.seed,
    )
    u = u / np.linalg.norm(u)

    # scaled data is averaged after scaling; otherwise the raw subset
    eigenvector, ve = finalize(u, sigma, X if config.scale else W, total, K)
    return EigenResult(eigenvector, ve, sigma, n_iter, method)


def compute_subset_eigen_summary(
    matrix,
    subset_indices: Sequence[int],
    config: Optional[SummaryConfig] = None,
) -> EigenResult:
    """
    First eigenvector and proportion of variance explained for a column
    subset of a backing matrix.

    Parameters
    ----------
    matrix : BackingMatrix or 2-D array-like
        Source data, R rows by C columns. Only read, never written.
        Plain arrays are wrapped in ArrayMatrix.
    subset_indices : sequence of int
        1-based column indices, in the order the subset is assembled.
    config : SummaryConfig, optional
        Centering, solver and degeneracy options. Columns are centered
        by default.

    Returns
    -------
    EigenResult
        Unit eigenvector of length R whose dot product with the row-wise
        average of the selected columns is non-negative, and variance
        explained σ₁² / Σσᵢ² in [0, 1].

    Raises
    ------
    OutOfRangeError       an index is < 1 or > C (raised before any read)
    DuplicateIndexError   repeated index with allow_duplicates=False
    MissingValueError     the subset holds NaN or inf
    DegenerateInputError  zero total variance with on_degenerate="raise"
    AllocationError       the R × K working copy does not fit in memory

    Example
    -------
    >>> import numpy as np
    >>> data = np.array([[1, 2, 5], [2, 4, 5], [3, 6, 5], [4, 8, 5]], float)
    >>> res = compute_subset_eigen_summary(data, [1, 2])
    >>> round(res.variance_explained, 12)
    1.0

    Columns are centered, so the eigenvector above is proportional to
    [-3, -1, 1, 3]. With SummaryConfig(center=False) the raw subset is
    decomposed and it is proportional to [1, 2, 3, 4] instead.
    """
    config = config or DEFAULT_CONFIG
    matrix = _as_backing(matrix)
    positions = check_subset_indices(
        subset_indices, matrix.n_cols, allow_duplicates=config.allow_duplicates
    )
    W = materialize_subset(matrix, positions)
    result = _summarize_working(W, config)
    logger.debug(
        "Summarised %d columns: variance explained %.4f (%s)",
        W.shape[1],
        result.variance_explained,
        result.method,
    )
    return result


def node_contribution(W: np.ndarray, eigenvector: np.ndarray) -> np.ndarray:
    """
    Pearson correlation of each column of W with the eigenvector.
    Constant columns (or a constant eigenvector) contribute 0.
    """
    W = np.asarray(W, float)
    e = np.asarray(eigenvector, float)
    Wc = W - W.mean(axis=0, keepdims=True)
    ec = e - e.mean()
    denom = np.linalg.norm(Wc, axis=0) * np.linalg.norm(ec)
    num = ec @ Wc
    out = np.zeros(W.shape[1])
    ok = denom > 1e-15
    out[ok] = num[ok] / denom[ok]
    return np.clip(out, -1.0, 1.0)


def module_coherence(contribution: np.ndarray) -> float:
    """Mean squared node contribution; NaN for an empty module."""
    contribution = np.asarray(contribution, float)
    if contribution.size == 0:
        return float("nan")
    return float(np.mean(np.square(contribution)))


def summarize_modules(
    matrix,
    assignments: Mapping[Hashable, Sequence[int]],
    config: Optional[SummaryConfig] = None,
) -> List[ModuleSummary]:
    """
    Eigengene, node contribution and coherence for every module.

    Parameters
    ----------
    matrix : BackingMatrix or 2-D array-like
    assignments : mapping of module label -> 1-based column indices
    config : SummaryConfig, optional

    Returns
    -------
    list of ModuleSummary, in the mapping's iteration order.

    Every module is validated before any column is read, so a bad index
    in one module fails the whole call without partial results.
    """
    config = config or DEFAULT_CONFIG
    matrix = _as_backing(matrix)

    validated: Dict[Hashable, np.ndarray] = {}
    for label, indices in assignments.items():
        validated[label] = check_subset_indices(
            indices, matrix.n_cols, allow_duplicates=config.allow_duplicates
        )

    summaries = []
    for label, positions in validated.items():
        W = materialize_subset(matrix, positions)
        result = _summarize_working(W, config)
        contribution = node_contribution(W, result.eigenvector)
        summaries.append(
            ModuleSummary(
                module=label,
                indices=positions + 1,
                result=result,
                contribution=contribution,
                coherence=module_coherence(contribution),
            )
        )
        logger.debug(
            "Module %r: %d nodes, variance explained %.4f",
            label,
            positions.size,
            result.variance_explained,
        )
    return summaries
