# Copyright (C) 2025 Brantleigh Bunting
# SPDX-License-Identifier: BSL-1.1
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file and at <https://mariadb.com/bsl11>

"""
Options controlling how a column subset is summarised.

Usage:
    from eigengene.config import SummaryConfig

    cfg = SummaryConfig(center=False, method="svd")
    result = compute_subset_eigen_summary(matrix, [1, 2, 3], cfg)
"""

from dataclasses import dataclass, replace

METHODS = ("power", "svd")
DEGENERATE_POLICIES = ("raise", "zero")


@dataclass(frozen=True)
class SummaryConfig:
    """
    Parameters
    ----------
    center : bool
        Subtract each column's mean before the SVD. When False the raw
        (uncentered) matrix is decomposed and "total variance" is the sum
        of squares of the raw entries.
    scale : bool
        Also divide each centered column by its standard deviation.
        Constant columns become all-zero rather than NaN.
    method : {"power", "svd"}
        "power" runs power iteration on the Gram operator; "svd" calls
        LAPACK's thin SVD and keeps the leading triplet.
    max_iter, tol : int, float
        Power iteration stopping rule.
    seed : int
        Seed for the power iteration start vector.
    allow_duplicates : bool
        Accept a subset that names the same column twice.
    on_degenerate : {"raise", "zero"}
        "raise" fails with DegenerateInputError on zero total variance;
        "zero" returns a zero eigenvector and 0.0 variance explained.
    degenerate_tol : float
        When centering, a column whose range is at most degenerate_tol
        times its largest magnitude is treated as constant and zeroed.
        A subset whose decomposed matrix is then all zero is degenerate.
    """

    center: bool = True
    scale: bool = False
    method: str = "power"
    max_iter: int = 1000
    tol: float = 1e-10
    seed: int = 0
    allow_duplicates: bool = False
    on_degenerate: str = "raise"
    degenerate_tol: float = 1e-12

    def __post_init__(self):
        if self.method not in METHODS:
            raise ValueError(f"method must be one of {METHODS}, got {self.method!r}")
        if self.on_degenerate not in DEGENERATE_POLICIES:
            raise ValueError(
                f"on_degenerate must be one of {DEGENERATE_POLICIES}, "
                f"got {self.on_degenerate!r}"
            )
        if self.scale and not self.center:
            raise ValueError("scale=True requires center=True")
        if self.max_iter < 1:
            raise ValueError("max_iter must be at least 1")
        if self.tol <= 0 or self.degenerate_tol < 0:
            raise ValueError("tolerances must be positive")

    def with_options(self, **changes) -> "SummaryConfig":
        """Return a copy with some fields replaced."""
        return replace(self, **changes)


DEFAULT_CONFIG = SummaryConfig()
