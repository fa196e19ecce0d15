# Copyright (C) 2025 Brantleigh Bunting
# SPDX-License-Identifier: BUSL-1.1
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file and at <https://mariadb.com/bsl11>

"""
eigengene
=========

Module eigengenes for column subsets of large, out-of-core matrices.

Given a data matrix too big to copy (samples in rows, nodes such as genes
in columns) and the 1-based indices of one network module, compute the
module's first eigenvector ("eigengene") and the proportion of the
module's variance it explains.

Public API
~~~~~~~~~~
- Summaries
    - `compute_subset_eigen_summary`, `summarize_modules`
    - `node_contribution`, `module_coherence`
- Backing stores
    - `BackingMatrix`, `ArrayMatrix`, `MemmapMatrix`, `save_matrix`
- Configuration
    - `SummaryConfig`
- Errors
    - `EigengeneError`, `OutOfRangeError`, `DuplicateIndexError`,
      `DegenerateInputError`, `MissingValueError`, `AllocationError`,
      `InputFormatError`, `StorageTypeError`

Example
-------
>>> import numpy as np, eigengene as eg
>>> data = np.array([[1, 2, 5], [2, 4, 5], [3, 6, 5], [4, 8, 5]], float)
>>> vec, pve = eg.compute_subset_eigen_summary(data, [1, 2])
>>> round(pve, 12)
1.0
"""

from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as _pkg_version

from .backing import ArrayMatrix, BackingMatrix, MemmapMatrix, save_matrix
from .config import SummaryConfig
from .errors import (
    AllocationError,
    DegenerateInputError,
    DuplicateIndexError,
    EigengeneError,
    InputFormatError,
    MissingValueError,
    OutOfRangeError,
    StorageTypeError,
)
from .summary import (
    EigenResult,
    ModuleSummary,
    compute_subset_eigen_summary,
    module_coherence,
    node_contribution,
    summarize_modules,
)

__all__ = [
    "compute_subset_eigen_summary",
    "summarize_modules",
    "node_contribution",
    "module_coherence",
    "EigenResult",
    "ModuleSummary",
    "BackingMatrix",
    "ArrayMatrix",
    "MemmapMatrix",
    "save_matrix",
    "SummaryConfig",
    "EigengeneError",
    "OutOfRangeError",
    "DuplicateIndexError",
    "DegenerateInputError",
    "MissingValueError",
    "AllocationError",
    "InputFormatError",
    "StorageTypeError",
]

# ---------------------------------------------------------------------
# Version string (helps “pip show eigengene”)
# ---------------------------------------------------------------------
try:  # installed via pip / build backend
    __version__ = _pkg_version(__name__)
except PackageNotFoundError:  # running from a checkout
    __version__ = "0.0.0.dev0"

# ---------------------------------------------------------------------
# Library default: stay silent unless the host configures logging.
# ---------------------------------------------------------------------
import logging as _logging

_logging.getLogger(__name__).addHandler(_logging.NullHandler())
