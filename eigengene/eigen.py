# Copyright (C) 2025 Brantleigh Bunting
# SPDX-License-Identifier: BSL-1.1
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file and at <https://mariadb.com/bsl11>

import logging
from typing import Optional, Tuple

import numpy as np

logger = logging.getLogger(__name__)


def constant_columns(W: np.ndarray, tol: float = 1e-12) -> np.ndarray:
    """
    Mask of columns whose range is at most `tol` times their largest
    magnitude, i.e. constant up to rounding. All-zero columns count.
    """
    W = np.asarray(W, float)
    return np.ptp(W, axis=0) <= tol * np.abs(W).max(axis=0)


def prepare_columns(
    W: np.ndarray, center: bool = True, scale: bool = False, tol: float = 1e-12
) -> np.ndarray:
    """
    Return a centered (and optionally unit-variance) copy of W.

    W itself is left untouched. When centering, columns that are constant
    by `constant_columns(W, tol)` become exactly zero, before any scaling,
    so mean-subtraction residue is never blown up to unit variance.
    """
    X = np.array(W, dtype=float, order="F")
    if not center:
        return X
    flat = constant_columns(W, tol)
    X -= X.mean(axis=0, keepdims=True)
    X[:, flat] = 0.0
    if scale:
        std = X.std(axis=0, keepdims=True)
        std[:, flat] = 1.0
        X /= std
    return X


def power_iteration(
    X: np.ndarray,
    max_iter: int = 1000,
    tol: float = 1e-10,
    v0: Optional[np.ndarray] = None,
    seed: int = 0,
    return_history: bool = False,
):
    """
    Estimate the largest singular value of X and its singular vectors by
    power iteration on XᵀX, applied implicitly as v -> Xᵀ(X v).

    Each step costs two matrix-vector products, O(R·K); XᵀX and XXᵀ are
    never formed.

    Stops when the relative residual ‖XᵀX v - σ² v‖ / σ² falls below
    `tol` or when `max_iter` is reached.

    Parameters
    ----------
    X : (R, K) ndarray
    max_iter : int
        Maximum number of iterations.
    tol : float
        Convergence tolerance on the relative residual.
    v0 : (K,) ndarray or None
        Optional start vector. If None, drawn from default_rng(seed).
    seed : int
        Seed used when v0 is None, so repeated calls agree.
    return_history : bool
        If True, also return the residual history.

    Returns
    -------
    sigma : float
        Largest singular value (≥ 0).
    u : (R,) ndarray
        Left singular vector, unit norm (zeros if sigma == 0).
    v : (K,) ndarray
        Right singular vector, unit norm.
    iters : int
        Iterations performed.
    converged : bool
    hist : ndarray, optional
        Residual history if return_history=True.
    """
    X = np.asarray(X, float)
    if X.ndim != 2:
        raise ValueError("Power iteration requires a 2-D matrix.")
    m, n = X.shape

    if v0 is None:
        v = np.random.default_rng(seed).standard_normal(n)
    else:
        v = np.asarray(v0, float).copy()
        if v.shape != (n,):
            raise ValueError("v0 must be shape (K,).")
    v /= np.linalg.norm(v)

    lam = 0.0
    iters = 0
    converged = False
    hist = []
    Xv = X @ v
    for iters in range(1, max_iter + 1):
        w = X.T @ Xv
        norm_w = np.linalg.norm(w)
        if norm_w == 0.0:
            # X v == 0 for the current v; X may be the zero matrix.
            lam = 0.0
            converged = True
            break
        v = w / norm_w
        Xv = X @ v
        lam = Xv @ Xv  # Rayleigh quotient vᵀXᵀXv
        if lam == 0.0:
            converged = True
            break
        resid = np.linalg.norm(X.T @ Xv - lam * v) / lam
        hist.append(resid)
        if resid < tol:
            converged = True
            break

    sigma = float(np.sqrt(max(lam, 0.0)))
    u = Xv / sigma if sigma > 0 else np.zeros(m)
    out = (sigma, u, v, iters, converged)
    return out + (np.array(hist),) if return_history else out


def thin_svd_leading(X: np.ndarray) -> Tuple[float, np.ndarray]:
    """Leading singular value and left vector from LAPACK's thin SVD."""
    U, s, _ = np.linalg.svd(np.asarray(X, float), full_matrices=False)
    return float(s[0]), U[:, 0].copy()


def dominant_singular_triplet(
    X: np.ndarray,
    method: str = "power",
    max_iter: int = 1000,
    tol: float = 1e-10,
    seed: int = 0,
) -> Tuple[float, np.ndarray, int, str]:
    """
    Largest singular value σ₁ of X and its unit left singular vector u₁.

    Returns
    -------
    sigma, u, n_iter, method_used
        `method_used` is "power", "svd", or "column" (K == 1, where u₁ is
        the normalised column itself). Power iteration that fails to
        converge within max_iter falls back to the thin SVD.
    """
    X = np.asarray(X, float)
    if X.ndim != 2:
        raise ValueError(f"Expected a 2-D matrix, got shape {X.shape}")

    if X.shape[1] == 1:
        col = X[:, 0]
        sigma = float(np.linalg.norm(col))
        u = col / sigma if sigma > 0 else np.zeros_like(col)
        return sigma, u, 0, "column"

    if method == "svd":
        sigma, u = thin_svd_leading(X)
        return sigma, u, 0, "svd"
    if method != "power":
        raise ValueError(f"Unknown method {method!r}")

    sigma, u, _v, iters, converged = power_iteration(
        X, max_iter=max_iter, tol=tol, seed=seed
    )
    if not converged:
        logger.warning(
            "Power iteration did not converge in %d iterations on a %dx%d "
            "matrix; falling back to thin SVD",
            max_iter,
            *X.shape,
        )
        sigma, u = thin_svd_leading(X)
        return sigma, u, iters, "svd"

    logger.debug("Power iteration converged in %d iterations (sigma=%.6g)", iters, sigma)
    return sigma, u, iters, "power"
