"""
estimators/demean.py — Fixed-effect absorption and OLS with clustered errors.

Two-way fixed effects are swept out by alternating one-way demeaning
(method of alternating projections). On a balanced panel one sweep is exact;
unbalanced panels iterate until the largest change falls below ``tol``.
"""

from typing import Tuple

import numpy as np
from scipy import stats


def group_codes(values) -> Tuple[np.ndarray, int]:
    """Map arbitrary labels to 0..G-1 codes."""
    uniq, codes = np.unique(np.asarray(values), return_inverse=True)
    return codes.astype(np.int64), len(uniq)


def oneway_demean(v: np.ndarray, code: np.ndarray, n_groups: int) -> np.ndarray:
    cnt = np.bincount(code, minlength=n_groups).astype(float)
    s = np.bincount(code, weights=v, minlength=n_groups)
    m = np.zeros(n_groups)
    mask = cnt > 0
    m[mask] = s[mask] / cnt[mask]
    return v - m[code]


def absorb_twoway(M: np.ndarray, unit_code: np.ndarray, time_code: np.ndarray,
                  tol: float = 1e-10, max_iter: int = 1000) -> np.ndarray:
    """
    Sweep unit and time means out of every column of ``M``.

    Parameters
    ----------
    M : np.ndarray
        (n,) or (n, k) array.
    unit_code, time_code : np.ndarray
        Integer codes 0..G-1 for the two fixed effects.

    Returns
    -------
    np.ndarray
        Residuals with the same shape as ``M``.
    """
    M = np.asarray(M, dtype=np.float64)
    squeeze = M.ndim == 1
    if squeeze:
        M = M[:, None]

    n_u = int(unit_code.max()) + 1
    n_t = int(time_code.max()) + 1

    out = np.empty_like(M)
    for j in range(M.shape[1]):
        v = M[:, j]
        for _ in range(max_iter):
            v_new = oneway_demean(oneway_demean(v, unit_code, n_u), time_code, n_t)
            delta = np.max(np.abs(v_new - v)) if len(v) else 0.0
            v = v_new
            if delta < tol:
                break
        out[:, j] = v

    return out[:, 0] if squeeze else out


def independent_columns(X: np.ndarray, tol: float = 1e-9) -> np.ndarray:
    """
    Indices of a maximal set of linearly independent columns, kept in order.

    A column is dropped when it adds nothing to the rank of the columns kept
    before it; columns that are identically zero are always dropped.
    """
    keep = []
    scale = max(float(np.abs(X).max()) if X.size else 0.0, 1.0)
    for j in range(X.shape[1]):
        col = X[:, j]
        if np.max(np.abs(col), initial=0.0) <= tol * scale:
            continue
        if np.linalg.matrix_rank(X[:, keep + [j]]) == len(keep) + 1:
            keep.append(j)
    return np.array(keep, dtype=np.int64)


def fit_ols(y: np.ndarray, X: np.ndarray, cluster_ids: np.ndarray = None,
            n_absorbed: int = 0, nested_absorbed: int = 0):
    """
    OLS on already-demeaned data.

    Parameters
    ----------
    y, X : np.ndarray
        Demeaned outcome (n,) and regressors (n, k).
    cluster_ids : np.ndarray, optional
        Cluster labels. If None, homoskedastic (iid) errors are used.
    n_absorbed : int
        Number of fixed-effect parameters swept out of the data.
    nested_absorbed : int
        How many of those are nested in the clusters (they do not count
        against the small-sample correction of the clustered variance).

    Returns
    -------
    beta, se, tstat, pval, V
    """
    n, k = X.shape
    XtX = X.T @ X
    # singular normal equations raise LinAlgError
    XtX_inv = np.linalg.inv(XtX)
    beta = XtX_inv @ (X.T @ y)
    u = y - X @ beta

    if cluster_ids is None:
        dof = max(n - k - n_absorbed, 1)
        sigma2 = float(u @ u) / dof
        V = sigma2 * XtX_inv
    else:
        clusters, codes = np.unique(cluster_ids, return_inverse=True)
        G = len(clusters)
        scores = np.zeros((G, k))
        np.add.at(scores, codes, X * u[:, None])
        meat = scores.T @ scores

        K = k + n_absorbed - nested_absorbed
        df_c = (G / (G - 1)) * ((n - 1) / (n - K)) if (G > 1 and n > K) else 1.0
        V = df_c * (XtX_inv @ meat @ XtX_inv)
        dof = max(G - 1, 1)

    se = np.sqrt(np.maximum(np.diag(V), 0.0))
    with np.errstate(divide="ignore", invalid="ignore"):
        tstat = beta / se
    pval = 2.0 * stats.t.sf(np.abs(tstat), df=dof)
    return beta, se, tstat, pval, V
