"""Linear models translating mask/response pairs into aspect importance."""

import logging
import warnings

import numpy as np
from sklearn.linear_model import LinearRegression, lasso_path

from .exceptions import DegenerateFit, InvalidParameter

log = logging.getLogger(__name__)


class LinearAttributionFitter:
    """Fit the response delta on the mask and return one slope per aspect.

    The intercept of the fitted model is never part of the result.
    """

    def fit(self, mask, delta, names=None):
        """Fit the model.

        :param mask: binary matrix of shape (N, K)
        :param delta: response deltas of length N
        :param names: optional aspect names used in messages
        :return: array of K coefficients
        """
        mask = np.asarray(mask, dtype=float)
        delta = np.asarray(delta, dtype=float).ravel()
        if mask.ndim != 2 or mask.shape[0] != delta.shape[0]:
            raise InvalidParameter("mask of shape %s does not match %d "
                                   "response values"
                                   % (mask.shape, delta.shape[0]))
        if names is None:
            names = [str(j) for j in range(mask.shape[1])]
        return self._fit(mask, delta, list(names))

    def _fit(self, mask, delta, names):
        raise NotImplementedError


class OrdinaryLeastSquaresFitter(LinearAttributionFitter):
    """Ordinary least squares with an intercept.

    Mask columns that are linear combinations of the intercept and of the
    columns before them cannot be estimated. Their coefficient is reported
    as nan and a DegenerateFit warning is issued.
    """

    def _fit(self, mask, delta, names):
        n, k = mask.shape
        design = np.column_stack([np.ones(n), mask])

        # intercept first, then every column that adds to the rank
        kept = [0]
        rank = 1
        for j in range(1, k + 1):
            candidate_rank = np.linalg.matrix_rank(design[:, kept + [j]])
            if candidate_rank > rank:
                kept.append(j)
                rank = candidate_rank
        estimable = [j - 1 for j in kept[1:]]

        coefficients = np.full(k, np.nan)
        if estimable:
            model = LinearRegression().fit(mask[:, estimable], delta)
            coefficients[estimable] = model.coef_

        aliased = [names[j] for j in range(k) if j not in estimable]
        if aliased:
            warnings.warn(
                "Coefficients of the aspects %s are not identifiable from the "
                "sampled mask and are reported as nan. Increase the number of "
                "samples or check that every aspect is replaced in some but "
                "not all samples." % ", ".join(aliased),
                DegenerateFit, stacklevel=3)
        return coefficients


class LassoPathFitter(LinearAttributionFitter):
    """L1 regularized fit limited to a number of non-zero coefficients.

    Mask columns are standardized and a lasso path is computed over a
    decreasing, log-spaced sequence of penalties. The result is the last
    point of the path, the one with the weakest penalty, that has at most
    ``max_nonzero`` non-zero coefficients. Coefficients are reported on the
    scale of the original mask.

    :param max_nonzero: maximal number of non-zero coefficients
    :param n_alphas: number of penalties on the path
    :param eps: ratio of the smallest to the largest penalty
    """

    def __init__(self, max_nonzero, n_alphas=100, eps=1e-4):
        if max_nonzero <= 0:
            raise InvalidParameter("max_nonzero must be positive for the "
                                   "lasso path, got %r" % (max_nonzero,))
        self.max_nonzero = max_nonzero
        self.n_alphas = n_alphas
        self.eps = eps

    def _fit(self, mask, delta, names):
        n, k = mask.shape
        coefficients = np.zeros(k)

        scale = mask.std(axis=0)
        varying = scale > 0
        centered = delta - delta.mean()
        if not varying.any() or np.allclose(centered, 0):
            log.debug("nothing to fit, returning the null model")
            return coefficients

        std_mask = (mask[:, varying] - mask[:, varying].mean(axis=0)) \
            / scale[varying]
        alpha_max = np.max(np.abs(std_mask.T @ centered)) / n
        if not np.isfinite(alpha_max) or alpha_max <= 0:
            log.debug("response is uncorrelated with the mask, returning the "
                      "null model")
            return coefficients
        alphas = np.geomspace(alpha_max, alpha_max * self.eps, self.n_alphas)
        alphas, path, _ = lasso_path(std_mask, centered, alphas=alphas)

        nonzero = np.count_nonzero(path, axis=0)
        within = np.flatnonzero(nonzero <= self.max_nonzero)
        if within.size == 0:
            log.debug("no path point has at most %d non-zero coefficients",
                      self.max_nonzero)
            return coefficients

        idx = within.max()
        log.debug("lasso path point %d of %d, alpha %.6g, %d non-zero",
                  idx + 1, len(alphas), alphas[idx], nonzero[idx])
        coefficients[varying] = path[:, idx] / scale[varying]
        return coefficients


def make_fitter(max_nonzero=0):
    """Pick the fitter for a bound on the number of non-zero coefficients.

    :param max_nonzero: 0 for ordinary least squares, a positive number for
    the lasso path
    :return: LinearAttributionFitter
    """
    if max_nonzero < 0:
        raise InvalidParameter("max_nonzero must not be negative, got %r"
                               % (max_nonzero,))
    if max_nonzero == 0:
        return OrdinaryLeastSquaresFitter()
    return LassoPathFitter(max_nonzero)


def fit_importance(delta, mask, max_nonzero=0, names=None):
    """Estimate one importance coefficient per aspect.

    :param delta: response deltas of length N
    :param mask: binary matrix of shape (N, K)
    :param max_nonzero: 0 for ordinary least squares, otherwise the maximal
    number of non-zero coefficients of the lasso fit
    :param names: optional aspect names used in warnings
    :return: array of K coefficients, nan where least squares is undefined
    """
    return make_fitter(max_nonzero).fit(mask, delta, names)
