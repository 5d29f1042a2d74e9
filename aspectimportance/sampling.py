"""Random aspect masks and the perturbed samples built from them."""

import logging

import numpy as np
import pandas as pd

from .data import AspectData
from .exceptions import InvalidParameter

log = logging.getLogger(__name__)

UNIFORM_PAIR = "uniform-pair"
BINOMIAL = "binomial"

SAMPLE_METHODS = {
    UNIFORM_PAIR: UNIFORM_PAIR,
    BINOMIAL: BINOMIAL,
    "default": UNIFORM_PAIR,
    "binom": BINOMIAL,
}


def resolve_method(method):
    """Map a sampling method name or alias to its canonical name."""
    try:
        return SAMPLE_METHODS[method]
    except (KeyError, TypeError):
        raise InvalidParameter(
            "unknown sample_method %r, expected one of: %s"
            % (method, ", ".join(sorted(SAMPLE_METHODS)))) from None


def check_mask_params(n, k, f):
    """Check the size and frequency arguments of mask generation.

    :param n: number of rows
    :param k: number of columns (aspects)
    :param f: expected number of replaced aspects
    """
    if n <= 0:
        raise InvalidParameter("number of samples must be positive, got %r"
                               % (n,))
    if k <= 0:
        raise InvalidParameter("number of aspects must be positive, got %r"
                               % (k,))
    if f <= 0:
        raise InvalidParameter("frequency f must be positive, got %r" % (f,))


def generate_masks(n, k, method=UNIFORM_PAIR, f=2, random_state=None):
    """Generate a binary matrix of replaced aspects.

    Every row starts empty and gets some of its entries set to one. With the
    ``uniform-pair`` method two columns are drawn with replacement, so a row
    holds one or two ones. With the ``binomial`` method the number of draws
    is ``max(1, Binomial(k, f / k))``, so ``f`` controls the average number
    of ones per row. No row is left without a one.

    :param n: number of rows
    :param k: number of columns (aspects)
    :param method: ``uniform-pair`` or ``binomial``
    :param f: expected number of replaced aspects for ``binomial``
    :param random_state: None, seed or numpy Generator
    :return: integer array of shape (n, k) with values 0 and 1
    """
    method = resolve_method(method)
    check_mask_params(n, k, f)
    rng = np.random.default_rng(random_state)

    mask = np.zeros((n, k), dtype=int)
    if method == BINOMIAL:
        counts = np.maximum(rng.binomial(k, min(1.0, f / k), size=n), 1)
        for i, count in enumerate(counts):
            mask[i, rng.integers(0, k, size=count)] = 1
    else:
        draws = rng.integers(0, k, size=(n, 2))
        rows = np.arange(n)
        mask[rows, draws[:, 0]] = 1
        mask[rows, draws[:, 1]] = 1

    log.debug("generated %s mask %dx%d, mean active aspects %.3f",
              method, n, k, mask.sum(axis=1).mean())
    return mask


def perturb(prepared, mask, rng):
    """Sample background rows and overwrite the masked aspects.

    :param prepared: AspectData with the checked inputs
    :param mask: binary matrix with one column per aspect
    :param rng: numpy Generator used for row sampling
    :return: sampled rows, perturbed rows
    """
    mask = np.asarray(mask)
    if mask.ndim != 2 or mask.shape[1] != len(prepared):
        raise InvalidParameter("mask must have one column per aspect (%d), "
                               "got shape %s" % (len(prepared), mask.shape))
    if mask.shape[0] == 0:
        raise InvalidParameter("mask must have at least one row")

    sampled = prepared.data.sample(mask.shape[0], replace=True,
                                   random_state=rng).reset_index(drop=True)
    perturbed = sampled.copy()

    for j, variables in enumerate(prepared.aspects.values()):
        rows = mask[:, j] == 1
        if not rows.any():
            continue
        for var in variables:
            value = prepared.observation[var]
            column = perturbed[var]
            # unseen levels of the observation become new categories
            if isinstance(column.dtype, pd.CategoricalDtype) \
                    and not pd.isna(value) \
                    and value not in column.cat.categories:
                column = column.cat.add_categories([value])
            perturbed[var] = column.mask(rows, value)

    return sampled, perturbed


def build_perturbed(data, new_observation, aspects, mask, random_state=None):
    """Build the sampled and the perturbed dataset for a mask.

    Rows are drawn from ``data`` with replacement, one per mask row. In the
    perturbed copy, row ``i`` takes the observation's values for the
    variables of every aspect ``j`` with ``mask[i, j] == 1``.

    :param data: the background dataset
    :param new_observation: observation whose values are put into the sample
    :param aspects: mapping from aspect name to list of variable names
    :param mask: binary matrix of shape (N, number of aspects)
    :param random_state: None, seed or numpy Generator
    :return: sampled rows, perturbed rows
    """
    prepared = AspectData(data, new_observation, aspects)
    return perturb(prepared, mask, np.random.default_rng(random_state))
