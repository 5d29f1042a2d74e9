"""Compute the importance of aspects for a single observation.

The procedure takes a sample from the background data and replaces, per
sampled row, some of its aspects by the values of the observation. The
difference between the predictions on the modified and on the original
sample is then explained by a linear model, or a lasso, of the binary
indicators of the replaced aspects.
"""

import logging
import math

import numpy as np
import pandas as pd
from scipy.stats import spearmanr

from .data import NUMERIC, AspectData, column_kinds, normalize_aspects
from .exceptions import InvalidParameter, PredictionFailure
from .fitting import make_fitter
from .sampling import (UNIFORM_PAIR, check_mask_params, generate_masks,
                       perturb, resolve_method)

log = logging.getLogger(__name__)

RESULT_COLUMNS = ["variable_groups", "importance", "features", "min_cor",
                  "sign"]


def _predict(predict_function, rows):
    """Score a batch of rows, one float per row.

    :param predict_function: callable taking a DataFrame
    :param rows: rows to be scored
    :return: array of scores
    """
    try:
        scores = predict_function(rows)
    except Exception as err:
        raise PredictionFailure("predict function failed: %s" % err,
                                original=err) from err
    try:
        scores = np.asarray(scores, dtype=float).reshape(-1)
    except (TypeError, ValueError) as err:
        raise PredictionFailure("predict function returned non-numeric "
                                "scores", original=err) from err
    if scores.shape[0] != rows.shape[0]:
        raise PredictionFailure("predict function returned %d scores for %d "
                                "rows" % (scores.shape[0], rows.shape[0]))
    return scores


def estimate_response(predict_function, sampled, perturbed):
    """Compute the change in prediction caused by the perturbation.

    :param predict_function: callable taking a DataFrame and returning one
    score per row
    :param sampled: sampled background rows
    :param perturbed: the same rows with replaced aspects
    :return: array with predict(perturbed) - predict(sampled)
    """
    return _predict(predict_function, perturbed) \
        - _predict(predict_function, sampled)


def signif(x, digits=4):
    """Round a number to a number of significant digits.

    nan and infinite values are returned unchanged.
    """
    x = float(x)
    if not math.isfinite(x):
        return x
    return float("%.*g" % (digits, x))


def correlation_summary(data, variables):
    """Summarize the Spearman correlations within an aspect.

    :param data: the dataset
    :param variables: numeric variables of the aspect, at least two
    :return: smallest absolute correlation, "neg" if correlations of both
    signs occur, otherwise "pos"
    """
    statistic = spearmanr(data[variables]).statistic
    if np.ndim(statistic) == 0:
        cor_matrix = np.array([[1.0, statistic], [statistic, 1.0]])
    else:
        cor_matrix = np.asarray(statistic)
    min_cor = float(np.min(np.abs(cor_matrix)))
    sign = "neg" if (cor_matrix > 0).any() and (cor_matrix < 0).any() \
        else "pos"
    return min_cor, sign


def annotate(coefficients, aspects, data, kinds=None, digits=4, label=None):
    """Rank aspects by importance and add correlation diagnostics.

    :param coefficients: one coefficient per aspect, in aspect order
    :param aspects: mapping from aspect name to list of variable names
    :param data: the dataset used for correlation diagnostics
    :param kinds: column type tags, computed from ``data`` if omitted
    :param digits: significant digits of the reported importance
    :param label: name of the explained model, stored in ``attrs["label"]``
    :return: DataFrame with columns variable_groups, importance, features,
    min_cor and sign
    """
    aspects = normalize_aspects(aspects)
    coefficients = np.asarray(coefficients, dtype=float).reshape(-1)
    if coefficients.shape[0] != len(aspects):
        raise InvalidParameter("got %d coefficients for %d aspects"
                               % (coefficients.shape[0], len(aspects)))
    if kinds is None:
        kinds = column_kinds(data)

    # stable sort on full precision, undefined coefficients last
    order = sorted(range(len(aspects)),
                   key=lambda j: (math.isnan(coefficients[j]),
                                  -abs(coefficients[j])))
    names = list(aspects)

    rows = []
    for j in order:
        name = names[j]
        variables = aspects[name]
        if len(variables) > 1 and \
                all(kinds.get(var) == NUMERIC for var in variables):
            min_cor, sign = correlation_summary(data, variables)
        else:
            min_cor, sign = np.nan, ""
        rows.append([name, signif(coefficients[j], digits), list(variables),
                     min_cor, sign])

    res = pd.DataFrame(rows, columns=RESULT_COLUMNS)
    res.attrs["label"] = label
    return res


def default_label(predict_function):
    """Name a model after the object its predict function is bound to."""
    owner = getattr(predict_function, "__self__", None)
    if owner is not None:
        return type(owner).__name__
    return getattr(predict_function, "__name__",
                   type(predict_function).__name__)


def aspect_importance(predict_function, data, new_observation, aspects,
                      N=100, n_var=0, sample_method=UNIFORM_PAIR, f=2,
                      label=None, random_state=None):
    """Calculate the importance of aspects for a selected observation.

    NOTE: small ``N`` may cause unstable results. It is best when the target
    variable is not present in ``data``.

    :param predict_function: callable taking a DataFrame and returning one
    score per row
    :param data: background dataset
    :param new_observation: observation to be explained
    :param aspects: mapping from aspect name to list of variable names
    :param N: number of rows sampled with replacement from ``data``
    :param n_var: maximal number of non-zero coefficients of the lasso fit,
    0 for ordinary least squares
    :param sample_method: ``uniform-pair`` or ``binomial``, see
    ``generate_masks``
    :param f: expected number of replaced aspects for ``binomial``
    :param label: name of the model, derived from ``predict_function`` if
    omitted
    :param random_state: None, seed or numpy Generator
    :return: DataFrame describing the importance of every aspect
    """
    sample_method = resolve_method(sample_method)
    prepared = AspectData(data, new_observation, aspects)
    check_mask_params(N, len(prepared), f)
    fitter = make_fitter(n_var)
    if label is None:
        label = default_label(predict_function)

    rng = np.random.default_rng(random_state)
    log.debug("explaining %d aspects with %d samples", len(prepared), N)

    mask = generate_masks(N, len(prepared), sample_method, f, random_state=rng)
    sampled, perturbed = perturb(prepared, mask, rng)
    delta = estimate_response(predict_function, sampled, perturbed)
    coefficients = fitter.fit(mask, delta, prepared.names)

    return annotate(coefficients, prepared.aspects, prepared.data,
                    prepared.kinds, label=label)
