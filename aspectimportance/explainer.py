"""Run aspect importance on an explainer object.

An explainer bundles a model with its background data. It has to expose
``data``, ``model``, ``predict_function(model, rows)`` and ``label``, and may
expose the known outcome ``y``.
"""

import warnings

import numpy as np
import pandas as pd
from pandas.api.types import is_bool_dtype, is_numeric_dtype

from .exceptions import TargetInDataWarning
from .importance import aspect_importance
from .sampling import UNIFORM_PAIR


def as_text(values):
    """Render values as text, numbers with up to 15 significant digits.

    Integral floats lose their decimal part, so ``1.0`` and ``1`` both
    become ``"1"``.

    :param values: one-dimensional values
    :return: array of strings
    """
    values = pd.Series(np.asarray(values).reshape(-1))
    if is_numeric_dtype(values) and not is_bool_dtype(values):
        return values.map(lambda v: "%.15g" % v).to_numpy()
    return values.astype(str).to_numpy()


def target_in_data(data, y):
    """Check whether some column of the data equals the outcome.

    Values are compared as text, see ``as_text``.

    :param data: the dataset
    :param y: known outcome, one value per row of ``data``
    :return: name of the first matching column, or None
    """
    y_text = as_text(y)
    if y_text.shape[0] != data.shape[0]:
        return None
    for col in data.columns:
        if (as_text(data[col]) == y_text).all():
            return col
    return None


def aspect_importance_explainer(explainer, new_observation, aspects, N=1000,
                                n_var=0, sample_method=UNIFORM_PAIR, f=2,
                                random_state=None):
    """Calculate the importance of aspects using an explainer.

    :param explainer: object with data, model, predict_function, label and
    optionally y
    :param new_observation: observation to be explained
    :param aspects: mapping from aspect name to list of variable names
    :param N: number of rows sampled with replacement from the data
    :param n_var: maximal number of non-zero coefficients of the lasso fit,
    0 for ordinary least squares
    :param sample_method: ``uniform-pair`` or ``binomial``
    :param f: expected number of replaced aspects for ``binomial``
    :param random_state: None, seed or numpy Generator
    :return: DataFrame describing the importance of every aspect
    """
    data = explainer.data
    model = explainer.model

    y = getattr(explainer, "y", None)
    if y is not None:
        column = target_in_data(data, y)
        if column is not None:
            warnings.warn("Column %r equals the target. It is recommended to "
                          "pass `data` without the target variable column."
                          % (column,), TargetInDataWarning, stacklevel=2)

    def predict_function(rows):
        return explainer.predict_function(model, rows)

    return aspect_importance(predict_function, data, new_observation,
                             aspects, N=N, n_var=n_var,
                             sample_method=sample_method, f=f,
                             label=getattr(explainer, "label", None)
                             or type(model).__name__,
                             random_state=random_state)
