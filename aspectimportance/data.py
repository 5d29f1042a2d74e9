"""Reconcile background data, observation and aspect definitions."""

import logging

import pandas as pd
from pandas.api.types import is_bool_dtype, is_numeric_dtype

from .exceptions import (InvalidAspectDefinition, InvalidParameter,
                         SchemaMismatch)

log = logging.getLogger(__name__)

NUMERIC = "numeric"
CATEGORICAL = "categorical"


def as_observation(new_observation):
    """Convert an observation to a Series indexed by column name.

    :param new_observation: one-row DataFrame, Series or dict
    :return: the observation as a Series
    """
    if isinstance(new_observation, pd.DataFrame):
        if new_observation.shape[0] != 1:
            raise InvalidParameter("new_observation must contain exactly one "
                                   "row, got %d" % new_observation.shape[0])
        return new_observation.iloc[0]
    if isinstance(new_observation, pd.Series):
        return new_observation
    if isinstance(new_observation, dict):
        return pd.Series(new_observation, dtype=object)
    raise InvalidParameter("new_observation must be a DataFrame, Series or "
                           "dict, got %s" % type(new_observation).__name__)


def normalize_aspects(aspects):
    """Turn an aspect mapping into an ordered dict of variable lists.

    :param aspects: mapping from aspect name to a variable name or a list of
    variable names
    :return: dict from aspect name to list of variable names
    """
    if not aspects:
        raise InvalidParameter("at least one aspect is required")
    normalized = {}
    for name, variables in aspects.items():
        if isinstance(variables, str):
            variables = [variables]
        variables = list(variables)
        if not variables:
            raise InvalidAspectDefinition("aspect %r has no variables" % name)
        normalized[name] = variables
    return normalized


def column_kinds(data):
    """Tag every column of a dataset as numeric or categorical.

    Boolean columns count as categorical.

    :param data: the dataset
    :return: dict from column name to NUMERIC or CATEGORICAL
    """
    return {col: NUMERIC if is_numeric_dtype(data[col])
            and not is_bool_dtype(data[col]) else CATEGORICAL
            for col in data.columns}


def common_columns(data, observation):
    """Restrict data and observation to the columns they share.

    :param data: the dataset
    :param observation: the observation as a Series
    :return: restricted dataset, restricted observation
    """
    shared = [col for col in data.columns if col in observation.index]
    if not shared:
        raise SchemaMismatch("data and new_observation have no common "
                             "columns")
    dropped = len(data.columns) - len(shared)
    if dropped:
        log.debug("dropping %d data columns absent from the observation",
                  dropped)
    return data[shared], observation[shared]


def check_aspects(aspects, columns):
    """Check that every aspect variable is one of the given columns.

    :param aspects: dict from aspect name to list of variable names
    :param columns: available column names
    """
    columns = set(columns)
    for name, variables in aspects.items():
        missing = [var for var in variables if var not in columns]
        if missing:
            raise InvalidAspectDefinition(
                "aspect %r refers to unknown variables: %s"
                % (name, ", ".join(map(str, missing))))


class AspectData:
    """Background data, observation and aspects checked against each other.

    Column type tags are computed once here and reused by the diagnostics.
    """

    def __init__(self, data, new_observation, aspects):
        if not isinstance(data, pd.DataFrame):
            raise InvalidParameter("data must be a pandas DataFrame")
        if data.shape[0] == 0:
            raise InvalidParameter("data must contain at least one row")
        observation = as_observation(new_observation)
        self.aspects = normalize_aspects(aspects)
        self.data, self.observation = common_columns(data, observation)
        check_aspects(self.aspects, self.data.columns)
        self.kinds = column_kinds(self.data)

    @property
    def names(self):
        """Aspect names in definition order."""
        return list(self.aspects)

    def __len__(self):
        return len(self.aspects)
