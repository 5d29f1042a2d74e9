"""Explain a single prediction through the importance of variable groups.

Functions for measuring how much predefined groups of attributes (aspects)
contribute to the prediction a model makes for one observation. Background
rows are sampled from a dataset, random aspects are replaced by the values of
the observation, and the change in prediction is regressed on the binary
indicators of the replaced aspects.

The method is a grouped variant of local surrogate explanations and follows
the aspect importance approach described in [1].

See also:
[1] Biecek, Przemyslaw, and Tomasz Burzykowski. "Explanatory Model Analysis."
    Chapman and Hall/CRC, 2021.
[2] Ribeiro, Marco Tulio, et al. "Why should I trust you?: Explaining the
    predictions of any classifier." Proceedings of the 22nd ACM SIGKDD
    international conference on knowledge discovery and data mining. 2016.
"""

from .exceptions import (AspectImportanceError, DegenerateFit,
                         InvalidAspectDefinition, InvalidParameter,
                         PredictionFailure, SchemaMismatch,
                         TargetInDataWarning)
from .explainer import aspect_importance_explainer
from .fitting import fit_importance
from .importance import annotate, aspect_importance, estimate_response
from .sampling import build_perturbed, generate_masks

__all__ = [
    "aspect_importance",
    "aspect_importance_explainer",
    "generate_masks",
    "build_perturbed",
    "estimate_response",
    "fit_importance",
    "annotate",
    "AspectImportanceError",
    "InvalidParameter",
    "SchemaMismatch",
    "InvalidAspectDefinition",
    "PredictionFailure",
    "DegenerateFit",
    "TargetInDataWarning",
]
