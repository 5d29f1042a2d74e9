import numpy as np
import pytest

from aspectimportance import (DegenerateFit, InvalidParameter, fit_importance,
                              generate_masks)
from aspectimportance.fitting import (LassoPathFitter,
                                      OrdinaryLeastSquaresFitter, make_fitter)


@pytest.fixture
def mask():
    return generate_masks(400, 5, "uniform-pair", random_state=21)


BETA = np.array([3.0, -2.0, 1.0, 0.5, 0.1])


def test_make_fitter_strategies():
    assert isinstance(make_fitter(0), OrdinaryLeastSquaresFitter)
    fitter = make_fitter(3)
    assert isinstance(fitter, LassoPathFitter)
    assert fitter.max_nonzero == 3
    with pytest.raises(InvalidParameter):
        make_fitter(-1)


def test_least_squares_recovers_linear_effects(mask):
    delta = mask @ BETA + 0.7
    coefficients = fit_importance(delta, mask)
    assert coefficients.shape == (5,)
    np.testing.assert_allclose(coefficients, BETA, atol=1e-8)


def test_least_squares_reports_constant_column_as_nan(mask):
    mask = mask.copy()
    mask[:, 2] = 0
    mask[mask.sum(axis=1) == 0, 0] = 1
    delta = mask @ BETA

    with pytest.warns(DegenerateFit, match="aspects c are"):
        coefficients = fit_importance(delta, mask,
                                      names=["a", "b", "c", "d", "e"])

    assert np.isnan(coefficients[2])
    assert np.isfinite(np.delete(coefficients, 2)).all()


def test_least_squares_aliases_complementary_columns():
    mask = np.array([[1, 0], [1, 0], [0, 1], [0, 1]])
    delta = np.array([1.0, 3.0, 10.0, 14.0])

    with pytest.warns(DegenerateFit):
        coefficients = fit_importance(delta, mask)

    assert coefficients[0] == pytest.approx(2.0 - 12.0)
    assert np.isnan(coefficients[1])


def test_lasso_respects_nonzero_bound(mask):
    delta = mask @ BETA + 0.3
    coefficients = fit_importance(delta, mask, max_nonzero=2)
    assert coefficients.shape == (5,)
    assert np.count_nonzero(coefficients) <= 2
    assert coefficients[0] > 0


@pytest.mark.parametrize("max_nonzero", [1, 2, 3, 4])
def test_lasso_bound_for_every_size(mask, max_nonzero):
    rng = np.random.default_rng(max_nonzero)
    delta = mask @ BETA + rng.normal(scale=0.1, size=mask.shape[0])
    coefficients = fit_importance(delta, mask, max_nonzero=max_nonzero)
    assert np.count_nonzero(coefficients) <= max_nonzero


def test_lasso_without_binding_bound_approaches_least_squares(mask):
    delta = mask @ BETA + 1.0
    coefficients = fit_importance(delta, mask, max_nonzero=5)
    np.testing.assert_allclose(coefficients, BETA, atol=0.05)


def test_lasso_constant_response_gives_null_model(mask):
    coefficients = fit_importance(np.full(mask.shape[0], 2.5), mask,
                                  max_nonzero=2)
    np.testing.assert_array_equal(coefficients, np.zeros(5))


def test_lasso_uncorrelated_response_gives_null_model():
    mask = np.array([[1, 0], [0, 1], [1, 0], [0, 1]])
    delta = np.array([1.0, 1.0, -1.0, -1.0])
    coefficients = fit_importance(delta, mask, max_nonzero=1)
    np.testing.assert_array_equal(coefficients, np.zeros(2))


def test_lasso_constant_mask_gives_null_model():
    mask = np.ones((10, 3), dtype=int)
    delta = np.linspace(0, 1, 10)
    coefficients = fit_importance(delta, mask, max_nonzero=1)
    np.testing.assert_array_equal(coefficients, np.zeros(3))


def test_mismatched_shapes(mask):
    with pytest.raises(InvalidParameter):
        fit_importance(np.zeros(3), mask)
