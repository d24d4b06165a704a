import numpy as np
from ldavem.special import log_sum, log_normalize, converged, normalize_rows, normalize_cols, trigamma, digamma


def test_log_sum():
    assert np.isclose(log_sum(np.log(2.), np.log(3.)), np.log(5.))
    assert np.isclose(log_sum(-1000., -1000.), -1000. + np.log(2.))
    assert np.isfinite(log_sum(1000., 0.))


def test_log_normalize():
    x = np.array([-1000., -1001., -1002.])
    assert np.isclose(np.sum(np.exp(log_normalize(x))), 1.)


def test_trigamma_is_derivative_of_digamma():
    h = 1e-6
    assert np.isclose(trigamma(2.5), (digamma(2.5 + h) - digamma(2.5 - h)) / (2 * h), rtol=1e-5)


def test_converged():
    u = np.array([1., 2., 3.])
    assert converged(u, u + 1e-6, 1e-4)
    assert not converged(u, u + 1., 1e-4)


def test_normalize():
    m = np.array([[1., 3.], [2., 2.]])
    assert np.allclose(np.sum(normalize_rows(m), 1), 1.)
    assert np.allclose(np.sum(normalize_cols(m), 0), 1.)
