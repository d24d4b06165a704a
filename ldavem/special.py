import numpy as np
from scipy.special import gammaln, psi, polygamma, logsumexp

eps = 1e-100

# log probability used for words never seen under a topic
LOG_ZERO = -100.


def digamma(x):
    return psi(x)


def trigamma(x):
    return polygamma(1, x)


def lgamma(x):
    return gammaln(x)


def log_sum(log_a, log_b):
    """
    :return: log(exp(log_a) + exp(log_b))
    """
    if log_a < log_b:
        return log_b + np.log1p(np.exp(log_a - log_b))
    return log_a + np.log1p(np.exp(log_b - log_a))


def log_normalize(x):
    return x - logsumexp(x)


def converged(u, v, threshold):
    """
    Relative change test: |u - v| / |u| < threshold
    """
    us = np.sum(u * u)
    ds = np.sum((u - v) ** 2)
    return np.sqrt(ds / (us + eps)) < threshold


def normalize_rows(m):
    return m / np.sum(m, 1)[:, np.newaxis]


def normalize_cols(m):
    return m / np.sum(m, 0)[np.newaxis, :]
