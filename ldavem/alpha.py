import numpy as np
from termcolor import colored
from .special import digamma, trigamma, lgamma, converged

NEWTON_THRESH = 1e-5
MAX_ALPHA_ITER = 1000

MAX_NEWTON_ITERATION = 20
MAX_RECURSION_LIMIT = 20


class AlphaDivergenceError(ArithmeticError):
    pass


class SymmetricAlpha:
    """ One concentration value shared by all topics """

    def __init__(self, value):
        self.value = float(value)

    def vector(self, n_topic):
        return np.full(n_topic, self.value)

    def sum(self, n_topic):
        return n_topic * self.value

    def lgamma_norm(self, n_topic):
        return lgamma(n_topic * self.value) - n_topic * lgamma(self.value)

    def to_line(self):
        return repr(self.value)

    def __eq__(self, other):
        return isinstance(other, SymmetricAlpha) and self.value == other.value

    def __repr__(self):
        return 'SymmetricAlpha({0})'.format(self.value)


class VectorAlpha:
    """ One concentration value per topic """

    def __init__(self, values):
        self.values = np.array(values, dtype=np.float64)

    def vector(self, n_topic):
        if len(self.values) != n_topic:
            raise ValueError('alpha has {0} components, expected {1}'.format(len(self.values), n_topic))
        return self.values

    def sum(self, n_topic):
        return np.sum(self.vector(n_topic))

    def lgamma_norm(self, n_topic):
        a = self.vector(n_topic)
        return lgamma(np.sum(a)) - np.sum(lgamma(a))

    def to_line(self):
        return ' '.join(repr(float(a)) for a in self.values)

    def __eq__(self, other):
        return isinstance(other, VectorAlpha) and np.array_equal(self.values, other.values)

    def __repr__(self):
        return 'VectorAlpha({0})'.format(list(self.values))


def parse_alpha(tokens):
    """
    :param tokens: list of str, one value for a symmetric prior, K values for a vector prior
    """
    values = [float(t) for t in tokens]
    if not values:
        raise ValueError('empty alpha')
    if len(values) == 1:
        return SymmetricAlpha(values[0])
    return VectorAlpha(values)


# scalar alpha, objective and derivatives of
# D * (lgamma(K a) - K lgamma(a)) + (a - 1) ss

def alhood(a, ss, D, K):
    return D * (lgamma(K * a) - K * lgamma(a)) + (a - 1) * ss


def d_alhood(a, ss, D, K):
    return D * (K * digamma(K * a) - K * digamma(a)) + ss


def d2_alhood(a, D, K):
    return D * (K * K * trigamma(K * a) - K * trigamma(a))


def opt_alpha(ss, D, K, init_a=100., verbose=False):
    """
    Newton's method in log space for the symmetric Dirichlet prior.
    :param ss: sum over documents of sum_k digamma(gamma_k) - K digamma(sum gamma)
    :param D: number of documents
    :param K: number of topics
    :return: float
    """
    log_a = np.log(init_a)
    it = 0
    while True:
        it += 1
        a = np.exp(log_a)
        if np.isnan(a):
            init_a = init_a * 10
            print(colored('warning : alpha is nan; new init = %5.5f' % init_a, 'yellow'))
            a = init_a
            log_a = np.log(a)
        f = alhood(a, ss, D, K)
        df = d_alhood(a, ss, D, K)
        d2f = d2_alhood(a, D, K)
        log_a = log_a - df / (d2f * a + df)
        if verbose:
            print('alpha maximization : %5.5f   %5.5f' % (f, df))
        if abs(df) <= NEWTON_THRESH or it >= MAX_ALPHA_ITER:
            break
    return float(np.exp(log_a))


def newton_alpha(gammas, verbose=False):
    """
    Newton-Raphson for a vector Dirichlet prior given per-document posteriors.
    The Hessian is diagonal plus rank one, so each step is O(K).
    A negative component restarts from a ten times smaller initial value.
    :param gammas: np.array [M, K]
    :return: np.array [K]
    """
    gammas = np.asarray(gammas, dtype=np.float64)
    M, K = gammas.shape

    psg = np.sum(digamma(np.sum(gammas, 1)))
    pg = np.sum(digamma(gammas), 0) - psg

    for level in range(MAX_RECURSION_LIMIT + 1):
        alpha = np.sum(gammas, 0) / (M * K * 10. ** level)
        palpha = np.zeros(K)

        for t in range(MAX_NEWTON_ITERATION):
            alpha0 = np.sum(alpha)
            g = M * (digamma(alpha0) - digamma(alpha)) + pg
            h = -1. / trigamma(alpha)
            hgz = np.sum(g * h) / (1. / trigamma(alpha0) + np.sum(h))
            alpha = alpha - h * (g - hgz) / M

            if np.any(alpha < 0):
                break
            if t > 0 and converged(alpha, palpha, 1e-4):
                return alpha
            palpha = alpha.copy()
        else:
            if verbose:
                print(colored('newton:: maximum iteration reached. t = %d' % MAX_NEWTON_ITERATION, 'yellow'))
            return alpha

    raise AlphaDivergenceError('newton:: maximum recursion limit reached.')


def maximize_alpha(prior, ss, verbose=False):
    """
    Re-estimate the Dirichlet prior from sufficient statistics.
    :param prior: SymmetricAlpha or VectorAlpha, selects the solver
    :param ss: SuffStats
    :return: a new prior of the same kind
    """
    if isinstance(prior, SymmetricAlpha):
        return SymmetricAlpha(opt_alpha(ss.alpha_suffstats, ss.num_docs, ss.n_topic, verbose=verbose))
    if isinstance(prior, VectorAlpha):
        return VectorAlpha(newton_alpha(ss.gammas, verbose=verbose))
    raise TypeError('unknown alpha prior {0!r}'.format(prior))
