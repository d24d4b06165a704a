import time
import numpy as np
from termcolor import colored
from tqdm import tqdm
from .alpha import VectorAlpha, newton_alpha
from .model import BaseModel
from .special import digamma, converged, normalize_cols, normalize_rows

CLASS_DEFAULT = 50
EMMAX_DEFAULT = 100
DEMMAX_DEFAULT = 20
EPSILON_DEFAULT = 1.0e-4


def vbem(doc, alpha, beta, demmax, q=None):
    """
    Variational Bayes E-step for one document.
    :param alpha: np.array [K]
    :param beta: np.array [V, K], p(w|z) by column
    :param demmax: iteration cap
    :param q: np.array [>= doc.length, K] buffer for the topic responsibilities
    :return: tuple (gamma np.array [K], q)
    """
    K = len(alpha)
    N = doc.length
    if q is None:
        q = np.zeros([N, K])
    beta_d = beta[doc.word_ids]

    nt = np.full(K, N / K)
    pnt = nt.copy()
    for r in range(demmax):
        ap = np.exp(digamma(alpha + nt))
        q[:N] = normalize_rows(beta_d * ap)
        nt = np.sum(q[:N] * doc.word_cnt[:, np.newaxis], 0)
        if r > 0 and converged(nt, pnt, 1.0e-2):
            break
        pnt = nt.copy()

    return alpha + nt, q


class LDAM(BaseModel):
    """
    LDA with a vector Dirichlet prior, learned by VB-EM
    Attributes
    ----------
    beta: np.array [V, K]
        p(w|z), every column sums to one
    gammas: np.array [M, K]
        variational Dirichlet of every document
    restart_before: int
        convergence before this outer step restarts training from a new random alpha
    """

    def __init__(self, n_topic, n_voca, emmax=EMMAX_DEFAULT, demmax=DEMMAX_DEFAULT, epsilon=EPSILON_DEFAULT,
                 restart_before=5, max_restarts=10, seed=4357, verbose=False):
        super().__init__(n_topic, n_voca, VectorAlpha(np.ones(n_topic) / n_topic), verbose)
        self.emmax = emmax
        self.demmax = demmax
        self.epsilon = epsilon
        self.restart_before = restart_before
        self.max_restarts = max_restarts
        self.rng = np.random.RandomState(seed)

        self.beta = np.full([n_voca, n_topic], 1. / n_voca)
        self.gammas = None
        self.lbs = []
        self.restarts = 0

    def topic_word_probs(self):
        return self.beta.T

    def initialize(self):
        alpha = self.rng.random_sample(self.n_topic)
        self.alpha = VectorAlpha(np.sort(alpha / np.sum(alpha)))
        self.beta = np.full([self.n_voca, self.n_topic], 1. / self.n_voca)
        self.lbs = []

    def fit(self, corpus):
        """ Run VB-EM to fit the model, restarting after premature convergence """
        corpus.check_not_empty()
        if self.verbose:
            print('Number of documents          = %d' % corpus.M)
            print('Number of words              = %d' % self.n_voca)
            print('Number of latent classes     = %d' % self.n_topic)
            print('Number of outer EM iteration = %d' % self.emmax)
            print('Number of inner EM iteration = %d' % self.demmax)
            print('Convergence threshold        = %g' % self.epsilon)

        self.restarts = 0
        while self._fit_once(corpus):
            self.restarts += 1
            if self.verbose:
                print(colored('early convergence. restarting.', 'yellow'))
        return self

    def _fit_once(self, corpus):
        """
        :return: True if training converged too early and should be restarted
        """
        self.initialize()
        self.gammas = np.zeros([corpus.M, self.n_topic])
        q = np.zeros([corpus.max_doc_length(), self.n_topic])
        plik = 0.
        start = time.time()

        for t in range(self.emmax):
            curr = time.time()
            alpha = self.alpha.vector(self.n_topic)
            betas = np.zeros([self.n_voca, self.n_topic])

            # VB-E step
            for d in tqdm(range(corpus.M), desc='iteration %d/%d' % (t + 1, self.emmax), disable=not self.verbose):
                doc = corpus.get_doc(d)
                self.gammas[d], q = vbem(doc, alpha, self.beta, self.demmax, q)
                betas[doc.word_ids] += q[:doc.length] * doc.word_cnt[:, np.newaxis]

            # VB-M step
            self.alpha = VectorAlpha(newton_alpha(self.gammas, self.verbose))
            self.beta = normalize_cols(betas)

            lik = self.likelihood(corpus)
            self.lbs.append(lik)
            if self.verbose:
                print('%d iter, %.2f time, %.2f likelihood' % (t, time.time() - curr, lik))

            if t > 1 and abs((lik - plik) / lik) < self.epsilon:
                if t < self.restart_before and self.restarts < self.max_restarts:
                    return True
                if self.verbose:
                    print(colored('converged. [%.2f sec]' % (time.time() - start), 'green'))
                break
            plik = lik
        return False

    def likelihood(self, corpus):
        """ sum_d sum_n count * log sum_k beta[w][k] theta[d][k] """
        theta = normalize_rows(self.gammas)
        lik = 0.
        for d in range(corpus.M):
            doc = corpus.get_doc(d)
            z = np.dot(self.beta[doc.word_ids], theta[d])
            lik += np.sum(doc.word_cnt * np.log(z))
        return lik

    def save(self, model_base):
        """ <base>.alpha, one value per line, and <base>.beta, V x K """
        np.savetxt(model_base + '.alpha', self.alpha.vector(self.n_topic))
        np.savetxt(model_base + '.beta', self.beta)
        if self.verbose:
            print(colored('Saved: {0}'.format(model_base), 'green'))
