import os
import time
import numpy as np
from termcolor import colored
from tqdm import tqdm
from .alpha import SymmetricAlpha, VectorAlpha
from .inference import lda_inference, word_assignments
from .model import LdaModel, ModelFormatError
from .settings import Settings
from .suffstats import SuffStats
from .WriterWrapper import WriterWrapper

INIT = 'INIT'
E_STEP = 'E_STEP'
M_STEP = 'M_STEP'
CONVERGENCE_CHECK = 'CONVERGENCE_CHECK'
DONE = 'DONE'

MIN_EM_ITER = 3


class EmState:

    def __init__(self, var_max_iter):
        """
        Mutable state of one EM run.
        Attributes
        ----------
        var_max_iter: int
            variational cap of this run, doubled whenever the likelihood drops
        converged: float
            (likelihood_old - likelihood) / likelihood_old of the last iteration
        """
        self.status = INIT
        self.iteration = 0
        self.likelihood = 0.
        self.likelihood_old = 0.
        self.converged = 1.
        self.var_max_iter = var_max_iter
        self.start_time = time.time()
        self.history = []

    def elapsed(self):
        return time.time() - self.start_time


def _check_vocabulary(model, corpus):
    if corpus.n_voca > model.n_voca:
        raise ModelFormatError('corpus has {0} terms but the model only {1}'.format(corpus.n_voca, model.n_voca))


class LDA:
    """
    Latent Dirichlet Allocation by variational EM
    David M. Blei, Andrew Y. Ng, Michael I. Jordan, 2003
    Journal of Machine Learning Research 3
    """

    def __init__(self, settings=None):
        self.settings = settings or Settings()
        self.rng = np.random.RandomState(self.settings.seed)
        self.model = None
        self.var_gamma = None
        self.state = None

    def log(self, msg, color=None):
        if self.settings.verbose:
            print(colored(msg, color) if color else msg)

    def init_model(self, start, corpus, n_topic, initial_alpha):
        """
        :param start: 'seeded', 'random' or the root of a saved model
        :param initial_alpha: float, SymmetricAlpha or VectorAlpha; ignored for a saved model
        :return: LdaModel
        """
        if start not in ('seeded', 'random'):
            model = LdaModel.load(start, self.settings.verbose)
            _check_vocabulary(model, corpus)
            return model

        if isinstance(initial_alpha, (int, float)):
            initial_alpha = SymmetricAlpha(initial_alpha)
        model = LdaModel(n_topic, corpus.n_voca, initial_alpha, self.settings.verbose)
        ss = SuffStats(n_topic, corpus.n_voca)
        if start == 'seeded':
            ss.corpus_initialize(corpus, self.rng, self.settings.num_init, self.settings.verbose)
        else:
            ss.random_initialize(self.rng)
        model.mle(ss, False)
        return model

    def doc_e_step(self, doc, gamma, phi, model, ss, var_max_iter):
        likelihood = lda_inference(doc, model, gamma, phi, self.settings.var_converged, var_max_iter)
        ss.accumulate(doc, gamma, phi)
        return likelihood

    def e_step(self, corpus, model, ss, phi, state):
        likelihood = 0.
        for d in tqdm(range(corpus.M), desc='em iteration %d' % state.iteration, disable=not self.settings.verbose):
            likelihood += self.doc_e_step(corpus.get_doc(d), self.var_gamma[d], phi, model, ss, state.var_max_iter)
        return likelihood

    def check_convergence(self, state):
        if state.iteration > 1 and state.likelihood_old != 0:
            state.converged = (state.likelihood_old - state.likelihood) / state.likelihood_old
        else:
            state.converged = 1.
        if state.converged < 0 and state.var_max_iter != -1:
            state.var_max_iter = state.var_max_iter * 2
        state.likelihood_old = state.likelihood
        state.history.append((state.likelihood, state.converged))

    def keep_going(self, state):
        s = self.settings
        if state.iteration >= s.em_max_iter:
            return False
        if s.time_limit is not None and state.iteration > 0 and state.elapsed() > s.time_limit:
            self.log('time limit of %.1f sec reached after %d iterations' % (s.time_limit, state.iteration), 'yellow')
            return False
        return state.converged < 0 or state.converged > s.em_converged or state.iteration < MIN_EM_ITER

    def save_model(self, model_root):
        self.model.save(model_root, self.settings.save_binary, self.settings.save_text)

    def save_gamma(self, filename, gamma):
        save_gamma(filename, gamma, self.settings.save_binary, self.settings.save_text)

    def checkpoint(self, directory, name):
        self.save_model(os.path.join(directory, name))
        self.save_gamma(os.path.join(directory, name + '.gamma'), self.var_gamma)

    def run_em(self, start, directory, corpus, n_topic, initial_alpha):
        """
        Estimate an LDA model on corpus.
        Writes to directory: 000.*, a checkpoint every settings.lag iterations,
        final.beta, final.other, final.gamma, likelihood.dat and word-assignments.dat
        :return: LdaModel
        """
        corpus.check_not_empty()
        os.makedirs(directory, exist_ok=True)
        state = self.state = EmState(self.settings.var_max_iter)

        self.model = model = self.init_model(start, corpus, n_topic, initial_alpha)
        K = model.n_topic
        self.save_model(os.path.join(directory, '000'))

        self.var_gamma = np.zeros([corpus.M, K])
        phi = np.zeros([corpus.max_doc_length(), K])
        ss = SuffStats(K, model.n_voca, isinstance(model.alpha, VectorAlpha))

        with WriterWrapper(os.path.join(directory, 'likelihood.dat')) as likelihood_file:
            while self.keep_going(state):
                curr = time.time()
                state.iteration += 1

                state.status = E_STEP
                ss.zero_initialize()
                state.likelihood = self.e_step(corpus, model, ss, phi, state)

                state.status = M_STEP
                model.mle(ss, self.settings.estimate_alpha)

                state.status = CONVERGENCE_CHECK
                self.check_convergence(state)
                likelihood_file.write_row(['%10.10f' % state.likelihood, '%5.5e' % state.converged])
                self.log('%d iter, %.2f time, %.2f likelihood, %5.5e converged' % (
                    state.iteration, time.time() - curr, state.likelihood, state.converged))

                if state.iteration % self.settings.lag == 0:
                    self.checkpoint(directory, '%03d' % state.iteration)

        state.status = DONE
        self.checkpoint(directory, 'final')
        if corpus.vocab is not None:
            model.write_top_words(corpus.vocab, os.path.join(directory, 'final_top_words.csv'))

        # one more pass with the final model for the word assignments
        with open(os.path.join(directory, 'word-assignments.dat'), 'w') as f:
            for d in tqdm(range(corpus.M), desc='final e step', disable=not self.settings.verbose):
                doc = corpus.get_doc(d)
                lda_inference(doc, model, self.var_gamma[d], phi, self.settings.var_converged, state.var_max_iter)
                write_word_assignment(f, doc, phi)

        return model

    def infer(self, model_root, save, corpus):
        """
        Posterior of every document of corpus under a fixed model.
        Writes <save>-lda-lhood.dat and <save>-gamma.dat
        :return: tuple (gamma np.array [M, K], likelihood np.array [M])
        """
        self.model = model = LdaModel.load(model_root, self.settings.verbose)
        _check_vocabulary(model, corpus)

        self.var_gamma = np.zeros([corpus.M, model.n_topic])
        phi = np.zeros([corpus.max_doc_length(), model.n_topic])
        likelihoods = np.zeros(corpus.M)
        for d in tqdm(range(corpus.M), desc='inference', disable=not self.settings.verbose):
            likelihoods[d] = lda_inference(corpus.get_doc(d), model, self.var_gamma[d], phi,
                                           self.settings.var_converged, self.settings.var_max_iter)

        np.savetxt(save + '-lda-lhood.dat', likelihoods, fmt='%5.5f')
        self.save_gamma(save + '-gamma.dat', self.var_gamma)
        return self.var_gamma, likelihoods


def write_word_assignment(f, doc, phi):
    """ Line: number of terms, then word:topic for every term """
    topics = word_assignments(doc, phi)
    f.write('%03d' % doc.length)
    for n in range(doc.length):
        f.write(' %04d:%02d' % (doc.word(n), topics[n]))
    f.write('\n')


def save_gamma(filename, gamma, binary=False, text=True):
    """
    :param gamma: np.array [M, K], one line per document
    """
    if binary:
        with open(filename + '.bin', 'wb') as f:
            np.array(gamma.shape, dtype='>i4').tofile(f)
            gamma.astype('>f4').tofile(f)
    if text:
        np.savetxt(filename, gamma, fmt='%5.10f', delimiter=' ')
