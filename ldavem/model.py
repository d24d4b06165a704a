import os
import numpy as np
from termcolor import colored
from .alpha import SymmetricAlpha, maximize_alpha, parse_alpha
from .special import LOG_ZERO


class ModelFormatError(ValueError):
    pass


class BaseModel:

    def __init__(self, n_topic, n_voca, alpha=1., verbose=False):
        """
        Basic TopicModel class for LDA and LDAM.
        Attributes
        ----------
        n_topic: int
            number of topics
        n_voca: int
            vocabulary size
        alpha: SymmetricAlpha or VectorAlpha
            Dirichlet prior of the per-document topic proportions
        """
        self.n_topic = n_topic
        self.n_voca = n_voca
        if isinstance(alpha, (int, float)):
            alpha = SymmetricAlpha(alpha)
        self.alpha = alpha
        self.verbose = verbose

    def fit(self, corpus):
        """ Run variational EM to fit the model"""
        raise NotImplementedError

    def topic_word_probs(self):
        """ np.array [K, V] of p(w|z) """
        raise NotImplementedError

    def write_top_words(self, vocab, filepath, n_words=20):
        alpha = self.alpha.vector(self.n_topic)
        probs = self.topic_word_probs()
        vocab = np.array(vocab)
        with open(filepath, 'w', encoding='utf-8') as f:
            for ti in range(self.n_topic):
                top_words = vocab[probs[ti].argsort()[::-1][:n_words]]
                f.write('%d,%f' % (ti, alpha[ti]))
                for word in top_words:
                    f.write(',' + word)
                f.write('\n')


class LdaModel(BaseModel):
    """
    Latent Dirichlet Allocation, parameters of variational EM
    David M. Blei, Andrew Y. Ng, Michael I. Jordan, 2003
    Attributes
    ----------
    log_prob_w: np.array [K, V]
        log p(w|z), every row sums to one in probability space
    """

    def __init__(self, n_topic, n_voca, alpha=1., verbose=False):
        super().__init__(n_topic, n_voca, alpha, verbose)
        self.log_prob_w = np.zeros([n_topic, n_voca])

    def topic_word_probs(self):
        return np.exp(self.log_prob_w)

    def mle(self, ss, estimate_alpha):
        """
        M-step: topic-word log probabilities from the expected counts,
        then optionally a new alpha.
        :param ss: SuffStats
        """
        class_word = ss.class_word
        seen = class_word > 0
        log_word = np.log(np.where(seen, class_word, 1.))
        log_total = np.log(np.where(ss.class_total > 0, ss.class_total, 1.))
        self.log_prob_w = np.where(seen, log_word - log_total[:, np.newaxis], LOG_ZERO)

        if estimate_alpha:
            self.alpha = maximize_alpha(self.alpha, ss, self.verbose)
            if self.verbose:
                print('new alpha = %s' % self.alpha.to_line())

    def other_lines(self):
        return [
            'num_topics {0}'.format(self.n_topic),
            'num_terms {0}'.format(self.n_voca),
            'alpha {0}'.format(self.alpha.to_line()),
        ]

    def save(self, model_root, binary=False, text=True):
        """
        :param model_root: path prefix, writes <root>.beta and <root>.other
        """
        if binary:
            self.save_binary(model_root)
        if text:
            np.savetxt(model_root + '.beta', self.log_prob_w, fmt='%5.10f', delimiter=' ')
        with open(model_root + '.other', 'w') as f:
            f.write('\n'.join(self.other_lines()) + '\n')
        if self.verbose:
            print(colored('Saved: {0}'.format(model_root), 'green'))

    def save_binary(self, model_root):
        """ <root>.beta.bin: big-endian int32 K, V, then float32 log probabilities """
        with open(model_root + '.beta.bin', 'wb') as f:
            np.array([self.n_topic, self.n_voca], dtype='>i4').tofile(f)
            self.log_prob_w.astype('>f4').tofile(f)

    @classmethod
    def load(cls, model_root, verbose=False):
        other = {}
        try:
            with open(model_root + '.other', 'r') as f:
                for line in f:
                    fields = line.split()
                    if fields:
                        other[fields[0]] = fields[1:]
        except OSError as e:
            raise ModelFormatError('cannot read {0}.other: {1}'.format(model_root, e))

        try:
            n_topic = int(other['num_topics'][0])
            n_voca = int(other['num_terms'][0])
            alpha = parse_alpha(other['alpha'])
        except (KeyError, IndexError, ValueError) as e:
            raise ModelFormatError('{0}.other: bad or missing entry {1}'.format(model_root, e))

        model = cls(n_topic, n_voca, alpha, verbose)
        if os.path.exists(model_root + '.beta'):
            try:
                log_prob_w = np.loadtxt(model_root + '.beta', ndmin=2)
            except ValueError as e:
                raise ModelFormatError('{0}.beta: {1}'.format(model_root, e))
        elif os.path.exists(model_root + '.beta.bin'):
            log_prob_w = cls._load_binary(model_root + '.beta.bin')
        else:
            raise ModelFormatError('no {0}.beta or {0}.beta.bin'.format(model_root))

        if log_prob_w.shape != (n_topic, n_voca):
            raise ModelFormatError('{0}: beta has shape {1}, expected {2}'.format(
                model_root, log_prob_w.shape, (n_topic, n_voca)))
        model.log_prob_w = log_prob_w
        if verbose:
            print(colored('Loaded: {0}'.format(model_root), 'green'))
        return model

    @staticmethod
    def _load_binary(filename):
        with open(filename, 'rb') as f:
            shape = np.fromfile(f, dtype='>i4', count=2)
            data = np.fromfile(f, dtype='>f4')
        if len(shape) != 2 or data.size != shape[0] * shape[1]:
            raise ModelFormatError('{0}: truncated binary beta'.format(filename))
        return data.reshape(shape).astype(np.float64)

    def __repr__(self):
        return 'LdaModel(n_topic={0}, n_voca={1}, alpha={2})'.format(self.n_topic, self.n_voca, self.alpha.to_line())
