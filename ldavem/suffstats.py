import numpy as np
from .special import digamma


class SuffStats:

    def __init__(self, n_topic, n_voca, vector_alpha=False):
        """
        Expected counts collected during one E pass, consumed by the M-step.
        Attributes
        ----------
        class_word: np.array [K, V]
            expected count of term v under topic k
        class_total: np.array [K]
            row sums of class_word
        alpha_suffstats: float
            sum over documents of sum_k digamma(gamma_k) - K digamma(sum gamma)
        gammas: list of np.array [K]
            gamma of every document, only kept for a vector prior
        """
        self.n_topic = n_topic
        self.n_voca = n_voca
        self.vector_alpha = vector_alpha

        self.class_word = np.zeros([n_topic, n_voca])
        self.class_total = np.zeros(n_topic)
        self.num_docs = 0
        self.alpha_suffstats = 0.
        self.gammas = []

    def zero_initialize(self):
        self.class_word.fill(0.)
        self.class_total.fill(0.)
        self.num_docs = 0
        self.alpha_suffstats = 0.
        self.gammas = []

    def corpus_initialize(self, corpus, rng, num_init=1, verbose=False):
        """ Seed every topic with the counts of num_init random documents, plus one """
        for k in range(self.n_topic):
            for _ in range(num_init):
                d = int(np.floor(rng.random_sample() * corpus.M))
                if verbose:
                    print('initialized with document %d' % d)
                doc = corpus.get_doc(d)
                self.class_word[k, doc.word_ids] += doc.word_cnt
            self.class_word[k] += 1.
            self.class_total[k] = np.sum(self.class_word[k])

    def random_initialize(self, rng):
        self.class_word += 1. / self.n_voca + rng.random_sample((self.n_topic, self.n_voca))
        self.class_total = np.sum(self.class_word, 1)

    def accumulate(self, doc, gamma, phi):
        """
        :param doc: Document
        :param gamma: np.array [K], variational Dirichlet of doc
        :param phi: np.array [>= doc.length, K], only the first doc.length rows are read
        """
        if self.vector_alpha:
            self.gammas.append(np.array(gamma, dtype=np.float64))
        else:
            self.alpha_suffstats += np.sum(digamma(gamma)) - self.n_topic * digamma(np.sum(gamma))

        # expected counts, N x K
        counts = doc.word_cnt[:, np.newaxis] * phi[:doc.length]
        # term ids are unique within a document
        self.class_word[:, doc.word_ids] += counts.T
        self.class_total += np.sum(counts, 0)
        self.num_docs += 1

    def merge(self, other):
        """ Add the statistics of another pass over disjoint documents """
        if (other.n_topic, other.n_voca, other.vector_alpha) != (self.n_topic, self.n_voca, self.vector_alpha):
            raise ValueError('cannot merge statistics of different shape')
        self.class_word += other.class_word
        self.class_total += other.class_total
        self.num_docs += other.num_docs
        self.alpha_suffstats += other.alpha_suffstats
        self.gammas.extend(other.gammas)
        return self
