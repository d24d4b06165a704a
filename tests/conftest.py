import numpy as np
import pytest
from ldavem.corpus import Document, NumCorpus
from ldavem.settings import Settings

# three clusters of documents: terms {1, 2}, {3, 4} and {0}
DOCS_W = [[1, 2], [1, 2], [3, 4], [3, 4], [0], [0]]
DOCS_C = [[2, 1], [4, 1], [3, 1], [4, 2], [5], [4]]


def write_corpus(path, docs_w, docs_c):
    with open(path, 'w') as f:
        for ids, cnts in zip(docs_w, docs_c):
            f.write(' '.join([str(len(ids))] + ['%d:%d' % (i, c) for i, c in zip(ids, cnts)]) + '\n')
    return str(path)


@pytest.fixture
def toy_corpus():
    docs = [Document(w, c) for w, c in zip(DOCS_W, DOCS_C)]
    return NumCorpus(docs, 5)


@pytest.fixture
def corpus_file(tmp_path):
    return write_corpus(tmp_path / 'toy.dat', DOCS_W, DOCS_C)


@pytest.fixture
def settings():
    return Settings(var_max_iter=20, var_converged=1e-6, em_max_iter=10, em_converged=1e-4,
                    estimate_alpha=False, verbose=False)


@pytest.fixture
def settings_file(tmp_path):
    path = tmp_path / 'settings.txt'
    path.write_text('var max iter 20\nvar convergence 1e-6\nem max iter 5\nem convergence 1e-4\nalpha fixed\n')
    return str(path)


@pytest.fixture
def random_log_prob():
    def _make(n_topic, n_voca, seed=0):
        p = np.random.RandomState(seed).random_sample((n_topic, n_voca)) + 0.1
        return np.log(p / np.sum(p, 1)[:, np.newaxis])
    return _make
