import numpy as np
import pytest
from ldavem.alpha import VectorAlpha
from ldavem.corpus import Document, NumCorpus, CorpusFormatError
from ldavem.ldam import LDAM, vbem


def test_vbem_posterior():
    beta = np.full([5, 3], 0.2)
    beta[1] = [0.6, 0.1, 0.1]
    beta = beta / np.sum(beta, 0)
    alpha = np.array([0.2, 0.3, 0.5])
    doc = Document([1, 4], [3, 2])

    gamma, q = vbem(doc, alpha, beta, 20)

    assert q.shape == (2, 3)
    assert np.allclose(np.sum(q, 1), 1.)
    assert np.isclose(np.sum(gamma), np.sum(alpha) + doc.total)
    assert np.all(gamma >= alpha - 1e-10)
    assert np.argmax(q[0]) == 0


def test_vbem_reuses_buffer():
    beta = np.full([4, 2], 0.25)
    q = np.full([6, 2], -1.)
    gamma, out = vbem(Document([0, 3], [1, 1]), np.array([1., 1.]), beta, 5, q)
    assert out is q
    assert np.allclose(q[:2], 0.5)
    assert np.all(q[2:] == -1.)
    assert np.allclose(gamma, 2.)


def test_fit(tmp_path, toy_corpus):
    model = LDAM(3, toy_corpus.n_voca, emmax=10, demmax=20, restart_before=0)
    model.fit(toy_corpus)

    assert model.restarts == 0
    assert isinstance(model.alpha, VectorAlpha)
    assert np.all(model.alpha.values > 0)
    assert model.beta.shape == (toy_corpus.n_voca, 3)
    assert np.allclose(np.sum(model.beta, 0), 1.)
    assert model.gammas.shape == (toy_corpus.M, 3)
    assert np.all(np.isfinite(model.lbs))

    base = str(tmp_path / 'ldam')
    model.save(base)
    assert np.loadtxt(base + '.alpha').shape == (3,)
    assert np.loadtxt(base + '.beta').shape == (toy_corpus.n_voca, 3)


def test_restarts_are_bounded(toy_corpus):
    # every run converges at the third step
    model = LDAM(2, toy_corpus.n_voca, emmax=10, epsilon=10., restart_before=5, max_restarts=2)
    model.fit(toy_corpus)
    assert model.restarts == 2
    assert len(model.lbs) == 3


def test_initialize_sorted_alpha(toy_corpus):
    model = LDAM(4, toy_corpus.n_voca, seed=1)
    model.initialize()
    alpha = model.alpha.values
    assert np.isclose(np.sum(alpha), 1.)
    assert np.all(np.diff(alpha) >= 0)
    assert np.allclose(model.beta, 1. / toy_corpus.n_voca)


def test_fit_empty_corpus():
    with pytest.raises(CorpusFormatError):
        LDAM(2, 3).fit(NumCorpus([], 3))
