import numpy as np
from .special import digamma, lgamma, log_normalize


def lda_inference(doc, model, var_gamma, phi, var_converged, var_max_iter):
    """
    Variational E-step for one document. Updates var_gamma and phi in place.
    :param doc: Document
    :param model: LdaModel, read only
    :param var_gamma: np.array [K], output
    :param phi: np.array [>= doc.length, K], output, reused across documents
    :param var_converged: relative change of the bound that stops the loop
    :param var_max_iter: iteration cap, -1 for none
    :return: likelihood bound of doc
    """
    K = model.n_topic
    N = doc.length
    alpha = model.alpha.vector(K)
    # N x K
    log_prob = model.log_prob_w[:, doc.word_ids].T

    var_gamma[:] = alpha + doc.total / K
    phi[:N] = 1. / K

    converged = 1.
    likelihood = likelihood_old = 0.
    var_iter = 0
    while converged > var_converged and (var_iter < var_max_iter or var_max_iter == -1):
        var_iter += 1
        digamma_gam = digamma(var_gamma)
        for n in range(N):
            oldphi = phi[n].copy()
            phi[n] = np.exp(log_normalize(digamma_gam + log_prob[n]))
            var_gamma += doc.word_cnt[n] * (phi[n] - oldphi)

        likelihood = compute_likelihood(doc, model, phi, var_gamma)
        if var_iter > 1:
            # an empty document has a bound of exactly zero
            converged = (likelihood_old - likelihood) / likelihood_old if likelihood_old else 0.
        likelihood_old = likelihood

    return likelihood


def compute_likelihood(doc, model, phi, var_gamma):
    """
    Evidence lower bound of one document.
    Cells with phi == 0 add nothing.
    """
    K = model.n_topic
    N = doc.length
    alpha = model.alpha.vector(K)

    dig = digamma(var_gamma)
    var_gamma_sum = np.sum(var_gamma)
    e_log_theta = dig - digamma(var_gamma_sum)

    likelihood = model.alpha.lgamma_norm(K) - lgamma(var_gamma_sum)
    likelihood += np.sum((alpha - 1) * e_log_theta + lgamma(var_gamma) - (var_gamma - 1) * e_log_theta)

    phi_d = phi[:N]
    nz = phi_d > 0
    log_phi = np.log(np.where(nz, phi_d, 1.))
    log_prob = model.log_prob_w[:, doc.word_ids].T
    terms = phi_d * (e_log_theta - log_phi + log_prob)
    likelihood += np.sum(doc.word_cnt[:, np.newaxis] * np.where(nz, terms, 0.))
    return float(likelihood)


def word_assignments(doc, phi):
    """ Most probable topic of every distinct term of doc """
    return np.argmax(phi[:doc.length], 1)
