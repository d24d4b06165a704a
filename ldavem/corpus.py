# -*- coding: utf-8 -*-

import os
import numpy as np
from termcolor import colored


class CorpusFormatError(ValueError):

    def __init__(self, path, line_no, reason):
        self.path = path
        self.line_no = line_no
        self.reason = reason
        super().__init__('{0}:{1}: {2}'.format(path, line_no, reason))


class Document:
    """
    Sparse bag of words: unique term ids and their counts.
    Attributes
    ----------
    length: int
        number of distinct terms
    total: int
        number of tokens, sum of counts
    """

    def __init__(self, word_ids, word_cnt):
        self.word_ids = np.array(word_ids, dtype=np.int64)
        self.word_cnt = np.array(word_cnt, dtype=np.int64)
        if self.word_ids.shape != self.word_cnt.shape or self.word_ids.ndim != 1:
            raise ValueError('word_ids and word_cnt must be 1-d arrays of equal length')
        if len(np.unique(self.word_ids)) != len(self.word_ids):
            raise ValueError('duplicate term id')
        if np.any(self.word_cnt < 0):
            raise ValueError('negative term count')
        self.word_ids.setflags(write=False)
        self.word_cnt.setflags(write=False)

        self.length = len(self.word_ids)
        self.total = int(np.sum(self.word_cnt))

    def _check(self, n):
        if not 0 <= n < self.length:
            raise IndexError('token position {0} not in [0, {1})'.format(n, self.length))

    def word(self, n):
        self._check(n)
        return int(self.word_ids[n])

    def count(self, n):
        self._check(n)
        return int(self.word_cnt[n])

    def __repr__(self):
        return 'Document(length={0}, total={1})'.format(self.length, self.total)


class BaseCorpus:

    def __init__(self, docs, num_terms, vocab=None, doc_index=None):
        """
        Read-only collection of documents over a fixed vocabulary.
        Views created by split() and filter_docs() share the Document objects.
        Attributes
        ----------
        :docs: list of Document
        :n_voca: vocabulary size V, every term id is in [0, V)
        :M: number of documents
        :W: number of tokens in the corpus
        :doc_index: index of each document in the corpus this one was cut from
        """
        self.docs = list(docs)
        self.n_voca = int(num_terms)
        self.M = len(self.docs)
        self.vocab = np.array(vocab) if vocab is not None else None

        self.Nm = np.array([doc.total for doc in self.docs], dtype=np.int64)
        self.W = int(np.sum(self.Nm))

        if doc_index is None:
            doc_index = np.arange(self.M)
        self.doc_index = np.asarray(doc_index, dtype=np.int64)

        for m, doc in enumerate(self.docs):
            if doc.length and (doc.word_ids.min() < 0 or doc.word_ids.max() >= self.n_voca):
                raise ValueError('document {0} has term ids outside [0, {1})'.format(m, self.n_voca))

    def num_docs(self):
        return self.M

    def num_terms(self):
        return self.n_voca

    def num_words(self):
        return self.W

    def get_doc(self, i):
        if not 0 <= i < self.M:
            raise IndexError('document {0} not in [0, {1})'.format(i, self.M))
        return self.docs[i]

    def max_doc_length(self):
        return max((doc.length for doc in self.docs), default=0)

    def __len__(self):
        return self.M

    def __iter__(self):
        return iter(self.docs)

    def _subset(self, indices):
        indices = np.asarray(indices, dtype=np.int64)
        return self.__class__(
            docs=[self.docs[m] for m in indices],
            num_terms=self.n_voca,
            vocab=self.vocab,
            doc_index=self.doc_index[indices],
        )

    def check_not_empty(self):
        if self.M == 0:
            raise CorpusFormatError(getattr(self, 'data_filebase', None) or '<corpus>', 0, 'no documents')

    def split_starts(self, order):
        return [i * self.M // order for i in range(order + 1)]

    def split(self, order, split, seed=None):
        """
        Cross-validation split without copying documents.
        :param order: number of folds
        :param split: index of the fold used as the test set
        :param seed: seed of the document permutation, the same seed gives the same folds
        :return: tuple (train, test)
        """
        if order < 2:
            raise ValueError('order must be at least 2, got {0}'.format(order))
        if not 0 <= split < order:
            raise ValueError('split must be in [0, {0}), got {1}'.format(order, split))

        perm = np.random.RandomState(seed).permutation(self.M)
        starts = self.split_starts(order)

        test_idx = perm[starts[split]:starts[split + 1]]
        train_idx = np.concatenate((perm[:starts[split]], perm[starts[split + 1]:]))
        return self._subset(train_idx), self._subset(test_idx)

    def filter_docs(self, predicate, seed=None):
        """
        :param predicate: callable (corpus, m) -> bool, True keeps document m
        :param seed: if given, the kept documents are put in a random order
        :return: tuple (filtered corpus, old2new) where old2new[m] is -1 for dropped documents
        """
        order = np.arange(self.M) if seed is None else np.random.RandomState(seed).permutation(self.M)
        kept = np.array([m for m in order if predicate(self, m)], dtype=np.int64)

        old2new = np.full(self.M, -1, dtype=np.int64)
        old2new[kept] = np.arange(len(kept))
        return self._subset(kept), old2new


def read_vocab(path):
    with open(path, 'r', encoding='utf-8') as f:
        return [line.strip() for line in f]


def parse_doc_line(line, path, line_no, num_terms=None):
    """
    :param line: str "count id:freq id:freq ..."
    :return: Document
    """
    fields = line.split()
    try:
        length = int(fields[0])
    except ValueError:
        raise CorpusFormatError(path, line_no, 'bad term count {0!r}'.format(fields[0]))

    pairs = fields[1:]
    if length != len(pairs):
        raise CorpusFormatError(path, line_no, 'declared {0} terms but found {1}'.format(length, len(pairs)))

    word_ids, word_cnt = [], []
    for pair in pairs:
        wid, sep, cnt = pair.partition(':')
        if not sep:
            raise CorpusFormatError(path, line_no, 'expected id:freq, got {0!r}'.format(pair))
        try:
            wid, cnt = int(wid), int(cnt)
        except ValueError:
            raise CorpusFormatError(path, line_no, 'non-integer pair {0!r}'.format(pair))
        if wid < 0 or cnt < 0:
            raise CorpusFormatError(path, line_no, 'negative value in {0!r}'.format(pair))
        if num_terms is not None and wid >= num_terms:
            raise CorpusFormatError(path, line_no, 'term id {0} >= vocabulary size {1}'.format(wid, num_terms))
        word_ids.append(wid)
        word_cnt.append(cnt)

    if len(set(word_ids)) != len(word_ids):
        raise CorpusFormatError(path, line_no, 'duplicate term id')
    return Document(word_ids, word_cnt)


def read_corpus(path, num_terms=None, readlimit=-1):
    """
    Read a corpus in lda-c format, one document per line.
    :param num_terms: vocabulary size, max id + 1 if not given
    :param readlimit: number of documents to read, -1 for all
    :return: tuple (list of Document, num_terms)
    """
    docs = []
    with open(path, 'r', encoding='utf-8') as f:
        for line_no, line in enumerate(f, 1):
            if 0 <= readlimit <= len(docs):
                break
            if not line.strip():
                continue
            docs.append(parse_doc_line(line, path, line_no, num_terms))

    if not docs:
        raise CorpusFormatError(path, 0, 'no documents')

    if num_terms is None:
        num_terms = 1 + max((int(doc.word_ids.max()) for doc in docs if doc.length), default=-1)
    return docs, num_terms


class NumCorpus(BaseCorpus):

    def __init__(self, docs, num_terms, vocab=None, doc_index=None, data_filebase=None):
        super().__init__(docs, num_terms, vocab, doc_index)
        self.data_filebase = data_filebase

    def _subset(self, indices):
        sub = super()._subset(indices)
        sub.data_filebase = self.data_filebase
        return sub

    @classmethod
    def from_file(cls, path, num_terms=None, readlimit=-1, vocab_path=None, verbose=False):
        docs, num_terms = read_corpus(path, num_terms, readlimit)
        vocab = read_vocab(vocab_path) if vocab_path else None
        corpus = cls(docs, num_terms, vocab=vocab, data_filebase=os.path.splitext(path)[0])
        if verbose:
            print(colored('Loaded: {0} (M = {1}, V = {2}, W = {3})'.format(
                path, corpus.M, corpus.n_voca, corpus.W), 'green'))
        return corpus


# rows of the label data, and the file extension of each kind
LAUTHORS, LCATEGORIES, LTAGS, LVOLS, LYEARS, LREFERENCES, LMENTIONS = range(7)
LABEL_EXTENSIONS = ['.authors', '.labels', '.tags', '.vols', '.years', '.cite', '.ment']
LABEL_NAMES = ['authors', 'labels', 'tags', 'volumes', 'years', 'citations', 'mentionings']


class LabelNumCorpus(NumCorpus):

    def __init__(self, docs, num_terms, vocab=None, doc_index=None, data_filebase=None):
        """
        NumCorpus with document metadata (authors, categories, ...).
        Attributes
        ----------
        :labels: list by kind, None or list of int arrays (one per document)
        :labels_v: range of label ids per kind
        :labels_w: total number of labels per kind
        """
        super().__init__(docs, num_terms, vocab, doc_index, data_filebase)
        self.labels = [None] * len(LABEL_EXTENSIONS)
        self.labels_v = [0] * len(LABEL_EXTENSIONS)
        self.labels_w = [0] * len(LABEL_EXTENSIONS)

    @classmethod
    def from_filebase(cls, data_filebase, num_terms=None, readlimit=-1, verbose=False):
        """
        :param data_filebase: path without extension, terms are read from <base>.corpus
        """
        docs, num_terms = read_corpus(data_filebase + '.corpus', num_terms, readlimit)
        corpus = cls(docs, num_terms, data_filebase=data_filebase)
        if verbose:
            print(colored('Loaded: {0}.corpus (M = {1}, V = {2}, W = {3})'.format(
                data_filebase, corpus.M, corpus.n_voca, corpus.W), 'green'))
        return corpus

    def label_path(self, kind):
        return self.data_filebase + LABEL_EXTENSIONS[kind]

    def has_labels(self, kind):
        """
        :return: -1 for an illegal kind, 0 if there is no label file, 1 if it exists, 2 if loaded
        """
        if not 0 <= kind < len(LABEL_EXTENSIONS):
            return -1
        if self.labels[kind] is not None:
            return 2
        if self.data_filebase and os.path.exists(self.label_path(kind)):
            return 1
        return 0

    def load_labels(self, kind, verbose=False):
        path = self.label_path(kind)
        data = []
        with open(path, 'r', encoding='utf-8') as f:
            for line_no, line in enumerate(f, 1):
                if len(data) == self.M:
                    break
                # drop trailing info
                line = line.split(' : ')[0].strip()
                try:
                    data.append(np.array([int(x) for x in line.split()], dtype=np.int64))
                except ValueError:
                    raise CorpusFormatError(path, line_no, 'non-integer label')

        if len(data) != self.M:
            raise CorpusFormatError(path, len(data), 'expected {0} label lines'.format(self.M))

        self.labels[kind] = data
        self.labels_w[kind] = sum(len(a) for a in data)
        self.labels_v[kind] = 1 + max((int(a.max()) for a in data if len(a)), default=-1)
        if verbose:
            print('labels loaded: {0}: V = {1}, W = {2}'.format(
                LABEL_NAMES[kind], self.labels_v[kind], self.labels_w[kind]))

    def load_all_labels(self, verbose=False):
        for kind in range(len(LABEL_EXTENSIONS)):
            if self.has_labels(kind) == 1:
                self.load_labels(kind, verbose)

    def get_doc_labels(self, kind, m=None):
        if self.labels[kind] is None:
            raise KeyError('labels {0} not loaded'.format(LABEL_NAMES[kind]))
        if m is None:
            return self.labels[kind]
        return self.labels[kind][m]

    def calc_label_doc_freqs(self, kind):
        df = np.zeros(self.labels_v[kind], dtype=np.int64)
        for a in self.get_doc_labels(kind):
            df[a] += 1
        return df

    def _subset(self, indices):
        sub = super()._subset(indices)
        for kind, data in enumerate(self.labels):
            if data is None:
                continue
            sub.labels[kind] = [data[m] for m in indices]
            sub.labels_v[kind] = self.labels_v[kind]
            sub.labels_w[kind] = sum(len(a) for a in sub.labels[kind])
        return sub

    def reduce_empty_labels(self, kinds):
        """
        Drop documents without labels of any of the given kinds.
        :return: tuple (filtered corpus, old2new)
        """
        return self.filter_docs(lambda corpus, m: all(len(corpus.labels[kind][m]) for kind in kinds))
