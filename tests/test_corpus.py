import numpy as np
import pytest
from ldavem.corpus import (Document, NumCorpus, LabelNumCorpus, CorpusFormatError, read_corpus,
                           LAUTHORS, LTAGS, LYEARS)
from conftest import write_corpus


def test_document():
    doc = Document([3, 1], [2, 5])
    assert doc.length == 2
    assert doc.total == 7
    assert doc.word(0) == 3
    assert doc.count(1) == 5
    with pytest.raises(IndexError):
        doc.word(2)
    with pytest.raises(IndexError):
        doc.count(-1)


def test_document_rejects_repeated_terms_and_negative_counts():
    with pytest.raises(ValueError):
        Document([1, 1, 2], [3, 3, 1])
    with pytest.raises(ValueError):
        Document([0, 2], [1, -1])
    # an empty document is allowed
    assert Document([], []).total == 0


def test_read_corpus(corpus_file):
    corpus = NumCorpus.from_file(corpus_file)
    assert corpus.num_docs() == 6
    assert corpus.num_terms() == 5
    assert corpus.num_words() == 2 + 1 + 4 + 1 + 3 + 1 + 4 + 2 + 5 + 4
    assert corpus.max_doc_length() == 2
    assert list(corpus.get_doc(3).word_ids) == [3, 4]
    with pytest.raises(IndexError):
        corpus.get_doc(6)


def test_read_corpus_readlimit_and_vocabulary_size(corpus_file):
    docs, num_terms = read_corpus(corpus_file, num_terms=10, readlimit=2)
    assert len(docs) == 2
    assert num_terms == 10


@pytest.mark.parametrize('line', [
    'x 1:2',
    '2 1:2',
    '1 1-2',
    '1 a:2',
    '2 1:2 1:3',
    '1 -1:2',
    '1 7:1',
])
def test_format_errors(tmp_path, line):
    path = tmp_path / 'bad.dat'
    path.write_text('1 0:1\n' + line + '\n')
    with pytest.raises(CorpusFormatError) as e:
        read_corpus(str(path), num_terms=5)
    assert e.value.line_no == 2


def test_term_ids_must_be_in_vocabulary():
    with pytest.raises(ValueError):
        NumCorpus([Document([0, 5], [1, 1])], 5)


def test_split_folds_are_disjoint_and_complete():
    docs = [Document([m % 7], [1 + m % 3]) for m in range(100)]
    corpus = NumCorpus(docs, 7)

    seen = []
    for fold in range(10):
        train, test = corpus.split(10, fold, seed=42)
        assert train.M + test.M == 100
        assert set(train.doc_index).isdisjoint(test.doc_index)
        assert set(train.doc_index) | set(test.doc_index) == set(range(100))
        seen.extend(test.doc_index)
        assert train.num_terms() == 7

    assert sorted(seen) == list(range(100))


def test_split_shares_documents(toy_corpus):
    train, test = toy_corpus.split(3, 1, seed=0)
    for view in (train, test):
        for m, doc in enumerate(view.docs):
            assert doc is toy_corpus.get_doc(view.doc_index[m])


def test_split_arguments(toy_corpus):
    with pytest.raises(ValueError):
        toy_corpus.split(1, 0)
    with pytest.raises(ValueError):
        toy_corpus.split(3, 3)


def test_filter_docs(toy_corpus):
    filtered, old2new = toy_corpus.filter_docs(lambda corpus, m: corpus.get_doc(m).length > 1)
    assert filtered.M == 4
    assert list(old2new) == [0, 1, 2, 3, -1, -1]
    assert filtered.get_doc(2) is toy_corpus.get_doc(2)


@pytest.fixture
def label_corpus(tmp_path):
    base = str(tmp_path / 'toy')
    write_corpus(base + '.corpus', [[0], [1, 2], [2], [3]], [[1], [2, 1], [4], [1]])
    with open(base + '.authors', 'w') as f:
        f.write('0 1\n2 : some note\n\n1\n')
    with open(base + '.years', 'w') as f:
        f.write('0\n1\n1\n2\n')
    return LabelNumCorpus.from_filebase(base)


def test_labels(label_corpus):
    assert label_corpus.has_labels(LAUTHORS) == 1
    assert label_corpus.has_labels(LTAGS) == 0
    assert label_corpus.has_labels(42) == -1

    label_corpus.load_all_labels()
    assert label_corpus.has_labels(LAUTHORS) == 2
    assert list(label_corpus.get_doc_labels(LAUTHORS, 1)) == [2]
    assert label_corpus.labels_v[LAUTHORS] == 3
    assert label_corpus.labels_w[LAUTHORS] == 4
    assert list(label_corpus.calc_label_doc_freqs(LYEARS)) == [1, 2, 1]


def test_labels_follow_split_and_filter(label_corpus):
    label_corpus.load_all_labels()
    train, test = label_corpus.split(2, 0, seed=3)
    for view in (train, test):
        for m, orig in enumerate(view.doc_index):
            assert view.get_doc_labels(LYEARS, m) is label_corpus.get_doc_labels(LYEARS, orig)

    reduced, old2new = label_corpus.reduce_empty_labels([LAUTHORS])
    assert reduced.M == 3
    assert old2new[2] == -1
    assert list(reduced.get_doc_labels(LAUTHORS, 2)) == [1]


def test_label_file_too_short(label_corpus):
    with open(label_corpus.label_path(LTAGS), 'w') as f:
        f.write('1\n2\n')
    with pytest.raises(CorpusFormatError):
        label_corpus.load_labels(LTAGS)


def test_empty_corpus_file(tmp_path):
    path = tmp_path / 'empty.dat'
    path.write_text('\n')
    with pytest.raises(CorpusFormatError):
        read_corpus(str(path))
    with pytest.raises(CorpusFormatError):
        NumCorpus([], 3).check_not_empty()
