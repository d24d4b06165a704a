import os
import pytest
from ldavem.main import main, get_parser


def test_estimate_and_infer(tmp_path, settings_file, corpus_file):
    out = str(tmp_path / 'out')
    assert main(['est', '0.5', '2', settings_file, corpus_file, 'seeded', out]) == 0
    assert os.path.exists(os.path.join(out, 'final.beta'))
    assert os.path.exists(os.path.join(out, 'word-assignments.dat'))

    name = str(tmp_path / 'inf')
    assert main(['inf', settings_file, os.path.join(out, 'final'), corpus_file, name]) == 0
    assert os.path.exists(name + '-gamma.dat')


def test_ldam(tmp_path, corpus_file):
    base = str(tmp_path / 'm')
    assert main(['ldam', corpus_file, base, '-k', '2', '-i', '5']) == 0
    assert os.path.exists(base + '.alpha')


def test_errors_return_one(tmp_path, settings_file, corpus_file, capsys):
    bad = tmp_path / 'bad.txt'
    bad.write_text('var max iter 20\n')
    assert main(['est', '0.5', '2', str(bad), corpus_file, 'seeded', str(tmp_path / 'o')]) == 1
    assert 'missing' in capsys.readouterr().err

    assert main(['est', '0.5', '2', settings_file, str(tmp_path / 'none.dat'), 'seeded', str(tmp_path / 'o')]) == 1
    assert main(['inf', settings_file, str(tmp_path / 'nomodel'), corpus_file, str(tmp_path / 'x')]) == 1


def test_parser_requires_command():
    with pytest.raises(SystemExit):
        get_parser().parse_args([])


def test_empty_corpus_returns_one(tmp_path, settings_file, capsys):
    empty = tmp_path / 'empty.dat'
    empty.write_text('')
    assert main(['est', '0.5', '2', settings_file, str(empty), 'seeded', str(tmp_path / 'o')]) == 1
    assert 'no documents' in capsys.readouterr().err
