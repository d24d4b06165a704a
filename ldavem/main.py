# -*- coding: utf-8 -*-

import argparse
import sys
from termcolor import colored
from .alpha import AlphaDivergenceError
from .corpus import NumCorpus, CorpusFormatError
from .lda import LDA
from .ldam import LDAM, CLASS_DEFAULT, EMMAX_DEFAULT, DEMMAX_DEFAULT, EPSILON_DEFAULT
from .model import ModelFormatError
from .settings import read_settings, SettingsError


def estimate(args):
    settings = read_settings(args.settings)
    corpus = NumCorpus.from_file(args.corpus, vocab_path=args.vocab, verbose=settings.verbose)

    print('LDA estimation. Settings:')
    settings.pprint()
    LDA(settings).run_em(args.start, args.directory, corpus, args.k, args.initial_alpha)


def infer(args):
    settings = read_settings(args.settings)

    print('LDA inference. Settings:')
    settings.pprint()
    corpus = NumCorpus.from_file(args.corpus, verbose=settings.verbose)
    LDA(settings).infer(args.model, args.name, corpus)


def ldam(args):
    corpus = NumCorpus.from_file(args.corpus, verbose=True)
    model = LDAM(args.topics, corpus.n_voca, emmax=args.iter, demmax=args.diter, epsilon=args.eps,
                 restart_before=args.restart_before, verbose=True)
    model.fit(corpus)
    model.save(args.model)


def get_parser():
    parser = argparse.ArgumentParser(prog='ldavem', description='Latent Dirichlet Allocation by variational EM')
    sub = parser.add_subparsers(dest='command')
    sub.required = True

    p = sub.add_parser('estimate', aliases=['est'], help='estimate a model')
    p.add_argument('initial_alpha', type=float)
    p.add_argument('k', type=int, help='number of topics')
    p.add_argument('settings')
    p.add_argument('corpus')
    p.add_argument('start', help='seeded, random or the root of a saved model')
    p.add_argument('directory')
    p.add_argument('--vocab', default=None, help='one term per line, for final_top_words.csv')
    p.set_defaults(func=estimate)

    p = sub.add_parser('infer', aliases=['inf'], help='infer topic proportions with a saved model')
    p.add_argument('settings')
    p.add_argument('model', help='model root, without .beta/.other')
    p.add_argument('corpus')
    p.add_argument('name', help='output prefix')
    p.set_defaults(func=infer)

    p = sub.add_parser('ldam', help='VB-EM with a vector alpha')
    p.add_argument('corpus')
    p.add_argument('model', help='output base name')
    p.add_argument('-k', '--topics', type=int, default=CLASS_DEFAULT)
    p.add_argument('-i', '--iter', type=int, default=EMMAX_DEFAULT, help='maximum iterations in outer loop')
    p.add_argument('-d', '--diter', type=int, default=DEMMAX_DEFAULT, help='maximum iterations in VB loop')
    p.add_argument('-e', '--eps', type=float, default=EPSILON_DEFAULT, help='convergence tolerance')
    p.add_argument('--restart-before', type=int, default=5,
                   help='restart when converging before this iteration')
    p.set_defaults(func=ldam)

    return parser


def main(argv=None):
    args = get_parser().parse_args(argv)
    try:
        args.func(args)
    except (SettingsError, CorpusFormatError, ModelFormatError, AlphaDivergenceError, OSError) as e:
        print(colored('Error: {0}'.format(e), 'red'), file=sys.stderr)
        return 1
    print('EXIT.')
    return 0


if __name__ == '__main__':
    sys.exit(main())
