# -*- coding: utf-8 -*-

import os
import configparser


class SettingsError(ValueError):
    pass


SECTION = 'LDA'

REQUIRED_KEYS = ['var_max_iter', 'var_converged', 'em_max_iter', 'em_converged']

# legacy lda-c settings lines, e.g. "var max iter 20"
LEGACY_PREFIXES = [
    ('var max iter ', 'var_max_iter'),
    ('var convergence ', 'var_converged'),
    ('em max iter ', 'em_max_iter'),
    ('em convergence ', 'em_converged'),
    ('alpha ', 'alpha'),
]


class Settings:

    def __init__(self, var_max_iter=20, var_converged=1e-6, em_max_iter=100, em_converged=1e-4,
                 estimate_alpha=True, lag=10, seed=4357, num_init=1, save_binary=False, save_text=True,
                 time_limit=None, verbose=True):
        """
        Attributes
        ----------
        var_max_iter: int
            cap of the per-document variational loop, -1 runs it until convergence
        var_converged: float
            relative change of the likelihood bound that stops the variational loop
        em_max_iter: int
            cap of EM iterations
        em_converged: float
            relative change of the corpus likelihood that stops EM
        lag: int
            save a checkpoint every lag EM iterations
        time_limit: float or None
            wall-clock seconds after which EM stops at the end of the current iteration
        """
        self.var_max_iter = var_max_iter
        self.var_converged = var_converged
        self.em_max_iter = em_max_iter
        self.em_converged = em_converged
        self.estimate_alpha = estimate_alpha
        self.lag = lag
        self.seed = seed
        self.num_init = num_init
        self.save_binary = save_binary
        self.save_text = save_text
        self.time_limit = time_limit
        self.verbose = verbose

    def lines(self):
        return [
            'var max iter {0}'.format(self.var_max_iter),
            'var convergence {0}'.format(self.var_converged),
            'em max iter {0}'.format(self.em_max_iter),
            'em convergence {0}'.format(self.em_converged),
            'estimate alpha {0}'.format(self.estimate_alpha),
        ]

    def pprint(self):
        for line in self.lines():
            print('\t' + line)


def _convert(key, value, path):
    value = value.strip()
    try:
        if key in ('var_max_iter', 'em_max_iter', 'lag', 'seed', 'num_init'):
            return int(value)
        if key in ('var_converged', 'em_converged'):
            return float(value)
        if key == 'time_limit':
            return float(value) if value.lower() not in ('', 'none') else None
        if key in ('estimate_alpha', 'save_binary', 'save_text', 'verbose'):
            return configparser.ConfigParser.BOOLEAN_STATES[value.lower()]
    except (ValueError, KeyError):
        raise SettingsError('{0}: bad value for {1}: {2!r}'.format(path, key, value))
    return value


def _read_legacy(text):
    raw = {}
    for line in text.splitlines():
        for prefix, key in LEGACY_PREFIXES:
            if line.startswith(prefix):
                raw[key] = line[len(prefix):].strip()
    return raw


def _read_ini(text, path):
    config = configparser.ConfigParser()
    try:
        config.read_string(text, source=path)
    except configparser.Error as e:
        raise SettingsError('{0}: {1}'.format(path, e))
    if SECTION not in config:
        raise SettingsError('{0}: missing section [{1}]'.format(path, SECTION))
    return dict(config[SECTION])


def read_settings(path):
    """
    :param path: INI file with an [LDA] section, or lda-c style "key value" lines
    :return: Settings
    """
    if not os.path.isfile(path):
        raise SettingsError('settings file not found: {0}'.format(path))
    with open(path, 'r', encoding='utf-8') as f:
        text = f.read()

    if any(line.strip().startswith('[') for line in text.splitlines()):
        raw = _read_ini(text, path)
    else:
        raw = _read_legacy(text)

    missing = [key for key in REQUIRED_KEYS if key not in raw]
    if missing:
        raise SettingsError('{0}: missing {1}'.format(path, ', '.join(missing)))

    kwargs = {}
    known = Settings().__dict__
    for key, value in raw.items():
        if key == 'alpha':
            # anything but "fixed" re-estimates alpha
            kwargs['estimate_alpha'] = value.strip() != 'fixed'
        elif key in known:
            kwargs[key] = _convert(key, value, path)
        else:
            raise SettingsError('{0}: unknown key {1}'.format(path, key))

    return Settings(**kwargs)
