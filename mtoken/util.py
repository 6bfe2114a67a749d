#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Non-breaking prefix resources and small helpers for the mtoken tokenizer.
"""
# -*- encoding: utf-8 -*-
from enum import Enum
import logging as log
from pathlib import Path
import re
import sys
from typing import Dict, List, Optional
from . import __version__, last_mod_date


class PrefixKind(Enum):
    """How a non-breaking prefix protects its trailing period."""
    ALWAYS = 'always'              # e.g. Mr.
    NUMERIC_ONLY = 'numeric-only'  # e.g. No. (only before a number such as 'No. 5')


class InvalidPatternError(ValueError):
    """Raised when a caller-supplied protected pattern is not a valid regular expression."""
    def __init__(self, pattern: str, reason: str):
        super().__init__(f"Invalid protected pattern '{pattern}': {reason}")
        self.pattern = pattern
        self.reason = reason


class NonbreakingPrefixDict:
    def __init__(self, lang_code: Optional[str] = None):
        """Dictionary of non-breaking prefixes (without trailing period). Keys are case-sensitive."""
        self.lang_code = lang_code
        self.prefix_dict: Dict[str, PrefixKind] = {}

    def __len__(self) -> int:
        return len(self.prefix_dict)

    def __contains__(self, prefix: str) -> bool:
        return prefix in self.prefix_dict

    def register(self, prefix: str, kind: PrefixKind = PrefixKind.ALWAYS) -> None:
        self.prefix_dict[prefix] = kind

    def kind(self, prefix: str) -> Optional[PrefixKind]:
        """Returns None for prefixes without special treatment."""
        return self.prefix_dict.get(prefix)

    @staticmethod
    def line_without_comment(line: str) -> str:
        if line.lstrip('\uFEFF').startswith('#'):
            return ''
        return line.strip()

    re_numeric_only = re.compile(r'(.*?)\s+#NUMERIC_ONLY#')

    def load_resource(self, filename: Path, verbose: bool = True) -> bool:
        """Loads non-breaking prefixes in Moses format. Returns False if file could not be opened.
        Example input file: data/nonbreaking_prefix.en
            Mr
            No #NUMERIC_ONLY#"""
        try:
            with open(filename, encoding='utf-8') as f_in:
                line_number = 0
                n_entries = 0
                for orig_line in f_in:
                    line_number += 1
                    line = self.line_without_comment(orig_line)
                    if line == '':
                        continue
                    if m := self.re_numeric_only.match(line):
                        self.register(m.group(1), PrefixKind.NUMERIC_ONLY)
                    else:
                        self.register(line, PrefixKind.ALWAYS)
                    n_entries += 1
                if verbose:
                    log.info(f'Loaded {n_entries} {reg_plural("prefix", n_entries)} '
                             f'from {line_number} {reg_plural("line", line_number)} in {filename}')
        except OSError:
            return False
        return True


def default_data_dir() -> Path:
    return Path(__file__).parent / "data"


def load_nonbreaking_prefixes(lang_code: str, data_dir: Optional[Path] = None, default_lang_code: str = 'en',
                              verbose: bool = False) -> NonbreakingPrefixDict:
    """Loads non-breaking prefixes for lang_code, falling back to those of default_lang_code."""
    if data_dir is None:
        data_dir = default_data_dir()
    prefixes = NonbreakingPrefixDict(lang_code)
    if prefixes.load_resource(data_dir / f'nonbreaking_prefix.{lang_code}', verbose=verbose):
        return prefixes
    if lang_code != default_lang_code:
        log.warning(f"No non-breaking prefix file available for language '{lang_code}', "
                    f"using '{default_lang_code}' instead")
        prefixes.lang_code = default_lang_code
        if prefixes.load_resource(data_dir / f'nonbreaking_prefix.{default_lang_code}', verbose=verbose):
            return prefixes
    log.warning(f"Could not open non-breaking prefix file for language '{default_lang_code}' in {data_dir}")
    return prefixes


def load_protected_patterns(filename: Path) -> List[str]:
    """Reads one regular expression per line, ignoring blank lines."""
    with open(filename, encoding='utf-8') as f_in:
        return [line.rstrip('\r\n') for line in f_in if line.strip()]


def increment_dict_count(ht: dict, key: str, increment=1) -> int:
    """For example ht['NUMBER-OF-LINES']"""
    ht[key] = ht.get(key, 0) + increment
    return ht[key]


def join_tokens(tokens: List[str]) -> str:
    """Join tokens with space, ignoring empty tokens"""
    return ' '.join([token for token in tokens if token != ''])


def reg_plural(s: str, n: int) -> str:
    """Form regular English plural form, e.g. 'position' -> 'positions' 'prefix' -> 'prefixes'"""
    if n == 1:
        return s
    elif re.match(r'.*(?:[sx]|[sc]h)$', s):
        return s + 'es'
    else:
        return s + 's'


if __name__ == "__main__":
    sys.stderr.write(f'util.py {__version__} last modified: {last_mod_date}\n')
