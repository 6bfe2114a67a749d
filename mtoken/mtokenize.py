#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Rule-based tokenizer in the style of the Moses tokenizer (tokenizer.perl), as commonly used to prepare
text for statistical and neural machine translation.
Punctuation is split off words, except where language-specific conventions keep it attached
(abbreviations, contractions, ellipses, numbers such as 5,300).
When using STDIN and/or STDOUT, if might be necessary, particularly for older versions of Python, to do
'export PYTHONIOENCODING=UTF-8' before calling this Python script to ensure UTF-8 encoding.
"""
# -*- encoding: utf-8 -*-
import argparse
import datetime
import functools
import logging as log
from pathlib import Path
import re
import regex
import sys
from typing import Dict, List, Match, Optional, Pattern, Sequence, TextIO, Tuple, Union
from . import __version__, last_mod_date
from . import util

log.basicConfig(level=log.INFO)


class LanguageProfile:
    """Selects the language-specific variants of character splitting and contraction splitting."""
    supported_lang_codes = ('as', 'bn', 'ca', 'cs', 'de', 'el', 'en', 'es', 'et', 'fi', 'fr', 'ga', 'gu', 'hi',
                            'hu', 'is', 'it', 'kn', 'lt', 'lv', 'ml', 'mni', 'mr', 'nl', 'or', 'pa', 'pl', 'pt',
                            'ro', 'ru', 'sk', 'sl', 'so', 'sv', 'ta', 'tdt', 'te', 'yue', 'zh')
    # Characters that stay attached by the general rule, but are split off unless followed by lower case.
    word_internal_chars = {'fi': ':',        # Finnish, Swedish: colon as in EU:n
                           'sv': ':',
                           'tdt': "'",       # Tetun: apostrophe
                           'ca': '·'}   # Catalan: middle dot as in col·legi
    contraction_styles = {'en': 'right',
                          'fr': 'left', 'it': 'left', 'ga': 'left', 'ca': 'left',
                          'so': 'glottal', 'tdt': 'glottal'}

    def __init__(self, lang_code: str = 'en'):
        self.lang_code = lang_code
        self.word_internal_char: Optional[str] = self.word_internal_chars.get(lang_code)
        self.contraction_style: str = self.contraction_styles.get(lang_code, 'default')

    def is_supported(self) -> bool:
        return self.lang_code in self.supported_lang_codes

    def __repr__(self) -> str:
        return f'LanguageProfile({self.lang_code!r})'


class Tokenizer:
    def __init__(self, lang_code: Optional[str] = None, data_dir: Optional[Path] = None,
                 escape: bool = True, aggressive_hyphen_splitting: bool = False,
                 protected_patterns: Optional[Sequence[str]] = None,
                 prefixes: Optional[util.NonbreakingPrefixDict] = None,
                 verbose: Optional[bool] = False):
        """Compiles all regular expressions and loads the non-breaking prefixes once; afterwards read-only,
        so a single Tokenizer can be shared by several threads.
        Raises util.InvalidPatternError for ill-formed protected patterns."""
        self.verbose: bool = bool(verbose)
        self.lang_code: str = lang_code.strip().lower() if lang_code else 'en'
        self.profile = LanguageProfile(self.lang_code)
        if not self.profile.is_supported():
            log.warning(f"Unsupported language code '{self.lang_code}'; applying language-independent rules")
        self.escape: bool = escape
        self.aggressive_hyphen_splitting: bool = aggressive_hyphen_splitting
        self.protected_patterns: List[Pattern[str]] = []
        for protected_pattern in protected_patterns or []:
            try:
                self.protected_patterns.append(regex.compile(protected_pattern))
            except regex.error as error:
                raise util.InvalidPatternError(protected_pattern, str(error)) from error
        if prefixes is None:
            prefixes = util.load_nonbreaking_prefixes(self.lang_code, data_dir=data_dir, verbose=self.verbose)
        self.prefixes: util.NonbreakingPrefixDict = prefixes
        # General rule: split off anything but letters, numbers, whitespace, and . ' ` , -
        # plus any language-specific word-internal character (e.g. Finnish colon).
        word_internal_char = self.profile.word_internal_char
        if word_internal_char and word_internal_char != "'":
            kept_chars = r".'`,\-" + regex.escape(word_internal_char)
        else:
            kept_chars = r".'`,\-"
        self.re_special_char = regex.compile(r'([^\p{L}\p{N}\s' + kept_chars + r'])')
        if word_internal_char:
            self.re_word_internal_char_split = \
                regex.compile('(' + regex.escape(word_internal_char) + r')(?=$|[^\p{Ll}])')
        else:
            self.re_word_internal_char_split = None
        self.contraction_split_function = {'right': self.split_contractions_right,
                                           'left': self.split_contractions_left,
                                           'glottal': self.split_contractions_glottal,
                                           'default': self.split_contractions_default}[self.profile.contraction_style]
        if self.verbose:
            log.info(f'Tokenizer for {self.profile} with {len(self.prefixes)} non-breaking prefixes '
                     f'and {len(self.protected_patterns)} protected '
                     f'{util.reg_plural("pattern", len(self.protected_patterns))}')

    re_whitespace = regex.compile(r'\p{White_Space}+')
    re_control_char = regex.compile(r'[\x00-\x1F]')

    def normalize_whitespace(self, s: str) -> str:
        """Collapses whitespace, pads the line with one space on each side and deletes control characters."""
        if s.endswith('\n'):
            s = s[:-1]
        s = ' ' + self.re_whitespace.sub(' ', s).strip(' ') + ' '
        return self.re_control_char.sub('', s)

    protected_placeholder_prefix = 'THISISPROTECTED'
    # Letter after the counter, so a digit that follows a placeholder in the text never extends its number.
    protected_placeholder_suffix = 'X'

    def protect_patterns(self, s: str) -> Tuple[str, Dict[str, str]]:
        """Replaces matches of protected patterns by placeholders such as THISISPROTECTED000X.
        Each pattern applies to the text as already rewritten by the patterns before it."""
        protected: Dict[str, str] = {}

        def register_protected_match(match: Match[str]) -> str:
            placeholder = f'{self.protected_placeholder_prefix}{len(protected):03d}{self.protected_placeholder_suffix}'
            protected[placeholder] = match.group(0)
            return placeholder

        for protected_pattern in self.protected_patterns:
            s = protected_pattern.sub(register_protected_match, s)
        return s, protected

    @staticmethod
    def restore_protected_patterns(s: str, protected: Dict[str, str]) -> str:
        # Later placeholders first, since a later match may contain an earlier placeholder.
        for placeholder in reversed(list(protected)):
            s = s.replace(placeholder, protected[placeholder])
        return s

    re_ascii_spaces = re.compile(r' +')

    def collapse_spaces(self, s: str) -> str:
        return self.re_ascii_spaces.sub(' ', s).strip(' ')

    def split_special_characters(self, s: str) -> str:
        """Surrounds punctuation and symbols by spaces, respecting language-specific word-internal characters."""
        s = self.re_special_char.sub(r' \1 ', s)
        if self.re_word_internal_char_split:
            s = self.re_word_internal_char_split.sub(r' \1 ', s)
        return s

    re_aggressive_hyphen = regex.compile(r'([\p{L}\p{N}])-(?=[\p{L}\p{N}])')

    def split_hyphens_aggressively(self, s: str) -> str:
        """well-known -> well @-@ known"""
        return self.re_aggressive_hyphen.sub(r'\1 @-@ ', s)

    re_multi_dot = re.compile(r'\.([.]+)')
    re_dotmulti_plus_non_dot = re.compile(r'DOTMULTI\.([^.])')
    re_dotmulti_dot = re.compile(r'DOTMULTI\.')

    def tag_multi_dots(self, s: str) -> str:
        """Replaces period runs (e.g. ellipses) by DOTMULTI-tags that the period splitting leaves alone.
        '...' -> ' DOTMULTI..' -> ' DOTDOTDOTMULTI'"""
        s = self.re_multi_dot.sub(r' DOTMULTI\1', s)
        while self.re_dotmulti_dot.search(s):
            s = self.re_dotmulti_plus_non_dot.sub(r'DOTDOTMULTI \1', s)
            s = self.re_dotmulti_dot.sub('DOTDOTMULTI', s)
        return s

    @staticmethod
    def restore_multi_dots(s: str) -> str:
        while 'DOTDOTMULTI' in s:
            s = s.replace('DOTDOTMULTI', 'DOTMULTI.')
        return s.replace('DOTMULTI', '.')

    re_comma_after_non_number = regex.compile(r'([^\p{N}]),')
    re_comma_before_non_number = regex.compile(r',([^\p{N}])')
    re_comma_after_number_at_end = regex.compile(r'(\p{N}),$')

    def separate_commas(self, s: str) -> str:
        """Splits off commas, except inside numbers such as 5,300"""
        s = self.re_comma_after_non_number.sub(r'\1 , ', s)
        s = self.re_comma_before_non_number.sub(r' , \1', s)
        return self.re_comma_after_number_at_end.sub(r'\1 ,', s)

    re_apostrophe_between_non_letters = regex.compile(r"([^\p{L}])'([^\p{L}])")
    re_apostrophe_non_letter_letter = regex.compile(r"([^\p{L}])'(\p{L})")
    re_apostrophe_non_alnum_letter = regex.compile(r"([^\p{L}\p{N}])'(\p{L})")
    re_apostrophe_letter_non_letter = regex.compile(r"(\p{L})'([^\p{L}])")
    re_apostrophe_between_letters = regex.compile(r"(\p{L})'(\p{L})")
    re_apostrophe_number_s = regex.compile(r"(\p{N})'(s)")

    def split_contractions_right(self, s: str) -> str:
        """English: don't -> don 't; John's -> John 's; 1990's -> 1990 's"""
        s = self.re_apostrophe_between_non_letters.sub(r"\1 ' \2", s)
        s = self.re_apostrophe_non_alnum_letter.sub(r"\1 ' \2", s)
        s = self.re_apostrophe_letter_non_letter.sub(r"\1 ' \2", s)
        s = self.re_apostrophe_between_letters.sub(r"\1 '\2", s)
        return self.re_apostrophe_number_s.sub(r"\1 '\2", s)

    def split_contractions_left(self, s: str) -> str:
        """French, Italian, Irish, Catalan: l'eau -> l' eau"""
        s = self.re_apostrophe_between_non_letters.sub(r"\1 ' \2", s)
        s = self.re_apostrophe_non_letter_letter.sub(r"\1 ' \2", s)
        s = self.re_apostrophe_letter_non_letter.sub(r"\1 ' \2", s)
        return self.re_apostrophe_between_letters.sub(r"\1' \2", s)

    def split_contractions_glottal(self, s: str) -> str:
        """Somali, Tetun: apostrophes between letters are glottal stops and stay word-internal."""
        s = self.re_apostrophe_between_non_letters.sub(r"\1 ' \2", s)
        s = self.re_apostrophe_non_letter_letter.sub(r"\1 ' \2", s)
        return self.re_apostrophe_letter_non_letter.sub(r"\1 ' \2", s)

    @staticmethod
    def split_contractions_default(s: str) -> str:
        return s.replace("'", " ' ")

    def split_contractions(self, s: str) -> str:
        return self.contraction_split_function(s)

    re_period_final_token = re.compile(r'(\S+)\.$')
    re_starts_w_ascii_digit = re.compile(r'[0-9]')
    re_alphabetic = regex.compile(r'\p{Alphabetic}')

    def keeps_period(self, prefix: str, next_token: str) -> bool:
        """Decides whether the period of token prefix+'.' (followed by next_token) is part of an abbreviation."""
        if '.' in prefix and self.re_alphabetic.search(prefix):
            return True  # e.g. U.S.A.
        prefix_kind = self.prefixes.kind(prefix)
        if prefix_kind == util.PrefixKind.ALWAYS:
            return True
        if next_token[0].islower():
            return True
        if prefix_kind == util.PrefixKind.NUMERIC_ONLY and self.re_starts_w_ascii_digit.match(next_token):
            return True
        return False

    re_period_quote_at_end = re.compile(r"\.' ?$")

    def resolve_abbreviations(self, s: str) -> str:
        """Splits off sentence-final periods, keeping periods of abbreviations such as Mr. attached."""
        tokens = s.split()
        n_tokens = len(tokens)
        resolved_tokens = []
        for i, token in enumerate(tokens):
            if m := self.re_period_final_token.match(token):
                prefix = m.group(1)
                if i == n_tokens - 1 or not self.keeps_period(prefix, tokens[i+1]):
                    token = prefix + ' .'
            resolved_tokens.append(token)
        s = util.join_tokens(resolved_tokens)
        # .' at end of sentence
        return self.re_period_quote_at_end.sub(" . '", s, count=1)

    # Order matters: & first, so that entities introduced later are not escaped again.
    escape_substitutions = (('&', '&amp;'),    # escape escape
                            ('|', '&#124;'),   # factor separator
                            ('<', '&lt;'),     # xml
                            ('>', '&gt;'),     # xml
                            ("'", '&apos;'),   # xml
                            ('"', '&quot;'),   # xml
                            ('[', '&#91;'),    # syntax non-terminal
                            (']', '&#93;'))    # syntax non-terminal

    def escape_special_characters(self, s: str) -> str:
        for char, entity in self.escape_substitutions:
            s = s.replace(char, entity)
        return s

    def tokenize_line(self, s: str) -> str:
        """Tokenizes a single line (without embedded newline). Result ends with exactly one newline."""
        s = self.normalize_whitespace(s)
        s, protected = self.protect_patterns(s)
        s = self.collapse_spaces(s)
        s = self.split_special_characters(s)
        if self.aggressive_hyphen_splitting:
            s = self.split_hyphens_aggressively(s)
        s = self.tag_multi_dots(s)
        s = self.separate_commas(s)
        s = self.split_contractions(s)
        s = self.resolve_abbreviations(s)
        s = self.restore_protected_patterns(s, protected)
        s = self.restore_multi_dots(s)
        if self.escape:
            s = self.escape_special_characters(s)
        if not s.endswith('\n'):
            s += '\n'
        return s

    def tokenize_string(self, text: str) -> str:
        """Tokenizes multi-line text line by line. A final newline does not add an extra empty line."""
        lines = text.split('\n')
        if lines[-1] == '':
            lines.pop()
        return ''.join(self.tokenize_line(line) for line in lines)

    def tokenize_lines(self, input_file: TextIO, output_file: TextIO, ht: Optional[dict] = None) -> None:
        """Apply tokenization to a file (or STDIN/STDOUT)."""
        if ht is None:
            ht = {}
        for line in input_file:
            util.increment_dict_count(ht, 'NUMBER-OF-LINES')
            output_file.write(self.tokenize_line(line))

    def tokenize_file(self, input_path: Union[str, Path], output_path: Union[str, Path]) -> None:
        """Reads the whole input file, tokenizes it and writes the result. I/O errors propagate as OSError."""
        text = Path(input_path).read_text(encoding='utf-8')
        Path(output_path).write_text(self.tokenize_string(text), encoding='utf-8')


@functools.lru_cache(maxsize=32)
def cached_tokenizer(lang_code: str, escape: bool, aggressive_hyphen_splitting: bool,
                     protected_patterns: Tuple[str, ...], data_dir: Optional[Path]) -> Tokenizer:
    return Tokenizer(lang_code=lang_code, data_dir=data_dir, escape=escape,
                     aggressive_hyphen_splitting=aggressive_hyphen_splitting,
                     protected_patterns=protected_patterns)


def tokenize_line(text: str, lang_code: str = 'en', escape: bool = True, aggressive_hyphen_splitting: bool = False,
                  protected_patterns: Optional[Sequence[str]] = None, data_dir: Optional[Path] = None) -> str:
    tok = cached_tokenizer(lang_code, escape, aggressive_hyphen_splitting, tuple(protected_patterns or ()), data_dir)
    return tok.tokenize_line(text)


def tokenize(text: str, lang_code: str = 'en', escape: bool = True, aggressive_hyphen_splitting: bool = False,
             protected_patterns: Optional[Sequence[str]] = None, data_dir: Optional[Path] = None) -> str:
    tok = cached_tokenizer(lang_code, escape, aggressive_hyphen_splitting, tuple(protected_patterns or ()), data_dir)
    return tok.tokenize_string(text)


def tokenize_file(input_path: Union[str, Path], output_path: Union[str, Path], lang_code: str = 'en',
                  escape: bool = True, aggressive_hyphen_splitting: bool = False,
                  protected_patterns: Optional[Sequence[str]] = None, data_dir: Optional[Path] = None) -> None:
    tok = cached_tokenizer(lang_code, escape, aggressive_hyphen_splitting, tuple(protected_patterns or ()), data_dir)
    tok.tokenize_file(input_path, output_path)


def main(argv: Optional[List[str]] = None):
    """Wrapper around tokenization that takes care of argument parsing and prints stats to STDERR."""
    # parse arguments
    parser = argparse.ArgumentParser(description='Tokenizes a given text (Moses style)')
    parser.add_argument('-i', '--input', type=argparse.FileType('r', encoding='utf-8', errors='surrogateescape'),
                        default=sys.stdin, metavar='INPUT-FILENAME', help='(default: STDIN)')
    parser.add_argument('-o', '--output', type=argparse.FileType('w', encoding='utf-8', errors='ignore'),
                        default=sys.stdout, metavar='OUTPUT-FILENAME', help='(default: STDOUT)')
    parser.add_argument('-d', '--data_directory', type=str, default=None, help='(default: standard data directory)')
    parser.add_argument('--lc', type=str, default='en',
                        metavar='LANGUAGE-CODE', help="e.g. 'fr' for French (default: 'en')")
    parser.add_argument('--no_escape', action='count', default=0,
                        help='do not escape special characters such as & < > as XML entities')
    parser.add_argument('-a', '--aggressive_hyphen_splitting', action='count', default=0,
                        help='split hyphens between letters/digits, marking them as @-@')
    parser.add_argument('-p', '--protected_patterns', type=str, default=None, metavar='PATTERN-FILENAME',
                        help='file with one regular expression per line; matches are not tokenized')
    parser.add_argument('-v', '--verbose', action='count', default=0, help='write loading info etc. to STDERR')
    parser.add_argument('--version', action='version',
                        version=f'%(prog)s {__version__} last modified: {last_mod_date}')
    args = parser.parse_args(argv)
    lang_code = args.lc
    data_dir = Path(args.data_directory) if args.data_directory else None
    protected_patterns = []
    if args.protected_patterns:
        try:
            protected_patterns = util.load_protected_patterns(Path(args.protected_patterns))
        except OSError as error:
            log.error(f'Could not read protected patterns from {args.protected_patterns}: {error}')
            sys.exit(1)
    try:
        tok = Tokenizer(lang_code=lang_code, data_dir=data_dir, escape=not args.no_escape,
                        aggressive_hyphen_splitting=bool(args.aggressive_hyphen_splitting),
                        protected_patterns=protected_patterns, verbose=bool(args.verbose))
    except util.InvalidPatternError as error:
        log.error(str(error))
        sys.exit(1)

    # Make sure utf-8 encoding is properly set (in older Python3 versions).
    if args.input is sys.stdin and not re.search('utf-8', sys.stdin.encoding or '', re.IGNORECASE):
        log.error(f"Bad STDIN encoding '{sys.stdin.encoding}' as opposed to 'utf-8'. \
                    Suggestion: 'export PYTHONIOENCODING=UTF-8' or use '--input FILENAME' option")
    if args.output is sys.stdout and not re.search('utf-8', sys.stdout.encoding or '', re.IGNORECASE):
        log.error(f"Error: Bad STDOUT encoding '{sys.stdout.encoding}' as opposed to 'utf-8'. \
                    Suggestion: 'export PYTHONIOENCODING=UTF-8' or use '--output FILENAME' option")

    ht = {}
    start_time = datetime.datetime.now()
    if args.verbose:
        log_info = f'Start: {start_time}  Script: mtokenize.py'
        if args.input is not sys.stdin:
            log_info += f'  Input: {args.input.name}'
        if args.output is not sys.stdout:
            log_info += f'  Output: {args.output.name}'
        log_info += f'  Language code: {lang_code}'
        if protected_patterns:
            log_info += f'  Protected patterns: {len(protected_patterns)}'
        log.info(log_info)
    tok.tokenize_lines(input_file=args.input, output_file=args.output, ht=ht)
    args.output.flush()
    end_time = datetime.datetime.now()
    elapsed_time = end_time - start_time
    number_of_lines = ht.get('NUMBER-OF-LINES', 0)
    lines = util.reg_plural('line', number_of_lines)
    if args.verbose:
        log.info(f'End: {end_time}  Elapsed time: {elapsed_time}  Processed {str(number_of_lines)} {lines}')
    elif elapsed_time.seconds >= 10:
        log.info(f'Elapsed time: {elapsed_time.seconds} seconds for {number_of_lines:,} {lines}')


if __name__ == "__main__":
    main()
