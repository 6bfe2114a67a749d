import logging

import pytest

from mtoken import util
from mtoken.mtokenize import LanguageProfile, Tokenizer


def test_load_resource(tmp_path):
    filename = tmp_path / 'nonbreaking_prefix.xx'
    filename.write_text('# comment line\n\nMr\nNo #NUMERIC_ONLY#\n  \ne.g\n', encoding='utf-8')
    prefixes = util.NonbreakingPrefixDict('xx')
    assert prefixes.load_resource(filename, verbose=False)
    assert len(prefixes) == 3
    assert prefixes.kind('Mr') == util.PrefixKind.ALWAYS
    assert prefixes.kind('No') == util.PrefixKind.NUMERIC_ONLY
    assert prefixes.kind('e.g') == util.PrefixKind.ALWAYS
    assert prefixes.kind('mr') is None
    assert '# comment line' not in prefixes


def test_load_resource_missing_file(tmp_path):
    prefixes = util.NonbreakingPrefixDict('xx')
    assert not prefixes.load_resource(tmp_path / 'missing', verbose=False)
    assert len(prefixes) == 0


@pytest.mark.parametrize('lang_code', sorted(LanguageProfile.supported_lang_codes))
def test_bundled_prefix_files(lang_code, caplog):
    with caplog.at_level(logging.WARNING):
        prefixes = util.load_nonbreaking_prefixes(lang_code)
    assert prefixes.lang_code == lang_code
    assert len(prefixes) > 0
    assert prefixes.kind('A') == util.PrefixKind.ALWAYS
    assert not caplog.records


def test_english_prefixes():
    prefixes = util.load_nonbreaking_prefixes('en')
    assert prefixes.kind('Mr') == util.PrefixKind.ALWAYS
    assert prefixes.kind('e.g') == util.PrefixKind.ALWAYS
    assert prefixes.kind('No') == util.PrefixKind.NUMERIC_ONLY
    assert prefixes.kind('pp') == util.PrefixKind.NUMERIC_ONLY
    assert prefixes.kind('May') is None


def test_fallback_to_default_language(caplog):
    with caplog.at_level(logging.WARNING):
        prefixes = util.load_nonbreaking_prefixes('xx')
    assert prefixes.lang_code == 'en'
    assert prefixes.kind('Mr') == util.PrefixKind.ALWAYS
    assert "No non-breaking prefix file available for language 'xx'" in caplog.text


def test_no_prefix_files_at_all(tmp_path, caplog):
    with caplog.at_level(logging.WARNING):
        prefixes = util.load_nonbreaking_prefixes('fr', data_dir=tmp_path)
    assert len(prefixes) == 0
    assert 'Could not open non-breaking prefix file' in caplog.text


def test_custom_data_directory(tmp_path):
    (tmp_path / 'nonbreaking_prefix.en').write_text('Fig\n', encoding='utf-8')
    tok = Tokenizer(lang_code='en', data_dir=tmp_path, escape=False)
    assert tok.tokenize_line('See Fig. 2 and Mr. Bean.') == 'See Fig. 2 and Mr . Bean .\n'


def test_unsupported_language_warns(caplog):
    with caplog.at_level(logging.WARNING):
        tok = Tokenizer(lang_code='xx', escape=False)
    assert "Unsupported language code 'xx'" in caplog.text
    assert tok.tokenize_line("Mr. O'Neil.") == "Mr. O ' Neil .\n"


def test_load_protected_patterns(tmp_path):
    filename = tmp_path / 'patterns.txt'
    filename.write_text('\\d+\n\n<[^>]+>\n', encoding='utf-8')
    assert util.load_protected_patterns(filename) == ['\\d+', '<[^>]+>']


def test_invalid_pattern_error_message():
    error = util.InvalidPatternError('(', 'missing )')
    assert isinstance(error, ValueError)
    assert "Invalid protected pattern '('" in str(error)


@pytest.mark.parametrize('s, n, expected', [
    ('line', 1, 'line'),
    ('line', 2, 'lines'),
    ('prefix', 0, 'prefixes'),
    ('match', 3, 'matches'),
])
def test_reg_plural(s, n, expected):
    assert util.reg_plural(s, n) == expected


def test_join_tokens():
    assert util.join_tokens(['a', '', 'b .']) == 'a b .'


def test_increment_dict_count():
    ht = {}
    util.increment_dict_count(ht, 'NUMBER-OF-LINES')
    assert util.increment_dict_count(ht, 'NUMBER-OF-LINES', 2) == 3
