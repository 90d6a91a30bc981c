import logging

from spellcast.dictionary import DEFAULT_WORDS, DictionaryService


def test_default_words_are_case_insensitive():
    service = DictionaryService()
    assert len(service) == len(DEFAULT_WORDS)
    assert service.is_valid('cat')
    assert 'Spell' in service
    assert not service.is_valid('')
    assert 'XYZZY' not in service
    assert 42 not in service


def test_load_from_file(tmp_path):
    path = tmp_path / 'words.txt'
    path.write_text('apple\n  Banana \n\nCHERRY\n', encoding='utf-8')
    service = DictionaryService.from_file(path)
    assert service.words == frozenset({'APPLE', 'BANANA', 'CHERRY'})
    assert 'cat' not in service


def test_missing_file_falls_back_to_defaults(tmp_path, caplog):
    with caplog.at_level(logging.ERROR):
        service = DictionaryService.from_file(tmp_path / 'missing.txt')
    assert service.words == frozenset(DEFAULT_WORDS)
    assert 'failed to load' in caplog.text


def test_unset_path_uses_defaults():
    assert DictionaryService.from_file(None).is_valid('wizard')
