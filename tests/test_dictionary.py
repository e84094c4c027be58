import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))

import io
import pytest

import dictionary
from dictionary import preprocess, load_dictionary


def redundant_words(words):
    return {text for text, w in words.items() if w.redundant}


def test_substring_read_after_container_is_redundant():
    words = preprocess(["cat", "at"])
    assert list(words) == ["cat", "at"]
    assert redundant_words(words) == {"at"}


def test_substring_read_before_container_is_marked_retroactively():
    words = preprocess(["at", "cat"])
    assert redundant_words(words) == {"at"}


def test_unrelated_words_are_required():
    words = preprocess(["cat", "dog", "cats"])
    assert redundant_words(words) == {"cat"}


def test_duplicate_line_collapses_to_one_required_word():
    words = preprocess(["aa", "aa"])
    assert list(words) == ["aa"]
    assert not words["aa"].redundant


def test_duplicate_of_redundant_word_stays_redundant():
    words = preprocess(["a", "ba", "a"])
    assert list(words) == ["a", "ba"]
    assert redundant_words(words) == {"a"}


def test_empty_word_is_required():
    words = preprocess(["", "cat"])
    assert not words[""].redundant
    assert not words["cat"].redundant


def test_empty_input():
    assert preprocess([]) == {}


def test_network_handles_start_unset():
    w = preprocess(["cat"])["cat"]
    assert w.prefix_node is None and w.suffix_node is None
    assert w.entry_arc is None and w.exit_arc is None


def test_load_dictionary_from_stream_keeps_empty_lines():
    lines = load_dictionary(stream=io.StringIO("cat\n\ndog\n"))
    assert lines == ["cat", "", "dog"]


def test_load_dictionary_strips_carriage_returns():
    lines = load_dictionary(stream=io.StringIO("cat\r\ndog"))
    assert lines == ["cat", "dog"]


def test_load_dictionary_empty_stream():
    assert load_dictionary(stream=io.StringIO("")) == []


def test_load_dictionary_from_stdin(monkeypatch):
    monkeypatch.setattr('sys.stdin', io.StringIO("cats\natsdog\n"))
    assert load_dictionary() == ["cats", "atsdog"]


def test_load_dictionary_from_file(tmp_path):
    path = tmp_path / "words.txt"
    path.write_text("alpha\nbeta\n", encoding="utf-8")
    assert load_dictionary(path=str(path)) == ["alpha", "beta"]


def test_load_dictionary_from_url(monkeypatch):
    class DummyResponse:
        text = "one\ntwo\n"

        def raise_for_status(self):
            pass

    calls = []

    def fake_get(url, timeout=None):
        calls.append(url)
        return DummyResponse()

    monkeypatch.setattr(dictionary.requests, 'get', fake_get)
    assert load_dictionary(url="https://example.org/words.txt") == ["one", "two"]
    assert calls == ["https://example.org/words.txt"]


def test_load_dictionary_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_dictionary(path=str(tmp_path / "missing.txt"))


def test_load_dictionary_file_keeps_undecodable_bytes(tmp_path):
    path = tmp_path / "words.bin"
    path.write_bytes(b"caf\xff\nfe\n")
    assert load_dictionary(path=str(path)) == ["caf\udcff", "fe"]


def test_load_dictionary_stdin_reads_raw_bytes(monkeypatch):
    stdin = io.TextIOWrapper(io.BytesIO(b"na\xefve\r\ncafe\n"), encoding="ascii")
    monkeypatch.setattr('sys.stdin', stdin)
    assert load_dictionary() == ["na\udcefve", "cafe"]
