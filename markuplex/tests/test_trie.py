import threading

import pytest

from markuplex._trie import Trie
from markuplex.constants import entities


@pytest.fixture
def trie():
    return Trie({"not": "\xac", "not;": "\xac", "notin;": "\u2209", "nu;": "\u03bd"})


def test_mapping(trie):
    assert len(trie) == 4
    assert "not" in trie
    assert trie["nu;"] == "\u03bd"
    assert set(trie) == {"not", "not;", "notin;", "nu;"}


def test_has_keys_with_prefix(trie):
    assert trie.has_keys_with_prefix("n")
    assert trie.has_keys_with_prefix("noti")
    assert not trie.has_keys_with_prefix("notx")
    assert trie.has_keys_with_prefix("nu")
    assert not trie.has_keys_with_prefix("z")


def test_longest_prefix(trie):
    assert trie.longest_prefix("notin;") == "notin;"
    assert trie.longest_prefix("notit") == "not"
    assert trie.longest_prefix("not;x") == "not;"
    with pytest.raises(KeyError):
        trie.longest_prefix("no")
    with pytest.raises(KeyError):
        trie.longest_prefix("")


def test_rejects_non_string_keys():
    with pytest.raises(TypeError):
        Trie({1: "x"})


def test_shared_between_threads():
    trie = Trie(entities)
    names = ["notin;", "amp;", "NotNestedGreaterGreater;", "nu;", "AMP", "lt;"]
    misses = []

    def walk():
        for _ in range(200):
            for name in names:
                for end in range(1, len(name) + 1):
                    if not trie.has_keys_with_prefix(name[:end]):
                        misses.append(name[:end])

    threads = [threading.Thread(target=walk) for _ in range(6)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()
    assert misses == []
