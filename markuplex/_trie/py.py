from bisect import bisect_left
from collections.abc import Mapping


class Trie(Mapping):
    """Prefix queries over a mapping of character reference names.

    The names are kept sorted so every query is a bisect; the mapping
    itself is never copied or modified.
    """

    def __init__(self, data):
        if not all(isinstance(x, str) for x in data.keys()):
            raise TypeError("All keys must be strings")

        self._data = data
        self._keys = sorted(data.keys())
        self._longest = max((len(key) for key in self._keys), default=0)

    def __contains__(self, key):
        return key in self._data

    def __len__(self):
        return len(self._data)

    def __iter__(self):
        return iter(self._data)

    def __getitem__(self, key):
        return self._data[key]

    def has_keys_with_prefix(self, prefix):
        i = bisect_left(self._keys, prefix)
        return i < len(self._keys) and self._keys[i].startswith(prefix)

    def longest_prefix(self, prefix):
        """Return the longest key that prefix starts with.

        Raises KeyError when no key does.
        """
        for end in range(min(len(prefix), self._longest), 0, -1):
            if prefix[:end] in self._data:
                return prefix[:end]
        raise KeyError(prefix)
