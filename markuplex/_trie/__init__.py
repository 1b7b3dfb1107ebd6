from .py import Trie

__all__ = ["Trie"]
