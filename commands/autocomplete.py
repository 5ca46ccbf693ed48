"""
Auto Completer
--------------
Prefix lookup over the set of known command names.

The word list is an immutable tuple replaced in a single assignment, so a
concurrent reader sees either the old list or the new one, never a mix.
"""

from typing import Iterable, List, Tuple


class AutoCompleter:
    """
    Case-insensitive prefix completion.

    Order of candidates follows the order of the last update_word_list call.
    """

    def __init__(self, words: Iterable[str] = ()):
        self._words: Tuple[str, ...] = ()
        self.update_word_list(words)

    def update_word_list(self, words: Iterable[str]) -> None:
        """Replace the whole word list. Case-insensitive duplicates keep the first."""
        seen = set()
        unique = []
        for word in words:
            key = word.casefold()
            if key in seen:
                continue
            seen.add(key)
            unique.append(word)
        self._words = tuple(unique)

    @property
    def words(self) -> Tuple[str, ...]:
        return self._words

    def get_candidates(self, prefix: str) -> List[str]:
        """Every known word starting with prefix, ignoring case."""
        words = self._words
        folded = prefix.casefold()
        return [w for w in words if w.casefold().startswith(folded)]

    def auto_complete_word(self, text: str) -> str:
        """
        Longest common prefix of the candidates for text.

        Extends one character at a time while every candidate agrees with
        the first candidate (ignoring case). The returned casing is that of
        the first candidate. Returns "" when nothing matches.
        """
        candidates = self.get_candidates(text)
        if not candidates:
            return ""

        reference = candidates[0]
        length = 0

        for i, ch in enumerate(reference):
            key = ch.casefold()
            if any(len(c) <= i or c[i].casefold() != key for c in candidates):
                break
            length = i + 1

        return reference[:length]

    def __len__(self) -> int:
        return len(self._words)

    def __repr__(self) -> str:
        return f"AutoCompleter(words={len(self._words)})"
