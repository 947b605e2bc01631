from __future__ import annotations

from typing import Optional


class WordBuilder:
    """
    Accumulate recognized letters into a word.

    A letter is appended once it has been held for ``hold_s`` seconds. Holding
    it longer does not repeat it; the letter has to change (or the hand
    leave) before it can be appended again.
    """

    def __init__(self, hold_s: float = 0.8):
        self.hold_s = hold_s
        self.word = ""
        self._letter: Optional[str] = None
        self._since = 0.0
        self._committed = False

    def update(self, letter: Optional[str], now: float) -> Optional[str]:
        if not letter:
            self._letter = None
            self._committed = False
            return None

        if letter != self._letter:
            self._letter = letter
            self._since = now
            self._committed = False
            return None

        if not self._committed and (now - self._since) >= self.hold_s:
            self._committed = True
            self.word += letter
            return letter
        return None

    def clear(self) -> None:
        self.word = ""
        self._letter = None
        self._committed = False
