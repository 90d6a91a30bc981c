from __future__ import annotations
import random
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, Optional

from .constants import LETTER_COUNTS, LETTERS, VOWELS
from .schemas import Tile

LetterFilter = Callable[[str], bool]


@dataclass
class Draw:
    letter: str
    from_bag: bool


def letter_key(letter: Optional[str]) -> str:
    return (letter or '').strip()[:1].upper()


def is_vowel(letter: Optional[str]) -> bool:
    key = letter_key(letter)
    return bool(key) and key in VOWELS


class LetterBag:
    """Weighted letter supply, drawn without replacement.

    Counts are keyed by the uppercase first character of a letter. When the
    (filtered) supply runs dry, draws fall back to a uniform pick from the
    alphabet and are reported as not coming from the bag.
    """

    def __init__(self, counts: Optional[Dict[str, int]] = None, rng: Optional[random.Random] = None):
        source = LETTER_COUNTS if counts is None else counts
        self._counts: Dict[str, int] = {}
        for letter, count in source.items():
            key = letter_key(letter)
            if key:
                self._counts[key] = max(0, int(count or 0))
        self.rng = rng or random.Random()

    @classmethod
    def for_board(
        cls,
        tiles: Iterable[Tile],
        exclude_ids: Iterable[str] = (),
        rng: Optional[random.Random] = None,
    ) -> 'LetterBag':
        """Rebuild the remaining supply from the bag-tracked letters on a board.

        Tiles in ``exclude_ids`` are treated as released back to the bag.
        """
        bag = cls(rng=rng)
        excluded = set(exclude_ids)
        for tile in tiles:
            if tile.id in excluded or not tile.fromBag:
                continue
            bag.consume(tile.letter)
        return bag

    @property
    def total(self) -> int:
        return sum(self._counts.values())

    def count(self, letter: str) -> int:
        return self._counts.get(letter_key(letter), 0)

    def counts(self) -> Dict[str, int]:
        return dict(self._counts)

    def consume(self, letter: str) -> bool:
        key = letter_key(letter)
        current = self._counts.get(key, 0)
        if current <= 0:
            return False
        self._counts[key] = current - 1
        return True

    def release(self, letter: str) -> None:
        key = letter_key(letter)
        if not key:
            return
        self._counts[key] = self._counts.get(key, 0) + 1

    def draw(self, letter_filter: Optional[LetterFilter] = None) -> Draw:
        entries = [
            (letter, count) for letter, count in self._counts.items()
            if count > 0 and (letter_filter is None or letter_filter(letter))
        ]
        total = sum(count for _, count in entries)
        if total > 0:
            target = self.rng.random() * total
            cumulative = 0
            chosen = entries[-1][0]
            for letter, count in entries:
                cumulative += count
                if target < cumulative:
                    chosen = letter
                    break
            self.consume(chosen)
            return Draw(chosen, True)
        return Draw(self._fallback_letter(letter_filter), False)

    def _fallback_letter(self, letter_filter: Optional[LetterFilter]) -> str:
        pool = [ch for ch in LETTERS if letter_filter is None or letter_filter(ch)]
        return self.rng.choice(pool or LETTERS)
