from __future__ import annotations
from typing import Dict

LETTERS = 'ABCDEFGHIJKLMNOPQRSTUVWXYZ'
VOWELS = 'AEIOU'

LETTER_VALUES: Dict[str, int] = {
    'A': 1, 'B': 4, 'C': 5, 'D': 3, 'E': 1, 'F': 5, 'G': 3, 'H': 4, 'I': 1,
    'J': 7, 'K': 6, 'L': 3, 'M': 4, 'N': 2, 'O': 1, 'P': 4, 'Q': 8, 'R': 2,
    'S': 2, 'T': 2, 'U': 4, 'V': 5, 'W': 5, 'X': 7, 'Y': 4, 'Z': 8,
}

# Letter bag supply (standard Scrabble distribution without blanks)
LETTER_COUNTS: Dict[str, int] = {
    'A': 9, 'B': 2, 'C': 2, 'D': 4, 'E': 12, 'F': 2, 'G': 3, 'H': 2, 'I': 9,
    'J': 1, 'K': 1, 'L': 4, 'M': 2, 'N': 6, 'O': 8, 'P': 2, 'Q': 1, 'R': 6,
    'S': 4, 'T': 6, 'U': 4, 'V': 2, 'W': 2, 'X': 1, 'Y': 2, 'Z': 1,
}

BOARD_COLS = 5
BOARD_ROWS = 5

MIN_VOWELS = 7
GEM_TARGET = 10
TRIPLE_CHANCE = 0.12

LONG_WORD_THRESHOLD = 6
LONG_WORD_BONUS = 10

DEFAULT_ROUND_COUNT = 5
ROUND_OPTIONS = (3, 5)

STARTING_GEMS = 3
SHUFFLE_COST = 1
SWAP_COST = 3

LOG_LIMIT = 50
NAME_MAX_LENGTH = 32
