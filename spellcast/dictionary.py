from __future__ import annotations
import logging
from pathlib import Path
from typing import FrozenSet, Iterable, Optional, Union

from .config import Config

logger = logging.getLogger(__name__)

# Minimal word list for development/demo.
# In production point DICTIONARY_PATH at a full newline separated word list.

DEFAULT_WORDS = {
    'ACE','ACT','AGE','AID','AIM','AIR','ALE','ANT','APE','ARC','ARE','ART','ATE',
    'BAT','BED','BEE','BET','BIT','BOA','CAN','CAR','CAT','COT','DEN','DOG','DOT',
    'EAR','EAT','EEL','END','ERA','EVE','FAN','FAT','GAS','GEM','HAT','HEN','ICE',
    'INK','ION','LED','NET','NOT','OAR','OAT','ODE','ONE','ORE','OWL','RAN','RAT',
    'RED','SEA','SET','SIT','SUN','TAN','TEA','TEN','TIE','TOE','TON','USE',
    'BOARD','CAST','GAME','GEMS','RUNE','SPELL','STAR','STONE','TILE','WAND','WORD',
    'LETTER','WIZARD','SHUFFLE','CASTLE','SPELLCAST','ORANGE','RATION','STATION',
}


class DictionaryService:
    def __init__(self, words: Optional[Iterable[str]] = None):
        # Store uppercase words
        source = DEFAULT_WORDS if words is None else words
        self._words: FrozenSet[str] = frozenset(w.strip().upper() for w in source if w and w.strip())

    @classmethod
    def from_file(cls, path: Optional[Union[str, Path]]) -> 'DictionaryService':
        if not path:
            return cls()
        file_path = Path(path)
        try:
            raw = file_path.read_text(encoding='utf-8')
        except OSError as exc:
            logger.error(f"[dictionary] failed to load {file_path}: {exc}; using built-in words")
            return cls()
        service = cls(raw.splitlines())
        logger.info(f"[dictionary] loaded {len(service)} words from {file_path}")
        return service

    @property
    def words(self) -> FrozenSet[str]:
        return self._words

    def is_valid(self, word: str) -> bool:
        if not word:
            return False
        return word.strip().upper() in self._words

    def __contains__(self, word: object) -> bool:
        return isinstance(word, str) and self.is_valid(word)

    def __len__(self) -> int:
        return len(self._words)

# Singleton instance
service = DictionaryService.from_file(Config.DICTIONARY_PATH)
