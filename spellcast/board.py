from __future__ import annotations
import random
from typing import Dict, Iterable, List, Optional, Sequence

from .constants import BOARD_COLS, BOARD_ROWS, GEM_TARGET, MIN_VOWELS, TRIPLE_CHANCE
from .letter_bag import LetterBag, is_vowel
from .schemas import GameState, Multiplier, Tile


def tile_id(x: int, y: int) -> str:
    return f'{x}-{y}'


def count_vowels(tiles: Iterable[Tile]) -> int:
    return sum(1 for tile in tiles if is_vowel(tile.letter))


def count_gems(tiles: Iterable[Tile]) -> int:
    return sum(1 for tile in tiles if tile.hasGem)


def build_tiles(rng: random.Random, multipliers_enabled: bool = False) -> List[Tile]:
    bag = LetterBag(rng=rng)
    tiles: List[Tile] = []
    for y in range(BOARD_ROWS):
        for x in range(BOARD_COLS):
            draw = bag.draw()
            tiles.append(Tile(id=tile_id(x, y), x=x, y=y, letter=draw.letter, fromBag=draw.from_bag))
    ensure_minimum_vowels(tiles, bag, rng)
    ensure_gem_quota(tiles, rng)
    if multipliers_enabled:
        ensure_letter_multiplier(tiles, rng)
    return tiles


def ensure_minimum_vowels(
    tiles: List[Tile],
    bag: LetterBag,
    rng: random.Random,
    target: int = MIN_VOWELS,
    preferred: Optional[Sequence[Tile]] = None,
) -> int:
    """Redraw vowels into consonant tiles until the board holds ``target`` vowels.

    ``preferred`` tiles are converted first; the rest of the board is only
    touched when they cannot cover the shortfall. Returns the number of tiles
    converted.
    """
    if not tiles:
        return 0
    missing = min(target, len(tiles)) - count_vowels(tiles)
    if missing <= 0:
        return 0
    first = [tile for tile in (preferred or ()) if not is_vowel(tile.letter)]
    first_ids = {tile.id for tile in first}
    rest = [tile for tile in tiles if tile.id not in first_ids and not is_vowel(tile.letter)]
    rng.shuffle(first)
    rng.shuffle(rest)
    converted = 0
    for tile in (first + rest)[:missing]:
        if tile.fromBag:
            bag.release(tile.letter)
        draw = bag.draw(is_vowel)
        tile.letter = draw.letter
        tile.fromBag = draw.from_bag
        converted += 1
    return converted


def ensure_gem_quota(tiles: List[Tile], rng: random.Random, target: int = GEM_TARGET) -> int:
    if not tiles:
        return 0
    missing = min(target, len(tiles)) - count_gems(tiles)
    if missing <= 0:
        return 0
    pool = [tile for tile in tiles if not tile.hasGem]
    rng.shuffle(pool)
    for tile in pool[:missing]:
        tile.hasGem = True
    return min(missing, len(pool))


def ensure_letter_multiplier(tiles: List[Tile], rng: random.Random) -> Optional[Tile]:
    if any(tile.multiplier != 'none' for tile in tiles):
        return None
    candidates = [tile for tile in tiles if tile.multiplier == 'none']
    if not candidates:
        return None
    target = rng.choice(candidates)
    target.multiplier = 'tripleLetter' if rng.random() < TRIPLE_CHANCE else 'doubleLetter'
    return target


def apply_round_word_tile(game: GameState) -> None:
    target_id = game.roundWordTileId if game.wordMultiplierEnabled else None
    for tile in game.tiles:
        tile.wordMultiplier = 'doubleWord' if target_id and tile.id == target_id else 'none'


def select_round_word_tile(game: GameState, rng: random.Random, force_new: bool = False) -> None:
    if not game.wordMultiplierEnabled:
        game.roundWordTileId = None
        apply_round_word_tile(game)
        return
    if not game.tiles:
        return
    candidates = list(game.tiles)
    if force_new and game.roundWordTileId and len(candidates) > 1:
        candidates = [tile for tile in candidates if tile.id != game.roundWordTileId] or list(game.tiles)
    game.roundWordTileId = rng.choice(candidates).id
    apply_round_word_tile(game)


def refresh_tiles(game: GameState, used: Sequence[Tile], rng: random.Random) -> None:
    """Redraw the tiles of a scored word, leaving the rest of the board alone."""
    used_ids = [tile.id for tile in used]
    bag = LetterBag.for_board(game.tiles, exclude_ids=used_ids, rng=rng)
    for tile in used:
        draw = bag.draw()
        tile.letter = draw.letter
        tile.fromBag = draw.from_bag
        tile.hasGem = False
        tile.multiplier = 'none'
    ensure_minimum_vowels(game.tiles, bag, rng, preferred=used)
    ensure_gem_quota(game.tiles, rng)
    apply_round_word_tile(game)


def shuffle_tiles(game: GameState, rng: random.Random) -> None:
    contents = [(tile.letter, tile.hasGem, tile.multiplier, tile.fromBag) for tile in game.tiles]
    # random.shuffle is an in-place Fisher-Yates
    rng.shuffle(contents)
    for tile, (letter, has_gem, multiplier, from_bag) in zip(game.tiles, contents):
        tile.letter = letter
        tile.hasGem = has_gem
        tile.multiplier = multiplier
        tile.fromBag = from_bag
    if game.wordMultiplierEnabled and not game.roundWordTileId and game.tiles:
        game.roundWordTileId = rng.choice(game.tiles).id
    apply_round_word_tile(game)


def snapshot_multipliers(tiles: Iterable[Tile]) -> Dict[str, Multiplier]:
    return {tile.id: tile.multiplier for tile in tiles}


def restore_multipliers(tiles: Iterable[Tile], snapshot: Dict[str, Multiplier]) -> None:
    for tile in tiles:
        tile.multiplier = snapshot.get(tile.id, 'none')


def is_adjacent(a: Tile, b: Tile) -> bool:
    dx = abs(a.x - b.x)
    dy = abs(a.y - b.y)
    return max(dx, dy) == 1


def is_valid_selection(tiles: Sequence[Tile]) -> bool:
    seen = set()
    for index, tile in enumerate(tiles):
        if tile.id in seen:
            return False
        seen.add(tile.id)
        if index and not is_adjacent(tiles[index - 1], tile):
            return False
    return True
