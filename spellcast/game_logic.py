from __future__ import annotations
import logging
import random
import time
from typing import Container, List, Optional, Sequence, Tuple

from . import board
from .constants import (
    BOARD_COLS,
    BOARD_ROWS,
    DEFAULT_ROUND_COUNT,
    LETTER_VALUES,
    LETTERS,
    LOG_LIMIT,
    LONG_WORD_BONUS,
    LONG_WORD_THRESHOLD,
    STARTING_GEMS,
    SHUFFLE_COST,
    SWAP_COST,
)
from .letter_bag import LetterBag
from .schemas import (
    ActionResult,
    ErrorKind,
    GameSnapshot,
    GameState,
    LastSubmission,
    Multiplier,
    Player,
    Room,
    SubmitPayload,
    SubmitResult,
    Tile,
)

logger = logging.getLogger(__name__)

# Used when a caller does not inject its own generator
_default_rng = random.Random()

LETTER_MULTIPLIER_FACTORS = {
    'none': 1,
    'doubleLetter': 2,
    'tripleLetter': 3,
}


def _now_ms() -> int:
    return int(time.time() * 1000)


def _rng(rng: Optional[random.Random]) -> random.Random:
    return rng if rng is not None else _default_rng


def _fail(code: ErrorKind, message: str) -> ActionResult:
    return ActionResult(success=False, error=message, code=code)


def _ok() -> ActionResult:
    return ActionResult(success=True)

# Roster helpers

def active_players(room: Room) -> List[Player]:
    return [p for p in room.players if not p.isSpectator]


def has_active_players(room: Room) -> bool:
    return any(not p.isSpectator for p in room.players)


def first_active_index(room: Room) -> int:
    return next((i for i, p in enumerate(room.players) if not p.isSpectator), -1)


def find_player(room: Room, player_id: str) -> Optional[Player]:
    return next((p for p in room.players if p.id == player_id), None)


def get_current_turn_player(room: Room) -> Optional[Player]:
    """Player whose turn it is, repairing a stale or spectator index first."""
    game = room.game
    if not game or not has_active_players(room):
        return None
    players = room.players
    idx = game.currentPlayerIndex
    if idx < 0 or idx >= len(players) or players[idx].isSpectator:
        game.currentPlayerIndex = first_active_index(room)
    return players[game.currentPlayerIndex]


def is_players_turn(room: Room, player_id: str) -> bool:
    current = get_current_turn_player(room)
    return current is not None and current.id == player_id


def next_active_index(players: Sequence[Player], current_index: int) -> Tuple[int, bool]:
    """Next non-spectator index after ``current_index`` and whether the cycle wrapped."""
    total = len(players)
    if not total or all(p.isSpectator for p in players):
        return current_index, False
    idx = current_index
    for _ in range(total):
        idx = (idx + 1) % total
        if not players[idx].isSpectator:
            return idx, idx <= current_index
    return current_index, True

# Game lifecycle

def create_initial_game_state(
    total_rounds: int = DEFAULT_ROUND_COUNT,
    rng: Optional[random.Random] = None,
) -> GameState:
    return GameState(
        cols=BOARD_COLS,
        rows=BOARD_ROWS,
        tiles=board.build_tiles(_rng(rng), multipliers_enabled=False),
        round=1,
        totalRounds=total_rounds,
        currentPlayerIndex=0,
        turnStartedAt=_now_ms(),
    )


def start_new_game(
    room: Room,
    total_rounds: Optional[int] = None,
    rng: Optional[random.Random] = None,
) -> GameState:
    rounds = total_rounds or room.rounds or DEFAULT_ROUND_COUNT
    game = create_initial_game_state(rounds, rng=rng)
    room.game = game
    for player in room.players:
        player.score = 0
        player.gems = STARTING_GEMS
        player.isSpectator = False
    first = first_active_index(room)
    if first >= 0:
        game.currentPlayerIndex = first
        game.turnStartedAt = _now_ms()
    logger.info(f"[new-game] room={room.id} rounds={rounds} players={len(room.players)}")
    return game


def add_log_entry(game: GameState, message: str) -> None:
    game.log.append(message)
    if len(game.log) > LOG_LIMIT:
        del game.log[:len(game.log) - LOG_LIMIT]


def to_public_game_state(game: Optional[GameState]) -> Optional[GameSnapshot]:
    if game is None:
        return None
    return GameSnapshot(**game.model_dump())

# Words

def letter_score(letter: str, multiplier: Multiplier = 'none') -> int:
    return LETTER_VALUES.get(letter.upper(), 0) * LETTER_MULTIPLIER_FACTORS[multiplier]


def calculate_word_score(tiles: Sequence[Tile], long_word_bonus: bool = False) -> int:
    total = sum(letter_score(tile.letter, tile.multiplier) for tile in tiles)
    if any(tile.wordMultiplier == 'doubleWord' for tile in tiles):
        total *= 2
    return total + (LONG_WORD_BONUS if long_word_bonus else 0)


def submit_word(
    room: Room,
    player_id: str,
    tile_ids: Sequence[str],
    dictionary: Container[str],
    rng: Optional[random.Random] = None,
) -> SubmitResult:
    game = room.game
    if not game:
        return SubmitResult(success=False, code='GameNotStarted', error='Game not started.')
    if game.completed:
        return SubmitResult(success=False, code='GameCompleted', error='Game already completed.')
    if not tile_ids:
        return SubmitResult(success=False, code='EmptySelection', error='Select tiles to form a word.')
    player = get_current_turn_player(room)
    if not player:
        return SubmitResult(success=False, code='NotYourTurn', error='No active players available.')
    if player.id != player_id:
        return SubmitResult(success=False, code='NotYourTurn', error='It is not your turn.')

    by_id = {tile.id: tile for tile in game.tiles}
    if any(tid not in by_id for tid in tile_ids):
        return SubmitResult(success=False, code='InvalidSelection', error='Invalid tile selection.')
    selected = [by_id[tid] for tid in tile_ids]
    if not board.is_valid_selection(selected):
        return SubmitResult(
            success=False,
            code='InvalidSelection',
            error='Tiles must be unique and touch the previous tile.',
        )

    word = ''.join(tile.letter for tile in selected).upper()
    if word not in dictionary:
        return SubmitResult(success=False, code='NotAWord', error=f'"{word}" is not a valid word.')

    long_word_bonus = len(word) >= LONG_WORD_THRESHOLD
    points = calculate_word_score(selected, long_word_bonus)
    gems = sum(1 for tile in selected if tile.hasGem)

    player.score += points
    player.gems += gems

    generator = _rng(rng)
    board.refresh_tiles(game, selected, generator)
    if game.multipliersEnabled:
        board.ensure_letter_multiplier(game.tiles, generator)

    game.lastSubmission = LastSubmission(
        playerId=player.id,
        playerName=player.name,
        word=word,
        points=points,
        gems=gems,
        longWordBonus=long_word_bonus,
    )
    gem_note = f' and {gems} gem(s)' if gems else ''
    add_log_entry(game, f'Round {game.round}: {player.name} scored {points} pts{gem_note} with {word}.')
    logger.info(f"[submit] room={room.id} player={player.id} word={word} points={points} gems={gems}")

    advance_turn(room, rng=generator)

    return SubmitResult(
        success=True,
        payload=SubmitPayload(word=word, points=points, gems=gems, longWordBonus=long_word_bonus),
    )

# Power-ups

def _power_up_player(room: Room, player_id: str, action: str) -> Tuple[Optional[GameState], Optional[Player], Optional[ActionResult]]:
    game = room.game
    if not game:
        return None, None, _fail('GameNotStarted', 'Game not started.')
    if game.completed:
        return None, None, _fail('GameCompleted', 'Game already completed.')
    player = find_player(room, player_id)
    if not player:
        return None, None, _fail('PlayerNotFound', 'Player not found.')
    if player.isSpectator:
        return None, None, _fail('SpectatorNotAllowed', f'Spectators cannot {action}.')
    return game, player, None


def shuffle_board(room: Room, player_id: str, rng: Optional[random.Random] = None) -> ActionResult:
    game, player, error = _power_up_player(room, player_id, 'use Shuffle')
    if error:
        return error
    if player.gems < SHUFFLE_COST:
        return _fail('InsufficientGems', f'Need {SHUFFLE_COST} gem to shuffle.')
    player.gems -= SHUFFLE_COST
    board.shuffle_tiles(game, _rng(rng))
    add_log_entry(game, f'Round {game.round}: {player.name} used Shuffle (-{SHUFFLE_COST} gem).')
    logger.info(f"[shuffle] room={room.id} player={player.id} gems_left={player.gems}")
    return _ok()


def request_swap_mode(room: Room, player_id: str) -> ActionResult:
    game, player, error = _power_up_player(room, player_id, 'swap letters')
    if error:
        return error
    if player.gems < SWAP_COST:
        return _fail('InsufficientGems', f'Need {SWAP_COST} gems to swap a letter.')
    game.swapModePlayerId = player_id
    return _ok()


def apply_swap(room: Room, player_id: str, tile_id: str, letter: str) -> ActionResult:
    game, player, error = _power_up_player(room, player_id, 'swap letters')
    if error:
        return error
    if game.swapModePlayerId != player_id:
        return _fail('NotInSwapMode', 'You are not swapping a letter.')
    # Gems may have been spent since swap mode was requested
    if player.gems < SWAP_COST:
        return _fail('InsufficientGems', 'You do not have enough gems.')
    tile = next((t for t in game.tiles if t.id == tile_id), None)
    if not tile:
        return _fail('InvalidSelection', 'Tile not found.')
    new_letter = (letter or '').strip().upper()
    if len(new_letter) != 1 or new_letter not in LETTERS:
        return _fail('InvalidSelection', 'Choose a single letter from A to Z.')

    multipliers = board.snapshot_multipliers(game.tiles)
    player.gems -= SWAP_COST
    tile.letter = new_letter
    tile.fromBag = False
    board.restore_multipliers(game.tiles, multipliers)
    board.apply_round_word_tile(game)
    game.swapModePlayerId = None
    add_log_entry(game, f'Round {game.round}: {player.name} swapped a letter (-{SWAP_COST} gems).')
    logger.info(f"[swap] room={room.id} player={player.id} tile={tile_id} letter={new_letter}")
    return _ok()


def cancel_swap(room: Room, player_id: str) -> bool:
    game = room.game
    if not game or game.swapModePlayerId != player_id:
        return False
    game.swapModePlayerId = None
    return True

# Turns and rounds

def advance_turn(room: Room, rng: Optional[random.Random] = None) -> None:
    game = room.game
    if not game or not has_active_players(room):
        return
    # A pending swap belongs to the turn that opened it
    game.swapModePlayerId = None
    index, wrapped = next_active_index(room.players, game.currentPlayerIndex)
    game.currentPlayerIndex = index
    game.turnStartedAt = _now_ms()
    if wrapped:
        advance_round(room, rng=rng)


def determine_winner(room: Room) -> Optional[str]:
    pool = active_players(room) or room.players
    if not pool:
        return None
    # max() keeps the earliest player in turn order on ties
    return max(pool, key=lambda p: p.score).id


def advance_round(room: Room, rng: Optional[random.Random] = None) -> None:
    game = room.game
    if not game:
        return
    generator = _rng(rng)
    if game.round < game.totalRounds:
        game.round += 1
        game.multipliersEnabled = game.round > 1
        game.wordMultiplierEnabled = game.round >= 2
        if game.multipliersEnabled:
            board.ensure_letter_multiplier(game.tiles, generator)
        board.select_round_word_tile(game, generator, force_new=True)
        bag = LetterBag.for_board(game.tiles, rng=generator)
        board.ensure_minimum_vowels(game.tiles, bag, generator)
        game.turnStartedAt = _now_ms()
        add_log_entry(game, f'Round {game.round} of {game.totalRounds} begins.')
        logger.info(f"[next-round] room={room.id} round={game.round}/{game.totalRounds} word_tile={game.roundWordTileId}")
    else:
        game.completed = True
        game.swapModePlayerId = None
        game.winnerId = determine_winner(room)
        winner = find_player(room, game.winnerId) if game.winnerId else None
        if winner:
            add_log_entry(game, f'Game over! {winner.name} wins with {winner.score} pts.')
        logger.info(f"[finish] room={room.id} winner={game.winnerId}")
