from __future__ import annotations
import logging
import random
import time
import uuid
from typing import List, Optional, Sequence, Tuple

from .constants import DEFAULT_ROUND_COUNT, NAME_MAX_LENGTH, ROUND_OPTIONS, STARTING_GEMS
from .game_logic import (
    add_log_entry,
    advance_round,
    advance_turn,
    first_active_index,
    find_player,
    get_current_turn_player,
    has_active_players,
    start_new_game,
)
from .schemas import ActionResult, ErrorKind, Player, PlayerResult, Room

logger = logging.getLogger(__name__)


def _now_ms() -> int:
    return int(time.time() * 1000)


def _fail(code: ErrorKind, message: str) -> ActionResult:
    return ActionResult(success=False, error=message, code=code)


def sanitize_name(raw: Optional[str]) -> str:
    return (raw or '').strip()[:NAME_MAX_LENGTH]


def new_player(name: str, is_host: bool = False, player_id: Optional[str] = None) -> Player:
    return Player(
        id=player_id or str(uuid.uuid4()),
        name=sanitize_name(name),
        isHost=is_host,
        score=0,
        gems=STARTING_GEMS,
        joinedAt=_now_ms(),
        connected=False,
        isSpectator=False,
    )


def create_room(room_id: str, host_name: str, rounds: int = DEFAULT_ROUND_COUNT) -> Tuple[Room, Player]:
    host = new_player(host_name, is_host=True)
    room = Room(
        id=room_id,
        createdAt=_now_ms(),
        hostId=host.id,
        players=[host],
        status='lobby',
        rounds=rounds,
    )
    return room, host


def join_room(room: Room, name: str, max_players: int = 6) -> PlayerResult:
    if len(room.players) >= max_players:
        return PlayerResult(success=False, code='RoomFull', error='Room is full')
    sanitized = sanitize_name(name)
    if not sanitized:
        return PlayerResult(success=False, code='InvalidName', error='Player name cannot be empty')

    # Late joiners may only take turns while round 1 is still running
    joining_mid_game = room.status == 'in-progress'
    game = room.game
    eligible = joining_mid_game and game is not None and game.round == 1 and not game.completed
    player = new_player(sanitized)
    player.isSpectator = joining_mid_game and not eligible
    room.players.append(player)
    logger.info(f"[join] room={room.id} player={player.id} spectator={player.isSpectator}")
    return PlayerResult(success=True, player=player)


def shuffle_active_players(room: Room, rng: random.Random) -> None:
    active = [p for p in room.players if not p.isSpectator]
    spectators = [p for p in room.players if p.isSpectator]
    rng.shuffle(active)
    room.players = active + spectators


def start_game(room: Room, player_id: str, rng: Optional[random.Random] = None) -> ActionResult:
    if room.status == 'in-progress':
        return _fail('GameInProgress', 'Game already started')
    if room.hostId != player_id:
        return _fail('NotHost', 'Only the host can start the game')
    if not has_active_players(room):
        return _fail('NoActivePlayers', 'Need at least one active player to start')
    shuffle_active_players(room, rng or random.Random())
    room.status = 'in-progress'
    start_new_game(room, room.rounds, rng=rng)
    return ActionResult(success=True)


def update_settings(room: Room, player_id: str, rounds: int) -> ActionResult:
    if room.hostId != player_id:
        return _fail('NotHost', 'Only the host can update settings')
    if room.status != 'lobby':
        return _fail('GameInProgress', 'Cannot change settings after the game starts')
    if rounds not in ROUND_OPTIONS:
        return _fail('InvalidSettings', 'Invalid round selection')
    room.rounds = rounds
    return ActionResult(success=True)


def normalize_current_player(room: Room) -> None:
    game = room.game
    if not game:
        return
    if not room.players:
        game.currentPlayerIndex = 0
        return
    idx = game.currentPlayerIndex
    if idx >= len(room.players) or room.players[idx].isSpectator:
        first = first_active_index(room)
        game.currentPlayerIndex = 0 if first == -1 else first


def next_turn_after_removal(players: Sequence[Player], removed_index: int) -> Optional[Tuple[int, bool]]:
    """Where the turn lands once ``removed_index`` leaves, measured on the old roster.

    Returns the index into the roster *after* removal and whether the turn
    order wrapped around (which ends the round).
    """
    for i in range(removed_index + 1, len(players)):
        if not players[i].isSpectator:
            return i - 1, False
    for i in range(removed_index):
        if not players[i].isSpectator:
            return i, True
    return None


def transfer_host(room: Room) -> None:
    next_host = next((p for p in room.players if not p.isSpectator), None) or (room.players[0] if room.players else None)
    if not next_host:
        return
    room.hostId = next_host.id
    for player in room.players:
        player.isHost = player.id == room.hostId


def remove_player(room: Room, player_id: str, rng: Optional[random.Random] = None) -> ActionResult:
    idx = next((i for i, p in enumerate(room.players) if p.id == player_id), -1)
    if idx == -1:
        return _fail('PlayerNotFound', 'Player not found')

    players_before: List[Player] = list(room.players)
    game = room.game
    active_game = room.status == 'in-progress' and game is not None and not game.completed
    was_current = active_game and game.currentPlayerIndex == idx
    next_turn = next_turn_after_removal(players_before, idx) if was_current else None
    preserved_index = game.currentPlayerIndex if game else 0
    if game and not was_current and game.currentPlayerIndex > idx:
        preserved_index -= 1

    del room.players[idx]
    logger.info(f"[leave] room={room.id} player={player_id} was_current={was_current}")
    if not room.players:
        return ActionResult(success=True)

    if room.hostId == player_id:
        transfer_host(room)

    if game:
        if game.swapModePlayerId == player_id:
            game.swapModePlayerId = None
        if was_current:
            game.turnStartedAt = _now_ms()
            if next_turn:
                index, wrapped = next_turn
                game.currentPlayerIndex = min(index, len(room.players) - 1)
                if wrapped:
                    advance_round(room, rng=rng)
            else:
                game.currentPlayerIndex = 0
                normalize_current_player(room)
        else:
            game.currentPlayerIndex = min(preserved_index, len(room.players) - 1)
            normalize_current_player(room)
    return ActionResult(success=True)


def skip_turn(
    room: Room,
    requester_id: str,
    target_id: Optional[str] = None,
    rng: Optional[random.Random] = None,
) -> ActionResult:
    if room.hostId != requester_id:
        return _fail('NotHost', 'Only the host can skip turns.')
    game = room.game
    if not game or room.status != 'in-progress':
        return _fail('GameNotStarted', 'No active game to skip.')
    if game.completed:
        return _fail('GameCompleted', 'Game already completed.')
    current = get_current_turn_player(room)
    if not current or (target_id and target_id != current.id):
        return _fail('NotYourTurn', 'Player is not currently taking a turn.')
    add_log_entry(game, f"Round {game.round}: {current.name}'s turn was skipped by the host.")
    advance_turn(room, rng=rng)
    logger.info(f"[skip] room={room.id} player={current.id}")
    return ActionResult(success=True)


def reset_to_lobby(room: Room) -> None:
    room.status = 'lobby'
    room.game = None
    for player in room.players:
        player.isSpectator = False


def set_connected(room: Room, player_id: str, connected: bool) -> bool:
    player = find_player(room, player_id)
    if not player or player.connected == connected:
        return False
    player.connected = connected
    return True
