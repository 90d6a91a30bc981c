from __future__ import annotations
import random
import time
from typing import Container, Iterable, List, Mapping, Optional, Sequence

from . import game_logic
from .constants import DEFAULT_ROUND_COUNT, STARTING_GEMS
from .schemas import ActionResult, GameSnapshot, Player, Room, SubmitResult, Tile


class OfflineAdapter:
    """Single-client room driven straight through the rules engine.

    Every engine call receives this adapter's own random generator, so a
    seeded adapter replays identically without touching global state.
    """

    def __init__(self, total_rounds: int = DEFAULT_ROUND_COUNT, rng: Optional[random.Random] = None, seed: Optional[int] = None):
        self.rng = rng or random.Random(seed)
        self.room = Room(
            id='local-room',
            createdAt=int(time.time() * 1000),
            hostId='local-player',
            players=[],
            status='in-progress',
            rounds=total_rounds,
        )
        self.room.game = game_logic.create_initial_game_state(total_rounds, rng=self.rng)

    def seed_players(self, players: Iterable[Mapping]) -> List[Player]:
        now = int(time.time() * 1000)
        self.room.players = [
            Player(
                id=p['id'],
                name=p['name'],
                isHost=bool(p.get('isHost', False)),
                score=0,
                gems=STARTING_GEMS,
                joinedAt=now,
                connected=True,
                isSpectator=False,
            )
            for p in players
        ]
        host = next((p for p in self.room.players if p.isHost), None)
        if host:
            self.room.hostId = host.id
        if not self.room.game:
            self.room.game = game_logic.create_initial_game_state(self.room.rounds, rng=self.rng)
        return self.room.players

    def restart(self, total_rounds: Optional[int] = None) -> None:
        if total_rounds:
            self.room.rounds = total_rounds
        self.room.status = 'in-progress'
        game_logic.start_new_game(self.room, self.room.rounds, rng=self.rng)

    def submit_word(self, player_id: str, tile_ids: Sequence[str], dictionary: Container[str]) -> SubmitResult:
        return game_logic.submit_word(self.room, player_id, tile_ids, dictionary, rng=self.rng)

    def shuffle(self, player_id: str) -> ActionResult:
        return game_logic.shuffle_board(self.room, player_id, rng=self.rng)

    def request_swap_mode(self, player_id: str) -> ActionResult:
        return game_logic.request_swap_mode(self.room, player_id)

    def apply_swap(self, player_id: str, tile_id: str, letter: str) -> ActionResult:
        return game_logic.apply_swap(self.room, player_id, tile_id, letter)

    def cancel_swap(self, player_id: str) -> bool:
        return game_logic.cancel_swap(self.room, player_id)

    def advance_turn(self) -> None:
        game_logic.advance_turn(self.room, rng=self.rng)

    def advance_round(self) -> None:
        game_logic.advance_round(self.room, rng=self.rng)

    def snapshot(self) -> Optional[GameSnapshot]:
        return game_logic.to_public_game_state(self.room.game)

    @property
    def tiles(self) -> List[Tile]:
        return self.room.game.tiles if self.room.game else []

    @property
    def players(self) -> List[Player]:
        return self.room.players
