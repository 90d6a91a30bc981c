import random

import pytest

from helpers import make_player
from spellcast import game_logic
from spellcast.schemas import Room


@pytest.fixture()
def rng():
    return random.Random(1234)


@pytest.fixture()
def make_room(rng):
    def _make(player_count=2, rounds=5, status='in-progress'):
        players = [make_player(f'p{i + 1}', is_host=(i == 0)) for i in range(player_count)]
        room = Room(id='room-1', createdAt=0, hostId='p1', players=players, status=status, rounds=rounds)
        room.game = game_logic.create_initial_game_state(rounds, rng=rng)
        return room
    return _make


@pytest.fixture()
def place_word():
    """Write letters onto tiles by id, clearing gems and multipliers on them."""
    def _place(game, letters_by_id):
        for tile in game.tiles:
            if tile.id in letters_by_id:
                tile.letter = letters_by_id[tile.id]
                tile.hasGem = False
                tile.multiplier = 'none'
                tile.wordMultiplier = 'none'
    return _place
