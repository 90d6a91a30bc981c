import random

from spellcast.schemas import Player


class FixedRandom(random.Random):
    """random.Random whose random() always returns the same value."""

    def __init__(self, value: float, seed: int = 0):
        super().__init__(seed)
        self.value = value

    def random(self):
        return self.value


def make_player(player_id, name=None, is_host=False, spectator=False, score=0, gems=3):
    return Player(
        id=player_id,
        name=name or player_id.upper(),
        isHost=is_host,
        score=score,
        gems=gems,
        joinedAt=0,
        connected=True,
        isSpectator=spectator,
    )


def tile_by_id(game, tile_id):
    return next(t for t in game.tiles if t.id == tile_id)
