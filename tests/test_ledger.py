import random

import pytest

from helpers import make_player
from spellcast import game_logic, ledger


@pytest.fixture()
def trio(make_room):
    return make_room(player_count=3)


def test_sanitize_name_trims_and_caps():
    assert ledger.sanitize_name('  Ada  ') == 'Ada'
    assert ledger.sanitize_name(None) == ''
    assert len(ledger.sanitize_name('x' * 80)) == 32


def test_create_room_seats_host():
    room, host = ledger.create_room('ABCD', ' Host ', rounds=3)
    assert room.id == 'ABCD'
    assert room.status == 'lobby' and room.rounds == 3 and room.game is None
    assert room.hostId == host.id
    assert room.players == [host]
    assert host.isHost and host.name == 'Host' and host.gems == 3


def test_join_lobby_and_limits():
    room, _ = ledger.create_room('ABCD', 'Host')
    result = ledger.join_room(room, 'Guest')
    assert result.success and not result.player.isSpectator
    assert ledger.join_room(room, '   ').code == 'InvalidName'
    for i in range(4):
        assert ledger.join_room(room, f'g{i}').success
    assert ledger.join_room(room, 'late').code == 'RoomFull'
    assert len(room.players) == 6


def test_join_mid_game_spectator_rules(make_room):
    room = make_room(player_count=1)
    assert not ledger.join_room(room, 'early').player.isSpectator

    room.game.round = 2
    assert ledger.join_room(room, 'late').player.isSpectator

    room.game.round = 1
    room.game.completed = True
    assert ledger.join_room(room, 'after').player.isSpectator


def test_start_game_checks(make_room, rng):
    room = make_room(player_count=3, status='lobby')
    room.game = None
    assert ledger.start_game(room, 'p2', rng=rng).code == 'NotHost'
    assert room.status == 'lobby'

    assert ledger.start_game(room, 'p1', rng=rng).success
    assert room.status == 'in-progress'
    assert room.game.totalRounds == room.rounds
    assert sorted(p.id for p in room.players) == ['p1', 'p2', 'p3']
    assert room.game.currentPlayerIndex == 0

    assert ledger.start_game(room, 'p1', rng=rng).code == 'GameInProgress'


def test_start_game_needs_active_players(make_room, rng):
    room = make_room(player_count=1, status='lobby')
    room.players[0].isSpectator = True
    assert ledger.start_game(room, 'p1', rng=rng).code == 'NoActivePlayers'


def test_shuffle_active_players_keeps_spectators_last():
    room, host = ledger.create_room('ABCD', 'Host')
    room.players += [make_player('s1', spectator=True), make_player('a1'), make_player('a2')]
    ledger.shuffle_active_players(room, random.Random(3))
    assert [p.id for p in room.players[-1:]] == ['s1']
    assert {p.id for p in room.players[:3]} == {host.id, 'a1', 'a2'}


def test_update_settings(make_room):
    room = make_room(player_count=2, status='lobby')
    assert ledger.update_settings(room, 'p2', 3).code == 'NotHost'
    assert ledger.update_settings(room, 'p1', 4).code == 'InvalidSettings'
    assert ledger.update_settings(room, 'p1', 3).success
    assert room.rounds == 3
    room.status = 'in-progress'
    assert ledger.update_settings(room, 'p1', 5).code == 'GameInProgress'


def test_remove_unknown_player(trio):
    assert ledger.remove_player(trio, 'ghost').code == 'PlayerNotFound'


def test_remove_current_player_passes_turn_forward(trio, rng):
    trio.game.currentPlayerIndex = 1
    assert ledger.remove_player(trio, 'p2', rng=rng).success
    assert [p.id for p in trio.players] == ['p1', 'p3']
    assert game_logic.get_current_turn_player(trio).id == 'p3'
    assert trio.game.round == 1


def test_remove_last_current_player_wraps_round(trio, rng):
    trio.game.currentPlayerIndex = 2
    ledger.remove_player(trio, 'p3', rng=rng)
    assert trio.game.currentPlayerIndex == 0
    assert trio.game.round == 2


def test_remove_last_current_player_in_final_round_ends_game(make_room, rng):
    room = make_room(player_count=2, rounds=3)
    room.game.round = 3
    room.game.currentPlayerIndex = 1
    room.players[0].score = 4
    ledger.remove_player(room, 'p2', rng=rng)
    assert room.game.completed
    assert room.game.winnerId == 'p1'


def test_remove_earlier_player_keeps_current_turn(trio, rng):
    trio.game.currentPlayerIndex = 2
    ledger.remove_player(trio, 'p1', rng=rng)
    assert game_logic.get_current_turn_player(trio).id == 'p3'
    assert trio.game.round == 1


def test_remove_later_player_keeps_current_turn(trio, rng):
    trio.game.currentPlayerIndex = 0
    ledger.remove_player(trio, 'p3', rng=rng)
    assert game_logic.get_current_turn_player(trio).id == 'p1'


def test_remove_current_player_skips_spectators(make_room, rng):
    room = make_room(player_count=4)
    room.players[2].isSpectator = True
    room.game.currentPlayerIndex = 1
    ledger.remove_player(room, 'p2', rng=rng)
    assert game_logic.get_current_turn_player(room).id == 'p4'


def test_remove_host_transfers_to_first_active_player(trio, rng):
    trio.players[1].isSpectator = True
    ledger.remove_player(trio, 'p1', rng=rng)
    assert trio.hostId == 'p3'
    assert [p.isHost for p in trio.players] == [False, True]


def test_remove_swapping_player_clears_swap_mode(trio, rng):
    trio.game.swapModePlayerId = 'p3'
    ledger.remove_player(trio, 'p3', rng=rng)
    assert trio.game.swapModePlayerId is None


def test_remove_everyone(make_room, rng):
    room = make_room(player_count=1)
    assert ledger.remove_player(room, 'p1', rng=rng).success
    assert room.players == []


def test_next_turn_after_removal():
    players = [make_player('a'), make_player('b', spectator=True), make_player('c')]
    assert ledger.next_turn_after_removal(players, 0) == (1, False)
    assert ledger.next_turn_after_removal(players, 2) == (0, True)
    assert ledger.next_turn_after_removal([make_player('solo')], 0) is None


def test_host_skips_current_turn(trio, rng):
    result = ledger.skip_turn(trio, 'p1', 'p1', rng=rng)
    assert result.success
    assert trio.game.currentPlayerIndex == 1
    assert trio.game.log[-1] == "Round 1: P1's turn was skipped by the host."


def test_skip_on_last_turn_starts_next_round(trio, rng):
    trio.game.currentPlayerIndex = 2
    ledger.skip_turn(trio, 'p1', rng=rng)
    assert trio.game.round == 2
    assert trio.game.log[-2:] == ["Round 1: P3's turn was skipped by the host.", 'Round 2 of 5 begins.']


def test_skip_rejections(trio, rng):
    assert ledger.skip_turn(trio, 'p2', rng=rng).code == 'NotHost'
    assert ledger.skip_turn(trio, 'p1', 'p2', rng=rng).code == 'NotYourTurn'
    trio.game.completed = True
    assert ledger.skip_turn(trio, 'p1', rng=rng).code == 'GameCompleted'
    trio.status = 'lobby'
    assert ledger.skip_turn(trio, 'p1', rng=rng).code == 'GameNotStarted'


def test_reset_to_lobby(trio):
    trio.players[2].isSpectator = True
    ledger.reset_to_lobby(trio)
    assert trio.status == 'lobby'
    assert trio.game is None
    assert not any(p.isSpectator for p in trio.players)


def test_set_connected_reports_changes(trio):
    assert ledger.set_connected(trio, 'p1', False)
    assert not ledger.set_connected(trio, 'p1', False)
    assert not ledger.set_connected(trio, 'ghost', True)
