from __future__ import annotations
import logging
import random
import string
from dataclasses import dataclass, field
from typing import Container, Dict, Optional, Sequence, Set, Tuple

from .. import game_logic, ledger
from ..config import Config
from ..schemas import ActionResult, ErrorKind, PlayerResult, Room, SubmitResult
from .timer import TimerManager

logger = logging.getLogger(__name__)

ROOM_ID_LENGTH = 4


@dataclass
class Presence:
    room_id: str
    sockets: Set[str] = field(default_factory=set)


@dataclass
class SocketContext:
    room_id: str
    player_id: str


def _fail(code: ErrorKind, message: str) -> ActionResult:
    return ActionResult(success=False, error=message, code=code)


class RoomManager:
    """In-memory room registry sitting between the transport and the engine.

    Every mutating call runs one synchronous engine operation and then
    broadcasts the whole room, so clients only ever see complete snapshots.
    """

    def __init__(self, sio, dictionary: Container[str], config=Config, rng: Optional[random.Random] = None):
        self.sio = sio
        self.dictionary = dictionary
        self.config = config
        self.rng = rng or random.Random()
        self.timer = TimerManager()
        self.rooms: Dict[str, Room] = {}
        self._presence: Dict[str, Presence] = {}
        self._sockets: Dict[str, SocketContext] = {}

    def get(self, room_id: Optional[str]) -> Optional[Room]:
        return self.rooms.get((room_id or '').upper())

    def clear(self) -> None:
        self.timer.cancel_all()
        self.rooms.clear()
        self._presence.clear()
        self._sockets.clear()

    def generate_room_id(self) -> str:
        while True:
            room_id = ''.join(self.rng.choice(string.ascii_uppercase) for _ in range(ROOM_ID_LENGTH))
            if room_id not in self.rooms:
                return room_id

    async def broadcast(self, room_id: str):
        room = self.rooms.get(room_id)
        if room:
            await self.sio.emit('room:update', room.model_dump(), room=room_id)

    # Room CRUD

    def create_room(self, name: str) -> Tuple[Optional[Room], PlayerResult]:
        if not ledger.sanitize_name(name):
            return None, PlayerResult(success=False, code='InvalidName', error='Host name is required')
        room, host = ledger.create_room(self.generate_room_id(), name, rounds=self.config.DEFAULT_ROUNDS)
        self.rooms[room.id] = room
        logger.info(f"[room-create] room={room.id} host={host.id}")
        return room, PlayerResult(success=True, player=host)

    async def join_room(self, room_id: str, name: str) -> Tuple[Optional[Room], PlayerResult]:
        room = self.get(room_id)
        if not room:
            return None, PlayerResult(success=False, code='RoomNotFound', error='Room not found')
        result = ledger.join_room(room, name, max_players=self.config.MAX_PLAYERS)
        if result.success:
            await self.broadcast(room.id)
        return room, result

    async def start_game(self, room_id: str, player_id: str) -> ActionResult:
        room = self.get(room_id)
        if not room:
            return _fail('RoomNotFound', 'Room not found')
        result = ledger.start_game(room, player_id, rng=self.rng)
        if result.success:
            self._cancel_reset(room.id)
            await self.broadcast(room.id)
        return result

    async def update_settings(self, room_id: str, player_id: str, rounds: int) -> ActionResult:
        room = self.get(room_id)
        if not room:
            return _fail('RoomNotFound', 'Room not found')
        result = ledger.update_settings(room, player_id, rounds)
        if result.success:
            await self.broadcast(room.id)
        return result

    async def kick_player(self, room_id: str, requester_id: str, player_id: str) -> ActionResult:
        room = self.get(room_id)
        if not room:
            return _fail('RoomNotFound', 'Room not found')
        if requester_id != player_id and requester_id != room.hostId:
            return _fail('NotHost', 'Only the host can remove other players')
        presence = self._presence.pop(player_id, None)
        if presence:
            for sid in list(presence.sockets):
                self._sockets.pop(sid, None)
                await self.sio.emit('room:kicked', { 'roomId': room.id }, to=sid)
                await self.sio.disconnect(sid)
        self.timer.cancel(f'disconnect:{player_id}')
        return await self._remove(room, player_id)

    async def _remove(self, room: Room, player_id: str) -> ActionResult:
        result = ledger.remove_player(room, player_id, rng=self.rng)
        if not result.success:
            return result
        if not room.players:
            self.rooms.pop(room.id, None)
            self._cancel_reset(room.id)
            await self.sio.emit('room:update', room.model_dump(), room=room.id)
            logger.info(f"[room-close] room={room.id}")
            return result
        self._sync_reset(room)
        await self.broadcast(room.id)
        return result

    # Presence

    async def connect(self, sid: str, room_id: str, player_id: str) -> Optional[Room]:
        room = self.get(room_id)
        if not room or not game_logic.find_player(room, player_id):
            return None
        presence = self._presence.get(player_id)
        if presence is None:
            presence = self._presence[player_id] = Presence(room_id=room.id)
        presence.sockets.add(sid)
        self._sockets[sid] = SocketContext(room_id=room.id, player_id=player_id)
        self.timer.cancel(f'disconnect:{player_id}')
        if ledger.set_connected(room, player_id, True):
            await self.broadcast(room.id)
        return room

    async def disconnect(self, sid: str):
        ctx = self._sockets.pop(sid, None)
        if not ctx:
            return
        presence = self._presence.get(ctx.player_id)
        if not presence:
            return
        presence.sockets.discard(sid)
        if presence.sockets:
            return
        room = self.get(ctx.room_id)
        if room and ledger.set_connected(room, ctx.player_id, False):
            await self.broadcast(room.id)

        async def expire():
            self._presence.pop(ctx.player_id, None)
            current = self.get(ctx.room_id)
            if current:
                logger.info(f"[presence-expire] room={ctx.room_id} player={ctx.player_id}")
                await self._remove(current, ctx.player_id)

        self.timer.schedule(f'disconnect:{ctx.player_id}', self.config.DISCONNECT_GRACE_SEC, expire)

    # Game actions

    async def submit_word(self, room_id: str, player_id: str, tile_ids: Sequence[str]) -> SubmitResult:
        room = self.get(room_id)
        if not room:
            return SubmitResult(success=False, code='RoomNotFound', error='Room not found')
        result = game_logic.submit_word(room, player_id, tile_ids, self.dictionary, rng=self.rng)
        if result.success:
            await self.broadcast(room.id)
            self._sync_reset(room)
        return result

    def _turn_gate(self, room: Optional[Room], player_id: str) -> Optional[ActionResult]:
        if not room:
            return _fail('RoomNotFound', 'Room not found')
        if not room.game:
            return _fail('GameNotStarted', 'Game not started.')
        if not game_logic.is_players_turn(room, player_id):
            return _fail('NotYourTurn', 'It is not your turn.')
        return None

    async def shuffle(self, room_id: str, player_id: str) -> ActionResult:
        room = self.get(room_id)
        rejected = self._turn_gate(room, player_id)
        if rejected:
            return rejected
        result = game_logic.shuffle_board(room, player_id, rng=self.rng)
        if result.success:
            await self.broadcast(room.id)
            self._cancel_reset(room.id)
        return result

    async def start_swap(self, room_id: str, player_id: str) -> ActionResult:
        room = self.get(room_id)
        rejected = self._turn_gate(room, player_id)
        if rejected:
            return rejected
        result = game_logic.request_swap_mode(room, player_id)
        if result.success:
            await self.broadcast(room.id)
        return result

    async def apply_swap(self, room_id: str, player_id: str, tile_id: str, letter: str) -> ActionResult:
        room = self.get(room_id)
        rejected = self._turn_gate(room, player_id)
        if rejected:
            return rejected
        result = game_logic.apply_swap(room, player_id, tile_id, letter)
        if result.success:
            await self.broadcast(room.id)
            self._cancel_reset(room.id)
        return result

    async def cancel_swap(self, room_id: str, player_id: str):
        room = self.get(room_id)
        if not room:
            return
        if game_logic.cancel_swap(room, player_id):
            await self.broadcast(room.id)

    async def skip_turn(self, room_id: str, requester_id: str, target_id: Optional[str] = None) -> ActionResult:
        room = self.get(room_id)
        if not room:
            return _fail('RoomNotFound', 'Room not found')
        result = ledger.skip_turn(room, requester_id, target_id, rng=self.rng)
        if result.success:
            await self.broadcast(room.id)
            self._sync_reset(room)
        return result

    # Post-game reset

    def _sync_reset(self, room: Room) -> None:
        if room.game and room.game.completed:
            self._schedule_reset(room.id)
        else:
            self._cancel_reset(room.id)

    def _schedule_reset(self, room_id: str) -> None:
        async def reset():
            room = self.rooms.get(room_id)
            if not room:
                return
            ledger.reset_to_lobby(room)
            logger.info(f"[room-reset] room={room_id}")
            await self.broadcast(room_id)

        self.timer.schedule(f'reset:{room_id}', self.config.NEW_GAME_DELAY_SEC, reset, replace=False)

    def _cancel_reset(self, room_id: str) -> None:
        self.timer.cancel(f'reset:{room_id}')
