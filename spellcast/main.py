from __future__ import annotations
import logging
from typing import Dict, Optional, Tuple

import socketio
from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import ValidationError

from .config import Config
from .dictionary import service as dict_service
from .game_logic import find_player
from .managers.rooms import RoomManager
from .schemas import (
    ActionResult,
    CreateRoomRequest,
    JoinRoomRequest,
    RemovePlayerRequest,
    Room,
    RoomResponse,
    SelectionEvent,
    SettingsRequest,
    SkipEvent,
    StartGameRequest,
    SubmitWordEvent,
    SwapApplyEvent,
)

logging.basicConfig(level=Config.LOG_LEVEL, format='%(asctime)s %(levelname)s %(name)s %(message)s')
logger = logging.getLogger(__name__)

# Socket.IO only allows every origin for the bare '*' string
sio_origins = '*' if '*' in Config.CORS_ORIGINS else Config.CORS_ORIGINS

# Socket.IO server (ASGI)
sio = socketio.AsyncServer(async_mode='asgi', cors_allowed_origins=sio_origins)
app = FastAPI(title="Spellcast Server", version="0.1.0")

# Mount Socket.IO ASGI application
asgi_app = socketio.ASGIApp(sio, other_asgi_app=app)

# CORS for REST
app.add_middleware(
    CORSMiddleware,
    allow_origins=Config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=['*'],
    allow_headers=['*'],
)

rooms = RoomManager(sio, dict_service)

ERROR_STATUS = {
    'RoomNotFound': 404,
    'PlayerNotFound': 404,
    'NotHost': 403,
}


def _raise_for(result: ActionResult):
    if not result.success:
        raise HTTPException(status_code=ERROR_STATUS.get(result.code, 400), detail=result.error)


def _require_room(room_id: str) -> Room:
    room = rooms.get(room_id)
    if not room:
        raise HTTPException(status_code=404, detail='Room not found')
    return room

# REST Endpoints
@app.get('/api/health')
async def health() -> Dict[str, str]:
    return { 'status': 'ok' }

@app.post('/api/rooms', status_code=201, response_model=RoomResponse)
async def create_room(body: CreateRoomRequest):
    room, result = rooms.create_room(body.name)
    if not room:
        raise HTTPException(status_code=400, detail=result.error)
    return RoomResponse(roomId=room.id, player=result.player, room=room)

@app.get('/api/rooms/{room_id}', response_model=Room)
async def get_room(room_id: str):
    return _require_room(room_id)

@app.post('/api/rooms/{room_id}/join', status_code=201, response_model=RoomResponse)
async def join_room(room_id: str, body: JoinRoomRequest):
    room, result = await rooms.join_room(room_id, body.name)
    _raise_for(result)
    return RoomResponse(roomId=room.id, player=result.player, room=room)

@app.post('/api/rooms/{room_id}/start')
async def start_game(room_id: str, body: StartGameRequest):
    _raise_for(await rooms.start_game(room_id, body.playerId))
    return { 'room': _require_room(room_id).model_dump() }

@app.patch('/api/rooms/{room_id}/settings')
async def update_settings(room_id: str, body: SettingsRequest):
    _raise_for(await rooms.update_settings(room_id, body.playerId, body.rounds))
    return { 'room': _require_room(room_id).model_dump() }

@app.delete('/api/rooms/{room_id}/players/{player_id}', status_code=204)
async def remove_player(room_id: str, player_id: str, body: RemovePlayerRequest):
    _raise_for(await rooms.kick_player(room_id, body.requesterId, player_id))

# Dictionary validation REST endpoint
@app.get('/dict/validate')
async def validate_word(word: str):
    return { 'word': word.upper(), 'valid': dict_service.is_valid(word) }

# Socket.IO Events
async def _session(sid) -> Tuple[Optional[str], Optional[str]]:
    sess = await sio.get_session(sid) or {}
    return sess.get('room_id'), sess.get('player_id')

async def _reject(sid, result: ActionResult, fallback: str):
    await sio.emit('game:error', { 'message': result.error or fallback }, to=sid)

@sio.event
async def connect(sid, environ, auth):
    auth = auth if isinstance(auth, dict) else {}
    room_id, player_id = auth.get('roomId'), auth.get('playerId')
    if not isinstance(room_id, str) or not isinstance(player_id, str):
        raise socketio.exceptions.ConnectionRefusedError('roomId and playerId required')
    room = await rooms.connect(sid, room_id, player_id)
    if not room:
        raise socketio.exceptions.ConnectionRefusedError('Room not found or player missing')
    await sio.save_session(sid, { 'room_id': room.id, 'player_id': player_id })
    await sio.enter_room(sid, room.id)
    logger.info(f"[socket-join] sid={sid} room={room.id} player={player_id}")
    await sio.emit('room:update', room.model_dump(), to=sid)

@sio.event
async def disconnect(sid):
    logger.info(f"[socket-leave] sid={sid}")
    await rooms.disconnect(sid)

@sio.on('game:submitWord')
async def submit_word(sid, payload=None):
    room_id, player_id = await _session(sid)
    if not room_id:
        return
    try:
        event = SubmitWordEvent.model_validate(payload or {})
    except ValidationError:
        return await sio.emit('game:error', { 'message': 'Invalid word submission.' }, to=sid)
    result = await rooms.submit_word(room_id, player_id, event.tileIds)
    if not result.success:
        await _reject(sid, result, 'Unable to submit word.')

@sio.on('game:shuffle')
async def shuffle(sid, payload=None):
    room_id, player_id = await _session(sid)
    if not room_id:
        return
    result = await rooms.shuffle(room_id, player_id)
    if not result.success:
        await _reject(sid, result, 'Unable to shuffle.')

@sio.on('game:swap:start')
async def swap_start(sid, payload=None):
    room_id, player_id = await _session(sid)
    if not room_id:
        return
    result = await rooms.start_swap(room_id, player_id)
    if not result.success:
        await _reject(sid, result, 'Unable to swap.')

@sio.on('game:swap:apply')
async def swap_apply(sid, payload=None):
    room_id, player_id = await _session(sid)
    if not room_id:
        return
    try:
        event = SwapApplyEvent.model_validate(payload or {})
    except ValidationError:
        event = SwapApplyEvent()
    if not event.tileId or not event.letter:
        return await sio.emit('game:error', { 'message': 'Tile and letter are required.' }, to=sid)
    result = await rooms.apply_swap(room_id, player_id, event.tileId, event.letter)
    if not result.success:
        await _reject(sid, result, 'Unable to swap.')

@sio.on('game:swap:cancel')
async def swap_cancel(sid, payload=None):
    room_id, player_id = await _session(sid)
    if not room_id:
        return
    await rooms.cancel_swap(room_id, player_id)

@sio.on('game:selection')
async def selection(sid, payload=None):
    room_id, player_id = await _session(sid)
    room = rooms.get(room_id)
    if not room:
        return
    sender = find_player(room, player_id)
    if not sender or sender.isSpectator:
        return
    try:
        event = SelectionEvent.model_validate(payload or {})
    except ValidationError:
        event = SelectionEvent()
    await sio.emit('game:selection', { 'playerId': player_id, 'tileIds': event.tileIds }, room=room.id, skip_sid=sid)

@sio.on('game:skip')
async def skip(sid, payload=None):
    room_id, player_id = await _session(sid)
    if not room_id:
        return
    try:
        event = SkipEvent.model_validate(payload or {})
    except ValidationError:
        event = SkipEvent()
    result = await rooms.skip_turn(room_id, player_id, event.playerId)
    if not result.success:
        await _reject(sid, result, 'Unable to skip turn.')

# Export ASGI app for uvicorn
application = asgi_app

# For local running: uvicorn spellcast.main:application --reload --host 0.0.0.0 --port 4000

if __name__ == '__main__':
    import uvicorn

    uvicorn.run(application, host=Config.HOST, port=Config.PORT)
