from __future__ import annotations
from pydantic import BaseModel, Field
from typing import List, Literal, Optional

Multiplier = Literal['none', 'doubleLetter', 'tripleLetter']
WordMultiplier = Literal['none', 'doubleWord']
RoomStatus = Literal['lobby', 'in-progress']

ErrorKind = Literal[
    'GameNotStarted',
    'GameCompleted',
    'EmptySelection',
    'NotYourTurn',
    'InvalidSelection',
    'NotAWord',
    'PlayerNotFound',
    'InsufficientGems',
    'NotInSwapMode',
    'SpectatorNotAllowed',
    'RoomFull',
    'RoomNotFound',
    'NotHost',
    'GameInProgress',
    'NoActivePlayers',
    'InvalidSettings',
    'InvalidName',
]

class Tile(BaseModel):
    id: str
    x: int
    y: int
    letter: str
    hasGem: bool = False
    multiplier: Multiplier = 'none'
    wordMultiplier: WordMultiplier = 'none'
    # False when the letter was assigned directly (swap, exhausted bag)
    fromBag: bool = True

class LastSubmission(BaseModel):
    playerId: str
    playerName: str
    word: str
    points: int
    gems: int
    longWordBonus: bool

class GameSnapshot(BaseModel):
    cols: int
    rows: int
    tiles: List[Tile]
    round: int = 1
    totalRounds: int
    currentPlayerIndex: int = 0
    turnStartedAt: int
    multipliersEnabled: bool = False
    wordMultiplierEnabled: bool = False
    roundWordTileId: Optional[str] = None
    swapModePlayerId: Optional[str] = None
    lastSubmission: Optional[LastSubmission] = None
    completed: bool = False
    winnerId: Optional[str] = None
    log: List[str] = []

class GameState(GameSnapshot):
    pass

class Player(BaseModel):
    id: str
    name: str
    isHost: bool = False
    score: int = 0
    gems: int = 3
    joinedAt: int
    connected: bool = False
    isSpectator: bool = False

class Room(BaseModel):
    id: str
    createdAt: int
    hostId: str
    players: List[Player] = []
    status: RoomStatus = 'lobby'
    rounds: int = 5
    game: Optional[GameState] = None

# Engine results

class ActionResult(BaseModel):
    success: bool
    error: Optional[str] = None
    code: Optional[ErrorKind] = None

class SubmitPayload(BaseModel):
    word: str
    points: int
    gems: int
    longWordBonus: bool

class SubmitResult(ActionResult):
    payload: Optional[SubmitPayload] = None

class PlayerResult(ActionResult):
    player: Optional[Player] = None

# REST request bodies

class CreateRoomRequest(BaseModel):
    name: str

class JoinRoomRequest(BaseModel):
    name: str

class StartGameRequest(BaseModel):
    playerId: str

class SettingsRequest(BaseModel):
    playerId: str
    rounds: int

class RemovePlayerRequest(BaseModel):
    requesterId: str

class RoomResponse(BaseModel):
    roomId: str
    player: Player
    room: Room

# Socket payloads

class SubmitWordEvent(BaseModel):
    tileIds: List[str] = Field(default_factory=list)

class SwapApplyEvent(BaseModel):
    tileId: Optional[str] = None
    letter: Optional[str] = None

class SelectionEvent(BaseModel):
    tileIds: List[str] = Field(default_factory=list)

class SkipEvent(BaseModel):
    playerId: Optional[str] = None
