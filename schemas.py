# schemas.py
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, Field

from game_logic import MoveError, Player


# --- Eventos del juego ---
class MoveAccepted(BaseModel):
    type: Literal["move_accepted"] = "move_accepted"
    index: int
    player: Player


class MoveRejected(BaseModel):
    type: Literal["move_rejected"] = "move_rejected"
    index: Optional[int] = None
    reason: MoveError


class GameWon(BaseModel):
    type: Literal["game_won"] = "game_won"
    player: Player
    winning_line: int
    cells: List[int]
    orientation: str


class GameDrawn(BaseModel):
    type: Literal["game_drawn"] = "game_drawn"


class TurnChanged(BaseModel):
    type: Literal["turn_changed"] = "turn_changed"
    player: Player


class GameReset(BaseModel):
    type: Literal["game_reset"] = "game_reset"


class ModeChanged(BaseModel):
    type: Literal["mode_changed"] = "mode_changed"
    vs_ai: bool


GameEvent = Annotated[
    Union[
        MoveAccepted, MoveRejected, GameWon, GameDrawn, TurnChanged, GameReset, ModeChanged
    ],
    Field(discriminator="type"),
]


# --- Estado ---
class GameStateOut(BaseModel):
    type: Literal["state"] = "state"
    board: List[Optional[Player]]
    current_player: Player
    is_over: bool
    winner: Optional[Player] = None
    is_draw: bool = False
    winning_line: Optional[int] = None
    vs_ai: bool = False
    status: str


# --- REST ---
class GameCreate(BaseModel):
    vs_ai: bool = False


class GameCreated(BaseModel):
    game_id: str
    state: GameStateOut


class GameSummary(BaseModel):
    game_id: str
    vs_ai: bool
    is_over: bool
    connections: int


class MoveIn(BaseModel):
    position: int


class ActionResult(BaseModel):
    events: List[GameEvent] = []
    state: GameStateOut
