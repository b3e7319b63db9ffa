# game_logic.py
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple


class Player(str, Enum):
    X = "X"
    O = "O"

    def opposite(self) -> "Player":
        return Player.O if self is Player.X else Player.X


Board = List[Optional[Player]]

BOARD_CELLS = 9

# Orden fijo: filas (arriba a abajo), columnas (izq. a der.), diagonal, antidiagonal
WIN_LINES: Tuple[Tuple[int, int, int], ...] = (
    (0, 1, 2),
    (3, 4, 5),
    (6, 7, 8),
    (0, 3, 6),
    (1, 4, 7),
    (2, 5, 8),
    (0, 4, 8),
    (2, 4, 6),
)

LINE_ORIENTATIONS = (
    "horizontal", "horizontal", "horizontal",
    "vertical", "vertical", "vertical",
    "diagonal", "anti-diagonal",
)


class MoveError(str, Enum):
    OUT_OF_RANGE = "out_of_range"
    OCCUPIED = "occupied"
    GAME_OVER = "game_over"
    NOT_YOUR_TURN = "not_your_turn"


class InvalidMove(Exception):
    """Jugada rechazada. El estado del juego no cambia."""

    def __init__(self, index, reason: MoveError):
        super().__init__(f"Jugada inválida en {index!r}: {reason.value}")
        self.index = index
        self.reason = reason


@dataclass(frozen=True)
class WinResult:
    """
    Resultado terminal de una partida.
    winner=None significa empate (sin línea ganadora).
    """
    winner: Optional[Player]
    line: Optional[int] = None

    @classmethod
    def draw(cls) -> "WinResult":
        return cls(winner=None, line=None)

    @property
    def is_draw(self) -> bool:
        return self.winner is None

    @property
    def cells(self) -> Optional[Tuple[int, int, int]]:
        if self.line is None:
            return None
        return WIN_LINES[self.line]

    @property
    def orientation(self) -> Optional[str]:
        if self.line is None:
            return None
        return LINE_ORIENTATIONS[self.line]


def new_board() -> Board:
    return [None] * BOARD_CELLS


def check_winner(board: Board) -> Optional[WinResult]:
    """
    Revisa las 8 líneas en orden fijo.
    :return: la primera línea completa, empate si el tablero está lleno, o None.
    """
    for i, (a, b, c) in enumerate(WIN_LINES):
        if board[a] is not None and board[a] == board[b] == board[c]:
            return WinResult(winner=board[a], line=i)
    if all(cell is not None for cell in board):
        return WinResult.draw()
    return None


class GameState:
    def __init__(self):
        self.board: Board = new_board()
        self.current_player = Player.X
        self.is_over = False
        self.result: Optional[WinResult] = None

    def reset(self):
        """Reinicia el tablero."""
        self.board = new_board()
        self.current_player = Player.X
        self.is_over = False
        self.result = None

    @property
    def move_count(self) -> int:
        return sum(1 for cell in self.board if cell is not None)

    def empty_cells(self) -> List[int]:
        return [i for i, cell in enumerate(self.board) if cell is None]

    def check_winner(self) -> Optional[WinResult]:
        return check_winner(self.board)

    def apply_move(self, index: int) -> Optional[WinResult]:
        """
        Realiza una jugada del jugador actual.
        :param index: índice de 0 a 8.
        :return: el resultado si la jugada terminó la partida, si no None.
        :raises InvalidMove: partida terminada, posición inválida o casilla ocupada.
        """
        if self.is_over:
            raise InvalidMove(index, MoveError.GAME_OVER)

        # bool es subclase de int, pero True/False no son casillas
        if not isinstance(index, int) or isinstance(index, bool) or not 0 <= index < BOARD_CELLS:
            raise InvalidMove(index, MoveError.OUT_OF_RANGE)

        if self.board[index] is not None:
            raise InvalidMove(index, MoveError.OCCUPIED)

        self.board[index] = self.current_player

        result = self.check_winner()
        if result is not None:
            self.is_over = True
            self.result = result
            return result

        self.current_player = self.current_player.opposite()
        return None

    def copy(self) -> "GameState":
        clone = GameState()
        clone.board = list(self.board)
        clone.current_player = self.current_player
        clone.is_over = self.is_over
        clone.result = self.result
        return clone

    def to_dict(self) -> dict:
        """Devuelve el estado del juego en forma de diccionario."""
        return {
            "board": [cell.value if cell else None for cell in self.board],
            "current_player": self.current_player.value,
            "is_over": self.is_over,
            "winner": self.result.winner.value if self.result and self.result.winner else None,
            "is_draw": bool(self.result and self.result.is_draw),
            "winning_line": self.result.line if self.result else None,
        }
