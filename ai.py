# ai.py
import logging
from typing import Dict, Optional

from game_logic import Board, GameState, Player, check_winner

logger = logging.getLogger("triki.ai")

# Devuelto cuando no hay casillas libres
NO_MOVE = -1


class _Search:
    """Minimax exhaustivo sobre una copia privada del tablero (aplicar/deshacer)."""

    def __init__(self, board: Board, player: Player):
        self.board = list(board)
        self.player = player
        self.evaluated = 0

    def score(self, winner: Optional[Player]) -> int:
        if winner is None:
            return 0
        return 1 if winner is self.player else -1

    def minimax(self, to_move: Player) -> int:
        self.evaluated += 1
        result = check_winner(self.board)
        if result is not None:
            return self.score(result.winner)

        maximizing = to_move is self.player
        best = None
        for i in range(len(self.board)):
            if self.board[i] is not None:
                continue
            self.board[i] = to_move
            value = self.minimax(to_move.opposite())
            self.board[i] = None
            if best is None or (value > best if maximizing else value < best):
                best = value
        return best

    def root_scores(self) -> Dict[int, int]:
        scores = {}
        for i in range(len(self.board)):
            if self.board[i] is not None:
                continue
            self.board[i] = self.player
            scores[i] = self.minimax(self.player.opposite())
            self.board[i] = None
        return scores


def score_moves(state: GameState, player: Optional[Player] = None) -> Dict[int, int]:
    """
    Puntaje minimax de cada casilla libre, desde el punto de vista de `player`
    (+1 gana, -1 pierde, 0 empate). Vacío si la partida terminó.
    """
    if state.is_over:
        return {}
    search = _Search(state.board, player or state.current_player)
    return search.root_scores()


def find_best_move(state: GameState, player: Optional[Player] = None) -> int:
    """
    Mejor jugada para `player` (por defecto el jugador actual).
    En empate de puntajes gana el índice más bajo.
    :return: índice 0..8, o NO_MOVE si no hay jugada posible.
    """
    if state.is_over:
        return NO_MOVE

    search = _Search(state.board, player or state.current_player)
    scores = search.root_scores()

    best_move = NO_MOVE
    best_score = None
    for index in sorted(scores):
        if best_score is None or scores[index] > best_score:
            best_score = scores[index]
            best_move = index

    logger.debug(
        "IA %s evaluó %d posiciones. Mejor jugada: %d (puntaje: %s)",
        search.player.value, search.evaluated, best_move, best_score,
    )
    return best_move
