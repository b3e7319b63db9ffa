# session.py
import logging
from typing import Callable, List, Optional

from ai import NO_MOVE, find_best_move
from game_logic import GameState, InvalidMove, MoveError, Player
from schemas import (
    GameDrawn,
    GameReset,
    GameStateOut,
    GameWon,
    ModeChanged,
    MoveAccepted,
    MoveRejected,
    TurnChanged,
)

logger = logging.getLogger("triki.session")

AI_PLAYER = Player.O

Listener = Callable[[object], None]


class GameSession:
    """
    Una partida de un navegador: estado + modo (vs IA o dos jugadores).

    Cada operación devuelve la lista de eventos que produjo y además
    los entrega a los listeners suscritos.
    """

    def __init__(self, vs_ai: bool = False):
        self.state = GameState()
        self.vs_ai = vs_ai
        # Cambia con cada reinicio; invalida jugadas de IA ya programadas
        self.generation = 0
        self._listeners: List[Listener] = []

    # ---------- Suscripción ----------

    def subscribe(self, listener: Listener):
        self._listeners.append(listener)

    def unsubscribe(self, listener: Listener):
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _emit(self, events: list, event) -> None:
        events.append(event)
        for listener in list(self._listeners):
            listener(event)

    # ---------- Entradas ----------

    def request_move(self, index) -> list:
        """Jugada de un humano."""
        events: list = []
        if self.vs_ai and not self.state.is_over and self.state.current_player is AI_PLAYER:
            self._reject(events, InvalidMove(index, MoveError.NOT_YOUR_TURN))
            return events
        self._play(events, index)
        return events

    def request_ai_move(self, generation: Optional[int] = None, index: Optional[int] = None) -> list:
        """
        Jugada de la IA (O). Si `generation` ya no coincide, la partida fue
        reiniciada después de programar la jugada y se descarta.
        `index` es una jugada ya calculada (p. ej. en otro hilo); si falta se busca aquí.
        """
        events: list = []
        if generation is not None and generation != self.generation:
            logger.info("Jugada de IA descartada: la partida fue reiniciada")
            return events
        if self.state.is_over or self.state.current_player is not AI_PLAYER:
            return events

        if index is None:
            index = find_best_move(self.state)
        if index == NO_MOVE:
            return events
        self._play(events, index)
        return events

    def reset(self) -> list:
        events: list = []
        self.state.reset()
        self.generation += 1
        self._emit(events, GameReset())
        return events

    def set_mode(self, vs_ai: bool) -> list:
        events: list = []
        self.vs_ai = bool(vs_ai)
        self._emit(events, ModeChanged(vs_ai=self.vs_ai))
        events.extend(self.reset())
        return events

    def ai_turn_pending(self) -> bool:
        return (
            self.vs_ai
            and not self.state.is_over
            and self.state.current_player is AI_PLAYER
        )

    # ---------- Transición ----------

    def _play(self, events: list, index) -> None:
        player = self.state.current_player
        try:
            result = self.state.apply_move(index)
        except InvalidMove as exc:
            self._reject(events, exc)
            return

        self._emit(events, MoveAccepted(index=index, player=player))

        if result is None:
            self._emit(events, TurnChanged(player=self.state.current_player))
        elif result.is_draw:
            logger.info("Partida terminada en empate")
            self._emit(events, GameDrawn())
        else:
            logger.info("Ganó %s en la línea %d", result.winner.value, result.line)
            self._emit(events, GameWon(
                player=result.winner,
                winning_line=result.line,
                cells=list(result.cells),
                orientation=result.orientation,
            ))

    def _reject(self, events: list, exc: InvalidMove) -> None:
        logger.info("%s", exc)
        index = exc.index if isinstance(exc.index, int) and not isinstance(exc.index, bool) else None
        self._emit(events, MoveRejected(index=index, reason=exc.reason))

    # ---------- Presentación ----------

    def status_message(self) -> str:
        result = self.state.result
        if result is None:
            return f"Turno del jugador {self.state.current_player.value}"
        if result.is_draw:
            return "¡Empate!"
        return f"¡Ganó {result.winner.value}!"

    def snapshot(self) -> GameStateOut:
        return GameStateOut(
            **self.state.to_dict(),
            vs_ai=self.vs_ai,
            status=self.status_message(),
        )
