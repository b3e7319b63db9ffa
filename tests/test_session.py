from game_logic import MoveError, Player
from schemas import (
    GameDrawn,
    GameReset,
    GameWon,
    ModeChanged,
    MoveAccepted,
    MoveRejected,
    TurnChanged,
)
from session import GameSession


def test_accepted_move_emits_move_and_turn():
    session = GameSession()
    events = session.request_move(4)
    assert events == [
        MoveAccepted(index=4, player=Player.X),
        TurnChanged(player=Player.O),
    ]


def test_rejected_move_emits_reason_and_keeps_state():
    session = GameSession()
    session.request_move(4)
    before = list(session.state.board)

    events = session.request_move(4)
    assert events == [MoveRejected(index=4, reason=MoveError.OCCUPIED)]
    assert session.state.board == before

    events = session.request_move(11)
    assert events == [MoveRejected(index=11, reason=MoveError.OUT_OF_RANGE)]

    events = session.request_move("abc")
    assert events == [MoveRejected(index=None, reason=MoveError.OUT_OF_RANGE)]


def test_win_and_draw_events():
    session = GameSession()
    for index in (0, 3, 1, 4):
        session.request_move(index)
    events = session.request_move(2)
    assert events == [
        MoveAccepted(index=2, player=Player.X),
        GameWon(player=Player.X, winning_line=0, cells=[0, 1, 2], orientation="horizontal"),
    ]
    assert session.status_message() == "¡Ganó X!"
    assert session.request_move(8) == [MoveRejected(index=8, reason=MoveError.GAME_OVER)]

    session.reset()
    for index in (0, 1, 2, 4, 3, 5, 7, 6):
        session.request_move(index)
    events = session.request_move(8)
    assert events[-1] == GameDrawn()
    assert session.status_message() == "¡Empate!"


def test_listeners_receive_events():
    session = GameSession()
    received = []
    session.subscribe(received.append)
    session.request_move(0)
    session.reset()
    assert [type(e) for e in received] == [MoveAccepted, TurnChanged, GameReset]

    session.unsubscribe(received.append)
    session.request_move(0)
    assert len(received) == 3


def test_human_cannot_play_for_ai():
    session = GameSession(vs_ai=True)
    session.request_move(4)
    assert session.ai_turn_pending()

    events = session.request_move(0)
    assert events == [MoveRejected(index=0, reason=MoveError.NOT_YOUR_TURN)]
    assert session.state.board[0] is None


def test_two_player_mode_lets_o_move():
    session = GameSession()
    session.request_move(4)
    assert not session.ai_turn_pending()
    assert session.request_move(0)[0] == MoveAccepted(index=0, player=Player.O)


def test_ai_move_goes_through_same_path():
    session = GameSession()
    for index in (0, 3, 1):
        session.request_move(index)
    # X amenaza la fila 0; la IA bloquea
    events = session.request_ai_move()
    assert events == [
        MoveAccepted(index=2, player=Player.O),
        TurnChanged(player=Player.X),
    ]


def test_ai_move_ignored_when_not_its_turn():
    session = GameSession(vs_ai=True)
    assert session.request_ai_move() == []
    assert session.state.board == [None] * 9


def test_stale_ai_move_is_discarded_after_reset():
    session = GameSession(vs_ai=True)
    session.request_move(4)
    scheduled = session.generation

    session.reset()
    session.request_move(0)
    assert session.ai_turn_pending()

    assert session.request_ai_move(scheduled) == []
    assert session.state.board.count(Player.O) == 0

    events = session.request_ai_move(session.generation)
    assert events[0].player is Player.O


def test_set_mode_resets_game():
    session = GameSession()
    session.request_move(4)
    events = session.set_mode(True)
    assert events == [ModeChanged(vs_ai=True), GameReset()]
    assert session.vs_ai
    assert session.state.board == [None] * 9
    assert session.generation == 1


def test_snapshot():
    session = GameSession(vs_ai=True)
    session.request_move(4)
    snap = session.snapshot()
    assert snap.board[4] is Player.X
    assert snap.current_player is Player.O
    assert snap.vs_ai
    assert not snap.is_over
    assert snap.status == "Turno del jugador O"
    assert snap.model_dump(mode="json")["board"][4] == "X"


def test_ai_move_with_precomputed_index():
    session = GameSession(vs_ai=True)
    session.request_move(4)
    events = session.request_ai_move(session.generation, index=0)
    assert events[0] == MoveAccepted(index=0, player=Player.O)


def test_precomputed_ai_move_discarded_after_reset():
    session = GameSession(vs_ai=True)
    session.request_move(4)
    scheduled = session.generation
    session.reset()
    session.request_move(0)
    assert session.request_ai_move(scheduled, index=4) == []
    assert session.state.board.count(Player.O) == 0
