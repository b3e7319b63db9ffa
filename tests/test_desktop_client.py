import pytest

pytest.importorskip("tkinter")
pytest.importorskip("customtkinter")

from clients.desktop_client import JOIN_MESSAGE, describe_message  # noqa: E402


def test_state_message_uses_server_status():
    assert describe_message({"type": "state", "status": "¡Empate!"}) == "¡Empate!"


def test_rejected_move_is_explained():
    data = {"type": "move_rejected", "index": 3, "reason": "occupied"}
    assert describe_message(data) == "Casilla ocupada"
    data["reason"] = "desconocida"
    assert describe_message(data) == "Jugada inválida"


def test_other_events_do_not_change_status():
    assert describe_message({"type": "turn_changed", "player": "O"}) is None
    assert describe_message({"type": "error", "message": "JSON inválido"}) == "Error: JSON inválido"


def test_join_message_does_not_reset_game():
    assert JOIN_MESSAGE == {"action": "state"}
