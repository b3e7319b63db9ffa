# main.py
import asyncio
import json
import logging
import uuid
from pathlib import Path
from typing import Dict, List, Optional, Set

from fastapi import FastAPI, HTTPException, WebSocket, WebSocketDisconnect
from fastapi.responses import FileResponse, HTMLResponse
from fastapi.staticfiles import StaticFiles

import config
from ai import find_best_move
from schemas import ActionResult, GameCreate, GameCreated, GameStateOut, GameSummary, MoveIn
from session import GameSession

logging.basicConfig(level=config.LOG_LEVEL, format=config.LOG_FORMAT)
logger = logging.getLogger("triki.server")

app = FastAPI(
    title="Triki",
    description="Servidor FastAPI con WebSockets para Triki contra la IA o entre dos jugadores.",
    version="1.0"
)

# montar carpeta static con la página del tablero
app.mount("/static", StaticFiles(directory=config.STATIC_DIR, check_dir=False), name="static")

# ----- Estructuras en memoria para gestionar partidas -----
# partidas: partida_id -> GameSession
PARTIDAS: Dict[str, GameSession] = {}

# conexiones: partida_id -> list of websockets
CONNS: Dict[str, List[WebSocket]] = {}

# lock para evitar race conditions al manipular las estructuras
PARTIDAS_LOCK = asyncio.Lock()

# partidas creadas desde un websocket: se eliminan al cerrarse la última conexión
WS_PARTIDAS: Set[str] = set()

# jugadas de IA pendientes (se guarda la referencia hasta que terminen)
AI_TASKS: Set[asyncio.Task] = set()


# ======= Utilidades =========
def event_message(event) -> dict:
    return event.model_dump(mode="json")


def make_state_message(session: GameSession) -> dict:
    """Construye el payload con el estado del juego para enviar a clientes."""
    return session.snapshot().model_dump(mode="json")


def get_session(partida_id: str) -> GameSession:
    session = PARTIDAS.get(partida_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Partida no encontrada")
    return session


async def broadcast_to_partida(partida_id: str, message: dict):
    """Envía mensaje JSON a todos los websockets conectados a la partida."""
    if partida_id not in CONNS:
        return
    dead = []
    for ws in list(CONNS[partida_id]):
        try:
            await ws.send_text(json.dumps(message))
        except (WebSocketDisconnect, RuntimeError) as exc:
            logger.warning("Websocket muerto en partida %s: %s", partida_id, exc)
            dead.append(ws)
    # limpiar
    for d in dead:
        disconnect_ws_from_partida(partida_id, d)


async def broadcast_events(partida_id: str, session: GameSession, events: list):
    """Eventos en orden y luego el estado completo."""
    if not events:
        return
    for event in events:
        await broadcast_to_partida(partida_id, event_message(event))
    await broadcast_to_partida(partida_id, make_state_message(session))


def disconnect_ws_from_partida(partida_id: str, websocket: WebSocket):
    conns = CONNS.get(partida_id, [])
    if websocket in conns:
        conns.remove(websocket)


async def release_ws(partida_id: str, websocket: WebSocket):
    """Quita el websocket; una partida creada por websocket muere con su última conexión."""
    async with PARTIDAS_LOCK:
        disconnect_ws_from_partida(partida_id, websocket)
        if partida_id in WS_PARTIDAS and not CONNS.get(partida_id):
            PARTIDAS.pop(partida_id, None)
            CONNS.pop(partida_id, None)
            WS_PARTIDAS.discard(partida_id)
            logger.info("Partida %s eliminada al cerrar su última conexión", partida_id)


async def ai_move_after_delay(partida_id: str, session: GameSession, generation: int):
    """La IA 'piensa' un momento y juega, salvo que la partida se haya reiniciado."""
    await asyncio.sleep(config.AI_DELAY)
    if generation != session.generation or not session.ai_turn_pending():
        return
    # la búsqueda corre fuera del loop sobre una copia; se aplica aquí
    index = await asyncio.to_thread(find_best_move, session.state.copy())
    events = session.request_ai_move(generation, index=index)
    await broadcast_events(partida_id, session, events)


def schedule_ai_move(partida_id: str, session: GameSession):
    if not session.ai_turn_pending():
        return
    task = asyncio.create_task(ai_move_after_delay(partida_id, session, session.generation))
    AI_TASKS.add(task)
    task.add_done_callback(AI_TASKS.discard)


def action_result(session: GameSession, events: list) -> ActionResult:
    return ActionResult(events=events, state=session.snapshot())


# ======= Endpoints REST simples ========
@app.get("/")
async def root():
    index = Path(config.STATIC_DIR) / "index.html"
    if index.is_file():
        return FileResponse(index)
    return HTMLResponse("""
    <html>
      <head><meta charset="utf-8"><title>Triki - Servidor</title></head>
      <body>
        <h2>Servidor Triki activo ✅</h2>
        <p>Documentación OpenAPI en <a href="/docs">/docs</a></p>
      </body>
    </html>
    """)


@app.post("/api/games", response_model=GameCreated)
async def api_create_game(body: Optional[GameCreate] = None):
    """Crea una nueva partida y devuelve su id (UUID corto)."""
    partida_id = str(uuid.uuid4())[:8]
    session = GameSession(vs_ai=body.vs_ai if body else False)
    async with PARTIDAS_LOCK:
        PARTIDAS[partida_id] = session
        CONNS[partida_id] = []
    logger.info("Partida %s creada (vs_ai=%s)", partida_id, session.vs_ai)
    return GameCreated(game_id=partida_id, state=session.snapshot())


@app.get("/api/games", response_model=List[GameSummary])
async def api_list_games():
    """Lista partidas activas (id y número de conexiones)."""
    return [
        GameSummary(
            game_id=pid,
            vs_ai=session.vs_ai,
            is_over=session.state.is_over,
            connections=len(CONNS.get(pid, [])),
        )
        for pid, session in PARTIDAS.items()
    ]


@app.get("/api/games/{partida_id}", response_model=GameStateOut)
async def api_get_game(partida_id: str):
    return get_session(partida_id).snapshot()


@app.post("/api/games/{partida_id}/moves", response_model=ActionResult)
async def api_move(partida_id: str, body: MoveIn):
    session = get_session(partida_id)
    events = session.request_move(body.position)
    await broadcast_events(partida_id, session, events)
    schedule_ai_move(partida_id, session)
    return action_result(session, events)


@app.post("/api/games/{partida_id}/ai-move", response_model=ActionResult)
async def api_ai_move(partida_id: str):
    session = get_session(partida_id)
    events = session.request_ai_move()
    await broadcast_events(partida_id, session, events)
    return action_result(session, events)


@app.post("/api/games/{partida_id}/reset", response_model=ActionResult)
async def api_reset(partida_id: str):
    session = get_session(partida_id)
    events = session.reset()
    await broadcast_events(partida_id, session, events)
    return action_result(session, events)


@app.delete("/api/games/{partida_id}")
async def api_delete_game(partida_id: str):
    async with PARTIDAS_LOCK:
        get_session(partida_id)
        PARTIDAS.pop(partida_id)
        CONNS.pop(partida_id, None)
        WS_PARTIDAS.discard(partida_id)
    logger.info("Partida %s eliminada", partida_id)
    return {"game_id": partida_id, "deleted": True}


# ======= WebSocket endpoint por partida ========
async def handle_action(partida_id: str, session: GameSession, websocket: WebSocket, payload: dict):
    action = payload.get("action")

    if action == "move":
        events = session.request_move(payload.get("position"))
        await broadcast_events(partida_id, session, events)
        schedule_ai_move(partida_id, session)

    elif action == "reset":
        await broadcast_events(partida_id, session, session.reset())

    elif action == "mode":
        events = session.set_mode(bool(payload.get("vs_ai", False)))
        await broadcast_events(partida_id, session, events)

    elif action == "state":
        await websocket.send_text(json.dumps(make_state_message(session)))

    else:
        await websocket.send_text(json.dumps({"type": "error", "message": "Action desconocida"}))


@app.websocket("/ws/{partida_id}")
async def websocket_partida(websocket: WebSocket, partida_id: str):
    """
    Protocolo JSON básico:
    - Cliente -> servidor:
      {"action":"move", "position": 4}
      {"action":"reset"}
      {"action":"mode", "vs_ai": true}
      {"action":"state"}
    - Servidor -> cliente:
      {"type":"state", ...}  # estado completo
      {"type":"move_accepted" | "move_rejected" | "game_won" | ...}  # eventos
      {"type":"error", "message":"..."}
    """
    await websocket.accept()
    async with PARTIDAS_LOCK:
        if partida_id not in PARTIDAS:
            # crear la partida si no existe
            PARTIDAS[partida_id] = GameSession()
            CONNS[partida_id] = []
            WS_PARTIDAS.add(partida_id)
            logger.info("Partida %s creada desde websocket", partida_id)
        CONNS.setdefault(partida_id, []).append(websocket)
        session = PARTIDAS[partida_id]

    await websocket.send_text(json.dumps(make_state_message(session)))

    try:
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                raise WebSocketDisconnect(message.get("code", 1000))
            text = message.get("text")
            if text is None:
                await websocket.send_text(json.dumps({"type": "error", "message": "Se esperaba un mensaje de texto"}))
                continue
            try:
                payload = json.loads(text)
            except json.JSONDecodeError:
                await websocket.send_text(json.dumps({"type": "error", "message": "JSON inválido"}))
                continue
            if not isinstance(payload, dict):
                await websocket.send_text(json.dumps({"type": "error", "message": "Se esperaba un objeto JSON"}))
                continue

            await handle_action(partida_id, session, websocket, payload)

    except WebSocketDisconnect:
        logger.info("Websocket desconectado de la partida %s", partida_id)
    finally:
        # limpiar
        await release_ws(partida_id, websocket)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=config.HOST, port=config.PORT)
