# config.py
import os

# Pausa antes de la jugada de la IA (segundos)
AI_DELAY = float(os.environ.get("TRIKI_AI_DELAY", "0.5"))

LOG_LEVEL = os.environ.get("TRIKI_LOG_LEVEL", "INFO").upper()
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

STATIC_DIR = os.environ.get("TRIKI_STATIC_DIR", "static")

HOST = os.environ.get("TRIKI_HOST", "127.0.0.1")
PORT = int(os.environ.get("TRIKI_PORT", "8000"))

# Usado por el cliente de escritorio
WS_URL = os.environ.get("TRIKI_WS_URL", f"ws://{HOST}:{PORT}")
