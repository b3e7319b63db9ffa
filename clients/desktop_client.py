# clients/desktop_client.py
"""
Cliente de escritorio para Triki.

Ejecutar desde la raíz del proyecto con `python -m clients.desktop_client`
o, con el paquete instalado, con el comando `triki-desktop`.
"""
import json
import asyncio
import threading
import queue
import tkinter as tk
from tkinter import messagebox
import customtkinter as ctk
import websockets  # usa la librería 'websockets'
from typing import Optional

import config
from game_logic import WIN_LINES

# Config CustomTkinter
ctk.set_appearance_mode("System")
ctk.set_default_color_theme("blue")

# primer mensaje al conectarse: solo pide el estado, no reinicia la partida
JOIN_MESSAGE = {"action": "state"}

REJECT_MESSAGES = {
    "out_of_range": "Posición inválida",
    "occupied": "Casilla ocupada",
    "game_over": "La partida ya terminó",
    "not_your_turn": "Espera el turno de la IA",
}


def describe_message(data: dict) -> Optional[str]:
    """Texto de estado para un mensaje del servidor (None si no cambia)."""
    t = data.get("type")
    if t == "state":
        return data.get("status")
    if t == "move_rejected":
        return REJECT_MESSAGES.get(data.get("reason"), "Jugada inválida")
    if t == "error":
        return "Error: " + data.get("message", "")
    return None


class TrikiClientApp:
    def __init__(self, root):
        self.root = root
        self.root.title("Triki - Cliente")
        self.root.geometry("420x560")

        self.partida_var = tk.StringVar(value="")
        self.vs_ai_var = tk.BooleanVar(value=True)
        self.connected = False
        self.loop: Optional[asyncio.AbstractEventLoop] = None
        self.send_queue: Optional[asyncio.Queue] = None

        # cola para recibir mensajes desde el hilo async
        self.incoming = queue.Queue()

        self.build_ui()
        # polling UI para procesar mensajes
        self.root.after(100, self.process_incoming)

    def build_ui(self):
        top_frame = ctk.CTkFrame(self.root)
        top_frame.pack(padx=12, pady=12, fill="x")

        ctk.CTkLabel(top_frame, text="Partida (id):").grid(row=0, column=0, sticky="w")
        ctk.CTkEntry(top_frame, textvariable=self.partida_var).grid(row=0, column=1, sticky="we", padx=6)
        ctk.CTkCheckBox(top_frame, text="Contra la IA", variable=self.vs_ai_var,
                        command=self.on_mode).grid(row=1, column=0, columnspan=2, sticky="w", pady=4)

        self.connect_btn = ctk.CTkButton(top_frame, text="Conectar", command=self.on_connect)
        self.connect_btn.grid(row=2, column=0, columnspan=2, pady=8, sticky="we")

        # tablero
        self.board_frame = ctk.CTkFrame(self.root)
        self.board_frame.pack(padx=12, pady=8)

        self.cell_buttons = []
        for i in range(9):
            btn = ctk.CTkButton(self.board_frame, text="", width=90, height=90, font=("Arial", 28),
                                command=lambda i=i: self.on_cell_click(i))
            btn.grid(row=i // 3, column=i % 3, padx=6, pady=6)
            self.cell_buttons.append(btn)
        self.cell_color = self.cell_buttons[0].cget("fg_color")

        # info
        self.info_label = ctk.CTkLabel(self.root, text="Desconectado", anchor="center")
        self.info_label.pack(pady=12)

        # reset
        self.reset_btn = ctk.CTkButton(self.root, text="Reiniciar partida", command=self.on_reset)
        self.reset_btn.pack(pady=6, fill="x", padx=12)
        self.reset_btn.configure(state="disabled")

    def process_incoming(self):
        """Procesa mensajes puestos por el hilo async en self.incoming"""
        while True:
            try:
                msg = self.incoming.get_nowait()
            except queue.Empty:
                break
            self.handle_message(json.loads(msg))
        self.root.after(100, self.process_incoming)

    def handle_message(self, data: dict):
        if data.get("type") == "state":
            self.update_board(data.get("board", [None] * 9), data.get("winning_line"))
            self.reset_btn.configure(state="normal")
        text = describe_message(data)
        if text is not None:
            self.info_label.configure(text=text)

    def update_board(self, board, winning_line):
        for i, val in enumerate(board):
            self.cell_buttons[i].configure(text=val or "", fg_color=self.cell_color)
        if winning_line is not None:
            for i in WIN_LINES[winning_line]:
                self.cell_buttons[i].configure(fg_color="green")

    def send(self, payload: dict):
        if not self.connected or self.loop is None:
            return
        asyncio.run_coroutine_threadsafe(self.send_queue.put(payload), self.loop)

    def on_connect(self):
        if self.connected:
            messagebox.showinfo("Ya conectado", "Ya estás conectado a una partida.")
            return
        partida_id = self.partida_var.get().strip()
        if partida_id == "":
            messagebox.showinfo("Partida vacía", "Crea una partida (POST /api/games) o ingresa un id.")
            return
        self.connect_btn.configure(state="disabled")
        threading.Thread(target=self.run_async_loop, args=(partida_id,), daemon=True).start()

    def on_cell_click(self, position: int):
        if not self.connected:
            messagebox.showinfo("No conectado", "Conéctate primero.")
            return
        # el servidor valida turno y casilla
        self.send({"action": "move", "position": position})

    def on_mode(self):
        self.send({"action": "mode", "vs_ai": self.vs_ai_var.get()})

    def on_reset(self):
        self.send({"action": "reset"})

    def run_async_loop(self, partida_id: str):
        """
        Se ejecuta en hilo separado. Crea un loop async y lo corre.
        """
        # cada hilo debe tener su propio event loop
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        self.loop = loop
        try:
            loop.run_until_complete(self.async_main(partida_id))
        finally:
            self.loop = None
            loop.close()

    async def async_main(self, partida_id: str):
        uri = f"{config.WS_URL}/ws/{partida_id}"
        self.send_queue = asyncio.Queue()
        try:
            async with websockets.connect(uri) as ws:
                self.connected = True
                await ws.send(json.dumps(JOIN_MESSAGE))
                # iniciar tareas: receiver and sender
                receiver = asyncio.create_task(self.receiver(ws))
                sender = asyncio.create_task(self.sender(ws))
                # mantener hasta que alguna termine (receiver se rompe al desconectar)
                done, pending = await asyncio.wait([receiver, sender], return_when=asyncio.FIRST_COMPLETED)
                for p in pending:
                    p.cancel()
        except (OSError, websockets.exceptions.WebSocketException) as e:
            # enviar error a UI
            self.incoming.put(json.dumps({"type": "error", "message": f"Conexión fallida: {e}"}))
        finally:
            self.connected = False
            self.connect_btn.configure(state="normal")

    async def receiver(self, ws):
        try:
            async for msg in ws:
                # colocar en cola thread-safe para Tkinter
                self.incoming.put(msg)
        except websockets.exceptions.ConnectionClosed as e:
            self.incoming.put(json.dumps({"type": "error", "message": f"Conexión cerrada: {e}"}))

    async def sender(self, ws):
        # toma acciones de self.send_queue y las manda al websocket
        while True:
            payload = await self.send_queue.get()
            await ws.send(json.dumps(payload))


def run_app():
    root = ctk.CTk()
    TrikiClientApp(root)
    root.mainloop()


if __name__ == "__main__":
    run_app()
