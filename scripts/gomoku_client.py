#!/usr/bin/env python3
"""
Socket.IO console client for the Gomoku game server.

Usage:
    python gomoku_client.py http://localhost:3001

Commands:
    list - List live rooms
    create - Create a new room (you play X)
    join <room_id> - Join a waiting room (you play O)
    move <x> <y> - Place your mark
    show - Print the board around the last move
    resign - Resign the current game
    exit - Exit the program
"""

import sys
from typing import List, Optional

import requests
import socketio

VIEW_RADIUS = 7


class GomokuSocketIOClient:
    """Socket.IO client for the Gomoku game server."""

    def __init__(self, server_url: str):
        self.server_url = server_url.rstrip('/')
        self.sio = socketio.Client()
        self.room_id: Optional[str] = None
        self.player: Optional[str] = None
        self.board: Optional[List[List[Optional[str]]]] = None
        self.turn: Optional[str] = None
        self.last_move = None
        self.setup_socketio_handlers()

    def setup_socketio_handlers(self):
        """Set up Socket.IO event handlers."""

        @self.sio.on('roomCreated')
        def on_room_created(data):
            self.room_id = data['roomId']
            self.player = 'X'
            print(f"\n✓ Room created: {self.room_id}. Waiting for an opponent...")

        @self.sio.on('roomJoined')
        def on_room_joined(data):
            self.room_id = data['roomId']
            self.player = data['player']
            print(f"\n✓ In room {self.room_id}, playing {self.player}")

        @self.sio.on('gameStart')
        def on_game_start(data):
            self.board = data['board']
            self.turn = data['turn']
            print(f"\n🎮 Game started, {self.turn} moves first")

        @self.sio.on('boardUpdate')
        def on_board_update(data):
            self.board = data['board']
            self.turn = data['turn']
            self.last_move = data['lastMove']
            self.display_board()
            if self.turn == self.player:
                print("Your turn")

        @self.sio.on('gameOver')
        def on_game_over(data):
            winner = data['winner']
            if winner == 'draw':
                print("\n🤝 Game over: draw")
            elif winner == self.player:
                print(f"\n🏆 You win ({data['reason']})")
            else:
                print(f"\n💀 {winner} wins ({data['reason']})")
            self._leave_room()

        @self.sio.on('opponentDisconnected')
        def on_opponent_disconnected(data=None):
            print("\n📴 Opponent disconnected, game over")
            self._leave_room()

        @self.sio.on('error')
        def on_error(data):
            print(f"\n❌ Server error: {data.get('message', 'Unknown error')}")

    def _leave_room(self):
        self.room_id = None
        self.player = None
        self.turn = None
        self.last_move = None

    def connect_socketio(self) -> bool:
        """Connect to the Socket.IO server."""
        try:
            self.sio.connect(self.server_url)
            return True
        except socketio.exceptions.ConnectionError as e:
            print(f"✗ Socket.IO connection failed: {e}")
            return False

    def disconnect_socketio(self):
        """Disconnect from Socket.IO server."""
        if self.sio.connected:
            self.sio.disconnect()

    def list_rooms(self):
        """Print the live rooms reported by the HTTP API."""
        try:
            response = requests.get(f"{self.server_url}/api/rooms")
            rooms = response.json()['data']
        except (requests.RequestException, ValueError, KeyError) as e:
            print(f"✗ List rooms error: {e}")
            return

        if not rooms:
            print("No live rooms")
            return
        for room in rooms:
            print(f"  {room['room_id']}  {room['status']}")

    def create_room(self):
        self.sio.emit('createRoom')

    def join_room(self, room_id: str):
        self.sio.emit('joinRoom', room_id)

    def move(self, x: int, y: int):
        if self.room_id is None:
            print("Not in a room")
            return
        self.sio.emit('move', {'roomId': self.room_id, 'x': x, 'y': y})

    def resign(self):
        if self.room_id is None:
            print("Not in a room")
            return
        self.sio.emit('resign', self.room_id)

    def display_board(self):
        """Print the part of the board surrounding the last move."""
        if self.board is None:
            print("No game in progress")
            return

        size = len(self.board)
        cx, cy = (self.last_move['x'], self.last_move['y']) if self.last_move else (size // 2, size // 2)
        rows = range(max(0, cx - VIEW_RADIUS), min(size, cx + VIEW_RADIUS + 1))
        cols = range(max(0, cy - VIEW_RADIUS), min(size, cy + VIEW_RADIUS + 1))

        print("\n    " + "".join(f"{c:>3}" for c in cols))
        for r in rows:
            cells = "".join(f"{self.board[r][c] or '.':>3}" for c in cols)
            print(f"{r:>3} {cells}")
        if self.turn:
            print(f"Turn: {self.turn}")


def main():
    """Main function."""
    if len(sys.argv) != 2:
        print("Usage: python gomoku_client.py SERVER_URL")
        print("Example: python gomoku_client.py http://localhost:3001")
        sys.exit(1)

    server_url = sys.argv[1]
    client = GomokuSocketIOClient(server_url)

    print(f"Connecting to server at {server_url}")
    if not client.connect_socketio():
        sys.exit(1)

    print("\nAvailable commands:")
    print("  list - List live rooms")
    print("  create - Create a new room")
    print("  join <room_id> - Join a room")
    print("  move <x> <y> - Place your mark")
    print("  show - Show the board")
    print("  resign - Resign the current game")
    print("  exit - Exit the program")

    try:
        while True:
            command = input("> ").strip()
            if not command:
                continue

            parts = command.split()
            cmd = parts[0].lower()

            if cmd == "exit":
                print("Goodbye!")
                break
            elif cmd == "list":
                client.list_rooms()
            elif cmd == "create":
                client.create_room()
            elif cmd == "join":
                if len(parts) != 2:
                    print("Usage: join <room_id>")
                    continue
                client.join_room(parts[1])
            elif cmd == "move":
                if len(parts) != 3 or not all(p.isdigit() for p in parts[1:]):
                    print("Usage: move <x> <y>")
                    continue
                client.move(int(parts[1]), int(parts[2]))
            elif cmd == "show":
                client.display_board()
            elif cmd == "resign":
                client.resign()
            else:
                print("Unknown command. Available: list, create, join <room_id>, move <x> <y>, show, resign, exit")

    except (KeyboardInterrupt, EOFError):
        print("\n👋 Exiting...")
    finally:
        client.disconnect_socketio()


if __name__ == "__main__":
    main()
