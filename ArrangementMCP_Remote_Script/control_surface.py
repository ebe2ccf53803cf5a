import json
import queue
import socket
import threading
import time
import traceback

from _Framework.ControlSurface import ControlSurface

from . import dispatch
from .handlers._helpers import ClipRegistry

DEFAULT_PORT = 9877
HOST = "localhost"
COMMAND_TIMEOUT = 10.0
MAX_LINE_BYTES = 1048576


def _close_quietly(sock):
    for close in (lambda: sock.shutdown(socket.SHUT_RDWR), sock.close):
        try:
            close()
        except OSError:
            pass


class ArrangementMCP(ControlSurface):
    """Serves newline-delimited JSON commands and runs them on Live's main thread."""

    def __init__(self, c_instance):
        ControlSurface.__init__(self, c_instance)
        self.clip_registry = ClipRegistry()
        self.server = None
        self.server_thread = None
        self.client_threads = []
        self.client_sockets = []
        self.running = False
        self.start_server()
        self.log_message("ArrangementMCP listening on port " + str(DEFAULT_PORT))

    @property
    def _song(self):
        return self.song()

    def disconnect(self):
        self.running = False
        for sock in self.client_sockets[:]:
            _close_quietly(sock)
        self.client_sockets = []
        if self.server:
            _close_quietly(self.server)

        for thread in [self.server_thread] + self.client_threads:
            if thread and thread.is_alive():
                thread.join(3.0)

        ControlSurface.disconnect(self)
        self.log_message("ArrangementMCP disconnected")

    def start_server(self):
        try:
            self.server = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
            self.server.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            self.server.bind((HOST, DEFAULT_PORT))
            self.server.listen(5)
        except OSError as e:
            self.log_message("Error starting server: " + str(e))
            self.show_message("ArrangementMCP: could not open port " + str(DEFAULT_PORT))
            return

        self.running = True
        self.server_thread = threading.Thread(target=self._accept_loop)
        self.server_thread.daemon = True
        self.server_thread.start()

    def _accept_loop(self):
        self.server.settimeout(1.0)
        while self.running:
            try:
                client, address = self.server.accept()
            except socket.timeout:
                continue
            except OSError as e:
                if self.running:
                    self.log_message("Server accept error: " + str(e))
                    time.sleep(0.5)
                continue

            self.log_message("Connection accepted from " + str(address))
            thread = threading.Thread(target=self._handle_client, args=(client,))
            thread.daemon = True
            thread.start()
            self.client_sockets.append(client)
            self.client_threads = [t for t in self.client_threads if t.is_alive()] + [thread]

    def _handle_client(self, client):
        client.settimeout(5.0)
        buffer = ''
        try:
            while self.running:
                try:
                    data = client.recv(8192)
                except socket.timeout:
                    continue
                except OSError as e:
                    self.log_message("Client receive error: " + str(e))
                    break
                if not data:
                    break

                buffer += data.decode('utf-8', errors='replace')
                while '\n' in buffer:
                    line, buffer = buffer.split('\n', 1)
                    if not line.strip():
                        continue
                    try:
                        command = json.loads(line)
                    except ValueError:
                        self.log_message("Invalid JSON received, skipping: " + line[:100])
                        continue
                    response = self._process_command(command)
                    client.sendall((json.dumps(response) + '\n').encode('utf-8'))

                if len(buffer) > MAX_LINE_BYTES:
                    self.log_message("Command line too long, disconnecting client")
                    break
        except OSError as e:
            self.log_message("Client connection error: " + str(e))
        except Exception as e:
            self.log_message("Error in client handler: " + str(e))
            self.log_message(traceback.format_exc())
        finally:
            _close_quietly(client)
            if client in self.client_sockets:
                self.client_sockets.remove(client)

    def _process_command(self, command):
        """Run a command on Live's main thread and wait for its response."""
        command_type = command.get("type", "")
        if not dispatch.is_known_command(command_type):
            return {"status": "error", "message": "Unknown command: " + command_type,
                    "error_type": "invalid"}
        self.log_message("Received command: " + command_type)

        response_queue = queue.Queue()

        def main_thread_task():
            response_queue.put(
                dispatch.process_command(self._song, self.clip_registry, command, self))

        self.schedule_message(0, main_thread_task)
        try:
            return response_queue.get(timeout=COMMAND_TIMEOUT)
        except queue.Empty as e:
            return dispatch.error_response(e)
