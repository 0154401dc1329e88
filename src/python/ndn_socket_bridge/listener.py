import select
import socket
import threading
from enum import Enum
from typing import Optional, Tuple

from . import hexcodec
from .config import DEFAULT_LISTENER_PORT, LISTENER_BUFFER_SIZE
from .errors import ListenerStateError, SocketIOError
from .logger import LogLevel, ConsoleLogger, ILogger
from .transport import receive_datagram, dump_packet

class ListenerState(Enum):
    UNSTARTED = 0
    LISTENING = 1
    TERMINATED = 2

class Termination(Enum):
    ERROR = "error"
    SHUTDOWN = "shutdown"

class InterestListener:
    """
    Long-lived UDP socket bound to one port, forwarding every datagram it
    receives to ``notifier.interest_received(ip, port, payload_hex)``.

    Lifecycle: UNSTARTED -> LISTENING -> TERMINATED(ERROR | SHUTDOWN).
    There is no restart; build a new listener instead. The socket is owned by
    the receive loop; stop() only flips the running flag and closes it once
    the loop has let go.
    """
    def __init__(self, notifier, port: int = DEFAULT_LISTENER_PORT, host: str = "0.0.0.0",
                 buffer_size: int = LISTENER_BUFFER_SIZE, logger: Optional[ILogger] = None,
                 packet_dump: bool = False, poll_interval: float = 0.1):
        self.notifier = notifier
        self.port = port
        self.host = host
        self.buffer_size = buffer_size
        self.logger = logger or ConsoleLogger()
        self.packet_dump = packet_dump
        self.poll_interval = poll_interval

        self.state = ListenerState.UNSTARTED
        self.termination: Optional[Termination] = None
        self.address: Optional[Tuple[str, int]] = None
        self.received_count = 0
        self.running = False
        self.thread: Optional[threading.Thread] = None
        self._sock: Optional[socket.socket] = None
        self._lock = threading.Lock()

    def start(self) -> Tuple[str, int]:
        """
        Bind and start the receive loop. Returns the bound (host, port).
        Idempotent while listening. A bind failure terminates the listener,
        emits one error notification and raises SocketIOError.
        """
        with self._lock:
            if self.state is ListenerState.LISTENING:
                return self.address
            if self.state is ListenerState.TERMINATED:
                raise ListenerStateError(f"Listener already terminated ({self.termination.value})")

            try:
                s = socket.socket(socket.AF_INET6 if ":" in self.host else socket.AF_INET, socket.SOCK_DGRAM)
            except OSError as e:
                self._fail_bind(e)
            try:
                s.bind((self.host, self.port))
            except OSError as e:
                s.close()
                self._fail_bind(e)

            self._sock = s
            self.address = s.getsockname()[:2]
            self.state = ListenerState.LISTENING
            self.running = True
            self.thread = threading.Thread(target=self._run, name=f"ndn-bridge-listener-{self.address[1]}", daemon=True)
            self.thread.start()
            self.logger.log(LogLevel.INFO, "Listener", f"Bound {self.address[0]}:{self.address[1]} (udp)")
            return self.address

    def _fail_bind(self, e: OSError):
        self.state = ListenerState.TERMINATED
        self.termination = Termination.ERROR
        msg = f"Failed to bind {self.host}:{self.port}: {e}"
        self.logger.log(LogLevel.ERROR, "Listener", msg)
        self.notifier.error(msg)
        raise SocketIOError(msg) from e

    def stop(self, timeout: float = 1.0):
        with self._lock:
            if self.state is ListenerState.TERMINATED: return
            if self.state is ListenerState.UNSTARTED:
                self.state = ListenerState.TERMINATED
                self.termination = Termination.SHUTDOWN
                return
            self.running = False
        if self.thread and self.thread is not threading.current_thread():
            self.thread.join(timeout=timeout)
        with self._lock:
            if self.termination is None:
                self.termination = Termination.SHUTDOWN
            self.state = ListenerState.TERMINATED
        self._close()

    def join(self, timeout: Optional[float] = None) -> bool:
        """Wait for the receive loop to end; True when it has."""
        if self.thread: self.thread.join(timeout)
        return not (self.thread and self.thread.is_alive())

    @property
    def is_listening(self) -> bool:
        return self.state is ListenerState.LISTENING

    def _close(self):
        s, self._sock = self._sock, None
        if s:
            try: s.close()
            except OSError: pass

    def _run(self):
        sock = self._sock
        try:
            while self.running:
                r, _, _ = select.select([sock], [], [], self.poll_interval)
                if not r: continue
                try:
                    data, addr, truncated = receive_datagram(sock, self.buffer_size)
                except ConnectionResetError:
                    # Windows reports ICMP port-unreachable on the next recv.
                    continue
                if truncated:
                    self.logger.log(LogLevel.WARN, "Listener", f"Datagram from {addr[0]}:{addr[1]} truncated to {self.buffer_size} bytes")
                if self.packet_dump: dump_packet(self.logger, "RX", data, addr)
                self.received_count += 1
                self.notifier.interest_received(addr[0], addr[1], hexcodec.encode(data))
        except (OSError, ValueError) as e:
            if self.running:
                self.running = False
                with self._lock:
                    self.state = ListenerState.TERMINATED
                    self.termination = Termination.ERROR
                msg = f"Exception {e} FAILURE, ERROR IN SOCKET CONNECTION"
                self.logger.log(LogLevel.ERROR, "Listener", msg)
                self.notifier.error(msg)
                self._close()
