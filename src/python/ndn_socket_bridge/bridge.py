"""
Host-facing facade.

The three legacy calls keep their text-in/text-out contract: hex strings in,
hex strings out, "" on any failure, never an exception. The failure itself
reaches the host through ``on_error``. ``request``/``send`` expose the typed
RequestResult for callers that need to tell a timeout from an empty reply.
"""
import threading
from typing import Optional

from .config import BridgeConfig
from .errors import BridgeError, ListenerStateError
from .listener import InterestListener
from .logger import LogLevel, ConsoleLogger, ILogger
from .notify import NotificationSink, Notifier, QueuedNotifier
from .transport import RequestResult, send_interest, send_interest_and_wait

SUCCESS = "SUCCESS"

class SocketBridge:
    def __init__(self, sink: Optional[NotificationSink] = None,
                 config: Optional[BridgeConfig] = None,
                 logger: Optional[ILogger] = None):
        self.config = (config or BridgeConfig()).validate()
        self.logger = logger or ConsoleLogger()
        self.notifier = Notifier(sink, self.logger)
        self.listener: Optional[InterestListener] = None
        self._delivery: Optional[QueuedNotifier] = None
        self._ready_sent = False
        self._lock = threading.Lock()

    def init(self):
        """Signal the host once that the bridge is operational."""
        with self._lock:
            if self._ready_sent: return
            self._ready_sent = True
        self.logger.log(LogLevel.INFO, "Bridge", "Socket bridge ready")
        self.notifier.ready()

    def request(self, ip: str, port: int, interest_hex: str) -> RequestResult:
        return send_interest_and_wait(ip, port, interest_hex,
                                      timeout=self.config.request_timeout,
                                      buffer_size=self.config.reply_buffer_size,
                                      notifier=self.notifier, logger=self.logger,
                                      packet_dump=self.config.packet_dump)

    def send(self, ip: str, port: int, interest_hex: str) -> RequestResult:
        return send_interest(ip, port, interest_hex, notifier=self.notifier,
                             logger=self.logger, packet_dump=self.config.packet_dump)

    def connect_and_start(self, ip: str, port: int, interest_hex: str) -> str:
        res = self.request(ip, port, interest_hex)
        return res.payload_hex if res.ok else ""

    def send_content_object(self, ip: str, port: int, interest_hex: str) -> str:
        self.send(ip, port, interest_hex)
        return ""

    def start_listener(self) -> InterestListener:
        """Start the interest listener at most once; raises on bind failure."""
        with self._lock:
            if self.listener is None:
                self._delivery = QueuedNotifier(self.notifier, self.config.delivery_queue_size)
                self.listener = InterestListener(self._delivery,
                                                 port=self.config.listener_port,
                                                 host=self.config.listener_host,
                                                 buffer_size=self.config.listener_buffer_size,
                                                 logger=self.logger,
                                                 packet_dump=self.config.packet_dump)
            listener = self.listener
        listener.start()
        return listener

    def connect_and_start_and_publish(self) -> str:
        try:
            self.start_listener()
        except ListenerStateError as e:
            self.notifier.error(str(e))
            return ""
        except BridgeError as e:
            # Bind failures were already notified by the listener.
            self.logger.log(LogLevel.ERROR, "Bridge", f"Listener not started: {e}")
            return ""
        return SUCCESS

    def shutdown(self):
        with self._lock:
            listener, delivery = self.listener, self._delivery
        if listener: listener.stop()
        if delivery: delivery.close()

    def __enter__(self):
        self.init()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.shutdown()
        return False
