import queue
import threading
from typing import Callable, Optional

from .errors import NotificationDeliveryError
from .logger import LogLevel, ConsoleLogger, ILogger

ERROR_PREFIX = "Socket Bridge ERROR: "

class NotificationSink:
    """
    The host side of the bridge. Three events, fixed argument shapes:

        on_ready()
        on_error(message)
        on_interest_received(ip_address, port, payload_hex)
    """
    def on_ready(self): pass
    def on_error(self, message: str): pass
    def on_interest_received(self, ip_address: str, port: int, payload_hex: str): pass

class CallbackSink(NotificationSink):
    """Adapts the host's plain named callbacks; unset ones are ignored."""
    def __init__(self,
                 on_ready: Optional[Callable[[], None]] = None,
                 on_error: Optional[Callable[[str], None]] = None,
                 on_interest_received: Optional[Callable[[str, int, str], None]] = None):
        self._ready = on_ready
        self._error = on_error
        self._interest = on_interest_received

    def on_ready(self):
        if self._ready: self._ready()

    def on_error(self, message: str):
        if self._error: self._error(message)

    def on_interest_received(self, ip_address: str, port: int, payload_hex: str):
        if self._interest: self._interest(ip_address, port, payload_hex)

class Notifier:
    """
    Thread-safe delivery into a NotificationSink.

    Deliveries from the listener thread and from request threads are
    serialized by one lock. A host callback that raises never reaches the
    caller: the failure is logged as a NotificationDeliveryError.
    """
    def __init__(self, sink: Optional[NotificationSink] = None, logger: Optional[ILogger] = None):
        self.sink = sink or NotificationSink()
        self.logger = logger or ConsoleLogger()
        self.failed_deliveries = 0
        self._lock = threading.RLock()

    def ready(self) -> bool:
        return self._deliver("on_ready")

    def error(self, message: str) -> bool:
        self.logger.log(LogLevel.ERROR, "Notify", message)
        return self._deliver("on_error", ERROR_PREFIX + message)

    def interest_received(self, ip_address: str, port: int, payload_hex: str) -> bool:
        return self._deliver("on_interest_received", ip_address, port, payload_hex)

    def _deliver(self, event: str, *args) -> bool:
        with self._lock:
            try:
                getattr(self.sink, event)(*args)
                return True
            except Exception as e:
                self.failed_deliveries += 1
                err = NotificationDeliveryError(f"{event} callback failed: {e!r}")
                self.logger.log(LogLevel.ERROR, "Notify", str(err))
        # A failed ready/interest delivery is still reported to the host once.
        if event != "on_error":
            with self._lock:
                try:
                    self.sink.on_error(ERROR_PREFIX + str(err))
                except Exception as e:
                    self.failed_deliveries += 1
                    self.logger.log(LogLevel.ERROR, "Notify", f"on_error callback failed: {e!r}")
        return False

_STOP = object()

class QueuedNotifier:
    """
    Bounded single-writer queue in front of a Notifier.

    Producers (the listener loop) enqueue and return; one delivery thread
    drains in FIFO order, so per-listener arrival order is kept. A full queue
    blocks the producer instead of dropping events.
    """
    def __init__(self, notifier: Notifier, maxsize: int = 256):
        self.notifier = notifier
        self._queue: "queue.Queue" = queue.Queue(maxsize=maxsize)
        self._closed = False
        self._thread = threading.Thread(target=self._run, name="ndn-bridge-notify", daemon=True)
        self._thread.start()

    def ready(self):
        self._put("ready")

    def error(self, message: str):
        self._put("error", message)

    def interest_received(self, ip_address: str, port: int, payload_hex: str):
        self._put("interest_received", ip_address, port, payload_hex)

    def _put(self, method: str, *args):
        if self._closed:
            getattr(self.notifier, method)(*args)
            return
        self._queue.put((method, args))

    def flush(self, timeout: Optional[float] = None) -> bool:
        """Wait until every queued event has been handed to the sink."""
        if self._closed: return True
        done = threading.Event()
        self._put("_mark", done)
        return done.wait(timeout)

    def close(self, timeout: float = 2.0):
        if self._closed: return
        self._closed = True
        self._queue.put((_STOP, ()))
        self._thread.join(timeout=timeout)

    def _run(self):
        while True:
            method, args = self._queue.get()
            if method is _STOP: break
            self._dispatch(method, args)
        # Producers that raced with close() still get delivered.
        while True:
            try: method, args = self._queue.get_nowait()
            except queue.Empty: break
            if method is not _STOP: self._dispatch(method, args)

    def _dispatch(self, method, args):
        if method == "_mark":
            args[0].set()
            return
        getattr(self.notifier, method)(*args)
