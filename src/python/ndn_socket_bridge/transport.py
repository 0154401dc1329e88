import socket
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from . import hexcodec
from .config import DEFAULT_REQUEST_TIMEOUT_MS, REPLY_BUFFER_SIZE
from .errors import (BridgeError, AddressResolutionError, SocketTimeoutError, SocketIOError)
from .logger import LogLevel, ConsoleLogger, ILogger

DEFAULT_TIMEOUT = DEFAULT_REQUEST_TIMEOUT_MS / 1000.0

class Status(Enum):
    OK = "ok"
    TIMEOUT = "timeout"
    ERROR = "error"

@dataclass
class RequestResult:
    """
    Outcome of one request or send.

    An empty reply datagram is OK with payload b'', which is not the same
    thing as TIMEOUT. The legacy host calls flatten both to "".
    """
    status: Status
    payload: bytes = b""
    address: Optional[Tuple[str, int]] = None
    error: Optional[BridgeError] = None
    truncated: bool = False

    @property
    def ok(self) -> bool:
        return self.status is Status.OK

    @property
    def timed_out(self) -> bool:
        return self.status is Status.TIMEOUT

    @property
    def payload_hex(self) -> str:
        return hexcodec.encode(self.payload)

def resolve_endpoint(host: str, port: int) -> Tuple[int, tuple]:
    """Resolve (host, port) to (address family, sockaddr) for a UDP send."""
    if isinstance(port, bool) or not isinstance(port, int) or not 0 <= port <= 0xFFFF:
        raise AddressResolutionError(f"Invalid port {port!r}")
    if not host:
        raise AddressResolutionError("Empty host address")
    try:
        infos = socket.getaddrinfo(host, port, 0, socket.SOCK_DGRAM)
    except (socket.gaierror, UnicodeError) as e:
        raise AddressResolutionError(f"Cannot resolve host '{host}': {e}") from e
    if not infos:
        raise AddressResolutionError(f"Cannot resolve host '{host}'")
    family, _, _, _, sockaddr = infos[0]
    return family, sockaddr

def receive_datagram(sock: socket.socket, buffer_size: int) -> Tuple[bytes, tuple, bool]:
    """
    One blocking receive into a fixed buffer: (data, sender, truncated).
    Longer datagrams are cut to buffer_size; truncation is only detectable
    where recvmsg/MSG_TRUNC exist.
    """
    if hasattr(sock, "recvmsg") and hasattr(socket, "MSG_TRUNC"):
        data, _, flags, addr = sock.recvmsg(buffer_size)
        return data, addr, bool(flags & socket.MSG_TRUNC)
    data, addr = sock.recvfrom(buffer_size)
    return data, addr, False

def dump_packet(logger: ILogger, direction: str, data: bytes, addr):
    preview = hexcodec.encode(data[:32]) + ("..." if len(data) > 32 else "")
    logger.log(LogLevel.DEBUG, "DUMP", f"{direction} {len(data)} bytes {addr[0]}:{addr[1]} {preview}")

def _report(result: RequestResult, notifier, logger: ILogger, component: str) -> RequestResult:
    logger.log(LogLevel.WARN if result.timed_out else LogLevel.ERROR, component, str(result.error))
    if notifier is not None:
        notifier.error(str(result.error))
    return result

def _prepare(ip_address, port, interest_hex):
    family, sockaddr = resolve_endpoint(ip_address, port)
    data = hexcodec.decode(interest_hex)
    return family, sockaddr, data

def send_interest_and_wait(ip_address: str, port: int, interest_hex: str,
                           timeout: float = DEFAULT_TIMEOUT,
                           buffer_size: int = REPLY_BUFFER_SIZE,
                           notifier=None, logger: Optional[ILogger] = None,
                           packet_dump: bool = False) -> RequestResult:
    """
    Send one interest datagram and block for exactly one reply.

    Each call owns a fresh socket on an ephemeral port and closes it on every
    exit path. Failures never raise: they come back as TIMEOUT or ERROR and
    are reported once through ``notifier.error`` when a notifier is given.
    """
    logger = logger or ConsoleLogger()
    try:
        family, sockaddr, data = _prepare(ip_address, port, interest_hex)
        with socket.socket(family, socket.SOCK_DGRAM) as sock:
            sock.settimeout(timeout)
            sock.sendto(data, sockaddr)
            if packet_dump: dump_packet(logger, "TX", data, sockaddr)
            try:
                reply, src, truncated = receive_datagram(sock, buffer_size)
            except socket.timeout as e:
                raise SocketTimeoutError(
                    f"No response from {ip_address}:{port} within {int(timeout * 1000)} ms") from e
        if packet_dump: dump_packet(logger, "RX", reply, src)
        if truncated:
            logger.log(LogLevel.WARN, "Request", f"Reply from {src[0]}:{src[1]} truncated to {buffer_size} bytes")
        return RequestResult(Status.OK, reply, (src[0], src[1]), truncated=truncated)
    except SocketTimeoutError as e:
        return _report(RequestResult(Status.TIMEOUT, error=e), notifier, logger, "Request")
    except BridgeError as e:
        return _report(RequestResult(Status.ERROR, error=e), notifier, logger, "Request")
    except OSError as e:
        err = SocketIOError(f"Request to {ip_address}:{port} failed: {e}")
        err.__cause__ = e
        return _report(RequestResult(Status.ERROR, error=err), notifier, logger, "Request")

def send_interest(ip_address: str, port: int, interest_hex: str,
                  notifier=None, logger: Optional[ILogger] = None,
                  packet_dump: bool = False) -> RequestResult:
    """Fire-and-forget: one datagram out, no receive, socket closed at once."""
    logger = logger or ConsoleLogger()
    try:
        family, sockaddr, data = _prepare(ip_address, port, interest_hex)
        with socket.socket(family, socket.SOCK_DGRAM) as sock:
            sock.sendto(data, sockaddr)
        if packet_dump: dump_packet(logger, "TX", data, sockaddr)
        return RequestResult(Status.OK)
    except BridgeError as e:
        return _report(RequestResult(Status.ERROR, error=e), notifier, logger, "Send")
    except OSError as e:
        err = SocketIOError(f"Send to {ip_address}:{port} failed: {e}")
        err.__cause__ = e
        return _report(RequestResult(Status.ERROR, error=err), notifier, logger, "Send")
