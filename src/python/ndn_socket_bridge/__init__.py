from .bridge import SocketBridge, SUCCESS
from .config import BridgeConfig
from .errors import (BridgeError, AddressResolutionError, MalformedHexError, SocketTimeoutError,
                     SocketIOError, NotificationDeliveryError, ListenerStateError, ConfigError)
from .listener import InterestListener, ListenerState, Termination
from .logger import LogLevel, ILogger, ConsoleLogger, StdLogger
from .notify import NotificationSink, CallbackSink, Notifier, QueuedNotifier
from .transport import RequestResult, Status, send_interest, send_interest_and_wait

__version__ = "0.1.0"
