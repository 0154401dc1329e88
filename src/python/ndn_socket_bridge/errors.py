"""
Error kinds raised inside the bridge.

Every public host-facing call converts these into an ``on_error``
notification plus an empty result; the typed transport functions report them
through ``RequestResult.error``.
"""


class BridgeError(Exception):
    pass


class AddressResolutionError(BridgeError):
    """Host name could not be resolved, or the port is out of range."""


class MalformedHexError(BridgeError, ValueError):
    """Odd-length text or a character outside [0-9a-fA-F]."""


class SocketTimeoutError(BridgeError):
    """No reply datagram arrived within the receive timeout."""


class SocketIOError(BridgeError):
    """Bind, send or receive failed at the socket layer."""


class NotificationDeliveryError(BridgeError):
    """A host callback raised while an event was delivered to it."""


class ListenerStateError(BridgeError):
    pass


class ConfigError(BridgeError):
    pass
