import datetime
import logging
from enum import Enum

class LogLevel(Enum):
    DEBUG = 0
    INFO = 1
    WARN = 2
    ERROR = 3

class ILogger:
    def log(self, level: LogLevel, component: str, msg: str):
        pass

class ConsoleLogger(ILogger):
    def __init__(self, min_level: LogLevel = LogLevel.INFO):
        self.min_level = min_level

    def log(self, level: LogLevel, component: str, msg: str):
        if level.value < self.min_level.value: return
        ts = datetime.datetime.now().strftime("%H:%M:%S.%f")[:-3]
        print(f"[{ts}] [{level.name:5}] [{component}] {msg}")

_STD_LEVELS = {
    LogLevel.DEBUG: logging.DEBUG,
    LogLevel.INFO: logging.INFO,
    LogLevel.WARN: logging.WARNING,
    LogLevel.ERROR: logging.ERROR,
}

class StdLogger(ILogger):
    """Routes bridge log lines into the stdlib ``logging`` tree."""
    def __init__(self, name: str = "ndn_socket_bridge"):
        self._logger = logging.getLogger(name)

    def log(self, level: LogLevel, component: str, msg: str):
        self._logger.log(_STD_LEVELS[level], "[%s] %s", component, msg)
