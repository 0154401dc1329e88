import json
import os
import dataclasses
from dataclasses import dataclass
from typing import Optional

from .errors import ConfigError

DEFAULT_LISTENER_PORT = 9876
DEFAULT_REQUEST_TIMEOUT_MS = 4000
REPLY_BUFFER_SIZE = 3000
LISTENER_BUFFER_SIZE = 1024

@dataclass
class BridgeConfig:
    listener_host: str = "0.0.0.0"
    listener_port: int = DEFAULT_LISTENER_PORT
    request_timeout_ms: int = DEFAULT_REQUEST_TIMEOUT_MS
    # Datagrams longer than these are truncated by the receive call.
    reply_buffer_size: int = REPLY_BUFFER_SIZE
    listener_buffer_size: int = LISTENER_BUFFER_SIZE
    delivery_queue_size: int = 256
    packet_dump: bool = False

    @property
    def request_timeout(self) -> float:
        return self.request_timeout_ms / 1000.0

    def validate(self) -> 'BridgeConfig':
        if not isinstance(self.listener_port, int) or not 0 <= self.listener_port <= 0xFFFF:
            raise ConfigError(f"listener_port out of range: {self.listener_port!r}")
        for name in ("request_timeout_ms", "reply_buffer_size", "listener_buffer_size", "delivery_queue_size"):
            val = getattr(self, name)
            if isinstance(val, bool) or not isinstance(val, int) or val <= 0:
                raise ConfigError(f"{name} must be a positive integer, got {val!r}")
        if not isinstance(self.listener_host, str):
            raise ConfigError(f"listener_host must be a string, got {self.listener_host!r}")
        return self

    @classmethod
    def from_dict(cls, data: dict) -> 'BridgeConfig':
        if "bridge" in data and isinstance(data["bridge"], dict):
            data = data["bridge"]
        known = {f.name for f in dataclasses.fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigError(f"Unknown config keys: {', '.join(unknown)}")
        return cls(**data).validate()

    @classmethod
    def load(cls, path: str) -> 'BridgeConfig':
        try:
            with open(path, 'r') as f: data = json.load(f)
        except (OSError, ValueError) as e:
            raise ConfigError(f"Failed to load config from {path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError(f"Config root in {path} must be an object")
        return cls.from_dict(data)

    @classmethod
    def from_env(cls, base: Optional['BridgeConfig'] = None, environ=None) -> 'BridgeConfig':
        env = os.environ if environ is None else environ
        cfg = dataclasses.replace(base) if base else cls()
        try:
            if env.get("NDN_BRIDGE_PORT"): cfg.listener_port = int(env["NDN_BRIDGE_PORT"])
            if env.get("NDN_BRIDGE_TIMEOUT_MS"): cfg.request_timeout_ms = int(env["NDN_BRIDGE_TIMEOUT_MS"])
        except ValueError as e:
            raise ConfigError(f"Invalid environment override: {e}") from e
        if env.get("NDN_BRIDGE_PACKET_DUMP") == "1": cfg.packet_dump = True
        return cfg.validate()
