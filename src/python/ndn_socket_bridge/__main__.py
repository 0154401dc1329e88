import argparse
import sys
import time

from .bridge import SocketBridge
from .config import BridgeConfig
from .errors import ConfigError
from .logger import LogLevel, ConsoleLogger
from .notify import NotificationSink

class PrintSink(NotificationSink):
    def on_ready(self):
        print("READY", flush=True)

    def on_error(self, message):
        print(message, file=sys.stderr, flush=True)

    def on_interest_received(self, ip_address, port, payload_hex):
        print(f"{ip_address}:{port} {payload_hex}", flush=True)

def build_parser():
    parser = argparse.ArgumentParser(prog="ndn_socket_bridge", description="UDP bridge for hex-encoded NDN packets")
    parser.add_argument("--config", help="JSON config file")
    parser.add_argument("--verbose", action="store_true", help="Debug logging and packet dumps")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # listen
    p_listen = subparsers.add_parser("listen", help="Print every interest received on the listener port")
    p_listen.add_argument("--port", type=int, help="Listener port (default: 9876)")
    p_listen.add_argument("--host", help="Bind address (default: 0.0.0.0)")

    # request
    p_request = subparsers.add_parser("request", help="Send an interest and print the reply")
    p_request.add_argument("host")
    p_request.add_argument("port", type=int)
    p_request.add_argument("hex")
    p_request.add_argument("--timeout-ms", type=int, help="Reply timeout (default: 4000)")

    # send
    p_send = subparsers.add_parser("send", help="Send a datagram without waiting for a reply")
    p_send.add_argument("host")
    p_send.add_argument("port", type=int)
    p_send.add_argument("hex")
    return parser

def load_config(args) -> BridgeConfig:
    cfg = BridgeConfig.load(args.config) if args.config else None
    cfg = BridgeConfig.from_env(cfg)
    if getattr(args, "port", None) is not None and args.command == "listen": cfg.listener_port = args.port
    if getattr(args, "host", None) and args.command == "listen": cfg.listener_host = args.host
    if getattr(args, "timeout_ms", None) is not None: cfg.request_timeout_ms = args.timeout_ms
    if args.verbose: cfg.packet_dump = True
    return cfg.validate()

def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    try:
        cfg = load_config(args)
    except ConfigError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 2

    logger = ConsoleLogger(LogLevel.DEBUG if args.verbose else LogLevel.WARN)
    bridge = SocketBridge(PrintSink(), cfg, logger)

    if args.command == "request":
        res = bridge.request(args.host, args.port, args.hex)
        if not res.ok: return 1
        print(res.payload_hex)
        return 0

    if args.command == "send":
        return 0 if bridge.send(args.host, args.port, args.hex).ok else 1

    # listen
    bridge.init()
    if bridge.connect_and_start_and_publish() != "SUCCESS":
        bridge.shutdown()
        return 1
    try:
        while bridge.listener.is_listening:
            time.sleep(0.2)
    except KeyboardInterrupt:
        pass
    finally:
        bridge.shutdown()
    return 0 if bridge.listener.termination.value == "shutdown" else 1

if __name__ == "__main__":
    sys.exit(main())
