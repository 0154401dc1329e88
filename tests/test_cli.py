import json
import socket

from ndn_socket_bridge.__main__ import main, build_parser, load_config
from responders import UdpResponder

def test_request_prints_reply(capsys):
    r = UdpResponder(lambda data: data + b'\x01')
    try:
        assert main(["request", "127.0.0.1", str(r.port), "abcd"]) == 0
    finally:
        r.stop()
    assert capsys.readouterr().out.strip() == "abcd01"

def test_request_timeout_exits_nonzero(capsys):
    silent = UdpResponder()
    try:
        assert main(["request", "127.0.0.1", str(silent.port), "00", "--timeout-ms", "100"]) == 1
    finally:
        silent.stop()
    assert "Socket Bridge ERROR" in capsys.readouterr().err

def test_send(capsys):
    r = UdpResponder()
    try:
        assert main(["send", "127.0.0.1", str(r.port), "0a0b"]) == 0
        assert main(["send", "127.0.0.1", str(r.port), "0a0"]) == 1
    finally:
        r.stop()

def test_bad_config_exits_2(tmp_path, capsys):
    path = tmp_path / "c.json"
    path.write_text(json.dumps({"nope": 1}))
    assert main(["--config", str(path), "send", "127.0.0.1", "1", "00"]) == 2
    assert "nope" in capsys.readouterr().err

def test_load_config_applies_listen_flags(tmp_path, monkeypatch):
    monkeypatch.delenv("NDN_BRIDGE_PORT", raising=False)
    path = tmp_path / "c.json"
    path.write_text(json.dumps({"listener_port": 1111}))
    args = build_parser().parse_args(["--config", str(path), "--verbose", "listen", "--port", "2222", "--host", "127.0.0.1"])
    cfg = load_config(args)
    assert cfg.listener_port == 2222
    assert cfg.listener_host == "127.0.0.1"
    assert cfg.packet_dump

def test_listen_bind_failure_exits_nonzero(capsys):
    blocker = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    blocker.bind(("127.0.0.1", 0))
    try:
        rc = main(["listen", "--host", "127.0.0.1", "--port", str(blocker.getsockname()[1])])
    finally:
        blocker.close()
    assert rc == 1
    out = capsys.readouterr()
    assert "READY" in out.out
    assert "Failed to bind" in out.err
