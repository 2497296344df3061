"""Small JSON HTTP server for exposing handlers over GET and POST."""

from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable

from flask import Flask, jsonify, request


class ServerMode(str, Enum):
    DEBUG = "debug"
    RELEASE = "release"
    TEST = "test"


@dataclass
class Response:
    """Standard handler reply."""

    code: int = 0
    data: Any = None
    msg: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"code": self.code, "data": self.data, "msg": self.msg}


Handler = Callable[[bytes], Response]


def _payload(result: Any) -> Any:
    return result.to_dict() if isinstance(result, Response) else result


def parse_address(addr) -> tuple[str, int]:
    """Turn ``"8080"``, ``":8080"`` or ``"host:8080"`` into ``(host, port)``."""
    text = str(addr)
    if ":" not in text:
        text = f":{text}"
    host, _, port = text.rpartition(":")
    return host or "0.0.0.0", int(port)


class Server:
    """HTTP server whose handlers take raw JSON bytes and return a Response."""

    def __init__(self, mode=ServerMode.RELEASE):
        self.mode = ServerMode(mode)
        self.app = Flask(__name__)
        self.app.debug = self.mode is ServerMode.DEBUG
        self.app.testing = self.mode is ServerMode.TEST

    def add_handle_post(self, path, f: Handler) -> None:
        """Register a POST handler that receives the raw request body."""

        def view():
            body = request.get_data()
            try:
                result = f(body)
            except Exception as exc:
                return jsonify(str(exc)), 200
            return jsonify(_payload(result)), 200

        self.app.add_url_rule(path, endpoint=f"POST {path}", view_func=view, methods=["POST"])

    def add_handle_get(self, path, f: Handler) -> None:
        """Register a GET handler that receives the query parameters as JSON bytes."""

        def view():
            params = {key: request.args.get(key, "") for key in request.args}
            try:
                encoded = json.dumps(
                    params, sort_keys=True, separators=(",", ":"), ensure_ascii=False
                ).encode("utf-8")
            except (TypeError, ValueError):
                return jsonify({"error": "marshal failed"}), 500
            try:
                result = f(encoded)
            except Exception as exc:
                return jsonify(str(exc)), 200
            return jsonify(_payload(result)), 200

        self.app.add_url_rule(path, endpoint=f"GET {path}", view_func=view, methods=["GET"])

    def start(self, addr) -> None:
        """Serve until interrupted on the given address."""
        host, port = parse_address(addr)
        self.app.run(host=host, port=port)