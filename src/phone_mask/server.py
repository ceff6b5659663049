"""HTTP sidecar server for phone-mask.

Runs as a lightweight stdlib HTTP server on localhost so a UI process
written in another language can call the editor instead of carrying its
own copy of the masking logic.

Endpoints:
    GET  /health          — Health check
    GET  /layout          — Active mask layout
    POST /edit            — Stateless change event
    POST /format          — Mask a stored phone number
    POST /validate        — Submit-time validation
    POST /field/change    — Change event on a named field
    POST /field/focus     — Focus a named field
    POST /field/reset     — Reset a named field

All endpoints expect/return JSON.
Stateless body: {"text": "...", "state": {"value": "...", "selection": {...}}}
Field body:     {"field_id": "...", "text": "..."}
"""

from __future__ import annotations
import json
import logging
import os
from http.server import HTTPServer, BaseHTTPRequestHandler
from typing import Any

from .config import build_layout, load_from_yaml, setup_logging
from .editor import format_for_editing, handle_change, initial_state
from .field import MaskedPhoneField
from .layout import MaskLayout
from .types import EditorState, PhoneValidationError
from .validation import is_complete, validate_phone

logger = logging.getLogger(__name__)

DEFAULT_PORT = int(os.environ.get("PHONE_MASK_PORT", "18792"))
DEFAULT_CONFIG = os.environ.get("PHONE_MASK_CONFIG", "")

# Shared state
_layout: MaskLayout = build_layout()
_fields: dict[str, MaskedPhoneField] = {}


def _get_field(field_id: str) -> MaskedPhoneField:
    if field_id not in _fields:
        _fields[field_id] = MaskedPhoneField(_layout)
    return _fields[field_id]


def _field_payload(field_id: str, field: MaskedPhoneField) -> dict[str, Any]:
    return {"field_id": field_id, **field.state.to_dict(), "complete": field.is_complete}


class PhoneMaskHandler(BaseHTTPRequestHandler):
    """HTTP request handler for the phone-mask sidecar."""

    def _read_json(self) -> dict[str, Any]:
        length = int(self.headers.get("Content-Length", 0))
        body = self.rfile.read(length).decode("utf-8")
        return json.loads(body) if body else {}

    def _respond(self, status: int, data: Any) -> None:
        body = json.dumps(data, ensure_ascii=False).encode("utf-8")
        self.send_response(status)
        self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def log_message(self, format: str, *args: Any) -> None:
        logger.info("%s - %s", self.address_string(), format % args)

    def do_GET(self) -> None:
        if self.path == "/health":
            self._respond(200, {"status": "ok", "fields": len(_fields)})
        elif self.path == "/layout":
            self._respond(200, _layout.to_dict())
        else:
            self._respond(404, {"error": "not found"})

    def do_POST(self) -> None:
        try:
            body = self._read_json()

            if self.path == "/edit":
                state = body.get("state")
                prior = EditorState.from_dict(state) if state else initial_state(_layout)
                new = handle_change(body.get("text", ""), prior, _layout)
                self._respond(200, {**new.to_dict(), "complete": is_complete(new.masked_value, _layout)})

            elif self.path == "/format":
                self._respond(200, {"value": format_for_editing(body.get("phone"), _layout)})

            elif self.path == "/validate":
                digits = validate_phone(body.get("value"), _layout)
                self._respond(200, {"valid": True, "digits": digits})

            elif self.path.startswith("/field/"):
                action = self.path[len("/field/"):]
                if action not in ("change", "focus", "reset"):
                    self._respond(404, {"error": "not found"})
                    return
                field_id = body.get("field_id", "default")
                field = _get_field(field_id)
                if action == "change":
                    field.change(body.get("text", ""))
                elif action == "focus":
                    field.focus()
                else:
                    field.reset()
                self._respond(200, _field_payload(field_id, field))

            else:
                self._respond(404, {"error": "not found"})

        except PhoneValidationError as e:
            self._respond(400, {"valid": False, "error": str(e)})
        except json.JSONDecodeError as e:
            self._respond(400, {"error": f"invalid JSON: {e}"})
        except (TypeError, ValueError) as e:
            # malformed body fields, e.g. a null or non-numeric caret
            self._respond(400, {"error": f"bad request: {e}"})
        except Exception as e:
            logger.exception("request to %s failed", self.path)
            self._respond(500, {"error": str(e)})


def serve(port: int = DEFAULT_PORT, config_path: str = DEFAULT_CONFIG, log_level: str | None = None) -> None:
    """Start the phone-mask HTTP sidecar."""
    global _layout
    if config_path:
        cfg = load_from_yaml(config_path)
        setup_logging(log_level or cfg["log_level"])
        _layout = build_layout(cfg)
    else:
        setup_logging(log_level)
    _fields.clear()

    server = HTTPServer(("127.0.0.1", port), PhoneMaskHandler)
    logger.warning("phone-mask sidecar listening on http://127.0.0.1:%d", port)
    logger.warning("  template: %r (%d digit slots)", _layout.template, _layout.capacity)
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        logger.warning("shutting down")
        server.server_close()


if __name__ == "__main__":
    import argparse
    parser = argparse.ArgumentParser(description="phone-mask HTTP sidecar")
    parser.add_argument("--port", type=int, default=DEFAULT_PORT)
    parser.add_argument("--config", default=DEFAULT_CONFIG)
    parser.add_argument("--log-level", default=None)
    args = parser.parse_args()
    serve(port=args.port, config_path=args.config, log_level=args.log_level)
