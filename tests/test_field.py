"""Tests for the stateful field, validation, config loading and front ends."""

import sys, os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

import io
import json
import logging
import threading
import urllib.error
import urllib.request
from http.server import HTTPServer

import pytest

from phone_mask import MaskedPhoneField, PhoneValidationError, Selection, US_PHONE
from phone_mask import build_layout, is_complete, load_config, load_from_yaml, validate_phone
from phone_mask import cli, server
from phone_mask.config import setup_logging
from phone_mask.layout import MaskLayout
from phone_mask.server import PhoneMaskHandler

EMPTY = "(   )    -    "
FULL = "(555) 123-4567"

_opener = urllib.request.build_opener(urllib.request.ProxyHandler({}))

SEVEN = MaskLayout(template="   -    ", digit_slots=(0, 1, 2, 4, 5, 6, 7))


# ── Field ────────────────────────────────────────────────────────────

def test_field_starts_empty():
    field = MaskedPhoneField.create()
    assert field.value == EMPTY
    assert field.selection == Selection(1, 1)
    assert field.digits == ""
    assert not field.is_complete


def test_field_typing():
    field = MaskedPhoneField.create()
    states = field.type("5551234567")
    assert len(states) == 10
    assert field.value == FULL
    assert field.digits == "5551234567"
    assert field.is_complete
    assert field.validate() == "5551234567"


def test_field_backspace_through_punctuation():
    field = MaskedPhoneField.create()
    field.type("5551<")
    assert field.value == "(555)    -    "
    assert field.selection.start == 4

    field.type("<")
    assert field.value == "(55 )    -    "
    assert field.selection.start == 3


def test_field_backspace_to_empty():
    field = MaskedPhoneField.create()
    field.type("5551<<<<<<")
    assert field.state == MaskedPhoneField.create().state


def test_field_load_and_focus():
    field = MaskedPhoneField(stored="555-123-45")
    assert field.value == "(555) 123-45  "
    assert field.selection.start == 1
    assert field.focus().selection.start == 12

    field.load(None)
    assert field.value == EMPTY


def test_field_reset():
    field = MaskedPhoneField.create()
    field.type("555")
    field.reset()
    assert field.value == EMPTY
    assert field.selection.start == 1


def test_field_validate_empty():
    with pytest.raises(PhoneValidationError, match="required"):
        MaskedPhoneField.create().validate()


def test_field_custom_layout():
    field = MaskedPhoneField.create(SEVEN)
    assert field.selection.start == 0
    field.type("555")
    assert field.value == "555-    "
    assert field.selection.start == 4

    field.type("1234")
    assert field.value == "555-1234"
    assert field.is_complete

    field.type("<<<<")
    assert field.value == "555-    "
    assert field.selection.start == 3

    # caret sits right after "-": backspace clears the third digit
    field.type("<")
    assert field.value == "55 -    "
    assert field.selection.start == 2


# ── Validation ───────────────────────────────────────────────────────

def test_validate_masked_value():
    assert validate_phone(FULL) == "5551234567"
    assert validate_phone("+1 (555) 123-4567") == "15551234567"


def test_validate_required():
    for value in (None, "", "   ", EMPTY):
        with pytest.raises(PhoneValidationError, match="Contact Phone Number is required."):
            validate_phone(value)


def test_validate_rejects_letters():
    with pytest.raises(PhoneValidationError, match="valid phone number"):
        validate_phone("555-CALL-NOW")


def test_validation_error_is_value_error():
    assert issubclass(PhoneValidationError, ValueError)


def test_is_complete():
    assert is_complete(FULL)
    assert not is_complete("(555) 123-456 ")
    assert not is_complete("15551234567")
    assert not is_complete(None)


# ── Config ───────────────────────────────────────────────────────────

def test_default_config_is_us_layout():
    cfg = load_config({})
    assert cfg["template"] == EMPTY
    assert cfg["digit_slots"] == US_PHONE.digit_slots
    assert build_layout() is US_PHONE
    assert build_layout(cfg) is US_PHONE


def test_nested_config_derives_slots():
    layout = build_layout({"phone_mask": {"template": "   -    "}})
    assert layout.digit_slots == (0, 1, 2, 4, 5, 6, 7)
    assert layout.special_positions == frozenset({3})


def test_config_explicit_slots():
    cfg = load_config({"template": "+1 (   )    -    ", "digit_slots": [4, 5, 6, 9, 10, 11, 13, 14, 15, 16]})
    layout = build_layout(cfg)
    assert layout.capacity == 10
    assert layout.special_positions == frozenset({0, 1, 2, 3, 7, 8, 12})


def test_flat_config_with_log_level():
    layout = build_layout({"template": "   -    ", "log_level": "INFO"})
    assert layout == SEVEN
    assert build_layout({"log_level": "DEBUG"}) is US_PHONE


def test_load_config_is_idempotent():
    for raw in ({}, {"template": "   -    ", "log_level": "INFO"}, {"phone_mask": {"blank": " "}}):
        cfg = load_config(raw)
        assert load_config(cfg) == cfg
        assert build_layout(cfg) == build_layout(raw)


def test_config_bad_layout_raises():
    with pytest.raises(ValueError):
        build_layout({"template": EMPTY, "digit_slots": [0, 1]})


def test_load_from_yaml(tmp_path):
    path = tmp_path / "mask.yaml"
    path.write_text(
        "phone_mask:\n"
        "  template: '   -    '\n"
        "  log_level: debug\n"
    )
    cfg = load_from_yaml(path)
    assert cfg["template"] == "   -    "
    assert cfg["log_level"] == "debug"
    assert build_layout(cfg) == SEVEN


def test_setup_logging_level():
    setup_logging("debug")
    assert logging.getLogger("phone_mask").level == logging.DEBUG
    setup_logging("warning")
    assert logging.getLogger("phone_mask").level == logging.WARNING


# ── CLI ──────────────────────────────────────────────────────────────

def test_cli_type(capsys):
    assert cli.main(["type", "5551234567"]) == 0
    out = json.loads(capsys.readouterr().out)
    assert out == {"value": FULL, "selection": {"start": 14, "end": 14}}


def test_cli_type_trace(capsys):
    assert cli.main(["type", "555", "--trace"]) == 0
    lines = capsys.readouterr().out.strip().splitlines()
    assert len(lines) == 4
    assert json.loads(lines[-1])["selection"]["start"] == 6


def test_cli_edit(capsys, monkeypatch):
    body = {
        "text": "(55) 123-4567",
        "state": {"value": FULL, "selection": {"start": 4, "end": 4}},
    }
    monkeypatch.setattr(sys, "stdin", io.StringIO(json.dumps(body)))
    assert cli.main(["edit"]) == 0
    out = json.loads(capsys.readouterr().out)
    assert out == {"value": "(551) 234-567 ", "selection": {"start": 3, "end": 3}}


def test_cli_edit_without_state(capsys, monkeypatch):
    monkeypatch.setattr(sys, "stdin", io.StringIO('{"text": "555"}'))
    cli.main(["edit"])
    out = json.loads(capsys.readouterr().out)
    assert out["value"] == "(555)    -    "
    assert out["selection"]["start"] == 6


def test_cli_format(capsys, monkeypatch):
    monkeypatch.setattr(sys, "stdin", io.StringIO("555.123.4567\n"))
    cli.main(["format"])
    assert capsys.readouterr().out == FULL + "\n"


def test_cli_validate(capsys, monkeypatch):
    monkeypatch.setattr(sys, "stdin", io.StringIO(FULL + "\n"))
    assert cli.main(["validate"]) == 0
    assert capsys.readouterr().out == "5551234567\n"

    monkeypatch.setattr(sys, "stdin", io.StringIO(EMPTY + "\n"))
    assert cli.main(["validate"]) == 1
    assert "required" in capsys.readouterr().err


def test_cli_config(capsys, tmp_path):
    path = tmp_path / "mask.yaml"
    path.write_text("template: '   -    '\n")
    cli.main(["--config", str(path), "type", "5551234"])
    assert json.loads(capsys.readouterr().out)["value"] == "555-1234"


# ── Server ───────────────────────────────────────────────────────────

@pytest.fixture
def sidecar():
    server = HTTPServer(("127.0.0.1", 0), PhoneMaskHandler)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    yield f"http://127.0.0.1:{server.server_address[1]}"
    server.shutdown()
    server.server_close()


def _post(url: str, data: dict) -> tuple[int, dict]:
    return _post_raw(url, json.dumps(data).encode("utf-8"))


def _post_raw(url: str, payload: bytes) -> tuple[int, dict]:
    req = urllib.request.Request(
        url, data=payload,
        headers={"Content-Type": "application/json"}, method="POST",
    )
    try:
        with _opener.open(req) as resp:
            return resp.status, json.loads(resp.read())
    except urllib.error.HTTPError as e:
        return e.code, json.loads(e.read())


def test_server_health_and_layout(sidecar):
    with _opener.open(sidecar + "/health") as resp:
        assert json.loads(resp.read())["status"] == "ok"
    with _opener.open(sidecar + "/layout") as resp:
        assert json.loads(resp.read())["special_positions"] == [0, 4, 5, 9]


def test_server_edit(sidecar):
    status, body = _post(sidecar + "/edit", {"text": "5551234567"})
    assert status == 200
    assert body["value"] == FULL
    assert body["complete"] is True


def test_server_validate(sidecar):
    status, body = _post(sidecar + "/validate", {"value": FULL})
    assert (status, body["digits"]) == (200, "5551234567")
    status, body = _post(sidecar + "/validate", {"value": EMPTY})
    assert status == 400
    assert body["valid"] is False


def test_server_field_session(sidecar):
    _post(sidecar + "/field/reset", {"field_id": "contact"})
    status, body = _post(sidecar + "/field/change", {"field_id": "contact", "text": "(555 )    -    "})
    assert status == 200
    assert body["value"] == "(555)    -    "
    assert body["selection"]["start"] == 6
    status, body = _post(sidecar + "/field/focus", {"field_id": "contact"})
    assert body["selection"]["start"] == 6


def test_server_unknown_path(sidecar):
    status, _ = _post(sidecar + "/nope", {})
    assert status == 404


def test_server_unknown_field_action_keeps_no_state(sidecar):
    status, _ = _post(sidecar + "/field/bogus", {"field_id": "zzz"})
    assert status == 404
    assert "zzz" not in server._fields


def test_server_invalid_json(sidecar):
    status, body = _post_raw(sidecar + "/edit", b"{not json")
    assert status == 400
    assert "error" in body


def test_server_numeric_text(sidecar):
    status, body = _post(sidecar + "/edit", {
        "text": 5551234567,
        "state": {"value": EMPTY, "selection": {"start": 1, "end": 1}},
    })
    assert status == 200
    assert body["value"] == FULL


def test_server_bad_caret(sidecar):
    for start in (None, "abc"):
        status, body = _post(sidecar + "/edit", {
            "text": "5",
            "state": {"value": EMPTY, "selection": {"start": start}},
        })
        assert status == 400
        assert "error" in body


def test_server_internal_error(sidecar, monkeypatch, caplog):
    def boom(*args, **kwargs):
        raise RuntimeError("editor exploded")

    monkeypatch.setattr(server, "handle_change", boom)
    with caplog.at_level(logging.ERROR, logger="phone_mask.server"):
        status, body = _post(sidecar + "/edit", {"text": "5"})
    assert status == 500
    assert body["error"] == "editor exploded"
    assert any(r.exc_info for r in caplog.records)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
