from __future__ import annotations

from pyawairble._redact import redact_for_log


def test_secret_keys_are_masked_at_any_depth() -> None:
    payload = {
        "cmd": "set_mqtt_token",
        "mqtt_token": "eyJhbGciOi",
        "wifi": {"SSID": "home", "password": "hunter22", "security": "WPA2 AES PSK"},
        "nets": [{"SSID": "guest", "PSK": "guest-pw"}],
    }

    redacted = redact_for_log(payload)

    assert redacted["cmd"] == "set_mqtt_token"
    assert redacted["mqtt_token"] == "<redacted>"
    assert redacted["wifi"] == {"SSID": "home", "password": "<redacted>", "security": "WPA2 AES PSK"}
    assert redacted["nets"] == [{"SSID": "guest", "PSK": "<redacted>"}]
    assert payload["wifi"]["password"] == "hunter22"


def test_long_strings_are_shortened() -> None:
    redacted = redact_for_log({"blob": "x" * 600})
    assert redacted["blob"] == "x" * 256 + "...<600 chars>"


def test_scalars_pass_through() -> None:
    assert redact_for_log([1, 2.5, True, None, "OK"]) == [1, 2.5, True, None, "OK"]


def test_raw_bytes_are_summarized() -> None:
    assert redact_for_log(b'{"state":"OK"}') == "<14 bytes>"
