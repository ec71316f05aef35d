"""Masking of credentials in log output.

Wi-Fi passwords and the MQTT token cross the command characteristic in
both directions, and the sensor may echo them back. Payloads and replies
go through :func:`redact_for_log` before they are logged.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

_MASK = "<redacted>"
_SECRET_KEYS = frozenset({"password", "passwd", "psk", "token", "mqtt_token", "jwt"})
_MAX_TEXT = 256


def redact_for_log(value: Any) -> Any:
    """Copy a decoded JSON value with secret fields masked and long text shortened."""
    if isinstance(value, Mapping):
        return {
            str(key): _MASK if str(key).lower() in _SECRET_KEYS else redact_for_log(item)
            for key, item in value.items()
        }
    if isinstance(value, str):
        return value if len(value) <= _MAX_TEXT else f"{value[:_MAX_TEXT]}...<{len(value)} chars>"
    if isinstance(value, (bytes, bytearray)):
        return f"<{len(value)} bytes>"
    if isinstance(value, Sequence):
        return [redact_for_log(item) for item in value]
    return value
