"""Client configuration for pyawairble."""

from __future__ import annotations

import dataclasses
import os
from typing import Any

from pyawairble._constants import (
    CONNECT_TIMEOUT,
    DEVICE_NAME,
    NOTIFY_CHAR_UUID,
    RESPONSE_TIMEOUT,
    SCAN_TIMEOUT,
    SERVICE_UUID,
    WIFI_CONNECT_TIMEOUT,
    WRITE_CHAR_UUID,
)
from pyawairble.exceptions import AwairConfigError


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


@dataclasses.dataclass(frozen=True)
class AwairConfig:
    """Client configuration.

    Parameters
    ----------
    device_name : str
        Advertised BLE local name to scan for.
    address : str or None
        BLE address (or CoreBluetooth UUID on macOS). When set, the
        scanner looks the device up by address instead of by name.
    service_uuid : str
        UUID of the sensor's command service.
    notify_char_uuid : str
        Characteristic the sensor sends responses on.
    write_char_uuid : str
        Characteristic commands are written to.
    scan_timeout : float
        Seconds to scan for the sensor before giving up.
    connect_timeout : float
        Seconds allowed for the BLE connection to come up.
    response_timeout : float
        Seconds to wait for the reply to an ordinary command.
    wifi_connect_timeout : float
        Seconds to wait for each status message while the sensor joins
        the Wi-Fi network.  Independent of ``response_timeout``.
    max_buffer_bytes : int or None
        Upper bound on bytes buffered while waiting for a complete JSON
        message.  ``None`` (the default) means unbounded: a sensor that
        never completes a document grows the buffer without limit.
    drain_stale_messages : bool
        Discard messages still waiting in the handoff slot before each
        command is written, so a reply that arrived after an earlier
        timeout cannot be mistaken for the next reply.
    write_with_response : bool
        Use GATT write-with-response for outbound commands.
    """

    device_name: str = DEVICE_NAME
    address: str | None = None
    service_uuid: str = SERVICE_UUID
    notify_char_uuid: str = NOTIFY_CHAR_UUID
    write_char_uuid: str = WRITE_CHAR_UUID
    scan_timeout: float = SCAN_TIMEOUT
    connect_timeout: float = CONNECT_TIMEOUT
    response_timeout: float = RESPONSE_TIMEOUT
    wifi_connect_timeout: float = WIFI_CONNECT_TIMEOUT
    max_buffer_bytes: int | None = None
    drain_stale_messages: bool = False
    write_with_response: bool = False

    def __post_init__(self) -> None:
        for name in ("scan_timeout", "connect_timeout", "response_timeout", "wifi_connect_timeout"):
            value = getattr(self, name)
            if value <= 0:
                raise AwairConfigError(f"{name} must be positive, got {value}")
        if self.max_buffer_bytes is not None and self.max_buffer_bytes <= 0:
            raise AwairConfigError(f"max_buffer_bytes must be positive or None, got {self.max_buffer_bytes}")
        if not self.address and not self.device_name:
            raise AwairConfigError("Either address or device_name must be set")

    @classmethod
    def from_env(cls, **overrides: Any) -> AwairConfig:
        """Create configuration from environment variables.

        Reads optional ``AWAIR_*`` variables. Explicit keyword arguments
        override environment values.

        Parameters
        ----------
        **overrides
            Explicit field values that take precedence over env vars.

        Returns
        -------
        AwairConfig
            Populated configuration.
        """
        env = os.environ

        _ENV_STR_MAP = {
            "AWAIR_DEVICE_NAME": "device_name",
            "AWAIR_ADDRESS": "address",
            "AWAIR_SERVICE_UUID": "service_uuid",
            "AWAIR_NOTIFY_CHAR_UUID": "notify_char_uuid",
            "AWAIR_WRITE_CHAR_UUID": "write_char_uuid",
        }
        _ENV_FLOAT_MAP = {
            "AWAIR_SCAN_TIMEOUT": "scan_timeout",
            "AWAIR_CONNECT_TIMEOUT": "connect_timeout",
            "AWAIR_RESPONSE_TIMEOUT": "response_timeout",
            "AWAIR_WIFI_CONNECT_TIMEOUT": "wifi_connect_timeout",
        }

        config_kwargs: dict[str, Any] = {}
        for env_key, field_name in _ENV_STR_MAP.items():
            val = env.get(env_key)
            if val is not None:
                config_kwargs[field_name] = val

        for env_key, field_name in _ENV_FLOAT_MAP.items():
            val = env.get(env_key)
            if val is None or field_name in overrides:
                continue
            try:
                config_kwargs[field_name] = float(val)
            except ValueError as exc:
                raise AwairConfigError(f"{env_key} must be a number, got {val!r}") from exc

        buffer_env = env.get("AWAIR_MAX_BUFFER_BYTES")
        if buffer_env is not None and "max_buffer_bytes" not in overrides:
            try:
                config_kwargs["max_buffer_bytes"] = int(buffer_env) or None
            except ValueError as exc:
                raise AwairConfigError(f"AWAIR_MAX_BUFFER_BYTES must be an integer, got {buffer_env!r}") from exc

        if "drain_stale_messages" not in overrides:
            config_kwargs["drain_stale_messages"] = _env_bool(env.get("AWAIR_DRAIN_STALE_MESSAGES"), False)

        if "write_with_response" not in overrides:
            config_kwargs["write_with_response"] = _env_bool(env.get("AWAIR_WRITE_WITH_RESPONSE"), False)

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
