"""Outbound command payloads.

Every payload written to the sensor is a UTF-8 JSON object. Commands carry
a mandatory ``cmd`` field; the Wi-Fi credentials object written during
association is the one payload without it.
"""

from __future__ import annotations

import enum
import json
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from pyawairble._constants import DEFAULT_WIFI_SECURITY
from pyawairble.exceptions import AwairMalformedCommandError


class CommandName(enum.StrEnum):
    """``cmd`` values understood by the sensor's provisioning service."""

    SET_COUNTRY = "set_country"
    WIFI_SETUP = "wifi_setup"
    CONNECTION_TEST = "connection_test"
    DEVICE_REGISTER = "device_register"
    SET_MQTT_TOKEN = "set_mqtt_token"
    GET_FW_VERSION = "get_fw_version"


def encode_payload(payload: dict[str, Any]) -> bytes:
    """Serialize *payload* to compact UTF-8 JSON.

    Raises :class:`AwairMalformedCommandError` when the payload holds
    values JSON cannot represent.
    """
    try:
        text = json.dumps(payload, separators=(",", ":"), ensure_ascii=False, allow_nan=False)
    except (TypeError, ValueError) as exc:
        raise AwairMalformedCommandError(f"Cannot serialize payload: {exc}") from exc
    return text.encode("utf-8")


class OutboundPayload(BaseModel):
    """Base class for everything written to the command characteristic."""

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        validate_default=True,
        str_strip_whitespace=True,
        populate_by_name=True,
    )

    def to_payload(self) -> dict[str, Any]:
        """Return the JSON object sent on the wire."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    def to_wire(self) -> bytes:
        return encode_payload(self.to_payload())


class Command(OutboundPayload):
    """A command with no fields beyond ``cmd``."""

    cmd: CommandName


class SetCountryCommand(Command):
    cmd: Literal[CommandName.SET_COUNTRY] = CommandName.SET_COUNTRY
    country_code: str

    @field_validator("country_code")
    @classmethod
    def _country_code_alpha2(cls, value: str) -> str:
        code = value.strip().upper()
        if len(code) != 2 or not code.isalpha():
            raise ValueError(f"country_code must be a two-letter ISO code, got {value!r}")
        return code


class SetMqttTokenCommand(Command):
    cmd: Literal[CommandName.SET_MQTT_TOKEN] = CommandName.SET_MQTT_TOKEN
    mqtt_token: str = Field(repr=False)


class WifiCredentials(OutboundPayload):
    """Network credentials written while the sensor searches for Wi-Fi.

    Serialized with the sensor's key names (``SSID``, ``password``,
    ``security``).
    """

    # SSIDs and passphrases may legitimately start or end with spaces.
    model_config = ConfigDict(str_strip_whitespace=False)

    ssid: str = Field(alias="SSID")
    password: str = Field(default="", repr=False)
    security: str = DEFAULT_WIFI_SECURITY

    @field_validator("ssid")
    @classmethod
    def _ssid_non_empty(cls, value: str) -> str:
        if not value:
            raise ValueError("ssid must be non-empty")
        if len(value.encode("utf-8")) > 32:
            raise ValueError("ssid must be at most 32 bytes")
        return value


def set_country(country_code: str) -> SetCountryCommand:
    return SetCountryCommand(country_code=country_code)


def wifi_setup() -> Command:
    return Command(cmd=CommandName.WIFI_SETUP)


def connection_test() -> Command:
    return Command(cmd=CommandName.CONNECTION_TEST)


def device_register() -> Command:
    return Command(cmd=CommandName.DEVICE_REGISTER)


def set_mqtt_token(mqtt_token: str) -> SetMqttTokenCommand:
    return SetMqttTokenCommand(mqtt_token=mqtt_token)


def get_fw_version() -> Command:
    return Command(cmd=CommandName.GET_FW_VERSION)
