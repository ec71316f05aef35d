"""Data models for sensor commands and responses."""

from pyawairble.models.commands import (
    Command,
    CommandName,
    OutboundPayload,
    SetCountryCommand,
    SetMqttTokenCommand,
    WifiCredentials,
    encode_payload,
)
from pyawairble.models.messages import DecodedMessage, MessageKind
from pyawairble.models.requests import ProvisioningRequest

__all__ = [
    "Command",
    "CommandName",
    "DecodedMessage",
    "MessageKind",
    "OutboundPayload",
    "ProvisioningRequest",
    "SetCountryCommand",
    "SetMqttTokenCommand",
    "WifiCredentials",
    "encode_payload",
]
