"""Tests for command payloads and decoded message models."""

from __future__ import annotations

import json

import pytest
from pydantic import ValidationError

from pyawairble.exceptions import AwairMalformedCommandError
from pyawairble.models import commands
from pyawairble.models.commands import Command, CommandName, WifiCredentials, encode_payload
from pyawairble.models.messages import DecodedMessage, MessageKind
from pyawairble.models.requests import ProvisioningRequest

# ------------------------------------------------------------------
# Commands
# ------------------------------------------------------------------


class TestCommands:
    @pytest.mark.parametrize(
        ("command", "expected"),
        [
            (commands.set_country("cn"), {"cmd": "set_country", "country_code": "CN"}),
            (commands.wifi_setup(), {"cmd": "wifi_setup"}),
            (commands.connection_test(), {"cmd": "connection_test"}),
            (commands.device_register(), {"cmd": "device_register"}),
            (commands.set_mqtt_token("abc.def"), {"cmd": "set_mqtt_token", "mqtt_token": "abc.def"}),
            (commands.get_fw_version(), {"cmd": "get_fw_version"}),
        ],
    )
    def test_wire_form(self, command: Command, expected: dict[str, str]) -> None:
        assert command.to_payload() == expected
        assert json.loads(command.to_wire().decode("utf-8")) == expected

    def test_wire_form_is_compact(self) -> None:
        assert commands.set_country("NL").to_wire() == b'{"cmd":"set_country","country_code":"NL"}'

    def test_factories_build_fresh_instances(self) -> None:
        assert commands.wifi_setup() is not commands.wifi_setup()

    def test_commands_are_immutable(self) -> None:
        command = commands.set_country("US")
        with pytest.raises(ValidationError):
            command.country_code = "DE"  # type: ignore[misc]

    @pytest.mark.parametrize("code", ["", "USA", "1A", "C"])
    def test_invalid_country_code(self, code: str) -> None:
        with pytest.raises(ValidationError):
            commands.set_country(code)

    def test_unknown_command_name_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Command(cmd="reboot")  # type: ignore[arg-type]

    def test_command_name_values(self) -> None:
        assert CommandName("set_mqtt_token") is CommandName.SET_MQTT_TOKEN

    def test_mqtt_token_hidden_from_repr(self) -> None:
        assert "secret-jwt" not in repr(commands.set_mqtt_token("secret-jwt"))


class TestEncodePayload:
    def test_non_ascii_is_utf8(self) -> None:
        assert encode_payload({"SSID": "café"}) == '{"SSID":"café"}'.encode("utf-8")

    def test_unserializable_value(self) -> None:
        with pytest.raises(AwairMalformedCommandError):
            encode_payload({"cmd": "x", "value": object()})

    def test_nan_rejected(self) -> None:
        with pytest.raises(AwairMalformedCommandError):
            encode_payload({"cmd": "x", "value": float("nan")})


# ------------------------------------------------------------------
# Wi-Fi credentials / provisioning request
# ------------------------------------------------------------------


class TestWifiCredentials:
    def test_sensor_key_names(self) -> None:
        creds = WifiCredentials(SSID="home", password="pw")
        assert creds.to_payload() == {"SSID": "home", "password": "pw", "security": "WPA2 AES PSK"}

    def test_populate_by_field_name(self) -> None:
        creds = WifiCredentials(ssid="home", security="WPA3 SAE")
        assert creds.to_payload()["security"] == "WPA3 SAE"
        assert creds.password == ""

    def test_whitespace_preserved(self) -> None:
        creds = WifiCredentials(SSID=" home ", password=" pw ")
        assert creds.ssid == " home "
        assert creds.password == " pw "

    def test_password_hidden_from_repr(self) -> None:
        assert "hunter22" not in repr(WifiCredentials(SSID="home", password="hunter22"))

    def test_empty_ssid_rejected(self) -> None:
        with pytest.raises(ValidationError):
            WifiCredentials(SSID="")

    def test_overlong_ssid_rejected(self) -> None:
        with pytest.raises(ValidationError):
            WifiCredentials(SSID="x" * 33)


class TestProvisioningRequest:
    def test_country_code_normalized(self) -> None:
        request = ProvisioningRequest(country_code=" us ", wifi=WifiCredentials(SSID="home"))
        assert request.country_code == "US"
        assert request.mqtt_token == ""

    def test_extra_fields_forbidden(self) -> None:
        with pytest.raises(ValidationError):
            ProvisioningRequest(
                country_code="US",
                wifi=WifiCredentials(SSID="home"),
                unexpected=True,  # type: ignore[call-arg]
            )


# ------------------------------------------------------------------
# DecodedMessage
# ------------------------------------------------------------------


class TestDecodedMessage:
    def test_from_object(self) -> None:
        message = DecodedMessage.from_json({"state": "OK"})
        assert message is not None
        assert message.kind is MessageKind.OBJECT
        assert message.is_object
        assert message.items is None
        assert message.state == "OK"

    def test_from_array(self) -> None:
        message = DecodedMessage.from_json([{"SSID": "a"}, {"SSID": "b"}])
        assert message is not None
        assert message.kind is MessageKind.ARRAY
        assert message.obj is None
        assert message.state is None
        assert message.get("SSID") is None

    @pytest.mark.parametrize("value", [1, "OK", None, [1, {"a": 1}], True])
    def test_unsupported_shapes(self, value: object) -> None:
        assert DecodedMessage.from_json(value) is None

    def test_exactly_one_variant(self) -> None:
        with pytest.raises(ValidationError):
            DecodedMessage(kind=MessageKind.OBJECT)
        with pytest.raises(ValidationError):
            DecodedMessage(kind=MessageKind.ARRAY, items=[], obj={})

    def test_to_json(self) -> None:
        message = DecodedMessage(kind=MessageKind.ARRAY, items=[{"a": 1}])
        assert message.to_json() == '[{"a":1}]'
        assert str(message) == '[{"a":1}]'
