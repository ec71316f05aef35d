from __future__ import annotations

import pytest

from pyawairble._constants import NOTIFY_CHAR_UUID, SERVICE_UUID, WRITE_CHAR_UUID
from pyawairble.config import AwairConfig
from pyawairble.exceptions import AwairConfigError


def _clear_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in (
        "AWAIR_DEVICE_NAME",
        "AWAIR_ADDRESS",
        "AWAIR_RESPONSE_TIMEOUT",
        "AWAIR_WIFI_CONNECT_TIMEOUT",
        "AWAIR_MAX_BUFFER_BYTES",
        "AWAIR_DRAIN_STALE_MESSAGES",
        "AWAIR_WRITE_WITH_RESPONSE",
    ):
        monkeypatch.delenv(key, raising=False)


def test_defaults() -> None:
    config = AwairConfig()
    assert config.device_name == "AWAIR-R2"
    assert config.address is None
    assert config.service_uuid == SERVICE_UUID
    assert config.notify_char_uuid == NOTIFY_CHAR_UUID
    assert config.write_char_uuid == WRITE_CHAR_UUID
    assert config.response_timeout == 10.0
    assert config.wifi_connect_timeout == 30.0
    assert config.max_buffer_bytes is None
    assert config.drain_stale_messages is False


def test_timeout_classes_are_independent() -> None:
    config = AwairConfig(response_timeout=2.0, wifi_connect_timeout=90.0)
    assert config.response_timeout == 2.0
    assert config.wifi_connect_timeout == 90.0


@pytest.mark.parametrize(
    "kwargs",
    [
        {"response_timeout": 0},
        {"wifi_connect_timeout": -1},
        {"scan_timeout": 0},
        {"max_buffer_bytes": 0},
        {"device_name": "", "address": None},
    ],
)
def test_invalid_values_rejected(kwargs: dict[str, object]) -> None:
    with pytest.raises(AwairConfigError):
        AwairConfig(**kwargs)  # type: ignore[arg-type]


def test_from_env_reads_awair_variables(monkeypatch: pytest.MonkeyPatch) -> None:
    _clear_env(monkeypatch)
    monkeypatch.setenv("AWAIR_ADDRESS", "AA:BB:CC:DD:EE:FF")
    monkeypatch.setenv("AWAIR_RESPONSE_TIMEOUT", "4.5")
    monkeypatch.setenv("AWAIR_WIFI_CONNECT_TIMEOUT", "60")
    monkeypatch.setenv("AWAIR_MAX_BUFFER_BYTES", "4096")
    monkeypatch.setenv("AWAIR_DRAIN_STALE_MESSAGES", "yes")

    config = AwairConfig.from_env()

    assert config.address == "AA:BB:CC:DD:EE:FF"
    assert config.response_timeout == 4.5
    assert config.wifi_connect_timeout == 60.0
    assert config.max_buffer_bytes == 4096
    assert config.drain_stale_messages is True
    assert config.write_with_response is False


def test_from_env_overrides_win(monkeypatch: pytest.MonkeyPatch) -> None:
    _clear_env(monkeypatch)
    monkeypatch.setenv("AWAIR_RESPONSE_TIMEOUT", "4.5")
    monkeypatch.setenv("AWAIR_DEVICE_NAME", "AWAIR-OMNI")

    config = AwairConfig.from_env(response_timeout=1.0, device_name="AWAIR-R2")

    assert config.response_timeout == 1.0
    assert config.device_name == "AWAIR-R2"


def test_from_env_zero_buffer_means_unbounded(monkeypatch: pytest.MonkeyPatch) -> None:
    _clear_env(monkeypatch)
    monkeypatch.setenv("AWAIR_MAX_BUFFER_BYTES", "0")
    assert AwairConfig.from_env().max_buffer_bytes is None


def test_from_env_rejects_non_numeric_timeout(monkeypatch: pytest.MonkeyPatch) -> None:
    _clear_env(monkeypatch)
    monkeypatch.setenv("AWAIR_RESPONSE_TIMEOUT", "soon")
    with pytest.raises(AwairConfigError):
        AwairConfig.from_env()


def test_config_is_frozen() -> None:
    config = AwairConfig()
    with pytest.raises(AttributeError):
        config.response_timeout = 1.0  # type: ignore[misc]
