"""BLE transport for the sensor's command service."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any, Protocol

from bleak import BleakClient, BleakScanner
from bleak.backends.characteristic import BleakGATTCharacteristic
from bleak.exc import BleakError

from pyawairble._constants import EXPECTED_CHARACTERISTIC_COUNT, EXPECTED_SERVICE_COUNT
from pyawairble.config import AwairConfig
from pyawairble.exceptions import (
    AwairConnectError,
    AwairDiscoveryMismatchError,
    AwairSubscribeError,
    AwairTransportError,
    AwairTransportWriteError,
)

_logger = logging.getLogger(__name__)

FragmentCallback = Callable[[bytes], None]


class Transport(Protocol):
    """Structural transport interface used by the correlator.

    Having a protocol here makes it easy to pass test doubles/mocks while
    keeping the production implementation (`BleakTransport`) concrete.
    """

    async def subscribe(self, on_fragment: FragmentCallback) -> None:
        ...

    async def write(self, data: bytes) -> None:
        ...


class BleakTransport:
    """Connects to the sensor with bleak and exposes its command channels."""

    def __init__(self, config: AwairConfig) -> None:
        self._config = config
        self._client: BleakClient | None = None
        self._notify_char: BleakGATTCharacteristic | None = None
        self._write_char: BleakGATTCharacteristic | None = None

    @property
    def is_connected(self) -> bool:
        return self._client is not None and self._client.is_connected

    async def __aenter__(self) -> BleakTransport:
        await self.connect()
        try:
            self.discover()
        except AwairTransportError:
            await self.disconnect()
            raise
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.disconnect()

    async def connect(self) -> None:
        """Scan for the sensor and open a BLE connection."""
        config = self._config
        try:
            if config.address:
                _logger.info("Looking for sensor at %s...", config.address)
                device = await BleakScanner.find_device_by_address(config.address, timeout=config.scan_timeout)
            else:
                _logger.info("Scanning for %s...", config.device_name)
                device = await BleakScanner.find_device_by_name(config.device_name, timeout=config.scan_timeout)
        except (BleakError, OSError) as exc:
            raise AwairConnectError(f"Scan failed: {exc}") from exc

        if device is None:
            target = config.address or config.device_name
            raise AwairConnectError(f"Timed out after {config.scan_timeout}s while scanning for {target}")

        _logger.info("Connecting to %s (%s)...", device.name, device.address)
        client = BleakClient(device, timeout=config.connect_timeout)
        try:
            await client.connect()
        except (BleakError, OSError, TimeoutError) as exc:
            raise AwairConnectError(f"Failed to connect to {device.address}: {exc}") from exc
        self._client = client

    def discover(self) -> tuple[BleakGATTCharacteristic, BleakGATTCharacteristic]:
        """Resolve the notify and write characteristics of the command service.

        bleak completes service discovery as part of ``connect``; this only
        checks the resolved layout against the expected one.
        """
        client = self._require_client()
        config = self._config
        wanted = config.service_uuid.lower()

        services = [svc for svc in client.services if svc.uuid.lower() == wanted]
        if len(services) != EXPECTED_SERVICE_COUNT:
            raise AwairDiscoveryMismatchError(
                f"Expected {EXPECTED_SERVICE_COUNT} service {config.service_uuid}, got {len(services)}",
                expected=EXPECTED_SERVICE_COUNT,
                actual=len(services),
            )

        characteristics = list(services[0].characteristics)
        if len(characteristics) != EXPECTED_CHARACTERISTIC_COUNT:
            raise AwairDiscoveryMismatchError(
                f"Expected {EXPECTED_CHARACTERISTIC_COUNT} characteristics, got {len(characteristics)}",
                expected=EXPECTED_CHARACTERISTIC_COUNT,
                actual=len(characteristics),
            )

        by_uuid = {char.uuid.lower(): char for char in characteristics}
        notify_char = by_uuid.get(config.notify_char_uuid.lower())
        write_char = by_uuid.get(config.write_char_uuid.lower())
        if notify_char is None or write_char is None:
            found = ", ".join(sorted(by_uuid))
            raise AwairDiscoveryMismatchError(
                f"Command service characteristics do not match the configured UUIDs (found {found})",
                expected=EXPECTED_CHARACTERISTIC_COUNT,
                actual=sum(char is not None for char in (notify_char, write_char)),
            )

        self._notify_char = notify_char
        self._write_char = write_char
        _logger.debug("Resolved notify=%s write=%s", notify_char.uuid, write_char.uuid)
        return notify_char, write_char

    async def subscribe(self, on_fragment: FragmentCallback) -> None:
        client = self._require_client()
        if self._notify_char is None:
            self.discover()

        def _handler(_sender: BleakGATTCharacteristic, data: bytearray) -> None:
            _logger.debug("Notification (%d bytes): %r", len(data), bytes(data))
            on_fragment(bytes(data))

        try:
            await client.start_notify(self._notify_char, _handler)
        except (BleakError, OSError) as exc:
            raise AwairSubscribeError(f"Failed to enable notifications: {exc}") from exc

    async def write(self, data: bytes) -> None:
        client = self._require_client()
        if self._write_char is None:
            self.discover()
        try:
            await client.write_gatt_char(self._write_char, data, response=self._config.write_with_response)
        except (BleakError, OSError) as exc:
            raise AwairTransportWriteError(f"Failed to write {len(data)} bytes: {exc}") from exc

    async def disconnect(self) -> None:
        client = self._client
        self._client = None
        self._notify_char = None
        self._write_char = None
        if client is None:
            return
        try:
            await client.disconnect()
        except (BleakError, OSError):
            _logger.debug("BLE disconnect failed", exc_info=True)

    def _require_client(self) -> BleakClient:
        if self._client is None or not self._client.is_connected:
            raise AwairTransportError("Not connected; call connect() first")
        return self._client
