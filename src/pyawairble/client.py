"""High-level async client for provisioning an Awair sensor over BLE."""

from __future__ import annotations

import logging
from typing import Any

from pyawairble._correlator import CommandCorrelator
from pyawairble._redact import redact_for_log
from pyawairble._transport import BleakTransport, Transport
from pyawairble.config import AwairConfig
from pyawairble.exceptions import AwairError
from pyawairble.models import commands
from pyawairble.models.commands import OutboundPayload, WifiCredentials
from pyawairble.models.messages import DecodedMessage
from pyawairble.models.requests import ProvisioningRequest
from pyawairble.provisioning import ProgressCallback, ProvisioningSequencer, ProvisioningSession

_logger = logging.getLogger(__name__)


class AwairClient:
    """Async client for the sensor's BLE provisioning service.

    Usage::

        async with AwairClient(config) as client:
            session = await client.provision(
                country_code="US",
                ssid="home",
                password="secret",
                mqtt_token=token,
            )

    When ``transport`` is given it must already be connected; the client
    subscribes to it but leaves connection teardown to the caller.
    """

    def __init__(
        self,
        config: AwairConfig | None = None,
        *,
        transport: Transport | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> None:
        self._config = config or AwairConfig()
        self._external_transport = transport
        self._owned_transport: BleakTransport | None = None
        self._on_progress = on_progress
        self._correlator: CommandCorrelator | None = None
        self._initial_status: DecodedMessage | None = None

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> AwairClient:
        transport = self._external_transport
        if transport is None:
            owned = BleakTransport(self._config)
            self._owned_transport = owned
            try:
                await owned.connect()
                owned.discover()
            except AwairError:
                await self._close_transport()
                raise
            transport = owned

        correlator = CommandCorrelator(transport, self._config)
        try:
            await correlator.start()
        except AwairError:
            await self._close_transport()
            raise
        self._correlator = correlator
        return self

    async def __aexit__(self, *exc: Any) -> None:
        correlator = self._correlator
        self._correlator = None
        self._initial_status = None
        if correlator is not None:
            await correlator.stop()
        await self._close_transport()

    async def _close_transport(self) -> None:
        owned = self._owned_transport
        self._owned_transport = None
        if owned is not None:
            await owned.disconnect()

    def _require_correlator(self) -> CommandCorrelator:
        if self._correlator is None:
            raise AwairError("Client is not open; use 'async with AwairClient(...)'")
        return self._correlator

    # ------------------------------------------------------------------
    # Exchanges
    # ------------------------------------------------------------------

    async def await_initial_status(self) -> DecodedMessage:
        """Wait for the status message the sensor sends after subscription.

        The message is cached until the next :meth:`provision` call hands it
        to the provisioning run; until then later calls return it without
        waiting.
        """
        if self._initial_status is None:
            correlator = self._require_correlator()
            async with correlator.exclusive():
                self._initial_status = await correlator.await_message()
            status = self._initial_status
            _logger.info("Initial status: %s", redact_for_log(status.obj if status.is_object else status.items))
        return self._initial_status

    async def send(self, command: OutboundPayload, *, timeout: float | None = None) -> DecodedMessage:
        """Send a single command and return the sensor's reply."""
        correlator = self._require_correlator()
        async with correlator.exclusive():
            return await correlator.send_and_await(command, timeout)

    async def get_firmware_version(self) -> DecodedMessage:
        """Query the sensor's firmware version.

        The sensor answers its unsolicited status first, so that message
        is consumed beforehand if nobody has done so yet.
        """
        await self.await_initial_status()
        return await self.send(commands.get_fw_version())

    async def provision(
        self,
        request: ProvisioningRequest | None = None,
        *,
        country_code: str | None = None,
        ssid: str | None = None,
        password: str = "",
        security: str | None = None,
        mqtt_token: str = "",
    ) -> ProvisioningSession:
        """Run the full provisioning sequence.

        Either pass a prepared :class:`ProvisioningRequest` or the individual
        fields. Raises :class:`~pyawairble.exceptions.AwairProvisioningError`
        on the first failed step.
        """
        if request is None:
            if country_code is None or ssid is None:
                raise ValueError("country_code and ssid are required when no request is given")
            wifi_kwargs: dict[str, Any] = {"SSID": ssid, "password": password}
            if security is not None:
                wifi_kwargs["security"] = security
            request = ProvisioningRequest(
                country_code=country_code,
                wifi=WifiCredentials(**wifi_kwargs),
                mqtt_token=mqtt_token,
            )

        sequencer = ProvisioningSequencer(self._require_correlator(), on_progress=self._on_progress)
        initial_status, self._initial_status = self._initial_status, None
        return await sequencer.run(request, initial_status=initial_status)
