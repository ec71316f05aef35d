"""The provisioning sequence.

A run walks the sensor through a fixed, linear list of steps. Every step
is a single exchange on the correlator except Wi-Fi association, which
writes the credentials and then polls status messages until the sensor
reports ``state == "OK"``. The first failing step aborts the run; there
are no retries and no way back to an earlier step.
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field

from pyawairble._constants import WIFI_STATE_OK
from pyawairble._correlator import CommandCorrelator
from pyawairble._redact import redact_for_log
from pyawairble.exceptions import (
    AwairError,
    AwairProvisioningError,
    AwairResponseTimeout,
    AwairWifiConnectTimeout,
)
from pyawairble.models import commands
from pyawairble.models.messages import DecodedMessage
from pyawairble.models.requests import ProvisioningRequest

_logger = logging.getLogger(__name__)


class ProvisioningStep(enum.StrEnum):
    """Provisioning states, in the order a run visits them."""

    AWAIT_INITIAL_STATUS = "await_initial_status"
    SET_COUNTRY = "set_country"
    WIFI_SETUP = "wifi_setup"
    WIFI_CONNECT = "wifi_connect"
    CONNECTION_TEST = "connection_test"
    DEVICE_REGISTER = "device_register"
    SET_MQTT_TOKEN = "set_mqtt_token"
    DONE = "done"


_STEP_LABELS: dict[ProvisioningStep, str] = {
    ProvisioningStep.AWAIT_INITIAL_STATUS: "Waiting for initial status",
    ProvisioningStep.SET_COUNTRY: "Setting country",
    ProvisioningStep.WIFI_SETUP: "Setting up wifi",
    ProvisioningStep.WIFI_CONNECT: "Connecting to network",
    ProvisioningStep.CONNECTION_TEST: "Doing connection test",
    ProvisioningStep.DEVICE_REGISTER: "Registering device",
    ProvisioningStep.SET_MQTT_TOKEN: "Setting mqtt token",
}

ProgressCallback = Callable[[ProvisioningStep, DecodedMessage], None]


def _redacted(message: DecodedMessage) -> object:
    return redact_for_log(message.obj if message.is_object else message.items)


@dataclass
class ProvisioningSession:
    """Working state of one provisioning run."""

    request: ProvisioningRequest
    step: ProvisioningStep | None = None
    visited: list[ProvisioningStep] = field(default_factory=list)
    responses: dict[ProvisioningStep, DecodedMessage] = field(default_factory=dict)
    wifi_messages: list[DecodedMessage] = field(default_factory=list)
    error: AwairProvisioningError | None = None

    @property
    def succeeded(self) -> bool:
        return self.step is ProvisioningStep.DONE and self.error is None

    def _enter(self, step: ProvisioningStep) -> None:
        self.step = step
        self.visited.append(step)


class ProvisioningSequencer:
    """Drives a sensor through the provisioning steps via a :class:`CommandCorrelator`.

    The correlator is held exclusively for the whole run, so no other
    exchange can interleave with the sequence.
    """

    def __init__(
        self,
        correlator: CommandCorrelator,
        *,
        on_progress: ProgressCallback | None = None,
    ) -> None:
        self._correlator = correlator
        self._on_progress = on_progress
        self._last_session: ProvisioningSession | None = None

    @property
    def last_session(self) -> ProvisioningSession | None:
        """Session of the most recent run, including a failed one."""
        return self._last_session

    async def run(
        self,
        request: ProvisioningRequest,
        *,
        initial_status: DecodedMessage | None = None,
    ) -> ProvisioningSession:
        """Provision the sensor and return the completed session.

        Pass ``initial_status`` when the sensor's unsolicited status
        message was already consumed; the first step then records it
        instead of waiting for another one.

        Raises :class:`AwairProvisioningError` naming the failed step, with
        the underlying error as ``cause``.
        """
        session = ProvisioningSession(request=request)
        self._last_session = session

        steps: list[tuple[ProvisioningStep, Callable[[ProvisioningSession], Awaitable[DecodedMessage]]]] = [
            (ProvisioningStep.AWAIT_INITIAL_STATUS, self._initial_status_step(initial_status)),
            (ProvisioningStep.SET_COUNTRY, self._set_country),
            (ProvisioningStep.WIFI_SETUP, self._wifi_setup),
            (ProvisioningStep.WIFI_CONNECT, self._wifi_connect),
            (ProvisioningStep.CONNECTION_TEST, self._connection_test),
            (ProvisioningStep.DEVICE_REGISTER, self._device_register),
            (ProvisioningStep.SET_MQTT_TOKEN, self._set_mqtt_token),
        ]

        async with self._correlator.exclusive():
            for step, handler in steps:
                session._enter(step)
                _logger.info("%s...", _STEP_LABELS[step])
                try:
                    response = await handler(session)
                except AwairError as exc:
                    error = AwairProvisioningError(step.value, exc)
                    session.error = error
                    _logger.error("Provisioning aborted at %s: %s", step, exc)
                    raise error from exc
                session.responses[step] = response
                self._report(step, response)

        session._enter(ProvisioningStep.DONE)
        _logger.info("Provisioning complete")
        return session

    def _report(self, step: ProvisioningStep, message: DecodedMessage) -> None:
        _logger.info("%s: %s", step, _redacted(message))
        if self._on_progress is not None:
            self._on_progress(step, message)

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    def _initial_status_step(
        self,
        initial_status: DecodedMessage | None,
    ) -> Callable[[ProvisioningSession], Awaitable[DecodedMessage]]:
        async def _await_initial_status(_session: ProvisioningSession) -> DecodedMessage:
            if initial_status is not None:
                return initial_status
            return await self._correlator.await_message()

        return _await_initial_status

    async def _set_country(self, session: ProvisioningSession) -> DecodedMessage:
        return await self._correlator.send_and_await(commands.set_country(session.request.country_code))

    async def _wifi_setup(self, _session: ProvisioningSession) -> DecodedMessage:
        return await self._correlator.send_and_await(commands.wifi_setup())

    async def _wifi_connect(self, session: ProvisioningSession) -> DecodedMessage:
        correlator = self._correlator
        timeout = correlator.config.wifi_connect_timeout
        await correlator.send_command(session.request.wifi)
        while True:
            try:
                message = await correlator.await_message(timeout)
            except AwairResponseTimeout as exc:
                raise AwairWifiConnectTimeout(
                    f"Sensor did not report state {WIFI_STATE_OK!r} within {timeout}s",
                    timeout=timeout,
                ) from exc
            session.wifi_messages.append(message)
            state = message.state
            if isinstance(state, str) and state == WIFI_STATE_OK:
                return message
            _logger.info("Wi-Fi status: %s", _redacted(message))
            if self._on_progress is not None:
                self._on_progress(ProvisioningStep.WIFI_CONNECT, message)

    async def _connection_test(self, _session: ProvisioningSession) -> DecodedMessage:
        return await self._correlator.send_and_await(commands.connection_test())

    async def _device_register(self, _session: ProvisioningSession) -> DecodedMessage:
        return await self._correlator.send_and_await(commands.device_register())

    async def _set_mqtt_token(self, session: ProvisioningSession) -> DecodedMessage:
        return await self._correlator.send_and_await(commands.set_mqtt_token(session.request.mqtt_token))
