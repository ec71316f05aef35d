"""Custom exception hierarchy for pyawairble."""

from __future__ import annotations


class AwairError(Exception):
    """Base exception for all pyawairble errors."""


class AwairConfigError(AwairError):
    """Invalid or missing configuration."""


class AwairTransportError(AwairError):
    """BLE-level failure (scan, connect, discovery, subscribe, write)."""


class AwairConnectError(AwairTransportError):
    """The sensor could not be found or connected to."""


class AwairSubscribeError(AwairTransportError):
    """Enabling notifications on the response characteristic failed."""


class AwairTransportWriteError(AwairTransportError):
    """Writing a command to the outbound characteristic failed."""


class AwairDiscoveryMismatchError(AwairTransportError):
    """GATT discovery returned an unexpected number of services or characteristics."""

    def __init__(
        self,
        message: str,
        *,
        expected: int,
        actual: int,
    ) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(message)


class AwairResponseTimeout(AwairError, TimeoutError):
    """No decoded message arrived within the response timeout."""

    def __init__(self, message: str, *, timeout: float) -> None:
        self.timeout = timeout
        super().__init__(message)


class AwairWifiConnectTimeout(AwairResponseTimeout):
    """The sensor never reported ``state == "OK"`` while joining Wi-Fi.

    Raised instead of the generic :class:`AwairResponseTimeout` so a
    failed association (wrong password, out of range) can be told apart
    from an unresponsive sensor.
    """


class AwairMalformedCommandError(AwairError):
    """A command could not be serialized to JSON.

    Commands are built from fixed shapes, so this indicates a programming
    or configuration error rather than a runtime condition.
    """


class AwairReassemblyError(AwairError):
    """Inbound notification bytes could not be turned into a message."""


class AwairMalformedMessageError(AwairReassemblyError):
    """Buffered bytes can never form a valid message and were discarded."""


class AwairBufferOverflowError(AwairReassemblyError):
    """The pending buffer grew past ``max_buffer_bytes`` and was discarded."""

    def __init__(self, message: str, *, limit: int, size: int) -> None:
        self.limit = limit
        self.size = size
        super().__init__(message)


class AwairProvisioningError(AwairError):
    """A provisioning step failed; the run was aborted.

    ``step`` names the step that failed and ``cause`` is the underlying
    error (also available as ``__cause__``).
    """

    def __init__(self, step: str, cause: BaseException) -> None:
        self.step = step
        self.cause = cause
        super().__init__(f"Provisioning step '{step}' failed: {cause}")
