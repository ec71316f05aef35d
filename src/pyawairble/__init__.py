"""pyawairble - Async BLE provisioning client for Awair air-quality sensors."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pyawairble")
except PackageNotFoundError:
    __version__ = "0+local"
from pyawairble._correlator import CommandCorrelator
from pyawairble._reassembly import FragmentReassembler
from pyawairble._transport import BleakTransport, Transport
from pyawairble.client import AwairClient
from pyawairble.config import AwairConfig
from pyawairble.exceptions import (
    AwairBufferOverflowError,
    AwairConfigError,
    AwairConnectError,
    AwairDiscoveryMismatchError,
    AwairError,
    AwairMalformedCommandError,
    AwairMalformedMessageError,
    AwairProvisioningError,
    AwairReassemblyError,
    AwairResponseTimeout,
    AwairSubscribeError,
    AwairTransportError,
    AwairTransportWriteError,
    AwairWifiConnectTimeout,
)
from pyawairble.models import (
    Command,
    CommandName,
    DecodedMessage,
    MessageKind,
    ProvisioningRequest,
    WifiCredentials,
)
from pyawairble.provisioning import ProvisioningSequencer, ProvisioningSession, ProvisioningStep

__all__ = [
    "__version__",
    "AwairBufferOverflowError",
    "AwairClient",
    "AwairConfig",
    "AwairConfigError",
    "AwairConnectError",
    "AwairDiscoveryMismatchError",
    "AwairError",
    "AwairMalformedCommandError",
    "AwairMalformedMessageError",
    "AwairProvisioningError",
    "AwairReassemblyError",
    "AwairResponseTimeout",
    "AwairSubscribeError",
    "AwairTransportError",
    "AwairTransportWriteError",
    "AwairWifiConnectTimeout",
    "BleakTransport",
    "Command",
    "CommandCorrelator",
    "CommandName",
    "DecodedMessage",
    "FragmentReassembler",
    "MessageKind",
    "ProvisioningRequest",
    "ProvisioningSequencer",
    "ProvisioningSession",
    "ProvisioningStep",
    "Transport",
    "WifiCredentials",
]
