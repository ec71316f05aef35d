#!/usr/bin/env python3
"""Provision an Awair sensor over BLE.

Connects to the sensor (by advertised name or address), sets its country,
joins it to a Wi-Fi network, runs the connection test, registers it and
installs the MQTT token. Progress is printed for every step; the first
failure aborts the run with exit status 1.

Connection settings come from ``AWAIR_*`` environment variables
(see :meth:`pyawairble.AwairConfig.from_env`) and the flags below.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys
from pathlib import Path

# Allow running from repo root without installing the package.
_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from pyawairble import (  # noqa: E402
    AwairClient,
    AwairConfig,
    AwairError,
    AwairProvisioningError,
    DecodedMessage,
    ProvisioningStep,
)
from pyawairble._redact import redact_for_log  # noqa: E402


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Provision an Awair sensor over BLE.")
    parser.add_argument("--address", help="BLE address of the sensor (default: scan by name).")
    parser.add_argument("--device-name", help="Advertised BLE name to scan for.")
    parser.add_argument("--country", default="US", help="Two-letter country code.")
    parser.add_argument("--ssid", required=True, help="Wi-Fi network name.")
    parser.add_argument(
        "--password",
        default=os.environ.get("AWAIR_WIFI_PASSWORD", ""),
        help="Wi-Fi password (default: $AWAIR_WIFI_PASSWORD).",
    )
    parser.add_argument("--security", help="Wi-Fi security mode (default: WPA2 AES PSK).")
    parser.add_argument(
        "--mqtt-token",
        default=os.environ.get("AWAIR_MQTT_TOKEN", ""),
        help="MQTT credential to install (default: $AWAIR_MQTT_TOKEN).",
    )
    parser.add_argument("--wifi-timeout", type=float, help="Seconds to wait for each Wi-Fi status message.")
    parser.add_argument("--firmware", action="store_true", help="Print the firmware version before provisioning.")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logs.")
    return parser.parse_args(argv)


def _print_progress(step: ProvisioningStep, message: DecodedMessage) -> None:
    print(f"[{step}] {redact_for_log(message.obj if message.is_object else message.items)}")


async def _run(args: argparse.Namespace) -> None:
    overrides: dict[str, object] = {}
    if args.address:
        overrides["address"] = args.address
    if args.device_name:
        overrides["device_name"] = args.device_name
    if args.wifi_timeout is not None:
        overrides["wifi_connect_timeout"] = args.wifi_timeout
    config = AwairConfig.from_env(**overrides)

    async with AwairClient(config, on_progress=_print_progress) as client:
        if args.firmware:
            firmware = await client.get_firmware_version()
            print(f"[firmware] {firmware}")
        await client.provision(
            country_code=args.country,
            ssid=args.ssid,
            password=args.password,
            security=args.security,
            mqtt_token=args.mqtt_token,
        )
    print("Provisioning complete.")


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    try:
        asyncio.run(_run(args))
    except AwairProvisioningError as exc:
        print(f"Provisioning failed at {exc.step}: {exc.cause}", file=sys.stderr)
        return 1
    except AwairError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    except ValueError as exc:
        print(f"Invalid input: {exc}", file=sys.stderr)
        return 2
    except KeyboardInterrupt:
        return 130
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
