"""Internal constants shared across the library."""

DEVICE_NAME = "AWAIR-R2"

SERVICE_UUID = "2f2dfff0-2e85-649d-3545-3586428f5da3"
NOTIFY_CHAR_UUID = "2f2dfff4-2e85-649d-3545-3586428f5da3"
WRITE_CHAR_UUID = "2f2dfff5-2e85-649d-3545-3586428f5da3"

#: The command service exposes exactly one notify and one write characteristic.
EXPECTED_SERVICE_COUNT = 1
EXPECTED_CHARACTERISTIC_COUNT = 2

SCAN_TIMEOUT = 15.0
CONNECT_TIMEOUT = 15.0
RESPONSE_TIMEOUT = 10.0
WIFI_CONNECT_TIMEOUT = 30.0

DEFAULT_WIFI_SECURITY = "WPA2 AES PSK"

#: ``state`` value the sensor reports once it has joined the Wi-Fi network.
WIFI_STATE_OK = "OK"
