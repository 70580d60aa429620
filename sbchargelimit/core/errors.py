"""Domain-specific errors for sbchargelimit."""


class SbChargeLimitError(Exception):
    """Base error for sbchargelimit."""


class ConfigError(SbChargeLimitError):
    """Raised when the configuration file cannot be read."""


class ConfigValidationError(ConfigError):
    """Raised when the configuration does not conform to schema or semantics."""


class BatteryError(SbChargeLimitError):
    """Raised when battery telemetry is unavailable."""


class DeviceNotFoundError(SbChargeLimitError):
    """Raised when no configured device was seen during a search."""


class SearchTimeoutError(SbChargeLimitError):
    """Raised when a single device search exceeds its timeout."""


class ServiceNotFoundError(SbChargeLimitError):
    """Raised when the device does not expose the expected GATT service."""


class CharacteristicNotFoundError(SbChargeLimitError):
    """Raised when a required GATT characteristic is missing."""


class ProtocolError(SbChargeLimitError):
    """Raised on a malformed or unexpected device response."""


class ChannelClosedError(SbChargeLimitError):
    """Raised when the response channel ends before a response arrives."""


class ResponseTimeoutError(ChannelClosedError):
    """Raised when the device does not answer a request in time."""


class DeviceNotConnectedError(SbChargeLimitError):
    """Raised when an operation is attempted before the device is initialized."""


class RequestInProgressError(SbChargeLimitError):
    """Raised when a second request is issued while one is outstanding."""


class TransportError(SbChargeLimitError):
    """Raised on BLE link failures."""
