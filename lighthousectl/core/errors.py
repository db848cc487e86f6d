"""Domain-specific errors for lighthousectl."""


class LighthouseError(Exception):
    """Base error for lighthousectl."""


class ConfigError(LighthouseError):
    """Raised when the requested state or the config file is invalid."""


class AdapterError(LighthouseError):
    """Raised when the Bluetooth adapter cannot be set up or queried."""


class FormatError(LighthouseError):
    """Raised when a Gen1 advertised name does not end in 4 hex-encoded bytes."""


class UnsupportedStateError(LighthouseError):
    """Raised when a base station generation has no frame for the requested state."""


class WriteError(LighthouseError):
    """Raised when a GATT characteristic write fails."""
