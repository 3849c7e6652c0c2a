"""Exceptions raised by lucide-picker."""


class LucidePickerError(Exception):
    """Base exception for lucide-picker errors."""


class AssetUnavailable(LucidePickerError):
    """Raised when a sprite or icon asset cannot be fetched."""

    def __init__(self, location: str, reason: str):
        self.location = location
        self.reason = reason
        super().__init__(f"Asset unavailable at {location}: {reason}")


class InvalidIdentifier(LucidePickerError):
    """Raised when an icon name is empty or not a safe token."""

    def __init__(self, value: str):
        self.value = value
        super().__init__(f"Invalid icon identifier: {value!r}")
