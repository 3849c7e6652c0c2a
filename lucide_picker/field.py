"""Host form field binding and field-level value contracts.

The picker reads its initial value from a HostField and writes every
change back through it; the host observes changes by subscribing.
Values are sanitized before they are persisted and before they seed
a picker.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Optional, Union

from lucide_picker.markup import resolve_icon_markup, sanitize_icon_name

RETURN_FORMATS = ("name", "svg")
VALIDATION_MESSAGE = "Please select an icon."
DEFAULT_PLACEHOLDER = "Search icons..."

ChangeCallback = Callable[[str, Any], None]


@dataclass
class FieldSettings:
    """Per-field configuration set by the form author."""

    name: str = "icon"
    allow_null: bool = False
    default_value: str = ""
    return_format: str = "name"  # "name" or "svg"
    placeholder: str = ""

    def __post_init__(self) -> None:
        if self.return_format not in RETURN_FORMATS:
            raise ValueError(
                f"return_format must be one of {RETURN_FORMATS}, got {self.return_format!r}"
            )

    @property
    def allow_clear(self) -> bool:
        return self.allow_null

    @property
    def placeholder_text(self) -> str:
        return self.placeholder or DEFAULT_PLACEHOLDER

    @classmethod
    def from_dict(cls, data: dict) -> "FieldSettings":
        return cls(
            name=data.get("name", "icon"),
            allow_null=bool(data.get("allow_null", False)),
            default_value=data.get("default_value", ""),
            return_format=data.get("return_format", "name"),
            placeholder=data.get("placeholder", ""),
        )

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "allow_null": self.allow_null,
            "default_value": self.default_value,
            "return_format": self.return_format,
            "placeholder": self.placeholder,
        }


def update_value(value: Any) -> str:
    """Sanitize a submitted value before it is persisted."""
    if not value:
        return ""
    return sanitize_icon_name(str(value))


def load_value(value: Any, settings: FieldSettings) -> str:
    """Sanitize a stored value before it seeds a picker.

    Falls back to the field's default when nothing is stored.
    """
    clean = update_value(value)
    if clean:
        return clean
    return update_value(settings.default_value)


def validate_value(value: Any, settings: FieldSettings) -> Union[bool, str]:
    """True when valid, otherwise the message to show next to the field."""
    if not settings.allow_null and not value:
        return VALIDATION_MESSAGE
    return True


async def format_value(value: Any, settings: FieldSettings) -> str:
    """Format a stored value for templates according to return_format."""
    if not value:
        return ""
    value = str(value)
    if settings.return_format == "svg":
        return await resolve_icon_markup(value)
    return value


@dataclass
class HostField:
    """The host form's view of one icon field.

    set_value() notifies every subscriber except the one that caused the
    change, so the picker and the host can write to each other without
    echoing.
    """

    settings: FieldSettings = field(default_factory=FieldSettings)
    value: str = ""
    _subscribers: list[ChangeCallback] = field(default_factory=list, repr=False)

    def subscribe(self, callback: ChangeCallback) -> Callable[[], None]:
        """Register a change callback. Returns a function that unsubscribes it."""
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def set_value(self, value: str, source: Optional[Any] = None) -> None:
        self.value = value
        for callback in list(self._subscribers):
            if getattr(callback, "__self__", None) is source and source is not None:
                continue
            callback(value, source)

    def validate(self) -> Union[bool, str]:
        return validate_value(self.value, self.settings)

    def submit(self) -> str:
        """Sanitized value as it would be persisted."""
        return update_value(self.value)
