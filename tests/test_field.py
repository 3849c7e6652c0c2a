"""Tests for lucide_picker field module."""

import httpx
import pytest

from lucide_picker.field import (
    DEFAULT_PLACEHOLDER,
    VALIDATION_MESSAGE,
    FieldSettings,
    HostField,
    format_value,
    load_value,
    update_value,
    validate_value,
)
from lucide_picker.markup import MarkupResolver, set_resolver


class TestFieldSettings:
    """Tests for FieldSettings."""

    def test_defaults(self):
        settings = FieldSettings()
        assert settings.return_format == "name"
        assert settings.allow_clear is False
        assert settings.placeholder_text == DEFAULT_PLACEHOLDER

    def test_invalid_return_format(self):
        with pytest.raises(ValueError):
            FieldSettings(return_format="png")

    def test_round_trip(self):
        settings = FieldSettings(name="menu_icon", allow_null=True, default_value="home", return_format="svg", placeholder="Find...")
        assert FieldSettings.from_dict(settings.to_dict()) == settings
        assert settings.placeholder_text == "Find..."
        assert settings.allow_clear is True


class TestValueHooks:
    """Tests for the load/update/validate/format hooks."""

    @pytest.mark.parametrize("value,expected", [
        ("rocket", "rocket"),
        ("", ""),
        (None, ""),
        ("../etc/passwd", ""),
        ("arrow right", "arrow-right"),
    ])
    def test_update_value(self, value, expected):
        assert update_value(value) == expected

    def test_load_value_falls_back_to_default(self):
        settings = FieldSettings(default_value="home")
        assert load_value("", settings) == "home"
        assert load_value("rocket", settings) == "rocket"
        assert load_value("../x", settings) == "home"

    def test_validate_required(self):
        """Test that a required field rejects an empty value."""
        settings = FieldSettings(allow_null=False)
        assert validate_value("", settings) == VALIDATION_MESSAGE
        assert validate_value("rocket", settings) is True

    def test_validate_optional(self):
        assert validate_value("", FieldSettings(allow_null=True)) is True

    @pytest.mark.asyncio
    async def test_format_value_name(self):
        assert await format_value("rocket", FieldSettings()) == "rocket"
        assert await format_value("", FieldSettings()) == ""

    @pytest.mark.asyncio
    async def test_format_value_svg(self, make_client, rocket_svg):
        """Test that svg return format resolves standalone markup."""
        async with make_client(lambda request: httpx.Response(200, text=rocket_svg)) as client:
            set_resolver(MarkupResolver(cdn_url="https://cdn.test/", client=client))
            result = await format_value("rocket", FieldSettings(return_format="svg"))

        assert result.startswith("<svg")
        assert "lucide-rocket" in result


class Listener:
    def __init__(self):
        self.seen = []

    def on_change(self, value, source):
        self.seen.append(value)


class TestHostField:
    """Tests for HostField change notification."""

    def test_subscribers_notified(self):
        host = HostField()
        listener = Listener()
        host.subscribe(listener.on_change)

        host.set_value("rocket")
        assert host.value == "rocket"
        assert listener.seen == ["rocket"]

    def test_source_not_echoed(self):
        """Test that the subscriber that caused a change is skipped."""
        host = HostField()
        picker, other = Listener(), Listener()
        host.subscribe(picker.on_change)
        host.subscribe(other.on_change)

        host.set_value("rocket", source=picker)
        assert picker.seen == []
        assert other.seen == ["rocket"]

    def test_unsubscribe(self):
        host = HostField()
        listener = Listener()
        unsubscribe = host.subscribe(listener.on_change)
        assert host.subscriber_count == 1

        unsubscribe()
        unsubscribe()
        host.set_value("rocket")
        assert host.subscriber_count == 0
        assert listener.seen == []

    def test_validate_and_submit(self):
        host = HostField(settings=FieldSettings(allow_null=False))
        assert host.validate() == VALIDATION_MESSAGE
        host.set_value("arrow right")
        assert host.validate() is True
        assert host.submit() == "arrow-right"
