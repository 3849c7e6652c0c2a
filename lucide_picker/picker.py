"""Searchable icon picker component.

One PickerController per field. It owns its element subtree and every
listener it registers, so unmount() can tear everything down. The grid
is filled one page (100 icons) at a time as the user scrolls; icons are
lightweight <use> references into the shared sprite.
"""

import math
from dataclasses import dataclass, field
from typing import Callable, Optional

from lucide_picker.catalog import IconCatalog
from lucide_picker.dom import Document, Element, Event, EventTarget, Listener
from lucide_picker.errors import AssetUnavailable
from lucide_picker.field import HostField, load_value
from lucide_picker.log import get_logger
from lucide_picker.markup import sanitize_icon_name
from lucide_picker.sprite import SpriteLoader, get_sprite_loader
from lucide_picker.timers import Debouncer

logger = get_logger(__name__)

ICONS_PER_PAGE = 100
SEARCH_DELAY = 0.2
SCROLL_DELAY = 0.1
LOAD_MORE_THRESHOLD = 100
SCROLL_MARGIN = 50

EMPTY_PREVIEW_TEXT = "No icon selected"
NO_RESULTS_TEXT = "No icons found"
LOAD_ERROR_TEXT = "Icons could not be loaded"
CLEAR_TITLE = "Clear selection"


@dataclass
class GridMetrics:
    """Layout of the icon grid, used for scroll decisions."""

    columns: int = 8
    row_height: float = 36.0
    client_height: float = 300.0

    def content_height(self, count: int) -> float:
        return math.ceil(count / self.columns) * self.row_height

    def row_top(self, index: int) -> float:
        return (index // self.columns) * self.row_height


@dataclass
class PickerState:
    """Mutable per-picker state."""

    query: str = ""
    filtered_names: list[str] = field(default_factory=list)
    page: int = 0
    rendered_names: set[str] = field(default_factory=set)
    selected_value: str = ""
    is_open: bool = False


def sprite_icon(name: str, size: int) -> Element:
    """An <svg> that references a symbol in the shared sprite."""
    svg = Element(
        "svg",
        "lucide-picker-icon-svg",
        attrs={
            "width": size,
            "height": size,
            "viewBox": "0 0 24 24",
            "fill": "none",
            "stroke": "currentColor",
            "stroke-width": "2",
            "stroke-linecap": "round",
            "stroke-linejoin": "round",
        },
    )
    svg.append(Element("use", attrs={"href": f"#{name}"}))
    return svg


class PickerController:
    """Stateful icon picker with a mount / handle_event / unmount lifecycle."""

    def __init__(
        self,
        document: Document,
        host_field: HostField,
        catalog: IconCatalog,
        sprite_loader: Optional[SpriteLoader] = None,
        container: Optional[Element] = None,
        page_size: int = ICONS_PER_PAGE,
        search_delay: float = SEARCH_DELAY,
        scroll_delay: float = SCROLL_DELAY,
        metrics: Optional[GridMetrics] = None,
    ):
        """Initialize picker.

        Args:
            document: Page the picker lives in
            host_field: Form field the picker reads from and writes to
            catalog: Icon catalog to search
            sprite_loader: Sprite loader. Defaults to the process-wide loader
            container: Element to mount into. Defaults to the document body
            page_size: Icons rendered per page
            search_delay: Search debounce in seconds
            scroll_delay: Scroll check debounce in seconds
            metrics: Grid layout used for scroll decisions
        """
        self.document = document
        self.field = host_field
        self.catalog = catalog
        self.sprite_loader = sprite_loader or get_sprite_loader()
        self.container = container or document.body
        self.page_size = page_size
        self.metrics = metrics or GridMetrics()
        self.state = PickerState()
        self.mounted = False

        self._search_timer = Debouncer(search_delay, self.filter_icons)
        self._scroll_timer = Debouncer(scroll_delay, self.check_load_more)
        self._listeners: list[tuple[EventTarget, str, Listener]] = []
        self._unsubscribe: Optional[Callable[[], None]] = None
        self._opening = False

        self.root: Optional[Element] = None

    # Element accessors

    @property
    def selected_el(self) -> Element:
        return self.root.find("lucide-picker-selected")

    @property
    def preview(self) -> Element:
        return self.root.find("lucide-picker-preview")

    @property
    def search(self) -> Element:
        return self.root.find("lucide-picker-search")

    @property
    def grid_wrap(self) -> Element:
        return self.root.find("lucide-picker-grid-wrap")

    @property
    def grid(self) -> Element:
        return self.root.find("lucide-picker-grid")

    @property
    def no_results(self) -> Element:
        return self.root.find("lucide-picker-no-results")

    @property
    def load_error(self) -> Element:
        return self.root.find("lucide-picker-load-error")

    @property
    def input(self) -> Element:
        return self.root.find("lucide-picker-input")

    @property
    def clear_button(self) -> Optional[Element]:
        return self.root.find("lucide-picker-clear")

    @property
    def selected_value(self) -> str:
        return self.state.selected_value

    # Lifecycle

    def _build(self) -> Element:
        settings = self.field.settings
        root = Element(
            "div",
            "lucide-picker",
            attrs={"data-allow-null": "1" if settings.allow_clear else "0"},
        )

        selected = root.append(Element("div", "lucide-picker-selected", attrs={"tabindex": "0"}))
        selected.append(Element("div", "lucide-picker-preview"))

        dropdown = root.append(Element("div", "lucide-picker-dropdown"))
        search_wrap = dropdown.append(Element("div", "lucide-picker-search-wrap"))
        search_wrap.append(Element(
            "input",
            "lucide-picker-search",
            attrs={"type": "text", "placeholder": settings.placeholder_text, "autocomplete": "off"},
        ))

        grid_wrap = dropdown.append(Element("div", "lucide-picker-grid-wrap"))
        grid = grid_wrap.append(Element("div", "lucide-picker-grid"))
        no_results = grid_wrap.append(Element("div", "lucide-picker-no-results", text=NO_RESULTS_TEXT))
        no_results.hidden = True
        load_error = grid_wrap.append(Element("div", "lucide-picker-load-error", text=LOAD_ERROR_TEXT))
        load_error.hidden = True

        grid_wrap.client_height = self.metrics.client_height
        grid_wrap.content_height = lambda: self.metrics.content_height(len(grid.children))

        root.append(Element(
            "input",
            "lucide-picker-input",
            attrs={"type": "hidden", "name": settings.name, "value": ""},
        ))
        return root

    def _listen(self, target: EventTarget, event_type: str, listener: Listener) -> None:
        target.add_listener(event_type, listener)
        self._listeners.append((target, event_type, listener))

    async def mount(self) -> Element:
        """Build the element tree, bind listeners and render the preview."""
        if self.mounted:
            return self.root

        self.root = self._build()
        self.container.append(self.root)

        self.state.filtered_names = list(self.catalog.names)

        self._listen(self.root, "click", self._on_click)
        self._listen(self.root, "input", self._on_input)
        self._listen(self.root, "keydown", self._on_keydown)
        self._listen(self.grid_wrap, "scroll", self._on_scroll)
        self._listen(self.document, "click", self._on_document_click)
        self._unsubscribe = self.field.subscribe(self._on_host_change)
        self.mounted = True

        initial = load_value(self.field.value, self.field.settings)
        self.field.value = initial
        await self.update_preview(initial)
        return self.root

    def unmount(self) -> None:
        """Remove every listener, cancel pending timers and detach the tree."""
        for target, event_type, listener in self._listeners:
            target.remove_listener(event_type, listener)
        self._listeners = []

        self._search_timer.cancel()
        self._scroll_timer.cancel()

        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

        if self.root is not None:
            self.root.remove()
        self.state.is_open = False
        self.mounted = False

    async def handle_event(self, event: Event) -> Event:
        """Deliver a UI event through the document to the picker's handlers."""
        return await self.document.dispatch(event)

    async def _ensure_sprite(self) -> bool:
        try:
            await self.sprite_loader.ensure_loaded(self.document)
        except AssetUnavailable as e:
            logger.warning("picker_sprite_unavailable", field=self.field.settings.name, reason=e.reason)
            return False
        return True

    # Event handlers

    async def _on_click(self, event: Event) -> None:
        target = event.target
        if target.closest("lucide-picker-clear"):
            event.prevent_default()
            event.stop_propagation()
            self.clear()
        elif target.closest("lucide-picker-icon"):
            event.prevent_default()
            event.stop_propagation()
            button = target.closest("lucide-picker-icon")
            self.select_icon(button.attrs["data-icon"])
        elif target.closest("lucide-picker-selected"):
            event.prevent_default()
            event.stop_propagation()
            await self.toggle()

    def _on_document_click(self, event: Event) -> None:
        if self.state.is_open and not self.root.contains(event.target):
            self.close()

    def _on_input(self, event: Event) -> None:
        if event.target is not self.search:
            return
        self.state.query = self.search.value
        self._search_timer.trigger(self.search.value)

    async def _on_keydown(self, event: Event) -> None:
        if event.target is not self.search:
            return
        if event.key == "Escape":
            self.close()
            self.document.focus(self.selected_el)
        elif event.key == "Enter":
            event.prevent_default()
            first = self.grid.find("lucide-picker-icon")
            if first is not None:
                await self.document.dispatch(Event("click", first))

    def _on_scroll(self, event: Event) -> None:
        self._scroll_timer.trigger()

    def _on_host_change(self, value: str, source: object) -> None:
        clean = sanitize_icon_name(value)
        self.set_value(clean, notify=False)
        if clean != value:
            self.field.set_value(clean, source=self)

    # Open / close

    async def toggle(self) -> None:
        if self.state.is_open:
            self.close()
        else:
            await self.open()

    async def open(self) -> None:
        """Open the dropdown with a fresh, unfiltered grid."""
        if self._opening:
            return
        self._opening = True
        try:
            sprite_ok = await self._ensure_sprite()
        finally:
            self._opening = False
        if not self.mounted:
            return

        self.load_error.hidden = sprite_ok
        self.state.is_open = True
        self.root.add_class("is-open")

        self._search_timer.cancel()
        self.search.value = ""
        self.state.query = ""
        self.state.filtered_names = list(self.catalog.names)
        self.render_icons()

        self.document.focus(self.search)
        self.scroll_to_selected()
        logger.debug("picker_opened", field=self.field.settings.name)

    def close(self) -> None:
        self.state.is_open = False
        if self.root is not None:
            self.root.remove_class("is-open")

    def scroll_to_selected(self) -> None:
        button = self.grid.find("is-selected")
        if button is None:
            return
        index = self.grid.children.index(button)
        self.grid_wrap.scroll_to(self.metrics.row_top(index) - SCROLL_MARGIN)

    # Search and pagination

    def filter_icons(self, query: str) -> None:
        """Recompute the filtered list and re-render from page 0."""
        self.state.query = query
        self.state.filtered_names = self.catalog.filter(self.catalog.names, query)
        self.render_icons()
        logger.debug("picker_filtered", query=query, matches=len(self.state.filtered_names))

    def render_icons(self) -> None:
        """Fresh render of page 0, toggling the no-results indicator."""
        self.state.page = 0
        self.state.rendered_names.clear()
        self.grid.clear()
        self.grid_wrap.scroll_top = 0.0

        if not self.state.filtered_names:
            self.no_results.hidden = False
            return

        self.no_results.hidden = True
        self.render_page(0, append=False)

    def render_page(self, page: int, append: bool) -> None:
        """Render one page window into the grid.

        Args:
            page: Page index into the filtered names
            append: Keep already-rendered icons (False clears the grid first)
        """
        names = self.state.filtered_names
        start = page * self.page_size
        end = min(start + self.page_size, len(names))

        if not append:
            self.grid.clear()
            self.state.rendered_names.clear()

        for name in names[start:end]:
            if name in self.state.rendered_names:
                continue
            button = Element(
                "button",
                "lucide-picker-icon",
                attrs={"type": "button", "data-icon": name, "title": name},
            )
            if name == self.state.selected_value:
                button.add_class("is-selected")
            button.append(sprite_icon(name, 22))
            self.grid.append(button)
            self.state.rendered_names.add(name)

    def has_more_pages(self) -> bool:
        return (self.state.page + 1) * self.page_size < len(self.state.filtered_names)

    def load_more(self) -> bool:
        """Append the next page. Returns False when every page is rendered."""
        if not self.has_more_pages():
            return False
        self.state.page += 1
        self.render_page(self.state.page, append=True)
        return True

    def check_load_more(self) -> None:
        wrap = self.grid_wrap
        if wrap.scroll_top + wrap.client_height >= wrap.scroll_height - LOAD_MORE_THRESHOLD:
            self.load_more()

    # Value

    def select_icon(self, name: str) -> None:
        """Select an icon, notify the host and close the dropdown."""
        self.set_value(name)
        self.close()

    def clear(self) -> None:
        self.set_value("")

    def set_value(self, value: str, notify: bool = True) -> None:
        """Apply a value to the preview, the grid and (optionally) the host field."""
        self.state.selected_value = value
        self.input.value = value
        self.input.attrs["value"] = value

        for button in self.grid.find_all("is-selected"):
            button.remove_class("is-selected")

        self.preview.clear()
        if value:
            self.preview.append(sprite_icon(value, 24))
            self.preview.append(Element("span", "lucide-picker-preview-name", text=value))

            button = self.grid.find_by_attr("data-icon", value)
            if button is not None:
                button.add_class("is-selected")
            self._show_clear_button()
        else:
            self.preview.append(Element("span", "lucide-picker-preview-empty", text=EMPTY_PREVIEW_TEXT))
            clear_button = self.clear_button
            if clear_button is not None:
                clear_button.remove()

        if notify:
            self.field.set_value(value, source=self)

    def _show_clear_button(self) -> None:
        if not self.field.settings.allow_clear or self.clear_button is not None:
            return
        button = Element(
            "button",
            "lucide-picker-clear",
            attrs={"type": "button", "title": CLEAR_TITLE},
        )
        button.append(Element("span", "lucide-picker-clear-icon", text="×"))
        self.selected_el.append(button)

    async def update_preview(self, value: str) -> None:
        """Render the preview for a value, loading the sprite first when needed.

        A host write that lands while the sprite loads wins over `value`.
        """
        self.state.selected_value = value
        if value:
            await self._ensure_sprite()
        if self.mounted:
            self.set_value(self.state.selected_value, notify=False)

    def render_html(self) -> str:
        return self.root.to_html() if self.root is not None else ""


def create_picker(
    document: Document,
    host_field: HostField,
    storage=None,
    catalog: Optional[IconCatalog] = None,
    **kwargs,
) -> PickerController:
    """Build a picker wired to the stored configuration.

    Args:
        document: Page the picker lives in
        host_field: Form field to bind
        storage: StorageManager to read config from. Defaults to ~/.lucide-picker
        catalog: Pre-loaded catalog; loaded from config when omitted
        **kwargs: Overrides passed through to PickerController
    """
    from lucide_picker.storage import StorageManager

    storage = storage or StorageManager()
    config = storage.load_config()
    if catalog is None:
        catalog = IconCatalog.from_source(storage.get_catalog_source())

    options = {
        "page_size": config.page_size,
        "search_delay": config.search_delay,
        "scroll_delay": config.scroll_delay,
    }
    options.update(kwargs)
    return PickerController(document, host_field, catalog, **options)
