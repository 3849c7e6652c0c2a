"""Minimal owned element tree for the picker UI.

Each picker builds and owns its own subtree; listeners are registered
and removed explicitly in pairs. Dispatch bubbles from the target up to
the root element and then to the document. Handlers may be plain
functions or coroutine functions.
"""

import html
import inspect
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Iterator, Optional, Union

Listener = Callable[["Event"], Union[None, Awaitable[None]]]

VOID_TAGS = {"input", "img", "br", "hr", "use"}


@dataclass
class Event:
    """A UI event travelling through the tree."""

    type: str  # click, input, keydown, scroll
    target: "Element"
    key: str = ""
    current_target: Optional["Element"] = None
    propagation_stopped: bool = False
    default_prevented: bool = False

    def stop_propagation(self) -> None:
        self.propagation_stopped = True

    def prevent_default(self) -> None:
        self.default_prevented = True


class EventTarget:
    """Something listeners can be attached to."""

    def __init__(self) -> None:
        self._listeners: dict[str, list[Listener]] = {}

    def add_listener(self, event_type: str, listener: Listener) -> None:
        self._listeners.setdefault(event_type, []).append(listener)

    def remove_listener(self, event_type: str, listener: Listener) -> None:
        listeners = self._listeners.get(event_type, [])
        if listener in listeners:
            listeners.remove(listener)
        if not listeners:
            self._listeners.pop(event_type, None)

    def listener_count(self, event_type: Optional[str] = None) -> int:
        if event_type is not None:
            return len(self._listeners.get(event_type, []))
        return sum(len(v) for v in self._listeners.values())

    async def _invoke(self, event: Event) -> None:
        # Copy: a handler may unregister itself or others.
        for listener in list(self._listeners.get(event.type, [])):
            result = listener(event)
            if inspect.isawaitable(result):
                await result
            if event.propagation_stopped:
                break


class Element(EventTarget):
    """A node in the picker's element tree."""

    def __init__(
        self,
        tag: str,
        class_name: str = "",
        text: Optional[str] = None,
        attrs: Optional[dict[str, Any]] = None,
    ):
        super().__init__()
        self.tag = tag
        self.classes: list[str] = class_name.split() if class_name else []
        self.text = text
        self.attrs: dict[str, Any] = dict(attrs or {})
        self.children: list["Element"] = []
        self.parent: Optional["Element"] = None
        self.raw_html: Optional[str] = None
        self.value = ""
        self.hidden = False
        # Scroll geometry
        self.scroll_top = 0.0
        self.client_height = 0.0
        self.content_height: Optional[Callable[[], float]] = None

    def __repr__(self) -> str:
        return f"<Element {self.tag} class={' '.join(self.classes)!r}>"

    # Tree structure

    def append(self, child: "Element") -> "Element":
        child.remove()
        child.parent = self
        self.children.append(child)
        return child

    def prepend(self, child: "Element") -> "Element":
        child.remove()
        child.parent = self
        self.children.insert(0, child)
        return child

    def remove(self) -> None:
        if self.parent is not None:
            self.parent.children.remove(self)
            self.parent = None

    def clear(self) -> None:
        for child in self.children:
            child.parent = None
        self.children = []

    def iter_descendants(self) -> Iterator["Element"]:
        for child in self.children:
            yield child
            yield from child.iter_descendants()

    def find(self, class_name: str) -> Optional["Element"]:
        """First descendant carrying the class, depth-first."""
        for el in self.iter_descendants():
            if class_name in el.classes:
                return el
        return None

    def find_all(self, class_name: str) -> list["Element"]:
        return [el for el in self.iter_descendants() if class_name in el.classes]

    def find_by_attr(self, name: str, value: Any) -> Optional["Element"]:
        for el in self.iter_descendants():
            if el.attrs.get(name) == value:
                return el
        return None

    def closest(self, class_name: str) -> Optional["Element"]:
        """This element or its nearest ancestor carrying the class."""
        el: Optional[Element] = self
        while el is not None:
            if class_name in el.classes:
                return el
            el = el.parent
        return None

    def root(self) -> "Element":
        el = self
        while el.parent is not None:
            el = el.parent
        return el

    def contains(self, other: "Element") -> bool:
        el: Optional[Element] = other
        while el is not None:
            if el is self:
                return True
            el = el.parent
        return False

    # Classes and attributes

    def has_class(self, class_name: str) -> bool:
        return class_name in self.classes

    def add_class(self, class_name: str) -> None:
        if class_name not in self.classes:
            self.classes.append(class_name)

    def remove_class(self, class_name: str) -> None:
        if class_name in self.classes:
            self.classes.remove(class_name)

    def set_html(self, markup: str) -> None:
        """Replace children with raw markup (used for the sprite payload)."""
        self.clear()
        self.text = None
        self.raw_html = markup

    # Scrolling

    @property
    def scroll_height(self) -> float:
        content = self.content_height() if self.content_height else 0.0
        return max(self.client_height, content)

    def scroll_to(self, top: float) -> None:
        max_top = max(0.0, self.scroll_height - self.client_height)
        self.scroll_top = min(max(0.0, top), max_top)

    # Serialization

    def to_html(self) -> str:
        parts = [f"<{self.tag}"]
        if self.classes:
            parts.append(f' class="{html.escape(" ".join(self.classes), quote=True)}"')
        for name, value in self.attrs.items():
            if value is None or value is False:
                continue
            if value is True:
                parts.append(f" {name}")
            else:
                parts.append(f' {name}="{html.escape(str(value), quote=True)}"')
        if self.hidden:
            parts.append(' style="display: none;"')
        if self.tag in VOID_TAGS and not self.children:
            parts.append(" />")
            return "".join(parts)
        parts.append(">")
        if self.raw_html is not None:
            parts.append(self.raw_html)
        elif self.text is not None:
            parts.append(html.escape(self.text))
        parts.extend(child.to_html() for child in self.children)
        parts.append(f"</{self.tag}>")
        return "".join(parts)


class Document(EventTarget):
    """Page-level root: body element, focus tracking, document listeners."""

    def __init__(self) -> None:
        super().__init__()
        self.body = Element("body")
        self.active_element: Optional[Element] = None

    def get_element_by_id(self, element_id: str) -> Optional[Element]:
        return self.body.find_by_attr("id", element_id)

    def focus(self, element: Optional[Element]) -> None:
        self.active_element = element

    async def dispatch(self, event: Event) -> Event:
        """Deliver an event to the target, its ancestors, then the document."""
        el: Optional[Element] = event.target
        while el is not None and not event.propagation_stopped:
            event.current_target = el
            await el._invoke(event)
            el = el.parent
        if not event.propagation_stopped:
            event.current_target = None
            await self._invoke(event)
        return event
