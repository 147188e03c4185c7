"""
In-memory element tree used as the grid's view layer.

Exposes the primitives the controller needs: create element, set text,
add/remove class, bind/unbind/trigger handlers and a per-element data
mapping. Rendering an Element tree to a real surface (terminal, HTML) is
the job of a front-end such as coretable.console.
"""

from typing import Any, Callable, Iterator, Optional

Handler = Callable[["Element", dict], None]


class Element:
    """A node with a tag, text, classes, attributes, children and handlers."""

    def __init__(self, tag: str, text: str = "", classes: Optional[list[str]] = None, **attrs: Any):
        self.tag = tag
        self.text = text
        self.classes: list[str] = []
        self.attrs: dict[str, Any] = dict(attrs)
        self.data: dict[str, Any] = {}
        self.children: list["Element"] = []
        self.parent: Optional["Element"] = None
        self.hidden = False
        self._handlers: dict[str, list[Handler]] = {}
        for name in classes or []:
            self.add_class(name)

    def __repr__(self) -> str:
        return f"<Element {self.tag} classes={self.classes} text={self.text!r}>"

    # Content

    def set_text(self, text: Any) -> "Element":
        self.text = "" if text is None else str(text)
        return self

    def append(self, *children: "Element") -> "Element":
        for child in children:
            if child.parent is not None:
                child.parent.children.remove(child)
            child.parent = self
            self.children.append(child)
        return self

    def empty(self) -> "Element":
        """Remove all children and text."""
        for child in self.children:
            child.parent = None
        self.children = []
        self.text = ""
        return self

    def set_hidden(self, hidden: bool = True) -> "Element":
        self.hidden = hidden
        return self

    # Classes

    def add_class(self, *names: str) -> "Element":
        for name in names:
            if name and name not in self.classes:
                self.classes.append(name)
        return self

    def remove_class(self, *names: str) -> "Element":
        self.classes = [c for c in self.classes if c not in names]
        return self

    def has_class(self, name: str) -> bool:
        return name in self.classes

    def toggle_class(self, name: str, on: bool) -> "Element":
        return self.add_class(name) if on else self.remove_class(name)

    # Events

    def bind(self, event: str, handler: Handler) -> "Element":
        self._handlers.setdefault(event, []).append(handler)
        return self

    def unbind(self, event: Optional[str] = None) -> "Element":
        """Drop handlers for one event, or all of them."""
        if event is None:
            self._handlers.clear()
        else:
            self._handlers.pop(event, None)
        return self

    def trigger(self, event: str, **payload: Any) -> int:
        """Call every handler bound to event; returns how many ran."""
        handlers = list(self._handlers.get(event, []))
        for handler in handlers:
            handler(self, payload)
        return len(handlers)

    # Queries

    def iter(self) -> Iterator["Element"]:
        """Depth-first walk including self."""
        yield self
        for child in self.children:
            yield from child.iter()

    def find(self, tag: Optional[str] = None, cls: Optional[str] = None) -> list["Element"]:
        return [
            el for el in self.iter()
            if (tag is None or el.tag == tag) and (cls is None or el.has_class(cls))
        ]

    def find_one(self, tag: Optional[str] = None, cls: Optional[str] = None) -> Optional["Element"]:
        found = self.find(tag, cls)
        return found[0] if found else None
