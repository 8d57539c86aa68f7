"""Minimal page document model.

Host pages hand the runtime a :class:`Document`; the theme applier and the
datalist refresher mutate it, and a host (such as the Streamlit adapter)
renders the result.  Only the parts of a DOM the runtime touches are
modelled: ids, tags, attributes, classes, inline style, text and values.
"""

from __future__ import annotations

from typing import Callable, Dict, Iterator, List, Optional


class Element:
    def __init__(self, tag: str, id: Optional[str] = None, **attributes: str) -> None:
        self.tag = tag.lower()
        self.id = id
        self.attributes: Dict[str, str] = {key.replace("_", "-"): value for key, value in attributes.items()}
        self.class_list: List[str] = []
        self.style: Dict[str, str] = {}
        self.children: List[Element] = []
        self.parent: Optional[Element] = None
        self.text_content = ""
        self.value = ""

    def __repr__(self) -> str:
        suffix = f"#{self.id}" if self.id else ""
        return f"<Element {self.tag}{suffix}>"

    def append_child(self, child: "Element") -> "Element":
        if child.parent is not None:
            child.remove()
        child.parent = self
        self.children.append(child)
        return child

    def remove(self) -> None:
        if self.parent is not None:
            self.parent.children.remove(self)
            self.parent = None

    def clear_children(self) -> None:
        for child in self.children:
            child.parent = None
        self.children = []

    def add_class(self, name: str) -> None:
        if name not in self.class_list:
            self.class_list.append(name)

    def remove_class(self, name: str) -> None:
        if name in self.class_list:
            self.class_list.remove(name)

    def has_class(self, name: str) -> bool:
        return name in self.class_list

    def iter(self) -> Iterator["Element"]:
        """Yield this element and all descendants in document order."""
        yield self
        for child in self.children:
            yield from child.iter()


class Document:
    """An ``html`` root with ``head`` and ``body``."""

    def __init__(self) -> None:
        self.root = Element("html")
        self.head = self.root.append_child(Element("head"))
        self.body = self.root.append_child(Element("body"))

    def create_element(self, tag: str, id: Optional[str] = None, **attributes: str) -> Element:
        return Element(tag, id=id, **attributes)

    def get_element_by_id(self, element_id: str) -> Optional[Element]:
        for element in self.root.iter():
            if element.id == element_id:
                return element
        return None

    def query_all(self, predicate: Callable[[Element], bool]) -> List[Element]:
        return [element for element in self.root.iter() if predicate(element)]
