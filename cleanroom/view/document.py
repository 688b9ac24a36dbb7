"""
In-process document tree that mounted views attach to.

The document is the one resource shared by every test case: a case appends
its view under ``document.body`` and must remove exactly that subtree again.
"""

from html import escape
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from cleanroom.view.scope import Scope

VOID_ELEMENTS = frozenset(
    {"area", "base", "br", "col", "embed", "hr", "img", "input", "link", "meta", "source", "wbr"}
)


class Node:
    """A single element in the document tree."""

    def __init__(
        self,
        tag: str,
        attributes: dict[str, str] | None = None,
        text: str = "",
    ) -> None:
        self.tag = tag
        self.attributes: dict[str, str] = dict(attributes or {})
        self.text = text
        self.children: list[Node] = []
        self.parent: Node | None = None
        # Per-node data written by the compiler (linked scopes)
        self.data: dict[str, Any] = {}

    def append(self, child: "Node") -> "Node":
        """Append a child, moving it out of its previous parent if needed."""
        if child.parent is not None:
            child.remove()
        child.parent = self
        self.children.append(child)
        return child

    def remove(self) -> None:
        """Detach this node from its parent. No-op when already detached."""
        if self.parent is None:
            return
        self.parent.children.remove(self)
        self.parent = None

    @property
    def root(self) -> "Node":
        node = self
        while node.parent is not None:
            node = node.parent
        return node

    @property
    def is_attached(self) -> bool:
        """True when the node hangs off a document body."""
        return isinstance(self.root, _DocumentRoot)

    def iter(self):
        """Iterate over this node and all descendants, depth first."""
        yield self
        for child in self.children:
            yield from child.iter()

    def find(self, tag: str) -> "Node | None":
        """Return the first descendant (or self) with the given tag."""
        for node in self.iter():
            if node.tag == tag:
                return node
        return None

    def scope(self) -> "Scope | None":
        """The scope the node was linked against, if compiled."""
        return self.data.get("scope")

    def isolate_scope(self) -> "Scope | None":
        """The isolate scope created for the node's directive, if any."""
        return self.data.get("isolate_scope")

    def to_markup(self) -> str:
        """Render the subtree back to markup."""
        attrs = "".join(
            f' {name}="{escape(value)}"' if value else f" {name}"
            for name, value in self.attributes.items()
        )
        if self.tag in VOID_ELEMENTS:
            return f"<{self.tag}{attrs}>"
        inner = escape(self.text) + "".join(child.to_markup() for child in self.children)
        return f"<{self.tag}{attrs}>{inner}</{self.tag}>"

    def __repr__(self) -> str:
        state = "attached" if self.is_attached else "detached"
        return f"Node(<{self.tag}>, {len(self.children)} children, {state})"


class _DocumentRoot(Node):
    """Marker type for the top of a document."""


class Document:
    """A document with a single ``body`` that views are mounted into.

    Example:
        >>> document = Document()
        >>> node = document.body.append(Node("div"))
        >>> document.attached_views()
        [Node(<div>, 0 children, attached)]
        >>> node.remove()
        >>> document.attached_views()
        []
    """

    def __init__(self) -> None:
        self._html = _DocumentRoot("html")
        self.body = self._html.append(Node("body"))

    def attached_views(self) -> list[Node]:
        """Nodes currently mounted directly under the body."""
        return list(self.body.children)

    def contains(self, node: Node) -> bool:
        return node.root is self._html

    def __len__(self) -> int:
        return len(self.body.children)

    def __repr__(self) -> str:
        return f"Document({len(self.body.children)} attached views)"
