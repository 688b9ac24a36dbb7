"""
Compiler - turns template descriptors into live, linked views.

The compiler builds a node tree from a template, attaches it to the shared
document, links every directive it finds against the scope tree and runs a
digest so the returned state already holds what the directives computed.
``detach`` undoes all of it for one mounted node.
"""

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

from cleanroom.view.document import Document, Node
from cleanroom.view.scope import Scope
from cleanroom.view.template import TemplateDescriptor, as_descriptor

logger = logging.getLogger(__name__)

# Attribute prefixes ignored when matching directive names
_ATTRIBUTE_PREFIXES = ("data-", "x-")

LinkFn = Callable[[Scope, Node, dict[str, str]], None]


def normalize_name(attribute: str) -> str:
    """Map an attribute or tag name to a directive name.

    Example:
        >>> normalize_name("data-heavy-load")
        'heavy_load'
    """
    name = attribute.lower()
    for prefix in _ATTRIBUTE_PREFIXES:
        if name.startswith(prefix):
            name = name[len(prefix) :]
            break
    return name.replace("-", "_").replace(":", "_")


@dataclass(frozen=True)
class DirectiveDefinition:
    """How a directive initialises the element it is placed on.

    Attributes:
        name: Directive name in normalized form (``heavy_load``).
        link: Called as ``link(scope, node, attrs)`` after the element's
            children were linked.
        isolate: Whether the directive gets a private scope that does not
            read through to its parent.
        bindings: Scope field -> attribute name; the attribute's value is
            copied onto the directive scope before ``link`` runs.
        priority: Higher priorities link first when several directives share
            an element.
    """

    name: str
    link: LinkFn | None = None
    isolate: bool = True
    bindings: Mapping[str, str] = field(default_factory=dict)
    priority: int = 0


@dataclass(frozen=True)
class MountedView:
    """A view attached to the document and the state private to it."""

    node: Node
    isolated_state: Scope


class DirectiveConflictError(ValueError):
    """Raised when two directives on one element both ask for an isolate scope."""

    def __init__(self, tag: str, names: list[str]) -> None:
        self.tag = tag
        self.names = names
        super().__init__(
            f"Multiple directives [{', '.join(names)}] request an isolate scope on <{tag}>"
        )


class Compiler:
    """
    Compile templates into views mounted on a document.

    Example:
        >>> compiler = Compiler(Document(), {"greet": DirectiveDefinition(
        ...     name="greet", link=lambda scope, node, attrs: setattr(scope, "msg", "hi"))})
        >>> view = compiler.compile_and_attach("<p greet></p>", Scope())
        >>> view.isolated_state.msg
        'hi'
        >>> compiler.detach(view.node)
    """

    def __init__(
        self,
        document: Document,
        directives: Mapping[str, DirectiveDefinition] | None = None,
    ) -> None:
        self.document = document
        self.directives: dict[str, DirectiveDefinition] = dict(directives or {})

    def compile_and_attach(
        self,
        template: str | TemplateDescriptor,
        state_root: Scope,
    ) -> MountedView:
        """
        Build, attach and link a view, then digest its state.

        Args:
            template: Markup or a TemplateDescriptor with a single root.
            state_root: Scope the view is linked against.

        Returns:
            MountedView whose isolated_state reflects post-link values.
        """
        descriptor = as_descriptor(template)
        node = descriptor.build()
        self.document.body.append(node)

        try:
            isolated = self._link(node, state_root, is_root=True)
            state_root.digest()
        except Exception:
            # Leave nothing half-mounted behind
            self.detach(node)
            raise

        logger.debug("Mounted <%s> with directives %s", node.tag, node.data.get("directives"))
        return MountedView(node=node, isolated_state=isolated)

    def detach(self, node: Node) -> None:
        """Remove a mounted node and destroy the scopes linked to it.

        Calling this on a node that is already detached does nothing.
        """
        if node.data.get("detached"):
            return
        for descendant in node.iter():
            for scope in descendant.data.get("owned_scopes", ()):
                scope.destroy()
        node.remove()
        node.data["detached"] = True
        logger.debug("Detached <%s>", node.tag)

    # ------------------------------------------------------------------
    # Linking
    # ------------------------------------------------------------------

    def match(self, node: Node) -> list[DirectiveDefinition]:
        """Directives that apply to a node, highest priority first."""
        names = [normalize_name(node.tag)] + [normalize_name(attr) for attr in node.attributes]
        matched = [self.directives[name] for name in dict.fromkeys(names) if name in self.directives]
        return sorted(matched, key=lambda d: d.priority, reverse=True)

    def _link(self, node: Node, scope: Scope, is_root: bool = False) -> Scope:
        """Link a subtree and return the scope the node's directives were linked against."""
        matched = self.match(node)
        isolating = [d.name for d in matched if d.isolate]
        if len(isolating) > 1:
            raise DirectiveConflictError(node.tag, isolating)

        owned: list[Scope] = []
        if isolating:
            directive_scope = scope.new(isolate=True)
            owned.append(directive_scope)
            node.data["isolate_scope"] = directive_scope
            node.data["scope"] = scope
            children_scope = scope
        elif matched or is_root:
            directive_scope = scope.new()
            owned.append(directive_scope)
            node.data["scope"] = directive_scope
            children_scope = directive_scope
        else:
            directive_scope = children_scope = scope
            node.data["scope"] = scope
        node.data["owned_scopes"] = owned
        node.data["directives"] = [d.name for d in matched]

        for child in node.children:
            self._link(child, children_scope)

        attrs = dict(node.attributes)
        for directive in matched:
            for field_name, attribute in directive.bindings.items():
                setattr(directive_scope, field_name, attrs.get(attribute))
            if directive.link is not None:
                directive.link(directive_scope, node, attrs)
        return directive_scope

    def __repr__(self) -> str:
        return f"Compiler({len(self.directives)} directives, {self.document!r})"


def describe_view(view: MountedView) -> dict[str, Any]:
    """Summarize a mounted view for logs and reports."""
    return {
        "markup": view.node.to_markup(),
        "attached": view.node.is_attached,
        "directives": view.node.data.get("directives", []),
        "fields": sorted(view.isolated_state.own_fields()),
    }
