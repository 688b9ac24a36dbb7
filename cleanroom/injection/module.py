"""
Application modules: named bundles of capability providers.

A module registers services, values and directives. Modules may require
other modules; an injector loads required modules first, so a module can
override a capability defined by one it requires.
"""

from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass
from typing import Any

from cleanroom.injection.capabilities import (
    CapabilityDefinition,
    CapabilityKind,
    DuplicateCapabilityError,
)

# Directive capabilities are stored under "<name>_directive" so a directive
# and a service can share a name
DIRECTIVE_SUFFIX = "_directive"


@dataclass(frozen=True)
class Provider:
    """A capability definition plus the callable (or value) that produces it."""

    definition: CapabilityDefinition
    factory: Callable[..., Any] | None = None
    value: Any = None

    @property
    def name(self) -> str:
        return self.definition.name


class AppModule:
    """
    A named collection of capability providers.

    Example:
        >>> app = AppModule("app")
        >>> @app.service("heavy_load")
        ... def heavy_load():
        ...     return HeavyLoad()
        >>> app.has("heavy_load")
        True
    """

    def __init__(self, name: str, requires: Iterable["AppModule"] = ()) -> None:
        if not name.strip():
            raise ValueError("Module name must not be empty")
        self.name = name
        self.requires: tuple[AppModule, ...] = tuple(requires)
        self._providers: dict[str, Provider] = {}

    def service(
        self,
        name: str,
        factory: Callable[..., Any] | None = None,
        dependencies: Iterable[str] = (),
        description: str = "",
    ) -> Any:
        """Register a service built by ``factory(**dependencies)``.

        Usable directly or as a decorator when ``factory`` is omitted.
        """
        return self._register(CapabilityKind.SERVICE, name, factory, dependencies, description)

    def directive(
        self,
        name: str,
        factory: Callable[..., Any] | None = None,
        dependencies: Iterable[str] = (),
        description: str = "",
    ) -> Any:
        """Register a directive whose factory returns a DirectiveDefinition."""
        return self._register(
            CapabilityKind.DIRECTIVE,
            directive_capability(name),
            factory,
            dependencies,
            description,
        )

    def value(self, name: str, obj: Any, description: str = "") -> None:
        """Register a ready-made object."""
        definition = CapabilityDefinition(
            name=name, kind=CapabilityKind.VALUE, description=description
        )
        self._add(Provider(definition=definition, value=obj))

    def _register(
        self,
        kind: CapabilityKind,
        name: str,
        factory: Callable[..., Any] | None,
        dependencies: Iterable[str],
        description: str,
    ) -> Any:
        def add(func: Callable[..., Any]) -> Callable[..., Any]:
            definition = CapabilityDefinition(
                name=name,
                kind=kind,
                description=description or (func.__doc__ or "").strip().split("\n")[0],
                dependencies=list(dependencies),
            )
            self._add(Provider(definition=definition, factory=func))
            return func

        if factory is None:
            return add
        add(factory)
        return None

    def _add(self, provider: Provider) -> None:
        if provider.name in self._providers:
            raise DuplicateCapabilityError(provider.name, module=self.name)
        self._providers[provider.name] = provider

    def has(self, name: str) -> bool:
        return name in self._providers

    def providers(self) -> list[Provider]:
        return list(self._providers.values())

    def load_order(self) -> list["AppModule"]:
        """This module and everything it requires, dependencies first."""
        order: list[AppModule] = []
        seen: set[int] = set()

        def visit(module: AppModule) -> None:
            if id(module) in seen:
                return
            seen.add(id(module))
            for required in module.requires:
                visit(required)
            order.append(module)

        visit(self)
        return order

    def __iter__(self) -> Iterator[str]:
        return iter(self._providers)

    def __repr__(self) -> str:
        return f"AppModule({self.name!r}, {len(self._providers)} providers)"


def directive_capability(name: str) -> str:
    """Capability name under which a directive is registered."""
    return f"{name}{DIRECTIVE_SUFFIX}"
