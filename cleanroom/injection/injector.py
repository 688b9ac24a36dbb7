"""
Injector - resolves capabilities into live instances.

An injector is built from a list of modules. Instances are created lazily, in
dependency order, and cached for the injector's lifetime, so resolving the
same name twice returns the same object. A fresh injector is used per test
case; nothing is cached across injectors.

Built-in capabilities:
- document: the Document views are mounted into (usually passed in via
  ``values`` so every case shares one)
- root_scope: the root of this injector's scope tree
- compiler: a Compiler wired with every registered directive
"""

import logging
from collections.abc import Container, Iterable, Mapping
from typing import Any

from cleanroom.injection.capabilities import (
    CapabilityDefinition,
    CapabilityKind,
    CapabilityNotFoundError,
    CyclicDependencyError,
)
from cleanroom.injection.module import DIRECTIVE_SUFFIX, AppModule, Provider
from cleanroom.view.compiler import Compiler, DirectiveDefinition
from cleanroom.view.document import Document
from cleanroom.view.scope import Scope

logger = logging.getLogger(__name__)

BUILTIN_DOCUMENT = "document"
BUILTIN_ROOT_SCOPE = "root_scope"
BUILTIN_COMPILER = "compiler"


class Injector:
    """
    Collaborator registry backed by application modules.

    Example:
        >>> injector = Injector([app])
        >>> services = injector.resolve({"heavy_load", "compiler"})
        >>> services["heavy_load"] is injector.get("heavy_load")
        True
    """

    def __init__(
        self,
        modules: Iterable[AppModule] = (),
        values: Mapping[str, Any] | None = None,
    ) -> None:
        """
        Initialize the injector.

        Args:
            modules: Modules to load; each module's requirements load first.
            values: Extra ready-made capabilities. They override module
                providers of the same name.
        """
        self._providers: dict[str, Provider] = {}
        self._instances: dict[str, Any] = {}

        self._add_builtins()
        for module in _load_order(modules):
            for provider in module.providers():
                self._add(provider)
        for name, obj in (values or {}).items():
            definition = CapabilityDefinition(name=name, kind=CapabilityKind.VALUE)
            self._add(Provider(definition=definition, value=obj))

    def _add_builtins(self) -> None:
        self._add(
            Provider(
                definition=CapabilityDefinition(
                    name=BUILTIN_DOCUMENT, description="Document views attach to"
                ),
                factory=Document,
            )
        )
        self._add(
            Provider(
                definition=CapabilityDefinition(
                    name=BUILTIN_ROOT_SCOPE, description="Root of the scope tree"
                ),
                factory=Scope,
            )
        )
        # The compiler's directive dependencies are only known after loading,
        # so it is built by _build_compiler rather than a declared factory
        self._add(
            Provider(
                definition=CapabilityDefinition(
                    name=BUILTIN_COMPILER,
                    description="Template compiler",
                    dependencies=[BUILTIN_DOCUMENT],
                ),
            )
        )

    def _add(self, provider: Provider) -> None:
        self._providers[provider.name] = provider

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------

    def has(self, name: str) -> bool:
        return name in self._providers

    def get(self, name: str) -> Any:
        """Return the instance for one capability, building it if needed.

        Raises:
            CapabilityNotFoundError: If the capability or a dependency is missing.
            CyclicDependencyError: If the capability depends on itself.
        """
        if name in self._instances:
            return self._instances[name]

        for step in self._build_order(name, skip=self._instances.keys()):
            self._instances[step] = self._instantiate(step)
        return self._instances[name]

    def resolve(self, names: Iterable[str]) -> dict[str, Any]:
        """Resolve several capabilities at once.

        Returns:
            Mapping of each requested name to its instance.
        """
        return {name: self.get(name) for name in sorted(set(names))}

    def directive_names(self) -> list[str]:
        """Capability names of every registered directive."""
        return [
            name
            for name, provider in self._providers.items()
            if provider.definition.kind == CapabilityKind.DIRECTIVE
        ]

    def validate(self) -> list[str]:
        """Report missing dependencies and cycles without building anything.

        Every missing dependency is listed. Cycles are only looked for once
        nothing is missing, and each is reported once.
        """
        problems = [
            CapabilityNotFoundError(dependency, required_by=name).args[0]
            for name, provider in self._providers.items()
            for dependency in provider.definition.dependencies
            if dependency not in self._providers
        ]
        if problems:
            return problems

        seen_cycles: set[frozenset[str]] = set()
        for name in self._providers:
            try:
                self._build_order(name)
            except CyclicDependencyError as e:
                members = frozenset(e.cycle)
                if members not in seen_cycles:
                    seen_cycles.add(members)
                    problems.append(str(e))
        return problems

    def _build_order(self, name: str, skip: Container[str] = ()) -> list[str]:
        """Capabilities to instantiate for ``name``, dependencies first.

        Names in ``skip`` are already built; they and their dependencies are
        left out.

        Raises:
            CapabilityNotFoundError: Naming the dependent that asked for it.
            CyclicDependencyError: With the loop from its first repeated name.
        """
        order: list[str] = []
        placed: set[str] = set()
        chain: list[str] = []

        def place(current: str, needed_by: str | None) -> None:
            if current in placed or current in skip:
                return
            if current in chain:
                raise CyclicDependencyError(chain[chain.index(current) :] + [current])
            provider = self._providers.get(current)
            if provider is None:
                raise CapabilityNotFoundError(current, required_by=needed_by)
            chain.append(current)
            for dependency in provider.definition.dependencies:
                place(dependency, current)
            chain.pop()
            placed.add(current)
            order.append(current)

        place(name, None)
        return order

    def _instantiate(self, name: str) -> Any:
        provider = self._providers[name]
        definition = provider.definition

        if name == BUILTIN_COMPILER and provider.factory is None:
            return self._build_compiler()
        if definition.kind == CapabilityKind.VALUE:
            return provider.value
        if provider.factory is None:
            raise CapabilityNotFoundError(name)

        kwargs = {dep: self._instances[dep] for dep in definition.dependencies}
        instance = provider.factory(**kwargs)
        logger.debug("Instantiated %s '%s'", definition.kind.value, name)

        if definition.kind == CapabilityKind.DIRECTIVE and not isinstance(
            instance, DirectiveDefinition
        ):
            msg = (
                f"Directive factory '{name}' returned {type(instance).__name__}, "
                "expected DirectiveDefinition"
            )
            raise TypeError(msg)
        return instance

    def _build_compiler(self) -> Compiler:
        directives: dict[str, DirectiveDefinition] = {}
        for capability in self.directive_names():
            definition = self.get(capability)
            directives[capability[: -len(DIRECTIVE_SUFFIX)]] = definition
        return Compiler(self._instances[BUILTIN_DOCUMENT], directives)

    def __contains__(self, name: str) -> bool:
        return self.has(name)

    def __repr__(self) -> str:
        return f"Injector({len(self._providers)} capabilities, {len(self._instances)} instantiated)"


def _load_order(modules: Iterable[AppModule]) -> list[AppModule]:
    order: list[AppModule] = []
    seen: set[int] = set()
    for module in modules:
        for loaded in module.load_order():
            if id(loaded) not in seen:
                seen.add(id(loaded))
                order.append(loaded)
    return order
