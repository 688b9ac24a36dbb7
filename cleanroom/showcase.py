"""
Heavy-load showcase.

A data provider with deliberately large results, a ``heavy-load`` directive
that copies some of them onto its isolate scope, and the suite definition
that tests the directive through the fixture lifecycle.
"""

from collections.abc import Callable
from typing import Any

from cleanroom.injection import AppModule
from cleanroom.testing import FixtureContext, FixtureLifecycle, FixtureSuite
from cleanroom.view import DirectiveDefinition, Node, Scope

HEAVY_TEMPLATE = "<div heavy-load></div>"
HEAVY_METHODS = ("get_heavy_string", "get_heavy_object", "get_heavy_list")
HEAVY_SIZE = 1000


class HeavyLoad:
    """Data provider whose results are expensive to keep around."""

    def __init__(self, size: int = HEAVY_SIZE) -> None:
        self.size = size

    def get_heavy_string(self) -> str:
        return "heavy " * self.size

    def get_heavy_object(self) -> dict[str, Any]:
        return {f"key{i}": {"index": i, "payload": "x" * 32} for i in range(self.size)}

    def get_heavy_list(self) -> list[dict[str, Any]]:
        return [{"id": i, "label": f"item {i}"} for i in range(self.size)]


def heavy_load_directive(heavy_load: HeavyLoad) -> DirectiveDefinition:
    """Directive that exposes provider data on its isolate scope."""

    def link(scope: Scope, node: Node, attrs: dict[str, str]) -> None:
        scope.title = heavy_load.get_heavy_string()
        scope.items = heavy_load.get_heavy_list()
        scope.details = heavy_load.get_heavy_object
        scope.watch(lambda s: len(s.items), _count_items, label="items")

    return DirectiveDefinition(name="heavy_load", link=link, isolate=True)


def _count_items(new: int, old: int, scope: Scope) -> None:
    scope.item_count = new


def create_app() -> AppModule:
    """The ``app`` module with the provider and directive registered."""
    app = AppModule("app")
    app.service("heavy_load", HeavyLoad, description="Expensive data provider")
    app.directive("heavy_load", heavy_load_directive, dependencies=["heavy_load"])
    return app


def create_lifecycle(**kwargs: Any) -> FixtureLifecycle:
    """A lifecycle that resolves ``heavy_load`` and spies on all its getters."""
    return FixtureLifecycle(
        modules=[create_app()],
        capabilities=["heavy_load"],
        observe={"heavy_load": HEAVY_METHODS},
        **kwargs,
    )


def compile_case(template: str = HEAVY_TEMPLATE) -> Callable[[FixtureContext], None]:
    """Case body: mounting the directive fills its state through the spies."""

    def should_compile_correctly(ctx: FixtureContext) -> None:
        ctx.mount(template)

        assert hasattr(ctx.isolated_state, "title")
        assert hasattr(ctx.isolated_state, "items")
        assert ctx.spy("heavy_load", "get_heavy_string").was_invoked()
        assert ctx.spy("heavy_load", "get_heavy_list").was_invoked()

    return should_compile_correctly


def missing_field_case(template: str = HEAVY_TEMPLATE) -> Callable[[FixtureContext], None]:
    """Flipped case body: fails because the directive never sets ``subtitle``."""

    def should_compile_correctly(ctx: FixtureContext) -> None:
        ctx.mount(template)

        assert hasattr(ctx.isolated_state, "subtitle"), "isolated state has no 'subtitle'"

    return should_compile_correctly


def heavy_load_suite(
    lifecycle: FixtureLifecycle,
    failing: bool = False,
    template: str = HEAVY_TEMPLATE,
) -> FixtureSuite:
    """Suite definition for the heavy-load directive.

    Args:
        lifecycle: Lifecycle every case of the suite runs through.
        failing: Replace the assertion with one that cannot hold.
        template: Markup the case mounts.
    """
    body = missing_field_case(template) if failing else compile_case(template)
    return FixtureSuite(
        name="heavyLoad directive",
        lifecycle=lifecycle,
        cases=(("should compile correctly", body),),
    )
