"""
Reactive scope tree.

Scopes hold view state. A child scope reads through to its parent unless it
is isolated; writes always land on the scope itself. Watchers registered
with ``watch`` are dirty-checked by ``digest`` until no value changes.
"""

from collections.abc import Callable, Iterator
from typing import Any

# Maximum number of dirty-checking passes before a digest gives up
DIGEST_TTL = 10

_UNSET = object()


class DigestLimitError(RuntimeError):
    """Raised when watchers keep changing values after DIGEST_TTL passes."""

    def __init__(self, passes: int, last_dirty: list[str]) -> None:
        self.passes = passes
        self.last_dirty = last_dirty
        super().__init__(
            f"{passes} digest iterations reached without settling; "
            f"last dirty watchers: {', '.join(last_dirty) or 'none'}"
        )


class _Watcher:
    __slots__ = ("getter", "listener", "last", "label")

    def __init__(self, getter: Callable[["Scope"], Any], listener: Callable, label: str) -> None:
        self.getter = getter
        self.listener = listener
        self.last: Any = _UNSET
        self.label = label


class Scope:
    """A node in the scope tree.

    Attribute access is the state API: ``scope.title = "x"`` writes to this
    scope, ``scope.title`` reads it (falling back to ancestors for
    non-isolated scopes) and raises AttributeError when nothing defines it.

    Example:
        >>> root = Scope()
        >>> root.user = "ada"
        >>> root.new().user
        'ada'
        >>> hasattr(root.new(isolate=True), "user")
        False
    """

    _INTERNAL = frozenset({"_parent", "_children", "_isolate", "_state", "_watchers", "_destroyed"})

    def __init__(self, parent: "Scope | None" = None, isolate: bool = False) -> None:
        object.__setattr__(self, "_parent", parent)
        object.__setattr__(self, "_children", [])
        object.__setattr__(self, "_isolate", isolate)
        object.__setattr__(self, "_state", {})
        object.__setattr__(self, "_watchers", [])
        object.__setattr__(self, "_destroyed", False)

    # ------------------------------------------------------------------
    # State access
    # ------------------------------------------------------------------

    def __getattr__(self, name: str) -> Any:
        # Only called when normal lookup fails, so methods are never shadowed
        if name.startswith("__"):
            raise AttributeError(name)
        scope: Scope | None = self
        while scope is not None:
            state = object.__getattribute__(scope, "_state")
            if name in state:
                return state[name]
            if object.__getattribute__(scope, "_isolate"):
                break
            scope = object.__getattribute__(scope, "_parent")
        raise AttributeError(f"Scope has no field '{name}'")

    def __setattr__(self, name: str, value: Any) -> None:
        if name in self._INTERNAL or hasattr(type(self), name):
            raise AttributeError(f"'{name}' is reserved on Scope")
        self._state[name] = value

    def __delattr__(self, name: str) -> None:
        try:
            del self._state[name]
        except KeyError:
            raise AttributeError(name) from None

    def own_fields(self) -> dict[str, Any]:
        """Fields written directly on this scope (no inherited ones)."""
        return dict(self._state)

    # ------------------------------------------------------------------
    # Tree
    # ------------------------------------------------------------------

    @property
    def parent(self) -> "Scope | None":
        return self._parent

    @property
    def children(self) -> list["Scope"]:
        return list(self._children)

    @property
    def isolate(self) -> bool:
        return self._isolate

    @property
    def is_destroyed(self) -> bool:
        return self._destroyed

    @property
    def root(self) -> "Scope":
        scope = self
        while scope._parent is not None:
            scope = scope._parent
        return scope

    def new(self, isolate: bool = False) -> "Scope":
        """Create a child scope."""
        if self._destroyed:
            raise RuntimeError("Cannot create a child of a destroyed scope")
        child = Scope(parent=self, isolate=isolate)
        self._children.append(child)
        return child

    def walk(self) -> Iterator["Scope"]:
        """Iterate over this scope and all descendants."""
        yield self
        for child in list(self._children):
            yield from child.walk()

    def destroy(self) -> None:
        """Unlink this scope (and its subtree) from the tree. Idempotent."""
        if self._destroyed:
            return
        for child in list(self._children):
            child.destroy()
        if self._parent is not None and self in self._parent._children:
            self._parent._children.remove(self)
        self._watchers.clear()
        self._state.clear()
        object.__setattr__(self, "_destroyed", True)

    # ------------------------------------------------------------------
    # Reactivity
    # ------------------------------------------------------------------

    def watch(
        self,
        getter: Callable[["Scope"], Any],
        listener: Callable[[Any, Any, "Scope"], None],
        label: str = "",
    ) -> Callable[[], None]:
        """Register a watcher and return a function that removes it.

        ``listener(new, old, scope)`` runs on the first digest and whenever
        ``getter(scope)`` returns a value that compares unequal to the last one.
        """
        watcher = _Watcher(getter, listener, label or getattr(getter, "__name__", "watcher"))
        self._watchers.append(watcher)

        def deregister() -> None:
            if watcher in self._watchers:
                self._watchers.remove(watcher)

        return deregister

    def digest(self) -> int:
        """Dirty-check every watcher in this subtree until stable.

        Returns:
            The number of passes it took.

        Raises:
            DigestLimitError: After DIGEST_TTL passes that still changed values.
        """
        passes = 0
        while True:
            passes += 1
            dirty: list[str] = []
            for scope in self.walk():
                for watcher in list(scope._watchers):
                    value = watcher.getter(scope)
                    if watcher.last is _UNSET or value != watcher.last:
                        old = value if watcher.last is _UNSET else watcher.last
                        watcher.last = value
                        watcher.listener(value, old, scope)
                        dirty.append(watcher.label)
            if not dirty:
                return passes
            if passes >= DIGEST_TTL:
                raise DigestLimitError(passes, dirty)

    def __repr__(self) -> str:
        kind = "isolate " if self._isolate else ""
        state = ", destroyed" if self._destroyed else ""
        return f"Scope({kind}{len(self._state)} fields, {len(self._children)} children{state})"
