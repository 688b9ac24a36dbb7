"""
Capability definitions and the errors raised while resolving them.

A capability is anything an injector can hand to a test case: a service
built from a factory, a ready-made value, or a directive for the compiler.
Its definition only names what it needs; providers and ordering live in the
injector.
"""

from enum import Enum

from pydantic import BaseModel, Field, field_validator


class CapabilityKind(str, Enum):
    """How a capability is produced.

    - SERVICE: built by calling a factory with its dependencies
    - VALUE: a pre-built object handed to the injector as-is
    - DIRECTIVE: a factory returning a DirectiveDefinition for the compiler
    """

    SERVICE = "service"
    VALUE = "value"
    DIRECTIVE = "directive"


class CapabilityDefinition(BaseModel):
    """Name, kind and dependency names of one capability.

    Example:
        >>> CapabilityDefinition(name="heavy_load_directive", kind="directive",
        ...                      dependencies=["heavy_load"])
    """

    model_config = {"frozen": True, "extra": "forbid"}

    name: str = Field(..., min_length=1, description="Name the injector resolves")
    kind: CapabilityKind = Field(default=CapabilityKind.SERVICE)
    description: str = Field(default="")
    dependencies: tuple[str, ...] = Field(
        default=(), description="Capabilities passed to the factory as keyword arguments"
    )

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Capability name must not be blank")
        return v

    @field_validator("dependencies")
    @classmethod
    def dependencies_are_keywords(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        """Dependencies become factory keyword arguments, so they must be identifiers."""
        bad = [dep for dep in v if not dep.isidentifier()]
        if bad:
            raise ValueError(f"Dependency names must be identifiers: {bad}")
        if len(set(v)) != len(v):
            raise ValueError("Dependency names must not repeat")
        return v


class DuplicateCapabilityError(ValueError):
    """A module registered the same capability name twice."""

    def __init__(self, name: str, module: str | None = None) -> None:
        self.name = name
        self.module = module
        where = f" in module '{module}'" if module else ""
        super().__init__(f"Capability '{name}' is registered twice{where}")


class CapabilityNotFoundError(KeyError):
    """No provider exists for a requested capability."""

    def __init__(self, name: str, required_by: str | None = None) -> None:
        self.name = name
        self.required_by = required_by
        message = f"No provider for capability '{name}'"
        if required_by is not None:
            message += f", needed by '{required_by}'"
        super().__init__(message)


class CyclicDependencyError(ValueError):
    """Capabilities depend on each other in a loop.

    ``cycle`` starts and ends with the same name: ``["a", "b", "a"]``.
    """

    def __init__(self, cycle: list[str]) -> None:
        self.cycle = cycle
        super().__init__(f"Dependency cycle: {' -> '.join(cycle)}")
