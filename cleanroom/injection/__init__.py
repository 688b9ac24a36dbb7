"""
Cleanroom Injection.

Modules, capability definitions and the injector that resolves collaborators.
"""

from cleanroom.injection.capabilities import (
    CapabilityDefinition,
    CapabilityKind,
    CapabilityNotFoundError,
    CyclicDependencyError,
    DuplicateCapabilityError,
)
from cleanroom.injection.injector import (
    BUILTIN_COMPILER,
    BUILTIN_DOCUMENT,
    BUILTIN_ROOT_SCOPE,
    Injector,
)
from cleanroom.injection.module import AppModule, Provider, directive_capability

__all__ = [
    # Modules
    "AppModule",
    "Provider",
    "directive_capability",
    # Capabilities
    "CapabilityDefinition",
    "CapabilityKind",
    # Injector
    "BUILTIN_COMPILER",
    "BUILTIN_DOCUMENT",
    "BUILTIN_ROOT_SCOPE",
    "Injector",
    # Errors
    "CapabilityNotFoundError",
    "CyclicDependencyError",
    "DuplicateCapabilityError",
]
