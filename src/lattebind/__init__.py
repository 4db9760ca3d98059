"""Type-hint driven dependency injection container.

This package provides a registry that maps names (classes or strings) to
factories, singletons and pre-built instances, and resolves object graphs by
inspecting the type hints of constructors, functions and methods.

Exports:
- `Container`: the registry and resolution engine, with strict/lenient modes
  and fail/overwrite/if-absent registration policies.
- `Kind`: the kind of a registry entry (factory, pending singleton, instance).
- `describe`: parameter introspection used by the container.
- The error hierarchy rooted at `ContainerError`.
"""

from ._container import Container, Entry, Kind
from ._errors import (
    ContainerError,
    DuplicateNameError,
    InstanceCreationError,
    MethodResolutionError,
    RegistrationError,
    ResolutionError,
    UnregisteredNameError,
    UnresolvableArgumentError,
    UnsupportedTypeError,
)
from ._reflection import Parameter, Signature, describe


__all__ = [
    "Container",
    "ContainerError",
    "DuplicateNameError",
    "Entry",
    "InstanceCreationError",
    "Kind",
    "MethodResolutionError",
    "Parameter",
    "RegistrationError",
    "ResolutionError",
    "Signature",
    "UnregisteredNameError",
    "UnresolvableArgumentError",
    "UnsupportedTypeError",
    "describe",
]
