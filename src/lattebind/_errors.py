from __future__ import annotations

from typing import Any


class ContainerError(RuntimeError):
    """Base class for every error raised by the container."""


class RegistrationError(ContainerError):
    pass


class DuplicateNameError(RegistrationError):
    def __init__(self, msg: str, *, name: Any) -> None:
        super().__init__(msg)
        self.name = name


class ResolutionError(ContainerError):
    """A name, parameter or method could not be resolved."""


class UnregisteredNameError(ResolutionError):
    """No entry exists for a requested name.

    `dependent` is set when the missing name was a dependency of another
    producer rather than the top-level target.
    """

    def __init__(self, msg: str, *, name: Any, dependent: Any = None) -> None:
        super().__init__(msg)
        self.name = name
        self.dependent = dependent


class UnresolvableArgumentError(ResolutionError):
    def __init__(self, msg: str, *, parameter: str, target: Any) -> None:
        super().__init__(msg)
        self.parameter = parameter
        self.target = target


class UnsupportedTypeError(ResolutionError):
    def __init__(self, msg: str, *, parameter: str, annotation: Any) -> None:
        super().__init__(msg)
        self.parameter = parameter
        self.annotation = annotation


class MethodResolutionError(ResolutionError):
    def __init__(self, msg: str, *, method: str) -> None:
        super().__init__(msg)
        self.method = method


class InstanceCreationError(ResolutionError):
    def __init__(self, msg: str, *, name: Any) -> None:
        super().__init__(msg)
        self.name = name
