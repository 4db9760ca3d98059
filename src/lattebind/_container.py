from __future__ import annotations

import inspect
import logging
import threading
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, TypeVar, overload

from ._errors import (
    DuplicateNameError,
    InstanceCreationError,
    MethodResolutionError,
    UnregisteredNameError,
    UnresolvableArgumentError,
    UnsupportedTypeError,
)
from ._reflection import describe, import_string


logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

    from ._reflection import Parameter, Signature

    T = TypeVar("T")

    Token = type[T] | str
    Producer = type | Callable[..., Any] | str


class Kind(Enum):
    FACTORY = "factory"
    SINGLETON = "singleton"
    INSTANCE = "instance"


@dataclass(frozen=True)
class Entry:
    kind: Kind
    producer: Any  # the realized value for INSTANCE entries


class Container:
    """Dependency injection container.

    - register factories, singletons or pre-built instances under a name
    - resolve with constructor/function injection driven by type hints
    - strict mode: only registered names resolve
    - lenient mode: unregistered top-level classes, callables and dotted
      import paths are built directly.

    Every registration method returns the container so calls can be chained.
    """

    def __init__(self, *, strict: bool = True) -> None:
        self._entries: dict[Any, Entry] = {}
        self._aliases: dict[str, Any] = {}
        self._strict = strict
        self._lock = threading.RLock()

    @property
    def strict(self) -> bool:
        return self._strict

    def set_strict_mode(self) -> Container:
        self._strict = True
        return self

    def set_lenient_mode(self) -> Container:
        self._strict = False
        return self

    def register_factory(self, name: Token[T], producer: Producer) -> Container:
        """Register a producer called afresh on every resolution.

        Example:
          container.register_factory(Repo, SqlRepo)
          container.register_factory("clock", lambda: datetime.now(UTC))

        """
        return self._add(name, Entry(Kind.FACTORY, _check_producer(producer)))

    def register_singleton(self, name: Token[T], producer: Producer) -> Container:
        """Register a producer called at most once; its result is cached."""
        return self._add(name, Entry(Kind.SINGLETON, _check_producer(producer)))

    def register_instance(self, name: Token[T], instance: object) -> Container:
        """Register a pre-built value, returned verbatim on every resolution."""
        return self._add(name, Entry(Kind.INSTANCE, _check_instance(instance)))

    def register_or_overwrite_factory(self, name: Token[T], producer: Producer) -> Container:
        return self._put(name, Entry(Kind.FACTORY, _check_producer(producer)))

    def register_or_overwrite_singleton(self, name: Token[T], producer: Producer) -> Container:
        return self._put(name, Entry(Kind.SINGLETON, _check_producer(producer)))

    def register_or_overwrite_instance(self, name: Token[T], instance: object) -> Container:
        return self._put(name, Entry(Kind.INSTANCE, _check_instance(instance)))

    def register_if_absent_factory(self, name: Token[T], producer: Producer) -> Container:
        return self._put_if_absent(name, Entry(Kind.FACTORY, _check_producer(producer)))

    def register_if_absent_singleton(self, name: Token[T], producer: Producer) -> Container:
        return self._put_if_absent(name, Entry(Kind.SINGLETON, _check_producer(producer)))

    def register_if_absent_instance(self, name: Token[T], instance: object) -> Container:
        return self._put_if_absent(name, Entry(Kind.INSTANCE, _check_instance(instance)))

    def unregister(self, name: Token[T]) -> Container:
        with self._lock:
            if self._entries.pop(name, None) is not None:
                logger.debug("Unregistered %s", _display(name))
        return self

    def alias(self, alias: str, name: Token[T]) -> Container:
        """Make `alias` resolve to whatever is registered under `name`."""
        with self._lock:
            if alias in self._aliases or alias in self._entries:
                msg = f"Alias {alias!r} is already taken."
                raise DuplicateNameError(msg, name=alias)
            self._aliases[alias] = name
        logger.debug("Aliased %r to %s", alias, _display(name))
        return self

    @property
    def aliases(self) -> Mapping[str, Any]:
        """Read-only view of alias -> canonical name."""
        return MappingProxyType(self._aliases)

    def has(self, name: Token[T]) -> bool:
        return self._lookup(name) is not None

    def __contains__(self, name: object) -> bool:
        return self.has(name)  # type: ignore[arg-type]

    def get(self, name: Token[T]) -> tuple[Kind | None, Any]:
        """Return `(kind, producer_or_value)` for `name`, or `(None, None)`."""
        found = self._lookup(name)
        if found is None:
            return None, None
        _, entry = found
        return entry.kind, entry.producer

    @overload
    def resolve(self, name: type[T], /, **named_args: Any) -> T: ...

    @overload
    def resolve(self, name: str, /, **named_args: Any) -> Any: ...

    def resolve(self, name: Token[T], /, **named_args: Any) -> Any:
        """Resolve `name` to a value.

        - INSTANCE entries: the cached value.
        - FACTORY entries: a new value on every call.
        - SINGLETON entries: built once, then cached as an instance.
        - unregistered names: an error in strict mode; built directly in lenient mode.

        `named_args` supplies parameters by name, which is the only way to fill
        untyped or builtin-typed parameters without defaults.
        """
        return self._create_or_call(name, named_args, strict=self._strict)

    def resolve_with_args(self, name: Token[T], named_args: Mapping[str, Any]) -> Any:
        return self._create_or_call(name, dict(named_args), strict=self._strict)

    def invoke_method(
        self,
        target: Token[T] | object,
        method: str,
        method_args: Mapping[str, Any] | None = None,
        constructor_args: Mapping[str, Any] | None = None,
    ) -> Any:
        """Call `method` on `target`, injecting the method's parameters.

        A name (class or string) is resolved first, with `constructor_args`;
        any other object is used as the instance as-is.
        """
        if isinstance(target, (str, type)):
            instance = self.resolve_with_args(target, constructor_args or {})
        else:
            instance = target

        bound = getattr(instance, method, None)
        if bound is None or not callable(bound):
            msg = f"Failed to resolve method {method!r} on {type(instance).__name__}."
            raise MethodResolutionError(msg, method=method)

        with self._lock:
            args, kwargs = self._resolve_arguments(describe(bound), method_args or {})
        return bound(*args, **kwargs)

    def call(self, func: Callable[..., T], /, **named_args: Any) -> T:
        """Call an unregistered callable with injected parameters; the result is returned as-is."""
        with self._lock:
            args, kwargs = self._resolve_arguments(describe(func), named_args)
        return func(*args, **kwargs)

    def _create_or_call(self, name: Any, named_args: dict[str, Any], *, strict: bool) -> Any:
        with self._lock:
            found = self._lookup(name)
            if found is None:
                key, entry = name, None
                producer = self._unregistered_producer(name, strict=strict)
            else:
                key, entry = found
                producer = entry.producer

            if entry is not None and entry.kind is Kind.INSTANCE:
                if named_args:
                    # nothing is rebuilt, the arguments are only checked
                    target = producer if callable(producer) and not inspect.isclass(producer) else type(producer)
                    self._resolve_arguments(describe(target), named_args)
                return producer

            if isinstance(producer, str):
                producer = self._import_producer(key, producer)

            args, kwargs = self._resolve_arguments(describe(producer), named_args)
            instance = producer(*args, **kwargs)

            if instance is None:
                msg = (
                    f"Failed to create the target or dependent instance {_display(key)}: "
                    f"{_display(producer)} returned None."
                )
                raise InstanceCreationError(msg, name=key)

            if entry is not None and entry.kind is Kind.SINGLETON:
                self._entries[key] = Entry(Kind.INSTANCE, instance)
                logger.debug("Promoted singleton %s to instance", _display(key))

            return instance

    def _unregistered_producer(self, name: Any, *, strict: bool) -> Any:
        if strict:
            msg = (
                f"{_display(name)} is not registered. In strict resolution mode only registered names "
                "can be resolved; call set_lenient_mode() to build unregistered classes directly."
            )
            raise UnregisteredNameError(msg, name=name)

        if isinstance(name, str):
            try:
                producer = import_string(name)
            except ImportError as exc:
                msg = f"{name!r} is not registered and could not be imported: {exc}"
                raise UnregisteredNameError(msg, name=name) from exc
        else:
            producer = name

        if not callable(producer):
            msg = f"{_display(name)} is not registered and is neither a class nor a callable."
            raise UnregisteredNameError(msg, name=name)

        logger.debug("Resolving unregistered %s directly (lenient mode)", _display(name))
        return producer

    def _import_producer(self, key: Any, path: str) -> Any:
        try:
            return import_string(path)
        except ImportError as exc:
            msg = f"Cannot import producer {path!r} registered for {_display(key)}: {exc}"
            raise InstanceCreationError(msg, name=key) from exc

    def _resolve_arguments(
        self, signature: Signature, named_args: Mapping[str, Any]
    ) -> tuple[list[Any], dict[str, Any]]:
        args: list[Any] = []
        kwargs: dict[str, Any] = {}

        for param in signature.parameters:
            # *args / **kwargs are never injected
            if param.is_variadic:
                continue

            value = self._resolve_parameter(signature, param, named_args)
            if param.is_keyword_only:
                kwargs[param.name] = value
            else:
                args.append(value)

        return args, kwargs

    def _resolve_parameter(self, signature: Signature, param: Parameter, named_args: Mapping[str, Any]) -> Any:
        """Resolve one parameter.

        Resolution precedence:
        1. explicit named argument
        2. untyped: default, else error
        3. builtin type: default, else error
        4. reference type: registered dependency (strict, recursive)
        5. default
        6. error.
        """
        if param.name in named_args:
            return named_args[param.name]

        owner = _display(signature.target)

        if not param.has_annotation:
            if param.has_default:
                return param.default
            msg = (
                f"Cannot resolve untyped parameter {param.name!r} of {owner}. "
                f"Pass a value for it by name (e.g. resolve(..., {param.name}=...))."
            )
            raise UnresolvableArgumentError(msg, parameter=param.name, target=signature.target)

        if param.is_builtin:
            if param.has_default:
                return param.default
            ann = getattr(param.annotation, "__name__", repr(param.annotation))
            msg = (
                f"Cannot auto-wire parameter {param.name!r} of {owner}: {ann} is a builtin type. "
                "Pass a value for it by name."
            )
            raise UnsupportedTypeError(msg, parameter=param.name, annotation=param.annotation)

        dependency = param.dependency
        if self._lookup(dependency) is None:
            if param.has_default:
                return param.default
            msg = (
                f"Dependency {_display(dependency)} required by parameter {param.name!r} of {owner} is not registered; "
                "register it with register_factory(), register_singleton() or register_instance()."
            )
            raise UnregisteredNameError(msg, name=dependency, dependent=signature.target)

        return self._create_or_call(dependency, {}, strict=True)

    def _lookup(self, name: Any) -> tuple[Any, Entry] | None:
        with self._lock:
            entry = self._entries.get(name)
            if entry is not None:
                return name, entry

            if isinstance(name, str) and name in self._aliases:
                canonical = self._aliases[name]
                entry = self._entries.get(canonical)
                if entry is not None:
                    return canonical, entry

            return None

    def _add(self, name: Any, entry: Entry) -> Container:
        with self._lock:
            existing = self._entries.get(name)
            if existing is not None:
                msg = (
                    f"{_display(name)} is already registered as {existing.kind.value}. "
                    "Use a register_or_overwrite_* method to replace it."
                )
                raise DuplicateNameError(msg, name=name)
            self._entries[name] = entry

        logger.debug("Registered %s %s", entry.kind.value, _display(name))
        return self

    def _put(self, name: Any, entry: Entry) -> Container:
        with self._lock:
            previous = self._entries.get(name)
            self._entries[name] = entry

        if previous is not None:
            logger.debug("Overwrote %s %s with %s", previous.kind.value, _display(name), entry.kind.value)
        else:
            logger.debug("Registered %s %s", entry.kind.value, _display(name))
        return self

    def _put_if_absent(self, name: Any, entry: Entry) -> Container:
        with self._lock:
            if name in self._entries:
                return self
            self._entries[name] = entry

        logger.debug("Registered %s %s", entry.kind.value, _display(name))
        return self


def _check_producer(producer: Any) -> Any:
    if isinstance(producer, str) or callable(producer):
        return producer

    msg = f"Producer must be a class, a callable or a dotted import path, got {type(producer).__name__}"
    raise TypeError(msg)


def _check_instance(instance: Any) -> Any:
    if instance is None:
        msg = "Instance must not be None"
        raise TypeError(msg)
    return instance


def _display(obj: Any) -> str:
    if isinstance(obj, str):
        return repr(obj)
    return getattr(obj, "__qualname__", None) or repr(obj)
