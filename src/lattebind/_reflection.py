"""Parameter introspection for producers.

`describe()` turns a class or a callable into a `Signature`: the ordered
parameters the container has to satisfy before calling it. Annotations are
evaluated with `typing.get_type_hints` where possible; an annotation that
cannot be evaluated keeps its raw (usually string) form and is later used as
a registry name.
"""

from __future__ import annotations

import importlib
import inspect
import logging
import types
import typing
from dataclasses import dataclass
from typing import Any, TypeVar, Union, get_type_hints


logger = logging.getLogger(__name__)

EMPTY = inspect.Parameter.empty

_VARIADIC = (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD)


@dataclass(frozen=True)
class Parameter:
    name: str
    kind: inspect._ParameterKind
    annotation: Any = EMPTY
    default: Any = EMPTY

    @property
    def has_annotation(self) -> bool:
        return self.annotation is not EMPTY

    @property
    def has_default(self) -> bool:
        return self.default is not EMPTY

    @property
    def is_variadic(self) -> bool:
        return self.kind in _VARIADIC

    @property
    def is_keyword_only(self) -> bool:
        return self.kind is inspect.Parameter.KEYWORD_ONLY

    @property
    def dependency(self) -> Any:
        """Registry name for the annotation (`Optional[X]` and `X | None` become `X`)."""
        return unwrap_optional(self.annotation)

    @property
    def is_builtin(self) -> bool:
        return self.has_annotation and is_builtin(self.dependency)


@dataclass(frozen=True)
class Signature:
    target: Any
    is_class: bool
    parameters: tuple[Parameter, ...] = ()


def describe(producer: Any) -> Signature:
    """Describe the parameters the container must supply to call `producer`.

    Classes are described through their constructor; a class that does not
    define one (anywhere in its MRO) takes no parameters. Anything else must be
    callable and is described through its own signature.
    """
    if inspect.isclass(producer):
        return _describe_class(producer)

    if callable(producer):
        return _describe_callable(producer)

    msg = f"Cannot describe {producer!r}: expected a class or a callable"
    raise TypeError(msg)


def _describe_class(cls: type) -> Signature:
    if cls.__init__ is object.__init__ and cls.__new__ is object.__new__:
        return Signature(target=cls, is_class=True)

    try:
        sig = inspect.signature(cls)
    except (TypeError, ValueError):
        # builtin and extension types may not expose a signature
        logger.debug("No signature available for %s, assuming no parameters", cls.__qualname__)
        return Signature(target=cls, is_class=True)

    return Signature(target=cls, is_class=True, parameters=_parameters(sig, _get_init_type_hints(cls, sig)))


def _describe_callable(func: Any) -> Signature:
    try:
        sig = inspect.signature(func)
    except (TypeError, ValueError):
        logger.debug("No signature available for %r, assuming no parameters", func)
        return Signature(target=func, is_class=False)

    if inspect.isfunction(func) or inspect.ismethod(func):
        hints = _get_type_hints(func, sig)
    else:
        # callable objects: hints live on the class' __call__
        hints = _get_type_hints(getattr(type(func), "__call__", func), sig)

    return Signature(target=func, is_class=False, parameters=_parameters(sig, hints))


def _parameters(sig: inspect.Signature, hints: dict[str, Any]) -> tuple[Parameter, ...]:
    return tuple(
        Parameter(
            name=p.name,
            kind=p.kind,
            annotation=hints.get(p.name, p.annotation),
            default=p.default,
        )
        for p in sig.parameters.values()
    )


def _get_init_type_hints(cls: type, sig: inspect.Signature) -> dict[str, Any]:
    init = inspect.getattr_static(cls, "__init__")
    if init is object.__init__:
        init = inspect.getattr_static(cls, "__new__")
    return _get_type_hints(init, sig, owner=cls)


def _get_type_hints(obj: Any, sig: inspect.Signature, owner: Any = None) -> dict[str, Any]:
    try:
        hints = get_type_hints(obj)
    except TypeError:
        hints = {}
    except NameError as exc:
        where = owner if owner is not None else obj
        logger.warning(
            "'%s' name error retrieving %s type hints, evaluating annotations one by one",
            exc.name,
            getattr(where, "__qualname__", repr(where)),
        )
        hints = _evaluate_each(obj, sig)

    hints.pop("return", None)
    return hints


def _evaluate_each(obj: Any, sig: inspect.Signature) -> dict[str, Any]:
    """Evaluate string annotations separately; the ones that fail keep their raw string."""
    globalns = getattr(inspect.unwrap(obj), "__globals__", {})
    hints: dict[str, Any] = {}

    for p in sig.parameters.values():
        if not isinstance(p.annotation, str):
            continue
        try:
            hints[p.name] = eval(p.annotation, globalns)  # noqa: S307
        except NameError:
            logger.debug("Keeping unresolved annotation %r of parameter %r", p.annotation, p.name)

    return hints


def unwrap_optional(tp: Any) -> Any:
    origin = typing.get_origin(tp)
    if origin is Union or origin is types.UnionType:
        args = [a for a in typing.get_args(tp) if a is not type(None)]
        if len(args) == 1:
            return args[0]
    return tp


def is_builtin(tp: Any) -> bool:
    """Tell whether `tp` is outside what the container can auto-wire.

    Strings are forward references and therefore registry names. Classes are
    wireable unless they live in `builtins`. Every other typing construct
    (generic aliases such as `list[int]`, multi-member unions, `Any`, type
    variables) is treated like a builtin.
    """
    if isinstance(tp, str):
        return False

    if typing.get_origin(tp) is not None:
        return True

    # Any is a class on 3.11+
    if tp is Any or isinstance(tp, TypeVar):
        return True

    if inspect.isclass(tp):
        return getattr(tp, "__module__", "") == "builtins"

    return True


def import_string(path: str) -> Any:
    """Import an object from `package.module.Attr` or `package.module:Attr.nested`."""
    if ":" in path:
        module_path, _, attr_path = path.partition(":")
    else:
        module_path, _, attr_path = path.rpartition(".")

    if not module_path or not attr_path:
        msg = f"{path!r} is not a dotted import path"
        raise ImportError(msg)

    obj: Any = importlib.import_module(module_path)
    for attr in attr_path.split("."):
        try:
            obj = getattr(obj, attr)
        except AttributeError as exc:
            msg = f"{module_path!r} has no attribute {attr_path!r}"
            raise ImportError(msg) from exc

    return obj
