"""Invocation engine: call functions with arguments resolved by name.

Each parameter of the target function names a component. Arguments are
produced from explicit overrides, container components, declared defaults
or None (for parameters annotated as Optional), in that order.

Functions whose signature cannot be introspected (some builtins, C
extensions) can declare their parameter list explicitly:

    @parameters("db", Parameter("timeout", default=30))
    def connect(db, timeout): ...
"""

import inspect
import types
import typing
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional, Protocol, Sequence, Union

from .errors import InvalidArgumentError, UnsatisfiableArgumentError

EMPTY = inspect.Parameter.empty

_PARAMETERS_ATTR = "__larder_parameters__"
_SKIPPED_KINDS = (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD)


@dataclass(frozen=True)
class Parameter:
    """A named parameter of an invocable function.

    Attributes:
        name: Parameter name, matched against component names
        default: Declared default value (EMPTY if none)
        optional: True if the parameter accepts None when unresolvable
        keyword_only: Pass the argument by keyword instead of position
    """
    name: str
    default: Any = EMPTY
    optional: bool = False
    keyword_only: bool = False

    @property
    def has_default(self) -> bool:
        return self.default is not EMPTY


class ComponentSource(Protocol):
    """What the engine needs from a container."""

    def is_defined(self, name: str) -> bool: ...

    def is_realized(self, name: str) -> bool: ...

    def get(self, name: str) -> Any: ...


def parameters(*params: Union[str, Parameter]) -> Callable[[Callable], Callable]:
    """Attach an explicit parameter list to a function."""
    declared = tuple(p if isinstance(p, Parameter) else Parameter(name=p) for p in params)

    def decorator(fn: Callable) -> Callable:
        setattr(fn, _PARAMETERS_ATTR, declared)
        return fn

    return decorator


def parameters_of(fn: Callable) -> list[Parameter]:
    """Return the parameter list of a callable.

    Uses the list attached by ``parameters()`` if present, otherwise the
    function signature. Variadic ``*args``/``**kwargs`` are ignored.

    Raises:
        InvalidArgumentError: If the signature cannot be inspected.
    """
    declared = getattr(fn, _PARAMETERS_ATTR, None)
    if declared is not None:
        return list(declared)

    try:
        signature = inspect.signature(fn)
    except (TypeError, ValueError) as e:
        raise InvalidArgumentError(f"unable to inspect the parameters of {fn!r}: {e}") from e

    return [
        Parameter(
            name=param.name,
            default=param.default,
            optional=_admits_none(param.annotation),
            keyword_only=param.kind is inspect.Parameter.KEYWORD_ONLY,
        )
        for param in signature.parameters.values()
        if param.kind not in _SKIPPED_KINDS
    ]


def invoke(
    fn: Callable,
    source: ComponentSource,
    params: Optional[Mapping[str, Any]] = None,
    bound: Sequence[Any] = (),
) -> Any:
    """Invoke ``fn``, filling in its arguments from ``source``.

    Args:
        fn: The function, method or other callable to invoke
        source: Container supplying component values
        params: Explicit name -> value overrides; always win
        bound: Leading positional arguments that are already determined

    Returns:
        The return value of ``fn``.

    Raises:
        InvalidArgumentError: If ``fn`` is not callable
        UnsatisfiableArgumentError: If a required argument cannot be resolved
    """
    if not callable(fn):
        raise InvalidArgumentError(f"invalid argument: {fn!r} is not callable")

    params = params or {}
    args = list(bound)
    kwargs = {}

    for index, parameter in enumerate(parameters_of(fn)):
        if index < len(bound):
            continue
        value = resolve_argument(parameter, source, params)
        if parameter.keyword_only:
            kwargs[parameter.name] = value
        else:
            args.append(value)

    return fn(*args, **kwargs)


def resolve_argument(
    parameter: Parameter,
    source: ComponentSource,
    params: Mapping[str, Any],
) -> Any:
    """Produce the value for a single parameter."""
    name = parameter.name

    if name in params:
        return params[name]

    if source.is_defined(name):
        # skip initialization of an optional dependency
        if parameter.has_default and not source.is_realized(name):
            return parameter.default
        return source.get(name)

    if parameter.has_default:
        return parameter.default

    if parameter.optional:
        return None

    raise UnsatisfiableArgumentError(
        f"invocation failed: unable to satisfy the argument '{name}'", name
    )


def _admits_none(annotation: Any) -> bool:
    if annotation is EMPTY:
        return False
    if annotation is None or annotation is type(None):
        return True
    if isinstance(annotation, str):
        return _text_admits_none(annotation)
    if typing.get_origin(annotation) in (typing.Union, types.UnionType):
        return type(None) in typing.get_args(annotation)
    return False


def _text_admits_none(annotation: str) -> bool:
    # postponed annotations (from __future__ import annotations)
    text = annotation.replace(" ", "").replace("typing.", "")
    if text in ("None", "NoneType"):
        return True
    if text.startswith("Optional[") and text.endswith("]"):
        return True
    if text.startswith("Union[") and text.endswith("]"):
        return any(_text_admits_none(member) for member in _split_top_level(text[6:-1], ","))
    members = _split_top_level(text, "|")
    return len(members) > 1 and any(_text_admits_none(member) for member in members)


def _split_top_level(text: str, separator: str) -> list[str]:
    """Split ``text`` on ``separator`` outside of brackets."""
    parts = []
    depth = 0
    start = 0
    for index, char in enumerate(text):
        if char == "[":
            depth += 1
        elif char == "]":
            depth -= 1
        elif char == separator and depth == 0:
            parts.append(text[start:index])
            start = index + 1
    parts.append(text[start:])
    return parts
