"""Type checking for component values.

A component's declared type is parsed once into a TypeSpec. Declarations may
be pseudo-type names ("string", "int", "mixed", "Foo[]"), fully qualified
class names ("package.module.Class") or builtin class names ("dict"), or
Python type objects taken from class annotations (str, Optional[Foo],
list[str], ...). A class name that cannot be resolved is rejected when it
is parsed.

Arrays are checked shallowly: "string[]" only requires an array-shaped value,
the elements are not inspected.
"""

import builtins
import collections.abc
import importlib
import types
import typing
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional

from .errors import InvalidArgumentError


class Primitive(Enum):
    """Pseudo-types checked with a native predicate."""
    MIXED = "mixed"
    STRING = "string"
    INTEGER = "integer"
    BOOLEAN = "boolean"
    FLOAT = "float"
    ARRAY = "array"
    OBJECT = "object"
    NULL = "null"
    CALLABLE = "callable"


_ARRAY_TYPES = (list, tuple, set, frozenset, dict)
_SCALAR_TYPES = (str, bytes, int, float, bool)

_CHECKS: dict[Primitive, Callable[[Any], bool]] = {
    Primitive.MIXED: lambda value: True,
    Primitive.STRING: lambda value: isinstance(value, str),
    Primitive.INTEGER: lambda value: isinstance(value, int) and not isinstance(value, bool),
    Primitive.BOOLEAN: lambda value: isinstance(value, bool),
    Primitive.FLOAT: lambda value: isinstance(value, float),
    Primitive.ARRAY: lambda value: isinstance(value, _ARRAY_TYPES),
    Primitive.OBJECT: lambda value: (
        value is not None and not isinstance(value, _SCALAR_TYPES + _ARRAY_TYPES)
    ),
    Primitive.NULL: lambda value: value is None,
    Primitive.CALLABLE: callable,
}

_ALIASES: dict[str, Primitive] = {
    "mixed": Primitive.MIXED,
    "any": Primitive.MIXED,
    "string": Primitive.STRING,
    "str": Primitive.STRING,
    "integer": Primitive.INTEGER,
    "int": Primitive.INTEGER,
    "boolean": Primitive.BOOLEAN,
    "bool": Primitive.BOOLEAN,
    "float": Primitive.FLOAT,
    "double": Primitive.FLOAT,
    "array": Primitive.ARRAY,
    "list": Primitive.ARRAY,
    "object": Primitive.OBJECT,
    "null": Primitive.NULL,
    "none": Primitive.NULL,
    "callable": Primitive.CALLABLE,
    "callback": Primitive.CALLABLE,
}

_PYTHON_PRIMITIVES: dict[Any, Primitive] = {
    str: Primitive.STRING,
    int: Primitive.INTEGER,
    bool: Primitive.BOOLEAN,
    float: Primitive.FLOAT,
    object: Primitive.OBJECT,
    list: Primitive.ARRAY,
    tuple: Primitive.ARRAY,
    set: Primitive.ARRAY,
    frozenset: Primitive.ARRAY,
}

_UNION_ORIGINS = (typing.Union, types.UnionType)


@dataclass(frozen=True)
class TypeSpec:
    """A parsed type declaration.

    Exactly one of ``primitive``, ``cls`` or ``members`` is set.

    Attributes:
        name: The declared type as written, used in error messages
        primitive: Pseudo-type checked with a native predicate
        cls: Class checked with isinstance
        members: Alternatives of a union declaration
    """
    name: str
    primitive: Optional[Primitive] = None
    cls: Optional[type] = None
    members: tuple["TypeSpec", ...] = ()

    def accepts(self, value: Any) -> bool:
        """Return True if ``value`` satisfies this declaration."""
        if self.primitive is not None:
            return _CHECKS[self.primitive](value)
        if self.members:
            return any(member.accepts(value) for member in self.members)
        return self.cls is not None and isinstance(value, self.cls)

    @property
    def is_array(self) -> bool:
        return self.primitive is Primitive.ARRAY

    def __str__(self) -> str:
        return self.name


def parse_type(declared: Any) -> TypeSpec:
    """Parse a type declaration into a TypeSpec.

    Args:
        declared: A type string, a Python type or typing construct, or an
            existing TypeSpec (returned unchanged).

    Returns:
        The parsed TypeSpec.

    Raises:
        InvalidArgumentError: If the declaration is not understood.
    """
    if isinstance(declared, TypeSpec):
        return declared
    if isinstance(declared, str):
        return _parse_string(declared)
    return _parse_python_type(declared)


def _parse_string(declared: str) -> TypeSpec:
    name = declared.strip()
    if not name:
        raise InvalidArgumentError("empty type declaration")

    # shallow type-checking for element-typed arrays
    if name.endswith("[]"):
        return TypeSpec(name=name, primitive=Primitive.ARRAY)

    primitive = _ALIASES.get(name.lower())
    if primitive is not None:
        return TypeSpec(name=name, primitive=primitive)

    cls = _resolve_class(name.lstrip("."))
    if cls is None:
        raise InvalidArgumentError(f"unknown type: '{name}'")
    return TypeSpec(name=name, cls=cls)


def _parse_python_type(declared: Any) -> TypeSpec:
    name = _type_name(declared)

    if declared is Any:
        return TypeSpec(name=name, primitive=Primitive.MIXED)
    if declared is None or declared is type(None):
        return TypeSpec(name="None", primitive=Primitive.NULL)
    if isinstance(declared, typing.ForwardRef):
        return _parse_string(declared.__forward_arg__)

    origin = typing.get_origin(declared)
    if origin is None:
        if not isinstance(declared, type):
            raise InvalidArgumentError(f"unsupported type declaration: {declared!r}")
        if declared in _PYTHON_PRIMITIVES:
            return TypeSpec(name=name, primitive=_PYTHON_PRIMITIVES[declared])
        if declared is collections.abc.Callable:
            return TypeSpec(name=name, primitive=Primitive.CALLABLE)
        return TypeSpec(name=name, cls=declared)

    if origin in _UNION_ORIGINS:
        members = tuple(_parse_python_type(arg) for arg in typing.get_args(declared))
        return TypeSpec(name=name, members=members)
    if origin is collections.abc.Callable:
        return TypeSpec(name=name, primitive=Primitive.CALLABLE)
    if origin in (list, tuple, set, frozenset):
        return TypeSpec(name=name, primitive=Primitive.ARRAY)
    if isinstance(origin, type):
        return TypeSpec(name=name, cls=origin)

    raise InvalidArgumentError(f"unsupported type declaration: {declared!r}")


def _type_name(declared: Any) -> str:
    if isinstance(declared, type) and typing.get_origin(declared) is None:
        if declared.__module__ == "builtins":
            return declared.__qualname__
        return f"{declared.__module__}.{declared.__qualname__}"
    return repr(declared).replace("typing.", "")


def _resolve_class(path: str) -> Optional[type]:
    """Import ``package.module.Class``, or look up a builtin; None if not found."""
    if "." not in path:
        cls = getattr(builtins, path, None)
        return cls if isinstance(cls, type) else None
    module_name, _, attr = path.rpartition(".")
    try:
        module = importlib.import_module(module_name)
    except ImportError:
        return None
    cls = getattr(module, attr, None)
    return cls if isinstance(cls, type) else None
