"""Sources of component declarations.

A container is fed an ordered sequence of (name, type) pairs. They can come
from class annotations on a Container subclass:

    class AppContainer(Container):
        db_url: str
        cache: Optional[Cache]
        plugins: "str[]"

from an explicit list or mapping, or from a YAML schema file:

    components:
      db_url: string
      cache: myapp.cache.Cache

Parsing annotations walks the class hierarchy, so a DeclarationCache can be
supplied to reuse the result per container class.
"""

import inspect
import logging
import sys
import typing
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Callable, Iterable, Mapping, Union

import yaml

from .errors import InvalidArgumentError
from .typecheck import Primitive, TypeSpec, parse_type

logger = logging.getLogger(__name__)

Declaration = tuple[str, Any]
Declarations = Union[Iterable[Declaration], Mapping[str, Any]]


class DeclarationCache(ABC):
    """Read-through cache of parsed declarations, keyed by container class."""

    @abstractmethod
    def read(self, key: str, refresh: Callable[[], list[Declaration]]) -> list[Declaration]:
        """Return cached declarations for ``key``, calling ``refresh`` on a miss."""
        pass


class MemoryDeclarationCache(DeclarationCache):
    """Process-local cache backed by a dict."""

    def __init__(self):
        self.data: dict[str, list[Declaration]] = {}

    def read(self, key: str, refresh: Callable[[], list[Declaration]]) -> list[Declaration]:
        if key not in self.data:
            logger.debug(f"Declaration cache miss: {key}")
            self.data[key] = refresh()
        return self.data[key]

    def clear(self) -> None:
        self.data.clear()


def cache_key(cls: type) -> str:
    """Identity of a container class for caching purposes."""
    return f"{cls.__module__}.{cls.__qualname__}"


def annotation_declarations(cls: type, stop: type = object) -> list[Declaration]:
    """Collect (name, type) pairs from class annotations.

    Base classes are visited first. Classes that ``stop`` derives from
    (including ``stop`` itself) are skipped, as are private names and
    ClassVar annotations. A name re-annotated in a subclass keeps its
    original position and takes the subclass type.

    String annotations (forward references, ``from __future__ import
    annotations``) are evaluated against the module of the class. One that
    cannot be evaluated, such as a name imported only under
    ``TYPE_CHECKING``, is parsed as a class name, and declared as ``mixed``
    if that fails too.

    Args:
        cls: The class to inspect
        stop: Framework base class whose own annotations are ignored
    """
    collected: dict[str, Any] = {}

    for klass in reversed(cls.__mro__):
        if issubclass(stop, klass):
            continue
        own = inspect.get_annotations(klass)
        if not own:
            continue
        resolved = _resolve_annotations(klass)
        for name, raw in own.items():
            if name.startswith("_"):
                continue
            annotation = resolved.get(name, raw)
            if _is_class_var(annotation):
                continue
            collected[name] = _declared_type(klass, name, annotation)

    return list(collected.items())


def _resolve_annotations(klass: type) -> dict[str, Any]:
    try:
        return typing.get_type_hints(klass)
    except (NameError, SyntaxError, TypeError) as e:
        logger.debug(f"Resolving annotations of {klass.__qualname__} one by one: {e}")

    module = sys.modules.get(klass.__module__)
    globalns = dict(vars(module)) if module is not None else {}
    localns = dict(vars(klass))

    resolved = {}
    for name, annotation in inspect.get_annotations(klass).items():
        if isinstance(annotation, str):
            try:
                annotation = eval(annotation, globalns, localns)
            except (NameError, SyntaxError, TypeError, AttributeError) as e:
                logger.debug(f"Keeping annotation {klass.__qualname__}.{name} as text: {e}")
        resolved[name] = annotation
    return resolved


def _is_class_var(annotation: Any) -> bool:
    if isinstance(annotation, str):
        return annotation.startswith(("ClassVar", "typing.ClassVar"))
    return annotation is typing.ClassVar or typing.get_origin(annotation) is typing.ClassVar


def _declared_type(klass: type, name: str, annotation: Any) -> Any:
    try:
        return parse_type(annotation)
    except InvalidArgumentError as e:
        logger.warning(
            f"Unresolvable annotation {klass.__qualname__}.{name}: {annotation!r} ({e}); "
            f"declared as mixed"
        )
        label = annotation if isinstance(annotation, str) else repr(annotation)
        return TypeSpec(name=label, primitive=Primitive.MIXED)


def normalize_declarations(declarations: Declarations) -> list[Declaration]:
    """Turn a mapping or an iterable of pairs into a list of pairs."""
    if isinstance(declarations, Mapping):
        return list(declarations.items())
    return [(name, declared) for name, declared in declarations]


def yaml_declarations(path: Union[str, Path]) -> list[Declaration]:
    """Load declarations from a YAML schema file.

    The file holds either a mapping of name -> type, or such a mapping
    under a top-level ``components`` key.

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the file does not contain a mapping of strings
    """
    path = Path(path).expanduser()
    with open(path) as f:
        data = yaml.safe_load(f) or {}

    if isinstance(data, dict) and "components" in data:
        data = data["components"] or {}

    if not isinstance(data, dict):
        raise ValueError(f"Schema file {path} must contain a mapping of component names to types")

    declarations = []
    for name, declared in data.items():
        if not isinstance(name, str) or not isinstance(declared, str):
            raise ValueError(f"Invalid schema entry in {path}: {name!r}: {declared!r}")
        declarations.append((name, declared))
    return declarations
