"""Lazy, type-checked component container."""

import inspect
import logging
import os
import runpy
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Iterable, Iterator, Optional, Union

import yaml

from ..declarations import (
    DeclarationCache,
    Declarations,
    annotation_declarations,
    cache_key,
    normalize_declarations,
)
from ..errors import (
    AlreadyRegisteredError,
    AlreadySealedError,
    ConfigurationFileNotFoundError,
    ContainerAccessError,
    CyclicDependencyError,
    DuplicateDefinitionError,
    IncompleteConfigurationError,
    InternalContainerError,
    InvalidArgumentError,
    NotSealedError,
    TypeMismatchError,
    UndefinedComponentError,
)
from ..invocation import invoke, parameters_of
from ..typecheck import parse_type
from .component import Component, ComponentState

logger = logging.getLogger(__name__)

_YAML_SUFFIXES = (".yaml", ".yml")


class LifecycleState(Enum):
    """Lifecycle of the container as a whole."""
    OPEN = "open"        # accepts definitions, registrations and configuration
    SEALING = "sealing"  # seal() in progress: read-only, realization allowed
    SEALED = "sealed"    # read-only
    CLOSED = "closed"    # shutdown hooks have run


class Container:
    """Dependency/configuration container.

    Components are declared with a name and a type, then either assigned a
    value directly or registered with an initializer function. Once the
    container is sealed it becomes read-only, and components are realized
    on first access: the initializer's parameters name the components it
    depends on, which are realized first.

    Declarations can be written as class annotations on a subclass:

        class AppContainer(Container):
            db_url: str
            db: Database

            def init(self):
                self.set("db_url", "sqlite://")
                self.register("db", lambda db_url: Database(db_url))

    Usage:
        with AppContainer() as container:
            container.configure(lambda db: db.migrate())
            container.seal()

            db = container.get("db")

    Leaving the ``with`` block (or calling ``close()``) runs the shutdown
    hooks of every component that was realized.

    A container is not thread-safe; callers sharing one between threads must
    provide their own mutual exclusion.
    """

    def __init__(
        self,
        root_path: Optional[Union[str, Path]] = None,
        declarations: Optional[Declarations] = None,
        cache: Optional[DeclarationCache] = None,
    ):
        """Initialize the container.

        Args:
            root_path: Base directory for relative paths given to ``load()``;
                defaults to the current working directory
            declarations: Additional (name, type) pairs or a name -> type
                mapping, defined after the class annotations
            cache: Read-through cache for the parsed class annotations
        """
        self._components: dict[str, Component] = {}
        self._state = LifecycleState.OPEN
        self._resolving: list[str] = []
        self._root_path = Path(root_path if root_path is not None else os.getcwd())

        for name, declared in self._class_declarations(cache):
            self.define(name, declared)

        if declarations is not None:
            for name, declared in normalize_declarations(declarations):
                self.define(name, declared)

        self.init()

    def init(self) -> None:
        """Initialize the container after construction. Override as needed."""
        pass

    def _class_declarations(self, cache: Optional[DeclarationCache]) -> list:
        cls = type(self)

        def parse():
            return annotation_declarations(cls, stop=Container)

        if cache is None:
            return parse()
        return cache.read(cache_key(cls), parse)

    # -- properties ---------------------------------------------------------

    @property
    def root_path(self) -> Path:
        """Root path of configuration files (see ``load()``)."""
        return self._root_path

    @property
    def state(self) -> LifecycleState:
        return self._state

    @property
    def is_sealed(self) -> bool:
        return self._state in (LifecycleState.SEALED, LifecycleState.CLOSED)

    def names(self) -> list[str]:
        """Declared component names, in declaration order."""
        return list(self._components)

    # -- definition ---------------------------------------------------------

    def define(self, name: str, declared: Any) -> None:
        """Declare a component and its type.

        Args:
            name: Component name
            declared: Type declaration (see ``typecheck.parse_type``); a
                trailing ``[]`` is checked as a shallow array

        Raises:
            ContainerAccessError: If the container is sealed
            DuplicateDefinitionError: If ``name`` is already defined
        """
        self._require_open("attempted definition in sealed container")

        existing = self._components.get(name)
        if existing is not None:
            raise DuplicateDefinitionError(
                f"duplicate component definition: '{name}' as {declared} "
                f"(previously defined as {existing.type})",
                name,
            )

        self._components[name] = Component(name=name, type=parse_type(declared))
        logger.debug(f"Defined component '{name}' as {self._components[name].type}")

    def is_defined(self, name: str) -> bool:
        return name in self._components

    def is_registered(self, name: str) -> bool:
        """True if the component has an initializer or a value."""
        component = self._components.get(name)
        return component is not None and component.is_registered

    def is_realized(self, name: str) -> bool:
        """True if the component has a value."""
        component = self._components.get(name)
        return component is not None and component.is_realized

    def is_active(self, name: str) -> bool:
        """Check if a component has been initialized.

        Only meaningful once the container is sealed.

        Raises:
            NotSealedError: If the container has not been sealed
            UndefinedComponentError: If ``name`` is not defined
        """
        if self._state is LifecycleState.OPEN:
            raise NotSealedError("container must be sealed before this method can be called")
        return self._component(name).is_realized

    def state_of(self, name: str) -> ComponentState:
        return self._component(name).state

    # -- registration -------------------------------------------------------

    def register(self, name: str, initializer: Callable[..., Any]) -> None:
        """Register a function that initializes the named component.

        The initializer's parameter names identify the components injected
        into it when the component is first accessed.

        Raises:
            ContainerAccessError: If the container is sealed
            UndefinedComponentError: If ``name`` is not defined
            AlreadyRegisteredError: If the component already has an
                initializer or a value
            InvalidArgumentError: If ``initializer`` is not callable
        """
        self._require_open("attempted registration in sealed container")

        component = self._component(name)

        if component.initializer is not None:
            raise AlreadyRegisteredError(
                f"component '{name}' has already been registered for initialization", name
            )
        if component.is_realized:
            raise AlreadyRegisteredError(
                f"component '{name}' has already been initialized by direct assignment", name
            )
        if not callable(initializer):
            raise InvalidArgumentError(f"initializer for component '{name}' is not callable", name)

        component.initializer = initializer
        logger.debug(f"Registered initializer for component '{name}'")

    def unregister(self, name: str) -> None:
        """Remove the initializer or value (and configurators) of a component.

        Raises:
            ContainerAccessError: If the container is sealed
            UndefinedComponentError: If ``name`` is not defined or not registered
        """
        self._require_open("attempted unregister in sealed container")

        component = self._components.get(name)
        if component is None or not component.is_registered:
            raise UndefinedComponentError(f"undefined or unregistered component: '{name}'", name)

        component.reset()
        logger.debug(f"Unregistered component '{name}'")

    def set(self, name: str, value: Any) -> None:
        """Assign a component value directly.

        Assigning None bypasses the type check, to mark a component as
        deliberately absent.

        Raises:
            ContainerAccessError: If the container is sealed
            UndefinedComponentError: If ``name`` is not defined
            AlreadyRegisteredError: If the component has an initializer or
                has already been assigned
            TypeMismatchError: If ``value`` does not match the declared type
        """
        self._require_open("attempted write-access to sealed container")

        component = self._component(name)

        if component.initializer is not None:
            raise AlreadyRegisteredError(f"attempted overwrite of registered component: '{name}'", name)
        if component.is_realized:
            raise AlreadyRegisteredError(f"attempted overwrite of initialized component: '{name}'", name)

        if value is not None:
            self.check_type(name, value)

        component.value = value

    # -- late configuration -------------------------------------------------

    def configure(self, config: Union[Callable[..., Any], Iterable[Callable[..., Any]]]) -> None:
        """Add configuration functions, applied when their component is realized.

        The first parameter of each function names the target component and
        receives its value; further parameters name components to inject.
        Functions for the same component run in the order they were added.

        Args:
            config: A single function or an iterable of functions

        Raises:
            ContainerAccessError: If the container is sealed
            InvalidArgumentError: If an entry is not callable or has no parameters
            UndefinedComponentError: If the first parameter names no component
        """
        self._require_open("attempted configuration of sealed container")

        if callable(config):
            functions = [config]
        elif isinstance(config, Iterable):
            functions = list(config)
        else:
            raise InvalidArgumentError(f"invalid configuration: {config!r}")
        targets = [self._target_of(fn, index, "configuration") for index, fn in enumerate(functions)]

        for fn, component in zip(functions, targets):
            component.configurators.append(fn)

    def shutdown(self, fn: Callable[..., Any]) -> None:
        """Add a shutdown function.

        When the container is closed, shutdown functions run for every
        component that was realized. The first parameter names the component
        that triggers the function; further parameters name components to
        inject (realized if needed).

        Raises:
            ContainerAccessError: If the container is sealed
            InvalidArgumentError: If ``fn`` is not callable or has no parameters
            UndefinedComponentError: If the first parameter names no component
        """
        self._require_open("attempted shutdown registration in sealed container")

        component = self._target_of(fn, 0, "shutdown")
        component.shutdown_hooks.append(fn)

    def _target_of(self, fn: Callable[..., Any], index: int, role: str) -> Component:
        if not callable(fn):
            raise InvalidArgumentError(f"{role} function #{index} is not callable")

        params = parameters_of(fn)
        if not params:
            raise InvalidArgumentError(f"{role} functions must have at least one parameter")

        name = params[0].name
        if name not in self._components:
            raise UndefinedComponentError(f"undefined component: '{name}' (in {role} function)", name)
        return self._components[name]

    # -- resolution ---------------------------------------------------------

    def get(self, name: str) -> Any:
        """Return the value of a component, initializing it on first access.

        Raises:
            NotSealedError: If initialization is needed before sealing
            UndefinedComponentError: If ``name`` is not defined
            CyclicDependencyError: If initializers depend on each other
            TypeMismatchError: If the initializer returns a value of the
                wrong type (None included)
        """
        component = self._components.get(name)
        if component is not None and component.is_realized:
            return component.value

        if self._state is LifecycleState.OPEN:
            raise NotSealedError(
                f"container must be sealed before this component can be initialized: '{name}'", name
            )

        if component is None:
            raise UndefinedComponentError(f"undefined component: '{name}'", name)

        self._initialize(component)
        self._configure(component)

        return component.value

    def _initialize(self, component: Component) -> None:
        name = component.name

        if name in self._resolving:
            chain = self._resolving[self._resolving.index(name):] + [name]
            raise CyclicDependencyError(chain)

        if component.initializer is None:
            raise InternalContainerError(f"internal error: no initializer for component '{name}'", name)

        self._resolving.append(name)
        try:
            value = invoke(component.initializer, self)
        finally:
            self._resolving.pop()

        self.check_type(name, value)

        component.value = value
        component.initializer = None
        logger.debug(f"Initialized component '{name}'")

    def _configure(self, component: Component) -> None:
        if not component.is_realized:
            raise InternalContainerError(
                "internal error: attempted configuration of uninitialized component", component.name
            )

        # a function leaves the queue only once it has run successfully
        while component.configurators:
            invoke(component.configurators[0], self, bound=(component.value,))
            component.configurators.pop(0)

        component.configured = True

    def invoke(self, fn: Callable[..., Any], params: Optional[dict[str, Any]] = None) -> Any:
        """Invoke a function, injecting components as its arguments.

        Args:
            fn: The function, method or other callable to invoke
            params: Explicit name -> value arguments; these override
                container components

        Returns:
            The return value of ``fn``.

        Raises:
            InvalidArgumentError: If ``fn`` is not callable
            UnsatisfiableArgumentError: If an argument cannot be resolved
        """
        return invoke(fn, self, params)

    def check_type(self, name: str, value: Any) -> None:
        """Check ``value`` against the declared type of component ``name``.

        Raises:
            UndefinedComponentError: If ``name`` is not defined
            TypeMismatchError: If the value does not conform
        """
        component = self._component(name)
        if not component.type.accepts(value):
            raise TypeMismatchError(
                f"component-type mismatch - component '{name}' was defined as: {component.type}",
                name,
                str(component.type),
            )

    # -- lifecycle ----------------------------------------------------------

    def seal(self) -> None:
        """Seal the container against further changes.

        Checks that every component has an initializer or a value, then runs
        the configuration functions of directly assigned components.

        Raises:
            AlreadySealedError: If the container has already been sealed
            IncompleteConfigurationError: If a component is missing
        """
        if self._state is not LifecycleState.OPEN:
            raise AlreadySealedError("container has already been sealed")

        for name, component in self._components.items():
            if not component.is_registered:
                raise IncompleteConfigurationError(f"missing configuration of component: '{name}'", name)

        # configurators may pull in lazily initialized dependencies
        self._state = LifecycleState.SEALING
        try:
            for component in self._components.values():
                if component.is_realized and not component.configured:
                    self._configure(component)
        except Exception:
            self._state = LifecycleState.OPEN
            raise

        self._state = LifecycleState.SEALED
        logger.info(f"Sealed {type(self).__name__} with {len(self._components)} components")

    def close(self) -> None:
        """Run shutdown functions for realized components.

        Components are visited in declaration order and their shutdown
        functions run in the order they were added. Every function runs even
        if an earlier one fails; the first failure is re-raised afterwards.
        Calling ``close()`` again does nothing.

        Components are visited once, in a single pass. If a shutdown function
        initializes a component declared before its own, the shutdown
        functions of that component do not run.
        """
        if self._state is LifecycleState.CLOSED:
            return

        first_error: Optional[BaseException] = None

        for component in self._components.values():
            if not component.is_realized:
                continue
            for fn in component.shutdown_hooks:
                try:
                    invoke(fn, self, bound=(component.value,))
                except Exception as e:
                    logger.exception(f"Shutdown function for component '{component.name}' failed")
                    if first_error is None:
                        first_error = e

        self._state = LifecycleState.CLOSED
        logger.info(f"Closed {type(self).__name__}")

        if first_error is not None:
            raise first_error

    def __enter__(self) -> "Container":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    # -- external configuration ---------------------------------------------

    def load(self, path: Union[str, Path]) -> None:
        """Load a configuration file.

        Python files run with this container bound to the global name
        ``container``. YAML files hold a mapping of component names to
        values, which are assigned with ``set()``.

        Args:
            path: Absolute path, or path relative to ``root_path``

        Raises:
            ConfigurationFileNotFoundError: If the file does not exist
        """
        path = Path(path)
        if not path.is_absolute():
            path = self._root_path / path

        if not path.exists():
            raise ConfigurationFileNotFoundError(f"configuration file not found: {path}", str(path))

        logger.debug(f"Loading configuration file: {path}")

        if path.suffix.lower() in _YAML_SUFFIXES:
            self._load_yaml(path)
        else:
            runpy.run_path(str(path), init_globals={"container": self})

    def _load_yaml(self, path: Path) -> None:
        with open(path) as f:
            data = yaml.safe_load(f) or {}

        if not isinstance(data, dict):
            raise InvalidArgumentError(f"configuration file {path} must contain a mapping")

        for name, value in data.items():
            self.set(name, value)

    def inject(self, obj: Any, include_protected: bool = False) -> Any:
        """Inject component values into the attributes of an object.

        Every registered component whose name matches a target attribute is
        assigned, initializing it if needed. Target attributes are the names
        listed in ``obj.__injectable__`` when present, otherwise the public
        attributes found on the instance and in the annotations of its class
        hierarchy. With ``include_protected``, an attribute ``_name`` receives
        component ``name``. Name-mangled attributes are never injected.

        Returns:
            The object, for chaining.
        """
        for attr, name in self._injection_targets(obj, include_protected):
            if self.is_registered(name):
                setattr(obj, attr, self.get(name))
        return obj

    def _injection_targets(self, obj: Any, include_protected: bool) -> Iterator[tuple[str, str]]:
        explicit = getattr(obj, "__injectable__", None)
        if explicit is not None:
            for attr in explicit:
                yield attr, attr
            return

        seen = set()
        candidates = list(getattr(obj, "__dict__", {}))
        for klass in type(obj).__mro__:
            candidates.extend(inspect.get_annotations(klass))

        for attr in candidates:
            if attr in seen or attr.startswith("__"):
                continue
            seen.add(attr)
            if not attr.startswith("_"):
                yield attr, attr
            elif include_protected:
                yield attr, attr[1:]

    # -- mapping-style access -----------------------------------------------

    def __contains__(self, name: str) -> bool:
        return self.is_defined(name)

    def __getitem__(self, name: str) -> Any:
        return self.get(name)

    def __setitem__(self, name: str, value: Any) -> None:
        self.set(name, value)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(state={self._state.value}, components={self.names()})"

    # -- helpers ------------------------------------------------------------

    def _component(self, name: str) -> Component:
        component = self._components.get(name)
        if component is None:
            raise UndefinedComponentError(f"undefined component: '{name}'", name)
        return component

    def _require_open(self, message: str) -> None:
        if self._state is not LifecycleState.OPEN:
            raise ContainerAccessError(message)
