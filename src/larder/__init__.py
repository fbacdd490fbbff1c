"""larder - lazy, type-checked dependency/configuration container.

Components are declared with a name and a type, configured while the
container is open, and realized on first access once it is sealed:

1. **Declare**: class annotations, a (name, type) feed, or a YAML schema.

2. **Configure**: assign values directly, register initializers whose
   parameter names are the components they depend on, and queue
   configuration and shutdown functions.

3. **Seal**: the container checks every component is accounted for and
   becomes read-only.

4. **Use**: ``get()`` realizes components depth-first, type-checks them and
   applies their configuration functions exactly once.

Usage:
    from larder import Container

    class AppContainer(Container):
        db_url: str
        db: Database

    with AppContainer() as container:
        container.set("db_url", "sqlite://")
        container.register("db", lambda db_url: Database(db_url))
        container.shutdown(lambda db: db.close())
        container.seal()

        db = container.get("db")
"""

from .bootstrap import build_container, configure_logging
from .config import ContainerSettings
from .container import Container, ComponentState, LifecycleState
from .declarations import DeclarationCache, MemoryDeclarationCache, yaml_declarations
from .errors import (
    AlreadyRegisteredError,
    AlreadySealedError,
    ConfigurationFileNotFoundError,
    ContainerAccessError,
    ContainerError,
    CyclicDependencyError,
    DuplicateDefinitionError,
    ErrorKind,
    IncompleteConfigurationError,
    InternalContainerError,
    InvalidArgumentError,
    NotSealedError,
    TypeMismatchError,
    UndefinedComponentError,
    UnsatisfiableArgumentError,
)
from .invocation import Parameter, parameters
from .typecheck import Primitive, TypeSpec, parse_type

__all__ = [
    "Container",
    "ComponentState",
    "LifecycleState",
    "ContainerSettings",
    "build_container",
    "configure_logging",
    "DeclarationCache",
    "MemoryDeclarationCache",
    "yaml_declarations",
    "Parameter",
    "parameters",
    "Primitive",
    "TypeSpec",
    "parse_type",
    "ErrorKind",
    "ContainerError",
    "AlreadyRegisteredError",
    "AlreadySealedError",
    "ConfigurationFileNotFoundError",
    "ContainerAccessError",
    "CyclicDependencyError",
    "DuplicateDefinitionError",
    "IncompleteConfigurationError",
    "InternalContainerError",
    "InvalidArgumentError",
    "NotSealedError",
    "TypeMismatchError",
    "UndefinedComponentError",
    "UnsatisfiableArgumentError",
]
