"""Error taxonomy for the container.

Every failure raised by the container is a ContainerError carrying an
ErrorKind, so callers can either catch a specific subclass or branch on
``error.kind``. Nothing is retried or recovered internally: these are
configuration-time errors surfaced directly to the application author.
"""

from enum import Enum
from typing import Optional


class ErrorKind(Enum):
    """Kinds of container failure."""
    DUPLICATE_DEFINITION = "duplicate_definition"
    UNDEFINED_COMPONENT = "undefined_component"
    ACCESS = "access"
    NOT_SEALED = "not_sealed"
    ALREADY_REGISTERED = "already_registered"
    ALREADY_SEALED = "already_sealed"
    INCOMPLETE_CONFIGURATION = "incomplete_configuration"
    INVALID_ARGUMENT = "invalid_argument"
    UNSATISFIABLE_ARGUMENT = "unsatisfiable_argument"
    TYPE_MISMATCH = "type_mismatch"
    CONFIGURATION_FILE_NOT_FOUND = "configuration_file_not_found"
    CYCLIC_DEPENDENCY = "cyclic_dependency"
    INTERNAL = "internal"


class ContainerError(Exception):
    """Base class for all container errors.

    Attributes:
        kind: The ErrorKind of this failure
        component: Name of the component involved, if any
    """
    kind: ErrorKind = ErrorKind.INTERNAL

    def __init__(self, message: str, component: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.component = component

    def __repr__(self) -> str:
        return f"{type(self).__name__}(kind={self.kind.value}, message={self.message!r})"


class DuplicateDefinitionError(ContainerError):
    kind = ErrorKind.DUPLICATE_DEFINITION


class UndefinedComponentError(ContainerError):
    kind = ErrorKind.UNDEFINED_COMPONENT


class ContainerAccessError(ContainerError):
    """Mutation attempted on a sealed container."""
    kind = ErrorKind.ACCESS


class NotSealedError(ContainerError):
    """Realization attempted before the container was sealed."""
    kind = ErrorKind.NOT_SEALED


class AlreadyRegisteredError(ContainerError):
    kind = ErrorKind.ALREADY_REGISTERED


class AlreadySealedError(ContainerError):
    kind = ErrorKind.ALREADY_SEALED


class IncompleteConfigurationError(ContainerError):
    """A declared component has neither an initializer nor a value."""
    kind = ErrorKind.INCOMPLETE_CONFIGURATION


class InvalidArgumentError(ContainerError):
    kind = ErrorKind.INVALID_ARGUMENT


class UnsatisfiableArgumentError(ContainerError):
    """A required parameter could not be resolved during invocation."""
    kind = ErrorKind.UNSATISFIABLE_ARGUMENT

    def __init__(self, message: str, parameter: str):
        super().__init__(message)
        self.parameter = parameter


class TypeMismatchError(ContainerError):
    kind = ErrorKind.TYPE_MISMATCH

    def __init__(self, message: str, component: str, expected: str):
        super().__init__(message, component)
        self.expected = expected


class ConfigurationFileNotFoundError(ContainerError, FileNotFoundError):
    kind = ErrorKind.CONFIGURATION_FILE_NOT_FOUND

    def __init__(self, message: str, path: str):
        super().__init__(message)
        self.path = path


class CyclicDependencyError(ContainerError):
    """Two or more initializers depend on each other.

    Attributes:
        chain: Component names along the cycle, first name repeated last
    """
    kind = ErrorKind.CYCLIC_DEPENDENCY

    def __init__(self, chain: list[str]):
        super().__init__(f"cyclic dependency: {' -> '.join(chain)}", chain[0])
        self.chain = chain


class InternalContainerError(ContainerError):
    kind = ErrorKind.INTERNAL
