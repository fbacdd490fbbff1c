"""Component records held by the container registry."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Optional

from ..typecheck import TypeSpec


class _Unset:
    """Marker for a component without a realized value (None is a value)."""

    def __repr__(self) -> str:
        return "<unset>"


UNSET: Any = _Unset()


class ComponentState(Enum):
    """Lifecycle of a single component."""
    DECLARED = "declared"      # defined, no initializer or value yet
    REGISTERED = "registered"  # has a pending initializer
    REALIZED = "realized"      # has a value, configurators pending
    CONFIGURED = "configured"  # has a value, configurators applied


@dataclass
class Component:
    """A named, typed entry in the container.

    Attributes:
        name: Component name (unique per container)
        type: Declared type constraint
        initializer: Deferred computation producing the value
        value: Realized value, UNSET until realized
        configurators: Functions applied once right after realization
        shutdown_hooks: Functions run at teardown if the value was realized
        configured: True once the configurator queue has been applied
    """
    name: str
    type: TypeSpec
    initializer: Optional[Callable[..., Any]] = None
    value: Any = UNSET
    configurators: list[Callable[..., Any]] = field(default_factory=list)
    shutdown_hooks: list[Callable[..., Any]] = field(default_factory=list)
    configured: bool = False

    @property
    def is_realized(self) -> bool:
        return self.value is not UNSET

    @property
    def is_registered(self) -> bool:
        return self.initializer is not None or self.is_realized

    @property
    def state(self) -> ComponentState:
        if self.is_realized:
            return ComponentState.CONFIGURED if self.configured else ComponentState.REALIZED
        if self.initializer is not None:
            return ComponentState.REGISTERED
        return ComponentState.DECLARED

    def reset(self) -> None:
        """Return to the declared state; the type and shutdown hooks are kept."""
        self.initializer = None
        self.value = UNSET
        self.configurators = []
        self.configured = False

    def __repr__(self) -> str:
        return f"Component(name={self.name!r}, type={self.type}, state={self.state.value})"
