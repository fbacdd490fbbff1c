"""Component container.

Holds the component registry and controls the sealed/unsealed lifecycle.
"""

from .component import Component, ComponentState
from .container import Container, LifecycleState

__all__ = ["Container", "Component", "ComponentState", "LifecycleState"]
