"""Build a ready-to-use container from settings."""

import logging
from typing import Optional

from .config import ContainerSettings
from .container import Container
from .declarations import DeclarationCache, yaml_declarations

logger = logging.getLogger("larder")

_handler: Optional[logging.Handler] = None


def configure_logging(debug: bool = False) -> None:
    """Set the level of the ``larder`` logger and attach a stream handler once."""
    global _handler

    logger.setLevel(logging.DEBUG if debug else logging.INFO)
    if _handler is None:
        _handler = logging.StreamHandler()
        _handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
        logger.addHandler(_handler)


def build_container(
    settings: ContainerSettings,
    container_class: type[Container] = Container,
    cache: Optional[DeclarationCache] = None,
) -> Container:
    """Construct, configure and (optionally) seal a container.

    Steps:
    1. Validate settings
    2. Construct ``container_class`` with the schema declarations (if any)
    3. Load each configuration file, in order
    4. Seal, if ``settings.seal``

    Args:
        settings: Bootstrap settings
        container_class: Container subclass to instantiate
        cache: Declaration cache passed to the container

    Raises:
        ValueError: If the settings are invalid
    """
    errors = settings.validate()
    if errors:
        raise ValueError(f"Configuration errors: {errors}")

    configure_logging(settings.debug)

    declarations = None
    if settings.schema_path:
        declarations = yaml_declarations(settings.resolve(settings.schema_path))

    container = container_class(
        root_path=settings.resolved_root,
        declarations=declarations,
        cache=cache,
    )

    for path in settings.config_files:
        container.load(path)

    if settings.seal:
        container.seal()

    logger.info(
        f"Built {container_class.__name__} "
        f"({len(container.names())} components, sealed: {container.is_sealed})"
    )
    return container
