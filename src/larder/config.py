"""Settings for bootstrapping a container.

Settings can be loaded from:
- Environment variables
- YAML files
- Programmatic construction

Use ``validate()`` to get a list of problems before building a container.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml


@dataclass
class ContainerSettings:
    """Bootstrap settings for a container.

    Attributes:
        root_path: Base directory for relative configuration paths
            (None: current working directory)
        schema_path: YAML schema file with component declarations
        config_files: Configuration files loaded in order after construction
        seal: Seal the container once all configuration files are loaded
        debug: Enable debug logging
    """
    root_path: Optional[str] = None
    schema_path: Optional[str] = None
    config_files: list[str] = field(default_factory=list)
    seal: bool = True
    debug: bool = False

    def __post_init__(self):
        if self.root_path is not None:
            self.root_path = str(Path(self.root_path).expanduser())

    @property
    def resolved_root(self) -> Path:
        return Path(self.root_path) if self.root_path else Path.cwd()

    def resolve(self, path: str) -> Path:
        """Resolve ``path`` against the root path if it is relative."""
        candidate = Path(path).expanduser()
        return candidate if candidate.is_absolute() else self.resolved_root / candidate

    @classmethod
    def from_env(cls, prefix: str = "LARDER") -> "ContainerSettings":
        """Load settings from environment variables.

        Environment variables:
            {prefix}_ROOT_PATH: Root path of configuration files
            {prefix}_SCHEMA: YAML schema file
            {prefix}_CONFIG_FILES: Configuration files, separated by os.pathsep
            {prefix}_SEAL: true|false
            {prefix}_DEBUG: true|false
        """
        def get(key: str, default: Optional[str] = None) -> Optional[str]:
            return os.environ.get(f"{prefix}_{key}", default)

        def get_bool(key: str, default: bool = False) -> bool:
            val = get(key)
            if val is None:
                return default
            return val.lower() in ("true", "1", "yes")

        files = get("CONFIG_FILES", "")
        return cls(
            root_path=get("ROOT_PATH"),
            schema_path=get("SCHEMA"),
            config_files=[f for f in files.split(os.pathsep) if f],
            seal=get_bool("SEAL", True),
            debug=get_bool("DEBUG", False),
        )

    @classmethod
    def from_file(cls, path: str | Path) -> "ContainerSettings":
        """Load settings from a YAML file; a missing file yields defaults."""
        path = Path(path).expanduser()
        if not path.exists():
            return cls()

        with open(path) as f:
            data = yaml.safe_load(f) or {}

        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: dict) -> "ContainerSettings":
        """Create settings from a dictionary."""
        config_files = data.get("config_files") or []
        if isinstance(config_files, str):
            config_files = [config_files]

        return cls(
            root_path=data.get("root_path"),
            schema_path=data.get("schema_path"),
            config_files=list(config_files),
            seal=bool(data.get("seal", True)),
            debug=bool(data.get("debug", False)),
        )

    def validate(self) -> list[str]:
        """Validate settings, return list of errors."""
        errors = []

        root = self.resolved_root
        if not root.is_dir():
            errors.append(f"root_path is not a directory: {root}")

        if self.schema_path is not None and not self.resolve(self.schema_path).is_file():
            errors.append(f"schema file not found: {self.schema_path}")

        for index, path in enumerate(self.config_files):
            if not path or not path.strip():
                errors.append(f"config_files[{index}] is empty")

        return errors
