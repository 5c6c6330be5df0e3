"""
Trigger loader - discovers and loads trigger sets.

Trigger sets can come from:
1. Built-in library (shipped with package)
2. Project trigger sets (user's triggers directory)
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml
from pydantic import ValidationError

from chuk_mcp_strudel.constants import ErrorMessages
from chuk_mcp_strudel.errors import ConfigError
from chuk_mcp_strudel.models.trigger import TriggerSet, TriggerSetMetadata
from chuk_mcp_strudel.triggers.registry import ActionRegistry

logger = logging.getLogger(__name__)

LIBRARY_PATH = Path(__file__).parent / "library"


class TriggerLoader:
    """
    Discovers and loads trigger sets.

    Sets are loaded from YAML files in the library and project directories.
    Project sets override library sets with the same name.
    """

    def __init__(
        self,
        library_path: Path | None = None,
        project_path: Path | None = None,
    ):
        """
        Initialize the trigger loader.

        Args:
            library_path: Path to built-in trigger sets
            project_path: Path to project trigger sets
        """
        self.library_path = library_path or LIBRARY_PATH
        self.project_path = project_path
        self._cache: dict[str, TriggerSet] = {}

    def list_sets(self) -> list[TriggerSetMetadata]:
        """
        List all available trigger sets.

        Files that fail to parse are skipped.
        """
        sets: dict[str, TriggerSetMetadata] = {}

        for base in (self.library_path, self.project_path):
            if base is None or not base.exists():
                continue
            for path in sorted(base.glob("*.yaml")):
                try:
                    trigger_set = self._load_set_file(path)
                except ConfigError as e:
                    logger.warning("Skipping trigger set %s: %s", path, e)
                    continue
                sets[trigger_set.name] = TriggerSetMetadata.from_set(trigger_set, str(path))

        return sorted(sets.values(), key=lambda m: m.name)

    def get_set(self, name: str) -> TriggerSet | None:
        """
        Get a trigger set by name.

        Project sets take precedence over library sets.

        Args:
            name: Set name (file stem)

        Returns:
            TriggerSet if found, None otherwise

        Raises:
            ConfigError: If the file exists but is invalid
        """
        if name in self._cache:
            return self._cache[name]

        for base in (self.project_path, self.library_path):
            if base is None:
                continue
            path = base / f"{name}.yaml"
            if path.exists():
                trigger_set = self._load_set_file(path)
                self._cache[name] = trigger_set
                return trigger_set

        return None

    def build_registry(self, *names: str) -> ActionRegistry:
        """
        Build an action registry from one or more trigger sets.

        Later sets override earlier ones trigger by trigger.

        Raises:
            ConfigError: If a named set does not exist or is invalid
        """
        bindings = []
        for name in names or ("default",):
            trigger_set = self.get_set(name)
            if trigger_set is None:
                raise ConfigError(ErrorMessages.TRIGGER_SET_NOT_FOUND.format(name=name))
            bindings.extend(trigger_set.triggers.values())

        registry = ActionRegistry(bindings)
        logger.debug("Built trigger registry %r", registry)
        return registry

    def _load_set_file(self, path: Path) -> TriggerSet:
        """Load a trigger set from a YAML file."""
        try:
            with open(path) as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(f"Cannot read {path}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigError(f"Trigger set {path} must be a mapping")

        data.setdefault("name", path.stem)
        try:
            return TriggerSet.model_validate(data)
        except ValidationError as e:
            raise ConfigError(f"Invalid trigger set {path}: {e}") from e
