"""The component and API allow-list used by the validation pipeline."""

import logging
from dataclasses import dataclass
from typing import FrozenSet, Optional

import yaml

from uigen.application.services.exceptions import ConfigurationError
from uigen.config import DEFAULT_ALLOWLIST_FILE

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Allowlist:
    root_tags: FrozenSet[str]
    components: FrozenSet[str]
    apis: FrozenSet[str]
    objects: FrozenSet[str] = frozenset()

    def allows_component(self, tag: str) -> bool:
        return tag.lower() in self.components

    def allows_call(self, name: str, receiver: Optional[str] = None) -> bool:
        """Whether a call to ``receiver.name(...)`` (or bare ``name(...)``) is allowed."""
        if receiver:
            return (
                receiver in self.objects
                or f"{receiver}.{name}" in self.apis
                or name in self.apis
            )
        return name in self.apis or name in self.objects

    @classmethod
    def load(cls, path: str = DEFAULT_ALLOWLIST_FILE) -> "Allowlist":
        """Load the allow-list from a YAML file.

        Raises:
            ConfigurationError: If the file is missing or malformed
        """
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except OSError as e:
            raise ConfigurationError(f"Cannot read allow-list file {path}: {e}") from e
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid allow-list file {path}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigurationError(f"Allow-list file {path} must contain a mapping")

        def names(key: str, lower: bool = False) -> FrozenSet[str]:
            values = data.get(key) or []
            if not isinstance(values, list):
                raise ConfigurationError(f"'{key}' in {path} must be a list")
            return frozenset(str(v).lower() if lower else str(v) for v in values)

        allowlist = cls(
            root_tags=names("root_tags", lower=True),
            components=names("components", lower=True),
            apis=names("apis"),
            objects=names("objects"),
        )
        if not allowlist.root_tags:
            raise ConfigurationError(f"Allow-list file {path} declares no root_tags")
        logger.debug(
            f"Loaded allow-list from {path}: {len(allowlist.components)} components, "
            f"{len(allowlist.apis)} APIs"
        )
        return allowlist
