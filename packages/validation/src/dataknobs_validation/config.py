"""Validation limits for security and performance.

``ValidationConfig`` bounds the size of collections a validator is willing
to inspect. It is never global state: the caller supplies it per validation,
either explicitly (``config=`` on a collection validator) or ambiently with
``use_config``, which scopes it through a ``ContextVar`` so concurrent asyncio
tasks each see their own.

Example:
    ```python
    from dataknobs_validation import ValidationConfig, use_config

    with use_config(ValidationConfig.strict()):
        result = validator.validate(untrusted_payload)
    ```

Security note: the default is ``unlimited()``, which is only appropriate for
trusted data. Use ``strict()`` or a custom bound for user input.
"""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Union

import yaml  # type: ignore[import-untyped]

from .errors import ValidationError
from .exceptions import ConfigurationError
from .result import Invalid, Valid, ValidationResult

logger = logging.getLogger(__name__)

COLLECTION_TOO_LARGE = "validation.security.collection_too_large"

ENV_PREFIX = "DATAKNOBS_VALIDATION_"


@dataclass(frozen=True)
class ValidationConfig:
    """Collection-size policy consumed by collection and map validators.

    Attributes:
        max_collection_size: Maximum number of elements (or map entries) a
            collection may hold. ``None`` means unlimited.
        max_nesting_depth: Reserved bound on record nesting depth. Carried for
            configuration compatibility, not enforced.
    """

    max_collection_size: int | None = None
    max_nesting_depth: int | None = None

    def __post_init__(self) -> None:
        for key in ("max_collection_size", "max_nesting_depth"):
            value = getattr(self, key)
            if value is not None and (isinstance(value, bool) or not isinstance(value, int) or value < 0):
                raise ConfigurationError(
                    f"{key} must be a non-negative integer or None",
                    context={"key": key, "value": value},
                )

    def check_collection_size(self, size: int, collection_label: str) -> ValidationResult[int]:
        """Check a collection size against ``max_collection_size``.

        Args:
            size: Number of elements in the collection
            collection_label: Collection kind used in the error message

        Returns:
            ``Valid(size)`` within the limit, otherwise an ``Invalid`` with a
            single security-tagged error
        """
        limit = self.max_collection_size
        if limit is not None and size > limit:
            return Invalid(
                (
                    ValidationError(
                        f"{collection_label} size ({size}) exceeds maximum allowed size ({limit}). "
                        "This limit protects against memory exhaustion attacks.",
                        code=COLLECTION_TOO_LARGE,
                        severity="Error",
                        expected=f"size <= {limit}",
                        actual=str(size),
                    ),
                )
            )
        return Valid(size)

    @classmethod
    def unlimited(cls) -> ValidationConfig:
        """No limits. For trusted data only."""
        return cls()

    @classmethod
    def strict(cls) -> ValidationConfig:
        """Small bounds for untrusted input: 10,000 elements, depth 20."""
        return cls(max_collection_size=10_000, max_nesting_depth=20)

    @classmethod
    def permissive(cls) -> ValidationConfig:
        """Large bounds for internal, trusted data: 1,000,000 elements, depth 100."""
        return cls(max_collection_size=1_000_000, max_nesting_depth=100)

    @classmethod
    def custom(cls, max_collection_size: int | None = None, max_nesting_depth: int | None = None) -> ValidationConfig:
        return cls(max_collection_size=max_collection_size, max_nesting_depth=max_nesting_depth)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> ValidationConfig:
        """Create a config from a dictionary.

        A ``preset`` key (``unlimited``, ``strict`` or ``permissive``) seeds the
        values; explicit ``max_collection_size`` / ``max_nesting_depth`` keys
        override it.

        Args:
            data: Configuration dictionary

        Returns:
            ValidationConfig instance

        Raises:
            ConfigurationError: If the preset or a value is invalid
        """
        unknown = set(data) - {"preset", "max_collection_size", "max_nesting_depth"}
        if unknown:
            raise ConfigurationError(
                f"Unknown validation config keys: {', '.join(sorted(unknown))}",
                context={"keys": sorted(unknown)},
            )

        preset_name = data.get("preset", "unlimited")
        presets = {
            "unlimited": cls.unlimited,
            "strict": cls.strict,
            "permissive": cls.permissive,
        }
        if preset_name not in presets:
            raise ConfigurationError(
                f"Unknown validation config preset: {preset_name}",
                context={"preset": preset_name, "available": list(presets)},
            )
        base = presets[preset_name]()
        return cls(
            max_collection_size=data.get("max_collection_size", base.max_collection_size),
            max_nesting_depth=data.get("max_nesting_depth", base.max_nesting_depth),
        )

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> ValidationConfig:
        """Load a config from a YAML or JSON file.

        The file may hold the config keys at the top level or under a
        ``validation`` section.

        Raises:
            ConfigurationError: If the file is missing, unsupported or invalid
        """
        path = Path(path).resolve()
        if not path.exists():
            raise ConfigurationError(f"Configuration file not found: {path}", context={"path": str(path)})

        suffix = path.suffix.lower()
        with open(path) as f:
            if suffix in [".yaml", ".yml"]:
                data = yaml.safe_load(f)
            elif suffix == ".json":
                data = json.load(f)
            else:
                raise ConfigurationError(f"Unsupported file format: {suffix}", context={"path": str(path)})

        data = data or {}
        if not isinstance(data, dict):
            raise ConfigurationError(
                f"Configuration file must contain a mapping: {path}", context={"path": str(path)}
            )
        if "validation" in data:
            data = data["validation"] or {}

        logger.info(f"Loaded validation config from {path}")
        return cls.from_dict(data)

    @classmethod
    def from_env(cls, prefix: str = ENV_PREFIX, environ: Dict[str, str] | None = None) -> ValidationConfig:
        """Create a config from environment variables.

        Reads ``{prefix}PRESET``, ``{prefix}MAX_COLLECTION_SIZE`` and
        ``{prefix}MAX_NESTING_DEPTH``. Unset variables keep the preset value.

        Raises:
            ConfigurationError: If a size variable is not an integer
        """
        env = os.environ if environ is None else environ
        data: Dict[str, Any] = {}
        if f"{prefix}PRESET" in env:
            data["preset"] = env[f"{prefix}PRESET"].strip().lower()
        for key in ("max_collection_size", "max_nesting_depth"):
            raw = env.get(f"{prefix}{key.upper()}")
            if raw is None:
                continue
            try:
                data[key] = int(raw)
            except ValueError as e:
                raise ConfigurationError(
                    f"Environment variable {prefix}{key.upper()} must be an integer",
                    context={"key": key, "value": raw},
                ) from e
        return cls.from_dict(data)


_current_config: ContextVar[ValidationConfig | None] = ContextVar("dataknobs_validation_config", default=None)


def current_config() -> ValidationConfig:
    """Return the ambient config for this context, ``unlimited()`` if none is set."""
    config = _current_config.get()
    return config if config is not None else ValidationConfig.unlimited()


@contextmanager
def use_config(config: ValidationConfig) -> Iterator[ValidationConfig]:
    """Make ``config`` the ambient config for the duration of the block."""
    token = _current_config.set(config)
    try:
        yield config
    finally:
        _current_config.reset(token)


def resolve_config(config: ValidationConfig | None) -> ValidationConfig:
    """An explicit config wins over the ambient one."""
    return config if config is not None else current_config()
