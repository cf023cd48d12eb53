"""Receiver secret configuration, built once at startup and read-only afterwards.

Secrets are addressed with host-configuration style keys::

    WebHooks:{receiver_name}:SecretKey:{receiver_id}

where an empty receiver id selects the ``default`` entry. Lookups are
case-insensitive on every segment.
"""

import json
import logging
from collections.abc import Iterable, Mapping
from pathlib import Path
from types import MappingProxyType
from typing import Any

from crisp_webhooks.config import Settings
from crisp_webhooks.errors.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_RECEIVER_ID = "default"
SECRET_KEY_MAX_LENGTH = 128
_SECTION = "webhooks"
_SECRET_KEY = "secretkey"


def secret_key_name(receiver_name: str, receiver_id: str | None) -> str:
    """Return the configuration key holding the secret for a receiver id."""
    return f"WebHooks:{receiver_name}:SecretKey:{receiver_id or DEFAULT_RECEIVER_ID}"


def flatten_config(tree: Mapping[str, Any], prefix: str = "") -> dict[str, str]:
    """Flatten a nested mapping into ``a:b:c`` keys the way host configuration does."""
    flat: dict[str, str] = {}
    for name, value in tree.items():
        path = f"{prefix}:{name}" if prefix else str(name)
        if isinstance(value, Mapping):
            flat.update(flatten_config(value, path))
        elif isinstance(value, list):
            flat.update(flatten_config({str(i): item for i, item in enumerate(value)}, path))
        elif value is not None:
            flat[path] = value if isinstance(value, str) else json.dumps(value)
    return flat


def load_config_file(path: str | Path) -> dict[str, str]:
    """Read a JSON configuration file and return its flattened entries."""
    path = Path(path)
    try:
        tree = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise ConfigurationError(f"Configuration file '{path}' does not exist") from exc
    except json.JSONDecodeError as exc:
        raise ConfigurationError(f"Configuration file '{path}' is not valid JSON: {exc}") from exc

    if not isinstance(tree, dict):
        raise ConfigurationError(f"Configuration file '{path}' must contain a JSON object")
    return flatten_config(tree)


class ReceiverConfiguration:
    """Immutable receiver id -> secret lookup.

    Never logs secret values; only configuration key names.
    """

    def __init__(self, entries: Mapping[str, str] | None = None) -> None:
        normalized = {name.lower(): value for name, value in (entries or {}).items()}
        self._entries: Mapping[str, str] = MappingProxyType(normalized)

    @classmethod
    def from_mapping(cls, entries: Mapping[str, str]) -> "ReceiverConfiguration":
        """Build from flat ``WebHooks:...`` keys."""
        return cls(entries)

    @classmethod
    def from_secret_keys(cls, secret_keys: Mapping[str, Mapping[str, str]]) -> "ReceiverConfiguration":
        """Build from ``{receiver_name: {receiver_id: secret}}``."""
        return cls(_secret_key_entries(secret_keys))

    @classmethod
    def from_settings(cls, settings: Settings) -> "ReceiverConfiguration":
        """Merge the optional config file with ``secret_keys``; the latter wins."""
        entries: dict[str, str] = {}
        if settings.config_file:
            entries.update({name.lower(): value for name, value in load_config_file(settings.config_file).items()})
            logger.info("Loaded receiver configuration from %s", settings.config_file)
        entries.update({name.lower(): value for name, value in _secret_key_entries(settings.secret_keys).items()})
        return cls(entries)

    @property
    def entries(self) -> Mapping[str, str]:
        return self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def resolve_secret(self, receiver_name: str, receiver_id: str | None, min_length: int) -> str | None:
        """Return the configured secret, or None when missing or outside ``[min_length, 128]``."""
        if not receiver_name:
            raise ValueError("receiver_name is required")
        if min_length < 1 or min_length > SECRET_KEY_MAX_LENGTH:
            raise ValueError(f"min_length must be between 1 and {SECRET_KEY_MAX_LENGTH}")

        key_name = secret_key_name(receiver_name, receiver_id)
        secret = self._entries.get(key_name.lower())
        if secret is None or not min_length <= len(secret) <= SECRET_KEY_MAX_LENGTH:
            logger.error(
                "Could not find a valid configuration for the '%s' WebHook receiver, instance '%s'. "
                "To receive WebHooks, the '%s' configuration value must be between %d and %d characters long.",
                receiver_name,
                receiver_id or DEFAULT_RECEIVER_ID,
                key_name,
                min_length,
                SECRET_KEY_MAX_LENGTH,
            )
            return None
        return secret

    def receiver_ids(self, receiver_name: str) -> list[str]:
        """List the ids configured for a receiver, ``default`` included."""
        prefix = f"{_SECTION}:{receiver_name.lower()}:{_SECRET_KEY}:"
        return sorted(name[len(prefix):] for name in self._entries if name.startswith(prefix))

    def invalid_entries(self, receiver_name: str, min_length: int) -> list[str]:
        """Return configuration keys whose secret length is out of range."""
        invalid = []
        for receiver_id in self.receiver_ids(receiver_name):
            secret = self._entries[secret_key_name(receiver_name, receiver_id).lower()]
            if not min_length <= len(secret) <= SECRET_KEY_MAX_LENGTH:
                invalid.append(secret_key_name(receiver_name, receiver_id))
        return invalid

    def report(self, receiver_names: Iterable[str], min_length: int) -> None:
        """Log configured ids and unusable entries once at startup."""
        for receiver_name in receiver_names:
            ids = self.receiver_ids(receiver_name)
            if not ids:
                logger.warning("No secrets configured for the '%s' WebHook receiver", receiver_name)
                continue
            logger.info("Configured '%s' WebHook receiver ids: %s", receiver_name, ", ".join(ids))
            for key_name in self.invalid_entries(receiver_name, min_length):
                logger.warning(
                    "'%s' must be between %d and %d characters long; requests for it will be rejected",
                    key_name,
                    min_length,
                    SECRET_KEY_MAX_LENGTH,
                )


def _secret_key_entries(secret_keys: Mapping[str, Mapping[str, str]]) -> dict[str, str]:
    return {
        secret_key_name(receiver_name, receiver_id): secret
        for receiver_name, ids in secret_keys.items()
        for receiver_id, secret in ids.items()
    }
