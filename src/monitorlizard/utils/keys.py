"""Nostr key loading for the monitor's signing identity.

The private key is read from an environment variable (nsec1 bech32 or
64-char hex) and never from the configuration file.

Examples:
    ```python
    import os

    os.environ["PRIVATE_KEY"] = "nsec1..."  # pragma: allowlist secret
    keys = load_keys_from_env("PRIVATE_KEY")
    print(keys.public_key().to_hex())
    ```
"""

from __future__ import annotations

import os
from typing import Any

from nostr_sdk import Keys
from pydantic import BaseModel, Field, model_validator


ENV_PRIVATE_KEY = "PRIVATE_KEY"  # pragma: allowlist secret


def load_keys_from_env(env_var: str) -> Keys:
    """Load Nostr keys from an environment variable.

    Raises:
        ValueError: If the environment variable is not set, is empty, or
            does not hold a valid private key.
    """
    value = os.getenv(env_var)

    if not value:
        raise ValueError(
            f"{env_var} environment variable is required. Generate one with: openssl rand -hex 32"
        )

    try:
        return Keys.parse(value)
    except Exception as e:  # Intentionally broad: nostr_sdk raises its own FFI error types
        raise ValueError(f"{env_var} does not hold a valid private key") from e


class KeysConfig(BaseModel):
    """Pydantic model that loads the monitor's keys from the environment.

    Attributes:
        keys_env: Environment variable holding the private key.
        keys: Loaded ``nostr_sdk.Keys``; populated during validation.

    Warning:
        ``keys`` holds a live private key. Never serialize or log this model.
    """

    model_config = {"arbitrary_types_allowed": True, "frozen": True}

    keys_env: str = Field(
        default=ENV_PRIVATE_KEY,
        min_length=1,
        description="Environment variable name for private key",
    )
    keys: Keys = Field(description="Keys loaded from keys_env (required)")

    @model_validator(mode="before")
    @classmethod
    def _load_keys_from_env(cls, data: Any) -> Any:
        if isinstance(data, dict) and "keys" not in data:
            data = {**data, "keys": load_keys_from_env(data.get("keys_env", ENV_PRIVATE_KEY))}
        return data

    @property
    def pubkey(self) -> str:
        """Hex public key derived from the loaded keys."""
        return self.keys.public_key().to_hex()
