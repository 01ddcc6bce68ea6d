"""Configuration container for the DAppChain client."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING

from ..constants import (
    DEFAULT_COMMIT_TIMEOUT,
    DEFAULT_NONCE_RETRIES,
    DEFAULT_NONCE_RETRY_DELAY,
)
from ..exceptions import ValidationError

if TYPE_CHECKING:  # pragma: no cover - import-time only
    from ..middleware import TxMiddleware

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class DAppChainClientConfig:
    """Aggregated configuration for the DAppChain client."""

    auto_reconnect: bool = True
    nonce_retries: int = DEFAULT_NONCE_RETRIES
    nonce_retry_delay: float = DEFAULT_NONCE_RETRY_DELAY
    commit_timeout: float = DEFAULT_COMMIT_TIMEOUT
    tx_middleware: TxMiddleware | None = None

    def __post_init__(self) -> None:
        if self.nonce_retries < 0:
            raise ValidationError(
                "nonce_retries cannot be negative", field="nonce_retries", value=self.nonce_retries
            )
        if self.nonce_retry_delay < 0:
            raise ValidationError(
                "nonce_retry_delay cannot be negative",
                field="nonce_retry_delay",
                value=self.nonce_retry_delay,
            )
        if self.commit_timeout <= 0:
            raise ValidationError(
                "commit_timeout must be positive",
                field="commit_timeout",
                value=self.commit_timeout,
            )

    @classmethod
    def from_env(
        cls,
        prefix: str = "DAPPCHAIN_",
        environ: Mapping[str, str] | None = None,
    ) -> DAppChainClientConfig:
        """Build a config from ``{prefix}AUTO_RECONNECT``, ``{prefix}NONCE_RETRIES``, etc."""

        env = os.environ if environ is None else environ

        def _get(name: str) -> str | None:
            value = env.get(prefix + name)
            return value.strip() if value is not None and value.strip() else None

        kwargs: dict[str, object] = {}

        auto_reconnect = _get("AUTO_RECONNECT")
        if auto_reconnect is not None:
            lowered = auto_reconnect.lower()
            if lowered not in _TRUE_VALUES | _FALSE_VALUES:
                raise ValidationError(
                    "Invalid boolean value", field=prefix + "AUTO_RECONNECT", value=auto_reconnect
                )
            kwargs["auto_reconnect"] = lowered in _TRUE_VALUES

        for name, key, cast in (
            ("NONCE_RETRIES", "nonce_retries", int),
            ("NONCE_RETRY_DELAY", "nonce_retry_delay", float),
            ("COMMIT_TIMEOUT", "commit_timeout", float),
        ):
            raw = _get(name)
            if raw is None:
                continue
            try:
                kwargs[key] = cast(raw)
            except ValueError as exc:
                raise ValidationError(
                    f"Invalid value for {prefix}{name}", field=prefix + name, value=raw
                ) from exc

        return cls(**kwargs)  # type: ignore[arg-type]
