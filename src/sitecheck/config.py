"""
Run configuration resolved from the environment and command-line overrides.
"""
from __future__ import annotations

import os
from dataclasses import dataclass, fields, replace
from typing import Mapping, Optional, Tuple

DEFAULT_BASE_URL = "https://healed-by-spirit-e4h44qfd2-airful-labs.vercel.app"
DEFAULT_TIMEOUT_S = 15.0
DEFAULT_USER_AGENT = "sitecheck/1.0"
DEFAULT_MAX_WORKERS = 8


@dataclass(slots=True, frozen=True)
class CheckConfig:
    """Settings shared by the crawler, the page harness and the browser source."""
    base_url: str = DEFAULT_BASE_URL
    timeout_s: float = DEFAULT_TIMEOUT_S
    user_agent: str = DEFAULT_USER_AGENT
    max_workers: int = DEFAULT_MAX_WORKERS
    viewport: Tuple[int, int] = (1280, 720)
    navigation_timeout_s: float = 30.0

    def __post_init__(self) -> None:
        object.__setattr__(self, "base_url", self.base_url.rstrip("/"))
        if self.max_workers < 1:
            raise ValueError(f"max_workers must be positive, got {self.max_workers}")
        if self.timeout_s <= 0:
            raise ValueError(f"timeout_s must be positive, got {self.timeout_s}")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None, **overrides) -> "CheckConfig":
        """
        Build a config from BASE_URL, SITECHECK_TIMEOUT and SITECHECK_WORKERS.

        Keyword overrides set to None are ignored so argparse namespaces can
        be passed straight through.
        """
        env = os.environ if environ is None else environ
        config = cls(
            base_url=env.get("BASE_URL") or DEFAULT_BASE_URL,
            timeout_s=_env_number(env, "SITECHECK_TIMEOUT", float, DEFAULT_TIMEOUT_S),
            max_workers=_env_number(env, "SITECHECK_WORKERS", int, DEFAULT_MAX_WORKERS),
        )
        known = {f.name for f in fields(cls)}
        unknown = set(overrides) - known
        if unknown:
            raise TypeError(f"Unknown config fields: {', '.join(sorted(unknown))}")
        return replace(config, **{k: v for k, v in overrides.items() if v is not None})


def _env_number(env: Mapping[str, str], name: str, kind, default):
    raw = env.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return kind(raw)
    except ValueError:
        raise ValueError(f"Invalid value for {name}: {raw!r}") from None
