import logging
import os
import tomllib
from dataclasses import dataclass, replace
from typing import Any, Dict, Mapping, Optional

from .exceptions import DictObjError

ENV_MAX_RECURSION = "DICTOBJ_MAX_RECURSION"
ENV_LOG_LEVEL = "DICTOBJ_LOG_LEVEL"

_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class RuntimeConfig:
    max_recursion: int = 1000
    log_level: str = "WARNING"

    def with_overrides(self, **overrides: Any) -> "RuntimeConfig":
        values = {k: v for k, v in overrides.items() if v is not None}
        return _validated(replace(self, **values))

    @property
    def logging_level(self) -> int:
        return getattr(logging, self.log_level)


def _validated(config: RuntimeConfig) -> RuntimeConfig:
    try:
        depth = int(config.max_recursion)
    except (TypeError, ValueError):
        raise DictObjError(
            f"Config Error: max_recursion must be an integer, got {config.max_recursion!r}"
        ) from None
    if depth < 1:
        raise DictObjError(f"Config Error: max_recursion must be positive, got {depth}")
    level = str(config.log_level).upper()
    if level not in _LEVELS:
        raise DictObjError(f"Config Error: unknown log level {config.log_level!r}")
    return replace(config, max_recursion=depth, log_level=level)


def _read_config_file(path: str) -> Dict[str, Any]:
    if not os.path.isfile(path):
        raise DictObjError(f"Config Error: {path} not found")
    with open(path, "rb") as f:
        try:
            document = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise DictObjError(f"Config Error: {path}: {e}") from e
    runtime = document.get("runtime", {})
    if not isinstance(runtime, dict):
        raise DictObjError("Config Error: [runtime] must be a table")
    unknown = sorted(k for k in runtime if k not in ("max_recursion", "log_level"))
    if unknown:
        raise DictObjError(f"Config Error: unknown [runtime] keys: {', '.join(unknown)}")
    return runtime


def load_config(
    path: Optional[str] = None,
    environ: Optional[Mapping[str, str]] = None,
    **overrides: Any,
) -> RuntimeConfig:
    """Resolve settings: defaults, then ``path``, then environment, then ``overrides``."""
    environ = os.environ if environ is None else environ
    config = RuntimeConfig()
    if path:
        config = config.with_overrides(**_read_config_file(path))
    config = config.with_overrides(
        max_recursion=environ.get(ENV_MAX_RECURSION) or None,
        log_level=environ.get(ENV_LOG_LEVEL) or None,
    )
    return config.with_overrides(**overrides)
