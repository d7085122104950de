"""Settings resolution for the api-call runtime.

Every source is a pydantic-settings source. Precedence, highest first:
1) CLI params, passed as init values
2) ``API_CALL_*`` environment variables, nested with ``__``
   (``API_CALL_HTTP__TIMEOUT_SECONDS=2.5`` -> ``http.timeout_seconds``)
3) the YAML config file, ``~/.config/api-call/api-call.yaml`` unless overridden
4) model defaults
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Mapping

from .models import ACTIVE_CONFIG_PATH, DEFAULT_CONFIG_PATH, ApiCallSettings


def load_settings(
    *,
    cli_params: Mapping[str, Any] | None = None,
    config_path: str | Path | None = None,
) -> ApiCallSettings:
    """Resolve typed settings, reading YAML from ``config_path`` when given.

    Raises ``pydantic.ValidationError`` (a ``ValueError``) for invalid values.
    """
    path = Path(config_path) if config_path is not None else DEFAULT_CONFIG_PATH
    token = ACTIVE_CONFIG_PATH.set(path)
    try:
        return ApiCallSettings(**dict(cli_params or {}))
    finally:
        ACTIVE_CONFIG_PATH.reset(token)
