"""Runtime configuration: dataclass defaults with environment overrides."""

from __future__ import annotations

import os
from dataclasses import replace

from i1d3tool.exceptions import InvalidParameterError
from i1d3tool.transport.base import HidConfig

ENV_TIMEOUT = "I1D3_TIMEOUT"
ENV_DEVICE_PATH = "I1D3_DEVICE_PATH"


def load_config(timeout: float | None = None, path: str | None = None) -> HidConfig:
    """Build the transport configuration.

    Precedence: explicit arguments, then I1D3_TIMEOUT / I1D3_DEVICE_PATH,
    then the HidConfig defaults.
    """
    config = HidConfig()

    env_timeout = os.environ.get(ENV_TIMEOUT)
    if env_timeout:
        try:
            config = replace(config, timeout=float(env_timeout))
        except ValueError as exc:
            raise InvalidParameterError(
                f"{ENV_TIMEOUT} must be a number of seconds, got {env_timeout!r}"
            ) from exc

    env_path = os.environ.get(ENV_DEVICE_PATH)
    if env_path:
        config = replace(config, path=env_path)

    if timeout is not None:
        config = replace(config, timeout=timeout)
    if path is not None:
        config = replace(config, path=path)
    return config
