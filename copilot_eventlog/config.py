# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Typed destination configuration and the transport factory.

Destinations are described by an ``AdapterConfig_Destination`` whose
``destination_type`` selects the driver and whose ``driver`` carries the
driver-specific settings:

    >>> config = AdapterConfig_Destination(
    ...     destination_type="file",
    ...     driver=DriverConfig_Destination_File(out_file="/var/log/app.log", level="INFO"),
    ... )
    >>> registry.add_destination("file", config)

The same configuration can be read from environment variables, see
:func:`load_destination_configs` and :func:`configure_from_env`.
"""

import logging
import os
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping, Optional, Union

from .io_transport import Colors, create_console_transport, create_file_transport
from .registry import DEFAULT_DESTINATION, DestinationRegistry
from .sentry_transport import RemoteTransport, create_sentry_transport
from .severity import parse_severity
from .silent_sink import SilentSink
from .transport import LeveledTransport, Transport

logger = logging.getLogger(__name__)

ENV_PREFIX = "EVENTLOG"

_TRUTHY = frozenset({"true", "1", "yes", "on"})
_FALSY = frozenset({"false", "0", "no", "off"})


@dataclass
class DriverConfig_Destination_Console:
    level: str = "DEBUG"
    raw: bool = False
    colors: bool = True


@dataclass
class DriverConfig_Destination_File:
    out_file: str = ""
    err_file: Optional[str] = None
    level: str = "DEBUG"
    raw: bool = False


@dataclass
class DriverConfig_Destination_Sentry:
    dsn: Optional[str] = None
    level: str = "WARN"
    environment: Optional[str] = None
    release: Optional[str] = None


@dataclass
class DriverConfig_Destination_Silent:
    level: str = "DEBUG"


_DriverConfig = Union[
    DriverConfig_Destination_Console,
    DriverConfig_Destination_File,
    DriverConfig_Destination_Sentry,
    DriverConfig_Destination_Silent,
]


@dataclass
class AdapterConfig_Destination:
    """Configuration for a single destination.

    Attributes:
        destination_type: Driver discriminant ("console", "file", "sentry", "silent")
        driver: Driver-specific configuration
    """

    destination_type: str
    driver: _DriverConfig = field(default_factory=DriverConfig_Destination_Console)


class EnvConfigProvider:
    """Configuration provider that reads from environment variables."""

    def __init__(self, environ: Optional[Mapping[str, str]] = None):
        self._environ = environ if environ is not None else os.environ

    def get(self, key: str, default: Any = None) -> Any:
        return self._environ.get(key, default)

    def get_bool(self, key: str, default: bool = False) -> bool:
        """Interpret a flag variable; unrecognized values fall back to ``default``."""
        value = str(self._environ.get(key, "")).strip().lower()
        if value in _TRUTHY:
            return True
        if value in _FALSY:
            return False
        return default


def _build_console(config: _DriverConfig) -> Transport:
    if not isinstance(config, DriverConfig_Destination_Console):
        raise TypeError("driver config must be DriverConfig_Destination_Console")
    return create_console_transport(
        min_level=config.level,
        colors=None if config.colors else Colors(),
        raw=config.raw,
    )


def _build_file(config: _DriverConfig) -> Transport:
    if not isinstance(config, DriverConfig_Destination_File):
        raise TypeError("driver config must be DriverConfig_Destination_File")
    if not config.out_file:
        raise ValueError("file destination requires out_file")
    return create_file_transport(
        config.out_file,
        config.err_file,
        min_level=config.level,
        raw=config.raw,
    )


def _build_sentry(config: _DriverConfig) -> Transport:
    if not isinstance(config, DriverConfig_Destination_Sentry):
        raise TypeError("driver config must be DriverConfig_Destination_Sentry")
    return create_sentry_transport(
        dsn=config.dsn,
        min_level=config.level,
        environment=config.environment,
        release=config.release,
    )


def _build_silent(config: _DriverConfig) -> Transport:
    if not isinstance(config, DriverConfig_Destination_Silent):
        raise TypeError("driver config must be DriverConfig_Destination_Silent")
    return RemoteTransport(SilentSink(), min_level=config.level)


_BUILDERS: dict[str, Callable[[_DriverConfig], Transport]] = {
    "console": _build_console,
    "file": _build_file,
    "sentry": _build_sentry,
    "silent": _build_silent,
}


def create_transport(config: AdapterConfig_Destination) -> Transport:
    """Create a configured transport from typed configuration.

    Args:
        config: Typed destination configuration.

    Returns:
        Transport instance.

    Raises:
        ValueError: If config is missing or destination_type is not recognized.
        TransportConfigurationError: If the transport cannot be opened or configured.
    """
    if config is None:
        raise ValueError("destination config is required")

    destination_type = str(config.destination_type).lower()
    builder = _BUILDERS.get(destination_type)
    if builder is None:
        raise ValueError(
            f"Unknown destination driver: {destination_type}. "
            f"Supported drivers: {', '.join(sorted(_BUILDERS))}"
        )
    return builder(config.driver)


def _env_key(name: str, setting: str) -> str:
    return f"{ENV_PREFIX}_{name.upper().replace('-', '_')}_{setting}"


def load_destination_config(
    name: str,
    provider: Optional[EnvConfigProvider] = None,
) -> AdapterConfig_Destination:
    """Read one destination's configuration from the environment.

    ``EVENTLOG_<NAME>_TYPE`` selects the driver and defaults to the
    destination name itself; the remaining ``EVENTLOG_<NAME>_*`` variables
    fill the driver config.

    Args:
        name: Destination name
        provider: Environment provider (default: os.environ)

    Returns:
        Typed destination configuration

    Raises:
        ValueError: If the destination type is not recognized
    """
    provider = provider or EnvConfigProvider()
    destination_type = str(provider.get(_env_key(name, "TYPE"), name)).lower()

    def setting(key: str, default: Any = None) -> Any:
        return provider.get(_env_key(name, key), default)

    driver: _DriverConfig
    if destination_type == "console":
        driver = DriverConfig_Destination_Console(
            level=setting("LEVEL", "DEBUG"),
            raw=provider.get_bool(_env_key(name, "RAW")),
            colors=provider.get_bool(_env_key(name, "COLORS"), True),
        )
    elif destination_type == "file":
        driver = DriverConfig_Destination_File(
            out_file=setting("OUT_FILE", ""),
            err_file=setting("ERR_FILE"),
            level=setting("LEVEL", "DEBUG"),
            raw=provider.get_bool(_env_key(name, "RAW")),
        )
    elif destination_type == "sentry":
        driver = DriverConfig_Destination_Sentry(
            dsn=setting("DSN") or provider.get("SENTRY_DSN"),
            level=setting("LEVEL", "WARN"),
            environment=setting("ENVIRONMENT") or provider.get("SENTRY_ENVIRONMENT"),
            release=setting("RELEASE") or provider.get("SENTRY_RELEASE"),
        )
    elif destination_type == "silent":
        driver = DriverConfig_Destination_Silent(level=setting("LEVEL", "DEBUG"))
    else:
        raise ValueError(
            f"Unknown destination type: {destination_type}. "
            f"Must be one of: console, file, sentry, silent"
        )
    return AdapterConfig_Destination(destination_type=destination_type, driver=driver)


def load_destination_configs(
    environ: Optional[Mapping[str, str]] = None,
) -> dict[str, AdapterConfig_Destination]:
    """Read every destination listed in ``EVENTLOG_DESTINATIONS``.

    Returns:
        Mapping of destination name to configuration, in listed order
    """
    provider = EnvConfigProvider(environ)
    listed = provider.get(f"{ENV_PREFIX}_DESTINATIONS", "") or ""
    names = [item.strip() for item in listed.split(",") if item.strip()]
    return {name: load_destination_config(name, provider) for name in names}


def configure_from_env(
    registry: DestinationRegistry,
    environ: Optional[Mapping[str, str]] = None,
) -> list[str]:
    """Add environment-configured destinations to a registry.

    ``EVENTLOG_CONSOLE_LEVEL`` adjusts the default console destination when
    it is present and not listed in ``EVENTLOG_DESTINATIONS``.

    Returns:
        Names of the destinations that were added

    Raises:
        DuplicateDestinationError: If a listed name is already registered
        TransportConfigurationError: If a transport cannot be built
    """
    provider = EnvConfigProvider(environ)
    console_level = provider.get(_env_key(DEFAULT_DESTINATION, "LEVEL"))
    configs = load_destination_configs(environ)

    if console_level and DEFAULT_DESTINATION not in configs:
        transport = registry.get(DEFAULT_DESTINATION)
        if isinstance(transport, LeveledTransport) and transport.min_level != parse_severity(console_level):
            registry.set_level(DEFAULT_DESTINATION, console_level)

    added = []
    for name, config in configs.items():
        registry.add_destination(name, config)
        added.append(name)
    logger.debug(f"Configured log destinations from environment: {added}")
    return added


__all__ = [
    "AdapterConfig_Destination",
    "DriverConfig_Destination_Console",
    "DriverConfig_Destination_File",
    "DriverConfig_Destination_Sentry",
    "DriverConfig_Destination_Silent",
    "EnvConfigProvider",
    "configure_from_env",
    "create_transport",
    "load_destination_config",
    "load_destination_configs",
]
