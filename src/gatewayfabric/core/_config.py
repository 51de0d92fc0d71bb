# Copyright (C) 2026 Linuxfabrik <info@linuxfabrik.ch>
#
# This program is free software; you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation; either version 2 of the License, or
# (at your option) any later version.
#
# On Debian systems, the complete text of the GNU General Public License
# version 2 can be found in /usr/share/common-licenses/GPL-2.
#
# SPDX-License-Identifier: GPL-2.0-or-later

"""Layered construction of :class:`ResolverConfig`.

Layers are merged lowest priority first.  The CLI uses the order
environment/``.env`` < topology file < command line flags, on top of the
built-in defaults.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping

from ._errors import TopologyError
from ._model import ResolverConfig
from ._types import GatewayMode, NetworkMode, PortStrategy, UnreachablePolicy
from .options import GatewayOption, canonical_option, parse_port_list

logger = logging.getLogger(__name__)

_ENUM_OPTIONS = {
    GatewayOption.GATEWAY_MODE: GatewayMode,
    GatewayOption.NETWORK_MODE: NetworkMode,
    GatewayOption.PORT_STRATEGY: PortStrategy,
    GatewayOption.UNREACHABLE_POLICY: UnreachablePolicy,
}

_INT_OPTIONS = frozenset({GatewayOption.BASE_PORT, GatewayOption.SERVICE_PORT})

_TRUE = frozenset({'1', 'true', 'yes', 'on'})
_FALSE = frozenset({'0', 'false', 'no', 'off', ''})


def _coerce_bool(value) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return bool(value)
    low = str(value).strip().lower()
    if low in _TRUE:
        return True
    if low in _FALSE:
        return False
    raise ValueError(f'not a boolean: {value!r}')


def _coerce(option: GatewayOption, value):
    if option in _ENUM_OPTIONS:
        return _ENUM_OPTIONS[option](value)
    if option in _INT_OPTIONS:
        if isinstance(value, bool):
            raise ValueError(f'not an integer: {value!r}')
        return int(value)
    if option is GatewayOption.PORT_FORWARDING_DISABLED:
        return _coerce_bool(value)
    if option is GatewayOption.PROXY_LISTENER_PORTS:
        return parse_port_list(value)
    return str(value)


def _check_ranges(values: dict[GatewayOption, object], problems: list[str]) -> None:
    base_port = values.get(GatewayOption.BASE_PORT)
    if base_port is not None and not 1024 <= base_port < 65535:
        problems.append(
            f'base_port {base_port} must be within 1024..65534 '
            f'to stay clear of well-known ports'
        )
    service_port = values.get(GatewayOption.SERVICE_PORT)
    if service_port is not None and not 1 <= service_port <= 65535:
        problems.append(f'service_port {service_port} is not a valid port')
    if values.get(GatewayOption.PROXY_LISTENER_PORTS, None) == ():
        problems.append('proxy_listener_ports must list at least one port')
    for port in values.get(GatewayOption.PROXY_LISTENER_PORTS, ()):
        if not 1 <= port <= 65535:
            problems.append(f'proxy listener port {port} is not a valid port')
    prefix = values.get(GatewayOption.PATH_PREFIX)
    if prefix is not None and not prefix.startswith('/'):
        problems.append(f'path_prefix {prefix!r} must start with "/"')


def build_config(*layers: Mapping[str, object] | None) -> ResolverConfig:
    """Merge option *layers* (lowest priority first) into a ResolverConfig.

    Unknown keys are logged and skipped, ``None`` values never override a
    lower layer.  Every invalid value is collected and reported in a single
    :class:`TopologyError`.
    """
    merged: dict[GatewayOption, object] = {}
    for layer in layers:
        if not layer:
            continue
        for key, value in layer.items():
            option = canonical_option(str(key))
            if option is None:
                logger.warning('Ignoring unknown option %r', key)
                continue
            if value is None:
                continue
            merged[option] = value

    problems: list[str] = []
    values: dict[GatewayOption, object] = {}
    for option, value in merged.items():
        try:
            values[option] = _coerce(option, value)
        except (TypeError, ValueError):
            problems.append(f'invalid value {value!r} for option {option}')
    _check_ranges(values, problems)
    if problems:
        raise TopologyError(problems)

    config = ResolverConfig(**{str(k): v for k, v in values.items()})
    logger.debug('Resolver configuration: %s', config)
    return config
