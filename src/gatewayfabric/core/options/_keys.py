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

"""Canonical option and record key definitions using StrEnum.

The same keys are used in topology YAML files, in the overrides produced
by :class:`GatewaySettings` and as :class:`ResolverConfig` field names, so
a mapping keyed by :class:`GatewayOption` can be passed to the config
constructor directly.

Example:
    from gatewayfabric.core.options import GatewayOption

    overrides[GatewayOption.NETWORK_MODE] = 'both'
"""

from enum import StrEnum


class GatewayOption(StrEnum):
    """Resolver-wide options (operator modes and tunables)."""

    # Operator modes
    GATEWAY_MODE = 'gateway_mode'
    NETWORK_MODE = 'network_mode'
    PORT_FORWARDING_DISABLED = 'port_forwarding_disabled'

    # Port layout
    BASE_PORT = 'base_port'
    SERVICE_PORT = 'service_port'
    PROXY_LISTENER_PORTS = 'proxy_listener_ports'
    PORT_STRATEGY = 'port_strategy'

    # Reverse proxy path routing
    PATH_PREFIX = 'path_prefix'

    # Escalation
    UNREACHABLE_POLICY = 'unreachable_policy'


class NodeKey(StrEnum):
    """Keys of a raw node record."""

    ID = 'id'
    ROLE = 'role'
    PUBLIC_ADDRESS = 'public_address'
    MESH_ADDRESS = 'mesh_address'
    OVERLAY_ADDRESS = 'overlay_address'


# Names used by the Ansible inventory and group_vars of the original
# deployment.
OPTION_ALIASES: dict[str, GatewayOption] = {
    'gateway_type': GatewayOption.GATEWAY_MODE,
    'disable_port_forwarding': GatewayOption.PORT_FORWARDING_DISABLED,
    'proxy_ports': GatewayOption.PROXY_LISTENER_PORTS,
}

NODE_KEY_ALIASES: dict[str, NodeKey] = {
    'public_ip': NodeKey.PUBLIC_ADDRESS,
    'wireguard_ip': NodeKey.MESH_ADDRESS,
    'mycelium_ip': NodeKey.OVERLAY_ADDRESS,
}


def canonical_option(key: str) -> GatewayOption | None:
    """Map a (possibly aliased) option name onto its GatewayOption."""
    key = key.strip().lower()
    if key in OPTION_ALIASES:
        return OPTION_ALIASES[key]
    try:
        return GatewayOption(key)
    except ValueError:
        return None
