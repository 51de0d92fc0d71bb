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

"""Typed option defaults.

Single source of truth for the default value of every
:class:`~gatewayfabric.core.options.GatewayOption`.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class ResolverDefaults:
    """Default values for resolver options.

    ``base_port`` keeps the allocator's range away from the well-known
    ports 22/80/443; the first private node gets ``base_port + 1``.
    """

    gateway_mode: str = 'direct-forward'
    network_mode: str = 'mesh-only'
    port_forwarding_disabled: bool = False

    base_port: int = 8000
    service_port: int = 80
    proxy_listener_ports: tuple[int, ...] = (80, 443)
    port_strategy: str = 'sequential'

    path_prefix: str = '/vm'

    unreachable_policy: str = 'warn'


RESOLVER_DEFAULTS = ResolverDefaults()
