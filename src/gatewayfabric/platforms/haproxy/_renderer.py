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

"""HAProxyRenderer: reverse proxy configuration for the gateway.

One shared frontend binds the proxy listener ports and routes by path
prefix (``/vm7`` -> backend ``node_7``, prefix stripped).  Unless port
forwarding is disabled, every pool also gets its own frontend on the
node's assigned port.  Backends list the node's servers in network
priority order (mesh before overlay).
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import gatewayfabric
from gatewayfabric.core import Network
from gatewayfabric.driver._jinja2_template import Jinja2Template

if TYPE_CHECKING:
    from gatewayfabric.compiler import ResolveResult, UpstreamEntry


def server_address(entry: UpstreamEntry) -> str:
    if entry.target_network is Network.OVERLAY:
        return f'[{entry.target_address}]:{entry.target_port}'
    return f'{entry.target_address}:{entry.target_port}'


class HAProxyRenderer:
    """Renders upstream pools, port bindings and path routes as haproxy.cfg."""

    platform = 'haproxy'
    template_name = 'haproxy.cfg.j2'

    def __init__(self, template_dir: Path | None = None) -> None:
        self.template_dir = template_dir

    def render(self, result: ResolveResult) -> str:
        snapshot = result.snapshot
        rule_set = result.rule_set

        pools = [
            {
                'pool_id': pool.pool_id,
                'servers': [
                    {'name': str(e.target_network), 'address': server_address(e)}
                    for e in pool.entries
                ],
            }
            for pool in rule_set.upstream_pools
        ]
        routes = [
            {
                'acl': f'path_{route.pool_id}',
                'path': route.path,
                'pool_id': route.pool_id,
            }
            for route in rule_set.path_routes
        ]

        context = {
            'version': gatewayfabric.__version__,
            'gateway_id': snapshot.gateway.id,
            'public_address': snapshot.gateway.public_address,
            'network_mode': str(snapshot.network_mode),
            'path_only': snapshot.port_forwarding_disabled,
            'warnings': [w.message for w in result.warnings],
            'listener_ports': rule_set.listener_ports,
            'routes': routes,
            'bindings': rule_set.port_bindings,
            'pools': pools,
        }
        template = Jinja2Template(self.platform, self.template_name, self.template_dir)
        return template.render(context)
