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

"""InventoryRenderer: Ansible inventory for the configuration-management layer.

Keeps the host and variable names of the original deployment playbooks
(``wireguard_ip``, ``mycelium_ip``, ``vm_port``, ``vm_id``,
``gateway_type=gateway_nat|gateway_proxy``) so that existing roles can
consume the resolver output unchanged.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import gatewayfabric
from gatewayfabric.compiler import safe_name
from gatewayfabric.core import GatewayMode, NetworkMode
from gatewayfabric.driver._jinja2_template import Jinja2Template

if TYPE_CHECKING:
    from gatewayfabric.compiler import ResolveResult
    from gatewayfabric.core import NodeIdentity

GATEWAY_TYPE_NAMES = {
    GatewayMode.DIRECT_FORWARD: 'gateway_nat',
    GatewayMode.REVERSE_PROXY: 'gateway_proxy',
}

NETWORK_MODE_NAMES = {
    NetworkMode.MESH_ONLY: 'wireguard-only',
    NetworkMode.OVERLAY_ONLY: 'mycelium-only',
    NetworkMode.BOTH: 'both',
}


def _bool(value: bool) -> str:
    return 'true' if value else 'false'


def _address_vars(node: NodeIdentity) -> list[tuple[str, str]]:
    pairs = []
    if node.mesh_address:
        pairs.append(('wireguard_ip', node.mesh_address))
    if node.overlay_address:
        pairs.append(('mycelium_ip', node.overlay_address))
    return pairs


class InventoryRenderer:
    """Renders the snapshot and port assignments as an INI inventory."""

    platform = 'ansible'
    template_name = 'inventory.ini.j2'

    def __init__(self, template_dir: Path | None = None) -> None:
        self.template_dir = template_dir

    def render(self, result: ResolveResult) -> str:
        snapshot = result.snapshot
        gateway = snapshot.gateway
        ports = result.ports
        reachable = {p.node_id for p in result.rule_set.upstream_pools}
        reachable.update(r.node_id for r in result.rule_set.forwarding_rules)

        gateway_vars = _address_vars(gateway)
        if gateway.mesh_address:
            gateway_vars.append(('internal_ip', gateway.mesh_address))
        gateway_vars.extend(
            [
                ('gateway_type', GATEWAY_TYPE_NAMES[snapshot.gateway_mode]),
                ('network_mode', NETWORK_MODE_NAMES[snapshot.network_mode]),
                ('disable_port_forwarding', _bool(snapshot.port_forwarding_disabled)),
            ]
        )

        hosts = []
        internal_vars = []
        for node in snapshot.private_nodes:
            host_vars = [('ansible_host', node.mesh_address or node.overlay_address)]
            host_vars.extend(_address_vars(node))
            host_vars.extend(
                [
                    ('vm_port', str(ports[node.id])),
                    ('vm_id', node.id),
                    ('gateway_reachable', _bool(node.id in reachable)),
                ]
            )
            hosts.append({'id': safe_name(node.id), 'vars': host_vars})
            if node.overlay_address:
                internal_vars.append(
                    (f'internal_{safe_name(node.id)}_mycelium_ip', node.overlay_address)
                )

        context = {
            'version': gatewayfabric.__version__,
            'gateway': {
                'id': safe_name(gateway.id),
                'public_address': gateway.public_address,
            },
            'gateway_vars': gateway_vars,
            'hosts': hosts,
            'internal_vars': internal_vars,
        }
        template = Jinja2Template(self.platform, self.template_name, self.template_dir)
        return template.render(context)
