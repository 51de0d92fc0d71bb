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

"""NftablesRenderer: nft ruleset for the gateway.

Generates statements like::

    tcp dport 8001 dnat to 10.1.4.2:80 comment "node 7 mesh"
    tcp dport 8001 dnat to [4f3:1b2c::1]:80 comment "node 7 overlay"
    ip daddr 10.1.4.2 tcp dport 80 masquerade

Mesh targets go to an ``ip`` NAT table and overlay targets to an ``ip6``
NAT table.  The gateway's public address is IPv4, so the ``ip6`` DNAT
rules only serve IPv6 clients that reach the gateway over IPv6 (for example
through the overlay network itself); public IPv4 traffic for a node that is
only planned on the overlay is not forwarded.

The allow-list becomes the ``allowed_tcp_ports`` set and the
``allow_input`` chain of the ``inet gatewayfabric`` table.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import gatewayfabric
from gatewayfabric.core import Network
from gatewayfabric.driver._jinja2_template import Jinja2Template

if TYPE_CHECKING:
    from gatewayfabric.compiler import ForwardingRule, ResolveResult

NAT_FAMILY = {
    Network.MESH: 'ip',
    Network.OVERLAY: 'ip6',
}


def _target(rule: ForwardingRule) -> str:
    if NAT_FAMILY[rule.target_network] == 'ip6':
        return f'[{rule.target_address}]:{rule.target_port}'
    return f'{rule.target_address}:{rule.target_port}'


def _match_target(rule: ForwardingRule) -> str:
    family = NAT_FAMILY[rule.target_network]
    return f'{family} daddr {rule.target_address} tcp dport {rule.target_port}'


class NftablesRenderer:
    """Renders forwarding rules and the allow-list as an nft script."""

    platform = 'nftables'
    template_name = 'gateway.nft.j2'

    def __init__(self, template_dir: Path | None = None) -> None:
        self.template_dir = template_dir

    def dnat_statement(self, rule: ForwardingRule) -> str:
        return (
            f'tcp dport {rule.public_port} dnat to {_target(rule)} '
            f'comment "node {rule.node_id} {rule.target_network}"'
        )

    def masquerade_statement(self, rule: ForwardingRule) -> str:
        return f'{_match_target(rule)} masquerade'

    def forward_statement(self, rule: ForwardingRule) -> str:
        return f'{_match_target(rule)} accept'

    def render(self, result: ResolveResult) -> str:
        snapshot = result.snapshot
        rule_set = result.rule_set

        nat_families = []
        for network in Network:
            rules = [r for r in rule_set.forwarding_rules if r.target_network is network]
            if not rules:
                continue
            nat_families.append(
                {
                    'name': NAT_FAMILY[network],
                    'dnat': [self.dnat_statement(r) for r in rules],
                    'masquerade': list(
                        dict.fromkeys(self.masquerade_statement(r) for r in rules)
                    ),
                }
            )

        context = {
            'version': gatewayfabric.__version__,
            'gateway_id': snapshot.gateway.id,
            'public_address': snapshot.gateway.public_address,
            'gateway_mode': str(snapshot.gateway_mode),
            'network_mode': str(snapshot.network_mode),
            'warnings': [w.message for w in result.warnings],
            'allow_ports': [e.port for e in rule_set.allow_list],
            'allow_entries': rule_set.allow_list,
            'forward_targets': list(
                dict.fromkeys(self.forward_statement(r) for r in rule_set.forwarding_rules)
            ),
            'nat_families': nat_families,
        }
        template = Jinja2Template(self.platform, self.template_name, self.template_dir)
        return template.render(context)
