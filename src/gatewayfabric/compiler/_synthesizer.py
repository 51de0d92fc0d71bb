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

"""Rule Synthesizer: turn port assignments and reachability into rules.

DirectForward
    One :class:`ForwardingRule` per (node, planned network).

ReverseProxy
    One :class:`UpstreamPool` per reachable node holding its planned
    networks in priority order, one :class:`PathRoute` per pool and, unless
    port forwarding is disabled, one :class:`PortBinding` exposing the
    node's assigned port on the proxy ("path-only access" otherwise).

The firewall allow-list is derived from the result: one ``tcp`` entry per
distinct exposed port.  Every exposed port has exactly one allow entry and
every allow entry is backed by an exposed port; :func:`check_pairing`
verifies this before a rule set leaves the synthesizer.
"""

from __future__ import annotations

from collections.abc import Mapping

from gatewayfabric.core import (
    ConfigurationContradictionError,
    GatewayMode,
    ResolverConfig,
    ResolverError,
)

from ._base import BaseCompiler
from ._rules import (
    FirewallAllowEntry,
    ForwardingRule,
    PathRoute,
    PlannedEntry,
    PortBinding,
    RuleSet,
    UpstreamEntry,
    UpstreamPool,
    safe_name,
)

PROTOCOL_TCP = 'tcp'
SOURCE_ANY = 'any'


def check_modes(config: ResolverConfig) -> None:
    """Raise ConfigurationContradictionError for mutually exclusive settings."""
    if (
        config.gateway_mode is GatewayMode.DIRECT_FORWARD
        and config.port_forwarding_disabled
    ):
        raise ConfigurationContradictionError(
            'gateway mode direct-forward cannot be combined with '
            'disabled port forwarding; use reverse-proxy for path-only access'
        )


def check_pairing(rule_set: RuleSet) -> None:
    """Raise ResolverError unless allow entries and exposed ports match one to one."""
    exposed = rule_set.exposed_ports()
    allowed = [e.port for e in rule_set.allow_list]
    duplicates = sorted({p for p in allowed if allowed.count(p) > 1})
    unguarded = sorted(exposed - set(allowed))
    orphaned = sorted(set(allowed) - exposed)
    problems = []
    if duplicates:
        problems.append(f'duplicate allow entries for ports {duplicates}')
    if unguarded:
        problems.append(f'no allow entry for exposed ports {unguarded}')
    if orphaned:
        problems.append(f'allow entries without backing rule for ports {orphaned}')
    if problems:
        raise ResolverError('; '.join(problems))


class RuleSynthesizer(BaseCompiler):
    """Builds the RuleSet for one snapshot configuration."""

    def __init__(self, config: ResolverConfig) -> None:
        super().__init__()
        self.config: ResolverConfig = config

    def synthesize(
        self,
        port_assignments: Mapping[str, int],
        reachability: Mapping[str, tuple[PlannedEntry, ...]],
    ) -> RuleSet:
        """Return the rule set; *reachability* order drives output order."""
        check_modes(self.config)
        if self.config.gateway_mode is GatewayMode.DIRECT_FORWARD:
            rule_set = self._direct_forward(port_assignments, reachability)
        else:
            rule_set = self._reverse_proxy(port_assignments, reachability)

        check_pairing(rule_set)
        self.info(
            f'Synthesized {len(rule_set.forwarding_rules)} forwarding rule(s), '
            f'{len(rule_set.upstream_pools)} upstream pool(s), '
            f'{len(rule_set.allow_list)} allow entr'
            f'{"y" if len(rule_set.allow_list) == 1 else "ies"}'
        )
        return rule_set

    def _direct_forward(self, port_assignments, reachability) -> RuleSet:
        rules = []
        for node_id, entries in reachability.items():
            for entry in entries:
                rules.append(
                    ForwardingRule(
                        public_port=port_assignments[node_id],
                        target_address=entry.address,
                        target_network=entry.network,
                        target_port=self.config.service_port,
                        node_id=node_id,
                    )
                )
        allow = self._allow_list([(r.public_port, 'forward') for r in rules])
        return RuleSet(forwarding_rules=tuple(rules), allow_list=allow)

    def _reverse_proxy(self, port_assignments, reachability) -> RuleSet:
        pools = []
        bindings = []
        routes = []
        for node_id, entries in reachability.items():
            if not entries:
                continue
            name = safe_name(node_id)
            pool_id = f'node_{name}'
            pools.append(
                UpstreamPool(
                    pool_id=pool_id,
                    node_id=node_id,
                    entries=tuple(
                        UpstreamEntry(e.address, e.network, self.config.service_port)
                        for e in entries
                    ),
                )
            )
            routes.append(PathRoute(f'{self.config.path_prefix}{name}', pool_id))
            if not self.config.port_forwarding_disabled:
                bindings.append(PortBinding(port_assignments[node_id], pool_id))

        listeners = tuple(dict.fromkeys(self.config.proxy_listener_ports))
        exposures = [(p, 'proxy-listener') for p in listeners]
        exposures.extend((b.public_port, 'proxy-port') for b in bindings)
        return RuleSet(
            upstream_pools=tuple(pools),
            port_bindings=tuple(bindings),
            path_routes=tuple(routes),
            listener_ports=listeners,
            allow_list=self._allow_list(exposures),
        )

    @staticmethod
    def _allow_list(exposures: list[tuple[int, str]]) -> tuple[FirewallAllowEntry, ...]:
        purposes: dict[int, str] = {}
        for port, purpose in exposures:
            purposes.setdefault(port, purpose)
        return tuple(
            FirewallAllowEntry(PROTOCOL_TCP, port, SOURCE_ANY, purposes[port])
            for port in sorted(purposes)
        )
