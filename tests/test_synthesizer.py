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

"""Rule synthesizer tests: mode exclusivity and rule/allow pairing."""

import pytest

from gatewayfabric.compiler import (
    FirewallAllowEntry,
    ForwardingRule,
    PathRoute,
    PlannedEntry,
    PortBinding,
    RuleSet,
    RuleSynthesizer,
    check_modes,
    check_pairing,
)
from gatewayfabric.core import (
    ConfigurationContradictionError,
    Network,
    ResolverConfig,
    ResolverError,
)

PORTS = {'7': 8001, '8': 8002, '9': 8003}

REACHABILITY = {
    '7': (
        PlannedEntry(Network.MESH, '10.1.3.7'),
        PlannedEntry(Network.OVERLAY, '400:1234::7'),
    ),
    '8': (PlannedEntry(Network.OVERLAY, '400:1234::8'),),
    '9': (),
}


def _synthesize(**config) -> RuleSet:
    return RuleSynthesizer(ResolverConfig(**config)).synthesize(PORTS, REACHABILITY)


class TestDirectForward:
    def test_one_rule_per_planned_network(self):
        rule_set = _synthesize()
        assert rule_set.forwarding_rules == (
            ForwardingRule(8001, '10.1.3.7', Network.MESH, 80, '7'),
            ForwardingRule(8001, '400:1234::7', Network.OVERLAY, 80, '7'),
            ForwardingRule(8002, '400:1234::8', Network.OVERLAY, 80, '8'),
        )

    def test_no_proxy_artifacts(self):
        rule_set = _synthesize()
        assert rule_set.upstream_pools == ()
        assert rule_set.port_bindings == ()
        assert rule_set.path_routes == ()
        assert rule_set.listener_ports == ()

    def test_allow_list_one_entry_per_port(self):
        rule_set = _synthesize(service_port=8080)
        assert rule_set.allow_list == (
            FirewallAllowEntry('tcp', 8001, 'any', 'forward'),
            FirewallAllowEntry('tcp', 8002, 'any', 'forward'),
        )
        assert {r.target_port for r in rule_set.forwarding_rules} == {8080}

    def test_disabled_forwarding_contradicts(self):
        with pytest.raises(ConfigurationContradictionError, match='direct-forward'):
            _synthesize(port_forwarding_disabled=True)

    def test_check_modes_accepts_proxy(self):
        check_modes(ResolverConfig(gateway_mode='reverse-proxy', port_forwarding_disabled=True))


class TestReverseProxy:
    def test_pool_per_reachable_node(self):
        rule_set = _synthesize(gateway_mode='reverse-proxy')
        assert rule_set.forwarding_rules == ()
        assert [p.pool_id for p in rule_set.upstream_pools] == ['node_7', 'node_8']
        pool = rule_set.pool('node_7')
        assert [e.target_network for e in pool.entries] == [Network.MESH, Network.OVERLAY]
        assert [e.target_port for e in pool.entries] == [80, 80]

    def test_routes_and_bindings(self):
        rule_set = _synthesize(gateway_mode='reverse-proxy')
        assert rule_set.path_routes == (
            PathRoute('/vm7', 'node_7'),
            PathRoute('/vm8', 'node_8'),
        )
        assert rule_set.port_bindings == (
            PortBinding(8001, 'node_7'),
            PortBinding(8002, 'node_8'),
        )

    def test_allow_list_covers_listeners_and_bindings(self):
        rule_set = _synthesize(gateway_mode='reverse-proxy')
        assert [(e.port, e.purpose) for e in rule_set.allow_list] == [
            (80, 'proxy-listener'),
            (443, 'proxy-listener'),
            (8001, 'proxy-port'),
            (8002, 'proxy-port'),
        ]

    def test_path_only_access(self):
        rule_set = _synthesize(gateway_mode='reverse-proxy', port_forwarding_disabled=True)
        assert rule_set.port_bindings == ()
        assert len(rule_set.path_routes) == 2
        assert [e.port for e in rule_set.allow_list] == [80, 443]

    def test_duplicate_listener_ports_collapse(self):
        rule_set = _synthesize(gateway_mode='reverse-proxy', proxy_listener_ports=(443, 80, 443))
        assert rule_set.listener_ports == (443, 80)
        assert [e.port for e in rule_set.allow_list] == [80, 443, 8001, 8002]

    def test_custom_path_prefix(self):
        rule_set = _synthesize(gateway_mode='reverse-proxy', path_prefix='/node-')
        assert rule_set.path_routes[0].path == '/node-7'


class TestPairing:
    @pytest.mark.parametrize(
        'config',
        [
            {},
            {'gateway_mode': 'reverse-proxy'},
            {'gateway_mode': 'reverse-proxy', 'port_forwarding_disabled': True},
            {'network_mode': 'both'},
        ],
    )
    def test_synthesized_rule_sets_are_paired(self, config):
        rule_set = _synthesize(**config)
        allowed = [e.port for e in rule_set.allow_list]
        assert len(allowed) == len(set(allowed))
        assert set(allowed) == rule_set.exposed_ports()

    def test_unguarded_port(self):
        rule_set = RuleSet(
            forwarding_rules=(ForwardingRule(8001, '10.1.3.7', Network.MESH, 80, '7'),),
        )
        with pytest.raises(ResolverError, match=r'no allow entry for exposed ports \[8001\]'):
            check_pairing(rule_set)

    def test_orphaned_allow_entry(self):
        rule_set = RuleSet(allow_list=(FirewallAllowEntry('tcp', 22),))
        with pytest.raises(ResolverError, match=r'without backing rule for ports \[22\]'):
            check_pairing(rule_set)

    def test_duplicate_allow_entry(self):
        rule_set = RuleSet(
            listener_ports=(80,),
            allow_list=(FirewallAllowEntry('tcp', 80), FirewallAllowEntry('tcp', 80)),
        )
        with pytest.raises(ResolverError, match=r'duplicate allow entries for ports \[80\]'):
            check_pairing(rule_set)
