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

"""Emitter tests: document structure, rendered targets and determinism."""

import pytest
import yaml

from gatewayfabric.compiler import resolve
from gatewayfabric.driver import (
    GATEWAY_FILE,
    HAPROXY_FILE,
    INVENTORY_FILE,
    NFTABLES_FILE,
    RULES_FILE,
    Emitter,
    emit,
)

from .conftest import GATEWAY_PUBLIC, make_snapshot

REVERSE_PROXY_BOTH = {'gateway_mode': 'reverse-proxy', 'network_mode': 'both'}


def _emit(records, **options):
    return Emitter().emit(resolve(make_snapshot(records, **options)))


class TestDocument:
    def test_direct_forward_files(self, scenario_records):
        document = _emit(scenario_records)
        assert document.names() == [GATEWAY_FILE, NFTABLES_FILE, INVENTORY_FILE]
        assert HAPROXY_FILE not in document

    def test_reverse_proxy_files(self, scenario_records):
        document = _emit(scenario_records, **REVERSE_PROXY_BOTH)
        assert document.names() == [GATEWAY_FILE, NFTABLES_FILE, HAPROXY_FILE, INVENTORY_FILE]

    def test_missing_file(self, scenario_records):
        with pytest.raises(KeyError):
            _emit(scenario_records)[HAPROXY_FILE]

    def test_byte_identical_output(self, scenario_records_with_overlay_only_node):
        first = _emit(scenario_records_with_overlay_only_node, **REVERSE_PROXY_BOTH)
        second = _emit(scenario_records_with_overlay_only_node, **REVERSE_PROXY_BOTH)
        assert first.to_bytes() == second.to_bytes()
        assert first.digest() == second.digest()
        assert len(first.digest()) == 64

    def test_to_bytes_separates_files(self, scenario_records):
        data = _emit(scenario_records).to_bytes()
        assert data.startswith(b'==> gateway.yml <==\n')
        assert b'\n==> nftables.conf <==\n' in data

    def test_write(self, scenario_records, tmp_path):
        document = _emit(scenario_records)
        paths = document.write(tmp_path / 'out')
        assert [p.name for p in paths] == document.names()
        for path in paths:
            assert path.read_text(encoding='utf-8') == document[path.name]
        assert not list((tmp_path / 'out').glob('*.tmp'))


class TestGatewayYaml:
    def test_structure(self, scenario_records):
        data = yaml.safe_load(_emit(scenario_records, **REVERSE_PROXY_BOTH)[GATEWAY_FILE])
        assert list(data) == [
            'gateway',
            'gateway_mode',
            'network_mode',
            'port_forwarding_disabled',
            'port_assignments',
            'forwarding_rules',
            'upstream_pools',
            'port_bindings',
            'path_routes',
            'listener_ports',
            'firewall_allow',
            'warnings',
        ]
        assert data['gateway']['public_address'] == GATEWAY_PUBLIC
        assert data['gateway_mode'] == 'reverse-proxy'
        assert data['port_forwarding_disabled'] is False
        assert data['port_assignments'] == [
            {'node_id': '7', 'port': 8001},
            {'node_id': '8', 'port': 8002},
        ]
        assert data['upstream_pools'][0]['entries'] == [
            {'address': '10.1.3.7', 'network': 'mesh', 'port': 80},
            {'address': '400:1234::7', 'network': 'overlay', 'port': 80},
        ]
        assert data['path_routes'][1] == {'path': '/vm8', 'pool_id': 'node_8'}
        assert data['listener_ports'] == [80, 443]

    def test_values_are_quoted(self, scenario_records):
        text = _emit(scenario_records)[GATEWAY_FILE]
        assert "  - node_id: '7'\n    port: 8001\n" in text
        assert "gateway_mode: 'direct-forward'\n" in text

    def test_warnings(self, scenario_records_with_overlay_only_node):
        data = yaml.safe_load(_emit(scenario_records_with_overlay_only_node)[GATEWAY_FILE])
        assert data['warnings'] == [
            {
                'node_id': '9',
                'network_mode': 'mesh-only',
                'message': 'node 9 is unreachable in network mode mesh-only '
                '(available networks: overlay)',
            }
        ]


class TestNftables:
    def test_dnat_per_family(self, scenario_records):
        text = _emit(scenario_records, network_mode='both')[NFTABLES_FILE]
        assert 'table ip gatewayfabric_nat {' in text
        assert 'table ip6 gatewayfabric_nat {' in text
        assert 'tcp dport 8001 dnat to 10.1.3.7:80 comment "node 7 mesh"' in text
        assert 'tcp dport 8002 dnat to [400:1234::8]:80 comment "node 8 overlay"' in text
        assert 'ip daddr 10.1.3.7 tcp dport 80 masquerade' in text
        assert 'ip6 daddr 400:1234::8 tcp dport 80 accept' in text
        assert (
            '# Overlay DNAT: matches IPv6 clients only, the public address 185.69.166.10 is IPv4.\n'
            'table ip6 gatewayfabric_nat\n'
        ) in text

    def test_allow_list(self, scenario_records):
        text = _emit(scenario_records)[NFTABLES_FILE]
        assert 'elements = { 8001, 8002 }' in text
        assert 'tcp dport 8001 accept comment "forward"' in text
        assert 'ip6 gatewayfabric_nat' not in text

    def test_reverse_proxy_has_only_filter(self, scenario_records):
        text = _emit(scenario_records, **REVERSE_PROXY_BOTH)[NFTABLES_FILE]
        assert 'elements = { 80, 443, 8001, 8002 }' in text
        assert 'gatewayfabric_nat' not in text
        assert 'chain forward' not in text

    def test_warning_comment(self, scenario_records_with_overlay_only_node):
        text = _emit(scenario_records_with_overlay_only_node)[NFTABLES_FILE]
        assert '# warning: node 9 is unreachable in network mode mesh-only' in text

    def test_user_template_override(self, scenario_records, tmp_path):
        (tmp_path / 'nftables').mkdir()
        (tmp_path / 'nftables' / 'gateway.nft.j2').write_text('custom {{ gateway_id }}\n')
        result = resolve(make_snapshot(scenario_records))
        document = Emitter(template_dir=tmp_path).emit(result)
        assert document[NFTABLES_FILE] == 'custom gw\n'
        assert document[INVENTORY_FILE].startswith('# Generated by GatewayFabric')


class TestHAProxy:
    def test_frontends_and_backends(self, scenario_records):
        text = _emit(scenario_records, **REVERSE_PROXY_BOTH)[HAPROXY_FILE]
        assert '    bind *:80\n    bind *:443\n' in text
        assert 'acl path_node_7 path /vm7\n' in text
        assert 'acl path_node_7 path_beg /vm7/\n' in text
        assert 'use_backend %[var(txn.gwf_pool)]' in text
        assert 'frontend node_8_port\n    bind *:8002\n    default_backend node_8\n' in text
        assert (
            'backend node_7\n'
            '    balance roundrobin\n'
            '    server mesh 10.1.3.7:80 check\n'
            '    server overlay [400:1234::7]:80 check\n'
        ) in text

    def test_path_only(self, scenario_records):
        text = _emit(
            scenario_records, port_forwarding_disabled=True, **REVERSE_PROXY_BOTH
        )[HAPROXY_FILE]
        assert '_port\n' not in text
        assert 'backend node_8' in text
        assert '# Port access:  path only' in text


class TestInventory:
    def test_hosts(self, scenario_records):
        text = _emit(scenario_records, **REVERSE_PROXY_BOTH)[INVENTORY_FILE]
        assert f'[gateway]\ngw ansible_host={GATEWAY_PUBLIC}\n' in text
        assert 'gateway_type=gateway_proxy\n' in text
        assert 'network_mode=both\n' in text
        assert (
            '7 ansible_host=10.1.3.7 wireguard_ip=10.1.3.7 mycelium_ip=400:1234::7 '
            'vm_port=8001 vm_id=7 gateway_reachable=true\n'
            '8 ansible_host=10.1.3.8'
        ) in text
        assert 'internal_8_mycelium_ip=400:1234::8\n' in text

    def test_unreachable_host(self, scenario_records_with_overlay_only_node):
        text = _emit(scenario_records_with_overlay_only_node)[INVENTORY_FILE]
        assert (
            '9 ansible_host=400:1234::9 mycelium_ip=400:1234::9 '
            'vm_port=8003 vm_id=9 gateway_reachable=false\n'
        ) in text
        assert 'gateway_type=gateway_nat\n' in text
        assert 'network_mode=wireguard-only\n' in text


class TestEmitFunction:
    def test_projection_keeps_order(self, scenario_records):
        rule_set = resolve(make_snapshot(scenario_records, network_mode='both')).rule_set
        document = emit(rule_set.forwarding_rules, rule_set.upstream_pools, rule_set.allow_list)
        assert document.names() == [RULES_FILE]
        data = yaml.safe_load(document[RULES_FILE])
        assert [r['target_network'] for r in data['forwarding_rules']] == [
            'mesh',
            'overlay',
            'mesh',
            'overlay',
        ]
        assert data['upstream_pools'] == []
        assert [e['port'] for e in data['firewall_allow']] == [8001, 8002]

    def test_empty_input(self):
        data = yaml.safe_load(emit([], [], [])[RULES_FILE])
        assert data == {'forwarding_rules': [], 'upstream_pools': [], 'firewall_allow': []}
