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

"""YAML projection of a resolve result (``gateway.yml``).

String values are written single-quoted and keys plain, so that addresses
and node ids such as ``'7'`` keep their type when the configuration layer
reads the file back.  Key order is fixed; the output contains nothing that
is not derived from the result.
"""

import yaml


class _QuotedValueDumper(yaml.SafeDumper):
    def increase_indent(self, flow=False, indentless=False):
        return super().increase_indent(flow, False)


def _quoted_str(dumper, data):
    return dumper.represent_scalar('tag:yaml.org,2002:str', data, style="'")


_QuotedValueDumper.add_representer(str, _quoted_str)

_orig_represent_mapping = yaml.SafeDumper.represent_mapping


def _represent_mapping(self, tag, mapping, flow_style=None):
    node = _orig_represent_mapping(self, tag, mapping, flow_style)
    for key_node, _ in node.value:
        if key_node.tag == 'tag:yaml.org,2002:str':
            key_node.style = None
    return node


_QuotedValueDumper.represent_mapping = _represent_mapping


def dump_yaml(data) -> str:
    return yaml.dump(
        data,
        Dumper=_QuotedValueDumper,
        default_flow_style=False,
        sort_keys=False,
        allow_unicode=True,
    )


def serialize_forwarding_rules(rules) -> list[dict]:
    return [
        {
            'node_id': str(r.node_id),
            'public_port': r.public_port,
            'target_address': str(r.target_address),
            'target_network': str(r.target_network),
            'target_port': r.target_port,
        }
        for r in rules
    ]


def serialize_pools(pools) -> list[dict]:
    return [
        {
            'pool_id': str(p.pool_id),
            'node_id': str(p.node_id),
            'entries': [
                {
                    'address': str(e.target_address),
                    'network': str(e.target_network),
                    'port': e.target_port,
                }
                for e in p.entries
            ],
        }
        for p in pools
    ]


def serialize_allow_list(allow_list) -> list[dict]:
    return [
        {
            'protocol': str(e.protocol),
            'port': e.port,
            'source_scope': str(e.source_scope),
            'purpose': str(e.purpose),
        }
        for e in allow_list
    ]


def serialize_result(result) -> dict:
    """Return the ordered plain-data form of a ResolveResult."""
    snapshot = result.snapshot
    config = snapshot.config
    gateway = snapshot.gateway
    rule_set = result.rule_set
    return {
        'gateway': {
            'id': str(gateway.id),
            'public_address': str(gateway.public_address),
            'addresses': {str(n): str(a) for n, a in gateway.addresses.items()},
        },
        'gateway_mode': str(config.gateway_mode),
        'network_mode': str(config.network_mode),
        'port_forwarding_disabled': config.port_forwarding_disabled,
        'port_assignments': [
            {'node_id': str(a.node_id), 'port': a.port} for a in result.port_assignments
        ],
        'forwarding_rules': serialize_forwarding_rules(rule_set.forwarding_rules),
        'upstream_pools': serialize_pools(rule_set.upstream_pools),
        'port_bindings': [
            {'public_port': b.public_port, 'pool_id': str(b.pool_id)}
            for b in rule_set.port_bindings
        ],
        'path_routes': [
            {'path': str(r.path), 'pool_id': str(r.pool_id)} for r in rule_set.path_routes
        ],
        'listener_ports': list(rule_set.listener_ports),
        'firewall_allow': serialize_allow_list(rule_set.allow_list),
        'warnings': [
            {
                'node_id': str(w.node_id),
                'network_mode': str(w.network_mode),
                'message': w.message,
            }
            for w in result.warnings
        ],
    }
