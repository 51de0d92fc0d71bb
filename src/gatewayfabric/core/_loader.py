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

"""Topology Snapshot Loader: validate raw node records into a snapshot.

Validation is exhaustive.  Every record is checked and every problem is
collected before a single :class:`TopologyError` is raised, because the
loader feeds a deployment pipeline where each round-trip is expensive.
"""

from __future__ import annotations

import ipaddress
import logging
from collections.abc import Iterable, Mapping

from ._errors import TopologyError
from ._model import NodeIdentity, ResolverConfig, TopologySnapshot
from ._types import GatewayMode, Network, PortStrategy, Role
from .options import NODE_KEY_ALIASES, NodeKey

logger = logging.getLogger(__name__)

_NETWORK_KEYS = {
    Network.MESH: NodeKey.MESH_ADDRESS,
    Network.OVERLAY: NodeKey.OVERLAY_ADDRESS,
}

# Mesh is a routed IPv4 overlay, the overlay network is IPv6 only.
_NETWORK_VERSION = {
    Network.MESH: 4,
    Network.OVERLAY: 6,
}


def _normalize_record(record: Mapping) -> dict[str, object]:
    """Lower-case keys and resolve aliases such as ``wireguard_ip``."""
    normalized = {}
    for key, value in record.items():
        key = str(key).strip().lower()
        key = str(NODE_KEY_ALIASES.get(key, key))
        if isinstance(value, str):
            value = value.strip()
        if value == '':
            value = None
        normalized[key] = value
    return normalized


def _parse_address(value, version: int) -> str:
    """Return the canonical text form of *value*; raise ValueError otherwise."""
    addr = ipaddress.ip_address(str(value))
    if addr.version != version:
        raise ValueError(f'expected an IPv{version} address')
    return str(addr)


class TopologyLoader:
    """Build a :class:`TopologySnapshot` from raw node records."""

    def __init__(self, config: ResolverConfig | None = None) -> None:
        self.config: ResolverConfig = config or ResolverConfig()

    def load(self, records: Iterable[Mapping]) -> TopologySnapshot:
        problems: list[str] = []
        nodes: list[NodeIdentity] = []
        seen_ids: dict[str, int] = {}
        gateways: list[str] = []

        for index, record in enumerate(records, start=1):
            node = self._load_record(index, record, seen_ids, gateways, problems)
            if node is not None:
                nodes.append(node)

        if not gateways:
            problems.append('topology has no gateway node')
        elif len(gateways) > 1:
            ids = ', '.join(gateways)
            problems.append(
                f'topology has {len(gateways)} gateway nodes ({ids}); exactly one is allowed'
            )

        self._check_ports(nodes, problems)

        if problems:
            for p in problems:
                logger.debug('Topology problem: %s', p)
            raise TopologyError(problems)

        logger.debug(
            'Loaded topology with %d private node(s) behind gateway %s',
            len(nodes) - 1,
            gateways[0],
        )
        return TopologySnapshot(nodes=tuple(nodes), config=self.config)

    def _load_record(
        self,
        index: int,
        record,
        seen_ids: dict[str, int],
        gateways: list[str],
        problems: list[str],
    ) -> NodeIdentity | None:
        if not isinstance(record, Mapping):
            problems.append(f'record #{index}: expected a mapping, got {type(record).__name__}')
            return None
        data = _normalize_record(record)
        known = {str(k) for k in NodeKey}
        for key in sorted(set(data) - known):
            logger.warning('record #%d: ignoring unknown key %r', index, key)

        raw_id = data.get(NodeKey.ID)
        label = f'record #{index}'
        node_id = None
        duplicate = False
        if raw_id is None or isinstance(raw_id, bool):
            problems.append(f'{label}: missing node id')
        else:
            node_id = str(raw_id)
            label = f'node {node_id}'
            if node_id in seen_ids:
                problems.append(
                    f'{label}: duplicate node id (first used by record #{seen_ids[node_id]})'
                )
                duplicate = True
            else:
                seen_ids[node_id] = index

        role = None
        raw_role = data.get(NodeKey.ROLE)
        if raw_role is None:
            problems.append(f'{label}: missing role')
        else:
            try:
                role = Role(str(raw_role))
            except ValueError:
                problems.append(f'{label}: unknown role {raw_role!r}')
        if role is Role.GATEWAY:
            gateways.append(node_id if node_id is not None else label)

        ok = node_id is not None and role is not None and not duplicate

        public_address = None
        raw_public = data.get(NodeKey.PUBLIC_ADDRESS)
        if raw_public is not None:
            try:
                public_address = _parse_address(raw_public, 4)
            except ValueError:
                problems.append(f'{label}: invalid public address {raw_public!r}')
                ok = False
        if role is Role.GATEWAY and raw_public is None:
            problems.append(f'{label}: gateway has no public address')
            ok = False
        if role is Role.PRIVATE and raw_public is not None:
            problems.append(f'{label}: only the gateway may have a public address')
            ok = False

        addresses: dict[Network, str] = {}
        for network, key in _NETWORK_KEYS.items():
            raw = data.get(key)
            if raw is None:
                continue
            try:
                addresses[network] = _parse_address(raw, _NETWORK_VERSION[network])
            except ValueError:
                problems.append(f'{label}: invalid {network} address {raw!r}')
                ok = False

        if role is Role.PRIVATE and not any(data.get(k) for k in _NETWORK_KEYS.values()):
            problems.append(f'{label}: private node has neither a mesh nor an overlay address')
            ok = False

        if not ok:
            return None
        return NodeIdentity(
            id=node_id,
            role=role,
            public_address=public_address,
            addresses=addresses,
        )

    def _check_ports(self, nodes: list[NodeIdentity], problems: list[str]) -> None:
        from gatewayfabric.compiler._port_allocator import PortAllocator
        from gatewayfabric.compiler._rules import safe_name

        private = [n for n in nodes if not n.is_gateway]
        names: dict[str, str] = {}
        for n in private:
            other = names.setdefault(safe_name(n.id), n.id)
            if other != n.id:
                problems.append(
                    f'node {n.id}: id maps to the same proxy name as node {other}'
                )

        if self.config.port_strategy is PortStrategy.IDENTITY:
            bad = [n.id for n in private if not n.id.isdigit() or int(n.id) < 1]
            for node_id in bad:
                problems.append(
                    f'node {node_id}: identity port strategy needs a positive integer id'
                )
            private = [n for n in private if n.id not in bad]

        allocator = PortAllocator(self.config.base_port, self.config.port_strategy)
        ports = allocator.allocate(private)
        for node_id, port in ports.items():
            if port > 65535:
                problems.append(f'node {node_id}: assigned port {port} exceeds 65535')

        if self.config.gateway_mode is GatewayMode.REVERSE_PROXY:
            listeners = set(self.config.proxy_listener_ports)
            for node_id, port in ports.items():
                if port in listeners:
                    problems.append(
                        f'node {node_id}: assigned port {port} collides with a proxy listener port'
                    )
