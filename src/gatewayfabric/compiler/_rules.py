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

"""Records produced by the resolver stages.

All records are frozen; a :class:`RuleSet` and a :class:`ResolveResult`
never change once built, so results of different runs can be compared and
shared freely.
"""

from __future__ import annotations

import dataclasses
import re
import types
from collections.abc import Mapping
from typing import TYPE_CHECKING

from gatewayfabric.core import Network, UnreachableNodeWarning

from ._base import ResolveStatus

if TYPE_CHECKING:
    from gatewayfabric.core import TopologySnapshot

_UNSAFE_CHARS = re.compile(r'[^A-Za-z0-9_.-]')


def safe_name(node_id: str) -> str:
    """Return *node_id* usable as proxy backend name and URL path segment."""
    return _UNSAFE_CHARS.sub('_', str(node_id))


@dataclasses.dataclass(frozen=True, slots=True)
class PortAssignment:
    node_id: str
    port: int


@dataclasses.dataclass(frozen=True, slots=True)
class PlannedEntry:
    """One private network a node is exposed through."""

    network: Network
    address: str


@dataclasses.dataclass(frozen=True, slots=True)
class ForwardingRule:
    """DNAT of ``public_port`` on the gateway to a node's service."""

    public_port: int
    target_address: str
    target_network: Network
    target_port: int
    node_id: str = ''


@dataclasses.dataclass(frozen=True, slots=True)
class UpstreamEntry:
    target_address: str
    target_network: Network
    target_port: int


@dataclasses.dataclass(frozen=True, slots=True)
class UpstreamPool:
    """Reverse proxy backend of one node, entries in network priority order."""

    pool_id: str
    node_id: str
    entries: tuple[UpstreamEntry, ...]


@dataclasses.dataclass(frozen=True, slots=True)
class PortBinding:
    """Proxy listener on a node's assigned port, forwarding to its pool."""

    public_port: int
    pool_id: str


@dataclasses.dataclass(frozen=True, slots=True)
class PathRoute:
    """Path-based routing entry on the shared proxy listeners."""

    path: str
    pool_id: str


@dataclasses.dataclass(frozen=True, slots=True)
class FirewallAllowEntry:
    protocol: str
    port: int
    source_scope: str = 'any'
    purpose: str = ''


@dataclasses.dataclass(frozen=True, slots=True)
class RuleSet:
    """Everything the gateway has to materialise for one snapshot."""

    forwarding_rules: tuple[ForwardingRule, ...] = ()
    upstream_pools: tuple[UpstreamPool, ...] = ()
    port_bindings: tuple[PortBinding, ...] = ()
    path_routes: tuple[PathRoute, ...] = ()
    listener_ports: tuple[int, ...] = ()
    allow_list: tuple[FirewallAllowEntry, ...] = ()

    def exposed_ports(self) -> set[int]:
        """Ports on which the gateway accepts traffic according to the rules."""
        ports = {r.public_port for r in self.forwarding_rules}
        ports.update(b.public_port for b in self.port_bindings)
        ports.update(self.listener_ports)
        return ports

    def pool(self, pool_id: str) -> UpstreamPool:
        for p in self.upstream_pools:
            if p.pool_id == pool_id:
                return p
        raise KeyError(pool_id)


@dataclasses.dataclass(frozen=True, slots=True)
class ResolveResult:
    """Successful outcome of one resolve run, including its warnings."""

    snapshot: TopologySnapshot
    port_assignments: tuple[PortAssignment, ...]
    reachability: Mapping[str, tuple[PlannedEntry, ...]]
    rule_set: RuleSet
    warnings: tuple[UnreachableNodeWarning, ...] = ()

    def __post_init__(self):
        object.__setattr__(
            self, 'reachability', types.MappingProxyType(dict(self.reachability))
        )

    @property
    def ports(self) -> dict[str, int]:
        return {a.node_id: a.port for a in self.port_assignments}

    @property
    def status(self) -> ResolveStatus:
        return ResolveStatus.WARNING if self.warnings else ResolveStatus.SUCCESS

    def rules_for_node(self, node_id: str) -> tuple[ForwardingRule, ...]:
        return tuple(r for r in self.rule_set.forwarding_rules if r.node_id == node_id)

    def pool_for_node(self, node_id: str) -> UpstreamPool | None:
        for p in self.rule_set.upstream_pools:
            if p.node_id == node_id:
                return p
        return None
