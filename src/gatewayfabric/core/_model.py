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

"""Immutable input model: node identities, resolver configuration, snapshot."""

from __future__ import annotations

import dataclasses
import types
from collections.abc import Mapping

from ._types import (
    GatewayMode,
    Network,
    NetworkMode,
    PortStrategy,
    Role,
    UnreachablePolicy,
)
from .options import RESOLVER_DEFAULTS as _DEFAULTS


@dataclasses.dataclass(frozen=True, slots=True)
class NodeIdentity:
    """One deployed machine.

    ``addresses`` maps each private network the node is attached to onto its
    address there.  It is stored read-only and in network priority order,
    so iterating it yields Mesh before Overlay.
    """

    id: str
    role: Role
    public_address: str | None = None
    addresses: Mapping[Network, str] = dataclasses.field(default_factory=dict)

    def __post_init__(self):
        ordered = {n: self.addresses[n] for n in Network if self.addresses.get(n)}
        object.__setattr__(self, 'addresses', types.MappingProxyType(ordered))

    @property
    def is_gateway(self) -> bool:
        return self.role is Role.GATEWAY

    @property
    def networks(self) -> tuple[Network, ...]:
        return tuple(self.addresses)

    def address(self, network: Network) -> str | None:
        return self.addresses.get(network)

    @property
    def mesh_address(self) -> str | None:
        return self.addresses.get(Network.MESH)

    @property
    def overlay_address(self) -> str | None:
        return self.addresses.get(Network.OVERLAY)


@dataclasses.dataclass(frozen=True, slots=True)
class ResolverConfig:
    """Operator-chosen modes and tunables, passed explicitly to every stage."""

    gateway_mode: GatewayMode = GatewayMode(_DEFAULTS.gateway_mode)
    network_mode: NetworkMode = NetworkMode(_DEFAULTS.network_mode)
    port_forwarding_disabled: bool = _DEFAULTS.port_forwarding_disabled
    base_port: int = _DEFAULTS.base_port
    service_port: int = _DEFAULTS.service_port
    proxy_listener_ports: tuple[int, ...] = _DEFAULTS.proxy_listener_ports
    path_prefix: str = _DEFAULTS.path_prefix
    port_strategy: PortStrategy = PortStrategy(_DEFAULTS.port_strategy)
    unreachable_policy: UnreachablePolicy = UnreachablePolicy(
        _DEFAULTS.unreachable_policy
    )

    def __post_init__(self):
        # Accept plain strings/lists from readers and settings.
        object.__setattr__(self, 'gateway_mode', GatewayMode(self.gateway_mode))
        object.__setattr__(self, 'network_mode', NetworkMode(self.network_mode))
        object.__setattr__(self, 'port_strategy', PortStrategy(self.port_strategy))
        object.__setattr__(
            self, 'unreachable_policy', UnreachablePolicy(self.unreachable_policy)
        )
        object.__setattr__(
            self,
            'proxy_listener_ports',
            tuple(int(p) for p in self.proxy_listener_ports),
        )

    @property
    def is_reverse_proxy(self) -> bool:
        return self.gateway_mode is GatewayMode.REVERSE_PROXY

    def replace(self, **changes) -> ResolverConfig:
        """Return a copy with *changes* applied; ``None`` values are ignored."""
        return dataclasses.replace(
            self, **{k: v for k, v in changes.items() if v is not None}
        )


@dataclasses.dataclass(frozen=True, slots=True)
class TopologySnapshot:
    """Validated, immutable input of one resolve run.

    ``nodes`` keeps the input order; it drives sequential port assignment
    and nothing else.
    """

    nodes: tuple[NodeIdentity, ...]
    config: ResolverConfig = dataclasses.field(default_factory=ResolverConfig)

    @property
    def gateway_mode(self) -> GatewayMode:
        return self.config.gateway_mode

    @property
    def network_mode(self) -> NetworkMode:
        return self.config.network_mode

    @property
    def port_forwarding_disabled(self) -> bool:
        return self.config.port_forwarding_disabled

    @property
    def gateway(self) -> NodeIdentity:
        return next(n for n in self.nodes if n.is_gateway)

    @property
    def private_nodes(self) -> tuple[NodeIdentity, ...]:
        return tuple(n for n in self.nodes if not n.is_gateway)

    def node(self, node_id: str) -> NodeIdentity:
        for n in self.nodes:
            if n.id == node_id:
                return n
        raise KeyError(node_id)
