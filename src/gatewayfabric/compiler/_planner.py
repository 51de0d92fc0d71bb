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

"""Reachability Planner: decide through which private networks a node is exposed.

The network mode selects candidate networks in priority order (Mesh before
Overlay); a node participates with every candidate it has an address on.
Under ``both`` a node with a single address degrades gracefully to that one
network.  A node left with no network at all is not an error: it is
dropped from the rule set and reported as an
:class:`~gatewayfabric.core.UnreachableNodeWarning`.
"""

from __future__ import annotations

from collections.abc import Iterable

from gatewayfabric.core import NetworkMode, NodeIdentity, UnreachableNodeWarning

from ._base import BaseCompiler
from ._rules import PlannedEntry


def plan(node: NodeIdentity, network_mode: NetworkMode) -> tuple[PlannedEntry, ...]:
    """Return the ``(network, address)`` entries for *node*, highest priority first."""
    return tuple(
        PlannedEntry(network, node.address(network))
        for network in NetworkMode(network_mode).networks
        if node.address(network)
    )


class ReachabilityPlanner(BaseCompiler):
    """Plans every private node and collects unreachable-node warnings."""

    def __init__(self, network_mode: NetworkMode) -> None:
        super().__init__()
        self.network_mode: NetworkMode = NetworkMode(network_mode)
        self.unreachable: list[UnreachableNodeWarning] = []

    def plan(self, node: NodeIdentity) -> tuple[PlannedEntry, ...]:
        entries = plan(node, self.network_mode)
        if not entries:
            w = UnreachableNodeWarning(
                node_id=node.id,
                network_mode=str(self.network_mode),
                available=tuple(str(n) for n in node.networks),
            )
            self.unreachable.append(w)
            self.warning(node, f'unreachable in network mode {self.network_mode}')
        return entries

    def plan_all(
        self, nodes: Iterable[NodeIdentity]
    ) -> dict[str, tuple[PlannedEntry, ...]]:
        return {node.id: self.plan(node) for node in nodes}
