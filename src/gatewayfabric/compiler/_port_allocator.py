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

"""Port Allocator: map each private node onto a unique public port.

``sequential`` (the default) assigns ``base_port + position`` where
*position* is the node's 1-based index among the snapshot's private nodes.
Allocation depends on node order, not on the id value:

* appending a node never changes the ports of the nodes before it;
* removing or reordering a node shifts the port of every node after it.

This is intended.  Node ids are not guaranteed to be dense or numeric, so
the position is the only injective key available for every topology.
Callers that need ports to survive node removal use the ``identity``
strategy, which takes the (positive integer) node id as the position.
"""

from __future__ import annotations

from collections.abc import Iterable

from gatewayfabric.core import NodeIdentity, PortStrategy

from ._rules import PortAssignment


class PortAllocator:
    """Deterministic, injective node -> port mapping."""

    def __init__(
        self,
        base_port: int,
        strategy: PortStrategy = PortStrategy.SEQUENTIAL,
    ) -> None:
        self.base_port: int = base_port
        self.strategy: PortStrategy = PortStrategy(strategy)

    def allocate(self, nodes: Iterable[NodeIdentity]) -> dict[str, int]:
        """Return ``{node_id: port}`` in node order.

        Never fails for a loader-validated snapshot: positions are distinct
        by construction (sequential) or by the uniqueness of ids (identity).
        """
        ports: dict[str, int] = {}
        for position, node in enumerate(nodes, start=1):
            if self.strategy is PortStrategy.IDENTITY:
                position = int(node.id)
            ports[node.id] = self.base_port + position
        return ports

    def assignments(self, nodes: Iterable[NodeIdentity]) -> tuple[PortAssignment, ...]:
        return tuple(
            PortAssignment(node_id, port) for node_id, port in self.allocate(nodes).items()
        )
