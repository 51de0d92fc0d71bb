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

"""Port allocator and reachability planner tests."""

import pytest

from gatewayfabric.compiler import PlannedEntry, PortAllocator, ReachabilityPlanner, plan
from gatewayfabric.core import Network, NetworkMode, PortStrategy

from .conftest import gateway_record, make_snapshot, private_record


def _nodes(*ids, **kwargs):
    snapshot = make_snapshot([gateway_record(), *(private_record(i, **kwargs) for i in ids)])
    return snapshot.private_nodes


class TestPortAllocator:
    def test_sequential_positions(self):
        ports = PortAllocator(8000).allocate(_nodes(7, 8))
        assert ports == {'7': 8001, '8': 8002}

    def test_ports_are_unique(self):
        ports = PortAllocator(8000).allocate(_nodes(*range(1, 51)))
        assert len(set(ports.values())) == len(ports) == 50

    def test_appending_keeps_existing_ports(self):
        before = PortAllocator(8000).allocate(_nodes(7, 8))
        after = PortAllocator(8000).allocate(_nodes(7, 8, 9))
        assert {k: after[k] for k in before} == before
        assert after['9'] == 8003

    def test_removing_shifts_later_nodes(self):
        ports = PortAllocator(8000).allocate(_nodes(8))
        assert ports == {'8': 8001}

    def test_identity_strategy(self):
        allocator = PortAllocator(8000, PortStrategy.IDENTITY)
        assert allocator.allocate(_nodes(7, 9)) == {'7': 8007, '9': 8009}
        assert allocator.allocate(_nodes(9)) == {'9': 8009}

    def test_strategy_accepts_strings(self):
        assert PortAllocator(9000, 'identity').allocate(_nodes(3)) == {'3': 9003}

    def test_assignments_keep_order(self):
        assignments = PortAllocator(8000).assignments(_nodes(8, 7))
        assert [(a.node_id, a.port) for a in assignments] == [('8', 8001), ('7', 8002)]


class TestPlan:
    @pytest.mark.parametrize(
        ('mode', 'mesh', 'overlay', 'expected'),
        [
            (NetworkMode.BOTH, True, True, (Network.MESH, Network.OVERLAY)),
            (NetworkMode.BOTH, True, False, (Network.MESH,)),
            (NetworkMode.BOTH, False, True, (Network.OVERLAY,)),
            (NetworkMode.MESH_ONLY, True, True, (Network.MESH,)),
            (NetworkMode.MESH_ONLY, False, True, ()),
            (NetworkMode.OVERLAY_ONLY, True, True, (Network.OVERLAY,)),
            (NetworkMode.OVERLAY_ONLY, True, False, ()),
        ],
    )
    def test_networks_selected_by_mode(self, mode, mesh, overlay, expected):
        (node,) = _nodes(5, mesh=mesh, overlay=overlay)
        assert tuple(e.network for e in plan(node, mode)) == expected

    def test_entries_carry_addresses(self):
        (node,) = _nodes(5)
        assert plan(node, NetworkMode.BOTH) == (
            PlannedEntry(Network.MESH, '10.1.3.5'),
            PlannedEntry(Network.OVERLAY, '400:1234::5'),
        )


class TestReachabilityPlanner:
    def test_unreachable_node_is_a_warning(self, caplog):
        nodes = (*_nodes(7), *_nodes(9, mesh=False))
        planner = ReachabilityPlanner(NetworkMode.MESH_ONLY)
        reachability = planner.plan_all(nodes)

        assert list(reachability) == ['7', '9']
        assert reachability['9'] == ()
        assert len(planner.unreachable) == 1
        warning = planner.unreachable[0]
        assert warning.node_id == '9'
        assert warning.network_mode == 'mesh-only'
        assert warning.available == ('overlay',)
        assert 'node 9 is unreachable in network mode mesh-only' in str(warning)
        assert planner.get_warnings() == ['Node 9: unreachable in network mode mesh-only']
        assert 'Node 9: unreachable' in caplog.text

    def test_no_warnings_when_all_reachable(self):
        planner = ReachabilityPlanner('wireguard-only')
        planner.plan_all(_nodes(7, 8))
        assert planner.unreachable == []
        assert planner.get_warnings() == []
