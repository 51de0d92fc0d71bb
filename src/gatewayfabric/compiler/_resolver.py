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

"""Resolver: runs Port Allocator -> Reachability Planner -> Rule Synthesizer.

Every stage is a pure function of its input and nothing is kept between
runs, so :func:`resolve` may be called again whenever the topology changes
and concurrently for different snapshots.  Fatal errors propagate before a
result exists; unreachable nodes are attached to the result as warnings
unless the configured :class:`UnreachablePolicy` escalates them.
"""

from __future__ import annotations

from gatewayfabric.core import (
    TopologySnapshot,
    UnreachableNodesError,
    UnreachablePolicy,
)

from ._base import BaseCompiler, ResolveStatus
from ._planner import ReachabilityPlanner
from ._port_allocator import PortAllocator
from ._rules import ResolveResult
from ._synthesizer import RuleSynthesizer, check_modes


class Resolver(BaseCompiler):
    """Resolves one TopologySnapshot into a ResolveResult."""

    def resolve(self, snapshot: TopologySnapshot) -> ResolveResult:
        config = snapshot.config
        check_modes(config)

        private = snapshot.private_nodes
        allocator = PortAllocator(config.base_port, config.port_strategy)
        assignments = allocator.assignments(private)
        ports = {a.node_id: a.port for a in assignments}

        planner = ReachabilityPlanner(config.network_mode)
        reachability = planner.plan_all(private)
        warnings = tuple(planner.unreachable)
        self._warnings.extend(planner.get_warnings())
        self._escalate(warnings, len(private), config.unreachable_policy)

        synthesizer = RuleSynthesizer(config)
        rule_set = synthesizer.synthesize(ports, reachability)

        self.info(
            f'Resolved {len(private)} private node(s) '
            f'({config.gateway_mode}, {config.network_mode}), '
            f'{len(warnings)} unreachable'
        )
        return ResolveResult(
            snapshot=snapshot,
            port_assignments=assignments,
            reachability=reachability,
            rule_set=rule_set,
            warnings=warnings,
        )

    def _escalate(self, warnings, private_count: int, policy: UnreachablePolicy) -> None:
        if not warnings:
            return
        if policy is UnreachablePolicy.ERROR:
            ids = ', '.join(w.node_id for w in warnings)
            raise UnreachableNodesError(
                list(warnings), f'unreachable node(s) {ids} (policy: {policy})'
            )
        if policy is UnreachablePolicy.ERROR_IF_ALL and len(warnings) == private_count:
            raise UnreachableNodesError(
                list(warnings),
                f'all {private_count} private node(s) are unreachable (policy: {policy})',
            )
        if self._status == ResolveStatus.SUCCESS:
            self._status = ResolveStatus.WARNING


def resolve(snapshot: TopologySnapshot) -> ResolveResult:
    """Resolve *snapshot* with a fresh Resolver."""
    return Resolver().resolve(snapshot)
