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

"""Resolver stages: port allocation, reachability planning, rule synthesis."""

from ._base import BaseCompiler, ResolveStatus
from ._planner import ReachabilityPlanner, plan
from ._port_allocator import PortAllocator
from ._resolver import Resolver, resolve
from ._rules import (
    FirewallAllowEntry,
    ForwardingRule,
    PathRoute,
    PlannedEntry,
    PortAssignment,
    PortBinding,
    ResolveResult,
    RuleSet,
    UpstreamEntry,
    UpstreamPool,
    safe_name,
)
from ._synthesizer import RuleSynthesizer, check_modes, check_pairing

__all__ = [
    'BaseCompiler',
    'FirewallAllowEntry',
    'ForwardingRule',
    'PathRoute',
    'PlannedEntry',
    'PortAllocator',
    'PortAssignment',
    'PortBinding',
    'ReachabilityPlanner',
    'ResolveResult',
    'ResolveStatus',
    'Resolver',
    'RuleSet',
    'RuleSynthesizer',
    'UpstreamEntry',
    'UpstreamPool',
    'check_modes',
    'check_pairing',
    'plan',
    'resolve',
    'safe_name',
]
