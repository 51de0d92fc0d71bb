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

"""Exception hierarchy and the non-fatal unreachable-node warning."""

from __future__ import annotations

import dataclasses


class ResolverError(Exception):
    """Base class for every fatal resolver error."""


class TopologyError(ResolverError):
    """The topology input is malformed or contradictory.

    Carries every problem found in a single validation pass in
    ``problems`` so that the caller can fix them all at once.
    """

    def __init__(self, problems: list[str]) -> None:
        self.problems: list[str] = list(problems)
        count = len(self.problems)
        lines = [f'{count} topology problem{"s" if count != 1 else ""}:']
        lines.extend(f'  - {p}' for p in self.problems)
        super().__init__('\n'.join(lines))


class ConfigurationContradictionError(ResolverError):
    """Mutually exclusive operator settings were selected together."""


class UnreachableNodesError(ResolverError):
    """Unreachable nodes were escalated to a fatal error by policy."""

    def __init__(self, warnings: list[UnreachableNodeWarning], msg: str) -> None:
        self.warnings: list[UnreachableNodeWarning] = list(warnings)
        super().__init__(msg)


@dataclasses.dataclass(frozen=True, slots=True)
class UnreachableNodeWarning:
    """A private node has no address on any network of the selected mode.

    The node is left out of every forwarding rule and upstream pool.
    """

    node_id: str
    network_mode: str
    available: tuple[str, ...] = ()

    @property
    def message(self) -> str:
        have = ', '.join(self.available) if self.available else 'none'
        return (
            f'node {self.node_id} is unreachable in network mode '
            f'{self.network_mode} (available networks: {have})'
        )

    def __str__(self) -> str:
        return self.message
