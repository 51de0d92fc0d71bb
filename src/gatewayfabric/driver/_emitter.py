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

"""Emitter: project a resolve result into a ConfigurationDocument.

The document is an ordered set of named text files.  It is a pure function
of its input: no timestamps, user names or host names are embedded, so
resolving the same snapshot twice yields byte-identical documents that can
be diffed and re-applied idempotently.
"""

from __future__ import annotations

import dataclasses
import hashlib
import logging
import os
import pathlib
from collections.abc import Iterable
from typing import TYPE_CHECKING

from gatewayfabric.core import GatewayMode

from ._yaml_writer import (
    dump_yaml,
    serialize_allow_list,
    serialize_forwarding_rules,
    serialize_pools,
    serialize_result,
)

if TYPE_CHECKING:
    from gatewayfabric.compiler import (
        FirewallAllowEntry,
        ForwardingRule,
        ResolveResult,
        UpstreamPool,
    )

logger = logging.getLogger(__name__)

GATEWAY_FILE = 'gateway.yml'
RULES_FILE = 'rules.yml'
NFTABLES_FILE = 'nftables.conf'
HAPROXY_FILE = 'haproxy.cfg'
INVENTORY_FILE = 'inventory.ini'


@dataclasses.dataclass(frozen=True, slots=True)
class ConfigurationDocument:
    """Ordered ``(file name, text)`` pairs consumed by the configuration layer."""

    files: tuple[tuple[str, str], ...]

    def names(self) -> list[str]:
        return [name for name, _ in self.files]

    def __contains__(self, name) -> bool:
        return any(n == name for n, _ in self.files)

    def __getitem__(self, name: str) -> str:
        for n, text in self.files:
            if n == name:
                return text
        raise KeyError(name)

    def to_bytes(self) -> bytes:
        """Concatenate all files with ``==> name <==`` separators."""
        parts = []
        for name, text in self.files:
            parts.append(f'==> {name} <==\n{text}')
        return ''.join(parts).encode('utf-8')

    def digest(self) -> str:
        return hashlib.sha256(self.to_bytes()).hexdigest()

    def write(self, directory) -> list[pathlib.Path]:
        """Write every file into *directory* atomically and return the paths."""
        directory = pathlib.Path(directory)
        directory.mkdir(parents=True, exist_ok=True)
        written = []
        for name, text in self.files:
            path = directory / name
            tmp_path = path.with_suffix(path.suffix + '.tmp')
            with pathlib.Path.open(tmp_path, 'w', encoding='utf-8', newline='\n') as f:
                f.write(text)
                f.flush()
                os.fsync(f.fileno())
            tmp_path.replace(path)
            logger.debug('Wrote %s', path)
            written.append(path)
        return written


def emit(
    rules: Iterable[ForwardingRule],
    pools: Iterable[UpstreamPool],
    allow_list: Iterable[FirewallAllowEntry],
) -> ConfigurationDocument:
    """Order-preserving projection of raw rules, pools and allow entries."""
    data = {
        'forwarding_rules': serialize_forwarding_rules(rules),
        'upstream_pools': serialize_pools(pools),
        'firewall_allow': serialize_allow_list(allow_list),
    }
    return ConfigurationDocument(files=((RULES_FILE, dump_yaml(data)),))


class Emitter:
    """Builds the full document for a ResolveResult.

    ``gateway.yml`` and ``inventory.ini`` are always present.  DirectForward
    adds ``nftables.conf`` with DNAT and allow rules; ReverseProxy adds
    ``haproxy.cfg`` and an ``nftables.conf`` holding only the allow rules.
    """

    def __init__(self, template_dir: pathlib.Path | None = None) -> None:
        self.template_dir = template_dir

    def emit(self, result: ResolveResult) -> ConfigurationDocument:
        from gatewayfabric.platforms.ansible import InventoryRenderer
        from gatewayfabric.platforms.haproxy import HAProxyRenderer
        from gatewayfabric.platforms.nftables import NftablesRenderer

        files = [(GATEWAY_FILE, dump_yaml(serialize_result(result)))]
        files.append((NFTABLES_FILE, NftablesRenderer(self.template_dir).render(result)))
        if result.snapshot.gateway_mode is GatewayMode.REVERSE_PROXY:
            files.append((HAPROXY_FILE, HAProxyRenderer(self.template_dir).render(result)))
        files.append((INVENTORY_FILE, InventoryRenderer(self.template_dir).render(result)))

        document = ConfigurationDocument(files=tuple(files))
        logger.debug('Emitted %s (sha256 %s)', ', '.join(document.names()), document.digest())
        return document
