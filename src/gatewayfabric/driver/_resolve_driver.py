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

"""ResolveDriver: orchestrates the full resolve process.

Handles configuration layering, topology loading, resolution, emission and
output file management.  Nothing is written unless every stage succeeded.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import TYPE_CHECKING

from gatewayfabric.compiler import BaseCompiler, ResolveStatus, Resolver
from gatewayfabric.core import (
    ResolverError,
    TopologyError,
    TopologyLoader,
    build_config,
)

from ._emitter import ConfigurationDocument, Emitter

if TYPE_CHECKING:
    from gatewayfabric.compiler import ResolveResult
    from gatewayfabric.core import TopologyDocument, TopologySnapshot

logger = logging.getLogger(__name__)


class ResolveDriver(BaseCompiler):
    """Loads a topology document, resolves it and writes the output files."""

    def __init__(self) -> None:
        super().__init__()

        # Options
        self.wdir: str = '.'
        self.template_dir: Path | None = None
        self.dry_run: bool = False

        # Output
        self.snapshot: TopologySnapshot | None = None
        self.result: ResolveResult | None = None
        self.document: ConfigurationDocument | None = None
        self.file_names: dict[str, str] = {}
        self.all_errors: list[str] = []
        self.all_warnings: list[str] = []

    def load(
        self,
        document: TopologyDocument,
        *layers: Mapping[str, object] | None,
    ) -> TopologySnapshot | None:
        """Build the snapshot from *document*.

        *layers* are option mappings merged lowest priority first; the
        document's own options are placed between the given layers: first
        layer (environment) < document options < remaining layers (command
        line).
        """
        env_layer = layers[0] if layers else None
        upper = layers[1:]
        try:
            config = build_config(env_layer, document.options, *upper)
            self.snapshot = TopologyLoader(config).load(document.nodes)
        except TopologyError as e:
            for problem in e.problems:
                self.error(problem)
            self.all_errors.extend(e.problems)
            return None
        return self.snapshot

    def run(self, snapshot: TopologySnapshot | None = None) -> str:
        """Resolve and emit; return an empty string on success or the error text."""
        snapshot = snapshot or self.snapshot
        if snapshot is None:
            self.error('No topology loaded')
            return 'No topology loaded'

        resolver = Resolver()
        try:
            result = resolver.resolve(snapshot)
            document = Emitter(self.template_dir).emit(result)
        except ResolverError as e:
            self.error(str(e))
            self.all_errors.append(str(e))
            return str(e)

        # already logged by the planner
        self._warnings.extend(resolver.get_warnings())
        self.all_warnings.extend(w.message for w in result.warnings)
        if result.warnings and self._status == ResolveStatus.SUCCESS:
            self._status = ResolveStatus.WARNING

        self.result = result
        self.document = document
        if self.dry_run:
            logger.debug('Dry run, not writing to %s', self.wdir)
            return ''

        for path in document.write(self.wdir):
            self.file_names[path.name] = str(path)
        self.info(f'Wrote {len(self.file_names)} file(s) to {self.wdir}')
        return ''
