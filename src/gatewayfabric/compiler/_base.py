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

"""BaseCompiler: error/warning tracking for all resolver stages."""

from __future__ import annotations

import logging
from enum import IntEnum

logger = logging.getLogger(__name__)


class ResolveStatus(IntEnum):
    """Resolver exit status codes."""

    SUCCESS = 0
    WARNING = 1
    ERROR = 2


class BaseCompiler:
    """Base class providing error/warning tracking for all resolver stages.

    Messages may be associated with a node; pass the node (anything with an
    ``id`` attribute) or its id as first argument and the text as second.
    """

    def __init__(self) -> None:
        self._status: ResolveStatus = ResolveStatus.SUCCESS
        self._errors: list[str] = []
        self._warnings: list[str] = []
        self._node_messages: dict[str, list[str]] = {}

    @property
    def status(self) -> ResolveStatus:
        return self._status

    def _format(self, node_or_msg, msg: str | None) -> tuple[str, str]:
        if msg is None:
            return '', str(node_or_msg)
        node_id = str(getattr(node_or_msg, 'id', node_or_msg))
        return node_id, f'Node {node_id}: {msg}'

    def error(self, node_or_msg, msg: str | None = None) -> None:
        """Record an error, optionally associated with a node."""
        node_id, text = self._format(node_or_msg, msg)
        self._errors.append(text)
        if node_id:
            self._node_messages.setdefault(node_id, []).append(text)
        logger.error(text)
        self._status = ResolveStatus.ERROR

    def warning(self, node_or_msg, msg: str | None = None) -> None:
        """Record a warning, optionally associated with a node."""
        node_id, text = self._format(node_or_msg, msg)
        self._warnings.append(text)
        if node_id:
            self._node_messages.setdefault(node_id, []).append(text)
        logger.warning(text)
        if self._status == ResolveStatus.SUCCESS:
            self._status = ResolveStatus.WARNING

    def info(self, msg: str) -> None:
        logger.info(msg)

    def get_errors(self) -> list[str]:
        return list(self._errors)

    def get_warnings(self) -> list[str]:
        return list(self._warnings)

    def get_messages_for_node(self, node_id, comment_sep: str = '# ') -> str:
        """Return errors/warnings for a node, formatted for inline comments."""
        msgs = self._node_messages.get(str(node_id), [])
        if not msgs:
            return ''
        seen: set[str] = set()
        lines = []
        for m in sorted(msgs):
            if m not in seen:
                lines.append(f'{comment_sep}{m}')
                seen.add(m)
        return '\n'.join(lines)
