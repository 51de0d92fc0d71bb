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

"""Reader for ``tofu output -json`` / ``terraform output -json`` documents.

The provisioning layer exposes the gateway and the private nodes as these
outputs::

    gateway_public_ip        "185.206.122.31/24"
    gateway_wireguard_ip     "10.1.3.2"
    gateway_mycelium_ip      "4f3:1b2c::1"
    internal_wireguard_ips   {"1": "10.1.4.2", "2": "10.1.5.2"}
    internal_mycelium_ips    {"1": "5a1:...", "2": "5b7:..."}

Each output may be wrapped in the ``{"value": ..., "type": ...}`` envelope
that ``tofu output -json`` (without an output name) produces.  Private nodes
are ordered numerically by their key, like the Ansible inventory generator.
"""

from __future__ import annotations

import json
import logging
import pathlib

from ._errors import TopologyError
from ._yaml_reader import TopologyDocument
from .options import NodeKey

logger = logging.getLogger(__name__)

GATEWAY_ID = 'gateway'


def _unwrap(value):
    if isinstance(value, dict) and 'value' in value and 'type' in value:
        return value['value']
    return value


def _strip_prefix(value):
    """Drop a CIDR suffix such as ``/24`` from an address."""
    if not value or not isinstance(value, str):
        return None
    return value.split('/', 1)[0].strip() or None


def _sort_key(node_id: str):
    return (0, int(node_id), '') if node_id.isdigit() else (1, 0, node_id)


class TofuOutputReader:
    """Turns OpenTofu/Terraform outputs into a TopologyDocument."""

    def parse(self, input_path) -> TopologyDocument:
        input_path = pathlib.Path(input_path)
        return self.parse_text(input_path.read_text(encoding='utf-8'), str(input_path))

    def parse_text(self, text: str, source: str = '<string>') -> TopologyDocument:
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise TopologyError([f'{source}: invalid JSON: {e}']) from e
        if not isinstance(data, dict):
            raise TopologyError([f'{source}: expected a JSON object'])
        return self.parse_outputs(data, source)

    def parse_outputs(self, data: dict, source: str = '<outputs>') -> TopologyDocument:
        outputs = {k: _unwrap(v) for k, v in data.items()}

        problems = []
        mesh_ips = outputs.get('internal_wireguard_ips') or {}
        overlay_ips = outputs.get('internal_mycelium_ips') or {}
        for name, value in (
            ('internal_wireguard_ips', mesh_ips),
            ('internal_mycelium_ips', overlay_ips),
        ):
            if not isinstance(value, dict):
                problems.append(f'{source}: output {name} must be a mapping')
        if problems:
            raise TopologyError(problems)

        nodes = [
            {
                NodeKey.ID: GATEWAY_ID,
                NodeKey.ROLE: 'gateway',
                NodeKey.PUBLIC_ADDRESS: _strip_prefix(outputs.get('gateway_public_ip')),
                NodeKey.MESH_ADDRESS: _strip_prefix(outputs.get('gateway_wireguard_ip')),
                NodeKey.OVERLAY_ADDRESS: _strip_prefix(outputs.get('gateway_mycelium_ip')),
            }
        ]
        node_ids = sorted({str(k) for k in (*mesh_ips, *overlay_ips)}, key=_sort_key)
        for node_id in node_ids:
            nodes.append(
                {
                    NodeKey.ID: node_id,
                    NodeKey.ROLE: 'private',
                    NodeKey.MESH_ADDRESS: _strip_prefix(mesh_ips.get(node_id)),
                    NodeKey.OVERLAY_ADDRESS: _strip_prefix(overlay_ips.get(node_id)),
                }
            )

        logger.debug('%s: read %d private node(s) from outputs', source, len(node_ids))
        return TopologyDocument(options={}, nodes=nodes)
