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

"""YAML reader for topology description files.

A topology file holds the operator options at the top level (or below an
``options`` key) and the node records below ``nodes``::

    gateway_mode: reverse-proxy
    network_mode: both
    nodes:
      - id: gateway
        role: gateway
        public_address: 185.206.122.31
        mesh_address: 10.1.3.2
      - id: 7
        role: private
        mesh_address: 10.1.4.2
        overlay_address: 4f3:1b2c::1
"""

import dataclasses
import logging
import pathlib

import yaml

from ._errors import TopologyError
from .options import canonical_option

logger = logging.getLogger(__name__)


@dataclasses.dataclass
class TopologyDocument:
    """Raw option values and node records read from an input file."""

    options: dict
    nodes: list[dict]


def _coerce_bools(d):
    """Coerce string booleans in a dict to Python bools.

    YAML normally handles this, but quoted values like ``"true"`` remain
    strings.
    """
    if not isinstance(d, dict):
        return d
    coerced = {}
    for k, v in d.items():
        if isinstance(v, str):
            low = v.lower()
            if low == 'true':
                coerced[k] = True
                continue
            if low == 'false':
                coerced[k] = False
                continue
        coerced[k] = v
    return coerced


class YamlReader:
    """Parses a topology YAML file into a TopologyDocument."""

    def parse(self, input_path):
        input_path = pathlib.Path(input_path)
        with pathlib.Path.open(input_path, encoding='utf-8') as f:
            return self.parse_text(f.read(), source=str(input_path))

    def parse_text(self, text, source='<string>'):
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise TopologyError([f'{source}: invalid YAML: {e}']) from e

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise TopologyError([f'{source}: expected a mapping at the top level'])

        options = {}
        for key, value in _coerce_bools(data.get('options') or {}).items():
            options[key] = value
        for key, value in _coerce_bools(data).items():
            if key in ('nodes', 'options'):
                continue
            if canonical_option(str(key)) is None:
                logger.warning('%s: ignoring unknown top-level key %r', source, key)
                continue
            options[key] = value

        nodes = data.get('nodes') or []
        if not isinstance(nodes, list):
            raise TopologyError([f'{source}: "nodes" must be a list'])

        logger.debug('%s: read %d node record(s)', source, len(nodes))
        return TopologyDocument(options=options, nodes=nodes)
