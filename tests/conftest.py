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

"""Shared pytest fixtures and record builders for resolver tests."""

from pathlib import Path

import pytest

from gatewayfabric.core import TopologyLoader, build_config

FIXTURES_DIR = Path(__file__).parent / 'fixtures'

GATEWAY_PUBLIC = '185.69.166.10'
GATEWAY_MESH = '10.1.2.1'
GATEWAY_OVERLAY = '400:1234::1'

SETTINGS_VARS = (
    'GATEWAY_TYPE',
    'NETWORK_MODE',
    'DISABLE_PORT_FORWARDING',
    'GWF_BASE_PORT',
    'GWF_SERVICE_PORT',
    'GWF_PROXY_PORTS',
    'GWF_PORT_STRATEGY',
    'GWF_PATH_PREFIX',
    'GWF_UNREACHABLE_POLICY',
)


def gateway_record(**overrides) -> dict:
    record = {
        'id': 'gw',
        'role': 'gateway',
        'public_address': GATEWAY_PUBLIC,
        'mesh_address': GATEWAY_MESH,
        'overlay_address': GATEWAY_OVERLAY,
    }
    record.update(overrides)
    return record


def private_record(node_id, *, mesh: bool = True, overlay: bool = True) -> dict:
    """Private node record; addresses are derived from the numeric id."""
    record = {'id': node_id, 'role': 'private'}
    if mesh:
        record['mesh_address'] = f'10.1.3.{node_id}'
    if overlay:
        record['overlay_address'] = f'400:1234::{node_id}'
    return record


def make_snapshot(records, **options):
    """Load *records* with a config built from *options*."""
    return TopologyLoader(build_config(options)).load(records)


@pytest.fixture
def scenario_records():
    """Gateway plus nodes 7 and 8, both attached to mesh and overlay."""
    return [gateway_record(), private_record(7), private_record(8)]


@pytest.fixture
def scenario_records_with_overlay_only_node(scenario_records):
    """Adds node 9 which only has an overlay address."""
    return [*scenario_records, private_record(9, mesh=False)]


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """Run without any resolver environment variables and without a .env file."""
    for name in SETTINGS_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path
