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

from ._config import build_config
from ._errors import (
    ConfigurationContradictionError,
    ResolverError,
    TopologyError,
    UnreachableNodesError,
    UnreachableNodeWarning,
)
from ._loader import TopologyLoader
from ._model import NodeIdentity, ResolverConfig, TopologySnapshot
from ._tofu_reader import TofuOutputReader
from ._types import (
    GatewayMode,
    Network,
    NetworkMode,
    PortStrategy,
    Role,
    UnreachablePolicy,
)
from ._yaml_reader import TopologyDocument, YamlReader

__all__ = [
    'ConfigurationContradictionError',
    'GatewayMode',
    'Network',
    'NetworkMode',
    'NodeIdentity',
    'PortStrategy',
    'ResolverConfig',
    'ResolverError',
    'Role',
    'TofuOutputReader',
    'TopologyDocument',
    'TopologyError',
    'TopologyLoader',
    'TopologySnapshot',
    'UnreachableNodeWarning',
    'UnreachableNodesError',
    'UnreachablePolicy',
    'YamlReader',
    'build_config',
]
