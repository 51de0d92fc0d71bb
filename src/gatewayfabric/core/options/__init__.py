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

"""Option handling for the resolver.

This package provides:

- **StrEnum keys**: option and node-record key names that work as dict keys
- **Dataclass defaults**: the default value of every option
- **Environment settings**: ``GATEWAY_TYPE``/``NETWORK_MODE``/... via
  pydantic-settings

Usage::

    from gatewayfabric.core.options import GatewayOption, GatewaySettings

    overrides = GatewaySettings().as_overrides()
    mode = overrides.get(GatewayOption.NETWORK_MODE, 'mesh-only')
"""

from gatewayfabric.core.options._keys import (
    NODE_KEY_ALIASES,
    OPTION_ALIASES,
    GatewayOption,
    NodeKey,
    canonical_option,
)
from gatewayfabric.core.options._schemas import (
    RESOLVER_DEFAULTS,
    ResolverDefaults,
)
from gatewayfabric.core.options._settings import GatewaySettings, parse_port_list

__all__ = [
    'NODE_KEY_ALIASES',
    'OPTION_ALIASES',
    'RESOLVER_DEFAULTS',
    'GatewayOption',
    'GatewaySettings',
    'NodeKey',
    'ResolverDefaults',
    'canonical_option',
    'parse_port_list',
]
