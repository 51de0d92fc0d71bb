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

"""Driver layer: template loading, document emission and output files."""

from ._emitter import (
    GATEWAY_FILE,
    HAPROXY_FILE,
    INVENTORY_FILE,
    NFTABLES_FILE,
    RULES_FILE,
    ConfigurationDocument,
    Emitter,
    emit,
)
from ._jinja2_template import Jinja2Template
from ._resolve_driver import ResolveDriver

__all__ = [
    'GATEWAY_FILE',
    'HAPROXY_FILE',
    'INVENTORY_FILE',
    'NFTABLES_FILE',
    'RULES_FILE',
    'ConfigurationDocument',
    'Emitter',
    'Jinja2Template',
    'ResolveDriver',
    'emit',
]
