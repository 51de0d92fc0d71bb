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

"""Enumerations shared by the loader, the compiler stages and the emitters.

All enums are ``StrEnum`` so that their values can be written to and read
from YAML, environment variables and command line flags unchanged.  The
mode enums also accept the names used by the original Ansible/OpenTofu
deployment (``gateway_nat``, ``wireguard-only``, ...).
"""

from enum import StrEnum


class _AliasedStrEnum(StrEnum):
    """StrEnum that resolves case-insensitive aliases via ``_ALIASES``."""

    @classmethod
    def _missing_(cls, value):
        if not isinstance(value, str):
            return None
        key = value.strip().lower().replace('_', '-')
        for member in cls:
            if member.value == key:
                return member
        target = cls._aliases().get(key)
        if target is not None:
            return cls(target)
        return None

    @classmethod
    def _aliases(cls) -> dict[str, str]:
        return {}


class Role(_AliasedStrEnum):
    GATEWAY = 'gateway'
    PRIVATE = 'private'

    @classmethod
    def _aliases(cls) -> dict[str, str]:
        return {
            'private-node': 'private',
            'internal': 'private',
            'node': 'private',
            'privatenode': 'private',
        }


class Network(StrEnum):
    """Private networks a node can be reached through.

    Declaration order is the priority order: Mesh before Overlay.
    """

    MESH = 'mesh'
    OVERLAY = 'overlay'


class GatewayMode(_AliasedStrEnum):
    DIRECT_FORWARD = 'direct-forward'
    REVERSE_PROXY = 'reverse-proxy'

    @classmethod
    def _aliases(cls) -> dict[str, str]:
        return {
            'gateway-nat': 'direct-forward',
            'nat': 'direct-forward',
            'gateway-proxy': 'reverse-proxy',
            'proxy': 'reverse-proxy',
            'directforward': 'direct-forward',
            'reverseproxy': 'reverse-proxy',
        }


class NetworkMode(_AliasedStrEnum):
    MESH_ONLY = 'mesh-only'
    OVERLAY_ONLY = 'overlay-only'
    BOTH = 'both'

    @classmethod
    def _aliases(cls) -> dict[str, str]:
        return {
            'wireguard-only': 'mesh-only',
            'wireguard': 'mesh-only',
            'mycelium-only': 'overlay-only',
            'mycelium': 'overlay-only',
            'meshonly': 'mesh-only',
            'overlayonly': 'overlay-only',
        }

    @property
    def networks(self) -> tuple[Network, ...]:
        """Networks selected by this mode, in priority order."""
        if self is NetworkMode.MESH_ONLY:
            return (Network.MESH,)
        if self is NetworkMode.OVERLAY_ONLY:
            return (Network.OVERLAY,)
        return (Network.MESH, Network.OVERLAY)


class PortStrategy(_AliasedStrEnum):
    """How the port allocator derives a node's position.

    ``sequential`` uses the 1-based position in snapshot order,
    ``identity`` uses the numeric node id itself.
    """

    SEQUENTIAL = 'sequential'
    IDENTITY = 'identity'


class UnreachablePolicy(_AliasedStrEnum):
    """What to do when a node has no address for the selected network mode."""

    WARN = 'warn'
    ERROR_IF_ALL = 'error-if-all'
    ERROR = 'error'
