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

"""Environment-backed settings.

Reads the variables understood by the original deployment scripts
(``GATEWAY_TYPE``, ``NETWORK_MODE``, ``DISABLE_PORT_FORWARDING``) plus the
``GWF_*`` tunables from the process environment and an optional ``.env``
file.  Unset variables stay ``None`` so that lower configuration layers
(topology file, built-in defaults) show through.
"""

from __future__ import annotations

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ._keys import GatewayOption


class GatewaySettings(BaseSettings):
    """Settings loaded from environment variables and ``.env``."""

    # === Operator modes ===
    GATEWAY_TYPE: str | None = None
    NETWORK_MODE: str | None = None
    DISABLE_PORT_FORWARDING: bool | None = None

    # === Port layout ===
    GWF_BASE_PORT: int | None = None
    GWF_SERVICE_PORT: int | None = None
    GWF_PROXY_PORTS: str | None = None  # comma separated, e.g. "80,443"
    GWF_PORT_STRATEGY: str | None = None

    # === Proxy / escalation ===
    GWF_PATH_PREFIX: str | None = None
    GWF_UNREACHABLE_POLICY: str | None = None

    model_config = SettingsConfigDict(
        env_file='.env',
        env_file_encoding='utf-8',
        case_sensitive=True,
        extra='ignore',
    )

    @field_validator('GWF_PROXY_PORTS')
    @classmethod
    def validate_proxy_ports(cls, v: str | None) -> str | None:
        """Reject lists that are not integer ports, e.g. ``http,https``."""
        if v:
            try:
                parse_port_list(v)
            except ValueError:
                raise ValueError(f'not a list of port numbers: {v!r}') from None
        return v

    def as_overrides(self) -> dict[GatewayOption, object]:
        """Return the set variables keyed by GatewayOption."""
        values = {
            GatewayOption.GATEWAY_MODE: self.GATEWAY_TYPE,
            GatewayOption.NETWORK_MODE: self.NETWORK_MODE,
            GatewayOption.PORT_FORWARDING_DISABLED: self.DISABLE_PORT_FORWARDING,
            GatewayOption.BASE_PORT: self.GWF_BASE_PORT,
            GatewayOption.SERVICE_PORT: self.GWF_SERVICE_PORT,
            GatewayOption.PORT_STRATEGY: self.GWF_PORT_STRATEGY,
            GatewayOption.PATH_PREFIX: self.GWF_PATH_PREFIX,
            GatewayOption.UNREACHABLE_POLICY: self.GWF_UNREACHABLE_POLICY,
        }
        if self.GWF_PROXY_PORTS:
            values[GatewayOption.PROXY_LISTENER_PORTS] = parse_port_list(
                self.GWF_PROXY_PORTS
            )
        return {k: v for k, v in values.items() if v is not None and v != ''}


def parse_port_list(value) -> tuple[int, ...]:
    """Parse ``"80,443"``, ``"80 443"`` or a list into a tuple of ints."""
    if isinstance(value, str):
        parts = value.replace(',', ' ').split()
    else:
        parts = list(value)
    return tuple(int(p) for p in parts)
