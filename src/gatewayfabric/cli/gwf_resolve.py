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

"""CLI entry point for the gateway topology resolver."""

import argparse
import logging
import sys
import time
from pathlib import Path

import pydantic

import gatewayfabric
from gatewayfabric.compiler import ResolveStatus
from gatewayfabric.core import (
    GatewayMode,
    NetworkMode,
    PortStrategy,
    TofuOutputReader,
    TopologyError,
    UnreachablePolicy,
    YamlReader,
)
from gatewayfabric.core.options import GatewayOption, GatewaySettings
from gatewayfabric.driver import ResolveDriver

__author__ = 'Linuxfabrik GmbH, Zurich/Switzerland'

DESCRIPTION = """GatewayFabric topology resolver. Loads a gateway/private-node topology, assigns
public ports, plans mesh/overlay reachability and writes the gateway configuration
(nftables ruleset, HAProxy config, Ansible inventory)."""

DEFAULT_DESTDIR = '.'


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        prog='gwf-resolve',
        description=DESCRIPTION,
    )

    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument(
        '-f',
        '--file',
        dest='FILE',
        help='path to the topology YAML file',
    )
    source.add_argument(
        '-t',
        '--tofu-outputs',
        dest='TOFU_OUTPUTS',
        help='path to a `tofu output -json` file',
    )

    parser.add_argument(
        '-d',
        '--destdir',
        default=DEFAULT_DESTDIR,
        dest='DESTDIR',
        help='output directory for generated files. Default: %(default)s',
    )

    parser.add_argument(
        '-D',
        '--datadir',
        default='',
        dest='DATADIR',
        help='template override directory (one sub-directory per platform)',
    )

    parser.add_argument(
        '--gateway-mode',
        choices=[m.value for m in GatewayMode],
        default=None,
        dest='GATEWAY_MODE',
        help='direct-forward (DNAT) or reverse-proxy (HAProxy)',
    )

    parser.add_argument(
        '--network-mode',
        choices=[m.value for m in NetworkMode],
        default=None,
        dest='NETWORK_MODE',
        help='private networks used to reach the nodes',
    )

    parser.add_argument(
        '--disable-port-forwarding',
        action='store_const',
        const=True,
        default=None,
        dest='PORT_FORWARDING_DISABLED',
        help='do not expose per-node public ports (reverse-proxy mode only)',
    )

    parser.add_argument(
        '--base-port',
        type=int,
        default=None,
        dest='BASE_PORT',
        help='first node gets base port + 1. Default: 8000',
    )

    parser.add_argument(
        '--port-strategy',
        choices=[s.value for s in PortStrategy],
        default=None,
        dest='PORT_STRATEGY',
        help='sequential (by position) or identity (base port + numeric node id)',
    )

    parser.add_argument(
        '--unreachable-policy',
        choices=[p.value for p in UnreachablePolicy],
        default=None,
        dest='UNREACHABLE_POLICY',
        help='how to treat nodes without a usable network. Default: warn',
    )

    parser.add_argument(
        '-n',
        '--dry-run',
        action='store_true',
        dest='DRY_RUN',
        help='print the generated files to stdout instead of writing them',
    )

    parser.add_argument(
        '--strict',
        action='store_true',
        dest='STRICT',
        help='exit with status 1 if there are warnings',
    )

    parser.add_argument(
        '-v',
        '--verbose',
        action='count',
        default=0,
        dest='VERBOSE',
        help='verbose output (repeat for higher verbosity)',
    )

    parser.add_argument(
        '-V',
        '--version',
        action='version',
        version=f'%(prog)s: v{gatewayfabric.__version__} by {__author__}',
    )

    return parser.parse_args(argv)


def cli_overrides(args) -> dict[GatewayOption, object]:
    """Return the options given on the command line."""
    values = {
        GatewayOption.GATEWAY_MODE: args.GATEWAY_MODE,
        GatewayOption.NETWORK_MODE: args.NETWORK_MODE,
        GatewayOption.PORT_FORWARDING_DISABLED: args.PORT_FORWARDING_DISABLED,
        GatewayOption.BASE_PORT: args.BASE_PORT,
        GatewayOption.PORT_STRATEGY: args.PORT_STRATEGY,
        GatewayOption.UNREACHABLE_POLICY: args.UNREACHABLE_POLICY,
    }
    return {k: v for k, v in values.items() if v is not None}


def main(argv=None):
    args = parse_args(argv)
    t_start = time.monotonic()

    logging.basicConfig(
        level=logging.DEBUG if args.VERBOSE else logging.WARNING,
        format='%(levelname)s: %(name)s: %(message)s',
    )

    source = args.FILE or args.TOFU_OUTPUTS
    print(f'Loading topology from {source} ...', file=sys.stderr)

    try:
        if args.FILE:
            document = YamlReader().parse(args.FILE)
        else:
            document = TofuOutputReader().parse(args.TOFU_OUTPUTS)
    except OSError as e:
        print(f'Error: failed to read {source}: {e}', file=sys.stderr)
        return ResolveStatus.ERROR
    except TopologyError as e:
        for problem in e.problems:
            print(f'Error: {problem}', file=sys.stderr)
        return ResolveStatus.ERROR

    try:
        settings = GatewaySettings()
    except pydantic.ValidationError as e:
        print(f'Error: invalid environment settings: {e}', file=sys.stderr)
        return ResolveStatus.ERROR

    driver = ResolveDriver()
    driver.wdir = args.DESTDIR
    driver.dry_run = args.DRY_RUN
    if args.DATADIR:
        driver.template_dir = Path(args.DATADIR)

    snapshot = driver.load(document, settings.as_overrides(), cli_overrides(args))
    if snapshot is None:
        for err in driver.all_errors:
            print(f'Error: {err}', file=sys.stderr)
        return ResolveStatus.ERROR

    print(
        f'Resolving {len(snapshot.private_nodes)} private node(s) '
        f'({snapshot.gateway_mode}, {snapshot.network_mode}) ...',
        file=sys.stderr,
    )
    result = driver.run()

    if result:
        print(f'Resolver returned: {result}', file=sys.stderr)
        return ResolveStatus.ERROR

    for warn in driver.all_warnings:
        print(f'Warning: {warn}', file=sys.stderr)

    if args.DRY_RUN:
        sys.stdout.write(driver.document.to_bytes().decode('utf-8'))
    else:
        for path in driver.file_names.values():
            print(f'Wrote {path}', file=sys.stderr)
    print(f'Document digest: sha256:{driver.document.digest()}', file=sys.stderr)

    elapsed = time.monotonic() - t_start
    hours, remainder = divmod(int(elapsed), 3600)
    minutes, seconds = divmod(remainder, 60)
    print(f'Resolve time: {hours:02d}:{minutes:02d}:{seconds:02d}', file=sys.stderr)

    if driver.all_warnings and args.STRICT:
        return ResolveStatus.WARNING
    return ResolveStatus.SUCCESS


if __name__ == '__main__':
    sys.exit(main())
