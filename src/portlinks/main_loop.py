
# Imports from standard library
import argparse
import logging
import os
import sys
from pathlib import Path
from typing import Optional

# Local imports
from .bases import PortlinksError, ProtoEngine, TransportKind
from .alsa_engine import AlsaEngine
from .pw_engine import PipeWireEngine
from .resolver import Resolver, failed_count
from . import profiles
from . import tools
from . import __version__

_logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILED_CONNECTIONS = 1
EXIT_CONFIG_ERROR = 2


def log_level_arg(arg: str) -> int:
    if arg.isdigit():
        return int(arg)

    uarg = arg.upper()
    if (uarg in logging.__dict__.keys()
            and isinstance(logging.__dict__[uarg], int)):
        return logging.__dict__[uarg]
    raise argparse.ArgumentTypeError(f"unknown log level '{arg}'")

def transport_arg(arg: str) -> TransportKind:
    try:
        return TransportKind.from_input(arg)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e))


class ArgParser(argparse.ArgumentParser):
    def __init__(self):
        argparse.ArgumentParser.__init__(
            self, prog='portlinks',
            description='Connect MIDI ports of the ALSA sequencer '
                        'and of the PipeWire graph from a profile.')
        self.add_argument(
            '--log', type=log_level_arg, default=logging.WARNING,
            help='set log level (name or number)')
        self.add_argument(
            '--debug', '-d', action='store_const', dest='log',
            const=logging.DEBUG, help='same as --log DEBUG')
        self.add_argument(
            '--config-dir', '-c', type=Path, default=None,
            help='use a custom config dir to find profiles')
        self.add_argument(
            '-v', '--version', action='version', version=__version__)

        subparsers = self.add_subparsers(
            dest='command', required=True,
            parser_class=argparse.ArgumentParser)

        connect = subparsers.add_parser(
            'connect', help='make all connections of a profile')
        connect.add_argument(
            'target', nargs='?', default=None,
            help='profile name or yaml profiles file, '
                 'default is $PORTLINKS_PROFILE')
        connect.add_argument(
            '--profile', '-p', type=str, default=None,
            help='profile to use if the file contains many profiles')
        connect.add_argument(
            '--stop-on-error', action='store_true',
            help='stop at the first connection not done')
        connect.add_argument(
            '--dry-run', '-n', action='store_true',
            help='only resolve ports, do not connect them')

        subparsers.add_parser(
            'profiles', help='list available profiles')

        ports = subparsers.add_parser(
            'ports', help='list ports as seen by the resolver')
        ports.add_argument(
            '--transport', '-t', type=transport_arg, default=None,
            help='sequencer or graph, default is both')


def setup_logging(level: int):
    root_logger = logging.getLogger(__name__.partition('.')[0])
    if not root_logger.handlers:
        log_handler = logging.StreamHandler()
        log_handler.setFormatter(logging.Formatter(
            "%(levelname)s:%(name)s - %(message)s"))
        root_logger.addHandler(log_handler)
    root_logger.setLevel(level)

def default_engines(
        runner: tools.CommandRunner = tools.run_command) -> list[ProtoEngine]:
    return [AlsaEngine(runner), PipeWireEngine(runner)]

def connect(args: argparse.Namespace,
            engines: list[ProtoEngine]) -> int:
    target: Optional[str] = args.target or os.getenv('PORTLINKS_PROFILE')
    if not target:
        _logger.error('No profile given, and PORTLINKS_PROFILE is not set')
        return EXIT_CONFIG_ERROR

    profile = profiles.find_profile(target, args.profile, args.config_dir)
    specs = profile.connections
    if not specs:
        _logger.warning(f"profile '{profile.name}' has no connections")

    resolver = Resolver(
        engines, stop_on_error=args.stop_on_error, dry_run=args.dry_run)
    results = resolver.resolve(specs)

    for result in results:
        print(result.report_line())

    # specs skipped with --stop-on-error count as failed
    n_failed = failed_count(results) + len(specs) - len(results)
    if n_failed:
        sys.stderr.write(
            f'{n_failed} of {len(specs)} connections failed.\n')
        return EXIT_FAILED_CONNECTIONS
    return EXIT_OK

def list_profiles(args: argparse.Namespace) -> int:
    for name, profile in sorted(profiles.all_profiles(args.config_dir).items()):
        line = f'{name}: {len(profile.connections)} connections ' \
               f'({profile.origin})'
        if profile.description:
            line += f' - {profile.description}'
        print(line)
    return EXIT_OK

def list_ports(args: argparse.Namespace,
               engines: list[ProtoEngine]) -> int:
    ret = EXIT_OK

    for engine in engines:
        if args.transport is not None and engine.TRANSPORT is not args.transport:
            continue

        print(f'=== {engine.TRANSPORT.value} ({engine.EXECUTABLE}) ===')
        try:
            listing = engine.list_endpoints()
        except PortlinksError as e:
            print(f'  {e}')
            ret = EXIT_FAILED_CONNECTIONS
            continue

        for row in listing.rows:
            if engine.TRANSPORT is TransportKind.SEQUENCER:
                port_id = '-' if row.port_id is None else str(row.port_id)
                print(f'  {row.client_id:3d}:{port_id:<2} {row.full_name}')
            else:
                print(f'  {row.mode.name.lower():<6} {row.full_name}')
    return ret

def main(argv: Optional[list[str]] = None,
         engines: Optional[list[ProtoEngine]] = None) -> int:
    args = ArgParser().parse_args(argv)
    setup_logging(args.log)

    if engines is None:
        engines = default_engines()

    try:
        match args.command:
            case 'connect':
                return connect(args, engines)
            case 'profiles':
                return list_profiles(args)
            case 'ports':
                return list_ports(args, engines)
    except PortlinksError as e:
        _logger.error(str(e))
        return EXIT_CONFIG_ERROR

    return EXIT_OK

def run():
    sys.exit(main())
