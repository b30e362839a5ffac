
# Imports from standard library
import logging
import re
from typing import Optional

# Local imports
from .bases import (
    EndpointListing, EndpointRow, ProtoEngine, ResolvedEndpoint,
    TransportKind, TransportQueryFailed)
from . import tools

_logger = logging.getLogger(__name__)

_CLIENT_LINE = re.compile(r'^client\s+(\d+):\s*(.*)$')
_PORT_LINE = re.compile(r"^\s+(\d+)\s+'(.*)'\s*$")


def _client_name(rest: str) -> str:
    '''client name from the end of a client line,
    "'CASIO USB-MIDI' [type=kernel,card=2]" gives "CASIO USB-MIDI".'''
    rest = rest.strip()
    if rest.endswith(']') and ' [' in rest:
        rest = rest.rpartition(' [')[0].rstrip()
    if len(rest) >= 2 and rest[0] == rest[-1] == "'":
        rest = rest[1:-1]
    return rest.strip()

def parse_client_listing(text: str) -> EndpointListing:
    '''parse `aconnect -l` output.

    Each port line is attached to the client line above it, so one
    EndpointRow holds both the client id and the port name.
    A client without any port line gets one row with an empty port
    name, so it can still be found by its client name.'''
    listing = EndpointListing(TransportKind.SEQUENCER)
    client_id: Optional[int] = None
    client_name = ''
    client_has_port = False

    def close_client():
        if client_id is not None and not client_has_port:
            listing.rows.append(EndpointRow(
                TransportKind.SEQUENCER, client_name, '',
                client_id=client_id))

    for line in text.splitlines():
        client_match = _CLIENT_LINE.match(line)
        if client_match:
            close_client()
            client_id = int(client_match.group(1))
            client_name = _client_name(client_match.group(2))
            client_has_port = False
            continue

        port_match = _PORT_LINE.match(line)
        if port_match and client_id is not None:
            listing.rows.append(EndpointRow(
                TransportKind.SEQUENCER, client_name,
                port_match.group(2).strip(),
                client_id=client_id,
                port_id=int(port_match.group(1))))
            client_has_port = True

        # 'Connecting To:' and 'Connected From:' lines are ignored

    close_client()
    return listing


class AlsaEngine(ProtoEngine):
    TRANSPORT = TransportKind.SEQUENCER
    EXECUTABLE = 'aconnect'

    def __init__(self, runner: tools.CommandRunner = tools.run_command):
        self._runner = runner
        self._exec = tools.executable('PORTLINKS_ACONNECT', self.EXECUTABLE)

    def list_endpoints(self) -> EndpointListing:
        try:
            output = tools.checked_output(self._runner, [self._exec, '-l'])
        except tools.CommandError as e:
            raise TransportQueryFailed(
                f'unable to list ALSA sequencer ports: {e}')

        listing = parse_client_listing(output)
        _logger.info(f'ALSA sequencer: {len(listing.clients())} clients, '
                     f'{len(listing)} ports')
        return listing

    def connect_ports(self, source: ResolvedEndpoint,
                      dest: ResolvedEndpoint):
        try:
            tools.checked_output(
                self._runner,
                [self._exec, source.transport_address,
                 dest.transport_address])
        except tools.CommandError as e:
            if 'already subscribed' in e.message:
                _logger.info(
                    f'{source.display_name} already connected '
                    f'to {dest.display_name}')
                return
            raise
