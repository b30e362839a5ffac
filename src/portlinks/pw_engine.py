
# Imports from standard library
import logging

# Local imports
from .bases import (
    EndpointListing, EndpointRow, PortMode, ProtoEngine, ResolvedEndpoint,
    TransportKind, TransportQueryFailed)
from . import tools

_logger = logging.getLogger(__name__)


def parse_port_names(text: str, port_mode: PortMode) -> list[EndpointRow]:
    '''parse `pw-link --output` or `pw-link --input` output,
    one full port name per line.'''
    rows = list[EndpointRow]()
    for line in text.splitlines():
        name = line.strip()
        if not name or line[0].isspace():
            # empty line or link line of 'pw-link -l'
            continue

        rows.append(EndpointRow(
            TransportKind.GRAPH, name.partition(':')[0], name,
            mode=port_mode))
    return rows


class PipeWireEngine(ProtoEngine):
    TRANSPORT = TransportKind.GRAPH
    EXECUTABLE = 'pw-link'

    def __init__(self, runner: tools.CommandRunner = tools.run_command):
        self._runner = runner
        self._exec = tools.executable('PORTLINKS_PW_LINK', self.EXECUTABLE)

    def list_endpoints(self) -> EndpointListing:
        listing = EndpointListing(TransportKind.GRAPH)

        for option, port_mode in (('--output', PortMode.OUTPUT),
                                  ('--input', PortMode.INPUT)):
            try:
                output = tools.checked_output(
                    self._runner, [self._exec, option])
            except tools.CommandError as e:
                raise TransportQueryFailed(
                    f'unable to list PipeWire ports: {e}')
            listing.rows += parse_port_names(output, port_mode)

        _logger.info(f'PipeWire graph: {len(listing)} ports')
        return listing

    def connect_ports(self, source: ResolvedEndpoint,
                      dest: ResolvedEndpoint):
        try:
            tools.checked_output(
                self._runner,
                [self._exec, source.transport_address,
                 dest.transport_address])
        except tools.CommandError as e:
            if 'File exists' in e.message:
                _logger.info(
                    f"'{source.display_name}' already linked "
                    f"to '{dest.display_name}'")
                return
            raise
