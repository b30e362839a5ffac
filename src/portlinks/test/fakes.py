import subprocess

from portlinks.bases import (
    EndpointListing, EndpointRow, PortMode, ProtoEngine, ResolvedEndpoint,
    TransportKind, TransportQueryFailed)
from portlinks.pw_engine import parse_port_names
from portlinks.tools import CommandError

ACONNECT_LIST = """\
client 0: 'System' [type=kernel]
    0 'Timer           '
	Connecting To: 142:0
    1 'Announce        '
	Connecting To: 142:0, 128:0
client 14: 'Midi Through' [type=kernel]
    0 'Midi Through Port-0'
client 20: 'CASIO USB-MIDI' [type=kernel,card=2]
    0 'CASIO USB-MIDI MIDI 1'
client 128: 'edo72-in' [type=user,pid=4242]
    0 'edo72-in        '
client 129: 'sampler-in' [type=user,pid=4243]
    0 'input           '
    1 'control         '
"""

PW_OUTPUTS = """\
Midi-Bridge:Midi Through:(capture_0) Midi Through Port-0
Midi-Bridge:CASIO USB-MIDI:(capture_0) CASIO USB-MIDI MIDI 1
Midi-Bridge:edo72-out:(capture_0) out
REAPER:out1
REAPER:out2
"""

PW_INPUTS = """\
Midi-Bridge:Midi Through:(playback_0) Midi Through Port-0
REAPER:MIDI Input 1
REAPER:MIDI Input 2
REAPER:MIDI Input 4
"""


class FakeRunner:
    '''replace subprocess calls, answers are found with the
    command arguments, all calls are recorded.'''
    def __init__(self, answers: dict[tuple[str, ...], tuple[int, str, str]],
                 missing=False):
        self.answers = answers
        self.missing = missing
        self.calls = list[list[str]]()

    def __call__(self, args: list[str]) -> subprocess.CompletedProcess:
        self.calls.append(list(args))
        if self.missing:
            raise FileNotFoundError(args[0])

        returncode, stdout, stderr = self.answers.get(tuple(args), (0, '', ''))
        return subprocess.CompletedProcess(args, returncode, stdout, stderr)


class FakeEngine(ProtoEngine):
    def __init__(self, transport: TransportKind, rows: list[EndpointRow],
                 fail_query=False, connect_error=''):
        self.TRANSPORT = transport
        self.rows = rows
        self.fail_query = fail_query
        self.connect_error = connect_error
        self.queries = 0
        self.connections = list[tuple[str, str]]()

    def list_endpoints(self) -> EndpointListing:
        self.queries += 1
        if self.fail_query:
            raise TransportQueryFailed(f'{self.TRANSPORT.value} is down')
        return EndpointListing(self.TRANSPORT, list(self.rows))

    def connect_ports(self, source: ResolvedEndpoint,
                      dest: ResolvedEndpoint):
        self.connections.append(
            (source.transport_address, dest.transport_address))
        if self.connect_error:
            raise CommandError(
                ['connect', source.transport_address,
                 dest.transport_address], self.connect_error, 1)


def seq_row(client_id: int, client_name: str, port_name='',
            port_id=0) -> EndpointRow:
    return EndpointRow(
        TransportKind.SEQUENCER, client_name, port_name,
        client_id=client_id, port_id=port_id if port_name else None)

def graph_rows(outputs: list[str], inputs: list[str]) -> list[EndpointRow]:
    return (parse_port_names('\n'.join(outputs), PortMode.OUTPUT)
            + parse_port_names('\n'.join(inputs), PortMode.INPUT))
