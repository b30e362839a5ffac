
# Imports from standard library
from dataclasses import dataclass, field
from enum import Enum, Flag, IntEnum, auto
from typing import Optional, TypeAlias

# Type aliases
FullPortName: TypeAlias = str
'Full port name string under the form "client_name:port_name"'

TransportAddress: TypeAlias = str
'''address given to the connect command,
"client_id:port_id" for the sequencer, full port name for the graph'''


class PortlinksError(Exception):
    def __init__(self, *args):
        super().__init__(*args)


class TransportQueryFailed(PortlinksError):
    '''The listing command of a transport could not be run
    or returned an error.'''


class ProfileError(PortlinksError):
    '''A profile does not exist or its file can not be read.'''


class TransportKind(Enum):
    SEQUENCER = 'sequencer'
    'ALSA sequencer, ports addressed with numeric client:port'

    GRAPH = 'graph'
    'PipeWire/JACK graph, ports addressed with their full names'

    @staticmethod
    def from_input(input: str) -> 'TransportKind':
        match input.lower():
            case 'sequencer' | 'alsa' | 'aconnect' | 'seq':
                return TransportKind.SEQUENCER
            case 'graph' | 'pipewire' | 'pw-link' | 'jack':
                return TransportKind.GRAPH
        raise ValueError(f"unknown transport '{input}'")


class PortMode(IntEnum):
    NULL = 0
    OUTPUT = 1
    INPUT = 2


class Side(Flag):
    SOURCE = auto()
    DEST = auto()

    def describe(self) -> str:
        words = list[str]()
        if Side.SOURCE in self:
            words.append('source')
        if Side.DEST in self:
            words.append('destination')
        return ' and '.join(words)


@dataclass(frozen=True)
class ConnectionSpec:
    transport: TransportKind
    source_pattern: str
    dest_pattern: str
    label: str = ''
    source_context: Optional[str] = None
    '''secondary pattern, the source record must also contain it.
    Used when many clients mention the primary pattern.'''
    dest_context: Optional[str] = None
    source_port: int = 0
    'sequencer port number used for the source client'
    dest_port: int = 0
    source_regex: bool = False
    dest_regex: bool = False

    def __post_init__(self):
        if not self.source_pattern:
            raise ValueError('source pattern can not be empty')
        if not self.dest_pattern:
            raise ValueError('destination pattern can not be empty')
        if self.source_port < 0 or self.dest_port < 0:
            raise ValueError('port numbers can not be negative')
        if not self.label:
            object.__setattr__(
                self, 'label',
                f'{self.source_pattern} -> {self.dest_pattern}')

    def pattern(self, side: Side) -> str:
        if side is Side.SOURCE:
            return self.source_pattern
        return self.dest_pattern

    def describe_missing(self, sides: Side) -> str:
        parts = list[str]()
        if Side.SOURCE in sides:
            parts.append(f"source '{self.source_pattern}'")
        if Side.DEST in sides:
            parts.append(f"destination '{self.dest_pattern}'")
        return ' and '.join(parts)


@dataclass(frozen=True)
class EndpointRow:
    '''One port of a transport listing.

    For the sequencer, the client header line and the port line
    of `aconnect -l` are parsed together into one row.'''
    transport: TransportKind
    client_name: str
    port_name: str
    client_id: Optional[int] = None
    port_id: Optional[int] = None
    mode: PortMode = PortMode.NULL

    @property
    def full_name(self) -> FullPortName:
        if self.transport is TransportKind.GRAPH:
            return self.port_name
        if not self.port_name:
            return self.client_name
        return f'{self.client_name}:{self.port_name}'

    def texts(self) -> tuple[str, ...]:
        'all the strings a pattern is allowed to match for this row'
        if self.transport is TransportKind.GRAPH:
            return (self.port_name,)
        return tuple(dict.fromkeys(
            t for t in (self.client_name, self.port_name, self.full_name)
            if t))


@dataclass
class EndpointListing:
    transport: TransportKind
    rows: list[EndpointRow] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.rows)

    def clients(self) -> dict[int, str]:
        return {row.client_id: row.client_name for row in self.rows
                if row.client_id is not None}


@dataclass(frozen=True)
class ResolvedEndpoint:
    transport_address: TransportAddress
    display_name: str


class ResultStatus(Enum):
    CONNECTED = auto()
    RESOLVED = auto()
    'both sides resolved, no connect command issued (dry run)'
    ENDPOINT_NOT_FOUND = auto()
    CONNECT_FAILED = auto()
    TRANSPORT_FAILED = auto()


@dataclass(frozen=True)
class ConnectionResult:
    spec: ConnectionSpec
    status: ResultStatus
    missing: Optional[Side] = None
    error: str = ''
    source: Optional[ResolvedEndpoint] = None
    dest: Optional[ResolvedEndpoint] = None

    @property
    def ok(self) -> bool:
        return self.status in (ResultStatus.CONNECTED, ResultStatus.RESOLVED)

    def report_line(self) -> str:
        label = self.spec.label
        match self.status:
            case ResultStatus.CONNECTED:
                return f'Connected: {label}'
            case ResultStatus.RESOLVED:
                return (f'Resolved: {label}: '
                        f'{self.source.transport_address} -> '
                        f'{self.dest.transport_address}')
            case ResultStatus.ENDPOINT_NOT_FOUND:
                return (f'Warning: could not find {label}: '
                        f'{self.spec.describe_missing(self.missing)}')
            case _:
                return f'Failed: {label}: {self.error}'


class ProtoEngine:
    '''Base of the transport engines.

    An engine lists the ports of its transport and connects them.'''
    TRANSPORT = TransportKind.SEQUENCER
    EXECUTABLE = ''

    def list_endpoints(self) -> EndpointListing:
        raise NotImplementedError

    def connect_ports(self, source: ResolvedEndpoint,
                      dest: ResolvedEndpoint):
        'connect two resolved endpoints, raise CommandError on failure'
        raise NotImplementedError
