
# Imports from standard library
import logging
import re
from pathlib import Path
from typing import Optional, Type, TypeVar

# third party imports
from ruamel.yaml import YAML
from ruamel.yaml.comments import CommentedMap, CommentedSeq, LineCol
from ruamel.yaml.error import YAMLError

from .bases import ConnectionSpec, ProfileError, TransportKind


_logger = logging.getLogger(__name__)
file_path = ''
'Contains the path of the yaml profiles file, only for logging.'

T = TypeVar('T')


class Profile:
    def __init__(self, name: str, connections: list[ConnectionSpec],
                 description='', origin=''):
        self.name = name
        self.connections = connections
        self.description = description
        self.origin = origin
        'file path of the profile, or "built-in"'

    def __repr__(self) -> str:
        return f'Profile({self.name}, {len(self.connections)} connections)'


def _err_reading_yaml(
        el: CommentedMap | CommentedSeq,
        key: str | int, msg: str):
    '''log a warning because something in the yaml file was not
    properly written. It retrieves the line where the error is.

    If `el` is a CommentedMap (dict), key must be a str, else if
    `el` is a CommentedSeq (list), key is an int (the index in the list)'''
    if not isinstance(getattr(el, 'lc', None), LineCol):
        _logger.warning(f'File {file_path}: {msg}')
        return

    try:
        if isinstance(el, CommentedMap):
            linecol = el.lc.key(key)
        else:
            linecol = el.lc.item(key)
    except (KeyError, IndexError):
        # missing key, report the line of the map itself
        linecol = (el.lc.line, el.lc.col)

    if (not isinstance(linecol, tuple)
            or not linecol
            or linecol[0] is None):
        _logger.warning(f'File {file_path}: {msg}')
        return

    _logger.warning(f'File {file_path},\n\tLine {linecol[0]+1}: {msg}')

def _type_to_str(wanted_type: type) -> str:
    if wanted_type is list:
        return 'list'
    if wanted_type is dict:
        return 'dict/map'
    if wanted_type is str:
        return 'string'
    if wanted_type is int:
        return 'integer'
    return ''

def item_at(map: CommentedMap, key: str, wanted_type: Type[T]) -> T | None:
    item = map.get(key)
    if item is None:
        return

    if isinstance(item, wanted_type) and not (
            wanted_type is int and isinstance(item, bool)):
        return item
    _err_reading_yaml(
        map, key, f'"{key}" must be a {_type_to_str(wanted_type)}')

def _side_from_yaml(
        conn_d: CommentedMap, prefix: str) -> Optional[tuple[str, bool]]:
    '''read "from"/"from_pattern" or "to"/"to_pattern" keys,
    return the pattern and if it is a regular expression.'''
    pattern = item_at(conn_d, f'{prefix}_pattern', str)
    if pattern is not None:
        try:
            re.compile(pattern)
        except re.error as e:
            _err_reading_yaml(
                conn_d, f'{prefix}_pattern',
                f"Incorrect pattern '{pattern}', ignored.\n\t{e}")
            return None
        return pattern, True

    name = item_at(conn_d, prefix, str)
    if name:
        return name, False
    return None

def load_connection(
        conn_d: CommentedMap,
        default_transport: Optional[TransportKind]) -> Optional[ConnectionSpec]:
    transport = default_transport
    transport_str = item_at(conn_d, 'transport', str)
    if transport_str is not None:
        try:
            transport = TransportKind.from_input(transport_str)
        except ValueError as e:
            _err_reading_yaml(conn_d, 'transport', str(e))
            return None

    if transport is None:
        _err_reading_yaml(conn_d, 'transport', 'transport is missing')
        return None

    source = _side_from_yaml(conn_d, 'from')
    dest = _side_from_yaml(conn_d, 'to')
    if source is None or dest is None:
        return None

    ports = dict[str, int]()
    for key in ('from_port', 'to_port'):
        port = item_at(conn_d, key, int)
        if port is not None and port < 0:
            _err_reading_yaml(conn_d, key, f'"{key}" can not be negative')
            return None
        ports[key] = port or 0

    return ConnectionSpec(
        transport, source[0], dest[0],
        label=item_at(conn_d, 'label', str) or '',
        source_context=item_at(conn_d, 'from_context', str),
        dest_context=item_at(conn_d, 'to_context', str),
        source_port=ports['from_port'],
        dest_port=ports['to_port'],
        source_regex=source[1],
        dest_regex=dest[1])

def load_connections(
        yaml_list: CommentedSeq,
        default_transport: Optional[TransportKind] = None) \
            -> list[ConnectionSpec]:
    specs = list[ConnectionSpec]()

    for i, conn_d in enumerate(yaml_list):
        if not isinstance(conn_d, CommentedMap):
            _err_reading_yaml(
                yaml_list, i, 'connection is not a dict/map')
            continue

        spec = load_connection(conn_d, default_transport)
        if spec is None:
            _err_reading_yaml(
                yaml_list, i, 'Connection incomplete or not correct, ignored')
            continue
        specs.append(spec)

    return specs

def _load_profile(name: str, prof_map: CommentedMap, origin: str) -> Profile:
    default_transport: Optional[TransportKind] = None
    transport_str = item_at(prof_map, 'transport', str)
    if transport_str is not None:
        try:
            default_transport = TransportKind.from_input(transport_str)
        except ValueError as e:
            _err_reading_yaml(prof_map, 'transport', str(e))

    conns = item_at(prof_map, 'connections', CommentedSeq)
    if conns is None:
        conns = CommentedSeq()

    return Profile(
        name, load_connections(conns, default_transport),
        description=item_at(prof_map, 'description', str) or '',
        origin=origin)

def profiles_from_map(yaml_map: CommentedMap, origin: str,
                      anonymous_name: str) -> dict[str, Profile]:
    '''read all profiles in yaml_map.

    A file can contain a "profiles" map, or directly a "connections"
    list, in this case the profile is named `anonymous_name`.'''
    profiles = dict[str, Profile]()

    profiles_map = item_at(yaml_map, 'profiles', CommentedMap)
    if profiles_map is not None:
        for name, prof_map in profiles_map.items():
            if not isinstance(prof_map, CommentedMap):
                _err_reading_yaml(
                    profiles_map, name, f'profile "{name}" is not a dict/map')
                continue
            profiles[str(name)] = _load_profile(str(name), prof_map, origin)

    if 'connections' in yaml_map:
        profiles[anonymous_name] = _load_profile(
            anonymous_name, yaml_map, origin)

    return profiles

def load_string(contents: str, origin: str,
                anonymous_name='default') -> dict[str, Profile]:
    global file_path
    file_path = origin

    yaml = YAML()
    try:
        yaml_map = yaml.load(contents)
    except YAMLError as e:
        raise ProfileError(f'{origin} is not a correct .yaml file\n{e}')

    if not isinstance(yaml_map, CommentedMap):
        raise ProfileError(f'{origin} is not a yaml map')

    return profiles_from_map(yaml_map, origin, anonymous_name)

def load_file(yaml_path: Path) -> dict[str, Profile]:
    try:
        with open(yaml_path, 'r') as f:
            contents = f.read()
    except OSError as e:
        raise ProfileError(f'unable to read file {yaml_path}: {e}')

    _logger.debug(f'read profiles in {yaml_path}')
    return load_string(contents, str(yaml_path), yaml_path.stem)
