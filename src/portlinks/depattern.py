
# Imports from standard library
import logging
import re
from typing import Optional

from .bases import (
    ConnectionSpec, EndpointListing, EndpointRow, PortMode,
    ResolvedEndpoint, Side, TransportKind)

_logger = logging.getLogger(__name__)


def str_match(pattern: str | re.Pattern[str], text: str, exact: bool) -> bool:
    if isinstance(pattern, re.Pattern):
        return bool(pattern.fullmatch(text))
    if exact:
        return pattern == text
    return pattern in text

def side_pattern(spec: ConnectionSpec, side: Side) -> str | re.Pattern[str]:
    if side is Side.SOURCE:
        if spec.source_regex:
            return re.compile(spec.source_pattern)
        return spec.source_pattern

    if spec.dest_regex:
        return re.compile(spec.dest_pattern)
    return spec.dest_pattern

def side_context(spec: ConnectionSpec, side: Side) -> Optional[str]:
    if side is Side.SOURCE:
        return spec.source_context
    return spec.dest_context

def matching_rows(
        listing: EndpointListing, pattern: str | re.Pattern[str],
        port_mode=PortMode.NULL) -> list[EndpointRow]:
    '''all rows of listing where one of the row texts matches pattern.
    Sequencer plain patterns are substrings, graph plain patterns
    are full port names. If port_mode is not NULL, rows of the other
    mode are ignored.'''
    exact = listing.transport is TransportKind.GRAPH
    rows = list[EndpointRow]()

    for row in listing.rows:
        if (port_mode is not PortMode.NULL
                and row.mode is not PortMode.NULL
                and row.mode is not port_mode):
            continue

        for text in row.texts():
            if str_match(pattern, text, exact):
                rows.append(row)
                break
    return rows

def client_header(row: EndpointRow) -> str:
    'the client line of `aconnect -l` above the port lines of row'
    return f"client {row.client_id}: '{row.client_name}'"

def _resolve_sequencer(
        listing: EndpointListing, candidates: list[EndpointRow],
        context: Optional[str], port_id: int) -> list[ResolvedEndpoint]:
    client_ids = list[int]()
    for row in candidates:
        if row.client_id is None or row.client_id in client_ids:
            continue
        # The context is searched in the client line only,
        # never in the port names the primary pattern matched.
        if context is not None and context not in client_header(row):
            continue
        client_ids.append(row.client_id)

    endpoints = list[ResolvedEndpoint]()
    for client_id in client_ids:
        display_name = ''
        for row in listing.rows:
            if row.client_id != client_id:
                continue
            if row.port_id == port_id:
                display_name = row.full_name
                break
            if not display_name:
                display_name = row.client_name

        endpoints.append(
            ResolvedEndpoint(f'{client_id}:{port_id}', display_name))
    return endpoints

def _resolve_graph(
        candidates: list[EndpointRow],
        context: Optional[str]) -> list[ResolvedEndpoint]:
    names = list[str]()
    for row in candidates:
        if context is not None and context not in row.port_name:
            continue
        if row.port_name not in names:
            names.append(row.port_name)

    return [ResolvedEndpoint(name, name) for name in names]

def resolve_side(
        spec: ConnectionSpec, side: Side,
        listing: EndpointListing) -> Optional[ResolvedEndpoint]:
    '''resolve one side of spec in listing.
    Return None if there is no candidate or more than one.'''
    pattern = side_pattern(spec, side)
    context = side_context(spec, side)

    if listing.transport is TransportKind.SEQUENCER:
        port_id = spec.source_port if side is Side.SOURCE else spec.dest_port
        endpoints = _resolve_sequencer(
            listing, matching_rows(listing, pattern), context, port_id)
    else:
        port_mode = PortMode.OUTPUT if side is Side.SOURCE else PortMode.INPUT
        endpoints = _resolve_graph(
            matching_rows(listing, pattern, port_mode), context)

    if len(endpoints) == 1:
        return endpoints[0]

    if len(endpoints) > 1:
        _logger.warning(
            f"{side.describe()} '{spec.pattern(side)}' is ambiguous, "
            f"it matches "
            + ', '.join([f"'{e.display_name}' ({e.transport_address})"
                         for e in endpoints]))
    return None
