'''Turn a list of ConnectionSpec into a list of ConnectionResult.

Specs are processed one by one, in the given order. Listings are fetched
once per transport during a run, and forgotten at the end of the run,
because ports come and go between runs.'''

# Imports from standard library
import logging
from typing import Iterable, Optional

from .bases import (
    ConnectionResult, ConnectionSpec, EndpointListing, ProtoEngine,
    ResultStatus, Side, TransportKind, TransportQueryFailed)
from . import depattern
from . import tools

_logger = logging.getLogger(__name__)


class Resolver:
    def __init__(self, engines: Iterable[ProtoEngine],
                 stop_on_error=False, dry_run=False):
        self.engines = dict[TransportKind, ProtoEngine]()
        for engine in engines:
            self.engines[engine.TRANSPORT] = engine

        self.stop_on_error = stop_on_error
        '''if True, the run stops at the first spec which
        is not connected, remaining specs are not processed.'''
        self.dry_run = dry_run
        'if True, endpoints are resolved but never connected'

        self._listings = dict[TransportKind, EndpointListing]()
        self._query_errors = dict[TransportKind, str]()

    def _listing(self, transport: TransportKind) -> Optional[EndpointListing]:
        '''listing of the transport for the current run,
        None if it could not be obtained.'''
        if transport in self._query_errors:
            return None

        listing = self._listings.get(transport)
        if listing is not None:
            return listing

        engine = self.engines.get(transport)
        if engine is None:
            self._query_errors[transport] = \
                f'no engine available for {transport.value} transport'
            _logger.error(self._query_errors[transport])
            return None

        try:
            listing = engine.list_endpoints()
        except TransportQueryFailed as e:
            self._query_errors[transport] = str(e)
            _logger.error(str(e))
            return None

        self._listings[transport] = listing
        return listing

    def resolve_one(self, spec: ConnectionSpec) -> ConnectionResult:
        listing = self._listing(spec.transport)
        if listing is None:
            return ConnectionResult(
                spec, ResultStatus.TRANSPORT_FAILED,
                error=self._query_errors[spec.transport])

        source = depattern.resolve_side(spec, Side.SOURCE, listing)
        dest = depattern.resolve_side(spec, Side.DEST, listing)

        missing: Optional[Side] = None
        if source is None:
            missing = Side.SOURCE
        if dest is None:
            missing = Side.DEST if missing is None else missing | Side.DEST

        if missing is not None:
            _logger.warning(
                f"'{spec.label}': {spec.describe_missing(missing)} "
                f"not found in {spec.transport.value} ports")
            return ConnectionResult(
                spec, ResultStatus.ENDPOINT_NOT_FOUND, missing=missing,
                source=source, dest=dest)

        _logger.info(
            f"'{spec.label}': {source.display_name} "
            f"({source.transport_address}) -> {dest.display_name} "
            f"({dest.transport_address})")

        if self.dry_run:
            return ConnectionResult(
                spec, ResultStatus.RESOLVED, source=source, dest=dest)

        try:
            self.engines[spec.transport].connect_ports(source, dest)
        except tools.CommandError as e:
            _logger.warning(f"Failed to connect '{spec.label}': {e}")
            return ConnectionResult(
                spec, ResultStatus.CONNECT_FAILED, error=str(e),
                source=source, dest=dest)

        return ConnectionResult(
            spec, ResultStatus.CONNECTED, source=source, dest=dest)

    def resolve(self, specs: Iterable[ConnectionSpec]) -> list[ConnectionResult]:
        'process all specs, in order, with fresh listings'
        self._listings.clear()
        self._query_errors.clear()

        results = list[ConnectionResult]()
        try:
            for spec in specs:
                result = self.resolve_one(spec)
                results.append(result)

                if self.stop_on_error and not result.ok:
                    _logger.info(
                        f"stop after '{spec.label}' on first error")
                    break
        finally:
            self._listings.clear()
            self._query_errors.clear()

        return results


def failed_count(results: list[ConnectionResult]) -> int:
    return len([r for r in results if not r.ok])
