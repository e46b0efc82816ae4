# -*- encoding: utf-8 -*-
"""
KCQL Request dispatcher - bounded worker pool in front of the gateway.

Every gateway call goes through the dispatcher. A pool of long-lived
worker threads runs the calls and a counting gate caps how many are in
flight at once; with the default concurrency of 1, calls to the cluster
API never overlap.
"""

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor, wait
from dataclasses import dataclass
from typing import Any, Iterable, Optional

from kcql.discovery import ResourceCoordinate
from kcql.exceptions import APIError
from kcql.gateway import ApiGateway
from kcql.translator import Operation

logger = logging.getLogger(__name__)


@dataclass
class ApiRequest:
    """
    One gateway call.

    Attributes:
        operation: Gateway operation to perform
        coordinate: Resource collection (unused for DISCOVER)
        namespace: Namespace scope, None for all / cluster-scoped
        name: Resource name (PATCH, DELETE)
        body: Document (CREATE) or merge patch (PATCH)
        field_selector: Field selector (LIST)
        label_selector: Label selector (LIST)
        binding: Query binding the call is made for, used in errors
    """
    operation: Operation
    coordinate: Optional[ResourceCoordinate] = None
    namespace: Optional[str] = None
    name: str = ""
    body: Optional[dict] = None
    field_selector: str = ""
    label_selector: str = ""
    binding: str = ""

    @property
    def kind(self) -> str:
        return self.coordinate.kind if self.coordinate else ""


class RequestDispatcher:
    """
    Runs gateway calls on a worker pool behind a counting gate.

    Usage:
        dispatcher = RequestDispatcher(gateway, concurrency=1)
        docs = dispatcher.call(ApiRequest(Operation.LIST, coordinate, "default"))
        futures = [dispatcher.submit(r) for r in requests]
        dispatcher.close()
    """

    def __init__(self, gateway: ApiGateway, concurrency: int = 1):
        if concurrency < 1:
            raise ValueError("concurrency must be at least 1")
        self.gateway = gateway
        self.concurrency = concurrency
        self._gate = threading.BoundedSemaphore(concurrency)
        self._pool = ThreadPoolExecutor(max_workers=concurrency, thread_name_prefix="kcql-worker")

    def submit(self, request: ApiRequest) -> Future:
        """Queue a request; the future resolves to the gateway's result."""
        return self._pool.submit(self._run, request)

    def call(self, request: ApiRequest) -> Any:
        """
        Run a request and wait for its result.

        Raises:
            APIError: If the gateway call fails
        """
        return self.submit(request).result()

    def call_all(self, requests: Iterable[ApiRequest]) -> list[Any]:
        """
        Fan requests out and wait for all of them.

        Returns:
            Results in request order

        Raises:
            APIError: The first failure in request order, once all calls
                have finished
        """
        futures = [self.submit(request) for request in requests]
        wait(futures)
        return [future.result() for future in futures]

    def close(self) -> None:
        """Shut the worker pool down, waiting for queued calls."""
        self._pool.shutdown(wait=True)

    def __enter__(self) -> "RequestDispatcher":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _run(self, request: ApiRequest) -> Any:
        with self._gate:
            logger.debug(
                "Dispatching %s %s (binding %s)",
                request.operation.value,
                request.coordinate or "",
                request.binding or "-",
            )
            try:
                return self._dispatch(request)
            except APIError as e:
                raise e.with_context(binding=request.binding, kind=request.kind)

    def _dispatch(self, request: ApiRequest) -> Any:
        op = request.operation
        if op == Operation.DISCOVER:
            return self.gateway.discover()
        if op == Operation.LIST:
            return self.gateway.list(
                request.coordinate,
                request.namespace,
                request.field_selector,
                request.label_selector,
            )
        if op == Operation.CREATE:
            return self.gateway.create(request.coordinate, request.namespace, request.body)
        if op == Operation.PATCH:
            return self.gateway.patch(request.coordinate, request.namespace, request.name, request.body)
        if op == Operation.DELETE:
            return self.gateway.delete(request.coordinate, request.namespace, request.name)
        raise ValueError(f"Unknown operation: {op}")
