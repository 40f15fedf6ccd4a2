"""Single-call and batch dispatch to upstream endpoints.

Single calls are a transparent passthrough: the original bytes go upstream
and the upstream status, headers and body come back unchanged.

Batches are split by destination. Each destination receives one aggregated
batch, issued concurrently with the others, and the returned result arrays
are concatenated. A destination whose sub-batch cannot be built or
forwarded, or whose body is not a JSON array, contributes nothing; the rest
of the batch is unaffected. Result records are kept as the exact JSON text
the upstream sent. Results are grouped by destination (first-appearance
order), not by the inbound order, so callers correlate by id.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Protocol

from jsonrpc_proxy.core.errors import ForwardError
from jsonrpc_proxy.rpc.classifier import decode_text, split_json_array
from jsonrpc_proxy.rpc.protocol import serialize_call
from jsonrpc_proxy.rpc.types import Call

if TYPE_CHECKING:
    from jsonrpc_proxy.forwarder import UpstreamResponse
    from jsonrpc_proxy.routing.table import RouteTable

logger = logging.getLogger(__name__)


class PayloadForwarder(Protocol):
    """Protocol for anything that can POST a payload to a URL."""

    async def forward(self, url: str, payload: bytes) -> UpstreamResponse: ...


def group_by_destination(calls: list[Call], table: RouteTable) -> dict[str, list[Call]]:
    """Partition calls by resolved destination.

    Keys keep first-appearance order, calls keep inbound order within a group.
    """
    groups: dict[str, list[Call]] = {}
    for call in calls:
        url = table.resolve(call.method)
        groups.setdefault(url, []).append(call)
        if call.has_id:
            logger.debug("Batch request: method '%s' (ID: %r) to %s", call.method, call.id, url)
        else:
            logger.debug("Batch notification: method '%s' to %s", call.method, url)
    return groups


def build_batch_body(calls: list[Call]) -> bytes:
    """Wrap serialized calls in a JSON array, joined with commas."""
    return ("[" + ",".join(serialize_call(call) for call in calls) + "]").encode("utf-8")


def join_records(records: list[str]) -> bytes:
    """Build the merged batch response body from raw result records."""
    return ("[" + ",".join(records) + "]").encode("utf-8")


class Dispatcher:
    """Routes calls to upstream endpoints using a RouteTable.

    The table is read-only and may be shared by any number of concurrent
    dispatch operations.
    """

    def __init__(self, table: RouteTable, forwarder: PayloadForwarder) -> None:
        self._table = table
        self._forwarder = forwarder

    async def dispatch_single(self, call: Call, raw: bytes) -> UpstreamResponse:
        """Forward one call's original bytes to its destination.

        Args:
            call: The parsed call, used only to pick the destination.
            raw: The request body exactly as received.

        Returns:
            The upstream response, unmodified.

        Raises:
            ForwardError: If the upstream could not be reached.
        """
        url = self._table.resolve(call.method)
        logger.info("Proxying method '%s' to %s", call.method, url)
        return await self._forwarder.forward(url, raw)

    async def dispatch_batch(self, calls: list[Call]) -> list[str]:
        """Dispatch a batch, one upstream request per distinct destination.

        Args:
            calls: The parsed calls in inbound order.

        Returns:
            The merged result records, each as the JSON text the upstream
            sent. Empty if the batch was empty or every destination failed.
        """
        groups = group_by_destination(calls, self._table)
        if not groups:
            return []

        contributions = await asyncio.gather(
            *(self._dispatch_group(url, group) for url, group in groups.items())
        )

        merged: list[str] = []
        for records in contributions:
            merged.extend(records)
        return merged

    async def _dispatch_group(self, url: str, calls: list[Call]) -> list[str]:
        """Forward one destination's calls and split its result array.

        Any failure drops this group's results and is only logged.
        """
        try:
            body = build_batch_body(calls)
        except ValueError as e:
            logger.warning("Error building batch for %s: %s", url, e)
            return []

        try:
            response = await self._forwarder.forward(url, body)
        except ForwardError as e:
            logger.warning("Error forwarding batch to %s: %s", url, e.reason)
            return []

        try:
            return split_json_array(decode_text(response.body))
        except ValueError as e:
            logger.warning("Error parsing batch response from %s: %s", url, e)
            return []
