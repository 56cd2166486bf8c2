"""
Concurrent lookup service using AnyIO's structured concurrency.
Runs many single lookups without overwhelming upstream WHOIS servers.
"""

from typing import Any, AsyncIterator, Optional

import anyio
import structlog
from anyio import Semaphore, create_memory_object_stream, create_task_group
from anyio.streams.memory import MemoryObjectSendStream

from ..config import Config
from ..errors import InvalidQueryError
from ..models.domain_models import BulkLookupItem
from ..utils.validators import ensure_valid_query
from .whois_service import WhoisService

logger = structlog.get_logger(__name__)


class ConcurrentLookupService:
    """Bulk WHOIS lookups bounded by a semaphore."""

    def __init__(self, config: Config, whois_service: WhoisService | None = None):
        self.config = config
        self.whois_service = whois_service or WhoisService(config)
        self.max_concurrent = config.max_concurrent_lookups
        self.delay_between_requests = config.delay_between_requests

        self.active_lookups = 0
        self.total_lookups = 0
        self.failed_lookups = 0

    async def _perform_single_lookup(self, target: str, semaphore: Semaphore) -> BulkLookupItem:
        async with semaphore:
            self.active_lookups += 1
            try:
                await anyio.sleep(self.delay_between_requests)
                result = await self.whois_service.lookup(target)
                if not result.upstream_reachable:
                    self.failed_lookups += 1
                    return BulkLookupItem(
                        target=target,
                        status="error",
                        data=result,
                        error=f"WHOIS server {result.server} is unreachable",
                    )
                return BulkLookupItem(target=target, status="success", data=result)
            except Exception as e:
                self.failed_lookups += 1
                logger.error("Lookup failed", target=target, error=str(e))
                return BulkLookupItem(target=target, status="error", error=str(e))
            finally:
                self.active_lookups -= 1
                self.total_lookups += 1

    async def bulk_lookup(
        self,
        targets: list[str],
        max_concurrent: Optional[int] = None,
    ) -> AsyncIterator[BulkLookupItem]:
        """
        Look up every target concurrently.
        Yields items as they complete; invalid targets are yielded first.
        """
        semaphore = Semaphore(max_concurrent or self.max_concurrent)

        valid: list[str] = []
        for target in targets:
            try:
                valid.append(ensure_valid_query(target))
            except InvalidQueryError as e:
                yield BulkLookupItem(target=target, status="error", error=e.message)

        if not valid:
            return

        send_stream, receive_stream = create_memory_object_stream[BulkLookupItem](
            max_buffer_size=len(valid)
        )

        async def process_target(target: str, stream: MemoryObjectSendStream[BulkLookupItem]) -> None:
            async with stream:
                await stream.send(await self._perform_single_lookup(target, semaphore))

        async with create_task_group() as tg:
            async with send_stream:
                for target in valid:
                    tg.start_soon(process_target, target, send_stream.clone())

            # Stream ends once every worker's clone is closed
            async with receive_stream:
                async for item in receive_stream:
                    yield item

    def get_statistics(self) -> dict[str, Any]:
        """Get service statistics."""
        return {
            "active_lookups": self.active_lookups,
            "total_lookups": self.total_lookups,
            "failed_lookups": self.failed_lookups,
            "success_rate": (self.total_lookups - self.failed_lookups) / self.total_lookups
            if self.total_lookups > 0
            else 0,
        }
