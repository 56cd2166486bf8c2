"""
WHOIS lookup orchestration: resolve, query, follow one referral.
"""

import structlog

from ..config import Config
from ..models.domain_models import LookupResult
from .referral import find_referral
from .server_resolver import ServerResolver, ServerTable
from .whois_transport import WhoisTransport

logger = structlog.get_logger(__name__)


class WhoisService:
    """Asynchronous WHOIS lookups with single-hop referral following."""

    def __init__(
        self,
        config: Config,
        resolver: ServerResolver | None = None,
        transport: WhoisTransport | None = None,
    ) -> None:
        self.config = config
        self.resolver = resolver or ServerResolver(ServerTable.from_config(config))
        self.transport = transport or WhoisTransport(
            timeout=config.whois_timeout, port=config.whois_port
        )

    async def lookup(self, query: str) -> LookupResult:
        """Look up an already validated domain or IP.

        At most two upstream round trips are made: the primary server and,
        when it names a different one, the referral. A referral that
        answers with nothing leaves the primary answer in place.
        """
        query = query.strip()
        server = self.resolver.resolve(query)
        logger.info("Starting WHOIS lookup", query=query, server=server)

        primary = await self.transport.query(server, query)
        final_server = server
        result = primary.text

        referral = find_referral(primary.text)
        if referral and referral != server:
            logger.debug("Following referral", query=query, referral=referral)
            secondary = await self.transport.query(referral, query)
            if secondary.text:
                final_server = referral
                result = secondary.text
            else:
                logger.warning(
                    "Referral returned nothing, keeping primary response",
                    query=query,
                    server=server,
                    referral=referral,
                    reachable=secondary.reachable,
                )

        logger.info(
            "WHOIS lookup completed",
            query=query,
            server=final_server,
            response_size=len(result),
        )

        return LookupResult(
            query=query,
            server=final_server,
            result=result,
            primary_server=server,
            referral=referral,
            upstream_reachable=primary.reachable,
        )
