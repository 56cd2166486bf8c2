"""
Raw WHOIS protocol exchange over TCP.

One line goes out, terminated by CRLF; the server then streams its answer
and closes the connection. There is no length framing, so the response is
read until EOF or until the read deadline passes.
"""

import anyio
import structlog

from ..errors import UpstreamUnreachableError
from ..models.domain_models import WhoisResponse

logger = structlog.get_logger(__name__)

WHOIS_PORT = 43
RECEIVE_CHUNK = 2048


class WhoisTransport:
    """Blocking single round trip to a WHOIS server, with timeouts on every phase."""

    def __init__(self, timeout: float = 10.0, port: int = WHOIS_PORT) -> None:
        self.timeout = timeout
        self.port = port

    async def fetch(self, server: str, query: str) -> str:
        """Send ``query`` to ``server`` and return the trimmed response text.

        Raises UpstreamUnreachableError if the connection cannot be made
        within the timeout.
        """
        try:
            with anyio.fail_after(self.timeout):
                stream = await anyio.connect_tcp(server, self.port)
        except (OSError, TimeoutError, UnicodeError) as e:
            # UnicodeError: hostname from upstream text that IDNA cannot encode
            raise UpstreamUnreachableError(server, f"{server}:{self.port}: {e}") from e

        chunks: list[bytes] = []
        async with stream:
            try:
                await stream.send(f"{query.strip()}\r\n".encode("utf-8"))
            except (OSError, anyio.BrokenResourceError) as e:
                raise UpstreamUnreachableError(server, f"send failed: {e}") from e

            with anyio.move_on_after(self.timeout) as scope:
                while True:
                    try:
                        chunk = await stream.receive(RECEIVE_CHUNK)
                    except (anyio.EndOfStream, anyio.BrokenResourceError, OSError):
                        break
                    chunks.append(chunk)

            if scope.cancelled_caught:
                logger.warning(
                    "WHOIS read timed out, keeping partial response",
                    server=server,
                    received=sum(len(c) for c in chunks),
                )

        return b"".join(chunks).decode("utf-8", errors="replace").strip()

    async def query(self, server: str, query: str) -> WhoisResponse:
        """Like :meth:`fetch` but degrades an unreachable server to empty text."""
        logger.debug("Querying WHOIS server", server=server, query=query)
        try:
            text = await self.fetch(server, query)
        except UpstreamUnreachableError as e:
            logger.warning("WHOIS server unreachable", server=server, error=e.message)
            return WhoisResponse.unreachable(server, e.message)

        return WhoisResponse(server=server, text=text)
