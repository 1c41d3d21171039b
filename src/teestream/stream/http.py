"""
Adapter from an ``httpx`` streaming response to the Stream capability.

Requires the ``http`` extra (``pip install teestream[http]``).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from teestream._features import require_extra
from teestream.errors import SourceReadError
from teestream.stream.memory import IterStream

if TYPE_CHECKING:
    import httpx


class HttpResponseStream(IterStream):
    """Stream over the body of a streamed ``httpx.Response``.

    The response must have been opened with ``client.stream(...)`` or
    ``client.send(request, stream=True)``. Closing this stream closes the
    response. HTTP error statuses are reported on construction.

    Example:
        >>> with httpx.Client() as client:
        ...     with client.stream("GET", url) as response:
        ...         src = HttpResponseStream(response)
        ...         chain(src, file_b, file_c)
    """

    def __init__(
        self,
        response: httpx.Response,
        *,
        chunk_size: int | None = None,
        raise_for_status: bool = True,
    ) -> None:
        """Initialize the adapter.

        Args:
            response: Streamed response
            chunk_size: Chunk size hint for ``iter_bytes``
            raise_for_status: Raise SourceReadError for 4xx/5xx responses
        """
        require_extra("http", "httpx")
        import httpx

        if raise_for_status:
            try:
                response.raise_for_status()
            except httpx.HTTPStatusError as e:
                raise SourceReadError(
                    f"HTTP {response.status_code} from {response.request.url}",
                    cause=e,
                ) from e

        super().__init__(
            self._iter_body(response, chunk_size), name=str(response.request.url)
        )
        self._response = response

    @staticmethod
    def _iter_body(response: httpx.Response, chunk_size: int | None):
        import httpx

        try:
            yield from response.iter_bytes(chunk_size)
        except httpx.HTTPError as e:
            raise SourceReadError(f"HTTP body read failed: {e}", cause=e) from e

    @property
    def status_code(self) -> int:
        return self._response.status_code

    def close(self) -> None:
        super().close()
        self._response.close()
