"""HTTP client for the streamed conversation endpoint.

Posts a user message as multipart form data and returns the response body
as an UpdateStream. No retries happen here; retry policy belongs to the
caller.
"""

from __future__ import annotations

import json
import logging
from typing import Any

import httpx
from pydantic import BaseModel, Field

from updatestream.schemas.config import StreamingConfig
from updatestream.streaming.abort import AbortController
from updatestream.streaming.pipeline import UpdateStream, open_update_stream

logger = logging.getLogger(__name__)


class MessageFile(BaseModel):
    """A file attached to a message."""

    type: str = Field(description="Storage kind of value, e.g. 'base64' or 'hash'")
    name: str = Field(description="Original file name")
    value: str = Field(description="File content (base64) or content hash")
    mime: str = Field(default="application/octet-stream", description="MIME type")


class KeyValuePair(BaseModel):
    key: str
    value: str


class McpServer(BaseModel):
    """A client-defined MCP server forwarded with the request."""

    name: str
    url: str
    headers: list[KeyValuePair] | None = None


class MessageUpdateRequest(BaseModel):
    """Options for one message submission."""

    inputs: str | None = Field(default=None, description="User message text")
    message_id: str | None = Field(default=None, description="Message to retry or continue")
    is_retry: bool = False
    is_continue: bool = False
    files: list[MessageFile] = Field(default_factory=list)
    selected_mcp_server_names: list[str] | None = None
    selected_mcp_servers: list[McpServer] | None = None

    def form_data(self) -> str:
        """JSON document sent in the ``data`` form field."""
        payload: dict[str, Any] = {
            "inputs": self.inputs,
            "id": self.message_id,
            "is_retry": self.is_retry,
            "is_continue": self.is_continue,
            "selectedMcpServerNames": self.selected_mcp_server_names,
            "selectedMcpServers": (
                [s.model_dump(exclude_none=True) for s in self.selected_mcp_servers]
                if self.selected_mcp_servers is not None
                else None
            ),
        }
        return json.dumps({k: v for k, v in payload.items() if v is not None})


class ConversationClient:
    """Async client for posting messages and streaming their updates.

    Usage:
        async with ConversationClient(config) as client:
            stream = await client.fetch_message_updates(conv_id, request, abort)
            async for update in stream:
                ...
    """

    def __init__(
        self,
        config: StreamingConfig | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        self._config = config or StreamingConfig()
        self._client = httpx.AsyncClient(
            base_url=self._config.base_url,
            timeout=self._config.request_timeout,
            transport=transport,
            headers=headers,
        )

    @property
    def config(self) -> StreamingConfig:
        return self._config

    async def __aenter__(self) -> ConversationClient:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    def build_request(
        self, conversation_id: str, request: MessageUpdateRequest
    ) -> httpx.Request:
        """Build the multipart POST for a message submission.

        Files are sent first, each named ``"{type};{name}"``, followed by the
        ``data`` field holding the JSON options.
        """
        parts: list[tuple[str, tuple[str | None, str | bytes, str | None]]] = [
            ("files", (f"{f.type};{f.name}", f.value.encode(), f.mime))
            for f in request.files
        ]
        parts.append(("data", (None, request.form_data().encode(), None)))

        return self._client.build_request(
            "POST", f"/conversation/{conversation_id}", files=parts
        )

    async def fetch_message_updates(
        self,
        conversation_id: str,
        request: MessageUpdateRequest,
        abort: AbortController | None = None,
        *,
        smooth: bool | None = None,
    ) -> UpdateStream:
        """Post a message and return its update stream.

        Raises:
            UpdateStreamError: If the endpoint answers with a non-2xx status
                or without a body.
            httpx.HTTPError: If the request cannot be sent.
        """
        http_request = self.build_request(conversation_id, request)
        logger.debug("POST %s (%d files)", http_request.url, len(request.files))
        response = await self._client.send(http_request, stream=True)
        return await open_update_stream(
            response, abort, smooth=smooth, config=self._config
        )
