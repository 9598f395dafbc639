"""Async GraphQL client for the remote CRM.

Implements the three remote operations the orchestrator needs: create an
item, patch several columns of an item, attach a file to a file column.
Failures are raised as the RemoteError subclass matching the operation;
nothing is retried here.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from types import TracebackType
from typing import Any

import httpx

from ..config.settings import Settings
from ..core.errors import RemoteCreateError, RemoteError, RemoteUpdateError, RemoteUploadError
from ..logging_config import TRACE

logger = logging.getLogger(__name__)

CREATE_ITEM_MUTATION = """
mutation ($boardId: ID!, $groupId: String, $itemName: String!, $columnValues: JSON) {
  create_item(board_id: $boardId, group_id: $groupId, item_name: $itemName, column_values: $columnValues) {
    id
  }
}
""".strip()

CHANGE_COLUMNS_MUTATION = """
mutation ($boardId: ID!, $itemId: ID!, $columnValues: JSON!) {
  change_multiple_column_values(board_id: $boardId, item_id: $itemId, column_values: $columnValues) {
    id
  }
}
""".strip()

ADD_FILE_MUTATION = """
mutation ($file: File!) {
  add_file_to_column(item_id: %s, column_id: %s, file: $file) {
    id
  }
}
""".strip()


class CRMGraphQLClient:
    """CRM client over httpx.AsyncClient

    Usage:
        async with CRMGraphQLClient.from_settings(get_settings()) as crm:
            item_id = await crm.create_item(board_id, group_id, name, columns)
    """

    def __init__(
        self,
        api_url: str,
        file_api_url: str,
        token: str,
        api_version: str | None = None,
        timeout: float = 30.0,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            api_url: GraphQL endpoint
            file_api_url: Multipart endpoint for uploads
            token: API token for the Authorization header
            api_version: Optional API-Version header
            timeout: Request timeout in seconds
            http_client: Pre-built client (tests pass one with a mock transport)
        """
        self.api_url = api_url
        self.file_api_url = file_api_url
        headers = {"Authorization": token}
        if api_version:
            headers["API-Version"] = api_version
        self._owns_client = http_client is None
        self.http = http_client or httpx.AsyncClient(timeout=timeout)
        self.headers = headers

    @classmethod
    def from_settings(cls, settings: Settings, http_client: httpx.AsyncClient | None = None) -> CRMGraphQLClient:
        return cls(
            api_url=settings.crm_api_url,
            file_api_url=settings.crm_file_api_url,
            token=settings.require_crm_token(),
            api_version=settings.crm_api_version,
            timeout=settings.crm_timeout_seconds,
            http_client=http_client,
        )

    async def __aenter__(self) -> CRMGraphQLClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()

    async def close(self) -> None:
        if self._owns_client:
            await self.http.aclose()

    async def create_item(self, board_id: str, group_id: str, name: str, columns: dict[str, Any]) -> str:
        """Create an item and return its id.

        Raises:
            RemoteCreateError: if the CRM rejects the request
        """
        variables = {
            "boardId": str(board_id),
            "groupId": group_id,
            "itemName": name,
            "columnValues": json.dumps(columns, ensure_ascii=False),
        }
        data = await self._execute(CREATE_ITEM_MUTATION, variables, RemoteCreateError)
        item = data.get("create_item") or {}
        item_id = item.get("id")
        if not item_id:
            raise RemoteCreateError(f"CRM returned no item id for board {board_id}")
        logger.info(f"Created item {item_id} on board {board_id}")
        return str(item_id)

    async def update_columns(self, item_id: str, board_id: str, columns: dict[str, Any]) -> None:
        """Patch several columns of an existing item.

        Raises:
            RemoteUpdateError: if the CRM rejects the request
        """
        variables = {
            "boardId": str(board_id),
            "itemId": str(item_id),
            "columnValues": json.dumps(columns, ensure_ascii=False),
        }
        await self._execute(CHANGE_COLUMNS_MUTATION, variables, RemoteUpdateError)
        logger.debug(f"Updated {len(columns)} columns on item {item_id}")

    async def upload_file(self, item_id: str, column_id: str, file_path: str) -> str:
        """Attach a local file to a file column and return the asset id.

        Raises:
            RemoteUploadError: if the file cannot be read or the CRM rejects it
        """
        path = Path(file_path)
        try:
            content = path.read_bytes()
        except OSError as e:
            raise RemoteUploadError(f"Cannot read {path.name}: {e}") from e

        query = ADD_FILE_MUTATION % (json.dumps(str(item_id)), json.dumps(column_id))
        logger.log(TRACE, f"Upload mutation: {query}")
        try:
            response = await self.http.post(
                self.file_api_url,
                headers=self.headers,
                data={"query": query},
                files={"variables[file]": (path.name, content)},
            )
        except httpx.HTTPError as e:
            raise RemoteUploadError(f"Upload of {path.name} failed: {e}") from e

        data = self._parse(response, RemoteUploadError)
        asset = data.get("add_file_to_column") or {}
        if not asset.get("id"):
            raise RemoteUploadError(f"CRM returned no asset id for {path.name}")
        return str(asset["id"])

    async def _execute(
        self,
        query: str,
        variables: dict[str, Any],
        error_cls: type[RemoteError],
    ) -> dict[str, Any]:
        payload = {"query": query, "variables": variables}
        logger.log(TRACE, f"GraphQL request: {json.dumps(payload, ensure_ascii=False)}")
        try:
            response = await self.http.post(self.api_url, headers=self.headers, json=payload)
        except httpx.HTTPError as e:
            raise error_cls(f"CRM request failed: {e}") from e
        return self._parse(response, error_cls)

    def _parse(self, response: httpx.Response, error_cls: type[RemoteError]) -> dict[str, Any]:
        logger.log(TRACE, f"GraphQL response {response.status_code}: {response.text}")
        if response.status_code >= 400:
            raise error_cls(f"CRM responded {response.status_code}: {response.text[:500]}")
        try:
            body = response.json()
        except ValueError as e:
            raise error_cls(f"CRM returned invalid JSON: {e}") from e

        errors = body.get("errors") or body.get("error_message")
        if errors:
            raise error_cls(f"CRM returned errors: {errors}")
        data = body.get("data")
        if not isinstance(data, dict):
            raise error_cls("CRM response has no data")
        return data
