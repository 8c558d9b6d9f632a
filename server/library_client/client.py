"""图书 REST API 客户端

对应前端页面的四个动作：刷新列表、新增、编辑、删除。任何失败都以
``LibraryClientError`` 抛出，消息按动作区分，直接展示给操作者即可。
"""

import logging

import httpx

from .config import config

logger = logging.getLogger(__name__)

CONNECT_FAILED = "Could not connect to the backend server. Make sure the API server is running."


class LibraryClientError(Exception):
    def __init__(self, message: str, status_code: int | None = None, detail: str | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.detail = detail

    def __str__(self) -> str:
        if self.detail:
            return f"{self.message} ({self.status_code}: {self.detail})"
        return self.message


def _blank(value) -> bool:
    return value is None or not str(value).strip()


class LibraryClient:
    """图书 API 客户端，``transport`` 可注入（测试时指向 ASGI 应用）"""

    def __init__(
        self,
        base_url: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float | None = None,
    ):
        self._base_url = base_url
        self._transport = transport
        self._timeout = timeout if timeout is not None else config.timeout

    @property
    def base_url(self) -> str:
        if self._base_url is None:
            self._base_url = config.server_url.rstrip("/")
        return self._base_url

    async def _request(self, method: str, path: str, failure: str, **kwargs):
        async with httpx.AsyncClient(
            base_url=self.base_url, transport=self._transport, timeout=self._timeout
        ) as client:
            try:
                response = await client.request(method, path, **kwargs)
            except httpx.RequestError as exc:
                logger.error("Error communicating with library API: %s", exc)
                raise LibraryClientError(failure) from exc

        if response.status_code >= 400:
            try:
                detail = response.json().get("message", response.text)
            except ValueError:
                detail = response.text
            logger.error("%s %s failed: %s %s", method, path, response.status_code, detail)
            raise LibraryClientError(failure, response.status_code, detail)
        return response.json()

    # ─── 查询 ──────────────────────────────

    async def list_books(self) -> list[dict]:
        return await self._request("GET", "/api/books", CONNECT_FAILED)

    # ─── 写入 ──────────────────────────────

    async def add_book(self, title: str, author: str, publication_year: int | str | None = None) -> dict:
        if _blank(title) or _blank(author):
            raise LibraryClientError("Title and Author are required!")
        payload = {"title": title, "author": author}
        if publication_year is not None:
            payload["publicationYear"] = publication_year
        return await self._request("POST", "/api/books", "Failed to add book.", json=payload)

    async def update_book(self, book_id: str, **changes) -> dict:
        """``changes`` 使用接口字段名（title / author / publicationYear）"""
        for field in ("title", "author"):
            if field in changes and _blank(changes[field]):
                raise LibraryClientError("Title and Author cannot be empty!")
        return await self._request(
            "PATCH", f"/api/books/{book_id}", "Failed to update book.", json=changes
        )

    async def delete_book(self, book_id: str) -> dict:
        return await self._request("DELETE", f"/api/books/{book_id}", "Failed to delete book.")


library_client = LibraryClient()
