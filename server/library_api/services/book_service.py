"""图书记录的读写：校验、合并更新、持久化"""

import logging
from datetime import datetime, timedelta
from typing import Any, Iterable

from pydantic import ValidationError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from library_api.models.book import Book
from library_api.schemas.book import BookCreate, BookPatch

logger = logging.getLogger(__name__)


class BookError(Exception):
    def __init__(self, detail: str, status_code: int = 400):
        super().__init__(detail)
        self.detail = detail
        self.status_code = status_code


class BookValidationError(BookError, ValueError):
    """字段缺失、越界或类型不对"""

    def __init__(self, detail: str):
        super().__init__(detail, 400)


class BookNotFoundError(BookError):
    def __init__(self, detail: str = "Book not found"):
        super().__init__(detail, 404)


def format_validation_errors(errors: Iterable[dict]) -> str:
    """把 pydantic 错误列表压成一行：``Book validation failed: title: ..., author: ...``"""
    parts = []
    for err in errors:
        # JSON 解析失败时 loc 里是字符偏移量，不是字段名
        if err.get("type") == "json_invalid":
            field = "body"
        else:
            loc = [str(p) for p in err.get("loc", ()) if p != "body"]
            field = ".".join(loc) or "body"
        parts.append(f"{field}: {err.get('msg', 'invalid value')}")
    return "Book validation failed: " + ", ".join(parts)


def _next_timestamp(previous: datetime | None) -> datetime:
    """生成新的 updated_at，保证严格大于上一次的值"""
    now = datetime.utcnow()
    if previous is not None and now <= previous:
        now = previous + timedelta(microseconds=1)
    return now


def merge_patch(book: Book, payload: Any) -> BookCreate:
    """把局部更新合并到已有记录上，并按完整记录重新校验"""
    try:
        patch = BookPatch.model_validate({} if payload is None else payload)
    except ValidationError as e:
        raise BookValidationError(format_validation_errors(e.errors()))

    merged = {
        "title": book.title,
        "author": book.author,
        "publicationYear": book.publication_year,
    }
    merged.update(patch.model_dump(by_alias=True, exclude_unset=True))
    try:
        return BookCreate.model_validate(merged)
    except ValidationError as e:
        raise BookValidationError(format_validation_errors(e.errors()))


async def list_books(db: AsyncSession) -> list[Book]:
    """全部图书，按 title 升序"""
    result = await db.execute(select(Book).order_by(Book.title.asc()))
    return list(result.scalars().all())


async def get_book_by_id(db: AsyncSession, book_id: str) -> Book | None:
    return await db.get(Book, book_id)


async def create_book(db: AsyncSession, data: BookCreate) -> Book:
    now = datetime.utcnow()
    book = Book(
        title=data.title,
        author=data.author,
        publication_year=data.publication_year,
        created_at=now,
        updated_at=now,
    )
    db.add(book)
    await db.flush()
    await db.refresh(book)
    logger.info("Book created: %s", book.id)
    return book


async def update_book(db: AsyncSession, book_id: str, payload: Any) -> Book:
    """局部更新；记录不存在时先报 404，再校验请求体"""
    book = await get_book_by_id(db, book_id)
    if book is None:
        raise BookNotFoundError()

    data = merge_patch(book, payload)
    book.title = data.title
    book.author = data.author
    book.publication_year = data.publication_year
    book.updated_at = _next_timestamp(book.updated_at)

    await db.flush()
    await db.refresh(book)
    logger.info("Book updated: %s", book.id)
    return book


async def delete_book(db: AsyncSession, book_id: str) -> None:
    book = await get_book_by_id(db, book_id)
    if book is None:
        raise BookNotFoundError()

    await db.delete(book)
    await db.flush()
    logger.info("Book deleted: %s", book_id)
