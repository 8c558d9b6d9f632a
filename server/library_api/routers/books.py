import logging
from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from library_api.database import get_db
from library_api.schemas.book import BookCreate, BookResponse, MessageResponse
from library_api.services.book_service import (
    BookNotFoundError,
    create_book,
    delete_book,
    list_books,
    update_book,
)

router = APIRouter(prefix="/api/books", tags=["图书"])
logger = logging.getLogger(__name__)


def _store_error(e: SQLAlchemyError) -> str:
    """只返回驱动层的错误信息，不带 SQL 语句"""
    orig = getattr(e, "orig", None)
    return str(orig) if orig is not None else e.__class__.__name__


@router.get("", response_model=list[BookResponse], summary="获取图书列表")
async def list_all(db: AsyncSession = Depends(get_db)):
    """全部图书，按书名升序"""
    try:
        books = await list_books(db)
    except SQLAlchemyError:
        logger.exception("Failed to fetch books")
        raise HTTPException(status_code=500, detail="Error fetching books")
    return [BookResponse.model_validate(b) for b in books]


@router.post("", response_model=BookResponse, status_code=201, summary="新建图书")
async def create(body: BookCreate, db: AsyncSession = Depends(get_db)):
    try:
        book = await create_book(db, body)
    except SQLAlchemyError as e:
        logger.warning("Failed to create book: %s", e)
        raise HTTPException(status_code=400, detail=_store_error(e))
    return BookResponse.model_validate(book)


@router.patch("/{book_id}", response_model=BookResponse, summary="更新图书")
async def update(
    book_id: str,
    payload: Any = Body(None),
    db: AsyncSession = Depends(get_db),
):
    """只修改请求中出现的字段，合并后的记录必须仍然合法

    校验失败抛出的 BookValidationError 交给全局 ValueError 处理器（400）
    """
    try:
        book = await update_book(db, book_id, payload)
    except BookNotFoundError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)
    except IntegrityError as e:
        logger.warning("Rejected update of book %s: %s", book_id, e)
        raise HTTPException(status_code=400, detail=_store_error(e))
    except SQLAlchemyError:
        logger.exception("Failed to update book %s", book_id)
        raise HTTPException(status_code=500, detail="Error updating book")
    return BookResponse.model_validate(book)


@router.delete("/{book_id}", response_model=MessageResponse, summary="删除图书")
async def delete(book_id: str, db: AsyncSession = Depends(get_db)):
    try:
        await delete_book(db, book_id)
    except BookNotFoundError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)
    except SQLAlchemyError:
        logger.exception("Failed to delete book %s", book_id)
        raise HTTPException(status_code=500, detail="Error deleting book")
    return MessageResponse(message="Book successfully deleted")
