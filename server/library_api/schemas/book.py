from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

MIN_PUBLICATION_YEAR = 1000


def _coerce_blank_year(value: Any) -> Any:
    """表单提交的空字符串视为未填写；布尔值不是年份"""
    if isinstance(value, bool):
        raise ValueError("publicationYear must be a number")
    if isinstance(value, str) and not value.strip():
        return None
    return value


class BookCreate(BaseModel):
    """新建图书（完整记录），同时用于校验合并后的更新结果"""
    title: str = Field(..., min_length=1)
    author: str = Field(..., min_length=1)
    publication_year: int | None = Field(None, alias="publicationYear")

    model_config = ConfigDict(str_strip_whitespace=True, populate_by_name=True)

    @field_validator("publication_year", mode="before")
    @classmethod
    def _blank_year(cls, v: Any) -> Any:
        return _coerce_blank_year(v)

    @field_validator("publication_year")
    @classmethod
    def _year_in_range(cls, v: int | None) -> int | None:
        if v is None:
            return v
        # 上限取校验时的当前年份，跨年运行的进程无需重启
        current_year = datetime.now().year
        if not MIN_PUBLICATION_YEAR <= v <= current_year:
            raise ValueError(
                f"publicationYear must be between {MIN_PUBLICATION_YEAR} and {current_year}"
            )
        return v


class BookPatch(BaseModel):
    """局部更新：只有请求里出现的字段才会被合并"""
    title: str | None = None
    author: str | None = None
    publication_year: int | None = Field(None, alias="publicationYear")

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("publication_year", mode="before")
    @classmethod
    def _blank_year(cls, v: Any) -> Any:
        return _coerce_blank_year(v)


class BookResponse(BaseModel):
    id: str
    title: str
    author: str
    publication_year: int | None = Field(None, alias="publicationYear")
    created_at: datetime = Field(..., alias="createdAt")
    updated_at: datetime = Field(..., alias="updatedAt")

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)


class MessageResponse(BaseModel):
    message: str
