import asyncio
import sys

from .client import LibraryClientError, library_client


def format_book(book: dict) -> str:
    year = book.get("publicationYear")
    line = f"{book['title']} by {book['author']}"
    return f"{line} ({year})" if year else line


async def main() -> int:
    """打印当前图书列表"""
    try:
        books = await library_client.list_books()
    except LibraryClientError as e:
        print(e, file=sys.stderr)
        return 1
    for book in books:
        print(format_book(book))
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
