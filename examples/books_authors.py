"""
books_authors.py — N+1 lookups collapsed into one batch.

Resolves the author of every book concurrently, the way a GraphQL field
resolver would, and shows that the author table is queried once.

Usage:
    python examples/books_authors.py
"""

import asyncio
import logging
from dataclasses import dataclass

from keybatch import Loader


@dataclass
class Book:
    id: int
    title: str
    author_id: int


@dataclass
class Author:
    id: int
    name: str


BOOKS = [
    Book(id=1, title="The Awakening", author_id=2),
    Book(id=2, title="City of Glass", author_id=3),
    Book(id=3, title="The Green Mile", author_id=1),
]

AUTHORS = {
    1: Author(id=1, name="Stephen King"),
    2: Author(id=2, name="Kate Chopin"),
    3: Author(id=3, name="Paul Auster"),
    4: Author(id=4, name="Gregory Keyes"),
}


async def batch_load_authors(ids: list[int]) -> list[Author | None]:
    # SELECT * FROM authors WHERE id IN (ids)
    print(f"authors query: {ids}")
    await asyncio.sleep(0.2)
    return [AUTHORS.get(author_id) for author_id in ids]


async def main() -> None:
    authors = Loader(batch_load_authors, name="authors")

    async def resolve_author(book: Book) -> Author | None:
        return await authors.load(book.author_id)

    resolved = await asyncio.gather(*(resolve_author(book) for book in BOOKS))
    for book, author in zip(BOOKS, resolved):
        print(f"{book.title}: {author.name if author else '?'}")


if __name__ == "__main__":
    logging.basicConfig(level=logging.DEBUG)
    asyncio.run(main())
