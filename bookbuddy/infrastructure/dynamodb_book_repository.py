"""DynamoDB implementation of Book Repository."""

import logging
from collections import defaultdict
from decimal import Decimal
from typing import Any, Dict, List

import aioboto3
from boto3.dynamodb.conditions import Key

from ..domain.entities.book import Book
from ..domain.entities.timestamps import utc_now
from ..domain.interfaces.book_repository import BookRepository, BooksListener, Unsubscribe

logger = logging.getLogger(__name__)

_INTEGER_FIELDS = ("total_pages", "current_page")


class DynamoDBBookRepository(BookRepository):
    """DynamoDB repository for managing a user's library.

    Items are keyed by ``id``; a ``user_id-index`` global secondary index
    is used to list the books of one user. Subscriptions are served
    in-process: listeners are called after writes made through this
    repository.
    """

    def __init__(self, table_name: str, region_name: str = "us-east-1", user_index: str = "user_id-index"):
        """Initialize the DynamoDB book repository.

        Args:
            table_name: The name of the DynamoDB table.
            region_name: AWS region name (default: us-east-1).
            user_index: Name of the index keyed by ``user_id``.
        """
        self.table_name = table_name
        self.region_name = region_name
        self.user_index = user_index
        self._session = aioboto3.Session()
        self._listeners: Dict[str, List[BooksListener]] = defaultdict(list)

    async def list_books(self, user_id: str) -> list[Book]:
        async with self._session.resource("dynamodb", region_name=self.region_name) as dynamodb:
            table = await dynamodb.Table(self.table_name)
            response = await table.query(
                IndexName=self.user_index,
                KeyConditionExpression=Key("user_id").eq(user_id),
            )
            items = response.get("Items", [])
            items.sort(key=lambda item: item.get("updated_at", ""), reverse=True)
            return [self._item_to_book(item) for item in items]

    async def get_book(self, book_id: str) -> Book:
        """Retrieve a book by ID from DynamoDB.

        Raises:
            ValueError: If the book is not found.
        """
        item = await self._get_item(book_id)
        return self._item_to_book(item)

    async def add_book(self, user_id: str, book: Book) -> Book:
        async with self._session.resource("dynamodb", region_name=self.region_name) as dynamodb:
            table = await dynamodb.Table(self.table_name)
            await table.put_item(Item=self._book_to_item(user_id, book))
        await self._publish(user_id)
        return book

    async def update_book(self, book_id: str, **updates: Any) -> Book:
        """Merge ``updates`` into a stored book and write it back.

        Raises:
            ValueError: If the book is not found.
        """
        item = await self._get_item(book_id)
        user_id = item["user_id"]
        book = Book.model_validate({**self._item_to_book(item).model_dump(), **updates})
        async with self._session.resource("dynamodb", region_name=self.region_name) as dynamodb:
            table = await dynamodb.Table(self.table_name)
            await table.put_item(Item=self._book_to_item(user_id, book))
        await self._publish(user_id)
        return book

    async def delete_book(self, book_id: str) -> None:
        """Delete a book from DynamoDB.

        Raises:
            ValueError: If the book is not found.
        """
        item = await self._get_item(book_id)
        async with self._session.resource("dynamodb", region_name=self.region_name) as dynamodb:
            table = await dynamodb.Table(self.table_name)
            await table.delete_item(Key={"id": book_id})
        await self._publish(item["user_id"])

    def subscribe(self, user_id: str, on_update: BooksListener) -> Unsubscribe:
        self._listeners[user_id].append(on_update)

        def unsubscribe() -> None:
            if on_update in self._listeners[user_id]:
                self._listeners[user_id].remove(on_update)

        return unsubscribe

    async def _get_item(self, book_id: str) -> Dict[str, Any]:
        async with self._session.resource("dynamodb", region_name=self.region_name) as dynamodb:
            table = await dynamodb.Table(self.table_name)
            response = await table.get_item(Key={"id": book_id})

            if "Item" not in response:
                raise ValueError(f"Book with id {book_id} not found")

            return response["Item"]

    async def _publish(self, user_id: str) -> None:
        if not self._listeners[user_id]:
            return
        books = await self.list_books(user_id)
        for listener in list(self._listeners[user_id]):
            listener(books)

    def _book_to_item(self, user_id: str, book: Book) -> Dict[str, Any]:
        """Convert a Book entity to a DynamoDB item.

        Args:
            user_id: The owner of the book.
            book: The book entity.

        Returns:
            Dict: The DynamoDB item representation, without empty attributes.
        """
        data = book.model_dump(mode="json", exclude_none=True)
        data["user_id"] = user_id
        data["updated_at"] = utc_now().isoformat()
        return data

    def _item_to_book(self, item: Dict[str, Any]) -> Book:
        """Convert a DynamoDB item to a Book entity.

        DynamoDB returns numbers as ``Decimal``; page counts are turned back
        into integers.
        """
        data = {k: v for k, v in item.items() if k not in ("user_id", "updated_at")}
        for field in _INTEGER_FIELDS:
            if isinstance(data.get(field), Decimal):
                data[field] = int(data[field])
        return Book.model_validate(data)
