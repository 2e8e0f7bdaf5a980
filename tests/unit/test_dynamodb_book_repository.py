"""Tests for DynamoDB book repository."""

from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from bookbuddy.domain.entities import Book, ReadingStatus
from bookbuddy.infrastructure.dynamodb_book_repository import DynamoDBBookRepository


@pytest.fixture
def mock_dynamodb_table():
    """Create a mock DynamoDB table."""
    mock_table = AsyncMock()
    return mock_table


@pytest.fixture
def mock_dynamodb_resource(mock_dynamodb_table):
    """Create a mock DynamoDB resource."""
    mock_resource = MagicMock()
    mock_resource.Table = AsyncMock(return_value=mock_dynamodb_table)
    return mock_resource


@pytest.fixture
def mock_aioboto3_session(mock_dynamodb_resource):
    """Create a mock aioboto3 session."""
    with patch("bookbuddy.infrastructure.dynamodb_book_repository.aioboto3.Session") as mock_session_class:
        mock_session_instance = MagicMock()
        mock_session_class.return_value = mock_session_instance

        # Setup async context manager for resource
        mock_session_instance.resource.return_value.__aenter__ = AsyncMock(return_value=mock_dynamodb_resource)
        mock_session_instance.resource.return_value.__aexit__ = AsyncMock(return_value=None)

        yield mock_session_instance


@pytest.fixture
def repository(mock_aioboto3_session):
    """Create a DynamoDB book repository instance."""
    return DynamoDBBookRepository(table_name="test-books", region_name="us-east-1")


@pytest.fixture
def sample_book():
    """Create a sample book entity."""
    return Book(
        id="book-xyz",
        title="Dune",
        author="Frank Herbert",
        total_pages=412,
        current_page=120,
        status=ReadingStatus.IN_PROGRESS,
    )


@pytest.fixture
def sample_dynamodb_item():
    """Create a sample DynamoDB item."""
    return {
        "id": "book-xyz",
        "user_id": "user-abc",
        "title": "Dune",
        "author": "Frank Herbert",
        "total_pages": Decimal("412"),
        "current_page": Decimal("120"),
        "status": "in-progress",
        "start_date": "2026-01-13T10:00:00+00:00",
        "categories": [],
        "updated_at": "2026-01-13T10:30:00+00:00",
    }


class TestDynamoDBBookRepository:
    """Test cases for DynamoDBBookRepository."""

    def test_init(self, repository):
        """Test repository initialization."""
        assert repository.table_name == "test-books"
        assert repository.region_name == "us-east-1"
        assert repository.user_index == "user_id-index"

    @pytest.mark.asyncio
    async def test_add_book(self, repository, mock_dynamodb_table, sample_book):
        """Test saving a book to DynamoDB."""
        await repository.add_book("user-abc", sample_book)

        mock_dynamodb_table.put_item.assert_called_once()
        item = mock_dynamodb_table.put_item.call_args.kwargs["Item"]

        assert item["id"] == "book-xyz"
        assert item["user_id"] == "user-abc"
        assert item["title"] == "Dune"
        assert item["total_pages"] == 412
        assert item["status"] == "in-progress"
        assert "updated_at" in item
        assert "completed_date" not in item

    @pytest.mark.asyncio
    async def test_get_book_success(self, repository, mock_dynamodb_table, sample_dynamodb_item):
        """Test successful book retrieval."""
        mock_dynamodb_table.get_item.return_value = {"Item": sample_dynamodb_item}

        result = await repository.get_book("book-xyz")

        assert isinstance(result, Book)
        assert result.id == "book-xyz"
        assert result.total_pages == 412
        assert isinstance(result.current_page, int)
        assert result.status == ReadingStatus.IN_PROGRESS
        assert result.start_date.year == 2026
        mock_dynamodb_table.get_item.assert_called_once_with(Key={"id": "book-xyz"})

    @pytest.mark.asyncio
    async def test_get_book_not_found(self, repository, mock_dynamodb_table):
        """Test book retrieval when the book doesn't exist."""
        mock_dynamodb_table.get_item.return_value = {}

        with pytest.raises(ValueError, match="Book with id missing not found"):
            await repository.get_book("missing")

    @pytest.mark.asyncio
    async def test_list_books(self, repository, mock_dynamodb_table, sample_dynamodb_item):
        """Test listing a user's books through the user index."""
        older = {**sample_dynamodb_item, "id": "book-old", "updated_at": "2025-12-01T00:00:00+00:00"}
        mock_dynamodb_table.query.return_value = {"Items": [older, sample_dynamodb_item]}

        books = await repository.list_books("user-abc")

        assert [b.id for b in books] == ["book-xyz", "book-old"]
        assert mock_dynamodb_table.query.call_args.kwargs["IndexName"] == "user_id-index"

    @pytest.mark.asyncio
    async def test_update_book(self, repository, mock_dynamodb_table, sample_dynamodb_item):
        """Test merging updates into a stored book."""
        mock_dynamodb_table.get_item.return_value = {"Item": sample_dynamodb_item}

        book = await repository.update_book("book-xyz", current_page=200)

        assert book.current_page == 200
        item = mock_dynamodb_table.put_item.call_args.kwargs["Item"]
        assert item["current_page"] == 200
        assert item["user_id"] == "user-abc"

    @pytest.mark.asyncio
    async def test_update_book_not_found(self, repository, mock_dynamodb_table):
        mock_dynamodb_table.get_item.return_value = {}

        with pytest.raises(ValueError):
            await repository.update_book("missing", current_page=1)
        mock_dynamodb_table.put_item.assert_not_called()

    @pytest.mark.asyncio
    async def test_delete_book(self, repository, mock_dynamodb_table, sample_dynamodb_item):
        mock_dynamodb_table.get_item.return_value = {"Item": sample_dynamodb_item}

        await repository.delete_book("book-xyz")

        mock_dynamodb_table.delete_item.assert_called_once_with(Key={"id": "book-xyz"})

    @pytest.mark.asyncio
    async def test_subscribers_receive_books_after_writes(
        self, repository, mock_dynamodb_table, sample_book, sample_dynamodb_item
    ):
        """Test that listeners are called with the refreshed library."""
        mock_dynamodb_table.query.return_value = {"Items": [sample_dynamodb_item]}
        received = []
        unsubscribe = repository.subscribe("user-abc", received.append)

        await repository.add_book("user-abc", sample_book)
        unsubscribe()
        await repository.add_book("user-abc", sample_book)

        assert len(received) == 1
        assert [b.id for b in received[0]] == ["book-xyz"]
