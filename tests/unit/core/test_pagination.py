"""Tests for PaginationResult."""

from gogrind.core.pagination import PaginationResult


class TestPaginationResult:
    """Tests for page info computed by PaginationResult."""

    def test_first_page_of_many(self):
        """Test that the first page reports more items and the page count."""
        page = PaginationResult[int](items=[1, 2], total=5, limit=2, offset=0)
        assert page.has_more is True
        assert page.total_pages == 3

    def test_last_page(self):
        """Test that the last page reports no more items."""
        page = PaginationResult[int](items=[5], total=5, limit=2, offset=4)
        assert page.has_more is False

    def test_empty(self):
        """Test that an empty result has zero pages."""
        page = PaginationResult[int](items=[], total=0, limit=20, offset=0)
        assert page.has_more is False
        assert page.total_pages == 0

    def test_serializes_page_info(self):
        """Test that page info is included when serialized."""
        data = PaginationResult[int](items=[1], total=3, limit=1, offset=1).model_dump()
        assert data["has_more"] is True
        assert data["total_pages"] == 3
