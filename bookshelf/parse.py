"""Parse and validate book payloads from the backend."""
import logging
from typing import Any, List, Optional
from bookshelf.models import Book

logger = logging.getLogger(__name__)

TEXT_FIELDS = (
    "title",
    "author",
    "category",
    "description",
    "text_summary",
    "cover_image_url",
    "audio_summary_url",
)


def _text(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def parse_book(item: Any) -> Optional[Book]:
    """
    Parse a single book record from the backend.
    
    Args:
        item: One element of the list response
        
    Returns:
        Book object or None if the record is unusable
    """
    if not isinstance(item, dict):
        logger.warning(f"Skipping non-object book record: {item!r}")
        return None
    
    book_id = item.get("id")
    if book_id is None or book_id == "":
        logger.warning(f"Skipping book record without id: {item.get('title')!r}")
        return None
    
    values = {name: _text(item.get(name)) for name in TEXT_FIELDS}
    return Book(id=book_id, **values)


def parse_books_response(response_json: Any) -> List[Book]:
    """
    Parse the list endpoint's response.
    
    Args:
        response_json: Decoded JSON body
        
    Returns:
        List of Book objects in server order
        
    Raises:
        ValueError: if the body is not a JSON array
    """
    if not isinstance(response_json, list):
        raise ValueError(f"Expected a list of books, got {type(response_json).__name__}")
    
    books = []
    for item in response_json:
        book = parse_book(item)
        if book:
            books.append(book)
    
    return books


def derive_categories(books: List[Book]) -> List[str]:
    """
    Distinct non-empty trimmed categories, sorted.
    
    Trimming keeps case, so "Self-help" and "self-help" stay distinct.
    """
    return sorted({book.category_label for book in books if book.category_label})
