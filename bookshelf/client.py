"""Async HTTP client for the book catalog backend."""
import httpx
from typing import List, Optional, Dict, Any, Union
import logging

from bookshelf.models import Book, BookDraft
from bookshelf.parse import parse_book, parse_books_response

logger = logging.getLogger(__name__)


class BackendError(Exception):
    """Non-success response from the backend."""
    
    def __init__(self, status_code: int, body: str = ""):
        self.status_code = status_code
        self.body = body
        super().__init__(body or f"Backend returned status {status_code}")


class BooksApiClient:
    """Client for the /api/books endpoints."""
    
    BOOKS_PATH = "/api/books"
    CHECK_PATH = "/test"
    
    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        timeout: float = 10,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        """
        Initialize async client.
        
        Args:
            base_url: Backend base address
            timeout: Request timeout in seconds
            transport: Optional transport override (used by tests)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        
        # One connection pool for the whole session
        self.client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            transport=transport
        )
    
    async def list_books(self, query: str = "", category: str = "") -> List[Book]:
        """
        Fetch the book list, optionally filtered.
        
        Args:
            query: Free-text search, sent as ``q`` when non-empty
            category: Category filter, sent when non-empty
            
        Returns:
            Books in the order the backend returned them
            
        Raises:
            BackendError: on a non-success status or malformed body
            httpx.HTTPError: on transport failure
        """
        params = {}
        if query:
            params["q"] = query
        if category:
            params["category"] = category
        
        logger.info(f"Listing books (params={params})")
        response = await self.client.get(self.BOOKS_PATH, params=params)
        self._raise_for_status(response)
        
        try:
            return parse_books_response(response.json())
        except ValueError as e:
            # json decode errors are ValueErrors too
            logger.error(f"Malformed book list: {e}")
            raise BackendError(response.status_code, "") from e
    
    async def create_book(self, draft: BookDraft) -> Optional[Book]:
        """
        Create a book from the draft.
        
        Returns:
            The created book when the backend echoes a usable record
        """
        payload = draft.to_payload()
        logger.info(f"Creating book: {payload['title']!r}")
        response = await self.client.post(self.BOOKS_PATH, json=payload)
        self._raise_for_status(response)
        
        try:
            return parse_book(response.json())
        except ValueError:
            return None
    
    async def delete_book(self, book_id: Union[int, str]) -> None:
        """Delete a book by id. The response body is not inspected."""
        logger.info(f"Deleting book {book_id}")
        response = await self.client.delete(f"{self.BOOKS_PATH}/{book_id}")
        self._raise_for_status(response)
    
    async def check_backend(self) -> Dict[str, Any]:
        """Ask the backend for its reachability report."""
        response = await self.client.get(self.CHECK_PATH)
        self._raise_for_status(response)
        
        try:
            data = response.json()
        except ValueError:
            return {"status": response.text.strip() or "ok"}
        return data if isinstance(data, dict) else {"status": data}
    
    def _raise_for_status(self, response: httpx.Response):
        if response.is_success:
            return
        body = response.text.strip()
        logger.warning(f"Status {response.status_code} for {response.request.method} {response.request.url}: {body}")
        raise BackendError(response.status_code, body)
    
    async def close(self):
        """Close the HTTP client."""
        await self.client.aclose()
    
    async def __aenter__(self):
        """Async context manager entry."""
        return self
    
    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()
