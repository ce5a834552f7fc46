"""Keeps the session state in sync with the backend's book list."""
import inspect
import itertools
import logging
from typing import Callable, Awaitable, Union, Optional, Dict, Any

import httpx

from bookshelf.client import BooksApiClient, BackendError
from bookshelf.models import Book
from bookshelf.state import SessionState

logger = logging.getLogger(__name__)

VALIDATION_MESSAGE = "Please fill title, author and category"
LOAD_FAILED = "Failed to load books"
ADD_FAILED = "Failed to add book"
DELETE_FAILED = "Delete failed"

ConfirmFn = Callable[[Optional[Book]], Union[bool, Awaitable[bool]]]


class BookshelfController:
    """
    Mediates between the view and the remote book list.
    
    Every list fetch is numbered. Only the response to the most recently
    issued fetch may replace the list, set the error, or clear ``loading``.
    """
    
    def __init__(self, client: BooksApiClient, state: Optional[SessionState] = None):
        self.client = client
        self.state = state or SessionState()
        self._sequence = itertools.count(1)
        self._latest = 0
    
    async def refresh(self) -> bool:
        """
        Run the List/Search operation with the current query and category.
        
        Returns:
            True if this fetch's result was applied successfully
        """
        request_id = next(self._sequence)
        self._latest = request_id
        query, category = self.state.query, self.state.category
        self.state.loading = True
        
        try:
            books = await self.client.list_books(query, category)
        except BackendError as e:
            self._apply_failure(request_id, LOAD_FAILED)
            logger.debug(f"List failed with status {e.status_code}")
            return False
        except httpx.HTTPError as e:
            self._apply_failure(request_id, str(e) or LOAD_FAILED)
            return False
        
        if request_id != self._latest:
            logger.info(f"Discarding stale list response #{request_id} (latest #{self._latest})")
            return False
        
        self.state.books = books
        self.state.loading = False
        if self.state.expanded_id is not None and self.state.expanded_book is None:
            self.state.expanded_id = None
        logger.info(f"Loaded {len(books)} books")
        return True
    
    def _apply_failure(self, request_id: int, message: str):
        if request_id != self._latest:
            logger.info(f"Discarding stale list failure #{request_id}: {message}")
            return
        logger.error(f"List/search failed: {message}")
        self.state.error = message
        self.state.loading = False
    
    async def create(self) -> bool:
        """
        Submit the form draft.
        
        Returns:
            True if the backend accepted the book
        """
        draft = self.state.draft
        self.state.error = ""
        
        missing = draft.missing_required()
        if missing:
            logger.info(f"Draft missing required fields: {', '.join(missing)}")
            self.state.error = VALIDATION_MESSAGE
            return False
        
        self.state.submitting = True
        try:
            await self.client.create_book(draft)
        except BackendError as e:
            self.state.error = e.body or ADD_FAILED
            return False
        except httpx.HTTPError as e:
            logger.error(f"Create failed: {e}")
            self.state.error = str(e) or ADD_FAILED
            return False
        finally:
            self.state.submitting = False
        
        draft.reset()
        await self.refresh()
        return True
    
    async def delete(self, book_id: Union[int, str], confirm: ConfirmFn) -> bool:
        """
        Delete a book after the user confirms.
        
        Args:
            book_id: Id of the book to delete
            confirm: Called with the listed book (or None); may be async
            
        Returns:
            True if the delete request was sent and succeeded
        """
        answer = confirm(self.state.find(book_id))
        if inspect.isawaitable(answer):
            answer = await answer
        if not answer:
            logger.info(f"Delete of {book_id} declined")
            return False
        
        deleted = True
        try:
            await self.client.delete_book(book_id)
        except (BackendError, httpx.HTTPError) as e:
            logger.error(f"Delete of {book_id} failed: {e}")
            self.state.error = DELETE_FAILED
            deleted = False
        
        await self.refresh()
        return deleted
    
    def toggle_expanded(self, book_id: Union[int, str]) -> Optional[Book]:
        """Expand one book (collapsing any other), or collapse it if expanded."""
        book = self.state.find(book_id)
        if book is None:
            return None
        if self.state.expanded_id == book.id:
            self.state.expanded_id = None
            return None
        self.state.expanded_id = book.id
        return book
    
    def set_query(self, query: str):
        self.state.query = query
    
    def set_category(self, category: str):
        """Change the filter; it applies on the next refresh."""
        self.state.category = category
    
    def reset_draft(self):
        self.state.draft.reset()
    
    def dismiss_error(self):
        self.state.error = ""
    
    async def check_backend(self) -> Dict[str, Any]:
        """Reachability report from the backend; errors propagate to the caller."""
        return await self.client.check_backend()
