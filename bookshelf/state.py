"""Session state shared by the controller and the view."""
from dataclasses import dataclass, field
from typing import List, Optional, Union

from bookshelf.models import Book, BookDraft
from bookshelf.parse import derive_categories


@dataclass
class SessionState:
    """What is currently shown. Nothing here is persisted."""
    books: List[Book] = field(default_factory=list)
    query: str = ""
    category: str = ""
    loading: bool = False
    submitting: bool = False
    error: str = ""
    expanded_id: Optional[Union[int, str]] = None
    draft: BookDraft = field(default_factory=BookDraft)
    
    @property
    def categories(self) -> List[str]:
        """Filter options derived from the current list."""
        return derive_categories(self.books)
    
    @property
    def expanded_book(self) -> Optional[Book]:
        if self.expanded_id is None:
            return None
        return self.find(self.expanded_id)
    
    def find(self, book_id) -> Optional[Book]:
        """Look up a listed book, matching ids typed as text too."""
        for book in self.books:
            if book.id == book_id or str(book.id) == str(book_id):
                return book
        return None
