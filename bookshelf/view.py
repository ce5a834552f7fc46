"""Render session state for the terminal."""
import json
import textwrap
from typing import List

from tabulate import tabulate

from bookshelf.models import Book
from bookshelf.state import SessionState

NO_IMAGE = "No image"
NO_SUMMARY = "No text summary provided."
LOADING = "Loading..."
SAVING = "Saving..."
EMPTY_LIST = "No books yet. Add one with 'add'."
ALL_CATEGORIES = "All categories"
EMPTY_DRAFT = "The form is empty. Use 'add' or 'set FIELD VALUE'."

DESCRIPTION_WIDTH = 40
DESCRIPTION_LINES = 2


def clamp(text: str, width: int = DESCRIPTION_WIDTH, lines: int = DESCRIPTION_LINES) -> str:
    """Wrap text and keep at most ``lines`` lines."""
    if not text:
        return ""
    wrapped = textwrap.wrap(" ".join(text.split()), width=width)
    if len(wrapped) > lines:
        wrapped = wrapped[:lines]
        wrapped[-1] = wrapped[-1][: width - 3].rstrip() + "..."
    return "\n".join(wrapped)


def truncate(text: str, limit: int) -> str:
    return text[:limit] + "..." if len(text) > limit else text


def render_banner(state: SessionState) -> str:
    return f"[!] {state.error}" if state.error else ""


def render_books(state: SessionState) -> str:
    """The browse panel: a table of books, or a status line."""
    if state.loading:
        return LOADING
    if not state.books:
        return EMPTY_LIST
    
    headers = ["#", "ID", "Title", "Author", "Category", "Description", "Cover", "Audio"]
    rows = []
    for i, book in enumerate(state.books, 1):
        marker = "*" if state.expanded_id == book.id else ""
        rows.append([
            f"{i}{marker}",
            book.id,
            truncate(book.title, 40),
            truncate(book.author, 30),
            book.category,
            clamp(book.description),
            truncate(book.cover_image_url, 30) if book.cover_image_url else NO_IMAGE,
            "yes" if book.has_audio else "",
        ])
    return tabulate(rows, headers=headers, tablefmt="grid")


def render_summary(state: SessionState) -> str:
    """Full text summary of the expanded book, if any."""
    book = state.expanded_book
    if book is None:
        return ""
    body = book.text_summary or NO_SUMMARY
    return f"{book.title} - {book.author}\n\n{body}"


def render_categories(state: SessionState) -> str:
    options = [ALL_CATEGORIES] + state.categories
    current = state.category or ALL_CATEGORIES
    return "  ".join(f"[{option}]" if option == current else option for option in options)


def render_filters(state: SessionState) -> str:
    query = state.query or "-"
    category = state.category or ALL_CATEGORIES
    return f"Search: {query}  |  Category: {category}"


def render_draft(state: SessionState) -> str:
    if state.draft.is_empty():
        return EMPTY_DRAFT
    rows = [[name, value] for name, value in state.draft.to_payload().items()]
    return tabulate(rows, headers=["Field", "Value"], tablefmt="simple")


def render_screen(state: SessionState) -> str:
    """Everything the shell shows after a command."""
    parts = [render_banner(state), render_filters(state), render_books(state), render_summary(state)]
    return "\n\n".join(part for part in parts if part)


def books_to_dicts(books: List[Book]) -> List[dict]:
    return [
        {
            "id": book.id,
            "title": book.title,
            "author": book.author,
            "category": book.category,
            "description": book.description,
            "text_summary": book.text_summary,
            "cover_image_url": book.cover_image_url,
            "audio_summary_url": book.audio_summary_url,
        }
        for book in books
    ]


def display_books(books: List[Book], format_type: str) -> str:
    """Format a list of books for one-shot output."""
    if format_type == "json":
        return json.dumps(books_to_dicts(books), indent=2)
    
    if format_type == "compact":
        return "\n".join(f"{book.id}. {book.title} - {book.author} ({book.category})" for book in books)
    
    state = SessionState(books=list(books))
    return render_books(state)
