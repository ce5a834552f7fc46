"""Interactive terminal session over the controller."""
import asyncio
import logging
import shlex
import signal
import webbrowser
from contextlib import contextmanager
from typing import Callable, Optional

import httpx
from rich.console import Console
from rich.prompt import Prompt, Confirm

from bookshelf import view
from bookshelf.client import BackendError
from bookshelf.controller import BookshelfController
from bookshelf.models import Book, BookDraft

logger = logging.getLogger(__name__)


@contextmanager
def interruptible():
    """Let Ctrl-C raise KeyboardInterrupt while blocked on a terminal prompt.
    
    asyncio.run swallows the first SIGINT while the loop is busy, and a
    prompt blocks the loop, so the default handler is restored around it.
    """
    previous = signal.signal(signal.SIGINT, signal.default_int_handler)
    try:
        yield
    finally:
        signal.signal(signal.SIGINT, previous)


FORM_FIELDS = [
    ("title", "Title"),
    ("author", "Author"),
    ("category", "Category"),
    ("cover_image_url", "Cover Image URL"),
    ("audio_summary_url", "Audio Summary URL"),
    ("description", "Short Description"),
    ("text_summary", "Text Summary"),
]

HELP = """Commands:
  search [text]       set the search text (if given) and fetch the list
  query [text]        set the search text without fetching
  category [name|all] choose the category filter; applied on next search
  add                 fill in the form and add a book
  set FIELD VALUE     edit one field of the form
  draft               show the form
  submit              add the book currently in the form
  clear               empty the form
  read ID             show or hide a book's text summary
  play ID             open a book's audio summary
  delete ID           delete a book
  check               check that the backend is reachable
  dismiss             hide the error message
  list                redraw the screen
  quit                leave"""


class BookshelfShell:
    """Read commands, call the controller, redraw."""
    
    def __init__(
        self,
        controller: BookshelfController,
        console: Optional[Console] = None,
        ask: Optional[Callable[..., str]] = None,
        confirm: Optional[Callable[..., bool]] = None,
        opener: Callable[[str], bool] = webbrowser.open
    ):
        self.controller = controller
        self.state = controller.state
        self.console = console or Console()
        self.ask = ask or Prompt.ask
        self.confirm = confirm or Confirm.ask
        self.opener = opener
        self.running = True
        
        self.commands = {
            "help": self.do_help,
            "search": self.do_search,
            "query": self.do_query,
            "category": self.do_category,
            "add": self.do_add,
            "set": self.do_set,
            "draft": self.do_draft,
            "submit": self.do_submit,
            "clear": self.do_clear,
            "read": self.do_read,
            "play": self.do_play,
            "delete": self.do_delete,
            "check": self.do_check,
            "dismiss": self.do_dismiss,
            "list": self.do_list,
            "quit": self.do_quit,
            "exit": self.do_quit,
        }
    
    def out(self, text: str):
        if text:
            self.console.print(text, markup=False, highlight=False)
    
    def prompt(self, label: str, default: str = "") -> str:
        with interruptible():
            return self.ask(label, default=default, show_default=bool(default))
    
    async def run(self):
        """Initial fetch, then the command loop."""
        await self.controller.refresh()
        self.do_list([])
        
        while self.running:
            try:
                line = self.prompt("bookshelf")
            except EOFError:
                break
            await self.handle(line)
    
    async def handle(self, line: str):
        try:
            parts = shlex.split(line or "")
        except ValueError as e:
            self.out(f"Could not parse command: {e}")
            return
        if not parts:
            return
        
        name, args = parts[0].lower(), parts[1:]
        command = self.commands.get(name)
        if command is None:
            self.out(f"Unknown command '{name}'. Type 'help' for the list.")
            return
        
        result = command(args)
        if asyncio.iscoroutine(result):
            await result
    
    def do_help(self, args):
        self.out(HELP)
    
    def do_list(self, args):
        self.out(view.render_screen(self.state))
    
    async def do_search(self, args):
        if args:
            self.controller.set_query(" ".join(args))
        self.out(view.LOADING)
        await self.controller.refresh()
        self.do_list([])
    
    def do_query(self, args):
        self.controller.set_query(" ".join(args))
        self.out(view.render_filters(self.state))
    
    def do_category(self, args):
        if not args:
            self.out(view.render_categories(self.state))
            return
        choice = " ".join(args)
        self.controller.set_category("" if choice.lower() == "all" else choice)
        self.out(view.render_filters(self.state))
        self.out("Run 'search' to apply the filter.")
    
    async def do_add(self, args):
        draft = self.state.draft
        for name, label in FORM_FIELDS:
            value = self.prompt(label, getattr(draft, name))
            setattr(draft, name, value or "")
        await self.do_submit([])
    
    def do_set(self, args):
        valid = [name for name, _ in FORM_FIELDS]
        if len(args) < 1 or args[0] not in valid:
            self.out(f"Usage: set FIELD VALUE  (fields: {', '.join(valid)})")
            return
        setattr(self.state.draft, args[0], " ".join(args[1:]))
    
    def do_draft(self, args):
        self.out(view.render_draft(self.state))
    
    async def do_submit(self, args):
        self.out(view.SAVING)
        if await self.controller.create():
            self.out("Book added.")
        self.do_list([])
    
    def do_clear(self, args):
        self.controller.reset_draft()
        self.out("Form cleared.")
    
    def _book_arg(self, args) -> Optional[Book]:
        if not args:
            self.out("A book id is required.")
            return None
        book = self.state.find(args[0])
        if book is None:
            self.out(f"No listed book with id {args[0]}.")
        return book
    
    def do_read(self, args):
        book = self._book_arg(args)
        if book is None:
            return
        self.controller.toggle_expanded(book.id)
        self.out(view.render_summary(self.state) or f"Hid summary of {book.title}.")
    
    def do_play(self, args):
        book = self._book_arg(args)
        if book is None:
            return
        if not book.has_audio:
            self.out(f"{book.title} has no audio summary.")
            return
        logger.info(f"Opening audio summary {book.audio_summary_url}")
        if not self.opener(book.audio_summary_url):
            self.out(f"Could not open a player. Audio summary: {book.audio_summary_url}")
    
    def _confirm_delete(self, book: Optional[Book]) -> bool:
        label = f" '{book.title}'" if book else ""
        with interruptible():
            return self.confirm(f"Delete this book{label}?", default=False)
    
    async def do_delete(self, args):
        if not args:
            self.out("A book id is required.")
            return
        book_id = args[0]
        book = self.state.find(book_id)
        if await self.controller.delete(book.id if book else book_id, self._confirm_delete):
            self.out("Book deleted.")
        self.do_list([])
    
    async def do_check(self, args):
        try:
            report = await self.controller.check_backend()
        except (BackendError, httpx.HTTPError) as e:
            self.out(f"Backend at {self.controller.client.base_url} is not reachable: {e}")
            return
        details = ", ".join(f"{key}: {value}" for key, value in report.items())
        self.out(f"Backend at {self.controller.client.base_url} is up ({details})")
    
    def do_dismiss(self, args):
        self.controller.dismiss_error()
    
    def do_quit(self, args):
        self.running = False


def fill_draft(draft: BookDraft, values: dict) -> BookDraft:
    """Copy non-None values onto the draft."""
    for name, _ in FORM_FIELDS:
        value = values.get(name)
        if value is not None:
            setattr(draft, name, value)
    return draft
