"""Tests for the interactive shell commands."""
import asyncio
import io

from rich.console import Console

from bookshelf.controller import VALIDATION_MESSAGE
from bookshelf.shell import BookshelfShell


def make_shell(controller, answers=None, confirm=True):
    answers = list(answers or [])
    opened = []
    
    def ask(label, default="", show_default=False):
        return answers.pop(0) if answers else default
    
    shell = BookshelfShell(
        controller,
        console=Console(file=io.StringIO(), width=200),
        ask=ask,
        confirm=lambda label, default=False: confirm,
        opener=lambda url: opened.append(url) or True,
    )
    shell.opened = opened
    return shell


def output(shell):
    return shell.console.file.getvalue()


def run(shell, *lines):
    async def scenario():
        for line in lines:
            await shell.handle(line)
    asyncio.run(scenario())


def test_search_sets_query_and_fetches(backend, controller):
    shell = make_shell(controller)
    
    run(shell, "search dune")
    
    assert controller.state.query == "dune"
    assert [book.title for book in controller.state.books] == ["Dune"]


def test_category_waits_for_search(backend, controller):
    shell = make_shell(controller)
    
    run(shell, "category Sci-Fi")
    assert backend.count("GET") == 0
    assert "Run 'search'" in output(shell)
    
    run(shell, "search")
    assert [book.title for book in controller.state.books] == ["Dune"]
    
    run(shell, "category all")
    assert controller.state.category == ""


def test_add_prompts_every_field(backend, controller):
    shell = make_shell(controller, ["Deep Work", "Cal Newport", "Productivity", "", "", "", ""])
    
    run(shell, "add")
    
    assert "Book added." in output(shell)
    assert backend.books[-1]["title"] == "Deep Work"
    assert controller.state.draft.is_empty()


def test_add_with_missing_field_keeps_draft(backend, controller):
    shell = make_shell(controller, ["Deep Work", "", "Productivity", "", "", "", ""])
    
    run(shell, "add")
    
    assert controller.state.error == VALIDATION_MESSAGE
    assert controller.state.draft.title == "Deep Work"
    assert backend.count("POST") == 0


def test_set_and_clear_draft(backend, controller):
    shell = make_shell(controller)
    
    run(shell, 'set title "The Hobbit"', "draft")
    assert controller.state.draft.title == "The Hobbit"
    assert "The Hobbit" in output(shell)
    
    run(shell, "clear")
    assert controller.state.draft.is_empty()


def test_read_toggles_summary(backend, controller):
    shell = make_shell(controller)
    run(shell, "list", "search")
    
    run(shell, "read 2")
    assert "Habits compound." in output(shell)
    
    run(shell, "read 1")
    assert controller.state.expanded_id == 1
    assert "No text summary provided." in output(shell)


def test_play_opens_audio(backend, controller):
    shell = make_shell(controller)
    run(shell, "search", "play 2", "play 1")
    
    assert shell.opened == ["https://audio.example/atomic.mp3"]
    assert "Dune has no audio summary." in output(shell)


def test_delete_declined(backend, controller):
    shell = make_shell(controller, confirm=False)
    run(shell, "search", "delete 1")
    
    assert backend.count("DELETE") == 0
    assert len(controller.state.books) == 2


def test_delete_confirmed(backend, controller):
    shell = make_shell(controller, confirm=True)
    run(shell, "search", "delete 1")
    
    assert "Book deleted." in output(shell)
    assert [book.id for book in controller.state.books] == [2]


def test_check_and_unknown_command(backend, controller):
    shell = make_shell(controller)
    run(shell, "check", "frobnicate")
    
    assert "is up" in output(shell)
    assert "Unknown command 'frobnicate'" in output(shell)


def test_quit_stops_loop(backend, controller):
    shell = make_shell(controller, ["search", "quit"])
    
    asyncio.run(shell.run())
    
    assert shell.running is False
    assert backend.count("GET") == 2
