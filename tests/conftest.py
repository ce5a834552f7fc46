"""Shared fixtures: an in-memory backend behind httpx.MockTransport."""
import asyncio
import json

import httpx
import pytest

from bookshelf.client import BooksApiClient
from bookshelf.controller import BookshelfController

BASE_URL = "http://backend.test"


class FakeBackend:
    """Serves /api/books from a list and records every request."""
    
    def __init__(self, books=None):
        self.books = list(books or [])
        self.requests = []
        self.next_id = 100
        self.list_status = 200
        self.list_body = None
        self.list_error = None
        self.list_delays = {}
        self.create_status = 201
        self.create_body = None
        self.create_error = None
        self.create_delay = 0
        self.delete_status = 204
        self.delete_error = None
        self.delete_delay = 0
        self.check_status = 200
    
    def count(self, method, path="/api/books"):
        return len([r for r in self.requests if r.method == method and r.url.path.startswith(path)])
    
    async def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        
        if path == "/test":
            if self.check_status >= 400:
                return httpx.Response(self.check_status, text="backend down")
            return httpx.Response(200, json={"backend": "✅ Running", "database": "✅ Connected"})
        
        if request.method == "GET" and path == "/api/books":
            query = request.url.params.get("q", "")
            delay = self.list_delays.get(query)
            if delay:
                await asyncio.sleep(delay)
            if self.list_error:
                raise self.list_error
            if self.list_status >= 400:
                return httpx.Response(self.list_status, text="boom")
            if self.list_body is not None:
                return httpx.Response(200, content=self.list_body)
            category = request.url.params.get("category", "")
            books = [
                b for b in self.books
                if (not category or b.get("category") == category)
                and (not query or query.lower() in (b.get("title", "") + b.get("author", "")).lower())
            ]
            return httpx.Response(200, json=books)
        
        if request.method == "POST" and path == "/api/books":
            if self.create_delay:
                await asyncio.sleep(self.create_delay)
            if self.create_error:
                raise self.create_error
            if self.create_status >= 400:
                return httpx.Response(self.create_status, text=self.create_body or "")
            payload = json.loads(request.content)
            book = dict(payload, id=self.next_id)
            self.next_id += 1
            self.books.append(book)
            return httpx.Response(self.create_status, json=book)
        
        if request.method == "DELETE" and path.startswith("/api/books/"):
            if self.delete_delay:
                await asyncio.sleep(self.delete_delay)
            if self.delete_error:
                raise self.delete_error
            if self.delete_status >= 400:
                return httpx.Response(self.delete_status, text="not found")
            book_id = path.rsplit("/", 1)[1]
            self.books = [b for b in self.books if str(b["id"]) != book_id]
            return httpx.Response(self.delete_status)
        
        return httpx.Response(404, text="no route")


@pytest.fixture
def backend():
    return FakeBackend([
        {"id": 1, "title": "Dune", "author": "Herbert", "category": "Sci-Fi"},
        {
            "id": 2,
            "title": "Atomic Habits",
            "author": "James Clear",
            "category": "Self-help",
            "description": "Tiny changes, remarkable results.",
            "text_summary": "Habits compound.",
            "cover_image_url": "https://covers.example/atomic.jpg",
            "audio_summary_url": "https://audio.example/atomic.mp3",
        },
    ])


@pytest.fixture
def controller(backend):
    client = BooksApiClient(BASE_URL, transport=httpx.MockTransport(backend.handler))
    return BookshelfController(client)
