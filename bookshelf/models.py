"""Data models for books."""
from dataclasses import dataclass, fields
from typing import Union, List, Dict

REQUIRED_FIELDS = ("title", "author", "category")


@dataclass(frozen=True)
class Book:
    """Snapshot of a book record held by the backend."""
    id: Union[int, str]
    title: str
    author: str
    category: str
    description: str = ""
    text_summary: str = ""
    cover_image_url: str = ""
    audio_summary_url: str = ""
    
    @property
    def has_audio(self) -> bool:
        return bool(self.audio_summary_url)
    
    @property
    def category_label(self) -> str:
        """Category as offered in the filter options."""
        return self.category.strip()


@dataclass
class BookDraft:
    """In-progress form values for a new book."""
    title: str = ""
    author: str = ""
    category: str = ""
    description: str = ""
    text_summary: str = ""
    cover_image_url: str = ""
    audio_summary_url: str = ""
    
    def missing_required(self) -> List[str]:
        """Names of required fields that are still empty."""
        return [name for name in REQUIRED_FIELDS if not getattr(self, name)]
    
    def to_payload(self) -> Dict[str, str]:
        """JSON body for the create request."""
        return {f.name: getattr(self, f.name) for f in fields(self)}
    
    def reset(self):
        """Clear every field back to an empty string."""
        for f in fields(self):
            setattr(self, f.name, "")
    
    def is_empty(self) -> bool:
        return not any(self.to_payload().values())
