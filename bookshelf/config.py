"""Settings for reaching the book backend, read from the environment or a .env file."""
import os
from dotenv import load_dotenv

load_dotenv()

DEFAULT_BACKEND_URL = "http://localhost:8000"


class Config:
    """Backend address, request timeout and log level."""
    
    BACKEND_HOST_URL = os.getenv("BOOKSHELF_BACKEND_URL", DEFAULT_BACKEND_URL)
    
    @property
    def BACKEND_URL(self):
        """Backend base address without a trailing slash."""
        return (self.BACKEND_HOST_URL or DEFAULT_BACKEND_URL).rstrip("/")
    
    # seconds
    DEFAULT_TIMEOUT = float(os.getenv("BOOKSHELF_TIMEOUT", "10"))
    LOG_LEVEL = os.getenv("BOOKSHELF_LOG_LEVEL", "WARNING").upper()
