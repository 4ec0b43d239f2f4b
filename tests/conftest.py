"""
notestore — Test Configuration (conftest.py)
=============================================

What:  Shared pytest fixtures for the whole suite.
How:   Environment is overridden before any notestore import; HTTP traffic
       goes to httpx.MockTransport; file operations use tmp_path.

Fixture Hierarchy:
    Function-scoped (created fresh for each test):
    ├── memory_backend: InMemoryBackend (identity + records)
    ├── image_server: fake image endpoint (upload.php + static files)
    ├── http_client: AsyncClient routed to image_server
    ├── image_service: ImageService writing under tmp_path
    ├── store: NoteStore on the in-memory backend (signed out)
    ├── alice_store: same store, registered and signed in as alice@example.com
    └── sample_image_bytes: minimal JPEG
"""

import os
import tempfile
from typing import Any, Dict, List, Optional

import httpx
import pytest
import pytest_asyncio

# Override settings for testing BEFORE any notestore imports
os.environ["FIREBASE_API_KEY"] = "test-key-not-real"
os.environ["FIREBASE_DATABASE_URL"] = "https://notes-test-default-rtdb.firebaseio.com"
os.environ["STAGING_DIR"] = tempfile.mkdtemp(prefix="notestore_staging_")
os.environ["DOWNLOAD_DIR"] = tempfile.mkdtemp(prefix="notestore_downloads_")
os.environ["LOG_LEVEL"] = "WARNING"

from notestore.backends.memory import InMemoryBackend  # noqa: E402
from notestore.services.image_service import ImageService  # noqa: E402
from notestore.services.note_store import NoteStore  # noqa: E402

UPLOAD_URL = "http://images.test/notesapp/upload.php"
ALICE_EMAIL = "alice@example.com"
ALICE_PASSWORD = "secret123"


class FakeImageServer:
    """
    Stand-in for the image host.

    POST upload.php answers with `upload_status` / `upload_body`; GET of a
    path registered in `files` answers with its bytes, anything else is 404.
    """

    def __init__(self) -> None:
        self.requests: List[httpx.Request] = []
        self.upload_status = 200
        self.upload_body: Any = {
            "success": True,
            "imageUrl": "http://images.test/notesapp/uploads/abc.jpg",
            "error": None,
        }
        self.files: Dict[str, bytes] = {}
        self.raise_error: Optional[Exception] = None
        self.transport = httpx.MockTransport(self.handle)

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.raise_error is not None:
            raise self.raise_error
        if request.method == "POST" and request.url.path.endswith("/upload.php"):
            if isinstance(self.upload_body, (bytes, str)):
                return httpx.Response(self.upload_status, content=self.upload_body)
            return httpx.Response(self.upload_status, json=self.upload_body)
        if request.method == "GET" and request.url.path in self.files:
            return httpx.Response(200, content=self.files[request.url.path])
        return httpx.Response(404, text="Not Found")


@pytest.fixture
def memory_backend():
    return InMemoryBackend()


@pytest.fixture
def image_server():
    return FakeImageServer()


@pytest_asyncio.fixture
async def http_client(image_server):
    async with httpx.AsyncClient(transport=image_server.transport) as client:
        yield client


@pytest.fixture
def image_service(http_client, tmp_path):
    return ImageService(
        http_client,
        upload_url=UPLOAD_URL,
        staging_dir=str(tmp_path / "staging"),
        download_dir=str(tmp_path / "downloads"),
    )


@pytest.fixture
def store(memory_backend, image_service):
    return NoteStore(identity=memory_backend, records=memory_backend, images=image_service)


@pytest_asyncio.fixture
async def alice_store(store):
    result = await store.register(ALICE_EMAIL, ALICE_PASSWORD)
    assert result.is_ok()
    return store


@pytest.fixture
def sample_image_bytes():
    """
    Minimal JPEG: Start of Image (FFD8) + JFIF marker + End of Image (FFD9).
    """
    return (
        b'\xff\xd8\xff\xe0\x00\x10JFIF\x00\x01\x01\x00\x00\x01\x00\x01\x00\x00'
        b'\xff\xd9'
    )
