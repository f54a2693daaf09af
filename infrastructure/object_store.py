"""In-Memory Object Store"""
from typing import Dict, List, Tuple
from urllib.parse import quote

from domain.exceptions import NotFoundError
from domain.repositories import ObjectStore
from infrastructure.logging_config import get_logger

logger = get_logger("object_store")


class InMemoryObjectStore(ObjectStore):
    """Blob storage kept in a dict, served back through the media endpoint"""

    def __init__(self, base_url: str = "/media"):
        self.base_url = base_url.rstrip("/")
        self._objects: Dict[str, Tuple[bytes, str]] = {}

    async def upload(self, path: str, content: bytes, content_type: str = "application/octet-stream") -> None:
        """Store content at path, replacing any existing object"""
        self._objects[path.lstrip("/")] = (bytes(content), content_type)
        logger.debug("Uploaded %s (%d bytes)", path, len(content))

    async def get_download_url(self, path: str) -> str:
        path = path.lstrip("/")
        if path not in self._objects:
            raise NotFoundError("Object", path)
        return f"{self.base_url}/{quote(path)}"

    async def list_all(self, prefix: str) -> List[str]:
        """List object paths under prefix, sorted by path"""
        prefix = prefix.strip("/")
        if prefix:
            prefix += "/"
        return sorted(p for p in self._objects if p.startswith(prefix))

    async def download(self, path: str) -> Tuple[bytes, str]:
        path = path.lstrip("/")
        if path not in self._objects:
            raise NotFoundError("Object", path)
        return self._objects[path]
