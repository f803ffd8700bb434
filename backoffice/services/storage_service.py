import os
from typing import Optional

from fastapi import Request
from loguru import logger

from backoffice.utils.errors import ServerError


class LocalBlobStore:
    """Stores uploaded files under a root directory served at ``/uploads``.

    Paths are relative (``<user id>/<epoch ms>-<filename>``); writing to an
    existing path replaces the file.
    """

    def __init__(self, root: str, public_base_url: str, mount_path: str = "/uploads"):
        self.root = os.path.abspath(root)
        self.public_base_url = public_base_url.rstrip("/")
        self.mount_path = mount_path
        os.makedirs(self.root, exist_ok=True)

    def _full_path(self, path: str) -> str:
        full_path = os.path.abspath(os.path.join(self.root, path))
        if not full_path.startswith(self.root + os.sep):
            raise ServerError("Invalid storage path")
        return full_path

    def upload(self, path: str, content: bytes) -> str:
        full_path = self._full_path(path)
        try:
            os.makedirs(os.path.dirname(full_path), exist_ok=True)
            with open(full_path, "wb") as f:
                f.write(content)
        except OSError as e:
            logger.error(f"Failed to store upload {path}: {str(e)}")
            raise ServerError("Failed to upload file")

        logger.info(f"Stored upload: {path} ({len(content)} bytes)")
        return path

    def get_public_url(self, path: str) -> str:
        return f"{self.public_base_url}{self.mount_path}/{path}"

    def exists(self, path: str) -> bool:
        return os.path.isfile(self._full_path(path))

    def remove(self, path: Optional[str]) -> bool:
        """Delete a stored file; returns False when it was already gone"""
        if not path:
            return False
        full_path = self._full_path(path)
        if not os.path.isfile(full_path):
            return False
        try:
            os.remove(full_path)
        except OSError as e:
            logger.error(f"Failed to remove upload {path}: {str(e)}")
            raise ServerError("Failed to remove file")
        logger.info(f"Removed upload: {path}")
        return True


def get_blob_store(request: Request) -> LocalBlobStore:
    return request.app.state.blob_store
