"""Public file storage on the local filesystem.

Paths handed out by this module are relative keys (e.g.
``profile-images/<id>_<ts>.jpg``) stored on the user record; ``url()``
turns a key into the public URL served by the web tier.
"""

from pathlib import Path

from account_auth.core.config import settings


class PublicStorage:
    """Key/value blob storage rooted at one directory."""

    def __init__(self, root: str | Path, base_url: str) -> None:
        self.root = Path(root)
        self.base_url = base_url.rstrip("/")

    def _resolve(self, key: str) -> Path:
        path = (self.root / key).resolve()
        if not path.is_relative_to(self.root.resolve()):
            msg = f"Storage key escapes root: {key!r}"
            raise ValueError(msg)
        return path

    def put(self, key: str, content: bytes) -> str:
        """Write ``content`` under ``key``, creating directories as needed.

        Returns:
            The key, for storing on the owning record.
        """
        path = self._resolve(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content)
        return key

    def delete(self, key: str) -> bool:
        """Remove a stored file. Missing files are not an error.

        Returns:
            True if a file was removed.
        """
        path = self._resolve(key)
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        return True

    def url(self, key: str) -> str:
        """Public URL for a stored key."""
        return f"{self.base_url}/{key}"


_storage: PublicStorage | None = None


def get_storage() -> PublicStorage:
    """FastAPI dependency returning the process-wide storage instance."""
    global _storage
    if _storage is None:
        _storage = PublicStorage(settings.storage_root, settings.storage_url)
    return _storage


def reset_storage() -> None:
    """Drop the cached instance (tests point storage at a tmp dir)."""
    global _storage
    _storage = None
