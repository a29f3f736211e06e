"""
Cached model storage.

A key-value blob store for trained regression models, plus the codec
that packs a model's weights and architecture into bytes.  Storing under
an existing key overwrites silently; looking up an unknown key is a
cache miss (``None``), never an error.
"""

import io
import logging
import os
import re
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

import torch

LOGGER = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Blob codec
# ---------------------------------------------------------------------------

def serialize_model(payload: Dict[str, Any]) -> bytes:
    """Serialize a model payload (state dict + metadata) to bytes.

    Args:
        payload: Dict of tensors, numbers, strings and lists of those.

    Returns:
        Bytes produced by ``torch.save``.
    """
    buf = io.BytesIO()
    torch.save(payload, buf)
    buf.seek(0)
    return buf.read()


def deserialize_model(data: bytes) -> Dict[str, Any]:
    """Inverse of ``serialize_model``.

    Only plain containers and tensors are accepted (``weights_only``), so
    arbitrary pickled objects in a tampered blob are rejected.

    Raises:
        ValueError: If *data* is not a readable model payload.
    """
    buf = io.BytesIO(data)
    try:
        payload = torch.load(buf, map_location="cpu", weights_only=True)
    except Exception as exc:
        raise ValueError(f"Unreadable model blob: {exc}") from exc
    if not isinstance(payload, dict):
        raise ValueError("Model blob does not contain a payload dict")
    return payload


# ---------------------------------------------------------------------------
# Stores
# ---------------------------------------------------------------------------

class ModelStore(ABC):
    """Abstract key-value store for model blobs."""

    @abstractmethod
    def get(self, key: str) -> Optional[bytes]:
        """Return the blob stored under *key*, or None on a cache miss."""
        ...

    @abstractmethod
    def put(self, key: str, blob: bytes) -> None:
        """Store *blob* under *key*, replacing any existing entry."""
        ...

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove *key* if present."""
        ...

    @abstractmethod
    def keys(self) -> List[str]:
        ...


class MemoryModelStore(ModelStore):
    """In-process store, used by tests and as a per-session cache."""

    def __init__(self):
        self._blobs: Dict[str, bytes] = {}

    def get(self, key: str) -> Optional[bytes]:
        return self._blobs.get(key)

    def put(self, key: str, blob: bytes) -> None:
        self._blobs[key] = bytes(blob)

    def delete(self, key: str) -> None:
        self._blobs.pop(key, None)

    def keys(self) -> List[str]:
        return sorted(self._blobs)


class DirectoryModelStore(ModelStore):
    """Store each blob as ``<root>/<key>.pt`` on local disk.

    Args:
        root: Cache directory (created on first write).
    """

    _SAFE_KEY = re.compile(r"^[A-Za-z0-9._-]+$")
    _SUFFIX = ".pt"

    def __init__(self, root: str):
        self.root = root

    def _path(self, key: str) -> str:
        if not self._SAFE_KEY.match(key):
            raise ValueError(f"Invalid model key: {key!r}")
        return os.path.join(self.root, key + self._SUFFIX)

    def get(self, key: str) -> Optional[bytes]:
        path = self._path(key)
        try:
            with open(path, "rb") as f:
                return f.read()
        except FileNotFoundError:
            return None

    def put(self, key: str, blob: bytes) -> None:
        os.makedirs(self.root, exist_ok=True)
        path = self._path(key)
        tmp_path = path + ".tmp"
        with open(tmp_path, "wb") as f:
            f.write(blob)
        os.replace(tmp_path, path)
        LOGGER.debug("Wrote %d bytes to %s", len(blob), path)

    def delete(self, key: str) -> None:
        try:
            os.remove(self._path(key))
        except FileNotFoundError:
            pass

    def keys(self) -> List[str]:
        if not os.path.isdir(self.root):
            return []
        return sorted(
            name[: -len(self._SUFFIX)]
            for name in os.listdir(self.root)
            if name.endswith(self._SUFFIX)
        )
