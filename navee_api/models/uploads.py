"""Multipart upload inputs."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class FilePart:
    """One file in a multipart/form-data upload."""

    content: bytes
    filename: str
    content_type: str | None = None

    def as_httpx(self) -> tuple[str, bytes] | tuple[str, bytes, str]:
        """Return the (filename, content[, content_type]) tuple httpx expects."""
        if self.content_type:
            return (self.filename, self.content, self.content_type)
        return (self.filename, self.content)
