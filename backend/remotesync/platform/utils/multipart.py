"""multipart/related body construction for metadata + media uploads."""

import json
import uuid
from typing import Any, Dict, Optional

from remotesync.core.exceptions import MultipartBoundaryError


def serialize_metadata(metadata: Dict[str, Any]) -> bytes:
    """Serialize the metadata part exactly as it is placed in the body."""
    return json.dumps(metadata, ensure_ascii=False).encode("utf-8")


def choose_boundary(preferred: Optional[str], *parts: bytes) -> str:
    """Pick a boundary that occurs in none of the parts.

    Args:
        preferred: Boundary to use when it does not collide
        *parts: Serialized body parts

    Returns:
        ``preferred`` if usable, otherwise a fresh random boundary
    """
    candidate = preferred
    while not candidate or any(candidate.encode("utf-8") in part for part in parts):
        candidate = f"=============={uuid.uuid4().hex}"
    return candidate


def build_multipart_related(
    metadata: Dict[str, Any],
    content: bytes,
    content_type: str,
    boundary: str,
) -> bytes:
    """Build a two-part multipart/related body.

    Part one is the JSON metadata, part two the raw content.

    Args:
        metadata: Metadata serialized as the first part
        content: Raw content bytes of the second part
        content_type: MIME type declared for the content part
        boundary: Boundary string; must not occur inside either part

    Returns:
        The full request body

    Raises:
        MultipartBoundaryError: If the boundary occurs inside a part
    """
    marker = boundary.encode("utf-8")
    metadata_bytes = serialize_metadata(metadata)
    if not marker or marker in metadata_bytes or marker in content:
        raise MultipartBoundaryError(f"Boundary {boundary!r} occurs inside the multipart body")

    delimiter = b"\r\n--" + marker + b"\r\n"
    close_delimiter = b"\r\n--" + marker + b"--"
    return b"".join(
        [
            delimiter,
            b"Content-Type: application/json; charset=UTF-8\r\n\r\n",
            metadata_bytes,
            delimiter,
            f"Content-Type: {content_type}\r\n\r\n".encode("utf-8"),
            content,
            close_delimiter,
        ]
    )
