"""Read the binary content behind a captured image handle.

All file I/O is async using aiofiles; remote handles are fetched with httpx.
"""

from pathlib import Path
from urllib.parse import unquote, urlparse

import aiofiles
import httpx

from capsync.models import CapturedImage


def local_path(uri: str) -> Path | None:
    """Return the filesystem path of a plain path or ``file://`` URI.

    Returns None for any other scheme.
    """
    parsed = urlparse(uri)
    if parsed.scheme == "file":
        return Path(unquote(parsed.path))
    if parsed.scheme == "":
        return Path(uri)
    return None


async def load_image_bytes(
    image: CapturedImage,
    client: httpx.AsyncClient | None = None,
    timeout: float = 30.0,
) -> bytes:
    """Load the bytes of a captured image.

    Args:
        image: Image handle from the picker
        client: Optional HTTP client used for http(s) handles
        timeout: Request timeout when no client is given

    Raises:
        FileNotFoundError: If a local file does not exist
        httpx.HTTPError: If a remote handle cannot be fetched
        ValueError: If the URI scheme is not supported
    """
    path = local_path(image.uri)
    if path is not None:
        if not path.exists():
            raise FileNotFoundError(f"File not found: {path}")
        async with aiofiles.open(path, "rb") as f:
            return await f.read()

    scheme = urlparse(image.uri).scheme
    if scheme not in ("http", "https"):
        raise ValueError(f"Unsupported image URI scheme: {scheme}")

    if client is not None:
        response = await client.get(image.uri)
        response.raise_for_status()
        return response.content

    async with httpx.AsyncClient(timeout=httpx.Timeout(timeout)) as owned:
        response = await owned.get(image.uri)
        response.raise_for_status()
        return response.content
