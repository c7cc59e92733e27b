"""
HTTP retrieval of feed documents and media files.

The publisher answers some missing resources with a 200 response whose
body says the resource was not found; such bodies are treated as
failures just like transport errors and non-success status codes.
"""

import logging
import os
from pathlib import Path

import requests

from magbot import __version__
from magbot.exceptions import FilesystemError, TransportError

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT = 60  # seconds
CHUNK_SIZE = 64 * 1024
USER_AGENT = f"magbot/{__version__}"
NOT_FOUND_MARKER = b"was not found on this server"


def _get(url: str, timeout: float, stream: bool = False) -> requests.Response:
    """Issue a GET request, mapping every failure to TransportError."""
    try:
        response = requests.get(
            url,
            headers={"User-Agent": USER_AGENT},
            timeout=timeout,
            stream=stream,
        )
        response.raise_for_status()
    except requests.exceptions.Timeout as exc:
        raise TransportError(f"Request timed out: {url}", url=url) from exc
    except requests.exceptions.HTTPError as exc:
        status = exc.response.status_code if exc.response is not None else None
        raise TransportError(
            f"HTTP error {status} for {url}",
            url=url,
            status_code=status,
        ) from exc
    except requests.exceptions.RequestException as exc:
        raise TransportError(f"Request failed for {url}: {exc}", url=url) from exc
    return response


def fetch(url: str, timeout: float = REQUEST_TIMEOUT) -> bytes:
    """
    Retrieve a resource and return its full body.

    Args:
        url: URL to fetch
        timeout: Request timeout in seconds

    Returns:
        Response body bytes

    Raises:
        TransportError: On network failure, non-2xx status or a
            "not found" body
    """
    logger.debug("GET %s", url)
    response = _get(url, timeout)
    content = response.content
    if NOT_FOUND_MARKER in content:
        raise TransportError(f"Resource not found: {url}", url=url)
    return content


def download(url: str, output_path: Path, timeout: float = REQUEST_TIMEOUT) -> int:
    """
    Stream a resource into ``output_path``.

    The body is written to ``<output_path>.part`` and renamed into place
    only once complete, so a failed download never leaves a file at
    ``output_path``.

    Args:
        url: URL to download
        output_path: Final location of the file
        timeout: Request timeout in seconds

    Returns:
        Number of bytes written

    Raises:
        TransportError: On network failure, non-2xx status or a
            "not found" body
        FilesystemError: If the file cannot be written
    """
    output_path = Path(output_path)
    part_path = output_path.with_name(output_path.name + ".part")

    logger.debug("GET %s -> %s", url, output_path)
    response = _get(url, timeout, stream=True)
    written = 0
    try:
        with open(part_path, "wb") as f:
            for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                if not chunk:
                    continue
                if written == 0 and NOT_FOUND_MARKER in chunk:
                    raise TransportError(f"Resource not found: {url}", url=url)
                f.write(chunk)
                written += len(chunk)
        os.replace(part_path, output_path)
    except requests.exceptions.RequestException as exc:
        _discard(part_path)
        raise TransportError(f"Download interrupted for {url}: {exc}", url=url) from exc
    except (OSError, ValueError) as exc:
        _discard(part_path)
        raise FilesystemError(f"Cannot write {output_path}: {exc}") from exc
    except TransportError:
        _discard(part_path)
        raise
    finally:
        response.close()

    return written


def _discard(path: Path) -> None:
    try:
        path.unlink()
    except FileNotFoundError:
        pass
    except (OSError, ValueError) as exc:
        logger.warning("Could not remove partial file %s: %s", path, exc)
