"""Download generated images to local disk."""

import logging
from pathlib import Path
from typing import Union

import requests

from seedream_mcp.core.errors import DownloadError

logger = logging.getLogger(__name__)


class AssetDownloader:
    """Fetches a remote image and writes it into a local directory.

    Attributes:
        timeout: Per-request timeout in seconds
        chunk_size: Bytes written per chunk while streaming
    """

    def __init__(self, timeout: float = 30, chunk_size: int = 64 * 1024):
        self.timeout = timeout
        self.chunk_size = chunk_size

    def fetch(self, url: str, destination_dir: Union[str, Path], filename: str) -> Path:
        """Download url into destination_dir/filename.

        The destination directory is created if it does not exist. A
        partially written file is removed when the transfer fails.

        Args:
            url: Image URL
            destination_dir: Directory to save into
            filename: Name of the file to create

        Returns:
            Absolute path of the saved file

        Raises:
            DownloadError: On a non-2xx status or any transport failure
        """
        directory = Path(destination_dir)
        try:
            directory.mkdir(parents=True, exist_ok=True)
            file_path = (directory / filename).resolve()
        except OSError as e:
            raise DownloadError(f"Failed to download image: cannot create {directory}: {e}") from e

        try:
            with requests.get(url, stream=True, timeout=self.timeout) as response:
                if not 200 <= response.status_code < 300:
                    raise DownloadError(f"Failed to download image: HTTP {response.status_code}")
                with open(file_path, "wb") as f:
                    for chunk in response.iter_content(chunk_size=self.chunk_size):
                        if chunk:
                            f.write(chunk)

        except (requests.exceptions.RequestException, OSError) as e:
            file_path.unlink(missing_ok=True)
            raise DownloadError(f"Failed to download image: {e}") from e

        logger.debug(f"Saved {url} to {file_path}")
        return file_path
