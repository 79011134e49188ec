"""
Lidarr client: lists the albums Lidarr is still waiting for (--lidarr-wanted).

Only one endpoint is used:
    GET {host}/api/v1/wanted/missing?pageSize=10000
    Header: X-Api-Key: <api_key>

The response is a paging object whose 'records' are albums, each with a
'title' and an 'artist' object carrying 'artistName'.
"""

from typing import Any

import requests

from music_utils.core.exceptions import LidarrError
from music_utils.core.logger import get_logger
from music_utils.matching.models import MissingAlbum


logger = get_logger(__name__)


WANTED_MISSING_PATH = "/api/v1/wanted/missing"
WANTED_PAGE_SIZE = 10000
DEFAULT_TIMEOUT = 30


def album_from_record(record: dict[str, Any]) -> MissingAlbum:
    return MissingAlbum(
        name=record.get("title") or "",
        artist=(record.get("artist") or {}).get("artistName") or "",
    )


class LidarrClient:
    """
    Minimal Lidarr API client.

    Attributes:
        host: Base URL of the Lidarr instance, without a trailing slash.
        timeout: Request timeout in seconds.
    """

    def __init__(
        self,
        host: str,
        api_key: str,
        timeout: int = DEFAULT_TIMEOUT,
        session: requests.Session | None = None
    ) -> None:
        self.host = host.rstrip("/")
        self.timeout = timeout

        self.session = session or requests.Session()
        self.session.headers.update({
            "Accept": "application/json",
            "X-Api-Key": api_key,
        })

    def get_wanted_albums(self) -> list[MissingAlbum]:
        """
        Albums monitored by Lidarr but not downloaded yet.

        Raises:
            LidarrError: If Lidarr cannot be reached or answers with an error.
        """
        url = f"{self.host}{WANTED_MISSING_PATH}"
        try:
            response = self.session.get(
                url,
                params={"pageSize": WANTED_PAGE_SIZE},
                timeout=self.timeout
            )
            response.raise_for_status()
            data = response.json()
        except requests.exceptions.RequestException as e:
            raise LidarrError(
                f"Lidarr request failed: {e}",
                details={"url": url, "original_error": str(e)}
            ) from e
        except ValueError as e:
            raise LidarrError(
                "Lidarr returned invalid JSON",
                details={"url": url}
            ) from e

        records = (data.get("records") or []) if isinstance(data, dict) else []
        albums = [album_from_record(record) for record in records if record]
        logger.info(f"Lidarr reports {len(albums)} wanted albums")
        return albums

    def close(self) -> None:
        self.session.close()
