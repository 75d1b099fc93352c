import requests
from collections import deque
from typing import Any, Deque, List, Optional
from pydantic import TypeAdapter, ValidationError
import logging

from reconciler.core.exceptions import BuildDecodeError, CIBackendException
from reconciler.models.builds import BuildDetail, BuildSummary

logger = logging.getLogger(__name__)

_build_list_adapter = TypeAdapter(List[BuildSummary])

def _error_fields(error: ValidationError) -> List[str]:
    return [".".join(str(part) for part in err["loc"]) or "<root>" for err in error.errors()]

class DroneClient:
    """Drone API client for listing builds and fetching build details"""

    def __init__(
        self,
        name: str,
        base_url: str,
        token: str,
        owner: str,
        repo: str,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None
    ):
        self.name = name
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({"Authorization": f"Bearer {token}"})
        self.builds_url = f"{self.base_url}/api/repos/{owner}/{repo}/builds"

    def __enter__(self) -> "DroneClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        self.session.close()

    def _make_request(self, url: str, params: Optional[dict] = None) -> Any:
        """Make authenticated request to the Drone API"""
        try:
            with self.session.get(url, params=params, timeout=self.timeout) as response:
                response.raise_for_status()
                try:
                    return response.json()
                except ValueError as e:
                    raise BuildDecodeError(self.name, url, reason=f"invalid JSON ({e})") from e
        except requests.exceptions.RequestException as e:
            logger.error(f"{self.name} API request failed: {e}")
            status_code = getattr(e.response, "status_code", None)
            raise CIBackendException(
                self.name,
                f"request to {url} failed: {e}",
                details={"url": url, "upstream_status": status_code}
            ) from e

    def get_build_list(self, page: int) -> List[BuildSummary]:
        """Get one page of builds, newest first"""
        logger.debug(f"Fetching {self.name} build list page {page}")
        payload = self._make_request(self.builds_url, {"page": page})
        try:
            return _build_list_adapter.validate_python(payload)
        except ValidationError as e:
            raise BuildDecodeError(self.name, f"build list page {page}", _error_fields(e)) from e

    def get_recent_builds(self) -> List[BuildSummary]:
        """Get the most recent page of builds"""
        return self.get_build_list(1)

    def get_build_info(self, build_number: int) -> BuildDetail:
        """Get a build with its stages and steps"""
        payload = self._make_request(f"{self.builds_url}/{build_number}")
        try:
            return BuildDetail.model_validate(payload)
        except ValidationError as e:
            raise BuildDecodeError(self.name, f"build {build_number}", _error_fields(e)) from e

    def get_builds_paginated(self) -> "BuildPaginator":
        return BuildPaginator(self)

class BuildPaginator:
    """Forward-only cursor over a client's build list.

    A page is fetched only when every entry of the previous one has been
    consumed. An empty page ends the iteration; otherwise callers decide when
    to stop pulling.
    """

    def __init__(self, client: DroneClient, page: int = 1):
        self.client = client
        self.page = page
        self._cached: Deque[BuildSummary] = deque()

    def skip_pages(self, pages: int) -> "BuildPaginator":
        """Drop any buffered entries and move the cursor forward without fetching"""
        if pages > 0:
            self._cached.clear()
            self.page += pages
        return self

    def __iter__(self) -> "BuildPaginator":
        return self

    def __next__(self) -> BuildSummary:
        if not self._cached:
            self._cached.extend(self.client.get_build_list(self.page))
            self.page += 1
        if not self._cached:
            raise StopIteration
        return self._cached.popleft()
