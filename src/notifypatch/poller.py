"""
Resolve the newest published build from the PaperMC downloads API.

Three dependent requests: project -> version list, version -> build list,
build -> details. The API lists versions and builds oldest first, so the last
element of each list is taken as the latest.
"""

import logging
from typing import Any, List, Optional

from .client import UpstreamClient
from .config import DEFAULT_API_BASE
from .errors import RequestError
from .state import NO_CHANGES_ENTRY, BuildRecord
from .timefmt import DisplayClock

logger = logging.getLogger(__name__)

MAX_CHANGELOG_ENTRIES = 3
CHANGE_PREFIX = "🛠️ "


def format_changelog(changes: Any) -> List[str]:
    """First three change summaries as bullet lines, or the placeholder entry."""
    if not isinstance(changes, list) or not changes:
        return [NO_CHANGES_ENTRY]

    lines = []
    for change in changes[:MAX_CHANGELOG_ENTRIES]:
        summary = change.get("summary") if isinstance(change, dict) else None
        lines.append(f"{CHANGE_PREFIX}{summary or ''}".rstrip())
    return lines


class BuildPoller:
    """Fetches the latest build of one project and normalizes it to a BuildRecord."""

    def __init__(
        self,
        client: UpstreamClient,
        api_base: str = DEFAULT_API_BASE,
        project: str = "paper",
        clock: Optional[DisplayClock] = None,
    ):
        self.client = client
        self.api_base = api_base.rstrip("/")
        self.project = project
        self.clock = clock or DisplayClock()

    # ── URLs ─────────────────────────────────────────────────────────

    def project_url(self) -> str:
        return f"{self.api_base}/projects/{self.project}"

    def version_url(self, version: str) -> str:
        return f"{self.project_url()}/versions/{version}"

    def build_url(self, version: str, build: Any) -> str:
        return f"{self.version_url(version)}/builds/{build}"

    def download_url(self, version: str, build: Any) -> str:
        jar = f"{self.project}-{version}-{build}.jar"
        return f"{self.build_url(version, build)}/downloads/{jar}"

    # ── Fetch ────────────────────────────────────────────────────────

    async def fetch_latest_build(self) -> BuildRecord:
        """
        Resolve latest version -> latest build -> build details.

        Raises:
            RequestError: If any request fails or a list is missing/empty
        """
        logger.info(f"Querying {self.project} builds from {self.api_base}")

        project_url = self.project_url()
        project_info = await self.client.get_json(project_url)
        version = _last_item(project_info, "versions", project_url)

        version_url = self.version_url(version)
        version_info = await self.client.get_json(version_url)
        build = _last_item(version_info, "builds", version_url)

        details = await self.client.get_json(self.build_url(version, build))
        if not isinstance(details, dict):
            details = {}

        record = BuildRecord(
            version=str(version),
            build=build,
            changelog=format_changelog(details.get("changes")),
            time=self.clock.format_build_time(details.get("time")),
            download_url=self.download_url(version, build),
        )
        logger.info(f"Latest upstream build: {self.project} {record.version} #{record.build}")
        return record


def _last_item(payload: Any, key: str, url: str) -> Any:
    """Last element of payload[key]; no sorting is applied."""
    items = payload.get(key) if isinstance(payload, dict) else None
    if not isinstance(items, list) or not items:
        raise RequestError(url, ValueError(f"response has no '{key}' list"))
    return items[-1]
