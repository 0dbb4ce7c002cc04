"""Source discovery: map registry metadata to a source repository revision."""

from __future__ import annotations

import re
from typing import Any, Iterable, Mapping, Optional, Protocol

import httpx

from .config import HarvestConfig
from .exceptions import FetchError
from .identity import SourceLocation
from .logging_config import get_logger

logger = get_logger(__name__)

# github.com/<owner>/<repo> in https, git, ssh and Maven "scm:git:" forms
_GITHUB_URL = re.compile(r"github\.com[/:](?P<owner>[\w.-]+)/(?P<repo>[\w.-]+?)(?:\.git)?(?:[/#?].*)?$")


class SourceFinder(Protocol):
    async def __call__(
        self, version: str, candidate_urls: Iterable[str], options: Mapping[str, Any]
    ) -> Optional[SourceLocation]: ...


def parse_github_url(url: str) -> Optional[tuple[str, str]]:
    match = _GITHUB_URL.search(url or "")
    if not match:
        return None
    return match.group("owner"), match.group("repo")


class GitHubSourceFinder:
    """Finds the commit a release tag points at in a GitHub repository."""

    def __init__(
        self,
        api_url: str = "https://api.github.com",
        timeout_seconds: float = 30.0,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.api_url = api_url.rstrip("/")
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=httpx.Timeout(timeout_seconds))

    @classmethod
    def from_config(cls, config: HarvestConfig) -> "GitHubSourceFinder":
        return cls(api_url=config.github_api_url, timeout_seconds=config.http_timeout_seconds)

    async def __call__(
        self, version: str, candidate_urls: Iterable[str], options: Mapping[str, Any]
    ) -> Optional[SourceLocation]:
        headers = {"Accept": "application/vnd.github+json"}
        if options.get("github_token"):
            headers["Authorization"] = f"token {options['github_token']}"
        for url in candidate_urls:
            coordinates = parse_github_url(url)
            if coordinates is None:
                continue
            owner, repo = coordinates
            for tag in (f"v{version}", version, f"{repo}-{version}"):
                sha = await self._resolve_tag(owner, repo, tag, headers)
                if sha:
                    return SourceLocation(
                        type="git",
                        provider="github",
                        namespace=owner,
                        name=repo,
                        revision=sha,
                        url=f"https://github.com/{owner}/{repo}",
                    )
        return None

    async def _get(self, path: str, headers: dict[str, str]) -> Optional[dict[str, Any]]:
        try:
            response = await self._client.get(f"{self.api_url}{path}", headers=headers)
        except httpx.HTTPError as e:
            raise FetchError(path, f"{type(e).__name__}: {e}")
        if response.status_code == 404:
            return None
        if response.status_code != 200:
            raise FetchError(path, "unexpected GitHub status", response.status_code)
        return response.json()

    async def _resolve_tag(self, owner: str, repo: str, tag: str, headers: dict[str, str]) -> Optional[str]:
        ref = await self._get(f"/repos/{owner}/{repo}/git/ref/tags/{tag}", headers)
        if not ref or not isinstance(ref, dict):
            return None
        target = ref.get("object") or {}
        if target.get("type") == "tag":
            # Annotated tag: follow it to the commit.
            annotated = await self._get(f"/repos/{owner}/{repo}/git/tags/{target.get('sha')}", headers)
            target = (annotated or {}).get("object") or {}
        logger.debug("Resolved %s/%s@%s -> %s", owner, repo, tag, target.get("sha"))
        return target.get("sha")

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "GitHubSourceFinder":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()


class NullSourceFinder:
    """Source finder that never finds anything; used for offline runs."""

    async def __call__(
        self, version: str, candidate_urls: Iterable[str], options: Mapping[str, Any]
    ) -> Optional[SourceLocation]:
        return None
