"""Async client for the GitHub Actions workflow run endpoints."""

from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping, Protocol

import httpx

from .models import WorkflowRun

DEFAULT_API_URL = "https://api.github.com"
API_VERSION = "2022-11-28"
PAGE_SIZE = 100


class GitHubApiError(RuntimeError):
    """Raised when a GitHub API request fails for any reason."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code

    def __str__(self) -> str:
        return self.message


class RunSource(Protocol):
    """Protocol for the minimal workflow run API used by the gate."""

    async def get_workflow_run(self, owner: str, repo: str, run_id: int) -> WorkflowRun:
        ...

    async def list_workflow_runs(
        self,
        owner: str,
        repo: str,
        workflow_id: int,
        *,
        status: str,
        branch: str | None = None,
    ) -> list[WorkflowRun]:
        ...


def _error_message(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        payload = None
    if isinstance(payload, dict) and payload.get("message"):
        return str(payload["message"])
    return response.reason_phrase or f"HTTP {response.status_code}"


class GitHubClient:
    """Query workflow runs over the REST API with ``httpx``."""

    def __init__(
        self,
        token: str,
        *,
        api_url: str = DEFAULT_API_URL,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": API_VERSION,
        }
        if token:
            headers["Authorization"] = f"Bearer {token}"
        self._client = httpx.AsyncClient(
            base_url=api_url.rstrip("/"),
            headers=headers,
            timeout=timeout,
            transport=transport,
        )
        self.log = logging.getLogger(__name__)

    async def __aenter__(self) -> "GitHubClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def get_workflow_run(self, owner: str, repo: str, run_id: int) -> WorkflowRun:
        response = await self._get(f"/repos/{owner}/{repo}/actions/runs/{run_id}")
        return WorkflowRun.from_api(response.json())

    async def list_workflow_runs(
        self,
        owner: str,
        repo: str,
        workflow_id: int,
        *,
        status: str,
        branch: str | None = None,
    ) -> list[WorkflowRun]:
        params: dict[str, Any] | None = {"status": status, "per_page": PAGE_SIZE}
        if branch:
            params["branch"] = branch
        url: str | None = f"/repos/{owner}/{repo}/actions/workflows/{workflow_id}/runs"

        runs: list[WorkflowRun] = []
        while url is not None:
            response = await self._get(url, params=params)
            payload = response.json()
            runs.extend(WorkflowRun.from_api(item) for item in payload.get("workflow_runs", []))
            # The next link already carries the query string.
            url = response.links.get("next", {}).get("url")
            params = None

        self.log.debug(
            "Listed workflow runs",
            extra={"workflow_id": workflow_id, "status": status, "branch": branch, "count": len(runs)},
        )
        return runs

    async def _get(self, url: str, *, params: Mapping[str, Any] | None = None) -> httpx.Response:
        try:
            response = await self._client.get(url, params=params)
        except httpx.HTTPError as exc:
            raise GitHubApiError(str(exc) or exc.__class__.__name__) from exc
        if response.is_error:
            raise GitHubApiError(
                _error_message(response),
                status_code=response.status_code,
            )
        return response


class FakeGitHubClient(GitHubClient):
    """Test double that serves scripted workflow run snapshots."""

    def __init__(  # type: ignore[override]
        self,
        runs: Mapping[int, Iterable[WorkflowRun | Exception]] | None = None,
        listings: Mapping[str, Iterable[WorkflowRun] | Exception] | None = None,
    ) -> None:
        self._runs: dict[int, list[WorkflowRun | Exception]] = {
            run_id: list(responses) for run_id, responses in (runs or {}).items()
        }
        self._listings: dict[str, list[WorkflowRun] | Exception] = {
            status: value if isinstance(value, Exception) else list(value)
            for status, value in (listings or {}).items()
        }
        self._calls: list[tuple[Any, ...]] = []
        self.closed = False
        self.log = logging.getLogger(__name__)

    async def aclose(self) -> None:
        self.closed = True

    async def get_workflow_run(self, owner: str, repo: str, run_id: int) -> WorkflowRun:
        self._calls.append(("get", owner, repo, run_id))
        responses = self._runs.get(run_id)
        if not responses:
            raise GitHubApiError("Not Found", status_code=404)
        # The last scripted snapshot keeps being served once the others are used up.
        response = responses.pop(0) if len(responses) > 1 else responses[0]
        if isinstance(response, Exception):
            raise response
        return response

    async def list_workflow_runs(
        self,
        owner: str,
        repo: str,
        workflow_id: int,
        *,
        status: str,
        branch: str | None = None,
    ) -> list[WorkflowRun]:
        self._calls.append(("list", owner, repo, workflow_id, status, branch))
        listing = self._listings.get(status, [])
        if isinstance(listing, Exception):
            raise listing
        return list(listing)

    @property
    def calls(self) -> list[tuple[Any, ...]]:
        return self._calls

    def fetches(self, run_id: int) -> int:
        """Return how many times ``run_id`` was fetched individually."""

        return sum(1 for call in self._calls if call[0] == "get" and call[3] == run_id)


__all__ = [
    "DEFAULT_API_URL",
    "FakeGitHubClient",
    "GitHubApiError",
    "GitHubClient",
    "RunSource",
]
