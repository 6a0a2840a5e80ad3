"""GitHub Actions API access."""

from .client import FakeGitHubClient, GitHubApiError, GitHubClient, RunSource
from .models import RunIdentity, RunStatus, WorkflowRun

__all__ = [
    "FakeGitHubClient",
    "GitHubApiError",
    "GitHubClient",
    "RunIdentity",
    "RunSource",
    "RunStatus",
    "WorkflowRun",
]
