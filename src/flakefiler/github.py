"""Centralized GitHub client using PyGithub.

All GitHub API calls go through this module. Issues and pull requests are
returned as plain dicts so callers never hold PyGithub objects.
"""

import functools
import logging
import os

import requests
from github import Github, InputGitTreeElement

logger = logging.getLogger(__name__)

FILE_MODE = "100644"
FILE_TYPE = "blob"


@functools.lru_cache(maxsize=1)
def get_client() -> Github:
    """Create a Github client from GITHUB_TOKEN or GH_TOKEN env var.

    Cached for the lifetime of the process since the token comes from
    environment variables which don't change during a run.
    """
    return Github(_get_token())


def _get_token() -> str:
    """Return the GitHub token from environment."""
    token = os.environ.get("GITHUB_TOKEN") or os.environ.get("GH_TOKEN")
    if not token:
        raise RuntimeError(
            "GitHub token not found. Set GITHUB_TOKEN or GH_TOKEN environment variable."
        )
    return token


def _validate_repo(repo_slug: str) -> None:
    """Validate that repo_slug is in 'owner/name' format."""
    if not repo_slug or repo_slug.count("/") != 1:
        raise ValueError(
            f"Invalid repo format: '{repo_slug}'. Expected 'owner/name'."
        )


def _get_repo(repo_slug: str):
    _validate_repo(repo_slug)
    return get_client().get_repo(repo_slug)


def _format_time(value) -> str:
    return value.strftime("%Y-%m-%dT%H:%M:%SZ") if value else ""


def _check_rate_limit(client: Github) -> None:
    """Log a warning if the GitHub API rate limit is running low."""
    try:
        rate = client.get_rate_limit().core
        if rate.remaining < 50:
            logger.warning(
                "GitHub API rate limit low: %d/%d remaining, resets at %s",
                rate.remaining, rate.limit, rate.reset,
            )
    except Exception:
        pass


def _issue_to_dict(issue) -> dict:
    return {
        "number": issue.number,
        "url": issue.html_url,
        "title": issue.title,
        "body": issue.body or "",
        "state": issue.state,
        "closed_at": _format_time(issue.closed_at),
        "created_at": _format_time(issue.created_at),
    }


def _pull_to_dict(pull) -> dict:
    return {
        "number": pull.number,
        "url": pull.html_url,
        "title": pull.title,
        "body": pull.body or "",
    }


# ---------------------------------------------------------------------------
# Repository content
# ---------------------------------------------------------------------------

def get_file_content(repo_slug: str, path: str, ref: str) -> str:
    """Get file content from a repository at a specific ref.

    Uses the GitHub Contents API with raw media type.
    """
    _validate_repo(repo_slug)
    token = _get_token()
    url = f"https://api.github.com/repos/{repo_slug}/contents/{path}"
    resp = requests.get(
        url,
        params={"ref": ref},
        headers={
            "Authorization": f"token {token}",
            "Accept": "application/vnd.github.raw+json",
        },
    )
    resp.raise_for_status()
    return resp.text


def get_default_branch(repo_slug: str) -> dict:
    """Return the default branch as a dict with keys: name, sha."""
    repo = _get_repo(repo_slug)
    branch = repo.default_branch
    ref = repo.get_git_ref(f"heads/{branch}")
    return {"name": branch, "sha": ref.object.sha}


# ---------------------------------------------------------------------------
# Issues and pull requests
# ---------------------------------------------------------------------------

def list_flake_issues(repo_slug: str, label: str) -> list[dict]:
    """List open and closed issues carrying label, newest first."""
    repo = _get_repo(repo_slug)
    issues = repo.get_issues(
        state="all", labels=[label], sort="created", direction="desc",
    )
    # The issues endpoint also returns pull requests.
    results = [
        _issue_to_dict(issue) for issue in issues if issue.pull_request is None
    ]
    _check_rate_limit(get_client())
    return results


def list_open_pull_requests(repo_slug: str) -> list[dict]:
    """List open pull requests, newest first."""
    repo = _get_repo(repo_slug)
    pulls = repo.get_pulls(state="open", sort="created", direction="desc")
    results = [_pull_to_dict(pull) for pull in pulls]
    _check_rate_limit(get_client())
    return results


def create_issue(
    repo_slug: str,
    title: str,
    body: str,
    labels: list[str],
    assignee: str | None = None,
) -> dict:
    """Create an issue, assigned to assignee when one is given."""
    repo = _get_repo(repo_slug)
    kwargs = {"title": title, "body": body, "labels": labels}
    if assignee:
        kwargs["assignee"] = assignee
    issue = repo.create_issue(**kwargs)
    logger.info("Created issue #%d: %s", issue.number, issue.html_url)
    return _issue_to_dict(issue)


def create_pull_request(
    repo_slug: str,
    title: str,
    body: str,
    commit_message: str,
    base: dict,
    head: str,
    path: str,
    content: str,
) -> dict:
    """Commit a single-file change on a new head branch and open a PR.

    base is the dict returned by get_default_branch.
    """
    repo = _get_repo(repo_slug)
    parent = repo.get_git_commit(base["sha"])
    tree = repo.create_git_tree(
        [InputGitTreeElement(path, FILE_MODE, FILE_TYPE, content=content)],
        base_tree=parent.tree,
    )
    commit = repo.create_git_commit(commit_message, tree, [parent])
    repo.create_git_ref(ref=f"refs/heads/{head}", sha=commit.sha)
    pull = repo.create_pull(title=title, body=body, base=base["name"], head=head)
    logger.info("Created pull request #%d: %s", pull.number, pull.html_url)
    return _pull_to_dict(pull)


def assign_reviewer(repo_slug: str, number: int, reviewer: str) -> None:
    """Request a review from reviewer on pull request number."""
    repo = _get_repo(repo_slug)
    repo.get_pull(number).create_review_request(reviewers=[reviewer])
    logger.debug("Requested review from %s on #%d", reviewer, number)
