"""Tests for the GitHub API client."""

import pytest

from conftest import SHA, FakeResponse, FakeSession
from deploy_card.github import (
    NULL_SHA,
    Commit,
    GitHubClient,
    GitHubError,
    find_last_step,
    parse_iso8601,
)

COMMIT_PAYLOAD = {
    "sha": SHA,
    "html_url": f"https://github.com/octo-org/octo-repo/commit/{SHA}",
    "commit": {"message": "Fix bug\n\nDetailed explanation."},
    "author": {
        "login": "octocat",
        "html_url": "https://github.com/octocat",
        "avatar_url": "https://avatars.example/octocat",
    },
    "files": [
        {"filename": "README.md", "blob_url": "https://github.com/blob/README.md", "changes": 4},
    ],
}


def test_commit_from_api():
    commit = Commit.from_api(COMMIT_PAYLOAD)

    assert commit.sha == SHA
    assert commit.message == "Fix bug\n\nDetailed explanation."
    assert commit.author.login == "octocat"
    assert commit.files[0].filename == "README.md"
    assert commit.files[0].changes == 4


def test_commit_from_api_without_author_or_files():
    commit = Commit.from_api({"sha": SHA, "html_url": "u", "commit": {"message": "m"}, "author": None})

    assert commit.author is None
    assert commit.files == []


def test_client_sets_auth_header():
    session = FakeSession()

    GitHubClient("ghs_token", session=session)

    assert session.headers["Authorization"] == "Bearer ghs_token"


def test_get_commit():
    session = FakeSession({f"/repos/octo-org/octo-repo/commits/{SHA}": FakeResponse(200, COMMIT_PAYLOAD)})
    client = GitHubClient(session=session)

    commit = client.get_commit("octo-org", "octo-repo", SHA)

    assert commit.html_url == COMMIT_PAYLOAD["html_url"]
    assert session.gets == [f"https://api.github.com/repos/octo-org/octo-repo/commits/{SHA}"]


def test_get_commit_failure_raises():
    client = GitHubClient(session=FakeSession())

    with pytest.raises(GitHubError):
        client.get_commit("octo-org", "octo-repo", SHA)


def test_compare_commits():
    before = "1" * 40
    session = FakeSession(
        {f"/compare/{before}...{SHA}": FakeResponse(200, {"commits": [COMMIT_PAYLOAD, COMMIT_PAYLOAD]})}
    )

    commits = GitHubClient(session=session).compare_commits("octo-org", "octo-repo", before, SHA)

    assert len(commits) == 2


@pytest.mark.parametrize("before,after", [(None, SHA), (NULL_SHA, SHA), ("1" * 40, None)])
def test_compare_commits_without_range(before, after):
    session = FakeSession()

    assert GitHubClient(session=session).compare_commits("o", "r", before, after) == []
    assert session.gets == []


def test_find_last_step_prefers_stopped_step():
    steps = [
        {"name": "checkout", "status": "completed", "conclusion": "success"},
        {"name": "test", "status": "completed", "conclusion": "failure"},
        {"name": "cleanup", "status": "completed", "conclusion": "success"},
    ]

    assert find_last_step(steps)["name"] == "test"


def test_find_last_step_skips_skipped_and_pending():
    steps = [
        {"name": "build", "status": "completed", "conclusion": "success"},
        {"name": "deploy", "status": "completed", "conclusion": "skipped"},
        {"name": "notify", "status": "in_progress", "conclusion": None},
    ]

    assert find_last_step(steps)["name"] == "build"
    assert find_last_step([]) is None


def test_get_workflow_run_status(run_info):
    jobs = {
        "jobs": [
            {"name": "lint", "started_at": "2024-01-01T09:00:00Z", "steps": []},
            {
                "name": "build",
                "started_at": "2024-01-01T10:00:00Z",
                "steps": [
                    {"status": "completed", "conclusion": "success",
                     "completed_at": "2024-01-01T10:00:42Z"},
                ],
            },
        ]
    }
    session = FakeSession({"/actions/runs/1234/jobs": FakeResponse(200, jobs)})

    status = GitHubClient(session=session).get_workflow_run_status(run_info)

    assert status.conclusion == "success"
    assert status.elapsed_seconds == 42


def test_get_workflow_run_status_missing_job(run_info):
    session = FakeSession({"/actions/runs/1234/jobs": FakeResponse(200, {"jobs": []})})

    status = GitHubClient(session=session).get_workflow_run_status(run_info)

    assert status.conclusion is None
    assert status.elapsed_seconds is None


def test_parse_iso8601():
    assert parse_iso8601("2024-01-01T10:00:00Z").hour == 10
    assert parse_iso8601("not a date") is None
    assert parse_iso8601(None) is None
