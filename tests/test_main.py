"""Tests for the script entry point."""

import logging

import main
from conftest import FakeGitHubClient, make_commit
from deploy_card.github import GitHubError, WorkflowRunStatus


def _patch(monkeypatch, client, sent):
    monkeypatch.setattr(main.github, "GitHubClient", lambda *args, **kwargs: client)

    def fake_notify(state, conclusion="in_progress", elapsed_seconds=None, **kwargs):
        sent.append((state, conclusion, elapsed_seconds))
        return "{}"

    monkeypatch.setattr(main.dispatcher, "format_and_notify", fake_notify)


def test_exit_uses_workflow_status(monkeypatch):
    sent = []
    _patch(monkeypatch, FakeGitHubClient(make_commit(), status=WorkflowRunStatus("failure", 17)), sent)

    assert main.main(["exit"]) == 0
    assert sent == [("exit", "failure", 17)]


def test_start_reports_in_progress(monkeypatch):
    sent = []
    _patch(monkeypatch, FakeGitHubClient(make_commit()), sent)

    assert main.main(["start"]) == 0
    assert sent == [("start", "in_progress", None)]


def test_unknown_layout_exits_non_zero(monkeypatch):
    monkeypatch.setenv("INPUT_CARD-LAYOUT-EXIT", "fancy")
    monkeypatch.setattr(main.github, "GitHubClient", lambda *args, **kwargs: FakeGitHubClient(make_commit()))

    assert main.main(["exit"]) == 1


def test_unknown_state(monkeypatch):
    assert main.main(["halfway"]) == 2


def test_missing_job_status_reports_in_progress(monkeypatch):
    sent = []
    _patch(monkeypatch, FakeGitHubClient(make_commit(), status=WorkflowRunStatus(None, None)), sent)

    assert main.main(["exit"]) == 0
    assert sent == [("exit", "in_progress", None)]


def test_github_error_is_logged_and_exits_non_zero(monkeypatch, caplog):
    class FailingClient(FakeGitHubClient):
        def get_workflow_run_status(self, run):
            raise GitHubError("GitHub API request failed: 503")

    monkeypatch.setattr(main.github, "GitHubClient", lambda *args, **kwargs: FailingClient(make_commit()))

    with caplog.at_level(logging.ERROR):
        assert main.main(["exit"]) == 1
    assert "GitHub API request failed: 503" in caplog.text
