"""
Tests for the GitHub REST API gateway.
"""

import base64
from datetime import datetime, timezone

import pytest
import requests

from gitmaster.error_handling import (
    ConflictError, ErrorKind, ForbiddenError, InvalidCredentialError, MissingCredentialError,
    NotFoundError, RateLimitedError, TransientError, ValidationError
)
from gitmaster.models import EntryKind, RepositoryRef

from conftest import TOKEN, make_response

REPO = RepositoryRef("octocat", "hello")


def sent(session, index=-1):
    """Method, URL and keyword arguments of a recorded request."""
    call = session.request.call_args_list[index]
    return call.args[0], call.args[1], call.kwargs


class TestRequests:

    def test_session_headers(self, github, session):
        assert session.headers["Accept"] == "application/vnd.github+json"
        assert session.headers["User-Agent"].startswith("gitmaster/")

    def test_authenticate_sends_bearer_token(self, github, session, credential):
        session.request.return_value = make_response(json_body={"login": "octocat"})

        identity = github.authenticate(credential)

        method, url, kwargs = sent(session)
        assert identity.login == "octocat"
        assert (method, url) == ("GET", "https://api.github.com/user")
        assert kwargs["headers"]["Authorization"] == f"Bearer {TOKEN}"
        assert kwargs["timeout"] == 30

    def test_missing_credential_sends_nothing(self, github, session):
        with pytest.raises(MissingCredentialError):
            github.list_repositories(None)

        session.request.assert_not_called()

    def test_custom_base_url(self, session, credential):
        from gitmaster.repository import GitHubGateway

        gateway = GitHubGateway(session=session, api_base_url="https://ghe.example.com/api/v3/")
        session.request.return_value = make_response(json_body={"login": "me"})

        gateway.authenticate(credential)

        assert sent(session)[1] == "https://ghe.example.com/api/v3/user"


class TestStatusMapping:

    @pytest.mark.parametrize("status, body, headers, error", [
        (401, {"message": "Bad credentials"}, {}, InvalidCredentialError),
        (403, {"message": "API rate limit exceeded"}, {"X-RateLimit-Remaining": "0"}, RateLimitedError),
        (429, {"message": "slow down"}, {}, RateLimitedError),
        (403, {"message": "Must have admin rights"}, {"X-RateLimit-Remaining": "4999"}, ForbiddenError),
        (404, {"message": "Not Found"}, {}, NotFoundError),
        (409, {"message": "Git Repository is empty."}, {}, ConflictError),
        (422, {"message": "Validation Failed"}, {}, ValidationError),
        (500, {"message": "boom"}, {}, TransientError),
        (502, None, {}, TransientError),
    ])
    def test_failures_map_to_typed_errors(self, github, session, credential, status, body, headers, error):
        session.request.return_value = make_response(status, body, headers)

        with pytest.raises(error):
            github.authenticate(credential)

    def test_rate_limit_reports_reset_time(self, github, session, credential):
        session.request.return_value = make_response(
            403, {"message": "API rate limit exceeded"},
            {"X-RateLimit-Remaining": "0", "X-RateLimit-Reset": "1700000000"}
        )

        with pytest.raises(RateLimitedError) as exc_info:
            github.authenticate(credential)

        assert exc_info.value.kind is ErrorKind.RATE_LIMITED
        assert exc_info.value.retry_after == datetime.fromtimestamp(1700000000, tz=timezone.utc)

    def test_network_failure_is_transient(self, github, session, credential):
        session.request.side_effect = requests.exceptions.ConnectionError("connection refused")

        with pytest.raises(TransientError) as exc_info:
            github.authenticate(credential)

        assert "connection refused" in exc_info.value.message

    def test_non_json_success_is_transient(self, github, session, credential):
        session.request.return_value = make_response(200, content=b"<html>")

        with pytest.raises(TransientError):
            github.authenticate(credential)


class TestListRepositories:

    def test_follows_pagination(self, github, session, credential):
        next_url = "https://api.github.com/user/repos?per_page=100&page=2"
        session.request.side_effect = [
            make_response(json_body=[{"full_name": "octocat/hello"}],
                          headers={"Link": f'<{next_url}>; rel="next", <{next_url}>; rel="last"'}),
            make_response(json_body=[{"full_name": "octocat/world"}]),
        ]

        repositories = github.list_repositories(credential)

        assert [repo.full_name for repo in repositories] == ["octocat/hello", "octocat/world"]
        assert sent(session, 0)[2]["params"] == {"per_page": 100}
        assert sent(session, 1)[1] == next_url
        assert sent(session, 1)[2]["params"] is None

    def test_empty_account(self, github, session, credential):
        session.request.return_value = make_response(json_body=[])

        assert github.list_repositories(credential) == []


class TestContents:

    def test_list_root(self, github, session, credential):
        session.request.return_value = make_response(json_body=[
            {"path": "README.md", "type": "file"},
            {"path": "src", "type": "dir"},
        ])

        entries = github.list_directory(credential, REPO, "")

        assert sent(session)[1] == "https://api.github.com/repos/octocat/hello/contents"
        assert [(e.path, e.kind) for e in entries] == [
            ("README.md", EntryKind.FILE),
            ("src", EntryKind.DIRECTORY),
        ]

    def test_list_nested_path(self, github, session, credential):
        session.request.return_value = make_response(json_body=[{"path": "src/app.py", "type": "file"}])

        github.list_directory(credential, REPO, "/src/")

        assert sent(session)[1] == "https://api.github.com/repos/octocat/hello/contents/src"

    def test_list_file_path_yields_single_entry(self, github, session, credential):
        session.request.return_value = make_response(json_body={"path": "README.md", "type": "file"})

        entries = github.list_directory(credential, REPO, "README.md")

        assert len(entries) == 1
        assert entries[0].path == "README.md"

    def test_list_missing_path(self, github, session, credential):
        session.request.return_value = make_response(404, {"message": "Not Found"})

        with pytest.raises(NotFoundError):
            github.list_directory(credential, REPO, "nope")

    def test_read_file_decodes_base64(self, github, session, credential):
        encoded = base64.b64encode("# Hello\nwörld\n".encode("utf-8")).decode("ascii")
        session.request.return_value = make_response(json_body={
            "type": "file", "path": "README.md", "encoding": "base64", "content": encoded, "size": 14
        })

        assert github.read_file(credential, REPO, "README.md") == "# Hello\nwörld\n"

    def test_read_empty_file(self, github, session, credential):
        session.request.return_value = make_response(json_body={
            "type": "file", "path": "empty.txt", "encoding": "base64", "content": "", "size": 0
        })

        assert github.read_file(credential, REPO, "empty.txt") == ""

    def test_read_large_file_fetches_raw_content(self, github, session, credential):
        session.request.side_effect = [
            make_response(json_body={"type": "file", "path": "big.bin", "encoding": "none",
                                     "content": "", "size": 2000000}),
            make_response(content=b"raw text"),
        ]

        assert github.read_file(credential, REPO, "big.bin") == "raw text"
        assert sent(session, 1)[2]["headers"]["Accept"] == "application/vnd.github.raw+json"

    def test_read_directory_is_not_found(self, github, session, credential):
        session.request.return_value = make_response(json_body=[{"path": "src/a.py", "type": "file"}])

        with pytest.raises(NotFoundError):
            github.read_file(credential, REPO, "src")

    def test_read_without_path(self, github, session, credential):
        with pytest.raises(NotFoundError):
            github.read_file(credential, REPO, "")

        session.request.assert_not_called()


class TestCreateFile:

    def test_puts_encoded_content(self, github, session, credential):
        session.request.return_value = make_response(201, {"commit": {"sha": "abc123"}})

        sha = github.create_file(credential, REPO, "docs/notes.md", "hello", "main", "Add notes")

        method, url, kwargs = sent(session)
        assert sha == "abc123"
        assert method == "PUT"
        assert url == "https://api.github.com/repos/octocat/hello/contents/docs/notes.md"
        assert kwargs["json"] == {
            "message": "Add notes",
            "content": base64.b64encode(b"hello").decode("ascii"),
            "branch": "main"
        }

    def test_existing_file_is_a_conflict(self, github, session, credential):
        session.request.return_value = make_response(
            422, {"message": "Invalid request.\n\n\"sha\" wasn't supplied."}
        )

        with pytest.raises(ConflictError):
            github.create_file(credential, REPO, "README.md", "x", "main", "Add")

    @pytest.mark.parametrize("path, branch, message", [
        ("", "main", "Add"),
        ("a.txt", "", "Add"),
        ("a.txt", "main", "  "),
    ])
    def test_empty_values_rejected_without_request(self, github, session, credential, path, branch, message):
        with pytest.raises(ValidationError):
            github.create_file(credential, REPO, path, "x", branch, message)

        session.request.assert_not_called()


class TestDeleteRepository:

    def test_sends_delete(self, github, session, credential):
        session.request.return_value = make_response(204)

        github.delete_repository(credential, REPO)

        assert sent(session)[:2] == ("DELETE", "https://api.github.com/repos/octocat/hello")

    def test_second_delete_is_not_found(self, github, session, credential):
        session.request.side_effect = [make_response(204), make_response(404, {"message": "Not Found"})]

        github.delete_repository(credential, REPO)
        with pytest.raises(NotFoundError):
            github.delete_repository(credential, REPO)
