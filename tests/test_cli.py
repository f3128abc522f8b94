"""
Tests for the command-line interface.
"""

import json

import pytest
from click.testing import CliRunner

from gitmaster import __version__
from gitmaster.cli import cli
from gitmaster.error_handling import InvalidCredentialError
from gitmaster.models import AccountIdentity, DirectoryEntry, EntryKind, RepositoryRef


@pytest.fixture
def invoke(dispatcher):
    runner = CliRunner()

    def _invoke(*args, input=None, target=None):
        obj = {"dispatcher": target or dispatcher}
        return runner.invoke(cli, list(args), obj=obj, input=input)

    return _invoke


def test_version():
    result = CliRunner().invoke(cli, ["--version"])

    assert result.exit_code == 0
    assert __version__ in result.output


class TestGitCommand:

    def test_status(self, invoke, runner):
        result = invoke("git", "status")

        assert result.exit_code == 0
        assert "ok" in result.output
        runner.run.assert_called_once_with("git", ["status"])

    def test_commit_message_words_are_joined(self, invoke, runner):
        invoke("git", "commit", "Fix", "typo")

        runner.run.assert_called_once_with("git", ["commit", "-m", "Fix typo"])

    def test_add_keeps_shell_quoting(self, invoke, runner):
        invoke("git", "add", "docs/read me.md", "setup.py")

        runner.run.assert_called_once_with("git", ["add", "docs/read me.md", "setup.py"])

    def test_prompts_for_required_value(self, invoke, runner):
        result = invoke("git", "commit", input="Initial commit\n")

        assert result.exit_code == 0
        runner.run.assert_called_once_with("git", ["commit", "-m", "Initial commit"])

    def test_option_like_values_are_passed_through(self, invoke, runner):
        invoke("git", "reset", "--hard", "HEAD~1")

        runner.run.assert_called_once_with("git", ["reset", "--hard", "HEAD~1"])

    def test_optional_branch_is_not_prompted(self, invoke, runner):
        invoke("git", "push")

        runner.run.assert_called_once_with("git", ["push", "origin", "main"])

    def test_failure_exits_non_zero(self, invoke, runner):
        from gitmaster.error_handling import ErrorKind
        from gitmaster.models import ActionResult

        runner.run.return_value = ActionResult(
            succeeded=False, error_message="fatal: not a git repository", exit_code=128,
            error_kind=ErrorKind.PROCESS_ERROR
        )

        result = invoke("git", "status")

        assert result.exit_code == 1
        assert "Error: fatal: not a git repository" in result.output

    def test_extra_words_for_fixed_action_are_rejected(self, invoke, runner):
        result = invoke("git", "log", "-5")

        assert result.exit_code == 2
        assert "takes no arguments" in result.output
        runner.run.assert_not_called()

    def test_unknown_action(self, invoke):
        assert invoke("git", "frobnicate").exit_code == 2


class TestGitHubCommands:

    def test_connect_lists_repositories(self, invoke, disconnected, gateway):
        gateway.authenticate.return_value = AccountIdentity("octocat")
        gateway.list_repositories.return_value = [RepositoryRef("octocat", "hello")]

        result = invoke("connect", "--token", "ghp_newtoken9876", target=disconnected)

        assert result.exit_code == 0
        assert "Connected as: octocat" in result.output
        assert "1. octocat/hello" in result.output

    def test_connect_with_rejected_token(self, invoke, disconnected, gateway):
        gateway.authenticate.side_effect = InvalidCredentialError("Invalid GitHub token")

        result = invoke("connect", "--token", "bad", target=disconnected)

        assert result.exit_code == 1
        assert "gitmaster connect" in result.output
        gateway.list_repositories.assert_not_called()

    def test_repos_requires_connection(self, invoke, disconnected):
        result = invoke("repos", target=disconnected)

        assert result.exit_code == 1
        assert "connect" in result.output

    def test_reset_token(self, invoke, dispatcher):
        result = invoke("reset-token")

        assert result.exit_code == 0
        assert not dispatcher.is_connected

    def test_browse_list(self, invoke, gateway):
        gateway.list_directory.return_value = [
            DirectoryEntry("README.md", EntryKind.FILE),
            DirectoryEntry("src", EntryKind.DIRECTORY),
        ]

        result = invoke("browse", "octocat/hello", "--list")

        assert result.exit_code == 0
        assert "README.md\n[DIR] src" in result.output

    def test_browse_interactively(self, invoke, gateway):
        listings = {
            "": [DirectoryEntry("README.md", EntryKind.FILE), DirectoryEntry("src", EntryKind.DIRECTORY)],
            "src": [DirectoryEntry("src/app.py", EntryKind.FILE)],
        }
        gateway.list_directory.side_effect = lambda credential, repo, path: listings[path]
        gateway.read_file.return_value = "print('hi')"

        result = invoke("browse", "octocat/hello", input="2\n1\nb\nq\n")

        assert result.exit_code == 0
        assert "[DIR] src" in result.output
        assert "print('hi')" in result.output
        visited = [call.args[2] for call in gateway.list_directory.call_args_list]
        assert visited == ["", "src", "src", ""]

    def test_browse_malformed_repository(self, invoke, gateway):
        result = invoke("browse", "not-a-repo", "--list")

        assert result.exit_code == 1
        gateway.list_directory.assert_not_called()

    def test_cat(self, invoke, gateway):
        gateway.read_file.return_value = "# Hello"

        result = invoke("cat", "octocat/hello", "README.md")

        assert result.exit_code == 0
        assert "# Hello" in result.output

    def test_add_file(self, invoke, gateway, tmp_path):
        local = tmp_path / "notes.md"
        local.write_text("notes", encoding="utf-8")
        gateway.create_file.return_value = "abc123"

        result = invoke(
            "add-file", "octocat/hello", "--local-path", str(local), "--repo-path", "notes.md",
            "--branch", "dev", "-m", "Add notes"
        )

        assert result.exit_code == 0
        assert "Commit SHA: abc123" in result.output
        assert gateway.create_file.call_args.args[4:] == ("dev", "Add notes")

    def test_delete_repo_needs_confirmation(self, invoke, gateway):
        result = invoke("delete-repo", "octocat/hello", input="hello\n")

        assert result.exit_code == 1
        gateway.delete_repository.assert_not_called()

    def test_delete_repo_confirmed(self, invoke, gateway):
        result = invoke("delete-repo", "octocat/hello", input="octocat/hello\n")

        assert result.exit_code == 0
        assert "Repository octocat/hello deleted." in result.output


class TestHelpCommands:

    def test_glossary_term(self, invoke):
        result = invoke("glossary", "head")

        assert result.exit_code == 0
        assert "pointer to the current branch" in result.output

    def test_glossary_unknown_term(self, invoke):
        assert invoke("glossary", "blockchain").exit_code == 1

    def test_glossary_lists_everything(self, invoke):
        result = invoke("glossary")

        assert "Pull Request:" in result.output
        assert "Working Tree:" in result.output

    def test_config_masks_token(self, monkeypatch):
        monkeypatch.setenv("GITHUB_TOKEN", "ghp_abcdefghijklmnop")

        result = CliRunner().invoke(cli, ["config", "--format", "json"], obj={})

        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["github"]["access_token"] == "ghp_********mnop"
        assert data["git"]["default_branch"] == "main"

    def test_menu_runs_action_by_name(self, invoke, runner):
        result = invoke("menu", input="status\nq\n")

        assert result.exit_code == 0
        assert "Connected to GitHub" in result.output
        runner.run.assert_called_once_with("git", ["status"])

    def test_menu_rejects_bad_choice(self, invoke, runner):
        result = invoke("menu", input="99\nq\n")

        assert result.exit_code == 0
        assert "Invalid selection: 99" in result.output
        runner.run.assert_not_called()
