"""
Action dispatcher coordinating git commands and GitHub operations.
"""

import logging
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional, Union

import requests

from .actions import ActionSpec, get_action, list_actions
from .config import AppConfig, GitConfig, get_config
from .credentials import CredentialCell, CredentialStore
from .error_handling import (
    ErrorKind, GitMasterError, InvalidCredentialError, MissingCredentialError,
    PersistenceError, ValidationError
)
from .logging import audit, ensure_audit_logging
from .models import ActionResult, RemoteCredential, RepositoryRef
from .repository import GitHubGateway
from .runner import ProcessRunner, split_arguments

logger = logging.getLogger(__name__)

Executor = Callable[[], ActionResult]


class DispatchState(Enum):
    """Lifecycle of a single dispatched action."""
    IDLE = "idle"
    VALIDATING = "validating"
    EXECUTING = "executing"
    COMPLETED = "completed"
    REJECTED = "rejected"


class ActionRun:
    """
    State of one action from selection to result.

    Every dispatch gets its own run, so independent actions never share
    mutable state.
    """

    def __init__(self, action: str):
        self.action = action
        self.state = DispatchState.IDLE
        self.history: List[DispatchState] = [DispatchState.IDLE]

    def transition(self, state: DispatchState) -> None:
        logger.debug(f"Action {self.action}: {self.state.value} -> {state.value}")
        self.state = state
        self.history.append(state)


class ActionDispatcher:
    """
    Maps user-selected actions to a process invocation or a GitHub call.

    Each action is validated first; only a valid action reaches the process
    runner or the gateway. Every outcome, including every GitMaster error,
    comes back as an ActionResult.
    """

    def __init__(
        self,
        runner: ProcessRunner,
        gateway: GitHubGateway,
        store: CredentialStore,
        cell: Optional[CredentialCell] = None,
        git_config: Optional[GitConfig] = None
    ):
        """
        Initialize the dispatcher.

        Args:
            runner: Runner for git commands
            gateway: GitHub API gateway
            store: Persistent credential store
            cell: Session credential holder (empty if omitted)
            git_config: Git executable and default branch settings
        """
        self.runner = runner
        self.gateway = gateway
        self.store = store
        self.cell = cell or CredentialCell()
        self.git_config = git_config or GitConfig()
        self.last_run: Optional[ActionRun] = None

        self._preparers: Dict[str, Callable[[ActionSpec, Dict[str, str]], Executor]] = {
            "connect": self._prepare_connect,
            "reset-token": self._prepare_reset_token,
            "list-repos": self._prepare_list_repos,
            "browse": self._prepare_browse,
            "view-file": self._prepare_view_file,
            "add-file": self._prepare_add_file,
            "delete-repo": self._prepare_delete_repo,
        }

    @classmethod
    def from_config(
        cls,
        config: Optional[AppConfig] = None,
        session: Optional[requests.Session] = None
    ) -> 'ActionDispatcher':
        """
        Build a dispatcher wired from configuration.

        The session credential comes from the credential store, or failing
        that from ``github.access_token`` (which is then not persisted). The
        audit trail is attached here too, unless logging was already set up.
        """
        config = config or get_config()
        if config.logging.audit_file:
            ensure_audit_logging(config.logging.audit_file)

        store = CredentialStore(config.credentials.file)
        credential = store.load()
        if credential is None and config.github.access_token:
            logger.info("Using GitHub token from configuration")
            credential = RemoteCredential(token=config.github.access_token)

        return cls(
            runner=ProcessRunner(working_dir=config.git.working_dir, timeout=config.git.timeout),
            gateway=GitHubGateway.from_config(config.github, session=session),
            store=store,
            cell=CredentialCell(credential),
            git_config=config.git
        )

    @property
    def is_connected(self) -> bool:
        return self.cell.is_set

    def available_actions(self, category: Optional[str] = None) -> List[ActionSpec]:
        return list_actions(category)

    # ------------------------------------------------------------------
    # Presentation-facing API
    # ------------------------------------------------------------------

    def dispatch(self, action_name: str, parameters: Optional[Mapping[str, str]] = None) -> ActionResult:
        """
        Run one action through validation and execution.

        Args:
            action_name: Name from the action catalogue
            parameters: Text inputs keyed by parameter name

        Returns:
            Result of the action; never raises for GitMaster errors
        """
        run = ActionRun(action_name)
        self.last_run = run
        audit(f"Action requested: {action_name}")

        run.transition(DispatchState.VALIDATING)
        try:
            spec = self._lookup(action_name)
            values = self._collect_parameters(spec, parameters or {})
            executor = self._prepare(spec, values)
        except GitMasterError as e:
            run.transition(DispatchState.REJECTED)
            audit(f"Action rejected: {action_name}: {e.message}")
            logger.info(f"Action {action_name} rejected: {e.message}")
            return ActionResult.from_error(e, action=action_name)

        run.transition(DispatchState.EXECUTING)
        result = self._execute(action_name, executor)
        run.transition(DispatchState.COMPLETED)

        status = "succeeded" if result.succeeded else "failed"
        audit(f"Action {status}: {action_name}")
        return result.with_action(action_name)

    def list_repositories(self) -> ActionResult:
        """List the connected account's repositories; ``items`` holds RepositoryRef values."""
        return self.dispatch("list-repos")

    def navigate(self, repo: Union[RepositoryRef, str], path: str = "") -> ActionResult:
        """List a repository directory; ``items`` holds DirectoryEntry values."""
        return self.dispatch("browse", {"repo": str(repo), "path": path or ""})

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def _lookup(self, action_name: str) -> ActionSpec:
        spec = get_action(action_name)
        if spec is None:
            raise ValidationError(f"Unknown action: {action_name!r}", invalid_fields=["action"])
        return spec

    def _collect_parameters(self, spec: ActionSpec, parameters: Mapping[str, str]) -> Dict[str, str]:
        """Apply defaults and check that required inputs are present."""
        values: Dict[str, str] = {}
        missing: List[str] = []

        for parameter in spec.parameters:
            raw = parameters.get(parameter.name)
            value = "" if raw is None else str(raw).strip()
            if not value and parameter.default is not None:
                value = parameter.default
            if not value and parameter.required:
                missing.append(parameter.name)
            values[parameter.name] = value

        if missing:
            raise ValidationError(
                f"Please provide: {', '.join(missing)}",
                invalid_fields=missing
            )
        return values

    def _require_credential(self) -> RemoteCredential:
        credential = self.cell.get()
        if credential is None:
            raise MissingCredentialError("Please connect to GitHub first.")
        return credential

    def _prepare(self, spec: ActionSpec, values: Dict[str, str]) -> Executor:
        if spec.is_git:
            return self._prepare_git(spec, values)
        return self._preparers[spec.name](spec, values)

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    def _execute(self, action_name: str, executor: Executor) -> ActionResult:
        try:
            return executor()
        except GitMasterError as e:
            logger.warning(f"Action {action_name} failed: {e.message}")
            return ActionResult.from_error(e, action=action_name)
        except Exception as e:
            logger.exception(f"Unexpected error in action {action_name}")
            return ActionResult.failure(f"Unexpected error: {e}", ErrorKind.TRANSIENT_ERROR)

    def _remote(self, credential: RemoteCredential, call: Callable[[], Any]) -> Any:
        """Run a gateway call, forgetting the credential if GitHub rejects it."""
        try:
            return call()
        except InvalidCredentialError:
            self._forget_credential(credential)
            raise

    def _forget_credential(self, credential: RemoteCredential) -> None:
        """Drop a rejected credential from the session and from disk."""
        if self.cell.clear_if(credential):
            logger.info("Rejected GitHub token removed from the session")

        try:
            if self.store.load() == credential:
                self.store.clear()
        except PersistenceError as e:
            logger.warning(f"Could not remove rejected token from disk: {e.message}")

    # ------------------------------------------------------------------
    # Git actions
    # ------------------------------------------------------------------

    def _prepare_git(self, spec: ActionSpec, values: Dict[str, str]) -> Executor:
        args = list(spec.git_args)

        for parameter in spec.parameters:
            value = values.get(parameter.name, "")
            if not value and spec.uses_default_branch:
                value = self.git_config.default_branch or ""
                if not value:
                    raise ValidationError(
                        "Branch name is required (no default branch configured)",
                        invalid_fields=[parameter.name]
                    )
            if not value:
                continue
            if spec.split_input:
                try:
                    args.extend(split_arguments(value))
                except ValueError as e:
                    raise ValidationError(f"Cannot parse {parameter.name}: {e}", invalid_fields=[parameter.name])
            else:
                args.append(value)

        executable = self.git_config.executable
        return lambda: self.runner.run(executable, args)

    # ------------------------------------------------------------------
    # GitHub actions
    # ------------------------------------------------------------------

    def _prepare_connect(self, spec: ActionSpec, values: Dict[str, str]) -> Executor:
        credential = RemoteCredential(token=values["token"])

        def execute() -> ActionResult:
            identity = self._remote(credential, lambda: self.gateway.authenticate(credential))
            self.cell.set(credential)

            warning = None
            try:
                self.store.save(credential)
            except PersistenceError as e:
                warning = f"Connected, but the token could not be saved: {e.message}"
                logger.warning(warning)

            return ActionResult.success(f"Connected as: {identity.login}", warning=warning)

        return execute

    def _prepare_reset_token(self, spec: ActionSpec, values: Dict[str, str]) -> Executor:
        def execute() -> ActionResult:
            self.cell.clear()
            try:
                self.store.clear()
            except PersistenceError as e:
                return ActionResult.success(
                    "GitHub token reset for this session.",
                    warning=f"The stored token could not be deleted: {e.message}"
                )
            return ActionResult.success("GitHub token reset. Please enter a new token.")

        return execute

    def _prepare_list_repos(self, spec: ActionSpec, values: Dict[str, str]) -> Executor:
        credential = self._require_credential()

        def execute() -> ActionResult:
            repositories = self._remote(credential, lambda: self.gateway.list_repositories(credential))
            output = "\n".join(repo.full_name for repo in repositories) or "No repositories found."
            return ActionResult.success(output, items=tuple(repositories))

        return execute

    def _prepare_browse(self, spec: ActionSpec, values: Dict[str, str]) -> Executor:
        repo = RepositoryRef.parse(values["repo"])
        path = values.get("path", "").strip("/")
        credential = self._require_credential()

        def execute() -> ActionResult:
            entries = self._remote(credential, lambda: self.gateway.list_directory(credential, repo, path))
            output = "\n".join(entry.display_name() for entry in entries) or "(empty directory)"
            return ActionResult.success(output, items=tuple(entries))

        return execute

    def _prepare_view_file(self, spec: ActionSpec, values: Dict[str, str]) -> Executor:
        repo = RepositoryRef.parse(values["repo"])
        path = values["path"].strip("/")
        credential = self._require_credential()

        def execute() -> ActionResult:
            content = self._remote(credential, lambda: self.gateway.read_file(credential, repo, path))
            return ActionResult.success(content)

        return execute

    def _prepare_add_file(self, spec: ActionSpec, values: Dict[str, str]) -> Executor:
        repo = RepositoryRef.parse(values["repo"])
        local_path = Path(values["local_path"])
        repo_path = values["repo_path"].strip("/")
        branch = values["branch"]
        message = values["message"]

        if not local_path.is_file():
            raise ValidationError(f"File {local_path} does not exist.", invalid_fields=["local_path"])
        try:
            content = local_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise ValidationError(f"Failed to read file {local_path}: {e}", invalid_fields=["local_path"])

        credential = self._require_credential()

        def execute() -> ActionResult:
            commit_sha = self._remote(
                credential,
                lambda: self.gateway.create_file(credential, repo, repo_path, content, branch, message)
            )
            return ActionResult.success(
                f"File {repo_path} added successfully to {repo.full_name} on branch {branch}. "
                f"Commit SHA: {commit_sha}"
            )

        return execute

    def _prepare_delete_repo(self, spec: ActionSpec, values: Dict[str, str]) -> Executor:
        repo = RepositoryRef.parse(values["repo"])
        if values["confirm"] != repo.full_name:
            raise ValidationError(
                f"Deletion not confirmed: type {repo.full_name} exactly to delete it",
                invalid_fields=["confirm"]
            )
        credential = self._require_credential()

        def execute() -> ActionResult:
            self._remote(credential, lambda: self.gateway.delete_repository(credential, repo))
            return ActionResult.success(f"Repository {repo.full_name} deleted.")

        return execute
