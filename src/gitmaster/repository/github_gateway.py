"""
GitHub REST API gateway for repository browsing and modification.
"""

import base64
import logging
from datetime import datetime, timedelta, timezone
from typing import Dict, Any, Optional, List
from urllib.parse import quote

import requests

from .. import __version__
from ..config import GitHubConfig
from ..error_handling import (
    MissingCredentialError, InvalidCredentialError, RateLimitedError,
    NotFoundError, ConflictError, ForbiddenError,
    TransientError, ValidationError
)
from ..logging import audit
from ..models import RemoteCredential, RepositoryRef, DirectoryEntry, EntryKind, AccountIdentity

logger = logging.getLogger(__name__)

JSON_MEDIA_TYPE = "application/vnd.github+json"
RAW_MEDIA_TYPE = "application/vnd.github.raw+json"


class GitHubGateway:
    """
    Thin wrapper over the GitHub REST API.

    Each call takes the credential explicitly and raises a typed
    GitMaster exception on failure. The gateway holds no credential state;
    clearing a rejected credential is the caller's job.
    """

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        api_base_url: str = "https://api.github.com",
        timeout: float = 30,
        per_page: int = 100,
        user_agent: Optional[str] = None
    ):
        """
        Initialize GitHub gateway.

        Args:
            session: HTTP session to send requests with (a new one if omitted)
            api_base_url: GitHub API base URL
            timeout: Per-request timeout in seconds
            per_page: Page size for paginated listings
            user_agent: User-Agent header value
        """
        self.api_base_url = api_base_url.rstrip('/')
        self.timeout = timeout
        self.per_page = per_page

        self.session = session or requests.Session()
        self.session.headers.update({
            "Accept": JSON_MEDIA_TYPE,
            "User-Agent": user_agent or f"gitmaster/{__version__}",
            "X-GitHub-Api-Version": "2022-11-28"
        })

    @classmethod
    def from_config(cls, config: GitHubConfig, session: Optional[requests.Session] = None) -> 'GitHubGateway':
        return cls(
            session=session,
            api_base_url=config.api_base_url,
            timeout=config.timeout,
            per_page=config.per_page
        )

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def authenticate(self, credential: Optional[RemoteCredential]) -> AccountIdentity:
        """
        Verify a credential against the API.

        Args:
            credential: Credential to verify

        Returns:
            Identity of the authenticated account

        Raises:
            MissingCredentialError: If no credential is given
            InvalidCredentialError: If the API rejects the token
            RateLimitedError: If the API is rate limiting this client
            TransientError: For network and server failures
        """
        response = self._request("GET", "/user", credential)
        login = self._json(response).get("login") or "unknown"
        logger.info(f"Authenticated as GitHub user: {login}")
        return AccountIdentity(login=login)

    def list_repositories(self, credential: Optional[RemoteCredential]) -> List[RepositoryRef]:
        """
        List every repository visible to the authenticated account.

        Pages are followed through the ``Link`` header. The order is the one
        the API returns; no sorting happens here.

        Args:
            credential: Credential to authenticate with

        Returns:
            Repository references in API order
        """
        repositories: List[RepositoryRef] = []
        url: Optional[str] = "/user/repos"
        params: Optional[Dict[str, Any]] = {"per_page": self.per_page}

        while url:
            response = self._request("GET", url, credential, params=params)
            for item in self._json(response, expect=list):
                repositories.append(RepositoryRef.parse(item["full_name"]))

            url = response.links.get("next", {}).get("url") if response.links else None
            # the next link already carries the query string
            params = None

        logger.info(f"Fetched {len(repositories)} repositories")
        return repositories

    def list_directory(
        self,
        credential: Optional[RemoteCredential],
        repo: RepositoryRef,
        path: str = "",
        ref: Optional[str] = None
    ) -> List[DirectoryEntry]:
        """
        List the entries at ``path`` in a repository.

        Args:
            credential: Credential to authenticate with
            repo: Repository to browse
            path: Directory path, ``""`` for the repository root
            ref: Branch, tag or commit (defaults to the default branch)

        Returns:
            Entries in API order; a file path yields a single entry

        Raises:
            NotFoundError: If the path does not exist
        """
        params = {"ref": ref} if ref else None
        response = self._request("GET", self._contents_endpoint(repo, path), credential, params=params)
        contents = self._json(response, expect=(list, dict))

        if isinstance(contents, dict):
            contents = [contents]

        entries = [
            DirectoryEntry(path=item["path"], kind=EntryKind.from_content_type(item.get("type", "file")))
            for item in contents
        ]
        logger.debug(f"Loaded {len(entries)} items from {repo.full_name}:{path or '/'}")
        return entries

    def read_file(
        self,
        credential: Optional[RemoteCredential],
        repo: RepositoryRef,
        path: str,
        ref: Optional[str] = None
    ) -> str:
        """
        Read the decoded text of a file.

        Args:
            credential: Credential to authenticate with
            repo: Repository holding the file
            path: File path inside the repository
            ref: Branch, tag or commit (defaults to the default branch)

        Returns:
            File content decoded as UTF-8 (undecodable bytes replaced)

        Raises:
            NotFoundError: If the path is missing or is not a file
        """
        if not path or not path.strip("/"):
            raise NotFoundError(f"No file path given for {repo.full_name}")

        endpoint = self._contents_endpoint(repo, path)
        params = {"ref": ref} if ref else None
        response = self._request("GET", endpoint, credential, params=params)
        item = self._json(response, expect=(list, dict))

        if isinstance(item, list) or item.get("type") != "file":
            raise NotFoundError(f"{path} is not a file in {repo.full_name}", status_code=response.status_code)

        content = item.get("content")
        if item.get("encoding") == "base64" and content:
            return base64.b64decode(content).decode("utf-8", errors="replace")

        if not item.get("size"):
            return ""

        # files over 1 MB come back without inline content
        logger.debug(f"Fetching raw content for {repo.full_name}:{path}")
        raw = self._request("GET", endpoint, credential, params=params, accept=RAW_MEDIA_TYPE)
        return raw.content.decode("utf-8", errors="replace")

    def create_file(
        self,
        credential: Optional[RemoteCredential],
        repo: RepositoryRef,
        path: str,
        content: str,
        branch: str,
        commit_message: str
    ) -> str:
        """
        Create a new file with a commit.

        Args:
            credential: Credential to authenticate with
            repo: Target repository
            path: Path of the new file
            content: File text
            branch: Branch to commit to
            commit_message: Commit message

        Returns:
            SHA of the created commit

        Raises:
            ValidationError: If path, branch or commit message is empty
            ConflictError: If a file already exists at ``path``
        """
        missing = [
            name for name, value in (("path", path), ("branch", branch), ("message", commit_message))
            if not value or not value.strip()
        ]
        if missing:
            raise ValidationError(
                f"Missing required value(s) for file creation: {', '.join(missing)}",
                invalid_fields=missing
            )

        payload = {
            "message": commit_message,
            "content": base64.b64encode(content.encode("utf-8")).decode("ascii"),
            "branch": branch
        }

        try:
            response = self._request("PUT", self._contents_endpoint(repo, path), credential, json=payload)
        except ValidationError as e:
            # GitHub answers 422 when the path exists and no blob sha was sent
            if "sha" in e.message:
                raise ConflictError(
                    f"{path} already exists in {repo.full_name} on branch {branch}",
                    status_code=422,
                    cause=e
                )
            raise

        data = self._json(response)
        commit_sha = (data.get("commit") or {}).get("sha", "")
        logger.info(f"File {path} added to {repo.full_name} on {branch}. Commit SHA: {commit_sha}")
        return commit_sha

    def delete_repository(self, credential: Optional[RemoteCredential], repo: RepositoryRef) -> None:
        """
        Delete a repository. Irreversible; no confirmation happens here.

        Raises:
            NotFoundError: If the repository does not exist (or was already deleted)
            ForbiddenError: If the token may not delete it
        """
        self._request("DELETE", f"/repos/{self._quote(repo.owner)}/{self._quote(repo.name)}", credential)
        logger.info(f"Repository {repo.full_name} deleted")

    # ------------------------------------------------------------------
    # Request plumbing
    # ------------------------------------------------------------------

    def _request(
        self,
        method: str,
        endpoint: str,
        credential: Optional[RemoteCredential],
        accept: Optional[str] = None,
        **kwargs
    ) -> requests.Response:
        """
        Send one authenticated request and map failures to exceptions.

        Args:
            method: HTTP method
            endpoint: API path, or an absolute URL from a pagination link
            credential: Credential to authenticate with
            accept: Media type overriding the session default
            **kwargs: Additional arguments for ``Session.request``

        Returns:
            The successful response
        """
        if credential is None or not credential.token:
            raise MissingCredentialError("GitHub token is not set. Connect to GitHub first.")

        if endpoint.startswith(("http://", "https://")):
            url = endpoint
        else:
            url = f"{self.api_base_url}/{endpoint.lstrip('/')}"

        headers = {"Authorization": f"Bearer {credential.token}"}
        if accept:
            headers["Accept"] = accept

        audit(f"GitHub request: {method} {url}")
        try:
            response = self.session.request(method, url, headers=headers, timeout=self.timeout, **kwargs)
        except requests.exceptions.RequestException as e:
            audit(f"GitHub request failed: {method} {url}: {e}")
            logger.warning(f"GitHub request {method} {url} failed: {e}")
            raise TransientError(f"Network error talking to GitHub: {e}", cause=e)

        audit(f"GitHub response: {method} {url} -> {response.status_code}")

        if not response.ok:
            self._raise_for_status(response)

        return response

    def _raise_for_status(self, response: requests.Response) -> None:
        """Raise the exception matching a failed response."""
        status = response.status_code
        error_data = self._error_data(response)
        detail = error_data.get("message") if error_data else None
        message = f"GitHub API request failed: {status}"
        if detail:
            message += f" - {detail}"

        if status == 401:
            raise InvalidCredentialError(f"Invalid GitHub token ({message})", error_code=str(status))

        if status == 429 or (status == 403 and self._is_rate_limited(response)):
            retry_after = self._retry_after(response)
            when = f" Try again after {retry_after.isoformat()}." if retry_after else ""
            raise RateLimitedError(f"Rate limit exceeded.{when}", retry_after=retry_after, error_code=str(status))

        if status == 403:
            raise ForbiddenError(message, status_code=status, response_data=error_data)
        if status == 404:
            raise NotFoundError(message, status_code=status, response_data=error_data)
        if status == 409:
            raise ConflictError(message, status_code=status, response_data=error_data)
        if status == 422:
            raise ValidationError(message, error_code=str(status), context={"response": error_data})

        raise TransientError(message, status_code=status, response_data=error_data)

    def _is_rate_limited(self, response: requests.Response) -> bool:
        if response.headers.get("X-RateLimit-Remaining") == "0":
            return True
        return "rate limit" in (response.text or "").lower()

    def _retry_after(self, response: requests.Response) -> Optional[datetime]:
        """Work out when a rate limited client may retry, in UTC."""
        retry_after = response.headers.get("Retry-After")
        if retry_after and retry_after.isdigit():
            return datetime.now(timezone.utc) + timedelta(seconds=int(retry_after))

        reset = response.headers.get("X-RateLimit-Reset")
        if reset and reset.isdigit():
            return datetime.fromtimestamp(int(reset), tz=timezone.utc)

        return None

    def _error_data(self, response: requests.Response) -> Optional[Dict[str, Any]]:
        try:
            data = response.json()
        except ValueError:
            return None
        return data if isinstance(data, dict) else None

    def _json(self, response: requests.Response, expect=dict) -> Any:
        """Decode a JSON body, treating an unexpected shape as a transient failure."""
        try:
            data = response.json()
        except ValueError as e:
            raise TransientError("GitHub returned a response that is not JSON", cause=e)

        if not isinstance(data, expect):
            raise TransientError(f"Unexpected response from GitHub: {type(data).__name__}")
        return data

    def _contents_endpoint(self, repo: RepositoryRef, path: str) -> str:
        endpoint = f"/repos/{self._quote(repo.owner)}/{self._quote(repo.name)}/contents"
        path = (path or "").strip("/")
        if path:
            endpoint += "/" + quote(path, safe="/")
        return endpoint

    @staticmethod
    def _quote(segment: str) -> str:
        return quote(segment, safe="")
