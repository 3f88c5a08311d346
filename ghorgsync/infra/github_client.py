"""
GitHub API client infrastructure for ghorgsync.

Lists the repositories of an organization:
- Token from GITHUB_TOKEN, GH_TOKEN, or `gh auth token`
- Follows Link header pagination
- Maps 401/403 to AuthError and everything else to APIError
"""

import subprocess
import os
import logging
from typing import Dict, List, Optional

import requests

from ..domain.repository import RemoteRepository
from ..exit_codes import APIError, AuthError

logger = logging.getLogger(__name__)

GITHUB_API_BASE = "https://api.github.com"
DEFAULT_PAGE_SIZE = 100
DEFAULT_TIMEOUT = 30


def resolve_token() -> Optional[str]:
    """
    Find a GitHub token.

    Priority: GITHUB_TOKEN > GH_TOKEN > `gh auth token`.

    Returns:
        Token string, or None to call the API anonymously
    """
    for var in ('GITHUB_TOKEN', 'GH_TOKEN'):
        token = os.environ.get(var)
        if token:
            logger.debug(f"Using GitHub token from {var}")
            return token

    try:
        result = subprocess.run(
            ['gh', 'auth', 'token'],
            capture_output=True,
            text=True,
            timeout=10
        )
        if result.returncode == 0 and result.stdout.strip():
            logger.debug("Using GitHub token from gh CLI")
            return result.stdout.strip()
    except (subprocess.TimeoutExpired, FileNotFoundError):
        pass

    logger.debug("No GitHub token found, using anonymous access")
    return None


class GitHubClient:
    """
    GitHub REST client for organization inventories.

    Example:
        client = GitHubClient(token=resolve_token())
        for repo in client.list_org_repos("my-org"):
            print(repo.name, repo.default_branch)
    """

    def __init__(
        self,
        token: Optional[str] = None,
        timeout: int = DEFAULT_TIMEOUT,
        base_url: str = GITHUB_API_BASE
    ):
        """
        Initialize GitHubClient.

        Args:
            token: GitHub token (anonymous when None)
            timeout: HTTP request timeout in seconds
            base_url: API root, overridable for GitHub Enterprise
        """
        self.token = token
        self.timeout = timeout
        self.base_url = base_url.rstrip('/')
        self.session = requests.Session()
        self.session.headers.update(self._headers())

    def _headers(self) -> Dict[str, str]:
        headers = {
            'Accept': 'application/vnd.github+json',
            'User-Agent': 'ghorgsync',
        }
        if self.token:
            headers['Authorization'] = f'Bearer {self.token}'
        return headers

    def _get_page(self, url: str) -> requests.Response:
        """GET one page, translating failures into APIError/AuthError."""
        try:
            response = self.session.get(url, timeout=self.timeout)
        except requests.RequestException as e:
            raise APIError(f"requesting repos: {e}") from e

        status = response.status_code
        if status in (401, 403):
            raise AuthError(f"GitHub API auth error (HTTP {status}): check your token", status)
        if status < 200 or status >= 300:
            raise APIError(f"GitHub API error (HTTP {status})", status)
        return response

    def list_org_repos(self, org: str) -> List[RemoteRepository]:
        """
        List all repositories of an organization.

        Args:
            org: Organization login

        Returns:
            RemoteRepository list in API order

        Raises:
            AuthError: HTTP 401/403
            APIError: any other failure
        """
        repos: List[RemoteRepository] = []
        url: Optional[str] = f"{self.base_url}/orgs/{org}/repos?per_page={DEFAULT_PAGE_SIZE}&page=1"

        while url:
            response = self._get_page(url)
            try:
                page = response.json()
            except ValueError as e:
                raise APIError(f"decoding response: {e}") from e
            if not isinstance(page, list):
                raise APIError("decoding response: expected a list of repositories")

            for item in page:
                repos.append(RemoteRepository.from_api_response(item))

            url = response.links.get('next', {}).get('url')

        logger.info(f"GitHub: found {len(repos)} repositories for {org}")
        return repos
