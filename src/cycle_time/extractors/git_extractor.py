"""Git repository tag and commit extractor."""

from typing import Optional

from git import Repo
from git.exc import GitCommandError, InvalidGitRepositoryError, NoSuchPathError

from ..errors import ExternalCommandError, InputError
from ..logging import get_logger

logger = get_logger(__name__)

TAG_SORT_FIELDS = ("taggerdate", "creatordate")


class GitExtractor:
    """Answer the tag, cherry and commit-date queries of a local repository."""

    def __init__(self, repo_path: str, timeout: Optional[float] = None):
        """
        Initialize GitExtractor with repository path.

        Args:
            repo_path: Path to the git repository
            timeout: Seconds after which a git command is killed, None for no limit

        Raises:
            InputError: If the path is not a valid git repository
        """
        if not repo_path:
            raise InputError("No path to the Git repository provided")
        self.repo_path = repo_path
        self.timeout = timeout
        try:
            self.repo = Repo(repo_path)
        except (InvalidGitRepositoryError, NoSuchPathError) as e:
            logger.error(f"Failed to open git repository at {repo_path}: {e}")
            raise InputError(f"Invalid git repository: {repo_path}")

    def list_tags(self, sort_field: str = "taggerdate") -> str:
        """
        List every tag with its date, oldest first.

        Args:
            sort_field: ``taggerdate`` for annotated tags or ``creatordate``
                to also date lightweight tags

        Returns:
            One ``"<tag> <date>"`` line per tag
        """
        if sort_field not in TAG_SORT_FIELDS:
            raise ValueError(f"Unsupported tag sort field: {sort_field}")
        logger.info(f"Listing tags in {self.repo_path} sorted by {sort_field}")
        return self._git(
            "for_each_ref",
            f"--format=%(refname:short) %({sort_field})",
            f"--sort={sort_field}",
            "refs/tags",
        )

    def diff_commits(self, upstream: str, head: str) -> str:
        """
        Compare two refs with ``git cherry``.

        Returns:
            One line per commit, ``+ <sha>`` if it is new in ``head`` and
            ``- <sha>`` if an equivalent change is already in ``upstream``
        """
        logger.debug(f"Running git cherry {upstream} {head}")
        return self._git("cherry", upstream, head)

    def commit_timestamp(self, sha: str) -> str:
        """Return the strict ISO-8601 committer date of a commit."""
        return self._git("log", "-n", "1", "--format=format:%cI", sha)

    def _git(self, command: str, *args: str) -> str:
        try:
            return getattr(self.repo.git, command)(*args, kill_after_timeout=self.timeout)
        except GitCommandError as e:
            logger.error(f"Git command failed in {self.repo_path}: {e}")
            raise ExternalCommandError(
                f"git {command.replace('_', '-')} failed with status {e.status}: "
                f"{(e.stderr or '').strip()}",
                command=e.command if isinstance(e.command, (list, tuple)) else [str(e.command)],
                status=e.status,
                stderr=e.stderr or "",
            ) from e
