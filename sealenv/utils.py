import pathlib
import re
import typing

import click
import git

REMOTE_PATTERN = re.compile(
    r'^(?:https?://[^/]+/|ssh://(?:[^@/]+@)?[^/]+/|[^@/]+@[^:/]+:)'
    r'(?P<owner>[^/]+)/(?P<name>[^/]+?)(?:\.git)?/?$')


class SealenvException(click.ClickException):
    pass


class MissingToken(SealenvException):
    def __init__(self):
        super().__init__(
            "A GitHub token must be provided via --token or the "
            "GITHUB_TOKEN/GH_TOKEN environment variables")


class MissingRepository(SealenvException):
    def __init__(self):
        super().__init__(
            "No repository given with --repo and none could be found "
            "from the 'origin' remote of the current git checkout")


class InvalidRepository(SealenvException):
    def __init__(self, repository: str):
        self.repository = repository
        super().__init__(
            f"Repository '{repository}' should be in the form 'owner/name'")


def find_git_directory() -> typing.Optional[pathlib.Path]:
    try:
        repo = git.Repo(search_parent_directories=True)
    except git.exc.InvalidGitRepositoryError:
        return None
    return pathlib.Path(repo.working_dir)


def parse_remote_url(url: str) -> typing.Optional[str]:
    """Extract 'owner/name' from a GitHub remote URL (HTTPS or SSH)."""
    match = REMOTE_PATTERN.match(url.strip())
    if match is None:
        return None
    return f"{match.group('owner')}/{match.group('name')}"


def find_repository(
        directory: typing.Optional[pathlib.Path] = None,
        remote: str = 'origin') -> typing.Optional[str]:
    """Find the 'owner/name' of the repository the directory is checked out from."""
    path = directory if directory is not None else find_git_directory()
    if path is None:
        return None

    try:
        repo = git.Repo(path, search_parent_directories=True)
    except (git.exc.InvalidGitRepositoryError, git.exc.NoSuchPathError):
        return None

    if remote not in [r.name for r in repo.remotes]:
        return None

    for url in repo.remote(remote).urls:
        repository = parse_remote_url(url)
        if repository is not None:
            return repository
    return None


def split_repository(repository: str) -> typing.Tuple[str, str]:
    owner, sep, name = repository.partition('/')
    if not sep or not owner or not name or '/' in name:
        raise InvalidRepository(repository)
    return owner, name


class EnvFileNotFound(SealenvException):
    def __init__(self, path: pathlib.Path):
        self.path = path
        super().__init__(f"Env file {path} does not exist")


class EnvFileUnreadable(SealenvException):
    def __init__(self, path: pathlib.Path, error: OSError):
        self.path = path
        super().__init__(f"Could not read env file {path}: {error.strerror or error}")


class CryptoInitError(SealenvException):
    pass


class PublicKeyError(SealenvException):
    pass


class InvalidKeyLength(PublicKeyError):
    def __init__(self, expected: int, actual: int):
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Public key is {actual} bytes long, expected {expected} bytes")
