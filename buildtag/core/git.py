"""Git repository operations used by the tag-and-push step (pygit2)."""

import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import NamedTuple, Optional, Protocol

import pygit2
from pygit2.enums import CredentialType, ObjectType
from pygit2.errors import Passthrough

from ..errors import RemoteNotFoundError
from .naming import tag_reference

logger = logging.getLogger(__name__)

DEFAULT_REMOTE_NAME = "origin"


class PushRejection(NamedTuple):
    """A reference the remote refused to update."""

    reference: str
    message: str


class CredentialProvider(Protocol):
    """Supplies credentials when the remote asks for them.

    Returning None lets libgit2 fall back to its own handling.
    """

    def get_credentials(
        self, url: str, username_from_url: Optional[str], allowed_types: CredentialType
    ) -> Optional[object]: ...


class DefaultCredentials:
    """Ambient credentials of the build process.

    Uses the running SSH agent when the remote accepts SSH keys and otherwise
    defers to libgit2's defaults.
    """

    def get_credentials(self, url, username_from_url, allowed_types):
        if allowed_types & CredentialType.SSH_KEY:
            return pygit2.KeypairFromAgent(username_from_url or "git")
        return None


class UserPassCredentials:
    """Explicit username and password (or access token)."""

    def __init__(self, username: str, password: str):
        self.username = username
        self.password = password

    def get_credentials(self, url, username_from_url, allowed_types):
        if allowed_types & CredentialType.USERPASS_PLAINTEXT:
            return pygit2.UserPass(self.username, self.password)
        return None


class TagPushCallbacks(pygit2.RemoteCallbacks):
    """Remote callbacks collecting per-reference push rejections."""

    def __init__(
        self,
        credential_provider: CredentialProvider,
        on_rejection: Optional[Callable[[PushRejection], None]] = None,
    ):
        super().__init__()
        self.credential_provider = credential_provider
        self.on_rejection = on_rejection
        self.rejections: list[PushRejection] = []
        self._credential_attempts: set[int] = set()

    def credentials(self, url, username_from_url, allowed_types):
        # libgit2 asks again after a rejected credential; one try per type
        if int(allowed_types) in self._credential_attempts:
            raise pygit2.GitError(f"Authentication failed for {url}")
        self._credential_attempts.add(int(allowed_types))
        creds = self.credential_provider.get_credentials(
            url, username_from_url, allowed_types
        )
        if creds is None:
            raise Passthrough
        return creds

    def push_update_reference(self, refname, message):
        # message is None when the remote accepted the update
        if message is None:
            logger.debug("Remote accepted %s", refname)
            return
        rejection = PushRejection(reference=refname, message=message)
        self.rejections.append(rejection)
        if self.on_rejection:
            self.on_rejection(rejection)


@contextmanager
def open_repository(path: str) -> Iterator[pygit2.Repository]:
    """Open the repository at ``path`` and release its handles on exit."""
    repository = pygit2.Repository(path)
    try:
        yield repository
    finally:
        repository.free()


def apply_tag(
    repository: pygit2.Repository, tag_name: str, message: Optional[str] = None
) -> str:
    """
    Tag the commit HEAD points to.

    Args:
        repository: Open repository
        tag_name: Short tag name (without ``refs/tags/``)
        message: Annotated tag message; a lightweight tag is created when None

    Returns:
        Canonical reference name of the new tag
    """
    target = repository.head.target
    if message is None:
        reference = repository.references.create(tag_reference(tag_name), target)
        logger.debug("Created lightweight tag %s at %s", reference.name, target)
        return reference.name

    tagger = repository.default_signature
    repository.create_tag(tag_name, target, ObjectType.COMMIT, tagger, message)
    reference = repository.references[tag_reference(tag_name)]
    logger.debug("Created annotated tag %s at %s", reference.name, target)
    return reference.name


def resolve_remote(
    repository: pygit2.Repository, name: str = DEFAULT_REMOTE_NAME
) -> pygit2.Remote:
    """Look up a configured remote by name."""
    try:
        return repository.remotes[name]
    except KeyError:
        raise RemoteNotFoundError(name) from None


def push_refspec(
    remote: pygit2.Remote,
    refspec: str,
    credential_provider: CredentialProvider,
    on_rejection: Optional[Callable[[PushRejection], None]] = None,
) -> list[PushRejection]:
    """
    Push a single refspec.

    References the remote refuses are reported through ``on_rejection`` and
    returned; they do not raise. Transport and authentication failures raise
    ``pygit2.GitError``.

    Args:
        remote: Remote to push to
        refspec: Refspec such as ``refs/tags/v1:refs/tags/v1``
        credential_provider: Source of credentials for the remote
        on_rejection: Optional callback(rejection) for each refused reference

    Returns:
        List of rejected references (empty when everything was accepted)
    """
    callbacks = TagPushCallbacks(credential_provider, on_rejection)
    logger.info("Pushing %s to %s", refspec, remote.url)
    remote.push([refspec], callbacks=callbacks)
    return callbacks.rejections
