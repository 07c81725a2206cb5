"""Tag the build's source tree and push the tag to origin."""

import logging
from typing import Optional

from pydantic import BaseModel, Field

from ..host.context import HostContext
from ..host.tracking import write_to_log
from .config import TagStepConfig
from .git import (
    DEFAULT_REMOTE_NAME,
    CredentialProvider,
    DefaultCredentials,
    PushRejection,
    apply_tag,
    open_repository,
    push_refspec,
    resolve_remote,
)
from .naming import compute_source_path, compute_tag_name, tag_refspec

logger = logging.getLogger(__name__)


class RejectedReference(BaseModel):
    """Reference the remote refused during the push."""

    reference: str = Field(..., description="Remote reference name")
    message: str = Field(..., description="Rejection message from the remote")


class TagPushResult(BaseModel):
    """Outcome of a tag-and-push run."""

    source_path: str = Field(..., description="Path of the tagged repository")
    tag_name: str = Field(..., description="Short tag name")
    canonical_name: str = Field(..., description="Full reference of the new tag")
    remote_url: str = Field(..., description="URL of the remote pushed to")
    refspec: str = Field(..., description="Refspec that was pushed")
    rejections: list[RejectedReference] = Field(
        default_factory=list, description="References the remote refused"
    )

    @property
    def accepted(self) -> bool:
        """Whether the remote accepted every pushed reference."""
        return not self.rejections


class GitTagStep:
    """
    Build step tagging the git checkout with the build number.

    Runs once per build: resolves the checkout under the build directory,
    applies ``<prefix><build number>`` at HEAD and pushes that single tag to
    ``origin``. Errors from the repository or the push propagate to the host
    unchanged; references the remote refuses are only logged.
    """

    def __init__(
        self,
        config: Optional[TagStepConfig] = None,
        credentials: Optional[CredentialProvider] = None,
    ):
        """
        Initialize the step.

        Args:
            config: Step options (default: empty prefix, "src" folder)
            credentials: Credential provider for the push
                (default: ambient process credentials)
        """
        self.config = config or TagStepConfig()
        self.credentials = credentials or DefaultCredentials()

    def execute(self, host: HostContext) -> TagPushResult:
        """
        Tag and push.

        Args:
            host: Host extensions for the current build

        Returns:
            TagPushResult describing what was tagged and pushed
        """
        sink = host.sink

        source_path = compute_source_path(
            host.working_directory(), self.config.source_folder
        )
        write_to_log(sink, f"Path used to reference Git repository: {source_path}")

        tag_name = compute_tag_name(
            self.config.tag_name_prefix, host.build_detail.build_number
        )
        write_to_log(sink, f"Tag name: {tag_name}")

        def report_rejection(rejection: PushRejection) -> None:
            write_to_log(sink, f"{rejection.message} - {rejection.reference}")

        with open_repository(source_path) as repository:
            canonical_name = apply_tag(
                repository, tag_name, message=self.config.tag_message
            )
            write_to_log(sink, f"Tag applied: {canonical_name}")

            remote = resolve_remote(repository, DEFAULT_REMOTE_NAME)
            write_to_log(sink, f"Pushing tag to {remote.url}")

            refspec = tag_refspec(tag_name)
            write_to_log(sink, f"Refspec used to push: {refspec}")

            rejections = push_refspec(
                remote, refspec, self.credentials, on_rejection=report_rejection
            )
            remote_url = remote.url

        if rejections:
            logger.warning(
                "Remote refused %d reference(s) for tag %s", len(rejections), tag_name
            )

        return TagPushResult(
            source_path=source_path,
            tag_name=tag_name,
            canonical_name=canonical_name,
            remote_url=remote_url,
            refspec=refspec,
            rejections=[
                RejectedReference(reference=r.reference, message=r.message)
                for r in rejections
            ],
        )
