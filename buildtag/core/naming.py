"""Tag name, source path and refspec derivation."""

import os

TAG_REF_PREFIX = "refs/tags/"


def compute_tag_name(prefix: str, build_number: str) -> str:
    """Combine the configured prefix with the host's build number.

    The build number is assumed to already be a valid reference component
    (e.g. "20240105.1"); nothing is inserted between the two parts and no
    validation is done here.

    Examples:
        >>> compute_tag_name("release-", "42")
        'release-42'
    """
    return f"{prefix}{build_number}"


def compute_source_path(working_directory: str, source_folder: str) -> str:
    """Locate the git checkout under the build's working directory."""
    return os.path.join(working_directory, source_folder)


def tag_reference(tag_name: str) -> str:
    """Canonical reference name for a tag."""
    return f"{TAG_REF_PREFIX}{tag_name}"


def tag_refspec(tag_name: str) -> str:
    """Refspec that pushes a local tag to the same name on the remote.

    Examples:
        >>> tag_refspec("release-42")
        'refs/tags/release-42:refs/tags/release-42'
    """
    ref = tag_reference(tag_name)
    return f"{ref}:{ref}"
