"""Exceptions raised by buildtag."""


class BuildTagError(Exception):
    """Base class for buildtag errors."""


class RemoteNotFoundError(BuildTagError, KeyError):
    """No remote with the requested name is configured in the repository."""

    def __init__(self, name: str):
        super().__init__(name)
        self.name = name

    def __str__(self) -> str:
        return f"Remote not found: {self.name}"
