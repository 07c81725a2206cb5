"""buildtag - Tag the build's git checkout with the build number and push it."""

__version__ = "0.1.0"

from .core.step import GitTagStep

__all__ = ["GitTagStep"]
