"""Build directory variable expansion."""

import os
import re
from collections.abc import Mapping
from typing import Optional
from urllib.parse import unquote, urlparse

BUILD_DEFINITION_ID = "BuildDefinitionId"
BUILD_DEFINITION_PATH = "BuildDefinitionPath"
BUILD_AGENT_ID = "BuildAgentId"
BUILD_AGENT_NAME = "BuildAgentName"

_VARIABLE = re.compile(r"\$\((\w+)\)")


def tool_specific_id(artifact_uri: str) -> str:
    """Extract the id from an artifact URI.

    Examples:
        >>> tool_specific_id("vstfs:///Build/Definition/42")
        '42'
    """
    path = unquote(urlparse(artifact_uri).path).rstrip("/")
    return path.rsplit("/", 1)[-1]


def expand_variables(
    value: str,
    variables: Mapping[str, str],
    environ: Optional[Mapping[str, str]] = None,
) -> str:
    """
    Expand ``$(Name)`` tokens.

    Names are looked up in ``variables`` first, then in the process
    environment. Unknown tokens are left as they are.

    Args:
        value: String containing ``$(Name)`` tokens
        variables: Build variables
        environ: Environment mapping (default: os.environ)

    Returns:
        Expanded string
    """
    if environ is None:
        environ = os.environ

    def _replace(match: re.Match) -> str:
        name = match.group(1)
        if name in variables:
            return variables[name]
        return environ.get(name, match.group(0))

    return _VARIABLE.sub(_replace, value)
