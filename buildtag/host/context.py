"""Host extensions consumed by the tag-and-push step."""

import os
from typing import Protocol

from pydantic import BaseModel, Field

from .environment import (
    BUILD_AGENT_ID,
    BUILD_AGENT_NAME,
    BUILD_DEFINITION_ID,
    BUILD_DEFINITION_PATH,
    expand_variables,
    tool_specific_id,
)
from .tracking import LogSink


class BuildAgent(Protocol):
    """The agent running the build."""

    uri: str
    name: str
    build_directory: str


class BuildDetail(Protocol):
    """The build being run."""

    build_definition_uri: str
    build_definition_path: str
    build_number: str


class StaticBuildAgent(BaseModel):
    """Build agent described by fixed values."""

    uri: str = Field(default="vstfs:///Build/Agent/0", description="Agent URI")
    name: str = Field(default="local", description="Agent name")
    build_directory: str = Field(..., description="Build directory (may use $(Var))")


class StaticBuildDetail(BaseModel):
    """Build detail described by fixed values."""

    build_definition_uri: str = Field(
        default="vstfs:///Build/Definition/0", description="Build definition URI"
    )
    build_definition_path: str = Field(
        default="", description="Build definition path"
    )
    build_number: str = Field(..., description="Build number assigned by the host")


class HostContext:
    """Extensions the host hands to the step for one build run."""

    def __init__(self, agent: BuildAgent, build_detail: BuildDetail, sink: LogSink):
        self.agent = agent
        self.build_detail = build_detail
        self.sink = sink

    def build_variables(self) -> dict[str, str]:
        return {
            BUILD_DEFINITION_ID: tool_specific_id(self.build_detail.build_definition_uri),
            BUILD_DEFINITION_PATH: self.build_detail.build_definition_path,
            BUILD_AGENT_ID: tool_specific_id(self.agent.uri),
            BUILD_AGENT_NAME: self.agent.name,
        }

    def working_directory(self) -> str:
        """Absolute build directory with build variables expanded."""
        expanded = expand_variables(self.agent.build_directory, self.build_variables())
        return os.path.abspath(expanded)
