"""Step configuration schema and serialization."""

from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field

DEFAULT_SOURCE_FOLDER = "src"


class TagStepConfig(BaseModel):
    """Options recognised by the tag-and-push step.

    Field names and the host's argument names (``TagNamePrefix``,
    ``SourceFolder``) are both accepted when loading.
    """

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    tag_name_prefix: str = Field(
        default="",
        alias="TagNamePrefix",
        description="Text prepended to the build number to form the tag name",
    )
    source_folder: str = Field(
        default=DEFAULT_SOURCE_FOLDER,
        alias="SourceFolder",
        description="Folder under the build directory holding the git checkout",
    )
    tag_message: Optional[str] = Field(
        default=None,
        alias="TagMessage",
        description="Annotated tag message (lightweight tag when unset)",
    )

    def to_yaml(self) -> str:
        """
        Serialize configuration to YAML string.

        Returns:
            YAML string representation using field names
        """
        data = self.model_dump(exclude_none=True, mode="json")
        return yaml.dump(data, default_flow_style=False, sort_keys=False)

    @classmethod
    def from_yaml(cls, yaml_str: str) -> "TagStepConfig":
        """
        Deserialize configuration from YAML string.

        An empty document yields the defaults.

        Args:
            yaml_str: YAML string to parse

        Returns:
            TagStepConfig instance
        """
        data = yaml.safe_load(yaml_str) or {}
        if not isinstance(data, dict):
            raise ValueError("Configuration must be a YAML mapping")
        return cls.model_validate(data)

    @classmethod
    def from_file(cls, path: Path) -> "TagStepConfig":
        """Load configuration from a YAML file."""
        return cls.from_yaml(Path(path).read_text(encoding="utf-8"))

    def with_overrides(self, **overrides: Optional[str]) -> "TagStepConfig":
        """Return a copy with every non-None override applied."""
        updates = {k: v for k, v in overrides.items() if v is not None}
        return self.model_validate({**self.model_dump(), **updates})
