"""Typer-based CLI application for buildtag."""

import logging
from pathlib import Path
from typing import Annotated, Optional

import pygit2
import typer
from pydantic import ValidationError

from buildtag import __version__
from buildtag.core.config import TagStepConfig
from buildtag.core.git import DefaultCredentials, UserPassCredentials
from buildtag.core.step import GitTagStep
from buildtag.errors import BuildTagError
from buildtag.host.context import HostContext, StaticBuildAgent, StaticBuildDetail
from buildtag.host.tracking import LoggingSink

app = typer.Typer(
    name="buildtag",
    help="Tag a build's git checkout with the build number and push it to origin",
    add_completion=False,
)


def version_callback(value: bool):
    """Display version and exit."""
    if value:
        typer.echo(f"buildtag v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        Optional[bool],
        typer.Option("--version", callback=version_callback, is_eager=True),
    ] = None,
):
    """buildtag - Git tagging step for build pipelines.

    Runs the tag-and-push build step locally, standing in for the build
    host: the build number and build directory are given on the command line.
    """
    pass


def configure_logging(log_level: str) -> None:
    """Configure logging from a debug/info/warn/error level name.

    Raises:
        typer.Exit: If the level name is not recognised
    """
    log_level_upper = log_level.upper()
    if log_level_upper not in ["DEBUG", "INFO", "WARN", "WARNING", "ERROR"]:
        typer.echo(
            f"❌ Invalid log level: {log_level}. "
            "Must be debug, info, warn, or error.",
            err=True,
        )
        raise typer.Exit(1)

    # Map WARN to WARNING for Python logging
    if log_level_upper == "WARN":
        log_level_upper = "WARNING"

    logging.basicConfig(
        level=getattr(logging, log_level_upper),
        format="%(message)s",
    )


def load_config(
    config_file: Optional[Path],
    prefix: Optional[str] = None,
    source_folder: Optional[str] = None,
    message: Optional[str] = None,
) -> TagStepConfig:
    """Build the effective configuration: YAML file, then command-line overrides.

    Raises:
        typer.Exit: If the file is missing or invalid
    """
    config = TagStepConfig()
    if config_file is not None:
        try:
            config = TagStepConfig.from_file(config_file)
        except FileNotFoundError as e:
            typer.echo(f"❌ Config file not found: {config_file}", err=True)
            raise typer.Exit(1) from e
        except (ValidationError, ValueError) as e:
            typer.echo(f"❌ Invalid config file {config_file}: {e}", err=True)
            raise typer.Exit(1) from e

    return config.with_overrides(
        tag_name_prefix=prefix, source_folder=source_folder, tag_message=message
    )


@app.command()
def run(
    build_number: Annotated[
        str, typer.Option(help="Build number assigned by the build host")
    ],
    build_directory: Annotated[
        str,
        typer.Option(help="Build working directory (may contain $(Variable) tokens)"),
    ],
    # Step configuration
    prefix: Annotated[
        Optional[str],
        typer.Option(help="Tag name prefix (prepended to the build number)"),
    ] = None,
    source_folder: Annotated[
        Optional[str],
        typer.Option(help="Folder under the build directory with the git checkout"),
    ] = None,
    message: Annotated[
        Optional[str],
        typer.Option(help="Create an annotated tag with this message"),
    ] = None,
    config_file: Annotated[
        Optional[Path],
        typer.Option("--config", help="YAML file with step options"),
    ] = None,
    # Host description
    agent_name: Annotated[
        str, typer.Option(help="Build agent name ($(BuildAgentName))")
    ] = "local",
    definition_path: Annotated[
        str, typer.Option(help="Build definition path ($(BuildDefinitionPath))")
    ] = "",
    # Credentials
    git_username: Annotated[
        Optional[str],
        typer.Option(envvar="BUILDTAG_GIT_USERNAME", help="Username for the push"),
    ] = None,
    git_password: Annotated[
        Optional[str],
        typer.Option(
            envvar="BUILDTAG_GIT_PASSWORD",
            help="Password or token for the push",
            show_default=False,
        ),
    ] = None,
    # Runtime options (hidden from help - for developers)
    log_level: Annotated[
        str,
        typer.Option(
            help="Logging level (debug, info, warn, error)",
            case_sensitive=False,
            hidden=True,
        ),
    ] = "info",
):
    """Tag the checkout with <prefix><build number> and push it to origin."""
    configure_logging(log_level)
    logger = logging.getLogger(__name__)

    config = load_config(config_file, prefix, source_folder, message)

    if git_username is not None and git_password is not None:
        credentials = UserPassCredentials(git_username, git_password)
    elif git_username is not None or git_password is not None:
        typer.echo(
            "❌ --git-username and --git-password must be given together", err=True
        )
        raise typer.Exit(1)
    else:
        credentials = DefaultCredentials()

    host = HostContext(
        agent=StaticBuildAgent(name=agent_name, build_directory=build_directory),
        build_detail=StaticBuildDetail(
            build_number=build_number, build_definition_path=definition_path
        ),
        sink=LoggingSink(),
    )

    step = GitTagStep(config, credentials=credentials)
    try:
        result = step.execute(host)
    except (BuildTagError, pygit2.GitError, KeyError, ValueError, OSError) as e:
        typer.echo(f"❌ Tag and push failed: {e}", err=True)
        logger.debug("Tag and push failed", exc_info=True)
        raise typer.Exit(1) from e

    typer.echo("=" * 60)
    if result.accepted:
        typer.echo("✅ Tag pushed successfully!")
    else:
        typer.echo("⚠️  Tag created, but the remote refused some references")
    typer.echo("=" * 60)
    typer.echo(f"Repository:  {result.source_path}")
    typer.echo(f"Tag:         {result.canonical_name}")
    typer.echo(f"Remote:      {result.remote_url}")
    typer.echo(f"Refspec:     {result.refspec}")
    for rejection in result.rejections:
        typer.echo(f"Rejected:    {rejection.reference} ({rejection.message})")
    typer.echo("=" * 60)


@app.command("show-config")
def show_config(
    config_file: Annotated[
        Optional[Path],
        typer.Option("--config", help="YAML file with step options"),
    ] = None,
    prefix: Annotated[Optional[str], typer.Option(help="Tag name prefix")] = None,
    source_folder: Annotated[
        Optional[str], typer.Option(help="Folder holding the git checkout")
    ] = None,
    message: Annotated[
        Optional[str], typer.Option(help="Annotated tag message")
    ] = None,
):
    """Print the effective step configuration as YAML."""
    config = load_config(config_file, prefix, source_folder, message)
    typer.echo(config.to_yaml(), nl=False)


if __name__ == "__main__":
    app()
