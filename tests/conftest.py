"""Pytest configuration and shared fixtures for buildtag tests."""

from pathlib import Path

import pygit2
import pytest

from buildtag.host.context import HostContext, StaticBuildAgent, StaticBuildDetail
from buildtag.host.tracking import BuildMessage

AUTHOR = pygit2.Signature("Build Bot", "build@example.com")


class RecordingSink:
    """Tracking sink that keeps every record for inspection."""

    def __init__(self):
        self.records: list[BuildMessage] = []

    def track(self, record: BuildMessage) -> None:
        self.records.append(record)

    @property
    def messages(self) -> list[str]:
        return [record.message for record in self.records]


def commit_file(repo: pygit2.Repository, name: str, content: str, message: str):
    """Write a file into the work tree and commit it on HEAD."""
    Path(repo.workdir, name).write_text(content)
    repo.index.add(name)
    repo.index.write()
    tree = repo.index.write_tree()
    parents = [] if repo.head_is_unborn else [repo.head.target]
    return repo.create_commit("HEAD", AUTHOR, AUTHOR, message, tree, parents)


@pytest.fixture
def sink():
    """Fresh recording sink."""
    return RecordingSink()


@pytest.fixture
def origin_path(tmp_path):
    """Bare repository acting as the ``origin`` remote."""
    path = tmp_path / "origin.git"
    pygit2.init_repository(str(path), bare=True)
    return path


@pytest.fixture
def build_dir(tmp_path, origin_path):
    """
    Create a build directory with a git checkout in ``src``.

    The checkout has one commit and an ``origin`` remote pointing at the
    bare repository from ``origin_path``.
    """
    build = tmp_path / "build"
    checkout = build / "src"
    checkout.mkdir(parents=True)

    repo = pygit2.init_repository(str(checkout))
    repo.config["user.name"] = "Build Bot"
    repo.config["user.email"] = "build@example.com"
    commit_file(repo, "README.md", "hello\n", "Initial commit")
    repo.remotes.create("origin", str(origin_path))
    repo.free()

    return build


@pytest.fixture
def make_host(sink):
    """Factory for host contexts over a given build directory."""

    def _make(build_directory, build_number="42", agent_name="agent-1"):
        return HostContext(
            agent=StaticBuildAgent(
                uri="vstfs:///Build/Agent/7",
                name=agent_name,
                build_directory=str(build_directory),
            ),
            build_detail=StaticBuildDetail(
                build_definition_uri="vstfs:///Build/Definition/3",
                build_definition_path="\\Project\\Nightly",
                build_number=build_number,
            ),
            sink=sink,
        )

    return _make
