"""Commit message construction."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from .models import PublishConfig

# Change kinds
PACKAGE = ""
MANIFEST = "PKGBUILD"
SUBMODULE = "submodule"


class CommitMessage(BaseModel):
    """A rendered commit message and what it was rendered from."""

    model_config = ConfigDict(frozen=True)

    kind: str
    version: str
    subject: str

    def __str__(self) -> str:
        return self.subject


class CommitMessageBuilder(BaseModel):
    """Renders commit messages from templates.

    An empty kind describes a direct package remote update; any other kind
    names the artifact that changed in the main repo.
    """

    model_config = ConfigDict(frozen=True)

    package_template: str = "Update to version {version}"
    artifact_template: str = "Update {kind} to version {version}"

    @classmethod
    def from_config(cls, config: PublishConfig) -> CommitMessageBuilder:
        return cls(
            package_template=config.commit_template,
            artifact_template=config.artifact_commit_template,
        )

    def build(self, kind: str, version: str) -> CommitMessage:
        """Render the message for a change kind and version.

        Raises:
            ValueError: If version is empty.
        """
        if not version.strip():
            raise ValueError("Commit message needs a non-empty version")
        template = self.artifact_template if kind else self.package_template
        return CommitMessage(
            kind=kind,
            version=version,
            subject=template.format(kind=kind, version=version),
        )
