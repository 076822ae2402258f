"""Data models for aur-publish.

These Pydantic models represent the configuration and the intermediate
results passed between the stages of the publish workflow.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_REMOTE_URL = "ssh://aur@aur.archlinux.org/{package}.git"


def _check_template(template: str, **fields: str) -> str:
    """Fail early on templates that would not render with the given fields."""
    try:
        template.format(**fields)
    except (AttributeError, IndexError, KeyError, ValueError) as exc:
        allowed = ", ".join(f"{{{name}}}" for name in fields)
        raise ValueError(
            f"Template {template!r} does not render ({exc!r}); allowed: {allowed}"
        ) from exc
    return template


class PublishConfig(BaseModel):
    """Immutable configuration for one publish run.

    Built once at startup (see config.build_config) and passed to every
    stage. Empty strings for optional text fields are treated as unset, which
    matches how CI systems pass omitted inputs.

    Attributes:
        package_name: AUR package name; names the remote and the update branch.
        pkgbuild_path: PKGBUILD location relative to the workspace.
        workspace: Root of the main project checkout.
        try_build_and_install: Run makepkg with --install before publishing.
        update_pkgbuild: Copy the refreshed PKGBUILD back into the main repo.
        aur_submodule_path: Path of the AUR submodule in the main repo, if any.
        prescript: Shell text run before anything else.
        postscript: Shell text run in the workspace after everything else.
        git_username: Commit author name to configure, if any.
        git_email: Commit author email to configure, if any.
        staging_dir: Scratch directory for the PKGBUILD and the AUR clone.
        remote_url_template: AUR remote URL; "{package}" is substituted.
        trunk_branch: Integration branch of the main repo.
        main_remote: Remote name of the main repo.
        commit_template: Commit message for the AUR commit.
        artifact_commit_template: Commit message for main repo commits.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    package_name: str = Field(min_length=1)
    pkgbuild_path: str = Field(min_length=1)
    workspace: Path = Field(default_factory=Path.cwd)
    try_build_and_install: bool = False
    update_pkgbuild: bool = False
    aur_submodule_path: str | None = None
    prescript: str | None = None
    postscript: str | None = None
    git_username: str | None = None
    git_email: str | None = None
    staging_dir: Path = Path("/tmp/package")
    remote_url_template: str = DEFAULT_REMOTE_URL
    trunk_branch: str = "master"
    main_remote: str = "origin"
    commit_template: str = "Update to version {version}"
    artifact_commit_template: str = "Update {kind} to version {version}"

    @field_validator(
        "aur_submodule_path",
        "prescript",
        "postscript",
        "git_username",
        "git_email",
        mode="before",
    )
    @classmethod
    def _blank_is_unset(cls, value: object) -> object:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("workspace", "staging_dir")
    @classmethod
    def _absolute(cls, value: Path) -> Path:
        # Stages change directory, so relative paths would drift
        return value.expanduser().absolute()

    @field_validator("commit_template", "artifact_commit_template")
    @classmethod
    def _message_template(cls, value: str) -> str:
        return _check_template(value, kind="PKGBUILD", version="1.0.0")

    @field_validator("remote_url_template")
    @classmethod
    def _remote_template(cls, value: str) -> str:
        return _check_template(value, package="pkg")

    @property
    def remote_url(self) -> str:
        return self.remote_url_template.format(package=self.package_name)

    @property
    def manifest_source(self) -> Path:
        """Absolute path of the PKGBUILD in the main repo."""
        return self.workspace / self.pkgbuild_path

    @property
    def updates_main_repo(self) -> bool:
        """Whether any main repo update is enabled."""
        return self.update_pkgbuild or self.aur_submodule_path is not None

    def update_branch(self, version: str) -> str:
        """Name of the branch carrying the main repo update for a version."""
        return f"update_{self.package_name}_to_{version}"


class StagingArea(BaseModel):
    """The staging directory holding the refreshed PKGBUILD and .SRCINFO.

    Attributes:
        root: The staging directory itself.
    """

    model_config = ConfigDict(frozen=True)

    root: Path

    @property
    def manifest(self) -> Path:
        return self.root / "PKGBUILD"

    @property
    def srcinfo(self) -> Path:
        return self.root / ".SRCINFO"

    def clone_dir(self, package_name: str) -> Path:
        """Where the AUR remote is cloned."""
        return self.root / package_name


class UpdateState(str, Enum):
    """Progress of the main repo update, in order.

    The manifest and submodule states are only reached when those updates
    are enabled. A failure leaves the coordinator at the last state reached.
    """

    START = "start"
    BRANCH_CREATED = "branch_created"
    MANIFEST_COMMITTED = "manifest_committed"
    SUBMODULE_COMMITTED = "submodule_committed"
    TRUNK_CHECKED_OUT = "trunk_checked_out"
    FETCHED = "fetched"
    MERGED = "merged"
    PUSHED = "pushed"


class PublishResult(BaseModel):
    """Outcome of a successful run.

    Attributes:
        version: The pkgver that was published.
        update_branch: Main repo branch that was merged, or None if skipped.
        main_repo_state: Final coordinator state, or None if skipped.
    """

    version: str
    update_branch: str | None = None
    main_repo_state: UpdateState | None = None
