"""Main repo side of the workflow: branch → commit → merge → push.

When the PKGBUILD copy or the AUR submodule in the main repo should follow
the release, the changes go onto a fresh ``update_<package>_to_<version>``
branch which is then merged into trunk with a merge commit and pushed.

The branch is never deleted after the merge; it stays behind as an audit
trail. Re-running for a version whose branch already exists fails loudly
instead of merging the same update twice.
"""

from __future__ import annotations

import shutil

from .errors import (
    BranchExists,
    ExternalToolFailed,
    MergeConflict,
    PublishError,
    PushRejected,
    StagingFailed,
)
from .messages import MANIFEST, SUBMODULE, CommitMessageBuilder
from .models import PublishConfig, StagingArea, UpdateState
from .package import commit_staged
from .shell import Runner, dump_git_state, git_diagnostics, pushd, step


def should_update_main_repo(config: PublishConfig) -> bool:
    """The coordinator runs only when some main repo update is enabled."""
    return config.updates_main_repo


class RepoUpdateCoordinator:
    """Carries a release into the main repo via a merged update branch.

    ``state`` records the last step that completed, so a failure can be
    reported against the point where the run stopped. There is no rollback:
    the CI workspace is discarded on failure.
    """

    def __init__(
        self,
        config: PublishConfig,
        runner: Runner,
        messages: CommitMessageBuilder,
    ) -> None:
        self.config = config
        self.runner = runner
        self.messages = messages
        self.state = UpdateState.START

    def run(self, staging: StagingArea, version: str) -> str:
        """Run the full branch/commit/merge/push sequence.

        Args:
            staging: Staging area holding the refreshed PKGBUILD.
            version: Release version, used for the branch and commit messages.

        Returns:
            Name of the update branch that was merged.

        Raises:
            BranchExists: If the update branch already exists locally.
            MergeConflict: If the merge into trunk does not complete.
            PushRejected: If pushing trunk is rejected.
        """
        step("Updating main repository")
        branch = self.config.update_branch(version)
        trunk = self.config.trunk_branch

        with pushd(self.config.workspace), git_diagnostics(
            self.runner, "Main repo update"
        ):
            try:
                dump_git_state(self.runner, "Before main repo update")
                self.create_branch(branch)
                if self.config.update_pkgbuild:
                    self.commit_manifest(staging, version)
                if self.config.aur_submodule_path is not None:
                    self.commit_submodule(self.config.aur_submodule_path, version)
                dump_git_state(self.runner, f"Before merge to {trunk}")
                self.merge_into_trunk(branch)
                self.push_trunk()
                dump_git_state(self.runner, f"After merge to {trunk}")
            except PublishError:
                print(f"  Main repo update stopped at state: {self.state.value}")
                raise

        return branch

    def create_branch(self, branch: str) -> None:
        exists = self.runner.run(
            "git",
            "rev-parse",
            "--verify",
            "--quiet",
            f"refs/heads/{branch}",
            check=False,
            capture=True,
        )
        if exists.returncode == 0:
            raise BranchExists(
                f"Branch {branch} already exists; this version was already synced"
            )
        self.runner.git("checkout", "-b", branch)
        print(f"  Created branch {branch}")
        self.state = UpdateState.BRANCH_CREATED

    def commit_manifest(self, staging: StagingArea, version: str) -> None:
        print("  Updating PKGBUILD in main repo")
        try:
            shutil.copyfile(staging.manifest, self.config.manifest_source)
        except OSError as exc:
            raise StagingFailed(
                f"Cannot copy PKGBUILD to {self.config.manifest_source}: {exc}"
            ) from exc
        self.runner.git("add", self.config.pkgbuild_path)
        commit_staged(self.runner, self.messages.build(MANIFEST, version))
        self.state = UpdateState.MANIFEST_COMMITTED

    def commit_submodule(self, path: str, version: str) -> None:
        print(f"  Updating submodule {path}")
        self.runner.git("submodule", "update", "--init", "--remote", path)
        self.runner.git("add", path)
        commit_staged(self.runner, self.messages.build(SUBMODULE, version))
        self.state = UpdateState.SUBMODULE_COMMITTED

    def merge_into_trunk(self, branch: str) -> None:
        trunk = self.config.trunk_branch
        self.runner.git("checkout", trunk)
        self.state = UpdateState.TRUNK_CHECKED_OUT
        self.runner.git("fetch", self.config.main_remote)
        self.state = UpdateState.FETCHED
        try:
            self.runner.git("merge", "--no-ff", "--no-edit", branch)
        except ExternalToolFailed as exc:
            raise MergeConflict(f"Cannot merge {branch} into {trunk}: {exc}") from exc
        print(f"  Merged {branch} into {trunk}")
        self.state = UpdateState.MERGED

    def push_trunk(self) -> None:
        trunk = self.config.trunk_branch
        try:
            self.runner.git("push", self.config.main_remote, trunk)
        except ExternalToolFailed as exc:
            raise PushRejected(
                f"Push of {trunk} to {self.config.main_remote} rejected: {exc}"
            ) from exc
        print(f"  Pushed {trunk}")
        self.state = UpdateState.PUSHED
