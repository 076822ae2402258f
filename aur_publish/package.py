"""AUR side of the workflow: stage → checksums → build → .SRCINFO → publish.

1. Copy the PKGBUILD into a staging directory and refresh its checksums
2. Optionally build and install the package to prove it works
3. Render .SRCINFO and read the release version from it
4. Clone the AUR remote, copy both files in, commit and push

Every external tool failure is fatal. A stale clone directory, a rejected
push or a failed build aborts the run without any cleanup or retry, so each
publish maps to exactly one auditable commit on the AUR.
"""

from __future__ import annotations

import shutil

from .errors import CloneFailed, ExternalToolFailed, PushRejected, StagingFailed
from .messages import PACKAGE, CommitMessage, CommitMessageBuilder
from .models import PublishConfig, StagingArea
from .shell import Runner, dump_git_state, git_diagnostics, pushd, step
from .versions import read_version


def prepare_staging(config: PublishConfig, runner: Runner) -> StagingArea:
    """Copy the PKGBUILD into the staging directory and update its checksums.

    Raises:
        StagingFailed: If the directory cannot be created or the copy fails.
        ExternalToolFailed: If updpkgsums fails.
    """
    step("Preparing package")

    staging = StagingArea(root=config.staging_dir)
    try:
        staging.root.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(config.manifest_source, staging.manifest)
    except OSError as exc:
        raise StagingFailed(
            f"Cannot stage {config.manifest_source} in {staging.root}: {exc}"
        ) from exc

    with pushd(staging.root):
        print(f"  Working in directory: {staging.root}")
        print("  Updating package checksums")
        runner.run("updpkgsums")

    text = staging.manifest.read_text()
    sums = [line for line in text.splitlines() if "sha256sums" in line]
    print(f"  New checksums: {' '.join(sums) or '<none>'}")
    print("  Current PKGBUILD contents:")
    print(text)
    return staging


def build_and_maybe_install(
    staging: StagingArea, config: PublishConfig, runner: Runner
) -> None:
    """Build and install the staged package, if enabled in config.

    Raises:
        ExternalToolFailed: If makepkg fails.
    """
    if not config.try_build_and_install:
        return

    step("Building package")
    with pushd(staging.root):
        runner.run(
            "makepkg",
            "--syncdeps",
            "--noconfirm",
            "--cleanbuild",
            "--rmdeps",
            "--install",
        )


def render_srcinfo(staging: StagingArea, runner: Runner) -> str:
    """Write .SRCINFO for the staged PKGBUILD and return its pkgver.

    Raises:
        ExternalToolFailed: If makepkg fails.
        MalformedManifest: If the rendered .SRCINFO has no pkgver.
    """
    step("Generating .SRCINFO")

    with pushd(staging.root):
        result = runner.run("makepkg", "--printsrcinfo", capture=True)
    staging.srcinfo.write_text(result.stdout)
    print("  New .SRCINFO contents:")
    print(result.stdout)

    version = read_version(staging.srcinfo)
    print(f"  Detected version: {version}")
    return version


def commit_staged(runner: Runner, message: CommitMessage) -> bool:
    """Commit whatever is staged; return False if there was nothing to commit."""
    staged = runner.git("diff", "--cached", "--name-only")
    if not staged:
        print(f"  No changes to commit for: {message}")
        return False
    runner.git("commit", "-m", str(message))
    print(f"  Committed: {message}")
    return True


def publish(
    staging: StagingArea,
    version: str,
    config: PublishConfig,
    runner: Runner,
    messages: CommitMessageBuilder,
) -> None:
    """Clone the AUR remote, copy PKGBUILD and .SRCINFO in, commit and push.

    Raises:
        CloneFailed: If the clone path already exists or the clone fails.
        PushRejected: If the push is rejected.
    """
    step(f"Updating AUR repository: {config.remote_url}")

    clone_dir = staging.clone_dir(config.package_name)
    if clone_dir.exists():
        raise CloneFailed(f"Clone path already exists: {clone_dir}")

    with pushd(staging.root):
        try:
            runner.git("clone", config.remote_url, clone_dir.name)
        except ExternalToolFailed as exc:
            raise CloneFailed(f"Cannot clone {config.remote_url}: {exc}") from exc

    print("  Copying new files to AUR repo")
    try:
        shutil.copyfile(staging.manifest, clone_dir / staging.manifest.name)
        shutil.copyfile(staging.srcinfo, clone_dir / staging.srcinfo.name)
    except OSError as exc:
        raise StagingFailed(f"Cannot copy files into {clone_dir}: {exc}") from exc

    with pushd(clone_dir), git_diagnostics(runner, "AUR update"):
        dump_git_state(runner, "Before AUR commit")
        runner.git("add", staging.manifest.name, staging.srcinfo.name)
        commit_staged(runner, messages.build(PACKAGE, version))
        try:
            runner.git("push")
        except ExternalToolFailed as exc:
            raise PushRejected(f"AUR push rejected: {exc}") from exc
        dump_git_state(runner, "After AUR commit")
