"""Publish workflow: pre-script → setup → AUR → main repo → post-script.

This module sequences the aur-publish run:
1. Run the pre-script, if any
2. Configure git for unattended commits
3. Stage the PKGBUILD and refresh its checksums
4. Optionally build and install the package
5. Render .SRCINFO and read the release version from it
6. Commit and push PKGBUILD + .SRCINFO to the AUR
7. If enabled, merge the PKGBUILD copy and/or submodule bump into trunk
8. Run the post-script in the workspace, if any

The first failure aborts the run. A run that fails after step 6 leaves the
AUR updated and the main repo untouched or partially updated; the non-zero
exit status and the output are how an operator notices.
"""

from __future__ import annotations

from pathlib import Path

from .errors import ExternalToolFailed, HookFailed
from .main_repo import RepoUpdateCoordinator, should_update_main_repo
from .messages import CommitMessageBuilder
from .models import PublishConfig, PublishResult
from .package import build_and_maybe_install, prepare_staging, publish, render_srcinfo
from .shell import Runner, pushd, step


def run_hook(name: str, script: str, runner: Runner, cwd: Path | None = None) -> None:
    """Run a user-supplied shell script with bash.

    Args:
        name: Label for output and errors ("Pre-script", "Post-script").
        script: Shell text, run as ``bash -c script``.
        runner: Command runner.
        cwd: Directory to run in; the current directory if None.

    Raises:
        HookFailed: If the script exits non-zero.
    """
    step(f"Running {name.lower()}")
    try:
        if cwd is None:
            runner.run("bash", "-c", script)
        else:
            with pushd(cwd):
                runner.run("bash", "-c", script)
    except ExternalToolFailed as exc:
        raise HookFailed(f"{name} exited with status {exc.returncode}") from exc


def setup_git(config: PublishConfig, runner: Runner) -> None:
    """Configure the git identity and trust the workspace.

    SSH keys and credential helpers are expected to be in place already.
    """
    step("Git setup")
    if config.git_username:
        runner.git("config", "--global", "user.name", config.git_username)
    if config.git_email:
        runner.git("config", "--global", "user.email", config.git_email)
    # Workspaces mounted into containers are owned by another uid
    runner.git("config", "--global", "--add", "safe.directory", str(config.workspace))
    print(f"  Trusted {config.workspace}")


def run_publish(config: PublishConfig, runner: Runner | None = None) -> PublishResult:
    """Execute the full publish workflow.

    Args:
        config: Run configuration.
        runner: Command runner; a real subprocess runner if None.

    Returns:
        The published version and, if it ran, the main repo update outcome.
    """
    runner = runner or Runner()
    messages = CommitMessageBuilder.from_config(config)

    if config.prescript:
        run_hook("Pre-script", config.prescript, runner)

    setup_git(config, runner)

    # Phase 1: AUR
    staging = prepare_staging(config, runner)
    build_and_maybe_install(staging, config, runner)
    version = render_srcinfo(staging, runner)
    publish(staging, version, config, runner, messages)
    result = PublishResult(version=version)

    # Phase 2: main repo
    if should_update_main_repo(config):
        coordinator = RepoUpdateCoordinator(config, runner, messages)
        branch = coordinator.run(staging, version)
        result = PublishResult(
            version=version, update_branch=branch, main_repo_state=coordinator.state
        )
    else:
        step("Main repo update disabled, skipping")

    if config.postscript:
        run_hook("Post-script", config.postscript, runner, cwd=config.workspace)

    print(f"\n{'=' * 60}\nPublished {config.package_name} {version}\n{'=' * 60}")
    return result
