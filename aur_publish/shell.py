"""Shell and git utilities.

Provides a small runner around subprocess calls for external tools and git,
a directory guard, and output formatting helpers.
"""

from __future__ import annotations

import os
import subprocess
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from .errors import ExternalToolFailed, PublishError


class Runner:
    """Runs external commands in the current working directory.

    Every external tool the workflow needs (git, makepkg, updpkgsums, hook
    scripts) goes through one of these, so tests can swap in a fake that
    records calls and returns canned results.
    """

    def run(
        self, *args: str, check: bool = True, capture: bool = False
    ) -> subprocess.CompletedProcess[str]:
        """Run a command.

        Args:
            *args: Command and arguments (e.g., "makepkg", "--printsrcinfo").
            check: If True (default), raise ExternalToolFailed on non-zero exit.
            capture: If True, capture stdout/stderr as text. Otherwise output
                     streams straight to the terminal so build progress is
                     visible in CI logs.

        Returns:
            CompletedProcess with returncode (and output when captured).
        """
        try:
            result = self._execute(args, capture)
        except OSError as exc:
            # Command not found or not executable
            raise ExternalToolFailed(args, 127, str(exc)) from exc
        if check and result.returncode != 0:
            raise ExternalToolFailed(args, result.returncode, result.stderr or None)
        return result

    def git(self, *args: str, check: bool = True) -> str:
        """Run a git command and return stripped stdout.

        Args:
            *args: Arguments to pass to git (e.g., "status", "--short").
            check: If True (default), raise on non-zero exit. Set to False
                   for commands that may legitimately fail (e.g., ref lookup).
        """
        return self.run("git", *args, check=check, capture=True).stdout.strip()

    def _execute(
        self, args: tuple[str, ...], capture: bool
    ) -> subprocess.CompletedProcess[str]:
        return subprocess.run(args, capture_output=capture, text=True)


@contextmanager
def pushd(path: Path) -> Iterator[Path]:
    """Enter a directory for the duration of the block.

    The previous working directory is restored on every exit path,
    including exceptions.
    """
    previous = Path.cwd()
    os.chdir(path)
    try:
        yield Path.cwd()
    finally:
        os.chdir(previous)


def dump_git_state(runner: Runner, context: str) -> None:
    """Print the current branch, status and remotes of the repo in cwd."""
    print(f"=== Git Debug Info: {context} ===")
    print(f"Current directory: {Path.cwd()}")
    print(f"Git branch: {runner.git('branch', '--show-current', check=False)}")
    print("Git status:")
    print(runner.git("status", check=False))
    print("Git remotes:")
    print(runner.git("remote", "-v", check=False))
    print("==========================")


@contextmanager
def git_diagnostics(runner: Runner, context: str) -> Iterator[None]:
    """Dump git state if a workflow error escapes the block, then re-raise."""
    try:
        yield
    except PublishError as exc:
        dump_git_state(runner, f"{context} failed: {type(exc).__name__}")
        raise


def step(msg: str) -> None:
    """Print a visually distinct step header.

    Used to separate major phases of the publish workflow in terminal output.
    """
    print(f"\n{'─' * 60}\n{msg}\n{'─' * 60}")


def fatal(msg: str) -> None:
    """Print an error message and exit with code 1.

    Use for unrecoverable errors that should halt the workflow.
    """
    print(f"ERROR: {msg}", file=sys.stderr)
    sys.exit(1)
