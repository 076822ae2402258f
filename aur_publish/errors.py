"""Error types raised by the publish workflow.

Every error is fatal to the whole run. Nothing in the workflow retries or
recovers locally; the CLI reports the error and exits non-zero.
"""

from __future__ import annotations

from collections.abc import Sequence


class PublishError(Exception):
    """Base class for all workflow failures."""


class ConfigError(PublishError):
    """Configuration could not be loaded or validated."""


class StagingFailed(PublishError):
    """The staging directory could not be created or populated."""


class CloneFailed(PublishError):
    """The package remote could not be cloned."""


class MalformedManifest(PublishError):
    """The manifest or .SRCINFO has no usable version line."""


class BranchExists(PublishError):
    """The update branch already exists in the main repository."""


class MergeConflict(PublishError):
    """The update branch could not be merged into trunk automatically."""


class PushRejected(PublishError):
    """A push to a remote was rejected."""


class HookFailed(PublishError):
    """A pre- or post-script exited non-zero."""


class ExternalToolFailed(PublishError):
    """An external command exited non-zero.

    Attributes:
        command: The argv that was run.
        returncode: Exit status of the command.
        output: Captured stderr (or stdout) if the command was captured.
    """

    def __init__(
        self, command: Sequence[str], returncode: int, output: str | None = None
    ) -> None:
        self.command = list(command)
        self.returncode = returncode
        self.output = output
        msg = f"`{' '.join(self.command)}` exited with status {returncode}"
        if output:
            msg += f"\n{output.strip()}"
        super().__init__(msg)
