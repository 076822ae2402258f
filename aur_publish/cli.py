"""CLI entry point for aur-publish."""

from __future__ import annotations

from pathlib import Path

import click

from aur_publish.config import build_config, load_config_file
from aur_publish.errors import PublishError
from aur_publish.pipeline import run_publish
from aur_publish.shell import fatal
from aur_publish.versions import VERSION_KEY, read_version


@click.group()
@click.version_option(package_name="aur-publish")
def cli() -> None:
    """Publish a PKGBUILD to the AUR and sync it back into the main repo."""


@cli.command()
@click.option(
    "--config",
    "config_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    envvar="INPUT_CONFIG_FILE",
    help="TOML file with an [aur-publish] table.",
)
@click.option("--package-name", envvar="INPUT_PACKAGE_NAME", help="AUR package name.")
@click.option(
    "--pkgbuild-path",
    envvar="INPUT_PKGBUILD_PATH",
    help="PKGBUILD path relative to the workspace.",
)
@click.option(
    "--workspace",
    type=click.Path(file_okay=False, path_type=Path),
    envvar="GITHUB_WORKSPACE",
    help="Main repo checkout. [default: current directory]",
)
@click.option(
    "--try-build-and-install",
    type=click.BOOL,
    envvar="INPUT_TRY_BUILD_AND_INSTALL",
    help="Build and install the package before publishing.",
)
@click.option(
    "--update-pkgbuild",
    type=click.BOOL,
    envvar="INPUT_UPDATE_PKGBUILD",
    help="Merge the refreshed PKGBUILD back into the main repo.",
)
@click.option(
    "--aur-submodule-path",
    envvar="INPUT_AUR_SUBMODULE_PATH",
    help="Path of the AUR submodule to bump in the main repo.",
)
@click.option("--prescript", envvar="INPUT_PRESCRIPT", help="Shell run first.")
@click.option(
    "--postscript", envvar="INPUT_POSTSCRIPT", help="Shell run last, in the workspace."
)
@click.option("--git-username", envvar="INPUT_GIT_USERNAME", help="Commit author name.")
@click.option("--git-email", envvar="INPUT_GIT_EMAIL", help="Commit author email.")
@click.option(
    "--staging-dir",
    type=click.Path(file_okay=False, path_type=Path),
    envvar="INPUT_STAGING_DIR",
    help="Scratch directory. [default: /tmp/package]",
)
@click.option(
    "--remote-url-template",
    envvar="INPUT_AUR_REMOTE_URL",
    help="AUR remote URL; {package} is substituted.",
)
@click.option(
    "--trunk-branch",
    envvar="INPUT_TRUNK_BRANCH",
    help="Main repo trunk. [default: master]",
)
@click.option(
    "--main-remote",
    envvar="INPUT_MAIN_REMOTE",
    help="Main repo remote. [default: origin]",
)
def run(config_file: Path | None, **options: object) -> None:
    """Run the publish workflow (usually called from CI)."""
    try:
        file_values = load_config_file(config_file) if config_file else {}
        config = build_config(file_values, options)
        result = run_publish(config)
    except PublishError as exc:
        fatal(f"{type(exc).__name__}: {exc}")

    click.echo(f"✓ Published {config.package_name} {result.version}")
    if result.update_branch:
        click.echo(f"✓ Merged {result.update_branch} into {config.trunk_branch}")


@cli.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--key", default=VERSION_KEY, show_default=True, help="Version key.")
def version(path: Path, key: str) -> None:
    """Print the version recorded in a PKGBUILD or .SRCINFO."""
    try:
        click.echo(read_version(path, key))
    except PublishError as exc:
        fatal(str(exc))
