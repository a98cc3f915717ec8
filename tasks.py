"""Invoke tasks for development workflows and manifest regeneration.

Every task shells out to the `uv` CLI so the same environment is used for
tests, linting and the `foliogen` console script.
"""

from __future__ import annotations

import shlex
import shutil
from collections.abc import Mapping, Sequence
from pathlib import Path

from invoke import Collection, Context, task

PROJECT_ROOT = Path(__file__).parent
DIST_DIR = PROJECT_ROOT / "dist"
PORTFOLIO_TYPES = ("concert", "events", "journalism", "nature", "portrait")


def _run_uv(
    ctx: Context,
    args: Sequence[str],
    *,
    echo: bool = True,
    dry_run: bool = False,
    env: Mapping[str, str] | None = None,
) -> None:
    """Execute a uv command with consistent quoting and environment handling.

    Args:
        ctx: Invoke execution context.
        args: Additional arguments to append after the `uv` executable.
        echo: Whether to echo the command before running it.
        dry_run: When True, log the command without executing it.
        env: Optional environment variables to layer onto the invocation.
    """
    command = shlex.join(("uv", *args))
    if dry_run:
        print(f"[dry-run] {command}")
        return
    run_env = dict(ctx.config.run.env or {})
    if env:
        run_env.update(env)
    ctx.run(command, echo=echo, pty=True, env=run_env)


@task
def sync(ctx: Context, dev: bool = True) -> None:
    """Synchronize the virtual environment, including test and dev extras when requested."""
    args = ["sync", "--extra", "test"]
    if dev:
        args.extend(["--extra", "dev"])
    _run_uv(ctx, args)


@task(help={"clean": "Remove existing artifacts from dist/ before building."})
def build(ctx: Context, clean: bool = False) -> None:
    """Build source and wheel distributions in `dist/` using uv."""
    if clean and DIST_DIR.exists():
        for artifact in DIST_DIR.iterdir():
            if artifact.is_file():
                artifact.unlink()
            else:
                shutil.rmtree(artifact)
    _run_uv(ctx, ["build"])


@task(
    help={
        "k": "pytest -k expression for test selection.",
        "path": "Path or module to test (defaults to tests/).",
        "options": "Additional CLI flags forwarded verbatim to pytest.",
    }
)
def tests(ctx: Context, k: str = "", path: str = "tests", options: str = "") -> None:
    """Run the pytest suite via uv.

    Args:
        ctx: Invoke execution context.
        k: `pytest -k` expression to select tests.
        path: Target path or dotted module for pytest discovery.
        options: Extra CLI arguments appended to the pytest call.
    """
    args: list[str] = ["run", "pytest"]
    if k:
        args.extend(["-k", k])
    if options:
        args.extend(shlex.split(options))
    if path:
        args.append(path)
    _run_uv(ctx, args)


@task(help={"fix": "Apply auto-fixes where possible (ruff --fix)."})
def lint(ctx: Context, fix: bool = False) -> None:
    """Run Ruff format checks and lint rules via uv."""
    _run_uv(ctx, ["run", "ruff", "format", "--check", "src", "tests"])
    lint_args: list[str] = ["run", "ruff", "check", "src", "tests"]
    if fix:
        lint_args.append("--fix")
    _run_uv(ctx, lint_args)


@task
def mypy(ctx: Context) -> None:
    """Type-check the package with MyPy via uv."""
    _run_uv(ctx, ["run", "mypy", "src"])


@task(
    help={
        "force": "Rewrite manifests even when unchanged.",
        "dry_run": "Scan and report without writing.",
        "featured": "Rebuild the featured manifest afterwards.",
    }
)
def manifests(ctx: Context, force: bool = False, dry_run: bool = False, featured: bool = True) -> None:
    """Regenerate every portfolio manifest, then the featured manifest.

    Args:
        ctx: Invoke execution context.
        force: Forwarded as `--force` to each generator run.
        dry_run: Forwarded as `--dry-run` to each generator run.
        featured: Run `foliogen featured` once the per-type manifests exist.
    """
    flags: list[str] = []
    if force:
        flags.append("--force")
    if dry_run:
        flags.append("--dry-run")
    for portfolio_type in PORTFOLIO_TYPES:
        _run_uv(ctx, ["run", "foliogen", "generate", portfolio_type, *flags])
    if featured:
        _run_uv(ctx, ["run", "foliogen", "featured", *flags])


@task
def ci(ctx: Context) -> None:
    """Replicate the CI workflow locally via uv."""
    ctx.invoke(lint)
    ctx.invoke(mypy)
    ctx.invoke(tests)


namespace = Collection(sync, build, tests, lint, mypy, manifests, ci)
