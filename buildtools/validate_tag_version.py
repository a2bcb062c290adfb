#!/usr/bin/env python3
"""Check a release tag against the versions declared by the client.

The version appears twice: ``__version__`` in ``src/deis_cli/__init__.py``
(reported by ``deis version`` and sent in the ``User-Agent`` header) and
``[project].version`` in ``pyproject.toml``. A tag is accepted only when both
agree with it.
"""
from __future__ import annotations

import argparse
import ast
import pathlib
import re
import sys
import tomllib

PROJECT_ROOT = pathlib.Path(__file__).resolve().parent.parent
INIT_PATH = PROJECT_ROOT / "src" / "deis_cli" / "__init__.py"
PYPROJECT_PATH = PROJECT_ROOT / "pyproject.toml"

TAG_PATTERNS = {
    "release": re.compile(r"^v(?P<version>[0-9]+\.[0-9]+\.[0-9]+)$"),
    "rc": re.compile(r"^v(?P<version>[0-9]+\.[0-9]+\.[0-9]+)-rc[0-9]+$"),
}


class TagValidationError(RuntimeError):
    """Raised when a tag or a declared version is unusable."""


def init_version(path: pathlib.Path = INIT_PATH) -> str:
    """Read ``__version__`` from *path* without importing the package."""
    module = ast.parse(path.read_text(encoding="utf-8"), filename=str(path))
    for node in module.body:
        if not isinstance(node, ast.Assign):
            continue
        if any(getattr(target, "id", None) == "__version__" for target in node.targets):
            if isinstance(node.value, ast.Constant) and isinstance(node.value.value, str):
                return node.value.value
            break
    raise TagValidationError(f"Unable to determine __version__ from {path.name}")


def project_version(path: pathlib.Path = PYPROJECT_PATH) -> str:
    """Read ``[project].version`` from *path*."""
    with path.open("rb") as handle:
        data = tomllib.load(handle)
    version = data.get("project", {}).get("version")
    if not isinstance(version, str):
        raise TagValidationError(f"Unable to determine project version from {path.name}")
    return version


def version_from_tag(tag: str, kind: str) -> str:
    """Return the version a *kind* tag refers to."""
    pattern = TAG_PATTERNS.get(kind)
    if pattern is None:
        raise TagValidationError(f"Unknown tag kind '{kind}'.")
    match = pattern.match(tag)
    if match is None:
        expected = "v<major>.<minor>.<patch>" + ("-rc<n>" if kind == "rc" else "")
        raise TagValidationError(
            f"{kind.capitalize()} tags must be formatted as {expected}; received '{tag}'."
        )
    return match.group("version")


def mismatches(tag_version: str, declared: dict[str, str]) -> list[str]:
    """Describe every declared version that differs from *tag_version*."""
    return [
        f"Tag version '{tag_version}' does not match {source} version '{version}'."
        for source, version in declared.items()
        if version != tag_version
    ]


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Validate a tag against the client version.")
    parser.add_argument("--kind", required=True, choices=sorted(TAG_PATTERNS), help="Tag category.")
    parser.add_argument("--tag", required=True, help="Git tag name to validate.")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    """Entry point used by the release workflow."""
    args = parse_args(argv)
    try:
        tag_version = version_from_tag(args.tag, args.kind)
        declared = {"package": init_version(), "pyproject": project_version()}
    except TagValidationError as exc:
        sys.stderr.write(f"{exc}\n")
        return 1

    problems = mismatches(tag_version, declared)
    for problem in problems:
        sys.stderr.write(f"{problem}\n")
    return 1 if problems else 0


if __name__ == "__main__":
    sys.exit(main())
