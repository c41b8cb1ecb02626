"""Command-line interface for viewdeps."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from artifacts.write import generate_all_artifacts
from contract.validation import validate_artifacts
from parse.errors import RenderParseError
from parse.template_deps import template_dependencies
from rules.config import (
    ConfigError,
    ViewDepsConfig,
    load_config,
    resolve_output_dir,
)
from utils import path_to_template_name
from verify.verify import verify_determinism


def _add_common_paths(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "root",
        nargs="?",
        default=".",
        help="Repository root (default: .)",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="viewdeps")
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log skipped render calls and parse failures",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    generate_parser = subparsers.add_parser("generate", help="Generate artifacts")
    _add_common_paths(generate_parser)
    generate_parser.add_argument(
        "--out-dir",
        default=None,
        help="Output directory for generated artifacts (default: config output dir)",
    )

    validate_parser = subparsers.add_parser("validate", help="Validate artifacts")
    _add_common_paths(validate_parser)
    validate_parser.add_argument(
        "--artifacts-dir",
        default=None,
        help="Artifacts directory (default: config output dir)",
    )

    verify_parser = subparsers.add_parser(
        "verify", help="Verify determinism of artifacts"
    )
    _add_common_paths(verify_parser)
    verify_parser.add_argument(
        "--artifacts-dir",
        default=None,
        help="Artifacts directory (default: config output dir)",
    )

    show_parser = subparsers.add_parser(
        "show", help="Print the dependencies of a single template"
    )
    show_parser.add_argument("template", help="Template file to analyze")
    show_parser.add_argument(
        "--name",
        default=None,
        help="Virtual path of the template (default: derived from the file path)",
    )

    return parser


def _resolve_output_dir(out_dir: str | None) -> Path | None:
    if out_dir is None:
        return None
    return Path(out_dir).expanduser().resolve()


def _resolve_artifacts_dir(root: Path, artifacts_dir: str | None) -> Path:
    if artifacts_dir is None:
        config = load_config(root)
        return resolve_output_dir(root, config.output_dir)
    return Path(artifacts_dir).expanduser().resolve()


def _handle_generate(root: Path, out_dir: str | None) -> int:
    resolved_out_dir = _resolve_output_dir(out_dir)
    generate_all_artifacts(root=root, out_dir=resolved_out_dir)
    return 0


def _handle_validate(root: Path, artifacts_dir: str | None) -> int:
    resolved_artifacts_dir = _resolve_artifacts_dir(root, artifacts_dir)
    result = validate_artifacts(resolved_artifacts_dir)
    for warning in result.warnings:
        sys.stderr.write(f"{warning.location()}: warning: {warning.message}\n")
    if result.errors:
        for error in result.errors:
            sys.stderr.write(f"{error.location()}: {error.message}\n")
        return 1
    return 0


def _handle_verify(root: Path, artifacts_dir: str | None) -> int:
    resolved_artifacts_dir = _resolve_artifacts_dir(root, artifacts_dir)
    try:
        result = verify_determinism(root=root, artifacts_dir=resolved_artifacts_dir)
    except (FileNotFoundError, NotADirectoryError) as exc:
        sys.stderr.write(f"artifacts-dir: {resolved_artifacts_dir}\n")
        sys.stderr.write(f"error: {exc}\n")
        return 2
    if not result.ok:
        for label, paths in (
            ("missing", result.missing),
            ("extra", result.extra),
            ("mismatches", result.mismatches),
        ):
            for path in paths:
                sys.stderr.write(f"{label}: {path}\n")
        return 1
    return 0


def _default_template_name(template_path: Path, config: ViewDepsConfig) -> str:
    views_root = (Path.cwd() / config.views_dir).resolve()
    try:
        relative = template_path.relative_to(views_root)
    except ValueError:
        relative = template_path
    return path_to_template_name(relative)


def _handle_show(template: str, name: str | None) -> int:
    config = load_config(Path.cwd())
    template_path = Path(template).expanduser().resolve()
    handler = config.handlers.get(template_path.suffix[1:])
    if handler is None:
        sys.stderr.write(f"error: no template handler for {template_path.name}\n")
        return 2

    try:
        source = template_path.read_text(encoding="utf-8", errors="replace")
    except OSError as exc:
        sys.stderr.write(f"error: {exc}\n")
        return 2

    template_name = name or _default_template_name(template_path, config)
    try:
        dependencies = template_dependencies(template_name, source, handler)
    except RenderParseError as exc:
        sys.stderr.write(f"error: {exc}\n")
        return 2

    for dependency in dependencies:
        sys.stdout.write(f"{dependency}\n")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    if args.command == "show":
        try:
            return _handle_show(args.template, args.name)
        except ConfigError as exc:
            sys.stderr.write(f"error: {exc}\n")
            return 2

    root = Path(args.root).expanduser().resolve()

    try:
        if args.command == "generate":
            return _handle_generate(root, args.out_dir)

        if args.command == "validate":
            return _handle_validate(root, args.artifacts_dir)

        if args.command == "verify":
            return _handle_verify(root, args.artifacts_dir)
    except ConfigError as exc:
        sys.stderr.write(f"error: {exc}\n")
        return 2

    raise AssertionError


if __name__ == "__main__":
    raise SystemExit(main())
