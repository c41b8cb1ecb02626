"""Determinism verification for viewdeps artifacts."""

from __future__ import annotations

import filecmp
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from artifacts.write import generate_all_artifacts

if TYPE_CHECKING:
    from rules.config import ViewDepsConfig


@dataclass(frozen=True)
class DeterminismResult:
    ok: bool
    mismatches: tuple[str, ...] = field(default_factory=tuple)
    missing: tuple[str, ...] = field(default_factory=tuple)
    extra: tuple[str, ...] = field(default_factory=tuple)


def _list_relative_files(root: Path) -> set[str]:
    return {
        path.relative_to(root).as_posix() for path in root.rglob("*") if path.is_file()
    }


def verify_determinism(
    *,
    root: Path,
    artifacts_dir: Path,
    config: ViewDepsConfig | None = None,
) -> DeterminismResult:
    """Check that existing artifacts match a fresh generation byte for byte.

    Regenerates all artifacts into a temporary directory and compares the
    two directories by relative path, so the result does not depend on
    where either directory lives.

    Raises:
        FileNotFoundError: If artifacts_dir does not exist.
        NotADirectoryError: If artifacts_dir is not a directory.
    """
    if not artifacts_dir.exists():
        msg = f"Artifacts directory does not exist: {artifacts_dir}"
        raise FileNotFoundError(msg)
    if not artifacts_dir.is_dir():
        msg = f"Artifacts path is not a directory: {artifacts_dir}"
        raise NotADirectoryError(msg)

    with tempfile.TemporaryDirectory() as temp_dir:
        temp_path = Path(temp_dir)
        if config is None:
            generate_all_artifacts(root=root, out_dir=temp_path)
        else:
            generate_all_artifacts(root=root, out_dir=temp_path, config=config)

        original_files = _list_relative_files(artifacts_dir)
        regenerated_files = _list_relative_files(temp_path)

        mismatches = [
            rel_path
            for rel_path in sorted(original_files & regenerated_files)
            if not filecmp.cmp(
                artifacts_dir / rel_path, temp_path / rel_path, shallow=False
            )
        ]

    missing = sorted(original_files - regenerated_files)
    extra = sorted(regenerated_files - original_files)

    return DeterminismResult(
        ok=not missing and not extra and not mismatches,
        mismatches=tuple(mismatches),
        missing=tuple(missing),
        extra=tuple(extra),
    )
