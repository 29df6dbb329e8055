"""Directory-level Highlight Post-Processor."""

from __future__ import annotations

import asyncio
import json
import os
import shutil
import tempfile
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, computed_field

from ..config import HTML_SUFFIXES, MAX_WORKERS
from .document import MalformedHTMLError, highlight_html
from .theme import ThemePair


class ResourceError(Exception):
    """Raised when the output root cannot be read or written."""


class FileOutcome(BaseModel):
    """Result of processing one Emitted Page."""

    path: str  # relative to the root, POSIX separators
    status: Literal["highlighted", "unchanged", "failed"]
    blocks_highlighted: int = 0
    blocks_skipped: int = 0
    warnings: list[str] = []
    error: str | None = None


class HighlightReport(BaseModel):
    """Per-file outcomes of one highlight run."""

    model_config = {"arbitrary_types_allowed": True}

    root: Path
    light: str
    dark: str
    default_color: str
    files: list[FileOutcome]

    @computed_field  # type: ignore[prop-decorator]
    @property
    def failed(self) -> list[str]:
        return [f.path for f in self.files if f.status == "failed"]

    @computed_field  # type: ignore[prop-decorator]
    @property
    def warnings(self) -> list[str]:
        return [f"{f.path}: {w}" for f in self.files for w in f.warnings]

    @property
    def ok(self) -> bool:
        return not self.failed

    def count(self, status: str) -> int:
        return sum(1 for f in self.files if f.status == status)


def process_directory(root: Path, pair: ThemePair, workers: int | None = None) -> HighlightReport:
    """Highlight every HTML file under ``root`` in place (sync wrapper)."""
    return asyncio.run(process_directory_async(root, pair, workers=workers))


async def process_directory_async(
    root: Path,
    pair: ThemePair,
    workers: int | None = None,
) -> HighlightReport:
    """Highlight every HTML file under ``root`` in place.

    Files are independent: each one is read, highlighted and atomically
    replaced on a worker thread, at most ``workers`` at a time. A failing
    file is reported and left untouched; other files continue.

    Args:
        root: Output directory of the Site Generator
        pair: Validated Theme Pair
        workers: Concurrency bound (defaults to TWOTONE_WORKERS / CPU count)

    Returns:
        HighlightReport with one outcome per file

    Raises:
        ResourceError: root missing, not a directory, or not readable/writable
    """
    root = _check_root(root)
    files = find_pages(root)

    limit = asyncio.Semaphore(max(1, int(workers or MAX_WORKERS)))

    async def _one(path: Path) -> FileOutcome:
        async with limit:
            return await asyncio.to_thread(process_file, path, pair, root)

    outcomes = await asyncio.gather(*(_one(p) for p in files))

    return HighlightReport(
        root=root,
        light=pair.light,
        dark=pair.dark,
        default_color=pair.default_color,
        files=sorted(outcomes, key=lambda o: o.path),
    )


def find_pages(root: Path) -> list[Path]:
    return sorted(
        p for p in root.rglob("*") if p.is_file() and p.suffix.lower() in HTML_SUFFIXES
    )


def process_file(path: Path, pair: ThemePair, root: Path | None = None) -> FileOutcome:
    """Highlight one page and replace it atomically when it changed."""
    rel = path.relative_to(root).as_posix() if root is not None else path.name

    try:
        source = path.read_bytes().decode("utf-8")
    except UnicodeDecodeError as e:
        return FileOutcome(path=rel, status="failed", error=f"not valid UTF-8: {e}")
    except OSError as e:
        return FileOutcome(path=rel, status="failed", error=f"read failed: {e}")

    try:
        page = highlight_html(source, pair)
    except MalformedHTMLError as e:
        return FileOutcome(path=rel, status="failed", error=f"malformed HTML: {e}")

    if page.changed:
        try:
            atomic_write_text(path, page.html)
        except OSError as e:
            return FileOutcome(
                path=rel,
                status="failed",
                blocks_highlighted=page.highlighted,
                blocks_skipped=page.skipped,
                warnings=page.warnings,
                error=f"write failed: {e}",
            )

    return FileOutcome(
        path=rel,
        status="highlighted" if page.changed else "unchanged",
        blocks_highlighted=page.highlighted,
        blocks_skipped=page.skipped,
        warnings=page.warnings,
    )


def atomic_write_text(path: Path, text: str) -> None:
    """Replace ``path`` with ``text`` so readers see old or new, never partial."""
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    tmp = Path(tmp_name)
    try:
        with os.fdopen(fd, "wb") as fh:
            fh.write(text.encode("utf-8"))
            fh.flush()
            os.fsync(fh.fileno())
        if path.exists():
            shutil.copymode(path, tmp)
        os.replace(tmp, path)
    except BaseException:
        tmp.unlink(missing_ok=True)
        raise


def write_report(report: HighlightReport, path: Path) -> Path:
    """Write the report as deterministic JSON."""
    payload = report.model_dump(mode="json")
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        json.dumps(payload, indent=2, sort_keys=True, ensure_ascii=False) + "\n",
        encoding="utf-8",
    )
    return path


def _check_root(root: Path) -> Path:
    root = root.resolve()
    if not root.exists():
        raise ResourceError(f"output directory does not exist: {root}")
    if not root.is_dir():
        raise ResourceError(f"output path is not a directory: {root}")
    if not os.access(root, os.R_OK | os.X_OK):
        raise ResourceError(f"output directory is not readable: {root}")
    if not os.access(root, os.W_OK):
        raise ResourceError(f"output directory is not writable: {root}")
    return root
