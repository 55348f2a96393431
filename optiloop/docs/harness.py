# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Test harness generator for the code samples in the documentation book.

Every fenced ```python block in `docs/book/**/*.md` becomes one pytest test
that executes the block in a fresh namespace. Blocks whose info string
carries `ignore` (```python ignore) are skipped, for snippets that are
illustrative only. One test module per chapter:

    docs/book/observers.md  ->  tests/book/test_book_observers.py

Generation is deterministic: the same book produces byte-identical modules,
and modules for chapters that no longer exist are deleted.
"""

import logging
import re
from dataclasses import dataclass
from pathlib import Path

from optiloop.logging.logger import get_logger
from optiloop.utils.filesystem import atomic_write, safe_delete, safe_read

logger: logging.Logger = get_logger(__name__)

GENERATED_MARKER = "# Generated by `optiloop harness`. Do not edit."

_FENCE_OPEN = re.compile(r"^(?P<indent>\s*)(?P<fence>`{3,}|~{3,})(?P<info>[^`]*)$")
_NON_IDENT = re.compile(r"[^0-9a-zA-Z_]+")


@dataclass(frozen=True)
class CodeSample:
    """One runnable code block from a chapter."""

    chapter: str
    index: int
    line: int
    code: str


@dataclass(frozen=True)
class HarnessResult:
    written: list[Path]
    removed: list[Path]
    samples: int


def _info_words(info: str) -> list[str]:
    return [w for w in re.split(r"[\s,{}]+", info.strip()) if w]


def extract_samples(markdown: str, chapter: str) -> list[CodeSample]:
    """
    Pull runnable Python blocks out of one Markdown document.

    A block runs if the first word of its info string is `python` or `py`
    and `ignore` isn't among the other words. Unterminated blocks are
    treated as running to the end of the document.
    """
    samples: list[CodeSample] = []
    lines = markdown.splitlines()
    i = 0
    while i < len(lines):
        match = _FENCE_OPEN.match(lines[i])
        if match is None:
            i += 1
            continue

        fence = match.group("fence")
        indent = len(match.group("indent"))
        words = _info_words(match.group("info"))
        start_line = i + 1

        body: list[str] = []
        i += 1
        while i < len(lines) and not lines[i].strip().startswith(fence):
            body.append(lines[i][indent:] if lines[i][:indent].strip() == "" else lines[i])
            i += 1
        i += 1  # closing fence

        runnable = bool(words) and words[0].lower() in ("python", "py") and "ignore" not in words[1:]
        if runnable:
            samples.append(
                CodeSample(chapter=chapter, index=len(samples), line=start_line, code="\n".join(body))
            )
    return samples


def chapter_name(book_dir: Path, path: Path) -> str:
    """`docs/book/core/observers.md` -> `core_observers`."""
    relative = path.relative_to(book_dir).with_suffix("")
    name = _NON_IDENT.sub("_", "_".join(relative.parts)).strip("_").lower()
    return name or "index"


def render_test_module(chapter: str, source: Path, samples: list[CodeSample]) -> str:
    """Render the pytest module for one chapter."""
    out = [
        GENERATED_MARKER,
        f'"""Code samples of {source.as_posix()}."""',
        "",
        "",
        "def _run(code: str, name: str) -> None:",
        "    namespace = {\"__name__\": name}",
        "    exec(compile(code, name, \"exec\"), namespace)",
        "",
    ]
    for sample in samples:
        location = f"{source.as_posix()}:{sample.line}"
        out.extend(
            [
                "",
                f"def test_{chapter}_sample_{sample.index}() -> None:",
                f"    _run({sample.code!r}, {location!r})",
            ]
        )
    return "\n".join(out) + "\n"


def generate_harness(book_dir: Path, output_dir: Path) -> HarnessResult:
    """
    Regenerate the whole harness.

    Args:
        book_dir: Root of the Markdown book.
        output_dir: Where the test modules go. Only files carrying the
                    generated marker are ever deleted from here.

    Raises:
        FileNotFoundError: If `book_dir` doesn't exist.
        ValueError: If two chapters map to the same module name. Nothing is
                    written in that case.
    """
    if not book_dir.is_dir():
        raise FileNotFoundError(f"Book directory not found: {book_dir}")

    chapters: dict[str, Path] = {}
    for path in sorted(book_dir.rglob("*.md")):
        chapter = chapter_name(book_dir, path)
        if chapter in chapters:
            raise ValueError(
                f"Chapters {chapters[chapter]} and {path} both map to test_book_{chapter}.py; rename one of them"
            )
        chapters[chapter] = path

    written: list[Path] = []
    total = 0
    for chapter, path in chapters.items():
        samples = extract_samples(safe_read(path), chapter)
        if not samples:
            continue
        target = output_dir / f"test_book_{chapter}.py"
        atomic_write(target, render_test_module(chapter, path.relative_to(book_dir), samples))
        written.append(target)
        total += len(samples)
        logger.debug("Harness module written", extra={"chapter": chapter, "samples": len(samples)})

    removed: list[Path] = []
    if output_dir.is_dir():
        keep = {p.resolve() for p in written}
        for stale in sorted(output_dir.glob("test_book_*.py")):
            if stale.resolve() in keep:
                continue
            if safe_read(stale).startswith(GENERATED_MARKER) and safe_delete(stale):
                removed.append(stale)

    logger.info(
        "Book harness generated",
        extra={"modules": len(written), "samples": total, "removed": len(removed)},
    )
    return HarnessResult(written=written, removed=removed, samples=total)
