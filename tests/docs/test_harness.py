# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Tests for the book harness generator.

Sample extraction, module rendering, and regeneration behaviour (stale
modules removed, hand-written files left alone). The generated modules are
also executed in-process to show they actually run the samples.
"""

import textwrap
from pathlib import Path

import pytest

from optiloop.docs.harness import (
    GENERATED_MARKER,
    chapter_name,
    extract_samples,
    generate_harness,
    render_test_module,
)

CHAPTER = textwrap.dedent("""\
    # Chapter

    ```python
    x = 1 + 1
    assert x == 2
    ```

    ```python ignore
    this is not python
    ```

    ```rust
    fn main() {}
    ```

    ```
    plain block
    ```

    ```py
    y = 3
    ```
""")


def _load_module_namespace(path: Path) -> dict[str, object]:
    namespace: dict[str, object] = {"__name__": path.stem}
    exec(compile(path.read_text(encoding="utf-8"), str(path), "exec"), namespace)
    return namespace


class TestExtractSamples:
    def test_only_runnable_python_blocks(self) -> None:
        samples = extract_samples(CHAPTER, "chapter")

        assert [s.code for s in samples] == ["x = 1 + 1\nassert x == 2", "y = 3"]
        assert [s.index for s in samples] == [0, 1]
        assert samples[0].line == 3
        assert all(s.chapter == "chapter" for s in samples)

    def test_tilde_fences_and_info_attributes(self) -> None:
        markdown = "~~~python,should_panic\nz = 1\n~~~\n"
        samples = extract_samples(markdown, "c")
        assert [s.code for s in samples] == ["z = 1"]

    def test_unterminated_block_runs_to_end(self) -> None:
        samples = extract_samples("```python\na = 1\nb = 2\n", "c")
        assert samples[0].code == "a = 1\nb = 2"

    def test_no_samples(self) -> None:
        assert extract_samples("# Nothing to run here\n", "c") == []


class TestChapterName:
    def test_nested_path(self, tmp_path: Path) -> None:
        assert chapter_name(tmp_path, tmp_path / "core" / "Observers.md") == "core_observers"

    def test_special_characters(self, tmp_path: Path) -> None:
        assert chapter_name(tmp_path, tmp_path / "getting-started.md") == "getting_started"


class TestRenderTestModule:
    def test_one_test_per_sample(self) -> None:
        samples = extract_samples(CHAPTER, "chapter")
        source = render_test_module("chapter", Path("chapter.md"), samples)

        assert source.startswith(GENERATED_MARKER)
        assert "def test_chapter_sample_0() -> None:" in source
        assert "def test_chapter_sample_1() -> None:" in source
        assert "'chapter.md:3'" in source

    def test_rendered_tests_run_the_samples(self, tmp_path: Path) -> None:
        samples = extract_samples("```python\nassert 1 == 2, 'sample failed'\n```\n", "broken")
        module = tmp_path / "test_book_broken.py"
        module.write_text(render_test_module("broken", Path("broken.md"), samples), encoding="utf-8")

        namespace = _load_module_namespace(module)
        with pytest.raises(AssertionError, match="sample failed"):
            namespace["test_broken_sample_0"]()  # type: ignore[operator]


class TestGenerateHarness:
    def test_generates_one_module_per_chapter(self, tmp_path: Path) -> None:
        book = tmp_path / "book"
        book.mkdir()
        (book / "intro.md").write_text(CHAPTER, encoding="utf-8")
        (book / "empty.md").write_text("# No code\n", encoding="utf-8")
        out = tmp_path / "harness"

        result = generate_harness(book, out)

        assert [p.name for p in result.written] == ["test_book_intro.py"]
        assert result.samples == 2
        namespace = _load_module_namespace(out / "test_book_intro.py")
        namespace["test_intro_sample_0"]()  # type: ignore[operator]
        namespace["test_intro_sample_1"]()  # type: ignore[operator]

    def test_generation_is_deterministic(self, tmp_path: Path) -> None:
        book = tmp_path / "book"
        book.mkdir()
        (book / "intro.md").write_text(CHAPTER, encoding="utf-8")

        generate_harness(book, tmp_path / "a")
        generate_harness(book, tmp_path / "b")

        assert (tmp_path / "a" / "test_book_intro.py").read_bytes() == (
            tmp_path / "b" / "test_book_intro.py"
        ).read_bytes()

    def test_stale_generated_modules_are_removed(self, tmp_path: Path) -> None:
        book = tmp_path / "book"
        book.mkdir()
        (book / "intro.md").write_text(CHAPTER, encoding="utf-8")
        out = tmp_path / "harness"
        out.mkdir()
        stale = out / "test_book_gone.py"
        stale.write_text(GENERATED_MARKER + "\n", encoding="utf-8")
        handwritten = out / "test_book_handwritten.py"
        handwritten.write_text("def test_x() -> None:\n    pass\n", encoding="utf-8")

        result = generate_harness(book, out)

        assert result.removed == [stale]
        assert not stale.exists()
        assert handwritten.exists()

    def test_missing_book_raises(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            generate_harness(tmp_path / "nope", tmp_path / "out")

    def test_colliding_chapter_names_raise(self, tmp_path: Path) -> None:
        book = tmp_path / "book"
        (book / "core").mkdir(parents=True)
        (book / "core" / "observers.md").write_text(CHAPTER, encoding="utf-8")
        (book / "core_observers.md").write_text(CHAPTER, encoding="utf-8")
        out = tmp_path / "harness"

        with pytest.raises(ValueError, match="test_book_core_observers.py"):
            generate_harness(book, out)
        assert not out.exists()

    def test_repository_book_samples_are_all_collected(self, tmp_path: Path) -> None:
        book = Path(__file__).resolve().parents[2] / "docs" / "book"
        result = generate_harness(book, tmp_path)

        names = sorted(p.name for p in result.written)
        assert names == ["test_book_checkpointing.py", "test_book_introduction.py", "test_book_observers.py"]
        assert result.samples == 6
