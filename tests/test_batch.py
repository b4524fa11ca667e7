"""Tests for scanning folders and rewriting documents with a text generator."""

import asyncio

import pytest

from ooxml_textpatch import Flavor, open_document, rewrite_document, rewrite_documents, scan_documents


async def shout(text: str) -> str:
    """Upper-case every line except slide headers."""
    await asyncio.sleep(0)
    return "\n".join(
        line if line.startswith("Slide ") else line.upper() for line in text.split("\n")
    )


async def failing(text: str) -> str:
    raise RuntimeError("generator unavailable")


class TestScanDocuments:
    """Tests for scan_documents()."""

    def test_finds_packages_recursively(self, tmp_path, hello_world_docx, three_slide_pptx):
        """Word and PowerPoint files are found; lock files and other files are not."""
        (tmp_path / "b.pptx").write_bytes(three_slide_pptx)
        (tmp_path / "a.docx").write_bytes(hello_world_docx)
        (tmp_path / "~$a.docx").write_bytes(b"lock")
        (tmp_path / "notes.txt").write_text("not a document")
        (tmp_path / "sub").mkdir()
        (tmp_path / "sub" / "c.docx").write_bytes(hello_world_docx)

        entries = scan_documents(tmp_path)

        assert [entry.name for entry in entries] == ["a.docx", "b.pptx", "c.docx"]
        assert entries[1].flavor is Flavor.PRESENTATION
        assert entries[0].size == len(hello_world_docx)
        assert entries[2].path == tmp_path / "sub" / "c.docx"

    def test_empty_folder(self, tmp_path):
        assert scan_documents(tmp_path) == []


class TestRewriteDocument:
    """Tests for rewrite_document()."""

    def test_rewrite_word(self, make_docx):
        """Generated text replaces each paragraph."""
        data = make_docx([["hello"], ["world"]])
        output, result = asyncio.run(rewrite_document(data, "docx", shout))
        assert not result.fallback
        assert result.changed == 2
        assert open_document(output).segments() == ["HELLO", "WORLD"]

    def test_rewrite_presentation(self, three_slide_pptx):
        """Slide headers keep the layout aligned with the slots."""
        output, result = asyncio.run(rewrite_document(three_slide_pptx, None, shout))
        assert not result.fallback
        assert open_document(output).segments() == ["INTRO", "FIRST POINT", "SECOND POINT", "THANKS"]

    def test_generator_error_propagates(self, hello_world_docx):
        with pytest.raises(RuntimeError, match="unavailable"):
            asyncio.run(rewrite_document(hello_world_docx, None, failing))


class TestRewriteDocuments:
    """Tests for rewrite_documents()."""

    def test_failures_are_isolated(self, tmp_path, make_docx, three_slide_pptx):
        """A broken document does not stop the others."""
        good_docx = tmp_path / "good.docx"
        good_docx.write_bytes(make_docx([["first"], ["second"]]))
        good_pptx = tmp_path / "deck.pptx"
        good_pptx.write_bytes(three_slide_pptx)
        broken = tmp_path / "broken.docx"
        broken.write_bytes(b"definitely not a zip file")

        out_dir = tmp_path / "out"
        results = asyncio.run(
            rewrite_documents([good_docx, broken, good_pptx], shout, output_dir=out_dir, concurrency=2)
        )

        assert [result.path for result in results] == [good_docx, broken, good_pptx]
        assert [result.success for result in results] == [True, False, True]
        assert results[1].error
        assert results[1].output is None
        assert not (out_dir / "broken.docx").exists()

        assert results[0].output == out_dir / "good.docx"
        assert results[0].slots == 2
        assert open_document(out_dir / "good.docx").segments() == ["FIRST", "SECOND"]
        assert open_document(out_dir / "deck.pptx").segments()[0] == "INTRO"

    def test_rewrite_in_place(self, tmp_path, make_docx):
        """Without an output folder, documents are rewritten in place."""
        path = tmp_path / "memo.docx"
        path.write_bytes(make_docx([["quiet"]]))
        results = asyncio.run(rewrite_documents([path], shout))
        assert results[0].success
        assert results[0].output == path
        assert open_document(path).segments() == ["QUIET"]

    def test_generator_failure_recorded(self, tmp_path, hello_world_docx):
        """A generator error fails only that document and leaves the source intact."""
        path = tmp_path / "hello.docx"
        path.write_bytes(hello_world_docx)
        results = asyncio.run(rewrite_documents([path], failing))
        assert not results[0].success
        assert "generator unavailable" in results[0].error
        assert path.read_bytes() == hello_world_docx

    def test_unsupported_extension(self, tmp_path):
        """Files that are not Word or PowerPoint packages fail cleanly."""
        path = tmp_path / "sheet.xlsx"
        path.write_bytes(b"PK")
        results = asyncio.run(rewrite_documents([path], shout))
        assert not results[0].success
