"""
Tests for the stamping tools and file utilities.
"""

import asyncio
import inspect
import json

from docx import Document

from word_stamper.tools.stamp_tools import get_paragraph_runs, replace_placeholders
from word_stamper.utils.file_utils import check_file_writeable, ensure_docx_extension


def make_document(path):
    """Save a document with a placeholder split over a bold and an italic run"""
    doc = Document()
    paragraph = doc.add_paragraph()
    paragraph.add_run("Dear ")
    paragraph.add_run("{{na").bold = True
    paragraph.add_run("me}}").italic = True
    paragraph.add_run(", welcome.")
    doc.save(str(path))
    return len(doc.paragraphs) - 1


class TestFileUtils:
    """Tests for file helpers"""

    def test_ensure_docx_extension(self):
        """The .docx extension is added only when missing"""
        assert ensure_docx_extension("letter") == "letter.docx"
        assert ensure_docx_extension("letter.docx") == "letter.docx"

    def test_new_file_in_writeable_directory(self, tmp_path):
        """A file that does not exist yet can be created"""
        assert check_file_writeable(str(tmp_path / "new.docx")) == (True, "")

    def test_existing_writeable_file(self, tmp_path):
        """An existing regular file is writeable"""
        path = tmp_path / "existing.docx"
        path.write_bytes(b"")
        is_writeable, _ = check_file_writeable(str(path))
        assert is_writeable


class TestReplacePlaceholders:
    """Tests for the replace_placeholders tool"""

    def test_replaces_and_saves_in_place(self, tmp_path):
        """The document is stamped and saved over the original"""
        path = tmp_path / "letter.docx"
        index = make_document(path)

        result = json.loads(asyncio.run(replace_placeholders(str(path), {"{{name}}": "Alice"})))

        assert result["success"] is True
        assert result["replacements"] == 1
        assert result["output"] == str(path)
        paragraph = Document(str(path)).paragraphs[index]
        assert paragraph.text == "Dear Alice, welcome."
        assert paragraph.runs[1].bold is True

    def test_output_filename_and_extension(self, tmp_path):
        """Results go to output_filename, with .docx added to both names"""
        path = tmp_path / "letter.docx"
        index = make_document(path)
        output = tmp_path / "stamped"

        result = json.loads(asyncio.run(replace_placeholders(
            str(tmp_path / "letter"), {"{{name}}": "Bob"},
            output_filename=str(output), remove_empty_runs=True,
        )))

        assert result["success"] is True
        assert result["output"] == str(output) + ".docx"
        stamped = Document(str(output) + ".docx").paragraphs[index]
        assert stamped.text == "Dear Bob, welcome."
        assert len(stamped.runs) == 3
        assert Document(str(path)).paragraphs[index].text == "Dear {{name}}, welcome."

    def test_missing_document(self, tmp_path):
        """A missing file is reported as an error"""
        result = json.loads(asyncio.run(replace_placeholders(str(tmp_path / "missing.docx"), {"a": "b"})))
        assert result["success"] is False
        assert "does not exist" in result["error"]

    def test_empty_replacements(self, tmp_path):
        """An empty mapping is rejected"""
        path = tmp_path / "letter.docx"
        make_document(path)
        result = json.loads(asyncio.run(replace_placeholders(str(path), {})))
        assert result["success"] is False

    def test_self_referencing_replacement(self, tmp_path):
        """A replacement containing its placeholder is reported, not applied"""
        path = tmp_path / "letter.docx"
        index = make_document(path)

        result = json.loads(asyncio.run(replace_placeholders(str(path), {"{{name}}": "<{{name}}>"})))

        assert result["success"] is False
        assert result["error"].startswith("Invalid replacements")
        assert Document(str(path)).paragraphs[index].text == "Dear {{name}}, welcome."


class TestGetParagraphRuns:
    """Tests for the get_paragraph_runs tool"""

    def test_reports_runs(self, tmp_path):
        """Run texts and offsets of the paragraph are returned"""
        path = tmp_path / "letter.docx"
        index = make_document(path)

        result = json.loads(asyncio.run(get_paragraph_runs(str(path), index)))

        assert result["success"] is True
        assert result["text"] == "Dear {{name}}, welcome."
        assert result["total_runs"] == 4
        assert [(r["start"], r["end"]) for r in result["runs"]] == [(0, 4), (5, 8), (9, 12), (13, 22)]
        assert result["runs"][1]["bold"] is True

    def test_invalid_index(self, tmp_path):
        """Out-of-range and non-integer indices are reported as errors"""
        path = tmp_path / "letter.docx"
        make_document(path)

        out_of_range = json.loads(asyncio.run(get_paragraph_runs(str(path), 99)))
        not_a_number = json.loads(asyncio.run(get_paragraph_runs(str(path), "first")))

        assert out_of_range["success"] is False
        assert "Invalid paragraph index" in out_of_range["error"]
        assert not_a_number["success"] is False


class TestToolRegistration:
    """Tests for the shape hosts rely on when registering the tools"""

    def test_tools_are_coroutine_functions(self):
        """Both tools are async callables documented for registration"""
        assert inspect.iscoroutinefunction(replace_placeholders)
        assert inspect.iscoroutinefunction(get_paragraph_runs)
        assert replace_placeholders.__doc__
        assert get_paragraph_runs.__doc__
