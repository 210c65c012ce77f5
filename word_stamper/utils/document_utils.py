"""
Document utility functions for Word Stamper.

Placeholder replacement over whole documents, built on RunAggregator so
that placeholders split across differently formatted runs are found and
replaced without touching the formatting of the surrounding text.
"""
import os
from typing import Any, Dict, Iterator, List

from docx.oxml.ns import qn

from word_stamper.core.run_aggregator import RunAggregator, run_text


def _dbg(msg):
    # Lightweight debug logging (enable by setting env WORD_STAMPER_DEBUG=1)
    if os.getenv('WORD_STAMPER_DEBUG', '0') == '1':
        print(f"[stamp] {msg}")


def is_toc_paragraph(para):
    """Return True if the paragraph has a table of contents (TOC) style."""
    return bool(para.style and para.style.name.upper().startswith("TOC"))


def _iter_container_paragraphs(container, seen_cells):
    for para in container.paragraphs:
        yield para
    for table in container.tables:
        for row in table.rows:
            for cell in row.cells:
                # Merged cells show up once per grid column they span
                if cell._tc in seen_cells:
                    continue
                seen_cells.add(cell._tc)
                yield from _iter_container_paragraphs(cell, seen_cells)


def iter_document_paragraphs(doc) -> Iterator[Any]:
    """
    Iterate over every paragraph of a document that can hold placeholders.

    Body paragraphs come first, then paragraphs inside tables (nested tables
    included), then headers and footers. Headers and footers linked to the
    previous section are skipped since they share that section's content.

    Args:
        doc: Document object

    Yields:
        Paragraph objects
    """
    seen_cells = set()
    yield from _iter_container_paragraphs(doc, seen_cells)

    for section in doc.sections:
        parts = [
            section.header, section.first_page_header, section.even_page_header,
            section.footer, section.first_page_footer, section.even_page_footer,
        ]
        for part in parts:
            if part.is_linked_to_previous:
                continue
            yield from _iter_container_paragraphs(part, seen_cells)


def _check_replacement(placeholder: str, replacement: str) -> None:
    if not placeholder:
        raise ValueError("Placeholder must not be empty")
    if placeholder in replacement:
        raise ValueError(f"Replacement for '{placeholder}' contains the placeholder itself")


def prune_empty_runs(runs: List[Any]) -> int:
    """
    Remove runs that no longer hold any content from their paragraph.

    A run counts as empty when its text is empty and it has nothing besides
    run properties and empty text elements, so runs carrying drawings,
    breaks or field characters are kept.

    Args:
        runs: python-docx Run objects, typically RunAggregator.runs

    Returns:
        Number of runs removed
    """
    removed = 0
    for run in runs:
        if run_text(run):
            continue
        r = run._r
        has_content = False
        for child in r:
            if child.tag == qn('w:rPr'):
                continue
            if child.tag == qn('w:t') and not child.text:
                continue
            has_content = True
            break
        if has_content:
            continue
        parent = r.getparent()
        if parent is not None:
            parent.remove(r)
            removed += 1
    return removed


def replace_placeholder_in_paragraph(paragraph, placeholder: str, replacement: str,
                                     remove_empty_runs: bool = False) -> int:
    """
    Replace every occurrence of a placeholder in a paragraph.

    Occurrences may span any number of runs. The replacement text takes the
    formatting of the run in which the placeholder starts.

    Args:
        paragraph: Paragraph object
        placeholder: Literal text to replace
        replacement: Text to replace it with
        remove_empty_runs: If True, runs emptied by the replacement are removed

    Returns:
        Number of replacements made

    Raises:
        ValueError: If the placeholder is empty or occurs in its own replacement
    """
    _check_replacement(placeholder, replacement)

    aggregator = RunAggregator.from_paragraph(paragraph)
    occurrences = aggregator.text.count(placeholder)
    if not occurrences:
        return 0

    for _ in range(occurrences):
        aggregator.replace_first(placeholder, replacement)
    _dbg(f"{occurrences} x '{placeholder}' over {len(aggregator.runs)} run(s)")

    if remove_empty_runs:
        removed = prune_empty_runs(aggregator.runs)
        _dbg(f"removed {removed} empty run(s)")
    return occurrences


def stamp_document(doc, replacements: Dict[str, str], remove_empty_runs: bool = False) -> int:
    """
    Replace placeholders throughout the document, skipping Table of Contents (TOC) paragraphs.

    Args:
        doc: Document object
        replacements: Mapping of placeholder text to replacement text
        remove_empty_runs: If True, runs emptied by the replacements are removed

    Returns:
        Number of replacements made

    Mappings are applied one after another to each paragraph, so a
    replacement containing any placeholder of the mapping is rejected;
    otherwise {"A": "B", "B": "C"} would turn "A" into "C".

    Raises:
        ValueError: If a placeholder is empty or occurs in any replacement
    """
    mapping = {placeholder: str(value) for placeholder, value in replacements.items()}
    for placeholder, value in mapping.items():
        _check_replacement(placeholder, value)
        for other in mapping:
            if other != placeholder and other in value:
                raise ValueError(
                    f"Replacement for '{placeholder}' contains placeholder '{other}'"
                )

    count = 0
    for para in iter_document_paragraphs(doc):
        if is_toc_paragraph(para):
            continue
        for placeholder, value in mapping.items():
            count += replace_placeholder_in_paragraph(para, placeholder, value, remove_empty_runs)

    _dbg(f"Total replacements: {count}")
    return count


def describe_paragraph_runs(paragraph) -> Dict[str, Any]:
    """
    Describe how a paragraph's text is split into runs.

    Args:
        paragraph: Paragraph object

    Returns:
        Dictionary with the aggregated text and, for each run holding text,
        its text and inclusive start/end offsets in the aggregated text
    """
    aggregator = RunAggregator.from_paragraph(paragraph)
    return {
        "text": aggregator.text,
        "runs": [
            {
                "index": i,
                "text": run_text(indexed.run),
                "start": indexed.start_index,
                "end": indexed.end_index,
                "bold": indexed.run.bold,
                "italic": indexed.run.italic,
            }
            for i, indexed in enumerate(aggregator.indexed_runs)
        ],
    }
