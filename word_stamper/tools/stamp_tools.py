"""
Placeholder stamping tools for Word Stamper.

These tools provide high-level interfaces for filling placeholders in Word
documents and inspecting how paragraph text is split into runs. They are
plain coroutines returning JSON strings, to be registered by a host server.
"""
import os
import json
from typing import Dict, Optional
from docx import Document

from word_stamper.utils.file_utils import check_file_writeable, ensure_docx_extension
from word_stamper.utils.document_utils import describe_paragraph_runs, stamp_document


async def replace_placeholders(filename: str, replacements: Dict[str, str],
                               output_filename: Optional[str] = None,
                               remove_empty_runs: bool = False) -> str:
    """
    Replace placeholders in a Word document, keeping the formatting of the text around them.

    Args:
        filename: Path to the Word document
        replacements: Mapping of placeholder text to replacement text
        output_filename: Where to save the result (optional, defaults to filename)
        remove_empty_runs: If True, runs left without text are removed

    Returns:
        JSON string with the number of replacements made
    """
    filename = ensure_docx_extension(filename)
    output_filename = ensure_docx_extension(output_filename) if output_filename else filename

    if not os.path.exists(filename):
        return json.dumps({
            'success': False,
            'error': f'Document {filename} does not exist'
        }, indent=2)

    if not isinstance(replacements, dict) or not replacements:
        return json.dumps({
            'success': False,
            'error': 'Replacements must be a non-empty mapping of placeholder to text'
        }, indent=2)

    is_writeable, error_message = check_file_writeable(output_filename)
    if not is_writeable:
        return json.dumps({
            'success': False,
            'error': f'Cannot write document: {error_message}'
        }, indent=2)

    try:
        doc = Document(filename)
        count = stamp_document(doc, replacements, remove_empty_runs=remove_empty_runs)
        doc.save(output_filename)

        return json.dumps({
            'success': True,
            'replacements': count,
            'output': output_filename
        }, indent=2)

    except ValueError as e:
        return json.dumps({
            'success': False,
            'error': f'Invalid replacements: {str(e)}'
        }, indent=2)
    except Exception as e:
        return json.dumps({
            'success': False,
            'error': f'Failed to replace placeholders: {str(e)}'
        }, indent=2)


async def get_paragraph_runs(filename: str, paragraph_index: int) -> str:
    """
    Show how the text of a body paragraph is split into runs.

    Args:
        filename: Path to the Word document
        paragraph_index: Index of the paragraph (0-based)

    Returns:
        JSON string with the paragraph text and the offsets of each run
    """
    filename = ensure_docx_extension(filename)

    try:
        paragraph_index = int(paragraph_index)
    except (ValueError, TypeError):
        return json.dumps({
            'success': False,
            'error': 'Invalid parameter: paragraph_index must be an integer'
        }, indent=2)

    if not os.path.exists(filename):
        return json.dumps({
            'success': False,
            'error': f'Document {filename} does not exist'
        }, indent=2)

    try:
        doc = Document(filename)

        if paragraph_index < 0 or paragraph_index >= len(doc.paragraphs):
            return json.dumps({
                'success': False,
                'error': f'Invalid paragraph index. Document has {len(doc.paragraphs)} paragraphs (0-{len(doc.paragraphs) - 1}).'
            }, indent=2)

        description = describe_paragraph_runs(doc.paragraphs[paragraph_index])

        return json.dumps({
            'success': True,
            'paragraph_index': paragraph_index,
            'text': description['text'],
            'runs': description['runs'],
            'total_runs': len(description['runs'])
        }, indent=2)

    except Exception as e:
        return json.dumps({
            'success': False,
            'error': f'Failed to read paragraph runs: {str(e)}'
        }, indent=2)
