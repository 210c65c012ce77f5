"""
Run aggregation for Word paragraphs.

A run is a region of text within a docx paragraph sharing one set of
properties. Word processors split a paragraph into runs rather freely, so
a placeholder may be spread over any number of them. The classes here
treat a paragraph's runs as one addressable string: add the runs with
add_run(), modify the aggregated text with replace_first(), then read the
result back through the text and runs properties.
"""
from typing import Any, List, Optional

from docx.oxml.ns import qn
from docx.text.run import Run


def run_text(run: Any) -> str:
    """
    Get the text of a run as seen by the aggregator.

    For python-docx runs this is the content of the run's w:t elements only;
    tabs, breaks, drawings and other run content do not count as text.
    Any other object is read through its text attribute.
    """
    r = getattr(run, "_r", None)
    if r is not None:
        return "".join(t.text or "" for t in r.findall(qn('w:t')))
    return getattr(run, "text", None) or ""


def _splice_text_elements(r, start: int, end: int, replacement: str) -> None:
    # Edits w:t elements in place so every other child of the run survives.
    pending = replacement
    position = 0
    for t in r.findall(qn('w:t')):
        text = t.text or ""
        t_start = position
        t_end = position + len(text)
        position = t_end
        cut_start = min(max(start, t_start), t_end) - t_start
        cut_end = min(max(end, t_start), t_end) - t_start
        if pending is not None and t_start <= start <= t_end:
            new_text = text[:cut_start] + pending + text[cut_end:]
            pending = None
        elif cut_end > cut_start:
            new_text = text[:cut_start] + text[cut_end:]
        else:
            continue
        t.text = new_text
        if new_text != new_text.strip():
            t.set(qn('xml:space'), 'preserve')
    if pending:
        r.add_t(pending)


def splice_run_text(run: Any, start: int, end: int, replacement: str) -> None:
    """
    Replace characters [start, end) of a run's text.

    python-docx runs are edited at the w:t level, leaving formatting, breaks,
    drawings, symbols and references untouched. Other objects get their
    text attribute rewritten.

    Args:
        run: The run to edit
        start: First local character position to replace
        end: Local position just past the last character to replace
        replacement: Text inserted at start
    """
    r = getattr(run, "_r", None)
    if r is not None:
        _splice_text_elements(r, start, end, replacement)
        return
    text = run_text(run)
    run.text = text[:start] + replacement + text[end:]


def paragraph_runs(paragraph) -> List[Run]:
    """
    Get every run of a python-docx paragraph in document order.

    Unlike Paragraph.runs this includes runs nested in hyperlinks, content
    controls, tracked insertions and similar wrappers. Runs inside text boxes
    anchored in a run belong to another paragraph and are left out.

    Args:
        paragraph: Paragraph object

    Returns:
        List of Run objects
    """
    p = paragraph._p
    runs = []
    for r in p.iter(qn('w:r')):
        parent = r.getparent()
        while parent is not p and parent.tag != qn('w:r'):
            parent = parent.getparent()
        if parent is p:
            runs.append(Run(r, paragraph))
    return runs


class IndexedRun:
    """A run together with the inclusive range it owns in the aggregated text."""

    def __init__(self, start_index: int, end_index: int, run: Any):
        self.start_index = start_index
        self.end_index = end_index
        self.run = run

    def is_touched_by_range(self, range_start: int, range_end: int) -> bool:
        """
        Check whether the given inclusive range overlaps this run.

        Args:
            range_start: First absolute offset of the range
            range_end: Last absolute offset of the range

        Returns:
            True if at least one offset is shared
        """
        if self.end_index < self.start_index:
            # run holds no text, nothing can overlap it
            return False
        return self.start_index <= range_end and self.end_index >= range_start

    def replace(self, range_start: int, range_end: int, replacement: str) -> None:
        """
        Replace the part of this run's text that lies within an absolute range.

        The range is clamped to the run's own bounds, so callers may pass a
        range that extends past either end of the run. Text outside the
        range is kept; the run's formatting is not touched.

        Args:
            range_start: First absolute offset to replace
            range_end: Last absolute offset to replace
            replacement: Text inserted where the range began
        """
        local_start = max(range_start, self.start_index) - self.start_index
        local_end = min(range_end, self.end_index) - self.start_index
        splice_run_text(self.run, local_start, local_end + 1, replacement)

    def __repr__(self):
        return f"IndexedRun({self.start_index}, {self.end_index}, {run_text(self.run)!r})"


class RunAggregator:
    """
    Aggregates the runs of one paragraph so they can be edited as a single text.

    Runs without text are ignored. Once replace_first() has been called the
    aggregator is in editing mode and no more runs may be added.
    """

    def __init__(self, runs: Optional[List[Any]] = None):
        self.current_position = 0
        self._indexed_runs: List[IndexedRun] = []
        self._editing = False
        for run in runs or []:
            self.add_run(run)

    @classmethod
    def from_paragraph(cls, paragraph) -> "RunAggregator":
        """Build an aggregator over all runs of a python-docx paragraph, nested ones included."""
        return cls(paragraph_runs(paragraph))

    def add_run(self, run: Any) -> None:
        """
        Add a run to the aggregation.

        Args:
            run: A python-docx Run, or any object with a writable text attribute

        Raises:
            RuntimeError: If text has already been replaced in this aggregator
        """
        if self._editing:
            raise RuntimeError("Cannot add runs after replacements have started")
        text = run_text(run)
        if not text:
            return
        start_index = self.current_position
        end_index = self.current_position + len(text) - 1
        self._indexed_runs.append(IndexedRun(start_index, end_index, run))
        self.current_position = end_index + 1

    @property
    def text(self) -> str:
        """The current text of all aggregated runs."""
        return "".join(run_text(indexed.run) for indexed in self._indexed_runs)

    @property
    def runs(self) -> List[Any]:
        """
        The aggregated runs in document order.

        Runs emptied by a replacement are still included; removing them from
        the paragraph is up to the caller.
        """
        return [indexed.run for indexed in self._indexed_runs]

    @property
    def indexed_runs(self) -> List[IndexedRun]:
        return list(self._indexed_runs)

    def replace_first(self, placeholder: str, replacement: str) -> None:
        """
        Replace the first occurrence of a placeholder in the aggregated text.

        The whole replacement goes into the first run touched by the match.
        The matched part of the last touched run is removed and any runs in
        between are emptied. Nothing happens if the placeholder is absent.

        Args:
            placeholder: Literal text to look for
            replacement: Text to put in its place

        Raises:
            ValueError: If the placeholder is empty
        """
        if not placeholder:
            raise ValueError("Placeholder must not be empty")
        self._editing = True
        self._reindex()

        text = self.text
        match_start = text.find(placeholder)
        if match_start == -1:
            return
        match_end = match_start + len(placeholder) - 1
        affected_runs = self._get_affected_runs(match_start, match_end)

        last = len(affected_runs) - 1
        for position, indexed in enumerate(affected_runs):
            if position == 0:
                indexed.replace(match_start, match_end, replacement)
            elif position == last:
                indexed.replace(indexed.start_index, match_end, "")
            else:
                splice_run_text(indexed.run, 0, len(run_text(indexed.run)), "")

    def _get_affected_runs(self, start_index: int, end_index: int) -> List[IndexedRun]:
        return [
            indexed for indexed in self._indexed_runs
            if indexed.is_touched_by_range(start_index, end_index)
        ]

    def _reindex(self) -> None:
        # Earlier replacements change run lengths; offsets must match the
        # current texts before the next match is mapped onto the runs.
        position = 0
        for indexed in self._indexed_runs:
            length = len(run_text(indexed.run))
            indexed.start_index = position
            indexed.end_index = position + length - 1
            position += length
        self.current_position = position
