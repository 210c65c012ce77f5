"""
Core run aggregation for Word Stamper.
"""
from word_stamper.core.run_aggregator import (
    IndexedRun,
    RunAggregator,
    paragraph_runs,
    run_text,
    splice_run_text,
)
