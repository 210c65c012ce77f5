"""
Utility functions for Word Stamper.
"""
