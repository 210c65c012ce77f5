"""
Word Stamper: placeholder replacement across Word document runs.
"""
