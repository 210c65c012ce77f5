"""
High-level tools for Word Stamper.
"""
