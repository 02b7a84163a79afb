"""
Inkwell

Backend for a collaborative story editor: documents, story mode and mood,
characters, plot, setting and themes, with AI-assisted rewriting and
literary analysis.
"""

__version__ = "0.1.0"
