"""
cms-import: resumable bulk import of CMS story exports into the article store.
"""

__version__ = "0.1.0"
