"""Homelessness census questionnaire service.

Stores survey submissions and renders them as DOCX copies of the paper census
form, one at a time or as a zip archive.
"""

__version__ = "0.1.0"
