"""Exceptions raised by DocTransplant.

Alignment ambiguity is never an exception: it is reported through
``AlignmentResult.unmatched``. Only structural problems with the input
archive or its markup, and an explicit abort at the review step, are raised.
"""

from __future__ import annotations


class DTPError(Exception):
    """Base class for all DocTransplant errors."""


class PackageError(DTPError):
    """The archive is unreadable, unsupported, or lacks a required part."""


class MarkupError(DTPError):
    """A text-bearing part could not be parsed as XML."""


class TranslationError(DTPError):
    """The translation file could not be read as text."""


class RunAborted(DTPError):
    """The review step aborted the run before any mutation happened."""
