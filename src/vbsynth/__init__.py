"""vbsynth - code block synthesis for VBA refactorings.

vbsynth assembles syntactically correct VBA fragments (member signatures,
property accessors, user-defined types) from a resolved declaration model.
"""

from .builder import CodeBuilder

__version__ = "0.1.0"

__all__ = ["CodeBuilder", "__version__"]
