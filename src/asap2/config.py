"""
Output formatting options.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class FormatOptions:
    """
    Immutable formatting settings for the encoder and the file helpers.

    Attributes:
        indent: String written once per nesting level
        newline: Line terminator
        comments: Write the declared field and collection comments
        encoding: Text encoding used when reading or writing files
    """
    indent: str = "\t"
    newline: str = "\n"
    comments: bool = False
    encoding: str = "utf-8"
