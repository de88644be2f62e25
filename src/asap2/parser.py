"""
Top-level entry points: read A2L text or files into the document model.

Usage:
    doc = A2LParser().parse_file("demo.a2l")
    module = doc.project.modules["Engine"]
    print(module.measurements["RPM"].bit_mask.value)
"""

from __future__ import annotations

import logging
from contextlib import nullcontext
from pathlib import Path

from .a2l_model import Asap2File
from .base import Node, SequenceAllocator, build_context
from .decoder import Decoder
from .encoder import dumps
from .lexer import tokenize
from .schema import grammar_keywords, verbatim_keywords

logger = logging.getLogger(__name__)

__all__ = ["A2LParser", "loads", "dumps"]


class A2LParser:
    """
    Converts A2L text into a tree of typed nodes.

    Args:
        allocator: Sequence allocator owned by the documents this parser
            builds; the currently active one is used if omitted
    """

    def __init__(self, allocator: SequenceAllocator | None = None) -> None:
        self.allocator = allocator

    def parse_file(self, path: str | Path, node_type: type = Asap2File,
                   encoding: str = "utf-8") -> Node:
        """
        Parse an A2L file from disk.

        Args:
            path: Path to the A2L file to parse
            node_type: Node type the file holds (a whole document by default)
            encoding: Text encoding of the file

        Returns:
            The decoded node

        Raises:
            IOError: If the file cannot be read
            DecodeError: If the content does not follow the grammar
        """
        try:
            text = Path(path).read_text(encoding=encoding)
        except OSError as e:
            raise IOError(f"Failed to read A2L file {path}: {e}") from e
        node = self.parse_text(text, node_type)
        logger.info("Parsed %s", path)
        return node

    def parse_text(self, text: str, node_type: type = Asap2File) -> Node:
        tokens = tokenize(text, grammar_keywords(), verbatim_keywords())
        scope = build_context(self.allocator) if self.allocator is not None else nullcontext()
        with scope:
            return Decoder(tokens).decode(node_type)


def loads(text: str, node_type: type = Asap2File) -> Node:
    """Decode A2L text into a node of ``node_type``."""
    return A2LParser().parse_text(text, node_type)
