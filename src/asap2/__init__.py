"""
ASAP2 (A2L) document model with a schema-driven encoder and decoder.
"""

from .a2l_model import (
    Annotation,
    Asap2File,
    Asap2Version,
    A2mlVersion,
    BitMask,
    Characteristic,
    CompuMethod,
    CompuVTab,
    CompuVTabData,
    CompuVTabRange,
    CompuVTabRangeData,
    Function,
    Group,
    Header,
    IfData,
    Measurement,
    MemoryLayout,
    MemorySegment,
    ModCommon,
    ModPar,
    Module,
    Project,
)
from .base import Node, NodeDict, SequenceAllocator, build_context, current_allocator
from .config import FormatOptions
from .decoder import Decoder
from .encoder import encode, validate
from .errors import Asap2Error, DecodeError, EncodeError, LexError, SchemaError
from .parser import A2LParser, dumps, loads
from .schema import Role, asap2_node, element, schema_of
from .writer import A2lWriter

__all__ = [
    "A2LParser",
    "loads",
    "dumps",
    "encode",
    "validate",
    "Decoder",
    "A2lWriter",
    "FormatOptions",
    "Node",
    "NodeDict",
    "SequenceAllocator",
    "build_context",
    "current_allocator",
    "Role",
    "asap2_node",
    "element",
    "schema_of",
    "Asap2Error",
    "SchemaError",
    "DecodeError",
    "EncodeError",
    "LexError",
    "Asap2File",
    "Asap2Version",
    "A2mlVersion",
    "Project",
    "Header",
    "Module",
    "ModCommon",
    "ModPar",
    "MemorySegment",
    "MemoryLayout",
    "Measurement",
    "Characteristic",
    "BitMask",
    "Annotation",
    "IfData",
    "CompuMethod",
    "CompuVTab",
    "CompuVTabData",
    "CompuVTabRange",
    "CompuVTabRangeData",
    "Group",
    "Function",
]
