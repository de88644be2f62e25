"""
ASAP2 (ASAM MCD-2 MC) document model.

Holds, as typed nodes:
- File root, ASAP2_VERSION / A2ML_VERSION, PROJECT and HEADER
- MODULE with its A2ML and IF_DATA fragments
- MOD_COMMON and MOD_PAR (memory layouts, memory segments, calibration
  methods, system constants)
- MEASUREMENTs and CHARACTERISTICs
- COMPU_METHODs, COMPU_VTABs and COMPU_VTAB_RANGEs
- GROUPs and FUNCTIONs

Every class declares its members with ``element()``; the declaration order
of the dataclass fields only fixes the constructor signature, the ordinal
fixes the grammar order.

Usage:
    rpm = Measurement("RPM", "Engine speed", "UWORD", "CM_RPM", 0, 0, 0, 8000)
    rpm.bit_mask = BitMask(0xFF00)
    module.measurements.add(rpm)
    print(doc.to_a2l())
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from pathlib import Path

from .base import Node, NodeDict
from .config import FormatOptions
from .encoder import dumps
from .schema import Role, asap2_node, element

logger = logging.getLogger(__name__)


# --------------------------
# Enumerated vocabularies
# --------------------------

class ByteOrderType(Enum):
    LITTLE_ENDIAN = "LITTLE_ENDIAN"
    BIG_ENDIAN = "BIG_ENDIAN"
    MSB_FIRST = "MSB_FIRST"
    MSB_LAST = "MSB_LAST"


class CalibrationAccessType(Enum):
    CALIBRATION = "CALIBRATION"
    NO_CALIBRATION = "NO_CALIBRATION"
    NOT_IN_MCD_SYSTEM = "NOT_IN_MCD_SYSTEM"
    OFFLINE_CALIBRATION = "OFFLINE_CALIBRATION"


class DepositMode(Enum):
    ABSOLUTE = "ABSOLUTE"
    DIFFERENCE = "DIFFERENCE"


class AlignmentType(Enum):
    ALIGNMENT_BYTE = "ALIGNMENT_BYTE"
    ALIGNMENT_WORD = "ALIGNMENT_WORD"
    ALIGNMENT_LONG = "ALIGNMENT_LONG"
    ALIGNMENT_INT64 = "ALIGNMENT_INT64"
    ALIGNMENT_FLOAT32_IEEE = "ALIGNMENT_FLOAT32_IEEE"
    ALIGNMENT_FLOAT64_IEEE = "ALIGNMENT_FLOAT64_IEEE"


class SegmentPrgType(Enum):
    """Program kind of a MEMORY_SEGMENT."""
    CALIBRATION_VARIABLES = "CALIBRATION_VARIABLES"
    CODE = "CODE"
    DATA = "DATA"
    EXCLUDED_FROM_FLASH = "EXCLUDED_FROM_FLASH"
    OFFLINE_DATA = "OFFLINE_DATA"
    RESERVED = "RESERVED"
    SERAM = "SERAM"
    VARIABLES = "VARIABLES"


class MemoryType(Enum):
    EEPROM = "EEPROM"
    EPROM = "EPROM"
    FLASH = "FLASH"
    RAM = "RAM"
    ROM = "ROM"
    REGISTER = "REGISTER"


class MemoryAttribute(Enum):
    INTERN = "INTERN"
    EXTERN = "EXTERN"


class LayoutPrgType(Enum):
    """Program kind of a MEMORY_LAYOUT."""
    PRG_CODE = "PRG_CODE"
    PRG_DATA = "PRG_DATA"
    PRG_RESERVED = "PRG_RESERVED"


class CharacteristicType(Enum):
    ASCII = "ASCII"
    CURVE = "CURVE"
    MAP = "MAP"
    CUBOID = "CUBOID"
    CUBE_4 = "CUBE_4"
    CUBE_5 = "CUBE_5"
    VAL_BLK = "VAL_BLK"
    VALUE = "VALUE"


class ConversionType(Enum):
    IDENTICAL = "IDENTICAL"
    FORM = "FORM"
    LINEAR = "LINEAR"
    RAT_FUNC = "RAT_FUNC"
    TAB_INTP = "TAB_INTP"
    TAB_NOINTP = "TAB_NOINTP"
    TAB_VERB = "TAB_VERB"


# --------------------------
# Simple statements
# --------------------------

@asap2_node("ASAP2_VERSION", simple=True)
class Asap2Version(Node):
    version_no: int = element(0, Role.ARGUMENT, int)
    upgrade_no: int = element(1, Role.ARGUMENT, int)


@asap2_node("A2ML_VERSION", simple=True)
class A2mlVersion(Node):
    version_no: int = element(0, Role.ARGUMENT, int)
    upgrade_no: int = element(1, Role.ARGUMENT, int)


@asap2_node(simple=True)
class Alignment(Node):
    """ALIGNMENT_BYTE 1, ALIGNMENT_WORD 2, ...; the keyword is the key."""
    alignment_type: AlignmentType = element(0, Role.NAME, AlignmentType)
    value: int = element(1, Role.ARGUMENT, int)


@asap2_node("DEPOSIT", simple=True)
class Deposit(Node):
    mode: DepositMode = element(0, Role.ARGUMENT, DepositMode)


@asap2_node("BYTE_ORDER", simple=True)
class ByteOrder(Node):
    value: ByteOrderType = element(0, Role.ARGUMENT, ByteOrderType)


@asap2_node("CALIBRATION_ACCESS", simple=True)
class CalibrationAccess(Node):
    value: CalibrationAccessType = element(0, Role.ARGUMENT, CalibrationAccessType)


@asap2_node("BIT_MASK", simple=True)
class BitMask(Node):
    value: int = element(0, Role.ARGUMENT, int, as_hex=True)


@asap2_node("ERROR_MASK", simple=True)
class ErrorMask(Node):
    value: int = element(0, Role.ARGUMENT, int, as_hex=True)


@asap2_node("ECU_ADDRESS", simple=True)
class EcuAddress(Node):
    value: int = element(0, Role.ARGUMENT, int, as_hex=True)


@asap2_node("ECU_ADDRESS_EXTENSION", simple=True)
class EcuAddressExtension(Node):
    value: int = element(0, Role.ARGUMENT, int, as_hex=True)


@asap2_node("ADDR_EPK", simple=True)
class AddrEpk(Node):
    address: int = element(0, Role.ARGUMENT, int, as_hex=True)


@asap2_node("FORMAT", simple=True)
class Format(Node):
    value: str = element(0, Role.STRING)


@asap2_node("ARRAY_SIZE", simple=True)
class ArraySize(Node):
    value: int = element(0, Role.ARGUMENT, int)


@asap2_node("MATRIX_DIM", simple=True)
class MatrixDim(Node):
    x_dim: int = element(0, Role.ARGUMENT, int)
    y_dim: int = element(1, Role.ARGUMENT, int)
    z_dim: int = element(2, Role.ARGUMENT, int)


@asap2_node("RIGHT_SHIFT", simple=True)
class RightShift(Node):
    bit_count: int = element(0, Role.ARGUMENT, int)


@asap2_node("LEFT_SHIFT", simple=True)
class LeftShift(Node):
    bit_count: int = element(0, Role.ARGUMENT, int)


@asap2_node("SYMBOL_LINK", simple=True)
class SymbolLink(Node):
    symbol_name: str = element(0, Role.STRING)
    offset: int = element(1, Role.ARGUMENT, int)


@asap2_node("SYSTEM_CONSTANT", simple=True)
class SystemConstant(Node):
    name: str = element(0, Role.STRING, key=True)
    value: str = element(1, Role.STRING)


@asap2_node("COEFFS", simple=True)
class Coeffs(Node):
    """Rational function coefficients: f(x) = (ax^2 + bx + c) / (dx^2 + ex + f)."""
    a: Decimal = element(0, Role.ARGUMENT, Decimal)
    b: Decimal = element(1, Role.ARGUMENT, Decimal)
    c: Decimal = element(2, Role.ARGUMENT, Decimal)
    d: Decimal = element(3, Role.ARGUMENT, Decimal)
    e: Decimal = element(4, Role.ARGUMENT, Decimal)
    f: Decimal = element(5, Role.ARGUMENT, Decimal)


@asap2_node("COEFFS_LINEAR", simple=True)
class CoeffsLinear(Node):
    a: Decimal = element(0, Role.ARGUMENT, Decimal)
    b: Decimal = element(1, Role.ARGUMENT, Decimal)


@asap2_node("ANNOTATION_LABEL", simple=True)
class AnnotationLabel(Node):
    value: str = element(0, Role.STRING)


@asap2_node("ANNOTATION_ORIGIN", simple=True)
class AnnotationOrigin(Node):
    value: str = element(0, Role.STRING)


# --------------------------
# Small blocks
# --------------------------

@asap2_node("ANNOTATION_TEXT")
class AnnotationText(Node):
    lines: list[str] = element(0, Role.STRING, repeated=True, new_line=True)


@asap2_node("ANNOTATION")
class Annotation(Node):
    label: AnnotationLabel | None = element(0, Role.NODE, AnnotationLabel)
    origin: AnnotationOrigin | None = element(1, Role.NODE, AnnotationOrigin)
    text: AnnotationText | None = element(2, Role.NODE, AnnotationText)


@asap2_node("BIT_OPERATION")
class BitOperation(Node):
    right_shift: RightShift | None = element(0, Role.NODE, RightShift)
    left_shift: LeftShift | None = element(1, Role.NODE, LeftShift)
    sign_extend: bool = element(2, Role.FLAG, keyword="SIGN_EXTEND")


@asap2_node("IF_DATA")
class IfData(Node):
    """Vendor-specific interface data, kept verbatim."""
    data: str = element(0, Role.TEXT)

    @property
    def name(self) -> str:
        """Interface name: the first word of the data."""
        words = self.data.split()
        return words[0] if words else ""


@asap2_node("A2ML")
class A2ml(Node):
    """Embedded meta-language fragment, kept verbatim."""
    data: str = element(0, Role.TEXT)


@asap2_node("HEADER")
class Header(Node):
    comment: str = element(0, Role.STRING)
    version: str | None = element(1, Role.STRING, keyword="VERSION")
    project_no: str | None = element(2, Role.ARGUMENT, str, keyword="PROJECT_NO")


# --------------------------
# Verbal conversion tables
# --------------------------

@asap2_node(simple=True)
class CompuVTabData(Node):
    """One `in "out"` pair of a COMPU_VTAB."""
    in_value: Decimal = element(0, Role.ARGUMENT, Decimal)
    out_value: str = element(1, Role.STRING)


@asap2_node("COMPU_VTAB")
class CompuVTab(Node):
    name: str = element(1, Role.NAME, comment=" Name           ")
    long_identifier: str = element(2, Role.STRING, comment=" LongIdentifier ")
    number_value_pairs: int = element(4, Role.ARGUMENT, int, comment=" NumberValuePairs ")
    conversion_type: ConversionType = element(
        3, Role.ARGUMENT, ConversionType, comment=" ConversionType ",
        default=ConversionType.TAB_VERB,
    )
    value_pairs: list[CompuVTabData] = element(5, Role.LIST, CompuVTabData)
    default_value: str | None = element(6, Role.STRING, keyword="DEFAULT_VALUE")


@asap2_node(simple=True)
class CompuVTabRangeData(Node):
    """One `min max "out"` triple of a COMPU_VTAB_RANGE."""
    in_val_min: Decimal = element(1, Role.ARGUMENT, Decimal, new_line=True)
    in_val_max: Decimal = element(2, Role.ARGUMENT, Decimal)
    out_value: str = element(3, Role.STRING)


@asap2_node("COMPU_VTAB_RANGE")
class CompuVTabRange(Node):
    name: str = element(1, Role.NAME, comment=" Name               ")
    long_identifier: str = element(2, Role.STRING, comment=" LongIdentifier     ")
    number_value_triples: int = element(3, Role.ARGUMENT, int, comment=" NumberValueTriples ")
    value_triples: list[CompuVTabRangeData] = element(4, Role.LIST, CompuVTabRangeData)
    default_value: str | None = element(5, Role.STRING, keyword="DEFAULT_VALUE")


@asap2_node("COMPU_METHOD")
class CompuMethod(Node):
    name: str = element(0, Role.NAME, comment=" Name           ")
    long_identifier: str = element(1, Role.STRING, comment=" LongIdentifier ")
    conversion_type: ConversionType = element(2, Role.ARGUMENT, ConversionType, comment=" ConversionType ")
    format: str = element(3, Role.STRING, comment=" Format         ")
    unit: str = element(4, Role.STRING, comment=" Unit           ")
    coeffs: Coeffs | None = element(5, Role.NODE, Coeffs)
    coeffs_linear: CoeffsLinear | None = element(6, Role.NODE, CoeffsLinear)
    compu_tab_ref: str | None = element(7, Role.ARGUMENT, str, keyword="COMPU_TAB_REF")
    ref_unit: str | None = element(8, Role.ARGUMENT, str, keyword="REF_UNIT")
    status_string_ref: str | None = element(9, Role.ARGUMENT, str, keyword="STATUS_STRING_REF")


# --------------------------
# Measurements and characteristics
# --------------------------

@asap2_node("MEASUREMENT")
class Measurement(Node):
    name: str = element(1, Role.NAME, comment=" Name           ")
    long_identifier: str = element(2, Role.STRING, comment=" LongIdentifier ")
    datatype: str = element(3, Role.ARGUMENT, str, comment=" Datatype       ")
    conversion: str = element(4, Role.ARGUMENT, str, comment=" Conversion     ")
    resolution: int = element(5, Role.ARGUMENT, int, comment=" Resolution     ")
    accuracy: Decimal = element(6, Role.ARGUMENT, Decimal, comment=" Accuracy       ")
    lower_limit: Decimal = element(7, Role.ARGUMENT, Decimal, comment=" LowerLimit     ")
    upper_limit: Decimal = element(8, Role.ARGUMENT, Decimal, comment=" UpperLimit     ")

    display_identifier: str | None = element(9, Role.ARGUMENT, str, keyword="DISPLAY_IDENTIFIER")
    ecu_address: EcuAddress | None = element(10, Role.NODE, EcuAddress)
    ecu_address_extension: EcuAddressExtension | None = element(11, Role.NODE, EcuAddressExtension)
    array_size: ArraySize | None = element(12, Role.NODE, ArraySize)
    format: Format | None = element(13, Role.NODE, Format)
    bit_mask: BitMask | None = element(14, Role.NODE, BitMask)
    bit_operation: BitOperation | None = element(15, Role.NODE, BitOperation)
    matrix_dim: MatrixDim | None = element(16, Role.NODE, MatrixDim)
    annotation: Annotation | None = element(17, Role.NODE, Annotation)
    byte_order: ByteOrder | None = element(18, Role.NODE, ByteOrder)
    discrete: bool = element(19, Role.FLAG, keyword="DISCRETE")
    error_mask: ErrorMask | None = element(20, Role.NODE, ErrorMask)
    phys_unit: str | None = element(21, Role.STRING, keyword="PHYS_UNIT")
    read_write: bool = element(22, Role.FLAG, keyword="READ_WRITE")
    ref_memory_segment: str | None = element(23, Role.ARGUMENT, str, keyword="REF_MEMORY_SEGMENT")
    symbol_link: SymbolLink | None = element(24, Role.NODE, SymbolLink)
    if_data: list[IfData] = element(25, Role.LIST, IfData)


@asap2_node("CHARACTERISTIC")
class Characteristic(Node):
    name: str = element(0, Role.NAME, comment=" Name           ")
    long_identifier: str = element(1, Role.STRING, comment=" LongIdentifier ")
    char_type: CharacteristicType = element(2, Role.ARGUMENT, CharacteristicType, comment=" Type           ")
    address: int = element(3, Role.ARGUMENT, int, as_hex=True, comment=" Address        ")
    record_layout: str = element(4, Role.ARGUMENT, str, comment=" Deposit        ")
    max_diff: Decimal = element(5, Role.ARGUMENT, Decimal, comment=" MaxDiff        ")
    conversion: str = element(6, Role.ARGUMENT, str, comment=" Conversion     ")
    lower_limit: Decimal = element(7, Role.ARGUMENT, Decimal, comment=" LowerLimit     ")
    upper_limit: Decimal = element(8, Role.ARGUMENT, Decimal, comment=" UpperLimit     ")

    annotation: Annotation | None = element(9, Role.NODE, Annotation)
    bit_mask: BitMask | None = element(10, Role.NODE, BitMask)
    byte_order: ByteOrder | None = element(11, Role.NODE, ByteOrder)
    calibration_access: CalibrationAccess | None = element(12, Role.NODE, CalibrationAccess)
    display_identifier: str | None = element(13, Role.ARGUMENT, str, keyword="DISPLAY_IDENTIFIER")
    ecu_address_extension: EcuAddressExtension | None = element(14, Role.NODE, EcuAddressExtension)
    format: Format | None = element(15, Role.NODE, Format)
    matrix_dim: MatrixDim | None = element(16, Role.NODE, MatrixDim)
    number: int | None = element(17, Role.ARGUMENT, int, keyword="NUMBER")
    phys_unit: str | None = element(18, Role.STRING, keyword="PHYS_UNIT")
    read_only: bool = element(19, Role.FLAG, keyword="READ_ONLY")
    symbol_link: SymbolLink | None = element(20, Role.NODE, SymbolLink)
    if_data: list[IfData] = element(21, Role.LIST, IfData)


# --------------------------
# Groups and functions
# --------------------------

@dataclass
class _IdentifierList(Node):
    """Block listing references to other objects, one per line."""
    identifiers: list[str] = element(0, Role.ARGUMENT, str, repeated=True, new_line=True)


@asap2_node("REF_MEASUREMENT")
class RefMeasurement(_IdentifierList):
    pass


@asap2_node("REF_CHARACTERISTIC")
class RefCharacteristic(_IdentifierList):
    pass


@asap2_node("DEF_CHARACTERISTIC")
class DefCharacteristic(_IdentifierList):
    pass


@asap2_node("IN_MEASUREMENT")
class InMeasurement(_IdentifierList):
    pass


@asap2_node("OUT_MEASUREMENT")
class OutMeasurement(_IdentifierList):
    pass


@asap2_node("LOC_MEASUREMENT")
class LocMeasurement(_IdentifierList):
    pass


@asap2_node("SUB_GROUP")
class SubGroup(_IdentifierList):
    pass


@asap2_node("SUB_FUNCTION")
class SubFunction(_IdentifierList):
    pass


@asap2_node("GROUP")
class Group(Node):
    name: str = element(0, Role.NAME, comment=" Name           ")
    long_identifier: str = element(1, Role.STRING, comment=" LongIdentifier ")
    annotation: Annotation | None = element(2, Role.NODE, Annotation)
    if_data: list[IfData] = element(3, Role.LIST, IfData)
    ref_characteristic: RefCharacteristic | None = element(4, Role.NODE, RefCharacteristic)
    ref_measurement: RefMeasurement | None = element(5, Role.NODE, RefMeasurement)
    root: bool = element(6, Role.FLAG, keyword="ROOT")
    sub_group: SubGroup | None = element(7, Role.NODE, SubGroup)


@asap2_node("FUNCTION")
class Function(Node):
    name: str = element(0, Role.NAME, comment=" Name           ")
    long_identifier: str = element(1, Role.STRING, comment=" LongIdentifier ")
    annotation: Annotation | None = element(2, Role.NODE, Annotation)
    def_characteristic: DefCharacteristic | None = element(3, Role.NODE, DefCharacteristic)
    function_version: str | None = element(4, Role.STRING, keyword="FUNCTION_VERSION")
    if_data: list[IfData] = element(5, Role.LIST, IfData)
    in_measurement: InMeasurement | None = element(6, Role.NODE, InMeasurement)
    loc_measurement: LocMeasurement | None = element(7, Role.NODE, LocMeasurement)
    out_measurement: OutMeasurement | None = element(8, Role.NODE, OutMeasurement)
    ref_characteristic: RefCharacteristic | None = element(9, Role.NODE, RefCharacteristic)
    sub_function: SubFunction | None = element(10, Role.NODE, SubFunction)


# --------------------------
# Module parameters
# --------------------------

@asap2_node("MOD_COMMON")
class ModCommon(Node):
    comment: str = element(0, Role.STRING, comment=" Comment ")
    alignments: NodeDict[Alignment] = element(1, Role.DICT, Alignment)
    byte_order: ByteOrder | None = element(2, Role.NODE, ByteOrder)
    data_size: int | None = element(3, Role.ARGUMENT, int, keyword="DATA_SIZE")
    deposit: Deposit | None = element(4, Role.NODE, Deposit)
    s_rec_layout: str | None = element(5, Role.ARGUMENT, str, keyword="S_REC_LAYOUT")


@asap2_node("MEMORY_SEGMENT")
class MemorySegment(Node):
    name: str = element(0, Role.NAME)
    long_identifier: str = element(1, Role.STRING)
    prg_type: SegmentPrgType = element(2, Role.ARGUMENT, SegmentPrgType, comment=" PrgTypes   ")
    memory_type: MemoryType = element(3, Role.ARGUMENT, MemoryType, comment=" MemoryType ")
    attribute: MemoryAttribute = element(4, Role.ARGUMENT, MemoryAttribute, comment=" Attribute  ")
    address: int = element(5, Role.ARGUMENT, int, as_hex=True, comment=" Address    ")
    size: int = element(6, Role.ARGUMENT, int, as_hex=True, comment=" Size       ")
    offset0: int = element(7, Role.ARGUMENT, int, comment=" offset     ")
    offset1: int = element(8, Role.ARGUMENT, int)
    offset2: int = element(9, Role.ARGUMENT, int)
    offset3: int = element(10, Role.ARGUMENT, int)
    offset4: int = element(11, Role.ARGUMENT, int)
    if_data: list[IfData] = element(12, Role.LIST, IfData)


@asap2_node("MEMORY_LAYOUT")
class MemoryLayout(Node):
    prg_type: LayoutPrgType = element(0, Role.ARGUMENT, LayoutPrgType, comment=" Program segment type ")
    address: int = element(1, Role.ARGUMENT, int, as_hex=True, comment=" Address              ")
    size: int = element(2, Role.ARGUMENT, int, as_hex=True, comment=" Size                 ")
    offset0: int = element(3, Role.ARGUMENT, int, comment=" offset               ")
    offset1: int = element(4, Role.ARGUMENT, int)
    offset2: int = element(5, Role.ARGUMENT, int)
    offset3: int = element(6, Role.ARGUMENT, int)
    offset4: int = element(7, Role.ARGUMENT, int)
    if_data: list[IfData] = element(8, Role.LIST, IfData)


@asap2_node("CALIBRATION_HANDLE")
class CalibrationHandle(Node):
    handles: list[int] = element(0, Role.ARGUMENT, int, repeated=True, as_hex=True,
                                 new_line=True, comment=" Handles ")
    text: str | None = element(1, Role.STRING, keyword="CALIBRATION_HANDLE_TEXT")


@asap2_node("CALIBRATION_METHOD")
class CalibrationMethod(Node):
    method: str = element(0, Role.STRING, comment=" Method  ")
    version: int = element(1, Role.ARGUMENT, int, comment=" Version ")
    calibration_handle: CalibrationHandle | None = element(2, Role.NODE, CalibrationHandle)


@asap2_node("MOD_PAR")
class ModPar(Node):
    comment: str = element(1, Role.STRING)
    addr_epk: list[AddrEpk] = element(2, Role.LIST, AddrEpk)
    calibration_methods: list[CalibrationMethod] = element(3, Role.LIST, CalibrationMethod)
    cpu_type: str | None = element(4, Role.STRING, keyword="CPU_TYPE")
    customer: str | None = element(5, Role.STRING, keyword="CUSTOMER")
    customer_no: str | None = element(6, Role.STRING, keyword="CUSTOMER_NO")
    ecu: str | None = element(7, Role.STRING, keyword="ECU")
    ecu_calibration_offset: int | None = element(8, Role.ARGUMENT, int, keyword="ECU_CALIBRATION_OFFSET")
    epk: str | None = element(9, Role.STRING, keyword="EPK")
    memory_layouts: list[MemoryLayout] = element(10, Role.LIST, MemoryLayout)
    memory_segments: list[MemorySegment] = element(11, Role.LIST, MemorySegment)
    no_of_interfaces: int | None = element(12, Role.ARGUMENT, int, keyword="NO_OF_INTERFACES")
    phone_no: str | None = element(13, Role.STRING, keyword="PHONE_NO")
    supplier: str | None = element(14, Role.STRING, keyword="SUPPLIER")
    system_constants: NodeDict[SystemConstant] = element(15, Role.DICT, SystemConstant)
    user: str | None = element(16, Role.STRING, keyword="USER")
    version: str | None = element(17, Role.STRING, keyword="VERSION")


# --------------------------
# Module, project and file
# --------------------------

@asap2_node("MODULE")
class Module(Node):
    name: str = element(1, Role.NAME)
    long_identifier: str = element(2, Role.STRING, comment=" LongIdentifier ")
    a2ml: list[A2ml] = element(3, Role.LIST, A2ml)
    if_data: list[IfData] = element(4, Role.LIST, IfData)
    mod_common: ModCommon | None = element(5, Role.NODE, ModCommon)
    mod_par: ModPar | None = element(6, Role.NODE, ModPar)
    measurements: NodeDict[Measurement] = element(
        7, Role.DICT, Measurement, comment=" Measurement data for the module ")
    compu_vtabs: NodeDict[CompuVTab] = element(
        8, Role.DICT, CompuVTab, comment=" Verbal conversion tables for the module ")
    compu_vtab_ranges: NodeDict[CompuVTabRange] = element(
        9, Role.DICT, CompuVTabRange,
        comment=" Verbal conversion tables with parameter ranges for the module ")
    characteristics: NodeDict[Characteristic] = element(
        10, Role.DICT, Characteristic, comment=" Calibration parameters for the module ")
    compu_methods: NodeDict[CompuMethod] = element(
        11, Role.DICT, CompuMethod, comment=" Conversion methods for the module ")
    groups: NodeDict[Group] = element(12, Role.DICT, Group)
    functions: NodeDict[Function] = element(13, Role.DICT, Function)


@asap2_node("PROJECT")
class Project(Node):
    name: str = element(0, Role.NAME, comment=" Name           ")
    long_identifier: str = element(1, Role.STRING, comment=" LongIdentifier ")
    header: Header | None = element(2, Role.NODE, Header)
    modules: NodeDict[Module] = element(3, Role.DICT, Module)


@asap2_node(root=True)
class Asap2File(Node):
    """Root of an A2L document."""
    project: Project = element(3, Role.NODE, Project, required=True)
    file_comment: str | None = element(0, Role.COMMENT, default=" Start of A2L file ")
    asap2_version: Asap2Version | None = element(1, Role.NODE, Asap2Version)
    a2ml_version: A2mlVersion | None = element(2, Role.NODE, A2mlVersion)

    def to_a2l(self, indent: str = "\t", comments: bool = False) -> str:
        """Export the document to A2L text.

        Args:
            indent: String to use for one indentation level (default is tab)
            comments: Emit the declared field comments

        Returns:
            A2L file content as a string
        """
        return dumps(self, FormatOptions(indent=indent, comments=comments))

    def to_file(self, filepath: str | Path, options: FormatOptions | None = None) -> None:
        """Export the document to an A2L file.

        Raises:
            IOError: If the file cannot be written
        """
        options = options or FormatOptions()
        a2l_content = dumps(self, options)
        try:
            with open(filepath, "w", encoding=options.encoding, newline="") as f:
                f.write(a2l_content)
        except OSError as e:
            raise IOError(f"Failed to write A2L file to {filepath}: {e}") from e
        logger.info("Wrote %s (%d characters)", filepath, len(a2l_content))
