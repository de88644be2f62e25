#!/usr/bin/env python3
"""
Test suite for A2L export functionality.
"""

from asap2 import A2LParser, Characteristic, FormatOptions, Measurement, loads
from asap2.a2l_model import Asap2File, CharacteristicType, EcuAddress, Module, Project
from pathlib import Path
import tempfile
import os
import pytest

DEMO = Path(__file__).parent / "demo.a2l"


def test_export_basic()->None:
    """Test basic export functionality with demo file."""
    doc = A2LParser().parse_file(DEMO)
    module = doc.project.modules["Engine"]

    a2l_content = doc.to_a2l()

    assert a2l_content.startswith("ASAP2_VERSION 1 71\n")
    assert '/begin PROJECT DemoProject "Demo ECU project"' in a2l_content
    assert '\t/begin MODULE Engine "Engine control module"' in a2l_content

    for measurement in module.measurements.values():
        assert f"/begin MEASUREMENT {measurement.name}" in a2l_content
        assert measurement.long_identifier in a2l_content

    for characteristic in module.characteristics.values():
        assert f"/begin CHARACTERISTIC {characteristic.name}" in a2l_content

    assert "ECU_ADDRESS 0x4000D944" in a2l_content
    assert "VALUE 0xB050C084 RL_UWORD" in a2l_content


def test_export_file()->None:
    """Test exporting to a file with proper error handling."""
    doc = A2LParser().parse_file(DEMO)

    with tempfile.NamedTemporaryFile(mode='w', suffix='.a2l', delete=False) as tmp:
        tmp_path = tmp.name

    try:
        doc.to_file(tmp_path)

        assert os.path.exists(tmp_path)
        assert os.path.getsize(tmp_path) > 0

        with open(tmp_path, 'r', encoding='utf-8') as f:
            content = f.read()

        assert "ASAP2_VERSION" in content
        assert "/begin PROJECT" in content
        assert "/end PROJECT" in content
        assert A2LParser().parse_file(tmp_path) == doc

        with pytest.raises(IOError):
            doc.to_file("/invalid/path/test.a2l")

    finally:
        if os.path.exists(tmp_path):
            os.unlink(tmp_path)


def test_export_file_options(tmp_path: Path)->None:
    """Test that file export honours the format options."""
    doc = Asap2File(Project("P", ""))
    target = tmp_path / "out.a2l"
    doc.to_file(target, FormatOptions(newline="\r\n", comments=True))
    data = target.read_bytes()
    assert data.startswith(b"/* Start of A2L file */\r\n")
    assert b'/begin PROJECT /* Name           */ P' in data


def test_parse_missing_file()->None:
    with pytest.raises(IOError, match="Failed to read A2L file"):
        A2LParser().parse_file("/invalid/path/missing.a2l")


def test_export_custom_indentation()->None:
    """Test export with custom indentation."""
    project = Project("P", "")
    project.modules.add(Module("M", ""))
    doc = Asap2File(project)

    a2l_spaces = doc.to_a2l(indent="    ")
    assert "    /begin MODULE M" in a2l_spaces

    a2l_no_indent = doc.to_a2l(indent="")
    assert "\n/begin MODULE M" in a2l_no_indent
    assert "\t" not in a2l_no_indent


def test_export_modified_model()->None:
    """Test export of modified model data."""
    doc = A2LParser().parse_file(DEMO)
    module = doc.project.modules["Engine"]

    module.measurements["Testvar1"].long_identifier = "Modified description"

    new_char = Characteristic(
        name="TEST_CALIBRATION",
        long_identifier="Test calibration parameter",
        char_type=CharacteristicType.VALUE,
        address=0x1000,
        record_layout="RL_1D",
        max_diff=0,
        conversion="CM_IDENTICAL",
        lower_limit=0.0,
        upper_limit=100.0,
    )
    module.characteristics.add(new_char)

    a2l_content = doc.to_a2l()
    assert "Modified description" in a2l_content
    assert "/begin CHARACTERISTIC TEST_CALIBRATION" in a2l_content
    assert "VALUE 0x1000 RL_1D 0 CM_IDENTICAL 0.0 100.0" in a2l_content
    # created last, so written after the parsed ones
    assert a2l_content.index("TEST_CALIBRATION") > a2l_content.index("TestCalib3")


def test_export_complete_roundtrip()->None:
    """Test complete build → export → parse roundtrip."""
    test_measurement = Measurement(
        name="TEST_MEASUREMENT",
        long_identifier="Test measurement",
        datatype="UWORD",
        conversion="CM_IDENTICAL",
        resolution=1,
        accuracy=0,
        lower_limit=0.0,
        upper_limit=100.0,
        ecu_address=EcuAddress(0x2000),
    )
    module = Module("ModifiedModule", "")
    module.measurements.add(test_measurement)
    project = Project("ModifiedProject", "")
    project.modules.add(module)
    doc = Asap2File(project)

    a2l_content = doc.to_a2l()

    assert "ModifiedProject" in a2l_content
    assert "ModifiedModule" in a2l_content
    assert "/begin MEASUREMENT TEST_MEASUREMENT" in a2l_content
    assert "ECU_ADDRESS 0x2000" in a2l_content
    assert loads(a2l_content) == doc


def test_export_memory_segments()->None:
    """Test export of memory segments."""
    doc = A2LParser().parse_file(DEMO)
    a2l_content = doc.to_a2l()

    for segment in doc.project.modules["Engine"].mod_par.memory_segments:
        assert f"/begin MEMORY_SEGMENT {segment.name}" in a2l_content
    assert "DATA FLASH INTERN 0xB0500000 0x1000 -1 -1 -1 -1 -1" in a2l_content


def test_export_compu_methods()->None:
    """Test export of computation methods."""
    doc = A2LParser().parse_file(DEMO)
    module = doc.project.modules["Engine"]
    a2l_content = doc.to_a2l()

    for compu_method in module.compu_methods.values():
        assert f"/begin COMPU_METHOD {compu_method.name}" in a2l_content
    assert '\t\t\t0 "Neutral"' in a2l_content
    assert 'DEFAULT_VALUE "Unknown"' in a2l_content
