import io
import zipfile

import pytest

from conftest import make_export
from errors import ExportNotFoundError, InvalidExportError
from loader import load_export_file, read_export_bytes, validate_export_text


def _zip(files: dict) -> bytes:
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w") as z:
        for name, content in files.items():
            z.writestr(name, content)
    return buf.getvalue()


def test_plain_xml_upload():
    xml = make_export()

    assert read_export_bytes(xml.encode("utf-8"), "export.XML") == xml


@pytest.mark.parametrize("path", ["apple_health_export/export.xml", "export.xml", "Export.xml"])
def test_zip_candidate_paths(path):
    xml = make_export()

    assert read_export_bytes(_zip({path: xml}), "export.zip") == xml


def test_zip_prefers_first_candidate():
    data = _zip({
        "export.xml": make_export(records=[{"type": "second", "startDate": "2024-01-01"}]),
        "apple_health_export/export.xml": make_export(records=[{"type": "first", "startDate": "2024-01-01"}]),
    })

    assert 'type="first"' in read_export_bytes(data, "export.zip")


def test_zip_without_export_lists_members():
    data = _zip({"apple_health_export/export_cda.xml": "<ClinicalDocument/>"})

    with pytest.raises(ExportNotFoundError, match="export_cda.xml"):
        read_export_bytes(data, "export.zip")


def test_corrupt_zip():
    with pytest.raises(InvalidExportError, match="ZIP"):
        read_export_bytes(b"not a zip", "export.zip")


def test_unsupported_extension():
    with pytest.raises(InvalidExportError):
        read_export_bytes(b"a,b\n", "export.csv")


def test_validation_rejects_blank_and_foreign_documents():
    with pytest.raises(InvalidExportError):
        validate_export_text("   ")
    with pytest.raises(InvalidExportError):
        validate_export_text("<Other/>")
    with pytest.raises(InvalidExportError):
        read_export_bytes(b"\xff\xfe<", "export.xml")


def test_load_export_file(tmp_path):
    path = tmp_path / "export.xml"
    path.write_text(make_export(), encoding="utf-8")

    assert "<HealthData" in load_export_file(path)
