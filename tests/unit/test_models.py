from dataclasses import FrozenInstanceError

import pytest

from package_licenses.models import License, PackageRecord, ReportRow


def test_package_record_defaults_absent_metadata():
    """Test that optional metadata defaults to None and acceptance to False."""
    record = PackageRecord(id="Pkg", version="1.0.0")
    assert record.authors is None
    assert record.license_url is None
    assert record.require_license_acceptance is False


def test_package_record_is_hashable_and_frozen():
    """Test that records can key dictionaries and cannot be mutated."""
    record = PackageRecord(id="Pkg", version="1.0.0")
    assert {record: 1}[PackageRecord(id="Pkg", version="1.0.0")] == 1
    with pytest.raises(FrozenInstanceError):
        record.version = "2.0.0"


def test_license_defaults_to_snapshot_without_text():
    """Test that a bare License is a snapshot with no text."""
    lic = License(id="MIT", name="MIT License")
    assert lic.text is None
    assert lic.is_master is False
    assert lic.download_uri is None


def test_report_row_values_have_eleven_fields():
    """Test that an empty row still yields 11 empty strings."""
    assert ReportRow().values() == [""] * 11
