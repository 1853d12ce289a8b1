"""Tests for the report pipeline."""

import logging
from pathlib import Path

import pytest

from package_licenses.classifiers.base import ClassificationError
from package_licenses.materializer import LicenseFileMaterializer
from package_licenses.models import License, PackageRecord
from package_licenses.pipeline import ReportPipeline
from package_licenses.reporters import DelimitedTextReporter, HEADERS
from package_licenses.resolution import ErrorPolicy, LicenseResolutionChain
from package_licenses.separated_values import WriterSetting

LF_TSV = WriterSetting(field_separator="\t", record_separator="\n")


def _reporter(output_dir: Path) -> DelimitedTextReporter:
    return DelimitedTextReporter(output_dir / "Licenses.txt", setting=LF_TSV)


def _report_lines(output_dir: Path) -> list[str]:
    return (output_dir / "Licenses.txt").read_text(encoding="utf-8").split("\n")


class TestReportPipeline:
    """Test suite for ReportPipeline.run."""

    @pytest.mark.asyncio
    async def test_single_package_report(
        self, make_classifier, newtonsoft: PackageRecord, mit_license: License, tmp_path: Path
    ) -> None:
        """Test the report row and saved text for one resolved package."""
        classifier = make_classifier({"https://example/license": mit_license})
        pipeline = ReportPipeline(LicenseResolutionChain(classifier))

        produced = await pipeline.run([newtonsoft], [_reporter(tmp_path)], tmp_path)

        assert produced is True
        lines = _report_lines(tmp_path)
        assert lines[0] == "\t".join(HEADERS)
        assert lines[1] == (
            "Newtonsoft.Json\t13.0.1\t\t\t\thttps://example/license\tFalse\t\t"
            "MIT\tMIT License\tMIT.txt"
        )
        assert lines[2:] == [""]
        assert (tmp_path / "MIT.txt").read_text(encoding="utf-8") == "MIT..."

    @pytest.mark.asyncio
    async def test_empty_input_touches_nothing(
        self, make_classifier, tmp_path: Path, mocker, caplog
    ) -> None:
        """Test that no packages means no report and no sink calls."""
        reporter = mocker.Mock()
        pipeline = ReportPipeline(LicenseResolutionChain(make_classifier()))

        with caplog.at_level(logging.WARNING, logger="package_licenses.pipeline"):
            produced = await pipeline.run(iter([]), [reporter], tmp_path)

        assert produced is False
        assert reporter.method_calls == []
        assert list(tmp_path.iterdir()) == []
        assert "No packages" in caplog.text

    @pytest.mark.asyncio
    async def test_rows_keep_input_order(
        self, make_classifier, mit_license: License, tmp_path: Path
    ) -> None:
        """Test that rows appear in the order packages were given."""
        packages = [
            PackageRecord(id="Zeta", version="1.0"),
            PackageRecord(id="Alpha", version="2.0", license_url="https://l/mit"),
            PackageRecord(id="Mid", version="3.0"),
        ]
        classifier = make_classifier({"https://l/mit": mit_license})
        pipeline = ReportPipeline(LicenseResolutionChain(classifier))

        await pipeline.run(packages, [_reporter(tmp_path)], tmp_path)

        ids = [line.split("\t")[0] for line in _report_lines(tmp_path)[1:-1]]
        assert ids == ["Zeta", "Alpha", "Mid"]

    @pytest.mark.asyncio
    async def test_unresolved_package_has_empty_license_cells(
        self, make_classifier, tmp_path: Path
    ) -> None:
        """Test that a package without a license still gets a full row."""
        package = PackageRecord(
            id="Orphan", version="0.1", authors="Someone", require_license_acceptance=True
        )
        pipeline = ReportPipeline(LicenseResolutionChain(make_classifier()))

        await pipeline.run([package], [_reporter(tmp_path)], tmp_path)

        cells = _report_lines(tmp_path)[1].split("\t")
        assert len(cells) == len(HEADERS)
        assert cells[:3] == ["Orphan", "0.1", "Someone"]
        assert cells[6] == "True"
        assert cells[8:] == ["", "", ""]
        assert [p.name for p in tmp_path.iterdir()] == ["Licenses.txt"]

    @pytest.mark.asyncio
    async def test_shared_master_license_written_once(
        self, make_classifier, mit_license: License, tmp_path: Path, mocker
    ) -> None:
        """Test that two packages sharing a master text reference one file."""
        packages = [
            PackageRecord(id="A", version="1.0", license_url="https://l/mit"),
            PackageRecord(id="B", version="1.0", license_url="https://l/mit"),
        ]
        classifier = make_classifier({"https://l/mit": mit_license})
        materializer = LicenseFileMaterializer()
        spy = mocker.spy(materializer, "materialize")
        pipeline = ReportPipeline(LicenseResolutionChain(classifier), materializer=materializer)

        await pipeline.run(packages, [_reporter(tmp_path)], tmp_path)

        assert spy.call_count == 2
        assert [p.name for p in tmp_path.glob("*.txt") if p.name != "Licenses.txt"] == [
            "MIT.txt"
        ]
        rows = _report_lines(tmp_path)[1:3]
        assert all(row.endswith("\tMIT.txt") for row in rows)

    @pytest.mark.asyncio
    async def test_materializer_failure_leaves_filename_empty(
        self, make_classifier, newtonsoft: PackageRecord, mit_license: License, tmp_path: Path,
        mocker, caplog
    ) -> None:
        """Test that a failed text write is logged and the row still written."""
        materializer = LicenseFileMaterializer()
        mocker.patch.object(materializer, "materialize", side_effect=PermissionError("denied"))
        classifier = make_classifier({"https://example/license": mit_license})
        pipeline = ReportPipeline(LicenseResolutionChain(classifier), materializer=materializer)

        with caplog.at_level(logging.ERROR, logger="package_licenses.pipeline"):
            await pipeline.run([newtonsoft], [_reporter(tmp_path)], tmp_path)

        cells = _report_lines(tmp_path)[1].split("\t")
        assert cells[8:] == ["MIT", "MIT License", ""]
        assert "Could not save license text" in caplog.text

    @pytest.mark.asyncio
    async def test_failure_keeps_partial_report(
        self, make_classifier, mit_license: License, tmp_path: Path
    ) -> None:
        """Test that rows written before a failure are flushed and kept."""
        packages = [
            PackageRecord(id="Good", version="1.0", license_url="https://l/mit"),
            PackageRecord(id="Bad", version="1.0", license_url="https://l/broken"),
        ]
        classifier = make_classifier(
            answers={"https://l/mit": mit_license},
            errors={"https://l/broken": RuntimeError("boom")},
        )
        reporter = _reporter(tmp_path)
        pipeline = ReportPipeline(
            LicenseResolutionChain(classifier, error_policy=ErrorPolicy.RAISE)
        )

        with pytest.raises(ClassificationError):
            await pipeline.run(packages, [reporter], tmp_path)

        lines = _report_lines(tmp_path)
        assert lines[0] == "\t".join(HEADERS)
        assert lines[1].startswith("Good\t1.0\t")
        assert lines[2:] == [""]
        assert reporter._writer.closed

    @pytest.mark.asyncio
    async def test_every_reporter_receives_rows(
        self, make_classifier, newtonsoft: PackageRecord, tmp_path: Path, mocker
    ) -> None:
        """Test fan-out to multiple sinks."""
        first = mocker.AsyncMock()
        second = mocker.AsyncMock()
        first.close = mocker.Mock()
        second.close = mocker.Mock()
        pipeline = ReportPipeline(LicenseResolutionChain(make_classifier()))

        await pipeline.run([newtonsoft], [first, second], tmp_path)

        for reporter in (first, second):
            reporter.write_header.assert_awaited_once_with(HEADERS)
            reporter.write_row.assert_awaited_once()
            reporter.flush.assert_awaited_once()
            reporter.close.assert_called_once()

    @pytest.mark.asyncio
    async def test_transcript(
        self, make_classifier, newtonsoft: PackageRecord, mit_license: License, tmp_path: Path,
        caplog
    ) -> None:
        """Test the human-readable transcript lines."""
        classifier = make_classifier({"https://example/license": mit_license})
        transcript = logging.getLogger("tests.transcript")
        pipeline = ReportPipeline(LicenseResolutionChain(classifier), transcript=transcript)

        with caplog.at_level(logging.INFO, logger="tests.transcript"):
            await pipeline.run([newtonsoft], [_reporter(tmp_path)], tmp_path)

        messages = [r.getMessage() for r in caplog.records if r.name == "tests.transcript"]
        header, divider = messages[1].split("\n")
        assert header == "\t".join(HEADERS[:10])
        assert set(divider) <= {"-", "\t"}
        assert messages[2] == (
            "Newtonsoft.Json\t13.0.1\t\t\t\thttps://example/license\tFalse\t\tMIT\tMIT License"
        )
        assert messages[-1] == f"Saved to '{tmp_path}'"

    @pytest.mark.asyncio
    async def test_failing_flush_still_closes_other_reporters(
        self, make_classifier, newtonsoft: PackageRecord, tmp_path: Path, mocker, caplog
    ) -> None:
        """Test that one sink failing to flush does not leave later sinks open."""
        first = mocker.AsyncMock()
        first.close = mocker.Mock()
        first.flush.side_effect = OSError("disk full")
        second = mocker.AsyncMock()
        second.close = mocker.Mock()
        pipeline = ReportPipeline(LicenseResolutionChain(make_classifier()))

        with caplog.at_level(logging.ERROR, logger="package_licenses.pipeline"):
            with pytest.raises(OSError, match="disk full"):
                await pipeline.run([newtonsoft], [first, second], tmp_path)

        first.close.assert_called_once()
        second.flush.assert_awaited_once()
        second.close.assert_called_once()
        assert "Could not finalize" in caplog.text

    @pytest.mark.asyncio
    async def test_run_error_is_not_masked_by_flush_error(
        self, make_classifier, mocker, tmp_path: Path
    ) -> None:
        """Test that a failure during the run is raised over a later flush failure."""
        classifier = make_classifier(errors={"https://l/broken": RuntimeError("boom")})
        package = PackageRecord(id="Bad", version="1.0", license_url="https://l/broken")
        reporter = mocker.AsyncMock()
        reporter.close = mocker.Mock()
        reporter.flush.side_effect = OSError("disk full")
        pipeline = ReportPipeline(
            LicenseResolutionChain(classifier, error_policy=ErrorPolicy.RAISE)
        )

        with pytest.raises(ClassificationError):
            await pipeline.run([package], [reporter], tmp_path)

        reporter.close.assert_called_once()
