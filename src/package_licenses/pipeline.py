"""Report pipeline driving resolution, materialization and reporting.

Packages are processed strictly one at a time: the materializer's
check-then-write is only safe with a single writer per output directory.
The pipeline takes no cancellation token; a caller stops it by cancelling
the task running ``run()``, which takes effect at the next suspension point.
"""

import logging
from collections.abc import Iterable, Sequence
from pathlib import Path
from typing import Optional

from package_licenses.materializer import LicenseFileMaterializer
from package_licenses.models import License, PackageRecord
from package_licenses.reporters.base import BaseReporter
from package_licenses.reporters.rows import ReportRowBuilder
from package_licenses.resolution import LicenseResolutionChain

logger = logging.getLogger(__name__)


class ReportPipeline:
    """Resolves, saves and reports the licenses of a package sequence.

    Attributes:
        resolver: Resolution chain used per package.
        materializer: Writer of license text files.
        row_builder: Builder of report rows and transcript lines.
        transcript: Logger receiving the human-readable transcript.
    """

    def __init__(
        self,
        resolver: LicenseResolutionChain,
        materializer: Optional[LicenseFileMaterializer] = None,
        row_builder: Optional[ReportRowBuilder] = None,
        transcript: Optional[logging.Logger] = None,
    ) -> None:
        """Initialize the pipeline.

        Args:
            resolver: Resolution chain used per package.
            materializer: Writer of license text files. Defaults to UTF-8.
            row_builder: Builder of report rows.
            transcript: Logger receiving the transcript at INFO level.
                Defaults to this module's logger.
        """
        self.resolver = resolver
        self.materializer = materializer or LicenseFileMaterializer()
        self.row_builder = row_builder or ReportRowBuilder()
        self.transcript = transcript or logger

    async def run(
        self,
        packages: Iterable[PackageRecord],
        reporters: Sequence[BaseReporter],
        output_dir: Path,
    ) -> bool:
        """Run the pipeline over a package sequence.

        Packages are processed in the order given. Every reporter is flushed
        and closed before this method returns or raises, so rows appended
        before a failure are kept.

        Args:
            packages: Packages to report, in report order.
            reporters: Tabular sinks receiving the header and rows.
            output_dir: Existing directory receiving license text files.

        Returns:
            True if at least one row was produced, False if there were no
            packages (no reporter is touched in that case).
        """
        packages = list(packages)
        if not packages:
            self.transcript.warning("No packages")
            return False

        self.transcript.info("")
        self.transcript.info(self.row_builder.transcript_header())

        try:
            for reporter in reporters:
                await reporter.write_header(self.row_builder.headers)

            for package in packages:
                lic = await self.resolver.resolve(package)
                self.transcript.info(self.row_builder.transcript_line(package, lic))

                filename = self._materialize(lic, package, output_dir)
                row = self.row_builder.build_row(package, lic, filename).values()
                for reporter in reporters:
                    await reporter.write_row(row)

            self.transcript.info("")
        except BaseException:
            # The in-flight error wins over any finalization error
            await self._close_reporters(reporters)
            raise

        error = await self._close_reporters(reporters)
        if error is not None:
            raise error

        self.transcript.info("Saved to '%s'", output_dir)
        return True

    async def _close_reporters(
        self, reporters: Sequence[BaseReporter]
    ) -> Optional[Exception]:
        """Flush and close every reporter, even when some of them fail.

        Returns:
            The first finalization error, or None if all reporters closed cleanly.
        """
        first_error = None
        for reporter in reporters:
            try:
                try:
                    await reporter.flush()
                finally:
                    reporter.close()
            except Exception as e:
                logger.error("Could not finalize %s report: %s", reporter.format_name, e)
                if first_error is None:
                    first_error = e
        return first_error

    def _materialize(
        self,
        lic: Optional[License],
        package: PackageRecord,
        output_dir: Path,
    ) -> Optional[str]:
        try:
            return self.materializer.materialize(lic, package, output_dir)
        except OSError as e:
            self.transcript.error(
                "Could not save license text for %s %s: %s",
                package.id,
                package.version,
                e,
            )
            return None
