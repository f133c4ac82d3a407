"""Core sync engine for mirroring a directory into a container."""

import logging
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Optional

from ..api import SwiftClient
from ..config import SyncSettings
from ..exceptions import BackendWriteError, ConfigError, SwiftlyError
from ..output import OutputFormatter
from ..utils import calculate_md5
from .comparator import FileComparator, SyncAction
from .operations import SyncOperations
from .outcomes import SyncOutcome, SyncReport
from .scanner import DesiredEntry, DirectoryScanner
from .state import RemoteListing
from .workers import WorkerPool

logger = logging.getLogger(__name__)


class SyncEngine:
    """Reconciles a container with a local directory tree.

    A run goes through six steps:

    1. Snapshot the container listing.
    2. Walk the local tree, discarding every discovered name from the
       listing. What remains is the stale set.
    3. Create the container (and publish it as a website). This is the
       first write, so a failed walk leaves the container untouched.
    4. Ensure every directory marker exists (one task per directory).
    5. Upload changed files with a fixed number of workers.
    6. Delete the stale set in one bulk request.

    Every run starts from scratch; nothing is cached between runs.
    """

    def __init__(
        self,
        client: SwiftClient,
        output: Optional[OutputFormatter] = None,
    ):
        """Initialize sync engine.

        Args:
            client: Authenticated Swift client
            output: Output formatter for displaying progress/status
        """
        self.client = client
        self.output = output or OutputFormatter()
        self.comparator = FileComparator()

    def sync(self, settings: SyncSettings) -> SyncReport:
        """Mirror ``settings.local`` into ``settings.container``.

        Args:
            settings: Run settings

        Returns:
            SyncReport with the outcome of every entry

        Raises:
            ConfigError: If the local path is not a directory
            DiscoveryError: If the local tree cannot be walked. Nothing has
                been written to the container at that point.
            ContainerError: If the container cannot be created or
                configured

        Examples:
            >>> engine = SyncEngine(client)
            >>> report = engine.sync(SyncSettings(local=Path("site"), container="example.com"))
            >>> print(f"Uploaded {report.count(SyncOutcome.UPLOADED)} files")
        """
        if not settings.local.exists():
            raise ConfigError(f"Local directory does not exist: {settings.local}")
        if not settings.local.is_dir():
            raise ConfigError(f"Local path is not a directory: {settings.local}")

        start_time = time.time()
        operations = SyncOperations(self.client, settings.container)
        report = SyncReport(dry_run=settings.dry_run)

        if settings.dry_run:
            self.output.info("Dry run: No changes will be made")

        # Step 1 + 2: snapshot, then walk and diff
        listing = self.snapshot_remote(operations, report)
        scanner = DirectoryScanner(exclude=settings.exclude)
        state = scanner.scan_local(settings.local, listing)

        # Step 3: container (first write)
        if not settings.dry_run:
            operations.prepare_container(website=settings.website)

        # Step 4: directory markers (joined before uploads start)
        self.materialize_directories(
            operations,
            state.directories,
            report,
            dry_run=settings.dry_run,
            max_workers=settings.directory_workers,
        )

        # Step 5: files
        self.sync_objects(
            operations,
            state.files,
            report,
            dry_run=settings.dry_run,
            max_workers=settings.workers,
        )

        # Step 6: stale objects
        self.purge_stale(operations, listing, report, dry_run=settings.dry_run)

        logger.debug("Sync finished in %.2fs", time.time() - start_time)
        if not self.output.quiet and not self.output.json_output:
            self._display_summary(report)
        return report

    def snapshot_remote(
        self, operations: SyncOperations, report: SyncReport
    ) -> RemoteListing:
        """Fetch the current container listing.

        A failed listing is reported and treated as empty, so no stale
        object is deleted in this run.

        Args:
            operations: Storage operations
            report: Run report

        Returns:
            RemoteListing with all existing object names
        """
        scan_start = time.time()
        try:
            names = operations.list_remote()
        except SwiftlyError as e:
            message = f"Problem getting existing object names: {e}"
            self.output.error(message)
            report.record_phase_error(message)
            return RemoteListing()

        logger.debug(
            "Remote listing took %.2fs for %d object(s)",
            time.time() - scan_start,
            len(names),
        )
        return RemoteListing(names)

    # =========================
    # Directory markers
    # =========================

    def materialize_directories(
        self,
        operations: SyncOperations,
        directories: list[DesiredEntry],
        report: SyncReport,
        dry_run: bool = False,
        max_workers: Optional[int] = None,
    ) -> None:
        """Ensure a directory marker exists for every directory entry.

        All checks are started before any is awaited, and the method returns
        only when every one has finished.

        Args:
            operations: Storage operations
            directories: Directory entries
            report: Run report (modified in place)
            dry_run: If True, do not create markers
            max_workers: Optional cap on concurrent checks
                (default: one thread per directory)
        """
        paths = [d.object_path for d in directories if d.object_path]
        if not paths:
            return

        workers = min(max_workers, len(paths)) if max_workers else len(paths)
        logger.debug("Checking %d directories with %d workers", len(paths), workers)

        with ThreadPoolExecutor(
            max_workers=workers, thread_name_prefix="swiftly-dir"
        ) as executor:
            futures = {
                executor.submit(
                    self._materialize_directory, operations, path, report, dry_run
                ): path
                for path in paths
            }
            for future in as_completed(futures):
                try:
                    future.result()
                except Exception as e:
                    path = futures[future]
                    self.output.error(f"Unexpected error for folder '{path}': {e}")
                    report.record(path, SyncOutcome.ERROR, str(e))

    def _materialize_directory(
        self,
        operations: SyncOperations,
        path: str,
        report: SyncReport,
        dry_run: bool,
    ) -> None:
        remote = operations.get_remote_info(path)
        decision = self.comparator.compare_directory(path, remote)

        if decision.action == SyncAction.SKIP:
            report.record(path, SyncOutcome.UNCHANGED)
            self.output.outcome("unchanged", path, dry_run)
            return

        if not dry_run:
            try:
                operations.create_directory(path)
            except SwiftlyError as e:
                self.output.error(f"Problem creating folder '{path}': {e}")
                report.record(path, SyncOutcome.ERROR, str(e))
                return

        report.record(path, SyncOutcome.CREATED, decision.reason)
        self.output.outcome("added dir", path, dry_run)

    # =========================
    # Objects
    # =========================

    def sync_objects(
        self,
        operations: SyncOperations,
        files: list[DesiredEntry],
        report: SyncReport,
        dry_run: bool = False,
        max_workers: int = 4,
    ) -> None:
        """Upload every file whose content differs from the remote object.

        Args:
            operations: Storage operations
            files: File entries
            report: Run report (modified in place)
            dry_run: If True, do not upload
            max_workers: Number of concurrent workers
        """
        if not files:
            return

        logger.debug(f"Syncing {len(files)} file(s) with {max_workers} workers")

        def handler(entry: DesiredEntry) -> None:
            self._sync_object(operations, entry, report, dry_run)

        WorkerPool(handler, max_workers=max_workers).run(files)

    def _sync_object(
        self,
        operations: SyncOperations,
        entry: DesiredEntry,
        report: SyncReport,
        dry_run: bool,
    ) -> None:
        """Hash, compare and, if needed, upload a single file."""
        path = entry.object_path
        if entry.local_path is None:
            raise ValueError(f"Entry has no local file: {path}")
        action_start = time.time()

        try:
            local_hash = calculate_md5(entry.local_path)
        except SwiftlyError as e:
            self.output.error(f"Problem creating hash for path '{entry.local_path}': {e}")
            report.record(path, SyncOutcome.ERROR, str(e))
            return

        try:
            remote = operations.get_remote_info(path)
            decision = self.comparator.compare_file(path, local_hash, remote)

            if decision.action == SyncAction.SKIP:
                report.record(path, SyncOutcome.UNCHANGED)
                self.output.outcome("unchanged", path, dry_run)
                return

            self.output.outcome("started", path, dry_run)
            if not dry_run:
                operations.upload_file(entry, local_hash)
        except OSError as e:
            self.output.error(f"Problem opening file '{entry.local_path}': {e}")
            report.record(path, SyncOutcome.ERROR, str(e))
            return
        except SwiftlyError as e:
            self.output.error(f"Problem uploading object '{path}': {e}")
            report.record(path, SyncOutcome.ERROR, str(e))
            return

        report.record(path, SyncOutcome.UPLOADED, decision.reason)
        self.output.outcome("uploaded", path, dry_run)
        logger.debug(f"Upload of {path} took {time.time() - action_start:.2f}s")

    # =========================
    # Stale objects
    # =========================

    def purge_stale(
        self,
        operations: SyncOperations,
        listing: RemoteListing,
        report: SyncReport,
        dry_run: bool = False,
    ) -> None:
        """Delete every object left in the listing with one bulk request.

        A failure is reported once for the whole batch. Names the server
        reports as not deleted are never recorded as removed.

        Args:
            operations: Storage operations
            listing: Remote listing after the local walk
            report: Run report (modified in place)
            dry_run: If True, do not delete
        """
        stale = listing.stale()
        if not stale:
            return

        removed = stale
        if not dry_run:
            try:
                operations.delete_remote(stale)
            except BackendWriteError as e:
                message = f"Problem deleting stale objects: {e}"
                self.output.error(message)
                report.record_phase_error(message)
                failed = set(e.failed)
                removed = [p for p in stale if failed and p not in failed]
            except SwiftlyError as e:
                message = f"Problem deleting stale objects: {e}"
                self.output.error(message)
                report.record_phase_error(message)
                removed = []

        for path in removed:
            report.record(path, SyncOutcome.REMOVED)
            self.output.outcome("removed", path, dry_run)

    def _display_summary(self, report: SyncReport) -> None:
        """Display sync summary.

        Args:
            report: Run report
        """
        self.output.print("")
        if report.dry_run:
            self.output.success("Dry run complete!")
        else:
            self.output.success("Sync complete!")

        if report.write_count > 0:
            self.output.info(f"Total changes: {report.write_count}")
            if report.count(SyncOutcome.CREATED) > 0:
                self.output.info(f"  Directories created: {report.count(SyncOutcome.CREATED)}")
            if report.count(SyncOutcome.UPLOADED) > 0:
                self.output.info(f"  Uploaded: {report.count(SyncOutcome.UPLOADED)}")
            if report.count(SyncOutcome.REMOVED) > 0:
                self.output.info(f"  Removed: {report.count(SyncOutcome.REMOVED)}")
        else:
            self.output.info("No changes needed - everything is in sync!")

        if report.has_errors:
            self.output.warning(f"{report.error_count} error(s) occurred during sync")
