"""
Periphery orchestrator - build, extract, remap, scan.

Each step blocks on the previous one; there is no retry and no parallelism.
Failures in build and remap abort the run before periphery is invoked.
"""
import logging
import shutil
from pathlib import Path
from typing import List, Optional

from periphery_runner.bep import extract_index_stores, read_event_log
from periphery_runner.config import RunnerConfig
from periphery_runner.errors import BuildFailure, NoIndexStoresFound, RemapFailure
from periphery_runner.exec import CommandRunner
from periphery_runner.remap import IndexImporter
from periphery_runner.run_log import RunLog, RUN_LOG_NAME
from periphery_runner.scan import PeripheryScanner, ScanResult

logger = logging.getLogger(__name__)


class PeripheryOrchestrator:
    """
    Runs the periphery pipeline for one Bazel workspace.

    The temp directory is created once per run and shared by every step:
    it holds the build event log, the remapped stores and the run log.
    """

    def __init__(
        self,
        config: RunnerConfig,
        runner: Optional[CommandRunner] = None,
        run_log: Optional[RunLog] = None
    ):
        self.config = config
        self.tmpdir = config.ensure_tmpdir()

        if runner is None:
            runner = CommandRunner(config.workdir, timeout=config.timeout)
        self.runner = runner

        if run_log is None:
            run_log = RunLog(self.tmpdir / RUN_LOG_NAME)
        self.run_log = run_log

        self.importer = IndexImporter(config, runner)
        self.scanner = PeripheryScanner(config, runner)

    def build_args(self) -> List[str]:
        return [
            self.config.bazel_path,
            'build',
            self.config.target_pattern,
            f'--build_event_text_file={self.config.event_log_path()}',
            f'--features={self.config.features}',
            f'--output_groups={self.config.output_groups}',
        ]

    def build(self) -> Path:
        """
        Build the target pattern with index-while-building enabled.

        Returns:
            Path to the build event log

        Raises:
            BuildFailure: If bazel exits non-zero or writes no log
        """
        logger.info(f"Building {self.config.target_pattern}")
        self.run_log.log_event('build_started', {'target_pattern': self.config.target_pattern})

        result = self.runner.run_command(self.build_args())
        if result.returncode != 0:
            self.run_log.log_event('build_failed', {'returncode': result.returncode})
            raise BuildFailure(
                f"bazel build exited with status {result.returncode}",
                stderr=result.stderr
            )

        log_path = self.config.event_log_path()
        if not log_path.is_file():
            self.run_log.log_event('build_failed', {'reason': 'missing_event_log'})
            raise BuildFailure(f"Build event log not found: {log_path}", stderr=result.stderr)

        self.run_log.log_event('build_completed', {'event_log': str(log_path)})
        return log_path

    def extract(self) -> List[str]:
        """
        Collect unique index store paths from the build event log.

        Raises:
            NoIndexStoresFound: If none are found and require_index_stores is set
        """
        log_path = self.config.event_log_path()
        stores = extract_index_stores(read_event_log(log_path))

        self.run_log.log_event('index_stores_found', {'count': len(stores), 'index_stores': stores})

        if not stores:
            message = f"No index stores found in {log_path}"
            if self.config.require_index_stores:
                raise NoIndexStoresFound(message)
            logger.warning(f"{message}; periphery will run without index stores")
        else:
            logger.info(f"Found {len(stores)} index store(s)")

        return stores

    def remap(self, stores: List[str]) -> List[Path]:
        """Remap each index store into the temp directory, one at a time."""
        def record(store: str, destination: Path):
            self.run_log.log_event('remap_completed', {
                'index_store': store,
                'remapped': str(destination)
            })

        try:
            return self.importer.remap_all(stores, on_remapped=record)
        except RemapFailure as e:
            self.run_log.log_event('remap_failed', {'index_store': e.index_store})
            raise

    def scan(self, remapped: List[Path]) -> ScanResult:
        """Run periphery over the remapped stores."""
        logger.info(f"Scanning with {len(remapped)} index store(s)")
        result = self.scanner.scan(remapped)
        self.run_log.log_event('scan_completed', {'returncode': result.returncode})
        return result

    def run(self) -> ScanResult:
        """
        Run build, extract, remap and scan in order.

        With cleanup enabled, the temp directory is removed afterwards even
        when a step fails.
        """
        try:
            self.build()
            stores = self.extract()
            remapped = self.remap(stores)
            return self.scan(remapped)
        finally:
            if self.config.cleanup:
                self.cleanup()

    def cleanup(self):
        """Remove the run's temp directory."""
        if self.tmpdir.exists():
            logger.debug(f"Removing {self.tmpdir}")
            shutil.rmtree(self.tmpdir, ignore_errors=True)
