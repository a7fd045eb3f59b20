"""
Index store remapping with index-import.

Index stores built in the Bazel sandbox embed absolute execroot paths;
index-import rewrites them so periphery can resolve sources in the workspace.
"""
import logging
from pathlib import Path
from typing import Callable, List, Optional

from periphery_runner.config import RunnerConfig
from periphery_runner.errors import RemapFailure
from periphery_runner.exec import CommandRunner

logger = logging.getLogger(__name__)

REMAPPED_SUFFIX = ".remapped"


def remapped_path(tmpdir: Path, index_store: str) -> Path:
    """
    Destination for a remapped store: <tmpdir>/<basename><suffix>.

    >>> remapped_path(Path('/tmp/run'), '/a/b/c.indexstore')
    PosixPath('/tmp/run/c.indexstore.remapped')
    """
    return Path(tmpdir) / (Path(index_store).name + REMAPPED_SUFFIX)


class IndexImporter:
    """Runs index-import through `bazel run` for each index store."""

    def __init__(self, config: RunnerConfig, runner: CommandRunner):
        self.config = config
        self.runner = runner

    def build_args(self, index_store: str, destination: Path) -> List[str]:
        return [
            self.config.bazel_path,
            'run',
            self.config.index_import_label,
            '--',
            f'--remap={self.config.remap_rule()}',
            index_store,
            str(destination),
        ]

    def remap(self, index_store: str) -> Path:
        """
        Remap a single index store into the run's temp directory.

        Raises:
            RemapFailure: If index-import exits non-zero
        """
        destination = remapped_path(self.config.ensure_tmpdir(), index_store)
        result = self.runner.run_command(self.build_args(index_store, destination))

        if result.returncode != 0:
            raise RemapFailure(
                f"index-import failed for {index_store} (exit {result.returncode})",
                index_store=index_store,
                stderr=result.stderr
            )

        logger.info(f"Remapped {index_store} -> {destination}")
        return destination

    def remap_all(
        self,
        index_stores: List[str],
        on_remapped: Optional[Callable[[str, Path], None]] = None
    ) -> List[Path]:
        """
        Remap stores sequentially, preserving input order.

        Args:
            index_stores: Index store paths from the build event log
            on_remapped: Called with (index_store, destination) after each store

        Returns:
            Remapped store paths, one per input store
        """
        remapped = []
        sources = {}

        for store in index_stores:
            destination = remapped_path(self.config.ensure_tmpdir(), store)
            if destination in sources:
                # Same basename from another directory; index-import overwrites it
                logger.warning(
                    f"{store} and {sources[destination]} both remap to {destination}; "
                    f"the earlier store will be overwritten"
                )
            sources[destination] = store

            destination = self.remap(store)
            if on_remapped is not None:
                on_remapped(store, destination)
            remapped.append(destination)

        return remapped
