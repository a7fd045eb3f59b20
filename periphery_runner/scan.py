"""
Periphery scan invocation.
"""
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List

from periphery_runner.config import RunnerConfig
from periphery_runner.errors import ScanFailure
from periphery_runner.exec import CommandRunner

logger = logging.getLogger(__name__)


@dataclass
class ScanResult:
    """Outcome of a periphery scan."""
    returncode: int
    output: str
    index_stores: List[Path]

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    def raise_for_status(self):
        """Raise ScanFailure if periphery exited non-zero."""
        if not self.ok:
            raise ScanFailure(
                f"periphery scan exited with status {self.returncode}",
                returncode=self.returncode,
                output=self.output
            )


def build_scan_args(config: RunnerConfig, remapped: List[Path]) -> List[str]:
    """
    Build the periphery scan command line.

    Each index store is its own argv element, so paths containing spaces
    reach periphery unchanged.
    """
    args = [
        config.bazel_path,
        'run',
        config.periphery_label,
        '--',
        'scan',
        '--skip-build',
        '--file-targets-path',
        str(config.file_targets_path()),
    ]

    for store in remapped:
        args.extend(['--index-store-path', str(store)])

    return args


class PeripheryScanner:
    """Runs periphery over remapped index stores."""

    def __init__(self, config: RunnerConfig, runner: CommandRunner):
        self.config = config
        self.runner = runner

    def scan(self, remapped: List[Path]) -> ScanResult:
        result = self.runner.run_command(
            build_scan_args(self.config, remapped),
            merge_stderr=True
        )

        if result.returncode != 0:
            logger.warning(f"periphery exited with status {result.returncode}")

        return ScanResult(
            returncode=result.returncode,
            output=result.stdout or "",
            index_stores=list(remapped)
        )
