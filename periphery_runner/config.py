"""
Runner configuration for periphery scans.

Defaults mirror the rules_swift periphery setup. A YAML file and environment
variables can override them; CLI flags are applied last by the caller.
"""
import os
import tempfile
import yaml
from pathlib import Path
from typing import Optional, Mapping
from dataclasses import dataclass


DEFAULT_TARGET_PATTERN = "//examples/xplatform/swift_import/..."
DEFAULT_FEATURES = "swift.index_while_building"
DEFAULT_OUTPUT_GROUPS = "+swift_index_store"
DEFAULT_EVENT_LOG_NAME = "periphery_bep.text"
DEFAULT_INDEX_IMPORT_LABEL = "@build_bazel_rules_swift_index_import//:index_import"
DEFAULT_REMAP_PATTERN = "^/.+/build_bazel_rules_swift"
DEFAULT_PERIPHERY_LABEL = "@com_github_peripheryapp//:periphery"
DEFAULT_FILE_TARGETS_NAME = "file-targets-path.txt"

TMPDIR_PREFIX = "periphery-"

# Keys a YAML config file may set. bazel_path and workdir come from the caller.
YAML_KEYS = {
    'target_pattern', 'features', 'output_groups', 'event_log_name',
    'index_import_label', 'remap_pattern', 'periphery_label',
    'file_targets_name', 'tmpdir', 'timeout', 'require_index_stores', 'cleanup',
}


@dataclass
class RunnerConfig:
    """Settings for one periphery run."""
    bazel_path: str
    workdir: Path
    target_pattern: str = DEFAULT_TARGET_PATTERN
    features: str = DEFAULT_FEATURES
    output_groups: str = DEFAULT_OUTPUT_GROUPS
    event_log_name: str = DEFAULT_EVENT_LOG_NAME
    index_import_label: str = DEFAULT_INDEX_IMPORT_LABEL
    remap_pattern: str = DEFAULT_REMAP_PATTERN
    periphery_label: str = DEFAULT_PERIPHERY_LABEL
    file_targets_name: str = DEFAULT_FILE_TARGETS_NAME
    tmpdir: Optional[Path] = None
    timeout: Optional[float] = None
    require_index_stores: bool = False
    cleanup: bool = False

    def __post_init__(self):
        self.workdir = Path(self.workdir)
        if self.tmpdir is not None:
            self.tmpdir = Path(self.tmpdir).expanduser()
        if self.timeout is not None:
            self.timeout = float(self.timeout)
            if self.timeout <= 0:
                raise ValueError(f"timeout must be positive, got {self.timeout}")

    @classmethod
    def from_yaml(cls, yaml_path: Path, bazel_path: str, workdir: Path) -> 'RunnerConfig':
        """
        Load runner configuration from a YAML file.

        Args:
            yaml_path: Path to YAML config file
            bazel_path: Bazel executable to invoke
            workdir: Bazel workspace directory

        Returns:
            RunnerConfig instance

        Raises:
            FileNotFoundError: If YAML file doesn't exist
            ValueError: If the file is not valid YAML, not a mapping, or has unknown keys
        """
        if not yaml_path.is_file():
            raise FileNotFoundError(f"Runner config not found: {yaml_path}")

        with open(yaml_path, 'r') as f:
            try:
                data = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ValueError(f"Invalid YAML in {yaml_path}: {e}") from e

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ValueError(f"Runner config must be a mapping: {yaml_path}")

        unknown = sorted(set(data) - YAML_KEYS)
        if unknown:
            raise ValueError(f"Unknown fields in {yaml_path}: {', '.join(unknown)}")

        return cls(bazel_path=bazel_path, workdir=workdir, **data)

    def apply_env(self, environ: Mapping[str, str] = None) -> 'RunnerConfig':
        """Apply PERIPHERY_RUNNER_* environment overrides in place."""
        if environ is None:
            environ = os.environ

        timeout = environ.get("PERIPHERY_RUNNER_TIMEOUT")
        if timeout:
            self.timeout = float(timeout)
            if self.timeout <= 0:
                raise ValueError(f"PERIPHERY_RUNNER_TIMEOUT must be positive, got {timeout}")

        target = environ.get("PERIPHERY_RUNNER_TARGET")
        if target:
            self.target_pattern = target

        return self

    def ensure_tmpdir(self) -> Path:
        """Create the run's temp directory on first use and return it."""
        if self.tmpdir is None:
            self.tmpdir = Path(tempfile.mkdtemp(prefix=TMPDIR_PREFIX))
        else:
            self.tmpdir.mkdir(parents=True, exist_ok=True)
        return self.tmpdir

    def event_log_path(self) -> Path:
        """Get full path to the build event text log."""
        return self.ensure_tmpdir() / self.event_log_name

    def file_targets_path(self) -> Path:
        """Get full path to the file targets manifest within the workspace."""
        return self.workdir / self.file_targets_name

    def remap_rule(self) -> str:
        """Get the index-import remap rule pointing sandbox paths at workdir."""
        return f"{self.remap_pattern}={self.workdir}"
