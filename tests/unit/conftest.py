"""
Pytest configuration for unit tests.

Provides a fake command runner that stands in for bazel subprocesses.
"""
import subprocess
import pytest
from pathlib import Path

from periphery_runner.config import RunnerConfig


class FakeRunner:
    """
    Records commands and answers them without spawning processes.

    `bazel build` writes `event_log_text` to the requested log file;
    `bazel run` returns the configured exit codes and output.
    """

    def __init__(self, event_log_text="", build_returncode=0, remap_returncode=0,
                 scan_returncode=0, scan_output="", write_event_log=True):
        self.event_log_text = event_log_text
        self.build_returncode = build_returncode
        self.remap_returncode = remap_returncode
        self.scan_returncode = scan_returncode
        self.scan_output = scan_output
        self.write_event_log = write_event_log
        self.commands = []

    def run_command(self, command, cwd=None, merge_stderr=False):
        command = [str(arg) for arg in command]
        self.commands.append(command)

        if command[1] == 'build':
            if self.write_event_log:
                for arg in command:
                    if arg.startswith('--build_event_text_file='):
                        Path(arg.split('=', 1)[1]).write_text(self.event_log_text)
            return subprocess.CompletedProcess(command, self.build_returncode, "", "build stderr")

        if 'index_import' in command[2]:
            return subprocess.CompletedProcess(command, self.remap_returncode, "", "remap stderr")

        return subprocess.CompletedProcess(command, self.scan_returncode, self.scan_output, None)

    def calls(self, kind):
        if kind == 'build':
            return [c for c in self.commands if c[1] == 'build']
        if kind == 'remap':
            return [c for c in self.commands if c[1] == 'run' and 'index_import' in c[2]]
        return [c for c in self.commands if c[1] == 'run' and 'periphery' in c[2]]


@pytest.fixture
def config(tmp_path):
    """Runner config with an isolated workdir and temp dir."""
    workdir = tmp_path / "workspace"
    workdir.mkdir()
    return RunnerConfig(
        bazel_path="bazel",
        workdir=workdir,
        tmpdir=tmp_path / "run"
    )


@pytest.fixture
def fake_runner_factory():
    return FakeRunner
