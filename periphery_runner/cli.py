#!/usr/bin/env python3
"""
periphery-runner - run Periphery over Bazel-built Swift index stores.

Builds the target pattern with index-while-building, remaps the produced
index stores into the workspace, then prints the periphery scan output.
"""
import argparse
import logging
import os
import sys
from pathlib import Path

from periphery_runner.config import RunnerConfig
from periphery_runner.errors import PeripheryRunnerError
from periphery_runner.exec import CommandError
from periphery_runner.orchestrator import PeripheryOrchestrator


def parse_args(args=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog='periphery-runner',
        description='Run Periphery over index stores produced by a Bazel build',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  periphery-runner bazel
  periphery-runner /usr/local/bin/bazelisk --target //app/...
  periphery-runner bazel --config periphery.yaml --require-index-stores
        """,
    )

    parser.add_argument('bazel_path', help='Path to the bazel executable')

    parser.add_argument(
        '--config',
        default=None,
        help='YAML file with runner settings'
    )

    parser.add_argument(
        '--workdir',
        default=None,
        help='Bazel workspace directory (default: current directory)'
    )

    parser.add_argument('--target', default=None, help='Bazel target pattern to build')

    parser.add_argument(
        '--timeout',
        type=float,
        default=None,
        help='Timeout in seconds for each subprocess (default: $PERIPHERY_RUNNER_TIMEOUT or none)'
    )

    parser.add_argument(
        '--require-index-stores',
        action='store_true',
        help='Fail instead of warning when the build produces no index stores'
    )

    parser.add_argument(
        '--cleanup',
        action='store_true',
        help='Remove the temporary directory after the run'
    )

    parser.add_argument(
        '--log-level',
        default=os.environ.get('PERIPHERY_RUNNER_LOG_LEVEL', 'WARNING'),
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
        type=str.upper,
        help='Logging level (default: $PERIPHERY_RUNNER_LOG_LEVEL or WARNING)'
    )

    return parser.parse_args(args)


def load_config(parsed) -> RunnerConfig:
    """Combine defaults, YAML file, environment and CLI flags, in that order."""
    workdir = Path(parsed.workdir).resolve() if parsed.workdir else Path.cwd()

    if parsed.config:
        config = RunnerConfig.from_yaml(Path(parsed.config), parsed.bazel_path, workdir)
    else:
        config = RunnerConfig(bazel_path=parsed.bazel_path, workdir=workdir)

    config.apply_env()

    if parsed.target:
        config.target_pattern = parsed.target
    if parsed.timeout is not None:
        if parsed.timeout <= 0:
            raise ValueError(f"--timeout must be positive, got {parsed.timeout}")
        config.timeout = parsed.timeout
    if parsed.require_index_stores:
        config.require_index_stores = True
    if parsed.cleanup:
        config.cleanup = True

    return config


def main(args=None) -> int:
    """Main CLI entry point. Returns the process exit code."""
    parsed = parse_args(args)

    logging.basicConfig(
        level=getattr(logging, parsed.log_level),
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
        stream=sys.stderr
    )

    try:
        config = load_config(parsed)
    except (OSError, ValueError, TypeError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    try:
        result = PeripheryOrchestrator(config).run()
    except (PeripheryRunnerError, CommandError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        stderr = getattr(e, 'stderr', None)
        if stderr:
            print(stderr, file=sys.stderr)
        report_tmpdir(config)
        return 1

    print(result.output, end='' if result.output.endswith('\n') else '\n')
    report_tmpdir(config)

    return result.returncode


def report_tmpdir(config: RunnerConfig):
    """Tell the user where the event log and remapped stores were kept."""
    if not config.cleanup and config.tmpdir is not None and config.tmpdir.is_dir():
        print(f"Artifacts kept in: {config.tmpdir}", file=sys.stderr)


if __name__ == '__main__':
    sys.exit(main())
