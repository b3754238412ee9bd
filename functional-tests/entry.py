#!/usr/bin/env python3
"""
Functional test runner, against a real Electrum binary.

The binary is resolved like the library does: `ELECTRUMD_EXE`, or a
provisioned version selected with `ELECTRUMD_VERSION`.

Usage:
    ./entry.py                    # Run all tests
    ./entry.py -t test_stop       # Run specific test
    ./entry.py -g teardown        # Run test group
"""

import argparse
import os
import sys

import flexitest

from common.runtime import TestRuntimeWithLogging
from common.test_logging import setup_logging
from electrumd import PortMode, exe_path
from electrumd.config import ServiceType
from envconfigs.electrum import ElectrumEnvConfig
from factories.electrum import ElectrumFactory

TEST_DIR = "tests"
DD_ROOT = "_dd"


def parse_args(argv: list[str]) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="entry.py",
        description="Run functional tests",
    )
    parser.add_argument(
        "-t",
        "--test",
        nargs="*",
        help="Run specific test(s)",
    )
    parser.add_argument(
        "-g",
        "--group",
        nargs="*",
        help="Run test group(s)",
    )
    return parser.parse_args(argv[1:])


def filter_tests(parsed_args: argparse.Namespace, modules: dict[str, str]) -> dict[str, str]:
    """
    Filters test modules against parsed args supplied from the command line.

    A test's groups are the directories between `tests/` and its file.
    """
    arg_groups = frozenset(parsed_args.group or [])
    # Extract filenames from the tests paths.
    arg_tests = frozenset(
        [os.path.split(t)[1].removesuffix(".py") for t in parsed_args.test or []]
    )

    filtered = dict()
    for test, path in modules.items():
        test_path_parts = os.path.normpath(path).split(os.path.sep)
        idx = next((i for i, part in enumerate(test_path_parts) if part == TEST_DIR), None)
        test_groups = frozenset(test_path_parts[idx + 1 : -1]) if idx is not None else frozenset()

        take = True
        if arg_groups and not (arg_groups & test_groups):
            take = False
        if arg_tests and test not in arg_tests:
            take = False

        if take:
            filtered[test] = path

    return filtered


def main(argv: list[str]) -> int:
    """Main entry point."""
    args = parse_args(argv)
    setup_logging()

    # Create factories
    factories: dict[ServiceType, flexitest.Factory] = {
        ServiceType.Electrum: ElectrumFactory(exe_path()),
    }

    # Define global environments
    global_envs: dict[str, flexitest.EnvConfig] = {
        "basic": ElectrumEnvConfig(),
        "self_assigned": ElectrumEnvConfig(port_mode=PortMode.SelfAssigned),
    }

    # Set up test runtime
    root_dir = os.path.dirname(os.path.abspath(__file__))
    datadir = flexitest.create_datadir_in_workspace(os.path.join(root_dir, DD_ROOT))
    runtime = TestRuntimeWithLogging(global_envs, datadir, factories)

    # Discover tests
    test_dir = os.path.join(root_dir, TEST_DIR)
    modules = filter_tests(args, flexitest.runtime.scan_dir_for_modules(test_dir))
    tests = flexitest.runtime.load_candidate_modules(modules)

    # Run tests
    runtime.prepare_registered_tests()
    results = runtime.run_tests(tests)

    # Save and display results
    runtime.save_json_file("results.json", results)
    flexitest.dump_results(results)

    # Exit with error if any test failed
    flexitest.fail_on_error(results)

    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv))
