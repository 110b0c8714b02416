"""Shared assertions for the kitectl test suite."""

from tests.helpers.cli_assertions import (
    assert_command_failed,
    assert_command_success,
    assert_error_message,
    assert_output_contains,
    assert_output_matches,
    assert_success_indicator,
    load_json_output,
)

__all__ = [
    "assert_command_failed",
    "assert_command_success",
    "assert_error_message",
    "assert_output_contains",
    "assert_output_matches",
    "assert_success_indicator",
    "load_json_output",
]
