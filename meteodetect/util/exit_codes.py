"""Documented exit codes for the meteodetect CLI.

Exit codes follow UNIX conventions:
- 0: Success
- 1: General/unspecified error
- 2: Invalid command-line arguments or usage
- 3-5: Application-specific errors

These codes let wrapper scripts tell an unreadable capture apart from an
unwritable output directory without parsing stderr.

Usage:
    from meteodetect.util.exit_codes import ExitCode
    sys.exit(ExitCode.INPUT_UNAVAILABLE)
"""

from __future__ import annotations


class ExitCode:
    """Exit code constants for meteodetect processes.

    Attributes:
        SUCCESS: Normal termination, every input sample processed.
        GENERAL_ERROR: Unspecified runtime error.
        INVALID_ARGS: Command-line argument validation failed.
        INPUT_UNAVAILABLE: Input capture could not be opened or read.
        OUTPUT_UNAVAILABLE: Output stream could not be opened or written.
        DETECTOR_INIT: Detector construction failed (filters, buffers).
    """

    SUCCESS: int = 0
    GENERAL_ERROR: int = 1
    INVALID_ARGS: int = 2
    INPUT_UNAVAILABLE: int = 3
    OUTPUT_UNAVAILABLE: int = 4
    DETECTOR_INIT: int = 5

    @classmethod
    def message(cls, code: int) -> str:
        """Return a human-readable message for an exit code."""
        messages = {
            cls.SUCCESS: "Success",
            cls.GENERAL_ERROR: "General error",
            cls.INVALID_ARGS: "Invalid arguments",
            cls.INPUT_UNAVAILABLE: "Input capture unavailable",
            cls.OUTPUT_UNAVAILABLE: "Output stream unavailable",
            cls.DETECTOR_INIT: "Detector initialization failed",
        }
        return messages.get(code, f"Unknown exit code {code}")
