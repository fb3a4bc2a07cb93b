#!/usr/bin/env python3
"""
Build TelemetryDeck.Error.occurred signals.

Errors are grouped by category so they can be told apart in the dashboard:
    thrown-exception  an exception was raised and caught
    user-input        the user entered something invalid
    app-state         the app reached an inconsistent state

Usage:
    python3 scripts/error_signals.py FileNotFound --category thrown-exception
    python3 scripts/error_signals.py InvalidEmail --category user-input --message "missing @"
    python3 scripts/error_signals.py SyncConflict --param screen=Settings
"""

import argparse
import json
import sys
from enum import Enum
from typing import Optional, Union

from signals import Signal

ERROR_SIGNAL = "TelemetryDeck.Error.occurred"
ERROR_ID_KEY = "TelemetryDeck.Error.id"
ERROR_CATEGORY_KEY = "TelemetryDeck.Error.category"
ERROR_MESSAGE_KEY = "TelemetryDeck.Error.message"


class ErrorCategory(str, Enum):
    THROWN_EXCEPTION = "thrown-exception"
    USER_INPUT = "user-input"
    APP_STATE = "app-state"


def parse_category(category: Union[str, ErrorCategory]) -> ErrorCategory:
    if isinstance(category, ErrorCategory):
        return category
    try:
        return ErrorCategory(category)
    except ValueError:
        valid = ", ".join(c.value for c in ErrorCategory)
        raise ValueError(f"unknown error category '{category}' (expected one of: {valid})") from None


def error_signal(id: str, category: Union[str, ErrorCategory, None] = None,
                 message: Optional[str] = None, parameters: Optional[dict] = None) -> Signal:
    if not id:
        raise ValueError("error id must not be empty")

    params = dict(parameters or {})
    params[ERROR_ID_KEY] = id
    if category is not None:
        params[ERROR_CATEGORY_KEY] = parse_category(category).value
    if message is not None:
        params[ERROR_MESSAGE_KEY] = message
    return Signal(ERROR_SIGNAL, params)


def error_signal_from_exception(exc: BaseException, id: Optional[str] = None,
                                parameters: Optional[dict] = None) -> Signal:
    """Thrown-exception signal; id defaults to the exception class name."""
    return error_signal(
        id or type(exc).__name__,
        category=ErrorCategory.THROWN_EXCEPTION,
        message=str(exc) or None,
        parameters=parameters,
    )


def parse_param(raw: str) -> tuple[str, str]:
    key, sep, value = raw.partition("=")
    if not sep or not key:
        raise ValueError(f"bad --param '{raw}', expected key=value")
    return key, value


def main(argv=None):
    parser = argparse.ArgumentParser(description="Build a TelemetryDeck error signal")
    parser.add_argument("id", help="Stable error identifier, e.g. FileNotFound")
    parser.add_argument("--category", choices=[c.value for c in ErrorCategory])
    parser.add_argument("--message", help="Human-readable error message")
    parser.add_argument("--param", action="append", default=[], help="Extra parameter key=value, repeatable")
    args = parser.parse_args(argv)

    try:
        params = dict(parse_param(p) for p in args.param)
        signal = error_signal(args.id, args.category, args.message, params)
    except ValueError as e:
        print(f"ERROR: {e}")
        return 1

    print(json.dumps(signal.to_dict(), indent=2, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    sys.exit(main())
