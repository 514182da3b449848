# cli/ui - 콘솔 출력 (rich)
"""
콘솔/로그 출력 모듈
"""

from .console import (
    SYMBOL_ERROR,
    SYMBOL_WARNING,
    build_check_table,
    console,
    output_console,
    print_error,
    print_warning,
    setup_logging,
)

__all__: list[str] = [
    "SYMBOL_ERROR",
    "SYMBOL_WARNING",
    "build_check_table",
    "console",
    "output_console",
    "print_error",
    "print_warning",
    "setup_logging",
]
