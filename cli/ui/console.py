"""
cli/ui/console.py - Rich 콘솔/로그 유틸리티

모니터는 장시간 실행되므로 출력 대부분이 로그입니다.
setup_logging()이 루트 로거에 RichHandler를 설치하고,
check 명령의 결과 표는 같은 console로 출력합니다.
"""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from core.config import LogConfig

# botocore 노이즈 로그 제한
logging.getLogger("botocore").setLevel(logging.WARNING)
logging.getLogger("boto3").setLevel(logging.WARNING)
logging.getLogger("urllib3").setLevel(logging.WARNING)

# 전역 콘솔 인스턴스 (stderr: stdout은 결과 표 전용)
console = Console(stderr=True, soft_wrap=True)
# 결과 출력용 (stdout)
output_console = Console(soft_wrap=True)

SYMBOL_ERROR = "✗"
SYMBOL_WARNING = "!"


def setup_logging(level: str | None = None, log_config: LogConfig | None = None) -> None:
    """루트 로거에 RichHandler 설치

    이미 RichHandler가 있으면 레벨만 갱신합니다.

    Args:
        level: 로그 레벨 이름 (None이면 LogConfig 값)
        log_config: 로그 설정 (None이면 환경변수 기반)
    """
    log_config = log_config or LogConfig.from_env()
    root = logging.getLogger()
    root.setLevel((level or log_config.level).upper())

    if any(isinstance(h, RichHandler) for h in root.handlers):
        return

    handler = RichHandler(console=console, rich_tracebacks=True, show_path=False)
    handler.setFormatter(logging.Formatter(log_config.format, datefmt=log_config.datefmt))
    root.addHandler(handler)


def print_error(message: str) -> None:
    # 메시지의 [key] 등은 마크업이 아닌 텍스트
    console.print(f"[red]{SYMBOL_ERROR} {escape(message)}[/red]")


def print_warning(message: str) -> None:
    console.print(f"[yellow]{SYMBOL_WARNING} {escape(message)}[/yellow]")


def build_check_table(rows: list[dict[str, str]], title: str | None = None) -> Table:
    """check 명령 결과 표 생성

    Args:
        rows: 열 이름 → 값 딕셔너리 목록 (모든 행이 같은 키)
        title: 표 제목
    """
    table = Table(title=title, show_lines=False)
    if not rows:
        return table

    for column in rows[0]:
        justify = "left" if column in ("Direction", "Decision") else "right"
        table.add_column(column, justify=justify)
    for row in rows:
        table.add_row(*row.values())
    return table
