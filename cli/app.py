"""
cli/app.py - 메인 CLI 엔트리포인트

Click 기반의 CLI 애플리케이션 진입점입니다.

명령어 구조:
    dynamodb-autoscaler --version
    dynamodb-autoscaler monitor -t <table> [옵션]   # shutdown까지 모니터링
    dynamodb-autoscaler check -t <table> [옵션]     # reads/writes 1회 체크 후 표 출력

모든 옵션은 AUTOSCALER_* 환경변수로도 지정할 수 있습니다 (예: AUTOSCALER_TABLE).

Usage:
    $ dynamodb-autoscaler monitor -t orders -r us-east-1 --interval 5 --cooldown 300
    $ dynamodb-autoscaler check -t orders --read-headroom 0.1
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

import click

from autoscaler import (
    DIRECTIONS,
    EXIT_CHECK_FAILED,
    EXIT_CONFIG_ERROR,
    DirectionThresholds,
    MonitorConfig,
    MonitorRunner,
    TableMonitor,
    ThresholdConfig,
)
from cli.ui import build_check_table, output_console, print_error, print_warning, setup_logging
from core.config import get_default_profile, get_default_region, get_version, settings
from core.exceptions import APICallError, AutoscalerError, format_error_for_user
from shared.aws.dynamodb import ProvisionedCapacity

logger = logging.getLogger(__name__)

VERSION = get_version()

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]


def monitor_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """monitor/check 공통 옵션"""
    options = [
        click.option("-t", "--table", "table", required=True, envvar="AUTOSCALER_TABLE", help="모니터링할 테이블"),
        click.option(
            "-r",
            "--region",
            default=get_default_region,
            envvar="AUTOSCALER_REGION",
            show_default="AWS_REGION or us-east-1",
            help="테이블 리전",
        ),
        click.option("-p", "--profile", default=get_default_profile, envvar="AUTOSCALER_PROFILE", help="AWS 프로파일"),
        click.option(
            "--interval",
            type=click.FloatRange(min=0, min_open=True),
            default=settings.POLL_INTERVAL_SECONDS,
            envvar="AUTOSCALER_INTERVAL",
            show_default=True,
            help="체크 주기 (초)",
        ),
        click.option(
            "--cooldown",
            type=click.FloatRange(min=0),
            default=settings.COOLDOWN_SECONDS,
            envvar="AUTOSCALER_COOLDOWN",
            show_default=True,
            help="스케일 필요 판정 후 대기 (초)",
        ),
        click.option(
            "--read-headroom",
            type=click.FloatRange(0, 1),
            default=settings.HEADROOM,
            envvar="AUTOSCALER_READ_HEADROOM",
            show_default=True,
            help="읽기 여유 비율",
        ),
        click.option(
            "--write-headroom",
            type=click.FloatRange(0, 1),
            default=settings.HEADROOM,
            envvar="AUTOSCALER_WRITE_HEADROOM",
            show_default=True,
            help="쓰기 여유 비율",
        ),
        click.option(
            "--read-throttle-ceiling",
            type=click.FloatRange(min=0),
            default=settings.THROTTLE_CEILING,
            envvar="AUTOSCALER_READ_THROTTLE_CEILING",
            show_default=True,
            help="허용 읽기 쓰로틀 이벤트 수",
        ),
        click.option(
            "--write-throttle-ceiling",
            type=click.FloatRange(min=0),
            default=settings.THROTTLE_CEILING,
            envvar="AUTOSCALER_WRITE_THROTTLE_CEILING",
            show_default=True,
            help="허용 쓰기 쓰로틀 이벤트 수",
        ),
        click.option(
            "--evaluation-minutes",
            type=click.IntRange(min=1),
            default=settings.EVALUATION_MINUTES,
            envvar="AUTOSCALER_EVALUATION_MINUTES",
            show_default=True,
            help="메트릭 집계 구간 (분)",
        ),
        click.option(
            "--lookback-minutes",
            type=click.IntRange(min=0),
            default=settings.LOOKBACK_MINUTES,
            envvar="AUTOSCALER_LOOKBACK_MINUTES",
            show_default=True,
            help="집계 구간 시작을 앞당기는 정도 (분)",
        ),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def build_config(
    table: str,
    region: str,
    profile: str | None,
    interval: float,
    cooldown: float,
    read_headroom: float,
    write_headroom: float,
    read_throttle_ceiling: float,
    write_throttle_ceiling: float,
    evaluation_minutes: int,
    lookback_minutes: int,
) -> MonitorConfig:
    """CLI 옵션 → MonitorConfig

    Raises:
        SystemExit: 설정 검증 실패 (EXIT_CONFIG_ERROR)
    """
    try:
        return MonitorConfig(
            table_name=table,
            region=region,
            profile=profile or None,
            poll_interval=interval,
            cooldown=cooldown,
            evaluation_minutes=evaluation_minutes,
            lookback_minutes=lookback_minutes,
            thresholds=ThresholdConfig(
                reads=DirectionThresholds(headroom=read_headroom, throttle_ceiling=read_throttle_ceiling),
                writes=DirectionThresholds(headroom=write_headroom, throttle_ceiling=write_throttle_ceiling),
            ),
        )
    except AutoscalerError as e:
        print_error(str(e))
        raise SystemExit(EXIT_CONFIG_ERROR) from e


def create_monitor(config: MonitorConfig) -> TableMonitor:
    """TableMonitor 생성 (세션/프로파일 오류는 EXIT_CONFIG_ERROR)"""
    try:
        return TableMonitor.from_config(config)
    except AutoscalerError as e:
        print_error(format_error_for_user(e))
        raise SystemExit(EXIT_CONFIG_ERROR) from e


def preflight(monitor: TableMonitor) -> ProvisionedCapacity:
    """시작 전 DescribeTable로 테이블/권한 확인

    Raises:
        SystemExit: 테이블이 없거나 권한이 없는 경우 (EXIT_CONFIG_ERROR)
    """
    try:
        capacity = monitor.capacity.describe(monitor.table_name)
    except APICallError as e:
        print_error(f"{monitor.table_name}: {format_error_for_user(e)}")
        raise SystemExit(EXIT_CONFIG_ERROR) from e

    if capacity.is_on_demand:
        print_warning(
            f"{monitor.table_name} uses on-demand capacity (PAY_PER_REQUEST); "
            "provisioned units are 0, so any consumption will be flagged"
        )
    return capacity


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(VERSION, prog_name="dynamodb-autoscaler")
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default=None,
    envvar="AUTOSCALER_LOG_LEVEL",
    help="로그 레벨 (기본: INFO)",
)
def cli(log_level: str | None) -> None:
    """DynamoDB 테이블 용량 모니터

    읽기/쓰기 소비 용량과 쓰로틀 이벤트를 주기적으로 확인하고
    임계값을 넘으면 스케일 필요로 기록합니다.
    """
    setup_logging(log_level)


@cli.command()
@monitor_options
def monitor(**options: Any) -> None:
    """shutdown(SIGTERM/Ctrl+C)까지 테이블 모니터링"""
    config = build_config(**options)
    table_monitor = create_monitor(config)
    preflight(table_monitor)

    exit_code = MonitorRunner(table_monitor).run()
    raise SystemExit(exit_code)


@cli.command()
@monitor_options
def check(**options: Any) -> None:
    """reads/writes를 한 번씩 체크하고 결과 표 출력"""
    config = build_config(**options)
    table_monitor = create_monitor(config)

    rows: list[dict[str, str]] = []
    failed = False
    for direction in DIRECTIONS:
        try:
            result = table_monitor.check(direction)
        except APICallError as e:
            print_error(f"{direction}: {e}")
            failed = True
            continue

        rows.append(
            {
                "Direction": direction.name,
                "Consumed": f"{result.consumed:,.1f}",
                "Provisioned": f"{result.provisioned:,}",
                "Limit": f"{result.utilization_limit:,.1f}",
                "Throttled": f"{result.throttled:,.0f}",
                "Ceiling": f"{result.thresholds.throttle_ceiling:,.0f}",
                "Decision": "[red]scale needed[/red]" if result.scale_needed else "[green]ok[/green]",
            }
        )

    if rows:
        output_console.print(build_check_table(rows, title=f"{config.table_name} ({config.region})"))

    if failed:
        raise SystemExit(EXIT_CHECK_FAILED)
