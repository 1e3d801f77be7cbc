"""
cli/app.py - 메인 CLI 엔트리포인트

Click 기반의 CLI 애플리케이션 진입점입니다.

명령어 구조:
    cwcollect run -c config.yaml            # interval마다 수집, line protocol 출력
    cwcollect run -c config.yaml --once     # 수집 1회 후 종료 (실패 시 exit 1)
    cwcollect list-metrics -c config.yaml   # 네임스페이스 메트릭 목록 표 출력
    cwcollect sample-config                 # 예시 설정 출력

Usage:
    $ cwcollect run -c cloudwatch.yaml --output metrics.lp

    # 모듈로 실행
    $ python -m cli.app run -c cloudwatch.yaml --once
"""

from __future__ import annotations

import logging
import time
from typing import TextIO

import click

from cli.ui.console import print_error, print_info, print_metrics_table, print_warning, setup_logging
from core.config import SAMPLE_CONFIG, load_config
from core.exceptions import CollectorError, RemoteQueryError
from shared.aws.metrics import CloudWatchCollector, LineProtocolSink

logger = logging.getLogger(__name__)

VERSION = "0.1.0"

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_INTERRUPTED = 130


def run_cycle(collector: CloudWatchCollector, sink: LineProtocolSink) -> int:
    """수집 주기 1회 실행

    Returns:
        종료 코드 (실패한 메트릭이 있거나 메트릭 목록 조회 실패 시 1)
    """
    try:
        outcome = collector.gather(sink)
    except RemoteQueryError as e:
        print_error(f"메트릭 목록 조회 실패: {e}")
        return EXIT_FAILED
    finally:
        sink.flush()

    if not outcome.ok:
        print_warning(outcome.get_error_summary())
        for error in outcome.errors:
            logger.debug(str(error))
        return EXIT_FAILED

    logger.info(f"수집 완료: 메트릭 {outcome.total}개, 레코드 {sum(outcome.get_data())}개")
    return EXIT_OK


@click.group()
@click.version_option(VERSION, prog_name="cwcollect")
@click.option("-v", "--verbose", is_flag=True, help="DEBUG 로그 출력")
def cli(verbose: bool) -> None:
    """cwcollect - CloudWatch 통계 수집기"""
    setup_logging(verbose)


@cli.command("run")
@click.option("-c", "--config", "config_path", required=True, type=click.Path(dir_okay=False), help="설정 파일 경로")
@click.option("--once", is_flag=True, help="수집 1회 후 종료")
@click.option("-o", "--output", type=click.File("a", lazy=False), default="-", help="출력 파일 경로 (기본: stdout)")
def run_command(config_path: str, once: bool, output: TextIO) -> None:
    """interval마다 CloudWatch 통계를 수집하여 line protocol로 출력"""
    try:
        config = load_config(config_path)
        collector = CloudWatchCollector.from_config(config)
    except CollectorError as e:
        print_error(str(e))
        raise SystemExit(EXIT_FAILED) from e

    sink = LineProtocolSink(output)
    interval = config.interval.total_seconds() if config.interval else config.period.total_seconds()

    try:
        with collector:
            print_info(f"{config.namespace} 수집 시작 (region={config.region}, interval={interval:.0f}s)")
            while True:
                started = time.monotonic()
                exit_code = run_cycle(collector, sink)
                if once:
                    raise SystemExit(exit_code)

                time.sleep(max(0.0, interval - (time.monotonic() - started)))
    except KeyboardInterrupt:
        print_warning("사용자 중단, 수집 종료")
        raise SystemExit(EXIT_INTERRUPTED) from None


@cli.command("list-metrics")
@click.option("-c", "--config", "config_path", required=True, type=click.Path(dir_okay=False), help="설정 파일 경로")
def list_metrics_command(config_path: str) -> None:
    """설정된 네임스페이스의 메트릭 목록 출력"""
    try:
        config = load_config(config_path)
        collector = CloudWatchCollector.from_config(config)
        metrics = collector.catalog.fetch_namespace_metrics()
    except CollectorError as e:
        print_error(str(e))
        raise SystemExit(EXIT_FAILED) from e

    print_metrics_table(config.namespace, metrics)


@cli.command("sample-config")
def sample_config_command() -> None:
    """예시 설정 파일 출력"""
    click.echo(SAMPLE_CONFIG, nl=False)


if __name__ == "__main__":
    cli()
