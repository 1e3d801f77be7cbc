"""
cli/ui/console.py - Rich 콘솔 유틸리티

일관된 콘솔 출력을 위한 함수들.
stdout은 line protocol 출력에 쓰이므로 상태 메시지와 로그는 stderr 콘솔로 보냅니다.
"""

import logging
import platform

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from shared.aws.metrics.types import MetricDescriptor

# botocore 노이즈 로그 제한
NOISY_LOGGERS = (
    "botocore.httpchecksum",
    "botocore.credentials",
    "botocore.loaders",
    "botocore.session",
    "urllib3.connectionpool",
)

# 상태 심볼
SYMBOL_ERROR = "✗"
SYMBOL_WARNING = "!"
SYMBOL_INFO = "•"


def get_console(stderr: bool = False) -> Console:
    """Rich Console 인스턴스를 생성하고 반환합니다."""
    is_windows = platform.system().lower() == "windows"

    return Console(
        stderr=stderr,
        color_system="auto",
        highlight=True,
        soft_wrap=True,
        markup=True,
        emoji=not is_windows,
    )


# 전역 콘솔 인스턴스 (console: 표 출력, err_console: 상태/로그)
console = get_console()
err_console = get_console(stderr=True)


def setup_logging(verbose: bool = False) -> None:
    """루트 logger에 RichHandler 설정

    Args:
        verbose: True면 DEBUG, 아니면 INFO
    """
    root = logging.getLogger()
    for handler in list(root.handlers):
        if isinstance(handler, RichHandler):
            root.removeHandler(handler)

    handler = RichHandler(console=err_console, rich_tracebacks=True, show_path=verbose)
    handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))
    root.addHandler(handler)
    root.setLevel(logging.DEBUG if verbose else logging.INFO)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def print_error(message: str) -> None:
    """에러 메시지 출력 (빨간색 X)"""
    err_console.print(f"[red]{SYMBOL_ERROR} {escape(message)}[/red]")


def print_warning(message: str) -> None:
    """경고 메시지 출력 (노란색 경고)"""
    err_console.print(f"[yellow]{SYMBOL_WARNING} {escape(message)}[/yellow]")


def print_info(message: str) -> None:
    err_console.print(f"[blue]{SYMBOL_INFO} {escape(message)}[/blue]")


def print_metrics_table(namespace: str, metrics: list[MetricDescriptor]) -> None:
    """메트릭 디스크립터 목록을 표로 출력

    Args:
        namespace: 표 제목에 쓸 네임스페이스
        metrics: 출력할 디스크립터 목록
    """
    table = Table(title=f"{namespace} ({len(metrics)})", show_lines=False)
    table.add_column("#", justify="right", style="dim")
    table.add_column("MetricName", style="cyan", no_wrap=True)
    table.add_column("Dimensions")

    for i, metric in enumerate(metrics, 1):
        dims = ", ".join(f"{d.name}={d.value}" for d in metric.dimensions) or "-"
        table.add_row(str(i), escape(metric.metric_name), escape(dims))

    console.print(table)
