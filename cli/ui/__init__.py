# cli/ui - 콘솔 출력 컴포넌트 (rich)
"""
콘솔 출력 모듈

CLI 전용 출력 함수 (상태 메시지, 메트릭 표, 로깅 설정)
"""

from .console import (
    console,
    err_console,
    get_console,
    print_error,
    print_info,
    print_metrics_table,
    print_warning,
    setup_logging,
)

__all__ = [
    "console",
    "err_console",
    "get_console",
    "print_error",
    "print_info",
    "print_metrics_table",
    "print_warning",
    "setup_logging",
]
