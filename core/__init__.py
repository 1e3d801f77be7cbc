# core/__init__.py
"""
core - CloudWatch 수집기 인프라

아키텍처:
    core/
    ├── parallel/       # 병렬 처리 (fan-out executor, rate limiter)
    ├── config.py       # YAML 설정 로드
    ├── session.py      # boto3 Session 생성 (자격 증명 체인)
    └── exceptions.py   # 통합 예외 계층

Usage:
    from core.config import load_config
    from core.exceptions import RemoteQueryError, is_throttling

    config = load_config("cloudwatch.yaml")
"""

__all__: list[str] = [
    "config",
    "exceptions",
    "parallel",
    "session",
]
