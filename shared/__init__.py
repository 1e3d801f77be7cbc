"""공유 유틸리티 - 수집기와 CLI에서 공통 사용.

- aws: AWS 관련 유틸리티 (CloudWatch 메트릭 수집, EC2 인스턴스 태그)

의존성 구조:
    core (인프라)
       ↑
    shared (공유 유틸리티)
       ↑
    cli
"""

from . import aws

__all__ = ["aws"]
