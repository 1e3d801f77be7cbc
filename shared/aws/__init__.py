"""AWS 관련 공유 유틸리티.

하위 모듈:
- metrics: CloudWatch 네임스페이스 메트릭 수집 (카탈로그, 차원 필터, 통계 조회)
- ec2: EC2 인스턴스 태그 캐시
"""

from . import ec2, metrics

__all__ = ["metrics", "ec2"]
