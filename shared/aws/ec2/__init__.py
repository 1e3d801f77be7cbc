"""EC2 인스턴스 태그 보강 유틸리티."""

from .instance_tags import (
    EC2_NAMESPACE,
    InstanceTagCache,
    InstanceTagRefresher,
    TagCacheEntry,
    derive_tags,
)

__all__ = [
    "EC2_NAMESPACE",
    "InstanceTagCache",
    "InstanceTagRefresher",
    "TagCacheEntry",
    "derive_tags",
]
