"""
shared/aws/metrics/sink.py - 수집 결과 출력 sink

수집 작업 스레드가 동시에 호출하므로 모든 sink는 스레드 안전해야 합니다.

- ListSink: 메모리에 MetricRecord 보관 (테스트/디버깅용)
- LineProtocolSink: InfluxDB line protocol 형식으로 텍스트 스트림에 출력
"""

from __future__ import annotations

import threading
from datetime import datetime
from typing import TextIO

from .types import MetricRecord


class ListSink:
    """MetricRecord를 메모리 목록에 쌓는 sink"""

    def __init__(self) -> None:
        self._records: list[MetricRecord] = []
        self._lock = threading.Lock()

    def add_fields(
        self,
        measurement: str,
        fields: dict[str, float],
        tags: dict[str, str],
        timestamp: datetime,
    ) -> None:
        record = MetricRecord(measurement=measurement, fields=dict(fields), tags=dict(tags), timestamp=timestamp)
        with self._lock:
            self._records.append(record)

    @property
    def records(self) -> list[MetricRecord]:
        with self._lock:
            return list(self._records)

    def clear(self) -> None:
        with self._lock:
            self._records.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)


def _escape(value: str, chars: str) -> str:
    for ch in chars:
        value = value.replace(ch, f"\\{ch}")
    return value


def to_line_protocol(record: MetricRecord) -> str:
    """MetricRecord를 line protocol 한 줄로 변환

    빈 값 태그는 line protocol에서 허용되지 않으므로 생략합니다.
    """
    parts = [_escape(record.measurement, ", ")]
    for key in sorted(record.tags):
        value = record.tags[key]
        if key and value:
            parts.append(f"{_escape(key, ',= ')}={_escape(value, ',= ')}")
    head = ",".join(parts)

    fields = ",".join(f"{_escape(k, ',= ')}={float(v)!r}" for k, v in sorted(record.fields.items()))
    timestamp_ns = int(record.timestamp.timestamp()) * 1_000_000_000 + record.timestamp.microsecond * 1000
    return f"{head} {fields} {timestamp_ns}"


class LineProtocolSink:
    """line protocol 출력 sink

    Args:
        stream: 출력 대상 텍스트 스트림 (sys.stdout 등)
    """

    def __init__(self, stream: TextIO):
        self._stream = stream
        self._lock = threading.Lock()
        self.count = 0

    def add_fields(
        self,
        measurement: str,
        fields: dict[str, float],
        tags: dict[str, str],
        timestamp: datetime,
    ) -> None:
        if not fields:
            return
        line = to_line_protocol(MetricRecord(measurement, fields, tags, timestamp))
        with self._lock:
            self._stream.write(line + "\n")
            self.count += 1

    def flush(self) -> None:
        with self._lock:
            self._stream.flush()
