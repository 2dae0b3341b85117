# -*- coding: utf-8 -*-
"""
캐시 관리 모듈
- /analyze, /recommend 엔드포인트용 LRU 캐시 (TTL 5분, 최대 100개)
- 캐시 키: 요청 본문 + 현재 파라미터의 SHA-256 digest
- calibrate 변경 시 캐시 무효화
- Thread-safe: RLock으로 동시 접근 보호
"""
import hashlib
import json
import threading
import time
from collections import OrderedDict
from dataclasses import asdict
from typing import Optional, Dict, Any


def payload_key(endpoint: str, payload: Dict[str, Any], params) -> str:
    """엔드포인트, 요청 본문, 파라미터로 캐시 키를 만든다."""
    blob = json.dumps(
        {"endpoint": endpoint, "payload": payload, "params": asdict(params)},
        sort_keys=True,
        default=str,
    )
    return hashlib.sha256(blob.encode("utf-8")).hexdigest()


class AnalysisCache:
    """
    분석 결과 LRU 캐시 (thread-safe)
    - TTL: 5분 (300초)
    - 최대 100개 항목
    """

    def __init__(self, max_size: int = 100, ttl_seconds: int = 300):
        self.max_size = max_size
        self.ttl_seconds = ttl_seconds
        self.cache: OrderedDict[str, Dict[str, Any]] = OrderedDict()  # {key: {value, timestamp}}
        self._lock = threading.RLock()

    def _cleanup_expired(self):
        """만료된 항목 제거 (caller must hold lock)"""
        now = time.time()
        expired_keys = [
            key for key, data in self.cache.items()
            if now - data["timestamp"] > self.ttl_seconds
        ]
        for key in expired_keys:
            del self.cache[key]

    def get(self, key: str) -> Optional[Any]:
        """캐시에서 값 조회"""
        with self._lock:
            self._cleanup_expired()
            if key in self.cache:
                # LRU 업데이트: 최근 사용으로 이동
                self.cache.move_to_end(key)
                return self.cache[key]["value"]
            return None

    def set(self, key: str, value: Any):
        """캐시에 값 저장"""
        with self._lock:
            self._cleanup_expired()
            if key in self.cache:
                self.cache.move_to_end(key)

            # 크기 초과 시 가장 오래된 항목 제거
            if len(self.cache) >= self.max_size and key not in self.cache:
                self.cache.popitem(last=False)

            self.cache[key] = {
                "value": value,
                "timestamp": time.time()
            }

    def lookup(self, endpoint: str, payload: Dict[str, Any], params) -> Optional[Any]:
        """요청 본문 + 파라미터에 해당하는 결과 조회"""
        return self.get(payload_key(endpoint, payload, params))

    def store(self, endpoint: str, payload: Dict[str, Any], params, value: Any):
        """결과를 계산에 쓴 파라미터 기준으로 저장"""
        self.set(payload_key(endpoint, payload, params), value)

    def invalidate(self):
        """전체 캐시 무효화 (calibrate 변경 시 호출)"""
        with self._lock:
            self.cache.clear()


# 전역 캐시 인스턴스
analysis_cache = AnalysisCache(max_size=100, ttl_seconds=300)


def invalidate_analysis_cache():
    """calibrate 변경 시 호출되는 함수"""
    analysis_cache.invalidate()
