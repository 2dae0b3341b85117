# -*- coding: utf-8 -*-
"""LRU 캐시 동작 테스트"""
from dataclasses import replace
from unittest.mock import patch

from api.cache import AnalysisCache, payload_key
from transitopt.optimizer import OptimizerParams


def test_lru_eviction_respects_recent_access():
    """최근 접근한 항목은 유지되고 가장 오래된 항목이 제거된다."""
    cache = AnalysisCache(max_size=2, ttl_seconds=300)

    cache.set("a", {"v": "A"})
    cache.set("b", {"v": "B"})

    # a 키를 최근 사용으로 갱신
    assert cache.get("a") == {"v": "A"}

    # 새 항목 추가 시 b 키가 제거되어야 함
    cache.set("c", {"v": "C"})

    assert cache.get("b") is None
    assert cache.get("a") == {"v": "A"}
    assert cache.get("c") == {"v": "C"}


def test_ttl_cleanup_expires_old_entries():
    """TTL 초과 항목은 조회 전에 정리된다."""
    cache = AnalysisCache(max_size=3, ttl_seconds=10)

    with patch("api.cache.time.time", side_effect=[100.0, 100.0, 120.1]):
        cache.set("a", {"ok": True})
        value = cache.get("a")

    assert value is None
    assert len(cache.cache) == 0


def test_existing_key_update_moves_to_end_and_overwrites_value():
    """기존 키 업데이트 시 OrderedDict 순서와 값이 갱신된다."""
    cache = AnalysisCache(max_size=3, ttl_seconds=300)

    cache.set("a", {"v": 1})
    cache.set("b", {"v": 2})
    cache.set("a", {"v": 3})

    assert list(cache.cache.keys())[-1] == "a"
    assert cache.get("a") == {"v": 3}


def test_invalidate_clears_everything():
    cache = AnalysisCache()
    cache.set("a", 1)
    cache.set("b", 2)

    cache.invalidate()

    assert cache.get("a") is None
    assert len(cache.cache) == 0


def test_payload_key_depends_on_params_and_endpoint():
    """파라미터가 바뀌면 같은 요청이라도 다른 키가 된다."""
    payload = {"lines": [{"id": 1}], "records": []}
    params = OptimizerParams()

    key = payload_key("analyze", payload, params)

    assert key == payload_key("analyze", dict(payload), OptimizerParams())
    assert key != payload_key("recommend", payload, params)
    assert key != payload_key("analyze", payload, replace(params, overload_threshold=0.9))


def test_lookup_and_store_key_on_params():
    """store에 넘긴 파라미터로만 조회된다."""
    cache = AnalysisCache()
    payload = {"lines": [{"id": 1}], "records": []}
    params = OptimizerParams()
    calibrated = replace(params, overload_threshold=0.9)

    cache.store("analyze", payload, params, {"v": "default"})

    assert cache.lookup("analyze", payload, params) == {"v": "default"}
    assert cache.lookup("analyze", payload, calibrated) is None
    assert cache.lookup("recommend", payload, params) is None
