"""
pytest 설정 파일
"""
import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

# 프로젝트 루트를 sys.path에 추가
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))


@pytest.fixture
def test_client():
    """FastAPI 테스트 클라이언트 픽스처 (요청마다 엔진/파라미터 초기화)"""
    from api.app import app
    from api.cache import invalidate_analysis_cache

    invalidate_analysis_cache()
    with TestClient(app) as client:
        yield client


@pytest.fixture
def line_rows():
    """샘플 노선 목록 (4번 노선은 승차 기록 없음)"""
    return [
        {"id": 1, "name": "Line 1", "origin": "Centre", "destination": "Nord",
         "distance_km": 12.5, "trip_duration_min": 40, "current_frequency_min": 10},
        {"id": 2, "name": "Line 2", "origin": "Centre", "destination": "Sud",
         "distance_km": 8.0, "trip_duration_min": 30, "current_frequency_min": 10},
        {"id": 3, "name": "Line 3", "origin": "Gare", "destination": "Zone B",
         "distance_km": 15.2, "trip_duration_min": 50, "current_frequency_min": 20},
        {"id": 4, "name": "Line 4", "origin": "Gare", "destination": "Zone C",
         "distance_km": 6.1, "trip_duration_min": 25, "current_frequency_min": 15},
    ]


@pytest.fixture
def record_rows():
    """샘플 승차 기록

    Line 1: 0.90, 0.80 -> 0.85 (surcharge)
    Line 2: 0.30, 0.30 -> 0.30 (sous-utilisation)
    Line 3: 0.60, 0.60 -> 0.60 (optimal)
    """
    rows = [
        # line, stop, hour, boardings, alightings, occupancy, capacity
        (1, 10, 7, 30, 5, 45, 50),
        (1, 11, 8, 25, 10, 40, 50),
        (2, 20, 12, 5, 3, 15, 50),
        (2, 21, 13, 8, 6, 15, 50),
        (3, 30, 17, 12, 15, 30, 50),
        (3, 31, 18, 20, 22, 30, 50),
    ]
    return [
        {"line_id": l, "stop_id": s, "hour": h, "boardings": b, "alightings": a,
         "occupancy": o, "capacity": c, "date": "2024-01-15", "record_id": i}
        for i, (l, s, h, b, a, o, c) in enumerate(rows, start=1)
    ]


@pytest.fixture
def sample_lines(line_rows):
    from transitopt.intake import line_from_mapping
    return [line_from_mapping(row) for row in line_rows]


@pytest.fixture
def sample_records(record_rows):
    from transitopt.intake import record_from_mapping
    return [record_from_mapping(row) for row in record_rows]


@pytest.fixture
def make_record():
    """RidershipRecord 팩토리 픽스처"""
    from transitopt.models import RidershipRecord

    def _make(line_id=1, hour=8, occupancy=30, capacity=50,
              boardings=10, alightings=5, stop_id=1):
        return RidershipRecord(
            line_id=line_id, stop_id=stop_id, hour=hour, boardings=boardings,
            alightings=alightings, occupancy=occupancy, capacity=capacity,
        )
    return _make
