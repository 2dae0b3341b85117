# -*- coding: utf-8 -*-
import asyncio
import logging
import os
from dataclasses import asdict, replace
from fastapi import APIRouter, HTTPException, Header, Depends
from api.schemas import (
    CalibrationRequest,
    CalibrationResponse,
    SensitivityPointOut,
    SensitivityRequest,
)
from api.dependencies import registry
from api.cache import invalidate_analysis_cache
from transitopt.engine import DEFAULT_SWEEP
from transitopt.errors import ValidationError
from typing import List, Optional

router = APIRouter()


def verify_api_key(x_api_key: Optional[str] = Header(None)) -> None:
    """API Key 검증 (env var TRANSITOPT_API_KEY가 설정된 경우만)"""
    api_key = os.getenv("TRANSITOPT_API_KEY")
    if api_key:  # env var가 설정된 경우만 검증
        if not x_api_key or x_api_key != api_key:
            raise HTTPException(status_code=403, detail="유효하지 않은 API 키입니다")


@router.post(
    "/calibrate",
    response_model=CalibrationResponse,
    summary="판정 기준 조정",
    description="혼잡/저이용 재차율 기준, 혼잡 노선 기준, 배차간격 조정 폭과 상하한을 "
    "런타임에 조정합니다. 변경 시 분석 캐시가 자동 무효화됩니다.",
    response_description="적용된 파라미터 값",
)
async def calibrate(req: CalibrationRequest, _: None = Depends(verify_api_key)):
    """판정 파라미터를 런타임에 조정한다."""
    engine = registry.get_engine()
    changes = req.model_dump(exclude_none=True)

    with registry.engine_lock:
        try:
            engine.params = replace(engine.params, **changes)
        except ValidationError as e:
            raise HTTPException(status_code=400, detail=str(e))
        params = engine.params

    # calibrate 변경 시 분석 캐시 무효화
    invalidate_analysis_cache()
    logging.info("Params calibrated: %s", changes)

    return CalibrationResponse.model_validate(params)


@router.get(
    "/calibrate",
    response_model=CalibrationResponse,
    summary="현재 파라미터 조회",
    description="현재 설정된 판정 기준(재차율 기준, 조정 폭, 배차간격 상하한, 피크 순위 수)을 반환합니다.",
    response_description="현재 설정된 파라미터 값",
)
async def get_calibration():
    """현재 파라미터 값을 반환한다."""
    engine = registry.get_engine()
    return CalibrationResponse(**asdict(engine.params))


@router.post(
    "/sensitivity",
    response_model=List[SensitivityPointOut],
    summary="혼잡 기준 민감도 분석",
    description="혼잡 재차율 기준을 0.60~0.95까지 0.05 간격으로(또는 요청한 값들로) sweep하며, "
    "변경 노선 수와 총 대기시간 감소량의 변화를 반환합니다. 파라미터 튜닝에 활용할 수 있습니다.",
    response_description="기준값별 변경 노선 수, 혼잡 노선 수, 대기시간 감소량",
)
async def sensitivity_analysis(req: SensitivityRequest):
    """혼잡 기준을 sweep하여 추천 결과 변화를 반환한다."""
    engine = registry.get_engine()
    thresholds = tuple(req.thresholds) if req.thresholds else DEFAULT_SWEEP
    lines = [line.model_dump() for line in req.lines]
    records = [record.model_dump() for record in req.records]

    try:
        points = await asyncio.to_thread(engine.sensitivity, lines, records, thresholds, engine.params)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return [SensitivityPointOut.model_validate(p) for p in points]
