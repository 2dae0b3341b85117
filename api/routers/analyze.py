import asyncio
import logging

from fastapi import APIRouter, HTTPException
from api.schemas import (
    AnalyzeResponse, BatchRequest, ImpactOut, ImpactRequest, RecommendResponse,
)
from api.dependencies import registry
from api.cache import analysis_cache
from transitopt.errors import ValidationError
from transitopt.models import Recommendation
from transitopt.optimizer import evaluate_impact

router = APIRouter()


def _batch_args(req: BatchRequest):
    lines = [line.model_dump() for line in req.lines]
    records = [record.model_dump() for record in req.records]
    return lines, records


async def _run(func, *args):
    try:
        return await asyncio.to_thread(func, *args)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logging.error(f"Analysis failed: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="분석 중 오류가 발생했습니다")


@router.post(
    "/analyze",
    response_model=AnalyzeResponse,
    summary="승차 데이터 전체 분석",
    description="노선 목록과 승차 기록을 받아 노선별/시간대별 재차율 집계, 혼잡 노선, "
    "피크 시간대, 배차간격 추천, 대기시간 개선 효과를 한 번에 계산합니다. "
    "형식이 잘못된 기록은 제외되고 intake 항목에 사유와 함께 집계됩니다.",
    response_description="집계, 진단, 추천, 효과를 담은 분석 결과",
)
async def analyze(req: BatchRequest):
    engine = registry.get_engine()
    params = engine.params
    payload = req.model_dump(mode="json")

    cached_result = analysis_cache.lookup("analyze", payload, params)
    if cached_result is not None:
        return cached_result

    report = await _run(engine.analyze, *_batch_args(req), params)
    response = AnalyzeResponse.model_validate(report)

    analysis_cache.store("analyze", payload, params, response)
    return response


@router.post(
    "/recommend",
    response_model=RecommendResponse,
    summary="배차간격 추천",
    description="노선별 평균 재차율로 배차간격 단축/연장/유지를 결정합니다. "
    "승차 기록이 없는 노선은 추천 대신 excluded 목록에 표시됩니다.",
    response_description="노선별 추천, 제외 노선, 대기시간 개선 효과",
)
async def recommend(req: BatchRequest):
    engine = registry.get_engine()
    params = engine.params
    payload = req.model_dump(mode="json")

    cached_result = analysis_cache.lookup("recommend", payload, params)
    if cached_result is not None:
        return cached_result

    result = await _run(engine.recommend, *_batch_args(req), params)
    response = RecommendResponse.model_validate(result)

    analysis_cache.store("recommend", payload, params, response)
    return response


@router.post(
    "/impact",
    response_model=ImpactOut,
    summary="추천 적용 효과 평가",
    description="추천 목록을 받아 배차간격이 바뀌는 노선의 평균 대기시간 감소량(간격/2 모델)을 "
    "합산합니다. 바뀌는 노선이 없으면 노선당 평균은 null입니다.",
    response_description="총 대기시간 감소(분), 변경 노선 수, 노선당 평균",
)
async def impact(req: ImpactRequest):
    recommendations = [
        Recommendation(**rec.model_dump()) for rec in req.recommendations
    ]
    return ImpactOut.model_validate(evaluate_impact(recommendations))
