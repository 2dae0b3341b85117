"""
TransitAnalysisEngine 싱글턴 관리.
앱 시작 시 한 번 생성하고, 모든 요청에서 재사용한다.
"""
import sys
import threading
from pathlib import Path

# 프로젝트 루트를 sys.path에 추가
PROJECT_ROOT = Path(__file__).parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from transitopt.engine import TransitAnalysisEngine
from transitopt.optimizer import OptimizerParams


class EngineRegistry:
    def __init__(self):
        self.engine: TransitAnalysisEngine | None = None
        self.engine_lock = threading.RLock()  # Protects params swaps (calibrate)

    def load(self):
        self.engine = TransitAnalysisEngine(params=OptimizerParams.from_env())

    def get_engine(self) -> TransitAnalysisEngine:
        if self.engine is None:
            raise RuntimeError("Engine not loaded")
        return self.engine


registry = EngineRegistry()
