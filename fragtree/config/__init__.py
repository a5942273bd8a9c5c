from .base_config import BaseConfig, FRAGTREE_ROOT
from .graph_config import GraphConfig
from .scoring_config import ScoringConfig
from .analysis_config import AnalysisConfig

__all__ = ['BaseConfig', 'GraphConfig', 'ScoringConfig', 'AnalysisConfig', 'FRAGTREE_ROOT']
