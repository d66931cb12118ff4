from .aggregator import Aggregator
from .cooldown import CooldownController
from .evaluator import TriggerEvaluator, suggest_replicas
from .scaler import ScaleLoop

__all__ = ['Aggregator', 'CooldownController', 'TriggerEvaluator', 'suggest_replicas', 'ScaleLoop']
