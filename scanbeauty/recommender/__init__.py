from scanbeauty.recommender.augmenters import DEFAULT_POLICY, RecommendationPolicy
from scanbeauty.recommender.engine import ROUTINE_ORDER, get_recommended_products
from scanbeauty.recommender.messages import get_personalized_message
from scanbeauty.recommender.rules import PrimaryCondition, resolve_primary_condition

__all__ = [
    "DEFAULT_POLICY",
    "ROUTINE_ORDER",
    "PrimaryCondition",
    "RecommendationPolicy",
    "get_personalized_message",
    "get_recommended_products",
    "resolve_primary_condition",
]
