# core/scoring.py
from typing import Dict, Optional

from core.errors import MalformedResponse
from models import ProviderScores, Scores

# Fixed weights for the overall score, summing to 1.0
DEFAULT_WEIGHTS = {
    "market_size": 0.25,
    "competition": 0.15,
    "feasibility": 0.20,
    "monetization": 0.20,
    "scalability": 0.20,
}


def compute_overall(subscores: Dict[str, float], weights: Dict[str, float] = None) -> float:
    """
    Weighted mean of the five dimension scores, rounded to one decimal.
    """
    if weights is None:
        weights = DEFAULT_WEIGHTS

    weighted_sum = 0.0
    total_weight = 0.0

    for key, w in weights.items():
        weighted_sum += float(subscores.get(key, 0.0)) * w
        total_weight += w

    if total_weight == 0:
        return 0.0

    return round(max(0.0, min(10.0, weighted_sum / total_weight)), 1)


def resolve_scores(provided: ProviderScores, mode: str = "weighted", weights: Optional[Dict[str, float]] = None) -> Scores:
    """
    Build the final Scores. "weighted" recomputes overall locally;
    "provider" keeps the model's own figure, which must then be present.
    """
    if mode == "provider":
        if provided.overall is None:
            raise MalformedResponse("scores.overall is missing from the Scoring response.")
        overall = provided.overall
    else:
        overall = compute_overall(provided.dimensions(), weights)
    return Scores(**provided.dimensions(), overall=overall)


def explain_score(weights: Dict[str, float] = None) -> str:
    """
    Readable description of the weighting, e.g. for the service descriptor.
    """
    if weights is None:
        weights = DEFAULT_WEIGHTS

    parts = [
        f"{int(round(w * 100))}% {k.replace('_', ' ').title()}"
        for k, w in weights.items()
    ]
    return " + ".join(parts)
