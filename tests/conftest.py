from __future__ import annotations

import json
import sys
import threading
import time
from pathlib import Path

import pytest

_REPO_ROOT = Path(__file__).resolve().parents[1]
if str(_REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(_REPO_ROOT))

from core.prompts import (  # noqa: E402
    FUNDING_PROMPT,
    IMPROVEMENT_PROMPT,
    LAUNCH_PROMPT,
    SCORING_PROMPT,
    VALIDATION_PROMPT,
)

TEMPLATE_NAMES = {
    VALIDATION_PROMPT: "Validation",
    SCORING_PROMPT: "Scoring",
    IMPROVEMENT_PROMPT: "Improvement",
    FUNDING_PROMPT: "Funding",
    LAUNCH_PROMPT: "Launch",
}

IDEA = "A subscription app that matches home cooks with neighbours who want fresh meals."

VALIDATION_OK = {
    "isValid": True,
    "sanitizedInput": "Marketplace connecting home cooks with neighbours buying fresh meals.",
    "satiricalFeedback": None,
    "coreBusinessConcept": "Local home-cooked meal marketplace",
    "targetMarket": "Busy urban professionals",
    "valueProposition": "Affordable fresh meals from vetted local cooks",
}

SCORING_OK = {
    "scores": {
        "marketSize": 8,
        "competition": 6,
        "feasibility": 7,
        "monetization": 7,
        "scalability": 8,
        "overall": 7.2,
    },
    "pros": ["Large market", "Recurring revenue", "Community effect", "Low inventory"],
    "cons": ["Food safety regulation", "Supply churn", "Delivery logistics", "Incumbents"],
    "benchmarkComparison": "Comparable to early Shef and Josephine.",
}

IMPROVEMENT_OK = {
    "improvements": {
        "productMarketFit": ["Start with office lunches"],
        "branding": ["Lead with trust and hygiene"],
        "pricing": ["Weekly meal plans"],
        "mvpFeatures": ["Cook profiles", "Ordering", "Ratings"],
    }
}

FUNDING_OK = {
    "fundingStrategy": {
        "investorTypes": ["Pre-seed marketplace funds"],
        "pitchOutline": ["Problem", "Solution", "Market", "Traction"],
        "specificInvestors": [{"name": "Local Angels", "reason": "Food tech focus"}],
        "networkingTips": ["Warm intros via accelerators"],
        "timeline": {"Month 1-2": "Angel round", "Month 6": "Seed round"},
    }
}

LAUNCH_OK = {
    "launchPlan": {
        "earlyAdopters": ["Neighbourhood Facebook groups"],
        "launchPlatforms": ["Product Hunt"],
        "communityBuilding": ["Cook meetups"],
        "keyMetrics": ["Weekly orders", "Repeat rate"],
        "ninetyDayPlan": [
            "Recruit 20 cooks",
            {"timeline": "Days 31-60", "actions": ["Launch in one district", "Collect reviews"]},
        ],
    }
}


class StubCompletionClient:
    """
    Stand-in for CompletionClient. Each stage answers with the configured value:
    a dict (sent back as JSON text), a raw string, an exception instance (raised),
    or a callable taking the variables.
    """

    def __init__(self, responses=None, delay=None):
        self.responses = {
            "Validation": VALIDATION_OK,
            "Scoring": SCORING_OK,
            "Improvement": IMPROVEMENT_OK,
            "Funding": FUNDING_OK,
            "Launch": LAUNCH_OK,
        }
        self.responses.update(responses or {})
        self.delay = delay or {}
        self.calls = []
        self._lock = threading.Lock()

    @property
    def call_order(self):
        return [name for name, _ in self.calls]

    def variables_for(self, name):
        for call_name, variables in self.calls:
            if call_name == name:
                return variables
        raise KeyError(name)

    def complete(self, template, variables):
        name = TEMPLATE_NAMES[template]
        with self._lock:
            self.calls.append((name, dict(variables)))
        if name in self.delay:
            time.sleep(self.delay[name])
        response = self.responses[name]
        if isinstance(response, Exception):
            raise response
        if callable(response):
            response = response(variables)
        if isinstance(response, str):
            return response
        return json.dumps(response)


@pytest.fixture
def stub_client():
    return StubCompletionClient()
