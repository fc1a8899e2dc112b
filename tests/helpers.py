"""Test doubles and builders shared across test modules."""

import json
from typing import Dict, List, Optional, Union

from marketlens.analysis.models import ModelAnalysis, OutcomeAnalysis
from marketlens.exceptions import GatewayError
from marketlens.llm.base import BaseLLMGateway
from marketlens.llm.models import GatewayReply

Scripted = Union[GatewayReply, Exception]


class FakeGateway(BaseLLMGateway):
    """Gateway returning scripted replies per model and recording calls."""

    def __init__(self, replies: Optional[Dict[str, Scripted]] = None):
        self.replies = replies or {}
        self.calls: List[str] = []

    async def request_analysis(self, model, system_prompt, prompt, tool_schema):
        self.calls.append(model)
        reply = self.replies.get(model)
        if reply is None:
            raise GatewayError(f"{model} error: 503 unavailable", model=model, status_code=503)
        if isinstance(reply, Exception):
            raise reply
        return reply


def tool_reply(model: str, payload: dict) -> GatewayReply:
    return GatewayReply(model=model, tool_arguments=json.dumps(payload))


def text_reply(model: str, content: str) -> GatewayReply:
    return GatewayReply(model=model, content=content)


def binary_payload(yes: float = 70, no: float = 30, top_pick: str = "YES", **overrides) -> dict:
    payload = {
        "outcomes": [
            {"label": "YES", "probability": yes, "reasoning": "Momentum", "dataPoints": ["a", "b"]},
            {"label": "NO", "probability": no, "reasoning": "Resistance", "dataPoints": []},
        ],
        "topPick": top_pick,
        "sentiment": "bullish",
        "confidence": "medium",
        "assumptions": ["x"],
        "keyRisks": ["y"],
    }
    payload.update(overrides)
    return payload


def make_analysis(
    model: str,
    probabilities: Dict[str, float],
    top_pick: str,
    evidence_density: float = 60.0,
    sentiment: str = "neutral",
    market: Optional[Dict[str, float]] = None,
) -> ModelAnalysis:
    """Build a ModelAnalysis with the given per-outcome probabilities."""
    market = market or {}
    rankings = [
        OutcomeAnalysis(
            outcome_label=label,
            ai_probability=probability,
            market_probability=market.get(label, 50.0),
            edge=probability - market.get(label, 50.0),
            reasoning=f"{model} on {label}",
            data_points=[f"{model}-{label}"],
        )
        for label, probability in probabilities.items()
    ]
    rankings.sort(key=lambda r: r.ai_probability, reverse=True)
    return ModelAnalysis(
        model=model,
        model_provider="Google",
        analysis=f"Analysis from {model}",
        outcome_rankings=rankings,
        top_pick=top_pick,
        top_pick_probability=probabilities.get(top_pick, 0.0),
        sentiment=sentiment,
        confidence="medium",
        evidence_density=evidence_density,
        data_points_cited=len(rankings),
    )
