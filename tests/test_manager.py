"""Tests for the multi-model fan-out manager."""

import pytest

from marketlens.config import ModelSpec
from marketlens.llm.manager import LLMManager
from tests.helpers import FakeGateway, binary_payload, tool_reply


def test_requires_models(settings):
    with pytest.raises(ValueError):
        LLMManager(settings, gateway=FakeGateway(), models=[])


@pytest.mark.asyncio
async def test_failures_do_not_propagate(settings, binary_outcomes):
    gateway = FakeGateway(
        {
            "test/alpha-lite": tool_reply("test/alpha-lite", binary_payload()),
            "test/beta": tool_reply("test/beta", binary_payload(yes=60, no=40)),
        }
    )
    manager = LLMManager(settings, gateway=gateway)

    results = await manager.analyze_with_all_models("sys", "prompt", binary_outcomes)

    alpha, beta, gamma = results
    assert alpha.model == "Alpha (Fallback)"
    assert beta.top_pick_probability == 60
    assert gamma is None


@pytest.mark.asyncio
async def test_unexpected_errors_become_failed_results(settings, binary_outcomes):
    class ExplodingGateway(FakeGateway):
        async def request_analysis(self, model, system_prompt, prompt, tool_schema):
            raise RuntimeError("boom")

    manager = LLMManager(settings, gateway=ExplodingGateway())

    results = await manager.analyze_with_all_models("sys", "prompt", binary_outcomes)

    assert results == [None, None, None]


@pytest.mark.asyncio
async def test_models_sharing_a_display_name_are_all_kept(settings, binary_outcomes):
    gateway = FakeGateway(
        {
            "test/alpha": tool_reply("test/alpha", binary_payload(yes=70, no=30)),
            "test/alpha-2": tool_reply("test/alpha-2", binary_payload(yes=55, no=45)),
        }
    )
    models = [
        ModelSpec(model_id="test/alpha", display_name="Alpha", provider="Test"),
        ModelSpec(model_id="test/alpha-2", display_name="Alpha", provider="Test"),
    ]
    manager = LLMManager(settings, gateway=gateway, models=models)

    results = await manager.analyze_with_all_models("sys", "prompt", binary_outcomes)

    assert [r.top_pick_probability for r in results] == [70, 55]
