"""Tests for the business advisor (Gemini is always mocked)."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from shopledger.agents import AdvisorInsight, BusinessAdvisor
from shopledger.config import AppSettings, GeminiSettings
from shopledger.models import AppState, AuditEventType, Debt, Loan
from shopledger.operations import record_sale


def _advisor(model=None, api_key="test-key", audit_logger=None):
    return BusinessAdvisor(
        settings=GeminiSettings(api_key=api_key),
        app_settings=AppSettings(currency="KES"),
        model=model,
        audit_logger=audit_logger,
    )


def _model_returning(text):
    model = MagicMock()
    model.generate_content_async = AsyncMock(return_value=MagicMock(text=text))
    return model


class TestPrompt:
    """Tests for the prompt built from aggregates."""

    def test_prompt_contains_figures(self, stocked_state):
        state = record_sale(stocked_state, "item-dress", quantity=2)
        state = state.model_copy(update={
            "debts": [Debt(creditor="Amina", amount=100)],
            "loans": [Loan(source="Bank", principal=5000)],
        })
        prompt = _advisor().build_prompt(state)

        assert "KES 1,000" in prompt
        assert "KES 8,000" in prompt
        assert "2 records" in prompt
        assert "30 years" in prompt


class TestGetInsight:
    """Tests for calling the model and degrading on failure."""

    def test_returns_model_text(self, stocked_state):
        model = _model_returning("  Open a second branch.  ")
        insight = asyncio.run(_advisor(model=model).get_insight(stocked_state))

        assert insight.ok is True
        assert insight.text == "Open a second branch."
        model.generate_content_async.assert_awaited_once()

    def test_missing_key_degrades(self):
        insight = asyncio.run(_advisor(api_key=None).get_insight(AppState()))
        assert isinstance(insight, AdvisorInsight)
        assert insight.ok is False
        assert "API key" in insight.text

    def test_service_error_degrades(self, audit_logger):
        model = MagicMock()
        model.generate_content_async = AsyncMock(side_effect=RuntimeError("quota"))
        advisor = _advisor(model=model, audit_logger=audit_logger)

        insight = asyncio.run(advisor.get_insight(AppState()))

        assert insight.ok is False
        event = audit_logger.recent_events(1)[0]
        assert event.event_type == AuditEventType.EXTERNAL_SERVICE_ERROR
        assert event.error_message == "quota"

    def test_empty_answer_degrades(self):
        insight = asyncio.run(_advisor(model=_model_returning("")).get_insight(AppState()))
        assert insight.ok is False

    def test_state_is_not_changed(self, stocked_state):
        before = stocked_state.model_copy(deep=True)
        asyncio.run(_advisor(model=_model_returning("ok")).get_insight(stocked_state))
        assert stocked_state == before


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
