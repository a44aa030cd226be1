"""
Business Advisor (Gemini)

An optional collaborator that turns the shop's derived figures into a
short free-text outlook.

CRITICAL BOUNDARIES:
- CAN: read aggregates computed from the current AppState
- CANNOT: change state; it is never handed the session
- MUST: degrade to a visible message on ANY failure (no key, network,
  quota, empty answer). Nothing it does can raise into the state layer.

The LLM only ever sees numbers we computed. It is asked for commentary,
not for figures.
"""

from datetime import datetime, timezone
from typing import Any, Optional

import google.generativeai as genai
from pydantic import BaseModel, Field

from shopledger.analytics.aggregates import PROJECTION_YEARS, inventory_value, net_profit
from shopledger.audit import AuditLogger
from shopledger.config import AppSettings, GeminiSettings, get_settings
from shopledger.models.entities import AppState


MISSING_KEY_MESSAGE = (
    "API key not found. Please ensure GEMINI_API_KEY is configured in the environment."
)
SERVICE_ERROR_MESSAGE = "Error communicating with AI Advisor. Please try again later."
EMPTY_RESPONSE_MESSAGE = "Insight generation failed."


class AdvisorInsight(BaseModel):
    """Advisor output, or the message to show instead."""

    ok: bool
    text: str
    generated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )


class BusinessAdvisor:
    """
    Generates long-range commentary from derived figures.

    The Gemini model is created lazily on first use so that a session
    without an API key never touches the SDK.
    """

    def __init__(
        self,
        settings: Optional[GeminiSettings] = None,
        app_settings: Optional[AppSettings] = None,
        model: Optional[Any] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._settings = settings or get_settings().gemini
        self._app_settings = app_settings or get_settings().app
        self._model = model
        self._audit_logger = audit_logger or AuditLogger()

    def _get_model(self):
        """Configure Google Generative AI on first use."""
        if self._model is None:
            genai.configure(api_key=self._settings.api_key)
            self._model = genai.GenerativeModel(
                model_name=self._settings.model_name,
                generation_config={
                    "temperature": self._settings.temperature,
                    "max_output_tokens": self._settings.max_tokens,
                }
            )
        return self._model

    def build_prompt(self, state: AppState) -> str:
        """Prompt built only from aggregates, never from raw records."""
        fmt = self._app_settings.format_amount
        open_records = len(state.debts) + len(state.loans)

        return f"""As a world-class financial advisor, analyze this business's {PROJECTION_YEARS}-year trajectory.
Current Monthly Net Profit: {fmt(net_profit(state))}
Inventory Value: {fmt(inventory_value(state))}
Active Debts/Loans: {open_records} records.

Provide a concise 3-paragraph vision for the next {PROJECTION_YEARS} years assuming 10% annual compounding growth.
Focus on expansion milestones and wealth building."""

    async def get_insight(self, state: AppState) -> AdvisorInsight:
        """
        Ask the model for commentary.

        Never raises; failures come back as ok=False with a message.
        """
        if self._model is None and not self._settings.api_key:
            return AdvisorInsight(ok=False, text=MISSING_KEY_MESSAGE)

        prompt = self.build_prompt(state)
        try:
            response = await self._get_model().generate_content_async(prompt)
            text = (response.text or "").strip()
        except Exception as e:
            self._audit_logger.log_external_service_error(
                service="gemini",
                error_message=str(e),
            )
            return AdvisorInsight(ok=False, text=SERVICE_ERROR_MESSAGE)

        if not text:
            return AdvisorInsight(ok=False, text=EMPTY_RESPONSE_MESSAGE)
        return AdvisorInsight(ok=True, text=text)
