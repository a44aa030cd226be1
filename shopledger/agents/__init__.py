"""AI Agents package."""

from shopledger.agents.advisor import AdvisorInsight, BusinessAdvisor

__all__ = [
    "AdvisorInsight",
    "BusinessAdvisor",
]
