"""Chat assistant grounding package."""

from cashtrack.assistant.context import (
    ASSISTANT_PROMPT_TEMPLATE,
    FinanceContext,
    GoalSummary,
    IncomeSource,
    build_finance_context,
    render_assistant_prompt,
)

__all__ = [
    "ASSISTANT_PROMPT_TEMPLATE",
    "FinanceContext",
    "GoalSummary",
    "IncomeSource",
    "build_finance_context",
    "render_assistant_prompt",
]
