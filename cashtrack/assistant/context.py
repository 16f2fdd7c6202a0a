"""
Assistant Context

Builds the data the chat assistant is grounded on and renders the fixed
system prompt around it.

CRITICAL BOUNDARIES:
- The assistant answers FROM the user's real numbers. Everything it may
  quote is put into the prompt here.
- No numbers are invented: empty collections render as zeros and empty
  lists, never as placeholders.
- The call to the language model itself lives outside this package.
"""

import json
from datetime import datetime
from typing import Optional, Sequence

from pydantic import BaseModel, Field

from cashtrack.aggregation import category_totals, goal_progress, total_amount
from cashtrack.models.finance import GoalStatus
from cashtrack.normalization import (
    normalize_expenses,
    normalize_goals,
    normalize_incomes,
    normalize_savings,
)


ASSISTANT_PROMPT_TEMPLATE = """
You are CashTrack AI Assistant.

Your job is to give accurate, personalized answers based ONLY on:
1. The user's real financial data from the CashTrack app
2. The user's question

======================
CASH TRACK USER DATA:
- Total Income: {{totalIncome}}
- Income Sources: {{incomeSources}}

- Total Expenses: {{totalExpenses}}
- Expense Categories: {{expenseCategories}}

- Total Savings: {{totalSavings}}
- Savings Goals: {{savingsGoals}}
======================

RULES FOR ANALYSIS:
1. ALWAYS use the user's real numbers (income, expenses, categories, goals) when giving financial advice.
2. If the question is about savings, budgeting, expense analysis, financial
   planning, goal progress or spending habits, use the real data in
   CASH TRACK USER DATA.
3. When the user asks about spending or budgeting:
   - Compare income vs expenses
   - Identify high expense categories
   - Suggest improvement based on categories
4. When the user asks about savings:
   - Calculate potential savings = totalIncome - totalExpenses
   - Use savingsGoals to give goal-based suggestions
5. When the user asks about goals:
   - Show goal progress
   - Show amount left
   - Suggest monthly contribution
6. NEVER invent or assume any numbers.
7. NEVER ignore the user's real data.
8. When the question is NOT related to finance, answer normally.

FORMAT:
- Keep answers simple, clear, short
- Use bullet points when helpful
- Include calculations only when needed
"""


class IncomeSource(BaseModel):
    """One income record as shown to the assistant."""

    category: Optional[str] = None
    amount: float
    timestamp: Optional[datetime] = None


class GoalSummary(BaseModel):
    """One savings goal as shown to the assistant."""

    name: str
    target_amount: float
    saved_amount: float
    remaining: float
    progress_percent: float
    status: GoalStatus
    deadline: Optional[datetime] = None


class FinanceContext(BaseModel):
    """Everything the assistant prompt is filled with."""

    total_income: float = 0.0
    income_sources: list[IncomeSource] = Field(default_factory=list)
    total_expenses: float = 0.0
    expense_categories: dict[str, float] = Field(default_factory=dict)
    total_savings: float = 0.0
    savings_goals: list[GoalSummary] = Field(default_factory=list)


def build_finance_context(
    income: Sequence,
    expenses: Sequence,
    savings: Sequence,
    goals: Sequence,
) -> FinanceContext:
    """
    Aggregate the full history into the assistant's grounding data.

    Total savings is the sum of the savings history, not of goal balances.
    """
    income_records = normalize_incomes(income)
    expense_records = normalize_expenses(expenses)
    saving_records = normalize_savings(savings)

    summaries = []
    for goal in normalize_goals(goals):
        progress = goal_progress(goal)
        summaries.append(GoalSummary(
            name=goal.name,
            target_amount=goal.target_amount,
            saved_amount=goal.saved_amount,
            remaining=progress.remaining,
            progress_percent=round(progress.progress * 100, 1),
            status=goal.status,
            deadline=goal.deadline,
        ))

    return FinanceContext(
        total_income=total_amount(income_records),
        income_sources=[
            IncomeSource(category=r.category, amount=r.amount, timestamp=r.timestamp)
            for r in income_records
        ],
        total_expenses=total_amount(expense_records),
        expense_categories=category_totals(expense_records),
        total_savings=total_amount(saving_records),
        savings_goals=summaries,
    )


def _number(value: float) -> str:
    return str(int(value)) if value.is_integer() else str(value)


def _json(value) -> str:
    return json.dumps(value, ensure_ascii=False, default=str)


def render_assistant_prompt(context: FinanceContext, question: str) -> str:
    """Fill the system prompt with the context and append the user's question."""
    dumped = context.model_dump(mode="json")

    prompt = (
        ASSISTANT_PROMPT_TEMPLATE
        .replace("{{totalIncome}}", _number(context.total_income))
        .replace("{{incomeSources}}", _json(dumped["income_sources"]))
        .replace("{{totalExpenses}}", _number(context.total_expenses))
        .replace("{{expenseCategories}}", _json(dumped["expense_categories"]))
        .replace("{{totalSavings}}", _number(context.total_savings))
        .replace("{{savingsGoals}}", _json(dumped["savings_goals"]))
    )
    return f"{prompt}\nUser question: {question.strip()}"
