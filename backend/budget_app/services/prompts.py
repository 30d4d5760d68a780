"""
Prompt text for the budget assistant
"""
from typing import Optional

from budget_app.services.budget_math import BudgetSummary

SYSTEM_PROMPT = """
You are an assistant helping a chapter treasurer reason about their chapter budget.

You are given:
- A simple budget model with: members, duesPerMember, total expenses.
- A summary of the current budget.
- A user's question.

Your job:
- Explain the budget in clear, simple terms.
- If the user asks "what if" questions (change dues, change members, change expenses),
  explain the effect qualitatively using the numbers you are given.
- If no budget is set yet, ask the user for:
  - number of members
  - dues per member
  - total yearly expenses
Keep answers concise and focused on the financial impact.
"""

NO_BUDGET_CONTEXT = "No budget has been set yet. Ask the user for members, duesPerMember, and expenses."

FALLBACK_REPLY = "Sorry, I could not generate a response."

NO_MESSAGE = "(no message)"


def budget_context(summary: Optional[BudgetSummary]) -> str:
    """Describe the current budget for the model"""
    if summary is None:
        return NO_BUDGET_CONTEXT
    return (
        "Current chapter budget:\n"
        f"- Members: {summary.members}\n"
        f"- Dues per member: {summary.dues_per_member}\n"
        f"- Total revenue: {summary.total_revenue}\n"
        f"- Total expenses: {summary.expenses}\n"
        f"- Balance (revenue - expenses): {summary.balance}\n"
    )


def user_prompt(context: str, message: str) -> str:
    return f"Budget context:\n{context}\n\nUser question: {message}"
