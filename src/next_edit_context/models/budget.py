# next_edit_context/models/budget.py
"""Token budgets and clip results."""

from __future__ import annotations

from pydantic import BaseModel, Field, model_validator

from .document import LineRange
from .enums import BudgetError


class ConsumeResult(BaseModel):
    """Outcome of charging a cost against a budget."""

    success: bool
    cost: int
    remaining: int
    error: BudgetError | None = None


class TokenBudget(BaseModel):
    """
    A depletable token allowance for one section of one assembly call.

    ``remaining`` only goes down and never below zero: a cost that does not
    fit is refused and leaves the budget untouched.
    """

    initial: int = Field(default=0, ge=0, description="Allowance at creation")
    remaining: int = Field(default=0, ge=0, description="Tokens still available")

    @model_validator(mode="before")
    @classmethod
    def _default_remaining(cls, data):
        if isinstance(data, dict):
            if "remaining" not in data and "initial" in data:
                data = {**data, "remaining": data["initial"]}
            elif "initial" not in data and "remaining" in data:
                data = {**data, "initial": data["remaining"]}
        return data

    @classmethod
    def of(cls, tokens: int) -> TokenBudget:
        """Budget starting at ``tokens``; negative allowances are treated as zero."""
        tokens = max(0, tokens)
        return cls(initial=tokens, remaining=tokens)

    @property
    def used(self) -> int:
        """Tokens consumed so far."""
        return self.initial - self.remaining

    @property
    def is_exhausted(self) -> bool:
        return self.remaining <= 0

    def can_fit(self, cost: int) -> bool:
        """Check if ``cost`` more tokens can be consumed."""
        return cost <= self.remaining

    def consume(self, cost: int) -> ConsumeResult:
        """Charge ``cost`` tokens if they fit."""
        if not self.can_fit(cost):
            return ConsumeResult(
                success=False,
                cost=cost,
                remaining=self.remaining,
                error=BudgetError.OUT_OF_BUDGET,
            )
        self.remaining -= cost
        return ConsumeResult(success=True, cost=cost, remaining=self.remaining)


class ClipResult(BaseModel):
    """
    Result of clipping a document to a budget.

    On success ``kept_range`` holds the absolute line range that was kept and,
    for tagged current-file content, ``lines`` holds the spliced lines. On
    failure ``error`` is set and the caller omits the section.
    """

    kept_range: LineRange | None = None
    lines: list[str] | None = None
    error: BudgetError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def out_of_budget(cls) -> ClipResult:
        return cls(error=BudgetError.OUT_OF_BUDGET)
