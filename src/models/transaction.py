"""
Transaction input models.

Inputs crossing the public boundary are validated with pydantic and fail
fast: a blank description, a non-numeric or non-finite amount or an
unparseable date raise ``pydantic.ValidationError``.
"""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from models.classification import ClassificationResult


def transaction_text(description: str, merchant_name: Optional[str] = None) -> str:
    """Description and merchant joined for text analysis."""
    return f"{description} {merchant_name or ''}".strip()


class TransactionType(str, Enum):
    INCOME = "income"
    EXPENSE = "expense"
    TRANSFER = "transfer"


class TransactionInput(BaseModel):
    """Raw transaction as delivered by a bank feed, platform or manual entry."""

    description: str = Field(min_length=1, description="Free-text transaction description")
    merchant_name: Optional[str] = Field(default=None, description="Merchant or counterparty")
    amount: float = Field(allow_inf_nan=False, description="Transaction amount")
    date: dt.date = Field(description="Posting date")
    type: Optional[TransactionType] = Field(
        default=None,
        description="income, expense or transfer; inferred from the amount sign when omitted",
    )
    external_categories: List[str] = Field(
        default_factory=list,
        description="Coarse categories supplied by the bank feed",
    )

    @field_validator("description")
    @classmethod
    def description_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("description must not be blank")
        return v.strip()

    @field_validator("amount", mode="before")
    @classmethod
    def amount_not_bool(cls, v: Any) -> Any:
        if isinstance(v, bool):
            raise ValueError("amount must be a number, not a boolean")
        return v

    @field_validator("date", mode="before")
    @classmethod
    def date_not_timestamp(cls, v: Any) -> Any:
        # Epoch numbers would otherwise be coerced into a date
        if isinstance(v, (bool, int, float)):
            raise ValueError("date must be an ISO date string or a date")
        return v

    @field_validator("external_categories")
    @classmethod
    def drop_blank_categories(cls, v: List[str]) -> List[str]:
        return [c.strip() for c in v if c and c.strip()]

    @model_validator(mode="after")
    def infer_type(self) -> "TransactionInput":
        # Bank feeds report outflows as positive amounts
        if self.type is None:
            self.type = TransactionType.EXPENSE if self.amount > 0 else TransactionType.INCOME
        return self

    @property
    def transaction_type(self) -> TransactionType:
        return self.type or TransactionType.EXPENSE

    @property
    def text(self) -> str:
        return transaction_text(self.description, self.merchant_name)


@dataclass
class ClassifiedTransaction:
    """A stored transaction together with its classification."""

    transaction: TransactionInput
    classification: ClassificationResult
    user_id: Optional[str] = None

    @property
    def amount(self) -> float:
        return abs(self.transaction.amount)

    @property
    def date(self) -> dt.date:
        return self.transaction.date

    @property
    def type(self) -> TransactionType:
        return self.transaction.transaction_type

    @property
    def category(self) -> str:
        return self.classification.category.primary


class CorrectedCategory(BaseModel):
    primary: str = Field(min_length=1)
    detailed: Optional[str] = None


class CorrectedDeductibility(BaseModel):
    is_deductible: bool = False
    deduction_type: Optional[str] = None
    notes: Optional[str] = None


class UserCorrection(BaseModel):
    """A user's manual classification of a transaction."""

    category: CorrectedCategory
    business_classification: str = Field(pattern="^(business|personal|mixed)$")
    tax_deductible: CorrectedDeductibility = Field(default_factory=CorrectedDeductibility)
