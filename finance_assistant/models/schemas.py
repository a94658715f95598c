from datetime import date, datetime
from decimal import Decimal
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_serializer, field_validator

Category = Literal[
    "Food", "Transport", "Shopping", "Entertainment", "Utilities", "Healthcare", "Other"
]


# 🔐 Auth & user
def _clean_name(v: str) -> str:
    v = v.strip()
    if not v:
        raise ValueError("Name is required")
    return v


class SignupRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=6)
    name: str = Field(..., min_length=1, max_length=100)

    normalize_name = field_validator("name")(_clean_name)


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    name: str


class AuthResponse(BaseModel):
    message: str
    user: UserOut
    token: str


class ProfileUpdate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)

    normalize_name = field_validator("name")(_clean_name)


class PasswordChange(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    current_password: str = Field(..., min_length=1, alias="currentPassword")
    new_password: str = Field(..., min_length=6, alias="newPassword")


class AccountDelete(BaseModel):
    password: str = Field(..., min_length=1)


# 🧾 Expenses
class ExpenseIn(BaseModel):
    """Body for both create and full update."""

    title: str = Field(..., min_length=1, max_length=255)
    amount: Decimal = Field(..., ge=0, max_digits=12, decimal_places=2)
    category: Category
    date: date
    description: Optional[str] = None


class ExpenseOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    title: str
    amount: Decimal
    category: str
    description: Optional[str] = None
    date: date
    created_at: Optional[datetime] = None

    @field_serializer("amount")
    def serialize_amount(self, v: Decimal):
        return float(v)


# 🎯 Budgets
class BudgetCreate(BaseModel):
    category: Category
    amount: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2)
    month: int = Field(..., ge=1, le=12)
    year: int = Field(..., ge=1900, le=9999)


class BudgetUpdate(BaseModel):
    amount: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2)


class BudgetOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    category: str
    amount: Decimal
    month: int
    year: int
    created_at: Optional[datetime] = None

    @field_serializer("amount")
    def serialize_amount(self, v: Decimal):
        return float(v)


# 💬 Assistant
class ChatTurn(BaseModel):
    role: Literal["user", "assistant"]
    content: str


class ChatRequest(BaseModel):
    message: str = Field(..., min_length=1, max_length=4000)
    history: Optional[List[ChatTurn]] = None


class ChatResponse(BaseModel):
    response: str


class RecentTransaction(BaseModel):
    title: str
    amount: Decimal
    category: str
    date: date


class BudgetStatus(BaseModel):
    category: str
    amount: Decimal
    spent: Decimal = Decimal("0")


class ExpenseContext(BaseModel):
    """Snapshot of one owner's finances, rebuilt on every assistant call."""

    total_expenses: Decimal = Decimal("0")
    this_month_total: Decimal = Decimal("0")
    last_month_total: Decimal = Decimal("0")
    category_breakdown: Dict[str, Decimal] = Field(default_factory=dict)
    recent_transactions: List[RecentTransaction] = Field(default_factory=list)
    budgets: List[BudgetStatus] = Field(default_factory=list)
