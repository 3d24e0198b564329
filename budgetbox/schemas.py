"""
API Schemas

Pydantic models for the request and response bodies of the budget
service.  Field names are snake_case in Python and camelCase on the
wire, matching the documents the client stores locally.
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class Budget(BaseModel):
    """
    One budget document, the unit stored per email
    """
    model_config = ConfigDict(populate_by_name=True)

    income: float = Field(0, description="Monthly income")
    monthly_bills: float = Field(0, alias="monthlyBills", description="Rent, utilities and other fixed bills")
    food: float = Field(0, description="Dining and groceries")
    transport: float = Field(0, description="Commute and travel")
    subscriptions: float = Field(0, description="Recurring app and media subscriptions")
    miscellaneous: float = Field(0, description="Everything else")

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)


class LoginRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class LoginResponse(BaseModel):
    token: str
    email: str


class SyncRequest(BaseModel):
    """
    Sync body; both fields are checked by the endpoint so that a missing
    value yields a 400 with a specific message
    """
    budget: Optional[Budget] = None
    email: Optional[str] = None


class SyncResponse(BaseModel):
    success: bool = True
    timestamp: str


class LatestResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    budget: Optional[Dict[str, Any]] = None
    updated_at: Optional[str] = Field(None, alias="updatedAt")


class HealthResponse(BaseModel):
    ok: bool = True
    service: str
