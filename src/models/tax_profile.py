"""User tax profile as returned by the profile store."""

from typing import Optional

from pydantic import BaseModel, Field, field_validator


class TaxProfile(BaseModel):
    """Jurisdiction and filing details needed to estimate a user's taxes."""

    country: str = Field(default="US", description="ISO country code of the tax residence")

    # US-specific
    filing_status: str = Field(default="single", description="single, married_joint, ...")
    state: Optional[str] = Field(default=None, description="Two-letter state code")
    state_tax_rate: Optional[float] = Field(
        default=None, ge=0.0, le=1.0, description="Overrides the state lookup table"
    )

    # India-specific
    tax_regime: str = Field(default="new", pattern="^(new|old)$")
    presumptive_taxation: bool = Field(default=False, description="Opted into Section 44ADA")
    section_80c: float = Field(default=0.0, ge=0.0)
    section_80d: float = Field(default=0.0, ge=0.0)
    section_80e: float = Field(default=0.0, ge=0.0)
    senior_citizen: bool = Field(default=False, description="Raises the 80D cap")

    @field_validator("country", "state")
    @classmethod
    def upper_case(cls, v: Optional[str]) -> Optional[str]:
        return v.strip().upper() if v else v
