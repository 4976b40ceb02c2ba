"""Pydantic models for the notification / profile service API.

See https://teamdigitale.github.io/digital-citizenship/api/public.html
"""

from typing import Annotated

from pydantic import BaseModel, ConfigDict, EmailStr, Field, StringConstraints

FISCAL_CODE_PATTERN = (
    r"^[A-Z]{6}[0-9LMNPQRSTUV]{2}[ABCDEHLMPRST][0-9LMNPQRSTUV]{2}[A-Z][0-9LMNPQRSTUV]{3}[A-Z]$"
)

FiscalCode = Annotated[str, StringConstraints(pattern=FISCAL_CODE_PATTERN)]
NonEmptyString = Annotated[str, StringConstraints(min_length=1)]
CIDR = Annotated[str, StringConstraints(pattern=r"^([0-9]{1,3}\.){3}[0-9]{1,3}(/([0-9]|[1-2][0-9]|3[0-2]))?$")]

# ---------------------------------------------------------------------------
# Messages
# ---------------------------------------------------------------------------


class PaymentData(BaseModel):
    amount: int = Field(ge=1, le=9999999999)
    notice_number: Annotated[str, StringConstraints(pattern=r"^[0123][0-9]{17}$")]
    invalid_after_due_date: bool = False


class MessageContent(BaseModel):
    subject: Annotated[str, StringConstraints(min_length=10, max_length=120)]
    markdown: Annotated[str, StringConstraints(min_length=80, max_length=10000)]
    payment_data: PaymentData | None = None
    due_date: str | None = None


class NewMessageDefaultAddresses(BaseModel):
    email: EmailStr | None = None


class NewMessage(BaseModel):
    time_to_live: int = Field(default=3600, ge=3600, le=604800)
    content: MessageContent
    default_addresses: NewMessageDefaultAddresses | None = None


class MessageCreated(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: NonEmptyString


# ---------------------------------------------------------------------------
# Services
# ---------------------------------------------------------------------------


class Service(BaseModel):
    """A service as managed through the admin API."""

    model_config = ConfigDict(extra="allow")

    service_id: NonEmptyString
    service_name: NonEmptyString
    organization_name: NonEmptyString
    department_name: NonEmptyString
    organization_fiscal_code: Annotated[str, StringConstraints(pattern=r"^[0-9]{11}$")]
    authorized_cidrs: list[CIDR] = Field(default_factory=list)
    authorized_recipients: list[FiscalCode] = Field(default_factory=list)
    max_allowed_payment_amount: int = Field(default=0, ge=0, le=9999999999)
    is_visible: bool = False
    version: int | None = None


class ServicePublic(BaseModel):
    """The public projection of a service."""

    model_config = ConfigDict(extra="allow")

    service_id: NonEmptyString
    service_name: NonEmptyString
    organization_name: NonEmptyString
    department_name: NonEmptyString
    organization_fiscal_code: str | None = None
    version: int | None = None


# ---------------------------------------------------------------------------
# Profiles
# ---------------------------------------------------------------------------


class ExtendedProfile(BaseModel):
    model_config = ConfigDict(extra="allow")

    email: EmailStr | None = None
    preferred_languages: list[str] | None = None
    is_inbox_enabled: bool | None = None
    is_webhook_enabled: bool | None = None
    version: int | None = None


class DevelopmentProfile(ExtendedProfile):
    """Profile created for a developer's test fiscal code; the email is mandatory."""

    email: EmailStr
