from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field, field_validator, model_validator


# Incoming records are posted by the site's forms with camelCase keys.
# Unknown keys (ninNumber, password, ...) are dropped, never stored.
class ApplicationIn(BaseModel):
    first_name: str = Field(alias="firstName")
    last_name: str = Field(alias="lastName")
    email: str
    phone: str
    age: int
    occupation: str
    location: str
    motivation: str
    experience: str
    goals: str

    class Config:
        populate_by_name = True
        extra = "ignore"


class PaymentIn(BaseModel):
    application_id: str = Field(alias="applicationId")
    amount: float
    currency: str
    payment_method: str = Field(alias="paymentMethod")

    class Config:
        populate_by_name = True
        extra = "ignore"


# WhatsApp Cloud API webhook shape: entry[].changes[].value.messages[]
class WebhookText(BaseModel):
    body: Optional[str] = None


class WebhookMessage(BaseModel):
    sender: str = Field(alias="from")
    id: Optional[str] = None
    type: Optional[str] = None
    text: Optional[WebhookText] = None

    class Config:
        populate_by_name = True
        extra = "allow"


class WebhookMessagesValue(BaseModel):
    messages: Optional[List[WebhookMessage]] = None

    class Config:
        extra = "allow"


class WebhookChange(BaseModel):
    field: str
    # shape depends on `field`; only "messages" values are parsed further
    value: Dict[str, Any] = Field(default_factory=dict)


class WebhookEntry(BaseModel):
    id: Optional[str] = None
    changes: List[WebhookChange]


class WebhookPayload(BaseModel):
    object: str
    entry: List[WebhookEntry]


class ReferralIn(BaseModel):
    nin_number: str = Field(alias="ninNumber")
    state_of_resident: str = Field(alias="stateOfResident")
    state_of_origin: str = Field(alias="stateOfOrigin")
    password: str
    confirm_password: str = Field(alias="confirmPassword")
    bank_name: str = Field(alias="bankName")
    account_number: str = Field(alias="accountNumber")
    account_name: str = Field(alias="accountName")

    class Config:
        populate_by_name = True
        extra = "ignore"

    @field_validator("nin_number")
    @classmethod
    def nin_is_eleven_digits(cls, value):
        if len(value) != 11 or not (value.isascii() and value.isdigit()):
            raise ValueError("NIN number must be exactly 11 digits")
        return value

    @field_validator("password")
    @classmethod
    def password_long_enough(cls, value):
        if len(value) < 8:
            raise ValueError("Password must be at least 8 characters long")
        return value

    @model_validator(mode="after")
    def passwords_match(self):
        if self.password != self.confirm_password:
            raise ValueError("Passwords do not match")
        return self

    def shared_record(self) -> Dict[str, Any]:
        # passwords are validated but never stored
        return {
            "nin_number": self.nin_number,
            "state_of_resident": self.state_of_resident,
            "state_of_origin": self.state_of_origin,
            "bank_name": self.bank_name,
            "account_number": self.account_number,
            "account_name": self.account_name,
        }


class InstitutionReferralIn(ReferralIn):
    institution_name: str = Field(alias="institutionName")
    president_name: str = Field(alias="presidentName")
    president_email: str = Field(alias="presidentEmail")
    president_phone: str = Field(alias="presidentPhone")
    institution_address: str = Field(alias="institutionAddress")

    def to_record(self) -> Dict[str, Any]:
        record = self.shared_record()
        record.update({
            "referral_type": "institution",
            "name": self.institution_name,
            "contact_name": self.president_name,
            "email": self.president_email,
            "phone": self.president_phone,
            "address": self.institution_address,
        })
        return record


class IndividualReferralIn(ReferralIn):
    full_name: str = Field(alias="fullName")
    email: str
    phone: str
    address: str

    def to_record(self) -> Dict[str, Any]:
        record = self.shared_record()
        record.update({
            "referral_type": "individual",
            "name": self.full_name,
            "contact_name": self.full_name,
            "email": self.email,
            "phone": self.phone,
            "address": self.address,
        })
        return record


def required_keys(model) -> List[str]:
    """camelCase keys of a schema's required fields, in declaration order."""
    return [f.alias or name for name, f in model.model_fields.items() if f.is_required()]
