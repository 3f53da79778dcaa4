# handlers.py - request validation and the status transitions behind each POST route
import logging
import re
import time
from pydantic import ValidationError as PydanticValidationError
from errors import ValidationError
from mutations import MutationService
import schemas

logger = logging.getLogger("akademyx-handlers")

APPLICATION_FIELDS = schemas.required_keys(schemas.ApplicationIn)
PAYMENT_FIELDS = ("applicationId", "amount", "currency", "paymentMethod")
REFERRAL_SCHEMAS = {
    "institution": schemas.InstitutionReferralIn,
    "individual": schemas.IndividualReferralIn,
}

_LEADING_HEX = re.compile(r"\s*([+-]?)0[xX]([0-9a-fA-F]+)")
_LEADING_INT = re.compile(r"\s*([+-]?[0-9]+)")
_LEADING_FLOAT = re.compile(r"\s*([+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?)")


def is_blank(value) -> bool:
    """True for the values a form submission counts as missing: None, "", 0, NaN and False.

    Empty lists and objects are present values; their type is checked later.
    """
    if value is None or value is False or value == "":
        return True
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return value == 0 or value != value
    return False


def require(body: dict, keys):
    """Raise ValidationError naming the first key whose value is missing or blank."""
    for key in keys:
        if is_blank(body.get(key)):
            raise ValidationError(f"{key} is required")


def parse_int(value) -> int:
    """Leading-integer parse: "25" -> 25, "25.7" -> 25, 25.9 -> 25, "0x1A" -> 26."""
    if isinstance(value, bool):
        raise ValueError(f"cannot parse integer from {value!r}")
    if isinstance(value, (int, float)):
        return int(value)
    text = str(value)
    match = _LEADING_HEX.match(text)
    if match:
        sign, digits = match.groups()
        return -int(digits, 16) if sign == "-" else int(digits, 16)
    match = _LEADING_INT.match(text)
    if not match:
        raise ValueError(f"cannot parse integer from {value!r}")
    return int(match.group(1))


def parse_float(value) -> float:
    if isinstance(value, bool):
        raise ValueError(f"cannot parse number from {value!r}")
    if isinstance(value, (int, float)):
        return float(value)
    match = _LEADING_FLOAT.match(str(value))
    if not match:
        raise ValueError(f"cannot parse number from {value!r}")
    return float(match.group(1))


def simulated_transaction_id() -> str:
    return f"SIM_{int(time.time() * 1000)}"


def submit_application(body: dict, mutations: MutationService) -> dict:
    # truthiness is checked on the raw value, so "0" passes and 0 does not
    require(body, APPLICATION_FIELDS)
    normalized = dict(body)
    normalized["age"] = parse_int(body["age"])
    application = schemas.ApplicationIn.model_validate(normalized)

    with mutations.atomic():
        application_id = mutations.create_application(application.model_dump())

    return {
        "success": True,
        "applicationId": application_id,
        "message": "Application submitted successfully",
    }


def process_payment(body: dict, mutations: MutationService, transaction_id_factory=simulated_transaction_id) -> dict:
    """Record a payment and approve its application.

    Settlement is simulated: the payment is marked completed straight away
    with a ``SIM_`` transaction id. All steps share one transaction, so an
    unknown application leaves no pending payment behind.
    """
    if any(is_blank(body.get(key)) for key in PAYMENT_FIELDS):
        raise ValidationError("Missing required payment information")
    payment = schemas.PaymentIn.model_validate({**body, "amount": parse_float(body["amount"])})

    with mutations.atomic():
        payment_id = mutations.create_payment(
            payment.application_id, payment.amount, payment.currency, payment.payment_method
        )
        transaction_id = transaction_id_factory()
        mutations.update_payment_status(payment_id, "completed", transaction_id=transaction_id)
        mutations.update_application_status(payment.application_id, "approved")

    logger.info("[PAYMENT] %s settled (simulated) as %s", payment_id, transaction_id)
    return {
        "success": True,
        "paymentId": payment_id,
        "message": "Payment processed successfully",
    }


def register_referral(body: dict, mutations: MutationService) -> dict:
    referral_type = body.get("referralType")
    model = REFERRAL_SCHEMAS.get(referral_type)
    if model is None:
        raise ValidationError("referralType must be 'institution' or 'individual'")

    require(body, schemas.required_keys(model))
    try:
        referral = model.model_validate(body)
    except PydanticValidationError as e:
        raise ValidationError(_first_error_message(e)) from e

    with mutations.atomic():
        referral_id = mutations.create_referral(referral.to_record())

    return {
        "success": True,
        "referralId": referral_id,
        "message": "Referral registration received",
    }


def _first_error_message(exc: PydanticValidationError) -> str:
    error = exc.errors()[0]
    ctx_error = (error.get("ctx") or {}).get("error")
    if ctx_error is not None:
        return str(ctx_error)
    loc = ".".join(str(part) for part in error.get("loc", ()))
    return f"{loc}: {error.get('msg')}" if loc else error.get("msg", "invalid referral")
