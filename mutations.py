# mutations.py - write API over the backing store: create records, move their status
import logging
from contextlib import contextmanager
from datetime import datetime
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from errors import UpstreamError
from models import (
    Application,
    Payment,
    Referral,
    APPLICATION_STATUSES,
    PAYMENT_STATUSES,
    REFERRAL_TYPES,
)

logger = logging.getLogger("akademyx-mutations")


class MutationService:
    """Create/update operations for applications, payments and referrals.

    Methods flush but never commit; wrap a group of calls in ``atomic()``
    to commit them together or roll all of them back.
    """

    def __init__(self, session: Session):
        self.session = session

    @contextmanager
    def atomic(self):
        try:
            yield self
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            raise UpstreamError(f"database error: {e}") from e
        except Exception:
            self.session.rollback()
            raise

    def _flush(self):
        try:
            self.session.flush()
        except SQLAlchemyError as e:
            raise UpstreamError(f"database error: {e}") from e

    def create_application(self, fields: dict) -> str:
        application = Application(status="submitted", **fields)
        self.session.add(application)
        self._flush()
        logger.info("created application %s", application.id)
        return application.id

    def create_payment(self, application_id: str, amount: float, currency: str, payment_method: str) -> str:
        payment = Payment(
            application_id=application_id,
            amount=amount,
            currency=currency,
            payment_method=payment_method,
            status="pending",
        )
        self.session.add(payment)
        self._flush()
        logger.info("created pending payment %s for application %s", payment.id, application_id)
        return payment.id

    def update_payment_status(self, payment_id: str, status: str, transaction_id=None):
        if status not in PAYMENT_STATUSES:
            raise UpstreamError(f"invalid payment status {status!r}")
        payment = self.session.get(Payment, payment_id)
        if payment is None:
            raise UpstreamError(f"payment {payment_id} not found")
        payment.status = status
        if transaction_id is not None:
            payment.transaction_id = transaction_id
        payment.updated_at = datetime.utcnow()
        self._flush()
        logger.info("payment %s -> %s", payment_id, status)

    def update_application_status(self, application_id: str, status: str):
        if status not in APPLICATION_STATUSES:
            raise UpstreamError(f"invalid application status {status!r}")
        application = self.session.get(Application, application_id)
        if application is None:
            raise UpstreamError(f"application {application_id} not found")
        application.status = status
        application.updated_at = datetime.utcnow()
        self._flush()
        logger.info("application %s -> %s", application_id, status)

    def create_referral(self, fields: dict) -> str:
        if fields.get("referral_type") not in REFERRAL_TYPES:
            raise UpstreamError(f"invalid referral type {fields.get('referral_type')!r}")
        referral = Referral(**fields)
        self.session.add(referral)
        self._flush()
        logger.info("created %s referral %s", referral.referral_type, referral.id)
        return referral.id
