# app.py - FastAPI server
import logging
from fastapi import FastAPI, Depends, Request
from fastapi.responses import JSONResponse, PlainTextResponse
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool
import db
import handlers
from config import Settings, load_settings
from errors import AuthError, MalformedWebhookPayload, ValidationError
from models import Base
from mutations import MutationService
from whatsapp import WhatsAppClient

app = FastAPI(title="Akademyx Enrollment API")

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("akademyx-api")


@app.on_event("startup")
def startup_event():
    """Load settings once, connect the database and create missing tables."""
    settings = load_settings()
    logging.getLogger().setLevel(settings.log_level)
    app.state.settings = settings
    db.init_engine(settings.database_url)
    Base.metadata.create_all(bind=db.engine)
    if not settings.whatsapp_webhook_token:
        logger.warning("[STARTUP] WHATSAPP_WEBHOOK_TOKEN not set; webhook verification will always be refused")
    logger.info("[STARTUP] enrollment API ready")


@app.on_event("shutdown")
def shutdown_event():
    if db.engine is not None:
        db.engine.dispose()
    logger.info("[SHUTDOWN] database engine disposed")


# Dependencies
def get_db():
    db_sess = db.SessionLocal()
    try:
        yield db_sess
    finally:
        db_sess.close()


def get_mutations(db_sess: Session = Depends(get_db)) -> MutationService:
    return MutationService(db_sess)


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_whatsapp(settings: Settings = Depends(get_settings)) -> WhatsAppClient:
    return WhatsAppClient(settings)


def error_response(status_code, message):
    return JSONResponse({"error": message}, status_code=status_code)


@app.post("/api/applications")
async def submit_application(request: Request, mutations: MutationService = Depends(get_mutations)):
    try:
        body = await request.json()
        result = await run_in_threadpool(handlers.submit_application, body, mutations)
    except ValidationError as e:
        logger.info("/api/applications rejected: %s", e)
        return error_response(400, str(e))
    except Exception:
        logger.exception("Application submission error")
        return error_response(500, "Failed to submit application")

    logger.info("/api/applications created application_id=%s", result["applicationId"])
    return JSONResponse(result, status_code=201)


@app.post("/api/payments")
async def process_payment(request: Request, mutations: MutationService = Depends(get_mutations)):
    try:
        body = await request.json()
        result = await run_in_threadpool(handlers.process_payment, body, mutations)
    except ValidationError as e:
        logger.info("/api/payments rejected: %s", e)
        return error_response(400, str(e))
    except Exception:
        logger.exception("Payment processing error")
        return error_response(500, "Failed to process payment")

    return JSONResponse(result, status_code=200)


@app.post("/api/referrals")
async def register_referral(request: Request, mutations: MutationService = Depends(get_mutations)):
    try:
        body = await request.json()
        result = await run_in_threadpool(handlers.register_referral, body, mutations)
    except ValidationError as e:
        logger.info("/api/referrals rejected: %s", e)
        return error_response(400, str(e))
    except Exception:
        logger.exception("Referral registration error")
        return error_response(500, "Failed to register referral")

    return JSONResponse(result, status_code=201)


@app.post("/api/whatsapp")
async def send_whatsapp_message(request: Request, whatsapp: WhatsAppClient = Depends(get_whatsapp)):
    try:
        body = await request.json()
        sent = await whatsapp.send_message(
            body.get("phoneNumber"),
            body.get("message"),
            body.get("templateName"),
            body.get("templateParams"),
        )
    except ValidationError as e:
        return error_response(400, str(e))
    except Exception:
        logger.exception("WhatsApp API Error")
        return error_response(500, "Failed to send WhatsApp message")

    return {
        "success": True,
        "messageId": sent.message_id,
        "status": sent.status.value,
        "timestamp": sent.timestamp,
    }


@app.get("/api/whatsapp")
def verify_whatsapp_webhook(request: Request, whatsapp: WhatsAppClient = Depends(get_whatsapp)):
    params = request.query_params
    try:
        challenge = whatsapp.verify_subscription(
            params.get("hub.mode"), params.get("hub.verify_token"), params.get("hub.challenge")
        )
    except AuthError:
        logger.warning("[WEBHOOK] verification refused (mode=%s)", params.get("hub.mode"))
        return error_response(403, "Forbidden")
    except Exception:
        logger.exception("WhatsApp Webhook Error")
        return error_response(500, "Webhook verification failed")

    return PlainTextResponse(challenge, status_code=200)


@app.put("/api/whatsapp")
async def receive_whatsapp_webhook(request: Request, whatsapp: WhatsAppClient = Depends(get_whatsapp)):
    try:
        body = await request.json()
        replies = await whatsapp.handle_webhook(body)
    except MalformedWebhookPayload as e:
        logger.error("Malformed WhatsApp webhook: %s errors=%s", e, e.errors)
        return error_response(500, "Failed to process incoming message")
    except Exception:
        logger.exception("WhatsApp Incoming Message Error")
        return error_response(500, "Failed to process incoming message")

    logger.info("[WEBHOOK] processed; %d auto-replies sent", len(replies))
    return {"received": True}


@app.get("/health")
def health():
    return {"ok": True}
