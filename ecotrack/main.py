from fastapi import FastAPI, Depends, HTTPException, Query, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session
from typing import Optional
import logging
import os
from pathlib import Path

from ecotrack.database import engine, get_db, Base, SessionLocal
from ecotrack import models  # noqa: F401  registers all tables with Base
from ecotrack.schemas import (
    AssessmentRequest, AssessmentResponse, CurrentFootprintResponse,
    ActionCreate, ActionResponse, TodayActionResponse, ActionListResponse, ActionHistoryResponse,
    ProofSubmit, VerificationRequest, VerificationResponse, LedgerResponse,
    RewardsSummaryResponse,
    MarketplaceListResponse, MarketplaceRewardResponse,
    RedemptionRequest, RedemptionResponse, RedeemedRewardInfo,
    SettingsUpdate, SettingsResponse,
)
from ecotrack.auth import get_current_user_id, get_optional_user_id, verify_reviewer_key
from ecotrack.exceptions import (
    EcoTrackException, NotFoundException, BusinessRuleException, ValidationException
)
from ecotrack.services.assessment_service import AssessmentService
from ecotrack.services.action_service import ActionService
from ecotrack.services.rewards_service import RewardsService
from ecotrack.services.achievement_service import AchievementService
from ecotrack.services.marketplace_service import MarketplaceService
from ecotrack.services.settings_service import SettingsService, to_response
from ecotrack.services.scheduler_service import start_scheduler, stop_scheduler
from ecotrack.constants import (
    DEFAULT_LOG_DIRECTORY_PROD, DEFAULT_LOG_DIRECTORY_DEV, CORS_ALLOWED_ORIGINS, SCHEDULER_ENABLED
)

LOG_DIR = os.getenv("ECOTRACK_LOG_DIR", DEFAULT_LOG_DIRECTORY_PROD)
LOG_FILE = os.getenv("ECOTRACK_LOG_FILE", "app.log")

# Create log directory if it doesn't exist (for development)
try:
    Path(LOG_DIR).mkdir(parents=True, exist_ok=True)
    log_path = Path(LOG_DIR) / LOG_FILE
except PermissionError:
    # Fallback to local directory if no permissions for /var/log
    LOG_DIR = DEFAULT_LOG_DIRECTORY_DEV
    Path(LOG_DIR).mkdir(parents=True, exist_ok=True)
    log_path = Path(LOG_DIR) / LOG_FILE

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.FileHandler(log_path),
        logging.StreamHandler()
    ]
)

logger = logging.getLogger("ecotrack")

app = FastAPI(
    title="EcoTrack API",
    description="Carbon footprint tracking with eco actions, rewards and a partner marketplace",
    version="1.0.0"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def raise_http(exc: EcoTrackException, failure_message: str):
    """Translate a domain exception into the HTTP error the client sees"""
    if isinstance(exc, NotFoundException):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    if isinstance(exc, (BusinessRuleException, ValidationException)):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    logger.error(f"{failure_message}: {exc}", exc_info=True)
    raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=failure_message)


# Startup event
@app.on_event("startup")
async def startup_event():
    Base.metadata.create_all(bind=engine)

    db = SessionLocal()
    try:
        AchievementService(db).seed_badge_catalog()
        MarketplaceService(db).seed_catalog()
    except Exception as e:
        db.rollback()
        logger.error(f"Catalog seeding failed: {e}")
    finally:
        db.close()

    logger.info(f"EcoTrack API started. Logging to: {log_path}")
    if SCHEDULER_ENABLED:
        start_scheduler()


# Shutdown event
@app.on_event("shutdown")
async def shutdown_event():
    logger.info("Shutting down EcoTrack API")
    stop_scheduler()


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Malformed request bodies are client errors (400)"""
    errors = exc.errors()
    if errors:
        first = errors[0]
        field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        detail = f"{field}: {first.get('msg')}" if field else first.get("msg")
    else:
        detail = "Invalid request"
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"detail": detail})


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception on {request.method} {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"}
    )


# Health check (no user header required)
@app.get("/")
async def root():
    return {"message": "EcoTrack API", "status": "active"}


# ===== CARBON FOOTPRINT =====

@app.post("/api/carbon-footprint/calculate", response_model=AssessmentResponse)
async def calculate_footprint(
    request: AssessmentRequest,
    user_id: Optional[int] = Depends(get_optional_user_id),
    db: Session = Depends(get_db)
):
    """Calculate and store a footprint; creates the user on first submission"""
    try:
        return AssessmentService(db).submit_assessment(request.answers, user_id=user_id)
    except EcoTrackException as e:
        raise_http(e, "Failed to calculate carbon footprint")


@app.get("/api/carbon-footprint/current", response_model=CurrentFootprintResponse)
async def get_current_footprint(
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    try:
        return AssessmentService(db).get_current_footprint(user_id)
    except EcoTrackException as e:
        raise_http(e, "Failed to fetch carbon footprint")


# ===== ACTIONS =====

@app.post("/api/actions", response_model=ActionResponse)
async def log_action(
    action: ActionCreate,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    try:
        return ActionService(db).log_action(
            user_id,
            action.action_type,
            description=action.description,
            proof_url=action.proof_url,
            proof_type=action.proof_type
        )
    except EcoTrackException as e:
        raise_http(e, "Failed to log action")


@app.get("/api/actions", response_model=ActionListResponse)
async def get_actions(
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    actions, today_actions = ActionService(db).get_actions(user_id)
    return ActionListResponse(
        actions=[ActionResponse.model_validate(a) for a in actions],
        today_actions=[TodayActionResponse.model_validate(a) for a in today_actions]
    )


@app.get("/api/actions/history", response_model=ActionHistoryResponse)
async def get_action_history(
    status_filter: Optional[str] = Query(None, alias="status"),
    limit: int = Query(100, ge=1, le=500),
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    try:
        actions = ActionService(db).get_history(user_id, status=status_filter, limit=limit)
    except EcoTrackException as e:
        raise_http(e, "Failed to fetch action history")
    return ActionHistoryResponse(actions=[ActionResponse.model_validate(a) for a in actions])


@app.post("/api/actions/{action_id}/proof", response_model=ActionResponse)
async def submit_proof(
    action_id: int,
    proof: ProofSubmit,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    try:
        return ActionService(db).submit_proof(
            user_id, action_id, proof.proof_url, proof_type=proof.proof_type
        )
    except EcoTrackException as e:
        raise_http(e, "Failed to submit proof")


@app.post(
    "/api/actions/{action_id}/verification",
    response_model=VerificationResponse,
    dependencies=[Depends(verify_reviewer_key)]
)
async def verify_action(
    action_id: int,
    decision: VerificationRequest,
    db: Session = Depends(get_db)
):
    """Verification service decision on an action; approval credits the ledger once"""
    try:
        action, ledger, completed_badges = ActionService(db).verify_action(action_id, decision.approved)
    except EcoTrackException as e:
        raise_http(e, "Failed to verify action")
    return VerificationResponse(
        action=ActionResponse.model_validate(action),
        ledger=LedgerResponse.model_validate(ledger) if ledger else None,
        completed_badges=[badge.name for badge in completed_badges]
    )


# ===== REWARDS =====

@app.get("/api/rewards", response_model=RewardsSummaryResponse)
async def get_rewards(
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    return RewardsService(db).get_summary(user_id)


# ===== MARKETPLACE =====

@app.get("/api/marketplace", response_model=MarketplaceListResponse)
async def get_marketplace(db: Session = Depends(get_db)):
    rewards = MarketplaceService(db).list_rewards()
    return MarketplaceListResponse(
        rewards=[MarketplaceRewardResponse.model_validate(r) for r in rewards]
    )


@app.post("/api/marketplace", response_model=RedemptionResponse)
async def redeem_reward(
    request: RedemptionRequest,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    if request.reward_id is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Reward ID is required")

    service = MarketplaceService(db)
    try:
        redemption = service.redeem(user_id, request.reward_id)
    except EcoTrackException as e:
        raise_http(e, "Failed to redeem reward")

    reward = service.reward_repo.get_by_id(db, request.reward_id)
    return RedemptionResponse(
        redemption_id=redemption.id,
        redemption_code=redemption.redemption_code,
        points_spent=redemption.points_spent,
        expires_at=redemption.expires_at,
        reward=RedeemedRewardInfo(
            title=reward.title,
            partner_name=reward.partner_name,
            description=reward.description,
            terms_conditions=reward.terms_conditions
        )
    )


# ===== SETTINGS =====

@app.get("/api/settings", response_model=SettingsResponse)
async def get_settings_endpoint(
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    return to_response(SettingsService(db).get_settings(user_id))


@app.put("/api/settings", response_model=SettingsResponse)
async def update_settings_endpoint(
    settings_update: SettingsUpdate,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    try:
        return to_response(SettingsService(db).update_settings(user_id, settings_update))
    except EcoTrackException as e:
        raise_http(e, "Failed to update settings")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("ecotrack.main:app", host="0.0.0.0", port=8000, reload=False)
