from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy import func
from typing import Optional
from datetime import datetime, timedelta
import logging

from utils.database import get_db
from utils.config import FEEDBACK_LIST_LIMIT, FEEDBACK_RATE_LIMIT, FEEDBACK_RATE_WINDOW_SECONDS
from models.feedback import Feedback, FeedbackCategory, FeedbackStatus
from schemas.feedback import FeedbackCreate, FeedbackResponse, FeedbackUpdate
from utils.exceptions import NotFoundError, RateLimitError, UnexpectedError, ValidationError
from utils.request_info import get_client_ip, get_user_agent


logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/feedback", tags=["feedback"])


def check_rate_limit(db: Session, ip_address: str, now: datetime):
    window_start = now - timedelta(seconds=FEEDBACK_RATE_WINDOW_SECONDS)
    recent = db.query(Feedback).filter(
        Feedback.ip_address == ip_address,
        Feedback.created_at >= window_start,
    ).count()
    if recent >= FEEDBACK_RATE_LIMIT:
        logger.warning(f"Feedback rate limit hit for {ip_address} ({recent} in {FEEDBACK_RATE_WINDOW_SECONDS}s)")
        raise RateLimitError("Çok fazla istek. Lütfen biraz bekleyin.")


def feedback_statistics(db: Session) -> dict:
    by_status = dict(db.query(Feedback.status, func.count(Feedback.id)).group_by(Feedback.status).all())
    by_category = dict(db.query(Feedback.category, func.count(Feedback.id)).group_by(Feedback.category).all())
    by_rating = dict(
        db.query(Feedback.rating, func.count(Feedback.id))
        .filter(Feedback.rating.isnot(None))
        .group_by(Feedback.rating)
        .all()
    )

    rated = sum(by_rating.values())
    average = sum(rating * count for rating, count in by_rating.items()) / rated if rated else 0
    return {
        "total": sum(by_status.values()),
        "unread": by_status.get(FeedbackStatus.NEW, 0),
        "read": by_status.get(FeedbackStatus.READ, 0),
        "resolved": by_status.get(FeedbackStatus.RESOLVED, 0),
        "byCategory": {category.value: by_category.get(category, 0) for category in FeedbackCategory},
        "averageRating": round(average, 1),
        "ratingDistribution": {str(rating): by_rating.get(rating, 0) for rating in range(5, 0, -1)},
    }


@router.post("", status_code=status.HTTP_201_CREATED)
async def submit_feedback(feedback: FeedbackCreate, request: Request, db: Session = Depends(get_db)):
    ip_address = get_client_ip(request)
    now = datetime.utcnow()
    check_rate_limit(db, ip_address, now)

    try:
        db_feedback = Feedback(
            category=feedback.category,
            rating=feedback.rating,
            message=feedback.message,
            status=FeedbackStatus.NEW,
            ip_address=ip_address,
            user_agent=get_user_agent(request),
            created_at=now,
            updated_at=now,
        )
        db.add(db_feedback)
        db.commit()
        db.refresh(db_feedback)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to store feedback: {str(e)}")
        raise UnexpectedError("Feedback kaydedilemedi")

    logger.info(f"Feedback {db_feedback.id} received ({db_feedback.category.value})")
    return {
        "success": True,
        "message": "Geri bildiriminiz başarıyla kaydedildi",
        "feedbackId": db_feedback.id,
    }


@router.get("")
async def list_feedback(
    feedback_status: Optional[str] = Query(None, alias="status"),
    category: Optional[str] = None,
    limit: int = Query(FEEDBACK_LIST_LIMIT, ge=1, le=500),
    stats: bool = False,
    db: Session = Depends(get_db),
):
    query = db.query(Feedback)
    if feedback_status and feedback_status != "all":
        try:
            query = query.filter(Feedback.status == FeedbackStatus(feedback_status))
        except ValueError:
            raise ValidationError("Geçersiz durum")
    if category and category != "all":
        try:
            query = query.filter(Feedback.category == FeedbackCategory(category.lower()))
        except ValueError:
            raise ValidationError("Geçersiz kategori")

    feedbacks = query.order_by(Feedback.created_at.desc(), Feedback.id.desc()).limit(limit).all()
    response = {
        "success": True,
        "feedbacks": [FeedbackResponse.model_validate(item).to_json() for item in feedbacks],
        "total": len(feedbacks),
    }
    if stats:
        response["statistics"] = feedback_statistics(db)
    return response


@router.put("")
async def update_feedback(feedback_update: FeedbackUpdate, db: Session = Depends(get_db)):
    db_feedback = db.query(Feedback).filter(Feedback.id == feedback_update.id).first()
    if not db_feedback:
        raise NotFoundError("Feedback bulunamadı")

    now = datetime.utcnow()
    try:
        if feedback_update.status:
            db_feedback.status = feedback_update.status
            if feedback_update.status == FeedbackStatus.READ and db_feedback.read_at is None:
                db_feedback.read_at = now
            if feedback_update.status == FeedbackStatus.RESOLVED:
                db_feedback.resolved_at = now
        if "admin_notes" in feedback_update.model_fields_set:
            db_feedback.admin_notes = feedback_update.admin_notes
        db_feedback.updated_at = now
        db.commit()
        db.refresh(db_feedback)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to update feedback {feedback_update.id}: {str(e)}")
        raise UnexpectedError("Feedback güncellenemedi")

    logger.info(f"Feedback {db_feedback.id} updated, status {db_feedback.status.value}")
    return {
        "success": True,
        "message": "Feedback güncellendi",
        "feedback": FeedbackResponse.model_validate(db_feedback).to_json(),
    }


@router.delete("")
async def delete_feedback(id: Optional[int] = None, db: Session = Depends(get_db)):
    if id is None:
        raise ValidationError("Feedback ID gerekli")

    db_feedback = db.query(Feedback).filter(Feedback.id == id).first()
    if not db_feedback:
        raise NotFoundError("Feedback bulunamadı")

    try:
        db.delete(db_feedback)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to delete feedback {id}: {str(e)}")
        raise UnexpectedError("Feedback silinemedi")

    logger.info(f"Feedback {id} deleted")
    return {"success": True, "message": "Feedback silindi"}
