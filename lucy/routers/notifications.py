from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from lucy.database import get_db
from lucy.models import Notification, NotificationType, User
from lucy.schemas.common import MessageResponse
from lucy.schemas.notifications import NotificationRead
from lucy.security import get_current_user

router = APIRouter()


@router.get("/", response_model=List[NotificationRead])
def read_notifications(
    is_read: Optional[bool] = None,
    type: Optional[NotificationType] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    query = db.query(Notification)
    if is_read is not None:
        query = query.filter(Notification.is_read == is_read)
    if type:
        query = query.filter(Notification.type == type)
    # No leídas primero, luego las más nuevas
    return query.order_by(Notification.is_read.asc(), Notification.created_at.desc(), Notification.id.desc()).all()


@router.put("/read-all", response_model=MessageResponse)
def mark_all_as_read(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    db.query(Notification).filter(Notification.is_read == False).update({"is_read": True})
    db.commit()
    return {"message": "Todas las notificaciones marcadas como leídas"}


@router.put("/{notification_id}/read", response_model=NotificationRead)
def mark_as_read(notification_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    notification = db.query(Notification).filter(Notification.id == notification_id).first()
    if not notification:
        raise HTTPException(status_code=404, detail="Notificación no encontrada")

    notification.is_read = True
    db.commit()
    db.refresh(notification)
    return notification


@router.delete("/{notification_id}", response_model=MessageResponse)
def delete_notification(notification_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    notification = db.query(Notification).filter(Notification.id == notification_id).first()
    if not notification:
        raise HTTPException(status_code=404, detail="Notificación no encontrada")

    db.delete(notification)
    db.commit()
    return {"message": "Notificación eliminada"}
