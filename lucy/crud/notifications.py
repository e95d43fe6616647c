from sqlalchemy.orm import Session

from lucy.models import Notification, NotificationType, NotificationPriority


def create_notification(
    db: Session,
    type: NotificationType,
    title: str,
    message: str,
    priority: NotificationPriority = NotificationPriority.NORMAL,
) -> Notification:
    """Agrega la notificación a la sesión sin hacer commit."""
    notification = Notification(type=type, title=title, message=message, priority=priority)
    db.add(notification)
    return notification


def has_unread(db: Session, type: NotificationType, message: str) -> bool:
    return db.query(Notification.id).filter(
        Notification.type == type,
        Notification.message == message,
        Notification.is_read == False,
    ).first() is not None
