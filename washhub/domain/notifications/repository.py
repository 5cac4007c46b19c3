"""Notification repository - Database operations for notifications"""

from typing import Optional

from sqlalchemy.orm import Session

from ...errors import store_operation
from ...models import Notification


class NotificationRepository:
    """Repository for notification database operations"""

    @staticmethod
    @store_operation
    def create_notification(db: Session, **notification_data) -> Notification:
        notification = Notification(**notification_data)
        db.add(notification)
        db.commit()
        db.refresh(notification)
        return notification

    @staticmethod
    @store_operation
    def get_notification_by_id(db: Session, notification_id: str) -> Optional[Notification]:
        return db.query(Notification).filter(Notification.id == notification_id).first()

    @staticmethod
    @store_operation
    def get_notifications_by_user(db: Session, user_id: str, limit: int = 50) -> list[Notification]:
        """Newest first"""
        return (
            db.query(Notification)
            .filter(Notification.user_id == user_id)
            .order_by(Notification.created_at.desc())
            .limit(limit)
            .all()
        )

    @staticmethod
    @store_operation
    def count_unread(db: Session, user_id: str) -> int:
        return (
            db.query(Notification)
            .filter(Notification.user_id == user_id, Notification.is_read.is_(False))
            .count()
        )

    @staticmethod
    @store_operation
    def mark_read(db: Session, notification: Notification) -> Notification:
        notification.is_read = True
        db.commit()
        db.refresh(notification)
        return notification

    @staticmethod
    @store_operation
    def mark_all_read(db: Session, user_id: str) -> int:
        """Returns the number of notifications changed"""
        updated = (
            db.query(Notification)
            .filter(Notification.user_id == user_id, Notification.is_read.is_(False))
            .update({Notification.is_read: True}, synchronize_session=False)
        )
        db.commit()
        return updated

    @staticmethod
    @store_operation
    def mark_email_sent(db: Session, notification_id: str) -> None:
        db.query(Notification).filter(Notification.id == notification_id).update(
            {Notification.email_sent: True}, synchronize_session=False
        )
        db.commit()
