from sqlalchemy.orm import Session
from sqlalchemy import or_
from typing import List, Optional

from app.models.announcement import Announcement
from app.models.news import News
from app.models.video_lesson import VideoLesson
from app.utils.datetime_utils import utcnow


def _apply_fields(db: Session, instance, fields: dict):
    for key, value in fields.items():
        setattr(instance, key, value)
    instance.updated_at = utcnow()
    db.commit()
    db.refresh(instance)
    return instance


# ---------------------------------------------------------------- annunci


def get_announcement(db: Session, announcement_id: int) -> Optional[Announcement]:
    return db.query(Announcement).filter(Announcement.id == announcement_id).first()


def get_announcements(
    db: Session,
    include_expired: bool = False,
    include_unpublished: bool = False,
    announcement_type: Optional[str] = None,
    visibility: Optional[str] = None,
    priority: Optional[str] = None,
) -> List[Announcement]:
    """Annunci in evidenza prima, poi dal più recente"""
    query = db.query(Announcement)
    if not include_unpublished:
        query = query.filter(Announcement.is_published == True)
    if not include_expired:
        query = query.filter(
            or_(Announcement.expiry_date.is_(None), Announcement.expiry_date > utcnow())
        )
    if announcement_type:
        query = query.filter(Announcement.announcement_type == announcement_type)
    if visibility:
        query = query.filter(Announcement.visibility.in_(["all", visibility]))
    if priority:
        query = query.filter(Announcement.priority == priority)

    return query.order_by(
        Announcement.is_pinned.desc(), Announcement.created_at.desc()
    ).all()


def create_announcement(db: Session, data: dict, author_id: int) -> Announcement:
    db_announcement = Announcement(**data, author_id=author_id)
    db.add(db_announcement)
    db.commit()
    db.refresh(db_announcement)
    return db_announcement


def update_announcement(db: Session, db_announcement: Announcement, fields: dict) -> Announcement:
    return _apply_fields(db, db_announcement, fields)


def delete_announcement(db: Session, db_announcement: Announcement) -> None:
    db.delete(db_announcement)
    db.commit()


# ---------------------------------------------------------------- news


def get_news_item(db: Session, news_id: int) -> Optional[News]:
    return db.query(News).filter(News.id == news_id).first()


def get_news(db: Session, include_unpublished: bool = False) -> List[News]:
    query = db.query(News)
    if not include_unpublished:
        query = query.filter(News.published == True)
    return query.order_by(News.created_at.desc()).all()


def create_news(db: Session, data: dict, created_by: int) -> News:
    db_news = News(**data, created_by=created_by)
    db.add(db_news)
    db.commit()
    db.refresh(db_news)
    return db_news


def update_news(db: Session, db_news: News, fields: dict) -> News:
    return _apply_fields(db, db_news, fields)


def delete_news(db: Session, db_news: News) -> None:
    db.delete(db_news)
    db.commit()


# ---------------------------------------------------------------- video lezioni


def get_video_lesson(db: Session, video_id: int) -> Optional[VideoLesson]:
    return db.query(VideoLesson).filter(VideoLesson.id == video_id).first()


def get_video_lessons(
    db: Session, assigned_to: Optional[int] = None, only_active: bool = False
) -> List[VideoLesson]:
    query = db.query(VideoLesson)
    if assigned_to is not None:
        query = query.filter(VideoLesson.assigned_to == assigned_to)
    if only_active:
        query = query.filter(VideoLesson.is_active == True)
    return query.order_by(VideoLesson.created_at.desc()).all()


def create_video_lesson(db: Session, data: dict, created_by: int) -> VideoLesson:
    db_video = VideoLesson(**data, created_by=created_by)
    db.add(db_video)
    db.commit()
    db.refresh(db_video)
    return db_video


def update_video_lesson(db: Session, db_video: VideoLesson, fields: dict) -> VideoLesson:
    return _apply_fields(db, db_video, fields)


def mark_video_watched(db: Session, db_video: VideoLesson) -> VideoLesson:
    db_video.watch_count = (db_video.watch_count or 0) + 1
    db_video.watched_at = utcnow()
    db.commit()
    db.refresh(db_video)
    return db_video


def delete_video_lesson(db: Session, db_video: VideoLesson) -> None:
    db.delete(db_video)
    db.commit()
