"""
Test di annunci, news e video lezioni
"""
from datetime import timedelta

import pytest
from fastapi import HTTPException
from sqlalchemy.orm import Session

from app.models.activity_log import ActivityLog
from app.models.announcement import Announcement
from app.models.notification import Notification
from app.routers.announcements import create_announcement, get_announcement, get_announcements
from app.routers.news import create_news, get_news
from app.routers.video_lessons import create_video_lesson, get_video_lessons, mark_watched
from app.schemas.content import AnnouncementCreate, NewsCreate, VideoLessonCreate
from app.utils.datetime_utils import utcnow


def _announcement(db, title, **kwargs):
    announcement = Announcement(title=title, content="Testo", **kwargs)
    db.add(announcement)
    db.commit()
    return announcement


def test_announcements_pinned_first_and_expired_hidden(db: Session):
    _announcement(db, "Vecchio")
    _announcement(db, "Scaduto", expiry_date=utcnow() - timedelta(days=1))
    _announcement(db, "In evidenza", is_pinned=True)
    _announcement(db, "Bozza", is_published=False)

    result = get_announcements(db=db)
    assert [a.title for a in result["announcements"]] == ["In evidenza", "Vecchio"]

    with_expired = get_announcements(include_expired=True, db=db)
    assert "Scaduto" in [a.title for a in with_expired["announcements"]]


def test_announcement_visibility_includes_all(db: Session):
    _announcement(db, "Per tutti")
    _announcement(db, "Solo maestri", visibility="maestri")
    _announcement(db, "Solo atleti", visibility="atleti")

    result = get_announcements(visibility="atleti", db=db)
    assert {a.title for a in result["announcements"]} == {"Per tutti", "Solo atleti"}


def test_get_announcement_counts_views(db: Session):
    announcement = _announcement(db, "Torneo sociale", expiry_date=utcnow() + timedelta(days=5, hours=1))

    get_announcement(announcement_id=announcement.id, db=db)
    result = get_announcement(announcement_id=announcement.id, db=db)
    assert result["announcement"].view_count == 2
    assert result["announcement"].days_until_expiry == 5


def test_unpublished_announcement_is_not_found(db: Session):
    announcement = _announcement(db, "Bozza", is_published=False)
    with pytest.raises(HTTPException) as exc_info:
        get_announcement(announcement_id=announcement.id, db=db)
    assert exc_info.value.status_code == 404


def test_create_announcement_sanitizes_and_logs(db: Session, admin, http_request):
    result = create_announcement(
        request=http_request,
        announcement=AnnouncementCreate(
            title="<b>Chiusura campi</b>", content="Lavori in corso", priority="high"
        ),
        db=db,
        current_user=admin,
    )
    assert result["announcement"].title == "Chiusura campi"
    assert result["announcement"].author_id == admin.id
    assert db.query(ActivityLog).filter(ActivityLog.action == "announcement.create").count() == 1


def test_announcement_rejects_bad_values():
    with pytest.raises(ValueError):
        AnnouncementCreate(title="Titolo", content="Testo", priority="altissima")
    with pytest.raises(ValueError):
        AnnouncementCreate(title="Titolo", content="Testo", link_url="javascript:alert(1)")


def test_news_drafts_only_for_admins(db: Session, admin, atleta):
    create_news(news=NewsCreate(title="Pubblicata", category="torneo"), db=db, current_user=admin)
    create_news(news=NewsCreate(title="Bozza", published=False), db=db, current_user=admin)

    assert [n.title for n in get_news(db=db, current_user=None)["news"]] == ["Pubblicata"]
    assert len(get_news(all=True, db=db, current_user=admin)["news"]) == 2

    with pytest.raises(HTTPException) as exc_info:
        get_news(all=True, db=db, current_user=atleta)
    assert exc_info.value.status_code == 403


def test_video_lessons_flow(db: Session, maestro, atleta, other_atleta):
    result = create_video_lesson(
        video=VideoLessonCreate(
            title="Il rovescio a una mano",
            video_url="https://video.gst-tennis.it/rovescio",
            assigned_to=atleta.id,
            duration_minutes=12,
        ),
        db=db,
        current_user=maestro,
    )
    video_id = result["video"].id
    assert db.query(Notification).filter(Notification.user_id == atleta.id).count() == 1

    assert len(get_video_lessons(db=db, current_user=atleta)["videos"]) == 1
    assert get_video_lessons(db=db, current_user=other_atleta)["videos"] == []

    watched = mark_watched(video_id=video_id, db=db, current_user=atleta)
    assert watched["video"].watch_count == 1
    assert watched["video"].watched_at is not None

    with pytest.raises(HTTPException) as exc_info:
        mark_watched(video_id=video_id, db=db, current_user=other_atleta)
    assert exc_info.value.status_code == 404
