from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import Optional
import logging

from app.database import get_db
from app.crud import content as crud
from app.models.profile import Profile
from app.schemas.content import NewsCreate, NewsUpdate, NewsResponse, NewsListResponse
from app.services.auth import get_optional_user, require_admin_or_gestore
from app.utils.roles import is_admin_or_gestore

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("", response_model=NewsListResponse)
def get_news(
    all: bool = False,
    db: Session = Depends(get_db),
    current_user: Optional[Profile] = Depends(get_optional_user),
):
    """News pubblicate; con all=true anche le bozze (solo admin e gestori)"""
    if all and (current_user is None or not is_admin_or_gestore(current_user.role)):
        raise HTTPException(status_code=403, detail="Non autorizzato")
    return {"news": crud.get_news(db, include_unpublished=all)}


@router.post("", response_model=NewsResponse, status_code=status.HTTP_201_CREATED)
def create_news(
    news: NewsCreate,
    db: Session = Depends(get_db),
    current_user: Profile = Depends(require_admin_or_gestore),
):
    db_news = crud.create_news(db, news.model_dump(), created_by=current_user.id)
    logger.info(f"News {db_news.id} creata da {current_user.id}")
    return db_news


@router.put("/{news_id}", response_model=NewsResponse)
def update_news(
    news_id: int,
    update: NewsUpdate,
    db: Session = Depends(get_db),
    current_user: Profile = Depends(require_admin_or_gestore),
):
    db_news = crud.get_news_item(db, news_id)
    if not db_news:
        raise HTTPException(status_code=404, detail="News non trovata")
    return crud.update_news(db, db_news, update.model_dump(exclude_unset=True))


@router.delete("/{news_id}")
def delete_news(
    news_id: int,
    db: Session = Depends(get_db),
    current_user: Profile = Depends(require_admin_or_gestore),
):
    db_news = crud.get_news_item(db, news_id)
    if not db_news:
        raise HTTPException(status_code=404, detail="News non trovata")

    crud.delete_news(db, db_news)
    logger.info(f"News {news_id} eliminata da {current_user.id}")
    return {"success": True}
