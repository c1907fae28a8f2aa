from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.auth.token import get_current_user
from app.database import get_db
from app.schemas.auth_schema import AuthIdentity
from app.schemas.common import envelope
from app.schemas.share_schema import ShareRequest
from app.services.shares import record_share_click

router = APIRouter(tags=["Shares"])


# Hit by the client whenever a shared post is opened
@router.post("/share")
def track_share(
    payload: ShareRequest,
    db: Session = Depends(get_db),
    user: AuthIdentity = Depends(get_current_user),
):
    record_share_click(
        db,
        post_id=payload.post_id,
        sharer_id=payload.sharer_id,
        medium=payload.medium,
    )
    return envelope()
