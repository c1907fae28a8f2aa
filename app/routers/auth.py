import logging

from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse
from sqlalchemy.orm import Session

from app.auth.token import create_user_token, get_current_user
from app.database import get_db
from app.schemas.auth_schema import AuthIdentity, SigninData, SigninRequest
from app.schemas.common import envelope
from app.services.wallet import get_or_create_user, verify_signature
from app.utils.errors import UnauthorizedError

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Auth"])


@router.post("/auth")
def signin(payload: SigninRequest, db: Session = Depends(get_db)):
    # ✅ Recover signer from (message, signature) and compare with the claimed address
    recovered = verify_signature(payload.message, payload.signature, payload.signer_address)
    if recovered is None:
        raise UnauthorizedError("Signature is invalid")

    # ✅ First-seen addresses are registered on the fly
    user = get_or_create_user(db, recovered)
    token = create_user_token(user)
    logger.info("Signin for user %s", user.id)

    return envelope(
        SigninData(address=recovered, access_token=token).model_dump(),
        message="Signin successful",
    )


PING_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


@router.api_route("/ping", methods=PING_METHODS, response_class=PlainTextResponse)
@router.api_route("/ping/{rest:path}", methods=PING_METHODS, response_class=PlainTextResponse)
def ping(user: AuthIdentity = Depends(get_current_user)):
    return f"Hello! {user.address}"
