# app/services/wallet.py
import logging

from eth_account import Account
from eth_account.messages import encode_defunct
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.models.user import User

logger = logging.getLogger(__name__)


def recover_signer(message: str, signature: str) -> str | None:
    """
    Recover the checksummed address that produced an EIP-191 ``personal_sign``
    signature over ``message``. Returns None when the signature is malformed.
    """
    try:
        return Account.recover_message(encode_defunct(text=message), signature=signature)
    except Exception as e:  # eth_account raises a mix of ValueError/TypeError/BadSignature
        logger.debug("Signature recovery failed: %s", e)
        return None


def verify_signature(message: str, signature: str, claimed_address: str) -> str | None:
    recovered = recover_signer(message, signature)
    if recovered is None or recovered.lower() != (claimed_address or "").strip().lower():
        return None
    return recovered


def get_or_create_user(db: Session, address: str) -> User:
    clean_address = address.strip().lower()

    user = db.query(User).filter(User.address == clean_address).first()
    if user:
        return user

    user = User(address=clean_address)
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        # Lost a race with a concurrent sign-in for the same address
        db.rollback()
        return db.query(User).filter(User.address == clean_address).one()

    db.refresh(user)
    logger.info("Registered new user %s for %s", user.id, clean_address)
    return user
