# storefront/routes/users.py
import logging
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from storefront.database import get_db
from storefront.models.users import User
from storefront.schemas.user import UserCreate, UserResponse

router = APIRouter(prefix="/users", tags=["Users"])
logger = logging.getLogger(__name__)

# Return the user registered for a host id, registering it on first contact
@router.post("", response_model=UserResponse)
def get_or_create_user(payload: UserCreate, db: Session = Depends(get_db)):
    user = db.query(User).filter(User.telegram_id == payload.telegram_id).first()
    if user:
        return user

    user = User(
        telegram_id=payload.telegram_id,
        username=payload.username,
        is_admin=payload.is_admin,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info(f"Registered user {user.id} for host id {payload.telegram_id}")
    return user
