# storefront/models/users.py
from sqlalchemy import Column, Integer, String, Float, Boolean, BigInteger
from storefront.database import Base

# Represents a storefront customer identified by the host's numeric id
class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    telegram_id = Column(BigInteger, unique=True, nullable=False, index=True)
    username = Column(String, nullable=False)
    balance = Column(Float, nullable=False, default=0.0)
    referrals = Column(Integer, nullable=False, default=0)
    is_admin = Column(Boolean, nullable=False, default=False)
