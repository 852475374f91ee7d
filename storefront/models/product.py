# storefront/models/product.py
from datetime import datetime, timezone
from sqlalchemy import Column, Integer, String, Float, Boolean, DateTime, CheckConstraint
from storefront.database import Base

# Model Product
# A single catalog entry offered in the storefront.
class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False, index=True)
    price = Column(Float, CheckConstraint("price >= 0"), nullable=False)
    image = Column(String, nullable=False, default="")
    description = Column(String, nullable=False, default="")
    category = Column(String, nullable=False, default="", index=True)
    in_stock = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), index=True)
