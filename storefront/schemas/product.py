# storefront/schemas/product.py
from pydantic import BaseModel, Field, ConfigDict


# Base configuration for ORM compatibility
class ORMBase(BaseModel):
    model_config = ConfigDict(from_attributes=True)


# Shared catalog attributes, used both on the wire and in local state
class ProductBase(BaseModel):
    name: str
    price: float = Field(default=0.0, ge=0)
    image: str = ""
    description: str = ""
    category: str = ""
    in_stock: bool = True


# Product as held in the local catalog; id is the authority id formatted as text
class Product(ProductBase):
    model_config = ConfigDict(frozen=True)

    id: str


# Request schema for creating a product on the authority
class ProductCreate(ProductBase):
    pass


# Authority representation of a stored product
class ProductOut(ORMBase):
    id: int
    name: str
    price: float
    image: str = ""
    description: str = ""
    category: str = ""
    in_stock: bool = True
