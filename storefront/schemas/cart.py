from pydantic import BaseModel, ConfigDict, Field

from storefront.schemas.product import Product


# A product in the local cart together with how many units were added
class CartItem(BaseModel):
    model_config = ConfigDict(frozen=True)

    product: Product
    quantity: int = Field(default=1, ge=1)

    @property
    def product_id(self) -> str:
        return self.product.id

    @property
    def line_total(self) -> float:
        return self.product.price * self.quantity
