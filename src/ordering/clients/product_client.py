"""Product service client: the price of a product."""

from shared.errors import ProductNotFound, ProductServiceUnavailable
from shared.http import ServiceClient
from shared.identity import RequestIdentity


class ProductClient(ServiceClient):
    service_name = "product-service"
    unavailable = ProductServiceUnavailable

    def get_product(self, product_id: str, identity: RequestIdentity | None = None) -> dict:
        return self._get_json(f"/products/{product_id}", ProductNotFound(product_id), identity)

    def get_price(self, product_id: str, identity: RequestIdentity | None = None) -> float:
        product = self.get_product(product_id, identity)
        price = product.get("price", product.get("product_price"))
        try:
            return float(price)
        except (TypeError, ValueError) as exc:
            raise ProductServiceUnavailable(f"Product {product_id} has no usable price") from exc
