"""Shopkeeper inventory: the owned shop's product catalogue."""
import logging

from fastapi import APIRouter, Depends, HTTPException

from grocer.api.deps import get_api_client, shopkeeper_session
from grocer.api.routes.shops import load_owned_shop, shop_catalogue
from grocer.domain.Product import Product
from grocer.domain.Session import Session
from grocer.infra.Api_Client import ApiClient
from grocer.utilities.validators import ProductInput, StockInput

router = APIRouter(prefix="/api/shop/products")
logger = logging.getLogger(__name__)


def _owned_product(client: ApiClient, session: Session, product_id: str) -> Product:
    shop = load_owned_shop(client, session)
    for product in shop_catalogue(client, shop.id):
        if product.id == product_id:
            return product
    raise HTTPException(status_code=404, detail="Product not found")


@router.get("")
def list_products(session: Session = Depends(shopkeeper_session),
                  client: ApiClient = Depends(get_api_client)):
    shop = load_owned_shop(client, session)
    products = shop_catalogue(client, shop.id)
    return {
        "shop": shop.to_dict(),
        "products": [p.to_dict() for p in products],
        "outOfStock": sum(1 for p in products if not p.in_stock),
    }


@router.post("")
def add_product(body: ProductInput, session: Session = Depends(shopkeeper_session),
                client: ApiClient = Depends(get_api_client)):
    shop = load_owned_shop(client, session)
    payload = {**body.model_dump(exclude_none=True), "shopId": shop.id}
    created = Product.from_dict(client.create_product(payload) or {})
    logger.info("Product %s added to shop %s", body.name, shop.id)
    return created.to_dict()


@router.put("/{product_id}/stock")
def update_stock(product_id: str, body: StockInput, session: Session = Depends(shopkeeper_session),
                 client: ApiClient = Depends(get_api_client)):
    product = _owned_product(client, session, product_id)
    updated = client.update_product(product.id, {"stock": body.stock})
    if isinstance(updated, dict):
        return Product.from_dict(updated).to_dict()
    product.stock = body.stock
    return product.to_dict()


@router.delete("/{product_id}")
def delete_product(product_id: str, session: Session = Depends(shopkeeper_session),
                   client: ApiClient = Depends(get_api_client)):
    product = _owned_product(client, session, product_id)
    client.delete_product(product.id)
    logger.info("Product %s removed", product.id)
    return {"status": "success"}
