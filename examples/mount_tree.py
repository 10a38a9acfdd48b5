"""
Example showing how to declare named routes on mounted routers and resolve them.
"""

from __future__ import annotations

from pydantic import BaseModel

from smartreverse import Resolver, ReverseRegistry, Router


class ProductRef(BaseModel):
    sku: str
    variant: int = 1


def product_params(product: ProductRef) -> dict:
    return {"sku": product.sku, "variant": product.variant}


registry = ReverseRegistry()

app = Router("app", registry=registry)
api = app.mount("/api")
v1 = api.mount("/v1/").plug("pydantic")

users = Router("users", registry=registry)
users.define("users.list").get("/")
users.define("users.detail").get("/:id(\\d+)")
v1.mount("/users", users)

v1.define("products.detail", builder=product_params).get("/products/:sku/:variant?")

reports = app.mount("/reports").plug("logging")
reports.define("reports.daily").get("/daily/:day")

registry.finalize()


def tenant_base(request: dict) -> str:
    return f"https://{request['tenant']}.example.com/"


if __name__ == "__main__":
    resolver = Resolver(registry, base_url=tenant_base)
    request = {"tenant": "acme"}
    print(registry.format_routes())
    print(resolver.resolve("users.list", request=request))
    print(resolver.resolve("users.detail", {"id": 42}, request=request))
    print(resolver.resolve("products.detail", {"sku": "ab-1", "variant": "3"}, request=request))
    print(resolver.resolve("reports.daily", {"day": "2024-05-01"}, request=request))
