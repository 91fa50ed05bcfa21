# sdk/martclient.py
import requests
import httpx
from typing import Optional, List, Dict, Any


class MartClient:
    def __init__(self, base_url: str = "http://localhost:5000", token: Optional[str] = None,
                 timeout: int = 10, session=None):
        self.base_url = base_url.rstrip("/")
        # any requests-compatible session works (tests pass FastAPI's TestClient)
        self.session = session if session is not None else requests.Session()
        self.timeout = timeout
        self.token = None
        if token:
            self.set_token(token)

    def set_token(self, token: str):
        self.token = token
        self.session.headers.update({"Authorization": f"Bearer {token}"})

    def _url(self, path: str) -> str:
        return f"{self.base_url}/api{path}"

    def _get(self, path: str, params: Optional[Dict[str, Any]] = None):
        r = self.session.get(self._url(path), params=params, timeout=self.timeout)
        r.raise_for_status()
        return r.json()

    def _post(self, path: str, payload: Optional[Dict[str, Any]] = None, **kwargs):
        r = self.session.post(self._url(path), json=payload, timeout=self.timeout, **kwargs)
        r.raise_for_status()
        return r.json()

    def _put(self, path: str, payload: Dict[str, Any]):
        r = self.session.put(self._url(path), json=payload, timeout=self.timeout)
        r.raise_for_status()
        return r.json()

    def _delete(self, path: str):
        r = self.session.delete(self._url(path), timeout=self.timeout)
        r.raise_for_status()
        return r.json()

    def health(self):
        return self._get("/health")

    # Auth
    def register(self, first_name: str, last_name: str, email: str, phone: str, password: str):
        data = self._post("/auth/register", {
            "firstName": first_name, "lastName": last_name,
            "email": email, "phone": phone, "password": password,
        })
        self.set_token(data["token"])
        return data

    def login(self, email: str, password: str):
        # the server logs the one-time code; pass it to verify_otp
        return self._post("/auth/login", {"email": email, "password": password})

    def verify_otp(self, email: str, otp: str):
        data = self._post("/auth/verify-otp", {"email": email, "otp": otp})
        self.set_token(data["token"])
        return data

    def profile(self):
        return self._get("/auth/profile")["user"]

    def update_profile(self, first_name: str, last_name: str, email: str, phone: str):
        return self._put("/profile", {
            "firstName": first_name, "lastName": last_name, "email": email, "phone": phone,
        })["user"]

    def upload_avatar(self, path: str, content_type: str = "image/png"):
        with open(path, "rb") as f:
            r = self.session.post(
                self._url("/profile/avatar"),
                files={"avatar": (path.rsplit("/", 1)[-1], f, content_type)},
                timeout=self.timeout,
            )
        r.raise_for_status()
        return r.json()

    def delete_profile(self):
        return self._delete("/profile")

    def user_stats(self):
        return self._get("/users/stats")

    # Catalog
    def list_products(self, page: int = 1, limit: int = 12, sort_by: Optional[str] = None,
                      sort_order: Optional[str] = None, search: Optional[str] = None,
                      category: Optional[str] = None, brand: Optional[str] = None,
                      discount: bool = False, featured: bool = False):
        params = {"page": page, "limit": limit}
        if sort_by:
            params["sortBy"] = sort_by
        if sort_order:
            params["sortOrder"] = sort_order
        if search:
            params["search"] = search
        if category:
            params["category"] = category
        if brand:
            params["brand"] = brand
        if discount:
            params["discount"] = "true"
        if featured:
            params["featured"] = "true"
        return self._get("/products", params=params)

    def all_products(self) -> List[Dict[str, Any]]:
        return self._get("/products/all")["products"]

    def search_products(self, q: str) -> List[Dict[str, Any]]:
        return self._get("/products/search", params={"q": q})["products"]

    def get_product(self, product_id: int):
        return self._get(f"/products/{product_id}")["product"]

    def get_product_by_slug(self, slug: str):
        return self._get(f"/products/slug/{slug}")["product"]

    def products_in_category(self, category: str) -> List[Dict[str, Any]]:
        return self._get(f"/products/category/{category}")["products"]

    def list_categories(self) -> List[Dict[str, Any]]:
        return self._get("/categories")["categories"]

    # Cart
    def view_cart(self):
        return self._get("/cart")["cart"]

    def add_to_cart(self, product_id: int, quantity: int = 1):
        return self._post("/cart/add", {"productId": product_id, "quantity": quantity})

    def update_cart_item(self, item_id: int, quantity: int):
        return self._put(f"/cart/{item_id}", {"quantity": quantity})

    def remove_cart_item(self, item_id: int):
        return self._delete(f"/cart/{item_id}")

    def clear_cart(self):
        return self._delete("/cart")

    def cart_count(self) -> int:
        return self._get("/cart/count")["count"]

    # Wishlist
    def view_wishlist(self) -> List[Dict[str, Any]]:
        return self._get("/wishlist")["wishlist"]

    def add_to_wishlist(self, product_id: int):
        return self._post("/wishlist", {"productId": product_id})

    def toggle_wishlist(self, product_id: int):
        return self._post(f"/wishlist/toggle/{product_id}")

    def remove_from_wishlist(self, product_id: int):
        return self._delete(f"/wishlist/{product_id}")

    def clear_wishlist(self):
        return self._delete("/wishlist")

    # Orders
    def place_order(self, items: List[Dict[str, Any]], shipping_address: Optional[str] = None,
                    payment_method: Optional[str] = None):
        return self._post("/orders", {
            "items": items, "shippingAddress": shipping_address, "paymentMethod": payment_method,
        })

    def checkout_cart(self, shipping_address: Optional[str] = None, payment_method: Optional[str] = None):
        """Turn the current cart into an order, then empty the cart."""
        cart = self.view_cart()
        items = [
            {"productId": it["product_id"], "quantity": it["quantity"], "price": it["unit_price"]}
            for it in cart["items"]
        ]
        if not items:
            raise ValueError("cart is empty")
        order = self.place_order(items, shipping_address, payment_method)
        self.clear_cart()
        return order

    def list_orders(self) -> List[Dict[str, Any]]:
        return self._get("/orders")["orders"]

    def get_order(self, order_id: int):
        return self._get(f"/orders/{order_id}")

    # Reviews
    def list_reviews(self, slug: str) -> List[Dict[str, Any]]:
        return self._get(f"/reviews/{slug}")["reviews"]

    def add_review(self, slug: str, user_id: int, rating: int, comment: Optional[str] = None):
        return self._post(f"/reviews/{slug}", {"user_id": user_id, "rating": rating, "comment": comment})

    # Recently visited
    def recently_visited(self) -> List[Dict[str, Any]]:
        return self._get("/recently-visited")["recentlyVisited"]

    def record_visit(self, product_id: int):
        return self._post(f"/recently-visited/{product_id}")

    # Support
    def contact(self, name: str, email: str, message: str):
        return self._post("/contact", {"name": name, "email": email, "message": message})

    def ask_chatbot(self, message: str) -> str:
        return self._post("/chatbot/response", {"message": message})["response"]

    async def ask_chatbot_async(self, message: str) -> str:
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            r = await client.post(self._url("/chatbot/response"), json={"message": message})
            r.raise_for_status()
            return r.json()["response"]
