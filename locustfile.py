from locust import HttpUser, task, between
import random


class StorefrontUser(HttpUser):
    wait_time = between(0.1, 0.5)

    def on_start(self):
        # Register and log in a customer for this simulated client
        uname = f"user_{random.randint(1, 1_000_000)}"
        creds = {"email": f"{uname}@example.com", "password": "loadtest-pw"}
        self.client.post("/api/register", json={"name": uname, **creds})
        r = self.client.post("/api/login", json=creds)
        self.logged_in = r.status_code == 200
        self.product_ids = []

    @task(3)
    def browse_menu(self):
        r = self.client.get("/api/products")
        if r.status_code == 200:
            self.product_ids = [p["id"] for p in r.json().get("products", [])]

    @task(2)
    def price_cart(self):
        if not self.product_ids:
            return
        items = [{"productId": random.choice(self.product_ids), "quantity": random.randint(1, 3)}]
        self.client.post("/api/calc-total", json={"items": items})

    @task(1)
    def place_order(self):
        if not self.logged_in or not self.product_ids:
            return
        items = [{"productId": random.choice(self.product_ids), "quantity": 1}]
        quote = self.client.post("/api/calc-total", json={"items": items}).json()
        self.client.post("/api/orders", json={"items": items, "total": quote["total"], "note": "load test"})
