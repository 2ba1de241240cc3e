"""
Locust load tests for the charity API.

Install: pip install -e ".[load]"
Run: locust -f locustfile.py --host=http://127.0.0.1:5050

For headless: locust -f locustfile.py --host=http://127.0.0.1:5050 \
    --users 10 --spawn-rate 2 --run-time 1m --headless
"""

import os
import uuid

from locust import HttpUser, between, task


class CharityAPIUser(HttpUser):
    wait_time = between(1, 3)

    def on_start(self):
        """Optional: login to get token for authenticated endpoints."""
        self.token = None
        self.session_id = uuid.uuid4().hex
        if os.getenv("LOCUST_AUTH_EMAIL") and os.getenv("LOCUST_AUTH_PASSWORD"):
            r = self.client.post(
                "/api/auth/login",
                json={
                    "email": os.getenv("LOCUST_AUTH_EMAIL"),
                    "password": os.getenv("LOCUST_AUTH_PASSWORD"),
                },
            )
            if r.status_code == 200:
                self.token = r.json()["data"]["accessToken"]

    def _headers(self):
        h = {"Content-Type": "application/json"}
        if self.token:
            h["Authorization"] = f"Bearer {self.token}"
        return h

    @task(10)
    def health(self):
        self.client.get("/api/health")

    @task(8)
    def campaigns(self):
        self.client.get("/api/campaigns?limit=20&sortBy=createdAt")

    @task(5)
    def categories(self):
        self.client.get("/api/categories")

    @task(4)
    def timeline(self):
        if self.token:
            self.client.get("/api/posts/feed/timeline", headers=self._headers())
        else:
            self.client.get("/api/posts")

    @task(3)
    def campaign_progress(self):
        # Use a placeholder UUID; replace with real campaign_id for meaningful test
        cid = os.getenv("LOCUST_CAMPAIGN_ID", "00000000-0000-0000-0000-000000000001")
        self.client.get(f"/api/progress/campaigns/{cid}/updates", name="/api/progress/campaigns/[id]/updates")

    @task(2)
    def view_post(self):
        pid = os.getenv("LOCUST_POST_ID")
        if pid:
            self.client.post(
                f"/api/posts/{pid}/views",
                json={"sessionId": self.session_id, "source": "locust"},
                headers=self._headers(),
                name="/api/posts/[id]/views",
            )
