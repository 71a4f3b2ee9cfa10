"""
Load Testing Scripts

Locust load tests for HealthTrackerAI API endpoints.
Exercises the probes, PWA detection, anonymous support tickets and
(optionally) the AI chat routes, which call OpenAI and cost money.

USAGE:
    locust -f tests/load/locustfile.py --host=http://localhost:8000
    LOAD_TEST_CHAT=1 locust -f tests/load/locustfile.py --host=...
"""

import os
import random

from locust import HttpUser, between, events, task
from locust.contrib.fasthttp import FastHttpUser

USER_AGENTS = [
    "Mozilla/5.0 (Linux; Android 14; Pixel 8) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0.0.0 Mobile Safari/537.36",
    "Mozilla/5.0 (iPhone; CPU iPhone OS 17_4 like Mac OS X) AppleWebKit/605.1.15 "
    "(KHTML, like Gecko) Version/17.4 Mobile/15E148 Safari/604.1",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:125.0) Gecko/20100101 Firefox/125.0",
]


class HealthTrackerUser(FastHttpUser):
    """
    Simulated app visitor.

    Mirrors what the PWA does on load: probe, classify the browser,
    then occasionally open and follow up on a support ticket.
    """

    wait_time = between(1, 5)

    def on_start(self):
        self.user_agent = random.choice(USER_AGENTS)
        self.ticket_session = None
        self.ticket_id = None

    @task(10)
    def health_check(self):
        with self.client.get("/health/live", catch_response=True) as response:
            if response.status_code == 200:
                response.success()
            else:
                response.failure(f"Health check failed: {response.status_code}")

    @task(3)
    def metrics_endpoint(self):
        """Prometheus metrics scrape."""
        self.client.get("/metrics")

    @task(5)
    def browser_info(self):
        self.client.post(
            "/api/pwa/browser-info",
            json={
                "userAgent": self.user_agent,
                "hasNotification": True,
                "hasServiceWorker": True,
                "hasPushManager": "iPhone" not in self.user_agent,
                "viewportWidth": random.choice([390, 412, 1920]),
                "viewportHeight": random.choice([844, 915, 1080]),
            },
        )

    @task(2)
    def open_ticket(self):
        headers = {"X-Ticket-Session": self.ticket_session} if self.ticket_session else {}

        with self.client.post(
            "/api/tickets",
            json={"subject": "Sync issue", "message": "My meals did not sync today."},
            headers=headers,
            catch_response=True,
        ) as response:
            if response.status_code == 201:
                self.ticket_session = response.headers.get("X-Ticket-Session")
                self.ticket_id = response.json()["ticket"]["id"]
                response.success()
            elif response.status_code == 429:
                response.failure("Rate limited")
            else:
                response.failure(f"Failed: {response.status_code}")

    @task(1)
    def follow_up_ticket(self):
        if not self.ticket_id:
            return

        self.client.post(
            f"/api/tickets/{self.ticket_id}/replies",
            json={"message": random.choice(["Any update?", "Still happening.", "Thanks!"])},
            headers={"X-Ticket-Session": self.ticket_session},
            name="/api/tickets/[id]/replies",
        )


class ChatUser(HttpUser):
    """AI chat user; only spawned when LOAD_TEST_CHAT is set."""

    wait_time = between(5, 15)
    weight = 1 if os.getenv("LOAD_TEST_CHAT") else 0

    @task(3)
    def health_chat(self):
        self.client.post(
            "/api/health-chat",
            json={
                "message": random.choice([
                    "Am I eating enough protein?",
                    "How was my week?",
                    "Should I take a rest day?",
                ]),
                "nutritionData": "Mon: 2100 kcal, 120g protein",
            },
        )

    @task(1)
    def workout_chat(self):
        self.client.post(
            "/api/workout-chat",
            json={"message": "What should I train today?", "currentDay": "Monday"},
        )


@events.test_start.add_listener
def on_test_start(environment, **kwargs):
    print("Load test starting...")


@events.test_stop.add_listener
def on_test_stop(environment, **kwargs):
    print("Load test complete.")
    print(f"Total requests: {environment.stats.total.num_requests}")
    print(f"Failures: {environment.stats.total.num_failures}")
    print(f"Avg response time: {environment.stats.total.avg_response_time:.2f}ms")
