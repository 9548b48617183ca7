"""
Locust Load Test Suite

Users and sessions belong to the account service, so tokens are supplied
rather than registered here:

  export LOCUST_TOKENS="<jwt1>,<jwt2>,..."    # one per eligible attendee
  export LOCUST_ROOM_ID=3                     # small room to fight over
  export LOCUST_SPARE_ROOM_IDS=4,5,6          # targets for replace

Run scenarios:
  locust -f locustfile.py --tags concurrency  # Test overbooking
  locust -f locustfile.py --tags throughput   # Test GET /booking cache
  locust -f locustfile.py --tags edge         # Test bad input
  locust -f locustfile.py                     # All tests
"""

import os
import random
from itertools import cycle

from locust import HttpUser, task, between, tag, events

TOKENS = [t for t in os.environ.get("LOCUST_TOKENS", "").split(",") if t]
ROOM_ID = int(os.environ.get("LOCUST_ROOM_ID", "1"))
SPARE_ROOM_IDS = [int(r) for r in os.environ.get("LOCUST_SPARE_ROOM_IDS", "").split(",") if r]

_token_pool = cycle(TOKENS) if TOKENS else None


def next_headers() -> dict:
    if _token_pool is None:
        return {}
    return {"Authorization": f"Bearer {next(_token_pool)}"}


@events.test_start.add_listener
def on_test_start(environment, **kwargs):
    print("\n" + "=" * 60)
    print(f"SETUP: {len(TOKENS)} tokens, contested room {ROOM_ID}")
    print("=" * 60)


class ConcurrencyUser(HttpUser):
    """
    TEST 1: Concurrency - many attendees, one small room

    Run: locust -f locustfile.py --tags concurrency -u 100 -r 50 --run-time 30s

    After test, verify:
      SELECT COUNT(*) FROM bookings WHERE room_id = X;
    Should be <= rooms.capacity, and no user_id appears twice.
    """
    wait_time = between(0, 0.1)

    def on_start(self):
        self.headers = next_headers()

    @tag("concurrency")
    @task
    def book_contested_room(self):
        if not self.headers:
            return

        with self.client.post(
            "/booking",
            json={"roomId": ROOM_ID},
            headers=self.headers,
            catch_response=True,
        ) as resp:
            if resp.status_code in (200, 403):
                resp.success()  # 403: full or already booked
            else:
                resp.failure(f"Unexpected: {resp.status_code}")


class ThroughputUser(HttpUser):
    """
    TEST 2: Throughput - Cache effectiveness

    Run twice:
      1. With Redis: locust -f locustfile.py --tags throughput -u 100 -r 20 --run-time 60s
      2. With REDIS_ENABLED=false, run again
    """
    wait_time = between(0.1, 0.5)

    def on_start(self):
        self.headers = next_headers()

    @tag("throughput", "read")
    @task(10)
    def read_booking(self):
        with self.client.get("/booking", headers=self.headers, catch_response=True) as resp:
            if resp.status_code in (200, 404):
                resp.success()
            else:
                resp.failure(f"Unexpected: {resp.status_code}")

    @tag("throughput")
    @task(1)
    def health_check(self):
        self.client.get("/health")


class EdgeCaseUser(HttpUser):
    """
    TEST 3: Edge cases - Bad input handling

    Run: locust -f locustfile.py --tags edge -u 20 -r 5 --run-time 30s

    System should NOT crash, return proper error codes.
    """
    wait_time = between(0.5, 1.5)

    def on_start(self):
        self.headers = next_headers()

    def _expect(self, resp, allowed):
        if resp.status_code in allowed:
            resp.success()
        else:
            resp.failure(f"Expected {allowed}, got {resp.status_code}")

    @tag("edge")
    @task
    def unknown_room(self):
        with self.client.post("/booking", json={"roomId": 999999}, headers=self.headers,
                              catch_response=True) as resp:
            self._expect(resp, (403, 404))

    @tag("edge")
    @task
    def zero_room_id(self):
        with self.client.post("/booking", json={"roomId": 0}, headers=self.headers,
                              catch_response=True) as resp:
            self._expect(resp, (403,))

    @tag("edge")
    @task
    def malformed_booking_id(self):
        with self.client.put("/booking/abc", json={"roomId": ROOM_ID}, headers=self.headers,
                             catch_response=True) as resp:
            self._expect(resp, (400,))

    @tag("edge")
    @task
    def malformed_json(self):
        with self.client.post("/booking", data="not json at all", headers=self.headers,
                              catch_response=True) as resp:
            self._expect(resp, (403, 422))

    @tag("edge")
    @task
    def missing_auth(self):
        with self.client.post("/booking", json={"roomId": ROOM_ID}, catch_response=True) as resp:
            self._expect(resp, (401,))


class RealisticUser(HttpUser):
    """
    TEST 4: Realistic mixed workload

    Run: locust -f locustfile.py -u 200 -r 20 --run-time 120s

    Mostly reads, some bookings, occasional room changes.
    """
    wait_time = between(1, 3)

    def on_start(self):
        self.headers = next_headers()
        self.booking_id = None

    @task(50)
    def read_booking(self):
        resp = self.client.get("/booking", headers=self.headers)
        if resp.status_code == 200:
            self.booking_id = resp.json()["id"]

    @task(10)
    def book_room(self):
        if self.headers and self.booking_id is None:
            room_id = random.choice(SPARE_ROOM_IDS or [ROOM_ID])
            resp = self.client.post("/booking", json={"roomId": room_id}, headers=self.headers)
            if resp.status_code == 200:
                self.booking_id = resp.json()["id"]

    @task(3)
    def change_room(self):
        if self.booking_id and SPARE_ROOM_IDS:
            self.client.put(
                f"/booking/{self.booking_id}",
                json={"roomId": random.choice(SPARE_ROOM_IDS)},
                headers=self.headers,
                name="/booking/{id}",
            )
