"""
Load Test for Hive Portal public site.

Simulates readers browsing articles and videos, searching, and
residents submitting wishes. Tests performance under high load.
"""

import random
import uuid

from locust import HttpUser, between, events, task
from locust.runners import MasterRunner


# ============== Configuration ==============

READER_USERS = 500  # Number of concurrent users
SPAWN_RATE = 25  # Users per second to spawn

SEARCH_TERMS = ["社区", "改造", "路灯", "活动", "video"]

WISH_CATEGORIES = ["renovation", "municipal", "cooperation", "other"]

# Cache of post ids seen in list responses
_cached_article_ids = []
_cached_video_ids = []


# ============== Test Data Helpers ==============

def get_public_headers():
    """Generate headers for public requests."""
    return {
        "Content-Type": "application/json",
    }


def generate_wish():
    """Generate a wish payload that passes validation."""
    marker = uuid.uuid4().hex[:8]
    return {
        "title": f"压测心愿 {marker}",
        "content": f"这是一条压力测试提交的心愿内容，编号 {marker}",
        "category": random.choice(WISH_CATEGORIES),
    }


def _remember(cache, response):
    try:
        posts = response.json().get("posts", [])
    except ValueError:
        return
    for post in posts:
        if post["id"] not in cache:
            cache.append(post["id"])


# ============== Reader Load Test User ==============

class ReaderUser(HttpUser):
    """
    Simulates a reader browsing the public site.

    Behaviors:
    - Browse article and video lists
    - Open a post detail page
    - Search
    """

    wait_time = between(1, 5)  # Wait 1-5 seconds between tasks

    @task(10)
    def list_articles(self):
        """
        Browse the article list.
        Weight: 10 (most common action)
        """
        with self.client.get(
            "/api/posts",
            headers=get_public_headers(),
            name="GET /api/posts",
            catch_response=True,
        ) as response:
            if response.status_code == 200:
                _remember(_cached_article_ids, response)
                response.success()
            else:
                response.failure(f"Unexpected status: {response.status_code}")

    @task(5)
    def list_videos(self):
        """
        Browse the video list.
        Weight: 5
        """
        with self.client.get(
            "/api/videos",
            headers=get_public_headers(),
            name="GET /api/videos",
            catch_response=True,
        ) as response:
            if response.status_code == 200:
                _remember(_cached_video_ids, response)
                response.success()
            else:
                response.failure(f"Unexpected status: {response.status_code}")

    @task(6)
    def view_article(self):
        """
        Open an article. Each open counts one view.
        Weight: 6
        """
        if not _cached_article_ids:
            return
        post_id = random.choice(_cached_article_ids)
        with self.client.get(
            f"/api/posts/{post_id}",
            headers=get_public_headers(),
            name="GET /api/posts/{id}",
            catch_response=True,
        ) as response:
            # Post may have been unpublished meanwhile
            if response.status_code in [200, 404]:
                response.success()
            else:
                response.failure(f"Unexpected status: {response.status_code}")

    @task(3)
    def view_video(self):
        """
        Open a video.
        Weight: 3
        """
        if not _cached_video_ids:
            return
        post_id = random.choice(_cached_video_ids)
        with self.client.get(
            f"/api/videos/{post_id}",
            headers=get_public_headers(),
            name="GET /api/videos/{id}",
            catch_response=True,
        ) as response:
            if response.status_code in [200, 404]:
                response.success()
            else:
                response.failure(f"Unexpected status: {response.status_code}")

    @task(2)
    def search(self):
        """
        Search published posts.
        Weight: 2
        """
        with self.client.get(
            "/api/search",
            params={"q": random.choice(SEARCH_TERMS)},
            headers=get_public_headers(),
            name="GET /api/search",
            catch_response=True,
        ) as response:
            if response.status_code == 200:
                response.success()
            else:
                response.failure(f"Unexpected status: {response.status_code}")


# ============== Wishlist Load Test User ==============

class ResidentUser(HttpUser):
    """
    Simulates residents reading the wishlist wall and submitting wishes.
    Submission is rate limited per client, so 429 is expected.
    """

    wait_time = between(5, 15)

    @task(5)
    def view_wall(self):
        with self.client.get(
            "/api/wishlist",
            headers=get_public_headers(),
            name="GET /api/wishlist",
            catch_response=True,
        ) as response:
            if response.status_code == 200:
                response.success()
            else:
                response.failure(f"Unexpected status: {response.status_code}")

    @task(1)
    def submit_wish(self):
        with self.client.post(
            "/api/wishlist",
            json=generate_wish(),
            headers=get_public_headers(),
            name="POST /api/wishlist",
            catch_response=True,
        ) as response:
            if response.status_code in [201, 429]:
                response.success()
            else:
                response.failure(f"Unexpected status: {response.status_code}")


# ============== API Health Check User ==============

class HealthCheckUser(HttpUser):
    """
    Simulates health check requests to monitor API availability.
    """

    wait_time = between(10, 30)  # Less frequent checks

    @task
    def health_check(self):
        """Perform health check."""
        with self.client.get(
            "/health",
            name="GET /health",
            catch_response=True,
        ) as response:
            if response.status_code == 200:
                response.success()
            else:
                response.failure(f"Health check failed: {response.status_code}")


# ============== Load Test Events ==============

@events.init.add_listener
def on_locust_init(environment, **kwargs):
    """Called when Locust is initialized."""
    if isinstance(environment.runner, MasterRunner):
        print("Master node initialized for distributed load testing")


@events.test_start.add_listener
def on_test_start(environment, **kwargs):
    """Called when test starts."""
    print(f"Starting load test with {READER_USERS} users")
    print(f"Spawn rate: {SPAWN_RATE} users/second")


@events.quitting.add_listener
def on_quitting(environment, **kwargs):
    """Called when test is quitting."""
    if environment.stats.total.fail_ratio > 0.05:
        print(f"WARNING: High failure rate ({environment.stats.total.fail_ratio:.2%})")
        environment.process_exit_code = 1

    if environment.stats.total.avg_response_time > 1000:
        print(f"WARNING: High response time ({environment.stats.total.avg_response_time:.2f}ms)")
        environment.process_exit_code = 1


# For single-node testing:
# locust -f locustfile.py -u 500 -r 25 --host http://localhost:8000
