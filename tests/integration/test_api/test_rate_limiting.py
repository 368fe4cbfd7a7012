"""Test rate limiting functionality."""
import pytest


@pytest.mark.integration
@pytest.mark.rate_limit
class TestRateLimiting:

    def test_watcher_read_rate_limit(self, client, watcher_headers, meeting):
        """Watcher reads are limited to 200 per minute."""
        for i in range(200):
            response = client.get("/api/v1/watcher/meetings", headers=watcher_headers)
            assert response.status_code == 200, f"Request {i+1} should succeed under 200/min limit"

        response = client.get("/api/v1/watcher/meetings", headers=watcher_headers)
        assert response.status_code == 429, "Request 201 should be rate limited with 429 status"
