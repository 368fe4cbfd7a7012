"""End-to-end integration test for the voting flow."""
import pytest
from contextlib import contextmanager
from datetime import timedelta

from convention_voting.core.security import create_access_token
from convention_voting.db.models import ActivityLog, Vote
from tests import utils


@pytest.mark.integration
class TestVotingFlow:

    def test_complete_voting_flow(self, client, db_session, admin_headers, voter_headers, watcher_headers, pool, voter, clock):
        """Admin sets up and opens a motion, a voter votes, a watcher reads results."""
        meeting = client.post(
            "/api/v1/admin/meetings",
            headers=admin_headers,
            json={
                "name": "Spring Convention",
                "start_date": clock.now.isoformat(),
                "end_date": (clock.now + timedelta(hours=8)).isoformat(),
                "quorum_voting_pool_id": pool.id,
            },
        )
        assert meeting.status_code == 201
        meeting_id = meeting.json()["id"]

        motion = client.post(
            f"/api/v1/admin/meetings/{meeting_id}/motions",
            headers=admin_headers,
            json={"name": "Elect a chair", "planned_duration": 10, "seat_count": 1},
        )
        assert motion.status_code == 201
        motion_id = motion.json()["id"]
        assert motion.json()["status"] == "not_yet_started"

        choice_ids = []
        for name in ("Ada", "Grace"):
            response = client.post(f"/api/v1/admin/motions/{motion_id}/choices", headers=admin_headers, json={"name": name})
            assert response.status_code == 201
            choice_ids.append(response.json()["id"])

        opened = client.patch(
            f"/api/v1/admin/motions/{motion_id}/status", headers=admin_headers, json={"status": "voting_active"}
        )
        assert opened.status_code == 200
        assert opened.json()["voting_started_at"] == clock.now.isoformat()

        open_motions = client.get("/api/v1/voter/motions/open", headers=voter_headers)
        assert [m["id"] for m in open_motions.json()["motions"]] == [motion_id]

        clock.advance(minutes=3)
        page = client.get(f"/api/v1/voter/motions/{motion_id}", headers=voter_headers).json()
        assert page["can_vote"] is True
        assert page["time_remaining"] == "7m 0s"
        assert [c["name"] for c in page["choices"]] == ["Ada", "Grace"]

        vote = client.post(f"/api/v1/voter/motions/{motion_id}/vote", headers=voter_headers, json={"choice_ids": [choice_ids[1]]})
        assert vote.status_code == 201
        assert vote.json()["choice_ids"] == [choice_ids[1]]

        again = client.post(f"/api/v1/voter/motions/{motion_id}/vote", headers=voter_headers, json={"choice_ids": [choice_ids[0]]})
        assert again.status_code == 409
        assert again.json()["error"]["reason"] == "already_voted"
        assert db_session.query(Vote).count() == 1

        assert client.get("/api/v1/voter/motions/open", headers=voter_headers).json()["motions"] == []

        early = client.get(f"/api/v1/watcher/motions/{motion_id}/results", headers=watcher_headers)
        assert early.status_code == 409
        assert early.json()["error"]["reason"] == "not_completed"

        closed = client.patch(
            f"/api/v1/admin/motions/{motion_id}/status", headers=admin_headers, json={"status": "voting_complete"}
        )
        assert closed.status_code == 200

        results = client.get(f"/api/v1/watcher/motions/{motion_id}/results", headers=watcher_headers)
        assert results.status_code == 200
        ranked = results.json()["choices"]
        assert [(c["choice_name"], c["vote_count"], c["is_winner"]) for c in ranked] == [
            ("Grace", 1, True),
            ("Ada", 0, False),
        ]

        # Every authenticated request above left an activity row
        assert db_session.query(ActivityLog).filter(ActivityLog.user_id == voter.id).count() >= 4


@pytest.mark.integration
class TestVoteEndpoint:

    def test_abstain(self, client, voter_headers, active_motion):
        response = client.post(f"/api/v1/voter/motions/{active_motion.id}/vote", headers=voter_headers, json={"abstain": True})
        assert response.status_code == 201
        assert response.json()["is_abstain"] is True
        assert response.json()["choice_ids"] == []

    def test_malformed_ballot(self, client, voter_headers, active_motion):
        ids = [c.id for c in active_motion.choices]
        response = client.post(f"/api/v1/voter/motions/{active_motion.id}/vote", headers=voter_headers, json={"choice_ids": ids})
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "validation_error"

    def test_not_in_pool(self, client, db_session, outsider, active_motion):
        headers = {"Authorization": f"Bearer {create_access_token({'sub': outsider.id})}"}
        response = client.post(f"/api/v1/voter/motions/{active_motion.id}/vote", headers=headers, json={"abstain": True})
        assert response.status_code == 403
        assert response.json()["error"]["reason"] == "not_in_pool"

    def test_window_expired(self, client, clock, voter_headers, active_motion):
        clock.advance(minutes=9)
        response = client.post(f"/api/v1/voter/motions/{active_motion.id}/vote", headers=voter_headers, json={"abstain": True})
        assert response.status_code == 403
        assert response.json()["error"]["reason"] == "voting_ended"

    def test_not_active(self, client, voter_headers, motion):
        response = client.post(f"/api/v1/voter/motions/{motion.id}/vote", headers=voter_headers, json={"abstain": True})
        assert response.status_code == 403
        assert response.json()["error"]["reason"] == "not_active"

    def test_unknown_motion(self, client, voter_headers):
        response = client.post("/api/v1/voter/motions/999/vote", headers=voter_headers, json={"abstain": True})
        assert response.status_code == 404
        assert response.json()["success"] is False

    def test_own_vote(self, client, db_session, voter, voter_headers, active_motion):
        assert client.get(f"/api/v1/voter/motions/{active_motion.id}/vote", headers=voter_headers).json() is None

        utils.record_vote(db_session, voter, active_motion, active_motion.choices[:1])

        mine = client.get(f"/api/v1/voter/motions/{active_motion.id}/vote", headers=voter_headers).json()
        assert mine["choice_ids"] == [active_motion.choices[0].id]

    def test_vote_survives_activity_store_failure(self, client, db_session, monkeypatch, voter, voter_headers, active_motion):
        @contextmanager
        def broken_db_context():
            raise RuntimeError("activity store unavailable")
            yield

        monkeypatch.setattr("convention_voting.services.activity.get_db_context", broken_db_context)

        response = client.post(f"/api/v1/voter/motions/{active_motion.id}/vote", headers=voter_headers, json={"abstain": True})

        assert response.status_code == 201
        assert db_session.query(Vote).filter(Vote.user_id == voter.id).count() == 1
        assert db_session.query(ActivityLog).filter(ActivityLog.user_id == voter.id).count() == 0
