USER_ID = 7001


class TestLedgerRoutes:
    """원장 / 업적 라우터 테스트"""

    def test_new_profile_has_zero_balance(self, client, auth_headers):
        """처음 보는 사용자는 잔액 0 으로 생성된다"""
        response = client.get("/api/ledger/balance", headers=auth_headers(USER_ID))

        assert response.status_code == 200
        assert response.json() == {"balance": 0}

    def test_telegram_id_from_user_metadata(self, client):
        from loyaltyapi.core.security import create_access_token

        token = create_access_token({"sub": "abc", "user_metadata": {"telegram_id": "7002"}})
        response = client.get(
            "/api/ledger/balance", headers={"Authorization": f"Bearer {token}"}
        )

        assert response.status_code == 200

    def test_invalid_token(self, client):
        response = client.get(
            "/api/ledger/balance", headers={"Authorization": "Bearer not-a-jwt"}
        )
        assert response.status_code == 401

    def test_history_and_integrity(self, client, auth_headers):
        # Given: 테스트 코드로 방문 2회
        for _ in range(2):
            client.post("/api/events/register", json={"code": "00000"}, headers=auth_headers(USER_ID))

        # When
        history = client.get(
            "/api/ledger/history", params={"limit": 1}, headers=auth_headers(USER_ID)
        )
        integrity = client.get("/api/ledger/integrity", headers=auth_headers(USER_ID))

        # Then
        assert history.status_code == 200
        data = history.json()
        assert data["balance"] == 10
        assert data["total_count"] == 2
        assert data["has_next"] is True
        assert len(data["entries"]) == 1
        assert integrity.json()["status"] == "OK"

    def test_achievements_listing_and_claim(self, client, auth_headers):
        # Given: 방문 5회
        for _ in range(5):
            client.post("/api/events/register", json={"code": "00000"}, headers=auth_headers(USER_ID))

        # When
        listing = client.get("/api/achievements/", headers=auth_headers(USER_ID))
        claim = client.post(
            "/api/achievements/claim",
            json={"achievement_slug": "in_rhythm"},
            headers=auth_headers(USER_ID),
        )
        visit = client.post("/api/achievements/claim-visit-reward", headers=auth_headers(USER_ID))

        # Then
        data = listing.json()
        unlocked = {a["slug"] for a in data["achievements"] if a["unlocked"]}
        assert {"first_verse", "in_rhythm"} <= unlocked
        assert data["visit_reward_pending"] is True
        assert claim.status_code == 200
        assert claim.json()["new_balance"] == 40
        assert visit.json()["new_balance"] == 45
