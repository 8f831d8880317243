ROOT_ID = 1
USER_ID = 7001


def issue_prize(client, auth_headers, make_profile, make_event, coins=50):
    make_profile(ROOT_ID, role="root")
    make_event("evt-1")
    response = client.post(
        "/api/events/evt-1/prize-codes",
        json={"coins_amount": coins},
        headers=auth_headers(ROOT_ID),
    )
    return response.json()["code"]


class TestCodeRoutes:
    """코드 조회/사용 라우터 테스트"""

    def test_lookup(self, client, auth_headers, make_profile, make_event):
        code = issue_prize(client, auth_headers, make_profile, make_event)

        response = client.get(
            "/api/codes/lookup", params={"code": code.lower()}, headers=auth_headers(USER_ID)
        )

        assert response.status_code == 200
        assert response.json() == {"code": code, "type": "prize"}

    def test_lookup_unknown(self, client, auth_headers):
        response = client.get(
            "/api/codes/lookup", params={"code": "ZZZZZ"}, headers=auth_headers(USER_ID)
        )
        assert response.status_code == 404

    def test_redeem_dispatches_prize(self, client, auth_headers, make_profile, make_event):
        # Given
        code = issue_prize(client, auth_headers, make_profile, make_event, coins=50)

        # When
        response = client.post(
            "/api/codes/redeem", json={"code": code}, headers=auth_headers(USER_ID)
        )

        # Then
        assert response.status_code == 200
        data = response.json()
        assert data["type"] == "prize"
        assert data["new_balance"] == 50
        lookup = client.get(
            "/api/codes/lookup", params={"code": code}, headers=auth_headers(USER_ID)
        )
        assert lookup.status_code == 404

    def test_redeem_registration_via_deep_link(self, client, auth_headers, notifier):
        """봇 딥링크 URL 에 담긴 테스트 등록 코드"""
        response = client.post(
            "/api/codes/redeem",
            json={"code": "https://t.me/karaoke_bot?startapp=00000"},
            headers=auth_headers(USER_ID),
        )

        assert response.status_code == 200
        assert response.json()["type"] == "registration"
        assert response.json()["event"]["id"] == "test"
        notifier.notify_registration.assert_called_once()

    def test_redeem_garbage(self, client, auth_headers):
        response = client.post(
            "/api/codes/redeem", json={"code": "hello world"}, headers=auth_headers(USER_ID)
        )
        assert response.status_code == 400
