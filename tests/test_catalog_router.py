ROOT_ID = 1
USER_ID = 7001


class TestCatalogRoutes:
    """카탈로그 라우터 테스트"""

    def test_list_uses_authoritative_price(self, client, make_item):
        # Given: DB 가격과 다른 오버라이드가 있는 상품
        make_item("extra_card", name="Extra card", price=999)
        make_item("mic_rental", name="Mic rental", price=30)

        # When
        response = client.get("/api/catalog/")

        # Then
        assert response.status_code == 200
        items = response.json()["items"]
        assert [(i["id"], i["price"]) for i in items] == [("extra_card", 25), ("mic_rental", 30)]

    def test_purchase_issues_ticket(self, client, auth_headers, make_profile, make_item, notifier):
        # Given
        make_profile(USER_ID, balance=50)
        make_item("mic_rental", name="Mic rental", price=30)

        # When
        response = client.post(
            "/api/catalog/purchase",
            json={"catalog_item_id": "mic_rental"},
            headers=auth_headers(USER_ID),
        )

        # Then
        assert response.status_code == 200
        data = response.json()
        assert data["new_balance"] == 30
        assert data["bonus_coins"] == 10
        assert data["newly_unlocked_achievements"][0]["slug"] == "has_ticket"
        notifier.notify_purchase.assert_called_once_with(
            USER_ID, "Mic rental", data["ticket"]["code"]
        )

    def test_purchase_insufficient_balance(self, client, auth_headers, make_profile, make_item):
        make_profile(USER_ID, balance=10)
        make_item("mic_rental", price=30)

        response = client.post(
            "/api/catalog/purchase",
            json={"catalog_item_id": "mic_rental"},
            headers=auth_headers(USER_ID),
        )

        assert response.status_code == 400
        error = response.json()["error"]
        assert error["code"] == "BALANCE_001"
        assert error["details"] == {"required": 30, "available": 10}

    def test_purchase_unknown_item(self, client, auth_headers):
        response = client.post(
            "/api/catalog/purchase",
            json={"catalog_item_id": "ghost"},
            headers=auth_headers(USER_ID),
        )
        assert response.status_code == 404

    def test_generate_and_redeem_purchase_code(self, client, auth_headers, make_profile, make_item):
        # Given
        make_profile(ROOT_ID, role="root")
        make_profile(USER_ID, balance=100)
        make_item("mic_rental", price=30)
        issued = client.post(
            "/api/catalog/generate-purchase-code",
            json={"catalog_item_id": "mic_rental"},
            headers=auth_headers(ROOT_ID),
        ).json()

        # When
        first = client.post(
            "/api/catalog/redeem-purchase-code",
            json={"code": issued["code"][1:]},
            headers=auth_headers(USER_ID),
        )
        second = client.post(
            "/api/catalog/redeem-purchase-code",
            json={"code": issued["code"]},
            headers=auth_headers(USER_ID),
        )

        # Then
        assert issued["code"].startswith("C")
        assert issued["item"]["id"] == "mic_rental"
        assert first.status_code == 200
        assert first.json()["new_balance"] == 80
        assert second.status_code == 400
        assert second.json()["error"]["code"] == "CODE_003"

    def test_generate_purchase_code_requires_root(self, client, auth_headers, make_item):
        make_item("mic_rental")

        response = client.post(
            "/api/catalog/generate-purchase-code",
            json={"catalog_item_id": "mic_rental"},
            headers=auth_headers(USER_ID),
        )

        assert response.status_code == 403

    def test_admin_create_and_list(self, client, auth_headers, make_profile):
        make_profile(ROOT_ID, role="root")

        created = client.post(
            "/api/admin/catalog",
            json={"id": "song_skip", "name": "  Song skip ", "price": 15},
            headers=auth_headers(ROOT_ID),
        )
        duplicate = client.post(
            "/api/admin/catalog",
            json={"id": "song_skip", "name": "Song skip", "price": 15},
            headers=auth_headers(ROOT_ID),
        )
        listing = client.get("/api/admin/catalog", headers=auth_headers(ROOT_ID))

        assert created.status_code == 201
        assert created.json()["name"] == "Song skip"
        assert duplicate.status_code == 422
        assert [i["id"] for i in listing.json()["items"]] == ["song_skip"]
