def test_missing_config_is_null(client):
    res = client.get("/api/v1/config/landing")

    assert res.status_code == 200
    assert res.get_json() is None


def test_admin_sets_and_anyone_reads_config(client, admin):
    _, headers = admin

    res = client.post("/api/v1/config/landing", json={"hero": "Hello"}, headers=headers)
    assert res.status_code == 200

    res = client.get("/api/v1/config/landing")
    assert res.get_json() == {"hero": "Hello"}


def test_non_admin_cannot_set_config(client, user):
    _, headers = user

    res = client.post("/api/v1/config/landing", json={"hero": "x"}, headers=headers)

    assert res.status_code == 403


def test_admin_settings_bulk_write_and_read(client, admin):
    _, headers = admin

    res = client.post(
        "/api/v1/admin/settings",
        json={"maintenance": False, "banner": {"text": "Sale"}},
        headers=headers,
    )
    assert res.status_code == 200
    assert res.get_json()["keys"] == ["banner", "maintenance"]

    res = client.get("/api/v1/admin/settings", headers=headers)
    assert res.get_json() == {"banner": {"text": "Sale"}, "maintenance": False}


def test_admin_settings_requires_object(client, admin):
    _, headers = admin

    res = client.post("/api/v1/admin/settings", json=[1, 2], headers=headers)

    assert res.status_code == 400
