def test_stats(client, mock_db, admin, parent, make_user, injury):
    make_user("New Parent", "new@example.com", verified=False)
    mock_db.injuries.insert_one({"child": injury["child"], "type": "Old", "recoveryStatus": "Full Play"})

    res = client.get("/api/admin/stats", headers=admin["headers"])
    assert res.status_code == 200
    assert res.json() == {
        "totalUsers": 3,
        "verifiedUsers": 2,
        "unverifiedUsers": 1,
        "totalChildren": 1,
        "totalInjuries": 2,
        "activeInjuries": 1,
    }


def test_users_have_children_count_and_no_secrets(client, admin, parent, child):
    res = client.get("/api/admin/users", headers=admin["headers"])
    assert res.status_code == 200
    users = {u["email"]: u for u in res.json()["users"]}
    assert users["pat@example.com"]["childrenCount"] == 1
    assert users["ada@example.com"]["childrenCount"] == 0
    assert all("password" not in u for u in users.values())


def test_admin_routes_need_admin(client, parent):
    for path in ("/api/admin/stats", "/api/admin/users", "/api/admin/export/children"):
        res = client.get(path, headers=parent["headers"])
        assert res.status_code == 403
        assert res.json()["detail"] == "Admin access required"
        assert client.get(path).status_code == 401
