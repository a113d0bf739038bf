from bson import ObjectId


def _seed(db):
    pending = db["testimonial"].insert_one({"name": "Cleo", "text": "Great work"}).inserted_id
    approved = db["testimonial"].insert_one({"name": "Dan", "text": "Fast", "approved": True}).inserted_id
    return pending, approved


def test_create_testimonial_is_pending(client, db):
    response = client.post("/testimonial", json={"name": "Eve", "rating": 5})

    assert response.status_code == 200
    stored = db["testimonial"].find_one({"_id": ObjectId(response.json()["insertedId"])})
    assert stored["rating"] == 5
    assert "approved" not in stored


def test_list_pending_requires_admin(client, db, member):
    _seed(db)

    response = client.get(f"/testimonialapprove/{member}")

    assert response.status_code == 403
    assert response.json() == {"error": "Forbidden"}


def test_list_pending_returns_only_unapproved(client, db, admin):
    pending, _ = _seed(db)

    response = client.get(f"/testimonialapprove/{admin}")

    assert response.status_code == 200
    assert [t["_id"] for t in response.json()] == [str(pending)]


def test_approve_returns_full_list(client, db, admin):
    pending, _ = _seed(db)

    response = client.put("/testimonialapprove", json={"id": str(pending), "user_email": admin})

    assert response.status_code == 200
    assert len(response.json()) == 2
    assert all(t["approved"] is True for t in response.json())


def test_approve_unknown_id_creates_approved_document(client, db, admin):
    _seed(db)
    phantom = ObjectId()

    response = client.put("/testimonialapprove", json={"id": str(phantom), "user_email": admin})

    assert response.status_code == 200
    assert db["testimonial"].count_documents({}) == 3
    assert db["testimonial"].find_one({"_id": phantom}) == {"_id": phantom, "approved": True}


def test_delete_testimonial(client, db, admin):
    pending, approved = _seed(db)

    response = client.request(
        "DELETE", "/testimonialapprove", json={"id": str(pending), "user_email": admin}
    )

    assert response.status_code == 200
    assert [t["_id"] for t in response.json()] == [str(approved)]


def test_delete_unknown_id_is_404_and_leaves_collection(client, db, admin):
    _seed(db)

    response = client.request(
        "DELETE", "/testimonialapprove", json={"id": str(ObjectId()), "user_email": admin}
    )

    assert response.status_code == 404
    assert response.json() == {"error": "Testimonial not found."}
    assert db["testimonial"].count_documents({}) == 2


def test_moderation_forbidden_for_non_admin(client, db, member):
    pending, _ = _seed(db)
    payload = {"id": str(pending), "user_email": member}

    assert client.put("/testimonialapprove", json=payload).status_code == 403
    assert client.request("DELETE", "/testimonialapprove", json=payload).status_code == 403
    assert client.put("/testimonialapprove", json={"user_email": "nobody@example.com"}).status_code == 403
    assert db["testimonial"].count_documents({}) == 2
    assert "approved" not in db["testimonial"].find_one({"_id": pending})


def test_malformed_id_is_internal_error(client, admin):
    response = client.put("/testimonialapprove", json={"id": "not-an-id", "user_email": admin})

    assert response.status_code == 500
    assert response.json() == {"message": "Internal server error"}


def test_malformed_id_from_non_admin_is_forbidden(client, db, member):
    _seed(db)
    payload = {"id": "not-an-id", "user_email": member}

    approve = client.put("/testimonialapprove", json=payload)
    delete = client.request("DELETE", "/testimonialapprove", json=payload)

    assert approve.status_code == 403
    assert approve.json() == {"error": "Forbidden"}
    assert delete.status_code == 403
    assert delete.json() == {"error": "Forbidden"}
    assert db["testimonial"].count_documents({}) == 2


def test_reapproving_approved_testimonial_is_404(client, db, admin):
    _, approved = _seed(db)

    response = client.put("/testimonialapprove", json={"id": str(approved), "user_email": admin})

    assert response.status_code == 404
    assert response.json() == {"error": "Testimonial not found."}
    assert db["testimonial"].count_documents({}) == 2
