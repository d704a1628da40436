from library.models.loan import Loan


def _title(client, name="The Left Hand of Darkness"):
    return client.post("/api/v1/titles", json={"title": name}).get_json()["id"]


def test_health(client):
    assert client.get("/health").get_json() == {"ok": True}
    assert client.get("/health/db").get_json() == {"ok": True}


def test_create_title_requires_title(client):
    res = client.post("/api/v1/titles", json={})
    assert res.status_code == 400


def test_volumes_get_sequential_copy_numbers(client):
    title_id = _title(client)
    first = client.post("/api/v1/volumes", json={"title_id": title_id, "barcode": "B-1"})
    second = client.post("/api/v1/volumes", json={"title_id": title_id, "barcode": "B-2"})

    assert first.status_code == 201
    assert first.get_json()["copy_number"] == 1
    assert second.get_json()["copy_number"] == 2
    assert first.get_json()["loan_status"] == "available"

    listed = client.get(f"/api/v1/titles/{title_id}/volumes").get_json()
    assert [v["barcode"] for v in listed] == ["B-1", "B-2"]


def test_duplicate_barcode_is_rejected(client):
    title_id = _title(client)
    client.post("/api/v1/volumes", json={"title_id": title_id, "barcode": "B-1"})
    res = client.post("/api/v1/volumes", json={"title_id": title_id, "barcode": "B-1"})
    assert res.status_code == 409
    assert res.get_json()["error"] == "duplicate_barcode"


def test_volume_for_unknown_title(client):
    res = client.post("/api/v1/volumes", json={"title_id": "nope", "barcode": "B-1"})
    assert res.status_code == 404


def test_unknown_condition(client):
    title_id = _title(client)
    res = client.post("/api/v1/volumes", json={"title_id": title_id, "barcode": "B-1", "condition": "soggy"})
    assert res.status_code == 400


def test_damaged_volume_is_not_loanable(client):
    title_id = _title(client)
    res = client.post("/api/v1/volumes", json={"title_id": title_id, "barcode": "B-1", "condition": "damaged"})
    assert res.get_json()["loanable"] is False


def test_get_volume_by_id_and_barcode(client):
    title_id = _title(client)
    created = client.post("/api/v1/volumes", json={"title_id": title_id, "barcode": "B-9"}).get_json()

    assert client.get(f"/api/v1/volumes/{created['id']}").get_json()["barcode"] == "B-9"
    assert client.get("/api/v1/volumes/barcode/B-9").get_json()["id"] == created["id"]
    assert client.get("/api/v1/volumes/missing").status_code == 404


def test_loaned_volume_cannot_be_deleted(client, make_volume, make_borrower):
    volume = make_volume(barcode="VOL-1")
    borrower = make_borrower()
    loan_id = client.post("/api/v1/loans", json={"borrower_id": borrower.id, "barcode": "VOL-1"}).get_json()["id"]

    res = client.delete(f"/api/v1/volumes/{volume.id}")
    assert res.status_code == 409
    assert res.get_json()["error"] == "volume_loaned"

    client.post(f"/api/v1/loans/{loan_id}/return")
    res = client.delete(f"/api/v1/volumes/{volume.id}")
    assert res.status_code == 200
    assert Loan.query.count() == 0


def test_borrower_groups(client):
    res = client.post("/api/v1/borrower-groups", json={"name": "Family", "loan_duration_days": 30})
    assert res.status_code == 201
    assert res.get_json()["loan_duration_days"] == 30

    bad = client.post("/api/v1/borrower-groups", json={"name": "Zero", "loan_duration_days": 0})
    assert bad.status_code == 400

    dup = client.post("/api/v1/borrower-groups", json={"name": "Family", "loan_duration_days": 10})
    assert dup.status_code == 400

    names = [g["name"] for g in client.get("/api/v1/borrower-groups").get_json()]
    assert names == ["Family"]


def test_borrower_with_unknown_group(client):
    res = client.post("/api/v1/borrowers", json={"name": "X", "group_id": "nope"})
    assert res.status_code == 404


def test_borrower_listing_counts_open_loans(client, make_volume):
    group_id = client.post("/api/v1/borrower-groups", json={"name": "Friends", "loan_duration_days": 14}).get_json()["id"]
    borrower_id = client.post("/api/v1/borrowers", json={"name": "Ursula", "group_id": group_id}).get_json()["id"]
    make_volume(barcode="VOL-1")
    res = client.post("/api/v1/loans", json={"borrower_id": borrower_id, "barcode": "VOL-1"})
    assert res.get_json()["loan_duration_days"] == 14

    listed = client.get("/api/v1/borrowers").get_json()
    assert listed[0]["group_name"] == "Friends"
    assert listed[0]["loan_duration_days"] == 14
    assert listed[0]["active_loan_count"] == 1

    blocked = client.delete(f"/api/v1/borrowers/{borrower_id}")
    assert blocked.status_code == 409
    assert blocked.get_json()["active_loans"] == 1


def test_delete_borrower(client):
    borrower_id = client.post("/api/v1/borrowers", json={"name": "Temp"}).get_json()["id"]
    assert client.delete(f"/api/v1/borrowers/{borrower_id}").status_code == 200
    assert client.get("/api/v1/borrowers").get_json() == []
    assert client.delete(f"/api/v1/borrowers/{borrower_id}").status_code == 404


def test_damaging_a_volume_makes_it_unloanable(client, make_volume, make_borrower):
    volume = make_volume(barcode="VOL-1")
    borrower = make_borrower()

    res = client.put(f"/api/v1/volumes/{volume.id}", json={"condition": "damaged", "loanable": True})
    assert res.status_code == 200
    assert res.get_json()["condition"] == "damaged"
    assert res.get_json()["loanable"] is False

    loan = client.post("/api/v1/loans", json={"borrower_id": borrower.id, "barcode": "VOL-1"})
    assert loan.status_code == 400
    assert loan.get_json()["error"] == "not_loanable"


def test_loan_status_cannot_be_set_while_a_loan_is_open(client, make_volume, make_borrower):
    volume = make_volume(barcode="VOL-1")
    borrower = make_borrower()
    loan_id = client.post("/api/v1/loans", json={"borrower_id": borrower.id, "barcode": "VOL-1"}).get_json()["id"]

    res = client.put(f"/api/v1/volumes/{volume.id}", json={"loan_status": "available"})
    assert res.status_code == 409
    assert res.get_json()["error"] == "volume_loaned"
    assert client.get(f"/api/v1/volumes/{volume.id}").get_json()["loan_status"] == "loaned"

    client.post(f"/api/v1/loans/{loan_id}/return")
    res = client.put(f"/api/v1/volumes/{volume.id}", json={"loan_status": "maintenance"})
    assert res.status_code == 200
    assert res.get_json()["loan_status"] == "maintenance"

    blocked = client.post("/api/v1/loans", json={"borrower_id": borrower.id, "barcode": "VOL-1"})
    assert blocked.get_json()["error"] == "already_loaned"


def test_loan_statuses_owned_by_loans_cannot_be_set_by_hand(client, make_volume):
    volume = make_volume()
    for status in ("loaned", "overdue", "borrowed"):
        res = client.put(f"/api/v1/volumes/{volume.id}", json={"loan_status": status})
        assert res.status_code == 400


def test_update_volume_errors(client, make_volume):
    first = make_volume(barcode="VOL-1")
    make_volume(barcode="VOL-2")

    assert client.put(f"/api/v1/volumes/{first.id}", json={}).status_code == 400
    assert client.put("/api/v1/volumes/missing", json={"condition": "good"}).status_code == 404

    dup = client.put(f"/api/v1/volumes/{first.id}", json={"barcode": "VOL-2"})
    assert dup.status_code == 409
    assert dup.get_json()["error"] == "duplicate_barcode"

    same = client.put(f"/api/v1/volumes/{first.id}", json={"barcode": "VOL-1", "individual_notes": "Torn cover"})
    assert same.status_code == 200
    assert same.get_json()["individual_notes"] == "Torn cover"

    assert client.put(f"/api/v1/volumes/{first.id}", json={"loanable": "false"}).status_code == 400
    assert client.put(f"/api/v1/volumes/{first.id}", json={"condition": 3}).status_code == 400


def test_volume_fields_must_have_json_types(client):
    title_id = _title(client)

    for body in (
        {"title_id": 5, "barcode": "X"},
        {"title_id": title_id, "barcode": ["X"]},
        {"title_id": title_id, "barcode": "X", "condition": 1},
        {"title_id": title_id, "barcode": "X", "loanable": "false"},
        {"title_id": title_id, "barcode": "X", "loanable": 0},
    ):
        res = client.post("/api/v1/volumes", json=body)
        assert res.status_code == 400
        assert res.get_json()["error"] == "invalid_request"

    assert client.post("/api/v1/volumes", json=[title_id, "X"]).status_code == 400
    assert client.get(f"/api/v1/titles/{title_id}/volumes").get_json() == []

    created = client.post("/api/v1/volumes", json={"title_id": title_id, "barcode": "X", "loanable": False})
    assert created.get_json()["loanable"] is False


def test_catalog_text_fields_must_be_strings(client):
    assert client.post("/api/v1/titles", json={"title": 42}).status_code == 400
    assert client.post("/api/v1/borrowers", json={"name": 42}).status_code == 400
    assert client.post("/api/v1/borrowers", json={"name": "X", "group_id": 7}).status_code == 400
    assert client.post("/api/v1/borrowers", json={"name": "X", "email": True}).status_code == 400
    assert client.post("/api/v1/borrower-groups", json={"name": 3, "loan_duration_days": 10}).status_code == 400
    assert client.post("/api/v1/borrower-groups", json={"name": "G", "loan_duration_days": "10"}).status_code == 400
    assert client.post("/api/v1/borrower-groups", json={"name": "G", "loan_duration_days": True}).status_code == 400
    assert client.post("/api/v1/loans", json={"borrower_id": 1, "barcode": "VOL-1"}).status_code == 400
    assert client.get("/api/v1/borrowers").get_json() == []
    assert client.get("/api/v1/borrower-groups").get_json() == []


def test_update_borrower(client, make_group):
    group = make_group(name="Friends", loan_duration_days=14)
    group_id = group.id
    borrower_id = client.post("/api/v1/borrowers", json={"name": "Ursula"}).get_json()["id"]

    res = client.put(f"/api/v1/borrowers/{borrower_id}", json={"name": "Ursula K.", "city": "Portland", "group_id": group_id})
    assert res.status_code == 200
    assert res.get_json()["city"] == "Portland"

    listed = client.get("/api/v1/borrowers").get_json()[0]
    assert listed["name"] == "Ursula K."
    assert listed["group_name"] == "Friends"

    assert client.put(f"/api/v1/borrowers/{borrower_id}", json={}).status_code == 400
    assert client.put(f"/api/v1/borrowers/{borrower_id}", json={"name": ""}).status_code == 400
    assert client.put(f"/api/v1/borrowers/{borrower_id}", json={"group_id": "nope"}).status_code == 404
    assert client.put("/api/v1/borrowers/missing", json={"name": "Y"}).status_code == 404

    ungrouped = client.put(f"/api/v1/borrowers/{borrower_id}", json={"group_id": None})
    assert ungrouped.get_json()["group_id"] is None


def test_update_group_leaves_existing_due_dates(client, make_volume):
    group_id = client.post("/api/v1/borrower-groups", json={"name": "Friends", "loan_duration_days": 14}).get_json()["id"]
    borrower_id = client.post("/api/v1/borrowers", json={"name": "Ursula", "group_id": group_id}).get_json()["id"]
    make_volume(barcode="VOL-1")
    due_date = client.post("/api/v1/loans", json={"borrower_id": borrower_id, "barcode": "VOL-1"}).get_json()["due_date"]

    res = client.put(f"/api/v1/borrower-groups/{group_id}", json={"loan_duration_days": 30, "description": "Close friends"})
    assert res.status_code == 200
    assert res.get_json()["loan_duration_days"] == 30

    assert client.get("/api/v1/loans").get_json()[0]["due_date"] == due_date
    assert client.get("/api/v1/borrowers").get_json()[0]["loan_duration_days"] == 30


def test_update_group_errors(client):
    client.post("/api/v1/borrower-groups", json={"name": "Family", "loan_duration_days": 30})
    group_id = client.post("/api/v1/borrower-groups", json={"name": "Friends", "loan_duration_days": 14}).get_json()["id"]

    assert client.put(f"/api/v1/borrower-groups/{group_id}", json={}).status_code == 400
    assert client.put(f"/api/v1/borrower-groups/{group_id}", json={"name": "Family"}).status_code == 400
    assert client.put(f"/api/v1/borrower-groups/{group_id}", json={"loan_duration_days": -1}).status_code == 400
    assert client.put("/api/v1/borrower-groups/missing", json={"name": "X"}).status_code == 404

    renamed = client.put(f"/api/v1/borrower-groups/{group_id}", json={"name": "Friends"})
    assert renamed.status_code == 200


def test_delete_group_refused_while_borrowers_reference_it(client):
    group_id = client.post("/api/v1/borrower-groups", json={"name": "Friends", "loan_duration_days": 14}).get_json()["id"]
    borrower_id = client.post("/api/v1/borrowers", json={"name": "Ursula", "group_id": group_id}).get_json()["id"]

    blocked = client.delete(f"/api/v1/borrower-groups/{group_id}")
    assert blocked.status_code == 409
    assert blocked.get_json()["error"] == "borrower_group_in_use"
    assert blocked.get_json()["borrowers"] == 1

    client.delete(f"/api/v1/borrowers/{borrower_id}")
    assert client.delete(f"/api/v1/borrower-groups/{group_id}").status_code == 200
    assert client.get("/api/v1/borrower-groups").get_json() == []
    assert client.delete(f"/api/v1/borrower-groups/{group_id}").status_code == 404
