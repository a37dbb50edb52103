def test_customers_grouped_by_email(admin, create_order):
    create_order()
    create_order(sms_opt_in=True)
    create_order(customer_email="sam@example.com", customer_name="Sam")

    customers = {c["email"]: c for c in admin.get("/customers").json()}
    assert customers["dana@example.com"]["order_count"] == 2
    assert customers["dana@example.com"]["sms_opt_in"] is True
    assert customers["sam@example.com"]["order_count"] == 1
    assert customers["sam@example.com"]["sms_opt_in"] is False


def test_export_log(client, admin):
    assert client.get("/customers/export").status_code == 401
    assert admin.post("/customers/export", json={"phone_numbers": []}).status_code == 400

    resp = admin.post("/customers/export", json={"phone_numbers": ["212-555-0101", "212-555-0102"], "notes": "May"})
    assert resp.status_code == 201
    assert resp.json()["customer_count"] == 2

    exports = admin.get("/customers/export").json()
    assert exports[0]["phone_numbers"] == ["212-555-0101", "212-555-0102"]
    assert exports[0]["notes"] == "May"
