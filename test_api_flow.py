import re

from conftest import jprint


def test_healthz_and_auth_guard(client):
    assert client.get("/healthz").json() == {"ok": True}
    r = client.get("/products/")
    assert r.status_code == 401
    r = client.get("/products/", headers={"Authorization": "Bearer not-a-token"})
    assert r.status_code == 401
    r = client.post("/auth/login", json={"username": "nobody", "password": "x"})
    assert r.status_code == 401


def test_full_store_flow(client, admin_headers):
    h = admin_headers
    me = jprint("GET /auth/me", client.get("/auth/me", headers=h))
    assert me["role"] == "ADMIN"

    # ===== Catalog =====
    milk = jprint("POST /products/", client.post("/products/", headers=h, json={
        "name": "Amul Milk 500ml", "category": "Dairy", "price": 27, "stocks": 20,
        "quantity": 500, "unit": "ml", "gst_percent": 0, "barcode": "8901262010016",
    }))
    assert milk["unit"] == "ml" and milk["cost_price"] == 0

    soap = jprint("POST /products/ (2)", client.post("/products/", headers=h, json={
        "name": "Bath Soap", "category": "Personal Care", "price": 45, "stocks": 3, "unit": "pcs",
        "gst_percent": 18,
    }))

    r = client.get("/products/barcode/8901262010016", headers=h)
    assert jprint("GET /products/barcode/{code}", r)["id"] == milk["id"]
    assert client.get("/products/barcode/000", headers=h).status_code == 404

    found = jprint("GET /products/search", client.get("/products/search", headers=h, params={"q": "dairy"}))
    assert [p["id"] for p in found] == [milk["id"]]
    assert jprint("GET /products/search (blank)", client.get("/products/search", headers=h, params={"q": " "})) == []

    # ===== Supplier + stock receipt =====
    sup = jprint("POST /suppliers/", client.post("/suppliers/", headers=h, json={
        "name": "Sai Distributors", "contact_person": "Sai", "phone": "9811111111",
        "product_categories": "Dairy, FMCG", "gst_number": "27AAACS1234A1Z5",
    }))
    rec = client.post("/receive-stock/", headers=h, json={
        "supplierId": sup["id"], "invoiceNumber": "SD-101", "orderDate": "2026-10-18",
        "paidAmount": 20, "items": [{"productId": milk["id"], "quantity": 5, "unitPrice": 10}],
    })
    rec = jprint("POST /receive-stock/", rec)
    assert rec["total_amount"] == 50

    milk_now = jprint("GET /products/{id}", client.get(f"/products/{milk['id']}", headers=h))
    assert milk_now["stocks"] == 25 and milk_now["cost_price"] == 10

    order = jprint("GET order", client.get(f"/suppliers/{sup['id']}/orders/{rec['id']}", headers=h))
    assert order["delivery_status"] == "Delivered"
    assert order["payment_status"] == "Partial"
    assert order["balance_amount"] == 30

    r = client.post("/receive-stock/", headers=h, json={"supplierId": sup["id"], "items": []})
    assert r.status_code == 400

    # ===== Billing =====
    bill = jprint("POST /bills/", client.post("/bills/", headers=h, json={
        "customerName": "Meera", "customerPhone": "9822222222",
        "items": [{"productId": milk["id"], "quantity": 2, "unitPrice": 27, "gstPercent": 0}],
        "totalAmount": 54, "taxAmount": 0, "discountAmount": 0, "grandTotal": 54,
    }))
    assert re.fullmatch(r"SB-\d{4}-\d{6}", bill["billNumber"])
    milk_now = jprint("GET /products/{id}", client.get(f"/products/{milk['id']}", headers=h))
    assert milk_now["stocks"] == 23

    details = jprint("GET /bills/{id}", client.get(f"/bills/{bill['id']}", headers=h))
    assert details["grand_total"] == 54
    assert details["items"][0]["subtotal"] == 54
    assert details["cashier_name"] == "Super Admin"
    assert client.get("/bills/99999", headers=h).status_code == 404

    r = client.post("/bills/", headers=h, json={
        "items": [{"productId": milk["id"], "quantity": 1, "unitPrice": 27},
                  {"productId": soap["id"], "quantity": 4, "unitPrice": 45, "gstPercent": 18}],
    })
    assert r.status_code == 400
    assert r.json()["detail"] == "Insufficient stock for Bath Soap. Available: 3"
    milk_now = jprint("GET /products/{id}", client.get(f"/products/{milk['id']}", headers=h))
    assert milk_now["stocks"] == 23

    r = client.post("/bills/", headers=h, json={"items": [{"productId": 4040, "quantity": 1, "unitPrice": 1}]})
    assert r.status_code == 400
    assert r.json()["detail"] == "Product id 4040 not found"

    r = client.post("/bills/", headers=h, json={"items": []})
    assert r.status_code == 422

    preview = jprint("POST /bills/preview", client.post("/bills/preview", headers=h, json={
        "items": [{"productId": soap["id"], "quantity": 2, "unitPrice": 45, "gstPercent": 18}],
        "discountAmount": 6.2,
    }))
    assert preview == {"subtotal": 90.0, "gst": 16.2, "discount": 6.2, "grand_total": 100.0}

    # ===== Reports =====
    stats = jprint("GET /bills/stats", client.get("/bills/stats", headers=h))
    assert stats["bill_count"] == 1
    assert stats["today_revenue"] == 54
    assert stats["today_profit"] == 34  # (27 - 10) * 2
    assert stats["low_stock_count"] == 1

    customers = jprint("GET /bills/customers", client.get("/bills/customers", headers=h))
    assert customers[0]["customer_name"] == "Meera"
    history = jprint("GET /bills/history", client.get("/bills/history", headers=h, params={"q": "Meera"}))
    assert history["total"] == 1
    jprint("GET /bills/reports", client.get("/bills/reports", headers=h, params={"period": "monthly"}))
    jprint("GET /bills/top-products", client.get("/bills/top-products", headers=h, params={"period": "yearly"}))
    jprint("GET /bills/sales-by-time", client.get("/bills/sales-by-time", headers=h))
    summary = jprint("GET /suppliers/distributor-summary", client.get("/suppliers/distributor-summary", headers=h))
    assert summary[0]["total_pending"] == 30

    # ===== Referenced rows cannot be removed =====
    assert client.delete(f"/products/{milk['id']}", headers=h).status_code == 409
    assert client.delete(f"/suppliers/{sup['id']}", headers=h).status_code == 409


def test_distributor_order_crud(client, admin_headers):
    h = admin_headers
    sup = jprint("POST /suppliers/", client.post("/suppliers/", headers=h, json={"name": "Om Traders"}))
    assert jprint("GET /suppliers/{id}", client.get(f"/suppliers/{sup['id']}", headers=h))["name"] == "Om Traders"
    assert client.get("/suppliers/9999", headers=h).status_code == 404
    base = f"/suppliers/{sup['id']}/orders"

    o = jprint("POST orders", client.post(base, headers=h, json={
        "ordered_date": "2026-10-01", "total_amount": 1000, "paid_amount": 0,
        "bill_file_url": "/uploads/om-1.pdf",
    }))
    assert o["payment_status"] == "Unpaid" and o["balance_amount"] == 1000

    o = jprint("PUT order", client.put(f"{base}/{o['id']}", headers=h, json={
        "paid_amount": 400, "bill_file_url": None, "delivery_status": "Delivered",
    }))
    assert o["payment_status"] == "Partial"
    assert o["balance_amount"] == 600
    assert o["bill_file_url"] == "/uploads/om-1.pdf"

    summary = jprint("GET summary", client.get(f"{base}/summary", headers=h))
    assert summary == {"total_paid": 400.0, "total_pending": 600.0, "order_count": 1}
    assert len(jprint("GET orders", client.get(base, headers=h))) == 1

    assert client.put(f"{base}/9999", headers=h, json={"paid_amount": 1}).status_code == 404
    jprint("DELETE order", client.delete(f"{base}/{o['id']}", headers=h))
    assert client.get(f"{base}/{o['id']}", headers=h).status_code == 404


def test_cashier_cannot_use_admin_routes(client, admin_headers, cashier_headers):
    h = cashier_headers
    r = client.post("/products/", headers=h, json={"name": "X", "price": 1, "stocks": 1, "unit": "pcs"})
    assert r.status_code == 403
    assert client.get("/bills/customers", headers=h).status_code == 403
    assert client.post("/receive-stock/", headers=h, json={"supplierId": 1, "items": []}).status_code == 403
    # cashiers still sell and read stats
    jprint("GET /bills/stats", client.get("/bills/stats", headers=h))
    jprint("GET /products/", client.get("/products/", headers=h))


def test_product_validation(client, admin_headers):
    h = admin_headers
    r = client.post("/products/", headers=h, json={"name": "Bad", "price": 10, "stocks": -1, "unit": "pcs"})
    assert r.status_code == 422
    r = client.post("/products/", headers=h, json={"name": "Bad", "price": 10, "stocks": 1, "unit": "box"})
    assert r.status_code == 422
    jprint("POST /products/", client.post("/products/", headers=h, json={
        "name": "Rice", "price": 60, "stocks": 1, "unit": "kg", "barcode": "111"}))
    r = client.post("/products/", headers=h, json={
        "name": "Rice 2", "price": 60, "stocks": 1, "unit": "kg", "barcode": "111"})
    assert r.status_code == 409


def test_product_edit_keeps_cost_price_and_barcode(client, admin_headers):
    h = admin_headers
    ghee = jprint("POST /products/", client.post("/products/", headers=h, json={
        "name": "Ghee 1L", "category": "Dairy", "price": 650, "stocks": 4, "unit": "ltr",
        "barcode": "890"}))
    sup = jprint("POST /suppliers/", client.post("/suppliers/", headers=h, json={"name": "Gokul Dairy"}))
    jprint("POST /receive-stock/", client.post("/receive-stock/", headers=h, json={
        "supplierId": sup["id"], "items": [{"productId": ghee["id"], "quantity": 5, "unitPrice": 20}]}))

    # the edit form only sends these fields
    edited = jprint("PUT /products/{id}", client.put(f"/products/{ghee['id']}", headers=h, json={
        "name": "Ghee 1L Jar", "category": "Dairy", "price": 660, "quantity": 1,
        "stocks": 9, "unit": "ltr", "gst_percent": 12}))
    assert edited["name"] == "Ghee 1L Jar" and edited["price"] == 660
    assert edited["cost_price"] == 20
    assert edited["barcode"] == "890"
    assert jprint("GET /products/barcode/890", client.get("/products/barcode/890", headers=h))["id"] == ghee["id"]


def test_product_barcode_conflict_on_edit(client, admin_headers):
    h = admin_headers
    a = jprint("POST /products/", client.post("/products/", headers=h, json={
        "name": "Atta 5kg", "price": 240, "stocks": 3, "unit": "kg", "barcode": "501"}))
    b = jprint("POST /products/ (2)", client.post("/products/", headers=h, json={
        "name": "Besan 1kg", "price": 90, "stocks": 3, "unit": "kg", "barcode": "502"}))

    r = client.put(f"/products/{b['id']}", headers=h, json={
        "name": "Besan 1kg", "price": 90, "stocks": 3, "unit": "kg", "barcode": "501"})
    assert r.status_code == 409
    assert r.json()["detail"] == "Barcode 501 is already assigned to another product"

    # re-sending a product's own barcode is not a conflict
    same = jprint("PUT /products/{id}", client.put(f"/products/{a['id']}", headers=h, json={
        "name": "Atta 5kg", "price": 250, "stocks": 3, "unit": "kg", "barcode": "501"}))
    assert same["price"] == 250
