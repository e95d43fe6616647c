import io
from decimal import Decimal

import pandas as pd
import pytest

from lucy.crud import products as crud
from lucy.errors import InsufficientStockError
from lucy.models import Notification, NotificationType, Product, StockMovement
from lucy.schemas.products import StockMovementCreate

IMPORT_CSV = """nombre,descripcion,sku,codigoBarras,categoria,marca,precio,costo,stock,stockMinimo,stockMaximo,unidad,activo
Champú suave,,SH-01,8400000000011,Cabello,Lucy,12.50,5.00,20,4,50,unidad,SI
Mascarilla,Hidratante,MA-01,,Facial,,18.00,7.25,0,2,,unidad,SI
Sin precio,,SP-01,,Facial,,,1.00,1,1,,unidad,SI
Repetido,,CR-001,,Facial,,9.00,3.00,5,1,,unidad,SI
"""


def test_create_and_read_product(client):
    resp = client.post("/api/products/", json={
        "name": "Crema de manos", "sku": "CM-01", "category": "Cosmética",
        "price": "8.90", "cost": "3.10", "stock": 12,
    })
    assert resp.status_code == 201
    product_id = resp.json()["id"]

    detail = client.get(f"/api/products/{product_id}").json()
    assert detail["sku"] == "CM-01"
    assert Decimal(detail["price"]) == Decimal("8.90")
    assert detail["stock_movements"] == []


def test_duplicate_sku_is_rejected(client, make_product):
    make_product(sku="DUP-1")
    resp = client.post("/api/products/", json={
        "name": "Otro", "sku": "DUP-1", "category": "X", "price": "1.00", "cost": "0.50",
    })
    assert resp.status_code == 400


def test_search_products(client, make_product):
    make_product(sku="AB-1", name="Aceite de argán")
    make_product(sku="CD-1", name="Crema")

    results = client.get("/api/products/", params={"search": "argán"}).json()
    assert [p["sku"] for p in results] == ["AB-1"]


def test_inbound_and_outbound_stock_movements(client, db, make_product):
    product = make_product(stock=5)

    resp = client.post(f"/api/products/{product.id}/stock-movements", json={"type": "PURCHASE", "quantity": 10})
    assert resp.status_code == 201
    resp = client.post(f"/api/products/{product.id}/stock-movements", json={"type": "DAMAGED", "quantity": 3})
    assert resp.status_code == 201

    db.expire_all()
    assert db.get(Product, product.id).stock == 12

    detail = client.get(f"/api/products/{product.id}").json()
    assert [m["type"] for m in detail["stock_movements"]] == ["DAMAGED", "PURCHASE"]


def test_outbound_movement_cannot_leave_negative_stock(db, make_product):
    product = make_product(stock=2)

    with pytest.raises(InsufficientStockError):
        crud.apply_stock_movement(db, product.id, StockMovementCreate(type="DAMAGED", quantity=3))

    db.expire_all()
    assert db.get(Product, product.id).stock == 2
    assert db.query(StockMovement).count() == 0


def test_stock_movement_on_missing_product(client):
    resp = client.post("/api/products/999/stock-movements", json={"type": "PURCHASE", "quantity": 1})
    assert resp.status_code == 404


def test_low_stock_lists_products_and_notifies_once(client, db, make_product):
    make_product(sku="LOW-1", name="Laca", stock=1, min_stock=3)
    make_product(sku="OK-1", name="Gel", stock=10, min_stock=3)

    resp = client.get("/api/products/low-stock")
    assert [p["sku"] for p in resp.json()] == ["LOW-1"]

    client.get("/api/products/low-stock")
    notifications = db.query(Notification).filter(Notification.type == NotificationType.LOW_STOCK).all()
    assert len(notifications) == 1
    assert "Laca" in notifications[0].message


def test_import_csv(client, db, make_product):
    make_product(sku="CR-001")

    resp = client.post(
        "/api/products/import",
        files={"file": ("productos.csv", IMPORT_CSV.encode("utf-8"), "text/csv")},
    )
    assert resp.status_code == 200
    results = resp.json()["results"]
    assert results["success"] == 2
    assert results["skipped"] == 1
    assert [(e["row"], e["sku"]) for e in results["errors"]] == [(4, "SP-01")]

    shampoo = db.query(Product).filter(Product.sku == "SH-01").one()
    assert shampoo.price == Decimal("12.50")
    assert shampoo.stock == 20
    assert shampoo.min_stock == 4
    assert shampoo.max_stock == 50
    assert shampoo.barcode == "8400000000011"
    assert [m.quantity for m in shampoo.stock_movements] == [20]


def test_import_rejects_unknown_format(client):
    resp = client.post("/api/products/import", files={"file": ("productos.txt", b"hola", "text/plain")})
    assert resp.status_code == 400


def test_export_excel_roundtrips_columns(client, make_product):
    make_product(sku="EX-1", name="Exfoliante", price="11.00")

    resp = client.get("/api/products/export/excel")
    assert resp.status_code == 200

    df = pd.read_excel(io.BytesIO(resp.content), engine="openpyxl")
    assert list(df.columns)[:3] == ["nombre", "descripcion", "sku"]
    assert df.loc[0, "sku"] == "EX-1"
    assert df.loc[0, "precio"] == 11.0
