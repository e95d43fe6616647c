# lucy/routers/products.py
import io
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, UploadFile, File
from fastapi.responses import StreamingResponse
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
import pandas as pd

from lucy.crud import products as crud
from lucy.database import get_db
from lucy.errors import ValidationError
from lucy.models import Product, StockMovement, User
from lucy.schemas.common import MessageResponse
from lucy.schemas.products import (
    ProductCreate, ProductUpdate, ProductRead, ProductDetail,
    StockMovementCreate, StockMovementRead, ImportResponse,
)
from lucy.security import get_current_user

router = APIRouter()


# -----------------------------
# 1. Listar productos
# -----------------------------
@router.get("/", response_model=List[ProductRead])
def read_products(
    search: str = "",
    is_active: Optional[bool] = None,
    category: Optional[str] = None,
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    query = db.query(Product)
    if search:
        term = f"%{search}%"
        query = query.filter(or_(
            Product.name.ilike(term),
            Product.sku.ilike(term),
            Product.barcode.ilike(term),
        ))
    if is_active is not None:
        query = query.filter(Product.is_active == is_active)
    if category:
        query = query.filter(Product.category == category)
    return query.order_by(Product.name).offset(skip).limit(limit).all()


# -----------------------------
# 2. Stock bajo
# -----------------------------
@router.get("/low-stock", response_model=List[ProductRead])
def read_low_stock(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    products = crud.get_low_stock_products(db)
    crud.notify_low_stock(db, products)
    return products


# -----------------------------
# 3. Exportar a Excel
# -----------------------------
@router.get("/export/excel")
def export_products_excel(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    df = crud.export_products_frame(db)

    output = io.BytesIO()
    with pd.ExcelWriter(output, engine="openpyxl") as writer:
        df.to_excel(writer, index=False, sheet_name="Productos")
    output.seek(0)

    headers = {"Content-Disposition": 'attachment; filename="productos_lucy.xlsx"'}
    return StreamingResponse(
        output,
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        headers=headers,
    )


# -----------------------------
# 4. Carga masiva
# -----------------------------
@router.post("/import", response_model=ImportResponse)
async def import_products(
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    contents = await file.read()
    if not contents:
        raise HTTPException(status_code=400, detail="Archivo vacío.")

    try:
        df = crud.read_products_frame(contents, file.filename)
    except ValidationError:
        raise
    except Exception as e:
        raise HTTPException(status_code=400, detail=f"Error leyendo archivo: {str(e)}")

    results = crud.import_products(db, df)
    return {
        "message": f"Importación completada: {results['success']} productos creados",
        "results": results,
    }


# -----------------------------
# 5. CRUD
# -----------------------------
@router.get("/{product_id}", response_model=ProductDetail)
def read_product(product_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    product = crud.get_product(db, product_id)
    if not product:
        raise HTTPException(status_code=404, detail="Producto no encontrado")

    detail = ProductDetail.model_validate(product)
    movements = (
        db.query(StockMovement)
        .filter(StockMovement.product_id == product_id)
        .order_by(StockMovement.id.desc())
        .limit(20)
        .all()
    )
    detail.stock_movements = [StockMovementRead.model_validate(m) for m in movements]
    return detail


@router.post("/", response_model=ProductRead, status_code=201)
def create_product(
    product_in: ProductCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    if crud.get_product_by_sku(db, product_in.sku):
        raise HTTPException(status_code=400, detail=f"El SKU {product_in.sku} ya existe")

    product = Product(**product_in.model_dump())
    db.add(product)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=400, detail=f"El SKU {product_in.sku} ya existe")
    db.refresh(product)
    return product


@router.put("/{product_id}", response_model=ProductRead)
def update_product(
    product_id: int,
    product_in: ProductUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    product = crud.get_product(db, product_id)
    if not product:
        raise HTTPException(status_code=404, detail="Producto no encontrado")

    data = product_in.model_dump(exclude_unset=True)
    if "sku" in data and data["sku"] != product.sku and crud.get_product_by_sku(db, data["sku"]):
        raise HTTPException(status_code=400, detail=f"El SKU {data['sku']} ya existe")

    for key, value in data.items():
        setattr(product, key, value)
    db.commit()
    db.refresh(product)
    return product


@router.delete("/{product_id}", response_model=MessageResponse)
def delete_product(product_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    product = crud.get_product(db, product_id)
    if not product:
        raise HTTPException(status_code=404, detail="Producto no encontrado")

    db.delete(product)
    db.commit()
    return {"message": "Producto eliminado"}


# -----------------------------
# 6. Movimientos de stock
# -----------------------------
@router.post("/{product_id}/stock-movements", response_model=StockMovementRead, status_code=201)
def add_stock_movement(
    product_id: int,
    movement_in: StockMovementCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return crud.apply_stock_movement(db, product_id, movement_in)
