# catering/routers/catalog.py: flavors and menu items
import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from catering.db import get_db
from catering.errors import CatalogError
from catering.middleware.admin_auth import require_admin
from catering.models.catalog import Flavor, MenuItem
from catering.models.order import Order
from catering.schemas import FlavorIn, FlavorPatch, MenuItemIn, MenuItemPatch
from catering.utils.enums import OrderStatus

logger = logging.getLogger(__name__)

router = APIRouter(tags=["catalog"])


def flavor_dict(f: Flavor) -> dict:
    return {
        "id": f.id,
        "name": f.name,
        "description": f.description,
        "available": bool(f.available),
        "sort_order": f.sort_order,
    }


def menu_item_dict(m: MenuItem) -> dict:
    return {
        "id": m.id,
        "name": m.name,
        "description": m.description,
        "price_cents": m.price_cents,
        "category": m.category,
        "available": bool(m.available),
        "sort_order": m.sort_order,
    }


def _next_sort_order(db: Session, model) -> int:
    return (db.query(func.max(model.sort_order)).scalar() or 0) + 1


def flavor_in_use(db: Session, name: str) -> bool:
    """True when an order that is not completed names the flavor in one of its boxes."""
    rows = db.query(Order.order_data).filter(Order.status != OrderStatus.COMPLETED.value).all()
    for (data,) in rows:
        for item in (data or {}).get("items", []):
            if any(f.get("name") == name for f in item.get("flavors", [])):
                return True
    return False


# ---------- FLAVORS ----------
@router.get("/flavors")
def list_flavors(db: Session = Depends(get_db)):
    rows = db.query(Flavor).order_by(Flavor.sort_order, Flavor.id).all()
    return [flavor_dict(f) for f in rows]


@router.post("/flavors", status_code=201)
def create_flavor(payload: FlavorIn, db: Session = Depends(get_db), admin: str = Depends(require_admin)):
    name = payload.name.strip()
    if not name:
        raise HTTPException(status_code=400, detail="name is required")
    if db.query(Flavor).filter(Flavor.name == name).first():
        raise HTTPException(status_code=400, detail=f"Flavor '{name}' already exists")

    flavor = Flavor(name=name, description=payload.description, available=True,
                    sort_order=_next_sort_order(db, Flavor))
    db.add(flavor)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=400, detail=f"Flavor '{name}' already exists")
    db.refresh(flavor)
    logger.info("Flavor %r added by %s", name, admin)
    return flavor_dict(flavor)


@router.patch("/flavors/{name}")
def update_flavor(name: str, payload: FlavorPatch, db: Session = Depends(get_db),
                  admin: str = Depends(require_admin)):
    flavor = db.query(Flavor).filter(Flavor.name == name).first()
    if not flavor:
        raise HTTPException(status_code=404, detail="Flavor not found")

    changes = payload.model_dump(exclude_unset=True)
    if not changes:
        # empty body -> toggle
        flavor.available = not flavor.available
    for key, value in changes.items():
        if value is not None:
            setattr(flavor, key, value)
    db.commit()
    db.refresh(flavor)
    return flavor_dict(flavor)


@router.delete("/flavors/{name}")
def delete_flavor(name: str, db: Session = Depends(get_db), admin: str = Depends(require_admin)):
    flavor = db.query(Flavor).filter(Flavor.name == name).first()
    if not flavor:
        raise HTTPException(status_code=404, detail="Flavor not found")
    if flavor_in_use(db, name):
        raise CatalogError(f"Flavor '{name}' is used by open orders; mark it unavailable instead")
    db.delete(flavor)
    db.commit()
    logger.info("Flavor %r deleted by %s", name, admin)
    return {"deleted": name}


# ---------- MENU ITEMS ----------
@router.get("/menu-items")
def list_menu_items(db: Session = Depends(get_db)):
    rows = (
        db.query(MenuItem)
        .filter(MenuItem.available.is_(True))
        .order_by(MenuItem.category, MenuItem.sort_order, MenuItem.id)
        .all()
    )
    return [menu_item_dict(m) for m in rows]


@router.post("/menu-items", status_code=201)
def create_menu_item(payload: MenuItemIn, db: Session = Depends(get_db), admin: str = Depends(require_admin)):
    name, category = payload.name.strip(), payload.category.strip()
    if not name or not category or payload.price_cents is None:
        raise HTTPException(status_code=400, detail="name, price_cents and category are required")
    if db.query(MenuItem).filter(MenuItem.name == name).first():
        raise HTTPException(status_code=400, detail=f"Menu item '{name}' already exists")

    item = MenuItem(name=name, category=category, price_cents=payload.price_cents,
                    description=payload.description, available=True,
                    sort_order=_next_sort_order(db, MenuItem))
    db.add(item)
    db.commit()
    db.refresh(item)
    return menu_item_dict(item)


@router.patch("/menu-items/{item_id}")
def update_menu_item(item_id: int, payload: MenuItemPatch, db: Session = Depends(get_db),
                     admin: str = Depends(require_admin)):
    item = db.get(MenuItem, item_id)
    if not item:
        raise HTTPException(status_code=404, detail="Menu item not found")

    for key, value in payload.model_dump(exclude_none=True).items():
        setattr(item, key, value)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=400, detail="Menu item name already exists")
    db.refresh(item)
    return menu_item_dict(item)


@router.delete("/menu-items/{item_id}")
def delete_menu_item(item_id: int, db: Session = Depends(get_db), admin: str = Depends(require_admin)):
    item = db.get(MenuItem, item_id)
    if not item:
        raise HTTPException(status_code=404, detail="Menu item not found")
    db.delete(item)
    db.commit()
    return {"deleted": item_id}
