# storefront/menu_service/main.py
from fastapi import FastAPI, HTTPException

app = FastAPI(title="Menu Service (dev mock)")


MENU = {
    "m-smash": {"_id": "m-smash", "name": "Smash Burger", "category": "sandwich", "section": "Burgers", "price": "12.90", "isAvailable": True, "isFeatured": True},
    "m-fries": {"_id": "m-fries", "name": "Midnight Fries", "category": "other", "section": "Sides", "price": "5.90", "isAvailable": True},
    "m-bowl": {"_id": "m-bowl", "name": "Global Bowl", "category": "bowl", "section": "Global Bowls", "price": "16.50", "isAvailable": True},
    "m-latte": {
        "_id": "m-latte",
        "name": "Latte",
        "category": "drink",
        "price": "4.80",
        "isAvailable": True,
        "subItems": [{"name": "Regular", "price": "4.80"}, {"name": "Large", "price": "5.60"}],
    },
    "m-toastie": {"_id": "m-toastie", "name": "Gourmet Toastie", "category": "sandwich", "section": "Gourmet Toasties", "price": "11.00", "isAvailable": False},
}


@app.get("/menu")
def list_menu():
    return {"items": list(MENU.values())}


@app.get("/menu/{item_id}")
def get_menu_item(item_id: str):
    item = MENU.get(item_id)
    if not item:
        raise HTTPException(status_code=404, detail="Menu item not found")
    return item
