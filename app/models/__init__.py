from app.models.item import Item, Variant
from app.models.inventory import MovementType, StockMovement
