from scanbeauty.models.db import Contact, ContactProduct, Product

__all__ = [
    "Contact",
    "ContactProduct",
    "Product",
]
