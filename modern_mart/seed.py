"""
Database management script
Creates/resets tables, seeds sample catalog data and imports products from JSON

    python -m modern_mart.seed --init
    python -m modern_mart.seed --reset --seed
    python -m modern_mart.seed --import data.json
"""
import re
import json
import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from . import config
from .auth import hash_password
from .database import SessionLocal, create_tables, drop_tables
from .models import Category, Brand, Product, ProductImage, User

logger = logging.getLogger(__name__)

CATEGORIES = [
    ("Men - Shirts", "Professional shirts for men"),
    ("Men - Pants", "Professional pants for men"),
    ("Men - Shoes", "Professional shoes for men"),
    ("Women - Shirts", "Professional shirts for women"),
    ("Women - Pants", "Professional pants for women"),
    ("Women - Shoes", "Professional shoes for women"),
    ("Accessories - Ties", "Professional ties"),
    ("Accessories - Watches", "Professional watches"),
    ("Accessories - Bags", "Professional bags"),
    ("Accessories - Socks", "Professional socks"),
]

BRANDS = [
    ("Professional Elite", "Premium professional wear"),
    ("Corporate Classic", "Classic corporate attire"),
    ("Executive Style", "Executive-level professional wear"),
    ("Interview Ready", "Specialized interview outfits"),
]

ALL_SIZES = "xs,s,m,l,xl,xxl"

# (name, description, price, stock, category, brand, size_chart)
SAMPLE_PRODUCTS = [
    ("Classic White Dress Shirt", "Premium white dress shirt for professional interviews", 89.99, 25, "Men - Shirts", "Professional Elite", ALL_SIZES),
    ("Professional Navy Dress Shirt", "Elegant navy dress shirt for formal interviews", 79.99, 20, "Men - Shirts", "Corporate Classic", ALL_SIZES),
    ("Women's Professional Blouse", "Professional women's blouse with modern fit", 69.99, 30, "Women - Shirts", "Executive Style", ALL_SIZES),
    ("Classic Dress Pants - Black", "Classic black dress pants for professional wear", 129.99, 50, "Men - Pants", "Interview Ready", ALL_SIZES),
    ("Women's Professional Trousers", "Elegant professional trousers for women", 119.99, 40, "Women - Pants", "Corporate Classic", ALL_SIZES),
    ("Leather Dress Shoes - Brown", "Professional brown leather dress shoes", 199.99, 35, "Men - Shoes", "Professional Elite", ALL_SIZES),
    ("Women's Professional Heels", "Professional heels suitable for interviews", 159.99, 28, "Women - Shoes", "Executive Style", ALL_SIZES),
    ("Silk Professional Tie Set", "Set of professional silk ties for interviews", 49.99, 60, "Accessories - Ties", "Interview Ready", ""),
    ("Professional Leather Watch", "Elegant leather watch for professional settings", 299.99, 15, "Accessories - Watches", "Professional Elite", ""),
    ("Executive Leather Briefcase", "Professional leather briefcase for documents", 249.99, 20, "Accessories - Bags", "Corporate Classic", ""),
    ("Professional Dress Socks Pack", "Pack of professional dress socks", 24.99, 100, "Accessories - Socks", "Interview Ready", ALL_SIZES),
]

TEST_USER = {
    "email": "test@example.com",
    "password": "password123",
    "first_name": "Test",
    "last_name": "User",
    "phone": "+1234567890",
}

# image path fragment -> category, checked in order
IMAGE_CATEGORY_HINTS = [
    ("women-shirts", "Women - Shirts"),
    ("women-pants", "Women - Pants"),
    ("women-shoes", "Women - Shoes"),
    ("men-shirts", "Men - Shirts"),
    ("men-pants", "Men - Pants"),
    ("men-shoes", "Men - Shoes"),
    ("ties", "Accessories - Ties"),
    ("watches", "Accessories - Watches"),
    ("bags", "Accessories - Bags"),
    ("socks", "Accessories - Socks"),
]
DEFAULT_CATEGORY = "Accessories - Bags"
DEFAULT_BRAND = "Professional Elite"
DEFAULT_STOCK = 50


def slugify(name: str) -> str:
    slug = re.sub(r"[^a-z0-9\s-]", "", name.lower())
    slug = re.sub(r"\s+", "-", slug.strip())
    return re.sub(r"-+", "-", slug)


def category_for_image(image_path: str) -> str:
    # women-* before men-* since "men-shirts" is a substring of "women-shirts"
    for hint, category in IMAGE_CATEGORY_HINTS:
        if hint in image_path:
            return category
    return DEFAULT_CATEGORY


def _get_or_create(db: Session, model, name: str, description: Optional[str] = None):
    row = db.query(model).filter(model.name == name).first()
    if row is None:
        row = model(name=name, description=description)
        db.add(row)
        db.flush()
    return row


def seed_categories_and_brands(db: Session):
    categories = {name: _get_or_create(db, Category, name, desc) for name, desc in CATEGORIES}
    brands = {name: _get_or_create(db, Brand, name, desc) for name, desc in BRANDS}
    return categories, brands


def seed_database(db: Session) -> Dict[str, int]:
    """Insert sample categories, brands, products and the test user (idempotent)."""
    categories, brands = seed_categories_and_brands(db)

    created = 0
    for name, description, price, stock, category, brand, sizes in SAMPLE_PRODUCTS:
        slug = slugify(name)
        if db.query(Product).filter(Product.slug == slug).first():
            continue
        db.add(Product(
            name=name,
            slug=slug,
            description=description,
            price=price,
            stock_quantity=stock,
            category_id=categories[category].id,
            brand_id=brands[brand].id,
            size_chart=sizes,
        ))
        created += 1

    if not db.query(User).filter(User.email == TEST_USER["email"]).first():
        db.add(User(
            email=TEST_USER["email"],
            password=hash_password(TEST_USER["password"]),
            first_name=TEST_USER["first_name"],
            last_name=TEST_USER["last_name"],
            phone=TEST_USER["phone"],
            is_verified=True,
        ))

    db.commit()
    logger.info(f"Seeded {created} products; test user {TEST_USER['email']} / {TEST_USER['password']}")
    return {"categories": len(categories), "brands": len(brands), "products": created}


def import_products(db: Session, items: List[Dict[str, Any]]) -> int:
    """Upsert products from records shaped like {id, name, price, images}.

    Rows match by id; an existing row with the same slug under another id is
    replaced, so the last record for a name wins.
    """
    categories, brands = seed_categories_and_brands(db)

    for item in items:
        images = item.get("images") or ""
        slug = slugify(item["name"])

        # slug is unique; another row holding it is replaced
        clash = db.query(Product).filter(Product.slug == slug, Product.id != item["id"]).first()
        if clash is not None:
            logger.info(f"Replacing product {clash.id} ({slug}) with {item['id']}")
            db.delete(clash)
            db.flush()

        product = db.get(Product, item["id"])
        if product is None:
            product = Product(id=item["id"])
            db.add(product)
        product.name = item["name"]
        product.description = item.get("description") or item["name"]
        product.price = item["price"]
        product.stock_quantity = DEFAULT_STOCK
        product.category_id = categories[category_for_image(images)].id
        product.brand_id = brands[DEFAULT_BRAND].id
        product.slug = slug

        image_url = images.replace("/database/images/", "")
        if image_url:
            product.images = [ProductImage(image_url=image_url)]
        db.flush()

    db.commit()
    logger.info(f"Imported {len(items)} products")
    return len(items)


def main(argv: Optional[List[str]] = None):
    import argparse

    parser = argparse.ArgumentParser(description="Database management script")
    parser.add_argument("--init", action="store_true", help="Initialize database")
    parser.add_argument("--reset", action="store_true", help="Drop and recreate all tables")
    parser.add_argument("--seed", action="store_true", help="Insert sample catalog data and a test user")
    parser.add_argument("--import", dest="import_path", metavar="PATH", help="Import products from a JSON file")
    args = parser.parse_args(argv)

    logging.basicConfig(level=config.LOG_LEVEL, format="%(levelname)s %(message)s")

    if args.reset:
        drop_tables()
    if args.reset or args.init or args.seed or args.import_path:
        create_tables()

    db = SessionLocal()
    try:
        if args.seed:
            seed_database(db)
        if args.import_path:
            with open(args.import_path, "r", encoding="utf-8") as f:
                import_products(db, json.load(f))
    finally:
        db.close()


if __name__ == "__main__":
    main()
