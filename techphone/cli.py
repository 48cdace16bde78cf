"""Maintenance commands: ``python -m techphone.cli {init-db,create-admin,seed}``."""

import argparse
import logging
import sys

from techphone.core.admin_emails import add_admin_email
from techphone.core.logging import setup_logging
from techphone.core.security import hash_password
from techphone.db.session import SessionLocal, init_db
from techphone.models.orm import Product, Profile, User
from techphone.services import auth_service
from techphone.utils.validators import ValidationError

logger = logging.getLogger("techphone.cli")

SAMPLE_PRODUCTS = [
    {"name": "iPhone 15 Pro Max 256GB", "price": 29990000, "category": "phone", "brand": "Apple",
     "stock": 25, "condition": "new", "rating": 4.9, "featured": True, "is_trending": True},
    {"name": "Samsung Galaxy S24 Ultra", "price": 26990000, "category": "phone", "brand": "Samsung",
     "stock": 18, "condition": "new", "rating": 4.8, "discount": 10, "is_sale": True},
    {"name": "Xiaomi 14", "price": 17990000, "category": "phone", "brand": "Xiaomi",
     "stock": 30, "condition": "new", "rating": 4.6, "is_best_seller": True},
    {"name": "iPhone 13 128GB", "price": 10490000, "category": "phone", "brand": "Apple",
     "stock": 7, "condition": "used", "rating": 4.5},
    {"name": "iPad Air M2", "price": 16990000, "category": "tablet", "brand": "Apple",
     "stock": 12, "condition": "new", "rating": 4.7, "featured": True},
    {"name": "MacBook Air M3 13 inch", "price": 27990000, "category": "laptop", "brand": "Apple",
     "stock": 9, "condition": "new", "rating": 4.9, "is_trending": True},
    {"name": "Apple Watch Series 9", "price": 9990000, "category": "watch", "brand": "Apple",
     "stock": 15, "condition": "new", "rating": 4.7},
    {"name": "AirPods Pro 2", "price": 5990000, "category": "accessory", "brand": "Apple",
     "stock": 40, "condition": "new", "rating": 4.8, "discount": 15, "is_sale": True},
    {"name": "Sạc nhanh Anker 20W", "price": 390000, "category": "accessories", "brand": "Anker",
     "stock": 100, "condition": "new", "rating": 4.4, "is_best_seller": True},
]


def cmd_init_db(args) -> int:
    init_db()
    logger.info("Tables created")
    return 0


def cmd_create_admin(args) -> int:
    init_db()
    email = args.email.strip().lower()
    if add_admin_email(email):
        # login reconciles roles against the allowlist, which is read from the environment
        logger.warning(f"{email} is not in ADMIN_EMAILS; add it there or the next login demotes it to user")
    db = SessionLocal()
    try:
        user = db.query(User).filter(User.email == email).first()
        if user is None:
            profile = auth_service.signup(db, email, args.password, args.full_name)
            logger.info(f"Created admin {email} ({profile.role})")
            return 0

        # existing account: promote and reset the password
        user.hashed_password = hash_password(args.password)
        profile = db.query(Profile).filter(Profile.id == user.id).first()
        if profile is None:
            profile = Profile(id=user.id, email=email, status="active")
            db.add(profile)
        profile.role = "admin"
        if args.full_name:
            profile.full_name = args.full_name
        db.commit()
        logger.info(f"Updated {email} to admin")
        return 0
    except ValidationError as e:
        logger.error(f"Cannot create admin: {e.message}")
        return 1
    finally:
        db.close()


def cmd_seed(args) -> int:
    init_db()
    db = SessionLocal()
    try:
        if db.query(Product).count() and not args.force:
            logger.info("Catalog already has products, skipping (use --force to add anyway)")
            return 0
        db.add_all([Product(**p) for p in SAMPLE_PRODUCTS])
        db.commit()
        logger.info(f"Seeded {len(SAMPLE_PRODUCTS)} products")
        return 0
    finally:
        db.close()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="techphone", description="TechPhone maintenance commands")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("init-db", help="create database tables")
    p.set_defaults(func=cmd_init_db)

    p = sub.add_parser("create-admin", help="create or promote an admin account")
    p.add_argument("--email", required=True)
    p.add_argument("--password", required=True)
    p.add_argument("--full-name", dest="full_name")
    p.set_defaults(func=cmd_create_admin)

    p = sub.add_parser("seed", help="load a sample catalog")
    p.add_argument("--force", action="store_true")
    p.set_defaults(func=cmd_seed)
    return parser


def main(argv=None) -> int:
    setup_logging()
    args = build_parser().parse_args(argv)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
