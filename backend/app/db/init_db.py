"""
数据库初始化脚本
"""
from decimal import Decimal

from sqlalchemy.orm import Session

from app.core.logging_config import get_logger
from app.core.security import hash_passkey
from app.db.database import engine, Base, SessionLocal
from app.models import Product, Role, Room, RoomStock, User, View

logger = get_logger(__name__)

DEMO_PASSKEY = "1234"

DEMO_PRODUCTS = [
    ("Water", "2.50", 4),
    ("Soda", "3.00", 4),
    ("Beer", "4.50", 4),
    ("Wine", "8.00", 2),
    ("Chips", "2.00", 4),
    ("Chocolate", "3.50", 4),
    ("Nuts", "4.00", 3),
    ("Coffee", "3.00", 4),
]

DEMO_ROOMS = [
    ("101", 1), ("102", 1), ("103", 1),
    ("201", 2), ("202", 2), ("203", 2),
]

DEMO_ROLES = [
    ("Admin", [View.ADMIN, View.MANAGEMENT, View.FRONT_DESK, View.ROOMS]),
    ("Management", [View.MANAGEMENT, View.FRONT_DESK, View.ROOMS]),
    ("Front Desk", [View.FRONT_DESK, View.ROOMS]),
]

DEMO_USERS = [
    ("admin", "Admin"),
    ("manager", "Management"),
    ("frontdesk", "Front Desk"),
]


def seed_demo_data(db: Session) -> bool:
    """写入演示数据；数据库中已有角色时跳过"""
    if db.query(Role).first() is not None:
        return False

    products = [
        Product(name=name, price=Decimal(price), standard_stock=stock)
        for name, price, stock in DEMO_PRODUCTS
    ]
    db.add_all(products)
    db.flush()

    for number, building in DEMO_ROOMS:
        room = Room(number=number, building=building)
        for product in products:
            room.stock_entries.append(RoomStock(product_id=product.id, quantity=product.standard_stock))
        db.add(room)

    roles = {}
    for name, views in DEMO_ROLES:
        role = Role(name=name)
        role.set_permissions(views)
        db.add(role)
        roles[name] = role
    db.flush()

    for username, role_name in DEMO_USERS:
        db.add(User(username=username, passkey_hash=hash_passkey(DEMO_PASSKEY), role_id=roles[role_name].id))

    db.commit()
    logger.info("demo data seeded", extra={"products": len(products), "rooms": len(DEMO_ROOMS)})
    return True


def init_db(seed: bool = False):
    """初始化数据库，创建所有表"""
    Base.metadata.create_all(bind=engine)
    logger.info("database tables created")
    if seed:
        db = SessionLocal()
        try:
            seed_demo_data(db)
        finally:
            db.close()


if __name__ == "__main__":
    from app.core.logging_config import configure_logging

    configure_logging()
    init_db(seed=True)
