"""
测试公共夹具

使用临时文件SQLite（每个会话独立连接），每个测试重建所有表。
"""
import os
import tempfile

os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(tempfile.mkdtemp(), 'minibar-test.db')}"
os.environ["SEED_DEMO_DATA"] = "false"
os.environ["BCRYPT_ROUNDS"] = "4"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402

from app.core import security  # noqa: E402
from app.db.database import Base, SessionLocal, engine  # noqa: E402
from app.db.init_db import DEMO_PASSKEY, seed_demo_data  # noqa: E402
from app.main import app  # noqa: E402
from app.models import Product, Room  # noqa: E402
from app.services import room_locks  # noqa: E402


@pytest.fixture(autouse=True)
def fresh_database():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    security.tokens.clear()
    room_locks._room_locks.clear()
    yield
    security.tokens.clear()


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def seeded():
    session = SessionLocal()
    try:
        seed_demo_data(session)
    finally:
        session.close()


@pytest.fixture
def product_ids(seeded):
    """{商品名称: ID}"""
    session = SessionLocal()
    try:
        return {p.name: p.id for p in session.query(Product).all()}
    finally:
        session.close()


@pytest.fixture
def client():
    return TestClient(app)


def login(client, username, passkey=DEMO_PASSKEY):
    response = client.post("/login", json={"username": username, "passkey": passkey})
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['accessToken']}"}


@pytest.fixture
def admin_headers(client, seeded):
    return login(client, "admin")


@pytest.fixture
def manager_headers(client, seeded):
    return login(client, "manager")


@pytest.fixture
def frontdesk_headers(client, seeded):
    return login(client, "frontdesk")


def room_stock(room_number):
    """直接从数据库读取房间库存"""
    session = SessionLocal()
    try:
        room = session.query(Room).filter(Room.number == room_number).one()
        return room.stock_map()
    finally:
        session.close()


@pytest.fixture
def file_session_factory(tmp_path):
    """文件SQLite，用于多线程测试（每个线程独立连接）"""
    file_engine = create_engine(
        f"sqlite:///{tmp_path / 'minibar.db'}",
        connect_args={"check_same_thread": False, "timeout": 30},
    )
    Base.metadata.create_all(bind=file_engine)
    factory = sessionmaker(autocommit=False, autoflush=False, bind=file_engine)
    session = factory()
    try:
        seed_demo_data(session)
    finally:
        session.close()
    yield factory
    file_engine.dispose()
