# tests/conftest.py
import os
import tempfile

# point storage somewhere disposable before the app reads its config
_tmp = tempfile.mkdtemp(prefix="modern-mart-tests-")
os.environ["DATABASE_PATH"] = os.path.join(_tmp, "test.db")
os.environ["IMAGES_DIR"] = os.path.join(_tmp, "images")
os.environ["AVATARS_DIR"] = os.path.join(_tmp, "avatars")
os.environ["RATE_LIMIT_MAX_REQUESTS"] = "0"
os.environ["ENVIRONMENT"] = "test"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from modern_mart import models  # noqa: F401
from modern_mart.auth import hash_password, issue_token
from modern_mart.database import Base, get_db, make_engine
from modern_mart.main import app
from modern_mart.models import Brand, Category, Product, ProductImage, User


@pytest.fixture
def engine():
    engine = make_engine("sqlite://", poolclass=StaticPool)
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db_session(session_factory):
    db = session_factory()
    yield db
    db.close()


@pytest.fixture
def client(session_factory):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db_session):
    def _make(email="alice@example.com", password="secret123", first_name="Alice", last_name="Smith", phone="+15550001"):
        user = User(
            email=email,
            password=hash_password(password),
            first_name=first_name,
            last_name=last_name,
            phone=phone,
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user
    return _make


@pytest.fixture
def user(make_user):
    return make_user()


@pytest.fixture
def headers_for(db_session):
    def _headers(u):
        return {"Authorization": f"Bearer {issue_token(db_session, u)}"}
    return _headers


@pytest.fixture
def auth_headers(user, headers_for):
    return headers_for(user)


@pytest.fixture
def catalog(db_session):
    """Two categories, one brand and three products; returns product ids by key."""
    shirts = Category(name="Men - Shirts", description="Shirts")
    ties = Category(name="Accessories - Ties", description="Ties")
    brand = Brand(name="Professional Elite", description="Premium")
    db_session.add_all([shirts, ties, brand])
    db_session.flush()

    shirt = Product(
        name="Classic White Dress Shirt", slug="classic-white-dress-shirt",
        description="Crisp cotton shirt", price=600.0, original_price=800.0,
        stock_quantity=10, category_id=shirts.id, brand_id=brand.id,
        size_chart="s, m,l", featured=True,
        images=[ProductImage(image_url="men-shirts/white.jpg")],
    )
    tie = Product(
        name="Silk Tie", slug="silk-tie", description="Navy silk tie",
        price=250.0, stock_quantity=5, category_id=ties.id, brand_id=brand.id,
    )
    navy = Product(
        name="Navy Shirt", slug="navy-shirt", description="Dark blue shirt",
        price=100.0, discount=10, stock_quantity=3, category_id=shirts.id, brand_id=brand.id,
    )
    db_session.add_all([shirt, tie, navy])
    db_session.commit()
    return {"shirt": shirt.id, "tie": tie.id, "navy": navy.id}
