from decimal import Decimal
import pytest
from server import create_app
from server.extension import db as _db
from server.models import User, Family


TEST_CONFIG = {
    "TESTING": True,
    "SQLALCHEMY_DATABASE_URI": "sqlite://",
    "SQLALCHEMY_ENGINE_OPTIONS": {},
    "JWT_SECRET_KEY": "test-secret-key-with-enough-length-for-hs256",
    "SEED_ADMIN": False,
    "SCHEDULER_ENABLED": False,
    "SANDA_REJECT_DUPLICATE_MONTHS": False,
}


@pytest.fixture
def app():
    app = create_app(TEST_CONFIG)
    with app.app_context():
        yield app
        _db.session.remove()
        _db.drop_all()


@pytest.fixture
def db(app):
    return _db


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def admin(db):
    user = User(name="Masjid Admin", email="admin@masjid.test", role="admin")
    user.set_password("admin123")
    db.session.add(user)
    db.session.commit()
    return user


@pytest.fixture
def auth_headers(client, admin):
    res = client.post("/login", json={"email": "admin@masjid.test", "password": "admin123"})
    assert res.status_code == 200
    return {"Authorization": f"Bearer {res.get_json()['access_token']}"}


@pytest.fixture
def make_family(db):
    counter = {"n": 0}

    def _make(**overrides):
        counter["n"] += 1
        data = {
            "family_name": f"Family {counter['n']}",
            "card_number": f"CARD-{counter['n']:03d}",
            "root_no": "Root-1",
            "phone": "0771234567",
            "whatsapp_no": "+94771234567",
            "sanda_amount": Decimal("1000"),
            "amount_type": "monthly",
            "status": "active",
        }
        data.update(overrides)
        family = Family(**data)
        db.session.add(family)
        db.session.commit()
        return family

    return _make
