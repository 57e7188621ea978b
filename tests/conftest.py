import os
import sys

import pytest

# Path setup before any project imports to satisfy E402
ROOT = os.path.dirname(__file__)
PARENT = os.path.abspath(os.path.join(ROOT, ".."))
if PARENT not in sys.path:  # pragma: no cover - environment dependent
    sys.path.insert(0, PARENT)

from tests.fakes import FakeImageStore  # noqa: E402
from tests.helpers import USERS  # noqa: E402


def _seed_rbac() -> None:
    from catalog.db import get_session
    from catalog.models import Role, UserRole
    from catalog.roles import DEFAULT_HIERARCHY

    db = get_session()
    try:
        ids = {}
        for name, level in DEFAULT_HIERARCHY.items():
            role = Role(name=name, hierarchy_level=level)
            db.add(role)
            db.flush()
            ids[name] = role.id
        for uid, name in USERS.items():
            db.add(UserRole(user_id=uid, role_id=ids[name]))
        db.commit()
    finally:
        db.close()


@pytest.fixture
def app(tmp_path):
    from catalog.app_factory import create_app
    from catalog.db import create_all

    url = f"sqlite:///{tmp_path / 'test_app.db'}"
    app = create_app(
        {
            "TESTING": True,
            "SECRET_KEY": "test",
            "database_url": url,
            "blob_bucket": "",
            "jwt_secrets": ["test-secret", "old-secret"],
            "FORCE_DB_REINIT": True,
        }
    )
    with app.app_context():
        create_all()
        _seed_rbac()
    app.image_store = FakeImageStore()  # type: ignore[attr-defined]
    return app


@pytest.fixture
def client(app):
    c = app.test_client()
    return c


@pytest.fixture
def store(app) -> FakeImageStore:
    return app.image_store  # type: ignore[attr-defined]


@pytest.fixture
def seed_product(app):
    from catalog.db import get_session
    from catalog.models import Product
    from catalog.schemas import empty_images

    def _seed(code: str, **fields):
        values = {
            "code": code,
            "name": f"Product {code}",
            "description": f"Description {code}",
            "price": 0,
            "stock": 0,
            "rhino_code": code,
            "rhino_description": f"Description {code}",
            "brands": [],
            "images": empty_images(),
            "status": "draft",
        }
        values.update(fields)
        db = get_session()
        try:
            db.add(Product(**values))
            db.commit()
        finally:
            db.close()
        return code

    return _seed


@pytest.fixture
def seed_legacy(app):
    from catalog.db import get_session
    from catalog.models import ProductCode

    def _seed(code: str | None, *, name: str = "", description: str = "", items=None, id: str | None = None):
        row = ProductCode(
            compatibility_data={"generated": name, "items": items or []},
            description_data={"generated": description},
            product_code_data={"generated": code} if code is not None else None,
        )
        if id is not None:
            row.id = id
        db = get_session()
        try:
            db.add(row)
            db.commit()
            return row.id
        finally:
            db.close()

    return _seed
