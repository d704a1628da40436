import pytest

from library import create_app
from library.config import TestConfig
from library.extensions import db
from library.models.borrower import Borrower, BorrowerGroup
from library.models.title import Title
from library.models.volume import Volume


@pytest.fixture
def app():
    # fresh in-memory database per test
    app = create_app(TestConfig)
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def session(app):
    return db.session


@pytest.fixture
def make_title(session):
    def _make(title="Dune"):
        t = Title(title=title)
        session.add(t)
        session.commit()
        return t
    return _make


@pytest.fixture
def make_volume(session, make_title):
    counter = {"n": 0}

    def _make(barcode=None, title=None, condition="good", loanable=True, loan_status="available"):
        counter["n"] += 1
        title = title or make_title()
        v = Volume(
            title_id=title.id,
            copy_number=counter["n"],
            barcode=barcode or f"VOL-{counter['n']:06d}",
            condition=condition,
            loanable=loanable,
            loan_status=loan_status,
        )
        session.add(v)
        session.commit()
        return v
    return _make


@pytest.fixture
def make_group(session):
    def _make(name="Family", loan_duration_days=30):
        g = BorrowerGroup(name=name, loan_duration_days=loan_duration_days)
        session.add(g)
        session.commit()
        return g
    return _make


@pytest.fixture
def make_borrower(session):
    def _make(name="Ada Lovelace", email="ada@example.com", group=None):
        b = Borrower(name=name, email=email, group_id=group.id if group else None)
        session.add(b)
        session.commit()
        return b
    return _make


@pytest.fixture
def fresh(session):
    """Reload a row, bypassing whatever the test's identity map still holds."""
    def _get(model, pk):
        session.expire_all()
        return session.get(model, pk)
    return _get
