import pytest

from db import get_session
from main import create_app
from tests.factories import ALL_FACTORIES, ColumnFactory, RecordFactory, TemplateFactory


@pytest.fixture
def app(tmp_path):
    """Flask app bound to a throwaway SQLite database."""
    app = create_app(f"sqlite:///{tmp_path / 'test.sqlite'}")
    app.config["TESTING"] = True
    return app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def db_session(app):
    session = get_session()
    for f in ALL_FACTORIES:
        f._meta.sqlalchemy_session = session
    yield session
    session.close()


@pytest.fixture
def people(db_session):
    """Template [Name:string(required), Age:number, Active:boolean]."""
    template = TemplateFactory(name="People")
    ColumnFactory(template=template, name="Name", data_type="string", required=True)
    ColumnFactory(template=template, name="Age", data_type="number")
    ColumnFactory(template=template, name="Active", data_type="boolean")
    return template


@pytest.fixture
def john(people):
    """Existing record: John, 30, active."""
    name, age, active = people.columns
    return RecordFactory(template=people, values={name: "John", age: "30", active: "true"})
