"""
Startup migration tests: databases built by create_all get stamped, then upgraded.
"""

from sqlalchemy import inspect, text

from cnc_quoting import main
from cnc_quoting.database import engine


def _drop_alembic_version():
    with engine.begin() as conn:
        conn.execute(text("DROP TABLE IF EXISTS alembic_version"))


def test_create_all_database_is_stamped_at_base_revision():
    _drop_alembic_version()
    assert main._bootstrapped_without_alembic()

    try:
        main._run_migrations()
        assert "alembic_version" in inspect(engine).get_table_names()
        with engine.connect() as conn:
            version = conn.execute(text("SELECT version_num FROM alembic_version")).scalar()
        assert version == "5c0e2a91d7b4"
        assert not main._bootstrapped_without_alembic()
    finally:
        _drop_alembic_version()


def test_partial_schema_is_not_treated_as_bootstrapped():
    with engine.begin() as conn:
        conn.execute(text("DROP TABLE materials"))
    assert not main._bootstrapped_without_alembic()
