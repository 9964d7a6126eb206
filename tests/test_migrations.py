from __future__ import annotations

import pytest
from alembic import command
from sqlalchemy import create_engine, inspect

import manage
from app.core.billing import models as billing_models  # noqa: F401
from app.core.content import models as content_models  # noqa: F401
from app.core.messages import models as messages_models  # noqa: F401
from app.core.subscriptions import models as subscriptions_models  # noqa: F401
from app.database.base import Base


@pytest.fixture
def migrated_url(tmp_path):
    url = f"sqlite:///{tmp_path / 'migrated.db'}"
    cfg = manage.get_alembic_config()
    cfg.set_main_option("sqlalchemy.url", url)
    command.upgrade(cfg, "head")
    yield url, cfg


def test_upgrade_creates_every_model_table(migrated_url):
    url, _ = migrated_url
    engine = create_engine(url)
    try:
        inspector = inspect(engine)
        tables = set(inspector.get_table_names()) - {"alembic_version"}
        assert tables == set(Base.metadata.tables)

        for name, table in Base.metadata.tables.items():
            columns = {col["name"]: col for col in inspector.get_columns(name)}
            assert set(columns) == {col.name for col in table.columns}, name
            for col in table.columns:
                if col.primary_key:
                    continue
                assert columns[col.name]["nullable"] == col.nullable, (name, col.name)

            indexes = {ix["name"]: ix for ix in inspector.get_indexes(name)}
            for ix in table.indexes:
                assert ix.name in indexes, (name, ix.name)
                assert bool(indexes[ix.name]["unique"]) == bool(ix.unique), ix.name
    finally:
        engine.dispose()


def test_downgrade_drops_everything(migrated_url):
    url, cfg = migrated_url
    command.downgrade(cfg, "base")

    engine = create_engine(url)
    try:
        assert set(inspect(engine).get_table_names()) <= {"alembic_version"}
    finally:
        engine.dispose()
