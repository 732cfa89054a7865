"""Persistence: SQLAlchemy engine, models, repositories, migrations."""
