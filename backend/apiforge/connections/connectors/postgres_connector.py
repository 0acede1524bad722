"""
PostgreSQL Database Connector
"""
from apiforge.connections.connectors.sqlalchemy_connector import SQLAlchemyConnector


class PostgreSQLConnector(SQLAlchemyConnector):
    """PostgreSQL database connector implementation (psycopg2 driver)."""
    label = "PostgreSQL"
    drivername = "postgresql+psycopg2"
