"""
MySQL/MariaDB Database Connector
"""
from apiforge.connections.connectors.sqlalchemy_connector import SQLAlchemyConnector


class MySQLConnector(SQLAlchemyConnector):
    """MySQL/MariaDB database connector implementation (PyMySQL driver)."""
    label = "MySQL"
    drivername = "mysql+pymysql"
