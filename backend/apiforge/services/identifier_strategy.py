"""
Identifier Strategy - how primary keys are declared and generated per dialect.
"""
from typing import Optional, Union
import uuid

from cuid2 import cuid_wrapper

from apiforge.core.errors import ConfigurationError
from apiforge.models.connection import Dialect
from apiforge.models.table import IdType
from apiforge.query.dialects import get_dialect

_generate_cuid = cuid_wrapper()

ID_COLUMN_DDL = {
    Dialect.MYSQL: {
        IdType.AUTO_INCREMENT: "id INT AUTO_INCREMENT PRIMARY KEY",
        IdType.UUID: "id CHAR(36) PRIMARY KEY",
        IdType.CUID: "id CHAR(24) PRIMARY KEY",
    },
    Dialect.POSTGRESQL: {
        IdType.AUTO_INCREMENT: "id SERIAL PRIMARY KEY",
        IdType.UUID: "id UUID PRIMARY KEY DEFAULT gen_random_uuid()",
        IdType.CUID: "id CHAR(24) PRIMARY KEY",
    },
}


def default_id_type(dialect: Union[Dialect, str]) -> IdType:
    """Id type used when a table is created without one."""
    return IdType.AUTO_INCREMENT if get_dialect(dialect).is_relational else IdType.MONGODB_ID


def column_definition_for(dialect: Union[Dialect, str], id_type: Union[IdType, str]) -> str:
    """
    DDL fragment declaring the identifier column.

    Raises:
        ConfigurationError: document-store dialect, or an id type the
            dialect cannot declare
    """
    strategy = get_dialect(dialect)
    if not strategy.is_relational:
        raise ConfigurationError(f"{strategy.name} does not declare identifier columns")

    id_type = strategy.check_id_type(id_type)
    return ID_COLUMN_DDL[strategy.tag][id_type]


def generate_id(id_type: Union[IdType, str]) -> Optional[str]:
    """Caller-side id for UUID and CUID tables; None when the store assigns it."""
    try:
        id_type = IdType(id_type)
    except ValueError:
        raise ConfigurationError(f"Unsupported id type: {id_type}")

    if id_type is IdType.UUID:
        return str(uuid.uuid4())
    if id_type is IdType.CUID:
        return _generate_cuid()
    return None


def requires_follow_up(dialect: Union[Dialect, str], id_type: Union[IdType, str]) -> bool:
    """True when a create must be followed by a read of the inserted row."""
    strategy = get_dialect(dialect)
    strategy.check_id_type(id_type)
    return strategy.is_relational and not strategy.supports_returning
