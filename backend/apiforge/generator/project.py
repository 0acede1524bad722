"""
Backend project synthesis - file map and zip archive for a connection profile
"""
from typing import Dict, Iterable, Optional
from urllib.parse import quote
import io
import zipfile

import structlog

from apiforge.core.errors import ValidationError
from apiforge.generator import templates
from apiforge.generator.templates import JAVASCRIPT, TYPESCRIPT
from apiforge.schemas.connection import DocumentCredentials, RelationalCredentials

logger = structlog.get_logger()

LANGUAGES = (JAVASCRIPT, TYPESCRIPT)
ZIP_MEDIA_TYPE = "application/zip"


def database_url(dialect: str, credentials) -> str:
    """Connection string Prisma reads from DATABASE_URL."""
    if isinstance(credentials, DocumentCredentials):
        return credentials.uri
    if isinstance(credentials, RelationalCredentials):
        user = quote(credentials.user, safe="")
        password = quote(credentials.password, safe="")
        database = quote(credentials.database, safe="")
        return f"{dialect}://{user}:{password}@{credentials.host}:{credentials.port}/{database}"
    return "your_database_connection_string_here"


def environment(dialect: str, credentials) -> Dict[str, str]:
    return {
        "PORT": "3000",
        "NODE_ENV": "development",
        "CLIENT_URL": "http://localhost:5173",
        "DATABASE_URL": f'"{database_url(dialect, credentials)}"',
    }


def generate_project(
    project_name: str,
    dialect: str,
    tables: Iterable,
    language: str = JAVASCRIPT,
    credentials=None
) -> Dict[str, str]:
    """
    Every file of the generated backend, keyed by relative path.

    ``tables`` are table definitions carrying their columns and endpoints.
    Output is deterministic for the same input.
    """
    if language not in LANGUAGES:
        raise ValidationError(f"Unsupported format: {language}")

    tables = list(tables)
    ext = templates.extension(language)
    files: Dict[str, str] = {}

    files[f"server.{ext}"] = templates.server_file(language)

    for table in tables:
        prefix = table.name.lower()
        files[f"routes/{prefix}Routes.{ext}"] = templates.routes_file(table, language)
        files[f"controllers/{prefix}Controller.{ext}"] = templates.controller_file(table, language)
    files[f"routes/index.{ext}"] = templates.routes_index_file(tables, language)

    files[f"middleware/errorHandler.{ext}"] = templates.error_handler_file(language)
    files["prisma/schema.prisma"] = templates.prisma_schema(dialect, tables)
    files[f"config/prisma.{ext}"] = templates.prisma_client_file(language)
    files["package.json"] = templates.package_json(language, project_name, dialect)
    files["README.md"] = templates.readme(project_name, dialect, tables)
    files[".gitignore"] = templates.gitignore()

    env = environment(dialect, credentials)
    files[".env"] = templates.env_file(env)
    files[".env.example"] = templates.env_example(env)

    if language == TYPESCRIPT:
        files["tsconfig.json"] = templates.tsconfig()

    logger.info("project_generated", dialect=dialect, language=language,
                tables=len(tables), files=len(files))
    return files


def archive_name(project_name: str) -> str:
    return f"{project_name}-backend.zip"


def content_disposition(project_name: str) -> str:
    """
    Attachment header for the archive.

    Header values must be latin-1, so names outside plain ASCII get an
    escaped ASCII fallback plus an RFC 5987 ``filename*`` parameter.
    """
    filename = archive_name(project_name)
    encoded = quote(filename, safe="")
    if encoded == filename:
        return f'attachment; filename="{filename}"'

    fallback = filename.encode("ascii", "replace").decode("ascii")
    fallback = fallback.replace("\\", "\\\\").replace('"', '\\"')
    return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{encoded}"


def build_archive(files: Dict[str, str]) -> bytes:
    """Serialize named text blobs into a deflated zip."""
    output = io.BytesIO()
    with zipfile.ZipFile(output, "w", compression=zipfile.ZIP_DEFLATED, compresslevel=9) as archive:
        for name in sorted(files):
            archive.writestr(name, files[name])
    return output.getvalue()
