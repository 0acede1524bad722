"""
Generator Package - Express + Prisma backend export
"""
from apiforge.generator.project import (
    generate_project, build_archive, archive_name, content_disposition, LANGUAGES, ZIP_MEDIA_TYPE
)

__all__ = ["generate_project", "build_archive", "archive_name", "content_disposition", "LANGUAGES", "ZIP_MEDIA_TYPE"]
