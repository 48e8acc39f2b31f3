"""
Migration v002: Soft delete flag and sorted tags

Adds `isDeleted` (false) to every article and stores tags in ascending
order.
"""

from typing import List

from linkstash.migrations.migration_base import MigrationBase
from linkstash.migrations.schema import ArticleV2, ArticleV3


class Migration(MigrationBase):
    """Add isDeleted flag and sort tags."""

    version = 2
    description = "Add isDeleted flag to articles and sort their tags"

    def up(self, records: List[ArticleV2]) -> List[ArticleV3]:
        return [
            ArticleV3(
                tags=sorted(article.tags),
                created=article.created,
                updated=article.updated,
                likes=article.likes,
                is_deleted=False,
                fields=dict(article.fields)
            )
            for article in records
        ]
