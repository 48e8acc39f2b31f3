"""
Migration v003: Wrap the article list in a collection object

"articles": [...] becomes "articles": {"list": [...]}. Articles and their
order are unchanged.
"""

from typing import List

from linkstash.migrations.migration_base import MigrationBase
from linkstash.migrations.schema import ArticleCollectionV4, ArticleV3


class Migration(MigrationBase):
    """Nest the article list under a container object."""

    version = 3
    description = "Wrap article list in a collection object"

    def up(self, records: List[ArticleV3]) -> ArticleCollectionV4:
        return ArticleCollectionV4(articles=list(records))
