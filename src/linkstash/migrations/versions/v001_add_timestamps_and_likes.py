"""
Migration v001: Add timestamps and likes to articles

Articles saved before v2 carry no creation time. Every article gets
`created` and `updated` set to a fixed epoch, advanced by one second per
article so the original order survives sorting by date. Every article starts
with zero likes.
"""

from datetime import timedelta
from typing import List

from linkstash.migrations.migration_base import MigrationBase
from linkstash.migrations.schema import (
    TIMESTAMP_EPOCH,
    ArticleV1,
    ArticleV2,
    format_timestamp,
)


class Migration(MigrationBase):
    """Seed created/updated timestamps and a likes counter."""

    version = 1
    description = "Add created/updated timestamps and likes counter to articles"

    def up(self, records: List[ArticleV1]) -> List[ArticleV2]:
        migrated = []
        for index, article in enumerate(records):
            timestamp = format_timestamp(TIMESTAMP_EPOCH + timedelta(seconds=index))
            migrated.append(ArticleV2(
                tags=list(article.tags),
                created=timestamp,
                updated=timestamp,
                likes=0,
                fields=dict(article.fields)
            ))
        return migrated
