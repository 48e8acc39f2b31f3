"""
Migration versions package.

This package contains all document migrations. Each migration is a module
with a Migration class that inherits from MigrationBase.

Naming convention: vXXX_description.py, where XXX is the source version
(e.g., v001_add_timestamps_and_likes.py upgrades v1 documents to v2)
"""
