"""
Record shapes per schema version

The records area of the document (top-level key "articles") changes shape
between releases. Each supported version has an explicit type here; a step
converts one shape into the next.

Each record keeps the object it was read from in `fields`. Writing it back
updates the known keys in place and appends new ones, so fields the
application does not interpret (title, url, ...) keep their values and
positions.

Versions:
- v1: list of articles with tags
- v2: + created/updated timestamps, likes counter
- v3: + isDeleted flag, tags kept sorted
- v4: list wrapped in {"list": [...]}
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Union

CURRENT_VERSION = 4
MIN_VERSION = 1

RECORDS_KEY = "articles"

# Seed for the timestamps added by the v1 -> v2 step
TIMESTAMP_EPOCH = datetime(2020, 1, 1, tzinfo=timezone.utc)


def format_timestamp(value: datetime) -> str:
    """Format a datetime the way the application stores it.

    UTC with millisecond precision, e.g. 2020-01-01T00:00:01.000Z
    """
    value = value.astimezone(timezone.utc)
    millis = value.microsecond // 1000
    return value.strftime("%Y-%m-%dT%H:%M:%S") + f".{millis:03d}Z"


def _require_object(data: Any, what: str) -> Dict[str, Any]:
    if not isinstance(data, dict):
        raise ValueError(f"{what} must be a JSON object, got {type(data).__name__}")
    return data


def _require_list(data: Any, what: str) -> List[Any]:
    if not isinstance(data, list):
        raise ValueError(f"{what} must be a JSON array, got {type(data).__name__}")
    return data


def _require_str(data: Dict[str, Any], key: str, what: str) -> str:
    value = data.get(key)
    if not isinstance(value, str):
        raise ValueError(f"{what}.{key} must be a string")
    return value


def _require_int(data: Dict[str, Any], key: str, what: str) -> int:
    value = data.get(key)
    # bool is an int subclass; reject it
    if not isinstance(value, int) or isinstance(value, bool):
        raise ValueError(f"{what}.{key} must be an integer")
    return value


def _require_bool(data: Dict[str, Any], key: str, what: str) -> bool:
    value = data.get(key)
    if not isinstance(value, bool):
        raise ValueError(f"{what}.{key} must be a boolean")
    return value


def _parse_tags(data: Dict[str, Any], what: str) -> List[str]:
    tags = _require_list(data.get("tags"), f"{what}.tags")
    for tag in tags:
        if not isinstance(tag, str):
            raise ValueError(f"{what}.tags must contain only strings")
    return list(tags)


def _merge(fields: Dict[str, Any], known: Dict[str, Any]) -> Dict[str, Any]:
    data = dict(fields)
    data.update(known)
    return data


@dataclass
class ArticleV1:
    """An article as stored by schema v1."""
    tags: List[str]
    fields: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Any, what: str = "article") -> 'ArticleV1':
        data = _require_object(data, what)
        return cls(
            tags=_parse_tags(data, what),
            fields=dict(data)
        )

    def to_dict(self) -> Dict[str, Any]:
        return _merge(self.fields, {"tags": list(self.tags)})


@dataclass
class ArticleV2:
    """An article as stored by schema v2."""
    tags: List[str]
    created: str
    updated: str
    likes: int
    fields: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Any, what: str = "article") -> 'ArticleV2':
        data = _require_object(data, what)
        return cls(
            tags=_parse_tags(data, what),
            created=_require_str(data, "created", what),
            updated=_require_str(data, "updated", what),
            likes=_require_int(data, "likes", what),
            fields=dict(data)
        )

    def to_dict(self) -> Dict[str, Any]:
        return _merge(self.fields, {
            "tags": list(self.tags),
            "created": self.created,
            "updated": self.updated,
            "likes": self.likes,
        })


@dataclass
class ArticleV3:
    """An article as stored by schema v3 and later."""
    tags: List[str]
    created: str
    updated: str
    likes: int
    is_deleted: bool
    fields: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Any, what: str = "article") -> 'ArticleV3':
        data = _require_object(data, what)
        return cls(
            tags=_parse_tags(data, what),
            created=_require_str(data, "created", what),
            updated=_require_str(data, "updated", what),
            likes=_require_int(data, "likes", what),
            is_deleted=_require_bool(data, "isDeleted", what),
            fields=dict(data)
        )

    def to_dict(self) -> Dict[str, Any]:
        return _merge(self.fields, {
            "tags": list(self.tags),
            "created": self.created,
            "updated": self.updated,
            "likes": self.likes,
            "isDeleted": self.is_deleted,
        })


@dataclass
class ArticleCollectionV4:
    """Records area of schema v4: the v3 article list under "list"."""
    articles: List[ArticleV3]
    fields: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Any, what: str = RECORDS_KEY) -> 'ArticleCollectionV4':
        data = _require_object(data, what)
        items = _require_list(data.get("list"), f"{what}.list")
        return cls(
            articles=[
                ArticleV3.from_dict(item, f"{what}.list[{index}]")
                for index, item in enumerate(items)
            ],
            fields=dict(data)
        )

    def to_dict(self) -> Dict[str, Any]:
        return _merge(self.fields, {
            "list": [article.to_dict() for article in self.articles],
        })


RecordsV1 = List[ArticleV1]
RecordsV2 = List[ArticleV2]
RecordsV3 = List[ArticleV3]
RecordsV4 = ArticleCollectionV4
Records = Union[RecordsV1, RecordsV2, RecordsV3, RecordsV4]


def _article_list(article_cls) -> Callable[[Any], List[Any]]:
    def parse(data: Any) -> List[Any]:
        items = _require_list(data, RECORDS_KEY)
        return [
            article_cls.from_dict(item, f"{RECORDS_KEY}[{index}]")
            for index, item in enumerate(items)
        ]
    return parse


RECORD_PARSERS: Dict[int, Callable[[Any], Records]] = {
    1: _article_list(ArticleV1),
    2: _article_list(ArticleV2),
    3: _article_list(ArticleV3),
    4: ArticleCollectionV4.from_dict,
}


def has_shape(version: int) -> bool:
    """Return True if records at `version` have a known shape."""
    return version in RECORD_PARSERS


def parse_records(version: int, data: Any) -> Records:
    """
    Parse the raw records area of a document at `version`.

    Raises:
        KeyError: If no shape is defined for `version`
        ValueError: If `data` does not match the shape
    """
    parser = RECORD_PARSERS[version]
    return parser(data)


def dump_records(records: Records) -> Any:
    """Convert typed records back to JSON-compatible data."""
    if isinstance(records, list):
        return [article.to_dict() for article in records]
    return records.to_dict()
