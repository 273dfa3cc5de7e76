"""In-memory stand-in for the pymongo Collection methods the repositories call"""
import copy
import re
from types import SimpleNamespace
from typing import Any, Dict, Iterator, List, Optional

from pymongo.errors import DuplicateKeyError


def _values_at(doc: Dict[str, Any], path: str) -> List[Any]:
    """Values at a dotted path, descending into arrays like MongoDB does"""
    current: List[Any] = [doc]
    for part in path.split("."):
        found = []
        for item in current:
            candidates = item if isinstance(item, list) else [item]
            for candidate in candidates:
                if isinstance(candidate, dict) and part in candidate:
                    found.append(candidate[part])
        current = found

    values: List[Any] = []
    for value in current:
        if isinstance(value, list):
            values.extend(value)
        else:
            values.append(value)
    return values


def _matches(doc: Dict[str, Any], query: Optional[Dict[str, Any]]) -> bool:
    for path, condition in (query or {}).items():
        values = _values_at(doc, path)
        if isinstance(condition, dict) and any(key.startswith("$") for key in condition):
            if "$in" in condition:
                options = condition["$in"]
                if not (any(v in options for v in values) or (not values and None in options)):
                    return False
            if "$regex" in condition:
                flags = re.IGNORECASE if "i" in condition.get("$options", "") else 0
                if not any(isinstance(v, str) and re.search(condition["$regex"], v, flags) for v in values):
                    return False
        elif condition not in values and not (condition is None and not values):
            return False
    return True


class FakeCursor:
    def __init__(self, docs: List[Dict[str, Any]]):
        self._docs = docs

    def sort(self, key: str, direction: int = 1) -> "FakeCursor":
        self._docs.sort(key=lambda d: (d.get(key) is None, d.get(key)), reverse=direction < 0)
        return self

    def skip(self, count: int) -> "FakeCursor":
        self._docs = self._docs[count:]
        return self

    def limit(self, count: int) -> "FakeCursor":
        if count:
            self._docs = self._docs[:count]
        return self

    def __iter__(self) -> Iterator[Dict[str, Any]]:
        return iter(self._docs)


class FakeCollection:
    """Subset of pymongo.collection.Collection used by the repositories"""

    def __init__(self):
        self.docs: List[Dict[str, Any]] = []
        self.fail_writes = False

    def _check_writable(self):
        if self.fail_writes:
            raise RuntimeError("write failed")

    def create_index(self, *args, **kwargs):
        return "index"

    def find(self, query=None, projection=None) -> FakeCursor:
        return FakeCursor([copy.deepcopy(d) for d in self.docs if _matches(d, query)])

    def find_one(self, query=None, projection=None) -> Optional[Dict[str, Any]]:
        for doc in self.docs:
            if _matches(doc, query):
                return copy.deepcopy(doc)
        return None

    def count_documents(self, query) -> int:
        return sum(1 for d in self.docs if _matches(d, query))

    def insert_one(self, doc):
        self._check_writable()
        if "_id" in doc and any(d.get("_id") == doc["_id"] for d in self.docs):
            raise DuplicateKeyError(f"duplicate _id {doc['_id']}")
        self.docs.append(copy.deepcopy(doc))
        return SimpleNamespace(inserted_id=doc.get("_id"))

    def replace_one(self, query, doc, upsert=False):
        self._check_writable()
        for index, existing in enumerate(self.docs):
            if _matches(existing, query):
                self.docs[index] = copy.deepcopy(doc)
                return SimpleNamespace(matched_count=1, modified_count=1)
        if upsert:
            self.docs.append(copy.deepcopy(doc))
        return SimpleNamespace(matched_count=0, modified_count=0)

    def _update(self, query, update, many: bool):
        self._check_writable()
        matched = 0
        for doc in self.docs:
            if _matches(doc, query):
                doc.update(copy.deepcopy(update.get("$set", {})))
                matched += 1
                if not many:
                    break
        return SimpleNamespace(matched_count=matched, modified_count=matched)

    def update_one(self, query, update):
        return self._update(query, update, many=False)

    def update_many(self, query, update):
        return self._update(query, update, many=True)

    def delete_one(self, query):
        self._check_writable()
        for index, doc in enumerate(self.docs):
            if _matches(doc, query):
                del self.docs[index]
                return SimpleNamespace(deleted_count=1)
        return SimpleNamespace(deleted_count=0)

