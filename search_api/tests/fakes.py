"""
테스트용 인메모리 OpenSearch.

색인/검색 어댑터가 실제로 보내는 query DSL 부분집합만 해석한다.
    - query: bool(must/filter/must_not/should), match_all, multi_match, match_phrase_prefix,
             term, terms, range(gte/lt)
    - aggs: terms, range
    - sort, from/size, _source
helpers.bulk / helpers.scan 대신 쓸 fake_bulk / fake_scan 도 함께 제공한다.
"""

from __future__ import annotations

import copy
from datetime import datetime, timezone
from types import SimpleNamespace
from typing import Any, Dict, Iterable, List

from opensearchpy.exceptions import NotFoundError


def _as_list(value: Any) -> List[Any]:
    if value is None:
        return []
    return value if isinstance(value, list) else [value]


def _is_date_field(field: str) -> bool:
    return "_datetimes" in field


def _coerce(field: str, value: Any) -> Any:
    if _is_date_field(field) and isinstance(value, str):
        return datetime.fromisoformat(value)
    return value


def _millis(value: datetime) -> float:
    return value.astimezone(timezone.utc).timestamp() * 1000


def _values(doc: Dict[str, Any], field: str) -> List[Any]:
    if field.endswith(".raw"):
        field = field[: -len(".raw")]
    return [_coerce(field, v) for v in _as_list(doc.get(field))]


def _tokens(text: Any) -> List[str]:
    return str(text).lower().split()


class FakeIndices:

    def __init__(self, store: Dict[str, Dict[str, Any]]) -> None:
        self._store = store
        self.bodies: Dict[str, Dict[str, Any]] = {}

    def exists(self, index: str) -> bool:
        return index in self._store

    def create(self, index: str, body: Dict[str, Any] | None = None) -> Dict[str, Any]:
        self._store[index] = {}
        self.bodies[index] = body or {}
        return {"acknowledged": True, "index": index}

    def delete(self, index: str) -> Dict[str, Any]:
        if index not in self._store:
            raise NotFoundError(404, "index_not_found_exception", {"index": index})
        del self._store[index]
        self.bodies.pop(index, None)
        return {"acknowledged": True}


class FakeOpenSearch:

    def __init__(self) -> None:
        self.store: Dict[str, Dict[str, Any]] = {}
        self.indices = FakeIndices(self.store)
        self.search_bodies: List[Dict[str, Any]] = []

    # ---------- documents ----------
    def docs(self, index: str) -> Dict[str, Dict[str, Any]]:
        return self.store.setdefault(index, {})

    # ---------- search ----------
    def search(self, index: str, body: Dict[str, Any]) -> Dict[str, Any]:
        self.search_bodies.append(copy.deepcopy(body))
        scored = []
        for doc_id, doc in self.docs(index).items():
            matched, score = self._match(doc, body.get("query") or {"match_all": {}})
            if matched:
                scored.append((doc_id, doc, score))

        for entry in reversed(body.get("sort") or []):
            (field, options), = entry.items()
            reverse = options.get("order") == "desc"
            if field == "_score":
                scored.sort(key=lambda t: t[2], reverse=reverse)
            else:
                present = [t for t in scored if _values(t[1], field)]
                missing = [t for t in scored if not _values(t[1], field)]
                present.sort(key=lambda t: _values(t[1], field)[0], reverse=reverse)
                scored = present + missing
        if not body.get("sort"):
            scored.sort(key=lambda t: t[2], reverse=True)

        start = body.get("from", 0)
        size = body.get("size", 10)
        source_fields = body.get("_source")
        hits = [
            {
                "_id": doc_id,
                "_score": score,
                "_source": {k: v for k, v in doc.items() if source_fields is None or k in source_fields},
            }
            for doc_id, doc, score in scored[start:start + size]
        ]

        response: Dict[str, Any] = {
            "hits": {"total": {"value": len(scored), "relation": "eq"}, "hits": hits}
        }
        if body.get("aggs"):
            docs = [doc for _, doc, _ in scored]
            response["aggregations"] = {
                name: self._aggregate(docs, agg) for name, agg in body["aggs"].items()
            }
        return response

    def _match(self, doc: Dict[str, Any], query: Dict[str, Any]) -> tuple[bool, float]:
        (kind, params), = query.items()
        if kind == "match_all":
            return True, 1.0
        if kind == "bool":
            score = 0.0
            for clause in params.get("must", []):
                ok, s = self._match(doc, clause)
                if not ok:
                    return False, 0.0
                score += s
            for clause in params.get("filter", []):
                if not self._match(doc, clause)[0]:
                    return False, 0.0
            for clause in params.get("must_not", []):
                if self._match(doc, clause)[0]:
                    return False, 0.0
            should = params.get("should", [])
            if should:
                hits = [self._match(doc, clause) for clause in should]
                if sum(1 for ok, _ in hits if ok) < params.get("minimum_should_match", 1):
                    return False, 0.0
            return True, score or 1.0
        if kind == "multi_match":
            tokens = set(_tokens(params["query"]))
            score = 0.0
            for field in params["fields"]:
                name, _, boost = field.partition("^")
                words = {w for v in _values(doc, name) for w in _tokens(v)}
                score += len(tokens & words) * float(boost or 1)
            return score > 0, score
        if kind == "match_phrase_prefix":
            (field, options), = params.items()
            prefix = str(options["query"]).lower()
            return any(str(v).lower().startswith(prefix) or f" {prefix}" in str(v).lower()
                       for v in _values(doc, field)), 1.0
        if kind == "term":
            (field, value), = params.items()
            return _coerce(field, value) in _values(doc, field), 1.0
        if kind == "terms":
            (field, values), = params.items()
            wanted = [_coerce(field, v) for v in values]
            return any(v in wanted for v in _values(doc, field)), 1.0
        if kind == "range":
            (field, bounds), = params.items()
            low = _coerce(field, bounds.get("gte"))
            high = _coerce(field, bounds.get("lt"))
            return any(
                (low is None or v >= low) and (high is None or v < high)
                for v in _values(doc, field)
            ), 1.0
        raise ValueError(f"unsupported query: {kind}")

    def _aggregate(self, docs: List[Dict[str, Any]], agg: Dict[str, Any]) -> Dict[str, Any]:
        (kind, params), = agg.items()
        field = params["field"]
        if kind == "terms":
            counts: Dict[Any, int] = {}
            for doc in docs:
                for v in set(_values(doc, field)):
                    counts[v] = counts.get(v, 0) + 1
            ordered = sorted(counts.items(), key=lambda kv: (-kv[1], str(kv[0])))[: params.get("size", 10)]
            return {
                "buckets": [
                    {"key": _millis(k) if isinstance(k, datetime) else k, "doc_count": c}
                    for k, c in ordered
                ]
            }
        if kind == "range":
            buckets = []
            for r in params["ranges"]:
                low = _coerce(field, r.get("from"))
                high = _coerce(field, r.get("to"))
                count = sum(
                    1 for doc in docs
                    if any(low <= v < high for v in _values(doc, field))
                )
                if isinstance(low, datetime):
                    low, high = _millis(low), _millis(high)
                buckets.append({"from": low, "to": high, "doc_count": count})
            return {"buckets": buckets}
        raise ValueError(f"unsupported aggregation: {kind}")


# ---------- helpers 대체 ----------
def fake_bulk(client: FakeOpenSearch, actions: Iterable[Dict[str, Any]], raise_on_error: bool = True, **kwargs):
    ok = 0
    for action in actions:
        docs = client.docs(action["_index"])
        if action["_op_type"] == "index":
            docs[action["_id"]] = copy.deepcopy(action["_source"])
        elif action["_op_type"] == "delete":
            docs.pop(action["_id"], None)
        ok += 1
    return ok, []


def fake_scan(client: FakeOpenSearch, query: Dict[str, Any], index: str, **kwargs):
    for doc_id, doc in list(client.docs(index).items()):
        if client._match(doc, query["query"])[0]:
            yield {"_id": doc_id}


fake_helpers = SimpleNamespace(bulk=fake_bulk, scan=fake_scan)
