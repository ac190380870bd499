"""
Search/filter compiler for the catalog.

Query parameters are compiled into a list of typed clauses, each validated on
its own, then combined into one conjunctive predicate. The predicate can be
rendered as a Tortoise ``Q`` for the database, or evaluated in memory against
a record with ``matches``.
"""
import logging
import math
from dataclasses import dataclass
from typing import Any, List, Mapping, Optional, Tuple

from tortoise.exceptions import BaseORMException
from tortoise.expressions import Q

from sweetshop.core.errors import StoreFailure, ValidationError
from sweetshop.models.sweet import Sweet

log = logging.getLogger("sweetshop.search")

MISSING_FILTER = "provide at least one of: keyword/category/price-range/in-stock"
KEYWORD_FIELDS = ("name", "description", "category")
TRUTHY_INSTOCK = ("1", "true")


def _field(record: Any, name: str) -> Any:
    if isinstance(record, Mapping):
        return record.get(name)
    return getattr(record, name, None)


def _contains(haystack: Any, needle: str) -> bool:
    return haystack is not None and needle.lower() in str(haystack).lower()


@dataclass(frozen=True)
class KeywordClause:
    """Every token must appear in at least one of name, description or category."""
    tokens: Tuple[str, ...]

    def to_q(self) -> Q:
        per_token = [
            Q(*[Q(**{f"{field}__icontains": token}) for field in KEYWORD_FIELDS], join_type="OR")
            for token in self.tokens
        ]
        return Q(*per_token, join_type="AND")

    def matches(self, record: Any) -> bool:
        return all(
            any(_contains(_field(record, field), token) for field in KEYWORD_FIELDS)
            for token in self.tokens
        )


@dataclass(frozen=True)
class CategoryClause:
    term: str

    def to_q(self) -> Q:
        return Q(category__icontains=self.term)

    def matches(self, record: Any) -> bool:
        return _contains(_field(record, "category"), self.term)


@dataclass(frozen=True)
class PriceRangeClause:
    """Inclusive bounds; either side may be open."""
    minimum: Optional[float] = None
    maximum: Optional[float] = None

    def to_q(self) -> Q:
        bounds = {}
        if self.minimum is not None:
            bounds["price__gte"] = self.minimum
        if self.maximum is not None:
            bounds["price__lte"] = self.maximum
        return Q(**bounds)

    def matches(self, record: Any) -> bool:
        price = _field(record, "price")
        if price is None:
            return False
        if self.minimum is not None and price < self.minimum:
            return False
        if self.maximum is not None and price > self.maximum:
            return False
        return True


@dataclass(frozen=True)
class InStockClause:
    def to_q(self) -> Q:
        return Q(quantity__gt=0)

    def matches(self, record: Any) -> bool:
        return (_field(record, "quantity") or 0) > 0


@dataclass(frozen=True)
class SearchFilter:
    """Conjunction of clauses. Never empty once compiled."""
    clauses: Tuple[Any, ...]

    def to_q(self) -> Q:
        return Q(*[clause.to_q() for clause in self.clauses], join_type="AND")

    def matches(self, record: Any) -> bool:
        return all(clause.matches(record) for clause in self.clauses)


def _first(params: Mapping[str, Any], *names: str) -> Optional[str]:
    """First alias that is present, the way `a ?? b` picks it."""
    for name in names:
        value = params.get(name)
        if value is not None:
            return str(value)
    return None


def _parse_bound(raw: Optional[str], label: str) -> Optional[float]:
    if raw is None or not raw.strip():
        return None
    try:
        value = float(raw.strip())
    except ValueError:
        raise ValidationError(f"{label} must be a number >= 0")
    if not math.isfinite(value) or value < 0:
        raise ValidationError(f"{label} must be a number >= 0")
    return value


def compile_filter(params: Mapping[str, Any]) -> SearchFilter:
    """Builds and validates a SearchFilter from raw query parameters."""
    clauses: List[Any] = []

    keywords = _first(params, "q", "keywords") or ""
    tokens = tuple(token.strip() for token in keywords.split(",") if token.strip())
    if tokens:
        clauses.append(KeywordClause(tokens))

    category = (_first(params, "category") or "").strip()
    if category:
        clauses.append(CategoryClause(category))

    minimum = _parse_bound(_first(params, "minprice", "minPrice"), "minprice")
    maximum = _parse_bound(_first(params, "maxprice", "maxPrice"), "maxprice")
    if minimum is not None and maximum is not None and minimum > maximum:
        raise ValidationError("minprice cannot be greater than maxprice")
    if minimum is not None or maximum is not None:
        clauses.append(PriceRangeClause(minimum, maximum))

    if _first(params, "instock") in TRUTHY_INSTOCK:
        clauses.append(InStockClause())

    if not clauses:
        raise ValidationError(MISSING_FILTER)
    return SearchFilter(tuple(clauses))


async def search(params: Mapping[str, Any]) -> Tuple[List[Sweet], int]:
    """Returns every matching sweet, newest first, with the match count."""
    search_filter = compile_filter(params)
    try:
        sweets = await Sweet.filter(search_filter.to_q()).order_by("-created_at")
    except BaseORMException as e:
        log.exception(f"Store failure during search: {e}")
        raise StoreFailure("Server error")
    log.info(f"Search with {len(search_filter.clauses)} clause(s) matched {len(sweets)} sweet(s).")
    return sweets, len(sweets)
