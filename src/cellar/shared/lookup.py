"""Repository lookups that report missing records as ``NotFoundError``."""

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from cellar.errors import NotFoundError

# Upper bound for unpaginated scans (reporting and small admin listings)
MAX_RESULTS = 10_000


def load(aggregate_cls, identifier, label: str | None = None):
    label = label or aggregate_cls.__name__
    if not identifier:
        raise NotFoundError(f"{label} not found")
    try:
        return current_domain.repository_for(aggregate_cls).get(str(identifier))
    except ObjectNotFoundError as exc:
        raise NotFoundError(f"{label} not found", {"id": str(identifier)}) from exc


def find_all(aggregate_cls, **filters) -> list:
    """Return every record matching the exact-match filters."""
    dao = current_domain.repository_for(aggregate_cls)._dao
    query = dao.query.filter(**filters) if filters else dao.query
    return list(query.limit(MAX_RESULTS).all().items)


def find_first(aggregate_cls, **filters):
    results = current_domain.repository_for(aggregate_cls)._dao.query.filter(**filters).all()
    return results.first
