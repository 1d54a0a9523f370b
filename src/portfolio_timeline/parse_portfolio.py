from __future__ import annotations

import datetime as _dt
import logging
from dataclasses import dataclass
from typing import Any

import yaml

from .portfolio_models import ClientRecord, Portfolio, ProjectRecord, Role, UserRecord

logger = logging.getLogger(__name__)


class PortfolioValidationError(Exception):
    """Raised when a portfolio snapshot is malformed (bad fields, dates, duplicate ids)."""


@dataclass(frozen=True)
class _Path:
    """Helper to produce readable YAML path strings like projects[0].start_date."""

    parts: tuple[str, ...] = ()

    def child(self, segment: str) -> "_Path":
        return _Path(self.parts + (segment,))

    def __str__(self) -> str:  # pragma: no cover - trivial
        return ".".join(self.parts) if self.parts else "root"


_PROJECT_KEYS = {"id", "client_id", "name", "start_date", "planned_end_date", "actual_end_date", "manager_id"}
_CLIENT_KEYS = {"id", "name", "address", "projects_total", "projects_completed"}
_USER_KEYS = {"id", "name", "login", "role"}


def load_portfolio(path: str) -> Portfolio:
    """Load a Portfolio snapshot from a YAML file at the given path."""

    with open(path, "r", encoding="utf-8") as fh:
        try:
            raw = yaml.safe_load(fh)
        except yaml.YAMLError as exc:
            raise PortfolioValidationError(f"{path}: invalid YAML: {exc}") from exc
        except ValueError as exc:
            # Undecodable bytes, or an unquoted date the calendar rejects.
            raise PortfolioValidationError(f"{path}: unreadable snapshot: {exc}") from exc

    portfolio = parse_portfolio(raw)
    logger.info(
        "Loaded %d projects, %d clients, %d users from %s",
        len(portfolio.projects),
        len(portfolio.clients),
        len(portfolio.users),
        path,
    )
    return portfolio


def parse_portfolio(data: Any) -> Portfolio:
    path = _Path()
    if data is None:
        return Portfolio()
    if not isinstance(data, dict):
        raise PortfolioValidationError(f"{path}: expected mapping at top level")
    _assert_allowed_keys(data, {"projects", "clients", "users"}, path)

    projects = [_parse_project(item, p) for item, p in _iter_list(data, "projects", path)]
    clients = [_parse_client(item, p) for item, p in _iter_list(data, "clients", path)]
    users = [_parse_user(item, p) for item, p in _iter_list(data, "users", path)]

    _assert_unique_ids(projects, path.child("projects"))
    _assert_unique_ids(clients, path.child("clients"))
    _assert_unique_ids(users, path.child("users"))
    return Portfolio(projects=projects, clients=clients, users=users)


def _iter_list(data: dict[str, Any], key: str, path: _Path):
    raw = data.get(key)
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise PortfolioValidationError(f"{path.child(key)}: expected list")
    return [(item, path.child(f"{key}[{idx}]")) for idx, item in enumerate(raw)]


def _parse_project(data: Any, path: _Path) -> ProjectRecord:
    if not isinstance(data, dict):
        raise PortfolioValidationError(f"{path}: expected mapping for project")
    _assert_allowed_keys(data, _PROJECT_KEYS, path)

    start_date = _parse_date(_require_value(data, "start_date", path), path.child("start_date"))
    planned_end_date = _parse_date(_require_value(data, "planned_end_date", path), path.child("planned_end_date"))
    if planned_end_date < start_date:
        raise PortfolioValidationError(
            f"{path}: planned_end_date {planned_end_date} precedes start_date {start_date}"
        )
    actual_end_date = None
    if data.get("actual_end_date") is not None:
        actual_end_date = _parse_date(data["actual_end_date"], path.child("actual_end_date"))

    return ProjectRecord(
        id=_require_id(data, "id", path),
        client_id=_require_id(data, "client_id", path),
        manager_id=_require_id(data, "manager_id", path),
        name=_optional_str(data, "name", path),
        start_date=start_date,
        planned_end_date=planned_end_date,
        actual_end_date=actual_end_date,
    )


def _parse_client(data: Any, path: _Path) -> ClientRecord:
    if not isinstance(data, dict):
        raise PortfolioValidationError(f"{path}: expected mapping for client")
    _assert_allowed_keys(data, _CLIENT_KEYS, path)
    return ClientRecord(
        id=_require_id(data, "id", path),
        name=_optional_str(data, "name", path),
        address=_optional_str(data, "address", path),
        projects_total=_optional_count(data, "projects_total", path),
        projects_completed=_optional_count(data, "projects_completed", path),
    )


def _parse_user(data: Any, path: _Path) -> UserRecord:
    if not isinstance(data, dict):
        raise PortfolioValidationError(f"{path}: expected mapping for user")
    _assert_allowed_keys(data, _USER_KEYS, path)
    return UserRecord(
        id=_require_id(data, "id", path),
        name=_optional_str(data, "name", path),
        login=_optional_str(data, "login", path),
        role=_parse_role(data.get("role", 0), path.child("role")),
    )


def _assert_allowed_keys(data: dict[str, Any], allowed: set[str], path: _Path) -> None:
    extras = sorted(set(data.keys()) - allowed)
    if extras:
        raise PortfolioValidationError(f"{path}: unexpected fields {extras}")


def _assert_unique_ids(records: list[Any], path: _Path) -> None:
    seen: set[str] = set()
    for record in records:
        if record.id in seen:
            raise PortfolioValidationError(f"{path}: duplicate id '{record.id}'")
        seen.add(record.id)


def _require_value(data: dict[str, Any], key: str, path: _Path) -> Any:
    if key not in data:
        raise PortfolioValidationError(f"{path}: missing required field '{key}'")
    return data[key]


def _require_id(data: dict[str, Any], key: str, path: _Path) -> str:
    value = _require_value(data, key, path)
    # Ids are opaque; numeric YAML scalars are accepted and kept as text.
    if isinstance(value, bool) or not isinstance(value, (str, int)) or not str(value).strip():
        raise PortfolioValidationError(f"{path.child(key)}: expected non-empty id")
    return str(value)


def _optional_str(data: dict[str, Any], key: str, path: _Path) -> str | None:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise PortfolioValidationError(f"{path.child(key)}: expected string")
    return value


def _optional_count(data: dict[str, Any], key: str, path: _Path) -> int:
    value = data.get(key, 0)
    if not isinstance(value, int) or isinstance(value, bool) or value < 0:
        raise PortfolioValidationError(f"{path.child(key)}: expected non-negative integer")
    return value


def _parse_role(value: Any, path: _Path) -> Role:
    if isinstance(value, str):
        try:
            return Role[value.strip().upper()]
        except KeyError as exc:
            raise PortfolioValidationError(f"{path}: expected 'user', 'admin' or an integer") from exc
    if isinstance(value, int) and not isinstance(value, bool):
        return Role.from_value(value)
    raise PortfolioValidationError(f"{path}: expected 'user', 'admin' or an integer")


def _parse_date(value: Any, path: _Path) -> _dt.date:
    # safe_load turns unquoted ISO dates into date objects already.
    if isinstance(value, _dt.datetime):
        return value.date()
    if isinstance(value, _dt.date):
        return value
    if not isinstance(value, str):
        raise PortfolioValidationError(f"{path}: expected YYYY-MM-DD string")
    try:
        parsed = _dt.date.fromisoformat(value)
    except ValueError as exc:
        raise PortfolioValidationError(f"{path}: expected YYYY-MM-DD string") from exc
    return parsed
