from __future__ import annotations

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from planner.access.errors import AccessDeniedError
from planner.access.grants import SqlPositionGrantStore
from planner.access.graph import SqlOrganizationalGraph
from planner.access.resolver import AccessResolver
from planner.db.session import get_db
from planner.models.security import User
from planner.security.auth import extract_user_id, load_user
from planner.security.config import ResourceRequirement, SecurityConfig
from planner.security.context import AuthzContext
from planner.security.session import SessionCarrier
from planner.security.tokens import TokenProvider


def get_security_config(request: Request) -> SecurityConfig:
    config = getattr(request.app.state, "security_config", None)
    if config is None:
        raise RuntimeError("Security config not loaded. Did app startup run?")
    return config


def get_session_carrier(request: Request) -> SessionCarrier:
    carrier = getattr(request.app.state, "session_carrier", None)
    if carrier is None:
        raise RuntimeError("Session carrier not configured. Did app startup run?")
    return carrier


def get_token_provider(request: Request) -> TokenProvider:
    tokens = getattr(request.app.state, "token_provider", None)
    if tokens is None:
        raise RuntimeError("Token provider not configured. Did app startup run?")
    return tokens


def get_access_resolver(db: Session = Depends(get_db)) -> AccessResolver:
    return AccessResolver(SqlOrganizationalGraph(db), SqlPositionGrantStore(db))


def get_current_user(request: Request) -> User:
    user = getattr(request.state, "user", None)
    if user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Authentication required")
    return user


def get_authz(request: Request) -> AuthzContext:
    authz = getattr(request.state, "authz", None)
    if authz is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Authentication required")
    return authz


def enforce_security(
    request: Request,
    config: SecurityConfig = Depends(get_security_config),
    carrier: SessionCarrier = Depends(get_session_carrier),
    tokens: TokenProvider = Depends(get_token_provider),
    db: Session = Depends(get_db),
    resolver: AccessResolver = Depends(get_access_resolver),
) -> None:
    """
    Global guard stage (configuration-driven, with optional decorator metadata).

    Runs after routing, so path parameters and endpoint metadata are available,
    and before the handler, so a denied request never reaches business code.
    """

    path = request.url.path
    method = request.method.upper()

    rule = config.match(path, method)

    endpoint = request.scope.get("endpoint")
    decorator_resource = getattr(endpoint, "__security_resource__", None) if endpoint else None

    resource = decorator_resource or rule.resource
    auth_required = rule.auth_required or resource is not None
    if not auth_required:
        return

    user_id = extract_user_id(request, config, carrier, tokens)
    if user_id is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Authentication required")

    user = load_user(db, user_id)
    request.state.user = user

    active_positions = [p for p in user.positions if p.is_active]
    user_roles = {p.role.value for p in active_positions}

    required_roles = set(rule.required_roles)
    if required_roles and not (user_roles & required_roles):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"Insufficient role. Required one of: {sorted(required_roles)}",
        )

    if resource is not None:
        _check_resource(request, resolver, user.id, resource)

    request.state.authz = AuthzContext(user_id=user.id)


def _check_resource(
    request: Request,
    resolver: AccessResolver,
    user_id: int,
    requirement: ResourceRequirement,
) -> None:
    raw_id = request.path_params.get(requirement.param)
    try:
        resource_id = int(raw_id)
    except (TypeError, ValueError) as exc:
        # Malformed ids are denied like missing resources.
        raise AccessDeniedError() from exc

    if requirement.guard == "course_update":
        resolver.validate_course_update_access(user_id, resource_id)
    elif requirement.guard == "course_delete":
        resolver.validate_course_delete_access(user_id, resource_id)
    elif requirement.guard == "course_planning":
        resolver.validate_course_planning_management(user_id, resource_id)
    else:
        resolver.validate_access(user_id, requirement.kind, resource_id)
