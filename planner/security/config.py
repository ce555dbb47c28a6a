from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field, ValidationError

from planner.access.kinds import ResourceKind

Guard = Literal["scope", "course_update", "course_delete", "course_planning"]


class SecurityConfigError(ValueError):
    """Raised when the route security YAML is invalid."""


class AuthConfig(BaseModel):
    cookie_name: str = "access_token"


class DefaultRule(BaseModel):
    auth_required: bool = True
    required_roles: list[str] = Field(default_factory=list)


class RouteRule(BaseModel):
    path: str
    methods: list[str] = Field(default_factory=lambda: ["GET"])

    auth_required: bool | None = None
    required_roles: list[str] = Field(default_factory=list)

    # Resource guard: which path parameter names the protected resource.
    resource: ResourceKind | None = None
    resource_param: str | None = None
    guard: Guard = "scope"

    def normalized_methods(self) -> set[str]:
        return {m.upper() for m in self.methods}


class SecurityConfigModel(BaseModel):
    auth: AuthConfig = Field(default_factory=AuthConfig)
    default: DefaultRule = Field(default_factory=DefaultRule)
    routes: list[RouteRule] = Field(default_factory=list)


@dataclass(frozen=True)
class ResourceRequirement:
    kind: ResourceKind
    param: str
    guard: Guard = "scope"


@dataclass(frozen=True)
class EffectiveRule:
    """
    Fully-resolved rule (defaults applied) for a particular request.
    """

    auth_required: bool
    required_roles: frozenset[str]
    resource: ResourceRequirement | None


def _path_template_to_regex(path_template: str) -> re.Pattern[str]:
    # Convert "/courses/{course_id}" -> r"^/courses/[^/]+$"
    regex = re.sub(r"\{[^/]+\}", r"[^/]+", path_template)
    return re.compile(rf"^{regex}$")


def _validate_rule(rule: RouteRule) -> None:
    if rule.guard != "scope" and rule.resource != ResourceKind.COURSE:
        raise SecurityConfigError(f"route {rule.path!r}: guard {rule.guard!r} requires resource 'course'")
    if rule.resource is None:
        if rule.resource_param:
            raise SecurityConfigError(f"route {rule.path!r}: resource_param without resource")
        return
    if not rule.resource_param:
        raise SecurityConfigError(f"route {rule.path!r}: resource {rule.resource.value!r} requires resource_param")
    if f"{{{rule.resource_param}}}" not in rule.path:
        raise SecurityConfigError(
            f"route {rule.path!r}: resource_param {rule.resource_param!r} is not a path parameter"
        )


class SecurityConfig:
    """
    Runtime helper around validated config + route matching.
    """

    def __init__(self, model: SecurityConfigModel):
        self.model = model

        for rule in self.model.routes:
            _validate_rule(rule)

        compiled: list[tuple[str, re.Pattern[str], RouteRule]] = []
        for rule in self.model.routes:
            compiled.append((rule.path, _path_template_to_regex(rule.path), rule))

        # Prefer exact matches over templates.
        self._exact_rules: dict[str, list[RouteRule]] = {}
        for r in self.model.routes:
            self._exact_rules.setdefault(r.path, []).append(r)
        self._compiled_rules = compiled

    @property
    def auth(self) -> AuthConfig:
        return self.model.auth

    def match(self, path: str, method: str) -> EffectiveRule:
        """
        Find the best matching rule for (path, method), then apply defaults.
        """

        method = method.upper()
        default = self.model.default

        # 1) exact path match
        for candidate in self._exact_rules.get(path, []):
            if method in candidate.normalized_methods():
                return _effective(candidate, default)

        # 2) template match
        for _template, regex, candidate in self._compiled_rules:
            if method not in candidate.normalized_methods():
                continue
            if regex.match(path):
                return _effective(candidate, default)

        # 3) no match -> defaults
        return EffectiveRule(
            auth_required=default.auth_required,
            required_roles=frozenset(default.required_roles),
            resource=None,
        )


def _effective(rule: RouteRule, default: DefaultRule) -> EffectiveRule:
    # Any role or resource requirement implies authentication, even if the
    # global default is "public".
    inferred_auth_required = default.auth_required or bool(rule.required_roles) or rule.resource is not None

    resource = None
    if rule.resource is not None and rule.resource_param:
        resource = ResourceRequirement(kind=rule.resource, param=rule.resource_param, guard=rule.guard)

    return EffectiveRule(
        auth_required=inferred_auth_required if rule.auth_required is None else rule.auth_required,
        required_roles=frozenset(rule.required_roles or default.required_roles),
        resource=resource,
    )


def load_security_config(path: Path) -> SecurityConfig:
    raw_text = path.read_text(encoding="utf-8")
    raw: dict[str, Any] = yaml.safe_load(raw_text) or {}

    if "security" not in raw:
        raise SecurityConfigError(f"Missing top-level 'security' key in config: {path}")

    try:
        model = SecurityConfigModel.model_validate(raw["security"])
    except ValidationError as exc:
        raise SecurityConfigError(f"Invalid security config {path}: {exc}") from exc
    return SecurityConfig(model)
