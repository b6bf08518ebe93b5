"""Access control from a model file and a CSV policy file."""

from __future__ import annotations

import configparser
import csv
import os
import re

from .api import StatusCode, StatusError

_EQUALITY = re.compile(r"^\s*r\.(\w+)\s*==\s*p\.(\w+)\s*$")
_ALLOW_EFFECT = "some(where(p.eft==allow))"


def _definition(parser: configparser.ConfigParser, section: str, key: str) -> list[str]:
    raw = parser.get(section, key)
    return [name.strip() for name in raw.split(",") if name.strip()]


class Authorizer:
    """Decides whether a subject may perform an action on an object.

    The model supports a request and policy definition, the allow-if-any
    effect and a matcher made of ``r.x == p.y`` terms joined by ``&&``.
    """

    def __init__(self, model: str | os.PathLike, policy: str | os.PathLike) -> None:
        parser = configparser.ConfigParser(
            interpolation=None, delimiters=("=",), comment_prefixes=("#",)
        )
        parser.optionxform = str
        with open(model, encoding="utf-8") as handle:
            try:
                parser.read_file(handle)
                request_fields = _definition(parser, "request_definition", "r")
                policy_fields = _definition(parser, "policy_definition", "p")
                effect = parser.get("policy_effect", "e")
                matcher = parser.get("matchers", "m")
            except configparser.Error as exc:
                raise ValueError(f"invalid model {os.fspath(model)}: {exc}") from exc

        if len(request_fields) != 3:
            raise ValueError("request definition must have three fields")
        if "".join(effect.split()) != _ALLOW_EFFECT:
            raise ValueError(f"unsupported policy effect: {effect}")

        self._request_fields = request_fields
        self._policy_fields = policy_fields
        self._terms: list[tuple[str, str]] = []
        for term in matcher.split("&&"):
            match = _EQUALITY.match(term)
            if match is None:
                raise ValueError(f"unsupported matcher term: {term.strip()}")
            request_name, policy_name = match.groups()
            if request_name not in request_fields or policy_name not in policy_fields:
                raise ValueError(f"unknown field in matcher term: {term.strip()}")
            self._terms.append((request_name, policy_name))

        self._policies: list[dict[str, str]] = []
        with open(policy, encoding="utf-8", newline="") as handle:
            for row in csv.reader(handle, skipinitialspace=True):
                cells = [cell.strip() for cell in row]
                if not cells or cells[0] != "p":
                    continue
                values = cells[1:]
                if len(values) != len(policy_fields):
                    raise ValueError(f"policy rule has wrong arity: {', '.join(cells)}")
                self._policies.append(dict(zip(policy_fields, values)))

    def _allowed(self, request: dict[str, str]) -> bool:
        return any(
            all(request[r_name] == rule[p_name] for r_name, p_name in self._terms)
            for rule in self._policies
        )

    def authorize(self, subject: str, obj: str, action: str) -> None:
        """Raise a PERMISSION_DENIED StatusError unless the request is allowed."""
        request = dict(zip(self._request_fields, (subject, obj, action)))
        if not self._allowed(request):
            raise StatusError(
                StatusCode.PERMISSION_DENIED,
                f"{subject} not permitted to {action} to {obj}",
            )