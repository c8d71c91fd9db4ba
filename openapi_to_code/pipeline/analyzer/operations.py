"""
Operation extractor.

Walks every path x method entry of the document and resolves parameters,
request body and success response through the shared TypeResolver, so
operation types use the same named definitions as the schema catalog.
"""

from __future__ import annotations

import copy
import logging
import re
from typing import Any

from ...utils import snake_to_pascal_case
from ..errors import (
    DanglingReferenceError,
    DuplicateOperationIdError,
    SchemaError,
    UnboundPathParameterError,
    UnsupportedSchemaShapeError,
)
from .ir_nodes import HttpMethod, OperationDefinition, ParameterDescriptor, ParameterLocation, TypeDescriptor
from .type_resolver import TypeResolver, escape_pointer, is_nullable, unescape_pointer

logger = logging.getLogger(__name__)

HTTP_METHODS = {method.value: method for method in HttpMethod}
PARAMETER_LOCATIONS = {location.value: location for location in ParameterLocation}

PREFERRED_MEDIA_TYPE = "application/json"

COMPONENT_KINDS = {"parameters": "parameter", "requestBodies": "requestBody", "responses": "response"}

_PLACEHOLDER_PATTERN = re.compile(r"\{([^{}]+)\}")
_SUCCESS_STATUS_PATTERN = re.compile(r"^2\d\d$")


def path_placeholders(path: str) -> list[str]:
    """Get the {param} placeholders of a path template, in order."""
    return _PLACEHOLDER_PATTERN.findall(path)


def choose_media_type(content: Any) -> tuple[str, dict[str, Any]] | None:
    """Pick application/json if declared, else the first declared media type."""
    if not isinstance(content, dict) or not content:
        return None
    if PREFERRED_MEDIA_TYPE in content:
        media = content[PREFERRED_MEDIA_TYPE]
        return PREFERRED_MEDIA_TYPE, media if isinstance(media, dict) else {}
    content_type, media = next(iter(content.items()))
    return str(content_type), media if isinstance(media, dict) else {}


def choose_success_status(responses: dict[Any, Any]) -> str | None:
    """Pick the lowest explicit 2xx status, else the 2XX range."""
    codes = sorted(str(status) for status in responses if _SUCCESS_STATUS_PATTERN.match(str(status)))
    if codes:
        return codes[0]
    for status in responses:
        if str(status).upper() == "2XX":
            return str(status)
    return None


class OperationExtractor:
    """Builds the OperationDefinition sequence of a document."""

    def __init__(self, resolver: TypeResolver):
        self.resolver = resolver
        self._components: dict[str, Any] = {}
        self._taken_ids: set[str] = set()

    @property
    def errors(self) -> list[SchemaError]:
        return self.resolver.errors

    def extract(self, document: dict[str, Any]) -> list[OperationDefinition]:
        """
        Extract all operations.

        Args:
            document: OpenAPI document tree

        Returns:
            Operations in document order. Errors are left in the resolver's
            error list.
        """
        components = document.get("components") or {}
        self._components = components if isinstance(components, dict) else {}

        paths = document.get("paths") or {}
        if not isinstance(paths, dict):
            self.errors.append(UnsupportedSchemaShapeError("#/paths", "paths must be a mapping"))
            return []

        entries = list(self._iter_entries(paths))
        self._taken_ids = self._collect_explicit_ids(entries)

        operations = []
        for path, method, operation, path_parameters, op_path in entries:
            operations.append(self._extract_operation(path, method, operation, path_parameters, op_path))
        return operations

    def _iter_entries(self, paths: dict[str, Any]):
        for path, item in paths.items():
            item_path = f"#/paths/{escape_pointer(str(path))}"
            if not isinstance(item, dict):
                self.errors.append(UnsupportedSchemaShapeError(item_path, "path item must be a mapping"))
                continue
            if "$ref" in item:
                self.errors.append(UnsupportedSchemaShapeError(item_path, "path item $ref is not supported"))
                continue

            path_parameters = item.get("parameters") or []
            for key, operation in item.items():
                method = HTTP_METHODS.get(str(key).lower())
                if method is None:
                    continue
                op_path = f"{item_path}/{key}"
                if not isinstance(operation, dict):
                    self.errors.append(UnsupportedSchemaShapeError(op_path, "operation must be a mapping"))
                    continue
                yield str(path), method, operation, path_parameters, op_path

    def _collect_explicit_ids(self, entries) -> set[str]:
        seen: set[str] = set()
        for _, _, operation, _, op_path in entries:
            operation_id = operation.get("operationId")
            if not operation_id:
                continue
            if operation_id in seen:
                self.errors.append(DuplicateOperationIdError(operation_id, f"{op_path}/operationId"))
            seen.add(operation_id)
        return seen

    def _extract_operation(
        self,
        path: str,
        method: HttpMethod,
        operation: dict[str, Any],
        path_parameters: list[Any],
        op_path: str,
    ) -> OperationDefinition:
        operation_id = operation.get("operationId") or self._synthesize_operation_id(method, path)

        parameters = self._resolve_parameters(path_parameters, operation.get("parameters") or [], op_path)
        self._check_placeholders(operation_id, path, parameters, op_path)

        body_type, body_required, body_content_type = self._resolve_request_body(
            operation.get("requestBody"), f"{op_path}/requestBody"
        )
        response_type, response_status, response_content_type = self._resolve_response(
            operation.get("responses") or {}, f"{op_path}/responses"
        )

        return OperationDefinition(
            operation_id=operation_id,
            method=method,
            path=path,
            parameters=tuple(parameters),
            request_body=body_type,
            response=response_type,
            tags=tuple(operation.get("tags") or ()),
            summary=operation.get("summary"),
            description=operation.get("description"),
            deprecated=bool(operation.get("deprecated", False)),
            request_body_required=body_required,
            request_content_type=body_content_type,
            response_status=response_status,
            response_content_type=response_content_type,
            raw=copy.deepcopy(operation),
        )

    def _synthesize_operation_id(self, method: HttpMethod, path: str) -> str:
        """Build a deterministic id from method and path: GET /pets/{id} -> getPets."""
        segments = [s for s in path.split("/") if s and not _PLACEHOLDER_PATTERN.fullmatch(s)]
        base = method.value + ("".join(snake_to_pascal_case(s) for s in segments) or "Root")

        candidate = base
        placeholders = path_placeholders(path)
        if candidate in self._taken_ids and placeholders:
            candidate = base + "By" + "And".join(snake_to_pascal_case(p) for p in placeholders)

        suffix = 2
        unsuffixed = candidate
        while candidate in self._taken_ids:
            candidate = f"{unsuffixed}{suffix}"
            suffix += 1

        self._taken_ids.add(candidate)
        logger.debug("Synthesized operationId %s for %s %s", candidate, method.value.upper(), path)
        return candidate

    def _deref(self, node: Any, section: str, path: str) -> Any:
        """Follow '#/components/<section>/<name>' references."""
        seen: set[str] = set()
        while isinstance(node, dict) and "$ref" in node:
            ref = node["$ref"]
            prefix = f"#/components/{section}/"
            if not isinstance(ref, str) or not ref.startswith(prefix):
                self.errors.append(UnsupportedSchemaShapeError(path, f"Unsupported $ref target '{ref}'"))
                return None
            if ref in seen:
                self.errors.append(UnsupportedSchemaShapeError(path, f"Reference cycle through '{ref}'"))
                return None
            seen.add(ref)

            name = unescape_pointer(ref[len(prefix) :])
            target = (self._components.get(section) or {}).get(name)
            if target is None:
                self.errors.append(DanglingReferenceError(name, path, kind=COMPONENT_KINDS[section]))
                return None
            node = target
        return node

    def _resolve_parameters(
        self, path_level: list[Any], operation_level: list[Any], op_path: str
    ) -> list[ParameterDescriptor]:
        """Merge path-level and operation-level parameters; operation-level wins on (name, in)."""
        merged: dict[tuple[str, str], tuple[dict[str, Any], str]] = {}
        item_path = op_path.rsplit("/", 1)[0]

        for parameters, base_path in ((path_level, f"{item_path}/parameters"), (operation_level, f"{op_path}/parameters")):
            if not isinstance(parameters, list):
                self.errors.append(UnsupportedSchemaShapeError(base_path, "parameters must be a list"))
                continue
            for index, raw in enumerate(parameters):
                param_path = f"{base_path}/{index}"
                node = self._deref(raw, "parameters", param_path)
                if node is None:
                    continue
                if not isinstance(node, dict) or "name" not in node:
                    self.errors.append(UnsupportedSchemaShapeError(param_path, "parameter must declare a name"))
                    continue
                if node.get("in") not in PARAMETER_LOCATIONS:
                    self.errors.append(
                        UnsupportedSchemaShapeError(param_path, f"Unknown parameter location {node.get('in')!r}")
                    )
                    continue
                merged[(str(node["name"]), node["in"])] = (node, param_path)

        return [self._resolve_parameter(node, param_path) for node, param_path in merged.values()]

    def _resolve_parameter(self, node: dict[str, Any], path: str) -> ParameterDescriptor:
        location = PARAMETER_LOCATIONS[node["in"]]

        schema = None
        if "schema" in node:
            schema = node["schema"]
            param_type = self.resolver.resolve(schema, f"{path}/schema")
        else:
            chosen = choose_media_type(node.get("content"))
            if chosen is not None:
                content_type, media = chosen
                schema = media.get("schema")
                param_type = self.resolver.resolve(schema, f"{path}/content/{escape_pointer(content_type)}/schema")
            else:
                param_type = self.resolver.resolve(None, path)

        return ParameterDescriptor(
            name=str(node["name"]),
            location=location,
            type=param_type,
            required=location == ParameterLocation.PATH or bool(node.get("required", False)),
            nullable=is_nullable(schema),
            description=node.get("description"),
            raw=copy.deepcopy(node),
        )

    def _check_placeholders(
        self,
        operation_id: str,
        path: str,
        parameters: list[ParameterDescriptor],
        op_path: str,
    ) -> None:
        placeholders = path_placeholders(path)
        path_names = {p.name for p in parameters if p.location == ParameterLocation.PATH}

        for placeholder in placeholders:
            if placeholder not in path_names:
                self.errors.append(UnboundPathParameterError(operation_id, placeholder, op_path))

        for name in sorted(path_names - set(placeholders)):
            logger.warning("Operation %s declares path parameter '%s' missing from %s", operation_id, name, path)

    def _resolve_content(self, content: Any, path: str) -> tuple[TypeDescriptor | None, str | None]:
        chosen = choose_media_type(content)
        if chosen is None:
            return None, None
        content_type, media = chosen
        if "schema" not in media:
            return None, content_type
        media_path = f"{path}/content/{escape_pointer(content_type)}/schema"
        return self.resolver.resolve(media["schema"], media_path), content_type

    def _resolve_request_body(self, body: Any, path: str) -> tuple[TypeDescriptor | None, bool, str | None]:
        if body is None:
            return None, False, None
        node = self._deref(body, "requestBodies", path)
        if not isinstance(node, dict):
            return None, False, None
        body_type, content_type = self._resolve_content(node.get("content"), path)
        return body_type, bool(node.get("required", False)), content_type

    def _resolve_response(
        self, responses: Any, path: str
    ) -> tuple[TypeDescriptor | None, str | None, str | None]:
        if not isinstance(responses, dict):
            self.errors.append(UnsupportedSchemaShapeError(path, "responses must be a mapping"))
            return None, None, None

        status = choose_success_status(responses)
        if status is None:
            return None, None, None

        response_path = f"{path}/{escape_pointer(status)}"
        raw = responses.get(status)
        if raw is None:
            # YAML may load unquoted status codes as integers
            raw = responses.get(int(status)) if status.isdigit() else None
        node = self._deref(raw, "responses", response_path)
        if not isinstance(node, dict):
            return None, status, None

        response_type, content_type = self._resolve_content(node.get("content"), response_path)
        return response_type, status, content_type
