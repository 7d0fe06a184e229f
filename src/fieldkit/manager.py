"""
RU: Корневой объект композиции: реестр, маршрутизатор, фильтры и хост в одном месте.
EN: Composition root: one registry, router, filter chain and host per manager.

``FieldManager`` turns declarative documents into host registrations plus
per-resource field declarations, and drives the save and render passes for
those declarations.

Example:
    >>> manager = FieldManager()
    >>> manager.register_from_mapping({
    ...     "cpts": [{
    ...         "id": "book",
    ...         "args": {"public": True},
    ...         "fields": [{"name": "price", "type": "number", "required": True,
    ...                     "validation": {"min": 0}}],
    ...     }]
    ... })
    >>> report = manager.save_post("book", 42, {"price": "12.5"})
    >>> manager.get_post_field("price", 42)
    12.5
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Set, Tuple, Union

from fieldkit.core.config import ConfigLike, FieldConfig
from fieldkit.core.context import Context, ContextId, ContextType, build_storage_key
from fieldkit.core.exceptions import ConfigError, DocumentError
from fieldkit.core.protocols import ResourceHost
from fieldkit.core.registry import FieldConstructor, FieldTypeRegistry
from fieldkit.document import (
    KIND_SETTINGS_PAGE,
    KIND_TAXONOMY,
    Document,
    DocumentValidator,
    JsonSchemaDocumentValidator,
    ResourceDeclaration,
    decode_json_document,
    field_list,
)
from fieldkit.fields.base import AssetCollector, FieldKind, field_kind, storage_key_for
from fieldkit.filters import FilterChain
from fieldkit.host import InMemoryResourceHost
from fieldkit.pipeline import SavePipeline, SaveReport
from fieldkit.rendering import FieldRenderer
from fieldkit.router import ContextRouter

logger = logging.getLogger(__name__)

# Manager options; ``load_config()`` returns these plus ``log_level``.
DEFAULT_OPTIONS: Dict[str, Any] = {
    "css_prefix": "fieldkit",
    "validate_documents": True,
    "warn_on_name_collision": True,
}

ResourceKey = Tuple[ContextType, str]
FieldsInput = Union[Mapping[str, ConfigLike], Iterable[ConfigLike]]


class FieldManager:
    """
    Owns the collaborators of one fieldkit setup.

    Every argument is optional; missing collaborators are built in memory.

    Args:
        host: Resource host deciding existence and registering resources
        router: Persistence router (post, term, settings backends)
        registry: Field type registry; built with ``css_prefix`` applied to
            every field when omitted
        filters: Before-save filter chain
        validator: JSON document validator
        options: Overrides for ``DEFAULT_OPTIONS``
    """

    def __init__(
        self,
        host: Optional[ResourceHost] = None,
        router: Optional[ContextRouter] = None,
        registry: Optional[FieldTypeRegistry] = None,
        filters: Optional[FilterChain] = None,
        validator: Optional[DocumentValidator] = None,
        options: Optional[Mapping[str, Any]] = None,
    ) -> None:
        self.options: Dict[str, Any] = dict(DEFAULT_OPTIONS)
        self.options.update(options or {})

        self.host = host if host is not None else InMemoryResourceHost()
        self.router = router if router is not None else ContextRouter()
        self.registry = (
            registry
            if registry is not None
            else FieldTypeRegistry(field_defaults={"css_prefix": self.options["css_prefix"]})
        )
        self.filters = filters if filters is not None else FilterChain()
        self._validator = validator

        self.pipeline = SavePipeline(self.registry, self.router, self.filters)
        self.renderer = FieldRenderer(self.registry, self.router)

        self._configs: Dict[ResourceKey, List[Dict[str, Any]]] = {}
        self._fields: Dict[ResourceKey, Dict[str, Any]] = {}
        self._nested: Dict[ResourceKey, Set[str]] = {}

    @property
    def validator(self) -> DocumentValidator:
        if self._validator is None:
            self._validator = JsonSchemaDocumentValidator()
        return self._validator

    # ==========================================================================
    # DOCUMENT REGISTRATION
    # ==========================================================================

    def register_from_mapping(self, data: Mapping[str, Any]) -> Document:
        """
        Register every resource of a declarative document.

        Sections are processed cpts, taxonomies, settings pages; resources in
        declaration order.

        Raises:
            ConfigError: A resource lacks ``id`` or a top-level field cannot be built
        """
        document = Document.from_mapping(data)
        for declaration in document.resources():
            self.register_resource(declaration)
        logger.info(
            f"Registered document: {len(document.cpts)} post type(s), "
            f"{len(document.taxonomies)} taxonom(y/ies), "
            f"{len(document.settings_pages)} settings page(s)"
        )
        return document

    def register_from_json(
        self, path_or_json: Union[str, Path], validate: Optional[bool] = None
    ) -> Document:
        """
        Decode a JSON document (file path or JSON text) and register it.

        Args:
            path_or_json: Path to a ``.json`` file or the JSON text itself
            validate: Run the document validator first; defaults to the
                ``validate_documents`` option

        Raises:
            DocumentError: Invalid JSON, non-object root or failed validation
        """
        data = decode_json_document(path_or_json)

        if validate is None:
            validate = bool(self.options.get("validate_documents", True))
        if validate:
            errors = self.validator.validate(data)
            if errors:
                logger.warning(f"Document failed validation with {len(errors)} error(s)")
                raise DocumentError(
                    "JSON validation failed: " + "; ".join(errors), errors=errors
                )

        return self.register_from_mapping(data)

    def register_resource(self, declaration: ResourceDeclaration) -> None:
        """
        Register one resource with the host and attach its fields.

        The host decides whether the id already exists. New post types and
        taxonomies are only registered when they carry ``args``; a settings
        page is created only when it declares page properties.
        """
        kind = declaration.kind
        resource_id = declaration.resource_id
        exists = self.host.resource_exists(kind, resource_id)

        if kind == KIND_SETTINGS_PAGE:
            if declaration.declares_page and not exists:
                self.host.register_resource(kind, resource_id, declaration.page)
        elif not exists and declaration.args:
            object_type = declaration.object_type if kind == KIND_TAXONOMY else None
            self.host.register_resource(kind, resource_id, declaration.args, object_type)
        elif not exists:
            logger.debug(f"{kind} '{resource_id}' is not known to the host and has no args")

        if declaration.fields:
            self.add_fields(declaration.context_type, resource_id, declaration.fields)

    def register_field_type(self, field_type: str, constructor: FieldConstructor) -> None:
        """Register a custom field type with this manager's registry."""
        self.registry.register_type(field_type, constructor)

    # ==========================================================================
    # FIELD DECLARATIONS
    # ==========================================================================

    def add_fields(
        self,
        context_type: Union[ContextType, str],
        resource_id: str,
        fields: FieldsInput,
    ) -> Dict[str, Any]:
        """
        Attach field declarations to a resource.

        Top-level declarations must build; nested declarations inside
        containers are flattened into the same name table and tracked as
        nested. Returns the instances added, keyed by name.

        Raises:
            ConfigError: A top-level declaration lacks ``name``/``type`` or
                uses an unknown type
        """
        key = self._key(context_type, resource_id)
        configs = field_list(fields) if isinstance(fields, Mapping) else [
            FieldConfig.from_mapping(cfg).to_dict() for cfg in fields
        ]

        # build everything first so a bad declaration attaches nothing
        instances = [self.registry.create(cfg) for cfg in configs]

        added: Dict[str, Any] = {}
        for cfg, instance in zip(configs, instances):
            self._configs.setdefault(key, []).append(cfg)
            self._track(key, instance, nested=False, added=added)

        logger.debug(f"Attached {len(added)} field(s) to {key[0].value}:{resource_id}")
        return added

    def _track(self, key: ResourceKey, instance: Any, *, nested: bool, added: Dict[str, Any]) -> None:
        name = instance.get_name()
        table = self._fields.setdefault(key, {})
        if name in table and self.options.get("warn_on_name_collision", True):
            logger.warning(
                f"Field name '{name}' declared twice in {key[0].value}:{key[1]}; "
                f"both share one storage key"
            )
        table[name] = instance
        added[name] = instance
        if nested:
            self._nested.setdefault(key, set()).add(name)

        if field_kind(instance) is not FieldKind.CONTAINER:
            return
        for cfg in instance.get_nested_fields():
            data = FieldConfig.from_mapping(cfg)
            if not data.name:
                continue
            try:
                child = self.registry.create(data)
            except ConfigError as e:
                logger.debug(f"Skipping nested field '{data.name}': {e}")
                continue
            self._track(key, child, nested=True, added=added)

    def get_fields(self, context_type: Union[ContextType, str], resource_id: str) -> Dict[str, Any]:
        """Flattened name -> instance table, containers and nested fields included."""
        return dict(self._fields.get(self._key(context_type, resource_id), {}))

    def get_field_configs(
        self, context_type: Union[ContextType, str], resource_id: str
    ) -> List[Dict[str, Any]]:
        """Top-level declarations in the order they were attached."""
        return list(self._configs.get(self._key(context_type, resource_id), []))

    def has_fields(self, context_type: Union[ContextType, str], resource_id: str) -> bool:
        return bool(self._fields.get(self._key(context_type, resource_id)))

    def is_nested_field(
        self, context_type: Union[ContextType, str], resource_id: str, field_name: str
    ) -> bool:
        return field_name in self._nested.get(self._key(context_type, resource_id), set())

    # ==========================================================================
    # SAVE
    # ==========================================================================

    def save(
        self,
        context_type: Union[ContextType, str],
        resource_id: str,
        context_id: ContextId,
        submitted: Mapping[str, Any],
    ) -> SaveReport:
        """Run the save pipeline for a resource's fields against one context."""
        configs = self.get_field_configs(context_type, resource_id)
        return self.pipeline.save(configs, submitted, Context.of(context_type, context_id))

    def save_post(self, post_type: str, post_id: ContextId, submitted: Mapping[str, Any]) -> SaveReport:
        return self.save(ContextType.POST, post_type, post_id, submitted)

    def save_term(self, taxonomy: str, term_id: ContextId, submitted: Mapping[str, Any]) -> SaveReport:
        return self.save(ContextType.TERM, taxonomy, term_id, submitted)

    def save_settings(self, page_id: str, submitted: Mapping[str, Any]) -> SaveReport:
        return self.save(ContextType.SETTINGS, page_id, page_id, submitted)

    # ==========================================================================
    # RENDER
    # ==========================================================================

    def render(
        self,
        context_type: Union[ContextType, str],
        resource_id: str,
        context_id: ContextId,
        assets: Optional[AssetCollector] = None,
    ) -> str:
        """Render a resource's fields with the values stored for ``context_id``."""
        configs = self.get_field_configs(context_type, resource_id)
        return self.renderer.render_fields(configs, Context.of(context_type, context_id), assets)

    def render_post(
        self, post_type: str, post_id: ContextId, assets: Optional[AssetCollector] = None
    ) -> str:
        return self.render(ContextType.POST, post_type, post_id, assets)

    def render_term(
        self, taxonomy: str, term_id: ContextId, assets: Optional[AssetCollector] = None
    ) -> str:
        return self.render(ContextType.TERM, taxonomy, term_id, assets)

    def render_settings(self, page_id: str, assets: Optional[AssetCollector] = None) -> str:
        return self.render(ContextType.SETTINGS, page_id, page_id, assets)

    # ==========================================================================
    # READ SIDE
    # ==========================================================================

    def get_field(
        self,
        field_name: str,
        context_id: ContextId,
        context_type: Union[ContextType, str] = "post",
        default: Any = "",
    ) -> Any:
        return self.router.get_field(field_name, context_id, context_type, default)

    def get_post_field(self, field_name: str, post_id: ContextId, default: Any = "") -> Any:
        return self.router.get_post_field(field_name, post_id, default)

    def get_term_field(self, field_name: str, term_id: ContextId, default: Any = "") -> Any:
        return self.router.get_term_field(field_name, term_id, default)

    def get_settings_field(self, field_name: str, page_id: str, default: Any = "") -> Any:
        return self.router.get_settings_field(field_name, page_id, default)

    # ==========================================================================
    # SETTINGS OPTIONS
    # ==========================================================================

    def get_option(self, page_id: str, field_name: str, default: Any = "") -> Any:
        """Settings value of a field declared on ``page_id``, honouring its prefix flag."""
        field = self._fields.get(self._key(ContextType.SETTINGS, page_id), {}).get(field_name)
        use_prefix = field.uses_name_prefix() if hasattr(field, "uses_name_prefix") else True
        return self.router.get_field(
            field_name, page_id, ContextType.SETTINGS, default, use_name_prefix=use_prefix
        )

    def set_option(self, page_id: str, field_name: str, value: Any) -> None:
        """Write a settings value directly, bypassing filters and validation."""
        field = self._fields.get(self._key(ContextType.SETTINGS, page_id), {}).get(field_name)
        if field is not None and field_kind(field) is not FieldKind.CONTAINER:
            key = storage_key_for(field, page_id)
        else:
            key = build_storage_key(field_name, page_id)
        self.router.write(Context(ContextType.SETTINGS, page_id), key, value)

    def get_options(self, page_id: str) -> Dict[str, Any]:
        """Stored values of every value-holding field declared on ``page_id``."""
        context = Context(ContextType.SETTINGS, page_id)
        values: Dict[str, Any] = {}
        for name, field in self._fields.get(self._key(ContextType.SETTINGS, page_id), {}).items():
            if field_kind(field) is FieldKind.CONTAINER or not getattr(field, "stores_value", True):
                continue
            values[name] = self.router.read(context, storage_key_for(field, page_id), None)
        return values

    # ==========================================================================
    # INTERNALS
    # ==========================================================================

    @staticmethod
    def _key(context_type: Union[ContextType, str], resource_id: str) -> ResourceKey:
        parsed = ContextType.parse(context_type)
        if parsed is None:
            raise ConfigError(f"Unknown context type: {context_type!r}")
        return parsed, str(resource_id)


__all__ = ["DEFAULT_OPTIONS", "FieldManager", "ResourceKey"]
