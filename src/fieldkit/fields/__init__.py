"""
Built-in field types.

``BUILTIN_FIELD_TYPES`` is the table ``FieldTypeRegistry.register_defaults``
seeds from, in registration order.
"""

from typing import Any, Dict

from fieldkit.fields.base import (
    AssetCollector,
    BaseField,
    ContainerField,
    FieldKind,
    RenderScope,
)
from fieldkit.fields.choice import CheckboxField, RadioField, SelectField
from fieldkit.fields.containers import GroupField, MetaboxField, TabsField
from fieldkit.fields.repeater import RepeaterField
from fieldkit.fields.scalar import ColorField, DateField, NumberField, UploadField
from fieldkit.fields.text import (
    CustomHtmlField,
    EmailField,
    PasswordField,
    TextareaField,
    TextField,
    UrlField,
    WysiwygField,
)

BUILTIN_FIELD_TYPES: Dict[str, Any] = {
    "text": TextField,
    "textarea": TextareaField,
    "select": SelectField,
    "checkbox": CheckboxField,
    "radio": RadioField,
    "number": NumberField,
    "email": EmailField,
    "url": UrlField,
    "date": DateField,
    "password": PasswordField,
    "color": ColorField,
    "tabs": TabsField,
    "metabox": MetaboxField,
    "repeater": RepeaterField,
    "wysiwyg": WysiwygField,
    "group": GroupField,
    "custom_html": CustomHtmlField,
    "upload": UploadField,
}

__all__ = [
    "BUILTIN_FIELD_TYPES",
    "AssetCollector",
    "BaseField",
    "ContainerField",
    "FieldKind",
    "RenderScope",
    "TextField",
    "TextareaField",
    "PasswordField",
    "EmailField",
    "UrlField",
    "WysiwygField",
    "CustomHtmlField",
    "SelectField",
    "RadioField",
    "CheckboxField",
    "NumberField",
    "DateField",
    "ColorField",
    "UploadField",
    "TabsField",
    "MetaboxField",
    "GroupField",
    "RepeaterField",
]
