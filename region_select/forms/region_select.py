"""Region ``<select>`` helpers for templates.

``RegionHelpers`` is what templates see: ``country_select``,
``subregion_select`` and their freestanding ``*_tag`` variants. The
``<select>`` itself is assembled by ``RegionSelectAssembler`` from a
``FieldTag``, which knows how to name the field and read its current value
from the bound object.
"""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass, field
from typing import Any, Mapping, MutableMapping, Optional

from markupsafe import Markup

from ..shared.data_source import LocaleBundle
from ..shared.html import content_tag, sanitize_to_id, tag
from ..shared.options import region_options_for_select
from ..shared.regions import ParentRef, Region, World, resolve_parent

_OBJECT_NAME_RE = re.compile(r"\]\[|[^-a-zA-Z0-9:.]")


class RegionSelectConfigError(ValueError):
    pass


class AssemblyPolicy(enum.Enum):
    BASIC = "basic"
    REQUIRED_FIELD_AWARE = "required_field_aware"

    @classmethod
    def parse(cls, value: "AssemblyPolicy | str | None") -> "AssemblyPolicy":
        if isinstance(value, cls):
            return value
        if not value:
            return cls.REQUIRED_FIELD_AWARE
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            allowed = ", ".join(p.value for p in cls)
            raise ValueError(f"Unknown region select policy {value!r} (expected {allowed})")


@dataclass
class RegionSelectConfig:
    source: Any
    locale_bundle: LocaleBundle = field(default_factory=LocaleBundle)
    policy: AssemblyPolicy = AssemblyPolicy.REQUIRED_FIELD_AWARE
    suppress_duplicate_selection: bool = True

    def world(self) -> World:
        return self.source.world()


def _stringify_keys(options: Optional[Mapping[Any, Any]]) -> dict[str, Any]:
    return {str(k): v for k, v in (options or {}).items()}


class FieldTag:
    """Names a field bound to ``object_name[method_name]`` and reads its value."""

    def __init__(
        self,
        object_name: str,
        method_name: str,
        object: Any = None,
        options: Optional[MutableMapping[str, Any]] = None,
    ) -> None:
        self.object_name = str(object_name)
        self.method_name = str(method_name)
        self.options = options if options is not None else {}
        override = self.options.pop("object", None)
        self.object = override if override is not None else object

    @property
    def sanitized_object_name(self) -> str:
        return _OBJECT_NAME_RE.sub("_", self.object_name).rstrip("_")

    def tag_name(self, multiple: bool = False, index: Any = None) -> str:
        if index is not None:
            name = f"{self.object_name}[{index}][{self.method_name}]"
        else:
            name = f"{self.object_name}[{self.method_name}]"
        return f"{name}[]" if multiple else name

    def tag_id(self, index: Any = None) -> str:
        if index is not None:
            return f"{self.sanitized_object_name}_{index}_{sanitize_to_id(self.method_name)}"
        return f"{self.sanitized_object_name}_{sanitize_to_id(self.method_name)}"

    def add_default_name_and_id(self, html_options: MutableMapping[str, Any]) -> None:
        index = html_options.pop("index", None)
        if index is None:
            index = self.options.get("index")
        if "name" not in html_options:
            html_options["name"] = self.tag_name(bool(html_options.get("multiple")), index)
        if "id" not in html_options:
            html_options["id"] = self.tag_id(index)
        namespace = html_options.pop("namespace", None) or self.options.get("namespace")
        if namespace:
            html_options["id"] = (
                f"{namespace}_{html_options['id']}" if html_options.get("id") else namespace
            )

    def value(self) -> Any:
        obj = self.object
        if obj is None:
            return None
        if isinstance(obj, Mapping):
            return obj.get(self.method_name)
        return getattr(obj, self.method_name, None)


def placeholder_required(html_options: Mapping[str, Any]) -> bool:
    if not html_options.get("required") or html_options.get("multiple"):
        return False
    try:
        size = int(html_options.get("size") or 1)
    except (TypeError, ValueError):
        size = 1
    return size == 1


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple, set, dict)):
        return not value
    return False


class RegionSelectAssembler:
    def __init__(self, config: RegionSelectConfig) -> None:
        self.config = config

    @property
    def policy(self) -> AssemblyPolicy:
        return self.config.policy

    def prompt_text(self, prompt: Any) -> str:
        if isinstance(prompt, str):
            return prompt
        return self.config.locale_bundle.prompt_text()

    def add_options(self, option_tags: Markup, options: Mapping[str, Any], value: Any = None) -> Markup:
        include_blank = options.get("include_blank")
        if include_blank:
            if isinstance(include_blank, str):
                blank = content_tag("option", include_blank, {"value": ""})
            else:
                blank = content_tag("option", "", {"value": "", "label": " "})
            option_tags = blank + Markup("\n") + option_tags
        if _is_blank(value) and options.get("prompt"):
            prompt = content_tag("option", self.prompt_text(options["prompt"]), {"value": ""})
            option_tags = prompt + Markup("\n") + option_tags
        return option_tags

    def to_region_select_tag(
        self,
        field_tag: FieldTag,
        parent_region: Region,
        options: Optional[Mapping[str, Any]] = None,
        html_options: Optional[Mapping[str, Any]] = None,
    ) -> Markup:
        options = _stringify_keys(options)
        html_options = _stringify_keys(html_options)
        field_tag.add_default_name_and_id(html_options)

        extended = self.policy is AssemblyPolicy.REQUIRED_FIELD_AWARE
        if extended and placeholder_required(html_options):
            if options.get("include_blank") is False:
                raise RegionSelectConfigError("include_blank cannot be false for a required field.")
            if not options.get("prompt"):
                options["include_blank"] = options.get("include_blank") or True

        value = options.get("selected") or field_tag.value()
        option_tags = region_options_for_select(
            parent_region.subregions,
            value,
            {"priority": options.get("priority") or []},
            suppress_duplicate_selection=self.config.suppress_duplicate_selection,
            locale_bundle=self.config.locale_bundle,
        )
        option_tags = self.add_options(option_tags, options, value)
        select = content_tag("select", option_tags, html_options)
        if extended and html_options.get("multiple") and options.get("include_hidden", True):
            hidden = tag(
                "input",
                {
                    "disabled": html_options.get("disabled"),
                    "name": html_options["name"],
                    "type": "hidden",
                    "value": "",
                },
            )
            return hidden + select
        return select


def _split_priority_args(priorities_or_options, options_or_html_options, html_options):
    """Support ``country_select(name, method, ["US", "CA"], options, html_options)``."""

    if isinstance(priorities_or_options, (list, tuple)):
        options = _stringify_keys(options_or_html_options)
        options["priority"] = list(priorities_or_options)
        return options, _stringify_keys(html_options)
    return _stringify_keys(priorities_or_options), _stringify_keys(options_or_html_options)


class RegionHelpers:
    """Template helpers bound to one :class:`RegionSelectConfig`."""

    def __init__(self, config: RegionSelectConfig) -> None:
        self.config = config
        self.assembler = RegionSelectAssembler(config)

    @property
    def world(self) -> World:
        return self.config.world()

    def resolve_parent(self, parent_region_or_code: ParentRef) -> Region:
        return resolve_parent(self.world, parent_region_or_code)

    def country_select(
        self,
        object_name: str,
        method: str,
        priorities_or_options: Any = None,
        options_or_html_options: Optional[Mapping[str, Any]] = None,
        html_options: Optional[Mapping[str, Any]] = None,
        template_object: Any = None,
    ) -> Markup:
        """Select of top-level countries for ``object_name[method]``.

        ``country_select("user", "country_code", {"priority": ["US", "CA"]},
        {"class": "region"})``; a list in the third position is accepted as
        the priority list for older callers.
        """

        options, html_options = _split_priority_args(
            priorities_or_options, options_or_html_options, html_options
        )
        field_tag = FieldTag(object_name, method, template_object, options)
        return self.assembler.to_region_select_tag(field_tag, self.world, options, html_options)

    def subregion_select(
        self,
        object_name: str,
        method: str,
        parent_region_or_code: ParentRef,
        options: Optional[Mapping[str, Any]] = None,
        html_options: Optional[Mapping[str, Any]] = None,
        template_object: Any = None,
    ) -> Markup:
        """Select of the subregions of a country code, code path, or region."""

        parent = self.resolve_parent(parent_region_or_code)
        options = _stringify_keys(options)
        field_tag = FieldTag(object_name, method, template_object, options)
        return self.assembler.to_region_select_tag(field_tag, parent, options, html_options)

    def country_select_tag(self, name: str, value: Any = None, options: Optional[Mapping[str, Any]] = None) -> Markup:
        return self.subregion_select_tag(name, value, self.world, options)

    def subregion_select_tag(
        self,
        name: str,
        value: Any,
        parent_region_or_code: ParentRef,
        options: Optional[Mapping[str, Any]] = None,
        html_options: Optional[Mapping[str, Any]] = None,
    ) -> Markup:
        parent = self.resolve_parent(parent_region_or_code)
        option_tags = self.region_options_for_select(parent.subregions, value, options)
        attrs = {"name": str(name), "id": sanitize_to_id(name)}
        attrs.update(_stringify_keys(html_options))
        return content_tag("select", option_tags, attrs)

    def region_options_for_select(
        self,
        regions,
        selected: Any = None,
        options: Optional[Mapping[str, Any]] = None,
    ) -> Markup:
        return region_options_for_select(
            regions,
            selected,
            _stringify_keys(options),
            suppress_duplicate_selection=self.config.suppress_duplicate_selection,
            locale_bundle=self.config.locale_bundle,
        )

    def form_for(self, object_name: str, object: Any = None, **default_html_options) -> "RegionFormBuilder":
        return RegionFormBuilder(self, object_name, object, default_html_options)


class RegionFormBuilder:
    """Binds an object name and object so templates can call ``f.country_select("country")``."""

    def __init__(
        self,
        helpers: RegionHelpers,
        object_name: str,
        object: Any = None,
        default_html_options: Optional[Mapping[str, Any]] = None,
    ) -> None:
        self.helpers = helpers
        self.object_name = object_name
        self.object = object
        self.default_html_options = _stringify_keys(default_html_options)

    def _objectify(self, options: dict[str, Any]) -> dict[str, Any]:
        if self.object is not None:
            options.setdefault("object", self.object)
        return options

    def _html(self, html_options: Optional[Mapping[str, Any]]) -> dict[str, Any]:
        merged = dict(self.default_html_options)
        merged.update(_stringify_keys(html_options))
        return merged

    def country_select(
        self,
        method: str,
        priorities_or_options: Any = None,
        options_or_html_options: Optional[Mapping[str, Any]] = None,
        html_options: Optional[Mapping[str, Any]] = None,
    ) -> Markup:
        options, html_options = _split_priority_args(
            priorities_or_options, options_or_html_options, html_options
        )
        return self.helpers.country_select(
            self.object_name, method, self._objectify(options), self._html(html_options)
        )

    def subregion_select(
        self,
        method: str,
        parent_region_or_code: ParentRef,
        options: Optional[Mapping[str, Any]] = None,
        html_options: Optional[Mapping[str, Any]] = None,
    ) -> Markup:
        return self.helpers.subregion_select(
            self.object_name,
            method,
            parent_region_or_code,
            self._objectify(_stringify_keys(options)),
            self._html(html_options),
        )
