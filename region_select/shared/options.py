"""Build and render ``<option>`` lists for region selects."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Iterable, Mapping, Optional, Sequence

from markupsafe import Markup, escape

from .regions import Region, RegionCollection

SEPARATOR_LABEL = "-------------"


@dataclass(frozen=True)
class OptionRecord:
    label: str
    value: Optional[str]
    selected: bool = False
    disabled: bool = False

    @property
    def is_separator(self) -> bool:
        return self.disabled and self.value is None


SEPARATOR = OptionRecord(SEPARATOR_LABEL, None, disabled=True)


def _selected_values(selected: Any) -> set[str]:
    if selected is None:
        return set()
    if isinstance(selected, (list, tuple, set, frozenset)):
        return {str(value) for value in selected if value is not None}
    return {str(selected)}


def _unique_by_code(regions: Iterable[Region]) -> list[Region]:
    seen: set[str] = set()
    kept: list[Region] = []
    for region in regions:
        key = str(region.code).lower()
        if key in seen:
            continue
        seen.add(key)
        kept.append(region)
    return kept


def _mark(records: Iterable[OptionRecord], selected: set[str]) -> list[OptionRecord]:
    return [
        replace(record, selected=True) if record.value is not None and record.value in selected else record
        for record in records
    ]


def build_region_options(
    regions: Iterable[Region],
    selected: Any = None,
    priority: Optional[Sequence[str]] = None,
    prompt: Optional[str] = None,
    suppress_duplicate_selection: bool = True,
) -> list[OptionRecord]:
    """Return the ordered option records for ``regions``.

    Priority codes are resolved in the order given and unknown codes are
    dropped. When any resolve, they come first followed by a disabled
    separator. The full list is sorted by name (plain string ordering) and
    ``prompt``, if given, is placed at its head with an empty value.

    With ``suppress_duplicate_selection`` a value already selected in the
    priority block is not selected again in the full list. A plain sequence
    of regions is deduplicated by code only when priority codes are given.
    """

    if not isinstance(regions, RegionCollection):
        regions = tuple(regions or ())
    selected_values = _selected_values(selected)
    records: list[OptionRecord] = []

    priority_codes = [str(code) for code in (priority or ()) if code is not None]
    if priority_codes:
        if not isinstance(regions, RegionCollection):
            regions = RegionCollection(_unique_by_code(regions))
        priority_records = []
        for code in priority_codes:
            region = regions.coded(code)
            if region is not None:
                priority_records.append(OptionRecord(region.name, region.code))
        if priority_records:
            records.extend(_mark(priority_records, selected_values))
            records.append(SEPARATOR)
            if suppress_duplicate_selection:
                selected_values = selected_values - {
                    str(record.value) for record in priority_records
                }

    main_records = sorted(
        (OptionRecord(region.name, region.code) for region in regions),
        key=lambda record: record.label,
    )
    if prompt:
        main_records.insert(0, OptionRecord(str(prompt), ""))
    records.extend(_mark(main_records, selected_values))
    return records


def render_option(record: OptionRecord) -> Markup:
    if record.is_separator:
        return Markup(f"<option disabled>{escape(record.label)}</option>")
    attrs = f' value="{escape(record.value)}"'
    if record.selected:
        attrs += ' selected="selected"'
    if record.disabled:
        attrs += ' disabled="disabled"'
    return Markup(f"<option{attrs}>{escape(record.label)}</option>")


def render_option_records(records: Iterable[OptionRecord]) -> Markup:
    return Markup("\n").join(render_option(record) for record in records)


def region_options_for_select(
    regions: Iterable[Region],
    selected: Any = None,
    options: Optional[Mapping[str, Any]] = None,
    *,
    suppress_duplicate_selection: bool = True,
    locale_bundle=None,
) -> Markup:
    """Render option tags for a collection of regions.

    ``options`` accepts ``priority`` (list of codes) and ``prompt``. A prompt
    of ``True`` uses the locale's "Please select" label.
    """

    options = dict(options or {})
    prompt = options.get("prompt")
    if prompt is True:
        prompt = locale_bundle.prompt_text() if locale_bundle is not None else "Please select"
    records = build_region_options(
        regions,
        selected,
        priority=options.get("priority") or [],
        prompt=prompt,
        suppress_duplicate_selection=suppress_duplicate_selection,
    )
    return render_option_records(records)
