"""Typed projection of a parsed content document.

``build_app_config()`` turns the generic ``{section: {key: value}}`` mapping
into ``AppConfig``, the model application code consumes.  Every loosely
typed interpretation happens here: numbers, booleans, comma lists, numbered
lists and pipe-delimited tuples.  The sync core only ever handles strings.

Value encodings::

    photo_1=url|caption        numbered keys -> ordered list (sorted by N)
    option_1_es=Mango|2        _es numbered keys -> translated list
    amenities=food, hammocks   comma list (trimmed, empties dropped)
    panga_available=true       boolean, case-insensitive, fallback when absent

Sub-item sections use dot notation: ``[beach.coco_loco]``, ``[food.juice]``.
"""

from __future__ import annotations

import re

from pydantic import BaseModel

from .constants import CONFIG_SECTION
from .document import Document, Section, extract_timestamps


# ---------------------------------------------------------------------------
# Models
# ---------------------------------------------------------------------------


class _Frozen(BaseModel):
    model_config = {"frozen": True}


class LabelPrice(_Frozen):
    label: str
    price: float = 0.0


class Photo(_Frozen):
    url: str
    caption: str = ""


class NameDescription(_Frozen):
    name: str
    description: str = ""


class Stat(_Frozen):
    number: str
    label: str = ""


class ConfigMeta(_Frozen):
    config_updated: str = ""
    app_name: str = ""
    app_name_es: str | None = None
    github_url: str = ""


class ConfigHero(_Frozen):
    tagline: str = ""
    tagline_es: str | None = None
    title: str = ""
    title_es: str | None = None
    subtitle: str = ""
    subtitle_es: str | None = None
    background_image: str = ""
    cta_text: str = ""
    cta_text_es: str | None = None
    logo_text: str = ""
    logo_text_es: str | None = None
    stats: list[Stat] = []
    stats_es: list[Stat] | None = None


class ConfigBeach(_Frozen):
    id: str
    name: str
    island: str = ""
    description: str = ""
    description_es: str | None = None
    privacy_score: float = 0.0
    capacity: int = 20
    amenities: list[str] = []
    panga_available: bool = True
    panga_schedule: str = ""
    panga_schedule_es: str | None = None
    image: str = ""
    booking_image: str = ""
    features: list[str] = []
    has_chill_gym: bool = False


class ConfigBoatBooking(_Frozen):
    title: str = ""
    title_es: str | None = None
    subtitle: str = ""
    subtitle_es: str | None = None
    price_per_adult: float = 50
    kids_free_under: int = 8
    service_fee: float = 10
    service_fee_note: str = ""
    service_fee_note_es: str | None = None
    internet_price_per_phone: float = 5
    charging_price_per_phone: float = 5
    shower_price_per_person: float = 10
    kitchen_price_per_group: float = 50
    chill_gym_price_per_person: float = 10
    overnight_price_night_1: float = 100
    overnight_price_night_2: float = 50
    overnight_price_night_3_plus: float = 30
    overnight_max_nights: int = 14
    overnight_includes: list[str] = []
    overnight_includes_es: list[str] | None = None
    overnight_return_note: str = ""
    overnight_return_note_es: str | None = None
    inshore_fishing_addon_price: float = 300
    inshore_fishing_addon_desc: str = ""
    inshore_fishing_addon_desc_es: str | None = None


class ConfigFoodItem(_Frozen):
    id: str
    name: str
    name_es: str | None = None
    description: str = ""
    description_es: str | None = None
    price: float = 0.0
    image: str = ""
    category: str = "snacks"
    options: list[LabelPrice] = []
    options_es: list[LabelPrice] | None = None
    addons: list[LabelPrice] = []
    addons_es: list[LabelPrice] | None = None


class KayakOption(_Frozen):
    id: str
    name: str
    price: float = 0.0
    price_label: str = ""
    details: str = ""


class ConfigWaterItem(_Frozen):
    id: str
    name: str
    name_es: str | None = None
    description: str = ""
    description_es: str | None = None
    price: float = 0.0
    price_label: str = ""
    price_label_es: str | None = None
    image: str = ""
    details: list[str] = []
    details_es: list[str] | None = None
    kayak_options: list[KayakOption] | None = None


class ConfigIslandItem(_Frozen):
    id: str
    name: str
    name_es: str | None = None
    description: str = ""
    description_es: str | None = None
    price: float = 0.0
    price_label: str = ""
    price_label_es: str | None = None
    image: str = ""
    details: list[str] = []
    details_es: list[str] | None = None
    gallery: list[str] = []


class ConfigFishingItem(_Frozen):
    id: str
    name: str
    name_es: str | None = None
    display_name: str
    display_name_es: str | None = None
    description: str = ""
    description_es: str | None = None
    price: float = 0.0
    duration: str = ""
    duration_es: str | None = None
    max_participants: int = 4
    equipment: list[str] = []
    equipment_es: list[str] | None = None
    image: str = ""
    subtitle: str = ""
    subtitle_es: str | None = None
    angler_cost: float | None = None
    included: list[str] | None = None
    included_es: list[str] | None = None


class ConfigFishing(_Frozen):
    intro_text: str = ""
    intro_text_es: str | None = None
    central_image: str = ""
    items: list[ConfigFishingItem] = []


class GalleryImage(_Frozen):
    url: str
    label: str = ""


class ConfigOvernight(_Frozen):
    name: str = ""
    name_es: str | None = None
    description: str = ""
    description_es: str | None = None
    price: float = 100
    price_label: str = ""
    price_label_es: str | None = None
    image: str = ""
    price_night_1: float = 100
    price_night_2: float = 50
    price_night_3_plus: float = 30
    max_nights: int = 14
    pitch_text: str = ""
    pitch_text_es: str | None = None
    sleep_options: list[NameDescription] = []
    sleep_options_es: list[NameDescription] | None = None
    honest_title: str = ""
    honest_title_es: str | None = None
    honest_text: str = ""
    honest_text_es: str | None = None
    details: list[str] = []
    details_es: list[str] | None = None
    gallery: list[GalleryImage] = []


class ConfigFooter(_Frozen):
    brand_name: str = ""
    brand_name_es: str | None = None
    copyright: str = ""
    copyright_es: str | None = None
    info_beach: str = ""
    info_beach_es: str | None = None
    info_app: str = ""
    info_app_es: str | None = None
    whatsapp_number: str = ""
    whatsapp_url: str = ""
    email: str = ""


class AppConfig(_Frozen):
    """Application-facing view of one content document."""

    meta: ConfigMeta | None = None
    hero: ConfigHero | None = None
    beaches: list[ConfigBeach] = []
    beach_gallery: list[Photo] = []
    boat_booking: ConfigBoatBooking | None = None
    food: list[ConfigFoodItem] = []
    food_fresh_note: str | None = None
    food_fresh_note_es: str | None = None
    water: list[ConfigWaterItem] = []
    water_intro_text: str | None = None
    water_intro_text_es: str | None = None
    island: list[ConfigIslandItem] = []
    island_intro_text: str | None = None
    island_intro_text_es: str | None = None
    fishing: ConfigFishing | None = None
    overnight: ConfigOvernight | None = None
    footer: ConfigFooter | None = None
    timestamps: dict[str, str] = {}
    strings_en: dict[str, str] | None = None
    strings_es: dict[str, str] | None = None


# ---------------------------------------------------------------------------
# Value helpers
# ---------------------------------------------------------------------------


def sections_with_prefix(
    document: Document, prefix: str
) -> list[tuple[str, Section]]:
    """Return ``(id, section)`` for every ``[prefix.<id>]`` section."""
    dotted = f"{prefix}."
    return [
        (name[len(dotted):], section)
        for name, section in document.items()
        if name.startswith(dotted)
    ]


def _numbered(section: Section, pattern: re.Pattern[str]) -> list[str]:
    entries: list[tuple[int, str]] = []
    for key, value in section.items():
        match = pattern.match(key)
        if match:
            entries.append((int(match.group(1)), value))
    return [value for _, value in sorted(entries, key=lambda e: e[0])]


def numbered_values(section: Section, prefix: str) -> list[str]:
    """``photo_1``, ``photo_2`` ... -> values ordered by number."""
    return _numbered(section, re.compile(rf"^{re.escape(prefix)}_(\d+)$"))


def numbered_values_es(section: Section, prefix: str) -> list[str]:
    """``option_1_es``, ``option_2_es`` ... -> values ordered by number."""
    return _numbered(section, re.compile(rf"^{re.escape(prefix)}_(\d+)_es$"))


def parse_label_price(value: str) -> LabelPrice:
    """``"Mango|2"`` -> ``LabelPrice(label="Mango", price=2.0)``."""
    parts = value.split("|")
    return LabelPrice(
        label=parts[0], price=num(parts[1] if len(parts) > 1 else None)
    )


def parse_photo(value: str) -> Photo:
    """``"url|caption"``; the caption may itself contain pipes."""
    url, sep, caption = value.partition("|")
    return Photo(url=url, caption=caption if sep else "")


def parse_name_description(value: str) -> NameDescription:
    parts = value.split("|")
    return NameDescription(
        name=parts[0], description=parts[1] if len(parts) > 1 else ""
    )


def parse_stat(value: str) -> Stat:
    parts = value.split("|")
    return Stat(number=parts[0], label=parts[1] if len(parts) > 1 else "")


def parse_csv(value: str | None) -> list[str]:
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


def num(value: str | None, fallback: float = 0.0) -> float:
    if not value:
        return fallback
    try:
        return float(value)
    except ValueError:
        return fallback


def integer(value: str | None, fallback: int = 0) -> int:
    try:
        return int(num(value, fallback))
    except (ValueError, OverflowError):
        # nan / inf
        return fallback


def boolean(value: str | None, fallback: bool = True) -> bool:
    if not value:
        return fallback
    return value.lower() == "true"


def _opt(section: Section, key: str) -> str | None:
    return section.get(key) or None


def _opt_csv(section: Section, key: str) -> list[str] | None:
    value = section.get(key)
    return parse_csv(value) if value else None


# ---------------------------------------------------------------------------
# Section builders
# ---------------------------------------------------------------------------


def _build_meta(c: Section) -> ConfigMeta:
    return ConfigMeta(
        config_updated=c.get("config_updated", ""),
        app_name=c.get("app_name", ""),
        app_name_es=_opt(c, "app_name_es"),
        github_url=c.get("github_url", ""),
    )


def _build_hero(h: Section) -> ConfigHero:
    stats_es = [parse_stat(v) for v in numbered_values_es(h, "stat")]
    title_es = _opt(h, "title_es")
    return ConfigHero(
        tagline=h.get("tagline", ""),
        tagline_es=_opt(h, "tagline_es"),
        title=h.get("title", "").replace("\\n", "\n"),
        title_es=title_es.replace("\\n", "\n") if title_es else None,
        subtitle=h.get("subtitle", ""),
        subtitle_es=_opt(h, "subtitle_es"),
        background_image=h.get("background_image", ""),
        cta_text=h.get("cta_text", ""),
        cta_text_es=_opt(h, "cta_text_es"),
        logo_text=h.get("logo_text", ""),
        logo_text_es=_opt(h, "logo_text_es"),
        stats=[parse_stat(v) for v in numbered_values(h, "stat")],
        stats_es=stats_es or None,
    )


def _build_beach(item_id: str, s: Section) -> ConfigBeach:
    return ConfigBeach(
        id=item_id,
        name=s.get("name") or item_id,
        island=s.get("island", ""),
        description=s.get("description", ""),
        description_es=_opt(s, "description_es"),
        privacy_score=num(s.get("privacy_score")),
        capacity=integer(s.get("capacity"), 20),
        amenities=parse_csv(s.get("amenities")),
        panga_available=boolean(s.get("panga_available")),
        panga_schedule=s.get("panga_schedule", ""),
        panga_schedule_es=_opt(s, "panga_schedule_es"),
        image=s.get("image", ""),
        booking_image=s.get("booking_image", ""),
        features=parse_csv(s.get("features")),
        has_chill_gym=boolean(s.get("has_chill_gym"), False),
    )


def _build_boat_booking(b: Section) -> ConfigBoatBooking:
    return ConfigBoatBooking(
        title=b.get("title", ""),
        title_es=_opt(b, "title_es"),
        subtitle=b.get("subtitle", ""),
        subtitle_es=_opt(b, "subtitle_es"),
        price_per_adult=num(b.get("price_per_adult"), 50),
        kids_free_under=integer(b.get("kids_free_under"), 8),
        service_fee=num(b.get("service_fee"), 10),
        service_fee_note=b.get("service_fee_note", ""),
        service_fee_note_es=_opt(b, "service_fee_note_es"),
        internet_price_per_phone=num(b.get("internet_price_per_phone"), 5),
        charging_price_per_phone=num(b.get("charging_price_per_phone"), 5),
        shower_price_per_person=num(b.get("shower_price_per_person"), 10),
        kitchen_price_per_group=num(b.get("kitchen_price_per_group"), 50),
        chill_gym_price_per_person=num(
            b.get("chill_gym_price_per_person"), 10
        ),
        overnight_price_night_1=num(b.get("overnight_price_night_1"), 100),
        overnight_price_night_2=num(b.get("overnight_price_night_2"), 50),
        overnight_price_night_3_plus=num(
            b.get("overnight_price_night_3_plus"), 30
        ),
        overnight_max_nights=integer(b.get("overnight_max_nights"), 14),
        overnight_includes=parse_csv(b.get("overnight_includes")),
        overnight_includes_es=_opt_csv(b, "overnight_includes_es"),
        overnight_return_note=b.get("overnight_return_note", ""),
        overnight_return_note_es=_opt(b, "overnight_return_note_es"),
        inshore_fishing_addon_price=num(
            b.get("inshore_fishing_addon_price"), 300
        ),
        inshore_fishing_addon_desc=b.get("inshore_fishing_addon_desc", ""),
        inshore_fishing_addon_desc_es=_opt(
            b, "inshore_fishing_addon_desc_es"
        ),
    )


def _build_food_item(item_id: str, s: Section) -> ConfigFoodItem:
    options_es = [parse_label_price(v) for v in numbered_values_es(s, "option")]
    addons_es = [parse_label_price(v) for v in numbered_values_es(s, "addon")]
    return ConfigFoodItem(
        id=s.get("id") or item_id,
        name=s.get("name") or item_id,
        name_es=_opt(s, "name_es"),
        description=s.get("description", ""),
        description_es=_opt(s, "description_es"),
        price=num(s.get("price")),
        image=s.get("image", ""),
        category=s.get("category") or "snacks",
        options=[parse_label_price(v) for v in numbered_values(s, "option")],
        options_es=options_es or None,
        addons=[parse_label_price(v) for v in numbered_values(s, "addon")],
        addons_es=addons_es or None,
    )


def _build_water_item(item_id: str, s: Section) -> ConfigWaterItem:
    kayaks: list[KayakOption] = []
    for value in numbered_values(s, "kayak"):
        parts = value.split("|")
        # Incomplete tuples are skipped.
        if len(parts) >= 5:
            kayaks.append(
                KayakOption(
                    id=parts[0],
                    name=parts[1],
                    price=num(parts[2]),
                    price_label=parts[3],
                    details=parts[4],
                )
            )
    return ConfigWaterItem(
        id=s.get("id") or item_id,
        name=s.get("name") or item_id,
        name_es=_opt(s, "name_es"),
        description=s.get("description", ""),
        description_es=_opt(s, "description_es"),
        price=num(s.get("price")),
        price_label=s.get("price_label", ""),
        price_label_es=_opt(s, "price_label_es"),
        image=s.get("image", ""),
        details=parse_csv(s.get("details")),
        details_es=_opt_csv(s, "details_es"),
        kayak_options=kayaks or None,
    )


def _build_island_item(item_id: str, s: Section) -> ConfigIslandItem:
    return ConfigIslandItem(
        id=s.get("id") or item_id,
        name=s.get("name") or item_id,
        name_es=_opt(s, "name_es"),
        description=s.get("description", ""),
        description_es=_opt(s, "description_es"),
        price=num(s.get("price")),
        price_label=s.get("price_label", ""),
        price_label_es=_opt(s, "price_label_es"),
        image=s.get("image", ""),
        details=parse_csv(s.get("details")),
        details_es=_opt_csv(s, "details_es"),
        gallery=numbered_values(s, "gallery"),
    )


def _build_fishing_item(item_id: str, s: Section) -> ConfigFishingItem:
    name = s.get("name") or item_id
    return ConfigFishingItem(
        id=item_id,
        name=name,
        name_es=_opt(s, "name_es"),
        display_name=s.get("display_name") or name,
        display_name_es=_opt(s, "display_name_es"),
        description=s.get("description", ""),
        description_es=_opt(s, "description_es"),
        price=num(s.get("price")),
        duration=s.get("duration", ""),
        duration_es=_opt(s, "duration_es"),
        max_participants=integer(s.get("max_participants"), 4),
        equipment=parse_csv(s.get("equipment")),
        equipment_es=_opt_csv(s, "equipment_es"),
        image=s.get("image", ""),
        subtitle=s.get("subtitle", ""),
        subtitle_es=_opt(s, "subtitle_es"),
        angler_cost=num(s["angler_cost"]) if s.get("angler_cost") else None,
        included=_opt_csv(s, "included"),
        included_es=_opt_csv(s, "included_es"),
    )


def _build_overnight(o: Section) -> ConfigOvernight:
    sleep_es = [
        parse_name_description(v)
        for v in numbered_values_es(o, "sleep_option")
    ]
    gallery = []
    for value in numbered_values(o, "gallery"):
        photo = parse_photo(value)
        gallery.append(GalleryImage(url=photo.url, label=photo.caption))
    return ConfigOvernight(
        name=o.get("name", ""),
        name_es=_opt(o, "name_es"),
        description=o.get("description", ""),
        description_es=_opt(o, "description_es"),
        price=num(o.get("price"), 100),
        price_label=o.get("price_label", ""),
        price_label_es=_opt(o, "price_label_es"),
        image=o.get("image", ""),
        price_night_1=num(o.get("price_night_1"), 100),
        price_night_2=num(o.get("price_night_2"), 50),
        price_night_3_plus=num(o.get("price_night_3_plus"), 30),
        max_nights=integer(o.get("max_nights"), 14),
        pitch_text=o.get("pitch_text", ""),
        pitch_text_es=_opt(o, "pitch_text_es"),
        sleep_options=[
            parse_name_description(v)
            for v in numbered_values(o, "sleep_option")
        ],
        sleep_options_es=sleep_es or None,
        honest_title=o.get("honest_title", ""),
        honest_title_es=_opt(o, "honest_title_es"),
        honest_text=o.get("honest_text", ""),
        honest_text_es=_opt(o, "honest_text_es"),
        details=parse_csv(o.get("details")),
        details_es=_opt_csv(o, "details_es"),
        gallery=gallery,
    )


def _build_footer(f: Section) -> ConfigFooter:
    return ConfigFooter(
        brand_name=f.get("brand_name", ""),
        brand_name_es=_opt(f, "brand_name_es"),
        copyright=f.get("copyright", ""),
        copyright_es=_opt(f, "copyright_es"),
        info_beach=f.get("info_beach", ""),
        info_beach_es=_opt(f, "info_beach_es"),
        info_app=f.get("info_app", ""),
        info_app_es=_opt(f, "info_app_es"),
        whatsapp_number=f.get("whatsapp_number", ""),
        whatsapp_url=f.get("whatsapp_url", ""),
        email=f.get("email", ""),
    )


def build_app_config(document: Document) -> AppConfig:
    """Project a parsed document onto ``AppConfig``.

    Missing sections become ``None`` or empty lists; no content is
    synthesised beyond per-field defaults.
    """
    timestamps = extract_timestamps(document)

    fishing_items = [
        _build_fishing_item(item_id, section)
        for item_id, section in sections_with_prefix(document, "fishing")
    ]
    fishing = None
    fishing_root = document.get("fishing")
    if fishing_root is not None or fishing_items:
        root = fishing_root or {}
        fishing = ConfigFishing(
            intro_text=root.get("intro_text", ""),
            intro_text_es=_opt(root, "intro_text_es"),
            central_image=root.get("central_image", ""),
            items=fishing_items,
        )

    food_root = document.get("food", {})
    water_root = document.get("water", {})
    island_root = document.get("island", {})
    gallery = document.get("beach_gallery")

    def _optional(name, builder):
        section = document.get(name)
        return builder(section) if section is not None else None

    def _copy(name):
        section = document.get(name)
        return dict(section) if section is not None else None

    return AppConfig(
        meta=_optional(CONFIG_SECTION, _build_meta),
        hero=_optional("hero", _build_hero),
        beaches=[
            _build_beach(item_id, section)
            for item_id, section in sections_with_prefix(document, "beach")
        ],
        beach_gallery=(
            [parse_photo(v) for v in numbered_values(gallery, "photo")]
            if gallery is not None
            else []
        ),
        boat_booking=_optional("boat_booking", _build_boat_booking),
        food=[
            _build_food_item(item_id, section)
            for item_id, section in sections_with_prefix(document, "food")
        ],
        food_fresh_note=food_root.get("fresh_note"),
        food_fresh_note_es=food_root.get("fresh_note_es"),
        water=[
            _build_water_item(item_id, section)
            for item_id, section in sections_with_prefix(document, "water")
        ],
        water_intro_text=water_root.get("intro_text"),
        water_intro_text_es=water_root.get("intro_text_es"),
        island=[
            _build_island_item(item_id, section)
            for item_id, section in sections_with_prefix(document, "island")
        ],
        island_intro_text=island_root.get("intro_text"),
        island_intro_text_es=island_root.get("intro_text_es"),
        fishing=fishing,
        overnight=_optional("overnight", _build_overnight),
        footer=_optional("footer", _build_footer),
        timestamps=timestamps,
        strings_en=_copy("strings_en"),
        strings_es=_copy("strings_es"),
    )
