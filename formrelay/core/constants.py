"""Field names shared across the mapping, capacity and orchestration layers.

The field ids are the CRM column ids used by the campaign form.
"""

from __future__ import annotations

# Reserved array holding one sub-record per requested send
SUBITEMS_FIELD = "__SUBITEMS__"
SUBITEMS_ALIASES = ("__SUBITEMS__", "SUBITEMS")

# Demand entry sub-record keys
ENTRY_CHANNEL_FIELD = "conectar_quadros87__1"
ENTRY_CHANNEL_FALLBACK_FIELD = "conectar_quadros_mkkcjhuc"
ENTRY_DATE_FIELD = "data__1"
ENTRY_DATE_FALLBACK_FIELD = "conectar_quadros_mkkbt3fq"
ENTRY_TIMESLOT_FIELD = "conectar_quadros_mkkcnyr3"
ENTRY_QUANTITY_FIELD = "n_meros_mkkchcmk"
ENTRY_DESCRIPTION_FIELD = "texto__1"
ENTRY_SEQUENCE_FIELD = "n_meros__1"
# Canonical channel item id carried by each sub-record
ENTRY_CHANNEL_ID_ALIASES = ("id_original", "channel_id", "id")
# Child item id of an already-created entry (duplication/edit mode)
ENTRY_ITEM_ID_FIELD = "item_id"

# Parent columns
ITEM_NAME_FIELD = "name"
SEND_DATE_FIELD = "data__1"
CAMPAIGN_DATE_FIELD = "date_mkr6nj1f"
CAMPAIGN_DATE_ISO_FIELD = "date_mkrj355f"
CAMPAIGN_DATE_TEXT_FIELD = "text_mkr3n64h"
DEMAND_COUNT_FIELD = "n_mero__1"
DESCRIPTOR_FIELD = "text_mkr3znn0"
PEOPLE_SOURCE_FIELD = "pessoas5__1"
PEOPLE_TARGET_FIELD = "pessoas__1"
TEAM_PEOPLE_FIELD = "pessoas3__1"
UPLOAD_FIELD = "enviar_arquivo__1"
USER_ID_FIELD = "user_id"

# Prefix of columns linking to items of other boards
RELATION_PREFIX = "conectar_quadros"

# Reference lookup fields, in descriptor order
CLIENT_FIELD = "lookup_mkrtaebd"
FORMAT_FIELD = "lookup_mkrt66aq"
OBJECTIVE_FIELD = "lookup_mkrtxa46"
APPEAL_FIELD = "lookup_mkrta7z1"
PERSONA_FIELD = "lookup_mkrt36cj"
AREA_FIELD = "lookup_mkrtwq7k"
PRODUCT_FIELD = "lookup_mkrtvsdj"
SEASONALITY_FIELD = "lookup_mkrtcctn"
SEGMENT_FIELD = "lookup_mkrtxgmt"

DESCRIPTOR_CATEGORIES: tuple[tuple[str, str], ...] = (
    ("client", CLIENT_FIELD),
    ("format", FORMAT_FIELD),
    ("objective", OBJECTIVE_FIELD),
    ("appeal", APPEAL_FIELD),
    ("persona", PERSONA_FIELD),
    ("area", AREA_FIELD),
    ("product", PRODUCT_FIELD),
    ("seasonality", SEASONALITY_FIELD),
)

DESCRIPTOR_SEPARATOR = "-"

# Every reference category copied into child items
REFERENCE_CATEGORIES: tuple[tuple[str, str], ...] = (*DESCRIPTOR_CATEGORIES, ("segment", SEGMENT_FIELD))

# Field carrying the reference whose `team` list feeds the team people column
TEAM_SOURCE_FIELD = PERSONA_FIELD

# Requesting-area candidates, first present value wins
REQUESTER_FIELDS: tuple[str, ...] = (
    "conectar_quadros__1",
    PERSONA_FIELD,
    "area_solicitante",
    "gam_requesting_area",
    "briefing_requesting_area",
)

# Never copied verbatim into parent columns
EXCLUDED_FIELDS: frozenset[str] = frozenset(
    {
        "formTitle",
        "id",
        "timestamp",
        SUBITEMS_FIELD,
        PEOPLE_TARGET_FIELD,
        PEOPLE_SOURCE_FIELD,
        CLIENT_FIELD,
        FORMAT_FIELD,
        OBJECTIVE_FIELD,
        APPEAL_FIELD,
        PERSONA_FIELD,
        AREA_FIELD,
        PRODUCT_FIELD,
        SEASONALITY_FIELD,
        SEGMENT_FIELD,
        UPLOAD_FIELD,
    }
)

# Placeholder for an unresolved reference code in child payloads
UNRESOLVED_CODE = "NaN"
