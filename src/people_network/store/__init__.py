"""Parameterized SQL over the people-network relations.

Every function takes the asyncpg pool as its first argument. Re-exports all
public symbols so callers can ``from people_network.store import X``.
"""

from people_network.store._validation import DEFAULT_GROUP_COLOR, PersonSource
from people_network.store.groups import (
    group_create,
    group_delete,
    group_ensure,
    group_ensure_locked,
    group_find_by_name,
    group_get,
    group_list,
    group_update,
)
from people_network.store.interactions import (
    coerce_date,
    interaction_delete,
    interaction_delete_by_date,
    interaction_get,
    interaction_get_by_date,
    interaction_list,
    interaction_people,
    interaction_record,
    interaction_remove_person,
    interaction_remove_person_on_date,
)
from people_network.store.people import (
    person_create,
    person_delete,
    person_get,
    person_list,
    person_update,
)
from people_network.store.stats import (
    TOP_PEOPLE_LIMIT,
    RangeFilter,
    parse_range_filter,
    stats_compute,
    stats_per_day,
    stats_top_people,
)

__all__ = [
    "DEFAULT_GROUP_COLOR",
    "TOP_PEOPLE_LIMIT",
    "PersonSource",
    "RangeFilter",
    "coerce_date",
    "group_create",
    "group_delete",
    "group_ensure",
    "group_ensure_locked",
    "group_find_by_name",
    "group_get",
    "group_list",
    "group_update",
    "interaction_delete",
    "interaction_delete_by_date",
    "interaction_get",
    "interaction_get_by_date",
    "interaction_list",
    "interaction_people",
    "interaction_record",
    "interaction_remove_person",
    "interaction_remove_person_on_date",
    "parse_range_filter",
    "person_create",
    "person_delete",
    "person_get",
    "person_list",
    "person_update",
    "stats_compute",
    "stats_per_day",
    "stats_top_people",
]
