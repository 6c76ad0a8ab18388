"""Many-to-many junction table detection and conversion to associations.

A junction table follows the platform naming convention
``module$entity1_entity2`` and declares exactly two foreign keys. The check
is a heuristic: two unrelated lookup foreign keys on a table that happens to
match the naming pattern are classified as a junction as well.
"""

import logging
from typing import List

from ..models import Association, ForeignKey

logger = logging.getLogger(__name__)

MODULE_SEPARATOR = "$"
NAME_SEPARATOR = "_"
JUNCTION_FOREIGN_KEY_COUNT = 2


def has_junction_name(table_name: str) -> bool:
    """Check the ``module$entity1_entity2`` naming convention."""
    return MODULE_SEPARATOR in table_name and NAME_SEPARATOR in table_name


def is_junction_table(table_name: str, foreign_keys: List[ForeignKey]) -> bool:
    """Decide whether a table is a many-to-many junction.

    ``foreign_keys`` must already be grouped per constraint, so a composite
    foreign key counts once.
    """
    if not has_junction_name(table_name):
        return False
    return len(foreign_keys) == JUNCTION_FOREIGN_KEY_COUNT


def format_association_name(table_name: str) -> str:
    """Display name of a junction table: ``mymodule$customer_order`` -> ``Customer_Order``."""
    name = table_name[table_name.find(MODULE_SEPARATOR) + 1:]
    parts = name.split(NAME_SEPARATOR)
    while len(parts) > 1 and not parts[-1]:
        parts.pop()
    return NAME_SEPARATOR.join(part[:1].upper() + part[1:] for part in parts)


def junction_to_association(table_name: str, foreign_keys: List[ForeignKey]) -> Association:
    """Convert a junction table into an Association.

    Entities follow the order in which the metadata source reported the
    foreign keys; that order is vendor dependent. When the foreign keys do not
    resolve to exactly two entities the association is returned without them.
    """
    association = Association(
        junction_table=table_name,
        name=format_association_name(table_name),
    )

    targets = [fk.referenced_table for fk in foreign_keys]
    if len(targets) == JUNCTION_FOREIGN_KEY_COUNT:
        association.entity1, association.entity2 = targets
    else:
        logger.warning(
            f"Junction table {table_name} references {len(targets)} tables; "
            f"association {association.name} has no entities"
        )

    return association
