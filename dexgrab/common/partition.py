"""Map entity IDs to generation folders.

The storage layout depends on this table; changing a boundary moves
already-harvested files out of the ledger's sight.
"""

GENERATION_BOUNDARIES: tuple[tuple[int, str], ...] = (
    (151, "Gen_1_Kanto"),
    (251, "Gen_2_Johto"),
    (386, "Gen_3_Hoenn"),
    (493, "Gen_4_Sinnoh"),
    (649, "Gen_5_Unova"),
    (721, "Gen_6_Kalos"),
    (809, "Gen_7_Alola"),
    (905, "Gen_8_Galar"),
)
DEFAULT_BUCKET = "Gen_9_Paldea"


def bucket(entity_id: int) -> str:
    """Return the generation folder for an entity ID.

    Boundaries are inclusive upper bounds: 151 is Kanto, 152 is Johto.
    """
    for upper, label in GENERATION_BOUNDARIES:
        if entity_id <= upper:
            return label
    return DEFAULT_BUCKET
