"""
Centralized Constants - SINGLE SOURCE OF TRUTH

Rarity classification, site labels and selector-independent values used by
the scraper, the storage layer and the API edge.

DO NOT duplicate these definitions in other files.
"""
from enum import Enum


# =============================================================================
# RARITY RATING
# =============================================================================

class Rarity(str, Enum):
    """How hard the reviewed movie is to find (closed set of seven values)."""
    COMMON = "COMMON"
    FINDABLE = "FINDABLE"
    RARE = "RARE"
    EXOTIC = "EXOTIC"
    COLLECTORS_ITEM = "COLLECTORS_ITEM"
    UNFINDABLE = "UNFINDABLE"
    NEVER_RELEASED = "NEVER_RELEASED"


# Site label -> Rarity. Labels are matched exactly after trimming.
RARITY_LABELS = {
    'Courant': Rarity.COMMON,
    'Trouvable': Rarity.FINDABLE,
    'Rare': Rarity.RARE,
    'Exotique': Rarity.EXOTIC,
    'Pièce de Collection': Rarity.COLLECTORS_ITEM,
    'Introuvable': Rarity.UNFINDABLE,
    'Jamais Sorti': Rarity.NEVER_RELEASED,
}


# =============================================================================
# CHRONICLE INFO BLOCK LABELS
# =============================================================================

INFO_ORIGINAL_TITLE = 'Titre original'
INFO_ALTERNATIVE_TITLES = 'Titre(s) alternatif(s)'
INFO_DIRECTORS = 'Réalisateur(s)'
INFO_RELEASE_YEAR = 'Année'
INFO_ORIGIN_COUNTRIES = 'Nationalité'
INFO_RUNTIME = 'Durée'

# Value used by the site when a chronicle has no alternative title
NO_ALTERNATIVE_TITLE = 'Aucun'


# =============================================================================
# CACHE NAMESPACES
# =============================================================================

PAGE_CACHE_NAMESPACE = 'nanarland'
TMDB_CACHE_NAMESPACE = 'tmdb'

# Index page listing every chronicle
CHRONICLES_INDEX_PATH = '/chroniques/toutes-nos-chroniques.html'
