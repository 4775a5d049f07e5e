"""Parse talent ``other_effects`` text into structured expertise grants.

Recognised phrasings, tried in this order for each effect line:
  1. "... in A, B, or C (choose one)"  -> choice of 1 from the list
  2. "choose one: A, B" / "choose two: A, B, C"  -> choice of 1 or 2
  3. "Gain A or B expertise"  -> choice of 1 from two
  4. "Gain a weapon expertise" / "gain an armor expertise"  -> choice of 1
     from the category list (weapon, armor, utility/crafting, cultural)
  5. "Gain Sleight of Hand expertise"  -> single grant

The first matching phrasing wins; lines that match nothing grant nothing.
"""

import re

from cosmere_planner.models.expertise import ExpertiseGrant


EXPERTISE_CATEGORIES: dict[str, tuple[str, ...]] = {
    "weapon": ("Light Weaponry", "Heavy Weaponry", "Special Weapons"),
    "armor": ("Armor Proficiency",),
    "utility": ("Armor Crafting", "Weapon Crafting", "Equipment Crafting", "Fabrial Crafting"),
    "crafting": ("Armor Crafting", "Weapon Crafting", "Equipment Crafting", "Fabrial Crafting"),
    "cultural": (
        "Alethi", "Azish", "Herdazian", "Iriali", "Kharbranthian", "Listener",
        "Natan", "Reshi", "Shin", "Thaylen", "Unkalaki", "Veden", "Wayfarer",
    ),
}

_CHOOSE_ONE_SUFFIX_RE = re.compile(r"(?:gain.*?in\s+)?([^.()]+?)\s*\(choose\s+one\)", re.IGNORECASE)
_CHOOSE_N_RE = re.compile(r"choose\s+(one|two):\s*(.+)", re.IGNORECASE)
_EITHER_RE = re.compile(r"gain\s+(.+?)\s+or\s+(.+?)\s+expertise", re.IGNORECASE)
_CATEGORY_RE = re.compile(r"gain\s+an?\s+(\w+)\s+expertise", re.IGNORECASE)
_SPECIFIC_RE = re.compile(r"gain\s+([A-Z][a-zA-Z\s]+?)\s+expertise", re.IGNORECASE)
_ARTICLE_RE = re.compile(r"^(a|an|the)\s", re.IGNORECASE)
_PAREN_RE = re.compile(r"\([^)]*\)")
_SLASH_SUFFIX_RE = re.compile(r"^(.+?)/(.+?)\s+(\S+)$")
_LIST_SPLIT_RE = re.compile(r",|\s+and\s+|\s+or\s+", re.IGNORECASE)

_COUNT_WORDS = {"one": 1, "two": 2}


def _capitalise_words(text: str) -> str:
    return " ".join(word.capitalize() for word in text.split(" "))


def split_option_list(text: str) -> list[str]:
    """Split "A, B, or C" (or "Armor/Weapon Crafting") into option names."""
    cleaned = _PAREN_RE.sub("", text).strip()

    slash = _SLASH_SUFFIX_RE.match(cleaned)
    if slash:
        prefixes = cleaned.split()[0].split("/")
        suffix = slash.group(3)
        return [_capitalise_words(f"{prefix.strip()} {suffix}") for prefix in prefixes]

    options: list[str] = []
    for part in _LIST_SPLIT_RE.split(cleaned):
        part = part.strip()
        if not part or _ARTICLE_RE.match(part):
            continue
        options.append(_capitalise_words(part))
    return options


def _parse_line(effect: str) -> ExpertiseGrant | None:
    match = _CHOOSE_ONE_SUFFIX_RE.search(effect)
    if match:
        options = split_option_list(match.group(1))
        if options:
            return ExpertiseGrant("choice", tuple(options), 1)

    match = _CHOOSE_N_RE.search(effect)
    if match:
        options = split_option_list(match.group(2))
        if options:
            return ExpertiseGrant("choice", tuple(options), _COUNT_WORDS[match.group(1).lower()])

    match = _EITHER_RE.search(effect)
    if match:
        return ExpertiseGrant("choice", (match.group(1).strip(), match.group(2).strip()), 1)

    match = _CATEGORY_RE.search(effect)
    if match:
        options = EXPERTISE_CATEGORIES.get(match.group(1).lower(), ())
        if options:
            return ExpertiseGrant("choice", options, 1)

    match = _SPECIFIC_RE.search(effect)
    if match:
        name = match.group(1).strip()
        if not _ARTICLE_RE.match(name):
            return ExpertiseGrant("single", (name,))

    return None


def parse_expertise_grants(other_effects: list[str]) -> list[ExpertiseGrant]:
    """Extract expertise grants from a talent's other_effects lines."""
    grants: list[ExpertiseGrant] = []
    for effect in other_effects:
        grant = _parse_line(effect)
        if grant is not None:
            grants.append(grant)
    return grants


def grants_expertise(other_effects: list[str]) -> bool:
    return bool(parse_expertise_grants(other_effects))


def all_expertise_options(grants: list[ExpertiseGrant]) -> list[str]:
    """Unique option names across grants, first-seen order."""
    seen: list[str] = []
    for grant in grants:
        for name in grant.expertises:
            if name not in seen:
                seen.append(name)
    return seen
