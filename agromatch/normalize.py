import unicodedata


def normalize_text(s: str) -> str:
    return " ".join(s.strip().lower().split())


_NON_DECOMPOSING = str.maketrans({"ø": "o", "Ø": "O", "æ": "ae", "Æ": "AE"})


def strip_accents(s: str) -> str:
    decomposed = unicodedata.normalize("NFKD", s.translate(_NON_DECOMPOSING))
    return "".join(c for c in decomposed if not unicodedata.combining(c))


def normalize_skill(skill: str) -> str:
    return normalize_text(skill)


def normalize_skills(skills: list[str] | None) -> list[str]:
    """Normalize tags, dropping blanks and duplicates while preserving order."""
    seen = set()
    result = []
    for s in skills or []:
        if not isinstance(s, str):
            continue
        n = normalize_skill(s)
        if n and n not in seen:
            seen.add(n)
            result.append(n)
    return result


EXPERIENCE_LEVELS = ["beginner", "intermediate", "expert"]

EXPERIENCE_SYNS = {
    "entry": "beginner",
    "junior": "beginner",
    "novice": "beginner",
    "mid": "intermediate",
    "medium": "intermediate",
    "advanced": "expert",
    "senior": "expert",
}


def normalize_experience(level: str | None) -> str | None:
    if not level:
        return None
    lvl = normalize_text(level)
    lvl = EXPERIENCE_SYNS.get(lvl, lvl)
    return lvl if lvl in EXPERIENCE_LEVELS else None


def experience_rank(level: str | None) -> int | None:
    lvl = normalize_experience(level)
    return EXPERIENCE_LEVELS.index(lvl) if lvl else None


LANGUAGE_SYNS = {
    "en": "english",
    "eng": "english",
    "engleza": "english",
    "da": "danish",
    "dansk": "danish",
    "daneza": "danish",
    "de": "german",
    "deutsch": "german",
    "germana": "german",
    "ro": "romanian",
    "romana": "romanian",
}


def normalize_language(language: str) -> str:
    lang = strip_accents(normalize_text(language))
    return LANGUAGE_SYNS.get(lang, lang)


ANYWHERE_SYNS = {"anywhere", "any", "flexible", "relocate", "oriunde"}

COUNTRY_PLACES = {
    "dk": {
        "denmark", "danmark", "danemarca", "copenhagen", "kobenhavn",
        "aarhus", "odense", "aalborg", "esbjerg", "randers", "kolding",
        "horsens", "vejle", "roskilde", "herning", "silkeborg", "viborg",
        "holstebro", "skive", "ringkobing", "jutland", "jylland", "zealand",
        "sjaelland", "funen", "fyn", "bornholm", "lolland", "falster",
    },
    "ro": {
        "romania", "bucharest", "bucuresti", "cluj", "cluj-napoca", "iasi",
        "timisoara", "constanta", "craiova", "brasov", "galati", "suceava",
        "bacau", "oradea", "sibiu", "arad", "pitesti", "ploiesti",
        "botosani", "maramures", "moldova", "transilvania", "banat",
    },
}


def normalize_location(location: str | None) -> str | None:
    if not location:
        return None
    loc = strip_accents(normalize_text(location))
    if not loc:
        return None
    if loc in ANYWHERE_SYNS:
        return "anywhere"
    return loc


def location_country(location: str | None) -> str | None:
    """Best-effort country code for a normalized location string."""
    loc = normalize_location(location)
    if not loc or loc == "anywhere":
        return None
    parts = [p.strip() for p in loc.replace("/", ",").split(",") if p.strip()]
    # Country names usually trail the city, so scan from the end
    for part in reversed(parts):
        for code, places in COUNTRY_PLACES.items():
            if part in places or any(w in places for w in part.split()):
                return code
    return None
