"""
Keyword & Pattern Tables
========================

Declarative data used by the detectors and the quality assessor.
Spanish and English terms sit side by side; certificates reach us in both.
All keyword matching is case-insensitive substring matching unless noted.
"""

import re
from typing import Dict, Pattern, Tuple

# ============================================================================
# CONFIDENCE THRESHOLDS
# ============================================================================

LOGO_MIN_CONFIDENCE = 0.3
OBJECT_MIN_CONFIDENCE = 0.3
LABEL_MIN_CONFIDENCE = 0.5

# ============================================================================
# VISION-SIDE KEYWORDS
# ============================================================================

# Localized object names that suggest a seal or stamp
SEAL_OBJECT_KEYWORDS: Tuple[str, ...] = (
    "seal", "stamp", "emblem", "badge", "crest", "insignia",
    "official", "government", "institutional", "circular",
    "sello", "timbre", "emblema", "escudo",
)

# Localized object names that suggest a handwritten signature
SIGNATURE_OBJECT_KEYWORDS: Tuple[str, ...] = (
    "signature", "handwriting", "autograph", "signing",
    "firma", "signatura", "autógrafo", "manuscrito",
)

SEAL_LABEL_KEYWORDS: Tuple[str, ...] = (
    "seal", "stamp", "emblem", "badge", "official", "government",
    "circular", "round", "institutional",
)

SIGNATURE_LABEL_KEYWORDS: Tuple[str, ...] = (
    "signature", "handwriting", "writing", "pen", "ink",
    "autograph", "script", "cursive",
)

LOGO_LABEL_KEYWORDS: Tuple[str, ...] = (
    "logo", "brand", "company", "institution", "university",
    "school", "organization", "symbol",
)

# ============================================================================
# QUALITY / STRUCTURE
# ============================================================================

# At least FORMALITY_MIN_MATCHES distinct terms make the text read as formal
FORMALITY_KEYWORDS: Tuple[str, ...] = (
    "certificado", "certificate",
    "diploma",
    "título", "degree",
    "universidad", "university",
    "colegio", "college",
    "instituto", "institute",
    "director", "rector", "registrar",
    "registro", "oficial", "official",
    "otorgado", "reconocimiento",
)
FORMALITY_MIN_MATCHES = 2

CERTIFICATE_STRUCTURE_KEYWORDS: Tuple[str, ...] = ("certificado", "diploma")

# ============================================================================
# TEXT-SIDE PATTERNS
# ============================================================================

# Ordered (pattern, organization label) pairs; every match is reported
ORGANIZATION_PATTERNS: Tuple[Tuple[Pattern[str], str], ...] = (
    (re.compile(r"\bmicrosoft\b", re.IGNORECASE), "Microsoft"),
    (re.compile(r"\bmvp\b|most valuable professional", re.IGNORECASE), "Microsoft MVP"),
    (re.compile(r"student ambassadors?|\bmlsa\b", re.IGNORECASE), "Microsoft Learn Student Ambassadors"),
    (re.compile(r"\bgoogle\b", re.IGNORECASE), "Google"),
    (re.compile(r"\bamazon\b|\baws\b", re.IGNORECASE), "Amazon"),
    (re.compile(r"\bazure\b", re.IGNORECASE), "Azure"),
    (re.compile(r"\buniversidad\b|\buniversity\b", re.IGNORECASE), "University"),
    (re.compile(r"\bcolegio\b|\bcollege\b", re.IGNORECASE), "College"),
    (re.compile(r"\binstituto\b|\binstitute\b", re.IGNORECASE), "Institute"),
    (re.compile(r"\bbootcamp\b", re.IGNORECASE), "Bootcamp"),
    (re.compile(r"\bdev\s*show\b", re.IGNORECASE), "Dev Show"),
)

SIGNATURE_TITLES: Tuple[str, ...] = (
    "Director", "Rector", "Coordinador", "Presidente", "Gerente", "MVP", "MLSA",
)

_NAME_WORD = r"[A-ZÁÉÍÓÚÑ][a-záéíóúñü]+"
_PERSON_NAME = rf"{_NAME_WORD}(?:\s+(?:[A-Z]\.\s+)?{_NAME_WORD}){{1,2}}"
_TITLE = r"(?i:" + "|".join(SIGNATURE_TITLES) + r")"

# Tried in order against each non-blank line; the first match wins
SIGNATURE_LINE_PATTERNS: Tuple[Pattern[str], ...] = (
    # Daniel Gomez - Microsoft MVP
    re.compile(rf"^{_PERSON_NAME}\s*[-–—]\s*(?:[\w&.]+\s+){{0,3}}{_TITLE}"),
    # Marcela Sabogal, Directora Académica
    re.compile(rf"^{_PERSON_NAME}\s*,\s*(?:[\w&.]+\s+){{0,3}}{_TITLE}"),
    # Rector: Juan Carlos Pérez
    re.compile(rf"^{_TITLE}[\w ]*:\s*{_PERSON_NAME}\s*$"),
)

# Weighted certification vocabulary; the total is informational only
CERTIFICATION_KEYWORDS: Dict[str, int] = {
    "certificado": 3,
    "diploma": 3,
    "se expide": 2,
    "otorgado": 2,
    "reconocimiento": 2,
    "registro oficial": 3,
    "válido hasta": 2,
    "sello": 2,
    "certificate": 3,
    "issued": 2,
    "certified": 2,
}
