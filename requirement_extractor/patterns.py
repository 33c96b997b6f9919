"""
requirement_extractor/patterns.py
Ordered pattern lists for each requirement field.

Within a list the first matching pattern wins, so the order is the
preference: explicit phrasings come before bare mentions.
"""
import re

_I = re.IGNORECASE

VESSEL_CATEGORIES: tuple[str, ...] = (
    "Post-Panamax", "Handysize", "Handymax", "Supramax", "Ultramax",
    "Panamax", "Kamsarmax", "Capesize", "VLOC",
)
_CATS = "|".join(re.escape(c) for c in VESSEL_CATEGORIES)

# Canonical spelling for a case-insensitive category hit
CATEGORY_CANONICAL: dict[str, str] = {c.lower(): c for c in VESSEL_CATEGORIES}

_MONTHS = (
    r"jan(?:uary)?|feb(?:ruary)?|mar(?:ch)?|apr(?:il)?|may|june?|july?|aug(?:ust)?"
    r"|sep(?:t(?:ember)?)?|oct(?:ober)?|nov(?:ember)?|dec(?:ember)?"
)
_ORD = r"(?:st|nd|rd|th)?"
_RANGE = r"\s*(?:-|–|—|to)\s*"

# Port name of up to four words, allowing "da"/"de" particles.
# Keywords, connectors and month names are never port words, in any case.
_NOT_PORT = (
    r"(?!(?i:laycan|laydays|cargo|rate|basis|dates|period|flag|charterer"
    r"|to|from|for|with|at|and|via|ex|dwt|mt|vessel"
    r"|january|february|march|april|may|june|july|august|september|october"
    r"|november|december|jan|feb|mar|apr|jun|jul|aug|sept?|oct|nov|dec)\b)"
)
_PORT_WORD = rf"\b{_NOT_PORT}[A-Z][A-Za-z']*"
_PORT = rf"({_PORT_WORD}(?: (?:da |de |do )?{_PORT_WORD}){{0,3}})"

# Same shape with any-case words, for all-lowercase messages
_ANY_PORT_WORD = rf"\b{_NOT_PORT}[A-Za-z][A-Za-z']*"
_ANY_PORT = rf"({_ANY_PORT_WORD}(?: (?:da |de |do )?{_ANY_PORT_WORD}){{0,3}})"

# End of a free-text value: punctuation, line end, or a following clause
_END = r"(?=\s+(?:from|to|ex|basis|laycan|at|for|with)\b|\s*[,.;\n(]|\s*$)"

_QTY = r"\b(\d+(?:,\d{3})*(?:\.\d+)?\s*k?)\s*(?:mt|metric\s+tons?|tons?|tonnes)\b"


VESSEL_TYPE_PATTERNS = [
    re.compile(rf"\b(?:looking|need|require|want)\w*\b.*?\b({_CATS})\b", _I),
    re.compile(rf"\bvessel\b.*?\b(?:type|size)\b.*?\b({_CATS})\b", _I),
    re.compile(rf"\b({_CATS})\b", _I),
]

VESSEL_SIZE_PATTERNS = [
    re.compile(r"\b(\d{2,3})\s?k\s?dwt\b", _I),
    re.compile(r"\b(\d{2,3})k\s+deadweight\b", _I),
    re.compile(r"\b(\d{2,3})[,\s]000\s+(?:deadweight|dwt|tons)\b", _I),
    re.compile(r"\b(?:size|capacity)\b.*?\b(\d{2,3})k\b", _I),
]

# Two groups: load port, discharge port.  Capitalised names are tried first;
# lowercase names only count after an explicit "from" or around an arrow.
ROUTE_PATTERNS = [
    re.compile(rf"(?i:\bfrom|\bloading(?:\s+at)?)\s+{_PORT}\s+(?i:to|discharging\s+at)\s+{_PORT}"),
    re.compile(rf"{_PORT}(?:\s+(?i:to)\s+|\s*(?:→|->)\s*){_PORT}"),
    re.compile(rf"(?i:\broute|\bvoyage)\b[^A-Z\n]*{_PORT}\s*(?:-|–|/)\s*{_PORT}"),
    re.compile(rf"(?i:\bfrom|\bloading(?:\s+at)?)\s+{_ANY_PORT}\s+(?i:to|discharging\s+at)\s+{_ANY_PORT}"),
    re.compile(rf"{_ANY_PORT}\s*(?:→|->)\s*{_ANY_PORT}"),
]

# Named groups: month, start, end
LAYCAN_PATTERNS = [
    re.compile(rf"\blaycan\s*:?\s+(?P<month>{_MONTHS})\b\.?\s*(?P<start>\d{{1,2}}){_ORD}{_RANGE}(?P<end>\d{{1,2}}){_ORD}", _I),
    re.compile(rf"\blaycan\s*:?\s+(?P<start>\d{{1,2}}){_ORD}{_RANGE}(?P<end>\d{{1,2}}){_ORD}\s+(?P<month>{_MONTHS})\b", _I),
    re.compile(rf"\b(?:dates|period)\b.*?(?P<start>\d{{1,2}}){_ORD}{_RANGE}(?P<end>\d{{1,2}}){_ORD}\s+(?P<month>{_MONTHS})\b", _I),
    re.compile(rf"\b(?P<month>{_MONTHS})\b\.?\s*(?P<start>\d{{1,2}}){_ORD}{_RANGE}(?P<end>\d{{1,2}}){_ORD}\b", _I),
    re.compile(rf"\b(?P<start>\d{{1,2}}){_ORD}{_RANGE}(?P<end>\d{{1,2}}){_ORD}\s+(?P<month>{_MONTHS})\b", _I),
]

TARGET_RATE_PATTERNS = [
    re.compile(r"(?<![\d.])\$?(\d{1,2}(?:\.\d{1,2})?)\s?k\s?/\s?day", _I),
    re.compile(r"\b(?:rate|budget|price|hire)\b.*?\$?(?<![\d.])(\d{1,2}(?:\.\d{1,2})?)(?:k|\s)\s*(?:/\s?day|per\s+day)", _I),
    re.compile(r"(?<![\d.])(\d{1,2}(?:\.\d{1,2})?)k\s+(?:usd|dollars)(?:\s+per|\s*/)\s*day", _I),
]

# Either a 1–2 digit age or a 4 digit build year
AGE_PATTERNS = [
    re.compile(r"\b(?:vessel|ship)\s+(?:age|built)\b.*?(?:max|maximum|up to|under|below|not older than)\s+(\d{1,2})\s+(?:years|yrs)\b", _I),
    re.compile(r"\b(?:max|maximum|up to|under|below|not older than)\s+(\d{1,2})\s+(?:years|yrs)\b", _I),
    re.compile(r"\b(?:built|constructed)\s+(?:after|from|since)\s+(\d{4})\b", _I),
    re.compile(r"\b(?:built|blt)\s*:?\s*(\d{4})\b", _I),
]

GEAR_PATTERNS = [
    re.compile(r"\b(?:vessel|ship)\b.*?(?:must be|should be|needs to be|required to be)\s+(geared|gearless)\b", _I),
    re.compile(rf"\b(?:looking for|need|require|want)\b.*?\b(geared|gearless)\s+(?:vessel|ship|tonnage|{_CATS})\b", _I),
    re.compile(r"\b(?:with|having)\s+(?:own\s+)?(cranes|gears?|grabs)\b", _I),
    re.compile(r"\b(cranes|gears|grabs)\b.*?\b(?:required|needed|must|should)\b", _I),
    re.compile(r"\b(gearless|geared)\b", _I),
]

_ICE_GRADES = r"(1A Super|1AS|1A|1B|1C|1D)"

ICE_CLASS_PATTERNS = [
    re.compile(rf"\bice[\s-]?class(?:ed)?\s*:?\s*{_ICE_GRADES}\b", _I),
    re.compile(rf"\b{_ICE_GRADES}\s+ice[\s-]?class", _I),
]

FLAG_PATTERNS = [
    re.compile(rf"\b(?:flag|registry)\b.*?(?:must be|should be|needs to be|required to be)\s+([A-Za-z][\w ]*?)(?:\s+flag(?:ged)?)?{_END}", _I),
    re.compile(rf"\b(?:vessel|ship)\b.*?\b(?:flagged|registered)\s+(?:in\s+|under\s+)?([A-Za-z][\w ]*?)(?:\s+flag)?{_END}", _I),
]

SPECIAL_CLAUSE_PATTERNS = [
    re.compile(r"\b(?:special\s+clauses?|special\s+requirements?|restrictions?)\b.*?(?::|\binclude\b|\bare\b|\bis\b)\s*([\w ,/-]+?)\s*(?:[.;\n]|$)", _I),
    re.compile(r"\b(?:subject to|conditional upon)\s+([\w ,/-]+?)\s*(?:[.;\n]|$)", _I),
]

CHARTERER_PATTERNS = [
    re.compile(r"\b(?:charterer|client)\b[^.;\n]*?\b(?:must be|should be|prefers|wants)\s+([A-Za-z][\w ]*?)\s*(?:[,.;\n]|$)", _I),
    re.compile(r"\b(?:only|exclusively)\s+for\s+([A-Za-z][\w ]*?)\s*(?:[,.;\n]|$)", _I),
]

CARGO_QUANTITY_PATTERNS = [
    re.compile(rf"\b(?:cargo|quantity|amount)\b.*?{_QTY}", _I),
    re.compile(rf"{_QTY}.*?\b(?:of|cargo|quantity)\b", _I),
]

_QTY_PREFIX = r"(?:\d[\d,.]*\s*k?\s*(?:mt|metric\s+tons?|tons?|tonnes)\s+(?:of\s+)?)?"

CARGO_TYPE_PATTERNS = [
    re.compile(rf"\b(?:cargo|commodity)\s*(?::|\bis\b|\bof\b)\s*{_QTY_PREFIX}([A-Za-z][A-Za-z ]*?)(?:\s+(?:cargo|commodity))?{_END}", _I),
    re.compile(rf"\b(?:carrying|transporting|shipping)\s+{_QTY_PREFIX}([A-Za-z][A-Za-z ]*?)(?:\s+(?:cargo|commodity))?{_END}", _I),
]


MONTHS: dict[str, int] = {
    "january": 1, "february": 2, "march": 3, "april": 4, "may": 5, "june": 6,
    "july": 7, "august": 8, "september": 9, "october": 10, "november": 11,
    "december": 12,
    "jan": 1, "feb": 2, "mar": 3, "apr": 4, "jun": 6, "jul": 7, "aug": 8,
    "sep": 9, "oct": 10, "nov": 11, "dec": 12,
}

# Fixed per-field confidence: reflects "field was found", not match strength
FIELD_CONFIDENCE: dict[str, float] = {
    "vessel_type":           0.85,
    "vessel_size":           0.90,
    "load_port":             0.80,
    "discharge_port":        0.80,
    "laycan":                0.75,
    "target_rate":           0.70,
    "max_age":               0.65,
    "gear_requirement":      0.80,
    "ice_class_requirement": 0.90,
    "flag_preference":       0.70,
    "special_clauses":       0.60,
    "charterer_preference":  0.75,
    "cargo_quantity":        0.85,
    "cargo_type":            0.80,
}
