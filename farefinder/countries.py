"""Map country and territory names to ISO 3166-1 alpha-2 codes."""

from __future__ import annotations

UNKNOWN = "Unknown"

# Every accepted (lower-case) spelling, grouped under the code it resolves to.
_NAMES_BY_CODE: dict[str, tuple[str, ...]] = {
    "AD": ("andorra",),
    "AE": ("united arab emirates",),
    "AF": ("afghanistan",),
    "AG": ("antigua and barbuda",),
    "AL": ("albania",),
    "AM": ("armenia",),
    "AO": ("angola",),
    "AR": ("argentina",),
    "AT": ("austria",),
    "AU": ("australia",),
    "AZ": ("azerbaijan",),
    "BA": ("bosnia and herzegovina",),
    "BB": ("barbados",),
    "BD": ("bangladesh",),
    "BE": ("belgium",),
    "BF": ("burkina faso",),
    "BG": ("bulgaria",),
    "BH": ("bahrain",),
    "BI": ("burundi",),
    "BJ": ("benin",),
    "BN": ("brunei",),
    "BO": ("bolivia",),
    "BR": ("brazil",),
    "BS": ("bahamas",),
    "BT": ("bhutan",),
    "BW": ("botswana",),
    "BY": ("belarus",),
    "BZ": ("belize",),
    "CA": ("canada",),
    "CD": ("congo (kinshasa)", "democratic republic of the congo"),
    "CF": ("central african republic",),
    "CG": ("congo", "congo (brazzaville)"),
    "CH": ("switzerland",),
    "CI": ("cote d'ivoire", "ivory coast"),
    "CL": ("chile",),
    "CM": ("cameroon",),
    "CN": ("china",),
    "CO": ("colombia",),
    "CR": ("costa rica",),
    "CU": ("cuba",),
    "CV": ("cabo verde",),
    "CY": ("cyprus",),
    "CZ": ("czech republic", "czechia"),
    "DE": ("germany",),
    "DJ": ("djibouti",),
    "DK": ("denmark",),
    "DM": ("dominica",),
    "DO": ("dominican republic",),
    "DZ": ("algeria",),
    "EC": ("ecuador",),
    "EE": ("estonia",),
    "EG": ("egypt",),
    "ER": ("eritrea",),
    "ES": ("spain",),
    "ET": ("ethiopia",),
    "FI": ("finland",),
    "FJ": ("fiji",),
    "FM": ("micronesia", "federated states of micronesia"),
    "FR": ("france",),
    "GA": ("gabon",),
    "GB": (
        "united kingdom",
        "great britain",
        "england",
        "scotland",
        "wales",
        "northern ireland",
    ),
    "GD": ("grenada",),
    "GE": ("georgia",),
    "GH": ("ghana",),
    "GM": ("gambia",),
    "GN": ("guinea",),
    "GQ": ("equatorial guinea",),
    "GR": ("greece",),
    "GT": ("guatemala",),
    "GW": ("guinea-bissau",),
    "GY": ("guyana",),
    "HN": ("honduras",),
    "HR": ("croatia",),
    "HT": ("haiti",),
    "HU": ("hungary",),
    "ID": ("indonesia",),
    "IE": ("ireland",),
    "IL": ("israel",),
    "IN": ("india",),
    "IQ": ("iraq",),
    "IR": ("iran",),
    "IS": ("iceland",),
    "IT": ("italy",),
    "JM": ("jamaica",),
    "JO": ("jordan",),
    "JP": ("japan",),
    "KE": ("kenya",),
    "KG": ("kyrgyzstan",),
    "KH": ("cambodia",),
    "KI": ("kiribati",),
    "KM": ("comoros",),
    "KN": ("saint kitts and nevis",),
    "KP": ("north korea", "korea, democratic people's republic of"),
    "KR": ("south korea", "korea, republic of"),
    "KW": ("kuwait",),
    "KZ": ("kazakhstan",),
    "LA": ("laos",),
    "LB": ("lebanon",),
    "LC": ("saint lucia",),
    "LI": ("liechtenstein",),
    "LK": ("sri lanka",),
    "LR": ("liberia",),
    "LS": ("lesotho",),
    "LT": ("lithuania",),
    "LU": ("luxembourg",),
    "LV": ("latvia",),
    "LY": ("libya",),
    "MA": ("morocco",),
    "MC": ("monaco",),
    "MD": ("moldova",),
    "ME": ("montenegro",),
    "MG": ("madagascar",),
    "MH": ("marshall islands",),
    "ML": ("mali",),
    "MM": ("myanmar", "burma"),
    "MN": ("mongolia",),
    "MR": ("mauritania",),
    "MT": ("malta",),
    "MU": ("mauritius",),
    "MV": ("maldives",),
    "MW": ("malawi",),
    "MX": ("mexico",),
    "MY": ("malaysia",),
    "MZ": ("mozambique",),
    "NA": ("namibia",),
    "NE": ("niger",),
    "NG": ("nigeria",),
    "NI": ("nicaragua",),
    "NL": ("netherlands", "holland"),
    "NO": ("norway",),
    "NP": ("nepal",),
    "NR": ("nauru",),
    "NZ": ("new zealand",),
    "OM": ("oman",),
    "PA": ("panama",),
    "PE": ("peru",),
    "PG": ("papua new guinea",),
    "PH": ("philippines",),
    "PK": ("pakistan",),
    "PL": ("poland",),
    "PS": ("palestine", "state of palestine"),
    "PT": ("portugal",),
    "PW": ("palau",),
    "PY": ("paraguay",),
    "QA": ("qatar",),
    "RO": ("romania",),
    "RS": ("serbia",),
    "RU": ("russia",),
    "RW": ("rwanda",),
    "SA": ("saudi arabia",),
    "SB": ("solomon islands",),
    "SC": ("seychelles",),
    "SD": ("sudan",),
    "SE": ("sweden",),
    "SG": ("singapore",),
    "SI": ("slovenia",),
    "SK": ("slovakia",),
    "SL": ("sierra leone",),
    "SM": ("san marino",),
    "SN": ("senegal",),
    "SO": ("somalia",),
    "SR": ("suriname",),
    "SS": ("south sudan",),
    "ST": ("sao tome and principe",),
    "SV": ("el salvador",),
    "SY": ("syria",),
    "SZ": ("eswatini", "swaziland"),
    "TD": ("chad",),
    "TG": ("togo",),
    "TH": ("thailand",),
    "TJ": ("tajikistan",),
    "TL": ("timor-leste", "east timor"),
    "TM": ("turkmenistan",),
    "TN": ("tunisia",),
    "TO": ("tonga",),
    "TR": ("turkey",),
    "TT": ("trinidad and tobago",),
    "TV": ("tuvalu",),
    "TW": ("taiwan",),
    "TZ": ("tanzania",),
    "UA": ("ukraine",),
    "UG": ("uganda",),
    "US": ("united states", "usa"),
    "UY": ("uruguay",),
    "UZ": ("uzbekistan",),
    "VA": ("vatican city",),
    "VC": ("saint vincent and the grenadines",),
    "VE": ("venezuela",),
    "VN": ("vietnam",),
    "VU": ("vanuatu",),
    "WS": ("samoa",),
    "YE": ("yemen",),
    "ZA": ("south africa",),
    "ZM": ("zambia",),
    "ZW": ("zimbabwe",),
}

COUNTRY_CODES: dict[str, str] = {
    name: code for code, names in _NAMES_BY_CODE.items() for name in names
}


def get_iso_code(country: str) -> str:
    """Return the ISO code for a country or territory name, case-insensitively.

    Unrecognised names give ``"Unknown"``.
    """
    return COUNTRY_CODES.get(country.lower(), UNKNOWN)