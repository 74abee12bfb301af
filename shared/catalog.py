"""
Service catalog: the frontend's short service codes and their display names.

The catalog is a closed enumeration, built once at import and never mutated.
Codes that are not in it still resolve: the raw code is kept as the display
name and the result is flagged as unknown.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


GENERAL_CONSULTATION = "General Astrology Consultation"
BIRTH_CHART = "Birth Chart Generation"


class ServiceCode(str, Enum):
    """Service codes sent by the frontend."""

    NUMEROLOGY = "numerology"
    NAKSHATRA = "nakshatra"
    DASHA_PERIOD = "dasha-period"
    DASHA_PERIOD_LEGACY = "Dasha-period"
    ASCENDANT_ANALYSIS = "ascendant-analysis"
    YOUR_LIFE = "your-life"
    PERSONALIZED = "personalized"
    YEAR_ANALYSIS = "year-analysis"
    DAILY_HOROSCOPE = "daily-horoscope"
    MARRIAGE_COMPATIBILITY = "are-we-compatible-for-marriage"
    CAREER_GUIDANCE = "career-guidance"
    BIRTH_CHART = "birth-chart"
    HOROSCOPE = "horoscope"
    NATURE_ANALYSIS = "nature-analysis"
    HEALTH_INDEX = "health-index"
    LAL_KITAB = "lal-kitab"
    LAL_KITAB_LEGACY = "lal_kitab"
    SADE_SATI_LIFE = "sade-sati-life"
    GEMSTONE_CONSULTATION = "gemstone-consultation"
    LOVE_REPORT = "love-report"
    PERSONALIZED_REPORT_2025 = "PersonalizedReport2025"
    KUNDLI = "kundli"

    @property
    def display_name(self) -> str:
        return DISPLAY_NAMES[self]


DISPLAY_NAMES: dict[ServiceCode, str] = {
    ServiceCode.NUMEROLOGY: "Numerology Reading",
    ServiceCode.NAKSHATRA: "Nakshatra Reading",
    ServiceCode.DASHA_PERIOD: "Dasha Period Reading",
    ServiceCode.DASHA_PERIOD_LEGACY: "Dasha Period Reading",
    ServiceCode.ASCENDANT_ANALYSIS: "Ascendant Analysis",
    ServiceCode.YOUR_LIFE: "Your Life Path Reading",
    ServiceCode.PERSONALIZED: "Personalized Astrology Report",
    ServiceCode.YEAR_ANALYSIS: "Year Analysis",
    ServiceCode.DAILY_HOROSCOPE: "Daily Horoscope",
    ServiceCode.MARRIAGE_COMPATIBILITY: "Are We Compatible for Marriage",
    ServiceCode.CAREER_GUIDANCE: "Career Guidance",
    ServiceCode.BIRTH_CHART: "Birth Chart Generation",
    ServiceCode.HOROSCOPE: "Horoscope Reading",
    ServiceCode.NATURE_ANALYSIS: "Nature Analysis",
    ServiceCode.HEALTH_INDEX: "Health Index",
    ServiceCode.LAL_KITAB: "Lal Kitab Analysis",
    ServiceCode.LAL_KITAB_LEGACY: "Lal Kitab Analysis",
    ServiceCode.SADE_SATI_LIFE: "Sade Sati Life Analysis",
    ServiceCode.GEMSTONE_CONSULTATION: "Gemstone Consultation",
    ServiceCode.LOVE_REPORT: "Love Report",
    ServiceCode.PERSONALIZED_REPORT_2025: "Personalized Astrology Report for 2025",
    ServiceCode.KUNDLI: "Kundli Analysis 200+ Pages",
}


@dataclass(frozen=True)
class ResolvedService:
    """
    Outcome of resolving a service code.

    code is the catalog entry, or None when the code was unknown or absent;
    display_name is never empty.
    """
    code: Optional[ServiceCode]
    display_name: str
    raw_code: str = ""

    @property
    def known(self) -> bool:
        return self.code is not None


def resolve(code: Optional[str], default: str = GENERAL_CONSULTATION) -> ResolvedService:
    """
    Resolve a service code to its display name.

    Order: exact catalog match, then the raw code itself, then default.
    Never raises.
    """
    raw = code.strip() if isinstance(code, str) else ""
    try:
        member = ServiceCode(raw)
    except ValueError:
        if raw:
            return ResolvedService(code=None, display_name=raw, raw_code=raw)
        return ResolvedService(code=None, display_name=default or GENERAL_CONSULTATION)
    return ResolvedService(code=member, display_name=member.display_name, raw_code=raw)
