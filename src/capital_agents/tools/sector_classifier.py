"""
Sector Strategist Tool: Sector Classifier
Capital Allocation Framework

Assigns zero or more sectors to a project from its business-unit string.
A sector matches when its name is a case-insensitive substring of the
business unit, or when any of its keywords is. The keyword table is
injectable; SECTOR_KEYWORDS is the default.

A project matching several sectors is counted in each of them; a project
matching none is left unclassified.
"""

from __future__ import annotations

import logging
from typing import Mapping, Optional, Sequence

from capital_agents.config.constants import SECTOR_KEYWORDS
from capital_agents.schemas.allocation_output import Sector

logger = logging.getLogger(__name__)


def sector_matches(
    business_unit: str,
    sector: Sector,
    keyword_table: Optional[Mapping[str, Sequence[str]]] = None,
) -> bool:
    table = SECTOR_KEYWORDS if keyword_table is None else keyword_table
    unit = business_unit.lower()
    if sector.name.lower() in unit:
        return True
    return any(kw.lower() in unit for kw in table.get(sector.name, ()))


def classify_project_sectors(
    business_unit: str,
    sectors: Sequence[Sector],
    keyword_table: Optional[Mapping[str, Sequence[str]]] = None,
) -> list[str]:
    """
    Return the ids of every sector the business unit matches, in sector order.

    With the default sectors, "Adani Green Energy" -> ["SEC-001"] through
    the "Green" keyword.
    """
    matched = [
        s.id for s in sectors if sector_matches(business_unit, s, keyword_table)
    ]
    if not matched:
        logger.debug(f"[SectorClassifier] No sector for business unit '{business_unit}'")
    return matched
