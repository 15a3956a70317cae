from typing import Dict, List
from cgm_days.interface.cgm_interface import SupportedCGMFormat
from cgm_days.formats.dexcom import DEXCOM_DETECTION_PATTERNS, DEXCOM_HEADER_LINE


FORMAT_DETECTION_PATTERNS: Dict[SupportedCGMFormat, List[str]] = {
    SupportedCGMFormat.DEXCOM: DEXCOM_DETECTION_PATTERNS,
}

# Line holding the column header; rows above it are skipped when reading
FORMAT_HEADER_LINE: Dict[SupportedCGMFormat, int] = {
    SupportedCGMFormat.DEXCOM: DEXCOM_HEADER_LINE,
}
