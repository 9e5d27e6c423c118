"""
Prompt builder: pairs the forensic rubric with a canonical image.

Pure and deterministic: no I/O beyond reading the configured rubric.
"""

from app.integrations.inference.prompts import USER_INSTRUCTION, get_system_instruction
from app.schemas.analysis import AnalysisRequest, CanonicalImage


def build(image: CanonicalImage) -> AnalysisRequest:
    return AnalysisRequest(
        system_prompt=get_system_instruction(),
        user_text=USER_INSTRUCTION,
        image=image,
    )

