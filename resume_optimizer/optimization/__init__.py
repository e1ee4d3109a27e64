"""Resume optimization: prompt, completion and output repair."""
from resume_optimizer.optimization.optimizer_service import ResumeOptimizer
from resume_optimizer.optimization.response_repair import (
    ParseResult,
    parse_model_output,
    build_fallback_resume,
    coerce_structured_resume,
    repair_model_output,
)

__all__ = [
    "ResumeOptimizer",
    "ParseResult",
    "parse_model_output",
    "build_fallback_resume",
    "coerce_structured_resume",
    "repair_model_output",
]
