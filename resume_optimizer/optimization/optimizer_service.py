"""Turns a job description, resume text and contact info into a StructuredResume."""
from typing import Optional

from resume_optimizer.models.completion_models import CompletionRequest, StructuredResume
from resume_optimizer.optimization.prompts import build_optimization_prompt
from resume_optimizer.optimization.response_repair import repair_model_output
from resume_optimizer.services.completion_client import CompletionClient
from resume_optimizer.utils.logging import get_logger

logger = get_logger(__name__)

OPTIMIZATION_TEMPERATURE = 0.7
OPTIMIZATION_MAX_TOKENS = 4096


class ResumeOptimizer:
    """Prompt construction, completion and repair for one optimization request."""

    def __init__(
        self,
        client: CompletionClient,
        temperature: float = OPTIMIZATION_TEMPERATURE,
        max_tokens: int = OPTIMIZATION_MAX_TOKENS,
        current_year: Optional[int] = None,
    ):
        self.client = client
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.current_year = current_year

    async def generate(self, request: CompletionRequest) -> StructuredResume:
        """
        Generate an optimized resume.

        Only ConfigurationError and BackendExhaustedError propagate; malformed
        model output is repaired into a complete resume.
        """
        prompt = build_optimization_prompt(request)
        logger.info(
            "Starting resume optimization",
            extra={
                "job_description_length": len(request.job_description),
                "resume_text_length": len(request.resume_text),
                "prompt_length": len(prompt),
            },
        )

        raw_text = await self.client.generate_text(
            prompt,
            temperature=self.temperature,
            max_tokens=self.max_tokens,
        )

        resume = repair_model_output(raw_text, request.contact_info, self.current_year)
        logger.info(
            "Resume optimization completed",
            extra={
                "experience_count": len(resume.experience),
                "skill_group_count": len(resume.skill_groups),
            },
        )
        return resume
