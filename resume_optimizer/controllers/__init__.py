"""Controller layer for handling HTTP requests."""
from resume_optimizer.controllers.profile_controller import ProfileController
from resume_optimizer.controllers.template_controller import TemplateController
from resume_optimizer.controllers.resume_controller import ResumeController
from resume_optimizer.controllers.health_controller import HealthController

__all__ = ["ProfileController", "TemplateController", "ResumeController", "HealthController"]
