from services.model_config_service import ModelConfigService
from services.ai_client import AIClient
from services.learning_service import LearningService

__all__ = [
    'ModelConfigService',
    'AIClient',
    'LearningService'
]
